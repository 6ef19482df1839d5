"""
Tests for branch management endpoints.
"""


class TestBranchEndpoints:
    """Branch CRUD restricted to the super admin."""

    def test_create_and_get_branch(self, client, admin_headers):
        response = client.post(
            "/api/branches",
            headers=admin_headers,
            json={"name": "Riverside", "city": "Springfield", "email": "riverside@fitandflex.com"},
        )
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        branch_id = body["data"]["id_branch"]
        assert body["data"]["active"] is True

        fetched = client.get(f"/api/branches/{branch_id}", headers=admin_headers)
        assert fetched.status_code == 200
        assert fetched.json()["data"]["name"] == "Riverside"

    def test_duplicate_name_rejected(self, client, admin_headers, seed_branch):
        response = client.post("/api/branches", headers=admin_headers, json={"name": "Downtown"})
        assert response.status_code == 400
        assert response.json()["success"] is False

    def test_rename_to_existing_name_rejected(self, client, admin_headers, seed_branch, other_branch):
        response = client.put(
            f"/api/branches/{other_branch.id_branch}",
            headers=admin_headers,
            json={"name": "Downtown"},
        )
        assert response.status_code == 400

    def test_get_missing_branch(self, client, admin_headers):
        response = client.get("/api/branches/9999", headers=admin_headers)
        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "message": "Branch 9999 not found",
            "data": None,
        }

    def test_delete_branch_with_users_conflicts(self, client, admin_headers, seed_branch, member):
        response = client.delete(f"/api/branches/{seed_branch.id_branch}", headers=admin_headers)
        assert response.status_code == 409

    def test_delete_empty_branch(self, client, admin_headers, other_branch):
        response = client.delete(f"/api/branches/{other_branch.id_branch}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(
            f"/api/branches/{other_branch.id_branch}", headers=admin_headers
        ).status_code == 404

    def test_lookups(self, client, member_headers, seed_branch, other_branch):
        by_name = client.get("/api/branches/name/Uptown", headers=member_headers)
        assert by_name.json()["data"]["id_branch"] == other_branch.id_branch

        by_city = client.get("/api/branches/city/Springfield", headers=member_headers)
        assert [b["name"] for b in by_city.json()["data"]] == ["Downtown"]

        count = client.get("/api/branches/count", headers=member_headers)
        assert count.json()["data"] == 2

    def test_list_sorted_desc(self, client, member_headers, seed_branch, other_branch):
        response = client.get("/api/branches?sort=name&direction=desc", headers=member_headers)
        assert response.status_code == 200
        names = [b["name"] for b in response.json()["data"]["content"]]
        assert names == ["Uptown", "Downtown"]

    def test_bad_sort_direction(self, client, member_headers):
        response = client.get("/api/branches?direction=sideways", headers=member_headers)
        assert response.status_code == 400

    def test_branch_admin_cannot_create_branch(self, client, branch_admin_headers):
        response = client.post("/api/branches", headers=branch_admin_headers, json={"name": "Annex"})
        assert response.status_code == 403
