"""
Tests for user management endpoints.
"""


class TestUserEndpoints:
    """User creation, scoping and profile edits."""

    def test_create_user_hashes_password(self, client, admin_headers, seed_branch):
        response = client.post(
            "/api/users",
            headers=admin_headers,
            json={
                "name": "Carol",
                "email": "carol@fitandflex.com",
                "password": "carol123",
                "role": "USER",
                "id_branch": seed_branch.id_branch,
            },
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["role_name"] == "USER"
        assert data["branch"]["name"] == "Downtown"
        assert "password" not in data
        assert "password_hash" not in data

        login = client.post(
            "/api/auth/login", json={"email": "carol@fitandflex.com", "password": "carol123"}
        )
        assert login.status_code == 200

    def test_duplicate_email(self, client, admin_headers, member):
        response = client.post(
            "/api/users",
            headers=admin_headers,
            json={"name": "Alice Again", "email": member.email, "password": "secret123", "role": "USER"},
        )
        assert response.status_code == 400

    def test_unknown_role(self, client, admin_headers):
        response = client.post(
            "/api/users",
            headers=admin_headers,
            json={"name": "Dave", "email": "dave@fitandflex.com", "password": "secret123", "role": "WIZARD"},
        )
        assert response.status_code == 404

    def test_branch_admin_sees_only_own_branch(
        self, client, branch_admin_headers, make_user, member, other_branch
    ):
        make_user("far@fitandflex.com", "USER", other_branch.id_branch)
        response = client.get("/api/users?size=50", headers=branch_admin_headers)
        assert response.status_code == 200
        emails = {u["email"] for u in response.json()["data"]["content"]}
        assert member.email in emails
        assert "far@fitandflex.com" not in emails

    def test_member_cannot_change_own_role(self, client, member_headers, member):
        response = client.put(
            f"/api/users/{member.id_user}",
            headers=member_headers,
            json={"name": "Alice Smith", "role": "SUPER_ADMIN"},
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["name"] == "Alice Smith"
        assert data["role_name"] == "USER"

    def test_change_password_requires_current(self, client, member_headers, member):
        wrong = client.put(
            f"/api/users/{member.id_user}/password",
            headers=member_headers,
            json={"current_password": "nope", "new_password": "newpass123"},
        )
        assert wrong.status_code == 400

        right = client.put(
            f"/api/users/{member.id_user}/password",
            headers=member_headers,
            json={"current_password": "secret123", "new_password": "newpass123"},
        )
        assert right.status_code == 200
        login = client.post(
            "/api/auth/login", json={"email": member.email, "password": "newpass123"}
        )
        assert login.status_code == 200

    def test_delete_deactivates(self, client, admin_headers, member):
        response = client.delete(f"/api/users/{member.id_user}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["data"]["active"] is False
        login = client.post(
            "/api/auth/login", json={"email": member.email, "password": "secret123"}
        )
        assert login.status_code == 401

    def test_roles_listed_for_admins(self, client, admin_headers, member_headers):
        response = client.get("/api/roles", headers=admin_headers)
        assert response.status_code == 200
        assert {r["name"] for r in response.json()["data"]} == {
            "SUPER_ADMIN",
            "BRANCH_ADMIN",
            "USER",
            "INSTRUCTOR",
        }
        assert client.get("/api/roles", headers=member_headers).status_code == 403
