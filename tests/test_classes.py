"""
Tests for fitness classes and their weekly patterns.
"""

from datetime import date

from fitandflex.services.class_service import day_of_week_for


class TestDayOfWeek:
    def test_day_of_week_for(self):
        result = day_of_week_for(date(2024, 3, 3))
        assert result.day_of_week == 7
        assert result.day_name == "SUNDAY"

    def test_endpoint(self, client, member_headers):
        response = client.get("/api/classes/day-of-week?date=2024-03-04", headers=member_headers)
        assert response.status_code == 200
        assert response.json()["data"]["day_of_week"] == 1


class TestClassEndpoints:
    """Class CRUD with schedule patterns."""

    def test_create_with_day_schedules(self, client, admin_headers, super_admin, seed_branch):
        response = client.post(
            "/api/classes",
            headers=admin_headers,
            json={
                "name": "Pilates",
                "capacity": 12,
                "id_branch": seed_branch.id_branch,
                "day_schedules": [
                    {"day_of_week": 1, "start_time": "08:00", "end_time": "09:00"},
                    {"day_of_week": 3, "start_time": "08:00", "end_time": "09:00"},
                ],
            },
        )
        assert response.status_code == 201
        data = response.json()["data"]
        assert data["id_created_by"] == super_admin.id_user
        assert sorted(p["day_of_week"] for p in data["schedule_patterns"]) == [1, 3]

    def test_capacity_must_be_positive(self, client, admin_headers, seed_branch):
        response = client.post(
            "/api/classes",
            headers=admin_headers,
            json={"name": "Empty", "capacity": 0, "id_branch": seed_branch.id_branch},
        )
        assert response.status_code == 422

    def test_unknown_branch(self, client, admin_headers):
        response = client.post(
            "/api/classes",
            headers=admin_headers,
            json={"name": "Ghost", "capacity": 5, "id_branch": 999},
        )
        assert response.status_code == 404

    def test_update_replaces_patterns(self, client, admin_headers, seed_class):
        client.put(
            f"/api/classes/{seed_class.id_class}",
            headers=admin_headers,
            json={"day_schedules": [{"day_of_week": 2, "start_time": "07:00", "end_time": "08:00"}]},
        )
        response = client.put(
            f"/api/classes/{seed_class.id_class}",
            headers=admin_headers,
            json={
                "capacity": 20,
                "day_schedules": [{"day_of_week": 5, "start_time": "19:00", "end_time": "20:00"}],
            },
        )
        data = response.json()["data"]
        assert data["capacity"] == 20
        assert [p["day_of_week"] for p in data["schedule_patterns"]] == [5]

    def test_delete_is_soft(self, client, admin_headers, seed_class):
        assert client.delete(f"/api/classes/{seed_class.id_class}", headers=admin_headers).status_code == 200
        response = client.get(f"/api/classes/{seed_class.id_class}", headers=admin_headers)
        assert response.json()["data"]["active"] is False

    def test_branch_admin_other_branch_forbidden(self, client, branch_admin_headers, other_branch):
        response = client.post(
            "/api/classes",
            headers=branch_admin_headers,
            json={"name": "Remote", "capacity": 5, "id_branch": other_branch.id_branch},
        )
        assert response.status_code == 403
