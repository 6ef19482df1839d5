"""
Tests for login, token validation and refresh.
"""

from datetime import timedelta

from fitandflex.core.security import create_access_token, decode_access_token


class TestLogin:
    """POST /api/auth/login"""

    def test_login_returns_token_and_summary(self, client, member, seed_branch):
        """Valid credentials yield a bearer token carrying role and branch."""
        response = client.post(
            "/api/auth/login",
            json={"email": "alice@fitandflex.com", "password": "secret123"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "Bearer"
        assert data["user_id"] == member.id_user
        assert data["role"] == "USER"
        assert data["branch_id"] == seed_branch.id_branch
        assert data["branch_name"] == "Downtown"
        assert data["expires_in"] > 0

        claims = decode_access_token(data["token"])
        assert claims["sub"] == "alice@fitandflex.com"
        assert claims["user_id"] == member.id_user
        assert claims["role"] == "USER"
        assert claims["branch_id"] == seed_branch.id_branch

    def test_login_wrong_password(self, client, member):
        """Bad password is a 401 in the standard envelope."""
        response = client.post(
            "/api/auth/login",
            json={"email": "alice@fitandflex.com", "password": "wrong-pass"},
        )
        assert response.status_code == 401
        body = response.json()
        assert body["success"] is False
        assert body["data"] is None

    def test_login_unknown_email(self, client):
        response = client.post(
            "/api/auth/login",
            json={"email": "ghost@fitandflex.com", "password": "secret123"},
        )
        assert response.status_code == 401

    def test_inactive_user_cannot_login(self, client, db_session, member):
        """Deactivated accounts are refused."""
        member.active = False
        db_session.commit()
        response = client.post(
            "/api/auth/login",
            json={"email": "alice@fitandflex.com", "password": "secret123"},
        )
        assert response.status_code == 401


class TestTokenEndpoints:
    """Validate, refresh and logout."""

    def test_validate_token(self, client, member_headers, member):
        response = client.get("/api/auth/validate", headers=member_headers)
        assert response.status_code == 200
        assert response.json()["email"] == member.email

    def test_validate_without_token(self, client):
        response = client.get("/api/auth/validate")
        assert response.status_code == 401

    def test_validate_garbage_token(self, client):
        response = client.get(
            "/api/auth/validate", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    def test_refresh_recently_expired_token(self, client, member):
        """Tokens expired inside the grace period can be exchanged."""
        expired = create_access_token(
            member.email,
            {"user_id": member.id_user, "role": "USER", "branch_id": member.id_branch},
            expires_delta=timedelta(hours=-1),
        )
        response = client.post(
            "/api/auth/refresh", headers={"Authorization": f"Bearer {expired}"}
        )
        assert response.status_code == 200
        assert decode_access_token(response.json()["token"])["user_id"] == member.id_user

    def test_refresh_rejects_token_past_grace(self, client, member):
        stale = create_access_token(
            member.email,
            {"user_id": member.id_user, "role": "USER"},
            expires_delta=timedelta(days=-30),
        )
        response = client.post(
            "/api/auth/refresh", headers={"Authorization": f"Bearer {stale}"}
        )
        assert response.status_code == 401

    def test_expired_token_rejected_on_resources(self, client, member):
        """Outside refresh, expired tokens are plain 401s."""
        expired = create_access_token(
            member.email,
            {"user_id": member.id_user, "role": "USER"},
            expires_delta=timedelta(minutes=-5),
        )
        response = client.get("/api/branches", headers={"Authorization": f"Bearer {expired}"})
        assert response.status_code == 401

    def test_logout(self, client):
        response = client.post("/api/auth/logout")
        assert response.status_code == 200
        assert response.json()["success"] is True


class TestAuthorization:
    """Role checks enforced by the permission dependency."""

    def test_member_cannot_create_branch(self, client, member_headers):
        response = client.post(
            "/api/branches", headers=member_headers, json={"name": "Rogue Gym"}
        )
        assert response.status_code == 403
        assert response.json()["success"] is False

    def test_member_cannot_read_other_member(self, client, member_headers, other_member):
        response = client.get(f"/api/users/{other_member.id_user}", headers=member_headers)
        assert response.status_code == 403

    def test_member_reads_own_profile(self, client, member_headers, member):
        response = client.get("/api/users/me", headers=member_headers)
        assert response.status_code == 200
        assert response.json()["data"]["id_user"] == member.id_user
        assert response.json()["data"]["role_name"] == "USER"
