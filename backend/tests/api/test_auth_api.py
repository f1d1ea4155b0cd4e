"""
API Tests for Authentication Endpoints
Tests for: signup, signin, refresh, /me, inactive accounts
"""
from conftest import TEST_PASSWORD, auth_headers_for

BASE = "/api/v1/auth"


class TestSignup:
    async def test_signup_returns_tokens_and_session(self, client):
        response = await client.post(f"{BASE}/signup", json={
            "email": "New.Student@School.edu",
            "password": "secret123",
            "confirm_password": "secret123",
            "first_name": "Nia",
            "last_name": "Okafor",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["access_token"] and data["refresh_token"]
        assert data["session"]["user"]["email"] == "new.student@school.edu"
        assert data["session"]["roles"] == ["student"]
        assert data["session"]["primary_role"] == "student"
        assert data["session"]["theme"] == "system"

    async def test_duplicate_email_conflicts(self, client, student_user):
        response = await client.post(f"{BASE}/signup", json={
            "email": student_user.email.upper(),
            "password": "secret123",
            "first_name": "Copy",
            "last_name": "Cat",
        })

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "CONFLICT"
        assert "already registered" in body["error"]["message"]

    async def test_mismatched_passwords_rejected(self, client):
        response = await client.post(f"{BASE}/signup", json={
            "email": "mismatch@school.edu",
            "password": "secret123",
            "confirm_password": "secret124",
            "first_name": "Mis",
            "last_name": "Match",
        })

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"


class TestSignin:
    async def test_signin_success(self, client, prefect_user):
        response = await client.post(f"{BASE}/signin", json={
            "email": prefect_user.email,
            "password": TEST_PASSWORD,
        })

        assert response.status_code == 200
        session = response.json()["session"]
        assert session["user"]["id"] == str(prefect_user.id)
        assert session["roles"] == ["prefect"]

    async def test_wrong_password(self, client, prefect_user):
        response = await client.post(f"{BASE}/signin", json={
            "email": prefect_user.email,
            "password": "not-the-password",
        })

        assert response.status_code == 401
        assert response.json()["error"]["message"] == "Invalid login credentials"

    async def test_unknown_email(self, client, db_session):
        response = await client.post(f"{BASE}/signin", json={
            "email": "nobody@school.edu",
            "password": TEST_PASSWORD,
        })

        assert response.status_code == 401

    async def test_inactive_account_forbidden(self, client, make_user):
        user = await make_user("student", is_active=False)

        response = await client.post(f"{BASE}/signin", json={"email": user.email, "password": TEST_PASSWORD})

        assert response.status_code == 403


class TestSession:
    async def test_me_lists_all_roles(self, client, make_user):
        user = await make_user("prefect", "student")

        response = await client.get(f"{BASE}/me", headers=auth_headers_for(user))

        assert response.status_code == 200
        data = response.json()
        assert sorted(data["roles"]) == ["prefect", "student"]
        assert data["primary_role"] == "prefect"

    async def test_me_requires_token(self, client, db_session):
        response = await client.get(f"{BASE}/me")

        assert response.status_code == 401

    async def test_garbage_token_rejected(self, client, db_session):
        response = await client.get(f"{BASE}/me", headers={"Authorization": "Bearer not-a-jwt"})

        assert response.status_code == 401

    async def test_refresh_issues_new_pair(self, client, student_user):
        signin = await client.post(f"{BASE}/signin", json={"email": student_user.email, "password": TEST_PASSWORD})

        response = await client.post(f"{BASE}/refresh", json={"refresh_token": signin.json()["refresh_token"]})

        assert response.status_code == 200
        assert response.json()["access_token"]

    async def test_access_token_not_accepted_for_refresh(self, client, student_user):
        signin = await client.post(f"{BASE}/signin", json={"email": student_user.email, "password": TEST_PASSWORD})

        response = await client.post(f"{BASE}/refresh", json={"refresh_token": signin.json()["access_token"]})

        assert response.status_code == 401
