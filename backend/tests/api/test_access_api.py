"""
API Tests for role-gated surfaces
Tests for: navigation, user management, analytics
"""
from conftest import auth_headers_for


class TestNavigation:
    async def test_student_navigation(self, client, student_headers):
        response = await client.get("/api/v1/navigation/", headers=student_headers)

        data = response.json()
        assert [e["key"] for e in data["entries"]] == [
            "dashboard", "training", "conversations", "complaints", "recruitment", "profile",
        ]
        assert data["primary_role"] == "student"
        assert data["variants"]["complaints"] == "self_service"

    async def test_faculty_manages_evaluations(self, client, faculty_headers):
        response = await client.get("/api/v1/navigation/", headers=faculty_headers)

        variants = response.json()["variants"]
        assert variants["evaluations"] == "management"
        assert variants["complaints"] == "self_service"

    async def test_can_open(self, client, student_headers):
        allowed = await client.get("/api/v1/navigation/can-open", params={"path": "/complaints/new"},
                                   headers=student_headers)
        denied = await client.get("/api/v1/navigation/can-open", params={"path": "/users"},
                                  headers=student_headers)

        assert allowed.json()["allowed"] is True
        assert denied.json()["allowed"] is False


class TestUserManagement:
    async def test_admin_filters_by_role(self, client, admin_headers, make_user):
        await make_user("prefect")
        await make_user("student")

        response = await client.get("/api/v1/users/", params={"status": "prefect"}, headers=admin_headers)

        assert len(response.json()) == 1
        assert response.json()[0]["roles"] == ["prefect"]

    async def test_student_cannot_list_users(self, client, student_headers):
        response = await client.get("/api/v1/users/", headers=student_headers)

        assert response.status_code == 403

    async def test_grant_and_revoke(self, client, admin_headers, student_user):
        path = f"/api/v1/users/{student_user.id}/roles"

        granted = await client.post(path, json={"role": "prefect"}, headers=admin_headers)
        again = await client.post(path, json={"role": "prefect"}, headers=admin_headers)
        revoked = await client.delete(f"{path}/prefect", headers=admin_headers)

        assert sorted(granted.json()["roles"]) == ["prefect", "student"]
        assert again.status_code == 409
        assert revoked.json()["roles"] == ["student"]

    async def test_unknown_role_rejected(self, client, admin_headers, student_user):
        response = await client.delete(f"/api/v1/users/{student_user.id}/roles/janitor", headers=admin_headers)

        assert response.status_code == 422

    async def test_prefect_picker(self, client, prefect_user, student_headers):
        response = await client.get("/api/v1/users/prefects", headers=student_headers)

        assert [p["id"] for p in response.json()] == [str(prefect_user.id)]


class TestAnalytics:
    async def test_student_forbidden(self, client, student_headers):
        response = await client.get("/api/v1/analytics/summary", headers=student_headers)

        assert response.status_code == 403

    async def test_summary_counts(self, client, admin_headers, student_headers):
        await client.post("/api/v1/complaints/", json={"subject": "Lights", "description": "Hall lights out"},
                          headers=student_headers)

        response = await client.get("/api/v1/analytics/summary", headers=admin_headers)

        data = response.json()
        assert data["totals"]["users"] == 2
        assert data["roles"]["admin"] == 1
        assert data["complaints_by_status"]["pending"] == 1
        assert set(data["evaluation_ratings"]) == {"1", "2", "3", "4", "5"}

    async def test_top_performers_ranked(self, client, faculty_user, make_user):
        strong, weak = await make_user("prefect"), await make_user("prefect")
        headers = auth_headers_for(faculty_user)
        for prefect, rating in ((strong, 5), (strong, 4), (weak, 2)):
            created = await client.post("/api/v1/evaluations/", json={"prefect_id": str(prefect.id), "rating": rating},
                                        headers=headers)
            assert created.status_code == 201

        response = await client.get("/api/v1/analytics/top-performers", headers=headers)

        ranked = response.json()
        assert [r["user"]["id"] for r in ranked] == [str(strong.id), str(weak.id)]
        assert ranked[0]["average_rating"] == 4.5
        assert ranked[0]["evaluations"] == 2
