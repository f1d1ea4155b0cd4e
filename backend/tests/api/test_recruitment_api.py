"""
API Tests for Prefect Recruitment
Tests for: applications, the one-per-term guard, review and role grant
"""
import pytest

BASE = "/api/v1/recruitment/applications"


@pytest.fixture
async def academic_year(client, admin_headers):
    response = await client.post("/api/v1/academic-years", json={
        "year_start": 2024, "year_end": 2025, "semester": "First", "is_current": True,
    }, headers=admin_headers)
    assert response.status_code == 201
    return response.json()


async def _apply(client, headers, academic_year, gpa="3.50"):
    return await client.post(BASE, json={
        "academic_year_id": academic_year["id"],
        "statement": "I want to help keep the school safe.",
        "gpa": gpa,
    }, headers=headers)


class TestApplications:
    async def test_student_applies(self, client, student_user, student_headers, academic_year):
        response = await _apply(client, student_headers, academic_year)

        assert response.status_code == 201
        data = response.json()
        assert data["applicant_id"] == str(student_user.id)
        assert data["status"] == "pending"

    async def test_one_application_per_term(self, client, student_headers, academic_year):
        await _apply(client, student_headers, academic_year)

        response = await _apply(client, student_headers, academic_year)

        assert response.status_code == 409
        assert "already submitted" in response.json()["error"]["message"]

    async def test_gpa_out_of_range(self, client, student_headers, academic_year):
        response = await _apply(client, student_headers, academic_year, gpa="4.50")

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "gpa"


class TestReview:
    async def test_approval_grants_prefect_role(self, client, student_user, student_headers, admin_user,
                                                admin_headers, academic_year):
        application = (await _apply(client, student_headers, academic_year)).json()

        review = await client.post(f"{BASE}/{application['id']}/review", json={
            "status": "approved", "review_notes": "Strong candidate",
        }, headers=admin_headers)
        me = await client.get("/api/v1/auth/me", headers=student_headers)

        assert review.status_code == 200
        assert review.json()["reviewed_by"] == str(admin_user.id)
        assert sorted(me.json()["roles"]) == ["prefect", "student"]

    async def test_rejection_leaves_roles_alone(self, client, student_headers, admin_headers, academic_year):
        application = (await _apply(client, student_headers, academic_year)).json()

        await client.post(f"{BASE}/{application['id']}/review", json={"status": "rejected"}, headers=admin_headers)
        me = await client.get("/api/v1/auth/me", headers=student_headers)

        assert me.json()["roles"] == ["student"]

    async def test_applicant_cannot_review_self(self, client, student_headers, academic_year):
        application = (await _apply(client, student_headers, academic_year)).json()

        response = await client.post(f"{BASE}/{application['id']}/review", json={"status": "approved"},
                                     headers=student_headers)

        assert response.status_code == 403

    async def test_stats(self, client, student_headers, admin_headers, academic_year):
        await _apply(client, student_headers, academic_year)

        response = await client.get(f"{BASE}/stats", headers=admin_headers)

        assert response.json()["total"] == 1
        assert response.json()["pending"] == 1
