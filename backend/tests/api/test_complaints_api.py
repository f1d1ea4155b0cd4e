"""
API Tests for Complaints
Tests for: submission, status lifecycle, follow-up messages
"""
from conftest import auth_headers_for

BASE = "/api/v1/complaints/"


async def _submit(client, headers, subject="Broken projector", description="Room 12 projector is dead"):
    response = await client.post(BASE, json={"subject": subject, "description": description}, headers=headers)
    assert response.status_code == 201
    return response.json()


class TestComplaintSubmission:
    async def test_student_submits_pending_complaint(self, client, student_user, student_headers):
        complaint = await _submit(client, student_headers)

        assert complaint["submitted_by"] == str(student_user.id)
        assert complaint["status"] == "pending"
        assert complaint["resolved_at"] is None

    async def test_blank_subject_rejected(self, client, student_headers):
        response = await client.post(BASE, json={"subject": "   ", "description": "Something"},
                                     headers=student_headers)

        assert response.status_code == 422
        assert response.json()["error"]["message"] == "Complaint subject is required"

    async def test_student_cannot_change_status(self, client, student_headers):
        complaint = await _submit(client, student_headers)

        response = await client.patch(f"{BASE}{complaint['id']}/status", json={"status": "resolved"},
                                      headers=student_headers)

        assert response.status_code == 403


class TestComplaintLifecycle:
    async def test_resolving_stamps_resolved_at(self, client, student_headers, admin_headers):
        complaint = await _submit(client, student_headers)

        resolved = await client.patch(f"{BASE}{complaint['id']}/status", json={"status": "resolved"},
                                      headers=admin_headers)
        reopened = await client.patch(f"{BASE}{complaint['id']}/status", json={"status": "in_progress"},
                                      headers=admin_headers)

        assert resolved.json()["resolved_at"] is not None
        assert reopened.json()["resolved_at"] is None

    async def test_assignee_can_see_complaint(self, client, student_headers, admin_headers, make_user):
        prefect = await make_user("prefect")
        complaint = await _submit(client, student_headers)
        await client.patch(f"{BASE}{complaint['id']}", json={"assigned_to": str(prefect.id)},
                           headers=admin_headers)

        response = await client.get(f"{BASE}{complaint['id']}", headers=auth_headers_for(prefect))

        assert response.status_code == 200
        assert response.json()["assigned_to"] == str(prefect.id)

    async def test_stale_concurrency_token_conflicts(self, client, student_headers, admin_headers):
        complaint = await _submit(client, student_headers)
        await client.patch(f"{BASE}{complaint['id']}", json={"subject": "Updated once"}, headers=admin_headers)

        response = await client.patch(f"{BASE}{complaint['id']}", json={
            "subject": "Updated twice",
            "expected_updated_at": complaint["updated_at"],
        }, headers=admin_headers)

        assert response.status_code == 409


class TestComplaintMessages:
    async def test_messages_in_order(self, client, student_headers, admin_headers):
        complaint = await _submit(client, student_headers)
        path = f"{BASE}{complaint['id']}/messages"

        await client.post(path, json={"message": "Any update?"}, headers=student_headers)
        await client.post(path, json={"message": "Technician booked"}, headers=admin_headers)

        response = await client.get(path, headers=student_headers)

        assert [m["message"] for m in response.json()] == ["Any update?", "Technician booked"]

    async def test_outsider_cannot_post(self, client, student_headers, make_user):
        outsider = await make_user("student")
        complaint = await _submit(client, student_headers)

        response = await client.post(f"{BASE}{complaint['id']}/messages", json={"message": "hi"},
                                     headers=auth_headers_for(outsider))

        assert response.status_code == 404
