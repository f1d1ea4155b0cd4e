"""
API Tests for Events, Event Assignments and Incident Reports
"""
from datetime import date, timedelta

import pytest

from conftest import auth_headers_for

EVENTS = "/api/v1/events/"
INCIDENTS = "/api/v1/incidents/"


@pytest.fixture
async def event(client, admin_headers):
    response = await client.post(EVENTS, json={
        "title": "Sports day",
        "event_date": (date.today() + timedelta(days=7)).isoformat(),
        "start_time": "08:00:00",
        "end_time": "15:00:00",
        "location": "Field",
    }, headers=admin_headers)
    assert response.status_code == 201
    return response.json()


class TestEvents:
    async def test_everyone_can_read_events(self, client, event, student_headers):
        response = await client.get(f"{EVENTS}{event['id']}", headers=student_headers)

        assert response.status_code == 200

    async def test_upcoming_excludes_past(self, client, event, admin_headers):
        await client.post(EVENTS, json={"title": "Last term assembly", "event_date": "2020-01-10"},
                          headers=admin_headers)

        response = await client.get(f"{EVENTS}upcoming", headers=admin_headers)
        stats = await client.get(f"{EVENTS}stats", headers=admin_headers)

        assert [e["title"] for e in response.json()] == ["Sports day"]
        assert stats.json() == {"total": 2, "upcoming": 1}

    async def test_assigning_twice_adds_nobody(self, client, event, admin_headers, make_user):
        prefects = [await make_user("prefect") for _ in range(2)]
        path = f"{EVENTS}{event['id']}/assignments"
        ids = [str(p.id) for p in prefects]

        first = await client.post(path, json={"prefect_ids": ids, "role_in_event": "Marshal"}, headers=admin_headers)
        second = await client.post(path, json={"prefect_ids": ids}, headers=admin_headers)
        listed = await client.get(path, headers=admin_headers)

        assert len(first.json()) == 2
        assert second.json() == []
        assert len(listed.json()) == 2

    async def test_prefect_sees_only_own_assignment(self, client, event, admin_headers, make_user):
        mine, theirs = await make_user("prefect"), await make_user("prefect")
        await client.post(f"{EVENTS}{event['id']}/assignments",
                          json={"prefect_ids": [str(mine.id), str(theirs.id)]}, headers=admin_headers)

        response = await client.get(f"{EVENTS}{event['id']}/assignments", headers=auth_headers_for(mine))

        assert [a["prefect_id"] for a in response.json()] == [str(mine.id)]


class TestIncidents:
    async def test_resolve_and_reopen(self, client, prefect_headers, admin_user, admin_headers):
        created = await client.post(INCIDENTS, json={
            "title": "Fight near canteen", "description": "Two students scuffled", "severity": "high",
        }, headers=prefect_headers)
        incident_id = created.json()["id"]

        resolved = await client.post(f"{INCIDENTS}{incident_id}/resolve", headers=admin_headers)
        reopened = await client.post(f"{INCIDENTS}{incident_id}/unresolve", headers=admin_headers)

        assert resolved.json()["is_resolved"] is True
        assert resolved.json()["resolved_by"] == str(admin_user.id)
        assert reopened.json()["resolved_at"] is None

    async def test_student_reports_are_private(self, client, student_headers, make_user):
        await client.post(INCIDENTS, json={"title": "Bullying", "description": "Details"}, headers=student_headers)
        other_student = auth_headers_for(await make_user("student"))

        response = await client.get(INCIDENTS, headers=other_student)

        assert response.json() == []

    async def test_critical_issue_feed(self, client, prefect_headers, faculty_headers):
        await client.post(INCIDENTS, json={"title": "Gas smell", "description": "Lab 3", "severity": "critical"},
                          headers=prefect_headers)
        await client.post(INCIDENTS, json={"title": "Litter", "description": "Yard", "severity": "low"},
                          headers=prefect_headers)

        response = await client.get("/api/v1/analytics/critical-issues", headers=faculty_headers)

        assert [i["title"] for i in response.json()["incidents"]] == ["Gas smell"]
