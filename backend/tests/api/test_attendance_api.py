"""
API Tests for Attendance
Tests for: self-service create, duplicate guard, visibility, time window
"""
BASE = "/api/v1/attendance/"


class TestAttendanceCreate:
    async def test_prefect_records_own_attendance(self, client, prefect_user, prefect_headers):
        response = await client.post(BASE, json={"date": "2024-02-12", "status": "late"}, headers=prefect_headers)

        assert response.status_code == 201
        data = response.json()
        assert data["prefect_id"] == str(prefect_user.id)
        assert data["status"] == "late"

    async def test_second_record_same_day_conflicts(self, client, prefect_headers):
        first = await client.post(BASE, json={"date": "2024-02-12"}, headers=prefect_headers)
        assert first.status_code == 201

        response = await client.post(BASE, json={"date": "2024-02-12"}, headers=prefect_headers)

        assert response.status_code == 409
        assert response.json()["error"]["message"] == "Attendance record already exists for this date"

    async def test_time_out_before_time_in_rejected(self, client, prefect_headers):
        response = await client.post(BASE, json={
            "date": "2024-02-13",
            "time_in": "2024-02-13T09:00:00",
            "time_out": "2024-02-13T08:00:00",
        }, headers=prefect_headers)

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "time_out"

    async def test_student_cannot_record_attendance(self, client, student_headers):
        response = await client.post(BASE, json={"date": "2024-02-12"}, headers=student_headers)

        assert response.status_code == 403

    async def test_prefect_cannot_record_for_someone_else(self, client, prefect_headers, make_user):
        other = await make_user("prefect")

        response = await client.post(BASE, json={"prefect_id": str(other.id), "date": "2024-02-12"},
                                     headers=prefect_headers)

        assert response.status_code == 403


class TestAttendanceVisibility:
    async def test_prefect_sees_only_own_rows(self, client, prefect_headers, admin_headers, make_user):
        other = await make_user("prefect")
        await client.post(BASE, json={"date": "2024-02-12"}, headers=prefect_headers)
        await client.post(BASE, json={"prefect_id": str(other.id), "date": "2024-02-12"}, headers=admin_headers)

        mine = await client.get(BASE, headers=prefect_headers)
        everyone = await client.get(BASE, headers=admin_headers)

        assert len(mine.json()) == 1
        assert len(everyone.json()) == 2

    async def test_hidden_row_is_not_found(self, client, admin_headers, prefect_headers, make_user):
        other = await make_user("prefect")
        created = await client.post(BASE, json={"prefect_id": str(other.id), "date": "2024-02-12"},
                                    headers=admin_headers)

        response = await client.get(f"{BASE}{created.json()['id']}", headers=prefect_headers)

        assert response.status_code == 404

    async def test_date_range_is_inclusive(self, client, prefect_headers):
        for day in ("2024-03-01", "2024-03-02", "2024-03-03", "2024-03-04"):
            await client.post(BASE, json={"date": day}, headers=prefect_headers)

        response = await client.get(BASE, params={"start_date": "2024-03-02", "end_date": "2024-03-03"},
                                    headers=prefect_headers)

        assert sorted(r["date"] for r in response.json()) == ["2024-03-02", "2024-03-03"]

    async def test_unknown_status_filter_rejected(self, client, prefect_headers):
        response = await client.get(BASE, params={"status": "sleeping"}, headers=prefect_headers)

        assert response.status_code == 422

    async def test_stats_counts_every_status(self, client, prefect_headers):
        await client.post(BASE, json={"date": "2024-03-01", "status": "absent"}, headers=prefect_headers)

        response = await client.get(f"{BASE}stats", headers=prefect_headers)

        assert response.json() == {"total": 1, "present": 0, "absent": 1, "late": 0}
