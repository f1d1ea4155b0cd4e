"""
API Tests for Gate Logs, Weekly Reports and Performance Evaluations
"""
from datetime import date, timedelta

from conftest import auth_headers_for

GATE_LOGS = "/api/v1/gate-logs/"
WEEKLY_REPORTS = "/api/v1/weekly-reports/"
EVALUATIONS = "/api/v1/evaluations/"


class TestGateLogs:
    async def test_prefect_logs_own_shift(self, client, prefect_user, prefect_headers):
        response = await client.post(GATE_LOGS, json={
            "log_date": "2024-05-06",
            "time_in": "07:00:00",
            "time_out": "07:45:00",
        }, headers=prefect_headers)

        assert response.status_code == 201
        assert response.json()["prefect_id"] == str(prefect_user.id)

    async def test_time_out_must_follow_time_in(self, client, prefect_headers):
        response = await client.post(GATE_LOGS, json={
            "log_date": "2024-05-06",
            "time_in": "08:00:00",
            "time_out": "07:30:00",
        }, headers=prefect_headers)

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "time_out"

    async def test_patch_checks_against_stored_time_in(self, client, prefect_headers):
        created = await client.post(GATE_LOGS, json={"log_date": "2024-05-06", "time_in": "08:00:00"},
                                    headers=prefect_headers)

        response = await client.patch(f"{GATE_LOGS}{created.json()['id']}", json={"time_out": "07:00:00"},
                                      headers=prefect_headers)

        assert response.status_code == 422

    async def test_prefect_cannot_log_for_someone_else(self, client, prefect_headers, make_user):
        other = await make_user("prefect")

        response = await client.post(GATE_LOGS, json={
            "prefect_id": str(other.id),
            "log_date": "2024-05-06",
            "time_in": "07:00:00",
        }, headers=prefect_headers)

        assert response.status_code == 403

    async def test_visibility_and_stats(self, client, prefect_headers, faculty_headers, make_user):
        today = date.today()
        for day in (today, today - timedelta(days=3)):
            await client.post(GATE_LOGS, json={"log_date": day.isoformat(), "time_in": "07:00:00"},
                              headers=prefect_headers)
        other_headers = auth_headers_for(await make_user("prefect"))

        assert len((await client.get(GATE_LOGS, headers=faculty_headers)).json()) == 2
        assert (await client.get(GATE_LOGS, headers=other_headers)).json() == []

        stats = await client.get(f"{GATE_LOGS}stats", headers=faculty_headers)
        assert stats.json() == {"total": 2, "today": 1}

    async def test_newest_first(self, client, prefect_headers):
        for day in ("2024-05-01", "2024-05-03", "2024-05-02"):
            await client.post(GATE_LOGS, json={"log_date": day, "time_in": "07:00:00"}, headers=prefect_headers)

        response = await client.get(GATE_LOGS, headers=prefect_headers)

        assert [row["log_date"] for row in response.json()] == ["2024-05-03", "2024-05-02", "2024-05-01"]


class TestWeeklyReports:
    REPORT = {
        "week_start": "2024-05-06",
        "week_end": "2024-05-10",
        "summary": "Covered assembly line-up and the library corridor",
        "achievements": "No late arrivals on Friday",
    }

    async def test_prefect_submits_report(self, client, prefect_user, prefect_headers):
        response = await client.post(WEEKLY_REPORTS, json=self.REPORT, headers=prefect_headers)

        assert response.status_code == 201
        assert response.json()["prefect_id"] == str(prefect_user.id)

    async def test_week_start_must_precede_end(self, client, prefect_headers):
        payload = {**self.REPORT, "week_start": "2024-05-10", "week_end": "2024-05-10"}

        response = await client.post(WEEKLY_REPORTS, json=payload, headers=prefect_headers)

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "week_start"

    async def test_blank_summary_rejected(self, client, prefect_headers):
        response = await client.post(WEEKLY_REPORTS, json={**self.REPORT, "summary": "   "},
                                     headers=prefect_headers)

        assert response.status_code == 422

    async def test_student_cannot_submit(self, client, student_headers):
        response = await client.post(WEEKLY_REPORTS, json=self.REPORT, headers=student_headers)

        assert response.status_code == 403

    async def test_owner_edits_other_prefect_cannot_see(self, client, prefect_headers, make_user):
        created = await client.post(WEEKLY_REPORTS, json=self.REPORT, headers=prefect_headers)
        report_id = created.json()["id"]
        other_headers = auth_headers_for(await make_user("prefect"))

        edited = await client.patch(f"{WEEKLY_REPORTS}{report_id}", json={"challenges": "Rain on Tuesday"},
                                    headers=prefect_headers)
        hidden = await client.get(f"{WEEKLY_REPORTS}{report_id}", headers=other_headers)

        assert edited.status_code == 200
        assert edited.json()["challenges"] == "Rain on Tuesday"
        assert hidden.status_code == 404

    async def test_search_matches_summary(self, client, prefect_headers, faculty_headers):
        await client.post(WEEKLY_REPORTS, json=self.REPORT, headers=prefect_headers)
        await client.post(WEEKLY_REPORTS, json={
            **self.REPORT, "week_start": "2024-05-13", "week_end": "2024-05-17", "summary": "Sports day support",
        }, headers=prefect_headers)

        response = await client.get(WEEKLY_REPORTS, params={"search": "assembly"}, headers=faculty_headers)

        assert [row["week_start"] for row in response.json()] == ["2024-05-06"]


class TestEvaluations:
    async def test_evaluator_is_the_caller(self, client, faculty_user, faculty_headers, prefect_user):
        response = await client.post(EVALUATIONS, json={
            "prefect_id": str(prefect_user.id),
            "rating": 4,
            "comments": "Reliable at the gate",
        }, headers=faculty_headers)

        assert response.status_code == 201
        assert response.json()["evaluator_id"] == str(faculty_user.id)

    async def test_rating_out_of_range(self, client, faculty_headers, prefect_user):
        response = await client.post(EVALUATIONS, json={"prefect_id": str(prefect_user.id), "rating": 6},
                                     headers=faculty_headers)

        assert response.status_code == 422
        assert response.json()["error"]["details"]["field"] == "rating"

    async def test_student_cannot_evaluate(self, client, student_headers, prefect_user):
        response = await client.post(EVALUATIONS, json={"prefect_id": str(prefect_user.id), "rating": 3},
                                     headers=student_headers)

        assert response.status_code == 403

    async def test_prefect_sees_own_evaluations(self, client, faculty_headers, prefect_user, prefect_headers,
                                                make_user):
        other_prefect = await make_user("prefect")
        for target in (prefect_user, other_prefect):
            await client.post(EVALUATIONS, json={"prefect_id": str(target.id), "rating": 5},
                              headers=faculty_headers)

        response = await client.get(EVALUATIONS, headers=prefect_headers)

        assert [row["prefect_id"] for row in response.json()] == [str(prefect_user.id)]

    async def test_other_faculty_cannot_see_or_edit(self, client, faculty_headers, prefect_user, make_user):
        created = await client.post(EVALUATIONS, json={"prefect_id": str(prefect_user.id), "rating": 3},
                                    headers=faculty_headers)
        evaluation_id = created.json()["id"]
        other_headers = auth_headers_for(await make_user("faculty"))

        hidden = await client.patch(f"{EVALUATIONS}{evaluation_id}", json={"rating": 1}, headers=other_headers)
        edited = await client.patch(f"{EVALUATIONS}{evaluation_id}", json={"rating": 4}, headers=faculty_headers)

        assert hidden.status_code == 404
        assert edited.json()["rating"] == 4

    async def test_for_prefect_and_stats(self, client, admin_headers, faculty_headers, prefect_user, make_user):
        other_prefect = await make_user("prefect")
        for target, rating in ((prefect_user, 5), (prefect_user, 4), (other_prefect, 2)):
            await client.post(EVALUATIONS, json={"prefect_id": str(target.id), "rating": rating},
                              headers=faculty_headers)

        history = await client.get(f"{EVALUATIONS}prefect/{prefect_user.id}", headers=admin_headers)
        stats = await client.get(f"{EVALUATIONS}stats", headers=admin_headers)

        assert sorted(row["rating"] for row in history.json()) == [4, 5]
        assert stats.json() == {
            "total": 3,
            "average": 3.7,
            "excellent": 1,
            "good": 1,
            "average_count": 0,
            "poor": 1,
        }
