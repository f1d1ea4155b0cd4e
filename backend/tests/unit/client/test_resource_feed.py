"""
Unit Tests for ResourceFeed
Tests for: dialog state machine, client-side validation, failure handling,
status patching, role-scoped visibility and local filters
"""
from datetime import date

import pytest

from prefect_portal.client import DialogBusyError, DialogState, ResourceFeed, Session
from prefect_portal.client.session import Principal
from prefect_portal.core.result import ErrorKind, Result


class FakeApi:
    """Records calls and answers with queued results"""

    def __init__(self, records=None):
        self.records = list(records or [])
        self.calls = []
        self.next_result = None

    def _answer(self, default):
        result, self.next_result = self.next_result, None
        return result or default

    async def list(self, **filters):
        self.calls.append(("list", filters))
        return self._answer(Result.success([dict(r) for r in self.records]))

    async def create(self, payload):
        self.calls.append(("create", payload))
        record = {"id": f"r{len(self.records) + 1}", **payload}
        result = self._answer(Result.success(record))
        if result.ok:
            self.records.append(record)
        return result

    async def update(self, record_id, changes):
        self.calls.append(("update", record_id, changes))
        return self._answer(Result.success({"id": record_id, **changes}))

    async def delete(self, record_id):
        self.calls.append(("delete", record_id))
        result = self._answer(Result.success(None))
        if result.ok:
            self.records = [r for r in self.records if r["id"] != record_id]
        return result

    async def change_status(self, record_id, status):
        self.calls.append(("change_status", record_id, status))
        record = next(r for r in self.records if r["id"] == record_id)
        return self._answer(Result.success({**record, "status": status}))

    def called(self, name):
        return [call for call in self.calls if call[0] == name]


def _session(*roles, user_id="u1"):
    return Session(
        user=Principal(id=user_id, email=f"{user_id}@school.edu", roles=frozenset(roles)),
        roles=frozenset(roles),
        access_token="token",
    )


RECORDS = [
    {"id": "r1", "owner_id": "u1", "status": "pending", "title": "Broken window",
     "created_at": "2024-03-01T09:00:00"},
    {"id": "r2", "owner_id": "u2", "status": "resolved", "title": "Noise in library",
     "created_at": "2024-03-05T12:30:00"},
    {"id": "r3", "owner_id": "u1", "status": "resolved", "title": "Lost bag",
     "created_at": "2024-03-10T16:45:00"},
]


def _feed(api, *roles, **kwargs):
    kwargs.setdefault("required_fields", {"title": "Title is required"})
    kwargs.setdefault("search_fields", ("title",))
    return ResourceFeed(api, _session(*roles), "complaints", **kwargs)


class TestDialog:
    def test_second_dialog_rejected(self):
        feed = _feed(FakeApi(), "student")
        feed.open_create()

        with pytest.raises(DialogBusyError):
            feed.open_edit(RECORDS[0])

    def test_edit_prefills_values(self):
        feed = _feed(FakeApi(), "admin")

        dialog = feed.open_edit(RECORDS[1])

        assert dialog.state == DialogState.OPEN
        assert dialog.record_id == "r2"
        assert dialog.values["title"] == "Noise in library"

    async def test_missing_required_field_sends_nothing(self):
        api = FakeApi()
        feed = _feed(api, "student")
        feed.open_create({"title": "   "})

        result = await feed.submit()

        assert result.error == ErrorKind.VALIDATION
        assert result.field == "title"
        assert api.calls == []
        assert feed.dialog.state == DialogState.OPEN_WITH_ERROR
        assert feed.dialog.errors == {"title": "Title is required"}

    async def test_successful_create_closes_and_reloads(self):
        api = FakeApi()
        feed = _feed(api, "student")
        feed.open_create({"title": "Leaking tap", "owner_id": "u1"})

        result = await feed.submit()

        assert result.ok
        assert feed.dialog.state == DialogState.CLOSED
        assert [r["title"] for r in feed.records] == ["Leaking tap"]
        notes = feed.pop_notifications()
        assert [(n.message, n.level) for n in notes] == [("Complaint created", "success")]

    async def test_update_strips_server_fields(self):
        api = FakeApi(RECORDS)
        feed = _feed(api, "admin")
        feed.open_edit(RECORDS[0])
        feed.dialog.values["title"] = "Broken window (2nd floor)"

        await feed.submit()

        _, record_id, changes = api.called("update")[0]
        assert record_id == "r1"
        assert "id" not in changes and "created_at" not in changes
        assert changes["title"] == "Broken window (2nd floor)"

    async def test_failed_submit_keeps_values_and_list(self):
        api = FakeApi(RECORDS)
        feed = _feed(api, "admin")
        await feed.load()
        feed.open_create({"title": "Duplicate"})
        api.next_result = Result.failure(ErrorKind.CONFLICT, "Already exists")

        result = await feed.submit()

        assert result.error == ErrorKind.CONFLICT
        assert feed.dialog.state == DialogState.OPEN_WITH_ERROR
        assert feed.dialog.values == {"title": "Duplicate"}
        assert feed.dialog.message == "Already exists"
        assert len(feed.records) == 3
        note = feed.pop_notifications()[0]
        assert note.level == "error"
        assert note.error == ErrorKind.CONFLICT

    async def test_retry_after_failure(self):
        api = FakeApi()
        feed = _feed(api, "student")
        feed.open_create({"title": "Retry me", "owner_id": "u1"})
        api.next_result = Result.failure(ErrorKind.TIMEOUT, "timed out")
        await feed.submit()

        result = await feed.submit()

        assert result.ok
        assert feed.dialog.state == DialogState.CLOSED


class TestLoading:
    async def test_load_failure_keeps_previous_list(self):
        api = FakeApi(RECORDS)
        feed = _feed(api, "admin")
        await feed.load()
        api.next_result = Result.failure(ErrorKind.BACKEND, "database unavailable")

        await feed.load()

        assert len(feed.records) == 3
        assert feed.loading is False
        assert feed.pop_notifications()[0].message == "Failed to load: database unavailable"

    async def test_delete_failure_leaves_record(self):
        api = FakeApi(RECORDS)
        feed = _feed(api, "admin")
        await feed.load()
        api.next_result = Result.not_found("Complaint", "r2")

        await feed.delete("r2")

        assert [r["id"] for r in feed.records] == ["r1", "r2", "r3"]


class TestStatusChange:
    async def test_patch_mode_splices_without_reload(self):
        api = FakeApi(RECORDS)
        feed = _feed(api, "admin", patch_status_updates=True)
        await feed.load()

        await feed.change_status("r1", "resolved")

        assert len(api.called("list")) == 1
        assert feed.records[0]["status"] == "resolved"
        assert [r["id"] for r in feed.records] == ["r1", "r2", "r3"]

    async def test_default_mode_reloads(self):
        api = FakeApi(RECORDS)
        feed = _feed(api, "admin")
        await feed.load()

        await feed.change_status("r1", "resolved")

        assert len(api.called("list")) == 2


class TestVisibility:
    async def test_self_service_sees_only_own(self):
        feed = _feed(FakeApi(RECORDS), "student")
        await feed.load()

        assert not feed.is_management
        assert [r["id"] for r in feed.visible_records()] == ["r1", "r3"]

    async def test_management_sees_all(self):
        feed = _feed(FakeApi(RECORDS), "admin")
        await feed.load()

        assert feed.is_management
        assert len(feed.visible_records()) == 3

    async def test_filters_combine(self):
        feed = _feed(FakeApi(RECORDS), "admin")
        await feed.load()

        feed.filters.status = "resolved"
        feed.filters.start_date = date(2024, 3, 5)
        feed.filters.end_date = date(2024, 3, 5)
        assert [r["id"] for r in feed.visible_records()] == ["r2"]

        feed.filters.status = None
        feed.filters.start_date = feed.filters.end_date = None
        feed.filters.search = "BAG"
        assert [r["id"] for r in feed.visible_records()] == ["r3"]
