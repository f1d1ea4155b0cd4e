"""
Unit Tests for client-side message merge
Tests for: ordering by (created_at, id), dedup, stale updates, tombstones
"""
from prefect_portal.client.message_feed import MessageFeed
from prefect_portal.core.change_events import ChangeEvent, ChangeType


def _message(message_id, created_at, text="hello", updated_at=None, conversation_id="c1"):
    return {
        "id": message_id,
        "conversation_id": conversation_id,
        "message": text,
        "created_at": created_at,
        "updated_at": updated_at or created_at,
    }


def _event(change, record):
    return ChangeEvent(type=change, conversation_id=record.get("conversation_id", "c1"), record=record)


class TestOrdering:
    def test_snapshot_sorted_by_created_at_then_id(self):
        feed = MessageFeed("c1", [
            _message("b", "2024-05-01T10:00:01"),
            _message("c", "2024-05-01T10:00:00"),
            _message("a", "2024-05-01T10:00:01"),
        ])

        assert feed.ids() == ["c", "a", "b"]

    def test_late_insert_lands_in_timestamp_order(self):
        feed = MessageFeed("c1", [_message("m1", "2024-05-01T10:00:00"), _message("m3", "2024-05-01T10:00:02")])

        feed.apply(_event(ChangeType.INSERT, _message("m2", "2024-05-01T10:00:01")))

        assert feed.ids() == ["m1", "m2", "m3"]


class TestDedup:
    def test_duplicate_insert_kept_once(self):
        feed = MessageFeed("c1", [_message("m1", "2024-05-01T10:00:00")])

        feed.apply(_event(ChangeType.INSERT, _message("m1", "2024-05-01T10:00:00")))

        assert len(feed) == 1

    def test_update_replaces_in_place(self):
        feed = MessageFeed("c1", [_message("m1", "2024-05-01T10:00:00"), _message("m2", "2024-05-01T10:00:01")])

        feed.apply(_event(ChangeType.UPDATE, _message("m1", "2024-05-01T10:00:00", "edited",
                                                      updated_at="2024-05-01T10:05:00")))

        assert feed.ids() == ["m1", "m2"]
        assert feed.messages[0]["message"] == "edited"

    def test_stale_update_ignored(self):
        feed = MessageFeed("c1", [_message("m1", "2024-05-01T10:00:00", "newest", updated_at="2024-05-01T10:10:00")])

        applied = feed.apply(_event(ChangeType.UPDATE, _message("m1", "2024-05-01T10:00:00", "older",
                                                                updated_at="2024-05-01T10:05:00")))

        assert applied is False
        assert feed.messages[0]["message"] == "newest"


class TestDeletes:
    def test_delete_removes_only_that_message(self):
        feed = MessageFeed("c1", [
            _message("m1", "2024-05-01T10:00:00"),
            _message("m2", "2024-05-01T10:00:01"),
            _message("m3", "2024-05-01T10:00:02"),
        ])

        feed.apply(_event(ChangeType.DELETE, {"id": "m2", "conversation_id": "c1"}))

        assert feed.ids() == ["m1", "m3"]

    def test_redelivered_insert_after_delete_dropped(self):
        feed = MessageFeed("c1", [_message("m1", "2024-05-01T10:00:00")])
        feed.apply(_event(ChangeType.DELETE, {"id": "m1", "conversation_id": "c1"}))

        applied = feed.apply(_event(ChangeType.INSERT, _message("m1", "2024-05-01T10:00:00")))

        assert applied is False
        assert "m1" not in feed

    def test_delete_of_unknown_id_is_harmless(self):
        feed = MessageFeed("c1", [_message("m1", "2024-05-01T10:00:00")])

        assert feed.apply(_event(ChangeType.DELETE, {"id": "zzz", "conversation_id": "c1"})) is False
        assert feed.ids() == ["m1"]


def test_events_for_other_conversations_ignored():
    feed = MessageFeed("c1")

    applied = feed.apply(_event(ChangeType.INSERT, _message("m1", "2024-05-01T10:00:00", conversation_id="c2")))

    assert applied is False
    assert len(feed) == 0
