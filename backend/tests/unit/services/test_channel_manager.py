"""
Unit Tests for the conversation channel manager
Tests for: subscribe/unsubscribe, fan-out per conversation, dead socket pruning, revocation
"""
from unittest.mock import AsyncMock

import pytest

from prefect_portal.core.change_events import ChangeEvent, ChangeType
from prefect_portal.services.realtime import ConversationChannelManager


def _socket():
    ws = AsyncMock()
    ws.accept = AsyncMock()
    ws.send_json = AsyncMock()
    ws.close = AsyncMock()
    return ws


def _event(conversation_id="c1", change=ChangeType.INSERT, message_id="m1"):
    return ChangeEvent(type=change, conversation_id=conversation_id,
                       record={"id": message_id, "conversation_id": conversation_id, "message": "hi"})


@pytest.fixture
def manager():
    return ConversationChannelManager()


class TestSubscriptions:
    async def test_connect_accepts_and_registers(self, manager):
        ws = _socket()

        await manager.connect(ws, "c1", "u1")

        ws.accept.assert_awaited_once()
        assert manager.subscriber_count("c1") == 1

    async def test_disconnect_removes_subscriber(self, manager):
        ws = _socket()
        await manager.connect(ws, "c1", "u1")

        await manager.disconnect(ws, "c1")

        assert manager.subscriber_count("c1") == 0

    async def test_disconnect_unknown_is_noop(self, manager):
        await manager.disconnect(_socket(), "missing")

        assert manager.subscriber_count("missing") == 0


class TestDelivery:
    async def test_event_reaches_only_its_conversation(self, manager):
        ws_a, ws_b = _socket(), _socket()
        await manager.connect(ws_a, "c1", "u1")
        await manager.connect(ws_b, "c2", "u2")

        delivered = await manager.deliver(_event("c1"))

        assert delivered == 1
        ws_a.send_json.assert_awaited_once()
        ws_b.send_json.assert_not_awaited()

    async def test_envelope_shape(self, manager):
        ws = _socket()
        await manager.connect(ws, "c1", "u1")

        await manager.publish(_event("c1", ChangeType.DELETE, "m9"))

        payload = ws.send_json.await_args.args[0]
        assert payload["type"] == "delete"
        assert payload["table"] == "conversation_messages"
        assert payload["conversation_id"] == "c1"
        assert payload["record"]["id"] == "m9"
        assert payload["event_id"]
        assert payload["commit_timestamp"]

    async def test_dead_socket_dropped(self, manager):
        alive, dead = _socket(), _socket()
        dead.send_json.side_effect = RuntimeError("socket closed")
        await manager.connect(alive, "c1", "u1")
        await manager.connect(dead, "c1", "u2")

        delivered = await manager.deliver(_event("c1"))

        assert delivered == 1
        assert manager.subscriber_count("c1") == 1

    async def test_no_subscribers_delivers_nothing(self, manager):
        assert await manager.deliver(_event("nobody")) == 0


class TestRevocation:
    async def test_revoke_closes_only_that_users_sockets(self, manager):
        removed, staying = _socket(), _socket()
        await manager.connect(removed, "c1", "abc-user")
        await manager.connect(staying, "c1", "other-user")

        revoked = await manager.revoke("c1", "ABC-USER")
        await manager.deliver(_event("c1"))

        assert revoked == 1
        assert removed.close.await_args.kwargs["code"] == 4003
        removed.send_json.assert_not_awaited()
        staying.send_json.assert_awaited_once()
        assert manager.subscriber_count("c1") == 1

    async def test_revoke_survives_a_socket_that_fails_to_close(self, manager):
        ws = _socket()
        ws.close.side_effect = RuntimeError("already gone")
        await manager.connect(ws, "c1", "u1")

        assert await manager.revoke("c1", "u1") == 1
        assert manager.subscriber_count("c1") == 0

    async def test_drop_user_revokes_locally_without_relay(self, manager):
        ws = _socket()
        await manager.connect(ws, "c1", "u1")

        await manager.drop_user("c1", "u1")

        ws.close.assert_awaited_once()
        assert manager.subscriber_count("c1") == 0

    async def test_drop_user_goes_through_running_relay(self, manager):
        ws = _socket()
        await manager.connect(ws, "c1", "u1")
        relay = AsyncMock()
        relay.running = True
        manager._relay = relay

        await manager.drop_user("c1", "u1")

        relay.publish_revoke.assert_awaited_once_with("c1", "u1")
        ws.close.assert_not_awaited()


class TestEnvelope:
    def test_round_trip_through_dict(self):
        event = _event("c1", ChangeType.UPDATE, "m2")

        restored = ChangeEvent.from_dict(event.to_dict())

        assert restored.type == ChangeType.UPDATE
        assert restored.record == event.record
        assert restored.event_id == event.event_id
