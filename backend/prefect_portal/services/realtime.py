"""
Conversation Channel Manager

Pushes committed conversation message changes to websocket subscribers:
- One subscriber set per conversation id
- ChangeEvent envelope (insert / update / delete with the full record)
- Dead sockets dropped on broadcast, removed participants disconnected
- Optional Redis pub/sub relay so every worker sees every event

Events are published only after the database commit, so a subscriber never
sees a row that was rolled back.
"""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional

import redis.asyncio as redis
from fastapi import WebSocket

from prefect_portal.core.change_events import ChangeEvent
from prefect_portal.core.config import settings
from prefect_portal.core.logging_config import logger

REVOKED_CLOSE_CODE = 4003
REVOKE_MESSAGE_TYPE = "revoke"


@dataclass
class Subscriber:
    websocket: WebSocket
    user_id: str
    conversation_id: str
    connected_at: datetime = field(default_factory=datetime.utcnow)


class ConversationChannelManager:
    """
    Tracks websocket subscribers per conversation and fans out change events.

    Subscriber sets are only mutated under ``_lock``; broadcasts iterate a
    snapshot so a slow socket never blocks connect/disconnect.
    """

    def __init__(self):
        # conversation_id -> {id(websocket): Subscriber}
        self._channels: Dict[str, Dict[int, Subscriber]] = {}
        self._lock = asyncio.Lock()
        self._relay: Optional["RedisRelay"] = None

    async def connect(self, websocket: WebSocket, conversation_id: str, user_id: str) -> Subscriber:
        await websocket.accept()
        subscriber = Subscriber(websocket=websocket, user_id=user_id, conversation_id=conversation_id)
        async with self._lock:
            self._channels.setdefault(conversation_id, {})[id(websocket)] = subscriber
            count = len(self._channels[conversation_id])
        logger.log_realtime_event("subscribe", conversation_id, subscribers=count)
        return subscriber

    async def disconnect(self, websocket: WebSocket, conversation_id: str) -> None:
        async with self._lock:
            channel = self._channels.get(conversation_id)
            if channel is None:
                return
            channel.pop(id(websocket), None)
            count = len(channel)
            if not channel:
                del self._channels[conversation_id]
        logger.log_realtime_event("unsubscribe", conversation_id, subscribers=count)

    def subscriber_count(self, conversation_id: str) -> int:
        return len(self._channels.get(conversation_id, {}))

    async def drop_user(self, conversation_id: str, user_id: str) -> None:
        """Cut a former participant off from a conversation on every worker"""
        if self._relay is not None and self._relay.running:
            await self._relay.publish_revoke(conversation_id, user_id)
            return
        await self.revoke(conversation_id, user_id)

    async def revoke(self, conversation_id: str, user_id: str) -> int:
        """Close this worker's sockets of ``user_id`` on a conversation with 4003"""
        user_id = str(user_id).lower()
        async with self._lock:
            channel = self._channels.get(conversation_id, {})
            revoked = [s for s in channel.values() if str(s.user_id).lower() == user_id]
            for subscriber in revoked:
                channel.pop(id(subscriber.websocket), None)
            if conversation_id in self._channels and not channel:
                del self._channels[conversation_id]

        for subscriber in revoked:
            try:
                await subscriber.websocket.close(code=REVOKED_CLOSE_CODE, reason="No longer a participant")
            except Exception as e:
                logger.warning(f"Closing revoked subscriber {subscriber.user_id} on {conversation_id} failed: {e}")
        if revoked:
            logger.log_realtime_event("revoke", conversation_id,
                                      subscribers=self.subscriber_count(conversation_id), user_id=user_id)
        return len(revoked)

    async def publish(self, event: ChangeEvent) -> None:
        """Entry point for services after a commit"""
        if self._relay is not None and self._relay.running:
            await self._relay.publish(event)
            return
        await self.deliver(event)

    async def deliver(self, event: ChangeEvent) -> int:
        """Send an event to local subscribers, returns how many received it"""
        async with self._lock:
            subscribers = list(self._channels.get(event.conversation_id, {}).values())
        if not subscribers:
            return 0

        payload = event.to_dict()
        dead = []
        delivered = 0
        for subscriber in subscribers:
            try:
                await subscriber.websocket.send_json(payload)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping realtime subscriber {subscriber.user_id} on {event.conversation_id}: {e}")
                dead.append(subscriber)

        for subscriber in dead:
            await self.disconnect(subscriber.websocket, subscriber.conversation_id)

        logger.log_realtime_event(event.type.value, event.conversation_id, subscribers=delivered)
        return delivered

    # ==================== Cross-worker relay ====================

    async def start_relay(self, url: Optional[str] = None) -> None:
        url = url if url is not None else settings.REALTIME_REDIS_URL
        if not url or self._relay is not None:
            return
        self._relay = RedisRelay(self, url, settings.REALTIME_CHANNEL_PREFIX)
        await self._relay.start()

    async def stop_relay(self) -> None:
        if self._relay is None:
            return
        await self._relay.stop()
        self._relay = None


class RedisRelay:
    """Publishes events to Redis and delivers everything heard back locally"""

    def __init__(self, manager: ConversationChannelManager, url: str, prefix: str):
        self.manager = manager
        self.url = url
        self.prefix = prefix
        self._redis: Optional[redis.Redis] = None
        self._pubsub = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def channel_for(self, conversation_id: str) -> str:
        return f"{self.prefix}:{conversation_id}"

    async def start(self) -> None:
        self._redis = redis.from_url(self.url, decode_responses=True)
        self._pubsub = self._redis.pubsub()
        await self._pubsub.psubscribe(f"{self.prefix}:*")
        self._task = asyncio.create_task(self._listen())
        logger.info(f"Realtime relay listening on {self.prefix}:*")

    async def publish(self, event: ChangeEvent) -> None:
        await self._redis.publish(self.channel_for(event.conversation_id), json.dumps(event.to_dict()))

    async def publish_revoke(self, conversation_id: str, user_id: str) -> None:
        payload = {"type": REVOKE_MESSAGE_TYPE, "conversation_id": conversation_id, "user_id": user_id}
        await self._redis.publish(self.channel_for(conversation_id), json.dumps(payload))

    async def _listen(self) -> None:
        async for message in self._pubsub.listen():
            if message.get("type") != "pmessage":
                continue
            try:
                data = json.loads(message["data"])
                if data.get("type") == REVOKE_MESSAGE_TYPE:
                    await self.manager.revoke(str(data["conversation_id"]), str(data["user_id"]))
                    continue
                event = ChangeEvent.from_dict(data)
            except (ValueError, KeyError, AttributeError) as e:
                logger.warning(f"Ignoring malformed realtime payload: {e}")
                continue
            await self.manager.deliver(event)

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None
        if self._pubsub is not None:
            await self._pubsub.punsubscribe()
            await self._pubsub.close()
            self._pubsub = None
        if self._redis is not None:
            await self._redis.close()
            self._redis = None
        logger.info("Realtime relay stopped")

# Singleton instance
channel_manager = ConversationChannelManager()
