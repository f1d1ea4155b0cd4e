"""
Conversation channel and view.

``ConversationChannel`` wraps one websocket subscription to
``/conversations/ws/{id}``. ``ConversationView`` owns at most one channel:
selecting another conversation (or closing the view) tears the old one down.
"""
import asyncio
import json
import logging
from typing import Any, AsyncIterator, Callable, Dict, List, Optional

import websockets
from websockets.exceptions import ConnectionClosed, WebSocketException

from prefect_portal.client.api_client import PortalClient
from prefect_portal.client.message_feed import MessageFeed
from prefect_portal.core.change_events import ChangeEvent, ChangeType
from prefect_portal.core.result import ErrorKind, Result

logger = logging.getLogger("prefect_portal.client")

EVENT_TYPES = {change.value for change in ChangeType}
MESSAGE_PAGE_SIZE = 50


class ConversationChannel:
    """
    Usage:
        async with ConversationChannel(client.websocket_url(conversation_id)) as channel:
            async for event in channel:
                feed.apply(event)
    """

    def __init__(self, url: str, connect: Callable = websockets.connect):
        self.url = url
        self._connect = connect
        self._ws = None

    @property
    def is_open(self) -> bool:
        return self._ws is not None

    async def open(self) -> "ConversationChannel":
        self._ws = await self._connect(self.url, ping_interval=30, ping_timeout=10, close_timeout=5)
        return self

    async def close(self) -> None:
        if self._ws is not None:
            ws, self._ws = self._ws, None
            await ws.close()

    async def __aenter__(self) -> "ConversationChannel":
        return await self.open()

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def ping(self) -> None:
        await self._ws.send(json.dumps({"type": "ping"}))

    async def __aiter__(self) -> AsyncIterator[ChangeEvent]:
        if self._ws is None:
            return
        try:
            async for raw in self._ws:
                try:
                    data = json.loads(raw)
                except ValueError:
                    logger.warning(f"Ignoring non-JSON frame on {self.url}")
                    continue
                if not (isinstance(data, dict) and data.get("type") in EVENT_TYPES):
                    continue
                try:
                    event = ChangeEvent.from_dict(data)
                except (KeyError, ValueError, TypeError) as e:
                    logger.warning(f"Ignoring malformed event on {self.url}: {e!r}")
                    continue
                yield event
        except ConnectionClosed as e:
            logger.info(f"Conversation channel closed: {e}")


class ConversationView:
    """
    The open conversation: its messages, participants and live channel.

    ``channel_factory`` builds the channel for a websocket URL; tests pass a
    fake, real use keeps the default.
    """

    def __init__(self, client: PortalClient, channel_factory: Callable[[str], Any] = ConversationChannel,
                 on_change: Optional[Callable[[ChangeEvent], None]] = None):
        self.client = client
        self.channel_factory = channel_factory
        self.on_change = on_change
        self.conversation_id: Optional[str] = None
        self.feed = MessageFeed()
        self.participants: List[Dict[str, Any]] = []
        self._channel = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_subscribed(self) -> bool:
        return self._channel is not None

    async def select(self, conversation_id: str) -> Result:
        """Make ``conversation_id`` the active conversation"""
        await self.close()
        self.conversation_id = conversation_id
        self.feed = MessageFeed(conversation_id)

        # Subscribe before the snapshot so nothing committed in between is missed
        channel = self.channel_factory(self.client.websocket_url(conversation_id))
        try:
            await channel.open()
        except asyncio.TimeoutError:
            self.conversation_id = None
            return Result.failure(ErrorKind.TIMEOUT, "Timed out opening the conversation channel")
        except (OSError, WebSocketException) as e:
            self.conversation_id = None
            logger.warning(f"Could not open conversation channel {conversation_id}: {e}")
            return Result.failure(ErrorKind.BACKEND, f"Could not open the conversation channel: {e}")
        self._channel = channel

        messages = await self.client.conversation_messages(conversation_id, limit=MESSAGE_PAGE_SIZE)
        if not messages.ok:
            await self.close()
            return messages
        self.feed.load_snapshot(messages.value or [])

        participants = await self.client.conversation_participants(conversation_id)
        self.participants = list(participants.value or []) if participants.ok else []

        self._task = asyncio.create_task(self._pump(channel))
        return messages

    async def _pump(self, channel) -> None:
        async for event in channel:
            if self.feed.apply(event) and self.on_change is not None:
                self.on_change(event)

    async def close(self) -> None:
        """Tear down the channel and background task of the current selection"""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"Conversation channel for {self.conversation_id} stopped with an error: {e!r}")
        channel, self._channel = self._channel, None
        if channel is not None:
            await channel.close()
