"""
Conversation Service

Conversations, their participants and messages. Participants see a
conversation; admins may see and manage any of them. Every committed message
change is published to the realtime channel for that conversation.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import and_, exists, func, select

from prefect_portal.core.change_events import ChangeEvent, ChangeType
from prefect_portal.core.logging_config import logger
from prefect_portal.core.result import ErrorKind, Result
from prefect_portal.core.types import utcnow
from prefect_portal.models.conversation import (
    Conversation,
    ConversationMessage,
    ConversationParticipant,
    ConversationType,
)
from prefect_portal.modules.access import policies
from prefect_portal.services.realtime import ConversationChannelManager, channel_manager
from prefect_portal.services.resource_service import ListFilter, ResourceService

DEFAULT_MESSAGE_LIMIT = 50


@dataclass
class ConversationSummary:
    conversation: Conversation
    latest_message: Optional[ConversationMessage] = None


def message_record(message: ConversationMessage) -> Dict[str, Any]:
    """JSON-safe row image used in realtime envelopes"""
    def iso(value):
        return value.isoformat() if value else None

    return {
        "id": str(message.id),
        "conversation_id": str(message.conversation_id),
        "sender_id": str(message.sender_id),
        "message": message.message,
        "attachment_url": message.attachment_url,
        "is_edited": bool(message.is_edited),
        "edited_at": iso(message.edited_at),
        "created_at": iso(message.created_at),
        "updated_at": iso(message.updated_at),
    }


def participant_record(participant: ConversationParticipant) -> Dict[str, Any]:
    """Detached copy of a membership row, safe to return after the row is deleted"""
    return {
        "id": str(participant.id),
        "conversation_id": str(participant.conversation_id),
        "participant_id": str(participant.participant_id),
        "joined_at": participant.joined_at,
        "last_read_at": participant.last_read_at,
    }


class ConversationService(ResourceService[Conversation]):
    model = Conversation
    policy = policies.CONVERSATIONS
    resource_name = "Conversation"
    date_field = "created_at"
    status_field = "type"
    status_enum = ConversationType
    search_fields = ("title", "description")
    ordering = (("updated_at", True),)
    required_fields = {"title": "Conversation title is required"}

    def __init__(self, db, session, channels: Optional[ConversationChannelManager] = None):
        super().__init__(db, session)
        self.channels = channels or channel_manager

    # ==================== Visibility ====================

    def participant_clause(self, user_id: Optional[str] = None):
        return exists().where(
            and_(
                ConversationParticipant.conversation_id == Conversation.id,
                ConversationParticipant.participant_id == (user_id or self.session.user_id),
            )
        )

    def visible_select(self):
        # Lists and searches are always "my conversations", admins included
        return select(Conversation).where(self.participant_clause())

    def is_participant(self, conversation: Conversation, user_id: Optional[str] = None) -> bool:
        user_id = (user_id or self.session.user_id).lower()
        return any(str(pid).lower() == user_id for pid in conversation.participant_ids)

    async def load(self, record_id: str) -> Optional[Conversation]:
        conversation = await self.db.get(Conversation, record_id)
        if conversation is None:
            return None
        if self.session.is_admin or self.is_participant(conversation):
            return conversation
        return None

    async def channel_key(self, conversation_id: str) -> Optional[str]:
        """
        Realtime channel id for a conversation the caller takes part in, else None.

        Events are published under the stored id, so a path id in another
        casing still lands on the same channel.
        """
        conversation = await self.load(conversation_id)
        if conversation is None or not self.is_participant(conversation):
            return None
        return str(conversation.id)

    async def _participant_row(self, conversation_id: str, user_id: str) -> Optional[ConversationParticipant]:
        stmt = select(ConversationParticipant).where(
            ConversationParticipant.conversation_id == conversation_id,
            ConversationParticipant.participant_id == user_id,
        )
        return (await self.db.execute(stmt)).scalars().first()

    # ==================== Conversations ====================

    async def list_mine(self, limit: Optional[int] = None) -> Result:
        """My conversations, newest activity first, each with its latest message"""
        async def op() -> Result:
            stmt = self.visible_select().order_by(*self.order_clauses())
            if limit:
                stmt = stmt.limit(limit)
            conversations = list((await self.db.execute(stmt)).scalars().all())
            latest = await self._latest_messages([c.id for c in conversations])
            return Result.success([
                ConversationSummary(conversation=c, latest_message=latest.get(str(c.id)))
                for c in conversations
            ])

        return await self._run("list", op)

    async def _latest_messages(self, conversation_ids: List[str]) -> Dict[str, ConversationMessage]:
        if not conversation_ids:
            return {}
        newest = (
            select(ConversationMessage.conversation_id, func.max(ConversationMessage.created_at).label("newest"))
            .where(ConversationMessage.conversation_id.in_(conversation_ids))
            .group_by(ConversationMessage.conversation_id)
            .subquery()
        )
        stmt = (
            select(ConversationMessage)
            .join(newest, and_(
                ConversationMessage.conversation_id == newest.c.conversation_id,
                ConversationMessage.created_at == newest.c.newest,
            ))
            .order_by(ConversationMessage.id.desc())
        )
        latest: Dict[str, ConversationMessage] = {}
        for message in (await self.db.execute(stmt)).scalars().all():
            latest.setdefault(str(message.conversation_id), message)
        return latest

    async def create(self, payload: Dict[str, Any], participant_ids: Iterable[str] = ()) -> Result:
        """New conversation; the creator always joins it"""
        data = self.clean_payload(payload)
        invalid = self.check_required(data) or self.validate(data, None)
        if invalid:
            return invalid
        data["created_by"] = self.session.user_id
        if not self.policy.can_create(data, self.session):
            return self.forbidden("create")
        members = list(dict.fromkeys([self.session.user_id, *[str(pid).lower() for pid in participant_ids if pid]]))

        async def op() -> Result:
            conversation = Conversation(**data)
            conversation.participants = [ConversationParticipant(participant_id=pid) for pid in members]
            self.db.add(conversation)
            await self._commit(conversation)
            return Result.success(conversation)

        return await self._run("create", op)

    async def search(self, term: str, limit: Optional[int] = None) -> Result:
        if not term or not term.strip():
            return await self.list(ListFilter(limit=limit))
        return await super().search(term, limit)

    async def find_or_create_direct(self, other_user_id: str, conversation_type: ConversationType) -> Result:
        """Reuse a conversation of this type holding both users, else start one"""
        conversation_type = ConversationType(conversation_type)

        async def op() -> Result:
            stmt = (
                select(Conversation)
                .where(Conversation.type == conversation_type)
                .where(self.participant_clause())
                .where(self.participant_clause(other_user_id))
                .order_by(Conversation.updated_at.desc(), Conversation.id.asc())
            )
            existing = (await self.db.execute(stmt.limit(1))).scalars().first()
            if existing is not None:
                return Result.success(existing)
            conversation = Conversation(
                title=f"Conversation - {conversation_type.value}",
                type=conversation_type,
                created_by=self.session.user_id,
            )
            conversation.participants = [
                ConversationParticipant(participant_id=pid)
                for pid in dict.fromkeys([self.session.user_id, str(other_user_id)])
            ]
            self.db.add(conversation)
            await self._commit(conversation)
            return Result.success(conversation)

        return await self._run("direct", op, other_user_id)

    # ==================== Participants ====================

    async def participants(self, conversation_id: str) -> Result:
        async def op() -> Result:
            conversation = await self.load(conversation_id)
            if conversation is None:
                return self.not_found(conversation_id)
            ordered = sorted(conversation.participants, key=lambda p: (p.joined_at, str(p.id)))
            return Result.success(ordered)

        return await self._run("participants", op, conversation_id)

    async def add_participant(self, conversation_id: str, user_id: str) -> Result:
        async def op() -> Result:
            conversation = await self.load(conversation_id)
            if conversation is None:
                return self.not_found(conversation_id)
            if self.is_participant(conversation, str(user_id)):
                return Result.failure(ErrorKind.CONFLICT, "User is already a participant",
                                      field="participant_id", resource=self.resource_name)
            participant = ConversationParticipant(conversation_id=conversation.id, participant_id=str(user_id))
            self.db.add(participant)
            conversation.updated_at = utcnow()
            await self._commit(participant)
            await self.db.refresh(conversation)
            return Result.success(participant)

        return await self._run("add_participant", op, conversation_id)

    async def remove_participant(self, conversation_id: str, user_id: str) -> Result:
        async def op() -> Result:
            conversation = await self.load(conversation_id)
            if conversation is None:
                return self.not_found(conversation_id)
            leaving_self = str(user_id).lower() == self.session.user_id.lower()
            is_creator = str(conversation.created_by or "").lower() == self.session.user_id.lower()
            if not (leaving_self or is_creator or self.session.is_admin):
                return self.forbidden("remove participants from")
            participant = await self._participant_row(conversation.id, str(user_id))
            if participant is None:
                return Result.not_found("Participant", user_id)
            removed = participant_record(participant)
            await self.db.delete(participant)
            await self.db.commit()
            # The conversation itself stays, even with no participants left
            await self._revoke(removed["conversation_id"], removed["participant_id"])
            return Result.success(removed)

        return await self._run("remove_participant", op, conversation_id)

    async def mark_read(self, conversation_id: str) -> Result:
        async def op() -> Result:
            participant = await self._participant_row(conversation_id, self.session.user_id)
            if participant is None:
                return self.not_found(conversation_id)
            participant.last_read_at = utcnow()
            await self._commit(participant)
            return Result.success(participant)

        return await self._run("mark_read", op, conversation_id)

    # ==================== Messages ====================

    async def messages(self, conversation_id: str, limit: int = DEFAULT_MESSAGE_LIMIT, offset: int = 0) -> Result:
        """
        One page of messages counted back from the newest (``offset`` skips the
        most recent ones), returned oldest first. Ties on created_at fall back to id.
        """
        async def op() -> Result:
            if await self.load(conversation_id) is None:
                return self.not_found(conversation_id)
            stmt = (
                select(ConversationMessage)
                .where(ConversationMessage.conversation_id == conversation_id)
                .order_by(ConversationMessage.created_at.desc(), ConversationMessage.id.desc())
                .limit(limit)
                .offset(offset)
            )
            page = list((await self.db.execute(stmt)).scalars().all())
            page.reverse()
            return Result.success(page)

        return await self._run("messages", op, conversation_id)

    async def send_message(self, conversation_id: str, text: str, attachment_url: Optional[str] = None) -> Result:
        text = (text or "").strip()
        if not text:
            return Result.invalid("Message cannot be empty", field="message")

        async def op() -> Result:
            conversation = await self.load(conversation_id)
            if conversation is None:
                return self.not_found(conversation_id)
            if not self.is_participant(conversation):
                return self.forbidden("post in")
            message = ConversationMessage(
                conversation_id=conversation.id,
                sender_id=self.session.user_id,
                message=text,
                attachment_url=attachment_url or None,
            )
            self.db.add(message)
            conversation.updated_at = utcnow()
            await self._commit(message)
            await self._publish(ChangeType.INSERT, message)
            return Result.success(message)

        return await self._run("send_message", op, conversation_id)

    async def _load_message(self, message_id: str) -> Optional[ConversationMessage]:
        message = await self.db.get(ConversationMessage, message_id)
        if message is None or await self.load(str(message.conversation_id)) is None:
            return None
        return message

    async def edit_message(self, message_id: str, text: str) -> Result:
        text = (text or "").strip()
        if not text:
            return Result.invalid("Message cannot be empty", field="message")

        async def op() -> Result:
            message = await self._load_message(message_id)
            if message is None:
                return Result.not_found("Message", message_id)
            if str(message.sender_id).lower() != self.session.user_id.lower():
                return self.forbidden("edit")
            now = utcnow()
            message.message = text
            message.is_edited = True
            message.edited_at = now
            message.updated_at = max(now, message.updated_at) if message.updated_at else now
            await self._commit(message)
            await self._publish(ChangeType.UPDATE, message)
            return Result.success(message)

        return await self._run("edit_message", op, message_id)

    async def delete_message(self, message_id: str) -> Result:
        async def op() -> Result:
            message = await self._load_message(message_id)
            if message is None:
                return Result.not_found("Message", message_id)
            is_sender = str(message.sender_id).lower() == self.session.user_id.lower()
            if not (is_sender or self.session.is_admin):
                return self.forbidden("delete")
            record = message_record(message)
            await self.db.delete(message)
            await self.db.commit()
            await self._publish(ChangeType.DELETE, record)
            return Result.success(message)

        return await self._run("delete_message", op, message_id)

    async def _publish(self, change: ChangeType, message: Any) -> None:
        record = message if isinstance(message, dict) else message_record(message)
        event = ChangeEvent(type=change, conversation_id=record["conversation_id"], record=record)
        try:
            await self.channels.publish(event)
        except Exception as e:
            # Row is already committed; never fail the write on a push error
            logger.warning(f"Realtime publish failed for {event.conversation_id}: {e}")

    async def _revoke(self, conversation_id: str, user_id: str) -> None:
        try:
            await self.channels.drop_user(conversation_id, user_id)
        except Exception as e:
            logger.warning(f"Realtime revoke failed for {user_id} on {conversation_id}: {e}")
