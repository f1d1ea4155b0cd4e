"""
Conversations API

REST endpoints for conversations, participants and messages, plus a
websocket that streams committed message changes.

Connection URL: WS /api/v1/conversations/ws/{conversation_id}?token=<jwt>
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, WebSocket, WebSocketDisconnect, status

from prefect_portal.api.deps import service_dependency, split_update
from prefect_portal.core.database import session_scope
from prefect_portal.core.exceptions import PortalError
from prefect_portal.core.logging_config import logger
from prefect_portal.modules.auth.dependencies import user_from_token
from prefect_portal.modules.auth.session import PortalSession
from prefect_portal.schemas.conversation import (
    ConversationCreate,
    ConversationResponse,
    ConversationSummaryResponse,
    ConversationUpdate,
    DirectConversationRequest,
    MessageCreate,
    MessageResponse,
    MessageUpdate,
    ParticipantAdd,
    ParticipantResponse,
)
from prefect_portal.services.conversation_service import ConversationService, ConversationSummary
from prefect_portal.services.realtime import channel_manager

router = APIRouter()
get_service = service_dependency(ConversationService)


def summary_response(summary: ConversationSummary) -> ConversationSummaryResponse:
    response = ConversationSummaryResponse.model_validate(summary.conversation)
    if summary.latest_message is not None:
        response.latest_message = MessageResponse.model_validate(summary.latest_message)
    return response


# ==================== Conversations ====================

@router.get("/", response_model=List[ConversationSummaryResponse])
async def list_conversations(
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: ConversationService = Depends(get_service),
):
    """My conversations, most recently active first"""
    summaries = (await service.list_mine(limit)).unwrap()
    return [summary_response(summary) for summary in summaries]


@router.get("/search", response_model=List[ConversationResponse])
async def search_conversations(
    q: str = Query("", max_length=200),
    limit: Optional[int] = Query(None, ge=1, le=500),
    service: ConversationService = Depends(get_service),
):
    return (await service.search(q, limit)).unwrap()


@router.post("/", response_model=ConversationResponse, status_code=status.HTTP_201_CREATED)
async def create_conversation(payload: ConversationCreate, service: ConversationService = Depends(get_service)):
    data = payload.model_dump(exclude_none=True, exclude={"participant_ids"})
    return (await service.create(data, payload.participant_ids)).unwrap()


@router.post("/direct", response_model=ConversationResponse)
async def find_or_create_direct(
    payload: DirectConversationRequest,
    service: ConversationService = Depends(get_service),
):
    return (await service.find_or_create_direct(payload.other_user_id, payload.type)).unwrap()


@router.get("/{conversation_id}", response_model=ConversationResponse)
async def get_conversation(conversation_id: str, service: ConversationService = Depends(get_service)):
    return (await service.get(conversation_id)).unwrap()


@router.patch("/{conversation_id}", response_model=ConversationResponse)
async def update_conversation(
    conversation_id: str,
    payload: ConversationUpdate,
    service: ConversationService = Depends(get_service),
):
    changes, expected = split_update(payload)
    return (await service.update(conversation_id, changes, expected)).unwrap()


@router.delete("/{conversation_id}", response_model=ConversationResponse)
async def delete_conversation(conversation_id: str, service: ConversationService = Depends(get_service)):
    return (await service.delete(conversation_id)).unwrap()


# ==================== Participants ====================

@router.get("/{conversation_id}/participants", response_model=List[ParticipantResponse])
async def list_participants(conversation_id: str, service: ConversationService = Depends(get_service)):
    return (await service.participants(conversation_id)).unwrap()


@router.post(
    "/{conversation_id}/participants",
    response_model=ParticipantResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_participant(
    conversation_id: str,
    payload: ParticipantAdd,
    service: ConversationService = Depends(get_service),
):
    return (await service.add_participant(conversation_id, payload.participant_id)).unwrap()


@router.delete("/{conversation_id}/participants/{user_id}", response_model=ParticipantResponse)
async def remove_participant(
    conversation_id: str,
    user_id: str,
    service: ConversationService = Depends(get_service),
):
    return (await service.remove_participant(conversation_id, user_id)).unwrap()


@router.post("/{conversation_id}/read", response_model=ParticipantResponse)
async def mark_read(conversation_id: str, service: ConversationService = Depends(get_service)):
    return (await service.mark_read(conversation_id)).unwrap()


# ==================== Messages ====================

@router.get("/{conversation_id}/messages", response_model=List[MessageResponse])
async def list_messages(
    conversation_id: str,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    service: ConversationService = Depends(get_service),
):
    return (await service.messages(conversation_id, limit, offset)).unwrap()


@router.post(
    "/{conversation_id}/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def send_message(
    conversation_id: str,
    payload: MessageCreate,
    service: ConversationService = Depends(get_service),
):
    return (await service.send_message(conversation_id, payload.message, payload.attachment_url)).unwrap()


@router.patch("/messages/{message_id}", response_model=MessageResponse)
async def edit_message(message_id: str, payload: MessageUpdate, service: ConversationService = Depends(get_service)):
    return (await service.edit_message(message_id, payload.message)).unwrap()


@router.delete("/messages/{message_id}", response_model=MessageResponse)
async def delete_message(message_id: str, service: ConversationService = Depends(get_service)):
    return (await service.delete_message(message_id)).unwrap()


# ==================== Realtime ====================

@router.websocket("/ws/{conversation_id}")
async def conversation_websocket(
    websocket: WebSocket,
    conversation_id: str,
    token: str = Query(...),
):
    """
    Stream message changes for one conversation.

    Server events: ``{"type": "insert" | "update" | "delete", "record": {...}, ...}``
    Client events: ``{"type": "ping"}`` answered with ``{"type": "pong"}``
    """
    async with session_scope() as db:
        try:
            user = await user_from_token(token, db)
        except PortalError:
            await websocket.close(code=4001, reason="Invalid or expired token")
            return

        channel_key = await ConversationService(db, PortalSession.for_user(user)).channel_key(conversation_id)
        if channel_key is None:
            await websocket.close(code=4003, reason="Not a participant of this conversation")
            return
        user_id = str(user.id)

    await channel_manager.connect(websocket, channel_key, user_id)
    try:
        while True:
            data = await websocket.receive_json()
            if isinstance(data, dict) and data.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    except WebSocketDisconnect:
        pass
    except ValueError as e:
        logger.warning(f"Malformed realtime frame from {user_id} on {channel_key}: {e}")
    finally:
        await channel_manager.disconnect(websocket, channel_key)
