"""
Events API

Everyone can see events; admins manage them and assign prefects.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.event import (
    EventAssign,
    EventAssignmentResponse,
    EventCreate,
    EventResponse,
    EventStats,
    EventUpdate,
)
from prefect_portal.services.event_service import EventAssignmentService, EventService
from prefect_portal.services.resource_service import ListFilter

router = APIRouter()
get_service = service_dependency(EventService)
get_assignment_service = service_dependency(EventAssignmentService)


@router.get("/", response_model=List[EventResponse])
async def list_events(
    filters: ListFilter = Depends(list_filter),
    service: EventService = Depends(get_service),
):
    return (await service.list(filters)).unwrap()


@router.get("/upcoming", response_model=List[EventResponse])
async def upcoming_events(
    limit: Optional[int] = Query(None, ge=1, le=100),
    service: EventService = Depends(get_service),
):
    return (await service.upcoming(limit=limit)).unwrap()


@router.get("/stats", response_model=EventStats)
async def event_stats(service: EventService = Depends(get_service)):
    return (await service.stats()).unwrap()


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: str, service: EventService = Depends(get_service)):
    return (await service.get(event_id)).unwrap()


@router.post("/", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(payload: EventCreate, service: EventService = Depends(get_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/{event_id}", response_model=EventResponse)
async def update_event(event_id: str, payload: EventUpdate, service: EventService = Depends(get_service)):
    changes, expected = split_update(payload)
    return (await service.update(event_id, changes, expected)).unwrap()


@router.delete("/{event_id}", response_model=EventResponse)
async def delete_event(event_id: str, service: EventService = Depends(get_service)):
    return (await service.delete(event_id)).unwrap()


# ==================== Prefect assignments ====================

@router.get("/{event_id}/assignments", response_model=List[EventAssignmentResponse])
async def list_event_assignments(
    event_id: str,
    service: EventAssignmentService = Depends(get_assignment_service),
):
    return (await service.for_event(event_id)).unwrap()


@router.post(
    "/{event_id}/assignments",
    response_model=List[EventAssignmentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def assign_prefects(
    event_id: str,
    payload: EventAssign,
    service: EventAssignmentService = Depends(get_assignment_service),
):
    return (await service.assign_many(event_id, payload.prefect_ids, payload.role_in_event)).unwrap()


@router.delete("/assignments/{assignment_id}", response_model=EventAssignmentResponse)
async def remove_event_assignment(
    assignment_id: str,
    service: EventAssignmentService = Depends(get_assignment_service),
):
    return (await service.delete(assignment_id)).unwrap()
