"""
Complaints API

Anyone may file a complaint and follow it up with messages; admin and
faculty triage them. Resolving stamps resolved_at, reopening clears it.
"""
from typing import Dict, List

from fastapi import APIRouter, Depends, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.complaint import (
    ComplaintCreate,
    ComplaintMessageCreate,
    ComplaintMessageResponse,
    ComplaintResponse,
    ComplaintStatusUpdate,
    ComplaintUpdate,
)
from prefect_portal.services.complaint_service import ComplaintService
from prefect_portal.services.resource_service import ListFilter

router = APIRouter()
get_service = service_dependency(ComplaintService)


@router.get("/", response_model=List[ComplaintResponse])
async def list_complaints(
    filters: ListFilter = Depends(list_filter),
    service: ComplaintService = Depends(get_service),
):
    return (await service.list(filters)).unwrap()


@router.get("/stats", response_model=Dict[str, int])
async def complaint_stats(service: ComplaintService = Depends(get_service)):
    return (await service.stats()).unwrap()


@router.get("/{complaint_id}", response_model=ComplaintResponse)
async def get_complaint(complaint_id: str, service: ComplaintService = Depends(get_service)):
    return (await service.get(complaint_id)).unwrap()


@router.post("/", response_model=ComplaintResponse, status_code=status.HTTP_201_CREATED)
async def create_complaint(payload: ComplaintCreate, service: ComplaintService = Depends(get_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/{complaint_id}", response_model=ComplaintResponse)
async def update_complaint(
    complaint_id: str,
    payload: ComplaintUpdate,
    service: ComplaintService = Depends(get_service),
):
    changes, expected = split_update(payload)
    return (await service.update(complaint_id, changes, expected)).unwrap()


@router.patch("/{complaint_id}/status", response_model=ComplaintResponse)
async def change_complaint_status(
    complaint_id: str,
    payload: ComplaintStatusUpdate,
    service: ComplaintService = Depends(get_service),
):
    return (await service.change_status(complaint_id, payload.status)).unwrap()


@router.delete("/{complaint_id}", response_model=ComplaintResponse)
async def delete_complaint(complaint_id: str, service: ComplaintService = Depends(get_service)):
    return (await service.delete(complaint_id)).unwrap()


# ==================== Follow-up messages ====================

@router.get("/{complaint_id}/messages", response_model=List[ComplaintMessageResponse])
async def list_complaint_messages(complaint_id: str, service: ComplaintService = Depends(get_service)):
    return (await service.list_messages(complaint_id)).unwrap()


@router.post(
    "/{complaint_id}/messages",
    response_model=ComplaintMessageResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_complaint_message(
    complaint_id: str,
    payload: ComplaintMessageCreate,
    service: ComplaintService = Depends(get_service),
):
    return (await service.add_message(complaint_id, payload.message)).unwrap()
