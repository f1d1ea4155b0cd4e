"""
Attendance API

Prefects record their own attendance; admin and faculty see everyone's.
One record per prefect per day.
"""
from typing import Dict, List

from fastapi import APIRouter, Depends, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.attendance import (
    AttendanceCreate,
    AttendanceResponse,
    AttendanceStatusUpdate,
    AttendanceUpdate,
)
from prefect_portal.services.attendance_service import AttendanceService
from prefect_portal.services.resource_service import ListFilter

router = APIRouter()
get_service = service_dependency(AttendanceService)


@router.get("/", response_model=List[AttendanceResponse])
async def list_attendance(
    filters: ListFilter = Depends(list_filter),
    service: AttendanceService = Depends(get_service),
):
    return (await service.list(filters)).unwrap()


@router.get("/stats", response_model=Dict[str, int])
async def attendance_stats(service: AttendanceService = Depends(get_service)):
    return (await service.stats()).unwrap()


@router.get("/{record_id}", response_model=AttendanceResponse)
async def get_attendance(record_id: str, service: AttendanceService = Depends(get_service)):
    return (await service.get(record_id)).unwrap()


@router.post("/", response_model=AttendanceResponse, status_code=status.HTTP_201_CREATED)
async def create_attendance(payload: AttendanceCreate, service: AttendanceService = Depends(get_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/{record_id}", response_model=AttendanceResponse)
async def update_attendance(
    record_id: str,
    payload: AttendanceUpdate,
    service: AttendanceService = Depends(get_service),
):
    changes, expected = split_update(payload)
    return (await service.update(record_id, changes, expected)).unwrap()


@router.patch("/{record_id}/status", response_model=AttendanceResponse)
async def change_attendance_status(
    record_id: str,
    payload: AttendanceStatusUpdate,
    service: AttendanceService = Depends(get_service),
):
    return (await service.change_status(record_id, payload.status)).unwrap()


@router.delete("/{record_id}", response_model=AttendanceResponse)
async def delete_attendance(record_id: str, service: AttendanceService = Depends(get_service)):
    return (await service.delete(record_id)).unwrap()
