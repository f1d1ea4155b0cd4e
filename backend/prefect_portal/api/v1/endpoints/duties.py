"""
Duty Assignments API

Admins assign duties to one or more prefects; the assignee may only move
the status and file reports against the duty.
"""
from typing import Dict, List

from fastapi import APIRouter, Depends, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.duty import (
    DutyCreate,
    DutyReportCreate,
    DutyReportResponse,
    DutyResponse,
    DutyStatusUpdate,
    DutyUpdate,
)
from prefect_portal.services.duty_service import DutyReportService, DutyService
from prefect_portal.services.resource_service import ListFilter

router = APIRouter()
get_service = service_dependency(DutyService)
get_report_service = service_dependency(DutyReportService)


@router.get("/", response_model=List[DutyResponse])
async def list_duties(
    filters: ListFilter = Depends(list_filter),
    service: DutyService = Depends(get_service),
):
    return (await service.list(filters)).unwrap()


@router.get("/stats", response_model=Dict[str, int])
async def duty_stats(service: DutyService = Depends(get_service)):
    return (await service.stats()).unwrap()


@router.get("/{duty_id}", response_model=DutyResponse)
async def get_duty(duty_id: str, service: DutyService = Depends(get_service)):
    return (await service.get(duty_id)).unwrap()


@router.post("/", response_model=List[DutyResponse], status_code=status.HTTP_201_CREATED)
async def create_duties(payload: DutyCreate, service: DutyService = Depends(get_service)):
    """One assignment per prefect in ``prefect_ids``"""
    data = payload.model_dump(exclude_none=True, exclude={"prefect_ids"})
    return (await service.create_many(data, payload.prefect_ids)).unwrap()


@router.patch("/{duty_id}", response_model=DutyResponse)
async def update_duty(duty_id: str, payload: DutyUpdate, service: DutyService = Depends(get_service)):
    changes, expected = split_update(payload)
    return (await service.update(duty_id, changes, expected)).unwrap()


@router.patch("/{duty_id}/status", response_model=DutyResponse)
async def change_duty_status(
    duty_id: str,
    payload: DutyStatusUpdate,
    service: DutyService = Depends(get_service),
):
    return (await service.change_status(duty_id, payload.status)).unwrap()


@router.delete("/{duty_id}", response_model=DutyResponse)
async def delete_duty(duty_id: str, service: DutyService = Depends(get_service)):
    return (await service.delete(duty_id)).unwrap()


# ==================== Duty reports ====================

@router.get("/{duty_id}/reports", response_model=List[DutyReportResponse])
async def list_duty_reports(duty_id: str, service: DutyReportService = Depends(get_report_service)):
    return (await service.for_assignment(duty_id)).unwrap()


@router.post("/{duty_id}/reports", response_model=DutyReportResponse, status_code=status.HTTP_201_CREATED)
async def file_duty_report(
    duty_id: str,
    payload: DutyReportCreate,
    service: DutyReportService = Depends(get_report_service),
):
    return (await service.create({**payload.model_dump(exclude_none=True), "assignment_id": duty_id})).unwrap()
