"""Weekly reports API"""
from typing import List

from fastapi import APIRouter, Depends, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.weekly_report import WeeklyReportCreate, WeeklyReportResponse, WeeklyReportUpdate
from prefect_portal.services.resource_service import ListFilter
from prefect_portal.services.weekly_report_service import WeeklyReportService

router = APIRouter()
get_service = service_dependency(WeeklyReportService)


@router.get("/", response_model=List[WeeklyReportResponse])
async def list_weekly_reports(
    filters: ListFilter = Depends(list_filter),
    service: WeeklyReportService = Depends(get_service),
):
    return (await service.list(filters)).unwrap()


@router.get("/{report_id}", response_model=WeeklyReportResponse)
async def get_weekly_report(report_id: str, service: WeeklyReportService = Depends(get_service)):
    return (await service.get(report_id)).unwrap()


@router.post("/", response_model=WeeklyReportResponse, status_code=status.HTTP_201_CREATED)
async def create_weekly_report(payload: WeeklyReportCreate, service: WeeklyReportService = Depends(get_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/{report_id}", response_model=WeeklyReportResponse)
async def update_weekly_report(
    report_id: str,
    payload: WeeklyReportUpdate,
    service: WeeklyReportService = Depends(get_service),
):
    changes, expected = split_update(payload)
    return (await service.update(report_id, changes, expected)).unwrap()


@router.delete("/{report_id}", response_model=WeeklyReportResponse)
async def delete_weekly_report(report_id: str, service: WeeklyReportService = Depends(get_service)):
    return (await service.delete(report_id)).unwrap()
