"""
Recruitment API

Students apply once per academic year; admins review applications.
Approving an application grants the prefect role.
"""
from typing import Dict, List

from fastapi import APIRouter, Depends, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.recruitment import (
    ApplicationCreate,
    ApplicationResponse,
    ApplicationReview,
    ApplicationUpdate,
)
from prefect_portal.services.recruitment_service import RecruitmentService
from prefect_portal.services.resource_service import ListFilter

router = APIRouter()
get_service = service_dependency(RecruitmentService)


@router.get("/applications", response_model=List[ApplicationResponse])
async def list_applications(
    filters: ListFilter = Depends(list_filter),
    service: RecruitmentService = Depends(get_service),
):
    return (await service.list(filters)).unwrap()


@router.get("/applications/stats", response_model=Dict[str, int])
async def application_stats(service: RecruitmentService = Depends(get_service)):
    return (await service.stats()).unwrap()


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
async def get_application(application_id: str, service: RecruitmentService = Depends(get_service)):
    return (await service.get(application_id)).unwrap()


@router.post("/applications", response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def submit_application(payload: ApplicationCreate, service: RecruitmentService = Depends(get_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/applications/{application_id}", response_model=ApplicationResponse)
async def update_application(
    application_id: str,
    payload: ApplicationUpdate,
    service: RecruitmentService = Depends(get_service),
):
    changes, expected = split_update(payload)
    return (await service.update(application_id, changes, expected)).unwrap()


@router.post("/applications/{application_id}/review", response_model=ApplicationResponse)
async def review_application(
    application_id: str,
    payload: ApplicationReview,
    service: RecruitmentService = Depends(get_service),
):
    return (await service.review(application_id, payload.status, payload.review_notes)).unwrap()


@router.delete("/applications/{application_id}", response_model=ApplicationResponse)
async def delete_application(application_id: str, service: RecruitmentService = Depends(get_service)):
    return (await service.delete(application_id)).unwrap()
