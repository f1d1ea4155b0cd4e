"""Performance evaluations API (admin and faculty evaluate prefects)"""
from typing import List

from fastapi import APIRouter, Depends, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.evaluation import (
    EvaluationCreate,
    EvaluationResponse,
    EvaluationStats,
    EvaluationUpdate,
)
from prefect_portal.services.evaluation_service import EvaluationService
from prefect_portal.services.resource_service import ListFilter

router = APIRouter()
get_service = service_dependency(EvaluationService)


@router.get("/", response_model=List[EvaluationResponse])
async def list_evaluations(
    filters: ListFilter = Depends(list_filter),
    service: EvaluationService = Depends(get_service),
):
    return (await service.list(filters)).unwrap()


@router.get("/stats", response_model=EvaluationStats)
async def evaluation_stats(service: EvaluationService = Depends(get_service)):
    return (await service.stats()).unwrap()


@router.get("/prefect/{prefect_id}", response_model=List[EvaluationResponse])
async def evaluations_for_prefect(prefect_id: str, service: EvaluationService = Depends(get_service)):
    return (await service.for_prefect(prefect_id)).unwrap()


@router.get("/{evaluation_id}", response_model=EvaluationResponse)
async def get_evaluation(evaluation_id: str, service: EvaluationService = Depends(get_service)):
    return (await service.get(evaluation_id)).unwrap()


@router.post("/", response_model=EvaluationResponse, status_code=status.HTTP_201_CREATED)
async def create_evaluation(payload: EvaluationCreate, service: EvaluationService = Depends(get_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/{evaluation_id}", response_model=EvaluationResponse)
async def update_evaluation(
    evaluation_id: str,
    payload: EvaluationUpdate,
    service: EvaluationService = Depends(get_service),
):
    changes, expected = split_update(payload)
    return (await service.update(evaluation_id, changes, expected)).unwrap()


@router.delete("/{evaluation_id}", response_model=EvaluationResponse)
async def delete_evaluation(evaluation_id: str, service: EvaluationService = Depends(get_service)):
    return (await service.delete(evaluation_id)).unwrap()
