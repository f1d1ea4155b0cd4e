"""Gate assistance logs API"""
from typing import List

from fastapi import APIRouter, Depends, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.gate_log import GateLogCreate, GateLogResponse, GateLogStats, GateLogUpdate
from prefect_portal.services.gate_log_service import GateLogService
from prefect_portal.services.resource_service import ListFilter

router = APIRouter()
get_service = service_dependency(GateLogService)


@router.get("/", response_model=List[GateLogResponse])
async def list_gate_logs(
    filters: ListFilter = Depends(list_filter),
    service: GateLogService = Depends(get_service),
):
    return (await service.list(filters)).unwrap()


@router.get("/stats", response_model=GateLogStats)
async def gate_log_stats(service: GateLogService = Depends(get_service)):
    return (await service.stats()).unwrap()


@router.get("/{log_id}", response_model=GateLogResponse)
async def get_gate_log(log_id: str, service: GateLogService = Depends(get_service)):
    return (await service.get(log_id)).unwrap()


@router.post("/", response_model=GateLogResponse, status_code=status.HTTP_201_CREATED)
async def create_gate_log(payload: GateLogCreate, service: GateLogService = Depends(get_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/{log_id}", response_model=GateLogResponse)
async def update_gate_log(log_id: str, payload: GateLogUpdate, service: GateLogService = Depends(get_service)):
    changes, expected = split_update(payload)
    return (await service.update(log_id, changes, expected)).unwrap()


@router.delete("/{log_id}", response_model=GateLogResponse)
async def delete_gate_log(log_id: str, service: GateLogService = Depends(get_service)):
    return (await service.delete(log_id)).unwrap()
