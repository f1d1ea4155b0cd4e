"""Incident reports API"""
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.incident import IncidentCreate, IncidentResponse, IncidentUpdate
from prefect_portal.services.incident_service import IncidentService
from prefect_portal.services.resource_service import ListFilter

router = APIRouter()
get_service = service_dependency(IncidentService)


@router.get("/", response_model=List[IncidentResponse])
async def list_incidents(
    filters: ListFilter = Depends(list_filter),
    resolved: Optional[bool] = Query(None),
    service: IncidentService = Depends(get_service),
):
    if resolved is None:
        return (await service.list(filters)).unwrap()
    return (await service.list_by_resolved(resolved, filters)).unwrap()


@router.get("/stats", response_model=Dict[str, int])
async def incident_stats(service: IncidentService = Depends(get_service)):
    return (await service.stats()).unwrap()


@router.get("/{incident_id}", response_model=IncidentResponse)
async def get_incident(incident_id: str, service: IncidentService = Depends(get_service)):
    return (await service.get(incident_id)).unwrap()


@router.post("/", response_model=IncidentResponse, status_code=status.HTTP_201_CREATED)
async def create_incident(payload: IncidentCreate, service: IncidentService = Depends(get_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/{incident_id}", response_model=IncidentResponse)
async def update_incident(
    incident_id: str,
    payload: IncidentUpdate,
    service: IncidentService = Depends(get_service),
):
    changes, expected = split_update(payload)
    return (await service.update(incident_id, changes, expected)).unwrap()


@router.post("/{incident_id}/resolve", response_model=IncidentResponse)
async def resolve_incident(incident_id: str, service: IncidentService = Depends(get_service)):
    return (await service.resolve(incident_id)).unwrap()


@router.post("/{incident_id}/unresolve", response_model=IncidentResponse)
async def unresolve_incident(incident_id: str, service: IncidentService = Depends(get_service)):
    return (await service.unresolve(incident_id)).unwrap()


@router.delete("/{incident_id}", response_model=IncidentResponse)
async def delete_incident(incident_id: str, service: IncidentService = Depends(get_service)):
    return (await service.delete(incident_id)).unwrap()
