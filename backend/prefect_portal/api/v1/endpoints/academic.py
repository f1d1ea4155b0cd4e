"""Reference data: academic years and departments"""
from typing import List

from fastapi import APIRouter, Depends, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.academic import (
    AcademicYearCreate,
    AcademicYearResponse,
    AcademicYearUpdate,
    DepartmentCreate,
    DepartmentResponse,
    DepartmentUpdate,
)
from prefect_portal.services.academic_service import AcademicYearService, DepartmentService
from prefect_portal.services.resource_service import ListFilter

router = APIRouter()
get_year_service = service_dependency(AcademicYearService)
get_department_service = service_dependency(DepartmentService)


# ==================== Academic years ====================

@router.get("/academic-years", response_model=List[AcademicYearResponse])
async def list_academic_years(service: AcademicYearService = Depends(get_year_service)):
    return (await service.list()).unwrap()


@router.get("/academic-years/current", response_model=AcademicYearResponse)
async def current_academic_year(service: AcademicYearService = Depends(get_year_service)):
    return (await service.current()).unwrap()


@router.post("/academic-years", response_model=AcademicYearResponse, status_code=status.HTTP_201_CREATED)
async def create_academic_year(payload: AcademicYearCreate, service: AcademicYearService = Depends(get_year_service)):
    return (await service.create(payload.model_dump())).unwrap()


@router.patch("/academic-years/{year_id}", response_model=AcademicYearResponse)
async def update_academic_year(
    year_id: str,
    payload: AcademicYearUpdate,
    service: AcademicYearService = Depends(get_year_service),
):
    changes, expected = split_update(payload)
    return (await service.update(year_id, changes, expected)).unwrap()


@router.delete("/academic-years/{year_id}", response_model=AcademicYearResponse)
async def delete_academic_year(year_id: str, service: AcademicYearService = Depends(get_year_service)):
    return (await service.delete(year_id)).unwrap()


# ==================== Departments ====================

@router.get("/departments", response_model=List[DepartmentResponse])
async def list_departments(
    filters: ListFilter = Depends(list_filter),
    service: DepartmentService = Depends(get_department_service),
):
    return (await service.list(filters)).unwrap()


@router.post("/departments", response_model=DepartmentResponse, status_code=status.HTTP_201_CREATED)
async def create_department(payload: DepartmentCreate, service: DepartmentService = Depends(get_department_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/departments/{department_id}", response_model=DepartmentResponse)
async def update_department(
    department_id: str,
    payload: DepartmentUpdate,
    service: DepartmentService = Depends(get_department_service),
):
    changes, expected = split_update(payload)
    return (await service.update(department_id, changes, expected)).unwrap()


@router.delete("/departments/{department_id}", response_model=DepartmentResponse)
async def delete_department(department_id: str, service: DepartmentService = Depends(get_department_service)):
    return (await service.delete(department_id)).unwrap()
