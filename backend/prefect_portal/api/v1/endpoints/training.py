"""
Training API

Categories and materials. Non-admins only see published materials.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status

from prefect_portal.api.deps import list_filter, service_dependency, split_update
from prefect_portal.schemas.training import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    MaterialCreate,
    MaterialResponse,
    MaterialStats,
    MaterialUpdate,
)
from prefect_portal.services.resource_service import ListFilter
from prefect_portal.services.training_service import TrainingCategoryService, TrainingMaterialService

router = APIRouter()
get_category_service = service_dependency(TrainingCategoryService)
get_material_service = service_dependency(TrainingMaterialService)


# ==================== Categories ====================

@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(service: TrainingCategoryService = Depends(get_category_service)):
    rows = (await service.with_material_counts()).unwrap()
    return [
        CategoryResponse.model_validate(category).model_copy(update={"material_count": count})
        for category, count in rows
    ]


@router.get("/categories/{category_id}", response_model=CategoryResponse)
async def get_category(category_id: str, service: TrainingCategoryService = Depends(get_category_service)):
    return (await service.get(category_id)).unwrap()


@router.post("/categories", response_model=CategoryResponse, status_code=status.HTTP_201_CREATED)
async def create_category(payload: CategoryCreate, service: TrainingCategoryService = Depends(get_category_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/categories/{category_id}", response_model=CategoryResponse)
async def update_category(
    category_id: str,
    payload: CategoryUpdate,
    service: TrainingCategoryService = Depends(get_category_service),
):
    changes, expected = split_update(payload)
    return (await service.update(category_id, changes, expected)).unwrap()


@router.delete("/categories/{category_id}", response_model=CategoryResponse)
async def delete_category(category_id: str, service: TrainingCategoryService = Depends(get_category_service)):
    return (await service.delete(category_id)).unwrap()


# ==================== Materials ====================

@router.get("/materials", response_model=List[MaterialResponse])
async def list_materials(
    filters: ListFilter = Depends(list_filter),
    category_id: Optional[str] = Query(None),
    service: TrainingMaterialService = Depends(get_material_service),
):
    if category_id:
        return (await service.in_category(category_id)).unwrap()
    return (await service.list(filters)).unwrap()


@router.get("/materials/stats", response_model=MaterialStats)
async def material_stats(service: TrainingMaterialService = Depends(get_material_service)):
    return (await service.stats()).unwrap()


@router.get("/materials/{material_id}", response_model=MaterialResponse)
async def get_material(material_id: str, service: TrainingMaterialService = Depends(get_material_service)):
    return (await service.get(material_id)).unwrap()


@router.post("/materials", response_model=MaterialResponse, status_code=status.HTTP_201_CREATED)
async def create_material(payload: MaterialCreate, service: TrainingMaterialService = Depends(get_material_service)):
    return (await service.create(payload.model_dump(exclude_none=True))).unwrap()


@router.patch("/materials/{material_id}", response_model=MaterialResponse)
async def update_material(
    material_id: str,
    payload: MaterialUpdate,
    service: TrainingMaterialService = Depends(get_material_service),
):
    changes, expected = split_update(payload)
    return (await service.update(material_id, changes, expected)).unwrap()


@router.post("/materials/{material_id}/publish", response_model=MaterialResponse)
async def publish_material(material_id: str, service: TrainingMaterialService = Depends(get_material_service)):
    return (await service.publish(material_id)).unwrap()


@router.post("/materials/{material_id}/unpublish", response_model=MaterialResponse)
async def unpublish_material(material_id: str, service: TrainingMaterialService = Depends(get_material_service)):
    return (await service.unpublish(material_id)).unwrap()


@router.delete("/materials/{material_id}", response_model=MaterialResponse)
async def delete_material(material_id: str, service: TrainingMaterialService = Depends(get_material_service)):
    return (await service.delete(material_id)).unwrap()
