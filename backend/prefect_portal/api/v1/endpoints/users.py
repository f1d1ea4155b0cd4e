"""
User Management API (admin only)

Directory listing with a role filter, the prefect picker, and role grants.
"""
from typing import List

from fastapi import APIRouter, Depends

from prefect_portal.api.deps import list_filter, service_dependency
from prefect_portal.models.user import AppRole
from prefect_portal.modules.access.role_gate import ADMIN
from prefect_portal.modules.auth.dependencies import require_roles
from prefect_portal.schemas.profile import ProfileSummary, RoleChange, UserAdminResponse
from prefect_portal.services.resource_service import ListFilter
from prefect_portal.services.user_service import UserService

router = APIRouter()
get_service = service_dependency(UserService)


@router.get("/", response_model=List[UserAdminResponse], dependencies=[Depends(require_roles(ADMIN))])
async def list_users(
    filters: ListFilter = Depends(list_filter),
    service: UserService = Depends(get_service),
):
    """``status`` filters by role, e.g. ``?status=prefect``"""
    return (await service.list(filters)).unwrap()


@router.get("/prefects", response_model=List[ProfileSummary])
async def list_prefects(service: UserService = Depends(get_service)):
    return (await service.prefects()).unwrap()


@router.get("/{user_id}", response_model=UserAdminResponse, dependencies=[Depends(require_roles(ADMIN))])
async def get_user(user_id: str, service: UserService = Depends(get_service)):
    return (await service.get(user_id)).unwrap()


@router.post("/{user_id}/roles", response_model=UserAdminResponse)
async def grant_role(user_id: str, payload: RoleChange, service: UserService = Depends(get_service)):
    return (await service.grant_role(user_id, payload.role)).unwrap()


@router.delete("/{user_id}/roles/{role}", response_model=UserAdminResponse)
async def revoke_role(user_id: str, role: AppRole, service: UserService = Depends(get_service)):
    return (await service.revoke_role(user_id, role)).unwrap()
