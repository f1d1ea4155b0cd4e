"""Navigation entries and page variants for the signed-in role set"""
from fastapi import APIRouter, Depends, Query

from prefect_portal.modules.access.role_gate import (
    MANAGEMENT_ROLES,
    can_open,
    page_variant,
    primary_role,
    visible_navigation,
)
from prefect_portal.modules.auth.dependencies import get_portal_session
from prefect_portal.modules.auth.session import PortalSession
from prefect_portal.schemas.common import NavigationResponse

router = APIRouter()


@router.get("/", response_model=NavigationResponse)
async def get_navigation(session: PortalSession = Depends(get_portal_session)):
    return NavigationResponse(
        entries=[entry.to_dict() for entry in visible_navigation(session.roles)],
        primary_role=primary_role(session.roles),
        variants={resource: page_variant(resource, session.roles).value for resource in MANAGEMENT_ROLES},
    )


@router.get("/can-open")
async def check_route(path: str = Query(..., min_length=1), session: PortalSession = Depends(get_portal_session)):
    return {"path": path, "allowed": can_open(path, session.roles)}
