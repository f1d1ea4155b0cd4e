"""Request-scoped helpers shared by the v1 endpoints"""
from datetime import date
from typing import Any, Callable, Dict, Optional, Tuple, Type

from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from prefect_portal.core.database import get_db
from prefect_portal.modules.auth.dependencies import get_portal_session
from prefect_portal.modules.auth.session import PortalSession
from prefect_portal.schemas.common import UpdateBase
from prefect_portal.services.resource_service import ListFilter


def list_filter(
    status: Optional[str] = Query(None, description="Status (or severity / type / role) to match"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    search: Optional[str] = Query(None, max_length=200),
    owner_id: Optional[str] = Query(None),
    limit: Optional[int] = Query(None, ge=1, le=500),
    offset: int = Query(0, ge=0),
) -> ListFilter:
    return ListFilter(
        owner_id=owner_id,
        status=status,
        start_date=start_date,
        end_date=end_date,
        search=search,
        limit=limit,
        offset=offset,
    )


def service_dependency(service_cls: Type) -> Callable:
    """
    Dependency building ``service_cls(db, session)`` for the current request.

    Usage:
        @router.get("/")
        async def list_items(service: ComplaintService = Depends(service_dependency(ComplaintService))):
            ...
    """
    async def dependency(
        db: AsyncSession = Depends(get_db),
        session: PortalSession = Depends(get_portal_session),
    ):
        return service_cls(db, session)

    return dependency


def split_update(payload: UpdateBase) -> Tuple[Dict[str, Any], Any]:
    """Provided fields and the optional concurrency token"""
    changes = payload.model_dump(exclude_unset=True)
    expected = changes.pop("expected_updated_at", None)
    return changes, expected
