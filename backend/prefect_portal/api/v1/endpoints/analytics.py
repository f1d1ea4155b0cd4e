"""Dashboard analytics for admin and faculty"""
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from prefect_portal.core.database import get_db
from prefect_portal.modules.access.role_gate import ADMIN, FACULTY
from prefect_portal.modules.auth.dependencies import require_roles
from prefect_portal.modules.auth.session import PortalSession
from prefect_portal.schemas.analytics import CriticalIssues, SystemStats, TopPerformer
from prefect_portal.services.analytics_service import AnalyticsService

router = APIRouter()


async def get_analytics_service(
    db: AsyncSession = Depends(get_db),
    session: PortalSession = Depends(require_roles(ADMIN, FACULTY)),
) -> AnalyticsService:
    return AnalyticsService(db, session)


@router.get("/summary", response_model=SystemStats)
async def analytics_summary(service: AnalyticsService = Depends(get_analytics_service)):
    return (await service.summary()).unwrap()


@router.get("/top-performers", response_model=List[TopPerformer])
async def top_performers(
    limit: int = Query(5, ge=1, le=50),
    service: AnalyticsService = Depends(get_analytics_service),
):
    return (await service.top_performers(limit)).unwrap()


@router.get("/critical-issues", response_model=CriticalIssues)
async def critical_issues(service: AnalyticsService = Depends(get_analytics_service)):
    return (await service.critical_issues()).unwrap()
