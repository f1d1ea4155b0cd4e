"""
Dashboard analytics: system-wide counts for admin and faculty.
"""
import asyncio
import time
from typing import Any, Dict

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from prefect_portal.core.config import settings
from prefect_portal.core.logging_config import logger
from prefect_portal.core.result import ErrorKind, Result
from prefect_portal.models import (
    AppRole,
    Attendance,
    AttendanceStatus,
    Complaint,
    ComplaintStatus,
    DutyAssignment,
    DutyStatus,
    Event,
    EventAssignment,
    IncidentReport,
    IncidentSeverity,
    PerformanceEvaluation,
    PrefectApplication,
    ApplicationStatus,
    User,
    UserRoleAssignment,
)
from prefect_portal.modules.access.role_gate import ADMIN, FACULTY
from prefect_portal.modules.auth.session import PortalSession

CRITICAL_SEVERITIES = (IncidentSeverity.HIGH, IncidentSeverity.CRITICAL)


class AnalyticsService:
    def __init__(self, db, session: PortalSession):
        self.db = db
        self.session = session

    async def _run(self, action: str, operation) -> Result:
        if not self.session.has_any((ADMIN, FACULTY)):
            return Result.forbidden("Analytics are limited to admin and faculty")
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(operation(), timeout=settings.REQUEST_TIMEOUT_SECONDS)
        except asyncio.TimeoutError:
            result = Result.failure(ErrorKind.TIMEOUT, f"Analytics {action} timed out", resource="Analytics")
        except SQLAlchemyError as e:
            logger.log_error_with_context(e, f"Analytics.{action}")
            result = Result.failure(ErrorKind.BACKEND, str(e), resource="Analytics")
        logger.log_resource_event("Analytics", action, outcome="ok" if result.ok else result.error.value,
                                  duration_ms=(time.perf_counter() - start) * 1000)
        return result

    async def _count(self, model) -> int:
        return (await self.db.execute(select(func.count()).select_from(model))).scalar_one()

    async def _grouped(self, column, enum_cls=None) -> Dict[str, int]:
        rows = (await self.db.execute(select(column, func.count()).group_by(column))).all()
        counts: Dict[str, int] = {member.value: 0 for member in enum_cls} if enum_cls else {}
        for key, count in rows:
            if key is None:
                continue
            counts[getattr(key, "value", str(key))] = count
        return counts

    async def summary(self) -> Result:
        async def op() -> Result:
            ratings = await self._grouped(PerformanceEvaluation.rating)
            data: Dict[str, Any] = {
                "totals": {
                    "users": await self._count(User),
                    "attendance": await self._count(Attendance),
                    "complaints": await self._count(Complaint),
                    "incidents": await self._count(IncidentReport),
                    "duties": await self._count(DutyAssignment),
                    "applications": await self._count(PrefectApplication),
                    "evaluations": await self._count(PerformanceEvaluation),
                    "events": await self._count(Event),
                    "event_assignments": await self._count(EventAssignment),
                },
                "roles": await self._grouped(UserRoleAssignment.role, AppRole),
                "complaints_by_status": await self._grouped(Complaint.status, ComplaintStatus),
                "incidents_by_severity": await self._grouped(IncidentReport.severity, IncidentSeverity),
                "duties_by_status": await self._grouped(DutyAssignment.status, DutyStatus),
                "applications_by_status": await self._grouped(PrefectApplication.status, ApplicationStatus),
                "attendance_by_status": await self._grouped(Attendance.status, AttendanceStatus),
                "evaluation_ratings": {str(r): ratings.get(str(r), 0) for r in range(1, 6)},
                "departments": await self._grouped(User.department),
            }
            return Result.success(data)

        return await self._run("summary", op)

    async def top_performers(self, limit: int = 5) -> Result:
        """Prefects ranked by average evaluation rating"""
        async def op() -> Result:
            average = func.avg(PerformanceEvaluation.rating).label("average")
            stmt = (
                select(User, average, func.count(PerformanceEvaluation.id))
                .join(PerformanceEvaluation, PerformanceEvaluation.prefect_id == User.id)
                .group_by(User.id)
                .order_by(average.desc(), User.last_name.asc(), User.id.asc())
                .limit(limit)
            )
            rows = (await self.db.execute(stmt)).all()
            return Result.success([
                {"user": user, "average_rating": round(float(avg), 1), "evaluations": count}
                for user, avg, count in rows
            ])

        return await self._run("top_performers", op)

    async def critical_issues(self) -> Result:
        """Unresolved high/critical incidents and complaints still pending"""
        async def op() -> Result:
            incidents = await self.db.execute(
                select(IncidentReport)
                .where(IncidentReport.is_resolved.is_(False))
                .where(IncidentReport.severity.in_(CRITICAL_SEVERITIES))
                .order_by(IncidentReport.created_at.desc(), IncidentReport.id.asc())
            )
            complaints = await self.db.execute(
                select(Complaint)
                .where(Complaint.status == ComplaintStatus.PENDING)
                .order_by(Complaint.created_at.desc(), Complaint.id.asc())
            )
            return Result.success({
                "incidents": list(incidents.scalars().all()),
                "complaints": list(complaints.scalars().all()),
            })

        return await self._run("critical_issues", op)
