from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

from sqlalchemy import select

from prefect_portal.core.logging_config import logger
from prefect_portal.core.result import ErrorKind, Result
from prefect_portal.core.types import utcnow
from prefect_portal.models.recruitment import ApplicationStatus, PrefectApplication
from prefect_portal.models.user import AppRole, UserRoleAssignment
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ResourceService

DUPLICATE_MESSAGE = "You have already submitted an application for this academic year"


class RecruitmentService(ResourceService[PrefectApplication]):
    model = PrefectApplication
    policy = policies.APPLICATIONS
    resource_name = "Application"
    owner_field = "applicant_id"
    date_field = "created_at"
    status_field = "status"
    status_enum = ApplicationStatus
    search_fields = ("statement",)
    required_fields = {
        "statement": "Personal statement is required",
        "academic_year_id": "Academic year is required",
    }

    def validate(self, data: Dict[str, Any], existing: Optional[PrefectApplication]) -> Optional[Result]:
        if data.get("gpa") is None:
            return None
        try:
            gpa = Decimal(str(data["gpa"]))
        except InvalidOperation:
            return Result.invalid("GPA must be a number", field="gpa")
        if gpa < 0 or gpa > 4:
            return Result.invalid("GPA must be between 0 and 4", field="gpa")
        return None

    async def before_create(self, data: Dict[str, Any]) -> Optional[Result]:
        existing = await self.db.execute(
            select(PrefectApplication.id).where(
                PrefectApplication.applicant_id == data["applicant_id"],
                PrefectApplication.academic_year_id == data["academic_year_id"],
            )
        )
        if existing.first() is not None:
            return Result.failure(ErrorKind.CONFLICT, DUPLICATE_MESSAGE, field="academic_year_id",
                                  resource=self.resource_name)
        return None

    def conflict_message(self, error) -> str:
        return DUPLICATE_MESSAGE

    async def review(self, record_id: str, status: ApplicationStatus, notes: Optional[str] = None) -> Result:
        """Record a review decision; approval grants the applicant the prefect role"""
        if status is None:
            return Result.invalid("Status is required", field="status")
        status = ApplicationStatus(status)

        async def op() -> Result:
            application = await self.load(record_id)
            if application is None:
                return self.not_found(record_id)
            changes = {"status": status, "reviewed_by": self.session.user_id, "review_notes": notes}
            if not self.policy.can_update(application, changes, self.session):
                return self.forbidden("review")

            for name, value in changes.items():
                setattr(application, name, value)
            application.updated_at = utcnow()
            if status == ApplicationStatus.APPROVED:
                await self._grant_prefect_role(str(application.applicant_id))
            await self._commit(application)
            return Result.success(application)

        return await self._run("review", op, record_id)

    async def _grant_prefect_role(self, user_id: str) -> None:
        existing = await self.db.execute(
            select(UserRoleAssignment.id).where(
                UserRoleAssignment.user_id == user_id,
                UserRoleAssignment.role == AppRole.PREFECT,
            )
        )
        if existing.first() is not None:
            return
        self.db.add(UserRoleAssignment(user_id=user_id, role=AppRole.PREFECT, assigned_by=self.session.user_id))
        logger.info(f"Granted prefect role to {user_id} on application approval")

    async def stats(self) -> Result:
        result = await self.count_by("status", ApplicationStatus)
        return result.map(lambda counts: {"total": sum(counts.values()), **counts})
