from typing import Any, Dict, Optional

from sqlalchemy import select, update

from prefect_portal.core.result import Result
from prefect_portal.models.academic import AcademicYear, Department
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ResourceService


class AcademicYearService(ResourceService[AcademicYear]):
    model = AcademicYear
    policy = policies.ACADEMIC_YEARS
    resource_name = "Academic year"
    ordering = (("year_start", True), ("semester", False))
    required_fields = {
        "year_start": "Start year is required",
        "year_end": "End year is required",
        "semester": "Semester is required",
    }

    def validate(self, data: Dict[str, Any], existing: Optional[AcademicYear]) -> Optional[Result]:
        start = data.get("year_start", existing.year_start if existing else None)
        end = data.get("year_end", existing.year_end if existing else None)
        if start is not None and end is not None and end < start:
            return Result.invalid("End year must not be before start year", field="year_end")
        return None

    def conflict_message(self, error) -> str:
        return "This academic term already exists"

    def on_create(self, record: AcademicYear) -> None:
        if record.is_current is None:
            record.is_current = False

    async def after_commit(self, action: str, record: AcademicYear) -> None:
        # Only one term may be current
        if action == "delete" or not record.is_current:
            return
        await self.db.execute(
            update(AcademicYear).where(AcademicYear.id != record.id).values(is_current=False)
        )
        await self.db.commit()

    async def current(self) -> Result:
        async def op() -> Result:
            stmt = select(AcademicYear).where(AcademicYear.is_current.is_(True)).order_by(*self.order_clauses())
            record = (await self.db.execute(stmt.limit(1))).scalars().first()
            if record is None:
                return Result.not_found("Current academic year")
            return Result.success(record)

        return await self._run("current", op)


class DepartmentService(ResourceService[Department]):
    model = Department
    policy = policies.DEPARTMENTS
    resource_name = "Department"
    search_fields = ("name", "code", "description")
    ordering = (("name", False),)
    required_fields = {"name": "Department name is required", "code": "Department code is required"}

    def conflict_message(self, error) -> str:
        return "A department with this name or code already exists"
