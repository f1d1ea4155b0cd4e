from typing import Any, Dict, Optional

from sqlalchemy import select

from prefect_portal.core.result import ErrorKind, Result
from prefect_portal.models.attendance import Attendance, AttendanceStatus
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ResourceService

DUPLICATE_MESSAGE = "Attendance record already exists for this date"


class AttendanceService(ResourceService[Attendance]):
    model = Attendance
    policy = policies.ATTENDANCE
    resource_name = "Attendance"
    owner_field = "prefect_id"
    date_field = "date"
    status_field = "status"
    status_enum = AttendanceStatus
    search_fields = ("notes",)
    ordering = (("date", True), ("created_at", True))
    required_fields = {"date": "Date is required"}

    def validate(self, data: Dict[str, Any], existing: Optional[Attendance]) -> Optional[Result]:
        time_in = data.get("time_in", existing.time_in if existing else None)
        time_out = data.get("time_out", existing.time_out if existing else None)
        if time_in and time_out and time_out < time_in:
            return Result.invalid("Time out cannot be before time in", field="time_out")
        return None

    async def before_create(self, data: Dict[str, Any]) -> Optional[Result]:
        # Advisory pre-check; uq_attendance_prefect_date is the real guard
        existing = await self.db.execute(
            select(Attendance.id).where(
                Attendance.prefect_id == data["prefect_id"],
                Attendance.date == data["date"],
            )
        )
        if existing.first() is not None:
            return Result.failure(ErrorKind.CONFLICT, DUPLICATE_MESSAGE, field="date", resource=self.resource_name)
        return None

    def conflict_message(self, error) -> str:
        return DUPLICATE_MESSAGE

    async def change_status(self, record_id: str, status: AttendanceStatus) -> Result:
        return await self.update(record_id, {"status": status})

    async def stats(self) -> Result:
        result = await self.count_by("status", AttendanceStatus)
        return result.map(lambda counts: {"total": sum(counts.values()), **counts})
