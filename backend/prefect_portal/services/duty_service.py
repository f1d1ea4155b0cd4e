from typing import Any, Dict, Iterable, List, Optional

from prefect_portal.core.result import Result
from prefect_portal.models.duty import DutyAssignment, DutyReport, DutyStatus
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ResourceService


def check_time_window(data: Dict[str, Any], existing: Any = None) -> Optional[Result]:
    start = data.get("start_time", getattr(existing, "start_time", None))
    end = data.get("end_time", getattr(existing, "end_time", None))
    if start and end and end <= start:
        return Result.invalid("End time must be after start time", field="end_time")
    return None


class DutyService(ResourceService[DutyAssignment]):
    model = DutyAssignment
    policy = policies.DUTIES
    resource_name = "Duty"
    owner_field = "prefect_id"
    date_field = "duty_date"
    status_field = "status"
    status_enum = DutyStatus
    search_fields = ("title", "location", "description")
    ordering = (("duty_date", True), ("start_time", False))
    required_fields = {
        "title": "Duty title is required",
        "duty_date": "Duty date is required",
    }

    def validate(self, data: Dict[str, Any], existing: Optional[DutyAssignment]) -> Optional[Result]:
        return check_time_window(data, existing)

    async def create_many(self, payload: Dict[str, Any], prefect_ids: Iterable[str]) -> Result:
        """One assignment row per prefect, all in one transaction"""
        ids: List[str] = list(dict.fromkeys(str(pid) for pid in (prefect_ids or []) if pid))
        if not ids:
            return Result.invalid("At least one prefect is required", field="prefect_ids")
        data = self.clean_payload(payload)
        invalid = self.check_required(data) or self.validate(data, None)
        if invalid:
            return invalid
        if not self.policy.can_create(data, self.session):
            return self.forbidden("create")
        data["assigned_by"] = self.session.user_id

        async def op() -> Result:
            records = [DutyAssignment(prefect_id=pid, **data) for pid in ids]
            self.db.add_all(records)
            await self.db.commit()
            for record in records:
                await self.db.refresh(record)
            return Result.success(records)

        return await self._run("create", op)

    async def change_status(self, record_id: str, status: DutyStatus) -> Result:
        return await self.update(record_id, {"status": status})

    async def stats(self) -> Result:
        result = await self.count_by("status", DutyStatus)
        return result.map(lambda counts: {"total": sum(counts.values()), **counts})


class DutyReportService(ResourceService[DutyReport]):
    model = DutyReport
    policy = policies.DUTY_REPORTS
    resource_name = "Duty report"
    owner_field = "prefect_id"
    date_field = "created_at"
    search_fields = ("report",)
    required_fields = {"report": "Report is required", "assignment_id": "Duty is required"}

    async def before_create(self, data: Dict[str, Any]) -> Optional[Result]:
        duty = await self.db.get(DutyAssignment, data["assignment_id"])
        if duty is None:
            return Result.not_found("Duty", data["assignment_id"])
        if str(duty.prefect_id).lower() != str(data["prefect_id"]).lower():
            return self.forbidden("report on")
        return None

    async def for_assignment(self, assignment_id: str) -> Result:
        result = await self.list()
        return result.map(lambda rows: [r for r in rows if str(r.assignment_id) == str(assignment_id)])
