from datetime import date
from typing import Any, Dict, Optional

from sqlalchemy import func, select

from prefect_portal.core.result import Result
from prefect_portal.models.gate_log import GateAssistanceLog
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ResourceService


class GateLogService(ResourceService[GateAssistanceLog]):
    model = GateAssistanceLog
    policy = policies.GATE_LOGS
    resource_name = "Gate log"
    owner_field = "prefect_id"
    date_field = "log_date"
    search_fields = ("notes",)
    ordering = (("log_date", True), ("time_in", True))
    required_fields = {
        "log_date": "Log date is required",
        "time_in": "Time in is required",
    }

    def validate(self, data: Dict[str, Any], existing: Optional[GateAssistanceLog]) -> Optional[Result]:
        time_in = data.get("time_in", existing.time_in if existing else None)
        time_out = data.get("time_out", existing.time_out if existing else None)
        if time_in and time_out and time_out <= time_in:
            return Result.invalid("Time out must be after time in", field="time_out")
        return None

    async def stats(self, today: Optional[date] = None) -> Result:
        today = today or date.today()

        async def op() -> Result:
            stmt = select(func.count()).select_from(GateAssistanceLog)
            clause = self.policy.visibility_clause(GateAssistanceLog, self.session)
            if clause is not None:
                stmt = stmt.where(clause)
            total = (await self.db.execute(stmt)).scalar_one()
            todays = (await self.db.execute(stmt.where(GateAssistanceLog.log_date == today))).scalar_one()
            return Result.success({"total": total, "today": todays})

        return await self._run("stats", op)
