from typing import Any, Dict, Optional

from prefect_portal.core.result import Result
from prefect_portal.models.weekly_report import WeeklyReport
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ResourceService


class WeeklyReportService(ResourceService[WeeklyReport]):
    model = WeeklyReport
    policy = policies.WEEKLY_REPORTS
    resource_name = "Weekly report"
    owner_field = "prefect_id"
    date_field = "week_start"
    search_fields = ("summary", "achievements", "challenges")
    ordering = (("week_start", True),)
    required_fields = {
        "summary": "Summary is required",
        "week_start": "Week start date is required",
        "week_end": "Week end date is required",
    }

    def validate(self, data: Dict[str, Any], existing: Optional[WeeklyReport]) -> Optional[Result]:
        start = data.get("week_start", existing.week_start if existing else None)
        end = data.get("week_end", existing.week_end if existing else None)
        if start and end and start >= end:
            return Result.invalid("Week start date must be before week end date", field="week_start")
        return None
