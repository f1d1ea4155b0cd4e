from typing import Any, Dict, Optional

from prefect_portal.core.result import Result
from prefect_portal.core.types import utcnow
from prefect_portal.models.incident import IncidentReport, IncidentSeverity
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ListFilter, ResourceService


class IncidentService(ResourceService[IncidentReport]):
    model = IncidentReport
    policy = policies.INCIDENTS
    resource_name = "Incident"
    owner_field = "reported_by"
    date_field = "incident_date"
    status_field = "severity"
    status_enum = IncidentSeverity
    search_fields = ("title", "description", "location")
    required_fields = {
        "title": "Incident title is required",
        "description": "Incident description is required",
    }

    def on_update(self, record: IncidentReport, changes: Dict[str, Any], previous: Dict[str, Any]) -> None:
        if "is_resolved" not in changes:
            return
        if record.is_resolved and not previous.get("is_resolved"):
            record.resolved_at = utcnow()
            record.resolved_by = self.session.user_id
        elif not record.is_resolved:
            record.resolved_at = None
            record.resolved_by = None

    async def resolve(self, record_id: str) -> Result:
        return await self.update(record_id, {"is_resolved": True})

    async def unresolve(self, record_id: str) -> Result:
        return await self.update(record_id, {"is_resolved": False})

    async def list_by_resolved(self, is_resolved: bool, filters: Optional[ListFilter] = None) -> Result:
        result = await self.list(filters)
        return result.map(lambda rows: [r for r in rows if bool(r.is_resolved) == is_resolved])

    async def stats(self) -> Result:
        return await self.count_by("severity", IncidentSeverity)
