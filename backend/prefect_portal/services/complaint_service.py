from typing import Any, Dict, Optional

from sqlalchemy import select

from prefect_portal.core.result import Result
from prefect_portal.core.types import utcnow
from prefect_portal.models.complaint import Complaint, ComplaintMessage, ComplaintStatus
from prefect_portal.modules.access import policies
from prefect_portal.services.resource_service import ResourceService


class ComplaintService(ResourceService[Complaint]):
    model = Complaint
    policy = policies.COMPLAINTS
    resource_name = "Complaint"
    owner_field = "submitted_by"
    date_field = "created_at"
    status_field = "status"
    status_enum = ComplaintStatus
    search_fields = ("subject", "description")
    required_fields = {
        "subject": "Complaint subject is required",
        "description": "Complaint description is required",
    }

    def on_create(self, record: Complaint) -> None:
        if record.status is None:
            record.status = ComplaintStatus.PENDING
        if record.status == ComplaintStatus.RESOLVED:
            record.resolved_at = utcnow()

    def on_update(self, record: Complaint, changes: Dict[str, Any], previous: Dict[str, Any]) -> None:
        if "status" not in changes:
            return
        if record.status == ComplaintStatus.RESOLVED and previous.get("status") != ComplaintStatus.RESOLVED:
            record.resolved_at = utcnow()
        elif record.status != ComplaintStatus.RESOLVED:
            record.resolved_at = None

    async def change_status(self, record_id: str, status: ComplaintStatus) -> Result:
        return await self.update(record_id, {"status": status})

    async def assign(self, record_id: str, assignee_id: Optional[str]) -> Result:
        return await self.update(record_id, {"assigned_to": assignee_id})

    async def stats(self) -> Result:
        return await self.count_by("status", ComplaintStatus)

    # ==================== Follow-up messages ====================

    async def list_messages(self, complaint_id: str) -> Result:
        async def op() -> Result:
            if await self.load(complaint_id) is None:
                return self.not_found(complaint_id)
            rows = await self.db.execute(
                select(ComplaintMessage)
                .where(ComplaintMessage.complaint_id == complaint_id)
                .order_by(ComplaintMessage.created_at.asc(), ComplaintMessage.id.asc())
            )
            return Result.success(list(rows.scalars().all()))

        return await self._run("list_messages", op, complaint_id)

    async def add_message(self, complaint_id: str, message: str) -> Result:
        text = (message or "").strip()
        if not text:
            return Result.invalid("Message cannot be empty", field="message")

        async def op() -> Result:
            if await self.load(complaint_id) is None:
                return self.not_found(complaint_id)
            entry = ComplaintMessage(
                complaint_id=complaint_id,
                sender_id=self.session.user_id,
                message=text,
            )
            self.db.add(entry)
            await self._commit(entry)
            return Result.success(entry)

        return await self._run("add_message", op, complaint_id)
