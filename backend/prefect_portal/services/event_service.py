from datetime import date
from typing import Any, Dict, Iterable, Optional

from sqlalchemy import func, select

from prefect_portal.core.result import Result
from prefect_portal.models.event import Event, EventAssignment
from prefect_portal.modules.access import policies
from prefect_portal.services.duty_service import check_time_window
from prefect_portal.services.resource_service import ResourceService


class EventService(ResourceService[Event]):
    model = Event
    policy = policies.EVENTS
    resource_name = "Event"
    date_field = "event_date"
    search_fields = ("title", "description", "location")
    ordering = (("event_date", True), ("start_time", False))
    required_fields = {
        "title": "Event title is required",
        "event_date": "Event date is required",
    }

    def validate(self, data: Dict[str, Any], existing: Optional[Event]) -> Optional[Result]:
        return check_time_window(data, existing)

    async def create(self, payload: Dict[str, Any]) -> Result:
        return await super().create({**payload, "created_by": self.session.user_id})

    def mutable_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        data = super().mutable_changes(changes)
        data.pop("created_by", None)
        return data

    async def upcoming(self, today: Optional[date] = None, limit: Optional[int] = None) -> Result:
        today = today or date.today()

        async def op() -> Result:
            stmt = (
                self.visible_select()
                .where(Event.event_date >= today)
                .order_by(Event.event_date.asc(), Event.start_time.asc(), Event.id.asc())
            )
            if limit:
                stmt = stmt.limit(limit)
            return Result.success(list((await self.db.execute(stmt)).scalars().all()))

        return await self._run("upcoming", op)

    async def stats(self, today: Optional[date] = None) -> Result:
        today = today or date.today()

        async def op() -> Result:
            total = (await self.db.execute(select(func.count()).select_from(Event))).scalar_one()
            upcoming = (
                await self.db.execute(select(func.count()).select_from(Event).where(Event.event_date >= today))
            ).scalar_one()
            return Result.success({"total": total, "upcoming": upcoming})

        return await self._run("stats", op)


class EventAssignmentService(ResourceService[EventAssignment]):
    model = EventAssignment
    policy = policies.EVENT_ASSIGNMENTS
    resource_name = "Event assignment"
    owner_field = "prefect_id"
    required_fields = {"event_id": "Event is required", "prefect_id": "Prefect is required"}

    def conflict_message(self, error) -> str:
        return "Prefect is already assigned to this event"

    async def for_event(self, event_id: str) -> Result:
        async def op() -> Result:
            if await self.db.get(Event, event_id) is None:
                return Result.not_found("Event", event_id)
            stmt = self.visible_select().where(EventAssignment.event_id == event_id)
            rows = await self.db.execute(stmt.order_by(*self.order_clauses()))
            return Result.success(list(rows.scalars().all()))

        return await self._run("list", op, event_id)

    async def assign_many(self, event_id: str, prefect_ids: Iterable[str],
                          role_in_event: Optional[str] = None) -> Result:
        ids = list(dict.fromkeys(str(pid) for pid in (prefect_ids or []) if pid))
        if not ids:
            return Result.invalid("At least one prefect is required", field="prefect_ids")
        if not self.policy.can_create({"event_id": event_id}, self.session):
            return self.forbidden("create")

        async def op() -> Result:
            if await self.db.get(Event, event_id) is None:
                return Result.not_found("Event", event_id)
            taken = await self.db.execute(
                select(EventAssignment.prefect_id).where(
                    EventAssignment.event_id == event_id,
                    EventAssignment.prefect_id.in_(ids),
                )
            )
            already = {str(pid).lower() for pid in taken.scalars().all()}
            records = [
                EventAssignment(event_id=event_id, prefect_id=pid, role_in_event=role_in_event)
                for pid in ids if pid.lower() not in already
            ]
            self.db.add_all(records)
            await self.db.commit()
            for record in records:
                await self.db.refresh(record)
            return Result.success(records)

        return await self._run("create", op, event_id)
