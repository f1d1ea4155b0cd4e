"""
Resource Access Layer
=====================

``ResourceService`` turns one typed request into one bounded round trip to the
store and returns a ``Result``. Subclasses declare the model, the access
policy and per-table rules (ordering, search fields, required fields) and
override the hooks for resource-specific preconditions.

Usage:
    service = ComplaintService(db, session)
    result = await service.create({"subject": "...", "description": "..."})
    complaint = result.unwrap()
"""
import asyncio
import enum
import time
from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import DateTime, func, or_, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from prefect_portal.core.config import settings
from prefect_portal.core.logging_config import logger
from prefect_portal.core.result import ErrorKind, Result
from prefect_portal.core.types import utcnow
from prefect_portal.modules.access.policies import AccessPolicy
from prefect_portal.modules.auth.session import PortalSession

ModelT = TypeVar("ModelT")

# Fields no update payload may change
IMMUTABLE_FIELDS = frozenset({"id", "created_at", "updated_at"})


@dataclass
class ListFilter:
    owner_id: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: Optional[str] = None
    limit: Optional[int] = None
    offset: int = 0


def naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC; bring aware values onto the same footing"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class ResourceService(Generic[ModelT]):
    model: Type[ModelT]
    policy: AccessPolicy
    resource_name: str = "Record"
    owner_field: Optional[str] = None
    date_field: Optional[str] = None
    status_field: Optional[str] = None
    status_enum: Optional[Type[enum.Enum]] = None
    search_fields: Sequence[str] = ()
    # (column, descending)
    ordering: Sequence[Tuple[str, bool]] = (("created_at", True),)
    # field -> message when missing or blank
    required_fields: Dict[str, str] = {}

    def __init__(self, db: AsyncSession, session: PortalSession):
        self.db = db
        self.session = session

    # ==================== Round trip plumbing ====================

    async def _run(
        self,
        action: str,
        operation: Callable[[], Awaitable[Result]],
        record_id: Optional[str] = None,
    ) -> Result:
        """Run one store round trip under the request timeout"""
        timeout = settings.REQUEST_TIMEOUT_SECONDS
        start = time.perf_counter()
        try:
            result = await asyncio.wait_for(operation(), timeout=timeout)
        except asyncio.TimeoutError:
            await self._rollback()
            result = Result.failure(
                ErrorKind.TIMEOUT,
                f"{self.resource_name} {action} timed out after {timeout}s",
                resource=self.resource_name,
            )
        except IntegrityError as e:
            await self._rollback()
            result = Result.failure(
                ErrorKind.CONFLICT, self.conflict_message(e), resource=self.resource_name
            )
        except SQLAlchemyError as e:
            await self._rollback()
            logger.log_error_with_context(e, f"{self.resource_name}.{action}", record_id=record_id)
            result = Result.failure(
                ErrorKind.BACKEND, str(getattr(e, "orig", None) or e), resource=self.resource_name
            )

        duration_ms = (time.perf_counter() - start) * 1000
        logger.log_resource_event(
            self.resource_name,
            action,
            record_id=record_id,
            outcome="ok" if result.ok else result.error.value,
            duration_ms=duration_ms,
        )
        return result

    async def _rollback(self) -> None:
        try:
            await self.db.rollback()
        except SQLAlchemyError as e:
            logger.warning(f"Rollback failed for {self.resource_name}: {e}")

    async def _commit(self, record: Any, refresh: bool = True) -> None:
        await self.db.commit()
        if refresh:
            await self.db.refresh(record)

    def conflict_message(self, error: IntegrityError) -> str:
        return f"{self.resource_name} conflicts with an existing record"

    def not_found(self, record_id: Any) -> Result:
        return Result.not_found(self.resource_name, record_id)

    def forbidden(self, action: str) -> Result:
        return Result.failure(
            ErrorKind.FORBIDDEN,
            f"Not allowed to {action} this {self.resource_name.lower()}",
            resource=self.resource_name,
        )

    # ==================== Query building ====================

    def column(self, name: str):
        return getattr(self.model, name)

    def visible_select(self):
        stmt = select(self.model)
        clause = self.policy.visibility_clause(self.model, self.session)
        if clause is not None:
            stmt = stmt.where(clause)
        return stmt

    def order_clauses(self) -> List[Any]:
        clauses = [
            self.column(name).desc() if descending else self.column(name).asc()
            for name, descending in self.ordering
        ]
        # id breaks ties so identical queries return identical sequences
        clauses.append(self.column("id").asc())
        return clauses

    def _date_bounds(self, stmt, start: Optional[date], end: Optional[date]):
        col = self.column(self.date_field)
        if isinstance(col.type, DateTime):
            if start:
                stmt = stmt.where(col >= datetime.combine(start, datetime.min.time()))
            if end:
                stmt = stmt.where(col < datetime.combine(end + timedelta(days=1), datetime.min.time()))
            return stmt
        if start:
            stmt = stmt.where(col >= start)
        if end:
            stmt = stmt.where(col <= end)
        return stmt

    def search_clause(self, term: str):
        pattern = f"%{escape_like(term)}%"
        return or_(*[self.column(name).ilike(pattern, escape="\\") for name in self.search_fields])

    def apply_filters(self, stmt, filters: ListFilter):
        if filters.owner_id and self.owner_field:
            stmt = stmt.where(self.column(self.owner_field) == filters.owner_id)
        if filters.status and self.status_field:
            status = self.status_enum(filters.status) if self.status_enum else filters.status
            stmt = stmt.where(self.column(self.status_field) == status)
        if self.date_field and (filters.start_date or filters.end_date):
            stmt = self._date_bounds(stmt, filters.start_date, filters.end_date)
        if filters.search and filters.search.strip() and self.search_fields:
            stmt = stmt.where(self.search_clause(filters.search.strip()))
        return stmt

    def check_filter(self, filters: ListFilter) -> Optional[Result]:
        if filters.status and self.status_enum is not None:
            try:
                self.status_enum(filters.status)
            except ValueError:
                allowed = ", ".join(m.value for m in self.status_enum)
                return Result.invalid(f"Invalid status '{filters.status}'. Allowed: {allowed}", field="status")
        if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
            return Result.invalid("Start date must not be after end date", field="start_date")
        return None

    # ==================== Payload handling ====================

    def clean_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Trim strings; blank optional text becomes None"""
        cleaned = {}
        for key, value in payload.items():
            if isinstance(value, str):
                value = value.strip()
                if not value and key not in self.required_fields:
                    value = None
            cleaned[key] = value
        return cleaned

    def check_required(self, data: Dict[str, Any], partial: bool = False) -> Optional[Result]:
        for name, message in self.required_fields.items():
            if partial and name not in data:
                continue
            value = data.get(name)
            if value is None or (isinstance(value, str) and not value):
                return Result.invalid(message, field=name)
        return None

    def mutable_changes(self, changes: Dict[str, Any]) -> Dict[str, Any]:
        frozen = set(IMMUTABLE_FIELDS)
        if self.owner_field:
            frozen.add(self.owner_field)
        return {k: v for k, v in changes.items() if k not in frozen}

    # ==================== Hooks ====================

    def validate(self, data: Dict[str, Any], existing: Optional[ModelT]) -> Optional[Result]:
        """Cross-field checks; ``existing`` is None on create"""
        return None

    async def before_create(self, data: Dict[str, Any]) -> Optional[Result]:
        """Preconditions that need a read, e.g. duplicate guards"""
        return None

    def on_create(self, record: ModelT) -> None:
        pass

    def on_update(self, record: ModelT, changes: Dict[str, Any], previous: Dict[str, Any]) -> None:
        pass

    async def after_commit(self, action: str, record: ModelT) -> None:
        pass

    # ==================== Operations ====================

    async def list(self, filters: Optional[ListFilter] = None) -> Result:
        filters = filters or ListFilter()
        invalid = self.check_filter(filters)
        if invalid:
            return invalid

        async def op() -> Result:
            stmt = self.apply_filters(self.visible_select(), filters).order_by(*self.order_clauses())
            if filters.limit:
                stmt = stmt.limit(filters.limit)
            if filters.offset:
                stmt = stmt.offset(filters.offset)
            rows = (await self.db.execute(stmt)).scalars().all()
            return Result.success(list(rows))

        return await self._run("list", op)

    async def search(self, term: str, limit: Optional[int] = None) -> Result:
        return await self.list(ListFilter(search=term, limit=limit))

    async def load(self, record_id: str) -> Optional[ModelT]:
        """Visible record or None"""
        record = await self.db.get(self.model, record_id)
        if record is None or not self.policy.can_read(record, self.session):
            return None
        return record

    async def get(self, record_id: str) -> Result:
        async def op() -> Result:
            record = await self.load(record_id)
            if record is None:
                return self.not_found(record_id)
            return Result.success(record)

        return await self._run("get", op, record_id)

    async def create(self, payload: Dict[str, Any]) -> Result:
        data = self.clean_payload(payload)
        invalid = self.check_required(data) or self.validate(data, None)
        if invalid:
            return invalid
        if self.owner_field and not data.get(self.owner_field):
            data[self.owner_field] = self.session.user_id
        if not self.policy.can_create(data, self.session):
            return self.forbidden("create")

        async def op() -> Result:
            precondition = await self.before_create(data)
            if precondition is not None:
                return precondition
            record = self.model(**data)
            self.on_create(record)
            self.db.add(record)
            await self._commit(record)
            await self.after_commit("insert", record)
            return Result.success(record)

        return await self._run("create", op)

    async def update(
        self,
        record_id: str,
        changes: Dict[str, Any],
        expected_updated_at: Optional[datetime] = None,
    ) -> Result:
        data = self.mutable_changes(self.clean_payload(changes))
        invalid = self.check_required(data, partial=True)
        if invalid:
            return invalid

        async def op() -> Result:
            record = await self.load(record_id)
            if record is None:
                return self.not_found(record_id)
            if not self.policy.can_update(record, data, self.session):
                return self.forbidden("update")
            if expected_updated_at is not None and naive_utc(expected_updated_at) != record.updated_at:
                return Result.failure(
                    ErrorKind.CONFLICT,
                    f"{self.resource_name} was modified by someone else; reload and try again",
                    resource=self.resource_name,
                )
            problem = self.validate(data, record)
            if problem:
                return problem

            previous = {name: getattr(record, name) for name in data}
            for name, value in data.items():
                setattr(record, name, value)
            self.on_update(record, data, previous)
            if hasattr(record, "updated_at"):
                now = utcnow()
                if record.updated_at is not None and now <= record.updated_at:
                    now = record.updated_at + timedelta(microseconds=1)
                record.updated_at = now
            await self._commit(record)
            await self.after_commit("update", record)
            return Result.success(record)

        return await self._run("update", op, record_id)

    async def delete(self, record_id: str) -> Result:
        async def op() -> Result:
            record = await self.load(record_id)
            if record is None:
                return self.not_found(record_id)
            if not self.policy.can_delete(record, self.session):
                return self.forbidden("delete")
            await self.db.delete(record)
            await self._commit(record, refresh=False)
            await self.after_commit("delete", record)
            return Result.success(record)

        return await self._run("delete", op, record_id)

    async def count_by(self, field: str, values: Optional[Type[enum.Enum]] = None) -> Result:
        """Row counts grouped by ``field`` over visible rows"""
        async def op() -> Result:
            col = self.column(field)
            stmt = select(col, func.count()).select_from(self.model)
            clause = self.policy.visibility_clause(self.model, self.session)
            if clause is not None:
                stmt = stmt.where(clause)
            rows = (await self.db.execute(stmt.group_by(col))).all()
            counts: Dict[str, int] = {m.value: 0 for m in values} if values else {}
            for key, count in rows:
                counts[key.value if isinstance(key, enum.Enum) else str(key)] = count
            return Result.success(counts)

        return await self._run("count", op)
