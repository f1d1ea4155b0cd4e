"""
Resource Feed
=============

Client-held list for one page: fetch on mount, filter locally, and drive a
single create/edit dialog. The held list only changes after the server
confirms a mutation; every failure becomes a transient ``Notification``.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from prefect_portal.client.session import Session
from prefect_portal.core.result import ErrorKind, Result
from prefect_portal.modules.access.role_gate import PageVariant, filter_visible, page_variant


class DialogState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    SUBMITTING = "submitting"
    OPEN_WITH_ERROR = "open_with_error"


class DialogBusyError(RuntimeError):
    """A second dialog was opened while one is already open"""


@dataclass
class Notification:
    message: str
    level: str = "info"  # "success" or "error"
    error: Optional[ErrorKind] = None


def _date_part(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, date):
        return value.isoformat()[:10]
    return str(value)[:10]


@dataclass
class FeedFilters:
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: Optional[str] = None

    def matches(self, record: Dict[str, Any], date_field: str, status_field: str,
                search_fields: Sequence[str]) -> bool:
        if self.status and str(record.get(status_field)) != str(self.status):
            return False
        day = _date_part(record.get(date_field))
        # Both bounds inclusive
        if self.start_date and (day is None or day < self.start_date.isoformat()):
            return False
        if self.end_date and (day is None or day > self.end_date.isoformat()):
            return False
        if self.search:
            term = self.search.strip().lower()
            if term and not any(term in str(record.get(name) or "").lower() for name in search_fields):
                return False
        return True


@dataclass
class FeedDialog:
    """
    Create/edit form state.

    CLOSED -> OPEN -> SUBMITTING -> CLOSED (success) | OPEN_WITH_ERROR (failure)
    """
    state: DialogState = DialogState.CLOSED
    record_id: Optional[str] = None
    values: Dict[str, Any] = field(default_factory=dict)
    errors: Dict[str, str] = field(default_factory=dict)
    message: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.state != DialogState.CLOSED

    def open(self, record: Optional[Dict[str, Any]] = None, defaults: Optional[Dict[str, Any]] = None) -> None:
        if self.is_open:
            raise DialogBusyError("Another dialog is already open")
        self.state = DialogState.OPEN
        self.record_id = str(record["id"]) if record else None
        self.values = dict(record) if record else dict(defaults or {})
        self.errors = {}
        self.message = None

    def begin_submit(self) -> None:
        self.state = DialogState.SUBMITTING
        self.errors = {}
        self.message = None

    def fail(self, message: str, errors: Optional[Dict[str, str]] = None) -> None:
        # Form values are kept for the retry
        self.state = DialogState.OPEN_WITH_ERROR
        self.message = message
        self.errors = dict(errors or {})

    def close(self) -> None:
        self.state = DialogState.CLOSED
        self.record_id = None
        self.values = {}
        self.errors = {}
        self.message = None


class ResourceFeed:
    """
    One page's view over a resource.

    ``api`` is anything with async ``list/create/update/delete/change_status``
    returning ``Result`` (normally ``PortalClient.resource(...)``).
    """

    def __init__(
        self,
        api,
        session: Session,
        resource: str,
        required_fields: Optional[Dict[str, str]] = None,
        owner_field: str = "owner_id",
        date_field: str = "created_at",
        status_field: str = "status",
        search_fields: Sequence[str] = (),
        patch_status_updates: bool = False,
    ):
        self.api = api
        self.session = session
        self.resource = resource
        self.required_fields = dict(required_fields or {})
        self.owner_field = owner_field
        self.date_field = date_field
        self.status_field = status_field
        self.search_fields = tuple(search_fields)
        self.patch_status_updates = patch_status_updates

        self.records: List[Dict[str, Any]] = []
        self.filters = FeedFilters()
        self.dialog = FeedDialog()
        self.notifications: List[Notification] = []
        self.loading = False

    @property
    def variant(self) -> PageVariant:
        return page_variant(self.resource, self.session.roles)

    @property
    def is_management(self) -> bool:
        return self.variant == PageVariant.MANAGEMENT

    # ==================== Listing ====================

    async def load(self) -> Result:
        self.loading = True
        try:
            result = await self.api.list()
        finally:
            self.loading = False
        if result.ok:
            self.records = list(result.value or [])
        else:
            self._notify_failure("load", result)
        return result

    def visible_records(self) -> List[Dict[str, Any]]:
        records = filter_visible(
            self.records, self.session.current_user(), self.is_management, owner_field=self.owner_field
        )
        return [
            record for record in records
            if self.filters.matches(record, self.date_field, self.status_field, self.search_fields)
        ]

    # ==================== Dialog ====================

    def open_create(self, defaults: Optional[Dict[str, Any]] = None) -> FeedDialog:
        self.dialog.open(defaults=defaults)
        return self.dialog

    def open_edit(self, record: Dict[str, Any]) -> FeedDialog:
        self.dialog.open(record=record)
        return self.dialog

    def close_dialog(self) -> None:
        if self.dialog.state != DialogState.SUBMITTING:
            self.dialog.close()

    def validate(self, values: Dict[str, Any]) -> Dict[str, str]:
        errors = {}
        for name, message in self.required_fields.items():
            value = values.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                errors[name] = message
        return errors

    async def submit(self) -> Result:
        """Send the open dialog as a create or update"""
        if not self.dialog.is_open or self.dialog.state == DialogState.SUBMITTING:
            return Result.invalid("No dialog to submit")

        values = dict(self.dialog.values)
        errors = self.validate(values)
        if errors:
            name, message = next(iter(errors.items()))
            self.dialog.fail(message, errors)
            return Result.invalid(message, field=name)

        self.dialog.begin_submit()
        if self.dialog.record_id is None:
            action = "create"
            result = await self.api.create(values)
        else:
            action = "update"
            changes = {k: v for k, v in values.items() if k not in ("id", "created_at", "updated_at")}
            result = await self.api.update(self.dialog.record_id, changes)

        if not result.ok:
            self.dialog.fail(result.message, {result.field: result.message} if result.field else None)
            self._notify_failure(action, result)
            return result

        self.dialog.close()
        self.notifications.append(Notification(f"{self._label()} {action}d", level="success"))
        await self.load()
        return result

    # ==================== Inline mutations ====================

    async def delete(self, record_id: str) -> Result:
        result = await self.api.delete(record_id)
        if not result.ok:
            self._notify_failure("delete", result)
            return result
        self.notifications.append(Notification(f"{self._label()} deleted", level="success"))
        await self.load()
        return result

    async def change_status(self, record_id: str, status: str) -> Result:
        result = await self.api.change_status(record_id, status)
        if not result.ok:
            self._notify_failure("change status", result)
            return result
        if self.patch_status_updates and isinstance(result.value, dict):
            self._splice(result.value)
        else:
            await self.load()
        self.notifications.append(Notification("Status updated", level="success"))
        return result

    def _splice(self, record: Dict[str, Any]) -> None:
        record_id = str(record.get("id"))
        self.records = [record if str(r.get("id")) == record_id else r for r in self.records]

    # ==================== Notifications ====================

    def _label(self) -> str:
        return self.resource.replace("_", " ").rstrip("s").capitalize() or "Record"

    def _notify_failure(self, action: str, result: Result) -> None:
        self.notifications.append(
            Notification(f"Failed to {action}: {result.message}", level="error", error=result.error)
        )

    def pop_notifications(self) -> List[Notification]:
        pending, self.notifications = self.notifications, []
        return pending
