"""
Server-side row access rules, one ``AccessPolicy`` per table.

These are the authoritative checks; every service call consults them before
reading or writing. Invisible rows behave as missing (NOT_FOUND); visible rows
the caller may not change are FORBIDDEN.
"""
from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Optional, Tuple

from sqlalchemy import false, or_, true

from prefect_portal.modules.access.role_gate import ADMIN, FACULTY, PREFECT
from prefect_portal.modules.auth.session import PortalSession

ADMIN_ONLY: FrozenSet[str] = frozenset({ADMIN})
ADMIN_FACULTY: FrozenSet[str] = frozenset({ADMIN, FACULTY})
NOBODY: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class AccessPolicy:
    resource: str
    # Roles that see every row
    read_all_roles: FrozenSet[str] = ADMIN_ONLY
    # Every authenticated user sees every row
    public_read: bool = False
    # Rows where this boolean column is true are visible to everyone
    public_read_field: Optional[str] = None
    # Columns that make a row visible to the user they reference
    owner_fields: Tuple[str, ...] = ()

    # Roles that may create rows on behalf of anyone
    create_roles: FrozenSet[str] = ADMIN_ONLY
    # Column that must equal the caller for a self-service create
    self_create_field: Optional[str] = None
    # Roles allowed to self-create; None means any authenticated user
    self_create_roles: Optional[FrozenSet[str]] = None

    update_roles: FrozenSet[str] = ADMIN_ONLY
    # Column that lets the referenced user update the row
    owner_update_field: Optional[str] = None
    # Fields the owner may touch; None means all mutable fields
    owner_update_fields: Optional[FrozenSet[str]] = None

    delete_roles: FrozenSet[str] = ADMIN_ONLY
    owner_delete_field: Optional[str] = None

    # ---------------------------------------------------------------- reads

    def can_read_all(self, session: PortalSession) -> bool:
        return self.public_read or bool(self.read_all_roles & session.roles)

    def visibility_clause(self, model: Any, session: PortalSession):
        """SQL predicate limiting a select to visible rows, or None for all"""
        if self.can_read_all(session):
            return None
        clauses = [getattr(model, name) == session.user_id for name in self.owner_fields]
        if self.public_read_field:
            clauses.append(getattr(model, self.public_read_field) == true())
        if not clauses:
            return false()
        return or_(*clauses)

    def can_read(self, record: Any, session: PortalSession) -> bool:
        if self.can_read_all(session):
            return True
        if self.public_read_field and getattr(record, self.public_read_field, False):
            return True
        return any(_same(getattr(record, name, None), session.user_id) for name in self.owner_fields)

    # --------------------------------------------------------------- writes

    def can_create(self, payload: Dict[str, Any], session: PortalSession) -> bool:
        if self.create_roles & session.roles:
            return True
        if not self.self_create_field:
            return False
        if self.self_create_roles is not None and not (self.self_create_roles & session.roles):
            return False
        return _same(payload.get(self.self_create_field), session.user_id)

    def can_update(self, record: Any, changes: Dict[str, Any], session: PortalSession) -> bool:
        if self.update_roles & session.roles:
            return True
        if not self.owner_update_field:
            return False
        if not _same(getattr(record, self.owner_update_field, None), session.user_id):
            return False
        if self.owner_update_fields is None:
            return True
        return set(changes) <= self.owner_update_fields

    def can_delete(self, record: Any, session: PortalSession) -> bool:
        if self.delete_roles & session.roles:
            return True
        if not self.owner_delete_field:
            return False
        return _same(getattr(record, self.owner_delete_field, None), session.user_id)


def _same(value: Any, user_id: str) -> bool:
    return value is not None and str(value).lower() == user_id.lower()


# ==================== Table policies ====================

ATTENDANCE = AccessPolicy(
    resource="attendance",
    read_all_roles=ADMIN_FACULTY,
    owner_fields=("prefect_id",),
    self_create_field="prefect_id",
    self_create_roles=frozenset({PREFECT}),
)

COMPLAINTS = AccessPolicy(
    resource="complaints",
    read_all_roles=ADMIN_FACULTY,
    owner_fields=("submitted_by", "assigned_to"),
    create_roles=NOBODY,
    self_create_field="submitted_by",
)

INCIDENTS = AccessPolicy(
    resource="incident_reports",
    read_all_roles=frozenset({ADMIN, FACULTY, PREFECT}),
    owner_fields=("reported_by",),
    create_roles=NOBODY,
    self_create_field="reported_by",
)

APPLICATIONS = AccessPolicy(
    resource="prefect_applications",
    read_all_roles=ADMIN_FACULTY,
    owner_fields=("applicant_id",),
    create_roles=NOBODY,
    self_create_field="applicant_id",
)

DUTIES = AccessPolicy(
    resource="duty_assignments",
    read_all_roles=ADMIN_FACULTY,
    owner_fields=("prefect_id",),
    owner_update_field="prefect_id",
    owner_update_fields=frozenset({"status"}),
)

DUTY_REPORTS = AccessPolicy(
    resource="duty_reports",
    read_all_roles=ADMIN_FACULTY,
    owner_fields=("prefect_id",),
    create_roles=NOBODY,
    self_create_field="prefect_id",
    owner_update_field="prefect_id",
)

GATE_LOGS = AccessPolicy(
    resource="gate_assistance_logs",
    read_all_roles=ADMIN_FACULTY,
    owner_fields=("prefect_id",),
    self_create_field="prefect_id",
    self_create_roles=frozenset({PREFECT}),
    owner_update_field="prefect_id",
)

WEEKLY_REPORTS = AccessPolicy(
    resource="weekly_reports",
    read_all_roles=ADMIN_FACULTY,
    owner_fields=("prefect_id",),
    self_create_field="prefect_id",
    self_create_roles=frozenset({PREFECT}),
    owner_update_field="prefect_id",
)

EVALUATIONS = AccessPolicy(
    resource="performance_evaluations",
    read_all_roles=ADMIN_ONLY,
    owner_fields=("prefect_id", "evaluator_id"),
    create_roles=NOBODY,
    self_create_field="evaluator_id",
    self_create_roles=ADMIN_FACULTY,
    owner_update_field="evaluator_id",
    owner_delete_field="evaluator_id",
)

EVENTS = AccessPolicy(resource="events", public_read=True)

EVENT_ASSIGNMENTS = AccessPolicy(
    resource="event_assignments",
    read_all_roles=ADMIN_FACULTY,
    owner_fields=("prefect_id",),
)

TRAINING_CATEGORIES = AccessPolicy(resource="training_categories", public_read=True)

TRAINING_MATERIALS = AccessPolicy(
    resource="training_materials",
    public_read_field="is_published",
)

ACADEMIC_YEARS = AccessPolicy(resource="academic_years", public_read=True)

DEPARTMENTS = AccessPolicy(resource="departments", public_read=True)

PROFILES = AccessPolicy(
    resource="users",
    public_read=True,
    create_roles=NOBODY,
    owner_update_field="id",
    delete_roles=NOBODY,
)

# Participant visibility is applied by ConversationService; this covers the header
CONVERSATIONS = AccessPolicy(
    resource="conversations",
    create_roles=NOBODY,
    self_create_field="created_by",
    owner_update_field="created_by",
    owner_delete_field="created_by",
)
