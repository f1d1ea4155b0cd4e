"""
Role gate: which navigation entries, page variants and records a role set
should see.

Pure and synchronous so both the API (``/navigation``) and the client feeds can
use it. It only decides what to *show*; enforcement happens in
``prefect_portal.modules.access.policies``.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, FrozenSet, Iterable, List, Optional, Sequence, Tuple

ADMIN = "admin"
PREFECT = "prefect"
FACULTY = "faculty"
STUDENT = "student"

ALL_ROLES: FrozenSet[str] = frozenset({ADMIN, PREFECT, FACULTY, STUDENT})
STAFF_ROLES: FrozenSet[str] = frozenset({ADMIN, PREFECT, FACULTY})

# Display precedence when one role has to represent the user
ROLE_PRECEDENCE: Tuple[str, ...] = (ADMIN, FACULTY, PREFECT, STUDENT)


class PageVariant(str, Enum):
    MANAGEMENT = "management"  # tabbed admin view, full CRUD
    SELF_SERVICE = "self_service"  # create + own records


@dataclass(frozen=True)
class NavEntry:
    key: str
    title: str
    path: str
    roles: FrozenSet[str]

    def to_dict(self) -> dict:
        return {"key": self.key, "title": self.title, "path": self.path, "roles": sorted(self.roles)}


NAVIGATION: Tuple[NavEntry, ...] = (
    NavEntry("dashboard", "Dashboard", "/dashboard", ALL_ROLES),
    NavEntry("users", "User Management", "/users", frozenset({ADMIN})),
    NavEntry("training", "Training", "/training", ALL_ROLES),
    NavEntry("conversations", "Conversations", "/conversations", ALL_ROLES),
    NavEntry("complaints", "Complaints", "/complaints", ALL_ROLES),
    NavEntry("incidents", "Incidents", "/incidents", STAFF_ROLES),
    NavEntry("duties", "Duty Assignments", "/duties", STAFF_ROLES),
    NavEntry("gate_logs", "Gate Assistance", "/gate-logs", STAFF_ROLES),
    NavEntry("events", "Events", "/events", STAFF_ROLES),
    NavEntry("attendance", "Attendance", "/attendance", STAFF_ROLES),
    NavEntry("recruitment", "Recruitment", "/recruitment", ALL_ROLES),
    NavEntry("reports", "Reports", "/reports", STAFF_ROLES),
    NavEntry("weekly_reports", "Weekly Reports", "/weekly-reports", STAFF_ROLES),
    NavEntry("evaluations", "Evaluations", "/evaluations", frozenset({ADMIN, FACULTY})),
    NavEntry("profile", "My Profile", "/profile", ALL_ROLES),
)

# Role sets that get the management variant of a page
MANAGEMENT_ROLES = {
    "attendance": frozenset({ADMIN}),
    "complaints": frozenset({ADMIN}),
    "incidents": frozenset({ADMIN}),
    "duties": frozenset({ADMIN}),
    "recruitment": frozenset({ADMIN}),
    "gate_logs": frozenset({ADMIN}),
    "events": frozenset({ADMIN}),
    "training": frozenset({ADMIN}),
    "weekly_reports": frozenset({ADMIN}),
    "evaluations": frozenset({ADMIN, FACULTY}),
    "users": frozenset({ADMIN}),
}


def _value(item: Any) -> str:
    return item.value if isinstance(item, Enum) else str(item)


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def role_names(roles: Optional[Iterable[Any]]) -> FrozenSet[str]:
    """Normalise enum members / strings to a frozenset of role names"""
    if not roles:
        return frozenset()
    return frozenset(_value(role) for role in roles)


def user_roles(user: Any) -> FrozenSet[str]:
    if user is None:
        return frozenset()
    return role_names(_get(user, "roles"))


def is_in_role(user: Any, role: Any) -> bool:
    return _value(role) in user_roles(user)


def is_admin(user: Any) -> bool:
    return is_in_role(user, ADMIN)


def primary_role(roles: Iterable[Any]) -> Optional[str]:
    names = role_names(roles)
    for role in ROLE_PRECEDENCE:
        if role in names:
            return role
    return None


def filter_visible(records: Sequence[Any], user: Any, is_admin: bool,
                   owner_field: str = "owner_id") -> List[Any]:
    """All records for admins, otherwise only the ones the user owns"""
    if is_admin:
        return list(records)
    user_id = _get(user, "id") if user is not None else None
    if user_id is None:
        return []
    user_id = str(user_id)
    return [record for record in records if str(_get(record, owner_field)) == user_id]


def visible_navigation(roles: Iterable[Any]) -> List[NavEntry]:
    names = role_names(roles)
    return [entry for entry in NAVIGATION if entry.roles & names]


def can_open(path: str, roles: Iterable[Any]) -> bool:
    """True when some visible nav entry owns ``path``"""
    return any(
        path == entry.path or path.startswith(entry.path + "/")
        for entry in visible_navigation(roles)
    )


def page_variant(resource: str, roles: Iterable[Any]) -> PageVariant:
    managers = MANAGEMENT_ROLES.get(resource, frozenset({ADMIN}))
    if role_names(roles) & managers:
        return PageVariant.MANAGEMENT
    return PageVariant.SELF_SERVICE
