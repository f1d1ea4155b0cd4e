"""Client-side session: the signed-in principal, role set, theme and tokens"""
from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Optional

from prefect_portal.modules.access.role_gate import ADMIN, primary_role, role_names


@dataclass(frozen=True)
class Principal:
    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    roles: FrozenSet[str] = field(default_factory=frozenset)
    avatar_url: Optional[str] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.email

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Principal":
        return cls(
            id=str(data["id"]),
            email=data.get("email", ""),
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            roles=role_names(data.get("roles")),
            avatar_url=data.get("avatar_url"),
        )


@dataclass
class Session:
    """
    Everything a feed or view needs to know about the caller.

    Built from the ``/auth/signin`` or ``/auth/me`` response; an empty
    session means nobody is signed in.
    """
    user: Optional[Principal] = None
    roles: FrozenSet[str] = field(default_factory=frozenset)
    theme: str = "system"
    access_token: Optional[str] = None
    refresh_token: Optional[str] = None

    def current_user(self) -> Optional[Principal]:
        return self.user

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None and bool(self.access_token)

    @property
    def is_admin(self) -> bool:
        return ADMIN in self.roles

    @property
    def primary_role(self) -> Optional[str]:
        return primary_role(self.roles)

    def apply_session_payload(self, payload: Dict[str, Any]) -> None:
        """Update from a SessionResponse body (``user``, ``roles``, ``theme``)"""
        self.user = Principal.from_dict(payload["user"])
        self.roles = role_names(payload.get("roles") or self.user.roles)
        self.theme = payload.get("theme") or "system"

    def apply_tokens(self, payload: Dict[str, Any]) -> None:
        self.access_token = payload.get("access_token")
        self.refresh_token = payload.get("refresh_token", self.refresh_token)

    def clear(self) -> None:
        self.user = None
        self.roles = frozenset()
        self.theme = "system"
        self.access_token = None
        self.refresh_token = None
