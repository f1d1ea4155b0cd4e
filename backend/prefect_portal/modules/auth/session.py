from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from prefect_portal.models.user import User, Theme
from prefect_portal.modules.access.role_gate import ADMIN, role_names


@dataclass(frozen=True)
class PortalSession:
    """Authenticated principal for one request: user, role set and theme"""
    user: User
    roles: FrozenSet[str] = field(default_factory=frozenset)
    theme: str = Theme.SYSTEM.value

    @classmethod
    def for_user(cls, user: User) -> "PortalSession":
        theme = user.theme.value if isinstance(user.theme, Theme) else (user.theme or Theme.SYSTEM.value)
        return cls(user=user, roles=role_names(user.roles), theme=theme)

    def current_user(self) -> User:
        return self.user

    @property
    def user_id(self) -> str:
        return str(self.user.id)

    @property
    def is_admin(self) -> bool:
        return ADMIN in self.roles

    def has_role(self, role) -> bool:
        return role_names([role]) <= self.roles

    def has_any(self, roles: Iterable) -> bool:
        return bool(role_names(roles) & self.roles)
