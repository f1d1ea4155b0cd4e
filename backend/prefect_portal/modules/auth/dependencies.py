from typing import Callable, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prefect_portal.core.database import get_db
from prefect_portal.core.exceptions import AuthenticationError, AuthorizationError
from prefect_portal.core.logging_config import set_user_id
from prefect_portal.core.security import decode_token, security
from prefect_portal.models.user import User
from prefect_portal.modules.auth.session import PortalSession


async def user_from_token(token: str, db: AsyncSession, token_type: str = "access") -> User:
    """Resolve a token to an active user; shared by HTTP and websocket auth"""
    payload = decode_token(token, expected_type=token_type)

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Invalid token payload")

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()

    if not user:
        raise AuthenticationError("User not found")

    if not user.is_active:
        raise AuthorizationError("User account is inactive")

    return user


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> User:
    """Get current authenticated user"""
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    user = await user_from_token(credentials.credentials, db)
    set_user_id(str(user.id))
    return user


async def get_portal_session(current_user: User = Depends(get_current_user)) -> PortalSession:
    """Per-request principal handed to every service"""
    return PortalSession.for_user(current_user)


def require_roles(*roles: str) -> Callable:
    """
    Dependency factory gating an endpoint on any of ``roles``.

    Usage:
        @router.get("/summary")
        async def summary(session: PortalSession = Depends(require_roles(ADMIN, FACULTY))):
            ...
    """
    async def dependency(session: PortalSession = Depends(get_portal_session)) -> PortalSession:
        if not session.has_any(roles):
            raise AuthorizationError(f"Requires one of: {', '.join(sorted(roles))}")
        return session

    return dependency
