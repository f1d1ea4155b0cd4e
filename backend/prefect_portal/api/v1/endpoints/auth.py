from fastapi import APIRouter, Depends, Request, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prefect_portal.core.config import settings
from prefect_portal.core.database import get_db
from prefect_portal.core.exceptions import AuthenticationError, AuthorizationError, ConflictError
from prefect_portal.core.logging_config import logger, set_user_id
from prefect_portal.core.rate_limiter import signin_rate_limit, signup_rate_limit
from prefect_portal.core.security import (
    create_access_token,
    create_refresh_token,
    get_password_hash,
    verify_password,
)
from prefect_portal.core.types import utcnow
from prefect_portal.models.user import AppRole, User, UserRoleAssignment
from prefect_portal.modules.access.role_gate import primary_role
from prefect_portal.modules.auth.dependencies import get_current_user, user_from_token
from prefect_portal.modules.auth.session import PortalSession
from prefect_portal.schemas.auth import (
    AuthResponse,
    RefreshRequest,
    SessionResponse,
    Token,
    UserLogin,
    UserRegister,
    UserResponse,
)
from prefect_portal.schemas.common import MessageResponse

router = APIRouter()


# ==================== Helper Functions ====================

def issue_tokens(user: User) -> Token:
    token_data = {"sub": str(user.id), "email": user.email}
    return Token(
        access_token=create_access_token(token_data),
        refresh_token=create_refresh_token(token_data),
    )


def build_session_response(user: User) -> SessionResponse:
    session = PortalSession.for_user(user)
    roles = sorted(session.roles)
    return SessionResponse(
        user=UserResponse.model_validate(user),
        roles=roles,
        primary_role=primary_role(roles),
        theme=session.theme,
    )


def client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# ==================== Endpoints ====================

@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@signup_rate_limit()
async def signup(request: Request, payload: UserRegister, db: AsyncSession = Depends(get_db)):
    """Create an account; new users start with the default signup role"""
    email = payload.email.lower()
    existing = await db.execute(select(User.id).where(User.email == email))
    if existing.first() is not None:
        logger.log_auth_event("signup", False, user_email=email, reason="Email already registered",
                              client_ip=client_ip(request))
        raise ConflictError("This email is already registered. Please sign in.", resource_type="User")

    user = User(
        email=email,
        hashed_password=get_password_hash(payload.password),
        first_name=payload.first_name.strip(),
        last_name=payload.last_name.strip(),
        last_login=utcnow(),
    )
    user.role_assignments.append(UserRoleAssignment(role=AppRole(settings.DEFAULT_SIGNUP_ROLE)))
    db.add(user)
    await db.commit()
    await db.refresh(user)

    set_user_id(str(user.id))
    logger.log_auth_event("signup", True, user_email=user.email, client_ip=client_ip(request))
    tokens = issue_tokens(user)
    return AuthResponse(**tokens.model_dump(), session=build_session_response(user))


@router.post("/signin", response_model=AuthResponse)
@signin_rate_limit()
async def signin(request: Request, credentials: UserLogin, db: AsyncSession = Depends(get_db)):
    """Exchange email and password for tokens"""
    email = credentials.email.lower()
    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user or not verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event("signin", False, user_email=email, reason="Invalid credentials",
                              client_ip=client_ip(request))
        raise AuthenticationError("Invalid login credentials")

    if not user.is_active:
        logger.log_auth_event("signin", False, user_email=email, reason="Account inactive",
                              client_ip=client_ip(request))
        raise AuthorizationError("Account is inactive")

    user.last_login = utcnow()
    await db.commit()
    await db.refresh(user)

    set_user_id(str(user.id))
    logger.log_auth_event("signin", True, user_email=user.email, client_ip=client_ip(request))
    tokens = issue_tokens(user)
    return AuthResponse(**tokens.model_dump(), session=build_session_response(user))


@router.post("/refresh", response_model=Token)
async def refresh(payload: RefreshRequest, db: AsyncSession = Depends(get_db)):
    """New token pair from a refresh token"""
    user = await user_from_token(payload.refresh_token, db, token_type="refresh")
    logger.log_auth_event("refresh", True, user_email=user.email)
    return issue_tokens(user)


@router.post("/signout", response_model=MessageResponse)
async def signout(current_user: User = Depends(get_current_user)):
    """Tokens are stateless; sign out is recorded and the client drops them"""
    logger.log_auth_event("signout", True, user_email=current_user.email)
    return MessageResponse(message="Signed out")


@router.get("/me", response_model=SessionResponse)
async def me(current_user: User = Depends(get_current_user)):
    """Current user with role set and theme"""
    return build_session_response(current_user)
