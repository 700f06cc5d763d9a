"""Authentication router.

API endpoints for dashboard user registration, login, logout and the
current-user view.
"""

from datetime import UTC, datetime

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ecotracker.config import settings
from ecotracker.core.auth import CurrentUser
from ecotracker.core.security import create_access_token, hash_password, verify_password
from ecotracker.database import get_db
from ecotracker.logging_config import get_logger
from ecotracker.middleware.rate_limit import limiter
from ecotracker.models.user import User
from ecotracker.schemas.auth import (
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    UserRegistrationRequest,
    UserResponse,
)

logger = get_logger(__name__)

router = APIRouter(prefix="/api/auth", tags=["authentication"])

_DUPLICATE_EMAIL_DETAIL = "An account with this email already exists"


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "User registered successfully"},
        409: {"description": "Email already exists"},
    },
)
async def register_user(
    body: UserRegistrationRequest,
    db: AsyncSession = Depends(get_db),
) -> UserResponse:
    """Register a new dashboard account.

    The password is hashed using bcrypt before storage.

    Raises:
        HTTPException 409: If email already exists
    """
    email = body.email.lower()
    existing_user = await db.execute(select(User).where(User.email == email))
    if existing_user.scalar_one_or_none():
        logger.warning("Registration attempt with existing email", email=email)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_DUPLICATE_EMAIL_DETAIL,
        )

    user = User(
        email=email,
        hashed_password=hash_password(body.password),
        first_name=body.first_name,
        last_name=body.last_name,
        is_active=True,
    )

    try:
        db.add(user)
        await db.commit()
        await db.refresh(user)
    except IntegrityError:
        await db.rollback()
        logger.warning("Registration failed - integrity error", email=email)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=_DUPLICATE_EMAIL_DETAIL,
        )

    logger.info("User registered successfully", user_id=str(user.id))
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        200: {"description": "Login successful"},
        401: {"description": "Invalid credentials"},
    },
)
@limiter.limit("10/minute")
async def login(
    body: LoginRequest,
    response: Response,
    request: Request,
    db: AsyncSession = Depends(get_db),
) -> LoginResponse:
    """Authenticate a user and set the session cookie.

    The JWT is returned in an httpOnly cookie and expires after the
    configured session duration (default 24 hours).
    """
    client_ip = request.client.host if request.client else "unknown"

    result = await db.execute(select(User).where(User.email == body.email.lower()))
    user = result.scalar_one_or_none()

    if not user or not user.is_active or not verify_password(
        body.password, user.hashed_password
    ):
        logger.warning(
            "Failed login attempt",
            email=body.email,
            client_ip=client_ip,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    token = create_access_token(user_id=user.id, email=user.email)

    response.set_cookie(
        key=settings.jwt_cookie_name,
        value=token,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="lax",
        max_age=settings.session_expire_hours * 3600,
        path="/",
    )

    user.last_login_at = datetime.now(UTC)
    await db.commit()

    logger.info(
        "User logged in successfully",
        user_id=str(user.id),
        client_ip=client_ip,
    )

    return LoginResponse(user=UserResponse.model_validate(user))


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response) -> LogoutResponse:
    """Clear the session cookie."""
    response.delete_cookie(
        key=settings.jwt_cookie_name,
        path="/",
        secure=settings.cookie_secure,
        httponly=True,
        samesite="lax",
    )
    return LogoutResponse()


@router.get(
    "/user",
    response_model=UserResponse,
    responses={401: {"description": "Not authenticated"}},
)
async def get_current_user_profile(current_user: CurrentUser) -> UserResponse:
    return UserResponse.model_validate(current_user)
