from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from app.core.database import get_db
from app.core.exceptions import (
    AuthenticationError,
    InactiveAccountError,
    ConflictError,
    UserNotFoundError,
    ProfileNotFoundError,
)
from app.core.security import verify_password, get_password_hash, create_access_token
from app.core.logging_config import logger, set_user_id
from app.core.rate_limiter import login_rate_limit, register_rate_limit
from app.core.types import utcnow
from app.models.user import User, UserRole
from app.models.profile import Profile
from app.schemas.auth import UserRegister, UserLogin, UserResponse, AuthResponse, LinkProfileRequest
from app.schemas.common import MessageResponse
from app.modules.auth.dependencies import get_current_user


router = APIRouter()


def build_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        email=user.email,
        role=user.role.value,
        is_active=user.is_active,
        profile_id=str(user.profile_id) if user.profile_id else None,
        created_at=user.created_at,
        last_login=user.last_login,
    )


def build_auth_response(user: User, message: str) -> AuthResponse:
    token = create_access_token({
        "sub": str(user.id),
        "email": user.email,
        "role": user.role.value,
    })
    return AuthResponse(
        message=message,
        user=build_user_response(user),
        redirect_url=user.redirect_url,
        access_token=token,
    )


@router.post("/register", response_model=AuthResponse)
@register_rate_limit()
async def register(
    request: Request,
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a new account"""
    client_ip = request.client.host if request.client else "unknown"
    email = user_data.email.lower()

    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        logger.log_auth_event(
            event="register",
            success=False,
            user_email=email,
            reason="Email already registered",
            client_ip=client_ip
        )
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        hashed_password=get_password_hash(user_data.password),
        role=UserRole(user_data.role.value),
        is_active=True,
    )
    db.add(user)
    try:
        await db.flush()
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Email already registered")

    logger.log_auth_event(
        event="register",
        success=True,
        user_email=email,
        client_ip=client_ip,
        user_role=user.role.value
    )

    return build_auth_response(user, "User registered successfully")


@router.post("/login", response_model=AuthResponse)
@login_rate_limit()
async def login(
    request: Request,
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Login with email and password"""
    client_ip = request.client.host if request.client else "unknown"
    email = credentials.email.lower()

    result = await db.execute(select(User).where(User.email == email))
    user = result.scalar_one_or_none()

    if not user:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Unknown email",
            client_ip=client_ip
        )
        raise AuthenticationError("Invalid email or password")

    if not user.is_active:
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Account deactivated",
            client_ip=client_ip
        )
        raise InactiveAccountError()

    if not verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event(
            event="login",
            success=False,
            user_email=email,
            reason="Invalid password",
            client_ip=client_ip
        )
        raise AuthenticationError("Invalid email or password")

    user.last_login = utcnow()
    await db.commit()

    set_user_id(str(user.id))
    logger.log_auth_event(
        event="login",
        success=True,
        user_email=email,
        client_ip=client_ip
    )

    return build_auth_response(user, "Login successful")


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get the account behind the bearer token"""
    return build_user_response(current_user)


@router.put("/users/{user_id}/profile", response_model=MessageResponse)
async def link_user_profile(
    user_id: str,
    link: LinkProfileRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Link an account to a profile (or unlink with profileId null). Admins may link any account."""
    if str(current_user.id) != user_id and current_user.role != UserRole.ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not allowed to modify another account"
        )

    result = await db.execute(select(User).where(User.id == user_id))
    user = result.scalar_one_or_none()
    if not user:
        raise UserNotFoundError(user_id)

    if link.profile_id:
        profile = await db.get(Profile, link.profile_id)
        if not profile:
            raise ProfileNotFoundError(link.profile_id)

    user.profile_id = link.profile_id
    await db.commit()

    logger.info(f"User {user_id} linked to profile {link.profile_id}")
    return MessageResponse(message="User linked to profile successfully")
