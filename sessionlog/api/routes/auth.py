"""
Authentication API routes for SessionLog
"""
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from sessionlog.api import deps
from sessionlog.core.errors import AuthError
from sessionlog.core.security import AuthContext, get_client_ip
from sessionlog.models.user import User
from sessionlog.schemas.auth import (
    AuthResponse,
    MessageResponse,
    UserCreate,
    UserLogin,
    UserRead,
)
from sessionlog.services.auth_service import AuthService

router = APIRouter(tags=["auth"])


def get_auth_service(db: Session = Depends(deps.get_db)) -> AuthService:
    """Dependency to get auth service."""
    return AuthService(db)


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="Create an account with email and password and open its first session",
)
async def register(
    data: UserCreate,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Register a new user with email/password."""
    try:
        user = auth_service.register(data)
        return auth_service.create_auth_response(user, get_client_ip(request))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Log in",
    description="Authenticate with email and password; an optional role must match the account",
)
async def login(
    data: UserLogin,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> AuthResponse:
    """Authenticate user with email/password."""
    try:
        user = auth_service.login(
            data.email, data.password, data.role.value if data.role else None
        )
        return auth_service.create_auth_response(user, get_client_ip(request))
    except AuthError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Log out",
    description="Close the session opened with the presented token. Repeating it is harmless.",
)
async def logout(
    context: Annotated[AuthContext, Depends(deps.get_auth_context)],
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    auth_service.logout(context)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/me",
    response_model=UserRead,
    summary="Get current profile",
    description="Return the authenticated user's profile",
)
async def get_me(
    current_user: Annotated[User, Depends(deps.get_current_user)],
) -> UserRead:
    """Get current authenticated user profile."""
    return UserRead(
        id=str(current_user.id),
        email=current_user.email,
        full_name=current_user.full_name,
        role=current_user.role,
        created_at=current_user.created_at,
    )
