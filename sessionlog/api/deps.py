"""Request-scoped dependencies: database session and bearer authentication."""
import logging
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from sessionlog.core.errors import AuthError, AuthzError
from sessionlog.core.security import AuthContext
from sessionlog.db.session import get_db
from sessionlog.models.user import User
from sessionlog.services.auth_service import auth_context_from_token

security = HTTPBearer(auto_error=False)
logger = logging.getLogger(__name__)

__all__ = [
    "get_db",
    "get_auth_context",
    "get_current_user",
    "get_current_admin",
]


async def get_auth_context(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> AuthContext:
    """Decode the bearer token into an AuthContext; no database access."""
    if not credentials:
        logger.warning(
            "Auth missing | id=%s | method=%s | path=%s",
            getattr(request.state, "request_id", None),
            request.method,
            request.url.path,
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token not provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return auth_context_from_token(credentials.credentials)
    except AuthError as exc:
        logger.warning(
            "Auth failed | id=%s | path=%s | error=%s",
            getattr(request.state, "request_id", None),
            request.url.path,
            exc.message,
        )
        raise HTTPException(
            status_code=exc.status_code,
            detail=exc.message,
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc


async def get_current_user(
    context: Annotated[AuthContext, Depends(get_auth_context)],
    db: Session = Depends(get_db),
) -> User:
    """Dependency to get current authenticated user from JWT."""
    user = db.query(User).filter(User.id == context.user_id).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_admin(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    """Dependency to get current admin user; the role is read from the store."""
    if not current_user.is_admin:
        logger.warning("Admin access denied | user_id=%s", current_user.id)
        raise AuthzError("Admin privileges required")
    return current_user
