"""
Authentication service for SessionLog
Handles password hashing, JWT issuance and the login/logout orchestration
that feeds the user log.
"""
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID, uuid4

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sessionlog.core.config import settings
from sessionlog.core.errors import AuthError, PersistenceError
from sessionlog.core.security import AuthContext, UserRole
from sessionlog.models.user import User
from sessionlog.models.user_log import UserLog
from sessionlog.schemas.auth import UserCreate
from sessionlog.services.session_lifecycle import SessionLifecycleManager

logger = logging.getLogger(__name__)

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# JWT settings
ALGORITHM = "HS256"

INVALID_CREDENTIALS = "Invalid credentials"


def _secret() -> str:
    return settings.SECRET_KEY.get_secret_value() if settings.SECRET_KEY else "development-secret-key"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    return pwd_context.verify(plain_password, hashed_password)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    return pwd_context.hash(password)


def create_access_token(user_id: UUID, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a signed, time-bound JWT access token."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES))

    payload = {
        "sub": str(user_id),
        "role": role,
        "exp": expire,
        "iat": now,
        "jti": uuid4().hex,  # one token per issuance, even within the same second
    }
    return jwt.encode(payload, _secret(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode and validate a JWT access token."""
    try:
        return jwt.decode(token, _secret(), algorithms=[ALGORITHM])
    except JWTError as e:
        if "expired" in str(e).lower():
            raise AuthError("Token expired", 401)
        raise AuthError("Invalid token", 401)


def auth_context_from_token(token: str) -> AuthContext:
    """Build the per-request AuthContext from a bearer token."""
    payload = decode_access_token(token)
    try:
        user_id = UUID(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise AuthError("Token does not contain user info", 401)
    return AuthContext(user_id=user_id, role=payload.get("role", UserRole.USER.value), token=token)


class AuthService:
    """Authentication service for user management and session logging."""

    def __init__(self, db: Session, lifecycle: Optional[SessionLifecycleManager] = None):
        self.db = db
        self.lifecycle = lifecycle or SessionLifecycleManager(db)

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Get user by email."""
        return self.db.query(User).filter(User.email == email.lower()).first()

    def register(self, data: UserCreate) -> User:
        """Register a new user with email/password."""
        if self.get_user_by_email(data.email):
            raise AuthError("User already exists", 400)

        user = User(
            email=data.email.lower(),
            password_hash=hash_password(data.password),
            full_name=data.full_name,
            role=UserRole.USER.value,
        )
        user.update_last_login()

        try:
            self.db.add(user)
            self.db.commit()
            self.db.refresh(user)
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("User registration failed: %s", exc)
            raise PersistenceError("Failed to register user") from exc

        logger.info("User registered | user_id=%s", user.id)
        return user

    def login(self, email: str, password: str, role: Optional[str] = None) -> User:
        """
        Authenticate user with email/password.

        Unknown email and wrong password raise the same error so callers
        cannot probe which accounts exist.
        """
        user = self.get_user_by_email(email)

        if not user or not verify_password(password, user.password_hash):
            logger.warning("Login rejected: invalid credentials")
            raise AuthError(INVALID_CREDENTIALS, 401)

        if role and user.role != role:
            logger.warning("Login rejected: role mismatch | user_id=%s", user.id)
            raise AuthError("Unauthorized login attempt", 403)

        user.update_last_login()
        try:
            self.db.commit()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Last login update failed: %s", exc)
            raise PersistenceError("Failed to record login") from exc

        return user

    def create_auth_response(self, user: User, ip_address: str) -> dict:
        """Issue a token and record the session; audit failures never block login."""
        token = create_access_token(user.id, user.role)
        response = {
            "access_token": token,
            "token_type": "bearer",
            "user": {
                "id": str(user.id),
                "email": user.email,
                "full_name": user.full_name,
                "role": user.role,
                "created_at": user.created_at,
            },
        }

        self.lifecycle.try_record_login(user, user.role, token, ip_address)
        return response

    def logout(self, context: AuthContext) -> Optional[UserLog]:
        """Close the session bound to the caller's token, if still open."""
        return self.lifecycle.record_logout(context.user_id, context.token)
