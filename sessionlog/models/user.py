"""
User model (identity store) for SessionLog authentication
"""
from sqlalchemy import CheckConstraint, Column, String

from sessionlog.db.base import Base, TimestampMixin, UTCDateTime, UUIDMixin, utcnow


class User(Base, UUIDMixin, TimestampMixin):
    """User account for authentication and authorization."""

    __tablename__ = "users"

    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")  # 'admin' or 'user'
    last_login_at = Column(UTCDateTime(), nullable=True)

    __table_args__ = (
        CheckConstraint("role IN ('admin', 'user')", name="users_role_check"),
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"

    @property
    def is_admin(self) -> bool:
        """Check if user has admin role."""
        return self.role == "admin"

    def update_last_login(self) -> None:
        """Update last login timestamp."""
        self.last_login_at = utcnow()
