"""
Session lifecycle manager: the only writer of user log entries.

record_login inserts an open entry after a successful authentication;
record_logout closes the newest open entry matching (user, token).
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from sessionlog.core.errors import PersistenceError, ValidationError
from sessionlog.db.base import utcnow
from sessionlog.models.user import User
from sessionlog.models.user_log import UserLog
from sessionlog.services.user_log_store import UserLogStore

logger = logging.getLogger(__name__)


def _require_text(value, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must be a non-empty string")
    return value


class SessionLifecycleManager:
    """Creates and closes user log entries."""

    def __init__(self, db: Session, store: Optional[UserLogStore] = None):
        self.db = db
        self.store = store or UserLogStore(db)

    def record_login(
        self, user: User, role: str, token: str, ip_address: str
    ) -> UserLog:
        """
        Persist an open entry for a freshly issued token.

        Raises:
            ValidationError: malformed input, nothing is written
            PersistenceError: the store rejected the insert
        """
        if user is None or getattr(user, "id", None) is None:
            raise ValidationError("user must be a persisted identity")
        _require_text(role, "role")
        _require_text(token, "token")
        if not isinstance(ip_address, str):
            raise ValidationError("ip_address must be a string")

        entry = UserLog(
            user_id=user.id,
            role=role,
            login_time=utcnow(),
            logout_time=None,
            token=token,
            ip_address=ip_address,
        )
        entry = self.store.insert(entry)
        logger.info("Session opened | log_id=%s | user_id=%s", entry.id, user.id)
        return entry

    def try_record_login(
        self, user: User, role: str, token: str, ip_address: str
    ) -> Optional[UserLog]:
        """
        record_login for the authentication flow.

        A store outage must not fail a login: the error is logged and None is
        returned. That session can then never be closed in the log.
        """
        try:
            return self.record_login(user, role, token, ip_address)
        except PersistenceError as exc:
            logger.warning(
                "User log entry not recorded, login continues | user_id=%s | error=%s",
                getattr(user, "id", None),
                exc.message,
            )
            return None

    def record_logout(self, user_id: UUID, token: str) -> Optional[UserLog]:
        """
        Close the newest open entry for (user_id, token).

        Returns None when nothing was open for that pair (already closed,
        never recorded or another token); logout is idempotent.
        """
        if user_id is None:
            raise ValidationError("user_id is required")
        _require_text(token, "token")

        closed = self.store.close_latest_open(user_id, token, utcnow())
        if closed is None:
            logger.info("Logout matched no open session | user_id=%s", user_id)
        else:
            logger.info("Session closed | log_id=%s | user_id=%s", closed.id, user_id)
        return closed
