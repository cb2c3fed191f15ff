import logging
from typing import Dict, List, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from sessionlog.core.errors import PersistenceError
from sessionlog.models.user import User
from sessionlog.models.user_log import UserLog
from sessionlog.schemas.user_log import UserLogRead

logger = logging.getLogger(__name__)


class IdentityJoinResolver:
    """
    Attach display identity (full_name, role) to a page of user log entries.

    Left-join semantics: entries whose user no longer exists are kept, with
    full_name and role set to None. Input order is preserved.
    """

    def __init__(self, db: Session):
        self.db = db

    def _lookup(self, user_ids) -> Dict:
        if not user_ids:
            return {}
        stmt = select(User.id, User.full_name, User.role).where(User.id.in_(list(user_ids)))
        try:
            rows = self.db.execute(stmt).all()
        except SQLAlchemyError as exc:
            self.db.rollback()
            logger.error("Identity lookup failed: %s", exc)
            raise PersistenceError("Failed to resolve user identities") from exc
        return {row.id: row for row in rows}

    def resolve(self, entries: Sequence[UserLog]) -> List[UserLogRead]:
        identities = self._lookup({entry.user_id for entry in entries})

        resolved: List[UserLogRead] = []
        for entry in entries:
            identity = identities.get(entry.user_id)
            resolved.append(
                UserLogRead(
                    id=entry.id,
                    user_id=entry.user_id,
                    login_time=entry.login_time,
                    logout_time=entry.logout_time,
                    token=entry.token,
                    ip_address=entry.ip_address,
                    login_role=entry.role,
                    role=identity.role if identity else None,
                    full_name=identity.full_name if identity else None,
                )
            )
        return resolved
