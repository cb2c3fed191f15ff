import logging
from typing import Optional
from uuid import UUID

from sqlalchemy.orm import Session

from sessionlog.core.errors import NotFoundError
from sessionlog.services.user_log_store import UserLogStore

logger = logging.getLogger(__name__)


class AuditDeletionService:
    """Removes a single user log entry. Purely historical: no side effects."""

    def __init__(self, db: Session, store: Optional[UserLogStore] = None):
        self.db = db
        self.store = store or UserLogStore(db)

    def delete_entry(self, log_id: UUID) -> UUID:
        """Delete one entry; repeated deletes of the same id raise NotFoundError."""
        deleted_id = self.store.delete_by_id(log_id)
        if deleted_id is None:
            raise NotFoundError("Log not found")
        logger.info("User log deleted | log_id=%s", deleted_id)
        return deleted_id
