"""
Persistence for user log (session audit) entries.

No business rules live here: inserts, the atomic close of the newest open
entry, ordered pages, counts and the atomic delete. Every driver failure is
rolled back and re-raised as PersistenceError.
"""
from __future__ import annotations

import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select, text, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, aliased

from sessionlog.core.errors import PersistenceError
from sessionlog.models.user_log import UserLog

logger = logging.getLogger(__name__)


class UserLogStore:
    """Thin repository over the user_logs table."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, operation: str, exc: SQLAlchemyError) -> PersistenceError:
        self.db.rollback()
        logger.error("user_logs %s failed: %s", operation, exc)
        return PersistenceError(f"Failed to {operation} user log entry")

    def insert(self, entry: UserLog) -> UserLog:
        try:
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        except SQLAlchemyError as exc:
            raise self._fail("create", exc) from exc
        return entry

    def close_latest_open(
        self, user_id: UUID, token: str, logout_time: datetime
    ) -> Optional[UserLog]:
        """
        Set logout_time on the newest open entry for (user_id, token).

        One UPDATE ... RETURNING statement; the outer `logout_time IS NULL`
        guard makes a concurrent second call match nothing.
        """
        # Aliased so the subquery is not correlated to the UPDATE target
        candidate = aliased(UserLog)
        newest_open = (
            select(candidate.seq)
            .where(
                candidate.user_id == user_id,
                candidate.token == token,
                candidate.logout_time.is_(None),
            )
            .order_by(candidate.login_time.desc(), candidate.seq.desc())
            .limit(1)
            .scalar_subquery()
        )
        stmt = (
            update(UserLog)
            .where(UserLog.seq == newest_open, UserLog.logout_time.is_(None))
            .values(logout_time=logout_time)
            .returning(UserLog)
            .execution_options(synchronize_session=False)
        )
        try:
            closed = self.db.execute(stmt).scalars().first()
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("update", exc) from exc
        return closed

    def page(self, offset: int, limit: int) -> List[UserLog]:
        """Entries newest first; creation order (seq) breaks login_time ties."""
        stmt = (
            select(UserLog)
            .order_by(UserLog.login_time.desc(), UserLog.seq.desc())
            .offset(offset)
            .limit(limit)
        )
        try:
            return list(self.db.execute(stmt).scalars().all())
        except SQLAlchemyError as exc:
            raise self._fail("read", exc) from exc

    def count(self, estimated: bool = False) -> int:
        if estimated:
            approx = self._estimated_count()
            if approx is not None:
                return approx
        try:
            return int(self.db.execute(select(func.count(UserLog.id))).scalar_one())
        except SQLAlchemyError as exc:
            raise self._fail("count", exc) from exc

    def _estimated_count(self) -> Optional[int]:
        """Catalog row estimate (PostgreSQL only); None when unavailable."""
        if self.db.get_bind().dialect.name != "postgresql":
            return None
        try:
            value = self.db.execute(
                text(
                    "SELECT reltuples::bigint FROM pg_class WHERE relname = :table"
                ),
                {"table": UserLog.__tablename__},
            ).scalar()
        except SQLAlchemyError as exc:
            logger.warning("user_logs row estimate failed: %s", exc)
            self.db.rollback()
            return None
        # reltuples is -1 until the table has been analyzed
        if value is None or value < 0:
            return None
        return int(value)

    def delete_by_id(self, log_id: UUID) -> Optional[UUID]:
        stmt = delete(UserLog).where(UserLog.id == log_id).returning(UserLog.id)
        try:
            deleted_id = self.db.execute(stmt).scalar()
            self.db.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete", exc) from exc
        return deleted_id
