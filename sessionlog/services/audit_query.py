"""
Administrative read path over the user log.

Canonical contract: entries sorted by login_time descending (latest created
first on ties), offset (page - 1) * page_size, and a total that counts the whole
collection regardless of the page. Pages past the end are empty, not errors.
Pages are not pinned against concurrent logins: a new entry shifts every
later entry one slot down between two page requests.
"""
import logging
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from sessionlog.core.config import settings
from sessionlog.core.errors import ValidationError
from sessionlog.schemas.user_log import PageParams, UserLogListResponse
from sessionlog.services.identity_resolver import IdentityJoinResolver
from sessionlog.services.user_log_store import UserLogStore

logger = logging.getLogger(__name__)

# Largest OFFSET a database accepts (signed 64-bit)
MAX_SQL_OFFSET = 2**63 - 1


def build_page_params(page: int = 1, page_size: Optional[int] = None) -> PageParams:
    """Validate raw paging input into PageParams, raising ValidationError."""
    data = {"page": page}
    if page_size is not None:
        data["page_size"] = page_size
    try:
        return PageParams(**data)
    except PydanticValidationError as exc:
        first = exc.errors()[0]
        raise ValidationError(f"Invalid pagination: {first['msg']}") from exc


class AuditQueryService:
    """Paginated, identity-joined listing of user log entries."""

    def __init__(
        self,
        db: Session,
        store: Optional[UserLogStore] = None,
        resolver: Optional[IdentityJoinResolver] = None,
    ):
        self.db = db
        self.store = store or UserLogStore(db)
        self.resolver = resolver or IdentityJoinResolver(db)

    def list_entries(self, params: Optional[PageParams] = None) -> UserLogListResponse:
        params = params or PageParams()

        if params.offset > MAX_SQL_OFFSET:
            # Past any possible end; the database would reject the bound value
            entries = []
        else:
            entries = self.store.page(params.offset, params.page_size)
        logs = self.resolver.resolve(entries)
        total = self.store.count(estimated=settings.AUDIT_TOTAL_ESTIMATED)

        logger.debug(
            "User logs listed | page=%s | page_size=%s | returned=%s | total=%s",
            params.page,
            params.page_size,
            len(logs),
            total,
        )
        return UserLogListResponse(
            logs=logs, total=total, page=params.page, page_size=params.page_size
        )
