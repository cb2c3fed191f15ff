"""
Administrative audit routes over the user log.

- GET    /user-logs            paginated, identity-joined listing
- DELETE /user-logs/{log_id}   remove one entry
"""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from sessionlog.api import deps
from sessionlog.core.config import settings
from sessionlog.models.user import User
from sessionlog.schemas.auth import MessageResponse
from sessionlog.schemas.user_log import UserLogListResponse
from sessionlog.services.audit_deletion import AuditDeletionService
from sessionlog.services.audit_query import AuditQueryService, build_page_params

router = APIRouter(tags=["user-logs"])


@router.get(
    "",
    response_model=UserLogListResponse,
    summary="List user log entries",
    description="Newest login first. `total` counts every entry, not just this page.",
)
def list_user_logs(
    _admin: Annotated[User, Depends(deps.get_current_admin)],
    page: int = Query(1, ge=1),
    page_size: int = Query(
        settings.AUDIT_DEFAULT_PAGE_SIZE, ge=1, le=settings.AUDIT_MAX_PAGE_SIZE
    ),
    db: Session = Depends(deps.get_db),
) -> UserLogListResponse:
    params = build_page_params(page, page_size)
    return AuditQueryService(db).list_entries(params)


@router.delete(
    "/{log_id}",
    response_model=MessageResponse,
    summary="Delete a user log entry",
)
def delete_user_log(
    log_id: UUID,
    _admin: Annotated[User, Depends(deps.get_current_admin)],
    db: Session = Depends(deps.get_db),
) -> MessageResponse:
    AuditDeletionService(db).delete_entry(log_id)
    return MessageResponse(message="Log deleted successfully")
