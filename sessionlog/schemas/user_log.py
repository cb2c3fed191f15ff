from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from sessionlog.core.config import settings


class PageParams(BaseModel):
    """
    Pagination of the user log listing.

    Defaults: page=1, page_size=AUDIT_DEFAULT_PAGE_SIZE (20).
    page_size is capped at AUDIT_MAX_PAGE_SIZE (100).
    """

    page: int = Field(default=1, ge=1)
    page_size: int = Field(default_factory=lambda: settings.AUDIT_DEFAULT_PAGE_SIZE, ge=1)

    @model_validator(mode="after")
    def check_page_size_cap(self) -> "PageParams":
        if self.page_size > settings.AUDIT_MAX_PAGE_SIZE:
            raise ValueError(
                f"page_size exceeds max allowed ({settings.AUDIT_MAX_PAGE_SIZE})"
            )
        return self

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class UserLogRead(BaseModel):
    """A user log entry joined with the current identity of its user."""

    id: UUID
    user_id: UUID
    login_time: datetime
    logout_time: Optional[datetime] = None
    token: str
    ip_address: str
    login_role: str  # snapshot taken at login
    role: Optional[str] = None  # current identity role, None if user deleted
    full_name: Optional[str] = None


class UserLogListResponse(BaseModel):
    logs: List[UserLogRead]
    total: int
    page: int
    page_size: int
