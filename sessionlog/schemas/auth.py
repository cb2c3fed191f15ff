"""
Authentication schemas for SessionLog
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from sessionlog.core.security import UserRole


# User schemas
class UserBase(BaseModel):
    """Base user data."""
    email: EmailStr
    full_name: str = Field(..., min_length=2, max_length=255)


class UserCreate(UserBase):
    """Schema for user registration."""
    password: str = Field(..., min_length=8, max_length=72)


class UserLogin(BaseModel):
    """Schema for email/password login, with an optional role hint."""
    email: EmailStr
    password: str
    role: Optional[UserRole] = None


class UserRead(UserBase):
    """Schema for reading user data."""
    id: str
    role: str
    created_at: datetime

    model_config = {"from_attributes": True}


# Auth response schemas
class AuthResponse(BaseModel):
    """Authentication response with token and user."""
    access_token: str
    token_type: str = "bearer"
    user: UserRead


class MessageResponse(BaseModel):
    message: str
