"""Pydantic schemas for authentication endpoints."""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import EmailStr
from app.models.user import UserRole
from app.schemas.common import CamelModel


class UserLogin(CamelModel):
    """Request schema for user login."""
    email: EmailStr
    password: str


class UserOut(CamelModel):
    """Response schema for user info."""
    id: UUID
    email: str
    name: str
    role: UserRole
    is_active: bool
    last_login_at: Optional[datetime] = None


class Token(CamelModel):
    """Login response: JWT plus the authenticated user."""
    access_token: str
    token_type: str = "bearer"
    user: UserOut
