"""Pydantic schemas for notifications."""

from datetime import datetime
from typing import Optional
from uuid import UUID
from app.models.notification import NotificationType
from app.schemas.common import CamelModel


class NotificationOut(CamelModel):
    id: UUID
    user_id: UUID
    title: str
    message: str
    type: NotificationType
    link: Optional[str] = None
    is_read: bool
    created_at: datetime


class NotificationList(CamelModel):
    """Paginated notifications."""
    notifications: list[NotificationOut]
    total: int
    page: int
    page_size: int


class NotificationUnreadCount(CamelModel):
    count: int
