"""Per-user notification inbox."""

import logging
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


def create_notification(
    db: AsyncSession,
    user_id: UUID,
    title: str,
    message: str,
    notification_type: NotificationType,
    link: Optional[str] = None,
) -> Notification:
    """Stage a notification in the caller's unit of work.

    The caller commits, so the notification lands together with the change
    that produced it.
    """
    notification = Notification(
        user_id=user_id,
        title=title,
        message=message,
        type=notification_type,
        link=link,
        is_read=False,
    )
    db.add(notification)

    logger.info(
        "Queued notification for user %s: %s (%s)",
        user_id,
        title,
        notification_type.value,
    )
    return notification


def create_lead_assigned_notification(db: AsyncSession, user_id: UUID, lead) -> Notification:
    """Tell the assignee a lead is now theirs."""
    label = lead.full_name if not lead.company else f"{lead.full_name} ({lead.company})"
    return create_notification(
        db,
        user_id=user_id,
        title="Novo lead atribuído",
        message=f"O lead {label} foi atribuído a você.",
        notification_type=NotificationType.LEAD_ASSIGNED,
        link=f"/admin/leads/{lead.id}",
    )
