"""Notification inbox endpoints."""

import logging
from uuid import UUID
from fastapi import APIRouter, HTTPException, Depends, Query
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.dependencies import get_current_user
from app.models.notification import Notification
from app.models.user import User
from app.schemas.common import ApiResponse
from app.schemas.notification import NotificationOut, NotificationList, NotificationUnreadCount

router = APIRouter()
logger = logging.getLogger(__name__)


@router.get("", response_model=ApiResponse[NotificationList])
async def list_notifications(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100, alias="pageSize"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """The caller's notifications, newest first."""
    total = (await db.execute(
        select(func.count(Notification.id)).where(Notification.user_id == current_user.id)
    )).scalar_one()

    result = await db.execute(
        select(Notification)
        .where(Notification.user_id == current_user.id)
        .order_by(Notification.created_at.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    notifications = result.scalars().all()

    return ApiResponse(data=NotificationList(
        notifications=[NotificationOut.model_validate(n) for n in notifications],
        total=total,
        page=page,
        page_size=page_size,
    ))


@router.get("/unread-count", response_model=ApiResponse[NotificationUnreadCount])
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = (await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == current_user.id,
            Notification.is_read.is_(False),
        )
    )).scalar_one()
    return ApiResponse(data=NotificationUnreadCount(count=count))


@router.put("/{notification_id}/read", response_model=ApiResponse[NotificationOut])
async def mark_notification_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    result = await db.execute(
        select(Notification).where(
            Notification.id == notification_id,
            Notification.user_id == current_user.id,
        )
    )
    notification = result.scalar_one_or_none()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.is_read = True
    await db.commit()
    logger.info("Notification %s marked as read by user %s", notification_id, current_user.id)
    return ApiResponse(data=NotificationOut.model_validate(notification), message="Notification marked as read")
