"""Notifications router — inbox, mark-read and delete."""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.models.user import User
from app.routers.auth import require_user
from app.schemas.notification import MarkReadIn, NotificationPage
from app.services import notifications as notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=NotificationPage)
async def get_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    unread: bool = False,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """Newest first, plus the caller's total unread count."""
    return await notification_service.list_notifications(
        db, current_user.id, page=page, limit=limit, unread_only=unread
    )


@router.post("")
async def mark_read(
    payload: MarkReadIn,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    """Mark the listed notifications (or all of them) as read."""
    updated = await notification_service.mark_read(
        db, current_user.id, ids=payload.ids, all=bool(payload.all)
    )
    return {"success": True, "updated": updated}


@router.delete("")
async def delete_notifications(
    notification_id: Optional[int] = Query(None, alias="id"),
    all: bool = False,
    current_user: User = Depends(require_user),
    db: AsyncSession = Depends(get_db),
):
    deleted = await notification_service.delete_notifications(
        db, current_user.id, notification_id=notification_id, all=all
    )
    return {"success": True, "deleted": deleted}
