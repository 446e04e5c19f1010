"""
In-app notifications.

``notify`` and ``notify_many`` only stage rows on the session; the calling
workflow owns the transaction. The inbox functions below commit their own.
"""

from typing import Iterable, List, Optional, Union

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.errors import Forbidden, InvalidInput, NotFound
from app.models.notification import Notification, NotificationType
from app.schemas.common import Pagination
from app.schemas.notification import NotificationOut, NotificationPage


def notify(
    db: AsyncSession,
    user_id: int,
    type: NotificationType,
    title: str,
    content: str,
    related_id: Optional[Union[int, str]] = None,
) -> Notification:
    """Stage one notification on the session (flushed with the caller's work)."""
    notification = Notification(
        user_id=user_id,
        type=type,
        title=title,
        content=content,
        related_id=str(related_id) if related_id is not None else None,
        is_read=False,
    )
    db.add(notification)
    return notification


def notify_many(
    db: AsyncSession,
    user_ids: Iterable[int],
    type: NotificationType,
    title: str,
    content: str,
    related_id: Optional[Union[int, str]] = None,
) -> List[Notification]:
    return [notify(db, uid, type, title, content, related_id) for uid in user_ids]


# ═══════════════════════════════════════════════════════════════
#  Inbox
# ═══════════════════════════════════════════════════════════════

async def list_notifications(
    db: AsyncSession,
    user_id: int,
    page: int = 1,
    limit: int = 20,
    unread_only: bool = False,
) -> NotificationPage:
    filters = [Notification.user_id == user_id]
    if unread_only:
        filters.append(Notification.is_read.is_(False))

    result = await db.execute(
        select(Notification)
        .where(*filters)
        .order_by(desc(Notification.created_at), desc(Notification.id))
        .offset((page - 1) * limit)
        .limit(limit)
    )
    total = (await db.execute(select(func.count(Notification.id)).where(*filters))).scalar() or 0
    unread_count = (await db.execute(
        select(func.count(Notification.id)).where(
            Notification.user_id == user_id,
            Notification.is_read.is_(False),
        )
    )).scalar() or 0

    return NotificationPage(
        notifications=[NotificationOut.model_validate(n) for n in result.scalars().all()],
        pagination=Pagination.build(total, page, limit),
        unread_count=unread_count,
    )


async def mark_read(
    db: AsyncSession,
    user_id: int,
    ids: Optional[List[int]] = None,
    all: bool = False,
) -> int:
    """Mark the caller's notifications read; returns how many changed."""
    if not all and not ids:
        raise InvalidInput("Either notification IDs or 'all' flag is required")

    query = update(Notification).where(
        Notification.user_id == user_id,
        Notification.is_read.is_(False),
    )
    if not all:
        query = query.where(Notification.id.in_(ids))

    result = await db.execute(query.values(is_read=True).execution_options(synchronize_session=False))
    await db.commit()
    return result.rowcount


async def delete_notifications(
    db: AsyncSession,
    user_id: int,
    notification_id: Optional[int] = None,
    all: bool = False,
) -> int:
    if all:
        result = await db.execute(delete(Notification).where(Notification.user_id == user_id))
        await db.commit()
        return result.rowcount

    if notification_id is None:
        raise InvalidInput("Either notification ID or 'all' flag is required")

    notification = (await db.execute(
        select(Notification).where(Notification.id == notification_id)
    )).scalar_one_or_none()
    if notification is None:
        raise NotFound("Notification not found")
    if notification.user_id != user_id:
        raise Forbidden("You don't have permission to delete this notification")

    await db.delete(notification)
    await db.commit()
    return 1
