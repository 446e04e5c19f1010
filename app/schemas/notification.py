"""Notification Pydantic schemas."""

from datetime import datetime
from typing import List, Optional

from app.models.notification import NotificationType
from app.schemas.common import CamelModel, Pagination


class NotificationOut(CamelModel):
    id: int
    user_id: int
    type: NotificationType
    title: str
    content: str
    related_id: Optional[str] = None
    is_read: bool
    created_at: Optional[datetime] = None


class NotificationPage(CamelModel):
    notifications: List[NotificationOut]
    pagination: Pagination
    unread_count: int


class MarkReadIn(CamelModel):
    ids: Optional[List[int]] = None
    all: Optional[bool] = None
