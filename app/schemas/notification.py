from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from app.core.enums import NotificationType, NotificationPriority


class NotificationOut(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    read: bool
    related_id: Optional[str] = None
    link_to: Optional[str] = None
    priority: NotificationPriority
    created_at: datetime


class UnreadCountOut(BaseModel):
    unread: int
