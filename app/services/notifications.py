import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.enums import NotificationType, NotificationPriority
from app.db.repositories import NotificationRepository
from app.models.notification import Notification

logger = logging.getLogger(__name__)


async def notify(
    db: AsyncSession,
    type_: NotificationType,
    title: str,
    message: str,
    priority: NotificationPriority = NotificationPriority.MEDIUM,
    related_id: Optional[str] = None,
    link_to: Optional[str] = None,
) -> Notification:
    notification = Notification(
        type=type_,
        title=title,
        message=message,
        priority=priority,
        related_id=related_id,
        link_to=link_to,
        read=False,
    )
    await NotificationRepository(db).add(notification)
    logger.debug(f"Notification queued: {title}")
    return notification
