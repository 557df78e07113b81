from sqlalchemy import Column, String, Boolean, Enum
from app.models.base import BaseModel
from app.core.enums import NotificationType, NotificationPriority


class Notification(BaseModel):
    __tablename__ = "notifications"
    type = Column(Enum(NotificationType), nullable=False)
    title = Column(String(120), nullable=False)
    message = Column(String(500), nullable=False)
    read = Column(Boolean, default=False, nullable=False)
    related_id = Column(String(64), nullable=True)
    link_to = Column(String(255), nullable=True)
    priority = Column(Enum(NotificationPriority), default=NotificationPriority.MEDIUM, nullable=False)
