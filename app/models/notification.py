# FILE: app/models/notification.py
from __future__ import annotations

import enum
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey, Enum, Index

from app.db.base import Base
from app.utils.timezone import now_local


class NotificationType(str, enum.Enum):
    LOW_STOCK = "LOW_STOCK"
    EXPIRY_WARNING = "EXPIRY_WARNING"
    EXPIRED = "EXPIRED"
    TRANSFER_REQUEST = "TRANSFER_REQUEST"
    PURCHASE_ORDER = "PURCHASE_ORDER"
    WASTE_ALERT = "WASTE_ALERT"
    SYSTEM = "SYSTEM"


class Priority(str, enum.Enum):
    LOW = "LOW"
    NORMAL = "NORMAL"
    HIGH = "HIGH"
    URGENT = "URGENT"


class Notification(Base):
    __tablename__ = "notifications"
    __table_args__ = (
        Index("ix_notifications_branch_read", "branch_id", "is_read", "created_at"),
    )

    id = Column(Integer, primary_key=True, index=True)
    branch_id = Column(Integer, ForeignKey("branches.id"), nullable=False, index=True)

    type = Column(Enum(NotificationType, name="notification_type"), nullable=False)
    title = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    priority = Column(Enum(Priority, name="notification_priority"), nullable=False, default=Priority.NORMAL)

    entity_id = Column(String(64), nullable=True)
    entity_type = Column(String(64), nullable=True)

    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=now_local, nullable=False)
