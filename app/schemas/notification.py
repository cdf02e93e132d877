from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.notification import NotificationType, Priority


class NotificationCreate(BaseModel):
    branch_id: int
    type: NotificationType
    title: str = Field(min_length=1, max_length=255)
    message: str = Field(min_length=1)
    priority: Priority = Priority.NORMAL
    entity_id: Optional[str] = None
    entity_type: Optional[str] = None


class NotificationUpdate(BaseModel):
    is_read: bool = True


class MarkAllReadIn(BaseModel):
    branch_id: int


class NotificationOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    branch_id: int
    type: NotificationType
    title: str
    message: str
    priority: Priority
    entity_id: Optional[str]
    entity_type: Optional[str]
    is_read: bool
    created_at: datetime
