# FILE: app/services/notification_service.py
from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.models.catalog import Branch
from app.models.notification import Notification, NotificationType
from app.services.errors import NotFound
from app.utils.timezone import now_local


def list_notifications(
    db: Session,
    branch_id: int,
    *,
    is_read: Optional[bool] = None,
    type: Optional[NotificationType] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[Notification], int, int]:
    """Returns (rows, total matching, unread count for the branch)."""
    q = db.query(Notification).filter(Notification.branch_id == branch_id)
    if is_read is not None:
        q = q.filter(Notification.is_read == is_read)
    if type:
        q = q.filter(Notification.type == type)

    total = q.count()
    rows = (
        q.order_by(Notification.is_read.asc(), Notification.created_at.desc(), Notification.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    unread = (
        db.query(func.count(Notification.id))
        .filter(Notification.branch_id == branch_id, Notification.is_read.is_(False))
        .scalar()
    )
    return rows, total, int(unread or 0)


def create_notification(db: Session, payload) -> Notification:
    if not db.get(Branch, payload.branch_id):
        raise NotFound(f"Invalid branch_id={payload.branch_id}")
    n = Notification(
        branch_id=payload.branch_id,
        type=payload.type,
        title=payload.title,
        message=payload.message,
        priority=payload.priority,
        entity_id=payload.entity_id,
        entity_type=payload.entity_type,
        is_read=False,
        created_at=now_local(),
    )
    db.add(n)
    db.flush()
    return n


def _get(db: Session, notification_id: int) -> Notification:
    n = db.get(Notification, notification_id)
    if not n:
        raise NotFound("Notification not found.")
    return n


def mark_read(db: Session, notification_id: int, is_read: bool = True) -> Notification:
    n = _get(db, notification_id)
    n.is_read = is_read
    db.flush()
    return n


def delete_notification(db: Session, notification_id: int) -> None:
    db.delete(_get(db, notification_id))
    db.flush()


def mark_all_read(db: Session, branch_id: int) -> int:
    count = (
        db.query(Notification)
        .filter(Notification.branch_id == branch_id, Notification.is_read.is_(False))
        .update({Notification.is_read: True}, synchronize_session=False)
    )
    db.flush()
    return int(count or 0)
