# FILE: app/api/routes_notifications.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, Pagination
from app.models.notification import NotificationType
from app.schemas.notification import (
    NotificationCreate,
    NotificationUpdate,
    NotificationOut,
    MarkAllReadIn,
)
from app.services.notification_service import (
    list_notifications,
    create_notification,
    mark_read,
    delete_notification,
    mark_all_read,
)
from app.utils.resp import ok, page_meta

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def list_notifications_api(
    branch_id: int = Query(...),
    is_read: Optional[bool] = Query(None),
    type: Optional[NotificationType] = Query(None),
    pg: Pagination = Depends(),
    db: Session = Depends(get_db),
):
    rows, total, unread = list_notifications(
        db, branch_id, is_read=is_read, type=type, page=pg.page, limit=pg.limit
    )
    meta = page_meta(pg.page, pg.limit, total)
    meta["unread_count"] = unread
    return ok([NotificationOut.model_validate(x).model_dump() for x in rows], meta=meta)


@router.post("")
def create_notification_api(payload: NotificationCreate, db: Session = Depends(get_db)):
    with db.begin():
        n = create_notification(db, payload)
        data = NotificationOut.model_validate(n).model_dump()
    return ok(data, status_code=201)


# registered before /{notification_id} so the literal path wins
@router.post("/mark-all-read")
def mark_all_read_api(payload: MarkAllReadIn, db: Session = Depends(get_db)):
    with db.begin():
        count = mark_all_read(db, payload.branch_id)
    return ok({"updated_count": count})


@router.put("/{notification_id}")
def mark_notification_read(
    notification_id: int,
    payload: Optional[NotificationUpdate] = None,
    db: Session = Depends(get_db),
):
    with db.begin():
        n = mark_read(db, notification_id, payload.is_read if payload else True)
        data = NotificationOut.model_validate(n).model_dump()
    return ok(data)


@router.delete("/{notification_id}")
def delete_notification_api(notification_id: int, db: Session = Depends(get_db)):
    with db.begin():
        delete_notification(db, notification_id)
    return ok({"id": notification_id, "deleted": True})
