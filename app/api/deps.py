# app/api/deps.py
from __future__ import annotations

from typing import Generator, Optional

from fastapi import Header, Query
from sqlalchemy.orm import Session

from app.core.config import settings
from app.db.session import SessionLocal


# =========================================================
# DB (per request)
# =========================================================
def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# =========================================================
# ACTING USER
# =========================================================
def current_actor(x_user_id: Optional[str] = Header(None)) -> str:
    """
    Authentication happens upstream; the gateway forwards the user id.
    Falls back to DEFAULT_ACTOR for internal/scripted calls.
    """
    actor = (x_user_id or "").strip()
    return actor[:64] if actor else settings.DEFAULT_ACTOR


# =========================================================
# PAGINATION
# =========================================================
class Pagination:
    def __init__(
        self,
        page: int = Query(1, ge=1),
        limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    ):
        self.page = page
        self.limit = limit
