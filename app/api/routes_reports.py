# FILE: app/api/routes_reports.py
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.services.reports import build_report
from app.utils.resp import ok

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("")
def get_report(
    branch_id: int = Query(...),
    type: Optional[str] = Query("summary"),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    return ok(build_report(db, branch_id, type, start_date, end_date))
