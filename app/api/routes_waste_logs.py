# FILE: app/api/routes_waste_logs.py
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session, selectinload

from app.api.deps import get_db, current_actor, Pagination
from app.models.waste import WasteLog, WasteReason
from app.schemas.waste import WasteCreate, WasteOut
from app.services.waste_service import record_waste, list_waste, waste_stats
from app.utils.resp import ok, page_meta

router = APIRouter(prefix="/waste-logs", tags=["waste"])


@router.get("")
def list_waste_logs(
    branch_id: Optional[int] = Query(None),
    ingredient_id: Optional[int] = Query(None),
    reason: Optional[WasteReason] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    pg: Pagination = Depends(),
    db: Session = Depends(get_db),
):
    rows, total = list_waste(
        db,
        branch_id=branch_id,
        ingredient_id=ingredient_id,
        reason=reason,
        start_date=start_date,
        end_date=end_date,
        page=pg.page,
        limit=pg.limit,
    )
    return ok(
        [WasteOut.model_validate(x).model_dump() for x in rows],
        meta=page_meta(pg.page, pg.limit, total),
    )


@router.get("/stats")
def waste_stats_api(
    branch_id: Optional[int] = Query(None),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    db: Session = Depends(get_db),
):
    return ok(waste_stats(db, branch_id=branch_id, start_date=start_date, end_date=end_date))


@router.post("")
def record_waste_api(
    payload: WasteCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(current_actor),
):
    with db.begin():
        log = record_waste(db, payload, actor)
        log_id = log.id

    log = (
        db.query(WasteLog)
        .options(selectinload(WasteLog.ingredient), selectinload(WasteLog.branch))
        .filter(WasteLog.id == log_id)
        .first()
    )
    return ok(WasteOut.model_validate(log).model_dump(), status_code=201)
