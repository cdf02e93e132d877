# FILE: app/api/routes_inventory.py
from __future__ import annotations

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, Pagination
from app.models.inventory import TxnType
from app.schemas.inventory import InventoryOut, TransactionOut
from app.services.alerts import branch_alerts
from app.services.ledger import list_branch_inventory, list_transactions, is_low, stock_value
from app.utils.resp import ok, page_meta

router = APIRouter(prefix="/inventory", tags=["inventory"])


@router.get("")
def list_inventory(
    branch_id: int = Query(...),
    search: Optional[str] = Query(None),
    low_only: bool = Query(False),
    db: Session = Depends(get_db),
):
    rows = list_branch_inventory(db, branch_id, search=search, low_only=low_only)
    data = []
    for r in rows:
        d = InventoryOut.model_validate(r).model_dump()
        d["stock_value"] = stock_value(r)
        d["is_low"] = is_low(r)
        data.append(d)
    return ok(data)


@router.get("/transactions")
def list_inventory_transactions(
    branch_id: int = Query(...),
    ingredient_id: Optional[int] = Query(None),
    transaction_type: Optional[TxnType] = Query(None),
    date_from: Optional[date] = Query(None),
    date_to: Optional[date] = Query(None),
    pg: Pagination = Depends(),
    db: Session = Depends(get_db),
):
    rows, total = list_transactions(
        db,
        branch_id,
        ingredient_id=ingredient_id,
        txn_type=transaction_type,
        date_from=date_from,
        date_to=date_to,
        page=pg.page,
        limit=pg.limit,
    )
    return ok(
        [TransactionOut.model_validate(x).model_dump() for x in rows],
        meta=page_meta(pg.page, pg.limit, total),
    )


@router.get("/alerts")
def inventory_alerts(branch_id: int = Query(...), db: Session = Depends(get_db)):
    return ok(branch_alerts(db, branch_id))
