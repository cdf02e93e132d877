# FILE: app/services/waste_service.py
from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from app.models.catalog import Branch, Ingredient
from app.models.inventory import TxnType, RefType
from app.models.waste import WasteLog, WasteReason
from app.services.errors import NotFound
from app.services.ledger import apply_stock_delta, lock_inventory
from app.utils.numbers import D, money2
from app.utils.timezone import day_bounds, now_local

logger = logging.getLogger(__name__)


def record_waste(db: Session, payload, actor: str) -> WasteLog:
    """
    Ledger decrement, WASTE audit row and the waste log entry in one unit.
    Caller owns the transaction.
    """
    ing = db.get(Ingredient, payload.ingredient_id)
    if not ing:
        raise NotFound("Ingredient not found.")
    if not db.get(Branch, payload.branch_id):
        raise NotFound("Branch not found.")

    inv = lock_inventory(db, payload.branch_id, payload.ingredient_id)
    if not inv:
        raise NotFound("No inventory for this ingredient at the branch.")

    qty = D(payload.quantity)
    loss = money2(qty * D(ing.cost_per_unit))

    reason = payload.reason.value
    notes = (payload.notes or "").strip()
    txn_reason = f"{reason}: {notes}" if notes else reason

    # raises InsufficientStock(available, requested) and leaves the row untouched
    txn = apply_stock_delta(
        db,
        inv,
        -qty,
        txn_type=TxnType.WASTE,
        reason=txn_reason,
        actor=actor,
        ref_type=RefType.WASTE,
    )

    log = WasteLog(
        branch_id=payload.branch_id,
        ingredient_id=payload.ingredient_id,
        quantity=qty,
        unit=payload.unit or ing.unit,
        reason=payload.reason,
        loss_value=loss,
        notes=notes,
        recorded_by=actor,
        created_at=now_local(),
    )
    db.add(log)
    db.flush()
    txn.ref_id = log.id
    db.flush()
    logger.info("Waste recorded: %s %s of %s at branch %s (loss %s)", qty, log.unit, ing.name, log.branch_id, loss)
    return log


def _filtered(
    db: Session,
    *,
    branch_id: Optional[int] = None,
    ingredient_id: Optional[int] = None,
    reason: Optional[WasteReason] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
):
    q = db.query(WasteLog)
    if branch_id:
        q = q.filter(WasteLog.branch_id == branch_id)
    if ingredient_id:
        q = q.filter(WasteLog.ingredient_id == ingredient_id)
    if reason:
        q = q.filter(WasteLog.reason == reason)
    start, end = day_bounds(start_date, end_date)
    if start:
        q = q.filter(WasteLog.created_at >= start)
    if end:
        q = q.filter(WasteLog.created_at < end)
    return q


def list_waste(
    db: Session,
    *,
    branch_id: Optional[int] = None,
    ingredient_id: Optional[int] = None,
    reason: Optional[WasteReason] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[WasteLog], int]:
    q = _filtered(
        db,
        branch_id=branch_id,
        ingredient_id=ingredient_id,
        reason=reason,
        start_date=start_date,
        end_date=end_date,
    )
    total = q.count()
    rows = (
        q.options(selectinload(WasteLog.ingredient), selectinload(WasteLog.branch))
        .order_by(WasteLog.created_at.desc(), WasteLog.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total


def waste_stats(
    db: Session,
    *,
    branch_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    logs = (
        _filtered(db, branch_id=branch_id, start_date=start_date, end_date=end_date)
        .options(selectinload(WasteLog.ingredient))
        .all()
    )

    total_loss = sum((D(w.loss_value) for w in logs), Decimal("0"))

    by_reason: Dict[str, Decimal] = {}
    by_ingredient: Dict[int, Dict[str, Any]] = {}
    for w in logs:
        key = w.reason.value
        by_reason[key] = by_reason.get(key, Decimal("0")) + D(w.loss_value)

        row = by_ingredient.setdefault(
            w.ingredient_id,
            {"ingredient_id": w.ingredient_id, "name": w.ingredient.name, "total_loss": Decimal("0"), "quantity": Decimal("0")},
        )
        row["total_loss"] += D(w.loss_value)
        row["quantity"] += D(w.quantity)

    now = now or now_local()
    week_ago = now - timedelta(days=7)
    two_weeks_ago = now - timedelta(days=14)
    recent = sum((D(w.loss_value) for w in logs if w.created_at >= week_ago), Decimal("0"))
    previous = sum(
        (D(w.loss_value) for w in logs if two_weeks_ago <= w.created_at < week_ago),
        Decimal("0"),
    )
    change = ((recent - previous) / previous * 100) if previous > 0 else Decimal("0")

    top = sorted(by_reason.items(), key=lambda kv: kv[1], reverse=True)[:5]

    return {
        "summary": {
            "total_logs": len(logs),
            "total_loss_value": money2(total_loss),
            "avg_loss_per_log": money2(total_loss / len(logs)) if logs else Decimal("0.00"),
        },
        "by_reason": {k: money2(v) for k, v in by_reason.items()},
        "by_ingredient": sorted(by_ingredient.values(), key=lambda r: r["total_loss"], reverse=True),
        "trends": {
            "recent_7_days": money2(recent),
            "previous_7_days": money2(previous),
            "change_percent": money2(change),
            "is_increasing": change > 0,
        },
        "top_waste_reasons": [{"reason": k, "value": money2(v)} for k, v in top],
    }
