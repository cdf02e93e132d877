# FILE: app/services/reports.py
from __future__ import annotations

from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.models.inventory import BranchInventory, InventoryTransaction
from app.models.sales import SalesOrder
from app.models.waste import WasteLog
from app.schemas.inventory import TransactionOut
from app.schemas.waste import WasteOut
from app.services.ledger import is_low, stock_value
from app.utils.numbers import D, money2
from app.utils.timezone import day_bounds, now_local

REPORT_TYPES = ("summary", "sales", "inventory", "waste", "products", "hourly")


def _sum(values) -> Decimal:
    return sum((D(v) for v in values), Decimal("0"))


def _orders(db: Session, branch_id: int, start: Optional[datetime], end: Optional[datetime], *, with_items=False):
    q = db.query(SalesOrder).filter(SalesOrder.branch_id == branch_id)
    if start:
        q = q.filter(SalesOrder.order_timestamp >= start)
    if end:
        q = q.filter(SalesOrder.order_timestamp < end)
    if with_items:
        q = q.options(selectinload(SalesOrder.items))
    return q.order_by(SalesOrder.order_timestamp.asc(), SalesOrder.id.asc()).all()


def _inventory(db: Session, branch_id: int) -> List[BranchInventory]:
    return (
        db.query(BranchInventory)
        .options(selectinload(BranchInventory.ingredient))
        .filter(BranchInventory.branch_id == branch_id)
        .order_by(BranchInventory.current_stock.asc(), BranchInventory.id.asc())
        .all()
    )


def _expiring(rows: List[BranchInventory], today: date) -> List[BranchInventory]:
    horizon = today + timedelta(days=settings.EXPIRY_WARNING_DAYS)
    return [r for r in rows if r.expiry_date and today <= r.expiry_date <= horizon]


def _order_row(o: SalesOrder) -> Dict[str, Any]:
    return {
        "id": o.id,
        "order_timestamp": o.order_timestamp,
        "total_amount": D(o.total_amount),
        "payment_method": o.payment_method,
        "order_type": o.order_type,
        "customer_name": o.customer_name,
    }


def summary_report(db: Session, branch_id: int, now: datetime) -> Dict[str, Any]:
    today = now.date()
    day_start = datetime.combine(today, datetime.min.time())
    day_end = day_start + timedelta(days=1)
    # weeks start on Sunday
    week_start = day_start - timedelta(days=(today.weekday() + 1) % 7)
    week_end = week_start + timedelta(days=7)
    month_start = day_start.replace(day=1)
    month_end = (month_start + timedelta(days=32)).replace(day=1)

    today_orders = _orders(db, branch_id, day_start, day_end)
    week_orders = _orders(db, branch_id, week_start, week_end)
    month_orders = _orders(db, branch_id, month_start, month_end)
    total_orders = db.query(func.count(SalesOrder.id)).filter(SalesOrder.branch_id == branch_id).scalar() or 0

    inv = _inventory(db, branch_id)
    out_of_stock = [r for r in inv if D(r.current_stock) <= 0]
    expiring = _expiring(inv, today)

    week_waste = (
        db.query(WasteLog)
        .filter(WasteLog.branch_id == branch_id, WasteLog.created_at >= week_start)
        .all()
    )

    return {
        "summary": {
            "today": {"orders": len(today_orders), "revenue": money2(_sum(o.total_amount for o in today_orders))},
            "week": {"orders": len(week_orders), "revenue": money2(_sum(o.total_amount for o in week_orders))},
            "month": {"orders": len(month_orders), "revenue": money2(_sum(o.total_amount for o in month_orders))},
            "total_orders": int(total_orders),
            "inventory_value": money2(_sum(stock_value(r) for r in inv)),
            "low_stock_count": len(out_of_stock),
            "expiring_count": len(expiring),
            "week_waste_value": money2(_sum(w.loss_value for w in week_waste)),
        },
        "alerts": {
            "low_stock": [
                {"name": r.ingredient.name, "current_stock": D(r.current_stock), "unit": r.ingredient.unit}
                for r in out_of_stock
            ],
            "expiring": [
                {
                    "name": r.ingredient.name,
                    "expiry_date": r.expiry_date,
                    "current_stock": D(r.current_stock),
                    "unit": r.ingredient.unit,
                }
                for r in expiring
            ],
        },
    }


def sales_report(db: Session, branch_id: int, start, end) -> Dict[str, Any]:
    orders = _orders(db, branch_id, start, end, with_items=True)

    by_date: Dict[str, Dict[str, Any]] = {}
    by_payment: Dict[str, int] = {}
    by_type: Dict[str, int] = {}
    for o in orders:
        key = o.order_timestamp.date().isoformat()
        bucket = by_date.setdefault(key, {"date": key, "orders": 0, "revenue": Decimal("0"), "items": 0})
        bucket["orders"] += 1
        bucket["revenue"] += D(o.total_amount)
        bucket["items"] += len(o.items)
        by_payment[o.payment_method] = by_payment.get(o.payment_method, 0) + 1
        by_type[o.order_type] = by_type.get(o.order_type, 0) + 1

    revenue = _sum(o.total_amount for o in orders)
    latest = sorted(orders, key=lambda o: (o.order_timestamp, o.id), reverse=True)[:50]

    return {
        "overview": {
            "total_revenue": money2(revenue),
            "total_orders": len(orders),
            "avg_order_value": money2(revenue / len(orders)) if orders else Decimal("0.00"),
        },
        "by_date": list(by_date.values()),
        "by_payment": by_payment,
        "by_order_type": by_type,
        "orders": [_order_row(o) for o in latest],
    }


def inventory_report(db: Session, branch_id: int, now: datetime) -> Dict[str, Any]:
    rows = _inventory(db, branch_id)
    low = [r for r in rows if is_low(r)]
    horizon = now.date() + timedelta(days=settings.EXPIRY_WARNING_DAYS)
    expiring = [r for r in rows if r.expiry_date and r.expiry_date <= horizon]

    txns = (
        db.query(InventoryTransaction)
        .options(selectinload(InventoryTransaction.ingredient))
        .filter(
            InventoryTransaction.branch_id == branch_id,
            InventoryTransaction.created_at >= now - timedelta(days=30),
        )
        .order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
        .limit(20)
        .all()
    )

    return {
        "overview": {
            "total_items": len(rows),
            "total_value": money2(_sum(stock_value(r) for r in rows)),
            "low_stock_count": len(low),
            "expiring_count": len(expiring),
        },
        "inventory": [
            {
                "id": r.id,
                "ingredient_id": r.ingredient_id,
                "name": r.ingredient.name,
                "unit": r.ingredient.unit,
                "current_stock": D(r.current_stock),
                "reserved_stock": D(r.reserved_stock),
                "available_stock": r.available_stock,
                "cost_per_unit": D(r.ingredient.cost_per_unit),
                "total_value": stock_value(r),
                "threshold": r.ingredient.effective_threshold,
                "is_low": is_low(r),
                "expiry_date": r.expiry_date,
                "last_restock_at": r.last_restock_at,
            }
            for r in rows
        ],
        "low_stock": [
            {
                "name": r.ingredient.name,
                "current_stock": D(r.current_stock),
                "threshold": r.ingredient.effective_threshold,
                "unit": r.ingredient.unit,
            }
            for r in low
        ],
        "expiring": [
            {
                "name": r.ingredient.name,
                "current_stock": D(r.current_stock),
                "expiry_date": r.expiry_date,
                "unit": r.ingredient.unit,
            }
            for r in expiring
        ],
        "recent_transactions": [TransactionOut.model_validate(t).model_dump() for t in txns],
    }


def waste_report(db: Session, branch_id: int, start, end) -> Dict[str, Any]:
    q = (
        db.query(WasteLog)
        .options(selectinload(WasteLog.ingredient))
        .filter(WasteLog.branch_id == branch_id)
    )
    if start:
        q = q.filter(WasteLog.created_at >= start)
    if end:
        q = q.filter(WasteLog.created_at < end)
    logs = q.order_by(WasteLog.created_at.desc(), WasteLog.id.desc()).all()

    total_loss = _sum(w.loss_value for w in logs)
    by_reason: Dict[str, Dict[str, Any]] = {}
    by_ingredient: Dict[int, Dict[str, Any]] = {}
    for w in logs:
        r = by_reason.setdefault(w.reason.value, {"reason": w.reason.value, "count": 0, "total_loss": Decimal("0")})
        r["count"] += 1
        r["total_loss"] += D(w.loss_value)

        i = by_ingredient.setdefault(
            w.ingredient_id,
            {"name": w.ingredient.name, "count": 0, "total_loss": Decimal("0"), "total_quantity": Decimal("0")},
        )
        i["count"] += 1
        i["total_loss"] += D(w.loss_value)
        i["total_quantity"] += D(w.quantity)

    return {
        "overview": {
            "total_waste": len(logs),
            "total_loss": money2(total_loss),
            "avg_loss_per_log": money2(total_loss / len(logs)) if logs else Decimal("0.00"),
        },
        "by_reason": list(by_reason.values()),
        "by_ingredient": sorted(by_ingredient.values(), key=lambda x: x["total_loss"], reverse=True),
        "recent_logs": [WasteOut.model_validate(w).model_dump() for w in logs[:20]],
    }


def products_report(db: Session, branch_id: int, start, end) -> Dict[str, Any]:
    orders = _orders(db, branch_id, start, end, with_items=True)

    products: Dict[int, Dict[str, Any]] = {}
    for o in orders:
        for it in o.items:
            p = products.setdefault(
                it.menu_item_id,
                {"menu_item_id": it.menu_item_id, "name": it.item_name, "quantity": 0, "revenue": Decimal("0"), "orders": 0},
            )
            p["quantity"] += int(it.quantity or 0)
            p["revenue"] += D(it.subtotal)
            p["orders"] += 1

    ranked = sorted(products.values(), key=lambda p: p["revenue"], reverse=True)
    return {"top_products": ranked[:10], "all_products": ranked}


def hourly_report(db: Session, branch_id: int, start, end) -> Dict[str, Any]:
    buckets = [{"hour": h, "orders": 0, "revenue": Decimal("0")} for h in range(24)]
    for o in _orders(db, branch_id, start, end):
        b = buckets[o.order_timestamp.hour]
        b["orders"] += 1
        b["revenue"] += D(o.total_amount)
    return {"hourly": buckets}


def build_report(
    db: Session,
    branch_id: int,
    report_type: Optional[str] = "summary",
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    *,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    now = now or now_local()
    start, end = day_bounds(start_date, end_date)
    kind = (report_type or "summary").lower()
    if kind not in REPORT_TYPES:
        kind = "summary"

    if kind == "sales":
        return sales_report(db, branch_id, start, end)
    if kind == "inventory":
        return inventory_report(db, branch_id, now)
    if kind == "waste":
        return waste_report(db, branch_id, start, end)
    if kind == "products":
        return products_report(db, branch_id, start, end)
    if kind == "hourly":
        return hourly_report(db, branch_id, start, end)
    return summary_report(db, branch_id, now)
