# FILE: app/services/alerts.py
from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.models.inventory import BranchInventory
from app.models.notification import NotificationType, Priority
from app.utils.numbers import D
from app.utils.timezone import today_local

_PRIORITY_ORDER = {Priority.URGENT: 0, Priority.HIGH: 1, Priority.NORMAL: 2, Priority.LOW: 3}


def _alert(inv: BranchInventory, kind: NotificationType, priority: Priority, title: str, message: str, **data) -> Dict[str, Any]:
    ing = inv.ingredient
    payload = {
        "ingredient_id": inv.ingredient_id,
        "ingredient_name": ing.name,
        "current_stock": D(inv.current_stock),
        "unit": ing.unit,
    }
    payload.update(data)
    return {
        "id": inv.id,
        "type": kind.value,
        "priority": priority.value,
        "title": title,
        "message": message,
        "entity_id": inv.id,
        "entity_type": "BranchInventory",
        "data": payload,
    }


def branch_alerts(db: Session, branch_id: int, *, today: Optional[date] = None) -> Dict[str, Any]:
    """Low-stock, expiring and expired rows for one branch, most urgent first."""
    today = today or today_local()
    warn_days = settings.EXPIRY_WARNING_DAYS
    urgent_days = settings.EXPIRY_URGENT_DAYS

    rows = (
        db.query(BranchInventory)
        .options(selectinload(BranchInventory.ingredient))
        .filter(BranchInventory.branch_id == branch_id)
        .order_by(BranchInventory.id.asc())
        .all()
    )

    low: List[Dict[str, Any]] = []
    expiring: List[Dict[str, Any]] = []
    expired: List[Dict[str, Any]] = []

    for inv in rows:
        ing = inv.ingredient
        stock = D(inv.current_stock)

        threshold = ing.effective_threshold
        if threshold > 0 and stock <= threshold:
            out = stock == 0
            low.append(_alert(
                inv,
                NotificationType.LOW_STOCK,
                Priority.URGENT if out else Priority.HIGH,
                "Out of Stock" if out else "Low Stock Alert",
                f"{ing.name} is running low ({stock:.2f} {ing.unit})",
                threshold=threshold,
            ))

        if inv.expiry_date is None:
            continue
        days = (inv.expiry_date - today).days
        if 0 <= days <= warn_days:
            expiring.append(_alert(
                inv,
                NotificationType.EXPIRY_WARNING,
                Priority.HIGH if days <= urgent_days else Priority.NORMAL,
                "Expiry Warning",
                f"{ing.name} expires in {days} day{'' if days == 1 else 's'} ({inv.expiry_date.isoformat()})",
                expiry_date=inv.expiry_date,
                days_until_expiry=days,
            ))
        elif days < 0 and stock > 0:
            expired.append(_alert(
                inv,
                NotificationType.EXPIRED,
                Priority.URGENT,
                "Item Expired",
                f"{ing.name} has expired on {inv.expiry_date.isoformat()}",
                expiry_date=inv.expiry_date,
            ))

    alerts = low + expiring + expired
    # stable sort keeps low-stock before expiry within the same priority
    alerts.sort(key=lambda a: _PRIORITY_ORDER[Priority(a["priority"])])

    return {
        "alerts": alerts,
        "summary": {
            "low_stock": len(low),
            "expiring_soon": len(expiring),
            "expired": len(expired),
            "total": len(alerts),
        },
    }
