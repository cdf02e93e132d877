# FILE: app/services/ledger.py
from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Optional, List, Tuple

from sqlalchemy.orm import Session, selectinload

from app.models.catalog import Ingredient
from app.models.inventory import BranchInventory, InventoryTransaction, TxnType, RefType
from app.services.errors import InsufficientStock
from app.utils.numbers import D, money2
from app.utils.timezone import now_local, day_bounds

logger = logging.getLogger(__name__)


def lock_inventory(db: Session, branch_id: int, ingredient_id: int) -> Optional[BranchInventory]:
    return (
        db.query(BranchInventory)
        .filter(BranchInventory.branch_id == branch_id, BranchInventory.ingredient_id == ingredient_id)
        .with_for_update()
        .first()
    )


def lock_inventory_by_id(db: Session, inventory_id: int) -> Optional[BranchInventory]:
    return (
        db.query(BranchInventory)
        .filter(BranchInventory.id == inventory_id)
        .with_for_update()
        .first()
    )


def lock_or_create_inventory(db: Session, branch_id: int, ingredient_id: int) -> BranchInventory:
    inv = lock_inventory(db, branch_id, ingredient_id)
    if inv:
        return inv

    inv = BranchInventory(
        branch_id=branch_id,
        ingredient_id=ingredient_id,
        current_stock=D(0),
        reserved_stock=D(0),
    )
    db.add(inv)
    db.flush()

    return lock_inventory_by_id(db, inv.id)


def apply_stock_delta(
    db: Session,
    inv: BranchInventory,
    delta,
    *,
    txn_type: TxnType,
    reason: str,
    actor: str,
    ref_type: Optional[RefType] = None,
    ref_id: Optional[int] = None,
) -> InventoryTransaction:
    """
    Single writer of BranchInventory.current_stock.
    The caller must hold the row lock; one audit row is appended per call.
    """
    delta = D(delta)
    before = D(inv.current_stock)
    after = before + delta
    if after < 0:
        raise InsufficientStock(
            f"Insufficient stock for ingredient_id={inv.ingredient_id}. Available {before}, need {-delta}.",
            available=before,
            requested=-delta,
        )

    stamp = now_local()
    inv.current_stock = after
    if txn_type == TxnType.RESTOCK:
        inv.last_restock_at = stamp

    txn = InventoryTransaction(
        branch_id=inv.branch_id,
        ingredient_id=inv.ingredient_id,
        transaction_type=txn_type,
        quantity_change=delta,
        stock_before=before,
        stock_after=after,
        reason=reason or "",
        ref_type=ref_type.value if ref_type else None,
        ref_id=ref_id,
        created_by=actor,
        created_at=stamp,
    )
    db.add(txn)
    db.flush()
    return txn


# -------------------------
# Read side
# -------------------------
def list_branch_inventory(
    db: Session,
    branch_id: int,
    *,
    search: Optional[str] = None,
    low_only: bool = False,
) -> List[BranchInventory]:
    q = (
        db.query(BranchInventory)
        .join(Ingredient, Ingredient.id == BranchInventory.ingredient_id)
        .options(selectinload(BranchInventory.ingredient))
        .filter(BranchInventory.branch_id == branch_id)
    )
    if search:
        q = q.filter(Ingredient.name.like(f"%{search.strip()}%"))

    rows = q.order_by(Ingredient.name.asc()).all()
    if low_only:
        rows = [r for r in rows if is_low(r)]
    return rows


def is_low(inv: BranchInventory) -> bool:
    # no threshold configured: only an empty row counts as low
    threshold = inv.ingredient.effective_threshold if inv.ingredient else Decimal("0")
    return D(inv.current_stock) <= threshold


def stock_value(inv: BranchInventory) -> Decimal:
    cost = inv.ingredient.cost_per_unit if inv.ingredient else 0
    return money2(D(inv.current_stock) * D(cost))


def list_transactions(
    db: Session,
    branch_id: int,
    *,
    ingredient_id: Optional[int] = None,
    txn_type: Optional[TxnType] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[InventoryTransaction], int]:
    q = (
        db.query(InventoryTransaction)
        .options(selectinload(InventoryTransaction.ingredient))
        .filter(InventoryTransaction.branch_id == branch_id)
    )
    if ingredient_id:
        q = q.filter(InventoryTransaction.ingredient_id == ingredient_id)
    if txn_type:
        q = q.filter(InventoryTransaction.transaction_type == txn_type)
    start, end = day_bounds(date_from, date_to)
    if start:
        q = q.filter(InventoryTransaction.created_at >= start)
    if end:
        q = q.filter(InventoryTransaction.created_at < end)

    total = q.count()
    rows = (
        q.order_by(InventoryTransaction.created_at.desc(), InventoryTransaction.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total
