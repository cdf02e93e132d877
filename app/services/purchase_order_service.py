# FILE: app/services/purchase_order_service.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from app.models.catalog import Branch, Ingredient
from app.models.inventory import TxnType, RefType
from app.models.purchase_order import PurchaseOrder, PurchaseOrderItem, POStatus, PO_TERMINAL
from app.models.supplier import Supplier
from app.services.errors import ConflictError, InvalidState, NotFound, ValidationFailure
from app.services.ledger import apply_stock_delta, lock_or_create_inventory
from app.utils.numbers import D, money2
from app.utils.timezone import now_local

logger = logging.getLogger(__name__)

# Status changes reachable through update(); PARTIAL/RECEIVED only come from receive()
_ALLOWED_TRANSITIONS = {
    POStatus.PENDING: {POStatus.APPROVED, POStatus.CANCELLED},
    POStatus.APPROVED: {POStatus.CANCELLED},
    POStatus.PARTIAL: {POStatus.CANCELLED},
    POStatus.RECEIVED: set(),
    POStatus.CANCELLED: set(),
}


def _load_options():
    return (
        selectinload(PurchaseOrder.supplier),
        selectinload(PurchaseOrder.branch),
        selectinload(PurchaseOrder.items).selectinload(PurchaseOrderItem.ingredient),
    )


def get_order(db: Session, order_id: int) -> PurchaseOrder:
    po = (
        db.query(PurchaseOrder)
        .options(*_load_options())
        .filter(PurchaseOrder.id == order_id)
        .first()
    )
    if not po:
        raise NotFound("Purchase order not found.")
    return po


def _lock_order(db: Session, order_id: int) -> PurchaseOrder:
    po = (
        db.query(PurchaseOrder)
        .filter(PurchaseOrder.id == order_id)
        .with_for_update()
        .first()
    )
    if not po:
        raise NotFound("Purchase order not found.")
    return po


def list_orders(
    db: Session,
    *,
    branch_id: Optional[int] = None,
    supplier_id: Optional[int] = None,
    status: Optional[POStatus] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[PurchaseOrder], int]:
    q = db.query(PurchaseOrder)
    if branch_id:
        q = q.filter(PurchaseOrder.branch_id == branch_id)
    if supplier_id:
        q = q.filter(PurchaseOrder.supplier_id == supplier_id)
    if status:
        q = q.filter(PurchaseOrder.status == status)

    total = q.count()
    rows = (
        q.options(*_load_options())
        .order_by(PurchaseOrder.ordered_at.desc(), PurchaseOrder.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total


def create_order(db: Session, payload, actor: str) -> PurchaseOrder:
    if not payload.items:
        raise ValidationFailure("Purchase order must have at least 1 item.")

    exists = (
        db.query(PurchaseOrder.id)
        .filter(PurchaseOrder.order_number == payload.order_number)
        .first()
    )
    if exists:
        raise ConflictError(
            f"Order number {payload.order_number} already exists.",
            code="DUPLICATE_ORDER_NUMBER",
        )

    if not db.get(Supplier, payload.supplier_id):
        raise NotFound(f"Invalid supplier_id={payload.supplier_id}")
    if not db.get(Branch, payload.branch_id):
        raise NotFound(f"Invalid branch_id={payload.branch_id}")

    ing_ids = {it.ingredient_id for it in payload.items}
    found = {r[0] for r in db.query(Ingredient.id).filter(Ingredient.id.in_(ing_ids)).all()}
    missing = sorted(ing_ids - found)
    if missing:
        raise NotFound(f"Invalid ingredient_id(s): {missing}", details={"ingredient_ids": missing})

    total = D(0)
    po = PurchaseOrder(
        order_number=payload.order_number,
        supplier_id=payload.supplier_id,
        branch_id=payload.branch_id,
        status=POStatus.PENDING,
        expected_at=payload.expected_at,
        notes=payload.notes or "",
        created_by=actor,
        ordered_at=now_local(),
    )
    for it in payload.items:
        if D(it.quantity) <= 0 or D(it.unit_price) <= 0:
            raise ValidationFailure("quantity and unit_price must be > 0")
        total += D(it.quantity) * D(it.unit_price)
        po.items.append(
            PurchaseOrderItem(
                ingredient_id=it.ingredient_id,
                quantity=D(it.quantity),
                unit=it.unit,
                unit_price=D(it.unit_price),
                received_qty=D(0),
            )
        )
    po.total_amount = money2(total)

    db.add(po)
    db.flush()
    logger.info("Purchase order %s created (id=%s, total=%s)", po.order_number, po.id, po.total_amount)
    return po


def approve_order(db: Session, order_id: int, actor: str) -> PurchaseOrder:
    po = _lock_order(db, order_id)
    if po.status == POStatus.APPROVED:
        return po
    if po.status != POStatus.PENDING:
        raise InvalidState(f"Only PENDING orders can be approved (current: {po.status.value}).")

    po.status = POStatus.APPROVED
    # set-once
    if not po.approved_by:
        po.approved_by = actor
        po.approved_at = now_local()
    db.flush()
    return po


def cancel_order(db: Session, order_id: int, actor: str) -> PurchaseOrder:
    po = _lock_order(db, order_id)
    if po.status == POStatus.CANCELLED:
        return po
    if po.status == POStatus.RECEIVED:
        raise InvalidState("Received orders cannot be cancelled.")

    po.status = POStatus.CANCELLED
    if not po.cancelled_by:
        po.cancelled_by = actor
        po.cancelled_at = now_local()
    db.flush()
    return po


def update_order(db: Session, order_id: int, payload, actor: str) -> PurchaseOrder:
    po = _lock_order(db, order_id)

    target = payload.status
    if target is not None and target != po.status:
        if target not in _ALLOWED_TRANSITIONS.get(po.status, set()):
            raise InvalidState(f"Invalid status change {po.status.value} -> {target.value}")

    if payload.notes is not None or payload.expected_at is not None:
        if po.status in PO_TERMINAL:
            raise InvalidState(f"Order is {po.status.value}; it can no longer be edited.")
        if payload.notes is not None:
            po.notes = payload.notes
        if payload.expected_at is not None:
            po.expected_at = payload.expected_at

    if target is not None and target != po.status:
        if target == POStatus.APPROVED:
            approve_order(db, po.id, actor)
        elif target == POStatus.CANCELLED:
            cancel_order(db, po.id, actor)

    db.flush()
    return po


def receive_order(db: Session, order_id: int, lines, actor: str) -> Tuple[PurchaseOrder, List[int]]:
    """
    Apply delivered quantities to the branch ledger.

    Every line is checked against the remaining ordered quantity; a single bad
    line aborts the whole receipt. Unknown item ids are skipped and returned.
    """
    po = _lock_order(db, order_id)
    if po.status == POStatus.CANCELLED:
        raise InvalidState("Cannot receive a cancelled order.", code="ORDER_CANCELLED")
    if po.status == POStatus.RECEIVED:
        raise InvalidState("Order is already fully received.")
    if not lines:
        raise ValidationFailure("No items to receive.")

    items = (
        db.query(PurchaseOrderItem)
        .filter(PurchaseOrderItem.purchase_order_id == po.id)
        .with_for_update()
        .all()
    )
    by_id = {it.id: it for it in items}
    reason = f"Purchase order {po.order_number}"
    skipped: List[int] = []

    for line in lines:
        it = by_id.get(line.item_id)
        if it is None:
            logger.warning("Receive %s: item_id=%s is not on this order, skipped", po.order_number, line.item_id)
            skipped.append(line.item_id)
            continue

        qty = D(line.received_qty)
        if qty < 0:
            raise ValidationFailure("received_qty cannot be negative.")
        remaining = D(it.quantity) - D(it.received_qty)
        if qty > remaining:
            raise ValidationFailure(
                f"Received qty exceeds remaining for item_id={it.id}. Remaining {remaining}",
                details={"item_id": it.id, "remaining": remaining, "received_qty": qty},
            )
        if qty == 0:
            continue

        inv = lock_or_create_inventory(db, po.branch_id, it.ingredient_id)
        apply_stock_delta(
            db,
            inv,
            qty,
            txn_type=TxnType.RESTOCK,
            reason=reason,
            actor=actor,
            ref_type=RefType.PURCHASE_ORDER,
            ref_id=po.id,
        )
        if line.expiry_date:
            inv.expiry_date = line.expiry_date
        it.received_qty = D(it.received_qty) + qty

    _recalc_status_from_received(po, items)
    db.flush()
    logger.info("Purchase order %s received, status=%s", po.order_number, po.status.value)
    return po, skipped


def _recalc_status_from_received(po: PurchaseOrder, items: List[PurchaseOrderItem]) -> None:
    if items and all(D(it.received_qty) >= D(it.quantity) for it in items):
        po.status = POStatus.RECEIVED
        po.received_at = now_local()
    elif any(D(it.received_qty) > 0 for it in items) and po.status in (POStatus.PENDING, POStatus.APPROVED):
        po.status = POStatus.PARTIAL


def delete_order(db: Session, order_id: int) -> None:
    po = _lock_order(db, order_id)
    if po.status != POStatus.PENDING:
        raise InvalidState(f"Only PENDING orders can be deleted (current: {po.status.value}).")
    db.delete(po)
    db.flush()
