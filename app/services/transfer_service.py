# FILE: app/services/transfer_service.py
from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session, selectinload

from app.models.catalog import Branch, Ingredient
from app.models.inventory import BranchInventory, TxnType, RefType
from app.models.transfer import (
    InventoryTransfer,
    InventoryTransferItem,
    TransferStatus,
    TRANSFER_TERMINAL,
)
from app.services.errors import (
    ConflictError,
    InsufficientStock,
    InvalidState,
    NotFound,
    ValidationFailure,
)
from app.services.ledger import (
    apply_stock_delta,
    lock_inventory,
    lock_inventory_by_id,
    lock_or_create_inventory,
)
from app.utils.numbers import D
from app.utils.timezone import now_local

logger = logging.getLogger(__name__)

_ALLOWED_TRANSITIONS = {
    TransferStatus.PENDING: {TransferStatus.APPROVED, TransferStatus.CANCELLED},
    TransferStatus.APPROVED: {TransferStatus.IN_TRANSIT, TransferStatus.CANCELLED},
    TransferStatus.IN_TRANSIT: {TransferStatus.COMPLETED, TransferStatus.CANCELLED},
    TransferStatus.COMPLETED: set(),
    TransferStatus.CANCELLED: set(),
}


def _load_options():
    return (
        selectinload(InventoryTransfer.source_branch),
        selectinload(InventoryTransfer.target_branch),
        selectinload(InventoryTransfer.items).selectinload(InventoryTransferItem.ingredient),
    )


def get_transfer(db: Session, transfer_id: int) -> InventoryTransfer:
    tr = (
        db.query(InventoryTransfer)
        .options(*_load_options())
        .filter(InventoryTransfer.id == transfer_id)
        .first()
    )
    if not tr:
        raise NotFound("Transfer not found.")
    return tr


def _lock_transfer(db: Session, transfer_id: int) -> InventoryTransfer:
    tr = (
        db.query(InventoryTransfer)
        .filter(InventoryTransfer.id == transfer_id)
        .with_for_update()
        .first()
    )
    if not tr:
        raise NotFound("Transfer not found.")
    return tr


def list_transfers(
    db: Session,
    *,
    source_branch_id: Optional[int] = None,
    target_branch_id: Optional[int] = None,
    status: Optional[TransferStatus] = None,
    page: int = 1,
    limit: int = 20,
) -> Tuple[List[InventoryTransfer], int]:
    q = db.query(InventoryTransfer)
    if source_branch_id:
        q = q.filter(InventoryTransfer.source_branch_id == source_branch_id)
    if target_branch_id:
        q = q.filter(InventoryTransfer.target_branch_id == target_branch_id)
    if status:
        q = q.filter(InventoryTransfer.status == status)

    total = q.count()
    rows = (
        q.options(*_load_options())
        .order_by(InventoryTransfer.requested_at.desc(), InventoryTransfer.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return rows, total


def _requested_by_ingredient(items) -> Dict[int, Decimal]:
    need: Dict[int, Decimal] = {}
    for it in items:
        need[it.ingredient_id] = need.get(it.ingredient_id, D(0)) + D(it.quantity)
    return need


def create_transfer(db: Session, payload, actor: str) -> InventoryTransfer:
    if payload.source_branch_id == payload.target_branch_id:
        raise ValidationFailure("source_branch_id and target_branch_id cannot be same.")
    if not payload.items:
        raise ValidationFailure("Transfer must have at least 1 item.")

    exists = (
        db.query(InventoryTransfer.id)
        .filter(InventoryTransfer.transfer_number == payload.transfer_number)
        .first()
    )
    if exists:
        raise ConflictError(
            f"Transfer number {payload.transfer_number} already exists.",
            code="DUPLICATE_TRANSFER_NUMBER",
        )

    if not db.get(Branch, payload.source_branch_id):
        raise NotFound(f"Invalid source_branch_id={payload.source_branch_id}")
    if not db.get(Branch, payload.target_branch_id):
        raise NotFound(f"Invalid target_branch_id={payload.target_branch_id}")

    need = _requested_by_ingredient(payload.items)
    found = {r[0] for r in db.query(Ingredient.id).filter(Ingredient.id.in_(list(need))).all()}
    missing = sorted(set(need) - found)
    if missing:
        raise NotFound(f"Invalid ingredient_id(s): {missing}", details={"ingredient_ids": missing})

    sources: Dict[int, BranchInventory] = {}
    shortfall = []
    for ing_id, qty in need.items():
        src = lock_inventory(db, payload.source_branch_id, ing_id)
        available = src.available_stock if src else D(0)
        if available < qty:
            shortfall.append({"ingredient_id": ing_id, "requested": qty, "available": available})
        else:
            sources[ing_id] = src

    if shortfall:
        raise InsufficientStock("Insufficient stock at source branch.", items=shortfall)

    # pre-provision the target ledger rows; no stock moves until completion
    targets = {
        ing_id: lock_or_create_inventory(db, payload.target_branch_id, ing_id)
        for ing_id in need
    }

    tr = InventoryTransfer(
        transfer_number=payload.transfer_number,
        source_branch_id=payload.source_branch_id,
        target_branch_id=payload.target_branch_id,
        status=TransferStatus.PENDING,
        notes=payload.notes or "",
        requested_by=actor,
        requested_at=now_local(),
    )
    for it in payload.items:
        tr.items.append(
            InventoryTransferItem(
                ingredient_id=it.ingredient_id,
                source_inventory_id=sources[it.ingredient_id].id,
                target_inventory_id=targets[it.ingredient_id].id,
                quantity=D(it.quantity),
                unit=it.unit,
            )
        )

    db.add(tr)
    db.flush()
    logger.info("Transfer %s requested (%s -> %s)", tr.transfer_number, tr.source_branch_id, tr.target_branch_id)
    return tr


def update_transfer(db: Session, transfer_id: int, payload, actor: str) -> InventoryTransfer:
    tr = _lock_transfer(db, transfer_id)

    target = payload.status
    if target is not None and target != tr.status:
        if target not in _ALLOWED_TRANSITIONS.get(tr.status, set()):
            raise InvalidState(f"Invalid status change {tr.status.value} -> {target.value}")

    if payload.notes is not None:
        if tr.status in TRANSFER_TERMINAL:
            raise InvalidState(f"Transfer is {tr.status.value}; it can no longer be edited.")
        tr.notes = payload.notes

    if target is None or target == tr.status:
        # re-submitting the current status (e.g. a double COMPLETED) changes nothing
        db.flush()
        return tr

    if target == TransferStatus.APPROVED:
        tr.status = TransferStatus.APPROVED
        if not tr.approved_by:
            tr.approved_by = actor
            tr.approved_at = now_local()
    elif target == TransferStatus.IN_TRANSIT:
        tr.status = TransferStatus.IN_TRANSIT
    elif target == TransferStatus.COMPLETED:
        _complete(db, tr, actor)
    elif target == TransferStatus.CANCELLED:
        tr.status = TransferStatus.CANCELLED
        if not tr.cancelled_at:
            tr.cancelled_at = now_local()

    db.flush()
    return tr


def _complete(db: Session, tr: InventoryTransfer, actor: str) -> None:
    items = (
        db.query(InventoryTransferItem)
        .filter(InventoryTransferItem.transfer_id == tr.id)
        .order_by(InventoryTransferItem.id.asc())
        .all()
    )
    if not items:
        raise ValidationFailure("Transfer has no items.")

    source = db.get(Branch, tr.source_branch_id)
    target = db.get(Branch, tr.target_branch_id)

    # lock every source row (ascending id) and re-check stock before moving anything
    need: Dict[int, Decimal] = {}
    for it in items:
        need[it.source_inventory_id] = need.get(it.source_inventory_id, D(0)) + D(it.quantity)

    src_rows: Dict[int, BranchInventory] = {}
    shortfall = []
    for inv_id in sorted(need):
        src = lock_inventory_by_id(db, inv_id)
        available = src.available_stock if src else D(0)
        if src is None or available < need[inv_id]:
            shortfall.append({
                "ingredient_id": src.ingredient_id if src else None,
                "requested": need[inv_id],
                "available": available,
            })
        src_rows[inv_id] = src
    if shortfall:
        raise InsufficientStock("Insufficient stock at source branch to complete transfer.", items=shortfall)

    out_reason = f"Transfer to {target.name} - {tr.transfer_number}"
    in_reason = f"Transfer from {source.name} - {tr.transfer_number}"

    for it in items:
        qty = D(it.quantity)
        apply_stock_delta(
            db,
            src_rows[it.source_inventory_id],
            -qty,
            txn_type=TxnType.ADJUSTMENT,
            reason=out_reason,
            actor=actor,
            ref_type=RefType.TRANSFER,
            ref_id=tr.id,
        )
        dest = lock_or_create_inventory(db, tr.target_branch_id, it.ingredient_id)
        apply_stock_delta(
            db,
            dest,
            qty,
            txn_type=TxnType.ADJUSTMENT,
            reason=in_reason,
            actor=actor,
            ref_type=RefType.TRANSFER,
            ref_id=tr.id,
        )
        it.target_inventory_id = dest.id

    tr.status = TransferStatus.COMPLETED
    if not tr.completed_by:
        tr.completed_by = actor
        tr.completed_at = now_local()
    logger.info("Transfer %s completed (%d items)", tr.transfer_number, len(items))


def delete_transfer(db: Session, transfer_id: int) -> None:
    tr = _lock_transfer(db, transfer_id)
    if tr.status != TransferStatus.PENDING:
        raise InvalidState(f"Only PENDING transfers can be deleted (current: {tr.status.value}).")
    db.delete(tr)
    db.flush()
