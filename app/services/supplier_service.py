# FILE: app/services/supplier_service.py
from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.models.purchase_order import PurchaseOrder
from app.models.supplier import Supplier
from app.services.errors import ConflictError, InvalidState, NotFound

logger = logging.getLogger(__name__)


def _order_counts(db: Session, supplier_ids: List[int]) -> Dict[int, int]:
    if not supplier_ids:
        return {}
    rows = (
        db.query(PurchaseOrder.supplier_id, func.count(PurchaseOrder.id))
        .filter(PurchaseOrder.supplier_id.in_(supplier_ids))
        .group_by(PurchaseOrder.supplier_id)
        .all()
    )
    return {sid: int(n) for sid, n in rows}


def list_suppliers(
    db: Session,
    *,
    is_active: Optional[bool] = None,
    search: Optional[str] = None,
) -> List[Tuple[Supplier, int]]:
    q = db.query(Supplier)
    if is_active is not None:
        q = q.filter(Supplier.is_active == is_active)
    if search:
        like = f"%{search.strip()}%"
        q = q.filter(
            or_(
                Supplier.name.like(like),
                Supplier.contact_person.like(like),
                Supplier.email.like(like),
                Supplier.phone.like(like),
            )
        )
    rows = q.order_by(Supplier.created_at.desc(), Supplier.id.desc()).all()
    counts = _order_counts(db, [s.id for s in rows])
    return [(s, counts.get(s.id, 0)) for s in rows]


def get_supplier(db: Session, supplier_id: int) -> Supplier:
    s = db.get(Supplier, supplier_id)
    if not s:
        raise NotFound("Supplier not found.")
    return s


def supplier_detail(db: Session, supplier_id: int) -> Tuple[Supplier, int, List[PurchaseOrder]]:
    s = get_supplier(db, supplier_id)
    recent = (
        db.query(PurchaseOrder)
        .filter(PurchaseOrder.supplier_id == s.id)
        .order_by(PurchaseOrder.ordered_at.desc(), PurchaseOrder.id.desc())
        .limit(10)
        .all()
    )
    count = _order_counts(db, [s.id]).get(s.id, 0)
    return s, count, recent


def _ensure_unique(db: Session, *, name: Optional[str], email: Optional[str], exclude_id: Optional[int] = None) -> None:
    conds = []
    if name:
        conds.append(Supplier.name == name)
    if email:
        conds.append(Supplier.email == email)
    if not conds:
        return

    q = db.query(Supplier.id).filter(or_(*conds))
    if exclude_id:
        q = q.filter(Supplier.id != exclude_id)
    if q.first():
        raise ConflictError("Supplier with this name or email already exists.", code="DUPLICATE_SUPPLIER")


def create_supplier(db: Session, payload) -> Supplier:
    name = payload.name.strip()
    _ensure_unique(db, name=name, email=payload.email)

    s = Supplier(
        name=name,
        contact_person=payload.contact_person or "",
        phone=payload.phone or "",
        email=payload.email or "",
        address=payload.address or "",
        notes=payload.notes or "",
        is_active=payload.is_active,
    )
    db.add(s)
    db.flush()
    logger.info("Supplier %s created (id=%s)", s.name, s.id)
    return s


def update_supplier(db: Session, supplier_id: int, payload) -> Supplier:
    s = (
        db.query(Supplier)
        .filter(Supplier.id == supplier_id)
        .with_for_update()
        .first()
    )
    if not s:
        raise NotFound("Supplier not found.")

    data = payload.model_dump(exclude_unset=True)
    if "name" in data and data["name"] is not None:
        data["name"] = data["name"].strip()
    _ensure_unique(db, name=data.get("name"), email=data.get("email"), exclude_id=s.id)

    for k, v in data.items():
        if v is None:
            continue
        setattr(s, k, v)

    db.flush()
    return s


def delete_supplier(db: Session, supplier_id: int) -> None:
    s = get_supplier(db, supplier_id)
    if _order_counts(db, [s.id]).get(s.id, 0) > 0:
        raise InvalidState("Cannot delete supplier with existing purchase orders.", code="SUPPLIER_HAS_ORDERS")
    db.delete(s)
    db.flush()
