# FILE: app/api/routes_suppliers.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.supplier import (
    SupplierCreate,
    SupplierUpdate,
    SupplierOut,
    SupplierDetailOut,
    SupplierOrderMini,
)
from app.services.supplier_service import (
    list_suppliers,
    supplier_detail,
    create_supplier,
    update_supplier,
    delete_supplier,
)
from app.utils.resp import ok

router = APIRouter(prefix="/suppliers", tags=["suppliers"])


def _detail(db: Session, supplier_id: int) -> dict:
    s, count, recent = supplier_detail(db, supplier_id)
    out = SupplierDetailOut.model_validate(s)
    out.purchase_order_count = count
    out.recent_orders = [SupplierOrderMini.model_validate(po) for po in recent]
    return out.model_dump()


@router.get("")
def list_suppliers_api(
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    rows = list_suppliers(db, is_active=is_active, search=search)
    data = []
    for s, count in rows:
        d = SupplierOut.model_validate(s).model_dump()
        d["purchase_order_count"] = count
        data.append(d)
    return ok(data)


@router.post("")
def create_supplier_api(payload: SupplierCreate, db: Session = Depends(get_db)):
    with db.begin():
        s = create_supplier(db, payload)
        supplier_id = s.id
    return ok(_detail(db, supplier_id), status_code=201)


@router.get("/{supplier_id}")
def get_supplier_api(supplier_id: int, db: Session = Depends(get_db)):
    return ok(_detail(db, supplier_id))


@router.put("/{supplier_id}")
def update_supplier_api(supplier_id: int, payload: SupplierUpdate, db: Session = Depends(get_db)):
    with db.begin():
        update_supplier(db, supplier_id, payload)
    return ok(_detail(db, supplier_id))


@router.delete("/{supplier_id}")
def delete_supplier_api(supplier_id: int, db: Session = Depends(get_db)):
    with db.begin():
        delete_supplier(db, supplier_id)
    return ok({"id": supplier_id, "deleted": True})
