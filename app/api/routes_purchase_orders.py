# FILE: app/api/routes_purchase_orders.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, current_actor, Pagination
from app.models.purchase_order import POStatus
from app.schemas.purchase_order import POCreate, POUpdate, POActionIn, POOut
from app.services.purchase_order_service import (
    list_orders,
    get_order,
    create_order,
    update_order,
    approve_order,
    cancel_order,
    receive_order,
    delete_order,
)
from app.utils.resp import ok, page_meta

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/purchase-orders", tags=["purchase-orders"])


def _out(db: Session, order_id: int) -> dict:
    return POOut.model_validate(get_order(db, order_id)).model_dump()


@router.get("")
def list_purchase_orders(
    branch_id: Optional[int] = Query(None),
    supplier_id: Optional[int] = Query(None),
    status: Optional[POStatus] = Query(None),
    pg: Pagination = Depends(),
    db: Session = Depends(get_db),
):
    rows, total = list_orders(
        db,
        branch_id=branch_id,
        supplier_id=supplier_id,
        status=status,
        page=pg.page,
        limit=pg.limit,
    )
    return ok(
        [POOut.model_validate(x).model_dump() for x in rows],
        meta=page_meta(pg.page, pg.limit, total),
    )


@router.post("")
def create_purchase_order(
    payload: POCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(current_actor),
):
    with db.begin():
        po = create_order(db, payload, actor)
        po_id = po.id
    return ok(_out(db, po_id), status_code=201)


@router.get("/{order_id}")
def get_purchase_order(order_id: int, db: Session = Depends(get_db)):
    return ok(_out(db, order_id))


@router.put("/{order_id}")
def update_purchase_order(
    order_id: int,
    payload: POUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(current_actor),
):
    with db.begin():
        update_order(db, order_id, payload, actor)
    return ok(_out(db, order_id))


@router.post("/{order_id}")
def purchase_order_action(
    order_id: int,
    payload: POActionIn,
    db: Session = Depends(get_db),
    actor: str = Depends(current_actor),
):
    skipped = []
    with db.begin():
        if payload.action == "receive":
            _po, skipped = receive_order(db, order_id, payload.items, actor)
        elif payload.action == "approve":
            approve_order(db, order_id, actor)
        else:
            cancel_order(db, order_id, actor)
    return ok(_out(db, order_id), meta={"skipped_item_ids": skipped})


@router.delete("/{order_id}")
def delete_purchase_order(order_id: int, db: Session = Depends(get_db)):
    with db.begin():
        delete_order(db, order_id)
    return ok({"id": order_id, "deleted": True})
