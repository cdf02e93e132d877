# FILE: app/api/routes_transfers.py
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.deps import get_db, current_actor, Pagination
from app.models.transfer import TransferStatus
from app.schemas.transfer import TransferCreate, TransferUpdate, TransferOut
from app.services.transfer_service import (
    list_transfers,
    get_transfer,
    create_transfer,
    update_transfer,
    delete_transfer,
)
from app.utils.resp import ok, page_meta

router = APIRouter(prefix="/transfers", tags=["transfers"])


def _out(db: Session, transfer_id: int) -> dict:
    return TransferOut.model_validate(get_transfer(db, transfer_id)).model_dump()


@router.get("")
def list_transfers_api(
    source_branch_id: Optional[int] = Query(None),
    target_branch_id: Optional[int] = Query(None),
    status: Optional[TransferStatus] = Query(None),
    pg: Pagination = Depends(),
    db: Session = Depends(get_db),
):
    rows, total = list_transfers(
        db,
        source_branch_id=source_branch_id,
        target_branch_id=target_branch_id,
        status=status,
        page=pg.page,
        limit=pg.limit,
    )
    return ok(
        [TransferOut.model_validate(x).model_dump() for x in rows],
        meta=page_meta(pg.page, pg.limit, total),
    )


@router.post("")
def create_transfer_api(
    payload: TransferCreate,
    db: Session = Depends(get_db),
    actor: str = Depends(current_actor),
):
    with db.begin():
        tr = create_transfer(db, payload, actor)
        tr_id = tr.id
    return ok(_out(db, tr_id), status_code=201)


@router.get("/{transfer_id}")
def get_transfer_api(transfer_id: int, db: Session = Depends(get_db)):
    return ok(_out(db, transfer_id))


@router.put("/{transfer_id}")
def update_transfer_api(
    transfer_id: int,
    payload: TransferUpdate,
    db: Session = Depends(get_db),
    actor: str = Depends(current_actor),
):
    with db.begin():
        update_transfer(db, transfer_id, payload, actor)
    return ok(_out(db, transfer_id))


@router.delete("/{transfer_id}")
def delete_transfer_api(transfer_id: int, db: Session = Depends(get_db)):
    with db.begin():
        delete_transfer(db, transfer_id)
    return ok({"id": transfer_id, "deleted": True})
