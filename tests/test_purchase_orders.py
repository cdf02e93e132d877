from datetime import date
from decimal import Decimal

import pytest

from app.models.inventory import BranchInventory, InventoryTransaction, TxnType
from app.models.purchase_order import PurchaseOrder, POStatus
from app.schemas.purchase_order import POCreate, POUpdate, ReceiveLineIn
from app.services.errors import ConflictError, InvalidState, NotFound, ValidationFailure
from app.services.purchase_order_service import (
    approve_order,
    cancel_order,
    create_order,
    delete_order,
    get_order,
    list_orders,
    receive_order,
    update_order,
)


def _payload(catalog, number="PO-1001", items=None):
    return POCreate(
        order_number=number,
        supplier_id=catalog.supplier,
        branch_id=catalog.b1,
        items=items or [{"ingredient_id": catalog.tomato, "quantity": 10, "unit": "kg", "unit_price": "2.5"}],
    )


def _stock(db, branch_id, ingredient_id):
    inv = (
        db.query(BranchInventory)
        .filter(BranchInventory.branch_id == branch_id, BranchInventory.ingredient_id == ingredient_id)
        .first()
    )
    return inv.current_stock if inv else None


def test_create_computes_total_and_starts_pending(db, run, catalog):
    po = run(create_order, _payload(catalog), "alice")

    assert po.status == POStatus.PENDING
    assert po.total_amount == Decimal("25.00")
    assert po.created_by == "alice"
    assert [it.received_qty for it in po.items] == [Decimal("0")]


def test_duplicate_order_number_is_conflict(db, run, catalog):
    run(create_order, _payload(catalog), "alice")
    with pytest.raises(ConflictError) as ei:
        run(create_order, _payload(catalog), "alice")
    assert ei.value.status_code == 409
    assert db.query(PurchaseOrder).count() == 1


def test_unknown_supplier_is_not_found(run, catalog):
    p = _payload(catalog)
    p.supplier_id = 9999
    with pytest.raises(NotFound):
        run(create_order, p, "alice")


def test_full_receive_moves_stock_and_closes_order(db, run, catalog):
    po = run(create_order, _payload(catalog), "alice")
    item_id = po.items[0].id

    po, skipped = run(receive_order, po.id, [ReceiveLineIn(item_id=item_id, received_qty=10)], "bob")

    assert skipped == []
    assert po.status == POStatus.RECEIVED
    assert po.received_at is not None
    assert _stock(db, catalog.b1, catalog.tomato) == Decimal("10")

    txn = db.query(InventoryTransaction).one()
    assert txn.transaction_type == TxnType.RESTOCK
    assert txn.quantity_change == Decimal("10")
    assert txn.stock_before == Decimal("0")
    assert txn.stock_after == Decimal("10")
    assert txn.reason == "Purchase order PO-1001"
    assert txn.created_by == "bob"


def test_partial_then_complete_receive(db, run, catalog):
    po = run(create_order, _payload(catalog), "alice")
    item_id = po.items[0].id

    po, _ = run(receive_order, po.id, [ReceiveLineIn(item_id=item_id, received_qty=4)], "bob")
    assert po.status == POStatus.PARTIAL
    assert po.items[0].received_qty == Decimal("4")

    po, _ = run(receive_order, po.id, [ReceiveLineIn(item_id=item_id, received_qty=6)], "bob")
    assert po.status == POStatus.RECEIVED
    assert po.items[0].received_qty == Decimal("10")
    assert _stock(db, catalog.b1, catalog.tomato) == Decimal("10")
    assert db.query(InventoryTransaction).count() == 2


def test_partial_receive_from_approved(run, catalog):
    po = run(create_order, _payload(catalog), "alice")
    run(approve_order, po.id, "mgr")
    po, _ = run(receive_order, po.id, [ReceiveLineIn(item_id=po.items[0].id, received_qty=1)], "bob")
    assert po.status == POStatus.PARTIAL


def test_over_receipt_is_rejected_and_nothing_applied(db, run, catalog):
    items = [
        {"ingredient_id": catalog.tomato, "quantity": 10, "unit": "kg", "unit_price": 2},
        {"ingredient_id": catalog.onion, "quantity": 3, "unit": "kg", "unit_price": 1},
    ]
    po = run(create_order, _payload(catalog, items=items), "alice")
    first, second = po.items

    with pytest.raises(ValidationFailure):
        run(
            receive_order,
            po.id,
            [ReceiveLineIn(item_id=first.id, received_qty=5), ReceiveLineIn(item_id=second.id, received_qty=4)],
            "bob",
        )

    po = get_order(db, po.id)
    assert po.status == POStatus.PENDING
    assert all(it.received_qty == 0 for it in po.items)
    assert _stock(db, catalog.b1, catalog.tomato) is None
    assert db.query(InventoryTransaction).count() == 0


def test_received_qty_never_exceeds_ordered(db, run, catalog):
    po = run(create_order, _payload(catalog), "alice")
    item_id = po.items[0].id

    for qty in (3, 3, 3):
        run(receive_order, po.id, [ReceiveLineIn(item_id=item_id, received_qty=qty)], "bob")
    with pytest.raises(ValidationFailure):
        run(receive_order, po.id, [ReceiveLineIn(item_id=item_id, received_qty=2)], "bob")

    po = get_order(db, po.id)
    assert po.items[0].received_qty == Decimal("9")
    assert po.items[0].received_qty <= po.items[0].quantity


def test_unknown_item_is_skipped_and_reported(db, run, catalog):
    po = run(create_order, _payload(catalog), "alice")
    lines = [ReceiveLineIn(item_id=po.items[0].id, received_qty=2), ReceiveLineIn(item_id=424242, received_qty=1)]

    po, skipped = run(receive_order, po.id, lines, "bob")

    assert skipped == [424242]
    assert po.status == POStatus.PARTIAL
    assert _stock(db, catalog.b1, catalog.tomato) == Decimal("2")


def test_receive_sets_expiry_date(db, run, catalog):
    po = run(create_order, _payload(catalog), "alice")
    run(
        receive_order,
        po.id,
        [ReceiveLineIn(item_id=po.items[0].id, received_qty=10, expiry_date=date(2030, 1, 31))],
        "bob",
    )
    inv = db.query(BranchInventory).one()
    assert inv.expiry_date == date(2030, 1, 31)
    assert inv.last_restock_at is not None


def test_receive_cancelled_order_is_rejected(run, catalog):
    po = run(create_order, _payload(catalog), "alice")
    run(cancel_order, po.id, "mgr")
    with pytest.raises(InvalidState):
        run(receive_order, po.id, [ReceiveLineIn(item_id=po.items[0].id, received_qty=1)], "bob")


def test_approve_is_set_once(db, run, catalog):
    po = run(create_order, _payload(catalog), "alice")

    po = run(approve_order, po.id, "first")
    approved_at = po.approved_at

    po = run(approve_order, po.id, "second")
    assert po.status == POStatus.APPROVED
    assert po.approved_by == "first"
    assert po.approved_at == approved_at


def test_approve_only_from_pending(run, catalog):
    po = run(create_order, _payload(catalog), "alice")
    run(receive_order, po.id, [ReceiveLineIn(item_id=po.items[0].id, received_qty=10)], "bob")
    with pytest.raises(InvalidState):
        run(approve_order, po.id, "mgr")


def test_update_rejects_received_status_and_allows_notes(run, catalog):
    po = run(create_order, _payload(catalog), "alice")

    with pytest.raises(InvalidState):
        run(update_order, po.id, POUpdate(status=POStatus.RECEIVED), "mgr")

    po = run(update_order, po.id, POUpdate(notes="call before delivery", status=POStatus.APPROVED), "mgr")
    assert po.notes == "call before delivery"
    assert po.status == POStatus.APPROVED
    assert po.approved_by == "mgr"

    po = run(update_order, po.id, POUpdate(status=POStatus.CANCELLED), "mgr")
    assert po.status == POStatus.CANCELLED
    assert po.cancelled_by == "mgr"

    with pytest.raises(InvalidState):
        run(update_order, po.id, POUpdate(notes="too late"), "mgr")


def test_delete_guard(db, run, catalog):
    po = run(create_order, _payload(catalog), "alice")
    run(approve_order, po.id, "mgr")

    with pytest.raises(ConflictError):
        run(delete_order, po.id)

    po = get_order(db, po.id)
    assert po.status == POStatus.APPROVED
    assert len(po.items) == 1


def test_delete_pending_cascades_items(db, run, catalog):
    po = run(create_order, _payload(catalog), "alice")
    run(delete_order, po.id)
    assert db.query(PurchaseOrder).count() == 0


def test_list_filters_and_paginates(db, run, catalog):
    for i in range(3):
        run(create_order, _payload(catalog, number=f"PO-{i}"), "alice")
    first = db.query(PurchaseOrder).filter(PurchaseOrder.order_number == "PO-0").one()
    run(approve_order, first.id, "mgr")

    rows, total = list_orders(db, branch_id=catalog.b1, page=1, limit=2)
    assert total == 3
    assert len(rows) == 2

    rows, total = list_orders(db, status=POStatus.APPROVED)
    assert total == 1
    assert rows[0].order_number == "PO-0"
