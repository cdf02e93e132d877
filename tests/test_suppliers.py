import pytest

from app.schemas.purchase_order import POCreate
from app.schemas.supplier import SupplierCreate, SupplierUpdate
from app.services.errors import ConflictError, InvalidState, NotFound
from app.services.purchase_order_service import create_order
from app.services.supplier_service import (
    create_supplier,
    delete_supplier,
    list_suppliers,
    supplier_detail,
    update_supplier,
)


def test_create_and_search(db, run, catalog):
    run(create_supplier, SupplierCreate(name="Dairy Direct", contact_person="Sam Lee", phone="555-0101"))

    rows = list_suppliers(db, search="Sam")
    assert [s.name for s, _count in rows] == ["Dairy Direct"]

    rows = list_suppliers(db, is_active=True)
    assert {s.name for s, _ in rows} == {"Dairy Direct", "Fresh Farms Co"}


def test_duplicate_name_or_email_is_conflict(run, catalog):
    with pytest.raises(ConflictError) as ei:
        run(create_supplier, SupplierCreate(name="Fresh Farms Co", phone="1"))
    assert ei.value.status_code == 409

    with pytest.raises(ConflictError):
        run(create_supplier, SupplierCreate(name="Other", phone="1", email="orders@freshfarms.com"))


def test_update_checks_duplicates_against_others(run, catalog):
    other = run(create_supplier, SupplierCreate(name="Dairy Direct", phone="1"))
    with pytest.raises(ConflictError):
        run(update_supplier, other.id, SupplierUpdate(name="Fresh Farms Co"))

    # renaming to its own name is fine
    s = run(update_supplier, other.id, SupplierUpdate(name="Dairy Direct", is_active=False))
    assert s.is_active is False


def test_delete_refused_with_orders(db, run, catalog):
    run(
        create_order,
        POCreate(
            order_number="PO-S1",
            supplier_id=catalog.supplier,
            branch_id=catalog.b1,
            items=[{"ingredient_id": catalog.tomato, "quantity": 1, "unit": "kg", "unit_price": 1}],
        ),
        "alice",
    )
    with pytest.raises(InvalidState) as ei:
        run(delete_supplier, catalog.supplier)
    assert ei.value.status_code == 400

    s, count, recent = supplier_detail(db, catalog.supplier)
    assert count == 1
    assert [po.order_number for po in recent] == ["PO-S1"]


def test_delete_without_orders(db, run, catalog):
    run(delete_supplier, catalog.supplier)
    with pytest.raises(NotFound):
        supplier_detail(db, catalog.supplier)
