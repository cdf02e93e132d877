"""
Pytest fixtures for the back-office inventory test suite.

Provides:
- A fresh in-memory SQLite database per test (StaticPool, create_all)
- A seeded catalog: two branches, ingredients and a supplier
- A FastAPI TestClient bound to the same database
"""

import os

# Must be set before app modules build the module-level engine
os.environ["DATABASE_URL"] = "sqlite://"

from decimal import Decimal
from types import SimpleNamespace
from typing import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.db.base import Base
from app.db.session import make_engine, make_session_factory
from app.main import app
from app.models.catalog import Branch, Ingredient
from app.models.inventory import BranchInventory
from app.models.supplier import Supplier


@pytest.fixture
def engine():
    eng = make_engine("sqlite://")
    Base.metadata.create_all(bind=eng)
    yield eng
    Base.metadata.drop_all(bind=eng)
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


def tx(db: Session, fn, *args, **kwargs):
    """Run a service call inside its own transaction, the way the routes do."""
    if db.in_transaction():
        db.commit()
    with db.begin():
        return fn(db, *args, **kwargs)


@pytest.fixture
def catalog(db: Session) -> SimpleNamespace:
    b1 = Branch(name="Main Kitchen", address="12 Market Street")
    b2 = Branch(name="Downtown Outlet", address="48 Harbour Road")
    tomato = Ingredient(
        name="Tomato", unit="kg",
        cost_per_unit=Decimal("2.50"), alert_threshold=Decimal("5"), reorder_threshold=Decimal("10"),
    )
    onion = Ingredient(
        name="Onion", unit="kg",
        cost_per_unit=Decimal("1.20"), alert_threshold=Decimal("0"), reorder_threshold=Decimal("4"),
    )
    basil = Ingredient(name="Basil", unit="bunch", cost_per_unit=Decimal("1.75"))
    supplier = Supplier(name="Fresh Farms Co", phone="+1 555 0100", email="orders@freshfarms.com")
    db.add_all([b1, b2, tomato, onion, basil, supplier])
    db.commit()

    return SimpleNamespace(
        b1=b1.id,
        b2=b2.id,
        tomato=tomato.id,
        onion=onion.id,
        basil=basil.id,
        supplier=supplier.id,
    )


@pytest.fixture
def put_stock(db: Session):
    """Seed a ledger row directly (opening balance, no audit row)."""

    def _put(branch_id: int, ingredient_id: int, qty, **extra) -> int:
        inv = BranchInventory(
            branch_id=branch_id,
            ingredient_id=ingredient_id,
            current_stock=Decimal(str(qty)),
            reserved_stock=Decimal("0"),
            **extra,
        )
        db.add(inv)
        db.commit()
        return inv.id

    return _put


@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    def _override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _override_get_db
    try:
        # not used as a context manager: the lifespan would dispose the app engine
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def run(db: Session):
    def _run(fn, *args, **kwargs):
        return tx(db, fn, *args, **kwargs)

    return _run
