# app/db/init_db.py
from __future__ import annotations

import argparse
from decimal import Decimal

from sqlalchemy import inspect
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.db.session import engine
from app.db.base import Base
from app.models.catalog import Branch, Ingredient
from app.models.supplier import Supplier


def print_tables(eng: Engine) -> set:
    names = sorted(inspect(eng).get_table_names())
    print("Existing tables:", names)
    return set(names)


DEMO_BRANCHES = [
    ("Main Kitchen", "12 Market Street"),
    ("Downtown Outlet", "48 Harbour Road"),
]

# name, unit, cost_per_unit, alert_threshold, reorder_threshold
DEMO_INGREDIENTS = [
    ("Tomato", "kg", "2.50", "5", "10"),
    ("Onion", "kg", "1.20", "5", "10"),
    ("Olive Oil", "l", "8.90", "2", "4"),
    ("Mozzarella", "kg", "11.00", "3", "6"),
    ("Flour", "kg", "0.90", "10", "25"),
    ("Basil", "bunch", "1.75", "0", "5"),
]


def seed_demo(db: Session) -> None:
    """
    Seed ONLY missing demo rows; safe to run multiple times.
    """
    for name, address in DEMO_BRANCHES:
        if not db.query(Branch).filter(Branch.name == name).first():
            db.add(Branch(name=name, address=address))

    for name, unit, cost, alert, reorder in DEMO_INGREDIENTS:
        if not db.query(Ingredient).filter(Ingredient.name == name).first():
            db.add(Ingredient(
                name=name,
                unit=unit,
                cost_per_unit=Decimal(cost),
                alert_threshold=Decimal(alert),
                reorder_threshold=Decimal(reorder),
            ))

    if not db.query(Supplier).filter(Supplier.name == "Fresh Farms Co").first():
        db.add(Supplier(
            name="Fresh Farms Co",
            contact_person="Dana Reyes",
            phone="+1 555 0100",
            email="orders@freshfarms.com",
            address="7 Orchard Lane",
        ))


def run(fresh: bool = False, demo: bool = False) -> None:
    if fresh:
        print("WARNING: Dropping ALL tables (dev only) …")
        Base.metadata.drop_all(bind=engine)

    print("Creating all missing tables …")
    Base.metadata.create_all(bind=engine)
    print_tables(engine)

    if not demo:
        return

    try:
        with Session(engine) as db:
            seed_demo(db)
            db.commit()
            print("Demo branches, ingredients and supplier seeded.")
    except SQLAlchemyError as e:
        print("Seeding failed:", e)
        raise


if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Initialize DB (create tables, optionally seed demo data).")
    parser.add_argument(
        "--fresh",
        action="store_true",
        help="Drop & recreate all tables (DEV ONLY).",
    )
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Seed two branches, a few ingredients and a supplier.",
    )
    args = parser.parse_args()
    run(fresh=args.fresh, demo=args.demo)
