from datetime import date, timedelta
from decimal import Decimal

from app.services.alerts import branch_alerts

TODAY = date(2026, 3, 15)


def test_branch_alerts_kinds_priorities_and_order(db, catalog, put_stock):
    put_stock(catalog.b1, catalog.tomato, 0)
    put_stock(catalog.b1, catalog.onion, 3, expiry_date=TODAY + timedelta(days=5))
    put_stock(catalog.b1, catalog.basil, 2, expiry_date=TODAY - timedelta(days=1))
    put_stock(catalog.b2, catalog.tomato, 1)

    result = branch_alerts(db, catalog.b1, today=TODAY)

    got = [(a["type"], a["priority"], a["data"]["ingredient_name"]) for a in result["alerts"]]
    assert got == [
        ("LOW_STOCK", "URGENT", "Tomato"),
        ("EXPIRED", "URGENT", "Basil"),
        ("LOW_STOCK", "HIGH", "Onion"),
        ("EXPIRY_WARNING", "NORMAL", "Onion"),
    ]
    assert result["summary"] == {"low_stock": 2, "expiring_soon": 1, "expired": 1, "total": 4}

    onion_low = result["alerts"][2]
    # alert threshold is zero, so the reorder threshold applies
    assert onion_low["data"]["threshold"] == Decimal("4")
    assert onion_low["title"] == "Low Stock Alert"
    assert result["alerts"][0]["title"] == "Out of Stock"


def test_expiry_urgency_window(db, catalog, put_stock):
    put_stock(catalog.b1, catalog.basil, 1, expiry_date=TODAY + timedelta(days=3))
    put_stock(catalog.b2, catalog.basil, 1, expiry_date=TODAY + timedelta(days=8))

    near = branch_alerts(db, catalog.b1, today=TODAY)
    assert [(a["type"], a["priority"]) for a in near["alerts"]] == [("EXPIRY_WARNING", "HIGH")]
    assert near["alerts"][0]["message"].startswith("Basil expires in 3 days")

    far = branch_alerts(db, catalog.b2, today=TODAY)
    assert far["alerts"] == []


def test_expired_without_stock_is_ignored(db, catalog, put_stock):
    put_stock(catalog.b1, catalog.basil, 0, expiry_date=TODAY - timedelta(days=3))
    assert branch_alerts(db, catalog.b1, today=TODAY)["summary"]["total"] == 0
