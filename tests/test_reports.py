from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from app.models.inventory import BranchInventory
from app.models.sales import SalesOrder, SalesOrderItem
from app.models.waste import WasteLog, WasteReason
from app.services.reports import build_report

NOW = datetime(2026, 3, 18, 15, 0)  # a Wednesday


@pytest.fixture
def sales(db, catalog):
    def _order(ts, total, items=(), payment="CASH", kind="DINE_IN", branch=None):
        o = SalesOrder(
            branch_id=branch or catalog.b1,
            order_timestamp=ts,
            total_amount=Decimal(total),
            payment_method=payment,
            order_type=kind,
        )
        for menu_id, name, qty, subtotal in items:
            o.items.append(SalesOrderItem(menu_item_id=menu_id, item_name=name, quantity=qty, subtotal=Decimal(subtotal)))
        db.add(o)

    _order(datetime(2026, 3, 18, 10, 30), "20.00", [(1, "Margherita", 2, "20.00")])
    _order(datetime(2026, 3, 16, 19, 5), "30.00", [(1, "Margherita", 1, "10.00"), (2, "Lasagne", 1, "20.00")], payment="CARD")
    _order(datetime(2026, 3, 2, 19, 45), "50.00", [(2, "Lasagne", 2, "40.00"), (3, "Tiramisu", 2, "10.00")], kind="TAKEAWAY")
    _order(datetime(2026, 2, 20, 12, 0), "5.00", [(3, "Tiramisu", 1, "5.00")])
    _order(datetime(2026, 3, 18, 11, 0), "99.00", branch=catalog.b2)
    db.commit()


def test_summary(db, catalog, sales, put_stock):
    put_stock(catalog.b1, catalog.tomato, 4)
    put_stock(catalog.b1, catalog.onion, 0, expiry_date=date(2026, 3, 20))
    db.add(WasteLog(branch_id=catalog.b1, ingredient_id=catalog.tomato, quantity=Decimal("1"), unit="kg",
                    reason=WasteReason.SPOILED, loss_value=Decimal("2.50"), recorded_by="cook",
                    created_at=datetime(2026, 3, 17, 9, 0)))
    db.commit()

    s = build_report(db, catalog.b1, "summary", now=NOW)["summary"]

    assert s["today"] == {"orders": 1, "revenue": Decimal("20.00")}
    assert s["week"] == {"orders": 2, "revenue": Decimal("50.00")}
    assert s["month"] == {"orders": 3, "revenue": Decimal("100.00")}
    assert s["total_orders"] == 4
    assert s["inventory_value"] == Decimal("10.00")
    assert s["low_stock_count"] == 1
    assert s["expiring_count"] == 1
    assert s["week_waste_value"] == Decimal("2.50")


def test_unknown_type_falls_back_to_summary(db, catalog, sales):
    assert "summary" in build_report(db, catalog.b1, "nonsense", now=NOW)


def test_sales_groups_by_day_payment_and_type(db, catalog, sales):
    r = build_report(db, catalog.b1, "sales", date(2026, 3, 1), date(2026, 3, 31), now=NOW)

    assert r["overview"] == {
        "total_revenue": Decimal("100.00"),
        "total_orders": 3,
        "avg_order_value": Decimal("33.33"),
    }
    assert [d["date"] for d in r["by_date"]] == ["2026-03-02", "2026-03-16", "2026-03-18"]
    assert r["by_payment"] == {"CASH": 2, "CARD": 1}
    assert r["by_order_type"] == {"DINE_IN": 2, "TAKEAWAY": 1}
    assert r["orders"][0]["total_amount"] == Decimal("20.00")


def test_products_ranked_by_revenue(db, catalog, sales):
    r = build_report(db, catalog.b1, "products", now=NOW)
    ranked = [(p["name"], p["revenue"]) for p in r["all_products"]]
    assert ranked == [("Lasagne", Decimal("60.00")), ("Margherita", Decimal("30.00")), ("Tiramisu", Decimal("15.00"))]
    assert r["top_products"][0]["quantity"] == 3


def test_hourly_has_24_buckets(db, catalog, sales):
    r = build_report(db, catalog.b1, "hourly", now=NOW)["hourly"]
    assert len(r) == 24
    assert r[19] == {"hour": 19, "orders": 2, "revenue": Decimal("80.00")}
    assert r[3]["orders"] == 0


def test_inventory_report_flags_low_rows(db, catalog, put_stock):
    put_stock(catalog.b1, catalog.tomato, 3)
    put_stock(catalog.b1, catalog.basil, 9)

    r = build_report(db, catalog.b1, "inventory", now=NOW)

    assert r["overview"]["total_items"] == 2
    assert r["overview"]["low_stock_count"] == 1
    rows = {row["name"]: row for row in r["inventory"]}
    assert rows["Tomato"]["is_low"] is True
    assert rows["Tomato"]["total_value"] == Decimal("7.50")
    assert rows["Basil"]["is_low"] is False


def test_inventory_report_flags_empty_row_without_thresholds(db, catalog, put_stock):
    put_stock(catalog.b1, catalog.basil, 0)

    r = build_report(db, catalog.b1, "inventory", now=NOW)

    assert r["overview"]["low_stock_count"] == 1
    assert r["inventory"][0]["is_low"] is True
    assert [row["name"] for row in r["low_stock"]] == ["Basil"]


def test_waste_report(db, catalog):
    for qty, loss, reason in (("1", "2.50", WasteReason.SPOILED), ("2", "5.00", WasteReason.SPOILED)):
        db.add(WasteLog(branch_id=catalog.b1, ingredient_id=catalog.tomato, quantity=Decimal(qty), unit="kg",
                        reason=reason, loss_value=Decimal(loss), recorded_by="cook",
                        created_at=NOW - timedelta(days=1)))
    db.commit()

    r = build_report(db, catalog.b1, "waste", now=NOW)
    assert r["overview"]["total_loss"] == Decimal("7.50")
    assert r["by_reason"] == [{"reason": "SPOILED", "count": 2, "total_loss": Decimal("7.50")}]
    assert r["by_ingredient"][0]["total_quantity"] == Decimal("3")
    assert len(r["recent_logs"]) == 2
