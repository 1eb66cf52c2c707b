from datetime import datetime, timedelta
from io import BytesIO

import pytest
from openpyxl import load_workbook

from conftest import create_material, product_payload
from core.settings import Settings
from modules.products.models import Product
from modules.reports.service import ReportRange, ReportService, range_start
from modules.transactions.models import Transaction, TransactionItem


def add_sale(db, product, quantity, when):
    line_total = product.price * quantity
    transaction = Transaction(
        date=when,
        subtotal=line_total,
        discount=0,
        tax=0,
        total=line_total,
        profit=(product.price - product.cost_price) * quantity,
        payment_method="cash",
        cashier_name="Sari",
        items=[
            TransactionItem(
                product_id=product.id,
                product_name=product.name,
                quantity=quantity,
                unit_price=product.price,
                cost_price=product.cost_price,
                total_price=line_total,
                profit=(product.price - product.cost_price) * quantity,
            )
        ],
    )
    db.add(transaction)
    db.commit()


def test_range_start_clamps_month_end():
    assert range_start(ReportRange.MONTH, datetime(2026, 3, 31, 15, 0)) == datetime(2026, 2, 28)
    assert range_start(ReportRange.YEAR, datetime(2028, 2, 29, 9, 0)) == datetime(2027, 2, 28)
    assert range_start(ReportRange.WEEK, datetime(2026, 10, 19, 9, 0)) == datetime(2026, 10, 12)


def test_summary_aggregates_sales_within_range(db_session):
    latte = Product(name="Kopi Susu", price=25000, cost_price=15000, manual_cost=True, stock=5)
    tea = Product(name="Teh Lemon", price=18000, cost_price=5000, manual_cost=True, stock=100)
    db_session.add_all([latte, tea])
    db_session.commit()

    now = datetime(2026, 10, 19, 12, 0)
    add_sale(db_session, latte, 2, now - timedelta(days=1))
    add_sale(db_session, tea, 4, now - timedelta(days=1, hours=2))
    add_sale(db_session, latte, 1, now - timedelta(days=3))
    add_sale(db_session, tea, 10, now - timedelta(days=40))

    report = ReportService(settings=Settings(low_stock_threshold=10)).compute_summary(db_session, ReportRange.WEEK, now=now)

    assert report["summary"]["total_orders"] == 3
    assert report["summary"]["total_sales"] == pytest.approx(50000 + 72000 + 25000)
    assert report["summary"]["average_order_value"] == pytest.approx(147000 / 3)
    assert report["summary"]["total_profit"] == pytest.approx(20000 + 52000 + 10000)
    assert report["summary"]["expenses"] == pytest.approx(2 * 15000 + 4 * 5000 + 1 * 15000)
    assert [d["date"] for d in report["sales_by_date"]] == ["2026-10-16", "2026-10-18"]
    assert report["sales_by_date"][1]["sales"] == pytest.approx(122000)
    assert report["top_products"][0] == {"product_id": tea.id, "name": "Teh Lemon", "quantity": 4}
    assert len(report["recent_transactions"]) == 3

    inventory = report["inventory"]
    assert inventory["low_stock_items"] == 1
    assert inventory["total_value"] == pytest.approx(5 * 15000 + 100 * 5000)


def test_year_summary_buckets_sales_by_month(db_session):
    latte = Product(name="Kopi Susu", price=25000, cost_price=15000, manual_cost=True, stock=50)
    tea = Product(name="Teh Lemon", price=18000, cost_price=5000, manual_cost=True, stock=50)
    db_session.add_all([latte, tea])
    db_session.commit()

    now = datetime(2026, 10, 19, 12, 0)
    add_sale(db_session, latte, 2, datetime(2026, 10, 18, 9, 0))
    add_sale(db_session, latte, 1, datetime(2026, 10, 5, 9, 0))
    add_sale(db_session, tea, 3, datetime(2026, 3, 10, 9, 0))
    add_sale(db_session, tea, 1, datetime(2025, 9, 30, 9, 0))

    report = ReportService(settings=Settings()).compute_summary(db_session, ReportRange.YEAR, now=now)

    assert report["sales_by_date"] == [
        {"date": "2026-03", "sales": pytest.approx(54000)},
        {"date": "2026-10", "sales": pytest.approx(75000)},
    ]
    assert report["summary"]["expenses"] == pytest.approx(3 * 15000 + 3 * 5000)
    assert report["summary"]["total_sales"] - report["summary"]["expenses"] == pytest.approx(
        report["summary"]["total_profit"]
    )


def test_summary_endpoint_is_admin_only(client, admin_headers, cashier_headers):
    assert client.get("/reports/summary", headers=cashier_headers).status_code == 403
    resp = client.get("/reports/summary?range=month", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.json()["header"]["range"] == "month"
    assert client.get("/reports/summary?range=decade", headers=admin_headers).status_code == 400


def test_excel_export(client, admin_headers):
    beans = create_material(client, admin_headers, name="Beans", stock=3, unit_cost=1000)
    product = client.post(
        "/products", json=product_payload(ingredients=[(beans["id"], 1)], stock=20), headers=admin_headers
    ).json()
    client.post(
        "/transactions/checkout",
        json={"payment_method": "cash", "cashier_name": "Sari", "items": [{"productId": product["id"], "quantity": 2}]},
        headers=admin_headers,
    )

    resp = client.get("/reports/summary/excel?range=week", headers=admin_headers)
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("application/vnd.openxmlformats")

    ws = load_workbook(BytesIO(resp.content)).active
    values = [cell for row in ws.iter_rows(values_only=True) for cell in row if cell is not None]
    assert "SALES REPORT" in values
    assert "Kopi Susu" in values
    assert "Beans (Raw)" in values
