import calendar
from collections import defaultdict
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from core.settings import Settings
from modules.products.models import Product
from modules.raw_materials.models import RawMaterial
from modules.transactions.models import Transaction

TOP_PRODUCT_LIMIT = 4
RECENT_TRANSACTION_LIMIT = 3


class ReportRange(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


def _shift_months(day: date, months: int) -> date:
    month_index = day.year * 12 + (day.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def range_start(report_range: ReportRange, now: datetime) -> datetime:
    today = now.date()
    if report_range == ReportRange.WEEK:
        start = today - timedelta(days=7)
    elif report_range == ReportRange.MONTH:
        start = _shift_months(today, 1)
    else:
        start = _shift_months(today, 12)
    return datetime.combine(start, time.min)


def _period_key(report_range: ReportRange, when: datetime) -> str:
    # A year of sales is bucketed by month, shorter ranges by day
    if report_range == ReportRange.YEAR:
        return when.strftime("%Y-%m")
    return when.date().isoformat()


class ReportService:
    def __init__(self, settings: Settings):
        self.settings = settings

    def compute_summary(
        self, db: Session, report_range: ReportRange, now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        now = now or datetime.utcnow()
        start = range_start(report_range, now)
        transactions = (
            db.query(Transaction)
            .filter(Transaction.date >= start)
            .order_by(Transaction.date.desc(), Transaction.id.desc())
            .all()
        )

        total_sales = sum(t.total for t in transactions)
        total_profit = sum(t.profit for t in transactions)
        expenses = sum(item.cost_price * item.quantity for t in transactions for item in t.items)
        total_orders = len(transactions)

        sales_by_period: Dict[str, float] = defaultdict(float)
        product_qty: Dict[int, int] = defaultdict(int)
        product_names: Dict[int, str] = {}
        for transaction in transactions:
            sales_by_period[_period_key(report_range, transaction.date)] += transaction.total
            for item in transaction.items:
                product_qty[item.product_id] += item.quantity
                # Transactions are newest first, so the first name seen is the latest
                product_names.setdefault(item.product_id, item.product_name)

        top_products = sorted(
            (
                {"product_id": pid, "name": product_names[pid], "quantity": qty}
                for pid, qty in product_qty.items()
            ),
            key=lambda x: x["quantity"],
            reverse=True,
        )[:TOP_PRODUCT_LIMIT]

        return {
            "header": {
                "range": report_range.value,
                "start": start.isoformat(),
                "generated_at": now.isoformat(),
            },
            "summary": {
                "total_sales": total_sales,
                "total_orders": total_orders,
                "average_order_value": total_sales / total_orders if total_orders else 0.0,
                "total_profit": total_profit,
                "expenses": expenses,
            },
            "sales_by_date": [
                {"date": period, "sales": sales_by_period[period]} for period in sorted(sales_by_period)
            ],
            "top_products": top_products,
            "inventory": self._inventory(db),
            "recent_transactions": [
                {"id": t.id, "date": t.date.isoformat(), "total": t.total}
                for t in transactions[:RECENT_TRANSACTION_LIMIT]
            ],
        }

    def _inventory(self, db: Session) -> Dict[str, Any]:
        threshold = self.settings.low_stock_threshold
        items: List[Dict[str, Any]] = []
        for product in db.query(Product).order_by(Product.id).all():
            items.append(
                {"name": product.name, "kind": "product", "stock": product.stock, "unit_value": product.cost_price}
            )
        for material in db.query(RawMaterial).order_by(RawMaterial.id).all():
            items.append(
                {
                    "name": f"{material.name} (Raw)",
                    "kind": "raw_material",
                    "stock": material.stock,
                    "unit_value": material.unit_cost,
                }
            )

        stock_levels = [
            {"name": i["name"], "kind": i["kind"], "stock": i["stock"], "is_low": i["stock"] < threshold}
            for i in items
        ]
        return {
            "stock_levels": stock_levels,
            "total_value": sum(i["stock"] * i["unit_value"] for i in items),
            "low_stock_items": sum(1 for s in stock_levels if s["is_low"]),
            "low_stock_threshold": threshold,
        }
