from io import BytesIO
from typing import Any, Dict, List

from openpyxl import Workbook
from openpyxl.styles import Alignment, Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter

RANGE_LABELS = {"week": "Last 7 days", "month": "Last month", "year": "Last year"}


def _create_styles():
    """Shared cell styles for the sales report."""
    thin = Side(style="thin", color="000000")
    return {
        "title_font": Font(bold=True, size=14),
        "section_font": Font(bold=True, size=11),
        "header_font": Font(bold=True, size=10),
        "header_fill": PatternFill(start_color="E2D3C1", end_color="E2D3C1", fill_type="solid"),
        "low_stock_fill": PatternFill(start_color="FFF2CC", end_color="FFF2CC", fill_type="solid"),
        "total_font": Font(bold=True),
        "border": Border(left=thin, right=thin, top=thin, bottom=thin),
        "center_align": Alignment(horizontal="center", vertical="center"),
        "right_align": Alignment(horizontal="right", vertical="center"),
        "left_align": Alignment(horizontal="left", vertical="center"),
    }


def _write_header_row(ws, row: int, columns: List[str], styles: dict):
    for col_idx, col_name in enumerate(columns, start=1):
        cell = ws.cell(row=row, column=col_idx, value=col_name)
        cell.font = styles["header_font"]
        cell.fill = styles["header_fill"]
        cell.border = styles["border"]
        cell.alignment = styles["center_align"]


def _write_row(ws, row: int, values: List[Any], styles: dict, alignments: List[str]):
    for col_idx, value in enumerate(values, start=1):
        cell = ws.cell(row=row, column=col_idx, value=value)
        cell.border = styles["border"]
        cell.alignment = styles[f"{alignments[col_idx - 1]}_align"]


def _format_money(value: float) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f}"


def _format_quantity(value: float) -> str:
    if value is None:
        return "-"
    return f"{value:,.2f}".rstrip("0").rstrip(".")


def _section(ws, row: int, title: str, styles: dict) -> int:
    ws.cell(row=row, column=1, value=title).font = styles["section_font"]
    return row + 1


def build_sales_report_excel(report: Dict[str, Any]) -> BytesIO:
    """Render a sales/inventory summary as an .xlsx workbook."""
    wb = Workbook()
    ws = wb.active
    ws.title = "Sales Report"
    styles = _create_styles()

    header = report.get("header", {})
    summary = report.get("summary", {})
    inventory = report.get("inventory", {})

    row = 1
    ws.cell(row=row, column=1, value="SALES REPORT").font = styles["title_font"]
    ws.merge_cells(start_row=row, start_column=1, end_row=row, end_column=4)
    row += 2

    info = [
        ("Period:", RANGE_LABELS.get(header.get("range"), header.get("range", "-"))),
        ("From:", (header.get("start") or "-")[:10]),
        ("Generated:", (header.get("generated_at") or "-")[:16].replace("T", " ")),
        ("Total sales:", _format_money(summary.get("total_sales", 0))),
        ("Orders:", summary.get("total_orders", 0)),
        ("Average order:", _format_money(summary.get("average_order_value", 0))),
        ("Cost of goods sold:", _format_money(summary.get("expenses", 0))),
        ("Gross profit:", _format_money(summary.get("total_profit", 0))),
    ]
    for label, value in info:
        ws.cell(row=row, column=1, value=label).font = Font(bold=True)
        ws.cell(row=row, column=2, value=value)
        row += 1
    row += 1

    row = _section(ws, row, "SALES BY DATE", styles)
    _write_header_row(ws, row, ["Date", "Sales"], styles)
    row += 1
    for entry in report.get("sales_by_date", []):
        _write_row(ws, row, [entry["date"], _format_money(entry["sales"])], styles, ["center", "right"])
        row += 1
    _write_row(ws, row, ["TOTAL", _format_money(summary.get("total_sales", 0))], styles, ["center", "right"])
    for col in (1, 2):
        ws.cell(row=row, column=col).font = styles["total_font"]
    row += 2

    top_products = report.get("top_products", [])
    if top_products:
        row = _section(ws, row, "TOP PRODUCTS", styles)
        _write_header_row(ws, row, ["#", "Product", "Quantity sold"], styles)
        row += 1
        for rank, product in enumerate(top_products, start=1):
            _write_row(ws, row, [rank, product["name"], product["quantity"]], styles, ["center", "left", "right"])
            row += 1
        row += 1

    row = _section(ws, row, "INVENTORY", styles)
    _write_header_row(ws, row, ["Item", "Type", "Stock", "Status"], styles)
    row += 1
    for level in inventory.get("stock_levels", []):
        kind = "Product" if level["kind"] == "product" else "Raw material"
        status = "Low" if level["is_low"] else "OK"
        _write_row(
            ws, row, [level["name"], kind, _format_quantity(level["stock"]), status], styles,
            ["left", "center", "right", "center"],
        )
        if level["is_low"]:
            for col in range(1, 5):
                ws.cell(row=row, column=col).fill = styles["low_stock_fill"]
        row += 1
    row += 1
    ws.cell(row=row, column=1, value="Inventory value:").font = Font(bold=True)
    ws.cell(row=row, column=2, value=_format_money(inventory.get("total_value", 0)))
    row += 1
    ws.cell(row=row, column=1, value="Low stock items:").font = Font(bold=True)
    ws.cell(row=row, column=2, value=inventory.get("low_stock_items", 0))

    for col_idx, width in enumerate([28, 18, 16, 12], start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = width

    stream = BytesIO()
    wb.save(stream)
    stream.seek(0)
    return stream
