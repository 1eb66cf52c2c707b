from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from core.database import get_db
from core.dependencies import get_app_settings
from core.settings import Settings
from modules.auth.dependencies import require_admin
from modules.reports.excel import build_sales_report_excel
from modules.reports.service import ReportRange, ReportService

router = APIRouter(prefix="/reports", tags=["reports"], dependencies=[Depends(require_admin)])


@router.get("/summary")
def report_summary(
    report_range: ReportRange = Query(ReportRange.WEEK, alias="range"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    return ReportService(settings=settings).compute_summary(db, report_range)


@router.get("/summary/excel")
def download_report_excel(
    report_range: ReportRange = Query(ReportRange.WEEK, alias="range"),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    report = ReportService(settings=settings).compute_summary(db, report_range)
    stream = build_sales_report_excel(report)
    filename = f"sales_report_{report_range.value}.xlsx"
    return StreamingResponse(
        stream,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f"attachment; filename={filename}"},
    )
