# asset_analytics/routers/reports.py
"""Compliance report archive: generate, list and download (CSV / HTML)."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import HTMLResponse, Response
from sqlalchemy.orm import Session

from asset_analytics.database import get_db
from asset_analytics.schemas.report import ComplianceReportListItem, ComplianceReportOut, ReportFilters
from asset_analytics.services import report_service
from asset_analytics.services.entity_store import get_index
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.services.weighted_sampler import WeightedSampler, get_sampler

router = APIRouter()


def _load_or_404(db: Session, report_id: str) -> ComplianceReportOut:
    report = report_service.load_report(db, report_id)
    if report is None:
        raise HTTPException(status_code=404, detail=f"Report '{report_id}' not found")
    return report


@router.post("/compliance/reports", response_model=ComplianceReportOut, status_code=201,
             summary="Generate and archive a compliance report")
def create_report(filters: Optional[ReportFilters] = None,
                  index: JoinIndex = Depends(get_index),
                  sampler: WeightedSampler = Depends(get_sampler),
                  db: Session = Depends(get_db)):
    """Department / asset-type filters narrow the asset risks; the date range narrows the trend."""
    report = report_service.build_report(index, sampler, filters or ReportFilters())
    row = report_service.archive_report(db, report)
    return report.model_copy(update={"id": row.id})


@router.get("/compliance/reports", response_model=list[ComplianceReportListItem],
            summary="Archived reports, newest first")
def get_reports(limit: int = 50, db: Session = Depends(get_db)):
    return report_service.list_reports(db, limit)


@router.get("/compliance/reports/{report_id}", response_model=ComplianceReportOut)
def get_report(report_id: str, db: Session = Depends(get_db)):
    return _load_or_404(db, report_id)


@router.get("/compliance/reports/{report_id}/csv", summary="Download asset risks as CSV")
def download_report_csv(report_id: str, db: Session = Depends(get_db)):
    report = _load_or_404(db, report_id)
    return Response(
        content=report_service.render_csv(report),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="compliance-report-{report_id}.csv"'},
    )


@router.get("/compliance/reports/{report_id}/html", response_class=HTMLResponse,
            summary="Print-friendly HTML report")
def download_report_html(report_id: str, db: Session = Depends(get_db)):
    return HTMLResponse(report_service.render_html(_load_or_404(db, report_id)))
