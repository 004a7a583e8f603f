# asset_analytics/schemas/report.py
from datetime import date, datetime
from typing import Optional

from asset_analytics.schemas.compliance import ComplianceRiskRecord, ComplianceSummary
from asset_analytics.schemas.entities import CamelModel


class ReportFilters(CamelModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    department_id: Optional[str] = None
    asset_type: Optional[str] = None


class ReportStats(CamelModel):
    total_assets: int
    risk_records: int
    overdue_maintenance: int
    recall_actions: int
    average_risk_score: int


class ComplianceReportOut(CamelModel):
    id: str
    created_at: datetime
    filters: ReportFilters
    summary: ComplianceSummary
    stats: ReportStats
    asset_risks: list[ComplianceRiskRecord]


class ComplianceReportListItem(CamelModel):
    id: str
    created_at: datetime
    asset_count: int
    overall_score: int
    department_id: Optional[str] = None
    asset_type: Optional[str] = None

    class Config:
        from_attributes = True
