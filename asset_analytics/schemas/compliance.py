# asset_analytics/schemas/compliance.py
from datetime import datetime
from typing import Literal

from pydantic import Field

from asset_analytics.schemas.entities import CamelModel

RiskLevel = Literal["Low", "Medium", "High"]


class DepartmentRisk(CamelModel):
    department_id: str
    department: str
    compliant: int
    total: int
    score: int
    high: int
    medium: int
    low: int


class NoncomplianceTrendPoint(CamelModel):
    date: str
    noncompliant: int
    non_compliance_rate: int


class RiskBucket(CamelModel):
    level: RiskLevel
    count: int
    percentage: int


class ComplianceSummary(CamelModel):
    overall_score: int
    total_assets: int
    fully_compliant: int
    non_compliant: int
    overdue_maintenance: int
    recall_actions: int
    average_risk_score: int
    risk_by_department: list[DepartmentRisk]
    noncompliance_trend: list[NoncomplianceTrendPoint]
    risk_distribution: list[RiskBucket]


class ComplianceRiskRecord(CamelModel):
    asset_id: str
    asset_name: str
    asset_type: str
    department_id: str
    department_name: str
    risk_level: RiskLevel
    risk_score: int = Field(ge=0, le=100)
    issues: list[str]
    missed_maintenance: Literal["Yes", "No"]
    overdue_calibration: Literal["Yes", "No"]
    recall_flag: bool
    last_inspection: datetime
    next_due: datetime


class ComplianceDashboard(CamelModel):
    summary: ComplianceSummary
    asset_risks: list[ComplianceRiskRecord]
