# asset_analytics/models/compliance_report.py
"""
Compliance report archive: one row per generated report snapshot.
Written by report_service.archive_report, read by the reports router.
"""

from sqlalchemy import Column, String, DateTime, Text, Integer
from asset_analytics.database import Base


class ComplianceReport(Base):
    __tablename__ = "compliance_reports"

    id = Column(String(50), primary_key=True)          # CR-<epoch millis>
    created_at = Column(DateTime, nullable=False, index=True)
    department_id = Column(String(100))
    asset_type = Column(String(100))
    asset_count = Column(Integer, default=0, nullable=False)
    overall_score = Column(Integer, default=0, nullable=False)
    payload = Column(Text, nullable=False)              # JSON snapshot (camelCase)

    def __repr__(self):
        return f"<ComplianceReport {self.id} assets={self.asset_count}>"
