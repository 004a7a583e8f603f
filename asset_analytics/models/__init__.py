# Asset Analytics: Database Models
# Import all models here for SQLAlchemy discovery

from asset_analytics.models.compliance_report import ComplianceReport  # noqa
