# asset_analytics/schemas/trend.py
from typing import Literal

from asset_analytics.schemas.entities import CamelModel


class VisibilityPoint(CamelModel):
    date: str
    scanned: int
    not_scanned: int
    period: str


class VisibilityTrend(CamelModel):
    range: Literal["day", "week", "month"]
    total_assets: int
    trend: list[VisibilityPoint]


class AccuracyPoint(CamelModel):
    month: str
    accuracy: int
    predictions_count: int


class AccuracySummary(CamelModel):
    avg_accuracy: int
    total_predictions: int
    trend: Literal["improving", "declining", "stable"]


class AccuracyTrend(CamelModel):
    trend: list[AccuracyPoint]
    summary: AccuracySummary
