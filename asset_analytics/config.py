# asset_analytics/config.py
"""
Application configuration using Pydantic-Settings.
All settings can be overridden via environment variables or .env file.
"""

from pydantic_settings import BaseSettings
from typing import Optional


class Settings(BaseSettings):
    # ── Dataset ───────────────────────────────────────────────────────────
    DATA_PATH: str = "data/seed.json"

    # ── Report archive ────────────────────────────────────────────────────
    DATABASE_URL: str = "sqlite:///./asset_analytics.db"

    # ── Network ───────────────────────────────────────────────────────────
    BACKEND_HOST: str = "0.0.0.0"
    BACKEND_PORT: int = 8080

    # ── Security ──────────────────────────────────────────────────────────
    API_KEY: Optional[str] = None   # Set in .env to enable auth on API endpoints

    # ── Simulation ────────────────────────────────────────────────────────
    RANDOM_SEED: Optional[int] = None   # Unset = simulated live data, different numbers per request

    # ── Compliance population (fixed demo narrative, not derived) ─────────
    TOTAL_MONITORED_ASSETS: int = 5005
    FULLY_COMPLIANT_ASSETS: int = 2743
    HIGH_RISK_ASSETS: int = 325
    MEDIUM_RISK_ASSETS: int = 770
    COMPLIANCE_SAMPLE_SIZE: int = 200
    NONCOMPLIANT_SHARE: float = 0.45

    # ── Protection ────────────────────────────────────────────────────────
    VIOLATION_CAP: int = 150            # Never synthesize more than ~150 violations
    MAX_VIOLATION_CHANCE: float = 0.03
    ALERT_FROM_VIOLATION_CHANCE: float = 0.6

    # ── Utilization ───────────────────────────────────────────────────────
    UNDERUTILIZED_THRESHOLD: int = 40
    IDLE_THRESHOLD: int = 30
    UTILIZATION_BANDING: bool = True    # Presentation-only bands so every UI filter has results

    # ── Logging ───────────────────────────────────────────────────────────
    LOG_LEVEL: str = "INFO"

    @property
    def NONCOMPLIANT_ASSETS(self) -> int:
        return self.TOTAL_MONITORED_ASSETS - self.FULLY_COMPLIANT_ASSETS

    class Config:
        env_file = ".env"
        extra = "ignore"


settings = Settings()
