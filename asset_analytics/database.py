# asset_analytics/database.py
"""
Report archive database: connection, session management, and table creation.
Uses SQLAlchemy (SQLite by default). The asset dataset itself lives in the
EntityStore; only generated compliance reports are persisted here.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from asset_analytics.config import settings

_connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,          # Auto-reconnect if DB connection drops
    connect_args=_connect_args,
    echo=False,                  # Set True to log all SQL queries (debug only)
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: yields a DB session and closes it after request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind=None):
    """
    Creates all DB tables on startup. Safe to call multiple times.
    Import all models here so SQLAlchemy knows about them.
    """
    from asset_analytics.models.compliance_report import ComplianceReport  # noqa

    Base.metadata.create_all(bind=bind or engine)
