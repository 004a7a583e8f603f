# tests/test_report_service.py
"""Unit tests for report snapshots, the SQLite archive and CSV / HTML rendering."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from datetime import date, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from conftest import make_sampler
from asset_analytics.database import create_tables
from asset_analytics.schemas.report import ReportFilters
from asset_analytics.services import report_service


@pytest.fixture
def db():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    create_tables(bind=engine)
    session = sessionmaker(bind=engine)()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


def make_report(index, now, seed=1, **filters):
    return report_service.build_report(index, make_sampler(seed), ReportFilters(**filters), now)


class TestCsv:
    def test_header(self, index, now):
        text = report_service.render_csv(make_report(index, now))
        assert text.splitlines()[0] == "Asset,Department,Missed Maintenance,Overdue Calibration,Recall,Risk Score"

    def test_round_trip_through_archive(self, db, index, now):
        report = make_report(index, now)
        row = report_service.archive_report(db, report)
        loaded = report_service.load_report(db, row.id)

        rows = report_service.parse_csv(report_service.render_csv(loaded))
        assert rows == [report_service.csv_row(r) for r in report.asset_risks]
        assert [r["Asset"] for r in rows] == [r.asset_name for r in report.asset_risks]

    def test_names_with_commas_survive(self, index, now):
        report = make_report(index, now)
        record = report.asset_risks[0].model_copy(update={"asset_name": 'Pump, "Bay 3"'})
        report = report.model_copy(update={"asset_risks": [record]})
        rows = report_service.parse_csv(report_service.render_csv(report))
        assert rows[0]["Asset"] == 'Pump, "Bay 3"'


class TestArchive:
    def test_list_newest_first(self, db, index, now):
        report_service.archive_report(db, make_report(index, now - timedelta(hours=2)))
        report_service.archive_report(db, make_report(index, now))
        ids = [r.id for r in report_service.list_reports(db)]
        assert ids == [f"CR-{int(now.timestamp() * 1000)}",
                       f"CR-{int((now - timedelta(hours=2)).timestamp() * 1000)}"]

    def test_same_millisecond_gets_next_id(self, db, index, now):
        first = report_service.archive_report(db, make_report(index, now))
        second = report_service.archive_report(db, make_report(index, now))
        assert first.id != second.id
        assert report_service.load_report(db, second.id).id == second.id

    def test_unknown_report(self, db):
        assert report_service.load_report(db, "CR-0") is None

    def test_row_columns(self, db, index, now):
        report = make_report(index, now, department_id="dept-icu")
        row = report_service.archive_report(db, report)
        assert row.department_id == "dept-icu"
        assert row.asset_count == len(report.asset_risks)
        assert row.overall_score == 55


class TestFilters:
    def test_department_filter(self, index, now):
        report = make_report(index, now, department_id="dept-icu")
        assert report.asset_risks
        assert all(r.department_id == "dept-icu" for r in report.asset_risks)
        assert [d.department_id for d in report.summary.risk_by_department] == ["dept-icu"]
        assert report.stats.risk_records == len(report.asset_risks)

    def test_asset_type_filter(self, index, now):
        report = make_report(index, now, asset_type="Ventilator")
        assert {r.asset_type for r in report.asset_risks} == {"Ventilator"}

    def test_date_range_narrows_trend(self, index, now):
        start = (now - timedelta(days=6)).date()
        report = make_report(index, now, start_date=start, end_date=now.date())
        days = [date.fromisoformat(p.date) for p in report.summary.noncompliance_trend]
        assert len(days) == 7
        assert min(days) == start


class TestHtml:
    def test_contains_summary_and_escapes(self, index, now):
        report = make_report(index, now)
        record = report.asset_risks[0].model_copy(update={"asset_name": "Pump <A&B>"})
        report = report.model_copy(update={"asset_risks": [record]})
        html = report_service.render_html(report)
        assert report.id in html
        assert "Overall compliance 55%" in html
        assert "Pump &lt;A&amp;B&gt;" in html
        assert "Pump <A&B>" not in html
