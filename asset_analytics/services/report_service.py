# asset_analytics/services/report_service.py
"""
ReportAssembler: compliance report snapshots, the SQLAlchemy archive and the
CSV / HTML renderings of an archived snapshot.

A report is the compliance dashboard narrowed by the request filters. The
renderers only lay out the snapshot; every number comes from compliance_service.
"""

import csv
import html
import io
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from asset_analytics.models.compliance_report import ComplianceReport
from asset_analytics.schemas.compliance import ComplianceRiskRecord
from asset_analytics.schemas.report import ComplianceReportOut, ReportFilters, ReportStats
from asset_analytics.services import compliance_service
from asset_analytics.services.alert_service import response_profile
from asset_analytics.services.join_index import JoinIndex
from asset_analytics.services.weighted_sampler import WeightedSampler
from asset_analytics.utils.logger import get_logger
from asset_analytics.utils.numbers import round_half_up

logger = get_logger(__name__)

CSV_HEADER = ["Asset", "Department", "Missed Maintenance", "Overdue Calibration", "Recall", "Risk Score"]

# Compliance tier → alert severity, for the response column of the HTML report
LEVEL_SEVERITY = {"High": "high", "Medium": "medium", "Low": "low"}
LEVEL_COLORS = {"High": "#E74C3C", "Medium": "#F39C12", "Low": "#27AE60"}


# ── Snapshot ────────────────────────────────────────────────────────────────

def _in_range(day: str, start: Optional[date], end: Optional[date]) -> bool:
    value = date.fromisoformat(day)
    if start and value < start:
        return False
    if end and value > end:
        return False
    return True


def build_report(index: JoinIndex, sampler: WeightedSampler, filters: ReportFilters,
                 now: Optional[datetime] = None) -> ComplianceReportOut:
    """Compliance snapshot narrowed by department / asset type; the date range applies to the trend."""
    now = now or datetime.now(timezone.utc)
    dashboard = compliance_service.build_compliance_dashboard(index, sampler, now)

    risks = [
        r for r in dashboard.asset_risks
        if (not filters.department_id or r.department_id == filters.department_id)
        and (not filters.asset_type or r.asset_type == filters.asset_type)
    ]
    summary = dashboard.summary.model_copy(update={
        "noncompliance_trend": [
            p for p in dashboard.summary.noncompliance_trend
            if _in_range(p.date, filters.start_date, filters.end_date)
        ],
        "risk_by_department": [
            d for d in dashboard.summary.risk_by_department
            if not filters.department_id or d.department_id == filters.department_id
        ],
    })

    return ComplianceReportOut(
        id=f"CR-{int(now.timestamp() * 1000)}",
        created_at=now,
        filters=filters,
        summary=summary,
        stats=report_stats(summary.total_assets, risks),
        asset_risks=risks,
    )


def report_stats(total_assets: int, risks: list[ComplianceRiskRecord]) -> ReportStats:
    return ReportStats(
        total_assets=total_assets,
        risk_records=len(risks),
        overdue_maintenance=sum(1 for r in risks if r.missed_maintenance == "Yes"),
        recall_actions=sum(1 for r in risks if r.recall_flag),
        average_risk_score=round_half_up(sum(r.risk_score for r in risks) / len(risks)) if risks else 0,
    )


# ── Archive ─────────────────────────────────────────────────────────────────

def archive_report(db: Session, report: ComplianceReportOut) -> ComplianceReport:
    """Persist the snapshot. Ids are CR-<millis>; a clash within the same millisecond bumps the suffix."""
    report_id = report.id
    millis = int(report_id.removeprefix("CR-"))
    while db.get(ComplianceReport, report_id) is not None:
        millis += 1
        report_id = f"CR-{millis}"
    if report_id != report.id:
        report = report.model_copy(update={"id": report_id})

    row = ComplianceReport(
        id=report.id,
        created_at=report.created_at,
        department_id=report.filters.department_id,
        asset_type=report.filters.asset_type,
        asset_count=len(report.asset_risks),
        overall_score=report.summary.overall_score,
        payload=report.model_dump_json(by_alias=True),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(f"[REPORT] Archived {row.id}: {row.asset_count} asset risks, score={row.overall_score}%")
    return row


def list_reports(db: Session, limit: int = 50) -> list[ComplianceReport]:
    return db.query(ComplianceReport).order_by(ComplianceReport.created_at.desc()).limit(limit).all()


def load_report(db: Session, report_id: str) -> Optional[ComplianceReportOut]:
    row = db.get(ComplianceReport, report_id)
    if row is None:
        return None
    return ComplianceReportOut.model_validate_json(row.payload)


# ── Rendering ───────────────────────────────────────────────────────────────

def csv_row(record: ComplianceRiskRecord) -> dict:
    return {
        "Asset": record.asset_name,
        "Department": record.department_name,
        "Missed Maintenance": record.missed_maintenance,
        "Overdue Calibration": record.overdue_calibration,
        "Recall": "Yes" if record.recall_flag else "No",
        "Risk Score": record.risk_score,
    }


def render_csv(report: ComplianceReportOut) -> str:
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=CSV_HEADER)
    writer.writeheader()
    for record in report.asset_risks:
        writer.writerow(csv_row(record))
    return buf.getvalue()


def parse_csv(text: str) -> list[dict]:
    """Inverse of render_csv: rows keyed by header, Risk Score as int."""
    rows = []
    for row in csv.DictReader(io.StringIO(text)):
        row["Risk Score"] = int(row["Risk Score"])
        rows.append(row)
    return rows


def render_html(report: ComplianceReportOut) -> str:
    """Print-friendly HTML document with inline CSS."""
    summary = report.summary
    esc = html.escape

    risk_rows = ""
    for r in report.asset_risks:
        profile = response_profile(LEVEL_SEVERITY[r.risk_level])
        risk_rows += f"""
        <tr>
            <td>{esc(r.asset_name)}</td>
            <td>{esc(r.department_name)}</td>
            <td style="background:{LEVEL_COLORS[r.risk_level]};color:#fff;text-align:center">{r.risk_level}</td>
            <td style="text-align:center">{r.risk_score}</td>
            <td>{r.missed_maintenance}</td>
            <td>{r.overdue_calibration}</td>
            <td>{"Yes" if r.recall_flag else "No"}</td>
            <td>{profile.urgency.replace("_", " ")}</td>
            <td>{esc(", ".join(r.issues))}</td>
        </tr>"""

    dept_rows = ""
    for d in summary.risk_by_department:
        dept_rows += f"""
        <tr>
            <td>{esc(d.department)}</td>
            <td style="text-align:center">{d.score}%</td>
            <td style="text-align:center">{d.compliant} / {d.total}</td>
            <td style="text-align:center">{d.high}</td>
            <td style="text-align:center">{d.medium}</td>
            <td style="text-align:center">{d.low}</td>
        </tr>"""

    bucket_rows = "".join(
        f"<tr><td>{b.level}</td><td style=\"text-align:center\">{b.count}</td>"
        f"<td style=\"text-align:center\">{b.percentage}%</td></tr>"
        for b in summary.risk_distribution
    )

    filters = report.filters
    scope = ", ".join(
        f"{label}: {esc(str(value))}"
        for label, value in (("Department", filters.department_id), ("Asset type", filters.asset_type),
                             ("From", filters.start_date), ("To", filters.end_date))
        if value
    ) or "All assets"

    return f"""<!DOCTYPE html>
<html><head>
<meta charset="utf-8">
<title>Compliance Report {report.id}</title>
<style>
    body {{ font-family: 'Segoe UI', Arial, sans-serif; margin: 40px; color: #333; }}
    h1 {{ color: #354A5F; margin-bottom: 4px; }}
    .meta {{ color: #666; font-size: 13px; margin-bottom: 24px; }}
    .score {{ display: inline-block; padding: 8px 24px; background: #354A5F;
              color: #fff; font-weight: 700; font-size: 18px; border-radius: 6px; margin: 12px 0; }}
    table {{ border-collapse: collapse; width: 100%; margin: 16px 0; }}
    th {{ background: #354A5F; color: #fff; padding: 10px 12px; text-align: left; }}
    td {{ padding: 8px 12px; border-bottom: 1px solid #e0e0e0; }}
    @media print {{ body {{ margin: 20px; }} }}
</style>
</head><body>
<h1>Compliance Report</h1>
<p class="meta">{report.id} | Generated {report.created_at.strftime('%Y-%m-%d %H:%M UTC')} | {scope}</p>

<div class="score">Overall compliance {summary.overall_score}%</div>
<p>{summary.fully_compliant} of {summary.total_assets} monitored assets fully compliant.
{summary.non_compliant} non-compliant, {summary.overdue_maintenance} with overdue maintenance,
{summary.recall_actions} recall actions. Average risk score {summary.average_risk_score}.</p>

<h2>Risk Distribution</h2>
<table><thead><tr><th>Level</th><th>Assets</th><th>Share</th></tr></thead>
<tbody>{bucket_rows}</tbody></table>

<h2>Risk by Department</h2>
<table><thead><tr><th>Department</th><th>Score</th><th>Compliant</th><th>High</th><th>Medium</th><th>Low</th></tr></thead>
<tbody>{dept_rows}</tbody></table>

<h2>Asset Risks ({report.stats.risk_records})</h2>
<table><thead><tr><th>Asset</th><th>Department</th><th>Level</th><th>Score</th><th>Missed Maintenance</th>
<th>Overdue Calibration</th><th>Recall</th><th>Response</th><th>Issues</th></tr></thead>
<tbody>{risk_rows}</tbody></table>

</body></html>"""
