from __future__ import annotations

import json

import pandas as pd
import plotly.express as px

from workforce.analytics import history_frame
from workforce.payroll import adjustment_for
from workforce.records import AdjustmentType, VerificationRecord, WorkStatus

RISK_COLORS = {"Low/None": "#10b981", "Medium": "#f59e0b", "High": "#f97316", "Critical": "#ef4444"}
SECTOR_COLORS = {"Mining": "#6366f1", "Hardware": "#0ea5e9", "Software": "#22c55e"}

_ADJUSTMENT_STYLE = {
    AdjustmentType.BONUS: ("#16a34a", "+10% efficiency bonus"),
    AdjustmentType.NORMAL: ("#64748b", "Standard pay"),
    AdjustmentType.PENALTY: ("#ea580c", "-10% efficiency penalty"),
    AdjustmentType.DENIED: ("#dc2626", "Access denied"),
}


def theme_css(dark_mode: bool) -> str:
    if dark_mode:
        bg, fg, card = "#0f172a", "#e2e8f0", "#1e293b"
    else:
        bg, fg, card = "#f8fafc", "#0f172a", "#ffffff"
    return f"""<style>
.stApp {{ background: {bg}; color: {fg}; }}
.stApp h1, .stApp h2, .stApp h3, .stApp label, .stApp p {{ color: {fg}; }}
div[data-testid="stMetric"] {{ background: {card}; border-radius: 12px; padding: 12px 16px; }}
</style>"""


def adjustment_of(record: VerificationRecord) -> AdjustmentType:
    if not record.authorized or record.work_status is WorkStatus.DENIED:
        return AdjustmentType.DENIED
    return adjustment_for(record.efficiency_percentage)


def verdict_badge_html(record: VerificationRecord) -> str:
    bg, label = _ADJUSTMENT_STYLE[adjustment_of(record)]
    return (
        f'<div style="background:{bg};color:#fff;padding:8px 16px;'
        f'border-radius:8px;font-size:18px;font-weight:700;'
        f'text-align:center;margin:4px 0 8px">'
        f"{record.employee_id} · {record.work_status.value.replace('_', ' ').upper()} · {label}</div>"
    )


def result_table(record: VerificationRecord) -> pd.DataFrame:
    return pd.DataFrame({
        "Metric": [
            "Sector",
            "Human detected",
            "Activity",
            "Working status",
            "Helmet / Vest",
            "Risk level",
            "Efficiency",
            "Hours worked",
            "Hourly rate",
            "Base salary",
            "Final salary",
            "Confidence",
        ],
        "Value": [
            record.sector.value,
            "yes" if record.human_detected else "no",
            record.activity_level.value.replace("_", " "),
            record.working_status.value,
            f"{'✓' if record.helmet else '✗'} / {'✓' if record.vest else '✗'}",
            record.risk_level.value,
            f"{record.efficiency_percentage:.0f}%",
            f"{record.hours_worked:.2f}",
            f"${record.hourly_rate:.2f}",
            f"${record.base_salary:,.2f}",
            f"${record.final_salary:,.2f}",
            f"{record.confidence * 100:.0f}%",
        ],
    })


def history_table(records: list[VerificationRecord]) -> pd.DataFrame:
    df = history_frame(records)
    cols = ["timestamp", "employee_id", "sector", "authorized", "risk_level", "efficiency_percentage", "hours_worked", "final_salary", "work_status"]
    return df[cols]


def sector_chart(totals: pd.DataFrame):
    fig = px.bar(totals, x="name", y="total", color="name", color_discrete_map=SECTOR_COLORS, title="Payroll by sector")
    fig.update_layout(height=300, showlegend=False, margin=dict(l=10, r=10, t=40, b=10))
    return fig


def risk_chart(distribution: pd.DataFrame):
    data = distribution[distribution["value"] > 0]
    if data.empty:
        return None
    fig = px.pie(data, names="name", values="value", hole=0.5, color="name", color_discrete_map=RISK_COLORS, title="Risk distribution")
    fig.update_layout(height=300, margin=dict(l=10, r=10, t=40, b=10))
    return fig


def history_key(records) -> str:
    """Stable, hashable form of the history for st.cache_data."""
    return json.dumps([r.to_dict() for r in records], sort_keys=True)


def records_from_key(key: str) -> list[VerificationRecord]:
    return [VerificationRecord.from_dict(item) for item in json.loads(key)]
