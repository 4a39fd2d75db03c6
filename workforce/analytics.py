from __future__ import annotations

from typing import Iterable

import pandas as pd

from .records import RiskLevel, Sector, VerificationRecord

HISTORY_COLUMNS = [
    "timestamp",
    "employee_id",
    "sector",
    "authorized",
    "working_status",
    "activity_level",
    "helmet",
    "vest",
    "efficiency_percentage",
    "risk_level",
    "hours_worked",
    "hourly_rate",
    "base_salary",
    "final_salary",
    "work_status",
    "confidence",
    "explanation",
]

RISK_BUCKETS: list[tuple[str, tuple[RiskLevel, ...]]] = [
    ("Low/None", (RiskLevel.LOW, RiskLevel.NONE)),
    ("Medium", (RiskLevel.MEDIUM,)),
    ("High", (RiskLevel.HIGH,)),
    ("Critical", (RiskLevel.CRITICAL,)),
]


def history_frame(records: Iterable[VerificationRecord]) -> pd.DataFrame:
    rows = [r.to_dict() for r in records]
    return pd.DataFrame(rows, columns=HISTORY_COLUMNS)


def dashboard_stats(records: Iterable[VerificationRecord]) -> dict | None:
    df = history_frame(records)
    if df.empty:
        return None
    high_risk = {RiskLevel.HIGH.value, RiskLevel.CRITICAL.value}
    return {
        "total_salary": float(df["final_salary"].sum()),
        "avg_efficiency": float(df["efficiency_percentage"].fillna(0).mean()),
        "high_risk_count": int(df["risk_level"].isin(high_risk).sum()),
        "unauthorized_count": int((~df["authorized"].astype(bool)).sum()),
        "records": int(len(df)),
    }


def sector_totals(records: Iterable[VerificationRecord]) -> pd.DataFrame:
    df = history_frame(records)
    totals = df.groupby("sector")["final_salary"].sum() if not df.empty else pd.Series(dtype=float)
    sectors = [s.value for s in Sector]
    return pd.DataFrame(
        {"name": sectors, "total": [float(totals.get(s, 0.0)) for s in sectors]}
    )


def risk_distribution(records: Iterable[VerificationRecord]) -> pd.DataFrame:
    df = history_frame(records)
    rows = []
    for name, levels in RISK_BUCKETS:
        values = {level.value for level in levels}
        rows.append({"name": name, "value": int(df["risk_level"].isin(values).sum())})
    return pd.DataFrame(rows)


def employee_summary(records: Iterable[VerificationRecord]) -> pd.DataFrame:
    """Per-employee totals, highest payout first; feeds the shift report."""
    df = history_frame(records)
    if df.empty:
        return pd.DataFrame(columns=["employee_id", "sector", "shifts", "hours", "final_salary", "avg_efficiency"])
    summary = (
        df.groupby(["employee_id", "sector"], as_index=False)
        .agg(
            shifts=("timestamp", "count"),
            hours=("hours_worked", "sum"),
            final_salary=("final_salary", "sum"),
            avg_efficiency=("efficiency_percentage", "mean"),
        )
        .sort_values("final_salary", ascending=False)
        .reset_index(drop=True)
    )
    return summary
