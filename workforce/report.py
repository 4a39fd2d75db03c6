from __future__ import annotations

import logging
from io import BytesIO
from typing import Sequence

from .analytics import dashboard_stats, employee_summary, risk_distribution, sector_totals
from .records import RiskLevel, VerificationRecord

logger = logging.getLogger(__name__)


def _rule_based_report(records: Sequence[VerificationRecord]) -> str:
    stats = dashboard_stats(records)
    if stats is None:
        return "# Shift Payroll Report\n\nNo verifications recorded."

    lines = ["# Shift Payroll Report", "", "## Summary"]
    lines.append(f"- Verifications: **{stats['records']}**.")
    lines.append(f"- Total payroll: **${stats['total_salary']:,.2f}**.")
    lines.append(f"- Average efficiency: **{stats['avg_efficiency']:.1f}%**.")
    lines.append(f"- High or critical risk: **{stats['high_risk_count']}**.")
    lines.append(f"- Unauthorized attempts: **{stats['unauthorized_count']}**.")

    lines.extend(["", "## Payroll by sector"])
    for row in sector_totals(records).itertuples(index=False):
        lines.append(f"- {row.name}: ${row.total:,.2f}")

    lines.extend(["", "## Risk distribution"])
    for row in risk_distribution(records).itertuples(index=False):
        lines.append(f"- {row.name}: {row.value}")

    lines.extend(["", "## Employees"])
    for idx, row in enumerate(employee_summary(records).head(10).itertuples(index=False), start=1):
        lines.append(
            f"{idx}. {row.employee_id} ({row.sector}): ${row.final_salary:,.2f} for {row.hours:.2f} h, "
            f"efficiency {row.avg_efficiency:.1f}%"
        )

    flagged = [r for r in records if r.risk_level in (RiskLevel.HIGH, RiskLevel.CRITICAL)]
    lines.extend(["", "## Safety follow-up"])
    if flagged:
        for r in flagged[:10]:
            missing = [item for item, worn in (("helmet", r.helmet), ("vest", r.vest)) if not worn]
            note = f"missing {', '.join(missing)}" if missing else "unsafe behaviour"
            lines.append(f"- {r.employee_id} ({r.sector.value}): {r.risk_level.value} risk, {note}.")
    else:
        lines.append("- No high-risk verifications this session.")
    return "\n".join(lines)


def generate_shift_report(
    records: Sequence[VerificationRecord], provider: str = "none", model: str = ""
) -> str:
    provider = (provider or "none").lower()
    baseline = _rule_based_report(records)
    if provider != "openai" or not records:
        return baseline

    try:
        from openai import OpenAI
    except ImportError:
        return baseline

    prompt = (
        "Rewrite this workforce shift payroll report as a concise supervisor briefing in markdown with "
        "sections: Summary, Payroll, Safety, Recommendations. Keep every figure unchanged.\n\n"
        f"{baseline}"
    )
    try:
        resp = OpenAI().responses.create(model=model or "gpt-4o-mini", input=prompt)
        return resp.output_text
    except Exception as exc:
        logger.warning("Report narrative unavailable, using rule-based report: %s", exc)
        return baseline


def report_to_pdf(markdown: str) -> bytes:
    from reportlab.lib.pagesizes import A4
    from reportlab.pdfgen import canvas

    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    width, height = A4
    y = height - 48
    for line in markdown.splitlines():
        heading = line.startswith("#")
        text = line.lstrip("#").replace("**", "").strip()
        if not text:
            y -= 8
        else:
            pdf.setFont("Helvetica-Bold" if heading else "Helvetica", 13 if heading else 10)
            pdf.drawString(48, y, text[:110])
            y -= 18 if heading else 14
        if y < 48:
            pdf.showPage()
            y = height - 48
    pdf.save()
    return buffer.getvalue()
