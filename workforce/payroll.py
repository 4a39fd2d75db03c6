from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from .records import AdjustmentType, Sector, WorkStatus

BASE_RATES: dict[Sector, float] = {
    Sector.MINING: 50.0,
    Sector.HARDWARE: 45.0,
    Sector.SOFTWARE: 60.0,
}
ODD_GROUP_PREMIUM = 5.0
GROUP_SIZE = 5

BONUS_THRESHOLD = 90.0
PENALTY_THRESHOLD = 50.0
BONUS_MULTIPLIER = 1.10
PENALTY_MULTIPLIER = 0.90

FULL_DAY_HOURS = 6.0


@dataclass(frozen=True)
class PayrollBreakdown:
    hours_worked: float
    rate_group: int
    hourly_rate: float
    base_salary: float
    efficiency_percentage: float
    adjustment: AdjustmentType
    final_salary: float
    work_status: WorkStatus


def parse_clock(value: str) -> datetime:
    """Parse a time of day such as ``09:00``; seconds are accepted and ignored."""
    text = str(value).strip()
    for fmt in ("%H:%M", "%H:%M:%S"):
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return parsed.replace(second=0)
    raise ValueError(f"Unrecognised time of day: {value!r}")


def hours_worked(check_in_time: str, current_time: str) -> float:
    delta = parse_clock(current_time) - parse_clock(check_in_time)
    return round(delta.total_seconds() / 3600.0, 2)


def rate_group(employee_number: int) -> int:
    return (employee_number - 1) // GROUP_SIZE


def hourly_rate(sector: Sector, employee_number: int) -> float:
    base = BASE_RATES[sector]
    if rate_group(employee_number) % 2 == 1:
        return base + ODD_GROUP_PREMIUM
    return base


def clamp_efficiency(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def adjustment_for(efficiency: float) -> AdjustmentType:
    efficiency = clamp_efficiency(efficiency)
    if efficiency >= BONUS_THRESHOLD:
        return AdjustmentType.BONUS
    if efficiency >= PENALTY_THRESHOLD:
        return AdjustmentType.NORMAL
    return AdjustmentType.PENALTY


_MULTIPLIERS = {
    AdjustmentType.BONUS: BONUS_MULTIPLIER,
    AdjustmentType.NORMAL: 1.0,
    AdjustmentType.PENALTY: PENALTY_MULTIPLIER,
    AdjustmentType.DENIED: 0.0,
}


def adjust_salary(base_salary: float, efficiency: float) -> float:
    return round(base_salary * _MULTIPLIERS[adjustment_for(efficiency)], 2)


def work_status_for(hours: float, *, authorized: bool = True) -> WorkStatus:
    if not authorized:
        return WorkStatus.DENIED
    return WorkStatus.FULL_DAY if hours >= FULL_DAY_HOURS else WorkStatus.HALF_DAY


def compute_payroll(
    sector: Sector,
    employee_number: int,
    check_in_time: str,
    current_time: str,
    efficiency: float,
    *,
    authorized: bool = True,
) -> PayrollBreakdown:
    """Hours, tiered rate and efficiency adjustment for one shift.

    A denied shift keeps its hours and rate for the audit trail but pays nothing
    and carries zero efficiency.
    """
    hours = hours_worked(check_in_time, current_time)
    rate = hourly_rate(sector, employee_number)
    group = rate_group(employee_number)
    if not authorized:
        return PayrollBreakdown(
            hours_worked=hours,
            rate_group=group,
            hourly_rate=rate,
            base_salary=0.0,
            efficiency_percentage=0.0,
            adjustment=AdjustmentType.DENIED,
            final_salary=0.0,
            work_status=WorkStatus.DENIED,
        )

    efficiency = clamp_efficiency(efficiency)
    base = round(hours * rate, 2)
    return PayrollBreakdown(
        hours_worked=hours,
        rate_group=group,
        hourly_rate=rate,
        base_salary=base,
        efficiency_percentage=efficiency,
        adjustment=adjustment_for(efficiency),
        final_salary=adjust_salary(base, efficiency),
        work_status=work_status_for(hours),
    )
