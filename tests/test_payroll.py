"""Hours, tiered rates and efficiency-based salary adjustment."""

import pytest

from workforce.payroll import (
    adjust_salary,
    adjustment_for,
    compute_payroll,
    hourly_rate,
    hours_worked,
    rate_group,
    work_status_for,
)
from workforce.records import AdjustmentType, Sector, WorkStatus


class TestHours:

    def test_decimal_hours(self):
        assert hours_worked("09:00", "17:30") == 8.5

    def test_rounds_to_two_decimals(self):
        assert hours_worked("08:15", "12:35") == 4.33

    def test_same_inputs_same_result(self):
        results = {hours_worked("07:10", "15:55") for _ in range(5)}
        assert results == {8.75}

    def test_seconds_are_ignored(self):
        assert hours_worked("09:00:59", "10:30:00") == 1.5


class TestRates:

    def test_group_for_em023(self):
        assert rate_group(23) == 4

    @pytest.mark.parametrize("number,expected", [(1, 50), (5, 50), (6, 55), (10, 55), (11, 50), (23, 50), (26, 55), (96, 55), (100, 55)])
    def test_mining_rate_boundaries(self, number, expected):
        assert hourly_rate(Sector.MINING, number) == expected

    def test_premium_only_for_odd_groups(self):
        for number in range(1, 101):
            premium = hourly_rate(Sector.SOFTWARE, number) - 60
            assert premium == (5 if rate_group(number) % 2 else 0)

    def test_sector_base_rates(self):
        assert hourly_rate(Sector.MINING, 1) == 50
        assert hourly_rate(Sector.HARDWARE, 1) == 45
        assert hourly_rate(Sector.SOFTWARE, 1) == 60
        assert hourly_rate(Sector.HARDWARE, 6) == 50


class TestAdjustment:

    @pytest.mark.parametrize(
        "efficiency,expected",
        [(100, AdjustmentType.BONUS), (90, AdjustmentType.BONUS), (89.9, AdjustmentType.NORMAL),
         (50, AdjustmentType.NORMAL), (49.9, AdjustmentType.PENALTY), (0, AdjustmentType.PENALTY),
         (150, AdjustmentType.BONUS), (-10, AdjustmentType.PENALTY)],
    )
    def test_tiers(self, efficiency, expected):
        assert adjustment_for(efficiency) is expected

    def test_bonus_penalty_amounts(self):
        assert adjust_salary(425, 92) == pytest.approx(467.5)
        assert adjust_salary(425, 70) == pytest.approx(425)
        assert adjust_salary(425, 30) == pytest.approx(382.5)

    def test_work_status(self):
        assert work_status_for(6.0) is WorkStatus.FULL_DAY
        assert work_status_for(5.99) is WorkStatus.HALF_DAY
        assert work_status_for(9.0, authorized=False) is WorkStatus.DENIED


class TestComputePayroll:

    def test_em023_mining_example(self):
        result = compute_payroll(Sector.MINING, 23, "09:00", "17:30", 92)
        assert result.hours_worked == 8.5
        assert result.rate_group == 4
        assert result.hourly_rate == 50
        assert result.base_salary == pytest.approx(425)
        assert result.final_salary == pytest.approx(467.5)
        assert result.adjustment is AdjustmentType.BONUS
        assert result.work_status is WorkStatus.FULL_DAY

    def test_half_day_penalty(self):
        result = compute_payroll(Sector.HARDWARE, 7, "13:00", "17:00", 40)
        assert result.hourly_rate == 50
        assert result.base_salary == pytest.approx(200)
        assert result.final_salary == pytest.approx(180)
        assert result.work_status is WorkStatus.HALF_DAY

    def test_efficiency_is_clamped(self):
        result = compute_payroll(Sector.SOFTWARE, 1, "09:00", "10:00", 140)
        assert result.efficiency_percentage == 100

    def test_denied_pays_nothing(self):
        result = compute_payroll(Sector.MINING, 23, "09:00", "17:30", 92, authorized=False)
        assert result.base_salary == 0
        assert result.final_salary == 0
        assert result.efficiency_percentage == 0
        assert result.work_status is WorkStatus.DENIED
        assert result.adjustment is AdjustmentType.DENIED
        assert result.hours_worked == 8.5
