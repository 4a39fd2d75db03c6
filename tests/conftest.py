"""Shared fixtures for the workforce verification tests."""

from dataclasses import replace

import pytest

from workforce.records import (
    ActivityLevel,
    PayrollRequest,
    RiskLevel,
    Sector,
    VerificationRecord,
    WorkingStatus,
    WorkStatus,
)
from workforce.state import AppState
from workforce.storage import JsonStore


BASE_RECORD = VerificationRecord(
    employee_id="EM023",
    sector=Sector.MINING,
    authorized=True,
    human_detected=True,
    working_status=WorkingStatus.WORKING,
    activity_level=ActivityLevel.HIGH,
    helmet=True,
    vest=False,
    efficiency_percentage=92.0,
    risk_level=RiskLevel.LOW,
    hours_worked=8.5,
    hourly_rate=50.0,
    base_salary=425.0,
    final_salary=467.5,
    work_status=WorkStatus.FULL_DAY,
    confidence=0.9,
    explanation="Worker drilling with helmet on.",
    timestamp="2026-01-01T09:00:00+00:00",
)


@pytest.fixture
def make_record():
    """Factory for verification records; keyword arguments override the EM023 baseline."""
    def _make(**overrides):
        return replace(BASE_RECORD, **overrides)
    return _make


@pytest.fixture
def make_request():
    def _make(employee_id="EM023", sector=Sector.MINING, check_in="09:00", current="17:30", image=None):
        return PayrollRequest(
            employee_id=employee_id,
            sector=sector,
            check_in_time=check_in,
            current_time=current,
            worker_image=image,
        )
    return _make


@pytest.fixture
def store(tmp_path):
    return JsonStore(tmp_path / "storage.json")


@pytest.fixture
def empty_state():
    return AppState(session_id="test-session")
