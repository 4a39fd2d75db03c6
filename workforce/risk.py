from __future__ import annotations

from dataclasses import dataclass

from .payroll import clamp_efficiency
from .records import ActivityLevel, Observation, RiskLevel, Sector, WorkingStatus

REQUIRED_PPE: dict[Sector, tuple[str, ...]] = {
    Sector.MINING: ("helmet",),
    Sector.HARDWARE: ("helmet", "vest"),
    Sector.SOFTWARE: (),
}

BASE_EFFICIENCY: dict[ActivityLevel, float] = {
    ActivityLevel.HIGH: 95.0,
    ActivityLevel.MEDIUM: 70.0,
    ActivityLevel.LOW: 30.0,
    ActivityLevel.NOT_PRESENT: 0.0,
}
MISSING_PPE_PENALTY = 30.0
UNSAFE_POSTURE_PENALTY = 20.0
CRITICAL_VIOLATIONS = 2

_STATUS_BY_ACTIVITY = {
    ActivityLevel.HIGH: WorkingStatus.WORKING,
    ActivityLevel.MEDIUM: WorkingStatus.WORKING,
    ActivityLevel.LOW: WorkingStatus.IDLE,
    ActivityLevel.NOT_PRESENT: WorkingStatus.ABSENT,
}


@dataclass(frozen=True)
class Classification:
    activity_level: ActivityLevel
    working_status: WorkingStatus
    missing_ppe: tuple[str, ...]
    violations: int
    efficiency_percentage: float
    risk_level: RiskLevel


def effective_activity(observation: Observation) -> ActivityLevel:
    if not observation.human_detected:
        return ActivityLevel.NOT_PRESENT
    return observation.activity_level


def working_status_for(activity: ActivityLevel) -> WorkingStatus:
    return _STATUS_BY_ACTIVITY[activity]


def missing_ppe(sector: Sector, helmet: bool, vest: bool) -> tuple[str, ...]:
    worn = {"helmet": helmet, "vest": vest}
    return tuple(item for item in REQUIRED_PPE[sector] if not worn[item])


def efficiency_for(activity: ActivityLevel, ppe_missing: bool, unsafe_posture: bool) -> float:
    if activity is ActivityLevel.NOT_PRESENT:
        return 0.0
    score = BASE_EFFICIENCY[activity]
    if ppe_missing:
        score -= MISSING_PPE_PENALTY
    if unsafe_posture:
        score -= UNSAFE_POSTURE_PENALTY
    return clamp_efficiency(score)


def risk_level_for(status: WorkingStatus, violations: int) -> RiskLevel:
    # each missing PPE item and an unsafe posture count as one violation
    if status is WorkingStatus.ABSENT:
        return RiskLevel.NONE
    if violations >= CRITICAL_VIOLATIONS:
        return RiskLevel.CRITICAL
    if violations == 1:
        return RiskLevel.HIGH
    if status is WorkingStatus.IDLE:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


def classify(sector: Sector, observation: Observation) -> Classification:
    activity = effective_activity(observation)
    status = working_status_for(activity)
    if status is WorkingStatus.ABSENT:
        return Classification(activity, status, (), 0, 0.0, RiskLevel.NONE)

    missing = missing_ppe(sector, observation.helmet, observation.vest)
    violations = len(missing) + (1 if observation.unsafe_posture else 0)
    return Classification(
        activity_level=activity,
        working_status=status,
        missing_ppe=missing,
        violations=violations,
        efficiency_percentage=efficiency_for(activity, bool(missing), observation.unsafe_posture),
        risk_level=risk_level_for(status, violations),
    )
