from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from datetime import datetime, timezone
from enum import Enum
from typing import Any


class Sector(str, Enum):
    MINING = "Mining"
    HARDWARE = "Hardware"
    SOFTWARE = "Software"


class WorkingStatus(str, Enum):
    WORKING = "working"
    IDLE = "idle"
    ABSENT = "absent"


class ActivityLevel(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    NOT_PRESENT = "not_present"


class RiskLevel(str, Enum):
    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class WorkStatus(str, Enum):
    FULL_DAY = "full_day"
    HALF_DAY = "half_day"
    DENIED = "denied"


class AdjustmentType(str, Enum):
    BONUS = "bonus"
    NORMAL = "normal"
    PENALTY = "penalty"
    DENIED = "denied"


def coerce_enum(enum_cls: type[Enum], value: Any) -> Any:
    """Map loose model output ("Not Present", " HIGH ") onto an enum member."""
    if isinstance(value, enum_cls):
        return value
    text = str(value or "").strip()
    for member in enum_cls:
        if text == member.value:
            return member
    key = text.lower().replace(" ", "_").replace("-", "_")
    for member in enum_cls:
        if key == member.value.lower():
            return member
    raise ValueError(f"{value!r} is not a valid {enum_cls.__name__}")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class PayrollRequest:
    employee_id: str
    sector: Sector
    check_in_time: str
    current_time: str
    worker_image: str | None = None  # base64 JPEG

    def context(self) -> dict[str, str]:
        """The JSON context sent next to the frame; the frame itself travels separately."""
        return {
            "employee_id": self.employee_id,
            "sector": self.sector.value,
            "check_in_time": self.check_in_time,
            "current_time": self.current_time,
        }


@dataclass(frozen=True)
class Observation:
    """Perceptual judgements only the vision model can make."""

    human_detected: bool = True
    activity_level: ActivityLevel = ActivityLevel.HIGH
    helmet: bool = True
    vest: bool = True
    unsafe_posture: bool = False


_ENUM_FIELDS = {
    "sector": Sector,
    "working_status": WorkingStatus,
    "activity_level": ActivityLevel,
    "risk_level": RiskLevel,
    "work_status": WorkStatus,
}
_BOOL_FIELDS = ("authorized", "human_detected", "helmet", "vest")
_FLOAT_FIELDS = (
    "efficiency_percentage",
    "hours_worked",
    "hourly_rate",
    "base_salary",
    "final_salary",
    "confidence",
)


@dataclass(frozen=True)
class VerificationRecord:
    employee_id: str
    sector: Sector
    authorized: bool
    human_detected: bool
    working_status: WorkingStatus
    activity_level: ActivityLevel
    helmet: bool
    vest: bool
    efficiency_percentage: float
    risk_level: RiskLevel
    hours_worked: float
    hourly_rate: float
    base_salary: float
    final_salary: float
    work_status: WorkStatus
    confidence: float
    explanation: str
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        for name in _ENUM_FIELDS:
            data[name] = data[name].value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any], *, timestamp: str | None = None) -> "VerificationRecord":
        """Build a record from JSON-ish data; raises KeyError/ValueError on malformed input."""
        kwargs: dict[str, Any] = {}
        for f in fields(cls):
            if f.name == "timestamp":
                continue
            value = data[f.name]
            if f.name in _ENUM_FIELDS:
                value = coerce_enum(_ENUM_FIELDS[f.name], value)
            elif f.name in _BOOL_FIELDS:
                value = _as_bool(value)
            elif f.name in _FLOAT_FIELDS:
                value = float(value)
            else:
                value = str(value)
            kwargs[f.name] = value
        kwargs["timestamp"] = timestamp if timestamp is not None else str(data.get("timestamp") or "")
        return cls(**kwargs)


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "1", "yes"}
    return bool(value)
