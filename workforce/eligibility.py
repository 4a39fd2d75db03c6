from __future__ import annotations

import re
from typing import Iterable

from .errors import DuplicateAccess, InvalidIdFormat, InvalidShiftWindow, OutOfRange
from .payroll import parse_clock
from .records import VerificationRecord

EMPLOYEE_ID_PATTERN = re.compile(r"^EM(\d+)$")
MIN_EMPLOYEE_NUMBER = 1
MAX_EMPLOYEE_NUMBER = 100


def has_authorized_record(employee_id: str, history: Iterable[VerificationRecord]) -> bool:
    return any(r.employee_id == employee_id and r.authorized for r in history)


def parse_employee_number(employee_id: str) -> int:
    match = EMPLOYEE_ID_PATTERN.match(employee_id)
    if not match:
        raise InvalidIdFormat(employee_id)
    return int(match.group(1))


def validate_employee_id(employee_id: str, history: Iterable[VerificationRecord]) -> int:
    """Return the numeric part of ``employee_id`` or raise the first rule it breaks.

    Order matters: a repeat visit is reported as such even if the id would
    otherwise be malformed.
    """
    if has_authorized_record(employee_id, history):
        raise DuplicateAccess(employee_id)
    number = parse_employee_number(employee_id)
    if not MIN_EMPLOYEE_NUMBER <= number <= MAX_EMPLOYEE_NUMBER:
        raise OutOfRange(employee_id)
    return number


def validate_shift_window(check_in_time: str, current_time: str) -> None:
    try:
        start = parse_clock(check_in_time)
        end = parse_clock(current_time)
    except ValueError as exc:
        raise InvalidShiftWindow(check_in_time, current_time, str(exc)) from exc
    if end <= start:
        raise InvalidShiftWindow(check_in_time, current_time)
