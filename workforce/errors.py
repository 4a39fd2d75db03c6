from __future__ import annotations


class VerificationError(Exception):
    """Base for every failure that ends a submission with a message to the supervisor."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DuplicateAccess(VerificationError):
    def __init__(self, employee_id: str) -> None:
        super().__init__(
            f"ACCESS DENIED: Employee {employee_id} has already completed verification. "
            "Multiple shift entries are prohibited."
        )
        self.employee_id = employee_id


class InvalidIdFormat(VerificationError):
    def __init__(self, employee_id: str) -> None:
        super().__init__("INVALID ID: ID must follow the format 'EM###' (e.g., EM001).")
        self.employee_id = employee_id


class OutOfRange(VerificationError):
    def __init__(self, employee_id: str) -> None:
        super().__init__(
            f"UNAUTHORIZED: ID {employee_id} is outside the valid workforce range (EM001-EM100)."
        )
        self.employee_id = employee_id


class InvalidShiftWindow(VerificationError):
    def __init__(self, check_in_time: str, current_time: str, reason: str = "") -> None:
        detail = reason or "current time must be later than check-in time"
        super().__init__(f"INVALID SHIFT: {check_in_time} -> {current_time}: {detail}.")
        self.check_in_time = check_in_time
        self.current_time = current_time


class VerificationInProgress(VerificationError):
    def __init__(self) -> None:
        super().__init__("A verification is already in progress. Wait for it to finish.")


class ExternalServiceFailure(VerificationError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"Supervisor System Error: {detail}")
        self.detail = detail


class UnauthorizedByModel(VerificationError):
    def __init__(self, employee_id: str) -> None:
        super().__init__(
            f"SUPERVISOR ALERT: Identity {employee_id} was rejected by Phoenix AI protocols."
        )
        self.employee_id = employee_id
