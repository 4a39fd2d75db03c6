from __future__ import annotations

import argparse
import json
import logging
from dataclasses import dataclass
from pathlib import Path

from .config import CONFIG
from .eligibility import validate_employee_id, validate_shift_window
from .errors import UnauthorizedByModel, VerificationError, VerificationInProgress
from .evaluator import Evaluator, create_evaluator, reconcile_record
from .frames import frame_to_base64
from .logging_setup import configure_logging
from .records import PayrollRequest, Sector, VerificationRecord, coerce_enum
from .state import AppState, append_record, load_state, save_state, set_busy, with_error, with_result
from .storage import JsonStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Submission:
    state: AppState
    record: VerificationRecord | None = None
    error: VerificationError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def message(self) -> str | None:
        return self.error.message if self.error else None


def _evaluate(
    state: AppState, request: PayrollRequest, evaluator: Evaluator, reconcile: bool
) -> VerificationRecord:
    validate_employee_id(request.employee_id, state.history)
    validate_shift_window(request.check_in_time, request.current_time)
    logger.info("Evaluating %s (%s), frame=%s", request.employee_id, request.sector.value, bool(request.worker_image))
    record = evaluator.evaluate(request)
    if reconcile:
        record = reconcile_record(record, request)
    return record


def submit(
    state: AppState,
    request: PayrollRequest,
    evaluator: Evaluator,
    store: JsonStore | None = None,
    *,
    reconcile: bool | None = None,
) -> Submission:
    """Run one verification and return the next state.

    Rejected ids and service failures leave the history untouched. A verdict
    with ``authorized=false`` is still recorded, alongside the alert.
    """
    if state.busy:
        error = VerificationInProgress()
        return Submission(with_error(state, error.message), None, error)

    reconcile = CONFIG.reconcile_payroll if reconcile is None else reconcile
    state = set_busy(with_result(state, None), True)

    record: VerificationRecord | None = None
    error: VerificationError | None = None
    try:
        record = _evaluate(state, request, evaluator, reconcile)
        if not record.authorized:
            error = UnauthorizedByModel(request.employee_id)
    except VerificationError as exc:
        error = exc

    if error is not None:
        logger.warning("Verification for %s: %s", request.employee_id, error.message)
    if record is not None:
        state = append_record(state, record)
        logger.info(
            "Recorded %s: %s, risk=%s, final_salary=%.2f",
            record.employee_id,
            record.work_status.value,
            record.risk_level.value,
            record.final_salary,
        )

    state = set_busy(with_result(state, record, error.message if error else None), False)
    if store is not None and record is not None:
        save_state(store, state)
    return Submission(state, record, error)


def main() -> None:
    parser = argparse.ArgumentParser(description="Verify one worker shift and record the payroll verdict")
    parser.add_argument("--employee-id", required=True)
    parser.add_argument("--sector", required=True, choices=[s.value for s in Sector])
    parser.add_argument("--check-in", default=CONFIG.default_check_in)
    parser.add_argument("--current", default=CONFIG.default_current_time)
    parser.add_argument("--image", type=Path, default=None, help="Camera frame (JPEG or PNG).")
    parser.add_argument(
        "--provider",
        default=CONFIG.evaluator_provider,
        choices=["openai", "local", "offline"],
    )
    parser.add_argument("--store", type=Path, default=CONFIG.store_path)
    args = parser.parse_args()

    configure_logging(CONFIG.log_level)
    store = JsonStore(args.store)
    state = load_state(store)
    request = PayrollRequest(
        employee_id=args.employee_id.strip().upper(),
        sector=coerce_enum(Sector, args.sector),
        check_in_time=args.check_in,
        current_time=args.current,
        worker_image=frame_to_base64(args.image.read_bytes()) if args.image else None,
    )
    result = submit(state, request, create_evaluator(args.provider), store)
    if result.record is not None:
        print(json.dumps(result.record.to_dict(), indent=2))
    if not result.ok:
        raise SystemExit(result.message)


if __name__ == "__main__":
    main()
