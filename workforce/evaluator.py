from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field, replace
from typing import Any, Protocol

from .config import CONFIG
from .eligibility import EMPLOYEE_ID_PATTERN, parse_employee_number
from .errors import ExternalServiceFailure
from .frames import decode_jpeg
from .payroll import clamp_efficiency, compute_payroll
from .prompt import RESPONSE_SCHEMA, SYSTEM_PROMPT, build_input_text, build_local_prompt
from .records import (
    ActivityLevel,
    Observation,
    PayrollRequest,
    RiskLevel,
    VerificationRecord,
    WorkingStatus,
    utc_timestamp,
)
from .risk import classify, working_status_for

logger = logging.getLogger(__name__)


class Evaluator(Protocol):
    def evaluate(self, request: PayrollRequest) -> VerificationRecord: ...


def _extract_json_object(raw: str) -> dict[str, Any] | None:
    try:
        parsed = json.loads(raw)
        return parsed if isinstance(parsed, dict) else None
    except json.JSONDecodeError:
        pass
    match = re.search(r"\{.*\}", raw, flags=re.DOTALL)
    if not match:
        return None
    try:
        parsed = json.loads(match.group(0))
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


def parse_record(raw: str | None) -> VerificationRecord:
    """Turn a model reply into a timestamped record, or raise ExternalServiceFailure."""
    parsed = _extract_json_object(raw or "")
    if parsed is None:
        raise ExternalServiceFailure("model reply did not contain a JSON object")
    try:
        record = VerificationRecord.from_dict(parsed, timestamp=utc_timestamp())
    except KeyError as exc:
        raise ExternalServiceFailure(f"model reply is missing field {exc.args[0]!r}") from exc
    except (TypeError, ValueError) as exc:
        raise ExternalServiceFailure(f"model reply is malformed: {exc}") from exc
    return replace(
        record,
        efficiency_percentage=clamp_efficiency(record.efficiency_percentage),
        confidence=max(0.0, min(1.0, record.confidence)),
    )


def reconcile_record(record: VerificationRecord, request: PayrollRequest) -> VerificationRecord:
    """Overwrite the arithmetic fields of a model verdict with the local payroll rules.

    Perceptual fields (presence, PPE, activity, risk, confidence) are kept as judged.
    ``request`` must already have passed eligibility and shift-window validation.
    """
    number = parse_employee_number(request.employee_id)
    activity = record.activity_level if record.human_detected else ActivityLevel.NOT_PRESENT
    status = working_status_for(activity)
    efficiency = 0.0 if status is WorkingStatus.ABSENT else record.efficiency_percentage

    breakdown = compute_payroll(
        request.sector,
        number,
        request.check_in_time,
        request.current_time,
        efficiency,
        authorized=record.authorized,
    )
    return replace(
        record,
        employee_id=request.employee_id,
        sector=request.sector,
        activity_level=activity,
        working_status=status,
        risk_level=RiskLevel.NONE if status is WorkingStatus.ABSENT else record.risk_level,
        efficiency_percentage=breakdown.efficiency_percentage,
        hours_worked=breakdown.hours_worked,
        hourly_rate=breakdown.hourly_rate,
        base_salary=breakdown.base_salary,
        final_salary=breakdown.final_salary,
        work_status=breakdown.work_status,
    )


class OpenAIEvaluator:
    """Hosted vision model behind the OpenAI Responses API with a strict JSON schema."""

    def __init__(self, client: Any = None, model: str | None = None) -> None:
        self._client = client
        self.model = model or CONFIG.openai_model

    @property
    def client(self) -> Any:
        if self._client is None:
            from openai import OpenAI

            self._client = OpenAI(api_key=CONFIG.openai_api_key or None)
        return self._client

    def _content(self, request: PayrollRequest) -> list[dict[str, str]]:
        content = [{"type": "input_text", "text": build_input_text(request.context())}]
        if request.worker_image:
            content.append(
                {"type": "input_image", "image_url": f"data:image/jpeg;base64,{request.worker_image}"}
            )
        return content

    def evaluate(self, request: PayrollRequest) -> VerificationRecord:
        try:
            response = self.client.responses.create(
                model=self.model,
                instructions=SYSTEM_PROMPT,
                input=[{"role": "user", "content": self._content(request)}],
                text={
                    "format": {
                        "type": "json_schema",
                        "name": "verification_record",
                        "schema": RESPONSE_SCHEMA,
                        "strict": True,
                    }
                },
            )
            raw = response.output_text
        except Exception as exc:
            logger.error("Verification call failed for %s: %s", request.employee_id, exc)
            raise ExternalServiceFailure(str(exc)) from exc
        return parse_record(raw)


class LocalVLMEvaluator:
    """Same contract against a locally loaded vision-language model."""

    def evaluate(self, request: PayrollRequest) -> VerificationRecord:
        try:
            from .vlm import vlm_generate

            image = decode_jpeg(request.worker_image) if request.worker_image else None
            raw = vlm_generate(image, build_local_prompt(request.context()))
        except Exception as exc:
            logger.error("Local verification failed for %s: %s", request.employee_id, exc)
            raise ExternalServiceFailure(str(exc)) from exc
        return parse_record(raw)


@dataclass
class RuleBasedEvaluator:
    """Deterministic evaluator fed with a supplied observation instead of pixels.

    Used for manual supervisor inspection when no model is reachable, and in tests.
    """

    observation: Observation = field(default_factory=Observation)
    authorized: bool | None = None
    confidence: float = 1.0
    calls: list[PayrollRequest] = field(default_factory=list)

    def evaluate(self, request: PayrollRequest) -> VerificationRecord:
        self.calls.append(request)
        match = EMPLOYEE_ID_PATTERN.match(request.employee_id)
        number = int(match.group(1)) if match else 1
        authorized = self.authorized
        if authorized is None:
            authorized = match is not None and 1 <= number <= 100
        verdict = classify(request.sector, self.observation)
        payroll = compute_payroll(
            request.sector,
            number,
            request.check_in_time,
            request.current_time,
            verdict.efficiency_percentage,
            authorized=authorized,
        )
        if verdict.missing_ppe:
            note = f"Missing required PPE: {', '.join(verdict.missing_ppe)}."
        else:
            note = "Required PPE present."
        explanation = f"Activity {verdict.activity_level.value}; {note}"
        if self.observation.unsafe_posture:
            explanation += " Unsafe posture reported."
        return VerificationRecord(
            employee_id=request.employee_id,
            sector=request.sector,
            authorized=authorized,
            human_detected=verdict.activity_level is not ActivityLevel.NOT_PRESENT,
            working_status=verdict.working_status,
            activity_level=verdict.activity_level,
            helmet=self.observation.helmet,
            vest=self.observation.vest,
            efficiency_percentage=payroll.efficiency_percentage,
            risk_level=verdict.risk_level,
            hours_worked=payroll.hours_worked,
            hourly_rate=payroll.hourly_rate,
            base_salary=payroll.base_salary,
            final_salary=payroll.final_salary,
            work_status=payroll.work_status,
            confidence=self.confidence,
            explanation=explanation,
            timestamp=utc_timestamp(),
        )


def create_evaluator(provider: str | None = None) -> Evaluator:
    provider = (provider or CONFIG.evaluator_provider or "openai").lower()
    if provider == "openai":
        return OpenAIEvaluator()
    if provider == "local":
        return LocalVLMEvaluator()
    if provider == "offline":
        return RuleBasedEvaluator()
    raise ValueError(f"Unknown evaluator provider: {provider!r} (expected openai, local or offline)")
