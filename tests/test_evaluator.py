"""Evaluator backends, reply parsing and payroll reconciliation."""

import json
import sys
from types import SimpleNamespace
from unittest.mock import MagicMock

import pytest

from workforce import vlm
from workforce.errors import ExternalServiceFailure
from workforce.evaluator import (
    LocalVLMEvaluator,
    OpenAIEvaluator,
    RuleBasedEvaluator,
    create_evaluator,
    parse_record,
    reconcile_record,
)
from workforce.prompt import RESPONSE_SCHEMA, SYSTEM_PROMPT
from workforce.records import (
    ActivityLevel,
    Observation,
    RiskLevel,
    Sector,
    WorkingStatus,
    WorkStatus,
)


@pytest.fixture
def reply(make_record):
    """A model reply body: a record dict without timestamp."""
    data = make_record().to_dict()
    data.pop("timestamp")
    return data


class TestParseRecord:

    def test_plain_json(self, reply):
        record = parse_record(json.dumps(reply))
        assert record.employee_id == "EM023"
        assert record.sector is Sector.MINING
        assert record.timestamp

    def test_json_wrapped_in_prose(self, reply):
        raw = f"Here is the verdict:\n```json\n{json.dumps(reply)}\n```"
        assert parse_record(raw).final_salary == pytest.approx(467.5)

    def test_loose_enum_spelling(self, reply):
        reply["activity_level"] = "Not Present"
        reply["sector"] = "mining"
        record = parse_record(json.dumps(reply))
        assert record.activity_level is ActivityLevel.NOT_PRESENT
        assert record.sector is Sector.MINING

    def test_scores_are_clamped(self, reply):
        reply["efficiency_percentage"] = 130
        reply["confidence"] = 1.4
        record = parse_record(json.dumps(reply))
        assert record.efficiency_percentage == 100
        assert record.confidence == 1.0

    def test_no_json_is_service_failure(self):
        with pytest.raises(ExternalServiceFailure) as exc:
            parse_record("I cannot help with that.")
        assert exc.value.message.startswith("Supervisor System Error:")

    def test_missing_field_is_named(self, reply):
        reply.pop("risk_level")
        with pytest.raises(ExternalServiceFailure) as exc:
            parse_record(json.dumps(reply))
        assert "risk_level" in exc.value.message

    def test_unknown_enum_is_service_failure(self, reply):
        reply["work_status"] = "overtime"
        with pytest.raises(ExternalServiceFailure):
            parse_record(json.dumps(reply))

    def test_empty_reply(self):
        with pytest.raises(ExternalServiceFailure):
            parse_record(None)


class TestOpenAIEvaluator:

    def test_sends_context_frame_and_schema(self, reply, make_request):
        client = MagicMock()
        client.responses.create.return_value = SimpleNamespace(output_text=json.dumps(reply))
        evaluator = OpenAIEvaluator(client=client, model="test-model")

        record = evaluator.evaluate(make_request(image="QUJD"))

        assert record.employee_id == "EM023"
        kwargs = client.responses.create.call_args.kwargs
        assert kwargs["model"] == "test-model"
        assert kwargs["instructions"] == SYSTEM_PROMPT
        content = kwargs["input"][0]["content"]
        assert content[0]["type"] == "input_text"
        assert '"employee_id": "EM023"' in content[0]["text"]
        assert content[1] == {"type": "input_image", "image_url": "data:image/jpeg;base64,QUJD"}
        fmt = kwargs["text"]["format"]
        assert fmt["strict"] is True
        assert fmt["schema"] is RESPONSE_SCHEMA

    def test_no_frame_sends_text_only(self, reply, make_request):
        client = MagicMock()
        client.responses.create.return_value = SimpleNamespace(output_text=json.dumps(reply))
        OpenAIEvaluator(client=client).evaluate(make_request())
        content = client.responses.create.call_args.kwargs["input"][0]["content"]
        assert len(content) == 1

    def test_transport_error_is_wrapped(self, make_request):
        client = MagicMock()
        client.responses.create.side_effect = ConnectionError("network down")
        with pytest.raises(ExternalServiceFailure) as exc:
            OpenAIEvaluator(client=client).evaluate(make_request())
        assert exc.value.message == "Supervisor System Error: network down"

    def test_schema_requires_every_field_but_timestamp(self):
        assert "timestamp" not in RESPONSE_SCHEMA["required"]
        assert len(RESPONSE_SCHEMA["required"]) == 17


class TestLocalVLMEvaluator:

    def test_uses_local_runtime(self, monkeypatch, reply, make_request):
        seen = {}

        def fake_generate(image, prompt, **kwargs):
            seen["image"] = image
            seen["prompt"] = prompt
            return json.dumps(reply)

        monkeypatch.setattr(vlm, "vlm_generate", fake_generate)
        record = LocalVLMEvaluator().evaluate(make_request())
        assert record.risk_level is RiskLevel.LOW
        assert seen["image"] is None
        assert "INPUT DATA" in seen["prompt"]

    def test_runtime_error_is_wrapped(self, monkeypatch, make_request):
        def broken(image, prompt, **kwargs):
            raise RuntimeError("VLM_DEVICE=cuda but CUDA is not available.")

        monkeypatch.setattr(vlm, "vlm_generate", broken)
        with pytest.raises(ExternalServiceFailure) as exc:
            LocalVLMEvaluator().evaluate(make_request())
        assert "CUDA" in exc.value.message

    def test_model_load_os_error_is_wrapped(self, monkeypatch, make_request):
        def offline(image, prompt, **kwargs):
            raise OSError("Can't load processor for 'HuggingFaceTB/SmolVLM-Instruct'")

        monkeypatch.setattr(vlm, "vlm_generate", offline)
        with pytest.raises(ExternalServiceFailure) as exc:
            LocalVLMEvaluator().evaluate(make_request())
        assert "SmolVLM" in exc.value.message

    def test_missing_local_extra_is_reported(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "torch", None)
        monkeypatch.setitem(sys.modules, "transformers", None)
        monkeypatch.setattr(vlm, "_RUNTIMES", {})
        with pytest.raises(vlm.LocalModelUnavailable, match="'local' extra"):
            vlm.load_vlm("some/model", use_4bit=False)


class TestReconcile:

    def test_arithmetic_is_recomputed(self, make_record, make_request):
        sloppy = make_record(hours_worked=8.0, hourly_rate=55, base_salary=440, final_salary=500, work_status=WorkStatus.HALF_DAY)
        record = reconcile_record(sloppy, make_request())
        assert record.hours_worked == 8.5
        assert record.hourly_rate == 50
        assert record.base_salary == pytest.approx(425)
        assert record.final_salary == pytest.approx(467.5)
        assert record.work_status is WorkStatus.FULL_DAY
        assert record.explanation == sloppy.explanation

    def test_unauthorized_is_zeroed(self, make_record, make_request):
        record = reconcile_record(make_record(authorized=False), make_request())
        assert record.final_salary == 0
        assert record.efficiency_percentage == 0
        assert record.work_status is WorkStatus.DENIED

    def test_no_human_means_absent(self, make_record, make_request):
        record = reconcile_record(make_record(human_detected=False), make_request())
        assert record.working_status is WorkingStatus.ABSENT
        assert record.activity_level is ActivityLevel.NOT_PRESENT
        assert record.efficiency_percentage == 0
        assert record.final_salary == pytest.approx(382.5)

    def test_absent_worker_carries_no_risk(self, make_record, make_request):
        record = reconcile_record(make_record(human_detected=False, risk_level=RiskLevel.HIGH), make_request())
        assert record.working_status is WorkingStatus.ABSENT
        assert record.risk_level is RiskLevel.NONE

    def test_present_worker_keeps_model_risk(self, make_record, make_request):
        record = reconcile_record(make_record(risk_level=RiskLevel.HIGH), make_request())
        assert record.risk_level is RiskLevel.HIGH

    def test_request_identity_wins(self, make_record, make_request):
        record = reconcile_record(make_record(employee_id="EM024", sector=Sector.SOFTWARE), make_request())
        assert record.employee_id == "EM023"
        assert record.sector is Sector.MINING


class TestRuleBasedEvaluator:

    def test_em023_compliant_worker(self, make_request):
        evaluator = RuleBasedEvaluator(Observation(helmet=True))
        record = evaluator.evaluate(make_request())
        assert record.authorized
        assert record.efficiency_percentage == 95
        assert record.final_salary == pytest.approx(467.5)
        assert record.risk_level is RiskLevel.LOW
        assert evaluator.calls == [make_request()]

    def test_forced_rejection(self, make_request):
        record = RuleBasedEvaluator(authorized=False).evaluate(make_request())
        assert not record.authorized
        assert record.work_status is WorkStatus.DENIED
        assert record.final_salary == 0

    def test_explanation_names_missing_ppe(self, make_request):
        obs = Observation(helmet=False, vest=False)
        record = RuleBasedEvaluator(obs).evaluate(make_request(sector=Sector.HARDWARE))
        assert "helmet, vest" in record.explanation
        assert record.risk_level is RiskLevel.CRITICAL


class TestFactory:

    def test_providers(self):
        assert isinstance(create_evaluator("openai"), OpenAIEvaluator)
        assert isinstance(create_evaluator("LOCAL"), LocalVLMEvaluator)
        assert isinstance(create_evaluator("offline"), RuleBasedEvaluator)

    def test_unknown_provider(self):
        with pytest.raises(ValueError):
            create_evaluator("gemini-2")
