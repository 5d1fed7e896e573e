"""
Tests for JSON recovery, the strict retry and provider failures in the LLM runner.
"""
import pytest

from crosscareers.core.errors import ApiError, BadGateway
from crosscareers.llm.router import get_route_for_feature
from crosscareers.llm.runner import LLMOutputError, LLMRunner, parse_json_response
from conftest import FakeProvider


def test_parse_json_variants():
    assert parse_json_response('{"a": 1}') == {"a": 1}
    assert parse_json_response('```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_json_response('Here you go: [1, 2, 3] enjoy') == [1, 2, 3]
    with pytest.raises(ValueError):
        parse_json_response("no json here")


def test_generate_json_retries_once_with_strict_instruction():
    provider = FakeProvider(["sorry, here it is", '{"ok": true}'])
    runner = LLMRunner(provider=provider)

    assert runner.generate_json("qa_generation", "Give me JSON") == {"ok": True}
    assert len(provider.calls) == 2
    retry_messages = provider.calls[1]
    assert retry_messages[-2] == {"role": "assistant", "content": "sorry, here it is"}
    assert "ONLY valid JSON" in retry_messages[-1]["content"]


def test_generate_json_gives_up_after_retry():
    provider = FakeProvider(["nope", "still nope"])
    runner = LLMRunner(provider=provider)
    with pytest.raises(LLMOutputError) as exc:
        runner.generate_json("qa_generation", "Give me JSON")
    assert exc.value.status_code == 502


def test_validation_failure_triggers_retry():
    def needs_items(data):
        if not data.get("items"):
            raise ValueError("missing items")
        return data["items"]

    provider = FakeProvider(['{"items": []}', '{"items": [1]}'])
    runner = LLMRunner(provider=provider)
    assert runner.generate_json("qa_generation", "x", validate=needs_items) == [1]


def test_provider_exception_is_bad_gateway():
    provider = FakeProvider([RuntimeError("timeout")])
    runner = LLMRunner(provider=provider)
    with pytest.raises(BadGateway):
        runner.generate_text("cover_letter", "Write")


def test_missing_provider_is_unavailable():
    runner = LLMRunner(provider=FakeProvider())
    runner.provider = None
    assert not runner.available
    with pytest.raises(ApiError) as exc:
        runner.generate_text("cover_letter", "Write")
    assert exc.value.status_code == 503


def test_generate_text_uses_feature_route():
    provider = FakeProvider(["  done  "])
    runner = LLMRunner(provider=provider)
    assert runner.generate_text("cover_letter", "Write", system="Be brief") == "done"
    assert provider.calls[0][0] == {"role": "system", "content": "Be brief"}


def test_unknown_feature_falls_back_to_default_route():
    model, temperature, max_tokens = get_route_for_feature("does_not_exist")
    assert model
    assert 0 <= temperature <= 2
