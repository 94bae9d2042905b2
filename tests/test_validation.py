"""Tests for structural validation of role payloads."""

import json

from hook_workshop.schemas.hook import ClarifierResponse, HookCandidate, JudgeVerdict
from hook_workshop.services.validation import (
    BUILDER_REQUIRED,
    CLARIFIER_REQUIRED,
    JUDGE_REQUIRED,
    parse_and_validate,
    validate_model,
)
from helpers import builder_payload, clarifier_payload, judge_payload


def test_valid_payload_is_returned_as_dict():
    raw = json.dumps(builder_payload())
    parsed = parse_and_validate(raw, BUILDER_REQUIRED)
    assert parsed["premise"].startswith("A locksmith")


def test_missing_required_field_returns_none():
    payload = builder_payload()
    del payload["page_turn_trigger"]
    assert parse_and_validate(json.dumps(payload), BUILDER_REQUIRED) is None


def test_invalid_json_returns_none():
    assert parse_and_validate("{not json", CLARIFIER_REQUIRED) is None


def test_non_object_json_returns_none():
    assert parse_and_validate("[1, 2, 3]", CLARIFIER_REQUIRED) is None


def test_extra_fields_are_allowed():
    payload = dict(judge_payload(), commentary="extra")
    assert parse_and_validate(json.dumps(payload), JUDGE_REQUIRED) is not None


def test_validate_model_builds_clarifier_response():
    raw = json.dumps(clarifier_payload(state_update={"stakes": "rent"}))
    clarifier = validate_model(raw, CLARIFIER_REQUIRED, ClarifierResponse)
    assert isinstance(clarifier, ClarifierResponse)
    assert clarifier.option_ids() == {"A", "B", "C"}
    assert clarifier.state_update.stakes == "rent"


def test_validate_model_reads_pass_alias():
    raw = json.dumps(judge_payload(passed=False, hard_fail_reasons=["generic"]))
    verdict = validate_model(raw, JUDGE_REQUIRED, JudgeVerdict)
    assert verdict.passed is False
    assert verdict.hard_fail_reasons == ["generic"]


def test_validate_model_rejects_wrong_types():
    payload = builder_payload()
    payload["why_addictive"] = "not a list"
    assert validate_model(json.dumps(payload), BUILDER_REQUIRED, HookCandidate) is None
