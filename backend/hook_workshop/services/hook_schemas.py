"""JSON schemas sent with schema-constrained LLM calls.

They mirror the pydantic models in ``hook_workshop.schemas.hook``. Strict
structured output wants every property listed as required, so the clarifier
``state_update`` requires all fields and uses "" / [] for "not learned yet";
the merge rules treat those as no-ops.
"""

from __future__ import annotations

from typing import Any

_STATE_STRING_FIELDS = (
    "hook_engine",
    "stakes",
    "taboo_or_tension",
    "opening_image_seed",
    "setting_anchor",
    "protagonist_role",
    "antagonist_form",
)

_STATE_UPDATE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        **{name: {"type": "string"} for name in _STATE_STRING_FIELDS},
        "tone_chips": {"type": "array", "items": {"type": "string"}},
        "bans": {"type": "array", "items": {"type": "string"}},
    },
    "required": [*_STATE_STRING_FIELDS, "tone_chips", "bans"],
    "additionalProperties": False,
}

CLARIFIER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "hypothesis_line": {"type": "string"},
        "question": {"type": "string"},
        "options": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "id": {"type": "string"},
                    "label": {"type": "string"},
                },
                "required": ["id", "label"],
                "additionalProperties": False,
            },
            "minItems": 2,
            "maxItems": 5,
        },
        "allow_free_text": {"type": "boolean"},
        "ready_for_hook": {"type": "boolean"},
        "missing_signal": {"type": "string"},
        "state_update": _STATE_UPDATE_SCHEMA,
    },
    "required": [
        "hypothesis_line", "question", "options",
        "allow_free_text", "ready_for_hook", "missing_signal", "state_update",
    ],
    "additionalProperties": False,
}

BUILDER_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "premise": {"type": "string"},
        "opening_image": {"type": "string"},
        "page_1_splash_prompt": {"type": "string"},
        "page_turn_trigger": {"type": "string"},
        "why_addictive": {
            "type": "array",
            "items": {"type": "string"},
            "minItems": 3,
            "maxItems": 3,
        },
        "collision_sources": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "source": {"type": "string"},
                    "element_extracted": {"type": "string"},
                },
                "required": ["source", "element_extracted"],
                "additionalProperties": False,
            },
            "minItems": 3,
            "maxItems": 5,
        },
    },
    "required": [
        "premise", "opening_image", "page_1_splash_prompt",
        "page_turn_trigger", "why_addictive", "collision_sources",
    ],
    "additionalProperties": False,
}

_SCORE_FIELDS = ("specificity", "drawability", "page_turn", "mechanism", "freshness")

JUDGE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "pass": {"type": "boolean"},
        "hard_fail_reasons": {"type": "array", "items": {"type": "string"}},
        "scores": {
            "type": "object",
            "properties": {
                name: {"type": "number", "minimum": 0, "maximum": 10}
                for name in _SCORE_FIELDS
            },
            "required": list(_SCORE_FIELDS),
            "additionalProperties": False,
        },
        "most_generic_part": {"type": "string"},
        "one_fix_instruction": {"type": "string"},
    },
    "required": ["pass", "hard_fail_reasons", "scores", "most_generic_part", "one_fix_instruction"],
    "additionalProperties": False,
}
