"""Minimal structural acceptance of role payloads.

Presence of top-level keys is the only contract checked here; deeper shape
is the job of schema-constrained decoding in the gateway. Invalid input
returns ``None`` so each caller decides between retrying and failing.
"""

from __future__ import annotations

import json
import logging
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

CLARIFIER_REQUIRED: tuple[str, ...] = (
    "hypothesis_line",
    "question",
    "options",
    "allow_free_text",
    "ready_for_hook",
    "missing_signal",
    "state_update",
)

BUILDER_REQUIRED: tuple[str, ...] = (
    "premise",
    "opening_image",
    "page_1_splash_prompt",
    "page_turn_trigger",
    "why_addictive",
    "collision_sources",
)

JUDGE_REQUIRED: tuple[str, ...] = (
    "pass",
    "hard_fail_reasons",
    "scores",
    "most_generic_part",
    "one_fix_instruction",
)


def parse_and_validate(raw: str, required_fields: tuple[str, ...] | list[str]) -> dict[str, Any] | None:
    """Parse ``raw`` as a JSON object holding every name in ``required_fields``."""
    try:
        parsed = json.loads(raw)
    except (TypeError, json.JSONDecodeError) as e:
        logger.warning("Unparseable LLM payload: %s (raw: %.200s)", e, raw)
        return None

    if not isinstance(parsed, dict):
        logger.warning("LLM payload is not a JSON object: %.200s", raw)
        return None

    missing = [f for f in required_fields if f not in parsed]
    if missing:
        logger.warning("LLM payload missing required fields: %s", ", ".join(missing))
        return None
    return parsed


def validate_model(
    raw: str,
    required_fields: tuple[str, ...] | list[str],
    model: type[ModelT],
) -> ModelT | None:
    """Like :func:`parse_and_validate`, then coerce into ``model``."""
    data = parse_and_validate(raw, required_fields)
    if data is None:
        return None
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.warning("LLM payload rejected by %s: %s", model.__name__, e)
        return None
