"""Fold a clarifier's partial state update into the accumulated creative state."""

from __future__ import annotations

from hook_workshop.schemas.hook import (
    SET_STATE_FIELDS,
    STRING_STATE_FIELDS,
    CreativeState,
)


def merge_state_update(current: CreativeState, update: CreativeState | None) -> CreativeState:
    """Return a new state; neither argument is modified.

    String fields take the incoming value only when it is non-blank.
    List fields are unioned with duplicates dropped, so they never shrink.
    """
    merged = current.model_dump()
    if update is None:
        return CreativeState(**merged)

    for key in STRING_STATE_FIELDS:
        value = getattr(update, key)
        if isinstance(value, str) and value.strip():
            merged[key] = value

    for key in SET_STATE_FIELDS:
        incoming = getattr(update, key)
        if incoming is None:
            continue
        merged[key] = _union(merged.get(key) or [], incoming)

    return CreativeState(**merged)


def _union(existing: list[str], incoming: list[str]) -> list[str]:
    # dict keeps first-seen order
    return list(dict.fromkeys([*existing, *incoming]))
