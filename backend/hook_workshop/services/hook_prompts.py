"""Role prompt assembly: session context substituted into the hook templates."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

from hook_workshop.prompts.manager import PromptManager
from hook_workshop.schemas.hook import (
    CreativeState,
    FreeTextSelection,
    HookCandidate,
    HookSession,
    HookTurn,
    OptionSelection,
    SurpriseMeSelection,
)

PRIOR_TURNS_WORD_LIMIT = 300


@dataclass(frozen=True)
class RolePrompt:
    system: str
    user: str


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def state_snapshot(state: CreativeState) -> str:
    """Compact JSON of the creative state with unset fields omitted."""
    return _dumps(state.model_dump(exclude_none=True))


def format_turn(turn: HookTurn) -> str:
    q = f'Q{turn.turn_number}: "{turn.clarifier_response.question}"'
    selection = turn.user_selection
    if selection is None:
        return f"{q} → User pending selection."
    if isinstance(selection, OptionSelection):
        return f'{q} → User chose [{selection.option_id}]: "{selection.label}"'
    if isinstance(selection, SurpriseMeSelection):
        return f"{q} → User chose: (surprise me)"
    if isinstance(selection, FreeTextSelection):
        return f'{q} → User typed: "{selection.label}"'
    raise TypeError(f"Unknown selection type: {type(selection).__name__}")


def format_prior_turns(turns: list[HookTurn], word_limit: int = PRIOR_TURNS_WORD_LIMIT) -> str:
    """Render turns oldest-first, stopping before the word count passes ``word_limit``.

    Turns past the limit are dropped from the prompt only; stored history
    is untouched.
    """
    out: list[str] = []
    word_count = 0
    for turn in turns:
        line = format_turn(turn)
        words = len(line.split())
        if word_count + words > word_limit:
            break
        word_count += words
        out.append(line)
    return "\n".join(out)


class HookPromptBuilder:
    """Builds system + user prompts for each hook role from session state."""

    def __init__(self, style: str = "default"):
        self.style = style

    def _render(self, name: str, **values: str) -> str:
        return PromptManager.render(name, self.style, **values)

    def clarifier(self, session: HookSession) -> RolePrompt:
        state = session.current_state
        return RolePrompt(
            system=self._render("hook_clarifier_system"),
            user=self._render(
                "hook_clarifier_user",
                USER_SEED=session.seed_input,
                PRIOR_TURNS=format_prior_turns(session.turns),
                CURRENT_STATE_JSON=state_snapshot(state),
                BAN_LIST=_dumps(state.bans or []),
            ),
        )

    def builder(self, session: HookSession) -> RolePrompt:
        state = session.current_state
        return RolePrompt(
            system=self._render("hook_builder_system"),
            user=self._render(
                "hook_builder_user",
                USER_SEED=session.seed_input,
                PRIOR_TURNS=format_prior_turns(session.turns),
                CURRENT_STATE_JSON=state_snapshot(state),
                BAN_LIST=_dumps(state.bans or []),
                TONE_CHIPS=_dumps(state.tone_chips or []),
            ),
        )

    def judge(self, candidate: HookCandidate, state: CreativeState) -> RolePrompt:
        return RolePrompt(
            system=self._render("hook_judge_system"),
            user=self._render(
                "hook_judge_user",
                CANDIDATE_JSON=_dumps(candidate.model_dump()),
                CURRENT_STATE_JSON=state_snapshot(state),
            ),
        )

    def summary(self, session: HookSession) -> RolePrompt:
        hook = session.revealed_hook.model_dump() if session.revealed_hook else {}
        return RolePrompt(
            system=self._render("hook_summary_system"),
            user=self._render(
                "hook_summary_user",
                USER_SEED=session.seed_input,
                PRIOR_TURNS=format_prior_turns(session.turns),
                CURRENT_STATE_JSON=state_snapshot(session.current_state),
                HOOK_JSON=_dumps(hook),
            ),
        )
