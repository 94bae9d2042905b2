"""Tournament selection: parallel builders, parallel judges, one winner.

Both fan-outs are all-or-nothing. A single failed or unparseable member
fails the whole round: sibling calls still in flight are cancelled and
finished sibling results are discarded.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Iterable, Protocol, Sequence

from hook_workshop.errors import HookErrorCode, HookServiceError
from hook_workshop.schemas.hook import CreativeState, HookCandidate, HookSession, JudgeVerdict
from hook_workshop.services.hook_prompts import HookPromptBuilder
from hook_workshop.services.hook_schemas import BUILDER_SCHEMA, JUDGE_SCHEMA
from hook_workshop.services.llm_client import LLMError
from hook_workshop.services.validation import BUILDER_REQUIRED, JUDGE_REQUIRED, validate_model

logger = logging.getLogger(__name__)

TOURNAMENT_TEMPERATURES: tuple[float, ...] = (0.7, 0.9, 1.1)
JUDGE_TEMPERATURE = 0.3


class SupportsCall(Protocol):
    """Anything with the gateway's ``call`` signature."""

    async def call(
        self,
        role: str,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = ...,
        max_tokens: int = ...,
        model_override: str | None = ...,
        json_schema: dict[str, Any] | None = ...,
    ) -> str:
        ...


@dataclass(frozen=True)
class TournamentEntry:
    hook: HookCandidate
    judge: JudgeVerdict


async def _gather_or_cancel(calls: Iterable[Awaitable[str]]) -> list[str]:
    """Run ``calls`` concurrently; on the first failure cancel the rest and re-raise it."""
    tasks = [asyncio.ensure_future(c) for c in calls]
    try:
        return await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


def select_winner(entries: Sequence[TournamentEntry]) -> TournamentEntry:
    """Pick exactly one entry.

    Passing entries compete on mean sub-score (highest wins). If none pass,
    the entry with the fewest hard-fail reasons wins. Earlier entries win
    ties in both modes.
    """
    if not entries:
        raise ValueError("select_winner needs at least one entry")

    passed = [e for e in entries if e.judge.passed]
    if passed:
        best = passed[0]
        for entry in passed[1:]:
            if entry.judge.mean_score() > best.judge.mean_score():
                best = entry
        return best

    best = entries[0]
    for entry in entries[1:]:
        if len(entry.judge.hard_fail_reasons) < len(best.judge.hard_fail_reasons):
            best = entry
    return best


class Tournament:
    """One generate/reroll round against the current session state."""

    def __init__(
        self,
        llm: SupportsCall,
        prompts: HookPromptBuilder,
        temperatures: Sequence[float] = TOURNAMENT_TEMPERATURES,
    ):
        self.llm = llm
        self.prompts = prompts
        self.temperatures = tuple(temperatures)

    async def run(self, session: HookSession, model_override: str | None = None) -> TournamentEntry:
        hooks = await self._build(session, model_override)
        judges = await self._judge(hooks, session.current_state, model_override)

        entries = [TournamentEntry(hook=h, judge=j) for h, j in zip(hooks, judges)]
        winner = select_winner(entries)
        logger.info(
            "[%s] Tournament winner #%d of %d (pass=%s, mean=%.2f, hard_fails=%d)",
            session.project_id,
            entries.index(winner) + 1,
            len(entries),
            winner.judge.passed,
            winner.judge.mean_score(),
            len(winner.judge.hard_fail_reasons),
        )
        return winner

    async def _build(self, session: HookSession, model_override: str | None) -> list[HookCandidate]:
        prompt = self.prompts.builder(session)
        try:
            raw_results = await _gather_or_cancel(
                self.llm.call(
                    "builder",
                    prompt.system,
                    prompt.user,
                    temperature=temperature,
                    model_override=model_override,
                    json_schema=BUILDER_SCHEMA,
                )
                for temperature in self.temperatures
            )
        except LLMError as e:
            logger.error("[%s] Builder fan-out failed: %s", session.project_id, e)
            raise HookServiceError(HookErrorCode.LLM_CALL_FAILED, "Builder tournament failed") from e

        hooks: list[HookCandidate] = []
        for raw in raw_results:
            hook = validate_model(raw, BUILDER_REQUIRED, HookCandidate)
            if hook is None:
                raise HookServiceError(HookErrorCode.LLM_PARSE_ERROR, "Failed to parse builder response")
            hooks.append(hook)
        return hooks

    async def _judge(
        self,
        hooks: list[HookCandidate],
        state: CreativeState,
        model_override: str | None,
    ) -> list[JudgeVerdict]:
        prompts = [self.prompts.judge(hook, state) for hook in hooks]
        try:
            raw_results = await _gather_or_cancel(
                self.llm.call(
                    "judge",
                    p.system,
                    p.user,
                    temperature=JUDGE_TEMPERATURE,
                    model_override=model_override,
                    json_schema=JUDGE_SCHEMA,
                )
                for p in prompts
            )
        except LLMError as e:
            logger.error("Judge fan-out failed: %s", e)
            raise HookServiceError(HookErrorCode.LLM_CALL_FAILED, "Judge evaluation failed") from e

        verdicts: list[JudgeVerdict] = []
        for raw in raw_results:
            verdict = validate_model(raw, JUDGE_REQUIRED, JudgeVerdict)
            if verdict is None:
                raise HookServiceError(HookErrorCode.LLM_PARSE_ERROR, "Failed to parse judge response")
            verdicts.append(verdict)
        return verdicts
