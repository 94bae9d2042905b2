from __future__ import annotations
"""Pydantic v2 request / response schemas for the /api/hook endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from hook_workshop.schemas.hook import (
    ClarifierResponse,
    HookCandidate,
    JudgeScores,
    JudgeVerdict,
    UserSelection,
)


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClarifyRequest(_CamelModel):
    """First turn: projectId + seedInput. Later turns: projectId + userSelection."""

    project_id: str = Field(..., min_length=1, max_length=200)
    seed_input: str | None = None
    user_selection: Optional[UserSelection] = None


class ProjectRequest(_CamelModel):
    """Body of /generate and /reroll."""

    project_id: str = Field(..., min_length=1, max_length=200)


class LockEdits(BaseModel):
    premise: str | None = None
    page_turn_trigger: str | None = None


class LockRequest(_CamelModel):
    project_id: str = Field(..., min_length=1, max_length=200)
    edits: LockEdits | None = None


class ClarifyResponse(_CamelModel):
    clarifier: ClarifierResponse
    turn_number: int
    total_turns: int


class JudgeSummary(BaseModel):
    """Judge verdict as returned to callers (``pass`` renamed to ``passed``)."""

    passed: bool
    hard_fail_reasons: list[str]
    scores: JudgeScores
    most_generic_part: str
    one_fix_instruction: str

    @classmethod
    def from_verdict(cls, verdict: JudgeVerdict) -> JudgeSummary:
        return cls(
            passed=verdict.passed,
            hard_fail_reasons=verdict.hard_fail_reasons,
            scores=verdict.scores,
            most_generic_part=verdict.most_generic_part,
            one_fix_instruction=verdict.one_fix_instruction,
        )


class GenerateResponse(_CamelModel):
    hook: HookCandidate
    judge: JudgeSummary
    reroll_count: int


class DeleteResponse(BaseModel):
    deleted: bool = True
