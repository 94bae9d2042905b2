from __future__ import annotations
"""Pydantic v2 schemas for the hook session and the LLM role payloads.

Session, turn and selection keys are camelCase on the wire; the LLM payloads
(clarifier / builder / judge) keep the snake_case keys of their JSON schemas.
"""

import enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class SessionStatus(str, enum.Enum):
    """Hook session lifecycle statuses."""

    CLARIFYING = "clarifying"
    GENERATING = "generating"
    REVEALED = "revealed"
    LOCKED = "locked"


# Explicit valid transitions: status -> set of reachable statuses
VALID_TRANSITIONS: dict[SessionStatus, set[SessionStatus]] = {
    SessionStatus.CLARIFYING: {SessionStatus.CLARIFYING, SessionStatus.GENERATING},
    SessionStatus.GENERATING: {SessionStatus.CLARIFYING, SessionStatus.REVEALED},
    SessionStatus.REVEALED: {SessionStatus.GENERATING, SessionStatus.LOCKED},
    SessionStatus.LOCKED: set(),  # terminal state, reset required
}


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Clarifier
# ---------------------------------------------------------------------------

class ClarifierOption(BaseModel):
    id: str = Field(description='"A" | "B" | "C" | "D" | "E"')
    label: str


class CreativeState(BaseModel):
    """Accumulated creative parameters. Also the shape of a partial update."""

    hook_engine: str | None = None
    stakes: str | None = None
    taboo_or_tension: str | None = None
    opening_image_seed: str | None = None
    setting_anchor: str | None = None
    protagonist_role: str | None = None
    antagonist_form: str | None = None
    tone_chips: list[str] | None = None
    bans: list[str] | None = None


STRING_STATE_FIELDS: tuple[str, ...] = (
    "hook_engine",
    "stakes",
    "taboo_or_tension",
    "opening_image_seed",
    "setting_anchor",
    "protagonist_role",
    "antagonist_form",
)
SET_STATE_FIELDS: tuple[str, ...] = ("tone_chips", "bans")


class ClarifierResponse(BaseModel):
    """One clarifier turn: a sharper hypothesis plus exactly one question."""

    hypothesis_line: str
    question: str
    options: list[ClarifierOption]
    allow_free_text: bool
    ready_for_hook: bool
    missing_signal: str
    state_update: CreativeState = Field(default_factory=CreativeState)

    def option_ids(self) -> set[str]:
        return {opt.id for opt in self.options}


# ---------------------------------------------------------------------------
# User selection — tagged variant on "type"
# ---------------------------------------------------------------------------

class OptionSelection(_CamelModel):
    type: Literal["option"] = "option"
    option_id: str
    label: str


class FreeTextSelection(_CamelModel):
    type: Literal["free_text"] = "free_text"
    label: str


class SurpriseMeSelection(_CamelModel):
    type: Literal["surprise_me"] = "surprise_me"
    label: str = "surprise_me"


UserSelection = Annotated[
    Union[OptionSelection, FreeTextSelection, SurpriseMeSelection],
    Field(discriminator="type"),
]


class HookTurn(_CamelModel):
    turn_number: int
    clarifier_response: ClarifierResponse
    user_selection: Optional[UserSelection] = None


# ---------------------------------------------------------------------------
# Builder / Judge
# ---------------------------------------------------------------------------

class CollisionSource(BaseModel):
    source: str
    element_extracted: str


class HookCandidate(BaseModel):
    """Builder output — one competing hook in a tournament round."""

    premise: str
    opening_image: str
    page_1_splash_prompt: str
    page_turn_trigger: str
    why_addictive: list[str]
    collision_sources: list[CollisionSource]


class JudgeScores(BaseModel):
    specificity: float
    drawability: float
    page_turn: float
    mechanism: float
    freshness: float

    def mean(self) -> float:
        return (
            self.specificity + self.drawability + self.page_turn
            + self.mechanism + self.freshness
        ) / 5


class JudgeVerdict(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    passed: bool = Field(alias="pass")
    hard_fail_reasons: list[str] = Field(default_factory=list)
    scores: JudgeScores
    most_generic_part: str
    one_fix_instruction: str

    def mean_score(self) -> float:
        return self.scores.mean()


# ---------------------------------------------------------------------------
# Hook pack — module handoff
# ---------------------------------------------------------------------------

class CoreEngine(BaseModel):
    hook_engine: str = ""
    stakes: str = ""
    taboo_or_tension: str = ""
    protagonist_role: str = ""
    antagonist_form: str = ""
    setting_anchor: str = ""


class LockedHook(BaseModel):
    premise: str
    page1_splash: str
    page_turn_trigger: str
    core_engine: CoreEngine


class HookPreferences(BaseModel):
    tone_chips: list[str] = Field(default_factory=list)
    bans: list[str] = Field(default_factory=list)


class HookPack(BaseModel):
    module: Literal["hook"] = "hook"
    locked: LockedHook
    preferences: HookPreferences
    source_dna: list[CollisionSource] = Field(default_factory=list)
    open_threads: list[str] = Field(default_factory=list)
    state_summary: str = ""


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

class HookSession(_CamelModel):
    """Persisted state of one hook workflow, keyed by project id."""

    project_id: str = Field(frozen=True)
    seed_input: str = Field(frozen=True)
    turns: list[HookTurn] = Field(default_factory=list)
    current_state: CreativeState = Field(default_factory=CreativeState)
    revealed_hook: HookCandidate | None = None
    revealed_judge: JudgeVerdict | None = None
    hook_pack: HookPack | None = None
    reroll_count: int = Field(0, ge=0)
    status: SessionStatus = SessionStatus.CLARIFYING

    def can_transition_to(self, target: SessionStatus) -> bool:
        """Check if the session can move from its current status to target."""
        return target in VALID_TRANSITIONS.get(self.status, set())

    @property
    def last_turn(self) -> HookTurn | None:
        return self.turns[-1] if self.turns else None

    def to_wire(self) -> dict:
        """JSON form: unset top-level fields are omitted, turns keep their nulls."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        data["turns"] = [turn.model_dump(mode="json", by_alias=True) for turn in self.turns]
        return data
