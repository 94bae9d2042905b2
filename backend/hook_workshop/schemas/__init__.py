"""Pydantic v2 schemas package."""

from hook_workshop.schemas.hook import (
    ClarifierOption,
    ClarifierResponse,
    CollisionSource,
    CoreEngine,
    CreativeState,
    FreeTextSelection,
    HookCandidate,
    HookPack,
    HookPreferences,
    HookSession,
    HookTurn,
    JudgeScores,
    JudgeVerdict,
    LockedHook,
    OptionSelection,
    SessionStatus,
    SurpriseMeSelection,
    UserSelection,
)
from hook_workshop.schemas.api import (
    ClarifyRequest,
    ClarifyResponse,
    DeleteResponse,
    GenerateResponse,
    JudgeSummary,
    LockEdits,
    LockRequest,
    ProjectRequest,
)

__all__ = [
    "ClarifierOption",
    "ClarifierResponse",
    "CollisionSource",
    "CoreEngine",
    "CreativeState",
    "FreeTextSelection",
    "HookCandidate",
    "HookPack",
    "HookPreferences",
    "HookSession",
    "HookTurn",
    "JudgeScores",
    "JudgeVerdict",
    "LockedHook",
    "OptionSelection",
    "SessionStatus",
    "SurpriseMeSelection",
    "UserSelection",
    "ClarifyRequest",
    "ClarifyResponse",
    "DeleteResponse",
    "GenerateResponse",
    "JudgeSummary",
    "LockEdits",
    "LockRequest",
    "ProjectRequest",
]
