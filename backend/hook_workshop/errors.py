"""Error taxonomy shared by the session layer and the HTTP boundary."""

from __future__ import annotations

import enum


class HookErrorCode(str, enum.Enum):
    FEATURE_DISABLED = "FEATURE_DISABLED"
    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    LLM_PARSE_ERROR = "LLM_PARSE_ERROR"
    LLM_CALL_FAILED = "LLM_CALL_FAILED"


_STATUS_BY_CODE: dict[HookErrorCode, int] = {
    HookErrorCode.FEATURE_DISABLED: 404,
    HookErrorCode.NOT_FOUND: 404,
    HookErrorCode.INVALID_INPUT: 400,
    HookErrorCode.LLM_PARSE_ERROR: 502,
    HookErrorCode.LLM_CALL_FAILED: 502,
}


class HookServiceError(Exception):
    """Raised by every session action; carries a code for the error envelope."""

    def __init__(self, code: HookErrorCode, message: str):
        super().__init__(message)
        self.code = HookErrorCode(code)
        self.message = message

    @property
    def status_code(self) -> int:
        return _STATUS_BY_CODE.get(self.code, 500)

    def to_envelope(self) -> dict:
        return error_envelope(self.code, self.message)


def error_envelope(code: HookErrorCode | str, message: str) -> dict:
    """Uniform error body: {"error": true, "code": ..., "message": ...}."""
    return {"error": True, "code": HookErrorCode(code).value, "message": message}
