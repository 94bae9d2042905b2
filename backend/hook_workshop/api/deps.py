"""Route dependencies."""

from __future__ import annotations

from fastapi import Request

from hook_workshop.services.hook_service import HookService
from hook_workshop.services.runtime import HookRuntime

MODEL_OVERRIDE_HEADER = "X-Model-Override"


def get_runtime(request: Request) -> HookRuntime:
    return request.app.state.runtime


def get_hook_service(request: Request) -> HookService:
    return get_runtime(request).hook_service


def get_model_override(request: Request) -> str | None:
    """Per-request model id from the X-Model-Override header, if any."""
    value = (request.headers.get(MODEL_OVERRIDE_HEADER) or "").strip()
    return value or None
