"""Model management API — read / update the per-role model selection."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from hook_workshop.api.deps import get_runtime
from hook_workshop.config import HOOK_ROLES, SUPPORTED_MODELS
from hook_workshop.errors import HookErrorCode, error_envelope
from hook_workshop.services.runtime import HookRuntime

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/models")
async def get_models(runtime: HookRuntime = Depends(get_runtime)) -> dict[str, str]:
    """Active model per role."""
    return runtime.model_config.model_dump()


@router.get("/models/supported")
async def list_supported_models() -> dict[str, Any]:
    return {"models": list(SUPPORTED_MODELS), "roles": list(HOOK_ROLES)}


@router.put("/models")
async def update_models(
    partial: dict[str, Any] = Body(...),
    runtime: HookRuntime = Depends(get_runtime),
) -> Any:
    """Update some roles; every supplied value must be in SUPPORTED_MODELS.

    Nothing is applied unless every field is valid.
    """
    for key, value in partial.items():
        if key not in HOOK_ROLES:
            return _invalid(f"Unknown role: {key}")
        if not isinstance(value, str) or value not in SUPPORTED_MODELS:
            return _invalid(f"Invalid model for {key}")

    for key, value in partial.items():
        setattr(runtime.model_config, key, value)
    logger.info("Model selection updated: %s", partial)
    return runtime.model_config.model_dump()


def _invalid(message: str) -> JSONResponse:
    return JSONResponse(status_code=400, content=error_envelope(HookErrorCode.INVALID_INPUT, message))
