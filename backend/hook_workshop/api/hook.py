from __future__ import annotations
"""Hook workshop endpoints.

POST   /api/hook/clarify
POST   /api/hook/generate
POST   /api/hook/reroll
POST   /api/hook/lock
GET    /api/hook/{project_id}
DELETE /api/hook/{project_id}

Errors use the uniform envelope {"error": true, "code", "message"}; see
``hook_workshop.main`` for the exception handlers.
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from hook_workshop.api.deps import get_hook_service, get_model_override
from hook_workshop.errors import HookErrorCode, error_envelope
from hook_workshop.schemas.api import (
    ClarifyRequest,
    ClarifyResponse,
    DeleteResponse,
    GenerateResponse,
    LockRequest,
    ProjectRequest,
)
from hook_workshop.schemas.hook import HookPack
from hook_workshop.services.hook_service import HookService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/clarify", response_model=ClarifyResponse)
async def clarify(
    req: ClarifyRequest,
    service: HookService = Depends(get_hook_service),
    model_override: str | None = Depends(get_model_override),
) -> ClarifyResponse:
    """Run one clarifier turn (creates the session on the first call)."""
    return await service.run_clarifier_turn(
        req.project_id, req.seed_input, req.user_selection, model_override,
    )


@router.post("/generate", response_model=GenerateResponse)
async def generate(
    req: ProjectRequest,
    service: HookService = Depends(get_hook_service),
    model_override: str | None = Depends(get_model_override),
) -> GenerateResponse:
    """Run a fresh tournament and reveal the winning hook."""
    return await service.run_tournament(req.project_id, model_override)


@router.post("/reroll", response_model=GenerateResponse)
async def reroll(
    req: ProjectRequest,
    service: HookService = Depends(get_hook_service),
    model_override: str | None = Depends(get_model_override),
) -> GenerateResponse:
    """Run another tournament on a revealed session."""
    return await service.reroll(req.project_id, model_override)


@router.post("/lock", response_model=HookPack)
async def lock(
    req: LockRequest,
    service: HookService = Depends(get_hook_service),
    model_override: str | None = Depends(get_model_override),
) -> HookPack:
    """Lock the revealed hook and return the hook pack."""
    return await service.lock_hook(req.project_id, req.edits, model_override)


@router.get("/{project_id}")
async def get_session(
    project_id: str,
    service: HookService = Depends(get_hook_service),
) -> Any:
    session = await service.get_session(project_id)
    if session is None:
        return JSONResponse(
            status_code=404,
            content=error_envelope(HookErrorCode.NOT_FOUND, "Session not found"),
        )
    return session.to_wire()


@router.delete("/{project_id}", response_model=DeleteResponse)
async def reset_session(
    project_id: str,
    service: HookService = Depends(get_hook_service),
) -> DeleteResponse:
    await service.reset_session(project_id)
    return DeleteResponse(deleted=True)
