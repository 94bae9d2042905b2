from __future__ import annotations
"""Master API router — mounts all sub-routers."""

from fastapi import APIRouter

from hook_workshop.api.hook import router as hook_router
from hook_workshop.api.models import router as models_router

api_router = APIRouter(prefix="/api", redirect_slashes=False)

api_router.include_router(hook_router, prefix="/hook", tags=["Hook Workshop"])
api_router.include_router(models_router, tags=["Models"])
