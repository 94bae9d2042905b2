"""Feature gate for the hook module."""

from __future__ import annotations

from typing import Awaitable, Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from hook_workshop.errors import HookErrorCode, error_envelope

HOOK_ROUTE_PREFIX = "/api/hook"


async def feature_flag_guard(
    request: Request,
    call_next: Callable[[Request], Awaitable[Response]],
) -> Response:
    """Answer every /api/hook request with FEATURE_DISABLED while the module is off.

    Runs as HTTP middleware so it fires before routing, for any method and
    any path under the prefix.
    """
    path = request.url.path
    if path == HOOK_ROUTE_PREFIX or path.startswith(HOOK_ROUTE_PREFIX + "/"):
        settings = request.app.state.runtime.settings
        if not settings.HOOK_MODULE_ENABLED:
            return JSONResponse(
                status_code=404,
                content=error_envelope(HookErrorCode.FEATURE_DISABLED, "Hook module is disabled"),
            )
    return await call_next(request)
