from __future__ import annotations
"""Hook Workshop — FastAPI application entry point.

Builds the runtime (store, LLM gateway, hook service) once, mounts the API
routes, and installs the uniform error envelope.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from hook_workshop import __version__
from hook_workshop.api.router import api_router
from hook_workshop.config import Settings, get_settings
from hook_workshop.errors import HookErrorCode, HookServiceError, error_envelope
from hook_workshop.feature_flags import feature_flag_guard
from hook_workshop.services.runtime import HookRuntime, build_runtime

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=logging.DEBUG if settings.DEBUG else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


async def _hook_error_handler(request: Request, exc: HookServiceError) -> JSONResponse:
    logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.code.value, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_envelope())


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = f"{where}: {first.get('msg', 'invalid request')}" if where else first.get("msg", "invalid request")
    return JSONResponse(status_code=400, content=error_envelope(HookErrorCode.INVALID_INPUT, message))


async def _http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # unmatched routes / methods
    code = HookErrorCode.NOT_FOUND if exc.status_code == 404 else HookErrorCode.INVALID_INPUT
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=error_envelope(HookErrorCode.LLM_CALL_FAILED, "Unexpected server error"),
    )


def create_app(settings: Settings | None = None, runtime: HookRuntime | None = None) -> FastAPI:
    """Build the FastAPI app. Tests pass their own settings / runtime."""
    settings = settings or (runtime.settings if runtime else get_settings())
    runtime = runtime or build_runtime(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("%s starting up...", settings.APP_NAME)
        logger.info("Hook module enabled: %s", settings.HOOK_MODULE_ENABLED)
        logger.info("Session data dir: %s", runtime.store.data_dir)
        yield
        await runtime.aclose()
        logger.info("%s shut down", settings.APP_NAME)

    app = FastAPI(
        title=f"{settings.APP_NAME} API",
        description="Clarify a story idea, run a hook tournament, lock a hook pack.",
        version=__version__,
        lifespan=lifespan,
        redirect_slashes=False,
    )
    app.state.runtime = runtime

    app.add_exception_handler(HookServiceError, _hook_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, _http_error_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.middleware("http")(feature_flag_guard)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.get("/")
    async def root():
        """Health check endpoint."""
        return {"service": settings.APP_NAME, "status": "running"}

    @app.get("/health")
    async def health():
        """Detailed health check."""
        return {
            "status": "healthy",
            "hook_module_enabled": settings.HOOK_MODULE_ENABLED,
            "models": runtime.model_config.model_dump(),
        }

    return app


def run() -> None:
    """Console entry point: serve the app with uvicorn."""
    import os

    import uvicorn

    uvicorn.run(
        "hook_workshop.main:app",
        host=os.environ.get("HOST", "0.0.0.0"),
        port=int(os.environ.get("PORT", "3001")),
    )


configure_logging(get_settings())
app = create_app()
