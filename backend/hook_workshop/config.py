from __future__ import annotations
"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import BaseModel
from pydantic_settings import BaseSettings

HookRole = Literal["clarifier", "builder", "judge", "summary"]

HOOK_ROLES: tuple[str, ...] = ("clarifier", "builder", "judge", "summary")

DEFAULT_MODEL = "anthropic/claude-sonnet-4.5"

# Allow-list for PUT /api/models (OpenRouter model ids)
SUPPORTED_MODELS: tuple[str, ...] = (
    "anthropic/claude-sonnet-4.5",     # default
    "anthropic/claude-sonnet-4",
    "anthropic/claude-opus-4.1",       # most capable
    "anthropic/claude-haiku-4.5",      # fastest / cheapest
    "google/gemini-3-flash-preview",
    "google/gemini-2.5-pro",
)


class Settings(BaseSettings):
    """Hook Workshop settings.

    Loaded from environment variables or .env file.
    """

    # --- Application ---
    APP_NAME: str = "Hook Workshop"
    DEBUG: bool = False
    CORS_ORIGINS: str = (
        "http://localhost:5173,http://localhost:3000,"
        "http://127.0.0.1:5173,http://127.0.0.1:3000"
    )

    # --- OpenRouter ---
    OPENROUTER_BASE_URL: str = "https://openrouter.ai/api/v1"
    OPENROUTER_API_KEY: str = ""
    OPENROUTER_API_KEYS: str = ""  # comma-separated, takes precedence
    LLM_TIMEOUT: int = 180
    LLM_MAX_ATTEMPTS: int = 3

    # --- Hook module ---
    HOOK_MODULE_ENABLED: bool = True
    HOOK_DATA_DIR: str = "./data"
    HOOK_PROMPT_STYLE: str = "default"

    # --- Per-role model selection ---
    HOOK_MODEL_CLARIFIER: str = DEFAULT_MODEL
    HOOK_MODEL_BUILDER: str = DEFAULT_MODEL
    HOOK_MODEL_JUDGE: str = DEFAULT_MODEL
    HOOK_MODEL_SUMMARY: str = DEFAULT_MODEL

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


class ModelConfig(BaseModel):
    """Active model id per hook role. Mutable at runtime via PUT /api/models."""

    clarifier: str = DEFAULT_MODEL
    builder: str = DEFAULT_MODEL
    judge: str = DEFAULT_MODEL
    summary: str = DEFAULT_MODEL

    @classmethod
    def from_settings(cls, settings: Settings) -> ModelConfig:
        return cls(
            clarifier=settings.HOOK_MODEL_CLARIFIER,
            builder=settings.HOOK_MODEL_BUILDER,
            judge=settings.HOOK_MODEL_JUDGE,
            summary=settings.HOOK_MODEL_SUMMARY,
        )

    def for_role(self, role: str) -> str:
        return getattr(self, role)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings singleton."""
    return Settings()
