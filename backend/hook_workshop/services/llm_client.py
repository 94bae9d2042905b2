"""Structured-call gateway: one LLM invocation with retry + backoff.

Every hook role (clarifier / builder / judge / summary) goes through
``LLMClient.call()``. Calls carrying a JSON schema ask OpenRouter for
constrained decoding; free-text calls get markdown fences stripped.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
import re
from typing import Any, Awaitable, Callable

import httpx

from hook_workshop.config import ModelConfig, Settings

logger = logging.getLogger(__name__)

SleepFn = Callable[[float], Awaitable[Any]]

# ---------------------------------------------------------------------------
# Retriable status codes: rate limit, internal error, overloaded
# ---------------------------------------------------------------------------

_RETRIABLE_STATUS = {429, 500, 529}

_BACKOFF_BASE = 1.0   # seconds
_BACKOFF_CAP = 8.0    # seconds

_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?")
_FENCE_CLOSE = re.compile(r"\n?```\s*$")


class LLMError(Exception):
    """Structured LLM error with status code and retriable flag."""

    def __init__(self, message: str, status_code: int = 0, retriable: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.retriable = retriable


def strip_json_fences(raw: str) -> str:
    """Strip ```json fences — only needed for calls without a schema."""
    s = raw.strip()
    if s.startswith("```"):
        s = _FENCE_CLOSE.sub("", _FENCE_OPEN.sub("", s))
    return s.strip()


def backoff_seconds(attempt: int, retry_after: str | None = None) -> float:
    """Wait before the next attempt.

    A server-specified ``Retry-After`` (seconds) wins; otherwise
    1s, 2s, 4s, ... capped at 8s.
    """
    if retry_after:
        try:
            return max(float(retry_after), 0.0)
        except ValueError:
            logger.debug("Ignoring non-numeric Retry-After: %r", retry_after)
    return min(_BACKOFF_BASE * (2 ** (attempt - 1)), _BACKOFF_CAP)


def _mask_key(key: str) -> str:
    """Mask an API key for safe logging: show first 8 and last 4 chars."""
    if len(key) <= 16:
        return "***"
    return f"{key[:8]}...{key[-4:]}"


def _build_key_pool(settings: Settings) -> list[str]:
    """Parse OPENROUTER_API_KEYS (comma-separated) with OPENROUTER_API_KEY as fallback."""
    keys: list[str] = []
    if settings.OPENROUTER_API_KEYS:
        keys = [k.strip() for k in settings.OPENROUTER_API_KEYS.split(",") if k.strip()]
    if not keys and settings.OPENROUTER_API_KEY:
        keys = [settings.OPENROUTER_API_KEY]
    if not keys:
        logger.warning("No OpenRouter API keys configured — LLM calls will fail")
    return keys


def _extract_text(data: dict[str, Any]) -> str:
    """Join every text part of the first choice (content may be a list of parts)."""
    content = data["choices"][0]["message"]["content"]
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return "".join(
        part.get("text", "")
        for part in content
        if isinstance(part, dict) and part.get("type") == "text"
    )


class LLMClient:
    """OpenRouter chat-completions client bound to one model configuration.

    ``model_config`` is held by reference so that updates made through
    ``PUT /api/models`` apply to the next call.
    """

    def __init__(
        self,
        settings: Settings,
        model_config: ModelConfig,
        *,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.settings = settings
        self.model_config = model_config
        self.max_attempts = settings.LLM_MAX_ATTEMPTS
        self.url = f"{settings.OPENROUTER_BASE_URL}/chat/completions"
        self._http_client = http_client
        self._sleep = sleep
        self._key_pool = _build_key_pool(settings)
        self._key_cycle = itertools.cycle(self._key_pool) if self._key_pool else None

    def _get_client(self) -> httpx.AsyncClient:
        if self._http_client is None or self._http_client.is_closed:
            self._http_client = httpx.AsyncClient(timeout=float(self.settings.LLM_TIMEOUT))
        return self._http_client

    def _next_key(self) -> str:
        if not self._key_cycle:
            raise LLMError("No OpenRouter API keys configured", retriable=False)
        return next(self._key_cycle)

    async def aclose(self) -> None:
        if self._http_client is not None and not self._http_client.is_closed:
            await self._http_client.aclose()

    async def call(
        self,
        role: str,
        system_prompt: str,
        user_prompt: str,
        *,
        temperature: float = 0.7,
        max_tokens: int = 1024,
        model_override: str | None = None,
        json_schema: dict[str, Any] | None = None,
    ) -> str:
        """Call the LLM for ``role`` and return its text.

        Args:
            role: Hook role; selects the configured model and tags logs.
            system_prompt: System message.
            user_prompt: User message.
            temperature: Sampling temperature.
            max_tokens: Max tokens in response.
            model_override: Model id used instead of the role default.
            json_schema: If given, request schema-constrained JSON output.

        Returns:
            The response text (fence-stripped when no schema is given).

        Raises:
            LLMError: On a non-retriable failure, or once every attempt
                has hit a retriable status.
        """
        model = model_override or self.model_config.for_role(role)

        body: dict[str, Any] = {
            "model": model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_schema is not None:
            body["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": f"hook_{role}", "strict": True, "schema": json_schema},
            }

        for attempt in range(1, self.max_attempts + 1):
            key = self._next_key()
            headers = {
                "Authorization": f"Bearer {key}",
                "Content-Type": "application/json",
                "X-Title": self.settings.APP_NAME,
            }
            logger.info(
                "[%s] LLM call attempt %d/%d model=%s key=%s schema=%s",
                role, attempt, self.max_attempts, model, _mask_key(key), json_schema is not None,
            )

            try:
                response = await self._get_client().post(self.url, headers=headers, json=body)
            except httpx.HTTPError as e:
                logger.error("[%s] Transport error: %s", role, e)
                raise LLMError(f"LLM [{role}] transport error: {e}", retriable=False) from e

            if response.status_code in _RETRIABLE_STATUS:
                if attempt == self.max_attempts:
                    break
                wait = backoff_seconds(attempt, response.headers.get("retry-after"))
                logger.warning(
                    "[%s] attempt %d failed (HTTP %d), retrying in %.1fs...",
                    role, attempt, response.status_code, wait,
                )
                await self._sleep(wait)
                continue

            if response.is_error:
                logger.error("[%s] HTTP error %d: %.300s", role, response.status_code, response.text)
                raise LLMError(
                    f"LLM [{role}] HTTP error: {response.status_code}",
                    status_code=response.status_code,
                    retriable=False,
                )

            try:
                text = _extract_text(response.json())
            except (ValueError, KeyError, IndexError, TypeError) as e:
                raise LLMError(f"LLM [{role}] returned a malformed body: {e}", retriable=False) from e

            logger.info("[%s] LLM response OK, length=%d", role, len(text))
            return text if json_schema is not None else strip_json_fences(text)

        raise LLMError(
            f"LLM [{role}] failed after {self.max_attempts} attempts",
            status_code=response.status_code,
            retriable=True,
        )
