"""Process runtime: the configured store, gateway and service, built once."""

from __future__ import annotations

from dataclasses import dataclass

from hook_workshop.config import ModelConfig, Settings
from hook_workshop.services.hook_prompts import HookPromptBuilder
from hook_workshop.services.hook_service import HookService
from hook_workshop.services.llm_client import LLMClient
from hook_workshop.services.tournament import SupportsCall
from hook_workshop.storage.project_store import ProjectStore


@dataclass
class HookRuntime:
    settings: Settings
    model_config: ModelConfig
    store: ProjectStore
    llm: SupportsCall
    hook_service: HookService

    async def aclose(self) -> None:
        if isinstance(self.llm, LLMClient):
            await self.llm.aclose()


def build_runtime(settings: Settings, *, llm: SupportsCall | None = None) -> HookRuntime:
    """Wire the runtime from settings. ``llm`` replaces the OpenRouter gateway."""
    model_config = ModelConfig.from_settings(settings)
    store = ProjectStore(settings.HOOK_DATA_DIR)
    gateway = llm if llm is not None else LLMClient(settings, model_config)
    service = HookService(store, gateway, HookPromptBuilder(settings.HOOK_PROMPT_STYLE))
    return HookRuntime(
        settings=settings,
        model_config=model_config,
        store=store,
        llm=gateway,
        hook_service=service,
    )
