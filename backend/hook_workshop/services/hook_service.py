"""HookService — the session state machine.

clarify → generate → (reroll)* → lock, with reset available at any point.
Each action loads the session once, runs its LLM calls, and saves once at
the end; a failed action leaves the stored record untouched.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from hook_workshop.errors import HookErrorCode, HookServiceError
from hook_workshop.schemas.api import ClarifyResponse, GenerateResponse, JudgeSummary, LockEdits
from hook_workshop.schemas.hook import (
    ClarifierResponse,
    CoreEngine,
    HookPack,
    HookPreferences,
    HookSession,
    HookTurn,
    LockedHook,
    OptionSelection,
    SessionStatus,
    UserSelection,
)
from hook_workshop.services.hook_prompts import HookPromptBuilder, RolePrompt
from hook_workshop.services.hook_schemas import CLARIFIER_SCHEMA
from hook_workshop.services.llm_client import LLMError
from hook_workshop.services.state_merge import merge_state_update
from hook_workshop.services.tournament import SupportsCall, Tournament
from hook_workshop.services.validation import CLARIFIER_REQUIRED, validate_model
from hook_workshop.storage.project_store import ProjectStore, storage_key

logger = logging.getLogger(__name__)

# Turn count (before appending) at which readiness is forced on.
FORCED_READY_AFTER_TURNS = 2

CLARIFIER_TEMPERATURE = 0.7
CLARIFIER_MAX_TOKENS = 800
SUMMARY_TEMPERATURE = 0.5
SUMMARY_MAX_TOKENS = 600


def _invalid(message: str) -> HookServiceError:
    return HookServiceError(HookErrorCode.INVALID_INPUT, message)


def _not_found() -> HookServiceError:
    return HookServiceError(HookErrorCode.NOT_FOUND, "Session not found")


class HookService:
    """Runs hook session actions against a store and an LLM gateway."""

    def __init__(
        self,
        store: ProjectStore,
        llm: SupportsCall,
        prompts: HookPromptBuilder | None = None,
    ):
        self.store = store
        self.llm = llm
        self.prompts = prompts or HookPromptBuilder()
        self.tournament = Tournament(llm, self.prompts)
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}

    @asynccontextmanager
    async def _project_scope(self, project_id: str) -> AsyncIterator[None]:
        """Serialize actions on one project id within this process.

        A key's lock lives only while some action holds or waits on it.
        """
        key = storage_key(project_id)
        lock = self._locks.setdefault(key, asyncio.Lock())
        self._lock_users[key] = self._lock_users.get(key, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[key] -= 1
            if not self._lock_users[key]:
                del self._lock_users[key]
                del self._locks[key]

    # ------------------------------------------------------------------
    # clarify
    # ------------------------------------------------------------------

    async def run_clarifier_turn(
        self,
        project_id: str,
        seed_input: str | None = None,
        user_selection: UserSelection | None = None,
        model_override: str | None = None,
    ) -> ClarifyResponse:
        async with self._project_scope(project_id):
            session = await self.store.get(project_id)

            if session is None:
                session = self._create_session(project_id, seed_input, user_selection)
            else:
                self._attach_selection(session, seed_input, user_selection)

            clarifier = await self._call_clarifier(session, model_override)

            session.current_state = merge_state_update(session.current_state, clarifier.state_update)

            if len(session.turns) >= FORCED_READY_AFTER_TURNS and not clarifier.ready_for_hook:
                logger.info("[%s] Forcing ready_for_hook on turn %d", project_id, len(session.turns) + 1)
                clarifier.ready_for_hook = True

            turn = HookTurn(
                turn_number=len(session.turns) + 1,
                clarifier_response=clarifier,
                user_selection=None,
            )
            session.turns.append(turn)
            session.status = SessionStatus.CLARIFYING

            await self.store.save(session)
            logger.info(
                "[%s] Clarifier turn %d stored (ready=%s)",
                project_id, turn.turn_number, clarifier.ready_for_hook,
            )
            return ClarifyResponse(
                clarifier=turn.clarifier_response,
                turn_number=turn.turn_number,
                total_turns=len(session.turns),
            )

    def _create_session(
        self,
        project_id: str,
        seed_input: str | None,
        user_selection: UserSelection | None,
    ) -> HookSession:
        if not seed_input or not seed_input.strip() or user_selection is not None:
            raise _invalid("First turn requires seedInput and no userSelection")
        if not storage_key(project_id):
            raise _invalid("projectId must contain letters, digits, '_' or '-'")
        logger.info("[%s] New hook session", project_id)
        return HookSession(project_id=project_id, seed_input=seed_input)

    def _attach_selection(
        self,
        session: HookSession,
        seed_input: str | None,
        user_selection: UserSelection | None,
    ) -> None:
        if not session.can_transition_to(SessionStatus.CLARIFYING):
            raise _invalid("Session already progressed; reset session first")
        if seed_input:
            raise _invalid("Session already exists; seedInput can only be set on the first turn")
        if user_selection is None:
            raise _invalid("Subsequent turns require userSelection")

        previous = session.last_turn
        if previous is None:
            raise _invalid("No clarifier turn exists to attach selection")

        if isinstance(user_selection, OptionSelection):
            if user_selection.option_id not in previous.clarifier_response.option_ids():
                raise _invalid("optionId must exist in previous turn options")

        previous.user_selection = user_selection

    async def _call_clarifier(self, session: HookSession, model_override: str | None) -> ClarifierResponse:
        prompt = self.prompts.clarifier(session)

        clarifier = self._parse_clarifier(await self._clarifier_call(prompt, model_override))
        if clarifier is None:
            logger.warning("[%s] Clarifier payload invalid, retrying once", session.project_id)
            clarifier = self._parse_clarifier(await self._clarifier_call(prompt, model_override))
        if clarifier is None:
            raise HookServiceError(HookErrorCode.LLM_PARSE_ERROR, "Failed to parse clarifier response")
        return clarifier

    async def _clarifier_call(self, prompt: RolePrompt, model_override: str | None) -> str:
        try:
            return await self.llm.call(
                "clarifier",
                prompt.system,
                prompt.user,
                temperature=CLARIFIER_TEMPERATURE,
                max_tokens=CLARIFIER_MAX_TOKENS,
                model_override=model_override,
                json_schema=CLARIFIER_SCHEMA,
            )
        except LLMError as e:
            logger.error("Clarifier call failed: %s", e)
            raise HookServiceError(HookErrorCode.LLM_CALL_FAILED, "Clarifier call failed") from e

    @staticmethod
    def _parse_clarifier(raw: str) -> ClarifierResponse | None:
        return validate_model(raw, CLARIFIER_REQUIRED, ClarifierResponse)

    # ------------------------------------------------------------------
    # generate / reroll
    # ------------------------------------------------------------------

    async def run_tournament(self, project_id: str, model_override: str | None = None) -> GenerateResponse:
        async with self._project_scope(project_id):
            session = await self.store.get(project_id)
            if session is None or not session.seed_input:
                raise _not_found()
            if not session.can_transition_to(SessionStatus.GENERATING):
                raise _invalid("Session is locked; reset session first")
            return await self._execute_tournament(session, model_override, fresh=True)

    async def reroll(self, project_id: str, model_override: str | None = None) -> GenerateResponse:
        async with self._project_scope(project_id):
            session = await self.store.get(project_id)
            if session is None:
                raise _not_found()
            if session.status != SessionStatus.REVEALED:
                raise _invalid("Session must be in revealed status to reroll")
            return await self._execute_tournament(session, model_override, fresh=False)

    async def _execute_tournament(
        self,
        session: HookSession,
        model_override: str | None,
        *,
        fresh: bool,
    ) -> GenerateResponse:
        session.status = SessionStatus.GENERATING
        winner = await self.tournament.run(session, model_override)

        session.revealed_hook = winner.hook
        session.revealed_judge = winner.judge
        session.status = SessionStatus.REVEALED
        session.reroll_count = 0 if fresh else session.reroll_count + 1

        await self.store.save(session)
        return GenerateResponse(
            hook=winner.hook,
            judge=JudgeSummary.from_verdict(winner.judge),
            reroll_count=session.reroll_count,
        )

    # ------------------------------------------------------------------
    # lock
    # ------------------------------------------------------------------

    async def lock_hook(
        self,
        project_id: str,
        edits: LockEdits | None = None,
        model_override: str | None = None,
    ) -> HookPack:
        async with self._project_scope(project_id):
            session = await self.store.get(project_id)
            if session is None:
                raise _not_found()
            if session.status != SessionStatus.REVEALED or session.revealed_hook is None:
                raise _invalid("Session must be revealed before locking")

            hook = session.revealed_hook.model_copy()
            if edits is not None:
                if edits.premise:
                    hook.premise = edits.premise
                if edits.page_turn_trigger:
                    hook.page_turn_trigger = edits.page_turn_trigger
            session.revealed_hook = hook

            prompt = self.prompts.summary(session)
            try:
                summary = await self.llm.call(
                    "summary",
                    prompt.system,
                    prompt.user,
                    temperature=SUMMARY_TEMPERATURE,
                    max_tokens=SUMMARY_MAX_TOKENS,
                    model_override=model_override,
                )
            except LLMError as e:
                logger.error("[%s] Summary call failed: %s", project_id, e)
                raise HookServiceError(HookErrorCode.LLM_CALL_FAILED, "Summary generation failed") from e

            state = session.current_state
            pack = HookPack(
                locked=LockedHook(
                    premise=hook.premise,
                    page1_splash=hook.page_1_splash_prompt,
                    page_turn_trigger=hook.page_turn_trigger,
                    core_engine=CoreEngine(
                        hook_engine=state.hook_engine or "",
                        stakes=state.stakes or "",
                        taboo_or_tension=state.taboo_or_tension or "",
                        protagonist_role=state.protagonist_role or "",
                        antagonist_form=state.antagonist_form or "",
                        setting_anchor=state.setting_anchor or "",
                    ),
                ),
                preferences=HookPreferences(
                    tone_chips=list(state.tone_chips or []),
                    bans=list(state.bans or []),
                ),
                source_dna=list(hook.collision_sources),
                open_threads=[
                    t.clarifier_response.missing_signal
                    for t in session.turns
                    if not t.clarifier_response.ready_for_hook and t.clarifier_response.missing_signal
                ],
                state_summary=summary.strip(),
            )

            session.hook_pack = pack
            session.status = SessionStatus.LOCKED
            await self.store.save(session)
            logger.info("[%s] Hook locked", project_id)
            return pack

    # ------------------------------------------------------------------
    # get / reset
    # ------------------------------------------------------------------

    async def get_session(self, project_id: str) -> HookSession | None:
        return await self.store.get(project_id)

    async def reset_session(self, project_id: str) -> None:
        async with self._project_scope(project_id):
            await self.store.delete(project_id)
        logger.info("[%s] Session reset", project_id)
