"""File-per-project JSON store for hook sessions."""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
from pathlib import Path

from pydantic import ValidationError

from hook_workshop.schemas.hook import HookSession

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def storage_key(project_id: str) -> str:
    """Reduce a project id to ``[A-Za-z0-9_-]`` so it cannot escape the data dir."""
    return _UNSAFE_CHARS.sub("", project_id)


class ProjectStore:
    """Reads and writes one ``<key>.json`` file per project.

    Writes go to ``<key>.json.tmp`` first and are renamed into place, so a
    crash mid-write leaves the previous record intact.
    """

    def __init__(self, data_dir: str | Path = "./data"):
        self.data_dir = Path(data_dir)
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.warning("Could not create data dir %s: %s", self.data_dir, e)

    def file_path(self, project_id: str) -> Path | None:
        key = storage_key(project_id)
        if not key:
            return None
        return self.data_dir / f"{key}.json"

    async def get(self, project_id: str) -> HookSession | None:
        return await asyncio.to_thread(self._read, project_id)

    async def save(self, session: HookSession) -> None:
        await asyncio.to_thread(self._write, session)

    async def delete(self, project_id: str) -> None:
        await asyncio.to_thread(self._unlink, project_id)

    def _read(self, project_id: str) -> HookSession | None:
        path = self.file_path(project_id)
        if path is None or not path.exists():
            return None
        try:
            raw = path.read_text(encoding="utf-8")
            return HookSession.model_validate(json.loads(raw))
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning("Unreadable session file %s, treating as absent: %s", path, e)
            return None

    def _write(self, session: HookSession) -> None:
        path = self.file_path(session.project_id)
        if path is None:
            raise ValueError(f"Project id {session.project_id!r} has no safe storage key")
        tmp = path.with_name(path.name + ".tmp")
        tmp.write_text(
            json.dumps(session.to_wire(), ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        os.replace(tmp, path)

    def _unlink(self, project_id: str) -> None:
        path = self.file_path(project_id)
        if path is None:
            return
        try:
            path.unlink()
        except FileNotFoundError:
            pass  # already gone
