"""Pytest configuration helpers.

Puts ``backend/`` on ``sys.path`` so tests can import ``hook_workshop``
without an editable install, and points session storage at a scratch
directory before the app module is imported.
"""
import os
import sys
import tempfile

import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
BACKEND = os.path.join(ROOT, "backend")
if BACKEND not in sys.path:
    sys.path.insert(0, BACKEND)

os.environ.setdefault("HOOK_DATA_DIR", tempfile.mkdtemp(prefix="hook-workshop-tests-"))

from helpers import FakeLLM  # noqa: E402
from hook_workshop.config import Settings  # noqa: E402
from hook_workshop.services.hook_service import HookService  # noqa: E402
from hook_workshop.storage.project_store import ProjectStore  # noqa: E402


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def store(tmp_path):
    return ProjectStore(tmp_path / "sessions")


@pytest.fixture
def service(store, fake_llm):
    return HookService(store, fake_llm)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        OPENROUTER_API_KEY="sk-or-test-key-0123456789",
        HOOK_DATA_DIR=str(tmp_path / "data"),
    )
