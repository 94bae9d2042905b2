from __future__ import annotations
"""Prompt templates on disk: ``templates/<style>/<name>.txt`` with ``{{KEY}}`` slots."""

import logging
import re
from pathlib import Path
from typing import ClassVar

logger = logging.getLogger(__name__)

_TEMPLATES_DIR = Path(__file__).parent / "templates"
DEFAULT_STYLE = "default"

_PLACEHOLDER = re.compile(r"\{\{([A-Z0-9_]+)\}\}")


class PromptManager:
    """Loads role templates once per (style, name) and fills their placeholders.

    A style directory only needs the templates it changes; anything it
    lacks is read from ``default``.
    """

    _cache: ClassVar[dict[tuple[str, str], str]] = {}

    @classmethod
    def get_prompt(cls, template_name: str, style: str = DEFAULT_STYLE) -> str:
        """Raw template text.

        Raises:
            FileNotFoundError: If neither ``style`` nor ``default`` has it.
        """
        key = (style, template_name)
        if key not in cls._cache:
            cls._cache[key] = cls._load(template_name, style)
        return cls._cache[key]

    @classmethod
    def render(cls, template_name: str, style: str = DEFAULT_STYLE, **values: str) -> str:
        """Template text with every ``{{KEY}}`` replaced in a single pass.

        Substituted values are not scanned again, so a seed that happens to
        contain ``{{BAN_LIST}}`` stays literal.

        Raises:
            KeyError: If the template uses a placeholder missing from ``values``.
        """
        def fill(match: re.Match) -> str:
            name = match.group(1)
            if name not in values:
                raise KeyError(f"{template_name} needs a value for {{{{{name}}}}}")
            return values[name]

        return _PLACEHOLDER.sub(fill, cls.get_prompt(template_name, style))

    @staticmethod
    def _load(template_name: str, style: str) -> str:
        for candidate in dict.fromkeys((style, DEFAULT_STYLE)):
            path = _TEMPLATES_DIR / candidate / f"{template_name}.txt"
            if path.exists():
                if candidate != style:
                    logger.info("Prompt %s/%s.txt missing, using %s", style, template_name, candidate)
                return path.read_text(encoding="utf-8").strip()
        raise FileNotFoundError(f"Prompt template not found: {style}/{template_name}.txt")
