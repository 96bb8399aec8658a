"""Event template catalogue.

Human-readable messages for ``RetokenLogger.log_event`` live in
``event_templates.json`` next to this module, nested as
``{domain: {action: template}}``. Setting ``RETOKEN_EVENT_TEMPLATES`` to a
file path replaces the bundled catalogue (e.g. for localized messages).
"""

from __future__ import annotations

import json
import os
import string
from collections.abc import Mapping
from pathlib import Path
from typing import Any

TEMPLATES_PATH_ENV = "RETOKEN_EVENT_TEMPLATES"
DEFAULT_TEMPLATES_PATH = Path(__file__).with_name("event_templates.json")
LOAD_ERROR_KEY = ("app", "load_error")

EVENT_TEMPLATES: dict[tuple[str, str], str] = {}


def templates_path() -> Path:
    override = os.getenv(TEMPLATES_PATH_ENV)
    return Path(override) if override else DEFAULT_TEMPLATES_PATH


def parse_templates(raw: Any) -> dict[tuple[str, str], str]:
    """Flatten the nested catalogue; entries of any other shape are skipped."""
    if not isinstance(raw, Mapping):
        return {}
    return {
        (domain, action): template
        for domain, actions in raw.items()
        if isinstance(domain, str) and isinstance(actions, Mapping)
        for action, template in actions.items()
        if isinstance(action, str) and isinstance(template, str)
    }


def load_event_templates(path: Path | None = None) -> dict[tuple[str, str], str]:
    """Read a catalogue file.

    Args:
        path: Catalogue location; defaults to ``templates_path()``.

    Returns:
        Templates keyed by ``(domain, action)``. A missing or unreadable file
        yields a single ``LOAD_ERROR_KEY`` entry so that logging keeps
        working with derived messages.
    """
    path = path or templates_path()
    try:
        with path.open("r", encoding="utf-8") as f:
            raw = json.load(f)
    except FileNotFoundError:
        return {LOAD_ERROR_KEY: "Event templates file missing"}
    except (OSError, ValueError) as e:
        return {LOAD_ERROR_KEY: f"Failed to load event templates: {e}"[:200]}
    return parse_templates(raw)


def reload_event_templates(path: Path | None = None) -> None:
    global EVENT_TEMPLATES  # noqa: PLW0603
    EVENT_TEMPLATES = load_event_templates(path)


def get_template(domain: str, action: str) -> str | None:
    return EVENT_TEMPLATES.get((domain, action))


def template_fields(template: str) -> set[str]:
    """Names of the ``{placeholders}`` a template expects.

    Raises:
        ValueError: If the template has unbalanced braces.
    """
    return {name for _, name, _, _ in string.Formatter().parse(template) if name}


reload_event_templates()

__all__ = [
    "EVENT_TEMPLATES",
    "get_template",
    "load_event_templates",
    "reload_event_templates",
    "template_fields",
]
