"""Project logging package.

Contains internal logging utilities (event catalog + RetokenLogger).
"""

from .event_catalog import EVENT_TEMPLATES, reload_event_templates  # noqa: F401
from .logger import RetokenLogger, logger  # noqa: F401

__all__ = ["RetokenLogger", "logger", "EVENT_TEMPLATES", "reload_event_templates"]
