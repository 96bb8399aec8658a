"""Structured event logger."""

from __future__ import annotations

import logging
import os

from ..logging_config import LOGGER_NAME
from .event_catalog import get_template, template_fields


class RetokenLogger:
    def __init__(self, name: str = LOGGER_NAME) -> None:
        # Fixed width for event name column when in debug (alignment)
        self._event_name_width = 32
        self.logger = logging.getLogger(name)

    def set_level(self, level: int) -> None:
        self.logger.setLevel(level)

    def log_event(
        self,
        domain: str,
        action: str,
        level: int = logging.INFO,
        human: str | None = None,
        *,
        exc_info: bool = False,
        **kwargs: object,
    ) -> None:
        event_name = f"{domain}_{action}".lower()
        human_text = human
        derived = False
        if human_text is None:
            template = get_template(domain, action)
            if template:
                human_text = self._render(template, kwargs)
            else:
                human_text = f"{domain.replace('_', ' ')}: {action.replace('_', ' ')}"
                derived = True
        if derived:
            kwargs.setdefault("derived", True)
        self._log(level, event_name, human_text, exc_info=exc_info, **kwargs)

    def _log(
        self,
        level: int,
        event_name: str,
        human_text: str | None,
        exc_info: bool = False,
        **kwargs: object,
    ) -> None:
        if not self.logger.isEnabledFor(level):
            return
        msg = (
            self._build_debug_message(event_name, human_text, kwargs, self._event_name_width)
            if self._is_debug_enabled()
            else self._build_concise_message(event_name, human_text)
        )
        self.logger.log(level, msg, exc_info=exc_info)

    @staticmethod
    def _render(template: str, context: dict[str, object]) -> str:
        # Templates missing context, or malformed ones, are shown verbatim.
        try:
            if template_fields(template) <= context.keys():
                return template.format(**context)
        except (IndexError, ValueError):
            pass
        return template

    @staticmethod
    def _is_debug_enabled() -> bool:
        return os.environ.get("DEBUG", "false").lower() in ("true", "1", "yes")

    @staticmethod
    def _build_debug_message(
        event_name: str,
        human_text: str | None,
        kwargs: dict[str, object],
        width: int,
    ) -> str:
        context = ", ".join(f"{k}={v}" for k, v in kwargs.items() if v is not None)
        # Pad / truncate event name to a fixed column for alignment
        if len(event_name) <= width:
            ev = event_name.ljust(width)
        else:  # truncate but keep rightmost indicator
            ev = event_name[: width - 1] + "…"
        base = ev
        if human_text:
            base = f"{base} {human_text}"
        if context:
            base = f"{base} ({context})"
        return base

    @staticmethod
    def _build_concise_message(event_name: str, human_text: str | None) -> str:
        return human_text or event_name


logger = RetokenLogger()
