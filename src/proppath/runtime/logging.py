from __future__ import annotations

import datetime
import logging
from pathlib import Path

from rich.console import Console
from rich.text import Text

from ..config import PROPPATH_CONFIG

LOGGER_NAME = "proppath"

_LEVEL_STYLES = {
    logging.DEBUG: "dim",
    logging.INFO: "cyan",
    logging.WARNING: "yellow",
    logging.ERROR: "bold red",
    logging.CRITICAL: "bold white on red",
}


class _ProppathRichConsoleHandler(logging.Handler):
    """Compact single-line console handler rendered with rich."""

    def __init__(self, level: int = logging.NOTSET, console: Console | None = None):
        super().__init__(level)
        self.console = console or Console(stderr=True)

    @staticmethod
    def _format_location(record: logging.LogRecord) -> str:
        return f"[{Path(record.pathname).name}:{record.lineno}]"

    @staticmethod
    def _format_message_text(record: logging.LogRecord) -> Text:
        text = Text(record.getMessage())
        style = _LEVEL_STYLES.get(record.levelno)
        if style is not None:
            text.stylize(style)
        return text

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = Text()
            stamp = datetime.datetime.fromtimestamp(record.created).strftime(
                "%H:%M:%S"
            )
            line.append(stamp, style="dim")
            line.append(
                f" {record.levelname:<7} ",
                style=_LEVEL_STYLES.get(record.levelno, ""),
            )
            line.append_text(self._format_message_text(record))
            line.append(" ")
            line.append(self._format_location(record), style="dim")
            self.console.print(line, soft_wrap=True, highlight=False)
        except Exception:
            self.handleError(record)


def _is_proppath_handler(handler: logging.Handler) -> bool:
    return getattr(handler, "_proppath_handler", False)


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def configure_logging() -> logging.Logger:
    """Attach the proppath console handler once and apply the configured level.

    Calling this repeatedly replaces nothing and adds nothing; only the level
    is refreshed from ``PROPPATH_CONFIG``.
    """
    logger = get_logger()
    logger.setLevel(PROPPATH_CONFIG.log_level)

    if any(_is_proppath_handler(h) for h in logger.handlers):
        return logger

    if PROPPATH_CONFIG.rich_console:
        handler: logging.Handler = _ProppathRichConsoleHandler()
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )
    setattr(handler, "_proppath_handler", True)
    logger.addHandler(handler)
    return logger


__all__ = ["LOGGER_NAME", "configure_logging", "get_logger"]
