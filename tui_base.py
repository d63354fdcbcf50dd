from __future__ import annotations

import curses
import logging
import time
from collections import deque
from dataclasses import dataclass, field
from enum import Enum

from constants import UI


logger = logging.getLogger(__name__)


class ManagerError(Exception):
    """Base class for errors raised by the Ollama collaborators."""


class FetchError(ManagerError):
    """The backend was unreachable or returned malformed data."""


class ActionError(ManagerError):
    """A create/delete/update/foreground command could not be carried out."""


class TerminalError(ManagerError):
    """The terminal cannot host the TUI (init failure or too small)."""


class ErrorSeverity(Enum):
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"


@dataclass
class AppError:
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR


@dataclass
class StatusLog:
    entries: deque = field(default_factory=lambda: deque(maxlen=UI.LOG_HISTORY))
    current: str | None = None


def handle_error(error: AppError, status: StatusLog | None = None) -> str:
    label = error.severity.value.upper()
    message = f"[{label}] {error.message}"
    if error.severity == ErrorSeverity.WARNING:
        logger.warning(message)
    else:
        logger.error(message)
    if status is not None:
        append_log(status, message)
    return message


def append_log(status: StatusLog, message: str) -> None:
    if not message:
        return
    timestamp = time.strftime("%H:%M:%S")
    status.entries.append(f"[{timestamp}] {message}")
    status.current = message


def format_scroll_indicator(scroll_offset: int, total: int, viewport_height: int) -> str:
    """``[first-last/total]`` once the list no longer fits, else an empty string."""
    if viewport_height <= 0 or total <= viewport_height:
        return ""
    first = min(total, scroll_offset + 1)
    last = min(total, scroll_offset + viewport_height)
    return f"[{first}-{last}/{total}]"


def scrollbar_thumb(scroll_offset: int, total: int, viewport_height: int) -> tuple[int, int]:
    """Start row and length of the thumb within a track ``viewport_height`` rows tall."""
    length = max(1, viewport_height * viewport_height // total)
    travel = viewport_height - length
    hidden = total - viewport_height
    start = round(travel * min(scroll_offset, hidden) / hidden) if hidden else 0
    return start, length


def draw_scrollbar(
    win: "curses._CursesWindow",
    *,
    top: int,
    x: int,
    scroll_offset: int,
    total: int,
    viewport_height: int,
    attr: int,
) -> None:
    if viewport_height <= 0 or total <= viewport_height:
        return
    start, length = scrollbar_thumb(scroll_offset, total, viewport_height)
    for row in range(viewport_height):
        glyph = curses.ACS_CKBOARD if start <= row < start + length else curses.ACS_VLINE
        try:
            win.addch(top + row, x, glyph, attr)
        except curses.error:
            return
