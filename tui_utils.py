#!/usr/bin/env python3
"""Small curses dialogs used by the model manager: line input, yes/no, timed notices."""
from __future__ import annotations

import curses
import textwrap
from dataclasses import dataclass, field
from typing import List, Optional

from constants import UI
from keybindings import KEYS


@dataclass
class LineEditResult:
    value: str
    accepted: bool


@dataclass
class LineBuffer:
    """Editable single line with a cursor; knows nothing about curses windows.

    - Enter: accept
    - Esc: cancel
    - Ctrl+U: clear
    """

    chars: List[str] = field(default_factory=list)
    cursor: int = 0
    scroll: int = 0

    @classmethod
    def from_text(cls, text: str) -> "LineBuffer":
        chars = list(text or "")
        return cls(chars=chars, cursor=len(chars))

    @property
    def text(self) -> str:
        return "".join(self.chars)

    def handle_key(self, key: int) -> Optional[str]:
        """Apply ``key``; return "accept" or "cancel" when editing ends."""
        if key in KEYS.CONFIRM:
            return "accept"
        if key in KEYS.CANCEL:
            return "cancel"
        if key in (curses.KEY_BACKSPACE, 127, 8):
            if self.cursor > 0:
                self.chars.pop(self.cursor - 1)
                self.cursor -= 1
        elif key == curses.KEY_DC:
            if self.cursor < len(self.chars):
                self.chars.pop(self.cursor)
        elif key == curses.KEY_LEFT:
            self.cursor = max(0, self.cursor - 1)
        elif key == curses.KEY_RIGHT:
            self.cursor = min(len(self.chars), self.cursor + 1)
        elif key == curses.KEY_HOME:
            self.cursor = 0
        elif key == curses.KEY_END:
            self.cursor = len(self.chars)
        elif key == 21:  # Ctrl+U
            self.chars.clear()
            self.cursor = 0
            self.scroll = 0
        elif 0 <= key <= 255 and chr(key).isprintable():
            self.chars.insert(self.cursor, chr(key))
            self.cursor += 1
        return None

    def visible(self, width: int) -> tuple[str, int]:
        """Text window of ``width`` columns and the cursor column inside it."""
        capacity = max(1, width - 1)
        if self.cursor < self.scroll:
            self.scroll = self.cursor
        elif self.cursor > self.scroll + capacity:
            self.scroll = self.cursor - capacity
        self.scroll = max(0, self.scroll)
        return self.text[self.scroll : self.scroll + width], self.cursor - self.scroll


def _safe_curs_set(visibility: int) -> None:
    try:
        curses.curs_set(visibility)
    except curses.error:
        pass


def _centered_window(stdscr: "curses._CursesWindow", height: int, max_width: int) -> "curses._CursesWindow":
    h, w = stdscr.getmaxyx()
    if h < height or w < 20:
        raise curses.error("terminal too small")
    width = max(20, min(max_width, w))
    win = curses.newwin(height, width, max(0, (h - height) // 2), max(0, (w - width) // 2))
    win.keypad(True)
    win.border()
    return win


def edit_line_dialog(
    stdscr: "curses._CursesWindow",
    *,
    title: str,
    initial: str = "",
    instructions: str | None = None,
    max_width: int = 70,
    allow_empty: bool = True,
) -> LineEditResult:
    buffer = LineBuffer.from_text(str(initial or ""))
    _safe_curs_set(1)
    try:
        while True:
            try:
                win = _centered_window(stdscr, 5, max_width)
            except curses.error:
                return LineEditResult(value=initial, accepted=False)
            width = win.getmaxyx()[1]
            win.addnstr(1, 2, (title or "").strip() or "Enter value", width - 4, curses.A_BOLD)
            hint = instructions or "Enter: confirm  Esc: cancel  Ctrl+U: clear"
            win.addnstr(3, 2, hint, width - 4, curses.A_DIM)
            field_width = max(1, width - 4)
            text, col = buffer.visible(field_width)
            win.addnstr(2, 2, text.ljust(field_width), field_width)
            win.move(2, 2 + max(0, min(field_width - 1, col)))
            win.refresh()

            key = win.getch()
            if key in KEYS.RESIZE:
                stdscr.clear()
                stdscr.refresh()
                continue
            outcome = buffer.handle_key(key)
            if outcome == "cancel":
                return LineEditResult(value=initial, accepted=False)
            if outcome == "accept":
                value = buffer.text.strip()
                if value or allow_empty:
                    return LineEditResult(value=value, accepted=True)
                return LineEditResult(value=initial, accepted=False)
    finally:
        _safe_curs_set(0)


def yes_no_answer(key: int, default: bool) -> Optional[bool]:
    """Map a key press to an answer; ``None`` means keep waiting."""
    if key in KEYS.YES:
        return True
    if key in KEYS.NO or key in KEYS.CANCEL:
        return False
    if key in KEYS.CONFIRM:
        return default
    return None


def confirm_dialog(stdscr: "curses._CursesWindow", question: str, *, default: bool = False, max_width: int = 70) -> bool:
    hint = "[Y/n]" if default else "[y/N]"
    while True:
        h, w = stdscr.getmaxyx()
        wrap_width = max(10, min(max_width, w) - 4)
        lines = textwrap.wrap(question, wrap_width) or [""]
        try:
            win = _centered_window(stdscr, len(lines) + 4, max_width)
        except curses.error:
            return False
        width = win.getmaxyx()[1]
        for idx, line in enumerate(lines, start=1):
            win.addnstr(idx, 2, line, width - 4, curses.A_BOLD)
        win.addnstr(len(lines) + 2, 2, f"{hint}  Esc: cancel", width - 4, curses.A_DIM)
        win.refresh()
        key = win.getch()
        if key in KEYS.RESIZE:
            stdscr.clear()
            stdscr.refresh()
            continue
        answer = yes_no_answer(key, default)
        if answer is not None:
            return answer


def show_timed_message(stdscr: "curses._CursesWindow", message: str, *, attr: int = 0, duration_ms: int = UI.MESSAGE_MS) -> None:
    h, w = stdscr.getmaxyx()
    if h <= 0 or w <= 4:
        return
    try:
        stdscr.move(h - 1, 0)
        stdscr.clrtoeol()
        stdscr.addnstr(h - 1, 2, message, w - 4, attr | curses.A_BOLD)
    except curses.error:
        return
    stdscr.refresh()
    curses.napms(duration_ms)
