#!/usr/bin/env python3
"""Interactive TUI for browsing and managing local Ollama models."""
from __future__ import annotations

import argparse
import curses
import locale
import logging
import sys
from typing import Callable, List, Optional, Sequence, TypeVar

from config import ConfigError, ManagerConfig, configure_logging, load_config
from constants import LAYOUT, UI
from dispatcher import DispatchResult, MenuCommands, dispatch
from menu_state import Item, MenuState
from ollama import OllamaClient
from process_utils import suspended_terminal, wait_for_enter
from rendering import render_header, render_row, size_band, size_column_offset
from tui_base import (
    ActionError,
    AppError,
    ErrorSeverity,
    FetchError,
    StatusLog,
    TerminalError,
    append_log,
    draw_scrollbar,
    format_scroll_indicator,
    handle_error,
)
from tui_utils import confirm_dialog, edit_line_dialog, show_timed_message
from validators import validate_model_name
from viewport import compute_height, footer_line_count, visible_slice

logger = logging.getLogger(__name__)

T = TypeVar("T")

ROW_PREFIX_WIDTH = 6

PAIR_TITLE = 1
PAIR_ERROR = 2
PAIR_WARN = 3
PAIR_SMALL = 4
PAIR_MEDIUM = 5
PAIR_DATE = 6

_BAND_PAIRS = {"small": PAIR_SMALL, "medium": PAIR_MEDIUM, "large": PAIR_WARN, "huge": PAIR_ERROR}


def init_colors() -> None:
    if not curses.has_colors():
        return
    curses.start_color()
    curses.use_default_colors()
    curses.init_pair(PAIR_TITLE, curses.COLOR_CYAN, -1)
    curses.init_pair(PAIR_ERROR, curses.COLOR_RED, -1)
    curses.init_pair(PAIR_WARN, curses.COLOR_YELLOW, -1)
    curses.init_pair(PAIR_SMALL, curses.COLOR_GREEN, -1)
    curses.init_pair(PAIR_MEDIUM, curses.COLOR_BLUE, -1)
    curses.init_pair(PAIR_DATE, curses.COLOR_MAGENTA, -1)


def _pair(number: int) -> int:
    return curses.color_pair(number) if curses.has_colors() else 0


def footer_lines(state: MenuState) -> List[str]:
    more = "fewer" if state.footer_expanded else "more"
    lines = [
        f"  Model Actions: (A)dd | (D)elete | (U)pdate | (R)un  |  ? {more} options",
        f"  (F)ilter/C(l)ear: {state.filter_text:<32}  |  Q/ESC (Q)uit",
    ]
    if state.footer_expanded:
        lines.append("  Ollama Manage: (C)onfig | (S)top | R(e)start | (I)nstall")
        lines.append("  Navigation:    ↓/j Down | ↑/k Up | PgUp/PgDn | SPACE Select | Shift+R Refresh")
    return lines


def banner_text(state: MenuState, viewport_height: int) -> str:
    parts = []
    if state.filter_text:
        parts.append(f"filter: {state.filter_text}")
    if state.all_selected:
        parts.append("selected: all")
    elif state.selected:
        parts.append(f"selected: {len(state.selected)}")
    indicator = format_scroll_indicator(state.scroll_offset, len(state.items), viewport_height)
    if indicator:
        parts.append(indicator)
    return "  ".join(parts)


def viewport_height_for(stdscr: "curses._CursesWindow", state: MenuState) -> int:
    try:
        h, _w = stdscr.getmaxyx()
    except curses.error as exc:
        raise TerminalError(f"Could not query terminal size: {exc}") from exc
    return compute_height(h, footer_line_count(state.footer_expanded))


def _draw_rows(stdscr: "curses._CursesWindow", state: MenuState, top: int, viewport_height: int, width: int) -> None:
    if state.fetch_error:
        stdscr.addnstr(top, 2, state.fetch_error, width - 4, _pair(PAIR_ERROR) | curses.A_BOLD)
        if viewport_height > 1:
            stdscr.addnstr(top + 1, 2, "Press Shift+R to retry or q to quit.", width - 4, curses.A_DIM)
        return
    if not state.items:
        stdscr.addnstr(top, 2, "No models installed. Press 'a' to pull one.", width - 4, curses.A_DIM)
        return

    rows = visible_slice(state.items, state.scroll_offset, viewport_height)
    for offset, item in enumerate(rows):
        index = state.scroll_offset + offset
        y = top + offset
        is_cursor = index == state.cursor
        mark = "x" if state.is_selected(item) else " "
        prefix = f"{'>' if is_cursor else ' '} [{mark}] "
        line = prefix + render_row(item)
        attr = curses.A_REVERSE if is_cursor else curses.A_NORMAL
        if item.is_synthetic:
            attr |= _pair(PAIR_WARN)
        stdscr.addnstr(y, 0, line, width - 2, attr)
        if not item.is_synthetic and not is_cursor:
            size_x = ROW_PREFIX_WIDTH + size_column_offset()
            if size_x < width - 2:
                size_text = line[size_x : size_x + 10]
                stdscr.addnstr(y, size_x, size_text, width - 2 - size_x, _pair(_BAND_PAIRS[size_band(item.size_bytes)]))
            date_x = size_x + 13
            if date_x < width - 2:
                stdscr.addnstr(y, date_x, line[date_x:], width - 2 - date_x, _pair(PAIR_DATE))

    draw_scrollbar(
        stdscr,
        top=top,
        x=width - 1,
        scroll_offset=state.scroll_offset,
        total=len(state.items),
        viewport_height=viewport_height,
        attr=curses.A_DIM,
    )


def draw_screen(
    stdscr: "curses._CursesWindow", state: MenuState, viewport_height: int, status: StatusLog | None = None
) -> None:
    stdscr.erase()
    h, w = stdscr.getmaxyx()
    if h < LAYOUT.MIN_HEIGHT or w < LAYOUT.NARROW_MIN_WIDTH:
        stdscr.addnstr(0, 0, "Terminal too small for Ollama Manager", max(1, w - 1), curses.A_BOLD)
        stdscr.refresh()
        return

    stdscr.addnstr(0, 2, UI.TITLE, w - 4, _pair(PAIR_TITLE) | curses.A_BOLD)
    info = banner_text(state, viewport_height)
    if info and w > len(UI.TITLE) + len(info) + 6:
        stdscr.addnstr(0, w - len(info) - 2, info, len(info), curses.A_DIM)
    stdscr.addnstr(1, 0, " " * ROW_PREFIX_WIDTH + render_header(), w - 2, curses.A_BOLD)
    divider = "─" * max(1, w - 1)
    stdscr.addnstr(2, 0, divider, w - 1, _pair(PAIR_MEDIUM))

    _draw_rows(stdscr, state, 3, viewport_height, w)

    bottom = 3 + viewport_height
    stdscr.addnstr(bottom, 0, divider, w - 1, _pair(PAIR_MEDIUM))
    if status is not None and status.current and not state.fetch_error:
        notice = f" {status.current} "
        stdscr.addnstr(bottom, 2, notice, max(1, w - 4), _pair(PAIR_WARN) | curses.A_BOLD)
    for idx, line in enumerate(footer_lines(state), start=1):
        if bottom + idx >= h:
            break
        stdscr.addnstr(bottom + idx, 0, line, w - 1)
    stdscr.refresh()


def refresh_data(state: MenuState, client: OllamaClient, viewport_height: int, status: StatusLog | None = None) -> None:
    try:
        items = client.fetch_models()
    except FetchError as exc:
        state.mark_fetch_failed(str(exc))
        handle_error(AppError(str(exc), ErrorSeverity.WARNING), status)
        return
    state.replace_items(items, viewport_height)


class CursesCommands(MenuCommands):
    def __init__(self, stdscr: "curses._CursesWindow", client: OllamaClient, status: StatusLog) -> None:
        self.stdscr = stdscr
        self.client = client
        self.status = status

    def prompt(self, title: str, initial: str = "") -> Optional[str]:
        result = edit_line_dialog(self.stdscr, title=title, initial=initial)
        return result.value if result.accepted else None

    def confirm(self, question: str, *, default: bool) -> bool:
        return confirm_dialog(self.stdscr, question, default=default)

    def notify(self, message: str, *, warning: bool = False) -> None:
        append_log(self.status, message)
        attr = _pair(PAIR_WARN) if warning else _pair(PAIR_SMALL)
        duration = UI.WARNING_MS if warning else UI.MESSAGE_MS
        show_timed_message(self.stdscr, message, attr=attr, duration_ms=duration)

    def _takeover(self, title: str, action: Callable[[], T], *, pause: bool = True) -> T:
        with suspended_terminal(self.stdscr):
            print(f"\n== {title} ==", flush=True)
            try:
                return action()
            finally:
                if pause:
                    wait_for_enter()

    def _report(self, verb: str, failed: Sequence[str]) -> None:
        if failed:
            append_log(self.status, f"Failed to {verb}: {' '.join(failed)}")

    def create_item(self, name: str) -> None:
        self._report("pull", self._takeover("Pull Model", lambda: self.client.pull_model(name)))

    def delete_items(self, names: Sequence[str]) -> None:
        self._report("delete", self._takeover("Delete Models", lambda: self.client.delete_models(names)))

    def update_items(self, names: Sequence[str]) -> None:
        self._report("update", self._takeover("Update Models", lambda: self.client.update_models(names)))

    def run_foreground(self, item: Item) -> int:
        return self._takeover(f"Run {item.name}", lambda: self.client.run_model(item.name), pause=False)

    def run_service(self, action: str) -> None:
        code = self._takeover(f"Ollama {action}", lambda: self.client.run_service_action(action))
        if code != 0:
            append_log(self.status, f"{action} exited with status {code}")


def run_tui(stdscr: "curses._CursesWindow", client: OllamaClient) -> None:
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    stdscr.keypad(True)
    init_colors()

    status = StatusLog()
    state = MenuState()
    refresh_data(state, client, viewport_height_for(stdscr, state), status)
    commands = CursesCommands(stdscr, client, status)

    while True:
        viewport_height = viewport_height_for(stdscr, state)
        if state.items:
            state.reconcile(viewport_height)
        draw_screen(stdscr, state, viewport_height, status)
        key = stdscr.getch()
        # Outcome messages stay up until the next key press.
        status.current = None
        result = dispatch(key, state, commands, viewport_height)
        if result == DispatchResult.EXIT:
            return
        if result == DispatchResult.REFRESH_DATA:
            refresh_data(state, client, viewport_height_for(stdscr, state), status)


# -- non-interactive commands ---------------------------------------------


def print_model_table(items: Sequence[Item]) -> None:
    if not items:
        print("No models installed.")
        return
    print("    " + render_header())
    for idx, item in enumerate(items, start=1):
        print(f"{idx:>3} " + render_row(item))


def ask_yes_no(question: str, *, default: bool) -> bool:
    hint = "[Y/n]" if default else "[y/N]"
    try:
        answer = input(f"{question} {hint} ").strip().lower()
    except EOFError:
        return False
    if not answer:
        return default
    return answer in ("y", "yes")


def _resolve_name(client: OllamaClient, value: str) -> str:
    """Accept a model name or its 1-based number from ``--list``."""
    if value.isdigit() and int(value) >= 1:
        items = client.fetch_models()
        if int(value) > len(items):
            raise ActionError(f"Invalid model number: {value}")
        return items[int(value) - 1].name
    return value


def run_command_line(args: argparse.Namespace, client: OllamaClient) -> int:
    if args.list:
        print_model_table(client.fetch_models())
        return 0
    if args.pull:
        result = validate_model_name(args.pull)
        if not result.is_valid:
            print(result.error, file=sys.stderr)
            return 1
        return 1 if client.pull_model(result.value) else 0
    if args.update:
        return 1 if client.update_models([_resolve_name(client, args.update)]) else 0
    if args.update_all:
        names = [item.name for item in client.fetch_models()]
        if not names:
            print("No local models found to update.")
            return 0
        return 1 if client.update_models(names) else 0
    if args.delete:
        name = _resolve_name(client, args.delete)
        if not args.yes and not ask_yes_no(f"Are you sure you want to delete the model: {name}?", default=False):
            print("Deletion cancelled.")
            return 1
        return 1 if client.delete_models([name]) else 0
    raise ValueError("no command selected")


def preflight(client: OllamaClient) -> bool:
    """Check the CLI and the API before doing anything else."""
    if not client.is_installed():
        message = "'ollama' command not found. Install it from https://ollama.com and ensure it is on PATH."
        print(handle_error(AppError(message)), file=sys.stderr)
        return False
    if not client.is_responsive():
        message = f"Ollama API is not responsive at {client.config.base_url}."
        print(handle_error(AppError(message)), file=sys.stderr)
        print("    Start it with: sudo systemctl start ollama.service (or run 'ollama serve')", file=sys.stderr)
        return False
    return True


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Browse, pull, update, delete and run local Ollama models.",
        epilog="Run without a command to open the interactive manager.",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("-l", "--list", action="store_true", help="list installed models and exit")
    group.add_argument("-p", "--pull", metavar="MODEL", help="pull a model from the registry")
    group.add_argument("-u", "--update", metavar="MODEL", help="update one installed model (name or number)")
    group.add_argument("-ua", "--update-all", action="store_true", help="update every installed model")
    group.add_argument("-d", "--delete", metavar="MODEL", help="delete one installed model (name or number)")
    parser.add_argument("-y", "--yes", action="store_true", help="do not ask for confirmation")
    parser.add_argument("--host", help="Ollama API host (default: OLLAMA_HOST or localhost)")
    parser.add_argument("--port", help="Ollama API port (default: OLLAMA_PORT or 11434)")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config: ManagerConfig = load_config(host=args.host, port=args.port)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1
    configure_logging(config)
    client = OllamaClient(config)
    logger.info("Ollama Manager using %s", config.base_url)
    if not preflight(client):
        return 1

    if args.list or args.pull or args.update or args.update_all or args.delete:
        try:
            return run_command_line(args, client)
        except (FetchError, ActionError) as exc:
            print(handle_error(AppError(str(exc))), file=sys.stderr)
            return 1
        except KeyboardInterrupt:
            return 130

    locale.setlocale(locale.LC_ALL, "")
    try:
        curses.wrapper(run_tui, client)
    except (TerminalError, curses.error) as exc:
        print(handle_error(AppError(f"Terminal error: {exc}", ErrorSeverity.FATAL)), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 130
    print("Goodbye!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
