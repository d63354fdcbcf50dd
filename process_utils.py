from __future__ import annotations

import atexit
import curses
import logging
import shlex
import subprocess
from contextlib import contextmanager
from typing import Iterator, List, Mapping, Optional

from tui_base import ActionError


logger = logging.getLogger(__name__)

_active_processes: List[subprocess.Popen] = []


def shell_join(parts: List[str]) -> str:
    return " ".join(shlex.quote(str(x)) for x in parts)


def register_process(proc: subprocess.Popen) -> subprocess.Popen:
    if proc not in _active_processes:
        _active_processes.append(proc)
    return proc


def unregister_process(proc: subprocess.Popen) -> None:
    try:
        _active_processes.remove(proc)
    except ValueError:
        pass


def terminate_process(proc: subprocess.Popen, *, timeout: float = 5.0) -> None:
    if proc.poll() is not None:
        return
    try:
        proc.terminate()
        proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired:
        proc.kill()


def cleanup_processes() -> None:
    for proc in list(_active_processes):
        terminate_process(proc)
    _active_processes.clear()


@contextmanager
def managed_process(cmd: List[str], **kwargs) -> Iterator[subprocess.Popen]:
    try:
        proc = subprocess.Popen(cmd, **kwargs)
    except OSError as exc:
        raise ActionError(f"Could not start {cmd[0]}: {exc}") from exc
    register_process(proc)
    try:
        yield proc
    finally:
        unregister_process(proc)


def run_command(cmd: List[str], *, env: Optional[Mapping[str, str]] = None) -> int:
    """Run ``cmd`` attached to the current terminal and return its exit status.

    Ctrl+C stops the child, not the manager; the child is reported as 130.
    """
    logger.info("Running: %s", shell_join(cmd))
    with managed_process(cmd, env=dict(env) if env is not None else None) as proc:
        try:
            return proc.wait()
        except KeyboardInterrupt:
            terminate_process(proc)
            return 130


@contextmanager
def suspended_terminal(stdscr: "curses._CursesWindow | None") -> Iterator[None]:
    """Hand the terminal to a foreground process and restore curses afterwards."""
    if stdscr is None:
        yield
        return
    curses.def_prog_mode()
    curses.endwin()
    try:
        yield
    finally:
        curses.reset_prog_mode()
        stdscr.clear()
        stdscr.refresh()


def wait_for_enter(message: str = "Press Enter to continue...") -> None:
    try:
        input(message)
    except (EOFError, KeyboardInterrupt):
        print()


atexit.register(cleanup_processes)
