"""Key handling for the model list.

Every key maps to exactly one ``Action``; ``dispatch`` applies it to the
``MenuState`` in place and tells the render loop what to do next.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from keybindings import KEYS
from menu_state import Item, MenuState
from tui_base import ActionError
from validators import validate_model_name

logger = logging.getLogger(__name__)


class Action(Enum):
    MOVE_UP = "move_up"
    MOVE_DOWN = "move_down"
    PAGE_UP = "page_up"
    PAGE_DOWN = "page_down"
    HOME = "home"
    END = "end"
    TOGGLE_SELECT = "toggle_select"
    ADD = "add"
    DELETE = "delete"
    UPDATE = "update"
    ACTIVATE = "activate"
    SET_FILTER = "set_filter"
    CLEAR_FILTER = "clear_filter"
    TOGGLE_FOOTER = "toggle_footer"
    CONFIG = "config"
    STOP = "stop"
    RESTART = "restart"
    INSTALL = "install"
    REFRESH = "refresh"
    RESIZE = "resize"
    QUIT = "quit"
    NOOP = "noop"


class DispatchResult(Enum):
    REDRAW = "redraw"
    REFRESH_DATA = "refresh_data"
    EXIT = "exit"
    NOOP = "noop"


class MenuCommands:
    """What the dispatcher may ask of the outside world.

    The curses front-end implements these with dialogs and the Ollama client;
    tests substitute a recording fake.
    """

    def prompt(self, title: str, initial: str = "") -> Optional[str]:
        """Return the entered text, or ``None`` when the user cancels."""
        raise NotImplementedError

    def confirm(self, question: str, *, default: bool) -> bool:
        raise NotImplementedError

    def notify(self, message: str, *, warning: bool = False) -> None:
        raise NotImplementedError

    def create_item(self, name: str) -> None:
        raise NotImplementedError

    def delete_items(self, names: Sequence[str]) -> None:
        raise NotImplementedError

    def update_items(self, names: Sequence[str]) -> None:
        raise NotImplementedError

    def run_foreground(self, item: Item) -> int:
        raise NotImplementedError

    def run_service(self, action: str) -> None:
        raise NotImplementedError


_KEY_TABLE: Tuple[Tuple[Tuple[int, ...], Action], ...] = (
    (KEYS.NAV_UP, Action.MOVE_UP),
    (KEYS.NAV_DOWN, Action.MOVE_DOWN),
    (KEYS.PAGE_UP, Action.PAGE_UP),
    (KEYS.PAGE_DOWN, Action.PAGE_DOWN),
    (KEYS.HOME, Action.HOME),
    (KEYS.END, Action.END),
    (KEYS.TOGGLE_SELECT, Action.TOGGLE_SELECT),
    (KEYS.ADD, Action.ADD),
    (KEYS.DELETE, Action.DELETE),
    (KEYS.UPDATE, Action.UPDATE),
    (KEYS.ACTIVATE, Action.ACTIVATE),
    (KEYS.REFRESH, Action.REFRESH),
    (KEYS.SET_FILTER, Action.SET_FILTER),
    (KEYS.CLEAR_FILTER, Action.CLEAR_FILTER),
    (KEYS.TOGGLE_FOOTER, Action.TOGGLE_FOOTER),
    (KEYS.CONFIG, Action.CONFIG),
    (KEYS.STOP, Action.STOP),
    (KEYS.RESTART, Action.RESTART),
    (KEYS.INSTALL, Action.INSTALL),
    (KEYS.RESIZE, Action.RESIZE),
    (KEYS.QUIT, Action.QUIT),
)


def action_for_key(key: int) -> Action:
    for keys, action in _KEY_TABLE:
        if key in keys:
            return action
    return Action.NOOP


# (service action, question, default answer) for the footer-only actions.
_SERVICE_PROMPTS: Dict[Action, Tuple[str, str, bool]] = {
    Action.CONFIG: ("config", "Open the Ollama service configuration?", True),
    Action.STOP: ("stop", "Are you sure you want to stop the Ollama service?", False),
    Action.RESTART: ("restart", "Are you sure you want to restart the Ollama service?", True),
    Action.INSTALL: ("install", "This will run the Ollama installer. Continue?", True),
}


def _move(delta: int) -> Callable[[MenuState, MenuCommands, int], DispatchResult]:
    def handler(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
        if not state.items:
            return DispatchResult.NOOP
        state.move_cursor(delta, viewport_height)
        return DispatchResult.REDRAW

    return handler


def _page(direction: int) -> Callable[[MenuState, MenuCommands, int], DispatchResult]:
    def handler(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
        state.page(direction, viewport_height)
        return DispatchResult.REDRAW

    return handler


def _home(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    state.home(viewport_height)
    return DispatchResult.REDRAW


def _end(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    state.end(viewport_height)
    return DispatchResult.REDRAW


def _toggle_select(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    if not state.items:
        return DispatchResult.NOOP
    state.toggle_current()
    state.reconcile(viewport_height)
    return DispatchResult.REDRAW


def _add(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    raw = ctx.prompt("Name of model to pull (e.g., llama3)")
    if raw is None:
        return DispatchResult.REDRAW
    result = validate_model_name(raw)
    if not result.is_valid:
        ctx.notify(result.error or "Invalid model name", warning=True)
        return DispatchResult.REDRAW
    try:
        ctx.create_item(result.value)
    except ActionError as exc:
        ctx.notify(str(exc), warning=True)
    return DispatchResult.REFRESH_DATA


def _bulk(
    state: MenuState,
    ctx: MenuCommands,
    *,
    verb: str,
    default: bool,
    invoke: Callable[[Sequence[str]], None],
) -> DispatchResult:
    targets = state.resolve_targets()
    if not targets:
        ctx.notify(f"No models selected to {verb}.", warning=True)
        return DispatchResult.REDRAW
    names: List[str] = [item.name for item in targets]
    question = f"Are you sure you want to {verb} {len(names)} model(s): {' '.join(names)}?"
    if not ctx.confirm(question, default=default):
        return DispatchResult.REDRAW
    logger.info("%s requested for: %s", verb.capitalize(), ", ".join(names))
    try:
        invoke(names)
    except ActionError as exc:
        ctx.notify(str(exc), warning=True)
        return DispatchResult.REFRESH_DATA
    state.scroll_offset = 0
    state.clear_selection()
    return DispatchResult.REFRESH_DATA


def _delete(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    return _bulk(state, ctx, verb="delete", default=False, invoke=ctx.delete_items)


def _update(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    return _bulk(state, ctx, verb="update", default=True, invoke=ctx.update_items)


def _activate(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    item = state.current_item
    if item is None:
        return DispatchResult.NOOP
    if item.is_synthetic:
        ctx.notify("Cannot run 'All' models. Please select an individual model.", warning=True)
        return DispatchResult.REDRAW
    if not ctx.confirm(f"Run model {item.name}?", default=True):
        return DispatchResult.REDRAW
    try:
        status = ctx.run_foreground(item)
    except ActionError as exc:
        ctx.notify(str(exc), warning=True)
        return DispatchResult.REFRESH_DATA
    if status != 0:
        logger.info("ollama run %s exited with status %s", item.name, status)
    state.scroll_offset = 0
    return DispatchResult.REFRESH_DATA


def _set_filter(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    text = ctx.prompt("Filter by name", state.filter_text)
    if text is None:
        return DispatchResult.REDRAW
    state.set_filter(text, viewport_height)
    return DispatchResult.REFRESH_DATA


def _clear_filter(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    if not state.filter_text:
        return DispatchResult.NOOP
    state.clear_filter(viewport_height)
    return DispatchResult.REFRESH_DATA


def _toggle_footer(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    state.footer_expanded = not state.footer_expanded
    return DispatchResult.REDRAW


def _service(action: Action) -> Callable[[MenuState, MenuCommands, int], DispatchResult]:
    name, question, default = _SERVICE_PROMPTS[action]

    def handler(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
        if not state.footer_expanded:
            return DispatchResult.NOOP
        if not ctx.confirm(question, default=default):
            return DispatchResult.REDRAW
        try:
            ctx.run_service(name)
        except ActionError as exc:
            ctx.notify(str(exc), warning=True)
        state.scroll_offset = 0
        return DispatchResult.REFRESH_DATA

    return handler


def _refresh(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    return DispatchResult.REFRESH_DATA


def _redraw(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    return DispatchResult.REDRAW


def _quit(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    return DispatchResult.EXIT


def _noop(state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    return DispatchResult.NOOP


HANDLERS: Dict[Action, Callable[[MenuState, MenuCommands, int], DispatchResult]] = {
    Action.MOVE_UP: _move(-1),
    Action.MOVE_DOWN: _move(1),
    Action.PAGE_UP: _page(-1),
    Action.PAGE_DOWN: _page(1),
    Action.HOME: _home,
    Action.END: _end,
    Action.TOGGLE_SELECT: _toggle_select,
    Action.ADD: _add,
    Action.DELETE: _delete,
    Action.UPDATE: _update,
    Action.ACTIVATE: _activate,
    Action.SET_FILTER: _set_filter,
    Action.CLEAR_FILTER: _clear_filter,
    Action.TOGGLE_FOOTER: _toggle_footer,
    Action.CONFIG: _service(Action.CONFIG),
    Action.STOP: _service(Action.STOP),
    Action.RESTART: _service(Action.RESTART),
    Action.INSTALL: _service(Action.INSTALL),
    Action.REFRESH: _refresh,
    Action.RESIZE: _redraw,
    Action.QUIT: _quit,
    Action.NOOP: _noop,
}


def dispatch(key: int, state: MenuState, ctx: MenuCommands, viewport_height: int) -> DispatchResult:
    return HANDLERS[action_for_key(key)](state, ctx, viewport_height)
