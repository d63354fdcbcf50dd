"""Viewport sizing and scroll reconciliation for the model list."""
from __future__ import annotations

from typing import List, Sequence, TypeVar

from constants import CHROME

T = TypeVar("T")


def footer_line_count(footer_expanded: bool) -> int:
    return CHROME.FOOTER_EXPANDED if footer_expanded else CHROME.FOOTER_COLLAPSED


def compute_height(terminal_height: int, footer_lines: int) -> int:
    return max(1, terminal_height - (CHROME.FIXED_LINES + footer_lines))


def max_scroll_offset(item_count: int, viewport_height: int) -> int:
    return max(0, item_count - viewport_height)


def reconcile_scroll(cursor: int, item_count: int, viewport_height: int, scroll_offset: int) -> int:
    """Return the scroll offset that keeps ``cursor`` inside the viewport."""
    offset = scroll_offset
    if cursor >= offset + viewport_height:
        offset = cursor - viewport_height + 1
    elif cursor < offset:
        offset = cursor
    offset = min(max(0, offset), max_scroll_offset(item_count, viewport_height))
    if item_count <= viewport_height:
        offset = 0
    return offset


def visible_slice(items: Sequence[T], scroll_offset: int, viewport_height: int) -> List[T]:
    return list(items[scroll_offset : scroll_offset + viewport_height])
