"""Fixed-width row formatting for the model list."""
from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from constants import ALL_ITEM_LABEL, COLUMNS, SIZES
from menu_state import Item

GIB = 1024 ** 3


def format_size_gb(num_bytes: Optional[int]) -> str:
    if num_bytes is None:
        return "?"
    if num_bytes < 0:
        num_bytes = 0
    return f"{num_bytes / GIB:.2f} GB"


def size_band(num_bytes: int) -> str:
    """Colour band used for the size column: small, medium, large or huge."""
    whole_gb = int(max(0, num_bytes) / GIB)
    if whole_gb >= SIZES.HUGE_GB:
        return "huge"
    if whole_gb >= SIZES.LARGE_GB:
        return "large"
    if whole_gb >= SIZES.MEDIUM_GB:
        return "medium"
    return "small"


def format_date(value: date | datetime | None) -> str:
    if value is None:
        return ""
    return value.strftime("%Y-%m-%d")


def truncate_name(name: str, limit: int = COLUMNS.NAME_MAX) -> str:
    if len(name) <= limit:
        return name
    return name[:limit] + "…"


def render_header() -> str:
    return f"{'MODEL NAME':<{COLUMNS.NAME_WIDTH}} {'SIZE':>{COLUMNS.SIZE_WIDTH}}   {'MODIFIED':<{COLUMNS.DATE_WIDTH}}"


def render_row(item: Item) -> str:
    if item.is_synthetic:
        return f"{ALL_ITEM_LABEL:<{COLUMNS.ROW_WIDTH}}"
    name = truncate_name(item.name)
    size = format_size_gb(item.size_bytes)
    modified = format_date(item.modified_at)
    return f"{name:<{COLUMNS.NAME_WIDTH}} {size:>{COLUMNS.SIZE_WIDTH}}   {modified:<{COLUMNS.DATE_WIDTH}}"


def size_column_offset() -> int:
    return COLUMNS.NAME_WIDTH + 1
