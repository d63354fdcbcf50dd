from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class LayoutBreakpoints:
    NARROW_MIN_WIDTH: int = 40
    MIN_HEIGHT: int = 8


@dataclass(frozen=True)
class UIDefaults:
    LOG_HISTORY: int = 200
    MESSAGE_MS: int = 1500
    WARNING_MS: int = 2000
    TITLE: str = "Ollama Manager"


@dataclass(frozen=True)
class ListChrome:
    # banner + header + top divider + bottom divider
    FIXED_LINES: int = 4
    FOOTER_COLLAPSED: int = 2
    FOOTER_EXPANDED: int = 4


@dataclass(frozen=True)
class RowColumns:
    NAME_WIDTH: int = 41
    NAME_MAX: int = 40
    SIZE_WIDTH: int = 10
    DATE_WIDTH: int = 10
    ROW_WIDTH: int = 65


@dataclass(frozen=True)
class SizeBands:
    # Thresholds in whole GiB, compared against the truncated size.
    MEDIUM_GB: int = 3
    LARGE_GB: int = 6
    HUGE_GB: int = 9


LAYOUT = LayoutBreakpoints()
UI = UIDefaults()
CHROME = ListChrome()
COLUMNS = RowColumns()
SIZES = SizeBands()

ALL_ITEM_NAME = "All"
ALL_ITEM_LABEL = "All Models"
