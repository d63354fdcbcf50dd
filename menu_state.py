"""Selection and filter state for the interactive model list.

``MenuState`` is the single mutable value threaded through the render loop.
Selections are keyed by model name so that they survive re-filtering and
data refreshes; indices are only used when drawing.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, List, Optional, Set

from constants import ALL_ITEM_NAME
from viewport import max_scroll_offset, reconcile_scroll


@dataclass(frozen=True)
class Item:
    name: str
    size_bytes: int = 0
    modified_at: Optional[date] = None
    is_synthetic: bool = False


ALL_ITEM = Item(name=ALL_ITEM_NAME, is_synthetic=True)


def apply_filter(all_items: Iterable[Item], filter_text: str) -> List[Item]:
    """Case-sensitive substring filter; "All" stays at index 0 if anything exists."""
    real = [item for item in all_items if not item.is_synthetic]
    if not real:
        return []
    if filter_text:
        real = [item for item in real if filter_text in item.name]
    return [ALL_ITEM] + real


@dataclass
class MenuState:
    all_items: List[Item] = field(default_factory=list)
    items: List[Item] = field(default_factory=list)
    selected: Set[str] = field(default_factory=set)
    all_selected: bool = False
    cursor: int = 0
    scroll_offset: int = 0
    filter_text: str = ""
    footer_expanded: bool = False
    fetch_error: str | None = None

    @classmethod
    def from_items(cls, items: Iterable[Item]) -> "MenuState":
        state = cls()
        state.replace_items(items)
        return state

    # -- data -------------------------------------------------------------

    def replace_items(self, items: Iterable[Item], viewport_height: int | None = None) -> None:
        """Swap in a freshly fetched backing set, keeping name-keyed selections."""
        self.all_items = sorted((i for i in items if not i.is_synthetic), key=lambda i: i.name)
        known = {item.name for item in self.all_items}
        self.selected = {name for name in self.selected if name in known}
        if not self.all_items:
            self.all_selected = False
        had_rows = bool(self.items)
        self.fetch_error = None
        self._rebuild(viewport_height)
        if not had_rows and len(self.items) > 1:
            # Start on the first real model rather than on "All".
            self.cursor = 1
            if viewport_height is not None:
                self.reconcile(viewport_height)

    def mark_fetch_failed(self, message: str) -> None:
        self.all_items = []
        self.items = []
        self.cursor = 0
        self.scroll_offset = 0
        self.fetch_error = message

    def _rebuild(self, viewport_height: int | None) -> None:
        self.items = apply_filter(self.all_items, self.filter_text)
        if not self.items:
            self.cursor = 0
            self.scroll_offset = 0
            return
        self.cursor = min(max(0, self.cursor), len(self.items) - 1)
        if viewport_height is not None:
            self.reconcile(viewport_height)

    @property
    def current_item(self) -> Item | None:
        if not self.items:
            return None
        return self.items[self.cursor]

    @property
    def real_items(self) -> List[Item]:
        return [item for item in self.items if not item.is_synthetic]

    # -- filter -----------------------------------------------------------

    def set_filter(self, text: str, viewport_height: int | None = None) -> None:
        self.filter_text = text
        self.scroll_offset = 0
        self._rebuild(viewport_height)

    def clear_filter(self, viewport_height: int | None = None) -> None:
        self.set_filter("", viewport_height)

    # -- cursor and scroll ------------------------------------------------

    def reconcile(self, viewport_height: int) -> None:
        self.scroll_offset = reconcile_scroll(self.cursor, len(self.items), viewport_height, self.scroll_offset)

    def move_cursor(self, delta: int, viewport_height: int) -> None:
        if not self.items:
            return
        self.cursor = min(max(0, self.cursor + delta), len(self.items) - 1)
        self.reconcile(viewport_height)

    def page(self, direction: int, viewport_height: int) -> None:
        """Scroll one viewport up or down; the cursor moves by the same amount."""
        limit = max_scroll_offset(len(self.items), viewport_height)
        self.scroll_offset = min(max(0, self.scroll_offset + direction * viewport_height), limit)
        if self.items:
            self.cursor = min(max(0, self.cursor + direction * viewport_height), len(self.items) - 1)
            self.reconcile(viewport_height)

    def home(self, viewport_height: int) -> None:
        self.scroll_offset = 0
        self.cursor = 0
        if self.items:
            self.reconcile(viewport_height)

    def end(self, viewport_height: int) -> None:
        self.scroll_offset = max_scroll_offset(len(self.items), viewport_height)
        if self.items:
            self.cursor = len(self.items) - 1
            self.reconcile(viewport_height)

    # -- selection --------------------------------------------------------

    def toggle_current(self) -> None:
        item = self.current_item
        if item is None:
            return
        if item.is_synthetic:
            self.all_selected = not self.all_selected
        elif item.name in self.selected:
            self.selected.discard(item.name)
        else:
            self.selected.add(item.name)

    def is_selected(self, item: Item) -> bool:
        if item.is_synthetic:
            return self.all_selected
        return self.all_selected or item.name in self.selected

    def clear_selection(self) -> None:
        self.selected.clear()
        self.all_selected = False

    def resolve_targets(self) -> List[Item]:
        """Items a bulk action applies to; empty means nothing to act on."""
        if self.all_selected and self.items:
            return self.real_items
        chosen = [item for item in self.real_items if item.name in self.selected]
        if chosen:
            return chosen
        item = self.current_item
        if item is None or item.is_synthetic:
            return []
        return [item]
