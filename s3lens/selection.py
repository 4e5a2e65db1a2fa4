"""Explorer cursor, fuzzy-filtered view, and multi-file selection.

Indices come in two flavors here: *entry* indices point into ``entries`` and
are what the selection set stores; *view* indices point into ``filtered`` and
are what the cursor and the visual anchor use.
"""

from __future__ import annotations

from .backend import Entry, ListResult, join_prefix
from .search import rank_labels

TOGGLED = "toggled"
REJECTED_DIRECTORY = "directory"
NOTHING_SELECTED = "empty"


class SelectionEngine:
    """Own the current listing and everything the cursor touches."""

    def __init__(self) -> None:
        self.prefix = ""
        self.entries: list[Entry] = []
        self.query = ""
        self.filtered: list[int] = []
        self.cursor = 0
        self.selected: set[int] = set()
        self.visual_anchor: int | None = None

    # Listing and filtering

    def replace_entries(self, result: ListResult, select_name: str | None = None) -> None:
        """Swap in a new listing, clearing selection; optionally land on ``select_name``."""
        self.entries = list(result.entries)
        self.prefix = result.prefix
        self.cursor = 0
        self.clear_selection()
        self._refilter()
        if select_name is None:
            return
        for view_idx, entry_idx in enumerate(self.filtered):
            if self.entries[entry_idx].name == select_name:
                self.cursor = view_idx
                break

    def set_query(self, query: str, keep_current: bool = False) -> None:
        """Refilter by ``query``.

        With ``keep_current`` the cursor follows the entry it was on when that
        entry is still visible, instead of keeping its view position.
        """
        current = self.current_entry_index() if keep_current else None
        self.query = query
        self._refilter()
        if current is not None and current in self.filtered:
            self.cursor = self.filtered.index(current)

    def _refilter(self) -> None:
        names = [entry.name for entry in self.entries]
        self.filtered = rank_labels(self.query, names)
        self._clamp_cursor()

    def _clamp_cursor(self) -> None:
        if not self.filtered:
            self.cursor = 0
        else:
            self.cursor = max(0, min(self.cursor, len(self.filtered) - 1))

    # Cursor

    def current_entry_index(self) -> int | None:
        if 0 <= self.cursor < len(self.filtered):
            return self.filtered[self.cursor]
        return None

    def current_entry(self) -> Entry | None:
        entry_idx = self.current_entry_index()
        return None if entry_idx is None else self.entries[entry_idx]

    def current_file_path(self) -> str | None:
        """Full path of the entry under the cursor when it is a file."""
        entry = self.current_entry()
        if entry is None or entry.is_dir:
            return None
        return join_prefix(self.prefix, entry.name)

    def move_to(self, view_idx: int) -> None:
        self.cursor = view_idx
        self._clamp_cursor()
        if self.visual_anchor is not None:
            self.resync_visual()

    def move_up(self) -> None:
        self.move_to(self.cursor - 1)

    def move_down(self) -> None:
        self.move_to(self.cursor + 1)

    def jump_up(self, count: int) -> None:
        self.move_to(self.cursor - count)

    def jump_down(self, count: int) -> None:
        self.move_to(self.cursor + count)

    def jump_to_top(self) -> None:
        self.move_to(0)

    def jump_to_bottom(self) -> None:
        self.move_to(len(self.filtered) - 1)

    # Selection

    def toggle_current(self) -> str:
        """Flip selection of the entry under the cursor; directories are rejected."""
        entry_idx = self.current_entry_index()
        if entry_idx is None:
            return NOTHING_SELECTED
        if self.entries[entry_idx].is_dir:
            return REJECTED_DIRECTORY
        if entry_idx in self.selected:
            self.selected.discard(entry_idx)
        else:
            self.selected.add(entry_idx)
        return TOGGLED

    def begin_visual(self) -> str:
        """Anchor a visual range at the cursor and seed the selection with it."""
        entry_idx = self.current_entry_index()
        if entry_idx is None:
            return NOTHING_SELECTED
        if self.entries[entry_idx].is_dir:
            return REJECTED_DIRECTORY
        self.visual_anchor = self.cursor
        self.selected.add(entry_idx)
        return TOGGLED

    def end_visual(self) -> None:
        self.visual_anchor = None

    def visual_range(self) -> tuple[int, int] | None:
        if self.visual_anchor is None:
            return None
        return min(self.visual_anchor, self.cursor), max(self.visual_anchor, self.cursor)

    def resync_visual(self) -> None:
        """Rebuild the selection as exactly the files inside the visual range."""
        span = self.visual_range()
        if span is None:
            return
        low, high = span
        self.selected.clear()
        for view_idx in range(low, high + 1):
            if view_idx >= len(self.filtered):
                break
            entry_idx = self.filtered[view_idx]
            if not self.entries[entry_idx].is_dir:
                self.selected.add(entry_idx)

    def clear_selection(self) -> None:
        self.selected.clear()
        self.visual_anchor = None

    def selected_count(self) -> int:
        return len(self.selected)

    def selected_paths(self) -> list[str]:
        """Full paths of selected files, sorted."""
        return sorted(
            join_prefix(self.prefix, self.entries[entry_idx].name)
            for entry_idx in self.selected
            if entry_idx < len(self.entries) and not self.entries[entry_idx].is_dir
        )
