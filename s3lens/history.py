"""Recently visited locations, most recent first."""

from __future__ import annotations

from .search import rank_labels

HISTORY_LIMIT = 100


def should_add_to_history(prefix: str) -> bool:
    """Skip the root and folders whose last segment is purely numeric.

    Numeric leaf folders are usually pagination or run ids that clutter the
    list without being worth returning to.
    """
    segments = [segment for segment in prefix.strip("/").split("/") if segment]
    if not segments:
        return False
    return not segments[-1].isdigit()


class HistoryTracker:
    """Bounded, de-duplicated location list with its own filter and cursor."""

    def __init__(self, items: list[str] | None = None) -> None:
        self.items: list[str] = []
        self.query = ""
        self.filtered: list[int] = []
        self.cursor = 0
        self.load(items or [])

    def load(self, items: list[str]) -> None:
        deduped: list[str] = []
        for item in items:
            if isinstance(item, str) and item and item not in deduped:
                deduped.append(item)
        self.items = deduped[:HISTORY_LIMIT]
        self._refilter()

    def add(self, location: str) -> None:
        """Move ``location`` to the front, dropping older duplicates and overflow."""
        if location in self.items:
            self.items.remove(location)
        self.items.insert(0, location)
        del self.items[HISTORY_LIMIT:]
        self._refilter()

    def __len__(self) -> int:
        return len(self.items)

    def reset_view(self) -> None:
        self.query = ""
        self.cursor = 0
        self._refilter()

    def set_query(self, query: str) -> None:
        self.query = query
        self._refilter()

    def _refilter(self) -> None:
        self.filtered = rank_labels(self.query, self.items)
        if self.cursor >= len(self.filtered):
            self.cursor = 0

    def move_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1

    def move_down(self) -> None:
        if self.cursor < len(self.filtered) - 1:
            self.cursor += 1

    def selected(self) -> str | None:
        if 0 <= self.cursor < len(self.filtered):
            return self.items[self.filtered[self.cursor]]
        return None

    def visible_items(self) -> list[str]:
        return [self.items[idx] for idx in self.filtered]
