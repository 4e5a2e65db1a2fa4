"""Preview cache plus cursor, scroll, visual-range, and in-content search state.

The cursor line always stays inside ``[0, line_count - 1]`` (``0`` for empty
or non-text previews); the scroll offset follows the cursor. When jumping to
the end or to a search hit, the offset is capped so no more than
``MAX_TRAILING_BLANK_LINES`` empty rows show below the last line.
"""

from __future__ import annotations

from .backend import PreviewContent, PreviewText

MAX_TRAILING_BLANK_LINES = 4
SEARCH_RESULT_TOP_MARGIN = 5


def split_preview_lines(text: str) -> list[str]:
    """Split on newlines, dropping one trailing empty line and CR line endings."""
    lines = text.split("\n")
    if lines and lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def max_scroll_offset(line_count: int, visible_height: int) -> int:
    """Largest offset that leaves at most ``MAX_TRAILING_BLANK_LINES`` blank rows."""
    shown = visible_height - MAX_TRAILING_BLANK_LINES
    if shown > 0 and line_count >= shown:
        return line_count - shown
    return 0


class PreviewNavigator:
    """Per-session preview cache and navigation over the displayed file."""

    def __init__(self) -> None:
        self.cache: dict[str, PreviewContent] = {}
        self._lines: dict[str, list[str]] = {}
        self.current_path: str | None = None
        self.scroll = 0
        self.cursor = 0
        self.visual_active = False
        self.visual_anchor = 0
        self.search_active = False
        self.search_query = ""
        self.search_results: list[int] = []
        self.search_selected = 0

    # Cache and current document

    def is_cached(self, path: str) -> bool:
        return path in self.cache

    def store(self, path: str, content: PreviewContent) -> None:
        self.cache[path] = content
        self._lines.pop(path, None)
        self.current_path = path
        self.reset_position()

    def show(self, path: str) -> bool:
        """Display an already-cached path; return ``False`` if it is not cached."""
        if path not in self.cache:
            return False
        if path != self.current_path:
            self.current_path = path
            self.reset_position()
        return True

    def clear(self) -> None:
        self.current_path = None
        self.reset_position()

    def content(self) -> PreviewContent | None:
        if self.current_path is None:
            return None
        return self.cache.get(self.current_path)

    def lines(self) -> list[str]:
        """Text lines of the current preview; empty for non-text previews."""
        path = self.current_path
        if path is None:
            return []
        content = self.cache.get(path)
        if not isinstance(content, PreviewText):
            return []
        cached = self._lines.get(path)
        if cached is None:
            cached = split_preview_lines(content.text)
            self._lines[path] = cached
        return cached

    def line_count(self) -> int:
        return len(self.lines())

    def reset_position(self) -> None:
        self.scroll = 0
        self.cursor = 0
        self.visual_active = False
        self.visual_anchor = 0
        self.clear_search()

    # Scrolling

    def scroll_up(self) -> None:
        if self.cursor > 0:
            self.cursor -= 1
            if self.cursor < self.scroll:
                self.scroll = self.cursor

    def scroll_down(self, visible_height: int) -> None:
        total = self.line_count()
        if total and self.cursor < total - 1:
            self.cursor += 1
            height = max(1, visible_height)
            if self.cursor > self.scroll + height - 1:
                self.scroll = self.cursor - (height - 1)

    def page_up(self, step: int) -> None:
        self.cursor = max(0, self.cursor - step)
        self.scroll = max(0, self.scroll - step)

    def page_down(self, step: int, visible_height: int) -> None:
        total = self.line_count()
        if not total:
            return
        self.cursor = min(self.cursor + step, total - 1)
        self.scroll = min(self.scroll + step, max(0, total - visible_height))

    def jump_to_top(self) -> None:
        self.cursor = 0
        self.scroll = 0

    def jump_to_bottom(self, visible_height: int) -> None:
        total = self.line_count()
        if not total:
            return
        self.cursor = total - 1
        self.scroll = max_scroll_offset(total, visible_height)

    # Visual range and yank

    def enter_visual(self) -> None:
        self.clear_search()
        self.visual_active = True
        self.visual_anchor = self.cursor

    def exit_visual(self) -> None:
        self.visual_active = False

    def visual_range(self) -> tuple[int, int]:
        return min(self.visual_anchor, self.cursor), max(self.visual_anchor, self.cursor)

    def visual_text(self) -> tuple[str, int] | None:
        """Lines inside the visual range joined by newlines, with their count."""
        if not isinstance(self.content(), PreviewText):
            return None
        start, end = self.visual_range()
        selected = self.lines()[start : end + 1]
        return "\n".join(selected), len(selected)

    # In-content search

    def begin_search(self) -> None:
        self.visual_active = False
        self.search_active = True
        self.search_query = ""
        self._update_search_results()

    def append_search_char(self, char: str) -> None:
        self.search_query += char
        self._update_search_results()

    def backspace_search(self) -> None:
        self.search_query = self.search_query[:-1]
        self._update_search_results()

    def clear_search(self) -> None:
        self.search_active = False
        self.search_query = ""
        self.search_results = []
        self.search_selected = 0

    def _update_search_results(self) -> None:
        self.search_selected = 0
        if not self.search_query:
            self.search_results = []
            return
        needle = self.search_query.lower()
        self.search_results = [idx for idx, line in enumerate(self.lines()) if needle in line.lower()]

    def search_next(self, visible_height: int) -> None:
        if not self.search_results:
            return
        self.search_selected = (self.search_selected + 1) % len(self.search_results)
        self._jump_to_search_result(visible_height)

    def search_prev(self, visible_height: int) -> None:
        if not self.search_results:
            return
        self.search_selected = (self.search_selected - 1) % len(self.search_results)
        self._jump_to_search_result(visible_height)

    def confirm_search(self, visible_height: int) -> None:
        """Jump to the selected hit and leave search mode, keeping the cursor there."""
        self._jump_to_search_result(visible_height)
        self.clear_search()

    def _jump_to_search_result(self, visible_height: int) -> None:
        if not self.search_results:
            return
        line = self.search_results[self.search_selected]
        self.cursor = line
        top = max(0, line - SEARCH_RESULT_TOP_MARGIN)
        self.scroll = min(top, max_scroll_offset(self.line_count(), visible_height))
