"""Mutable application state shared by the controller, loop, and renderer."""

from __future__ import annotations

from dataclasses import dataclass, field

from .history import HistoryTracker
from .preview import PreviewNavigator
from .selection import SelectionEngine
from .status import StatusMessage

NORMAL = "normal"
SEARCH = "search"
VISUAL = "visual"
HISTORY = "history"
DOWNLOAD = "download"

EXPLORER = "explorer"
PREVIEW = "preview"


@dataclass
class AppState:
    """Everything the control loop mutates between frames.

    ``mode`` is exactly one of the mode constants above. ``searching_history``
    marks the Search sub-state entered from History, which returns to History
    on exit. ``search_query`` feeds either the explorer or the history filter
    depending on that flag.
    """

    explorer: SelectionEngine = field(default_factory=SelectionEngine)
    preview: PreviewNavigator = field(default_factory=PreviewNavigator)
    history: HistoryTracker = field(default_factory=HistoryTracker)
    mode: str = NORMAL
    searching_history: bool = False
    search_query: str = ""
    pending_key: str | None = None
    focus: str = EXPLORER
    show_help: bool = False
    wrap_text: bool = False
    preview_width_percent: int = 50
    download_destination_idx: int = 0
    location: str = ""
    status: StatusMessage | None = None
    dirty: bool = True
    quit_requested: bool = False

    @property
    def preview_focused(self) -> bool:
        return self.focus == PREVIEW

    @property
    def history_active(self) -> bool:
        return self.mode == HISTORY or (self.mode == SEARCH and self.searching_history)
