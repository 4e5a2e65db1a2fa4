"""Mode state machine: apply decoded actions to ``AppState``.

The controller is the only writer of explorer, preview, history, and download
records. Listing and preview fetches run inline on the calling thread; downloads
are handed to the orchestrator, whose messages are folded in by ``tick``.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from ..backend import Backend, BackendError, ListResult, PreviewError, create_backend_from_uri, join_prefix
from ..downloads import DownloadOrchestrator
from ..history import should_add_to_history
from ..input import Action, DecodeContext, decode_key
from ..input import actions as act
from ..selection import NOTHING_SELECTED, REJECTED_DIRECTORY
from ..state import DOWNLOAD, EXPLORER, HISTORY, NORMAL, PREVIEW, SEARCH, VISUAL, AppState
from ..status import ERROR, INFO, SUCCESS, WARNING, StatusMessage
from .clipboard import ClipboardError, copy_text_to_clipboard
from .config import AppConfig, clamp_preview_width

logger = logging.getLogger(__name__)

PREVIEW_WIDTH_STEP = 5
PREVIEW_CHROME_ROWS = 10


def _plural_lines(count: int) -> str:
    return "line" if count == 1 else "lines"


class AppController:
    """Route actions by mode and focus to the explorer, preview, history, and downloads."""

    def __init__(
        self,
        state: AppState,
        backend: Backend,
        config: AppConfig,
        orchestrator: DownloadOrchestrator,
        *,
        config_path: Path | str = "",
        copy_text: Callable[[str], object] = copy_text_to_clipboard,
        backend_factory: Callable[[str], tuple[Backend, str]] = create_backend_from_uri,
        terminal_rows: Callable[[], int] = lambda: 24,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.state = state
        self.backend = backend
        self.config = config
        self.orchestrator = orchestrator
        self.config_path = str(config_path)
        self._copy_text = copy_text
        self._backend_factory = backend_factory
        self._terminal_rows = terminal_rows
        self._clock = clock
        self._handlers: dict[str, Callable[[Action], None]] = {
            act.QUIT: self._quit,
            act.MOVE_UP: self._move_up,
            act.MOVE_DOWN: self._move_down,
            act.JUMP_UP: self._jump_up,
            act.JUMP_DOWN: self._jump_down,
            act.JUMP_TO_TOP: self._jump_to_top,
            act.JUMP_TO_BOTTOM: self._jump_to_bottom,
            act.NAVIGATE_INTO: self._navigate_into,
            act.NAVIGATE_UP: self._navigate_up,
            act.ENTER_SEARCH: self._enter_search,
            act.EXIT_SEARCH: self._exit_search,
            act.APPEND_CHAR: self._append_char,
            act.BACKSPACE: self._backspace,
            act.TOGGLE_SELECTION: self._toggle_selection,
            act.ENTER_VISUAL: self._enter_visual,
            act.EXIT_VISUAL: self._exit_visual,
            act.ENTER_DOWNLOAD: self._enter_download,
            act.EXIT_DOWNLOAD: self._exit_download,
            act.CONFIRM_DOWNLOAD: self._confirm_download,
            act.ENTER_HISTORY: self._enter_history,
            act.ENTER_HISTORY_WITH_SEARCH: self._enter_history_with_search,
            act.EXIT_HISTORY: self._exit_history,
            act.COPY_PATH: self._copy_path,
            act.TOGGLE_WRAP: self._toggle_wrap,
            act.FOCUS_PREVIEW: self._focus_preview,
            act.FOCUS_EXPLORER: self._focus_explorer,
            act.TOGGLE_FOCUS: self._toggle_focus,
            act.ENTER_PREVIEW_VISUAL: self._enter_preview_visual,
            act.EXIT_PREVIEW_VISUAL: self._exit_preview_visual,
            act.YANK_SELECTION: self._yank_selection,
            act.INCREASE_PREVIEW_WIDTH: self._increase_preview_width,
            act.DECREASE_PREVIEW_WIDTH: self._decrease_preview_width,
            act.TOGGLE_HELP: self._toggle_help,
            act.ENTER_PREVIEW_SEARCH: self._enter_preview_search,
            act.EXIT_PREVIEW_SEARCH: self._exit_preview_search,
            act.PREVIEW_SEARCH_NEXT: self._preview_search_next,
            act.PREVIEW_SEARCH_PREV: self._preview_search_prev,
            act.CONFIRM_PREVIEW_SEARCH: self._confirm_preview_search,
            act.CANCEL_DOWNLOADS: self._cancel_downloads,
        }

    # Status

    def set_status(self, text: str, severity: str = INFO) -> None:
        self.state.status = StatusMessage(text, severity, created_at=self._clock())
        self.state.dirty = True

    def clear_status(self) -> None:
        if self.state.status is not None:
            self.state.status = None
            self.state.dirty = True

    # Loop entry points

    def decode_context(self) -> DecodeContext:
        state = self.state
        return DecodeContext(
            in_search=state.mode == SEARCH,
            in_history=state.mode == HISTORY,
            in_visual=state.mode == VISUAL,
            in_download=state.mode == DOWNLOAD,
            preview_focused=state.preview_focused,
            preview_visual=state.preview.visual_active,
            preview_search=state.preview.search_active,
            downloads_active=self.orchestrator.has_active(),
            pending_key=state.pending_key,
        )

    def handle_key(self, key: str) -> bool:
        """Decode and apply one key token; return ``True`` once quit was requested."""
        action = decode_key(key, self.config.key_bindings, self.decode_context())
        self.apply(action)
        return self.state.quit_requested

    def apply(self, action: Action) -> None:
        state = self.state
        if action.kind == act.BEGIN_CHORD:
            state.pending_key = action.char
            return
        state.pending_key = None
        handler = self._handlers.get(action.kind)
        if handler is None:
            return
        handler(action)
        state.dirty = True

    def tick(self, now: float | None = None) -> None:
        """Expire the status line, collect finished downloads, and fold in progress."""
        current = self._clock() if now is None else now
        state = self.state
        status = state.status
        if status is not None and status.is_expired(self.config.status_message_timeout_secs, current):
            state.status = None
            state.dirty = True

        before = len(self.orchestrator.records)
        self.orchestrator.remove_expired(current)
        messages = self.orchestrator.drain_messages()
        if messages or len(self.orchestrator.records) != before:
            state.dirty = True
        for message in messages:
            summary = self.orchestrator.apply_message(message)
            if summary is not None:
                self.set_status(summary.text, summary.severity)

    def preview_height(self) -> int:
        return max(1, self._terminal_rows() - PREVIEW_CHROME_ROWS)

    # Listing and preview

    def open_initial(self, prefix: str, config_error: str | None = None) -> None:
        """List the start location, record it in history, and load the first preview."""
        self.state.location = self.backend.display_path(prefix)
        try:
            result = self.backend.list(prefix)
        except BackendError as exc:
            self.set_status(f"Error listing directory: {exc}", ERROR)
        else:
            self.state.explorer.replace_entries(result)
            self._after_listing(result.prefix)
            self._remember(result.prefix)
        if config_error is not None:
            self.set_status(f"Config file error (using defaults): {config_error}", WARNING)
        self.load_preview()

    def _list_into(self, prefix: str, select_name: str | None = None) -> ListResult | None:
        """List ``prefix`` into the explorer; return the listing, or ``None`` after reporting the error."""
        try:
            result = self.backend.list(prefix)
        except BackendError as exc:
            logger.debug("listing %r failed: %s", prefix, exc)
            self.set_status(f"Error: {exc}", ERROR)
            return None
        self.state.explorer.replace_entries(result, select_name=select_name)
        self.clear_status()
        self._after_listing(result.prefix)
        return result

    def _after_listing(self, prefix: str) -> None:
        self.state.location = self.backend.display_path(prefix)

    def _remember(self, prefix: str) -> None:
        if should_add_to_history(prefix):
            self.state.history.add(self.backend.display_path(prefix))

    def load_preview(self) -> None:
        """Show the preview of the selected file, fetching it only when uncached."""
        preview = self.state.preview
        path = self.state.explorer.current_file_path()
        if path is None:
            preview.clear()
            return
        if preview.show(path):
            return
        try:
            content = self.backend.get_preview(path, self.config.preview_max_size)
        except BackendError as exc:
            content = PreviewError(str(exc))
        preview.store(path, content)

    def _explorer_moved(self) -> None:
        self.load_preview()

    # Movement

    def _quit(self, action: Action) -> None:
        self.state.quit_requested = True

    def _move_up(self, action: Action) -> None:
        state = self.state
        if state.mode == DOWNLOAD:
            state.download_destination_idx = max(0, state.download_destination_idx - 1)
        elif state.history_active:
            state.history.move_up()
        elif state.preview_focused:
            state.preview.scroll_up()
        else:
            state.explorer.move_up()
            self._explorer_moved()

    def _move_down(self, action: Action) -> None:
        state = self.state
        if state.mode == DOWNLOAD:
            last = max(0, len(self.config.download_destinations) - 1)
            state.download_destination_idx = min(last, state.download_destination_idx + 1)
        elif state.history_active:
            state.history.move_down()
        elif state.preview_focused:
            state.preview.scroll_down(self.preview_height())
        else:
            state.explorer.move_down()
            self._explorer_moved()

    def _jump_up(self, action: Action) -> None:
        if self.state.preview_focused:
            self.state.preview.page_up(action.count)
        else:
            self.state.explorer.jump_up(action.count)
            self._explorer_moved()

    def _jump_down(self, action: Action) -> None:
        if self.state.preview_focused:
            self.state.preview.page_down(action.count, self.preview_height())
        else:
            self.state.explorer.jump_down(action.count)
            self._explorer_moved()

    def _jump_to_top(self, action: Action) -> None:
        if self.state.preview_focused:
            self.state.preview.jump_to_top()
        else:
            self.state.explorer.jump_to_top()
            self._explorer_moved()

    def _jump_to_bottom(self, action: Action) -> None:
        if self.state.preview_focused:
            self.state.preview.jump_to_bottom(self.preview_height())
        else:
            self.state.explorer.jump_to_bottom()
            self._explorer_moved()

    # Navigation

    def _navigate_into(self, action: Action) -> None:
        state = self.state
        if state.history_active:
            self._navigate_to_history_entry()
            return
        entry = state.explorer.current_entry()
        if entry is None:
            return
        if not entry.is_dir:
            state.focus = PREVIEW
            if state.mode == SEARCH:
                self._leave_search()
            return
        target = join_prefix(state.explorer.prefix, entry.name)
        if state.mode == SEARCH:
            self._leave_search()
        result = self._list_into(target)
        if result is not None:
            self._remember(result.prefix)
            self.load_preview()

    def _navigate_to_history_entry(self) -> None:
        state = self.state
        uri = state.history.selected()
        if uri is None:
            return
        prefix = self.backend.uri_to_prefix(uri)
        if prefix is None:
            try:
                backend, prefix = self._backend_factory(uri)
            except BackendError as exc:
                logger.debug("backend switch to %s failed: %s", uri, exc)
                self.set_status(f"Cannot switch backend: {exc}", ERROR)
                return
            self._switch_backend(backend)
        self._leave_history()
        result = self._list_into(prefix)
        if result is not None:
            self._remember(result.prefix)
            self.load_preview()

    def _switch_backend(self, backend: Backend) -> None:
        logger.debug("switching backend to %s", type(backend).__name__)
        self.backend = backend
        self.orchestrator.backend = backend
        # Cached previews are keyed by backend-relative paths.
        self.state.preview.cache.clear()
        self.state.preview.clear()

    def _navigate_up(self, action: Action) -> None:
        explorer = self.state.explorer
        parent = self.backend.parent(explorer.prefix)
        if parent is None:
            return
        segments = [segment for segment in explorer.prefix.split("/") if segment]
        select_name = segments[-1] if segments else None
        if self._list_into(parent, select_name=select_name) is not None:
            self.load_preview()

    # Search

    def _enter_search(self, action: Action) -> None:
        state = self.state
        state.searching_history = state.mode == HISTORY
        state.mode = SEARCH
        self.clear_status()

    def _exit_search(self, action: Action) -> None:
        self._leave_search()
        self.clear_status()

    def _leave_search(self) -> None:
        state = self.state
        if state.searching_history:
            state.mode = HISTORY
            state.searching_history = False
        else:
            state.mode = NORMAL
        self._set_search_query("", keep_current=True)

    def _set_search_query(self, query: str, keep_current: bool = False) -> None:
        state = self.state
        state.search_query = query
        if state.history_active:
            state.history.set_query(query)
        else:
            state.explorer.set_query(query, keep_current=keep_current)
            self._explorer_moved()

    def _append_char(self, action: Action) -> None:
        state = self.state
        if state.preview.search_active:
            state.preview.append_search_char(action.char)
        elif state.mode == SEARCH:
            self._set_search_query(state.search_query + action.char)
        self.clear_status()

    def _backspace(self, action: Action) -> None:
        state = self.state
        if state.preview.search_active:
            state.preview.backspace_search()
        elif state.mode == SEARCH:
            self._set_search_query(state.search_query[:-1])
        self.clear_status()

    # Selection

    def _report_selection(self) -> None:
        count = self.state.explorer.selected_count()
        if count:
            self.set_status(f"{count} file(s) selected", INFO)
        else:
            self.clear_status()

    def _toggle_selection(self, action: Action) -> None:
        state = self.state
        if state.mode == VISUAL:
            self._leave_visual()
        result = state.explorer.toggle_current()
        if result == REJECTED_DIRECTORY:
            self.set_status("Cannot select directories", WARNING)
            return
        self._report_selection()

    def _enter_visual(self, action: Action) -> None:
        result = self.state.explorer.begin_visual()
        if result == REJECTED_DIRECTORY:
            self.set_status("Cannot select directories", WARNING)
            return
        if result == NOTHING_SELECTED:
            return
        self.state.mode = VISUAL
        self.set_status("-- VISUAL --", INFO)

    def _leave_visual(self) -> None:
        self.state.mode = NORMAL
        self.state.explorer.end_visual()

    def _exit_visual(self, action: Action) -> None:
        self._leave_visual()
        self._report_selection()

    # Downloads

    def _enter_download(self, action: Action) -> None:
        state = self.state
        explorer = state.explorer
        if state.mode == VISUAL:
            self._leave_visual()
            self.clear_status()
        if explorer.selected_count() == 0:
            entry = explorer.current_entry()
            if entry is not None and not entry.is_dir:
                explorer.toggle_current()
            elif entry is not None:
                self.set_status("Cannot download directories. Select files with Space or 'v' first.", WARNING)
        if explorer.selected_count() == 0:
            if explorer.current_entry() is None:
                self.set_status("No files selected. Select files with Space or 'v' first.", INFO)
            return
        if not self.config.download_destinations:
            self.set_status(f"No download destinations configured. Edit {self.config_path}", WARNING)
            return
        state.mode = DOWNLOAD
        state.download_destination_idx = 0

    def _exit_download(self, action: Action) -> None:
        self.state.mode = NORMAL
        self.clear_status()

    def _confirm_download(self, action: Action) -> None:
        state = self.state
        destinations = self.config.download_destinations
        if not 0 <= state.download_destination_idx < len(destinations):
            return
        target_dir = Path(destinations[state.download_destination_idx].path).expanduser()
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self.set_status(f"Failed to create directory {target_dir}: {exc}", ERROR)
            return
        state.mode = NORMAL
        paths = state.explorer.selected_paths()
        started = self.orchestrator.start(paths, target_dir)
        logger.debug("started %d download(s) into %s", started, target_dir)
        state.explorer.clear_selection()

    def _cancel_downloads(self, action: Action) -> None:
        canceled = self.orchestrator.cancel_all()
        if canceled:
            self.set_status(f"Canceled {canceled} download(s)", INFO)

    # History

    def _enter_history(self, action: Action) -> None:
        state = self.state
        if not len(state.history):
            return
        state.mode = HISTORY
        state.searching_history = False
        state.search_query = ""
        state.history.reset_view()

    def _enter_history_with_search(self, action: Action) -> None:
        self._enter_history(action)
        if self.state.mode == HISTORY:
            self._enter_search(action)

    def _leave_history(self) -> None:
        state = self.state
        state.mode = NORMAL
        state.searching_history = False
        state.search_query = ""
        state.history.reset_view()

    def _exit_history(self, action: Action) -> None:
        self._leave_history()
        self.clear_status()

    # Clipboard

    def _copy_path(self, action: Action) -> None:
        path = self.backend.display_path(self.state.explorer.prefix)
        try:
            self._copy_text(path)
        except ClipboardError as exc:
            self.set_status(f"Failed to copy: {exc}", ERROR)
            return
        self.set_status(f"Copied to clipboard: {path}", SUCCESS)

    def _yank_selection(self, action: Action) -> None:
        preview = self.state.preview
        selected = preview.visual_text()
        if selected is None:
            return
        text, count = selected
        try:
            self._copy_text(text)
        except ClipboardError as exc:
            self.set_status(f"Failed to copy: {exc}", ERROR)
        else:
            self.set_status(f"Copied {count} {_plural_lines(count)} to clipboard", SUCCESS)
        preview.exit_visual()

    # Layout and focus

    def _toggle_wrap(self, action: Action) -> None:
        state = self.state
        state.wrap_text = not state.wrap_text
        self.set_status("Text wrapping enabled" if state.wrap_text else "Text wrapping disabled", INFO)

    def _focus_preview(self, action: Action) -> None:
        self.state.focus = PREVIEW

    def _focus_explorer(self, action: Action) -> None:
        self.state.focus = EXPLORER

    def _toggle_focus(self, action: Action) -> None:
        state = self.state
        state.focus = EXPLORER if state.focus == PREVIEW else PREVIEW

    def _increase_preview_width(self, action: Action) -> None:
        state = self.state
        state.preview_width_percent = clamp_preview_width(state.preview_width_percent + PREVIEW_WIDTH_STEP)

    def _decrease_preview_width(self, action: Action) -> None:
        state = self.state
        state.preview_width_percent = clamp_preview_width(state.preview_width_percent - PREVIEW_WIDTH_STEP)

    def _toggle_help(self, action: Action) -> None:
        self.state.show_help = not self.state.show_help

    # Preview visual and search

    def _enter_preview_visual(self, action: Action) -> None:
        self.state.preview.enter_visual()

    def _exit_preview_visual(self, action: Action) -> None:
        self.state.preview.exit_visual()

    def _enter_preview_search(self, action: Action) -> None:
        self.state.preview.begin_search()

    def _exit_preview_search(self, action: Action) -> None:
        self.state.preview.clear_search()

    def _preview_search_next(self, action: Action) -> None:
        self.state.preview.search_next(self.preview_height())

    def _preview_search_prev(self, action: Action) -> None:
        self.state.preview.search_prev(self.preview_height())

    def _confirm_preview_search(self, action: Action) -> None:
        self.state.preview.confirm_search(self.preview_height())
