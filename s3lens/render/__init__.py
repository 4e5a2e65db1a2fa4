"""Full-frame ANSI renderer for the explorer/preview split view.

``render_frame`` is side-effect free: it reads state and returns one string
that repaints every row with absolute cursor positioning.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass

from ..backend import PreviewBinary, PreviewError, PreviewText, PreviewTooLarge
from ..downloads import CANCELED, COMPLETE, ERROR as DOWNLOAD_ERROR, DownloadRecord
from ..runtime.config import DownloadDestination
from ..state import DOWNLOAD, PREVIEW, SEARCH, AppState
from ..status import ERROR, INFO, SUCCESS, WARNING
from .ansi import RESET, fit_ansi_line, wrap_ansi_line
from .help import render_help_rows
from .highlight import highlight_lines, sanitize_terminal_text

REVERSE = "\033[7m"
DIM = "\033[2m"
BOLD = "\033[1m"
TITLE_STYLE = "\033[1;38;5;16;48;5;45m"
SELECTED_MARK_STYLE = "\033[38;5;214m"
DIR_STYLE = "\033[1;38;5;75m"
GUTTER_STYLE = "\033[38;5;242m"
VISUAL_LINE_STYLE = "\033[48;5;24m"
SEARCH_HIT_STYLE = "\033[48;5;58m"
SEARCH_CURRENT_STYLE = "\033[30;48;5;220m"
SEVERITY_STYLES = {
    INFO: "\033[38;5;81m",
    SUCCESS: "\033[38;5;114m",
    WARNING: "\033[38;5;214m",
    ERROR: "\033[1;38;5;203m",
}
MAX_PROGRESS_FILES = 5
_SIZE_UNITS = ("B", "KB", "MB", "GB", "TB")


def format_size(size: int) -> str:
    """Human-readable size with 1024 steps; bytes are shown without decimals."""
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_SIZE_UNITS) - 1:
        value /= 1024
        unit += 1
    if unit == 0:
        return f"{int(value)} {_SIZE_UNITS[0]}"
    return f"{value:.2f} {_SIZE_UNITS[unit]}"


@dataclass(frozen=True)
class RenderContext:
    state: AppState
    width: int
    height: int
    downloads: list[DownloadRecord]
    overall: tuple[int, int, int | None]
    destinations: list[DownloadDestination]
    style: str = "monokai"


def _window_start(cursor: int, total: int, rows: int, start_hint: int = 0) -> int:
    """First visible row so ``cursor`` stays on screen, preferring ``start_hint``."""
    if rows <= 0:
        return 0
    start = max(0, start_hint)
    if cursor < start:
        start = cursor
    elif cursor >= start + rows:
        start = cursor - rows + 1
    return max(0, min(start, max(0, total - 1)))


def _styled_row(text: str, width: int, style: str = "") -> str:
    return f"{style}{fit_ansi_line(text, width)}"


# Title and bottom bars


def _mode_label(state: AppState) -> str:
    if state.searching_history:
        return "HISTORY SEARCH"
    label = state.mode.upper()
    if state.preview.search_active:
        label = "PREVIEW SEARCH"
    elif state.preview.visual_active:
        label = "PREVIEW VISUAL"
    return label


def _title_row(ctx: RenderContext) -> str:
    state = ctx.state
    pending = f" {state.pending_key}…" if state.pending_key else ""
    text = f" s3lens  {state.location}  [{_mode_label(state)}]{pending}"
    return _styled_row(text, ctx.width, TITLE_STYLE)


def _prompt_row(ctx: RenderContext) -> str:
    state = ctx.state
    preview = state.preview
    if state.mode == SEARCH:
        target = "history" if state.searching_history else "filter"
        return _styled_row(f" {target}> {state.search_query}█", ctx.width, BOLD)
    if preview.search_active:
        total = len(preview.search_results)
        position = preview.search_selected + 1 if total else 0
        return _styled_row(f" find> {preview.search_query}█  ({position}/{total})", ctx.width, BOLD)
    hints = " ? help  / filter  space select  v visual  s download  r history  tab switch pane"
    return _styled_row(hints, ctx.width, DIM)


def _status_row(ctx: RenderContext) -> str:
    state = ctx.state
    if state.status is not None:
        style = SEVERITY_STYLES.get(state.status.severity, "")
        return _styled_row(f" {state.status.text}", ctx.width, style)
    explorer = state.explorer
    summary = f" {len(explorer.filtered)}/{len(explorer.entries)} entries"
    if explorer.selected_count():
        summary += f"  {explorer.selected_count()} selected"
    return _styled_row(summary, ctx.width, DIM)


# Explorer column


def _entry_row(ctx: RenderContext, view_idx: int, width: int) -> str:
    explorer = ctx.state.explorer
    entry_idx = explorer.filtered[view_idx]
    entry = explorer.entries[entry_idx]
    marker = "●" if entry_idx in explorer.selected else " "
    name = sanitize_terminal_text(entry.name) + ("/" if entry.is_dir else "")
    size = "" if entry.size is None else format_size(entry.size)
    gap = max(1, width - len(name) - len(size) - 3)
    plain = f"{marker} {name}{' ' * gap}{size}"
    if view_idx == explorer.cursor:
        style = REVERSE if ctx.state.focus != PREVIEW else "\033[4m"
        return _styled_row(plain, width, style)
    name_style = DIR_STYLE if entry.is_dir else ""
    mark_style = SELECTED_MARK_STYLE if marker != " " else ""
    text = f"{mark_style}{marker}{RESET} {name_style}{name}{RESET}{' ' * gap}{DIM}{size}{RESET}"
    return _styled_row(text, width)


def _explorer_rows(ctx: RenderContext, rows: int, width: int) -> list[str]:
    explorer = ctx.state.explorer
    header = f" {ctx.state.location}"
    if explorer.selected_count():
        header += f" [{explorer.selected_count()} selected]"
    out = [_styled_row(header, width, BOLD)]
    list_rows = rows - 1
    if not explorer.filtered:
        message = " (no matches)" if explorer.query else " (empty)"
        out.append(_styled_row(message, width, DIM))
    else:
        start = _window_start(explorer.cursor, len(explorer.filtered), list_rows)
        for view_idx in range(start, min(len(explorer.filtered), start + list_rows)):
            out.append(_entry_row(ctx, view_idx, width))
    while len(out) < rows:
        out.append(" " * width)
    return out[:rows]


# Preview column


def _preview_text_rows(ctx: RenderContext, rows: int, width: int, path: str) -> list[str]:
    state = ctx.state
    preview = state.preview
    lines = preview.lines()
    if not lines:
        return [_styled_row(" (empty file)", width, DIM)]
    highlighted = highlight_lines(path, lines, ctx.style)
    gutter = len(str(len(lines)))
    text_width = max(1, width - gutter - 1)
    start = _window_start(preview.cursor, len(lines), rows, preview.scroll)
    visual = preview.visual_range() if preview.visual_active else None
    hits = set(preview.search_results)
    current_hit = preview.search_results[preview.search_selected] if preview.search_results else None

    out: list[str] = []
    idx = start
    while idx < len(lines) and len(out) < rows:
        style = ""
        if state.focus == PREVIEW and idx == preview.cursor:
            style = REVERSE
        elif visual is not None and visual[0] <= idx <= visual[1]:
            style = VISUAL_LINE_STYLE
        elif idx == current_hit:
            style = SEARCH_CURRENT_STYLE
        elif idx in hits:
            style = SEARCH_HIT_STYLE
        body = sanitize_terminal_text(lines[idx]) if style else highlighted[idx]
        chunks = wrap_ansi_line(body, text_width) if state.wrap_text else [body]
        for chunk_no, chunk in enumerate(chunks):
            if len(out) >= rows:
                break
            number = str(idx + 1) if chunk_no == 0 else ""
            prefix = f"{GUTTER_STYLE}{number:>{gutter}}{RESET} "
            out.append(prefix + _styled_row(chunk, text_width, style))
        idx += 1
    return out


def _preview_rows(ctx: RenderContext, rows: int, width: int) -> list[str]:
    preview = ctx.state.preview
    path = preview.current_path
    content = preview.content()
    title = f" {posixpath.basename(path)}" if path else " Preview"
    out = [_styled_row(title, width, BOLD)]
    body_rows = rows - 1
    if content is None:
        entry = ctx.state.explorer.current_entry()
        message = " Directory" if entry is not None and entry.is_dir else " No preview"
        out.append(_styled_row(message, width, DIM))
    elif isinstance(content, PreviewText):
        out.extend(_preview_text_rows(ctx, body_rows, width, path or ""))
    elif isinstance(content, PreviewBinary):
        kind = f", {content.mime}" if content.mime else ""
        out.append(_styled_row(f" Binary file ({format_size(content.size)}{kind})", width, DIM))
    elif isinstance(content, PreviewTooLarge):
        out.append(_styled_row(f" File too large to preview ({format_size(content.size)})", width, DIM))
    elif isinstance(content, PreviewError):
        out.append(_styled_row(f" Error: {content.message}", width, SEVERITY_STYLES[ERROR]))
    while len(out) < rows:
        out.append(" " * width)
    return out[:rows]


# Overlays


def _destination_rows(ctx: RenderContext, rows: int, width: int) -> list[str]:
    state = ctx.state
    count = state.explorer.selected_count()
    out = [
        _styled_row(f" Download {count} file(s) to:", width, BOLD),
        _styled_row(" Enter confirm  Esc cancel", width, DIM),
    ]
    for idx, destination in enumerate(ctx.destinations):
        text = f"  {destination.name}  {destination.path}"
        out.append(_styled_row(text, width, REVERSE if idx == state.download_destination_idx else ""))
    while len(out) < rows:
        out.append(" " * width)
    return out[:rows]


def _history_rows(ctx: RenderContext, rows: int, width: int) -> list[str]:
    history = ctx.state.history
    items = history.visible_items()
    header = f" History ({len(items)}/{len(history)})"
    out = [_styled_row(header, width, BOLD)]
    if not items:
        out.append(_styled_row(" (no matches)", width, DIM))
    else:
        start = _window_start(history.cursor, len(items), rows - 1)
        for idx in range(start, min(len(items), start + rows - 1)):
            style = REVERSE if idx == history.cursor else ""
            out.append(_styled_row(f"  {sanitize_terminal_text(items[idx])}", width, style))
    while len(out) < rows:
        out.append(" " * width)
    return out[:rows]


def _progress_rows(ctx: RenderContext) -> list[str]:
    records = ctx.downloads
    if not records:
        return []
    width = ctx.width
    downloaded, total, percent = ctx.overall
    completed = sum(1 for record in records if record.status == COMPLETE)
    failed = sum(1 for record in records if record.status == DOWNLOAD_ERROR)
    summary = (
        f" Downloads  Files: {completed}/{len(records)}"
        f"  Size: {format_size(downloaded)} / {format_size(total)}"
        f"  Progress: {percent if percent is not None else 0}%"
    )
    if failed:
        summary += f"  Failed: {failed}"
    out = [_styled_row(summary, width, BOLD)]
    for record in records[:MAX_PROGRESS_FILES]:
        name = posixpath.basename(record.path) or record.path
        if record.status == COMPLETE:
            text = f"  ✓ {name} - Complete"
        elif record.status == CANCELED:
            text = f"  ⊘ {name} - Canceled"
        elif record.status == DOWNLOAD_ERROR:
            text = f"  ✗ {name} - Error: {record.error}"
        else:
            file_percent = record.percent()
            shown = f"{file_percent}%" if file_percent is not None else format_size(record.downloaded)
            text = f"  ⬇ {name} {shown}"
        out.append(_styled_row(text, width))
    if len(records) > MAX_PROGRESS_FILES:
        out.append(_styled_row(f"  ...and {len(records) - MAX_PROGRESS_FILES} more", width, DIM))
    return out


def _body_rows(ctx: RenderContext, rows: int) -> list[str]:
    state = ctx.state
    width = ctx.width
    if state.history_active:
        return _history_rows(ctx, rows, width)
    explorer_width = max(10, width * (100 - state.preview_width_percent) // 100)
    preview_width = max(1, width - explorer_width - 1)
    left = _explorer_rows(ctx, rows, explorer_width)
    if state.mode == DOWNLOAD:
        right = _destination_rows(ctx, rows, preview_width)
    else:
        right = _preview_rows(ctx, rows, preview_width)
    return [f"{l}{DIM}│{RESET}{r}" for l, r in zip(left, right)]


def frame_rows(ctx: RenderContext) -> list[str]:
    """Compose every screen row, top to bottom."""
    if ctx.state.show_help:
        return render_help_rows(ctx.width, ctx.height)
    progress = _progress_rows(ctx)
    body_height = max(2, ctx.height - 3 - len(progress))
    rows = [_title_row(ctx)]
    rows.extend(_body_rows(ctx, body_height))
    rows.extend(progress)
    rows.append(_prompt_row(ctx))
    rows.append(_status_row(ctx))
    return rows[: ctx.height]


def render_frame(ctx: RenderContext) -> str:
    """Return the escape sequence that repaints the whole screen."""
    out = ["\033[?25l"]
    for row_no, row in enumerate(frame_rows(ctx)):
        out.append(f"\033[{row_no + 1};1H{row}{RESET}\033[K")
    return "".join(out)
