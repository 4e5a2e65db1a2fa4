"""Full-screen help modal.

Presentation only: returns the frame rows, the caller writes them.
"""

from __future__ import annotations

from .ansi import RESET, clip_ansi_line, display_width

_KEY = "\033[38;5;229m"
_HEADING = "\033[1;38;5;81m"
_FRAME = "\033[38;5;45m"
_TITLE = "s3lens help"


def _key(label: str) -> str:
    return f"{_KEY}{label}{RESET}"


def _heading(label: str) -> str:
    return f"{_HEADING}{label}{RESET}"


HELP_LINES: tuple[str, ...] = (
    "",
    _heading("Explorer"),
    f"  {_key('j/k')} or {_key('Up/Down')} move   {_key('J/K')} or {_key('Ctrl+D/U')} jump 10",
    f"  {_key('gg')} top   {_key('G')} bottom   {_key('l/Enter')} open   {_key('h')} parent",
    f"  {_key('/')} filter entries   {_key('jj')} or {_key('Esc')} leave filter",
    f"  {_key('Space')} toggle file   {_key('v')} visual range   {_key('s')} download",
    f"  {_key('y')} copy location   {_key('r')} history   {_key('Ctrl+R')} search history",
    f"  {_key('Esc')} cancel running downloads",
    "",
    _heading("Preview"),
    f"  {_key('Tab')} switch pane   {_key('Ctrl+L/H')} focus preview/explorer",
    f"  {_key('j/k')} line   {_key('J/K')} page   {_key('gg/G')} top/bottom",
    f"  {_key('/')} search text   {_key('Ctrl+J/K')} next/prev hit   {_key('Enter')} jump",
    f"  {_key('v')} select lines   {_key('y')} copy selection",
    f"  {_key('H/L')} widen/narrow preview   {_key('w')} toggle wrap",
    "",
    _heading("General"),
    f"  {_key('?')} toggle help   {_key('Ctrl+C/Q')} quit",
)


def render_help_rows(width: int, height: int) -> list[str]:
    """Return ``height`` rows drawing a centered, framed help modal."""
    modal_w = min(84, max(40, width - 10), width)
    modal_h = min(len(HELP_LINES) + 3, height)
    x = max(0, (width - modal_w) // 2)
    y = max(0, (height - modal_h) // 2)
    inner_w = max(1, modal_w - 2)

    rows = [" " * width for _ in range(height)]
    if modal_h < 3:
        return rows
    pad = " " * x
    title = f" {_TITLE} "
    top_rule = "─" * max(0, inner_w - len(title) - 1)
    rows[y] = f"{pad}{_FRAME}╭─{RESET}\033[1m{title}{RESET}{_FRAME}{top_rule}╮{RESET}"
    for i in range(modal_h - 2):
        text = HELP_LINES[i] if i < len(HELP_LINES) else ""
        body = clip_ansi_line(text, inner_w)
        fill = " " * max(0, inner_w - display_width(body))
        rows[y + 1 + i] = f"{pad}{_FRAME}│{RESET}{body}{RESET}{fill}{_FRAME}│{RESET}"
    rows[y + modal_h - 1] = f"{pad}{_FRAME}╰{'─' * inner_w}╯{RESET}"
    return rows
