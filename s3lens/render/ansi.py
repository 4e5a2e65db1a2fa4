"""ANSI-aware width measurement, clipping, and wrapping.

Escape sequences never count toward width; tabs expand to 8-column stops and
East Asian wide characters take two cells.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8
RESET = "\033[0m"


def char_display_width(ch: str, col: int) -> int:
    """Terminal column width of ``ch`` when drawn at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    col = 0
    for ch in ANSI_ESCAPE_RE.sub("", text):
        col += char_display_width(ch, col)
    return col


def _cells(text: str):
    """Yield ``(chunk, width)`` pairs; escapes come through with width 0."""
    col = 0
    i = 0
    n = len(text)
    while i < n:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                yield match.group(0), 0
                i = match.end()
                continue
        ch = text[i]
        width = char_display_width(ch, col)
        yield (" " * width if ch == "\t" else ch), width
        col += width
        i += 1


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns, keeping escapes."""
    if max_cols <= 0 or not text:
        return ""
    out: list[str] = []
    col = 0
    for chunk, width in _cells(text):
        if width and col + width > max_cols:
            break
        out.append(chunk)
        col += width
    return "".join(out)


def fit_ansi_line(text: str, width: int) -> str:
    """Clip to ``width`` then pad with spaces so the line fills it exactly."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped)) + RESET


def wrap_ansi_line(text: str, width: int) -> list[str]:
    """Break a styled line into chunks of at most ``width`` columns."""
    if width <= 0 or not text:
        return [""]
    wrapped: list[str] = []
    chunk: list[str] = []
    col = 0
    for piece, piece_width in _cells(text):
        if piece_width and col + piece_width > width and col:
            wrapped.append("".join(chunk))
            chunk = []
            col = 0
        chunk.append(piece)
        col += piece_width
    wrapped.append("".join(chunk))
    return wrapped
