"""Preview text sanitization and Pygments highlighting."""

from __future__ import annotations

import logging
import re

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import TextLexer, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "monokai"

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f]")

_FORMATTERS: dict[str, Terminal256Formatter] = {}
_HIGHLIGHTED: dict[tuple[str, str, int], list[str]] = {}


def sanitize_terminal_text(source: str) -> str:
    """Escape terminal control bytes to avoid side effects (bell, cursor moves, etc.)."""
    if _CONTROL_RE.search(source) is None:
        return source

    out: list[str] = []
    for ch in source:
        code = ord(ch)
        if ch in {"\n", "\r", "\t"}:
            out.append(ch)
            continue
        # C0 controls + DEL + C1 controls.
        if code < 32 or code == 127 or 0x80 <= code <= 0x9F:
            out.append(f"\\x{code:02x}")
            continue
        out.append(ch)
    return "".join(out)


def normalize_style(style: str) -> str:
    try:
        get_style_by_name(style)
    except ClassNotFound:
        logger.debug("unknown pygments style %r, using %s", style, DEFAULT_STYLE)
        return DEFAULT_STYLE
    return style


def _formatter_for_style(style: str) -> Terminal256Formatter:
    formatter = _FORMATTERS.get(style)
    if formatter is None:
        formatter = Terminal256Formatter(style=normalize_style(style))
        _FORMATTERS[style] = formatter
    return formatter


def highlight_lines(path: str, lines: list[str], style: str = DEFAULT_STYLE) -> list[str]:
    """Return one ANSI-colored string per input line.

    The lexer comes from the file name; unknown names render as plain text.
    Results are cached per path, style, and line count.
    """
    key = (path, style, len(lines))
    cached = _HIGHLIGHTED.get(key)
    if cached is not None:
        return cached

    safe_lines = [sanitize_terminal_text(line) for line in lines]
    try:
        lexer = get_lexer_for_filename(path.rsplit("/", 1)[-1], stripnl=False, ensurenl=False)
    except ClassNotFound:
        lexer = TextLexer(stripnl=False, ensurenl=False)
    rendered = highlight("\n".join(safe_lines), lexer, _formatter_for_style(style))
    out = rendered.split("\n")
    if len(out) < len(safe_lines):
        out.extend(safe_lines[len(out) :])
    out = out[: len(safe_lines)]
    _HIGHLIGHTED[key] = out
    return out
