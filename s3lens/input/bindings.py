"""Configurable key-binding table.

Binding strings use a small human-friendly grammar (``Ctrl-u``, ``Shift-k``,
``Enter``, ``G``) and are normalized here to the tokens ``read_key`` emits, so
matching at dispatch time is plain set membership.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields

logger = logging.getLogger(__name__)

_NAMED_KEYS: dict[str, str] = {
    "enter": "ENTER",
    "return": "ENTER",
    "tab": "TAB",
    "backspace": "BACKSPACE",
    "esc": "ESC",
    "escape": "ESC",
    "space": " ",
    "up": "UP",
    "down": "DOWN",
    "left": "LEFT",
    "right": "RIGHT",
    "home": "HOME",
    "end": "END",
    "pageup": "PAGE_UP",
    "pagedown": "PAGE_DOWN",
    "delete": "DELETE",
    "del": "DELETE",
}

# Terminals deliver these control combos as dedicated bytes.
_CTRL_ALIASES: dict[str, str] = {
    "CTRL_I": "TAB",
    "CTRL_M": "ENTER",
}


def parse_key_spec(spec: str) -> str | None:
    """Normalize one binding string to a key token, or ``None`` if invalid."""
    if not spec:
        return None
    if len(spec) == 1:
        return spec
    if spec == "-":
        return spec
    *modifiers, key = spec.split("-")
    if not key:
        # "Ctrl--" style bindings for the minus key itself.
        key = "-"
        modifiers = modifiers[:-1]
    modifier_set = {modifier.lower() for modifier in modifiers}
    if not modifier_set <= {"ctrl", "alt", "shift"}:
        return None

    if len(key) == 1:
        base = key
    else:
        named = _NAMED_KEYS.get(key.lower())
        if named is None:
            return None
        base = named

    if "ctrl" in modifier_set:
        if len(base) == 1 and base.isalpha():
            token = f"CTRL_{base.upper()}"
            return _CTRL_ALIASES.get(token, token)
        if len(base) > 1:
            return f"CTRL_{base}"
        return None
    if "alt" in modifier_set:
        if len(base) > 1:
            return f"ALT_{base}"
        return None
    if "shift" in modifier_set:
        if len(base) == 1:
            return base.upper()
        return f"SHIFT_{base}"
    return base


def parse_key_specs(specs: Iterable[str], *, action: str = "") -> frozenset[str]:
    """Normalize a list of binding strings, dropping (and logging) invalid ones."""
    tokens: set[str] = set()
    for spec in specs:
        token = parse_key_spec(str(spec))
        if token is None:
            logger.warning("ignoring unknown key binding %r for %s", spec, action or "action")
            continue
        tokens.add(token)
    return frozenset(tokens)


def parse_chord(sequence: str) -> tuple[str, str] | None:
    """Return a two-character chord as ``(first, second)``, else ``None``."""
    if len(sequence) != 2:
        return None
    return sequence[0], sequence[1]


@dataclass(frozen=True)
class KeyBindings:
    """Action name to key tokens, plus the two two-character chord sequences."""

    quit: frozenset[str] = frozenset({"CTRL_C", "CTRL_Q"})
    move_up: frozenset[str] = frozenset({"UP", "k"})
    move_down: frozenset[str] = frozenset({"DOWN", "j"})
    jump_up: frozenset[str] = frozenset({"CTRL_U", "K"})
    jump_down: frozenset[str] = frozenset({"CTRL_D", "J"})
    jump_to_bottom: frozenset[str] = frozenset({"G", "END"})
    navigate_into: frozenset[str] = frozenset({"ENTER", "RIGHT", "l"})
    navigate_up: frozenset[str] = frozenset({"LEFT", "h"})
    download_mode: frozenset[str] = frozenset({"s", "S"})
    history_mode: frozenset[str] = frozenset({"r", "R"})
    history_mode_with_search: frozenset[str] = frozenset({"CTRL_R"})
    copy_path: frozenset[str] = frozenset({"y", "Y"})
    wrap_text: frozenset[str] = frozenset({"w"})
    focus_preview: frozenset[str] = frozenset({"CTRL_L"})
    focus_explorer: frozenset[str] = frozenset({"CTRL_H"})
    toggle_focus: frozenset[str] = frozenset({"TAB"})
    preview_visual_mode: frozenset[str] = frozenset({"v"})
    yank_selection: frozenset[str] = frozenset({"y"})
    jump_to_top: str = "gg"
    exit_search_mode: str = "jj"

    @classmethod
    def from_mapping(cls, data: Mapping[str, object]) -> KeyBindings:
        """Build bindings from a config mapping; unknown or bad fields keep defaults."""
        overrides: dict[str, object] = {}
        for spec_field in fields(cls):
            value = data.get(spec_field.name)
            if value is None:
                continue
            if spec_field.name in {"jump_to_top", "exit_search_mode"}:
                if isinstance(value, str) and parse_chord(value) is not None:
                    overrides[spec_field.name] = value
                else:
                    logger.warning("ignoring invalid chord %r for %s", value, spec_field.name)
                continue
            if isinstance(value, str):
                value = [value]
            if not isinstance(value, list):
                logger.warning("ignoring non-list key binding for %s", spec_field.name)
                continue
            overrides[spec_field.name] = parse_key_specs(value, action=spec_field.name)
        return cls(**overrides)
