"""Mode-aware key decoding with two-key chord resolution.

``decode_key`` is a pure function: given one key token, the binding table, and
a snapshot of mode/focus flags (including any pending chord character), it
returns exactly one ``Action``. The caller owns the pending-chord state and
clears it whenever the returned action is not ``BEGIN_CHORD``.
"""

from __future__ import annotations

from dataclasses import dataclass

from . import actions as act
from .actions import Action, NO_ACTION
from .bindings import KeyBindings, parse_chord
from .key_registry import KeyComboBinding, KeyComboRegistry


@dataclass(frozen=True)
class DecodeContext:
    """Mode and focus flags the decoder needs for one key."""

    in_search: bool = False
    in_history: bool = False
    in_visual: bool = False
    in_download: bool = False
    preview_focused: bool = False
    preview_visual: bool = False
    preview_search: bool = False
    downloads_active: bool = False
    pending_key: str | None = None


def _printable(key: str) -> str | None:
    if len(key) == 1 and key.isprintable():
        return key
    return None


def _fixed(kind: str, count: int = 0):
    action = Action(kind, count=count)
    return lambda: action


def _chord_completes(sequence: str, pending: str | None, key: str) -> bool:
    chord = parse_chord(sequence)
    if chord is None or pending is None:
        return False
    return pending == chord[0] and key == chord[1]


def _chord_start(sequence: str, pending: str | None, key: str) -> Action | None:
    chord = parse_chord(sequence)
    if chord is None or pending is not None:
        return None
    if key == chord[0]:
        return Action(act.BEGIN_CHORD, char=chord[0])
    return None


def _decode_search(key: str, bindings: KeyBindings, ctx: DecodeContext) -> Action:
    if _chord_completes(bindings.exit_search_mode, ctx.pending_key, key):
        return Action(act.EXIT_SEARCH)
    registry: KeyComboRegistry[Action] = KeyComboRegistry()
    registry.register_bindings(
        KeyComboBinding(("ESC",), _fixed(act.EXIT_SEARCH)),
        KeyComboBinding(("CTRL_J", "DOWN"), _fixed(act.MOVE_DOWN)),
        KeyComboBinding(("CTRL_K", "UP"), _fixed(act.MOVE_UP)),
        KeyComboBinding(("ENTER", "RIGHT"), _fixed(act.NAVIGATE_INTO)),
        KeyComboBinding(("BACKSPACE",), _fixed(act.BACKSPACE)),
    )
    action = registry.dispatch(key)
    if action is not None:
        return action
    begin = _chord_start(bindings.exit_search_mode, ctx.pending_key, key)
    if begin is not None:
        return begin
    char = _printable(key)
    if char is not None:
        return Action(act.APPEND_CHAR, char=char)
    return NO_ACTION


def _decode_history(key: str, bindings: KeyBindings) -> Action:
    registry: KeyComboRegistry[Action] = KeyComboRegistry()
    registry.register_bindings(
        KeyComboBinding(("ESC",), _fixed(act.EXIT_HISTORY)),
        KeyComboBinding(("/",), _fixed(act.ENTER_SEARCH)),
        KeyComboBinding.of(bindings.move_up, _fixed(act.MOVE_UP)),
        KeyComboBinding.of(bindings.move_down, _fixed(act.MOVE_DOWN)),
        KeyComboBinding.of(bindings.navigate_into, _fixed(act.NAVIGATE_INTO)),
    )
    return registry.dispatch(key) or NO_ACTION


def _decode_download(key: str, bindings: KeyBindings) -> Action:
    registry: KeyComboRegistry[Action] = KeyComboRegistry()
    registry.register_bindings(
        KeyComboBinding(("ESC",), _fixed(act.EXIT_DOWNLOAD)),
        KeyComboBinding.of(bindings.move_up, _fixed(act.MOVE_UP)),
        KeyComboBinding.of(bindings.move_down, _fixed(act.MOVE_DOWN)),
        KeyComboBinding.of(bindings.navigate_into, _fixed(act.CONFIRM_DOWNLOAD)),
    )
    return registry.dispatch(key) or NO_ACTION


def _movement_bindings(bindings: KeyBindings) -> tuple[KeyComboBinding[Action], ...]:
    return (
        KeyComboBinding.of(bindings.move_up, _fixed(act.MOVE_UP)),
        KeyComboBinding.of(bindings.move_down, _fixed(act.MOVE_DOWN)),
        KeyComboBinding.of(bindings.jump_up, _fixed(act.JUMP_UP, act.JUMP_STEP)),
        KeyComboBinding.of(bindings.jump_down, _fixed(act.JUMP_DOWN, act.JUMP_STEP)),
    )


def _decode_visual(key: str, bindings: KeyBindings, ctx: DecodeContext) -> Action:
    registry: KeyComboRegistry[Action] = KeyComboRegistry()
    registry.register_bindings(
        KeyComboBinding(("ESC", "v"), _fixed(act.EXIT_VISUAL)),
        KeyComboBinding.of(bindings.download_mode, _fixed(act.ENTER_DOWNLOAD)),
        KeyComboBinding((" ",), _fixed(act.TOGGLE_SELECTION)),
        *_movement_bindings(bindings),
        KeyComboBinding.of(bindings.jump_to_bottom, _fixed(act.JUMP_TO_BOTTOM)),
    )
    action = registry.dispatch(key)
    if action is not None:
        return action
    return _chord_start(bindings.jump_to_top, ctx.pending_key, key) or NO_ACTION


def _decode_preview_search(key: str) -> Action:
    registry: KeyComboRegistry[Action] = KeyComboRegistry()
    registry.register_bindings(
        KeyComboBinding(("ESC",), _fixed(act.EXIT_PREVIEW_SEARCH)),
        KeyComboBinding(("CTRL_J", "DOWN"), _fixed(act.PREVIEW_SEARCH_NEXT)),
        KeyComboBinding(("CTRL_K", "UP"), _fixed(act.PREVIEW_SEARCH_PREV)),
        KeyComboBinding(("ENTER",), _fixed(act.CONFIRM_PREVIEW_SEARCH)),
        KeyComboBinding(("BACKSPACE",), _fixed(act.BACKSPACE)),
    )
    action = registry.dispatch(key)
    if action is not None:
        return action
    char = _printable(key)
    if char is not None:
        return Action(act.APPEND_CHAR, char=char)
    return NO_ACTION


def _decode_normal(key: str, bindings: KeyBindings, ctx: DecodeContext) -> Action:
    registry: KeyComboRegistry[Action] = KeyComboRegistry()
    registry.register_binding(KeyComboBinding(("?",), _fixed(act.TOGGLE_HELP)))
    if not ctx.preview_focused:
        registry.register_bindings(
            KeyComboBinding(("/",), _fixed(act.ENTER_SEARCH)),
            KeyComboBinding((" ",), _fixed(act.TOGGLE_SELECTION)),
            KeyComboBinding(("v",), _fixed(act.ENTER_VISUAL)),
        )
    elif ctx.preview_search:
        return registry.dispatch(key) or _decode_preview_search(key)
    else:
        if not ctx.preview_visual:
            registry.register_binding(KeyComboBinding(("/",), _fixed(act.ENTER_PREVIEW_SEARCH)))
            registry.register_binding(
                KeyComboBinding.of(bindings.preview_visual_mode, _fixed(act.ENTER_PREVIEW_VISUAL))
            )
        else:
            registry.register_bindings(
                KeyComboBinding(("ESC",), _fixed(act.EXIT_PREVIEW_VISUAL)),
                KeyComboBinding.of(bindings.yank_selection, _fixed(act.YANK_SELECTION)),
            )
        registry.register_bindings(
            KeyComboBinding(("H",), _fixed(act.INCREASE_PREVIEW_WIDTH)),
            KeyComboBinding(("L",), _fixed(act.DECREASE_PREVIEW_WIDTH)),
        )

    registry.register_bindings(
        *_movement_bindings(bindings),
        KeyComboBinding.of(bindings.jump_to_bottom, _fixed(act.JUMP_TO_BOTTOM)),
        KeyComboBinding.of(bindings.navigate_into, _fixed(act.NAVIGATE_INTO)),
        KeyComboBinding.of(
            bindings.navigate_up,
            _fixed(act.FOCUS_EXPLORER if ctx.preview_focused else act.NAVIGATE_UP),
        ),
        KeyComboBinding.of(bindings.download_mode, _fixed(act.ENTER_DOWNLOAD)),
        KeyComboBinding.of(bindings.history_mode, _fixed(act.ENTER_HISTORY)),
    )
    if not ctx.preview_focused:
        registry.register_binding(
            KeyComboBinding.of(bindings.history_mode_with_search, _fixed(act.ENTER_HISTORY_WITH_SEARCH))
        )
    registry.register_bindings(
        KeyComboBinding.of(bindings.copy_path, _fixed(act.COPY_PATH)),
        KeyComboBinding.of(bindings.wrap_text, _fixed(act.TOGGLE_WRAP)),
        KeyComboBinding.of(bindings.focus_preview, _fixed(act.FOCUS_PREVIEW)),
        KeyComboBinding.of(bindings.focus_explorer, _fixed(act.FOCUS_EXPLORER)),
        KeyComboBinding.of(bindings.toggle_focus, _fixed(act.TOGGLE_FOCUS)),
    )
    action = registry.dispatch(key)
    if action is not None:
        return action
    return _chord_start(bindings.jump_to_top, ctx.pending_key, key) or NO_ACTION


def _modal_active(ctx: DecodeContext) -> bool:
    return (
        ctx.in_search
        or ctx.in_history
        or ctx.in_download
        or ctx.in_visual
        or ctx.preview_visual
        or ctx.preview_search
    )


def decode_key(key: str, bindings: KeyBindings, ctx: DecodeContext) -> Action:
    """Translate one key token into an ``Action`` for the current mode.

    Quit bindings win in every mode. A pending chord character either completes
    its chord on the matching second key or is dropped, in which case ``key``
    is decoded as an ordinary key in this same call.
    """
    if not key or key.startswith("MOUSE"):
        return NO_ACTION
    if key in bindings.quit:
        return Action(act.QUIT)
    if key == "ESC" and ctx.downloads_active and not _modal_active(ctx):
        return Action(act.CANCEL_DOWNLOADS)

    if not ctx.in_search and not ctx.in_history:
        if _chord_completes(bindings.jump_to_top, ctx.pending_key, key):
            return Action(act.JUMP_TO_TOP)

    if ctx.in_search:
        return _decode_search(key, bindings, ctx)
    if ctx.in_history:
        return _decode_history(key, bindings)
    if ctx.in_download:
        return _decode_download(key, bindings)
    if ctx.in_visual and not ctx.preview_focused:
        return _decode_visual(key, bindings, ctx)
    return _decode_normal(key, bindings, ctx)
