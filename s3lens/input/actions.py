"""Semantic actions produced by the key decoder."""

from __future__ import annotations

from dataclasses import dataclass

QUIT = "quit"
MOVE_UP = "move_up"
MOVE_DOWN = "move_down"
JUMP_UP = "jump_up"
JUMP_DOWN = "jump_down"
JUMP_TO_BOTTOM = "jump_to_bottom"
JUMP_TO_TOP = "jump_to_top"
NAVIGATE_INTO = "navigate_into"
NAVIGATE_UP = "navigate_up"
ENTER_SEARCH = "enter_search"
EXIT_SEARCH = "exit_search"
APPEND_CHAR = "append_char"
BACKSPACE = "backspace"
TOGGLE_SELECTION = "toggle_selection"
ENTER_VISUAL = "enter_visual"
EXIT_VISUAL = "exit_visual"
ENTER_DOWNLOAD = "enter_download"
EXIT_DOWNLOAD = "exit_download"
CONFIRM_DOWNLOAD = "confirm_download"
ENTER_HISTORY = "enter_history"
ENTER_HISTORY_WITH_SEARCH = "enter_history_with_search"
EXIT_HISTORY = "exit_history"
COPY_PATH = "copy_path"
TOGGLE_WRAP = "toggle_wrap"
FOCUS_PREVIEW = "focus_preview"
FOCUS_EXPLORER = "focus_explorer"
TOGGLE_FOCUS = "toggle_focus"
ENTER_PREVIEW_VISUAL = "enter_preview_visual"
EXIT_PREVIEW_VISUAL = "exit_preview_visual"
YANK_SELECTION = "yank_selection"
INCREASE_PREVIEW_WIDTH = "increase_preview_width"
DECREASE_PREVIEW_WIDTH = "decrease_preview_width"
TOGGLE_HELP = "toggle_help"
ENTER_PREVIEW_SEARCH = "enter_preview_search"
EXIT_PREVIEW_SEARCH = "exit_preview_search"
PREVIEW_SEARCH_NEXT = "preview_search_next"
PREVIEW_SEARCH_PREV = "preview_search_prev"
CONFIRM_PREVIEW_SEARCH = "confirm_preview_search"
CANCEL_DOWNLOADS = "cancel_downloads"
BEGIN_CHORD = "begin_chord"
NONE = "none"

JUMP_STEP = 10


@dataclass(frozen=True)
class Action:
    """One decoded action.

    ``count`` is the row/line step for jump actions; ``char`` carries the typed
    character for ``APPEND_CHAR`` and the first chord character for
    ``BEGIN_CHORD``.
    """

    kind: str
    count: int = 0
    char: str = ""


NO_ACTION = Action(NONE)
