"""Main interactive event loop for the terminal UI.

Each iteration expires stale status text, folds in download progress,
repaints when dirty, then waits briefly for one key. Feature logic lives in
the injected callbacks.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..input import read_key
from ..state import AppState
from .terminal import TerminalController

KEY_POLL_TIMEOUT_MS = 100


@dataclass(frozen=True)
class RuntimeLoopCallbacks:
    """Injected operations used by ``run_main_loop``.

    ``handle_key`` returns ``True`` when the session should end.
    """

    tick: Callable[[], None]
    render: Callable[[int, int], str]
    handle_key: Callable[[str], bool]


def run_main_loop(
    state: AppState,
    terminal: TerminalController,
    stdin_fd: int,
    callbacks: RuntimeLoopCallbacks,
) -> None:
    """Run the TUI until a quit action occurs."""
    ops = callbacks
    last_size: tuple[int, int] | None = None
    with terminal.raw_mode():
        while True:
            ops.tick()
            size = terminal.size()
            if size != last_size:
                last_size = size
                state.dirty = True
            if state.dirty:
                columns, rows = size
                terminal.write(ops.render(columns, rows))
                state.dirty = False

            try:
                key = read_key(stdin_fd, timeout_ms=KEY_POLL_TIMEOUT_MS)
            except KeyboardInterrupt:
                continue
            if key == "":
                continue
            if ops.handle_key(key):
                break
