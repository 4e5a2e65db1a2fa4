"""Compose backend, config, state, and terminal into one interactive session."""

from __future__ import annotations

import logging
import sys

from ..backend import Backend
from ..downloads import DownloadOrchestrator
from ..render import RenderContext, render_frame
from ..state import AppState
from . import config as config_module
from .clipboard import copy_text_to_clipboard
from .config import AppConfig
from .controller import AppController
from .loop import RuntimeLoopCallbacks, run_main_loop
from .session import SessionState
from .terminal import TerminalController

logger = logging.getLogger(__name__)


def run_app(
    backend: Backend,
    initial_prefix: str,
    config: AppConfig,
    session: SessionState,
    config_error: str | None = None,
) -> SessionState:
    """Run the TUI and return the session to persist (final location and history)."""
    stdin_fd = sys.stdin.fileno()
    stdout_fd = sys.stdout.fileno()
    terminal = TerminalController(stdin_fd, stdout_fd)

    state = AppState(preview_width_percent=config.preview_width_percent)
    state.history.load(session.history)
    orchestrator = DownloadOrchestrator(backend, max_workers=config.max_concurrent_downloads)
    controller = AppController(
        state,
        backend,
        config,
        orchestrator,
        config_path=config_module.CONFIG_PATH,
        copy_text=lambda text: copy_text_to_clipboard(text, osc52_fd=stdout_fd),
        terminal_rows=lambda: terminal.size()[1],
    )
    controller.open_initial(initial_prefix, config_error)

    def render(columns: int, rows: int) -> str:
        return render_frame(
            RenderContext(
                state=state,
                width=columns,
                height=rows,
                downloads=orchestrator.sorted_records(),
                overall=orchestrator.overall_progress(),
                destinations=config.download_destinations,
                style=config.style,
            )
        )

    logger.debug("session start at %s", state.location)
    try:
        run_main_loop(
            state,
            terminal,
            stdin_fd,
            RuntimeLoopCallbacks(
                tick=controller.tick,
                render=render,
                handle_key=controller.handle_key,
            ),
        )
    finally:
        orchestrator.shutdown()

    final_location = controller.backend.display_path(state.explorer.prefix)
    logger.debug("session end at %s", final_location)
    return SessionState(last_location=final_location, history=list(state.history.items))
