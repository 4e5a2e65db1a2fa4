"""Best-effort clipboard copy: tmux buffer, platform tools, then OSC 52."""

from __future__ import annotations

import base64
import logging
import os
import shutil
import subprocess
import sys

logger = logging.getLogger(__name__)


class ClipboardError(Exception):
    """No clipboard mechanism accepted the text."""


def _command_candidates() -> list[list[str]]:
    candidates: list[list[str]] = []
    if os.environ.get("TMUX"):
        candidates.append(["tmux", "load-buffer", "-w", "-"])
    if sys.platform == "darwin":
        candidates.append(["pbcopy"])
    elif os.name == "nt":
        candidates.append(["clip"])
    else:
        candidates.extend(
            [
                ["wl-copy"],
                ["xclip", "-selection", "clipboard"],
                ["xsel", "--clipboard", "--input"],
            ]
        )
    return candidates


def osc52_sequence(text: str) -> bytes:
    """Terminal escape asking the emulator to place ``text`` on the clipboard."""
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"\x1b]52;c;{encoded}\x07".encode("ascii")


def copy_text_to_clipboard(text: str, *, osc52_fd: int | None = None) -> str:
    """Copy ``text`` and return the mechanism used.

    Raises ``ClipboardError`` with the last failure reason when nothing worked.
    ``osc52_fd`` enables the escape-sequence fallback on that terminal fd.
    """
    if not text:
        raise ClipboardError("nothing to copy")

    reason = "no clipboard tool found"
    for command in _command_candidates():
        if shutil.which(command[0]) is None:
            continue
        try:
            proc = subprocess.run(
                command,
                input=text,
                text=True,
                capture_output=True,
                check=False,
                timeout=2,
            )
        except (OSError, subprocess.SubprocessError) as exc:
            reason = f"{command[0]}: {exc}"
            logger.debug("clipboard command %s failed: %s", command[0], exc)
            continue
        if proc.returncode == 0:
            return command[0]
        reason = f"{command[0]} exited with {proc.returncode}"
        logger.debug("clipboard command %s exited with %d", command[0], proc.returncode)

    if osc52_fd is not None:
        try:
            os.write(osc52_fd, osc52_sequence(text))
        except OSError as exc:
            reason = f"OSC 52: {exc}"
        else:
            return "osc52"
    raise ClipboardError(reason)
