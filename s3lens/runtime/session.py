"""Last location and history persisted between runs."""

from __future__ import annotations

import contextlib
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from platformdirs import user_state_dir

from ..history import HISTORY_LIMIT

logger = logging.getLogger(__name__)

STATE_FILENAME = "state.json"
STATE_PATH = Path(user_state_dir("s3lens", appauthor=False)) / STATE_FILENAME


@dataclass
class SessionState:
    last_location: str | None = None
    history: list[str] = field(default_factory=list)


def load_session() -> SessionState:
    """Return the saved session, or an empty one when missing or corrupt."""
    try:
        data = json.loads(STATE_PATH.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return SessionState()
    except (OSError, ValueError) as exc:
        logger.warning("ignoring unreadable session state %s: %s", STATE_PATH, exc)
        return SessionState()
    if not isinstance(data, dict):
        return SessionState()

    last_location = data.get("last_location")
    if not isinstance(last_location, str) or not last_location:
        last_location = None
    raw_history = data.get("history")
    history = []
    if isinstance(raw_history, list):
        history = [item for item in raw_history if isinstance(item, str) and item][:HISTORY_LIMIT]
    return SessionState(last_location=last_location, history=history)


def save_session(state: SessionState) -> None:
    """Write the session atomically: temp file in the same directory, then replace."""
    payload = {
        "last_location": state.last_location,
        "history": list(state.history[:HISTORY_LIMIT]),
    }
    try:
        STATE_PATH.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".state-", suffix=".json", dir=STATE_PATH.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(json.dumps(payload, indent=2) + "\n")
            os.replace(tmp_name, STATE_PATH)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise
    except OSError as exc:
        logger.warning("cannot save session state %s: %s", STATE_PATH, exc)
