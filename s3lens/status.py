"""Transient status-bar messages with severity."""

from __future__ import annotations

import time
from dataclasses import dataclass, field

INFO = "info"
SUCCESS = "success"
WARNING = "warning"
ERROR = "error"


@dataclass(frozen=True)
class StatusMessage:
    """One status-bar line; expires ``timeout`` seconds after ``created_at``."""

    text: str
    severity: str = INFO
    created_at: float = field(default_factory=time.monotonic)

    def is_expired(self, timeout: float, now: float | None = None) -> bool:
        current = time.monotonic() if now is None else now
        return current - self.created_at >= timeout
