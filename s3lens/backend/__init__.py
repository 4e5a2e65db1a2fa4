"""Storage backend contract and shared listing/preview types.

The explorer core only talks to backends through ``Backend``: listing a
prefix, fetching a bounded preview, streaming a download, and mapping prefixes
to display URIs. Concrete variants live in ``local`` and ``s3``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int | None], None]


class BackendError(Exception):
    """Listing, transfer, or backend-construction failure."""


@dataclass(frozen=True)
class Entry:
    """One listed item under a prefix."""

    name: str
    is_dir: bool
    size: int | None = None
    modified: str | None = None


@dataclass(frozen=True)
class ListResult:
    """Entries of one prefix plus the canonical form of that prefix."""

    entries: list[Entry]
    prefix: str


@dataclass(frozen=True)
class PreviewText:
    text: str


@dataclass(frozen=True)
class PreviewBinary:
    size: int
    mime: str | None = None


@dataclass(frozen=True)
class PreviewTooLarge:
    size: int


@dataclass(frozen=True)
class PreviewError:
    message: str


PreviewContent = PreviewText | PreviewBinary | PreviewTooLarge | PreviewError


def join_prefix(prefix: str, name: str) -> str:
    """Join a prefix and an entry name with ``/``; the root prefix is empty."""
    if not prefix:
        return name
    return f"{prefix}/{name}"


def sort_entries(entries: list[Entry]) -> list[Entry]:
    """Order directories first, then by name."""
    return sorted(entries, key=lambda entry: (not entry.is_dir, entry.name))


class Backend:
    """Capability set every storage backend provides.

    ``list`` and ``download`` raise ``BackendError``; ``get_preview`` folds
    failures into ``PreviewError`` so the preview pane can show them inline.
    """

    def list(self, prefix: str) -> ListResult:
        raise NotImplementedError

    def get_preview(self, path: str, max_size: int) -> PreviewContent:
        raise NotImplementedError

    def download(
        self,
        path: str,
        destination: Path,
        progress: ProgressCallback | None = None,
    ) -> None:
        raise NotImplementedError

    def display_path(self, prefix: str) -> str:
        raise NotImplementedError

    def parent(self, prefix: str) -> str | None:
        raise NotImplementedError

    def uri_to_prefix(self, uri: str) -> str | None:
        """Return the prefix for ``uri`` when it belongs to this backend, else ``None``."""
        raise NotImplementedError


def create_backend_from_uri(uri: str) -> tuple[Backend, str]:
    """Build a backend for a display URI and return it with the prefix to list."""
    if uri.startswith("s3://"):
        from .s3 import S3Backend, parse_s3_uri

        bucket, prefix = parse_s3_uri(uri)
        logger.debug("creating s3 backend for bucket %r", bucket)
        return S3Backend(bucket), prefix
    if uri.startswith("local://"):
        from .local import LocalBackend

        path = Path(uri[len("local://"):])
        logger.debug("creating local backend rooted at %s", path)
        return LocalBackend(path), ""
    raise BackendError(f"Unsupported URI scheme: {uri}")


__all__ = [
    "Backend",
    "BackendError",
    "Entry",
    "ListResult",
    "PreviewBinary",
    "PreviewContent",
    "PreviewError",
    "PreviewText",
    "PreviewTooLarge",
    "ProgressCallback",
    "create_backend_from_uri",
    "join_prefix",
    "sort_entries",
]
