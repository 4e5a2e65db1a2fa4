"""Local filesystem backend.

Prefixes are ``/``-separated paths relative to the configured root; the empty
prefix is the root itself.
"""

from __future__ import annotations

import logging
import mimetypes
import os
from datetime import datetime
from pathlib import Path, PurePosixPath

from . import (
    Backend,
    BackendError,
    Entry,
    ListResult,
    PreviewBinary,
    PreviewContent,
    PreviewError,
    PreviewText,
    PreviewTooLarge,
    ProgressCallback,
    sort_entries,
)

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024
URI_SCHEME = "local://"


def _format_mtime(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M:%S")


class LocalBackend(Backend):
    """Browse a directory tree on the local disk."""

    def __init__(self, root: Path) -> None:
        root = Path(root).expanduser()
        if not root.exists():
            raise BackendError(f"Root directory does not exist: {root}")
        if not root.is_dir():
            raise BackendError(f"Root path is not a directory: {root}")
        self.root = root.resolve()

    def _resolve(self, prefix: str) -> Path:
        prefix = prefix.strip("/")
        if not prefix:
            return self.root
        return self.root / prefix

    def list(self, prefix: str) -> ListResult:
        path = self._resolve(prefix)
        logger.debug("listing %s", path)
        entries: list[Entry] = []
        try:
            with os.scandir(path) as it:
                for item in it:
                    try:
                        stat = item.stat()
                        is_dir = item.is_dir()
                    except OSError:
                        # Dangling symlinks and races with deletion.
                        continue
                    entries.append(
                        Entry(
                            name=item.name,
                            is_dir=is_dir,
                            size=None if is_dir else stat.st_size,
                            modified=_format_mtime(stat.st_mtime),
                        )
                    )
        except OSError as exc:
            raise BackendError(f"Failed to read directory: {path}: {exc.strerror or exc}") from exc
        return ListResult(entries=sort_entries(entries), prefix=prefix.strip("/"))

    def get_preview(self, path: str, max_size: int) -> PreviewContent:
        file_path = self._resolve(path)
        if not file_path.exists():
            return PreviewError("File not found")
        if not file_path.is_file():
            return PreviewError("Not a file")
        try:
            size = file_path.stat().st_size
            if size > max_size:
                return PreviewTooLarge(size=size)
            raw = file_path.read_bytes()
        except OSError as exc:
            return PreviewError(str(exc))
        try:
            return PreviewText(raw.decode("utf-8"))
        except UnicodeDecodeError:
            mime, _encoding = mimetypes.guess_type(file_path.name)
            return PreviewBinary(size=size, mime=mime)

    def download(
        self,
        path: str,
        destination: Path,
        progress: ProgressCallback | None = None,
    ) -> None:
        source = self._resolve(path)
        try:
            total = source.stat().st_size
            downloaded = 0
            with source.open("rb") as src, Path(destination).open("wb") as dst:
                while True:
                    chunk = src.read(CHUNK_SIZE)
                    if not chunk:
                        break
                    dst.write(chunk)
                    downloaded += len(chunk)
                    if progress is not None:
                        progress(downloaded, total)
        except OSError as exc:
            raise BackendError(f"Failed to copy {source}: {exc.strerror or exc}") from exc

    def display_path(self, prefix: str) -> str:
        return f"{URI_SCHEME}{self._resolve(prefix)}"

    def parent(self, prefix: str) -> str | None:
        prefix = prefix.strip("/")
        if not prefix:
            return None
        parent = str(PurePosixPath(prefix).parent)
        return "" if parent == "." else parent

    def uri_to_prefix(self, uri: str) -> str | None:
        if not uri.startswith(URI_SCHEME):
            return None
        target = Path(uri[len(URI_SCHEME):])
        try:
            relative = target.relative_to(self.root)
        except ValueError:
            return None
        text = relative.as_posix()
        return "" if text == "." else text
