"""Concurrent, cancellable downloads with progress aggregation.

Each started file gets a daemon supervisor thread that submits the transfer to
a shared bounded pool and then races it against a one-shot cancel handle.
Supervisors never touch ``records``; they only post messages onto a queue that
the control loop drains and applies on its own thread.

Every start gets a fresh generation number carried by its messages, so a
superseded transfer of the same path can never update the newer record.
Transfers into the same destination file run one after another.
"""

from __future__ import annotations

import itertools
import logging
import os
import posixpath
import threading
import time
from collections.abc import Callable
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue

from .backend import Backend
from .status import INFO, SUCCESS, WARNING, StatusMessage

logger = logging.getLogger(__name__)

IN_PROGRESS = "in_progress"
COMPLETE = "complete"
CANCELED = "canceled"
ERROR = "error"

RECORD_RETENTION_SECS = 5.0
DEFAULT_MAX_WORKERS = 4


class TransferCanceled(Exception):
    """Raised from the progress callback to stop a transfer that was canceled."""


@dataclass(frozen=True)
class DownloadUpdate:
    path: str
    downloaded: int
    total: int | None
    generation: int = 0


@dataclass(frozen=True)
class DownloadComplete:
    path: str
    generation: int = 0


@dataclass(frozen=True)
class DownloadCanceled:
    path: str
    generation: int = 0


@dataclass(frozen=True)
class DownloadFailed:
    path: str
    error: str
    generation: int = 0


DownloadMessage = DownloadUpdate | DownloadComplete | DownloadCanceled | DownloadFailed


@dataclass
class DownloadRecord:
    """Progress and outcome of one file; ``cancel_handle`` is set only while in progress."""

    path: str
    downloaded: int = 0
    total: int | None = None
    status: str = IN_PROGRESS
    error: str | None = None
    completed_at: float | None = None
    cancel_handle: Future | None = None
    generation: int = 0

    @property
    def is_terminal(self) -> bool:
        return self.status != IN_PROGRESS

    def percent(self) -> int | None:
        if not self.total:
            return None
        return min(100, self.downloaded * 100 // self.total)


def destination_for(path: str, destination: Path) -> Path:
    """Local target for ``path``: its basename inside ``destination``."""
    name = posixpath.basename(path.rstrip("/")) or path
    return Path(destination) / name


def _remove_partial(target: Path) -> None:
    try:
        os.remove(target)
    except OSError:
        pass


def _settle(settled: Future) -> None:
    if not settled.done():
        settled.set_result(None)


class DownloadOrchestrator:
    """Start, track, cancel, and garbage-collect download records.

    ``max_workers`` caps how many transfers move bytes at once; further files
    stay in progress and queue in the pool until a worker frees up.
    """

    def __init__(
        self,
        backend: Backend,
        *,
        max_workers: int = DEFAULT_MAX_WORKERS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.backend = backend
        self.records: dict[str, DownloadRecord] = {}
        self._clock = clock
        self._messages: Queue[DownloadMessage] = Queue()
        self._executor = ThreadPoolExecutor(
            max_workers=max(1, max_workers),
            thread_name_prefix="s3lens-transfer",
        )
        self._generations = itertools.count(1)
        # Destination file -> future set once the last transfer into it is fully done.
        self._writers: dict[Path, Future] = {}

    # Starting

    def start(self, paths: list[str], destination: Path) -> int:
        """Start one transfer per path into ``destination``; return how many started.

        Restarting a path that is still in progress cancels the earlier transfer.
        """
        backend = self.backend
        for path in paths:
            previous = self.records.get(path)
            if previous is not None and previous.status == IN_PROGRESS:
                handle, previous.cancel_handle = previous.cancel_handle, None
                if handle is not None and not handle.done():
                    handle.set_result(None)
                logger.debug("download restarted %s, canceling earlier transfer", path)

            generation = next(self._generations)
            cancel: Future = Future()
            self.records[path] = DownloadRecord(path=path, cancel_handle=cancel, generation=generation)
            target = destination_for(path, destination)
            predecessor = self._writers.get(target)
            settled: Future = Future()
            self._writers[target] = settled
            logger.debug("download start %s -> %s (generation %d)", path, target, generation)
            supervisor = threading.Thread(
                target=self._supervise,
                args=(backend, path, target, generation, cancel, settled, predecessor),
                name="s3lens-download",
                daemon=True,
            )
            supervisor.start()
        self._writers = {target: done for target, done in self._writers.items() if not done.done()}
        return len(paths)

    def _supervise(
        self,
        backend: Backend,
        path: str,
        target: Path,
        generation: int,
        cancel: Future,
        settled: Future,
        predecessor: Future | None,
    ) -> None:
        messages = self._messages

        if predecessor is not None and not predecessor.done():
            wait([predecessor, cancel], return_when=FIRST_COMPLETED)
            if cancel.done():
                predecessor.add_done_callback(lambda _future: _settle(settled))
                logger.debug("download canceled %s before it started", path)
                messages.put(DownloadCanceled(path, generation))
                return

        def report_progress(downloaded: int, total: int | None) -> None:
            if cancel.done():
                raise TransferCanceled(path)
            messages.put(DownloadUpdate(path, downloaded, total, generation))

        try:
            transfer = self._executor.submit(backend.download, path, target, report_progress)
        except RuntimeError:
            # Pool already shut down.
            _settle(settled)
            messages.put(DownloadCanceled(path, generation))
            return
        done, _pending = wait([transfer, cancel], return_when=FIRST_COMPLETED)

        if transfer in done:
            error = transfer.exception()
            if error is None:
                logger.debug("download complete %s", path)
                messages.put(DownloadComplete(path, generation))
                _settle(settled)
                return
            if not isinstance(error, TransferCanceled):
                logger.debug("download failed %s: %s", path, error)
                messages.put(DownloadFailed(path, str(error), generation))
                _settle(settled)
                return

        transfer.cancel()

        def clean_up(_future: Future) -> None:
            _remove_partial(target)
            _settle(settled)

        # Runs right away when the transfer already finished or never started.
        transfer.add_done_callback(clean_up)
        logger.debug("download canceled %s", path)
        messages.put(DownloadCanceled(path, generation))

    # Message handling

    def drain_messages(self) -> list[DownloadMessage]:
        """Pull every queued message without blocking."""
        out: list[DownloadMessage] = []
        while True:
            try:
                out.append(self._messages.get_nowait())
            except Empty:
                break
        return out

    def apply_message(self, message: DownloadMessage) -> StatusMessage | None:
        """Fold one message into ``records``; return a batch summary once all are done.

        Messages from a superseded start of the same path are dropped.
        """
        record = self.records.get(message.path)
        if isinstance(message, DownloadUpdate):
            if record is None:
                record = DownloadRecord(path=message.path, generation=message.generation)
                self.records[message.path] = record
            elif record.generation != message.generation:
                return None
            record.downloaded = message.downloaded
            record.total = message.total
            return None

        if record is None or record.generation != message.generation:
            return None
        if isinstance(message, DownloadComplete):
            if record.status == CANCELED:
                return None
            record.status = COMPLETE
        elif isinstance(message, DownloadFailed):
            if record.status == CANCELED:
                return None
            record.status = ERROR
            record.error = message.error
        elif isinstance(message, DownloadCanceled):
            if record.status != IN_PROGRESS:
                return None
            record.status = CANCELED
        else:
            return None
        record.completed_at = self._clock()
        record.cancel_handle = None
        return self.batch_summary()

    def process_messages(self) -> StatusMessage | None:
        """Drain and apply all pending messages; return the last batch summary, if any."""
        summary = None
        for message in self.drain_messages():
            result = self.apply_message(message)
            if result is not None:
                summary = result
        return summary

    def batch_summary(self) -> StatusMessage | None:
        if not self.records or any(not record.is_terminal for record in self.records.values()):
            return None
        statuses = [record.status for record in self.records.values()]
        canceled = statuses.count(CANCELED)
        failed = statuses.count(ERROR)
        completed = statuses.count(COMPLETE)
        if canceled:
            return StatusMessage(f"Canceled {canceled} download(s)", INFO)
        if failed:
            return StatusMessage(f"Downloaded {completed} file(s), {failed} failed", WARNING)
        return StatusMessage(f"Downloaded {completed} file(s)", SUCCESS)

    # Cancellation and cleanup

    def cancel_all(self) -> int:
        """Signal every in-progress transfer and mark it canceled right away."""
        count = 0
        now = self._clock()
        for record in self.records.values():
            if record.status != IN_PROGRESS:
                continue
            handle, record.cancel_handle = record.cancel_handle, None
            if handle is not None and not handle.done():
                handle.set_result(None)
            record.status = CANCELED
            record.completed_at = now
            count += 1
        logger.debug("canceled %d download(s)", count)
        return count

    def remove_expired(self, now: float | None = None) -> None:
        """Drop terminal records finished more than ``RECORD_RETENTION_SECS`` ago."""
        current = self._clock() if now is None else now
        expired = [
            path
            for path, record in self.records.items()
            if record.completed_at is not None and current - record.completed_at > RECORD_RETENTION_SECS
        ]
        for path in expired:
            del self.records[path]

    def shutdown(self) -> None:
        self.cancel_all()
        self._executor.shutdown(wait=False, cancel_futures=True)

    # Queries

    def has_active(self) -> bool:
        return any(record.status == IN_PROGRESS for record in self.records.values())

    def overall_progress(self) -> tuple[int, int, int | None]:
        """Summed ``(downloaded, total, percent)`` over every tracked record."""
        downloaded = sum(record.downloaded for record in self.records.values())
        total = sum(record.total or 0 for record in self.records.values())
        percent = min(100, downloaded * 100 // total) if total else None
        return downloaded, total, percent

    def sorted_records(self) -> list[DownloadRecord]:
        return [self.records[path] for path in sorted(self.records)]
