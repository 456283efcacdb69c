"""Directory walk that collects leftover files and live statistics."""

from __future__ import annotations

import logging
import os
import stat as statmod
from dataclasses import dataclass
from typing import Callable, Iterator

from plexclean.core.aggregator import ScanStatistics
from plexclean.core.cancellation import CancelToken
from plexclean.models.scan_result import CandidateFile, ScanReport, ScanStatus, StatsSnapshot

log = logging.getLogger(__name__)

ProgressCallback = Callable[[StatsSnapshot], None]

ON_ERROR_ABORT = "abort"
ON_ERROR_SKIP = "skip"


class TraversalError(OSError):
    """A directory entry could not be read during the walk."""

    def __init__(self, path: str, cause: OSError | str) -> None:
        reason = (cause.strerror or str(cause)) if isinstance(cause, OSError) else cause
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.cause = cause


@dataclass(frozen=True)
class ScanOptions:
    """Tunables for a scan.

    Args:
        progress_every: Emit progress after this many files (plus once per directory).
        on_error: ``abort`` stops at the first unreadable entry, ``skip`` logs and goes on.
        follow_symlinks: Descend into symlinked directories, visiting each real directory once.
            Symlinks to files are still sized as the link itself.
    """

    progress_every: int = 100
    on_error: str = ON_ERROR_ABORT
    follow_symlinks: bool = False

    def __post_init__(self) -> None:
        if self.on_error not in (ON_ERROR_ABORT, ON_ERROR_SKIP):
            raise ValueError(f"on_error must be '{ON_ERROR_ABORT}' or '{ON_ERROR_SKIP}', got {self.on_error!r}")
        if self.progress_every < 1:
            raise ValueError("progress_every must be at least 1")


class _Cancelled(Exception):
    """Internal signal that unwinds the walk once the token fires."""


class Scanner:
    """Walks one directory tree and feeds a ``ScanStatistics``.

    Entries inside a directory are visited in name order, depth first,
    so two scans of an unchanged tree produce candidates in the same order.
    """

    def __init__(
        self,
        stats: ScanStatistics,
        token: CancelToken,
        on_progress: ProgressCallback | None = None,
        options: ScanOptions | None = None,
    ) -> None:
        self.stats = stats
        self.token = token
        self.on_progress = on_progress
        self.options = options or ScanOptions()
        self.candidates: list[CandidateFile] = []
        self._since_progress = 0
        self._visited: set[tuple[int, int]] = set()

    def run(self, root: str | os.PathLike[str]) -> ScanReport:
        """Walk ``root`` and return the final report. Never raises on I/O errors."""
        root = os.fspath(root)
        status = ScanStatus.OK
        error = ""
        try:
            self._walk(root)
        except _Cancelled:
            status = ScanStatus.CANCELLED
        except TraversalError as exc:
            if self.token.cancelled:
                status = ScanStatus.CANCELLED
            else:
                log.error("Scan of %s failed: %s", root, exc)
                status = ScanStatus.FAILED
                error = str(exc)

        if status is ScanStatus.CANCELLED:
            log.info("Scan of %s cancelled after %d files", root, self.stats.files_scanned)
        self._emit()
        return ScanReport(
            candidates=self.candidates,
            stats=self.stats.snapshot(),
            status=status,
            error=error,
        )

    def _walk(self, root: str) -> None:
        self._check_cancel()
        try:
            st = os.stat(root)
        except OSError as exc:
            raise TraversalError(root, exc) from exc
        if not statmod.S_ISDIR(st.st_mode):
            raise TraversalError(root, "not a directory")

        stack: list[Iterator[os.DirEntry[str]]] = []
        self._enter_dir(root, st, stack)
        while stack:
            entry = next(stack[-1], None)
            if entry is None:
                stack.pop()
                continue
            self._check_cancel()
            try:
                self._visit(entry, stack)
            except TraversalError as exc:
                self._handle_error(exc)

    def _enter_dir(self, path: str, st: os.stat_result, stack: list[Iterator[os.DirEntry[str]]]) -> None:
        if self.options.follow_symlinks:
            key = (st.st_dev, st.st_ino)
            if key in self._visited:
                log.debug("Skipping already visited directory: %s", path)
                return
            self._visited.add(key)

        try:
            with os.scandir(path) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            raise TraversalError(path, exc) from exc

        self.stats.count_dir()
        self._emit()
        stack.append(iter(entries))

    def _visit(self, entry: os.DirEntry[str], stack: list[Iterator[os.DirEntry[str]]]) -> None:
        follow = self.options.follow_symlinks
        try:
            st = entry.stat(follow_symlinks=follow)
        except FileNotFoundError as exc:
            if not (follow and entry.is_symlink()):
                raise TraversalError(entry.path, exc) from exc
            # Dangling link: count the link itself.
            try:
                st = entry.stat(follow_symlinks=False)
            except OSError as lexc:
                raise TraversalError(entry.path, lexc) from lexc
        except OSError as exc:
            raise TraversalError(entry.path, exc) from exc

        if statmod.S_ISDIR(st.st_mode):
            self._enter_dir(entry.path, st, stack)
            return

        size = st.st_size
        if follow and entry.is_symlink():
            # Deleting removes the link, never its target.
            try:
                size = entry.stat(follow_symlinks=False).st_size
            except OSError as exc:
                raise TraversalError(entry.path, exc) from exc

        self.stats.count_file()
        verdict = self.stats.record(entry.name, size)
        if verdict.unwanted:
            self.candidates.append(CandidateFile(path=entry.path, size=size))

        self._since_progress += 1
        if self._since_progress >= self.options.progress_every:
            self._emit()

    def _handle_error(self, exc: TraversalError) -> None:
        if self.options.on_error == ON_ERROR_ABORT:
            raise exc
        log.warning("Skipping unreadable entry %s", exc)

    def _check_cancel(self) -> None:
        if self.token.cancelled:
            raise _Cancelled

    def _emit(self) -> None:
        self._since_progress = 0
        if self.on_progress:
            self.on_progress(self.stats.snapshot())


def scan(
    root: str | os.PathLike[str],
    token: CancelToken | None = None,
    on_progress: ProgressCallback | None = None,
    *,
    stats: ScanStatistics | None = None,
    options: ScanOptions | None = None,
) -> ScanReport:
    """Scan ``root`` for leftover files.

    Args:
        root: Directory to walk.
        token: Cancellation handle checked before every entry.
        on_progress: Receives a ``StatsSnapshot`` per directory and per batch of files.
        stats: Statistics to fill; a fresh instance is created when omitted.
        options: Walk tunables.

    Returns:
        A ``ScanReport``. Cancellation and traversal errors are reported
        through its status rather than raised.
    """
    scanner = Scanner(
        stats=stats if stats is not None else ScanStatistics(),
        token=token or CancelToken(),
        on_progress=on_progress,
        options=options,
    )
    return scanner.run(root)
