"""Scan-then-delete lifecycle orchestration."""

from __future__ import annotations

import enum
import logging
import os
import threading
from typing import Callable

from plexclean.core.aggregator import ScanStatistics
from plexclean.core.cancellation import CancelToken
from plexclean.core.classifier import FileClassifier
from plexclean.core.eraser import DeleteProgressCallback, delete_files
from plexclean.core.scanner import ProgressCallback, ScanOptions, Scanner
from plexclean.models.clean_result import DeletionOutcome
from plexclean.models.scan_result import CandidateFile, ScanReport, ScanStatus, StatsSnapshot

log = logging.getLogger(__name__)

ScanCompleteCallback = Callable[[ScanReport], None]
DeleteCompleteCallback = Callable[[DeletionOutcome], None]


class SessionState(enum.Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    SCAN_COMPLETE = "scan_complete"
    DELETING = "deleting"


class SessionStateError(RuntimeError):
    """Raised when an operation is not valid in the current session state."""


class CleanupSession:
    """Owns one scan generation and runs its phases on a worker thread.

    Only one phase runs at a time. A new scan cancels and joins the
    previous phase and discards its statistics and candidates. Deletion
    is only accepted once a scan has completed successfully. Completion
    callbacks are invoked exactly once per phase, including after a
    cancellation, normally from the worker thread.
    """

    def __init__(
        self,
        classifier: FileClassifier | None = None,
        options: ScanOptions | None = None,
    ) -> None:
        self.classifier = classifier or FileClassifier()
        self.options = options or ScanOptions()
        self._lock = threading.Lock()
        self._state = SessionState.IDLE
        self._token: CancelToken | None = None
        self._worker: threading.Thread | None = None
        self._stats: ScanStatistics | None = None
        self._report: ScanReport | None = None
        self._root: str | None = None

    @property
    def state(self) -> SessionState:
        with self._lock:
            return self._state

    @property
    def cancel_requested(self) -> bool:
        with self._lock:
            return self._token is not None and self._token.cancelled

    @property
    def root(self) -> str | None:
        return self._root

    @property
    def last_report(self) -> ScanReport | None:
        """Report of the current generation's scan, once it has finished."""
        with self._lock:
            return self._report

    @property
    def candidates(self) -> list[CandidateFile]:
        with self._lock:
            return list(self._report.candidates) if self._report else []

    def snapshot(self) -> StatsSnapshot:
        """Live statistics of the current generation."""
        with self._lock:
            stats = self._stats
        return stats.snapshot() if stats else StatsSnapshot()

    # -- Phases --

    def start_scan(
        self,
        root: str | os.PathLike[str],
        on_progress: ProgressCallback | None = None,
        on_complete: ScanCompleteCallback | None = None,
    ) -> threading.Thread | None:
        """Start scanning ``root`` in the background.

        The running phase, if any, is cancelled and joined first. Returns
        the worker thread, or None when a concurrent ``start_scan`` took
        over before this one could start; ``on_complete`` then receives a
        cancelled report.
        """
        token = CancelToken()
        stats = ScanStatistics(self.classifier)
        path = os.fspath(root)
        with self._lock:
            previous_token, previous = self._token, self._worker
            self._state = SessionState.SCANNING
            self._token = token
            self._worker = None
            self._stats = stats
            self._report = None
            self._root = path
        self._retire(previous_token, previous)

        scanner = Scanner(stats, token, on_progress=on_progress, options=self.options)

        def do_scan() -> None:
            try:
                report = scanner.run(path)
            except Exception as exc:
                log.exception("Scan of %s crashed", path)
                report = ScanReport(
                    candidates=scanner.candidates,
                    stats=stats.snapshot(),
                    status=ScanStatus.FAILED,
                    error=str(exc),
                )
            with self._lock:
                if self._token is token:
                    self._report = report
                    self._state = SessionState.SCAN_COMPLETE if report.ok else SessionState.IDLE
            if on_complete:
                on_complete(report)

        worker = threading.Thread(target=do_scan, name="plexclean-scan", daemon=True)
        with self._lock:
            current = self._token is token
            if current:
                self._worker = worker
                worker.start()

        if not current:
            log.debug("Scan of %s replaced before it started", path)
            if on_complete:
                on_complete(ScanReport(stats=stats.snapshot(), status=ScanStatus.CANCELLED))
            return None
        log.info("Scanning %s", path)
        return worker

    def start_delete(
        self,
        on_progress: DeleteProgressCallback | None = None,
        on_complete: DeleteCompleteCallback | None = None,
    ) -> threading.Thread:
        """Delete the candidates of a completed scan in the background.

        Raises:
            SessionStateError: If no successful scan is waiting for deletion,
                including while a scan is still running.
        """
        token = CancelToken()

        def do_delete(candidates: list[CandidateFile]) -> None:
            try:
                outcome = delete_files(candidates, token, on_progress)
            except Exception as exc:
                log.exception("Deletion crashed")
                outcome = DeletionOutcome(errors=[str(exc)], cancelled=token.cancelled)
            with self._lock:
                if self._token is token:
                    self._discard_generation()
            if on_complete:
                on_complete(outcome)

        with self._lock:
            if self._state is not SessionState.SCAN_COMPLETE or self._report is None:
                raise SessionStateError(f"Cannot delete in state '{self._state.value}'")
            candidates = self._report.candidates
            self._state = SessionState.DELETING
            self._token = token
            worker = threading.Thread(target=do_delete, args=(candidates,), name="plexclean-delete", daemon=True)
            self._worker = worker
            worker.start()

        log.info("Deleting %d files from %s", len(candidates), self._root)
        return worker

    def cancel(self) -> None:
        """Request cancellation of the running phase. No-op when idle."""
        with self._lock:
            token = self._token
            busy = self._state in (SessionState.SCANNING, SessionState.DELETING)
        if token is not None and busy:
            log.info("Cancellation requested")
            token.cancel()

    def wait(self, timeout: float | None = None) -> bool:
        """Wait for the running phase to finish. Returns False on timeout."""
        worker = self._worker
        if worker is None or worker is threading.current_thread():
            return True
        worker.join(timeout)
        return not worker.is_alive()

    def reset(self) -> None:
        """Cancel whatever is running and drop the current generation."""
        with self._lock:
            token, worker = self._token, self._worker
            self._discard_generation()
            self._worker = None
        self._retire(token, worker)

    # -- Internals --

    @staticmethod
    def _retire(token: CancelToken | None, worker: threading.Thread | None) -> None:
        if token is not None:
            token.cancel()
        if worker is not None and worker is not threading.current_thread():
            worker.join()

    def _discard_generation(self) -> None:
        self._state = SessionState.IDLE
        self._token = None
        self._stats = None
        self._report = None
