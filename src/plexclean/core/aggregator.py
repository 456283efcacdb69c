"""Thread-safe live statistics for a scan."""

from __future__ import annotations

import threading

from plexclean.core.classifier import DEFAULT_CLASSIFIER, Classification, FileClassifier
from plexclean.models.scan_result import CategoryStats, StatsSnapshot


class ScanStatistics:
    """Running per-category totals for one scan generation.

    Every mutation and every snapshot goes through one lock, so readers
    never see a count without its matching size.
    """

    def __init__(self, classifier: FileClassifier | None = None) -> None:
        self._classifier = classifier or DEFAULT_CLASSIFIER
        self._lock = threading.Lock()
        self._categories: dict[str, CategoryStats] = {}
        self._files_scanned = 0
        self._dirs_scanned = 0
        self._unwanted_count = 0
        self._unwanted_bytes = 0

    @property
    def classifier(self) -> FileClassifier:
        return self._classifier

    def record(self, filename: str, size: int) -> Classification:
        """Classify a file and add it to its bucket when it is unwanted."""
        verdict = self._classifier.classify(filename)
        if not verdict.unwanted:
            return verdict
        with self._lock:
            current = self._categories.get(verdict.category, CategoryStats())
            self._categories[verdict.category] = CategoryStats(
                count=current.count + 1,
                total_bytes=current.total_bytes + size,
            )
            self._unwanted_count += 1
            self._unwanted_bytes += size
        return verdict

    def count_file(self) -> None:
        with self._lock:
            self._files_scanned += 1

    def count_dir(self) -> None:
        with self._lock:
            self._dirs_scanned += 1

    @property
    def files_scanned(self) -> int:
        with self._lock:
            return self._files_scanned

    def snapshot(self) -> StatsSnapshot:
        """Return a consistent copy of the current counters."""
        with self._lock:
            return StatsSnapshot(
                categories=dict(self._categories),
                files_scanned=self._files_scanned,
                dirs_scanned=self._dirs_scanned,
                unwanted_count=self._unwanted_count,
                unwanted_bytes=self._unwanted_bytes,
            )

    def reset(self) -> None:
        with self._lock:
            self._categories.clear()
            self._files_scanned = 0
            self._dirs_scanned = 0
            self._unwanted_count = 0
            self._unwanted_bytes = 0
