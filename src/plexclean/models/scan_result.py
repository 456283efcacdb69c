"""Scan result dataclasses."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class CandidateFile:
    """Single file selected for deletion."""

    path: str
    size: int


@dataclass(frozen=True, slots=True)
class CategoryStats:
    """Count and total size of the files in one category bucket."""

    count: int = 0
    total_bytes: int = 0


@dataclass(frozen=True)
class StatsSnapshot:
    """Consistent, read-only copy of the live scan statistics.

    ``unwanted_count`` and ``unwanted_bytes`` always equal the sums over
    ``categories``; snapshots are taken under the statistics lock.
    """

    categories: dict[str, CategoryStats] = field(default_factory=dict)
    files_scanned: int = 0
    dirs_scanned: int = 0
    unwanted_count: int = 0
    unwanted_bytes: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {
            "files_scanned": self.files_scanned,
            "dirs_scanned": self.dirs_scanned,
            "unwanted_count": self.unwanted_count,
            "unwanted_bytes": self.unwanted_bytes,
            "categories": {
                key: {"count": stat.count, "total_bytes": stat.total_bytes}
                for key, stat in sorted(self.categories.items())
            },
        }


class ScanStatus(enum.Enum):
    OK = "ok"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass(slots=True)
class ScanReport:
    """Final result of one scan.

    ``candidates`` keeps traversal order. A cancelled scan carries whatever
    was collected before the stop; a failed one carries ``error``.
    """

    candidates: list[CandidateFile] = field(default_factory=list)
    stats: StatsSnapshot = field(default_factory=StatsSnapshot)
    status: ScanStatus = ScanStatus.OK
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is ScanStatus.OK

    @property
    def cancelled(self) -> bool:
        return self.status is ScanStatus.CANCELLED

    @property
    def total_bytes(self) -> int:
        return sum(c.size for c in self.candidates)

    def as_dict(self, include_candidates: bool = True) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": self.status.value,
            "error": self.error,
            "stats": self.stats.as_dict(),
        }
        if include_candidates:
            data["candidates"] = [{"path": c.path, "size": c.size} for c in self.candidates]
        return data
