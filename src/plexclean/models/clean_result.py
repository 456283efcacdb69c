"""Deletion result dataclass."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class DeletionOutcome:
    """Result of a deletion pass.

    ``attempted`` counts every removal that was tried, successful or not.
    Candidates never reached because the pass was cancelled are not counted.
    """

    attempted: int = 0
    deleted_count: int = 0
    deleted_bytes: int = 0
    errors: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def failed_count(self) -> int:
        return self.attempted - self.deleted_count

    def as_dict(self) -> dict[str, Any]:
        return {
            "status": "cancelled" if self.cancelled else "ok",
            "attempted": self.attempted,
            "deleted_count": self.deleted_count,
            "deleted_bytes": self.deleted_bytes,
            "errors": list(self.errors),
        }
