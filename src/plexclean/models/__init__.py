"""plexclean data models."""

from plexclean.models.scan_result import CandidateFile, CategoryStats, ScanReport, ScanStatus, StatsSnapshot
from plexclean.models.clean_result import DeletionOutcome

__all__ = [
    "CandidateFile",
    "CategoryStats",
    "DeletionOutcome",
    "ScanReport",
    "ScanStatus",
    "StatsSnapshot",
]
