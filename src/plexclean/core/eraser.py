"""Sequential, cancellable removal of candidate files."""

from __future__ import annotations

import logging
import os
import time
from typing import Callable, Sequence

from plexclean.core.cancellation import CancelToken
from plexclean.models.clean_result import DeletionOutcome
from plexclean.models.scan_result import CandidateFile
from plexclean.utils import bytes_to_human, format_elapsed

log = logging.getLogger(__name__)

DeleteProgressCallback = Callable[[int, int], None]  # (done, total)


def delete_files(
    candidates: Sequence[CandidateFile],
    token: CancelToken | None = None,
    on_progress: DeleteProgressCallback | None = None,
) -> DeletionOutcome:
    """Delete ``candidates`` one at a time, in the given order.

    A file that cannot be removed is logged and skipped; the pass goes on.
    The token is checked before every removal, and ``on_progress`` is
    called after every attempt with the number of candidates handled so far.
    """
    token = token or CancelToken()
    outcome = DeletionOutcome()
    total = len(candidates)
    started = time.monotonic()

    for candidate in candidates:
        if token.cancelled:
            outcome.cancelled = True
            log.info("Deletion cancelled after %d of %d files", outcome.attempted, total)
            break

        outcome.attempted += 1
        try:
            os.remove(candidate.path)
        except OSError as e:
            log.warning("Error deleting %s: %s", candidate.path, e)
            outcome.errors.append(f"{candidate.path}: {e.strerror or e}")
        else:
            log.info("Deleted: %s (%s)", candidate.path, bytes_to_human(candidate.size))
            outcome.deleted_count += 1
            outcome.deleted_bytes += candidate.size

        if on_progress:
            on_progress(outcome.attempted, total)

    log.info("Cleanup completed in %s", format_elapsed(time.monotonic() - started))
    log.info("Total files deleted: %d", outcome.deleted_count)
    log.info("Total space freed: %s", bytes_to_human(outcome.deleted_bytes))
    return outcome
