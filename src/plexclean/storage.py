"""Timestamped deletion log files."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

from plexclean.utils import xdg_data_home

log = logging.getLogger(__name__)

_LOG_DIR = xdg_data_home() / "plexclean" / "logs"
_LOG_FORMAT = "%(asctime)s %(message)s"


def new_log_path(directory: Path | None = None) -> Path:
    """Return a fresh ``plex_cleanup_YYYYMMDD_HHMMSS.log`` path, creating its directory."""
    directory = directory or _LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    path = directory / f"plex_cleanup_{stamp}.log"
    suffix = 1
    while path.exists():
        path = directory / f"plex_cleanup_{stamp}_{suffix}.log"
        suffix += 1
    return path


class DeletionLog:
    """Copies INFO and above from the ``plexclean`` loggers into a new file.

    Usable as a context manager yielding the file path, or via
    ``open()``/``close()`` when the pass ends on another thread.
    """

    def __init__(self, directory: Path | None = None) -> None:
        self._directory = directory
        self._handler: logging.FileHandler | None = None
        self._previous_level = logging.NOTSET
        self.path: Path | None = None

    def open(self) -> Path:
        self.path = new_log_path(self._directory)
        handler = logging.FileHandler(self.path, encoding="utf-8")
        handler.setLevel(logging.INFO)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))

        package_log = logging.getLogger("plexclean")
        self._previous_level = package_log.level
        if package_log.getEffectiveLevel() > logging.INFO:
            package_log.setLevel(logging.INFO)
        package_log.addHandler(handler)
        self._handler = handler
        log.debug("Writing deletion log to %s", self.path)
        return self.path

    def close(self) -> None:
        if self._handler is None:
            return
        package_log = logging.getLogger("plexclean")
        package_log.removeHandler(self._handler)
        package_log.setLevel(self._previous_level)
        self._handler.close()
        self._handler = None

    def __enter__(self) -> Path:
        return self.open()

    def __exit__(self, *exc_info) -> None:
        self.close()
