"""Generic JSON-backed settings store."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from plexclean.core.classifier import FileClassifier
from plexclean.core.scanner import ON_ERROR_ABORT, ON_ERROR_SKIP, ScanOptions
from plexclean.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "plexclean"
_SETTINGS_FILE = "settings.json"


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("scan.on_error")  # reads data["scan"]["on_error"]
        settings.set("scan.on_error", "skip")  # writes + saves
    """

    _instance: Settings | None = None

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @classmethod
    def instance(cls) -> Settings:
        """Return the singleton settings instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        parts = key.split(".")
        node: Any = self._data
        for part in parts:
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    def as_dict(self) -> dict[str, Any]:
        return json.loads(json.dumps(self._data))

    # -- Typed views --

    def scan_options(self) -> ScanOptions:
        """Scan tunables, falling back to defaults for missing or bad values."""
        defaults = ScanOptions()

        every = self.get("scan.progress_every", defaults.progress_every)
        if not isinstance(every, int) or isinstance(every, bool) or every < 1:
            log.warning("Ignoring invalid scan.progress_every: %r", every)
            every = defaults.progress_every

        on_error = self.get("scan.on_error", defaults.on_error)
        if on_error not in (ON_ERROR_ABORT, ON_ERROR_SKIP):
            log.warning("Ignoring invalid scan.on_error: %r", on_error)
            on_error = defaults.on_error

        follow = bool(self.get("scan.follow_symlinks", defaults.follow_symlinks))
        return ScanOptions(progress_every=every, on_error=on_error, follow_symlinks=follow)

    def classifier(self) -> FileClassifier:
        """Classifier with any extra extensions configured by the user."""
        return FileClassifier.with_extras(
            unwanted=self._string_list("classifier.extra_unwanted"),
            safe=self._string_list("classifier.extra_safe"),
        )

    def _string_list(self, key: str) -> list[str]:
        value = self.get(key, [])
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            log.warning("Ignoring invalid %s: %r", key, value)
            return []
        return value

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            self._data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            self._data = {}
        if not isinstance(self._data, dict):
            log.warning("Settings file %s does not contain an object, ignoring it", self._path)
            self._data = {}

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)
