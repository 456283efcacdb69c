"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

import plexclean.storage as storage
from plexclean.settings import Settings


def _make_file(path: Path, size: int = 0) -> Path:
    """Create a (sparse) file of ``size`` bytes, including parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        f.truncate(size)
    return path


@pytest.fixture
def make_file():
    """Factory creating sparse files of a given size."""
    return _make_file


@pytest.fixture
def isolate_storage(tmp_path, monkeypatch):
    """Redirect deletion logs to a temp directory."""
    log_dir = tmp_path / "plexclean_logs"
    monkeypatch.setattr(storage, "_LOG_DIR", log_dir)
    return log_dir


@pytest.fixture
def isolate_settings(tmp_path, monkeypatch):
    """Replace the settings singleton with one backed by a temp file."""
    settings = Settings(path=tmp_path / "config" / "settings.json")
    monkeypatch.setattr(Settings, "_instance", settings)
    return settings


@pytest.fixture
def media_tree(tmp_path) -> Path:
    """A small library with media, leftovers and a nested season folder.

    Leftovers in traversal order: Movie/cover.jpg, Movie/movie.nfo,
    Movie/movie.part1, Show/Season 1/ep1-.r08, Show/Season 1/ep1.001,
    Show/sample.txt.
    """
    root = tmp_path / "library"
    _make_file(root / "Movie" / "movie.mkv", 4096)
    _make_file(root / "Movie" / "cover.jpg", 100)
    _make_file(root / "Movie" / "movie.nfo", 10)
    _make_file(root / "Movie" / "movie.part1", 300)
    _make_file(root / "Show" / "Season 1" / "ep1.mp4", 2048)
    _make_file(root / "Show" / "Season 1" / "ep1-.r08", 500)
    _make_file(root / "Show" / "Season 1" / "ep1.001", 700)
    _make_file(root / "Show" / "sample.txt", 5)
    return root
