"""Tests for candidate deletion."""

from __future__ import annotations

import logging
import os

from plexclean.core.cancellation import CancelToken
from plexclean.core.eraser import delete_files
from plexclean.models.scan_result import CandidateFile


def _candidates(tmp_path, make_file, count=4, size=10):
    files = [make_file(tmp_path / f"leftover{i}.rar", size) for i in range(count)]
    return [CandidateFile(path=str(f), size=size) for f in files]


class TestDeleteFiles:
    def test_deletes_everything(self, tmp_path, make_file):
        candidates = _candidates(tmp_path, make_file)

        outcome = delete_files(candidates)

        assert outcome.attempted == 4
        assert outcome.deleted_count == 4
        assert outcome.deleted_bytes == 40
        assert outcome.errors == []
        assert not outcome.cancelled
        assert not any(os.path.exists(c.path) for c in candidates)

    def test_missing_file_is_skipped(self, tmp_path, make_file, caplog):
        candidates = _candidates(tmp_path, make_file)
        os.remove(candidates[1].path)

        outcome = delete_files(candidates)

        assert outcome.attempted == 4
        assert outcome.deleted_count == 3
        assert outcome.failed_count == 1
        assert outcome.deleted_bytes == 30
        assert len(outcome.errors) == 1
        assert candidates[1].path in outcome.errors[0]
        assert f"Error deleting {candidates[1].path}" in caplog.text

    def test_deletes_in_candidate_order(self, tmp_path, make_file, monkeypatch):
        candidates = list(reversed(_candidates(tmp_path, make_file)))
        removed = []
        real_remove = os.remove

        def recording_remove(path):
            removed.append(path)
            real_remove(path)

        monkeypatch.setattr(os, "remove", recording_remove)
        delete_files(candidates)

        assert removed == [c.path for c in candidates]

    def test_progress_after_every_attempt(self, tmp_path, make_file):
        candidates = _candidates(tmp_path, make_file)
        os.remove(candidates[2].path)
        events = []

        delete_files(candidates, on_progress=lambda done, total: events.append((done, total)))

        assert events == [(1, 4), (2, 4), (3, 4), (4, 4)]

    def test_cancel_before_start(self, tmp_path, make_file):
        candidates = _candidates(tmp_path, make_file)
        token = CancelToken()
        token.cancel()

        outcome = delete_files(candidates, token)

        assert outcome.cancelled
        assert outcome.attempted == 0
        assert all(os.path.exists(c.path) for c in candidates)

    def test_cancel_mid_pass(self, tmp_path, make_file):
        candidates = _candidates(tmp_path, make_file)
        token = CancelToken()

        def on_progress(done, total):
            if done == 2:
                token.cancel()

        outcome = delete_files(candidates, token, on_progress)

        assert outcome.cancelled
        assert outcome.attempted == 2
        assert outcome.deleted_count == 2
        assert not os.path.exists(candidates[1].path)
        assert os.path.exists(candidates[2].path)

    def test_logs_each_deletion(self, tmp_path, make_file, caplog):
        caplog.set_level(logging.INFO, logger="plexclean")
        candidates = _candidates(tmp_path, make_file, count=2, size=2048)

        delete_files(candidates)

        assert f"Deleted: {candidates[0].path} (2.0 KB)" in caplog.text
        assert "Total files deleted: 2" in caplog.text
        assert "Total space freed: 4.0 KB" in caplog.text

    def test_empty_list(self):
        outcome = delete_files([])
        assert outcome.attempted == 0
        assert not outcome.cancelled

    def test_outcome_as_dict(self, tmp_path, make_file):
        outcome = delete_files(_candidates(tmp_path, make_file, count=1))
        assert outcome.as_dict() == {
            "status": "ok",
            "attempted": 1,
            "deleted_count": 1,
            "deleted_bytes": 10,
            "errors": [],
        }
