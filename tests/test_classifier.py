"""Tests for filename classification."""

from __future__ import annotations

import pytest

from plexclean.core.classifier import (
    CATEGORY_NUMBERED,
    CATEGORY_RAR_PART,
    SAFE_EXTENSIONS,
    UNWANTED_EXTENSIONS,
    FileClassifier,
    category_label,
    classify,
)


class TestProtectedMedia:
    @pytest.mark.parametrize("ext", SAFE_EXTENSIONS)
    def test_safe_extensions_are_kept(self, ext):
        assert classify(f"Some.Movie.2020{ext}").unwanted is False

    def test_video_is_kept(self):
        result = classify("video.mp4")
        assert result.unwanted is False
        assert result.category == ""

    def test_case_insensitive(self):
        assert classify("MOVIE.MKV").unwanted is False

    def test_safe_suffix_wins_over_numbered_infix(self):
        assert classify("movie.001.mkv").unwanted is False

    def test_numbered_suffix_after_media_extension_is_unwanted(self):
        result = classify("movie.mkv.001")
        assert result.unwanted is True
        assert result.category == CATEGORY_NUMBERED

    def test_safe_suffix_wins_over_rar_part_lookalike(self):
        assert classify("trailer-.r08.mp4").unwanted is False


class TestUnwanted:
    def test_rar_volume_piece(self):
        result = classify("Show.S01E01-.r08")
        assert result.unwanted is True
        assert result.category == CATEGORY_RAR_PART

    def test_rar_volume_pieces_share_a_bucket(self):
        assert classify("a-.r00").category == classify("b-.R99").category == CATEGORY_RAR_PART

    def test_rar_volume_needs_exactly_two_digits(self):
        assert classify("show-.r8").unwanted is False
        assert classify("show-.r008").unwanted is False

    def test_plain_r_volume_without_dash_is_kept(self):
        assert classify("show.r01").unwanted is False

    @pytest.mark.parametrize("ext", UNWANTED_EXTENSIONS)
    def test_unwanted_extensions(self, ext):
        result = classify(f"release{ext}")
        assert result.unwanted is True
        assert result.category == ext

    def test_image_category_is_extension(self):
        result = classify("cover.jpg")
        assert result.unwanted is True
        assert result.category == ".jpg"

    def test_category_is_lowercased(self):
        assert classify("FOLDER.JPG").category == ".jpg"

    def test_dotfile_sidecar(self):
        assert classify(".nfo").category == ".nfo"

    def test_numbered_segment(self):
        result = classify("archive.001")
        assert result.unwanted is True
        assert result.category == CATEGORY_NUMBERED

    def test_numbered_segment_needs_three_digits(self):
        assert classify("archive.01").unwanted is False
        assert classify("archive.0001").unwanted is False

    def test_part_piece(self):
        result = classify("archive.part12")
        assert result.unwanted is True
        assert result.category == CATEGORY_NUMBERED

    def test_part_piece_needs_digits(self):
        assert classify("archive.part").unwanted is False


class TestFallThrough:
    def test_no_extension_is_kept(self):
        assert classify("README").unwanted is False

    def test_unknown_extension_is_kept(self):
        assert classify("movie.srt").unwanted is False

    def test_idempotent(self):
        for name in ("cover.jpg", "video.mp4", "x-.r01", "archive.part3", "notes"):
            assert classify(name) == classify(name)


class TestFileClassifier:
    def test_with_extras_adds_unwanted(self):
        classifier = FileClassifier.with_extras(unwanted=["SRR", ".url"])
        assert classifier.classify("release.srr").category == ".srr"
        assert classifier.classify("site.url").category == ".url"
        assert classifier.classify("cover.jpg").category == ".jpg"

    def test_with_extras_adds_safe(self):
        classifier = FileClassifier.with_extras(safe=[".ts"])
        assert classifier.classify("recording.ts").unwanted is False

    def test_extra_safe_overrides_unwanted(self):
        classifier = FileClassifier.with_extras(safe=[".nfo"])
        assert classifier.classify("movie.nfo").unwanted is False

    def test_defaults_untouched(self):
        FileClassifier.with_extras(unwanted=[".srr"])
        assert classify("release.srr").unwanted is False


class TestCategoryLabel:
    def test_synthetic_buckets_have_labels(self):
        assert "Numbered" in category_label(CATEGORY_NUMBERED)
        assert "RAR parts" in category_label(CATEGORY_RAR_PART)

    def test_extension_label_is_key(self):
        assert category_label(".rar") == ".rar"
