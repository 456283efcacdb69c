"""Filename classification: leftover junk versus media worth keeping."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable

# Archive containers, checksum/index/info sidecars and still images.
UNWANTED_EXTENSIONS = (
    ".rar",
    ".zip",
    ".7z",
    ".sfv",
    ".idx",
    ".nfo",
    ".txt",
    ".par",
    ".par2",
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
)

# Media containers and codecs that are never deleted.
SAFE_EXTENSIONS = (
    ".mp4",
    ".mkv",
    ".avi",
    ".mov",
    ".wmv",
    ".m4v",
    ".mpg",
    ".mpeg",
    ".flv",
    ".vob",
    ".webm",
    ".divx",
    ".3gp",
    ".h264",
    ".h265",
)

CATEGORY_RAR_PART = "rar-part"
CATEGORY_NUMBERED = "numbered"

_CATEGORY_LABELS = {
    CATEGORY_NUMBERED: "Numbered files (.001, .002, etc.)",
    CATEGORY_RAR_PART: "RAR parts (-.r08, -.r09, etc.)",
}

_RAR_PART_RE = re.compile(r"-\.r\d{2}$")
_NUMBERED_RE = re.compile(r"\.\d{3}$")
_PART_RE = re.compile(r"\.part\d+$")


@dataclass(frozen=True, slots=True)
class Classification:
    """Verdict for one filename. ``category`` is empty when the file is kept."""

    unwanted: bool
    category: str = ""


KEEP = Classification(unwanted=False)


def _normalize(extensions: Iterable[str]) -> tuple[str, ...]:
    result: list[str] = []
    for ext in extensions:
        ext = ext.strip().lower()
        if not ext:
            continue
        if not ext.startswith("."):
            ext = "." + ext
        if ext not in result:
            result.append(ext)
    return tuple(result)


@dataclass(frozen=True)
class FileClassifier:
    """Decides whether a filename is a leftover that may be deleted.

    Rules are applied to the lowercased name, first match wins:

    1. a protected media extension keeps the file, no matter what else matches;
    2. ``-.rNN`` RAR volume pieces go to the ``rar-part`` bucket;
    3. a nuisance extension goes to a bucket named after that extension;
    4. ``.NNN`` numbered segments go to the ``numbered`` bucket;
    5. ``.partN`` pieces also go to the ``numbered`` bucket.
    """

    unwanted_extensions: tuple[str, ...] = UNWANTED_EXTENSIONS
    safe_extensions: tuple[str, ...] = SAFE_EXTENSIONS

    @classmethod
    def with_extras(
        cls,
        unwanted: Iterable[str] = (),
        safe: Iterable[str] = (),
    ) -> FileClassifier:
        """Build a classifier with extra extensions on top of the defaults."""
        return cls(
            unwanted_extensions=_normalize((*UNWANTED_EXTENSIONS, *unwanted)),
            safe_extensions=_normalize((*SAFE_EXTENSIONS, *safe)),
        )

    def classify(self, filename: str) -> Classification:
        lower = filename.lower()

        if lower.endswith(self.safe_extensions):
            return KEEP

        if _RAR_PART_RE.search(lower):
            return Classification(True, CATEGORY_RAR_PART)

        for ext in self.unwanted_extensions:
            if lower.endswith(ext):
                return Classification(True, ext)

        if _NUMBERED_RE.search(lower) or _PART_RE.search(lower):
            return Classification(True, CATEGORY_NUMBERED)

        return KEEP


DEFAULT_CLASSIFIER = FileClassifier()


def classify(filename: str) -> Classification:
    """Classify ``filename`` with the built-in extension lists."""
    return DEFAULT_CLASSIFIER.classify(filename)


def category_label(category: str) -> str:
    """Human-readable name for a category bucket."""
    return _CATEGORY_LABELS.get(category, category)
