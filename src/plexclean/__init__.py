"""Remove leftover archive, checksum and image files from media libraries."""

__version__ = "0.1.0"
