"""Utility functions for filesense."""

from filesense.utils.bytes import (
    is_valid_utf8,
    lstrip_whitespace,
    rstrip_whitespace,
    strip_whitespace,
)
from filesense.utils.paths import expand_paths, iter_directory_files

__all__ = [
    "expand_paths",
    "is_valid_utf8",
    "iter_directory_files",
    "lstrip_whitespace",
    "rstrip_whitespace",
    "strip_whitespace",
]
