"""Directory traversal for recursive scans."""

import logging
import os
from pathlib import Path
from typing import Iterator

logger = logging.getLogger(__name__)

STDIN_PATH = "-"


def iter_directory_files(directory: Path, no_dereference: bool = False) -> Iterator[Path]:
    """Yield the files below a directory, depth first and sorted by name.

    Args:
        directory: Directory to scan
        no_dereference: Yield symlinked directories instead of descending into them

    Yields:
        File paths. Unreadable directories are skipped, and a directory
        reached twice through symlinks is only scanned once.
    """
    seen: set[str] = set()

    def walk(current: Path) -> Iterator[Path]:
        real = os.path.realpath(current)
        if real in seen:
            return
        seen.add(real)

        try:
            entries = sorted(current.iterdir())
        except OSError as e:
            logger.debug(f"Skipping {current}: {e}")
            return

        for entry in entries:
            if entry.is_dir():
                if no_dereference and entry.is_symlink():
                    yield entry
                else:
                    yield from walk(entry)
            elif entry.is_file():
                yield entry

    if no_dereference and directory.is_symlink():
        yield directory
        return
    yield from walk(directory)


def expand_paths(paths: list[str], no_dereference: bool = False) -> list[str]:
    """Replace every directory in paths with the files it contains."""
    expanded: list[str] = []
    for path in paths:
        if path == STDIN_PATH:
            continue
        p = Path(path)
        if p.is_dir():
            expanded.extend(str(f) for f in iter_directory_files(p, no_dereference))
        else:
            expanded.append(path)
    return expanded
