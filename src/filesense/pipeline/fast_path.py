"""Decide trivial inputs without running the model.

Missing paths, directories, symlinks, empty and unreadable files, and inputs
with too few meaningful bytes get a terminal label right away. Everything
else comes back as features scheduled for inference.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

from filesense.features import FeatureExtractor
from filesense.models import Features
from filesense.models.content_type import (
    DIRECTORY,
    EMPTY,
    ERROR,
    FILE_DOES_NOT_EXIST,
    GENERIC_TEXT,
    PERMISSION_ERROR,
    SYMLINK,
    UNKNOWN,
)
from filesense.utils.bytes import is_valid_utf8

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FastPathDecision:
    """A terminal label reached without inference (score is always 1.0)."""

    label: str
    link_target: Optional[str] = None


@dataclass(frozen=True)
class PendingInference:
    """Features of an input that needs the model."""

    features: Features


Triage = Union[FastPathDecision, PendingInference]


class FastPathClassifier:
    """Resolves corner cases and extracts features for everything else.

    Inputs without enough meaningful bytes are labelled ``txt`` or
    ``unknown`` by decoding them as UTF-8. At most ``4 * block_size`` bytes
    are decoded; for longer inputs that prefix stands in for the whole, and a
    character cut at its end is not held against it.

    Args:
        extractor: Feature extractor used for inputs that need the model
        min_file_size_for_dl: Inputs up to this many bytes skip the model
        no_dereference: Report symlinks as ``symlink`` instead of following them
    """

    def __init__(
        self,
        extractor: FeatureExtractor,
        min_file_size_for_dl: int = 16,
        no_dereference: bool = False,
    ):
        assert 0 < min_file_size_for_dl <= extractor.beg_size
        self.extractor = extractor
        self.min_file_size_for_dl = min_file_size_for_dl
        self.no_dereference = no_dereference
        self.max_decoded_size = 4 * extractor.block_size

    def classify_bytes(self, content: bytes) -> Triage:
        if not content:
            return FastPathDecision(EMPTY)
        if len(content) <= self.min_file_size_for_dl:
            return self._decide_few_bytes(content, len(content))

        features = self.extractor.from_bytes(content)
        if self._lacks_meaningful_bytes(features):
            return self._decide_few_bytes(content[: self.max_decoded_size], len(content))
        return PendingInference(features)

    def classify_path(self, path: str | os.PathLike) -> Triage:
        """Triage a path. I/O errors are mapped to labels, never raised."""
        try:
            return self._classify_path(Path(path))
        except PermissionError as e:
            logger.debug(f"Permission error on {path}: {e}")
            return FastPathDecision(PERMISSION_ERROR)
        except OSError as e:
            logger.debug(f"I/O error on {path}: {e}")
            return FastPathDecision(ERROR)

    def _classify_path(self, path: Path) -> Triage:
        if self.no_dereference and path.is_symlink():
            return FastPathDecision(SYMLINK, link_target=os.path.realpath(path))

        if not path.exists():
            return FastPathDecision(FILE_DOES_NOT_EXIST)

        if path.is_dir():
            return FastPathDecision(DIRECTORY)

        if not path.is_file():
            # sockets, FIFOs, devices
            return FastPathDecision(UNKNOWN)

        if path.stat().st_size == 0:
            return FastPathDecision(EMPTY)

        # Opening the file surfaces permission problems before any reading
        with open(path, "rb") as f:
            size = os.fstat(f.fileno()).st_size
            if size <= self.min_file_size_for_dl:
                return self._decide_few_bytes(f.read(), size)
            if self.extractor.is_small(size):
                features = self.extractor.from_whole_content(f.read())
            else:
                features = self.extractor.from_stream(f, size)

            if self._lacks_meaningful_bytes(features):
                f.seek(0)
                return self._decide_few_bytes(f.read(self.max_decoded_size), size)
        return PendingInference(features)

    def _lacks_meaningful_bytes(self, features: Features) -> bool:
        # Padding at this position means that, post-stripping, there are
        # fewer than min_file_size_for_dl real bytes
        return features.beg[self.min_file_size_for_dl - 1] == self.extractor.padding_token

    @staticmethod
    def _decide_few_bytes(head: bytes, total_size: int) -> FastPathDecision:
        is_text = is_valid_utf8(head, final=len(head) == total_size)
        return FastPathDecision(GENERIC_TEXT if is_text else UNKNOWN)
