"""Feature extraction: byte windows and their fixed-length encoding."""

from filesense.features.encoder import (
    get_beg_ints_with_padding,
    get_end_ints_with_padding,
    get_mid_ints_with_padding,
)
from filesense.features.extractor import FeatureExtractor, mid_window_offset

__all__ = [
    "FeatureExtractor",
    "get_beg_ints_with_padding",
    "get_end_ints_with_padding",
    "get_mid_ints_with_padding",
    "mid_window_offset",
]
