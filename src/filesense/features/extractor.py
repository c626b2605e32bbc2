"""Bounded-time feature extraction from files and in-memory buffers.

The model was trained on features built from the whole content: strip the
whitespace at both ends, then take ``beg_size`` bytes from the beginning,
``mid_size`` bytes around the middle and ``end_size`` bytes from the end,
padding whatever is missing. Reading whole files is not an option at
inference time, so for large inputs we only look at the first and last
``block_size`` bytes and at ``mid_size`` bytes around the middle. As long as
the whitespace at each edge is shorter than a block, the two approaches
produce the same features.
"""

import os
from typing import BinaryIO

from filesense.config import MAX_WINDOW_SIZE
from filesense.features.encoder import (
    get_beg_ints_with_padding,
    get_end_ints_with_padding,
    get_mid_ints_with_padding,
)
from filesense.models import Features
from filesense.utils.bytes import lstrip_whitespace, rstrip_whitespace, strip_whitespace


def mid_window_offset(
    total_size: int, beg_trimmed_size: int, end_trimmed_size: int, mid_size: int
) -> int:
    """Left edge of the middle window, centered on the untrimmed content."""
    trimmed_size = total_size - beg_trimmed_size - end_trimmed_size
    mid_idx = beg_trimmed_size + trimmed_size // 2
    return mid_idx - mid_size // 2


class FeatureExtractor:
    """Extracts fixed-size Features from paths, streams or byte buffers.

    Args:
        beg_size: Number of features taken from the beginning
        mid_size: Number of features taken from the middle
        end_size: Number of features taken from the end
        padding_token: Integer used for positions with no real byte
        block_size: Bytes read from each edge of large inputs
    """

    def __init__(
        self,
        beg_size: int = 512,
        mid_size: int = 512,
        end_size: int = 512,
        padding_token: int = 256,
        block_size: int = 4096,
    ):
        assert 0 <= beg_size <= MAX_WINDOW_SIZE, f"beg_size {beg_size} out of range"
        assert 0 <= mid_size <= MAX_WINDOW_SIZE, f"mid_size {mid_size} out of range"
        assert 0 <= end_size <= MAX_WINDOW_SIZE, f"end_size {end_size} out of range"
        assert max(beg_size, mid_size, end_size) <= block_size

        self.beg_size = beg_size
        self.mid_size = mid_size
        self.end_size = end_size
        self.padding_token = padding_token
        self.block_size = block_size

    def is_small(self, total_size: int) -> bool:
        """Small inputs are read entirely; larger ones are sampled."""
        return total_size < 2 * self.block_size + self.mid_size

    def from_bytes(self, content: bytes) -> Features:
        """Extract features from an in-memory buffer."""
        if self.is_small(len(content)):
            return self.from_whole_content(content)
        return self.from_sampled_content(content)

    def from_path(self, path: str | os.PathLike) -> Features:
        """Extract features from a file, reading at most a few blocks of it."""
        with open(path, "rb") as f:
            total_size = os.fstat(f.fileno()).st_size
            if self.is_small(total_size):
                return self.from_whole_content(f.read())
            return self.from_stream(f, total_size)

    def from_whole_content(self, content: bytes) -> Features:
        """Strip the whole buffer and encode every window from it."""
        stripped = strip_whitespace(content)
        return self._encode(stripped, stripped, stripped)

    def from_sampled_content(self, content: bytes) -> Features:
        """Buffer counterpart of ``from_stream``: look only at edge blocks and the middle."""
        block_size = self.block_size
        assert len(content) >= 2 * block_size + self.mid_size

        first_block = lstrip_whitespace(content[:block_size])
        beg_content = first_block + content[block_size : 2 * block_size]

        last_block = rstrip_whitespace(content[-block_size:])
        end_content = content[-2 * block_size : -block_size] + last_block

        mid_left_idx = mid_window_offset(
            len(content),
            block_size - len(first_block),
            block_size - len(last_block),
            self.mid_size,
        )
        assert 0 <= mid_left_idx and mid_left_idx + self.mid_size <= len(content)
        mid_content = content[mid_left_idx : mid_left_idx + self.mid_size]

        return self._encode(beg_content, mid_content, end_content)

    def from_stream(self, f: BinaryIO, total_size: int) -> Features:
        """Extract features from a seekable binary stream without reading all of it."""
        block_size = self.block_size
        assert total_size >= 2 * block_size + self.mid_size

        # The edge blocks are always read: their trimmed sizes position the middle window
        f.seek(0)
        beg_content = lstrip_whitespace(f.read(block_size))
        beg_trimmed_size = block_size - len(beg_content)
        if len(beg_content) < self.beg_size:
            # Not enough bytes left after stripping, read one more block
            beg_content += f.read(block_size)

        f.seek(total_size - block_size)
        end_content = rstrip_whitespace(f.read(block_size))
        end_trimmed_size = block_size - len(end_content)
        if len(end_content) < self.end_size:
            f.seek(total_size - 2 * block_size)
            end_content = f.read(block_size) + end_content

        mid_content = b""
        if self.mid_size > 0:
            mid_left_idx = mid_window_offset(
                total_size, beg_trimmed_size, end_trimmed_size, self.mid_size
            )
            assert 0 <= mid_left_idx and mid_left_idx + self.mid_size <= total_size
            f.seek(mid_left_idx)
            mid_content = f.read(self.mid_size)

        return self._encode(beg_content, mid_content, end_content)

    def _encode(self, beg_content: bytes, mid_content: bytes, end_content: bytes) -> Features:
        return Features(
            beg=get_beg_ints_with_padding(beg_content, self.beg_size, self.padding_token),
            mid=get_mid_ints_with_padding(mid_content, self.mid_size, self.padding_token),
            end=get_end_ints_with_padding(end_content, self.end_size, self.padding_token),
        )
