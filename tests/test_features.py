import io
import random
from pathlib import Path

import pytest

from filesense.features import (
    FeatureExtractor,
    get_beg_ints_with_padding,
    get_end_ints_with_padding,
    get_mid_ints_with_padding,
    mid_window_offset,
)

PAD = 256


def random_bytes(size: int, seed: int = 0) -> bytes:
    return random.Random(seed).randbytes(size)


# --- encoder ---


@pytest.mark.parametrize("content", [b"", b"a", b"  \n\t", b"x" * 100, b"y" * 2000])
@pytest.mark.parametrize("size", [0, 1, 16, 512])
def test_encoders_always_return_requested_length(content: bytes, size: int) -> None:
    assert len(get_beg_ints_with_padding(content, size, PAD)) == size
    assert len(get_mid_ints_with_padding(content, size, PAD)) == size
    assert len(get_end_ints_with_padding(content, size, PAD)) == size


def test_beg_strips_leading_whitespace_and_pads_right() -> None:
    ints = get_beg_ints_with_padding(b" \n\tabc", 6, PAD)
    assert ints == (97, 98, 99, PAD, PAD, PAD)


def test_end_strips_trailing_whitespace_and_pads_left() -> None:
    ints = get_end_ints_with_padding(b"abc \r\n", 5, PAD)
    assert ints == (PAD, PAD, 97, 98, 99)


def test_end_takes_last_bytes() -> None:
    assert get_end_ints_with_padding(b"abcdef", 2, PAD) == (101, 102)


def test_end_with_zero_size_is_empty() -> None:
    assert get_end_ints_with_padding(b"abcdef", 0, PAD) == ()


def test_mid_padding_is_split_around_content() -> None:
    ints = get_mid_ints_with_padding(b"abc", 8, PAD)
    # deficit 5: 2 on the left, 3 on the right
    assert ints == (PAD, PAD, 97, 98, 99, PAD, PAD, PAD)


def test_mid_padding_is_symmetric_for_even_deficit() -> None:
    ints = get_mid_ints_with_padding(b"ab", 6, PAD)
    assert ints == (PAD, PAD, 97, 98, PAD, PAD)


def test_mid_takes_centered_window() -> None:
    ints = get_mid_ints_with_padding(b"0123456789", 4, PAD)
    assert bytes(ints) == b"3456"


def test_mid_does_not_strip_whitespace() -> None:
    assert get_mid_ints_with_padding(b" a ", 3, PAD) == (32, 97, 32)


# --- extractor ---


def test_mid_window_offset_centers_on_trimmed_content() -> None:
    assert mid_window_offset(100_000, 0, 0, 512) == 50_000 - 256
    # 10 bytes trimmed at the start shift the center by 5
    assert mid_window_offset(100_000, 10, 0, 512) == 10 + (100_000 - 10) // 2 - 256


def test_small_threshold() -> None:
    extractor = FeatureExtractor()
    assert extractor.is_small(2 * 4096 + 512 - 1)
    assert not extractor.is_small(2 * 4096 + 512)


def test_window_sizes_are_bounded() -> None:
    with pytest.raises(AssertionError):
        FeatureExtractor(beg_size=513)


def test_features_have_fixed_length() -> None:
    extractor = FeatureExtractor()
    for size in (0, 1, 17, 1000, 9000, 50_000):
        features = extractor.from_bytes(random_bytes(size))
        assert len(features.beg) == 512
        assert len(features.mid) == 512
        assert len(features.end) == 512


def test_whole_content_windows() -> None:
    extractor = FeatureExtractor(beg_size=4, mid_size=4, end_size=4)
    features = extractor.from_whole_content(b"\n\n0123456789  ")
    assert bytes(features.beg) == b"0123"
    assert bytes(features.mid) == b"3456"
    assert bytes(features.end) == b"6789"


@pytest.mark.parametrize("size", [8_704, 8_705, 20_000, 100_000])
def test_sampled_content_matches_whole_content(size: int) -> None:
    extractor = FeatureExtractor()
    content = b" \n\t" + random_bytes(size) + b"\r\n  "
    assert extractor.from_sampled_content(content) == extractor.from_whole_content(content)


@pytest.mark.parametrize("size", [17, 1000, 8_703, 8_704, 8_705, 30_001])
def test_path_and_bytes_give_same_features(tmp_path: Path, size: int) -> None:
    extractor = FeatureExtractor()
    content = b"\t\t" + random_bytes(size, seed=size) + b"\n"
    path = tmp_path / "sample.bin"
    path.write_bytes(content)
    assert extractor.from_path(path) == extractor.from_bytes(content)


def test_stream_reads_an_extra_block_when_first_is_whitespace() -> None:
    extractor = FeatureExtractor()
    content = b" " * 4096 + b"A" * 10_000 + b"Z" * 600
    features = extractor.from_stream(io.BytesIO(content), len(content))
    assert features.beg == (ord("A"),) * 512
    assert features.end == (ord("Z"),) * 512
    assert features == extractor.from_whole_content(content)


def test_large_text_file_mid_window(tmp_path: Path) -> None:
    extractor = FeatureExtractor()
    content = bytes(ord("a") + i % 26 for i in range(100 * 1024))
    path = tmp_path / "big.txt"
    path.write_bytes(content)

    features = extractor.from_path(path)

    start = len(content) // 2 - 256
    assert features.beg == tuple(content[:512])
    assert features.mid == tuple(content[start : start + 512])
    assert features.end == tuple(content[-512:])
