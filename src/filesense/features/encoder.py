"""Turn raw byte windows into fixed-length integer sequences."""

from filesense.utils.bytes import lstrip_whitespace, rstrip_whitespace


def get_beg_ints_with_padding(beg_content: bytes, beg_size: int, padding_token: int) -> tuple[int, ...]:
    """Take the first beg_size bytes after leading whitespace, right-padded."""
    beg_bytes = lstrip_whitespace(beg_content)[:beg_size]
    beg_ints = tuple(beg_bytes) + (padding_token,) * (beg_size - len(beg_bytes))

    assert len(beg_ints) == beg_size
    return beg_ints


def get_mid_ints_with_padding(mid_content: bytes, mid_size: int, padding_token: int) -> tuple[int, ...]:
    """Take mid_size bytes centered on the middle of mid_content.

    When there are not enough bytes, padding goes on both sides: the left
    side gets floor(deficit / 2), the right side the rest.
    """
    if mid_size <= len(mid_content):
        mid_left_idx = len(mid_content) // 2 - mid_size // 2
        mid_bytes = mid_content[mid_left_idx : mid_left_idx + mid_size]
    else:
        mid_bytes = mid_content

    padding_size = mid_size - len(mid_bytes)
    padding_left = padding_size // 2
    padding_right = padding_size - padding_left
    mid_ints = (padding_token,) * padding_left + tuple(mid_bytes) + (padding_token,) * padding_right

    assert len(mid_ints) == mid_size
    return mid_ints


def get_end_ints_with_padding(end_content: bytes, end_size: int, padding_token: int) -> tuple[int, ...]:
    """Take the last end_size bytes before trailing whitespace, left-padded."""
    end_bytes = rstrip_whitespace(end_content)
    # end_bytes[-0:] would be the whole buffer
    end_bytes = end_bytes[len(end_bytes) - end_size :] if end_size < len(end_bytes) else end_bytes
    end_ints = (padding_token,) * (end_size - len(end_bytes)) + tuple(end_bytes)

    assert len(end_ints) == end_size
    return end_ints
