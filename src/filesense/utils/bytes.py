"""Byte-level helpers shared by the feature extractor and the fast path."""

import codecs

# space, tab, newline, vertical tab, form feed, carriage return
WHITESPACE_BYTES = b" \t\n\x0b\x0c\r"


def lstrip_whitespace(content: bytes) -> bytes:
    """Strip leading whitespace bytes."""
    return content.lstrip(WHITESPACE_BYTES)


def rstrip_whitespace(content: bytes) -> bytes:
    """Strip trailing whitespace bytes."""
    return content.rstrip(WHITESPACE_BYTES)


def strip_whitespace(content: bytes) -> bytes:
    return content.strip(WHITESPACE_BYTES)


def is_valid_utf8(content: bytes, final: bool = True) -> bool:
    """Check if content decodes as strict UTF-8.

    Args:
        content: Raw bytes
        final: When False, content is a prefix of a longer input and a
               multibyte sequence cut off at its end is accepted

    Returns:
        True if every byte sequence is valid UTF-8
    """
    try:
        codecs.getincrementaldecoder("utf-8")(errors="strict").decode(content, final=final)
    except UnicodeDecodeError:
        return False
    return True
