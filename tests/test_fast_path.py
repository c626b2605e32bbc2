import builtins
import errno
import os
import socket
from pathlib import Path

import pytest

from filesense.features import FeatureExtractor
from filesense.pipeline import FastPathClassifier, FastPathDecision, PendingInference


@pytest.fixture
def classifier() -> FastPathClassifier:
    return FastPathClassifier(FeatureExtractor())


@pytest.mark.parametrize(
    ("content", "label"),
    [
        (b"", "empty"),
        (b"Hello", "txt"),
        (b"\xff\xfe\x00\x01\x02", "unknown"),
        (b"a" * 16, "txt"),
        (b"\x80" * 16, "unknown"),
        # 20 bytes, but only 4 left once whitespace is stripped
        (b"        abcd        ", "txt"),
        (b"\n\n\n\n\n\n\n\n\xc3\x28\n\n\n\n\n\n\n\n", "unknown"),
    ],
)
def test_bytes_decided_without_model(classifier, content: bytes, label: str) -> None:
    assert classifier.classify_bytes(content) == FastPathDecision(label)


def test_bytes_with_enough_content_need_model(classifier) -> None:
    triage = classifier.classify_bytes(b"a" * 17)
    assert isinstance(triage, PendingInference)
    assert len(triage.features.beg) == 512


@pytest.mark.parametrize(
    ("content", "label"),
    [
        # the second character straddles the first block boundary
        (b" " * 4095 + "éé".encode("utf-8"), "txt"),
        # invalid bytes past the first block
        (b" " * 5000 + b"\xff\xfe\x00\x01", "unknown"),
    ],
)
def test_whitespace_padded_input_is_decoded_whole(
    classifier, tmp_path: Path, content: bytes, label: str
) -> None:
    path = tmp_path / "padded"
    path.write_bytes(content)

    assert classifier.classify_bytes(content) == FastPathDecision(label)
    assert classifier.classify_path(path) == FastPathDecision(label)


@pytest.mark.parametrize(
    ("content", "label"),
    [
        # "é" is split by the 16384-byte decode limit
        (b" " * 16383 + "é".encode("utf-8") + b"\n" * 100, "txt"),
        (b" " * 10_000 + b"\xff\xfe" + b"\n" * 10_000, "unknown"),
        # bytes past the limit are not decoded
        (b" " * 16384 + b"\xff\xfe" + b"\n" * 100, "txt"),
    ],
)
def test_long_whitespace_input_decodes_a_prefix(
    classifier, tmp_path: Path, content: bytes, label: str
) -> None:
    path = tmp_path / "long"
    path.write_bytes(content)

    assert classifier.classify_bytes(content) == FastPathDecision(label)
    assert classifier.classify_path(path) == FastPathDecision(label)


def failing_open(monkeypatch: pytest.MonkeyPatch, target: Path, error: OSError) -> None:
    real_open = builtins.open

    def fake_open(file, *args, **kwargs):
        if isinstance(file, (str, os.PathLike)) and Path(file) == target:
            raise error
        return real_open(file, *args, **kwargs)

    monkeypatch.setattr(builtins, "open", fake_open)


@pytest.mark.parametrize(
    ("error", "label"),
    [
        (PermissionError(errno.EACCES, "Permission denied"), "permission_error"),
        (OSError(errno.EIO, "Input/output error"), "error"),
    ],
)
def test_open_errors_become_labels(
    classifier, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, error: OSError, label: str
) -> None:
    path = tmp_path / "data.bin"
    path.write_bytes(b"some content that is longer than sixteen bytes")
    failing_open(monkeypatch, path, error)

    assert classifier.classify_path(path) == FastPathDecision(label)


def test_missing_path(classifier, tmp_path: Path) -> None:
    assert classifier.classify_path(tmp_path / "nope") == FastPathDecision("file_does_not_exist")


def test_directory(classifier, tmp_path: Path) -> None:
    assert classifier.classify_path(tmp_path) == FastPathDecision("directory")


def test_empty_file(classifier, tmp_path: Path) -> None:
    path = tmp_path / "empty"
    path.touch()
    assert classifier.classify_path(path) == FastPathDecision("empty")


def test_tiny_files(classifier, tmp_path: Path) -> None:
    text = tmp_path / "hello.txt"
    text.write_bytes(b"Hello")
    binary = tmp_path / "blob"
    binary.write_bytes(b"\xff\xfe\x00\x01\x02")

    assert classifier.classify_path(text) == FastPathDecision("txt")
    assert classifier.classify_path(binary) == FastPathDecision("unknown")


def test_whitespace_padded_file(classifier, tmp_path: Path) -> None:
    path = tmp_path / "spaces.txt"
    path.write_bytes(b" " * 10_000 + b"hi" + b"\n" * 10_000)
    assert classifier.classify_path(path) == FastPathDecision("txt")


def test_file_path_and_bytes_agree(classifier, tmp_path: Path) -> None:
    content = b"#!/bin/sh\necho hello world\n" * 500
    path = tmp_path / "script.sh"
    path.write_bytes(content)
    assert classifier.classify_path(path) == classifier.classify_bytes(content)


def test_symlink_is_followed_by_default(classifier, tmp_path: Path) -> None:
    target = tmp_path / "target.txt"
    target.write_bytes(b"Hello")
    link = tmp_path / "link"
    link.symlink_to(target)
    assert classifier.classify_path(link) == FastPathDecision("txt")


def test_symlink_reported_with_no_dereference(tmp_path: Path) -> None:
    classifier = FastPathClassifier(FeatureExtractor(), no_dereference=True)
    target = tmp_path / "target.txt"
    target.write_bytes(b"Hello")
    link = tmp_path / "link"
    link.symlink_to(target)

    decision = classifier.classify_path(link)

    assert decision == FastPathDecision("symlink", link_target=os.path.realpath(target))


def test_dangling_symlink(tmp_path: Path) -> None:
    link = tmp_path / "dangling"
    link.symlink_to(tmp_path / "missing")

    followed = FastPathClassifier(FeatureExtractor()).classify_path(link)
    reported = FastPathClassifier(FeatureExtractor(), no_dereference=True).classify_path(link)

    assert followed == FastPathDecision("file_does_not_exist")
    assert reported.label == "symlink"


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores permissions")
def test_permission_error(classifier, tmp_path: Path) -> None:
    path = tmp_path / "secret"
    path.write_bytes(b"top secret content, more than sixteen bytes")
    path.chmod(0)
    try:
        assert classifier.classify_path(path) == FastPathDecision("permission_error")
    finally:
        path.chmod(0o600)


@pytest.mark.skipif(not hasattr(socket, "AF_UNIX"), reason="needs unix sockets")
def test_special_file_is_unknown(classifier, tmp_path: Path) -> None:
    path = tmp_path / "sock"
    sock = socket.socket(socket.AF_UNIX)
    try:
        sock.bind(str(path))
    except OSError:
        pytest.skip("cannot bind a unix socket here")
    try:
        assert classifier.classify_path(path) == FastPathDecision("unknown")
    finally:
        sock.close()
