"""Tests for the ELF signature detector."""
import io
import os
from contextlib import contextmanager
from pathlib import Path
from unittest import mock

import pytest

from entroscan.analyzers import signature as signature_mod
from entroscan.analyzers._fileio import read_exact
from entroscan.analyzers.signature import SignatureDetector
from entroscan.core.errors import MalformedTargetError, TargetVanishedError
from entroscan.core.models import SignatureResult


def test_elf_magic_detected(elf_low: Path) -> None:
    assert SignatureDetector().detect(str(elf_low)) is True


def test_other_prefix_not_elf(write_file) -> None:
    path = write_file("script.sh", b"#!/bin/sh\necho hi\n")
    assert SignatureDetector().detect(str(path)) is False


def test_near_miss_magic_not_elf(write_file) -> None:
    """Only the exact four-byte sequence counts."""
    path = write_file("almost", b"\x7fELG" + b"\x00" * 32)
    assert SignatureDetector().detect(str(path)) is False


@pytest.mark.parametrize("data", [b"", b"\x7f", b"\x7fE", b"\x7fEL"])
def test_short_files_not_elf(write_file, data: bytes) -> None:
    """Files shorter than the magic number are a negative, not an error."""
    path = write_file("short", data)
    result = SignatureDetector().probe(str(path))
    assert result.is_elf is False
    assert result.is_regular is True


def test_exactly_four_bytes_is_elf(write_file) -> None:
    path = write_file("bare", b"\x7fELF")
    assert SignatureDetector().detect(str(path)) is True


def test_fifo_is_not_elf_and_not_regular(fifo: Path) -> None:
    """A named pipe is never opened, so the probe cannot block."""
    result = SignatureDetector().probe(str(fifo))
    assert result.is_elf is False
    assert result.is_regular is False


def test_directory_is_not_elf(tmp_path: Path) -> None:
    assert SignatureDetector().detect(str(tmp_path)) is False


def test_dangling_symlink_is_not_regular(tmp_path: Path) -> None:
    link = tmp_path / "exe"
    os.symlink(tmp_path / "gone", link)
    result = SignatureDetector().probe(str(link))
    assert result == SignatureResult(is_elf=False, is_regular=False)


def test_symlink_to_elf_is_followed(tmp_path: Path, elf_low: Path) -> None:
    link = tmp_path / "link"
    os.symlink(elf_low, link)
    assert SignatureDetector().detect(str(link)) is True


def test_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(TargetVanishedError) as exc_info:
        SignatureDetector().detect(str(tmp_path / "missing"))
    assert exc_info.value.path == str(tmp_path / "missing")


def test_empty_path_is_malformed() -> None:
    with pytest.raises(MalformedTargetError):
        SignatureDetector().detect("")


def test_custom_magic_longer_than_read_rejected() -> None:
    with pytest.raises(ValueError):
        SignatureDetector(magic=b"\x7fELF\x02")


class _Trickle(io.RawIOBase):
    """Raw stream handing out one byte per read."""

    def __init__(self, data: bytes) -> None:
        self._data = data

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        piece, self._data = self._data[:1], self._data[1:]
        return piece


def test_read_exact_collects_short_reads() -> None:
    assert read_exact(_Trickle(b"\x7fELF\x02"), 4) == b"\x7fELF"
    assert read_exact(_Trickle(b"\x7fE"), 4) == b"\x7fE"


def test_magic_read_survives_short_reads(elf_low: Path) -> None:
    @contextmanager
    def trickling(path, **kwargs):
        yield _Trickle(b"\x7fELF" + b"\x00" * 8), 12

    with mock.patch.object(signature_mod, "open_regular", trickling):
        assert SignatureDetector().detect(str(elf_low)) is True
