"""Shared fixtures for EntroScan tests."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

import pytest

from shared.config import EntroScanConfig, ScanConfig
from shared.logger import ScanLogger

from entroscan.core.engine import ScanEngine

ELF_MAGIC = b"\x7fELF"

#: Every byte value equally often: entropy is exactly 8.0.
UNIFORM = bytes(range(256)) * 64


@pytest.fixture
def quiet_logger() -> ScanLogger:
    return ScanLogger("test", console_output=False)


@pytest.fixture
def write_file(tmp_path: Path) -> Callable[..., Path]:
    """Write *data* to ``tmp_path / name`` and return the path."""

    def _write(name: str, data: bytes) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def elf_low(write_file: Callable[..., Path]) -> Path:
    """ELF header followed by zeros: entropy well under 1."""
    return write_file("low.elf", ELF_MAGIC + b"\x00" * 4096)


@pytest.fixture
def elf_high(write_file: Callable[..., Path]) -> Path:
    """ELF header followed by uniform bytes: entropy rounds to 8.0."""
    return write_file("high.elf", ELF_MAGIC + UNIFORM)


@pytest.fixture
def text_file(write_file: Callable[..., Path]) -> Path:
    return write_file("notes.txt", b"hello entropy scanner\n" * 50)


@pytest.fixture
def fifo(tmp_path: Path) -> Path:
    if not hasattr(os, "mkfifo"):
        pytest.skip("named pipes not supported")
    path = tmp_path / "pipe"
    os.mkfifo(path)
    return path


@pytest.fixture
def make_engine(quiet_logger: ScanLogger) -> Callable[..., ScanEngine]:
    """Build a ScanEngine whose ``[scan]`` settings are overridden by kwargs."""

    def _make(**scan: object) -> ScanEngine:
        config = EntroScanConfig(scan=ScanConfig(**scan))
        return ScanEngine(config, quiet_logger)

    return _make
