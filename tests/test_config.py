"""Tests for TOML configuration loading."""
from pathlib import Path

import pytest

from shared.config import EntroScanConfig, ScanConfig, get_config

from entroscan.core import constants


def test_defaults() -> None:
    scan = ScanConfig()
    assert scan.entropy_threshold == 0.0
    assert scan.elf_only is False
    assert scan.max_file_size == 2_147_483_648
    assert scan.chunk_size == 256_000
    assert (scan.proc_dir, scan.min_pid, scan.max_pid) == ("/proc", 1, 4_194_304)
    assert scan.max_workers == 1
    assert scan.on_error == "abort"
    assert scan.delimiter == ","


def test_load_overrides_and_ignores_unknown_keys(tmp_path: Path) -> None:
    path = tmp_path / "entroscan.toml"
    path.write_text(
        "[global]\n"
        'log_level = "DEBUG"\n'
        "log_json = true\n"
        "\n"
        "[scan]\n"
        "entropy_threshold = 7.7\n"
        "elf_only = true\n"
        "max_workers = 8\n"
        'on_error = "skip"\n'
        'delimiter = "|"\n'
        'colour = "purple"\n',
        encoding="utf-8",
    )
    config = EntroScanConfig.load(path)
    assert config.global_settings.log_level == "DEBUG"
    assert config.global_settings.log_json is True
    assert config.scan.entropy_threshold == 7.7
    assert config.scan.elf_only is True
    assert config.scan.max_workers == 8
    assert config.scan.on_error == "skip"
    assert config.scan.delimiter == "|"
    # untouched keys keep their defaults
    assert config.scan.max_pid == 4_194_304


def test_explicit_missing_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        EntroScanConfig.load(tmp_path / "missing.toml")


def test_to_dict_round_trips_sections() -> None:
    data = EntroScanConfig().to_dict()
    assert set(data) == {"global_settings", "scan"}
    assert data["scan"]["chunk_size"] == 256_000


def test_get_config_caches(tmp_path: Path) -> None:
    path = tmp_path / "c.toml"
    path.write_text("[scan]\nmax_workers = 3\n", encoding="utf-8")
    first = get_config(path)
    assert first.scan.max_workers == 3
    assert get_config() is first


def test_scan_defaults_follow_scanner_constants() -> None:
    scan = ScanConfig()
    assert scan.max_file_size == constants.MAX_FILE_SIZE
    assert scan.chunk_size == constants.READ_CHUNK_SIZE
    assert scan.proc_dir == constants.PROC_DIR
    assert (scan.min_pid, scan.max_pid) == (constants.MIN_PID, constants.MAX_PID)
