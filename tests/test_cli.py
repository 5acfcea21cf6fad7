"""Tests for the entroscan command line."""
import hashlib
import json
import os
from pathlib import Path
from unittest import mock

import pytest
from click.testing import CliRunner

from entroscan import __version__
from entroscan.analyzers.entropy import EntropyCalculator
from entroscan.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def sweep_dir(tmp_path: Path) -> Path:
    root = tmp_path / "sweep"
    root.mkdir()
    (root / "high.elf").write_bytes(b"\x7fELF" + bytes(range(256)) * 64)
    (root / "low.elf").write_bytes(b"\x7fELF" + b"\x00" * 2048)
    (root / "readme").write_bytes(b"just some words\n" * 10)
    return root


def test_version(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


@pytest.mark.parametrize(
    "args",
    [[], ["--file", "a", "--dir", "b"], ["--dir", "b", "--proc"]],
)
def test_exactly_one_source_required(runner: CliRunner, args: list) -> None:
    result = runner.invoke(cli, args)
    assert result.exit_code == 2
    assert "exactly one of" in result.output


def test_entropy_out_of_range(runner: CliRunner, elf_high: Path) -> None:
    result = runner.invoke(cli, ["--file", str(elf_high), "--entropy", "9"])
    assert result.exit_code == 2


def test_csv_and_json_conflict(runner: CliRunner, elf_high: Path) -> None:
    result = runner.invoke(cli, ["--file", str(elf_high), "--csv", "--json"])
    assert result.exit_code == 2


def test_single_file_text_output(runner: CliRunner, elf_high: Path) -> None:
    result = runner.invoke(cli, ["--file", str(elf_high), "--quiet"])
    assert result.exit_code == 0
    data = elf_high.read_bytes()
    assert result.output == (
        "filename: high.elf\n"
        f"path: {elf_high}\n"
        "entropy: 8.00\n"
        "elf: true\n"
        f"md5: {hashlib.md5(data).hexdigest()}\n"
        f"sha1: {hashlib.sha1(data).hexdigest()}\n"
        f"sha256: {hashlib.sha256(data).hexdigest()}\n"
        f"sha512: {hashlib.sha512(data).hexdigest()}\n"
        "\n"
    )


def test_single_file_below_threshold_prints_nothing(runner: CliRunner, elf_low: Path) -> None:
    result = runner.invoke(cli, ["--file", str(elf_low), "--entropy", "7.7", "--quiet"])
    assert result.exit_code == 0
    assert result.output == ""


def test_single_file_missing_is_fatal(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["--file", str(tmp_path / "gone"), "--quiet"])
    assert result.exit_code == 1
    assert "gone" in result.output


def test_directory_csv_with_threshold(runner: CliRunner, sweep_dir: Path) -> None:
    result = runner.invoke(
        cli,
        ["--dir", str(sweep_dir), "--csv", "--delim", "|", "--entropy", "7.5", "--quiet"],
    )
    assert result.exit_code == 0
    rows = result.output.splitlines()
    assert len(rows) == 1
    fields = rows[0].split("|")
    assert fields[0] == "high.elf"
    assert fields[2] == "8.00"
    assert fields[3] == "true"
    assert len(fields) == 8


def test_directory_json_lines_elf_only(runner: CliRunner, sweep_dir: Path) -> None:
    result = runner.invoke(cli, ["--dir", str(sweep_dir), "--json", "--elf", "--quiet"])
    assert result.exit_code == 0
    names = [json.loads(line)["name"] for line in result.output.splitlines()]
    # the non-ELF file keeps the -1 sentinel and is never displayed
    assert names == ["high.elf", "low.elf"]


def test_directory_with_workers(runner: CliRunner, sweep_dir: Path) -> None:
    result = runner.invoke(cli, ["--dir", str(sweep_dir), "--csv", "-w", "3", "--quiet"])
    assert result.exit_code == 0
    assert [r.split(",")[0] for r in result.output.splitlines()] == [
        "high.elf", "low.elf", "readme",
    ]


def test_directory_missing_is_usage_error(runner: CliRunner, tmp_path: Path) -> None:
    result = runner.invoke(cli, ["--dir", str(tmp_path / "missing"), "--quiet"])
    assert result.exit_code == 2


def test_unreadable_file_aborts_sweep(runner: CliRunner, sweep_dir: Path) -> None:
    denied = PermissionError(13, "Permission denied")
    with mock.patch.object(EntropyCalculator, "compute", side_effect=denied):
        result = runner.invoke(cli, ["--dir", str(sweep_dir), "--quiet"])
    assert result.exit_code == 1
    assert "sweep aborted" in result.output


def test_unreadable_file_skipped_on_request(runner: CliRunner, sweep_dir: Path) -> None:
    denied = PermissionError(13, "Permission denied")
    with mock.patch.object(EntropyCalculator, "compute", side_effect=denied):
        result = runner.invoke(
            cli, ["--dir", str(sweep_dir), "--on-error", "skip", "--quiet"]
        )
    assert result.exit_code == 0
    assert result.output == ""


def test_interrupt_exits_130(runner: CliRunner, sweep_dir: Path) -> None:
    with mock.patch.object(EntropyCalculator, "compute", side_effect=KeyboardInterrupt):
        result = runner.invoke(cli, ["--dir", str(sweep_dir), "--quiet"])
    assert result.exit_code == 130


def test_report_written(runner: CliRunner, sweep_dir: Path, tmp_path: Path) -> None:
    report = tmp_path / "out" / "report.json"
    result = runner.invoke(
        cli,
        ["--dir", str(sweep_dir), "--entropy", "7.5", "--csv", "-o", str(report), "--quiet"],
    )
    assert result.exit_code == 0
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["summary"]["scanned"] == 3
    assert data["summary"]["reported"] == 1
    assert [r["name"] for r in data["records"]] == ["high.elf"]


def test_process_sweep_from_config(
    runner: CliRunner, tmp_path: Path, elf_high: Path, text_file: Path
) -> None:
    proc = tmp_path / "proc"
    for pid, target in ((1, elf_high), (2, text_file)):
        (proc / str(pid)).mkdir(parents=True)
        os.symlink(target, proc / str(pid) / "exe")
    config = tmp_path / "entroscan.toml"
    config.write_text(
        f'[scan]\nproc_dir = "{proc}"\nmin_pid = 1\nmax_pid = 10\n',
        encoding="utf-8",
    )
    result = runner.invoke(cli, ["--proc", "--csv", "--config", str(config), "--quiet"])
    assert result.exit_code == 0
    rows = result.output.splitlines()
    assert len(rows) == 1
    assert rows[0].split(",")[:2] == ["exe", str(proc / "1" / "exe")]


def test_summary_on_stderr(sweep_dir: Path) -> None:
    result = CliRunner().invoke(cli, ["--dir", str(sweep_dir), "--csv"])
    assert result.exit_code == 0
    assert "Sweep Summary" in result.output


def test_oversized_file_listed_in_summary(
    runner: CliRunner, sweep_dir: Path, tmp_path: Path
) -> None:
    (sweep_dir / "tiny").write_bytes(b"\x7fELF")
    config = tmp_path / "small.toml"
    config.write_text("[scan]\nmax_file_size = 10\n", encoding="utf-8")
    report = tmp_path / "report.json"
    result = runner.invoke(
        cli,
        ["--dir", str(sweep_dir), "--csv", "--config", str(config), "-o", str(report)],
        env={"COLUMNS": "400"},
    )
    assert result.exit_code == 0, result.output
    assert "Skipped Targets" in result.output
    assert "high.elf" in result.output
    assert "too_large" in result.output
    data = json.loads(report.read_text(encoding="utf-8"))
    assert data["summary"]["skipped_by_kind"]["too_large"] == 3
    assert data["summary"]["classified"] == 1
