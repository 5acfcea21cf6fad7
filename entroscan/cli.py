"""
EntroScan CLI
==============

Click-based command-line interface for the EntroScan classifier.
Exactly one target source is required per run: a single file, a
directory tree, or a PID-busting sweep of every running process.

Usage::

    python -m entroscan --file /tmp/suspicious.bin
    python -m entroscan --dir /usr/bin --elf --entropy 7.7 --csv
    python -m entroscan --proc --entropy 7.7 --json --workers 8

Records go to stdout; logs and the sweep summary go to stderr.

Exit codes:
    0    success
    1    fatal error, or a sweep aborted on an unreadable target
    2    usage error
    130  interrupted

References:
    - Click Documentation. https://click.palletsprojects.com/
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Optional

import click
from pydantic import ValidationError

from shared.config import EntroScanConfig
from shared.console import ScanConsole
from shared.logger import ScanLogger
from shared.models import ScanResult

from entroscan import __tool_name__, __version__
from entroscan.core.engine import ScanEngine
from entroscan.core.errors import (
    EntroScanError,
    MalformedTargetError,
    ScanCancelledError,
)
from entroscan.core.models import ClassificationRecord, ErrorPolicy, ScanPolicy
from entroscan.output.console import EntroScanConsoleOutput, OutputMode, RecordFormatter
from entroscan.output.report import EntroScanReportGenerator

#: Exit status after Ctrl-C, as a shell reports SIGINT.
EXIT_INTERRUPTED = 130


# ===================================================================== #
#  Helpers
# ===================================================================== #

def _build_config(
    config_path: Optional[str],
    workers: Optional[int],
    on_error: Optional[str],
    delim: Optional[str],
) -> EntroScanConfig:
    """Load configuration and apply command-line overrides."""
    config = EntroScanConfig.load(config_path)
    scan = config.scan
    if workers is not None:
        scan.max_workers = workers
    if on_error is not None:
        scan.on_error = on_error
    if delim is not None:
        scan.delimiter = delim
    try:
        ErrorPolicy(scan.on_error)
    except ValueError:
        raise click.BadParameter(
            f"invalid on_error value {scan.on_error!r}", param_hint="'--on-error'"
        ) from None
    return config


def _output_mode(csv: bool, json_lines: bool) -> OutputMode:
    if csv and json_lines:
        raise click.UsageError("--csv and --json are mutually exclusive")
    if json_lines:
        return OutputMode.JSON
    if csv:
        return OutputMode.DELIMITED
    return OutputMode.TEXT


# ===================================================================== #
#  Command
# ===================================================================== #

@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--file", "file_path",
    type=click.Path(),
    default=None,
    help="Classify a single file.",
)
@click.option(
    "--dir", "dir_path",
    type=click.Path(),
    default=None,
    help="Classify every regular file beneath a directory.",
)
@click.option(
    "--proc",
    is_flag=True,
    default=False,
    help="PID-bust every possible /proc/<pid>/exe and classify live processes.",
)
@click.option(
    "--elf",
    is_flag=True,
    default=False,
    help="Only analyse ELF files (always on with --proc).",
)
@click.option(
    "--entropy",
    type=click.FloatRange(0.0, 8.0),
    default=None,
    help="Report only targets with entropy >= this value (0.0-8.0).",
)
@click.option(
    "--csv",
    is_flag=True,
    default=False,
    help="Delimited output: filename, path, entropy, elf, md5, sha1, sha256, sha512.",
)
@click.option(
    "--delim",
    default=None,
    help="Field delimiter for --csv output (default ',').",
)
@click.option(
    "--json", "json_lines",
    is_flag=True,
    default=False,
    help="Emit one JSON object per record.",
)
@click.option(
    "--workers", "-w",
    type=click.IntRange(min=1),
    default=None,
    help="Number of targets classified concurrently.",
)
@click.option(
    "--on-error",
    type=click.Choice([p.value for p in ErrorPolicy]),
    default=None,
    help="What to do when a file is present but unreadable.",
)
@click.option(
    "--output", "-o",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also write a JSON report to this file.",
)
@click.option(
    "--config", "-c", "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to EntroScan configuration file (TOML).",
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging.",
)
@click.option(
    "--quiet", "-q",
    is_flag=True,
    default=False,
    help="Suppress logs and the sweep summary.",
)
@click.version_option(__version__, prog_name=__tool_name__)
@click.pass_context
def cli(
    ctx: click.Context,
    file_path: Optional[str],
    dir_path: Optional[str],
    proc: bool,
    elf: bool,
    entropy: Optional[float],
    csv: bool,
    delim: Optional[str],
    json_lines: bool,
    workers: Optional[int],
    on_error: Optional[str],
    output: Optional[str],
    config_path: Optional[str],
    verbose: bool,
    quiet: bool,
) -> None:
    """EntroScan -- find packed or encrypted executables.

    Combines an ELF signature check with Shannon entropy and attaches
    MD5 / SHA-1 / SHA-256 / SHA-512 digests to every target whose
    entropy meets the threshold.
    """
    sources = [s for s in (file_path, dir_path) if s is not None]
    if proc:
        sources.append("proc")
    if len(sources) != 1:
        raise click.UsageError("exactly one of --file, --dir or --proc is required")

    config = _build_config(config_path, workers, on_error, delim)
    mode = _output_mode(csv, json_lines)
    if mode is OutputMode.DELIMITED and not config.scan.delimiter:
        raise click.BadParameter("delimiter must not be empty", param_hint="'--delim'")

    glb = config.global_settings
    logger = ScanLogger(
        "engine",
        log_level="DEBUG" if (verbose or glb.debug) else glb.log_level,
        log_file=glb.log_file or None,
        json_logs=glb.log_json,
        console_output=not quiet,
    )
    console = ScanConsole(quiet=quiet)
    engine = ScanEngine(config, logger)

    try:
        policy = engine.policy(elf_only=True if elf else None, entropy_threshold=entropy)
    except ValidationError as exc:
        raise click.BadParameter(
            exc.errors()[0]["msg"], param_hint="'--entropy'"
        ) from None

    formatter = RecordFormatter(mode, config.scan.delimiter)
    reported: list[ClassificationRecord] = []
    shown = 0

    def emit(record: ClassificationRecord) -> None:
        nonlocal shown
        if record.meets(policy.entropy_threshold):
            click.echo(formatter.format(record))
            shown += 1
            if output:
                reported.append(record)

    cancel = threading.Event()

    # ---------------------------------------------------------------- #
    #  Single file: any error is fatal
    # ---------------------------------------------------------------- #
    if file_path is not None:
        try:
            record = engine.scan_file(file_path, policy, cancel)
        except MalformedTargetError as exc:
            raise click.BadParameter(str(exc), param_hint="'--file'") from None
        except (EntroScanError, OSError) as exc:
            raise click.ClickException(f"error processing file {file_path}: {exc}")
        except KeyboardInterrupt:
            cancel.set()
            ctx.exit(EXIT_INTERRUPTED)
        emit(record)
        if output:
            result = ScanResult(
                tool_name=__tool_name__, target=file_path, scanned=1, classified=1
            )
            _write_report(console, result.finalize(), policy, reported, output)
        return

    # ---------------------------------------------------------------- #
    #  Sweeps
    # ---------------------------------------------------------------- #
    if dir_path is not None:
        result = ScanResult(tool_name=__tool_name__, target=dir_path)
        records = engine.scan_directory(dir_path, policy, result=result, cancel=cancel)
        label = f"directory sweep of {dir_path}"
    else:
        result = ScanResult(tool_name=__tool_name__, target=config.scan.proc_dir)
        records = engine.scan_processes(policy, result=result, cancel=cancel)
        label = "process sweep"

    failure: Optional[str] = None
    interrupted = False
    try:
        with logger.timed(label):
            for record in records:
                emit(record)
    except MalformedTargetError as exc:
        raise click.BadParameter(str(exc), param_hint="'--dir'") from None
    except (KeyboardInterrupt, ScanCancelledError):
        cancel.set()
        records.close()
        result.metadata["interrupted"] = True
        interrupted = True
    except (EntroScanError, OSError) as exc:
        failure = str(exc)

    result.finalize(f"Sweep aborted: {failure}" if failure else None)
    EntroScanConsoleOutput(console).display_summary(result, reported=shown)
    if output:
        _write_report(console, result, policy, reported, output)

    if failure:
        raise click.ClickException(failure)
    if interrupted:
        ctx.exit(EXIT_INTERRUPTED)


def _write_report(
    console: ScanConsole,
    result: ScanResult,
    policy: ScanPolicy,
    reported: list[ClassificationRecord],
    output: str,
) -> None:
    path = EntroScanReportGenerator().generate_json(
        result, policy, reported, Path(output)
    )
    console.success(f"JSON report saved to: {path}")


def main() -> None:
    """Main entry point for the EntroScan CLI."""
    cli()


if __name__ == "__main__":
    main()
