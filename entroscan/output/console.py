"""
EntroScan Console Output
=========================

Two concerns live here:

* :class:`RecordFormatter` turns a :class:`ClassificationRecord` into one
  line-oriented chunk of stdout text: the classic ``key: value`` block,
  a delimited row, or a JSON line.
* :class:`EntroScanConsoleOutput` renders the end-of-sweep summary to
  stderr with Rich, using the ScanConsole abstraction for consistent
  styling.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

import enum

from rich.markup import escape

from shared.console import ScanConsole
from shared.models import ScanResult

from entroscan.core.models import ClassificationRecord


class OutputMode(str, enum.Enum):
    """Record output layouts."""
    TEXT = "text"
    DELIMITED = "delimited"
    JSON = "json"


def _bool(value: bool) -> str:
    return "true" if value else "false"


class RecordFormatter:
    """Render records for stdout.

    Usage::

        fmt = RecordFormatter(OutputMode.DELIMITED, delimiter="|")
        click.echo(fmt.format(record))

    Args:
        mode: Output layout.
        delimiter: Field separator for :attr:`OutputMode.DELIMITED`.
    """

    def __init__(self, mode: OutputMode = OutputMode.TEXT, delimiter: str = ",") -> None:
        if mode is OutputMode.DELIMITED and not delimiter:
            raise ValueError("delimiter must not be empty")
        self.mode = mode
        self.delimiter = delimiter

    def format(self, record: ClassificationRecord) -> str:
        """Return *record* rendered without a trailing newline."""
        if self.mode is OutputMode.JSON:
            return record.model_dump_json()
        if self.mode is OutputMode.DELIMITED:
            return self.delimiter.join(self._fields(record))
        return self._text(record)

    @staticmethod
    def _fields(record: ClassificationRecord) -> list[str]:
        return [
            record.name,
            record.path,
            f"{record.entropy:.2f}",
            _bool(record.is_elf),
            *record.digests.as_tuple(),
        ]

    @staticmethod
    def _text(record: ClassificationRecord) -> str:
        d = record.digests
        return (
            f"filename: {record.name}\n"
            f"path: {record.path}\n"
            f"entropy: {record.entropy:.2f}\n"
            f"elf: {_bool(record.is_elf)}\n"
            f"md5: {d.md5}\n"
            f"sha1: {d.sha1}\n"
            f"sha256: {d.sha256}\n"
            f"sha512: {d.sha512}\n"
        )


# ---------------------------------------------------------------------------
# EntroScanConsoleOutput
# ---------------------------------------------------------------------------

class EntroScanConsoleOutput:
    """Rich stderr display of sweep bookkeeping.

    Usage::

        output = EntroScanConsoleOutput()
        output.display_summary(result, reported=12)
    """

    #: Maximum number of skipped targets listed individually.
    MAX_ISSUES_SHOWN: int = 25

    def __init__(self, console: ScanConsole | None = None) -> None:
        self._console: ScanConsole = console or ScanConsole()

    def display_summary(self, result: ScanResult, reported: int) -> None:
        """Display counts, duration, and any non-benign skipped targets.

        Args:
            result: Finalised sweep bookkeeping.
            reported: Number of records that met the display threshold.
        """
        self._console.section("EntroScan -- Sweep Summary")

        duration = result.duration_seconds
        rows: list[tuple[str, object]] = [
            ("Target", escape(result.target)),
            ("Scanned", f"{result.scanned:,}"),
            ("Classified", f"{result.classified:,}"),
            ("Reported", f"{reported:,}"),
            ("Skipped", f"{result.skipped:,}"),
        ]
        absent = result.metadata.get("absent_candidates")
        if absent:
            rows.append(("Absent PIDs", f"{absent:,}"))
        if duration is not None:
            rows.append(("Duration", f"{duration:.2f}s"))
        self._console.table("Sweep", ["Metric", "Value"], rows, styles=["bold", ""])

        notable = [i for i in result.issues if not i.kind.benign]
        if notable:
            shown = notable[: self.MAX_ISSUES_SHOWN]
            caption = None
            if len(notable) > len(shown):
                caption = f"{len(notable) - len(shown)} more not shown"
            self._console.table(
                "Skipped Targets",
                ["Path", "Reason", "Detail"],
                [(escape(i.path), i.kind.value, escape(i.message)) for i in shown],
                caption=caption,
                styles=["", "yellow", "dim"],
            )
            self._console.warning(f"{len(notable)} target(s) could not be analysed")
        else:
            self._console.success(result.summary or "Sweep complete")
