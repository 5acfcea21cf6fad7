"""
EntroScan Console Interface
============================

Operator-facing presentation layer built on Rich: sweep section rules,
status lines and summary tables.

Everything here is written to stderr unless told otherwise.  Scan
records are the tool's real output and reach stdout through the record
formatters, so a CSV stream piped into another program never picks up a
summary table.

References:
    - Rich library: https://github.com/Textualize/rich
"""

from __future__ import annotations

from typing import Any, Sequence

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.theme import Theme

_SCAN_THEME = Theme(
    {
        "scan.rule": "bold bright_magenta",
        "scan.ok": "bold green",
        "scan.warn": "bold yellow",
        "scan.border": "bright_cyan",
    }
)

#: status kind -> (theme style, prefix)
_STATUS_PREFIX: dict[str, tuple[str, str]] = {
    "ok": ("scan.ok", "[✔] OK"),
    "warn": ("scan.warn", "[⚠] WARNING"),
}


class ScanConsole:
    """Stderr console shared by the EntroScan output layer.

    Args:
        quiet:  Drop everything (used by ``--quiet`` and in tests).
        record: Keep a copy of the output for :meth:`export_text`.
        stderr: Target stderr; pass ``False`` to print on stdout.
    """

    def __init__(
        self,
        *,
        quiet: bool = False,
        record: bool = False,
        stderr: bool = True,
    ) -> None:
        self._out = Console(
            theme=_SCAN_THEME,
            stderr=stderr,
            quiet=quiet,
            record=record,
            highlight=False,
        )

    def _status(self, kind: str, message: str) -> None:
        style, prefix = _STATUS_PREFIX[kind]
        self._out.print(f"[{style}]{prefix}:[/{style}] {escape(message)}")

    def section(self, title: str) -> None:
        """Horizontal rule with *title* centred in it."""
        self._out.rule(f" {title} ", style="scan.rule")

    def success(self, message: str) -> None:
        self._status("ok", message)

    def warning(self, message: str) -> None:
        self._status("warn", message)

    def table(
        self,
        title: str,
        columns: Sequence[str],
        rows: Sequence[Sequence[Any]],
        *,
        caption: str | None = None,
        styles: Sequence[str] | None = None,
    ) -> None:
        """Print *rows* under *columns*; cells are converted with ``str()``.

        *caption* is printed under the table.  *styles* gives an optional
        Rich style per column, matched by position.
        """
        grid = Table(
            title=title,
            caption=caption,
            border_style="scan.border",
            header_style="scan.rule",
            padding=(0, 1),
        )
        column_styles = list(styles or ())
        column_styles += [""] * (len(columns) - len(column_styles))
        for name, style in zip(columns, column_styles):
            grid.add_column(name, style=style)
        for row in rows:
            grid.add_row(*map(str, row))
        self._out.print(grid)

    def export_text(self) -> str:
        """Recorded output as plain text; needs ``record=True``."""
        return self._out.export_text()
