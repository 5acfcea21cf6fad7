"""
EntroScan Output Module
========================

Record formatting for stdout and JSON report generation.
"""

from entroscan.output.console import (
    EntroScanConsoleOutput,
    OutputMode,
    RecordFormatter,
)
from entroscan.output.report import EntroScanReportGenerator

__all__ = [
    "EntroScanConsoleOutput",
    "EntroScanReportGenerator",
    "OutputMode",
    "RecordFormatter",
]
