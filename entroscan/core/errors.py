"""
EntroScan Exceptions
=====================

Every per-target failure carries the offending path so that a sweep
can report it with enough context for an operator to act.

Categories:
    - MalformedTargetError: empty or invalid path, fatal before scanning.
    - NotRegularFileError:  device, FIFO, socket, directory, dangling link.
    - FileTooLargeError:    above the 2 GiB analysis ceiling.
    - TargetVanishedError:  deleted between discovery and read.
    - SweepAbortedError:    any other I/O failure while sweeping.
    - ScanCancelledError:   cancellation requested.
"""

from __future__ import annotations


class EntroScanError(Exception):
    """Base class for all scanner errors.

    Attributes:
        path: Offending path, or ``""`` when not tied to one target.
    """

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class MalformedTargetError(EntroScanError, ValueError):
    """The supplied target path is empty or otherwise unusable."""


class NotRegularFileError(EntroScanError):
    """The target is not a regular file."""

    def __init__(self, path: str, detail: str = "not a regular file") -> None:
        super().__init__(f"{path}: {detail}", path)


class FileTooLargeError(EntroScanError):
    """The target exceeds the analysis size ceiling.

    Attributes:
        size:  Observed size in bytes.
        limit: Ceiling in bytes.
    """

    def __init__(self, path: str, size: int, limit: int) -> None:
        super().__init__(
            f"{path}: file size ({size}) is too large to analyse "
            f"(max allowed: {limit})",
            path,
        )
        self.size = size
        self.limit = limit


class TargetVanishedError(EntroScanError):
    """The target no longer exists."""

    def __init__(self, path: str) -> None:
        super().__init__(f"{path}: no longer exists", path)


class SweepAbortedError(EntroScanError):
    """An unexpected I/O failure stopped a multi-target sweep.

    The original :class:`OSError` is chained as ``__cause__``.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"sweep aborted at {path}: {reason}", path)


class ScanCancelledError(EntroScanError):
    """Cancellation was requested while scanning."""

    def __init__(self, path: str = "") -> None:
        message = f"scan cancelled while processing {path}" if path else "scan cancelled"
        super().__init__(message, path)
