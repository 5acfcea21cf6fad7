"""
EntroScan Shared Data Models
=============================

Pydantic v2 models describing a sweep as a whole: when it ran, what it
targeted, how many targets it looked at, and every target it had to
skip along the way (with the reason), so that an operator can follow up
on anything that was not classified.

References:
    - Pydantic v2 documentation. https://docs.pydantic.dev/latest/
"""

from __future__ import annotations

import datetime as _dt
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# ========================== Enumerations ===================================


class IssueKind(str, Enum):
    """Why a target produced no record.

    Attributes:
        VANISHED:    The target disappeared between discovery and read.
        TOO_LARGE:   The target exceeds the analysis size ceiling.
        NOT_REGULAR: The target is not a regular file.
        IO_ERROR:    Any other I/O failure (permissions, corruption).
        WALK_ERROR:  The directory walk itself failed below the root.
    """

    VANISHED = "vanished"
    TOO_LARGE = "too_large"
    NOT_REGULAR = "not_regular"
    IO_ERROR = "io_error"
    WALK_ERROR = "walk_error"

    @property
    def benign(self) -> bool:
        """Whether this kind is an expected outcome on a live system."""
        return self in (IssueKind.VANISHED, IssueKind.NOT_REGULAR)


# ========================== Core Models ====================================


class ScanIssue(BaseModel):
    """A target that was skipped during a sweep.

    Attributes:
        path:    Offending path.
        kind:    Skip category.
        message: Underlying error text.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Offending path")
    kind: IssueKind = Field(..., description="Skip category")
    message: str = Field(default="", description="Underlying error text")


class ScanResult(BaseModel):
    """Aggregated bookkeeping for a single sweep.

    Records themselves are streamed to the caller as they are produced;
    this object only keeps counts and skipped-target issues.

    Attributes:
        tool_name:  Name of the producing tool.
        target:     Sweep target (file, directory root, or proc dir).
        start_time: UTC timestamp when the sweep started.
        end_time:   UTC timestamp when the sweep ended.
        scanned:    Number of targets examined.
        classified: Number of records produced.
        issues:     Skipped targets with reasons.
        summary:    Human-readable summary text.
        metadata:   Arbitrary extra metadata dict.
    """

    model_config = ConfigDict(
        validate_assignment=True,
        use_enum_values=False,
        extra="ignore",
    )

    tool_name: str = Field(..., min_length=1, description="Tool name")
    target: str = Field(..., min_length=1, description="Sweep target")
    start_time: _dt.datetime = Field(
        default_factory=lambda: _dt.datetime.now(_dt.timezone.utc),
        description="Sweep start timestamp (UTC)",
    )
    end_time: Optional[_dt.datetime] = Field(
        default=None,
        description="Sweep end timestamp (UTC)",
    )
    scanned: int = Field(default=0, ge=0, description="Targets examined")
    classified: int = Field(default=0, ge=0, description="Records produced")
    issues: list[ScanIssue] = Field(
        default_factory=list,
        description="Skipped targets",
    )
    summary: str = Field(default="", description="Human-readable result summary")
    metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional metadata",
    )

    # ------------------------------------------------------------------ #
    #  Derived properties
    # ------------------------------------------------------------------ #

    @property
    def duration_seconds(self) -> float | None:
        """Elapsed sweep time in seconds, or ``None`` if *end_time* is unset."""
        if self.end_time is None:
            return None
        return (self.end_time - self.start_time).total_seconds()

    @property
    def skipped(self) -> int:
        """Number of targets skipped."""
        return len(self.issues)

    @property
    def issue_counts(self) -> dict[str, int]:
        """Skipped targets grouped by :class:`IssueKind` value."""
        counts: dict[str, int] = {k.value: 0 for k in IssueKind}
        for issue in self.issues:
            counts[issue.kind.value] += 1
        return counts

    # ------------------------------------------------------------------ #
    #  Mutating helpers
    # ------------------------------------------------------------------ #

    def add_issue(self, issue: ScanIssue) -> None:
        """Append a skipped-target issue."""
        self.issues.append(issue)

    def finalize(self, summary: str | None = None) -> ScanResult:
        """Mark the sweep as complete by setting *end_time* and *summary*.

        If *summary* is ``None`` a default is generated from the counters.

        Returns:
            ``self`` for fluent chaining.
        """
        self.end_time = _dt.datetime.now(_dt.timezone.utc)
        if summary is None:
            summary = (
                f"Scanned {self.scanned} target(s): {self.classified} classified, "
                f"{self.skipped} skipped"
            )
        self.summary = summary
        return self
