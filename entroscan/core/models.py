"""
EntroScan Data Models
======================

Pydantic models for classification results.  Records are frozen: once
the classifier emits one it is never touched again, so records can be
handed across worker threads without any shared mutable state.

References:
    - TIS Committee. (1995). Executable and Linkable Format (ELF) Specification.
    - Rivest, R. (1992). RFC 1321: The MD5 Message-Digest Algorithm.
    - NIST FIPS 180-4 (2015). Secure Hash Standard.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field, field_validator

from entroscan.core.constants import ENTROPY_NOT_COMPUTED, MAX_ENTROPY


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class TargetSource(str, enum.Enum):
    """Where a sweep's targets come from."""
    FILE = "file"
    DIRECTORY = "directory"
    PROCESS = "process"


class ErrorPolicy(str, enum.Enum):
    """What a sweep does on an unexpected I/O failure for a file target."""
    ABORT = "abort"
    SKIP = "skip"


# ---------------------------------------------------------------------------
# Signature probe
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class SignatureResult:
    """Outcome of inspecting a target's leading bytes.

    Attributes:
        is_elf: The first four bytes are the ELF magic number.
        is_regular: The target resolved to a regular file.  ``False``
            for devices, FIFOs, sockets, directories and dangling
            symbolic links, all of which are also never ELF.
    """
    is_elf: bool
    is_regular: bool = True


# ---------------------------------------------------------------------------
# Digests
# ---------------------------------------------------------------------------

class DigestSet(BaseModel):
    """Lowercase hex digests of a target's full byte stream.

    All four fields are empty strings when digests were not computed or
    the target is zero-length.
    """

    model_config = ConfigDict(frozen=True)

    md5: str = ""
    sha1: str = ""
    sha256: str = ""
    sha512: str = ""

    @property
    def is_empty(self) -> bool:
        """True when no digest was computed."""
        return not (self.md5 or self.sha1 or self.sha256 or self.sha512)

    def as_tuple(self) -> tuple[str, str, str, str]:
        """Digests in ascending output-size order."""
        return (self.md5, self.sha1, self.sha256, self.sha512)


# ---------------------------------------------------------------------------
# Policy
# ---------------------------------------------------------------------------

class ScanPolicy(BaseModel):
    """Which computations the classifier performs on each target.

    Attributes:
        elf_only: Skip entropy and digests for targets without the ELF
            magic number.
        entropy_threshold: Digests are computed (and records displayed)
            only when entropy is greater than or equal to this value.
    """

    model_config = ConfigDict(frozen=True)

    elf_only: bool = False
    entropy_threshold: float = Field(default=0.0, ge=0.0, le=MAX_ENTROPY)


# ---------------------------------------------------------------------------
# Classification record
# ---------------------------------------------------------------------------

class ClassificationRecord(BaseModel):
    """Result of classifying one target.

    Attributes:
        name: Final path component of the target.
        path: Target path as supplied.
        is_elf: Whether the target starts with the ELF magic number.
        entropy: Shannon entropy in [0.0, 8.0], rounded to two decimals,
            or ``-1.0`` when not computed.
        digests: MD5 / SHA-1 / SHA-256 / SHA-512, empty when not computed.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    is_elf: bool = False
    entropy: float = ENTROPY_NOT_COMPUTED
    digests: DigestSet = Field(default_factory=DigestSet)

    @field_validator("entropy")
    @classmethod
    def _check_entropy(cls, v: float) -> float:
        """Entropy must be the sentinel or within [0, 8]."""
        if v == ENTROPY_NOT_COMPUTED or 0.0 <= v <= MAX_ENTROPY:
            return v
        raise ValueError(f"entropy {v} outside [0.0, {MAX_ENTROPY}]")

    @property
    def entropy_computed(self) -> bool:
        """True when entropy was calculated for this target."""
        return self.entropy != ENTROPY_NOT_COMPUTED

    def meets(self, threshold: float) -> bool:
        """Whether this record's entropy is at or above *threshold*.

        Display filtering uses this; the classifier's digest gate uses
        :func:`meets_threshold` directly, so both always agree.
        """
        return meets_threshold(self.entropy, threshold)


def meets_threshold(entropy: float, threshold: float) -> bool:
    """Inclusive threshold test shared by hashing and display.

    The "not computed" sentinel never meets a threshold in [0, 8].
    """
    return entropy >= threshold
