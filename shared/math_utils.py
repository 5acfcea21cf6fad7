"""
EntroScan Mathematical Utilities
=================================

Entropy estimators over the 8-bit byte alphabet, backed by NumPy so that
multi-megabyte chunks can be histogrammed without a Python-level loop.

References:
    [1] Shannon, C. E. (1948). A Mathematical Theory of Communication.
        Bell System Technical Journal, 27(3), 379-423.
    [2] Lyda, R., & Hamrock, J. (2007). Using Entropy Analysis to Find
        Encrypted and Packed Malware. IEEE Security & Privacy, 5(2).
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray


# ---------------------------------------------------------------------------
#  Type aliases for readability
# ---------------------------------------------------------------------------
CountArray = NDArray[np.int64]

#: Number of distinct symbols in the byte alphabet.
BYTE_ALPHABET: int = 256

#: Maximum Shannon entropy for an 8-bit alphabet, in bits per byte.
MAX_BYTE_ENTROPY: float = 8.0


# ========================== Histograms =====================================


def empty_histogram() -> CountArray:
    """Return a zeroed 256-bin byte-value histogram."""
    return np.zeros(BYTE_ALPHABET, dtype=np.int64)


def byte_histogram(data: bytes | bytearray | memoryview) -> CountArray:
    """Count occurrences of every byte value in *data*.

    Args:
        data: Raw bytes.

    Returns:
        Array of 256 counters, index *i* holding the count of byte *i*.
    """
    if not data:
        return empty_histogram()
    values = np.frombuffer(data, dtype=np.uint8)
    return np.bincount(values, minlength=BYTE_ALPHABET).astype(np.int64)


# ========================== Entropy Measures ===============================


def shannon_entropy_from_counts(counts: CountArray, total: int | None = None) -> float:
    """Compute Shannon entropy from a byte-value histogram.

    .. math::

        H = -\\sum_{i=0}^{255} p_i \\, \\log_2(p_i), \\quad p_i = c_i / N

    Symbols with zero occurrences contribute nothing (``0 log 0 = 0``).

    Args:
        counts: 256 per-symbol counters.
        total: Number of bytes observed.  Defaults to ``counts.sum()``.

    Returns:
        Entropy in bits per byte, clamped to [0.0, 8.0].  0.0 when no
        bytes were observed.
    """
    size = int(counts.sum()) if total is None else int(total)
    if size <= 0:
        return 0.0

    observed = counts[counts > 0].astype(np.float64)
    p = observed / float(size)
    entropy = float(-(p * np.log2(p)).sum())
    return min(max(0.0, entropy), MAX_BYTE_ENTROPY)


def shannon_entropy(data: bytes) -> float:
    """Compute the Shannon entropy of a byte sequence.

    Reference:
        Shannon, C. E. (1948). A Mathematical Theory of Communication.

    Args:
        data: Raw byte sequence to analyse.

    Returns:
        Shannon entropy in bits per byte. Returns 0.0 for empty input.
    """
    if not data:
        return 0.0
    return shannon_entropy_from_counts(byte_histogram(data), len(data))


# ========================== Rounding =======================================


def round_half_away(value: float, ndigits: int = 2) -> float:
    """Round *value* to *ndigits* decimals, ties away from zero.

    Python's built-in :func:`round` uses banker's rounding; entropy
    scores are reported with the conventional half-away-from-zero rule
    instead: ``round_half_away(0.125) == 0.13`` where ``round(0.125, 2)``
    gives ``0.12``.

    Args:
        value: Value to round.
        ndigits: Number of decimal places.

    Returns:
        The rounded value.
    """
    scale = 10.0 ** ndigits
    scaled = abs(value) * scale
    rounded = math.floor(scaled + 0.5) / scale
    return math.copysign(rounded, value) if value else 0.0
