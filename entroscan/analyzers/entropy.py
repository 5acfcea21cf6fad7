"""
Streaming File Entropy
=======================

Computes the Shannon entropy of a file's complete byte stream in bits
per byte.  Packed or encrypted executables sit close to the 8.0 maximum,
ordinary compiled code well below it.

The file is read exactly once, sequentially, in fixed-size chunks; each
chunk is folded into a 256-bin histogram with NumPy and then discarded,
so memory use does not grow with file size.  The final value is rounded
to two decimals with ties rounded away from zero.

Entropy ranges seen in practice:
    - [0, 1)   : Empty or uniform data (single repeated value)
    - [4.5, 6.5): Typical compiled code
    - [7.0, 7.5): Compressed data
    - [7.5, 8] : Encrypted, packed, or truly random data

References:
    - Shannon, C. E. (1948). A Mathematical Theory of Communication.
      Bell System Technical Journal, 27(3), 379-423.
    - Lyda, R., & Hamrock, J. (2007). Using Entropy Analysis to Find
      Encrypted and Packed Malware. IEEE Security & Privacy, 5(2).
"""

from __future__ import annotations

from typing import Optional

from shared.math_utils import (
    byte_histogram,
    empty_histogram,
    round_half_away,
    shannon_entropy,
    shannon_entropy_from_counts,
)
from entroscan.analyzers._fileio import CancelToken, iter_chunks, open_regular
from entroscan.core.constants import MAX_FILE_SIZE, READ_CHUNK_SIZE
from entroscan.core.errors import FileTooLargeError


def byte_entropy(data: bytes) -> float:
    """Rounded Shannon entropy of an in-memory buffer.

    Uses the same rounding as :meth:`EntropyCalculator.compute`.
    """
    return round_half_away(shannon_entropy(data), 2)


class EntropyCalculator:
    """Shannon entropy over a file's bytes.

    Attributes:
        chunk_size: Bytes read per ``read()`` call.
        max_size: Files larger than this are rejected.
    """

    def __init__(
        self,
        chunk_size: int = READ_CHUNK_SIZE,
        max_size: int = MAX_FILE_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self.max_size = max_size

    def compute(self, path: str, cancel: Optional[CancelToken] = None) -> float:
        """Return the entropy of *path* rounded to two decimals.

        Args:
            path: Target file.
            cancel: Polled between chunks.

        Returns:
            Entropy in [0.0, 8.0]; 0.0 for a zero-length file.

        Raises:
            NotRegularFileError: *path* is not a regular file.
            FileTooLargeError: *path* is larger than :attr:`max_size`.
            TargetVanishedError: *path* does not exist.
            ScanCancelledError: *cancel* was set mid-stream.
        """
        with open_regular(path, max_size=self.max_size) as (fh, size):
            if size == 0:
                return 0.0

            counts = empty_histogram()
            total = 0
            for chunk in iter_chunks(fh, self.chunk_size, path=path, cancel=cancel):
                counts += byte_histogram(chunk)
                total += len(chunk)
                # the file may be growing underneath us
                if total > self.max_size:
                    raise FileTooLargeError(path, total, self.max_size)

        return round_half_away(shannon_entropy_from_counts(counts, total), 2)

