"""
Streaming Multi-Digest Hashing
===============================

Computes MD5, SHA-1, SHA-256 and SHA-512 of a file in a single read
pass: every chunk is fed to all four accumulators before the next one
is read, so disk I/O is paid once no matter how many digests are
produced.

Zero-length files produce empty digest strings rather than the
well-known empty-input values; an empty file carries nothing worth
fingerprinting.

References:
    - Rivest, R. (1992). RFC 1321: The MD5 Message-Digest Algorithm.
    - NIST FIPS 180-4 (2015). Secure Hash Standard (SHS).
"""

from __future__ import annotations

import hashlib
from typing import Optional

from entroscan.analyzers._fileio import CancelToken, iter_chunks, open_regular
from entroscan.core.constants import MAX_FILE_SIZE, READ_CHUNK_SIZE
from entroscan.core.errors import FileTooLargeError
from entroscan.core.models import DigestSet

#: Algorithms in ascending output size: 128, 160, 256, 512 bits.
DIGEST_ALGORITHMS: tuple[str, ...] = ("md5", "sha1", "sha256", "sha512")


def _new_accumulators() -> dict[str, "hashlib._Hash"]:
    return {name: hashlib.new(name) for name in DIGEST_ALGORITHMS}


def digest_bytes(data: bytes) -> DigestSet:
    """Hash an in-memory buffer with all four algorithms.

    Unlike :meth:`DigestCalculator.compute`, empty input yields the
    standard empty-message digests.
    """
    hashes = _new_accumulators()
    for h in hashes.values():
        h.update(data)
    return DigestSet(**{name: h.hexdigest() for name, h in hashes.items()})


class DigestCalculator:
    """MD5 / SHA-1 / SHA-256 / SHA-512 over a file's bytes.

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

    def compute(self, path: str, cancel: Optional[CancelToken] = None) -> DigestSet:
        """Return all four digests of *path*.

        Raises:
            NotRegularFileError: *path* is not a regular file.
            FileTooLargeError: *path* is larger than :attr:`max_size`.
            TargetVanishedError: *path* does not exist.
            ScanCancelledError: *cancel* was set mid-stream.
        """
        with open_regular(path, max_size=self.max_size) as (fh, size):
            if size == 0:
                return DigestSet()

            hashes = _new_accumulators()
            total = 0
            for chunk in iter_chunks(fh, self.chunk_size, path=path, cancel=cancel):
                for h in hashes.values():
                    h.update(chunk)
                total += len(chunk)
                if total > self.max_size:
                    raise FileTooLargeError(path, total, self.max_size)

        if total == 0:
            # truncated to nothing after the size check
            return DigestSet()
        return DigestSet(**{name: h.hexdigest() for name, h in hashes.items()})
