"""
Scanner constants that downstream tooling relies on.

Changing any of these changes what a record means, so they live in one
place and are imported everywhere else.
"""

from __future__ import annotations

#: Largest file (in bytes) on which entropy or digests are computed: 2 GiB.
MAX_FILE_SIZE: int = 2_147_483_648

#: Bytes read per chunk during streaming entropy / digest passes.
READ_CHUNK_SIZE: int = 256_000

#: ``0x7F 'E' 'L' 'F'``.
ELF_MAGIC: bytes = b"\x7fELF"

#: Number of leading bytes needed to recognise an ELF image.
MAGIC_READ_SIZE: int = len(ELF_MAGIC)

#: procfs mount point used for PID busting.
PROC_DIR: str = "/proc"

#: Lowest PID probed.
MIN_PID: int = 1

#: Exclusive upper bound of the PID range probed. 64-bit Linux caps
#: ``pid_max`` at 2^22.
MAX_PID: int = 4_194_304

#: Entropy value stored on a record whose entropy was never computed.
ENTROPY_NOT_COMPUTED: float = -1.0

#: Maximum entropy of a byte stream, in bits per byte.
MAX_ENTROPY: float = 8.0
