"""
ELF Signature Detection
========================

Decides whether a target is an ELF image by comparing its first four
bytes with the ELF magic number ``7F 45 4C 46``.  This is the cheapest
check the scanner runs and, with ``--elf``, the one that lets most
files on a system be skipped after a single 4-byte read.

References:
    - TIS Committee. (1995). Executable and Linkable Format (ELF)
      Specification, Version 1.2. Figure 1-4, e_ident[].
"""

from __future__ import annotations

from entroscan.analyzers._fileio import open_regular, read_exact
from entroscan.core.constants import ELF_MAGIC, MAGIC_READ_SIZE
from entroscan.core.errors import NotRegularFileError
from entroscan.core.models import SignatureResult


class SignatureDetector:
    """Identify ELF images by magic number.

    Non-regular files and files shorter than four bytes are a normal
    negative, not an error.  A target that cannot be opened raises.

    Usage::

        detector = SignatureDetector()
        if detector.detect("/usr/bin/ls"):
            ...
    """

    def __init__(self, magic: bytes = ELF_MAGIC) -> None:
        if len(magic) > MAGIC_READ_SIZE:
            raise ValueError(
                "magic number is longer than the number of bytes read"
            )
        self.magic = magic

    def probe(self, path: str) -> SignatureResult:
        """Inspect *path* and report both ELF-ness and regular-file-ness.

        Raises:
            MalformedTargetError: *path* is empty.
            TargetVanishedError: *path* does not exist.
            OSError: the file exists but cannot be opened or read.
        """
        try:
            with open_regular(path) as (fh, size):
                if size < MAGIC_READ_SIZE:
                    return SignatureResult(is_elf=False)
                header = read_exact(fh, MAGIC_READ_SIZE)
        except NotRegularFileError:
            return SignatureResult(is_elf=False, is_regular=False)

        return SignatureResult(is_elf=header[: len(self.magic)] == self.magic)

    def detect(self, path: str) -> bool:
        """Return ``True`` when *path* starts with the ELF magic number."""
        return self.probe(path).is_elf
