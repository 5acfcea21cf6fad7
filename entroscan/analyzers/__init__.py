"""
EntroScan Analyzers
====================

The three per-target measurements, cheapest first: ELF signature,
streaming entropy, streaming digests.
"""

from entroscan.analyzers.signature import SignatureDetector
from entroscan.analyzers.entropy import EntropyCalculator, byte_entropy
from entroscan.analyzers.digest import DigestCalculator, digest_bytes

__all__ = [
    "SignatureDetector",
    "EntropyCalculator",
    "DigestCalculator",
    "byte_entropy",
    "digest_bytes",
]
