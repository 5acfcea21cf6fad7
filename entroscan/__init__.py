"""
EntroScan -- Packed / Encrypted Binary Triage
==============================================

Classifies files and running processes as likely packed or encrypted by
combining an ELF magic-number check with Shannon entropy, and attaches
MD5 / SHA-1 / SHA-256 / SHA-512 digests to high-entropy candidates.

Running processes are discovered by "PID busting": every possible
``/proc/<pid>/exe`` path is probed directly instead of trusting a
listing of ``/proc``, which surfaces processes hidden by rootkits that
only filter directory reads.

Modules:
    - entroscan.core.engine: Sweep orchestrator (error policy, workers)
    - entroscan.core.classifier: Per-target classification policy
    - entroscan.core.models: Pydantic data models
    - entroscan.analyzers: Signature, entropy and digest calculators
    - entroscan.collectors: Directory walk and PID enumeration
    - entroscan.output: Record formatting and JSON reports
    - entroscan.cli: Click-based command-line interface

References:
    - Lyda, R., & Hamrock, J. (2007). Using Entropy Analysis to Find
      Encrypted and Packed Malware. IEEE Security & Privacy, 5(2).
    - TIS Committee. (1995). Executable and Linkable Format (ELF) Specification.
"""

__version__ = "1.1.0"
__tool_name__ = "entroscan"
