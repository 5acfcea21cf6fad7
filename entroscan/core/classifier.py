"""
Candidate Classifier
=====================

Runs the three analyzers against one target in cost order and stops as
soon as the policy says nothing more is needed:

    1. ELF signature (4-byte read).  Errors propagate.
    2. With ``elf_only`` and no ELF magic: done, entropy stays -1.
    3. Entropy (full read).
    4. Digests (full read) only if entropy >= threshold.

The threshold test in step 4 is the same predicate the reporting layer
uses to decide what to display, so a displayed record always carries
its digests.
"""

from __future__ import annotations

import os
from typing import Optional

from shared.logger import ScanLogger

from entroscan.analyzers._fileio import CancelToken, check_target
from entroscan.analyzers.digest import DigestCalculator
from entroscan.analyzers.entropy import EntropyCalculator
from entroscan.analyzers.signature import SignatureDetector
from entroscan.core.constants import ENTROPY_NOT_COMPUTED
from entroscan.core.errors import NotRegularFileError, ScanCancelledError
from entroscan.core.models import (
    ClassificationRecord,
    DigestSet,
    ScanPolicy,
    meets_threshold,
)


class CandidateClassifier:
    """Produce one :class:`ClassificationRecord` per target.

    The classifier holds no per-target state, so a single instance can
    be shared by any number of worker threads.

    Usage::

        classifier = CandidateClassifier()
        record = classifier.classify("/usr/bin/ls", ScanPolicy(elf_only=True))
    """

    def __init__(
        self,
        signature: SignatureDetector | None = None,
        entropy: EntropyCalculator | None = None,
        digests: DigestCalculator | None = None,
        logger: ScanLogger | None = None,
    ) -> None:
        self._signature = signature or SignatureDetector()
        self._entropy = entropy or EntropyCalculator()
        self._digests = digests or DigestCalculator()
        self._logger = logger or ScanLogger("classifier", console_output=False)

    def classify(
        self,
        target: str,
        policy: ScanPolicy,
        *,
        cancel: Optional[CancelToken] = None,
        require_regular: bool = False,
    ) -> ClassificationRecord:
        """Classify *target* under *policy*.

        Args:
            target: Path to a file or ``/proc/<pid>/exe`` link.
            policy: ELF-only filter and entropy threshold.
            cancel: Checked before work starts and between read chunks.
            require_regular: Raise instead of returning a negative record
                when *target* is not a regular file.

        Raises:
            MalformedTargetError: *target* is empty.
            NotRegularFileError: entropy was required on a non-regular
                file, or *require_regular* is set.
            FileTooLargeError: the target exceeds the size ceiling.
            TargetVanishedError: the target no longer exists.
            ScanCancelledError: *cancel* was set.
            OSError: any other I/O failure.
        """
        check_target(target)
        if cancel is not None and cancel.is_set():
            raise ScanCancelledError(target)

        sig = self._signature.probe(target)
        if require_regular and not sig.is_regular:
            raise NotRegularFileError(target)

        name = os.path.basename(target.rstrip(os.sep)) or target
        entropy = ENTROPY_NOT_COMPUTED
        digests = DigestSet()

        if policy.elf_only and not sig.is_elf:
            self._logger.debug("Not ELF, skipping entropy", path=target)
        else:
            entropy = self._entropy.compute(target, cancel=cancel)
            if meets_threshold(entropy, policy.entropy_threshold):
                digests = self._digests.compute(target, cancel=cancel)

        return ClassificationRecord(
            name=name,
            path=target,
            is_elf=sig.is_elf,
            entropy=entropy,
            digests=digests,
        )
