"""
EntroScan Core Module
======================

Data models, the error hierarchy and scanner constants shared by every
EntroScan component.

The sweep engine and the classifier depend on the analyzers, which in
turn depend on this package, so they are imported from their own
modules (``entroscan.core.engine``, ``entroscan.core.classifier``).
"""

from entroscan.core.constants import ENTROPY_NOT_COMPUTED, MAX_FILE_SIZE, MAX_PID
from entroscan.core.errors import EntroScanError
from entroscan.core.models import (
    ClassificationRecord,
    DigestSet,
    ErrorPolicy,
    ScanPolicy,
    SignatureResult,
    TargetSource,
)

__all__ = [
    "ClassificationRecord",
    "DigestSet",
    "ENTROPY_NOT_COMPUTED",
    "EntroScanError",
    "ErrorPolicy",
    "MAX_FILE_SIZE",
    "MAX_PID",
    "ScanPolicy",
    "SignatureResult",
    "TargetSource",
]
