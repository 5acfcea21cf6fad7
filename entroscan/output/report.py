"""
EntroScan Report Generator
===========================

Writes a machine-readable JSON report of a sweep: bookkeeping from the
:class:`ScanResult`, the policy it ran under, and every reported record.
Suitable for ingestion by SIEM pipelines or for diffing two sweeps of
the same host.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from shared.models import ScanResult

from entroscan import __version__
from entroscan.core.models import ClassificationRecord, ScanPolicy


class EntroScanReportGenerator:
    """Generate JSON reports from sweep results."""

    def build(
        self,
        result: ScanResult,
        policy: ScanPolicy,
        records: Sequence[ClassificationRecord],
    ) -> dict[str, Any]:
        """Assemble the report as a plain dictionary."""
        return {
            "report_metadata": {
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "tool": result.tool_name,
                "target": result.target,
                "version": __version__,
            },
            "policy": policy.model_dump(mode="json"),
            "summary": {
                "scanned": result.scanned,
                "classified": result.classified,
                "reported": len(records),
                "skipped": result.skipped,
                "skipped_by_kind": result.issue_counts,
                "duration_seconds": result.duration_seconds,
                "description": result.summary,
            },
            "records": [r.model_dump(mode="json") for r in records],
            "issues": [i.model_dump(mode="json") for i in result.issues],
            "metadata": result.metadata,
        }

    def generate_json(
        self,
        result: ScanResult,
        policy: ScanPolicy,
        records: Sequence[ClassificationRecord],
        output_path: Path,
    ) -> Path:
        """Write the report to *output_path* and return the resolved path."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as fh:
            json.dump(
                self.build(result, policy, records),
                fh,
                indent=2,
                ensure_ascii=False,
                default=str,
            )
        return output_path.resolve()
