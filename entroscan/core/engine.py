"""
EntroScan Sweep Engine
=======================

Feeds targets from a source (single file, directory walk, or PID
busting) through the :class:`CandidateClassifier` and decides, per
failure, whether the sweep skips the target or stops.

Failure handling:
    - Vanished target (deleted mid-walk):    skip, DEBUG.
    - Not a regular file / over 2 GiB:      skip, WARNING.
    - Any other I/O error on a file target:  abort (default) or skip,
      per ``scan.on_error``.  An unreadable-but-present file during a
      security sweep is itself suspicious, hence abort by default.
    - Anything at all on a PID candidate:    skip, DEBUG.  Almost every
      PID in the range does not exist.
    - Cancellation:                           always propagates.

Scheduling:
    ``scan.max_workers == 1`` classifies targets one at a time, in
    discovery order.  With more workers a thread pool is used; at most
    ``2 * max_workers`` targets are in flight, and each worker holds at
    most one open descriptor at a time.  ``scan.ordered_output`` keeps
    discovery order (head-of-line waiting); otherwise records are
    yielded as they complete.
"""

from __future__ import annotations

import threading
from collections import deque
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Iterable, Iterator, Optional

from shared.config import EntroScanConfig
from shared.logger import ScanLogger
from shared.models import IssueKind, ScanIssue, ScanResult

from entroscan.analyzers._fileio import CancelToken
from entroscan.analyzers.digest import DigestCalculator
from entroscan.analyzers.entropy import EntropyCalculator
from entroscan.collectors.file_walker import walk_regular_files
from entroscan.collectors.process_enum import ProcessEnumerator
from entroscan.core.classifier import CandidateClassifier
from entroscan.core.errors import (
    EntroScanError,
    FileTooLargeError,
    MalformedTargetError,
    NotRegularFileError,
    ScanCancelledError,
    SweepAbortedError,
    TargetVanishedError,
)
from entroscan.core.models import (
    ClassificationRecord,
    ErrorPolicy,
    ScanPolicy,
    TargetSource,
)


class _AnyEvent:
    """Cancel token that is set when any of its events is set."""

    def __init__(self, *events: Optional[CancelToken]) -> None:
        self._events = [e for e in events if e is not None]

    def is_set(self) -> bool:
        return any(e.is_set() for e in self._events)


def _issue_kind(exc: BaseException) -> IssueKind:
    if isinstance(exc, TargetVanishedError):
        return IssueKind.VANISHED
    if isinstance(exc, NotRegularFileError):
        return IssueKind.NOT_REGULAR
    if isinstance(exc, FileTooLargeError):
        return IssueKind.TOO_LARGE
    return IssueKind.IO_ERROR


# ---------------------------------------------------------------------------
# ScanEngine
# ---------------------------------------------------------------------------

class ScanEngine:
    """Orchestrates classification sweeps.

    Records are streamed: every ``scan_*`` sweep method is a generator,
    so a sweep over four million PID candidates never materialises the
    candidate list or the result list.  Pass a :class:`ScanResult` to
    collect counts and skipped-target issues.

    Usage::

        engine = ScanEngine()
        policy = engine.policy(elf_only=True, entropy_threshold=7.7)
        for record in engine.scan_processes(policy):
            print(record.path, record.entropy)
    """

    def __init__(
        self,
        config: EntroScanConfig | None = None,
        logger: ScanLogger | None = None,
        classifier: CandidateClassifier | None = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: Scanner configuration.  Defaults are used if not provided.
            logger: Logger instance.  A new one is created if not provided.
            classifier: Classifier override, mainly for tests.
        """
        self._config: EntroScanConfig = config or EntroScanConfig()
        self._logger: ScanLogger = logger or ScanLogger("engine")
        scan = self._config.scan
        self._classifier: CandidateClassifier = classifier or CandidateClassifier(
            entropy=EntropyCalculator(scan.chunk_size, scan.max_file_size),
            digests=DigestCalculator(scan.chunk_size, scan.max_file_size),
            logger=self._logger,
        )
        self._error_policy = ErrorPolicy(scan.on_error)

    # ------------------------------------------------------------------ #
    #  Policy
    # ------------------------------------------------------------------ #

    def policy(
        self,
        elf_only: bool | None = None,
        entropy_threshold: float | None = None,
    ) -> ScanPolicy:
        """Build a :class:`ScanPolicy` from config, with optional overrides.

        Raises:
            pydantic.ValidationError: threshold outside [0, 8].
        """
        scan = self._config.scan
        return ScanPolicy(
            elf_only=scan.elf_only if elf_only is None else elf_only,
            entropy_threshold=(
                scan.entropy_threshold if entropy_threshold is None else entropy_threshold
            ),
        )

    # ------------------------------------------------------------------ #
    #  Target sources
    # ------------------------------------------------------------------ #

    def scan_file(
        self,
        path: str,
        policy: ScanPolicy,
        cancel: Optional[CancelToken] = None,
    ) -> ClassificationRecord:
        """Classify one explicitly named target.  All errors propagate."""
        with self._logger.operation("single_file"):
            return self._classifier.classify(path, policy, cancel=cancel)

    def scan_directory(
        self,
        root: str,
        policy: ScanPolicy,
        *,
        result: ScanResult | None = None,
        cancel: Optional[CancelToken] = None,
    ) -> Iterator[ClassificationRecord]:
        """Classify every regular file beneath *root*."""

        def onerror(exc: OSError) -> None:
            path = str(exc.filename or root)
            if self._error_policy is ErrorPolicy.ABORT:
                self._logger.error("Directory walk failed: %s", exc, path=path)
                raise SweepAbortedError(path, str(exc)) from exc
            self._logger.warning("Directory walk skipped: %s", exc, path=path)
            if result is not None:
                result.add_issue(
                    ScanIssue(path=path, kind=IssueKind.WALK_ERROR, message=str(exc))
                )

        targets = walk_regular_files(root, onerror=onerror)
        with self._logger.operation("tree_walk"):
            yield from self.sweep(
                targets,
                policy,
                source=TargetSource.DIRECTORY,
                result=result,
                cancel=cancel,
            )

    def scan_processes(
        self,
        policy: ScanPolicy,
        *,
        enumerator: ProcessEnumerator | None = None,
        result: ScanResult | None = None,
        cancel: Optional[CancelToken] = None,
    ) -> Iterator[ClassificationRecord]:
        """PID-bust the configured range and classify every live process image.

        ``elf_only`` is forced on.  Candidates that do not resolve to a
        regular file produce no record.
        """
        scan = self._config.scan
        if enumerator is None:
            enumerator = ProcessEnumerator(scan.proc_dir, scan.min_pid, scan.max_pid)
        policy = policy.model_copy(update={"elf_only": True})

        with self._logger.operation("pid_bust"):
            self._logger.info(
                "Probing %d PID candidates under %s",
                len(enumerator),
                enumerator.proc_dir,
            )
            yield from self.sweep(
                enumerator,
                policy,
                source=TargetSource.PROCESS,
                result=result,
                cancel=cancel,
            )

    # ------------------------------------------------------------------ #
    #  Sweep
    # ------------------------------------------------------------------ #

    def sweep(
        self,
        targets: Iterable[str],
        policy: ScanPolicy,
        *,
        source: TargetSource = TargetSource.FILE,
        result: ScanResult | None = None,
        cancel: Optional[CancelToken] = None,
    ) -> Iterator[ClassificationRecord]:
        """Classify *targets*, yielding one record per successful target.

        Raises:
            SweepAbortedError: unexpected I/O failure under the abort policy.
            ScanCancelledError: *cancel* was set.
        """
        counts = {"scanned": 0, "classified": 0, "absent": 0}
        workers = max(1, int(self._config.scan.max_workers))
        if workers == 1:
            records = self._sweep_sequential(
                targets, policy, source, counts, result, cancel
            )
        else:
            records = self._sweep_pooled(
                targets, policy, source, counts, result, cancel, workers
            )
        try:
            for record in records:
                counts["classified"] += 1
                yield record
        finally:
            records.close()
            if result is not None:
                result.scanned += counts["scanned"]
                result.classified += counts["classified"]
                if counts["absent"]:
                    result.metadata["absent_candidates"] = (
                        result.metadata.get("absent_candidates", 0) + counts["absent"]
                    )

    def _sweep_sequential(
        self,
        targets: Iterable[str],
        policy: ScanPolicy,
        source: TargetSource,
        counts: dict[str, int],
        result: ScanResult | None,
        cancel: Optional[CancelToken],
    ) -> Iterator[ClassificationRecord]:
        require_regular = source is TargetSource.PROCESS
        for target in targets:
            if cancel is not None and cancel.is_set():
                raise ScanCancelledError(target)
            counts["scanned"] += 1
            try:
                record = self._classifier.classify(
                    target, policy, cancel=cancel, require_regular=require_regular
                )
            except ScanCancelledError:
                raise
            except (EntroScanError, OSError) as exc:
                self._handle_failure(target, exc, source, counts, result)
                continue
            yield record

    def _sweep_pooled(
        self,
        targets: Iterable[str],
        policy: ScanPolicy,
        source: TargetSource,
        counts: dict[str, int],
        result: ScanResult | None,
        cancel: Optional[CancelToken],
        workers: int,
    ) -> Iterator[ClassificationRecord]:
        require_regular = source is TargetSource.PROCESS
        ordered = self._config.scan.ordered_output
        stop = threading.Event()
        token = _AnyEvent(cancel, stop)
        window = 2 * workers
        pending: deque[tuple[str, Future[ClassificationRecord]]] = deque()
        source_iter = iter(targets)
        exhausted = False

        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="entroscan"
        ) as pool:
            try:
                while True:
                    while not exhausted and len(pending) < window:
                        if cancel is not None and cancel.is_set():
                            raise ScanCancelledError()
                        target = next(source_iter, None)
                        if target is None:
                            exhausted = True
                            break
                        counts["scanned"] += 1
                        future = pool.submit(
                            self._classifier.classify,
                            target,
                            policy,
                            cancel=token,
                            require_regular=require_regular,
                        )
                        pending.append((target, future))

                    if not pending:
                        break

                    if ordered:
                        target, future = pending.popleft()
                    else:
                        done, _ = wait([f for _, f in pending], return_when=FIRST_COMPLETED)
                        target, future = next(p for p in pending if p[1] in done)
                        pending.remove((target, future))

                    try:
                        record = future.result()
                    except ScanCancelledError:
                        raise
                    except (EntroScanError, OSError) as exc:
                        self._handle_failure(target, exc, source, counts, result)
                        continue
                    yield record
            finally:
                stop.set()
                for _, future in pending:
                    future.cancel()

    # ------------------------------------------------------------------ #
    #  Failure policy
    # ------------------------------------------------------------------ #

    def _handle_failure(
        self,
        target: str,
        exc: BaseException,
        source: TargetSource,
        counts: dict[str, int],
        result: ScanResult | None,
    ) -> None:
        """Absorb a per-target failure as a skip, or raise to stop the sweep."""
        if isinstance(exc, MalformedTargetError):
            raise exc

        kind = _issue_kind(exc)

        if source is TargetSource.PROCESS:
            if kind is IssueKind.VANISHED:
                counts["absent"] += 1
                return
            self._logger.debug("PID candidate skipped: %s", exc, path=target)
            if result is not None:
                result.add_issue(ScanIssue(path=target, kind=kind, message=str(exc)))
            return

        if kind is IssueKind.IO_ERROR and self._error_policy is ErrorPolicy.ABORT:
            self._logger.error("Unreadable target: %s", exc, path=target)
            raise SweepAbortedError(target, str(exc)) from exc

        if kind is IssueKind.VANISHED:
            self._logger.debug("Target vanished during sweep", path=target)
        else:
            self._logger.warning("Skipping target: %s", exc, path=target)
        if result is not None:
            result.add_issue(ScanIssue(path=target, kind=kind, message=str(exc)))
