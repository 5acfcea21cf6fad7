"""
PID Busting Process Enumerator
===============================

Loadable-kernel-module rootkits commonly hide a process by filtering
the ``getdents`` results for ``/proc``, so the PID never shows up in a
directory listing or in ``ps``.  They frequently do *not* intercept a
direct ``open``/``stat`` of ``/proc/<pid>/exe``.  This enumerator never
lists ``/proc``; it forms the exe path for every PID in the legal range
and lets the caller probe each one.

Generation is pure path construction: no I/O, no failure modes, O(1)
memory regardless of the PID ceiling, and the sequence can be iterated
any number of times.

References:
    - proc(5), Linux man-pages: /proc/[pid]/exe.
    - Sandfly Security. (2019). Linux process "PID busting" to find
      hidden processes.
"""

from __future__ import annotations

import os
from typing import Iterator

from entroscan.core.constants import MAX_PID, MIN_PID, PROC_DIR


class ProcessEnumerator:
    """Lazy, restartable sequence of ``<proc_dir>/<pid>/exe`` paths.

    Covers every PID in ``[min_pid, max_pid)``.

    Usage::

        for exe in ProcessEnumerator():
            ...

    Args:
        proc_dir: procfs mount point.
        min_pid: First PID, inclusive.
        max_pid: Last PID, exclusive.
    """

    def __init__(
        self,
        proc_dir: str = PROC_DIR,
        min_pid: int = MIN_PID,
        max_pid: int = MAX_PID,
    ) -> None:
        if min_pid < MIN_PID:
            raise ValueError(f"min_pid must be >= {MIN_PID}")
        if max_pid < min_pid:
            raise ValueError("max_pid must be >= min_pid")
        self.proc_dir = proc_dir
        self.min_pid = min_pid
        self.max_pid = max_pid

    def path_for(self, pid: int) -> str:
        """Return the process-image path for *pid*."""
        return os.path.join(self.proc_dir, str(pid), "exe")

    def __iter__(self) -> Iterator[str]:
        for pid in range(self.min_pid, self.max_pid):
            yield self.path_for(pid)

    def __len__(self) -> int:
        return self.max_pid - self.min_pid

    def __repr__(self) -> str:
        return (
            f"ProcessEnumerator(proc_dir={self.proc_dir!r}, "
            f"min_pid={self.min_pid}, max_pid={self.max_pid})"
        )
