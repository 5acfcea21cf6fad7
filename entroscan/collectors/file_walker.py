"""
Directory Tree Walker
======================

Yields every regular file beneath a root, in lexical order, without
following symbolic links.  Devices, FIFOs, sockets and links are never
yielded, so nothing downstream can block on opening a pipe.

File trees are walked live on a running system, so directories that
disappear mid-walk are skipped quietly; other walk failures are handed
to an ``onerror`` callback that decides whether to abort.
"""

from __future__ import annotations

import os
import stat
from typing import Callable, Iterator, Optional

from entroscan.analyzers._fileio import check_target
from entroscan.core.errors import MalformedTargetError

WalkErrorHandler = Callable[[OSError], None]


def walk_regular_files(
    root: str,
    onerror: Optional[WalkErrorHandler] = None,
) -> Iterator[str]:
    """Yield regular-file paths under *root*.

    A *root* that is itself a regular file yields just that path.

    Args:
        root: Directory (or file) to walk.
        onerror: Called with the :class:`OSError` for every directory
            that cannot be listed (other than one that vanished).  It
            may raise to stop the walk.  Errors are ignored when ``None``.

    Raises:
        MalformedTargetError: *root* is empty or does not exist.
    """
    check_target(root)
    try:
        st = os.lstat(root)
    except FileNotFoundError:
        raise MalformedTargetError(f"directory not found: {root}", root) from None

    if stat.S_ISREG(st.st_mode):
        yield root
        return
    if not stat.S_ISDIR(st.st_mode):
        return

    yield from _walk(root, onerror)


def _list(directory: str, onerror: Optional[WalkErrorHandler]) -> Iterator[os.DirEntry]:
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda e: e.name)
    except FileNotFoundError:
        return iter(())
    except OSError as exc:
        if onerror is not None:
            onerror(exc)
        return iter(())
    return iter(entries)


def _walk(root: str, onerror: Optional[WalkErrorHandler]) -> Iterator[str]:
    # explicit stack so arbitrarily deep trees cannot hit the recursion limit
    stack = [_list(root, onerror)]
    while stack:
        entry = next(stack[-1], None)
        if entry is None:
            stack.pop()
            continue
        try:
            if entry.is_dir(follow_symlinks=False):
                stack.append(_list(entry.path, onerror))
            elif entry.is_file(follow_symlinks=False):
                yield entry.path
        except FileNotFoundError:
            continue
        except OSError as exc:
            if onerror is not None:
                onerror(exc)
