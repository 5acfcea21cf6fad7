"""
Regular-file access shared by every analyzer.

Opening a FIFO for reading blocks until a writer appears, and opening
some character devices has side effects, so targets are ``stat``-ed
first and only regular files are ever opened.  The open itself uses
``O_NONBLOCK`` and the descriptor is re-checked with ``fstat`` so a
path swapped for a FIFO between the two calls still cannot hang a sweep.
"""

from __future__ import annotations

import os
import stat
from contextlib import contextmanager
from typing import BinaryIO, Iterator, Optional, Protocol

from entroscan.core.errors import (
    FileTooLargeError,
    MalformedTargetError,
    NotRegularFileError,
    ScanCancelledError,
    TargetVanishedError,
)

_OPEN_FLAGS = os.O_RDONLY | getattr(os, "O_NONBLOCK", 0) | getattr(os, "O_CLOEXEC", 0)


class CancelToken(Protocol):
    """Anything with ``is_set()``, e.g. :class:`threading.Event`."""

    def is_set(self) -> bool: ...


def check_target(path: str) -> str:
    """Reject empty or NUL-containing paths before any I/O."""
    if not isinstance(path, str) or not path or "\x00" in path:
        raise MalformedTargetError(f"invalid target path: {path!r}", str(path))
    return path


@contextmanager
def open_regular(
    path: str,
    *,
    max_size: Optional[int] = None,
) -> Iterator[tuple[BinaryIO, int]]:
    """Open *path* for unbuffered binary reading if it is a regular file.

    Symbolic links are followed.  A dangling link counts as a
    non-regular file rather than a vanished one.

    Args:
        path: Target path.
        max_size: Reject files larger than this many bytes.

    Yields:
        ``(file_object, size_in_bytes)``; the file is closed on exit.

    Raises:
        MalformedTargetError: *path* is empty.
        TargetVanishedError: *path* does not exist.
        NotRegularFileError: *path* is not a regular file.
        FileTooLargeError: size exceeds *max_size*.
        OSError: any other failure (e.g. permission denied).
    """
    check_target(path)
    try:
        st = os.stat(path)
    except FileNotFoundError:
        if os.path.islink(path):
            raise NotRegularFileError(path, "dangling symbolic link") from None
        raise TargetVanishedError(path) from None

    if not stat.S_ISREG(st.st_mode):
        raise NotRegularFileError(path)

    try:
        fd = os.open(path, _OPEN_FLAGS)
    except FileNotFoundError:
        raise TargetVanishedError(path) from None

    try:
        fh = os.fdopen(fd, "rb", buffering=0)
    except BaseException:
        os.close(fd)
        raise

    with fh:
        fst = os.fstat(fh.fileno())
        if not stat.S_ISREG(fst.st_mode):
            raise NotRegularFileError(path)
        if max_size is not None and fst.st_size > max_size:
            raise FileTooLargeError(path, fst.st_size, max_size)
        yield fh, fst.st_size


def iter_chunks(
    fh: BinaryIO,
    chunk_size: int,
    *,
    path: str = "",
    cancel: Optional[CancelToken] = None,
) -> Iterator[bytes]:
    """Read *fh* sequentially in chunks of at most *chunk_size* bytes.

    *cancel* is polled before every read.
    """
    while True:
        if cancel is not None and cancel.is_set():
            raise ScanCancelledError(path)
        chunk = fh.read(chunk_size)
        if not chunk:
            return
        yield chunk


def read_exact(fh: BinaryIO, size: int) -> bytes:
    """Read *size* bytes, or fewer only when EOF comes first.

    A raw unbuffered read may return short, so keep reading until the
    count is met.
    """
    buf = bytearray()
    while len(buf) < size:
        piece = fh.read(size - len(buf))
        if not piece:
            break
        buf += piece
    return bytes(buf)
