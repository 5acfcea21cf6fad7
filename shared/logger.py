"""
EntroScan Structured Logger
============================

Provides :class:`ScanLogger`, a structured logging facade over the
stdlib :mod:`logging` package.  Humans get Rich-rendered records on
stderr; machines get an optional rotating log file, either plain text
or one JSON object per line.

Console output always goes to stderr so that scan records written to
stdout stay clean for piping.

Every record carries the component name, the current sweep operation
(``"tree_walk"``, ``"pid_bust"``, ...) and, when given, the target path
the message is about.  PID busting produces millions of candidate-level
DEBUG calls, so each call checks the level before building any context.

References:
    - Python logging HOWTO. https://docs.python.org/3/howto/logging.html
    - Rich library. https://github.com/Textualize/rich
"""

from __future__ import annotations

import json
import logging
import threading
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterator

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

_LOG_THEME = Theme(
    {
        "log.level.debug": "dim cyan",
        "log.level.info": "bold bright_blue",
        "log.level.warning": "bold yellow",
        "log.level.error": "bold red",
        "log.level.critical": "bold white on red",
    }
)

_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(threadName)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

#: Keyword arguments passed straight through to :meth:`logging.Logger.log`.
_STDLIB_KWARGS = frozenset({"exc_info", "stack_info", "stacklevel"})


def _level(name: str) -> int:
    """Map a level name to its numeric value, defaulting to INFO."""
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO


# ========================== Formatters / Handlers ==========================


class _JSONFormatter(logging.Formatter):
    """Render each record as a single-line JSON object.

    Output fields::

        {
          "timestamp": "2024-05-01T12:00:00+00:00",
          "level": "WARNING",
          "logger": "entroscan.engine",
          "message": "Skipping target: ...",
          "tool_name": "engine",
          "operation": "tree_walk",
          "path": "/usr/bin/ls",
          "thread": "entroscan_0",
          "extra": {"kind": "too_large"},
          "exc_info": "Traceback ..."
        }

    ``operation``, ``path``, ``extra`` and ``exc_info`` are omitted
    when empty.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "tool_name": getattr(record, "tool_name", None),
        }
        for attr in ("operation", "path"):
            value = getattr(record, attr, None)
            if value:
                entry[attr] = value
        entry["thread"] = record.threadName

        extra = getattr(record, "scan_extra", None)
        if extra:
            entry["extra"] = extra
        if record.exc_info and record.exc_info[1] is not None:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def _console_handler(level: int) -> logging.Handler:
    # markup off: target paths may contain "[...]"
    handler = RichHandler(
        console=Console(theme=_LOG_THEME, stderr=True),
        level=level,
        show_path=False,
        show_time=True,
        markup=False,
        rich_tracebacks=True,
        tracebacks_show_locals=False,
    )
    return handler


def _file_handler(
    log_file: str | Path,
    level: int,
    json_logs: bool,
    max_bytes: int,
    backup_count: int,
) -> logging.Handler:
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        filename=str(path),
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    handler.setLevel(level)
    if json_logs:
        handler.setFormatter(_JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(fmt=_TEXT_FORMAT, datefmt=_DATE_FORMAT))
    return handler


# ========================== ScanLogger =====================================


class _Stopwatch:
    """Elapsed-time reading handed out by :meth:`ScanLogger.timed`."""

    __slots__ = ("_start", "_stop")

    def __init__(self) -> None:
        self._start = time.perf_counter()
        self._stop: float | None = None

    def stop(self) -> None:
        self._stop = time.perf_counter()

    @property
    def elapsed(self) -> float:
        """Seconds since start, frozen once stopped."""
        end = self._stop if self._stop is not None else time.perf_counter()
        return end - self._start


class ScanLogger:
    """Structured logger bound to one EntroScan component.

    Keyword arguments other than the stdlib ones become structured
    context: ``path=`` is promoted to its own field, anything else is
    collected under ``extra``.

    Usage::

        log = ScanLogger("engine", log_file="entroscan.log", json_logs=True)
        log.info("Sweep started")
        with log.operation("pid_bust"):
            log.debug("Candidate skipped", path="/proc/42/exe")

    Args:
        tool_name:       Component name; the stdlib logger is ``entroscan.<tool_name>``.
        log_level:       Minimum severity (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file:        Rotating log file.  ``None`` or ``""`` disables it.
        json_logs:       Write JSON lines instead of plain text to *log_file*.
        max_bytes:       Rotate the log file at this size (default 10 MiB).
        backup_count:    Rotated files to keep.
        console_output:  Attach the Rich stderr handler.
    """

    def __init__(
        self,
        tool_name: str,
        *,
        log_level: str = "INFO",
        log_file: str | Path | None = None,
        json_logs: bool = False,
        max_bytes: int = 10_485_760,
        backup_count: int = 5,
        console_output: bool = True,
    ) -> None:
        self._tool_name = tool_name
        self._operation: str | None = None
        self._lock = threading.Lock()

        level = _level(log_level)
        self._logger = logging.getLogger(f"entroscan.{tool_name}")
        self._logger.setLevel(level)
        self._logger.propagate = False

        # re-instantiation replaces, never stacks, handlers
        for old in list(self._logger.handlers):
            self._logger.removeHandler(old)
            old.close()

        if console_output:
            self._logger.addHandler(_console_handler(level))
        if log_file:
            self._logger.addHandler(
                _file_handler(log_file, level, json_logs, max_bytes, backup_count)
            )

    # ------------------------------------------------------------------ #
    #  Context
    # ------------------------------------------------------------------ #

    @contextmanager
    def operation(self, name: str) -> Iterator[ScanLogger]:
        """Tag every record emitted inside the block with ``operation=name``.

        Nested blocks restore the outer name on exit.
        """
        with self._lock:
            previous, self._operation = self._operation, name
        try:
            yield self
        finally:
            with self._lock:
                self._operation = previous

    @contextmanager
    def timed(self, label: str) -> Iterator[_Stopwatch]:
        """Log start (DEBUG) and completion with elapsed time (INFO).

        Usage::

            with log.timed("pid bust") as watch:
                records = list(engine.scan_processes(policy))
            print(watch.elapsed)
        """
        watch = _Stopwatch()
        self.debug("Started: %s", label)
        try:
            yield watch
        finally:
            watch.stop()
            self.info("Completed: %s (%.3f sec)", label, watch.elapsed)

    # ------------------------------------------------------------------ #
    #  Emitting
    # ------------------------------------------------------------------ #

    def enabled_for(self, level: int) -> bool:
        """Whether a record at *level* would be emitted."""
        return self._logger.isEnabledFor(level)

    def _log(self, level: int, msg: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        passthrough = {k: kwargs.pop(k) for k in list(kwargs) if k in _STDLIB_KWARGS}
        path = kwargs.pop("path", None)
        context: dict[str, Any] = dict(kwargs.pop("extra", None) or {})
        context.update(
            tool_name=self._tool_name,
            operation=self._operation,
            path=str(path) if path is not None else None,
            scan_extra=kwargs or None,
        )
        passthrough.setdefault("stacklevel", 3)
        self._logger.log(level, msg, *args, extra=context, **passthrough)

    def debug(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, args, kwargs)

    def info(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, args, kwargs)

    def warning(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, args, kwargs)

    def error(self, msg: str, *args: Any, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, args, kwargs)

    def exception(self, msg: str, *args: Any, **kwargs: Any) -> None:
        """ERROR with the active exception's traceback attached."""
        kwargs.setdefault("exc_info", True)
        self._log(logging.ERROR, msg, args, kwargs)

    # ------------------------------------------------------------------ #
    #  Properties
    # ------------------------------------------------------------------ #

    @property
    def tool_name(self) -> str:
        """Name of the component this logger is bound to."""
        return self._tool_name

    @property
    def underlying(self) -> logging.Logger:
        """Direct access to the stdlib :class:`logging.Logger`."""
        return self._logger
