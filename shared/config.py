"""
EntroScan Configuration
=======================

Settings live in two TOML tables, ``[global]`` (logging) and ``[scan]``
(classification policy, I/O bounds, PID range, scheduling).  Each table
maps onto a slotted dataclass; keys a table does not declare are
dropped, keys it omits keep their defaults.

Command-line options are applied on top of the loaded object by the CLI.

References:
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, TypeVar

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from entroscan.core.constants import (
    MAX_FILE_SIZE,
    MAX_PID,
    MIN_PID,
    PROC_DIR,
    READ_CHUNK_SIZE,
)

_Section = TypeVar("_Section")

#: Looked up when :meth:`EntroScanConfig.load` is called without a path.
DEFAULT_CONFIG_FILE: Path = Path(__file__).resolve().parent.parent / "config.toml"


@dataclass(slots=True)
class ScanConfig:
    """``[scan]`` table.

    The ceilings match 64-bit Linux: files are analysed up to 2 GiB and
    PID busting probes ids below 2^22.
    """

    entropy_threshold: float = 0.0
    elf_only: bool = False

    max_file_size: int = MAX_FILE_SIZE
    chunk_size: int = READ_CHUNK_SIZE

    proc_dir: str = PROC_DIR
    min_pid: int = MIN_PID
    max_pid: int = MAX_PID

    max_workers: int = 1
    ordered_output: bool = True
    on_error: str = "abort"

    delimiter: str = ","


@dataclass(slots=True)
class GlobalConfig:
    """``[global]`` table. An empty ``log_file`` disables file logging."""

    log_level: str = "INFO"
    log_file: str = ""
    log_json: bool = False
    debug: bool = False


def _section(kind: type[_Section], table: dict[str, Any]) -> _Section:
    known = {f.name for f in fields(kind)}  # type: ignore[arg-type]
    return kind(**{key: value for key, value in table.items() if key in known})


@dataclass(slots=True)
class EntroScanConfig:
    """All EntroScan settings.

    Usage::

        config = EntroScanConfig.load("entroscan.toml")
        config.scan.max_workers = 4
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    scan: ScanConfig = field(default_factory=ScanConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> EntroScanConfig:
        """Read settings from *path*, or from :data:`DEFAULT_CONFIG_FILE`.

        Raises:
            FileNotFoundError: *path* was given and does not exist.  A
                missing default file just yields the built-in defaults.
        """
        source = DEFAULT_CONFIG_FILE if path is None else Path(path)
        if not source.is_file():
            if path is None:
                return cls()
            raise FileNotFoundError(f"Configuration file not found: {source}")

        raw = tomllib.loads(source.read_text(encoding="utf-8"))
        return cls(
            global_settings=_section(GlobalConfig, raw.get("global", {})),
            scan=_section(ScanConfig, raw.get("scan", {})),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


_cached: EntroScanConfig | None = None


def get_config(path: str | Path | None = None) -> EntroScanConfig:
    """Shared configuration instance.

    The first call (or any call naming a *path*) loads and caches; later
    calls without a path return the cached object.
    """
    global _cached
    if _cached is None or path is not None:
        _cached = EntroScanConfig.load(path)
    return _cached
