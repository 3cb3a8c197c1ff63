# erased_cells/config.py
"""
Library settings, read once from the environment at import time.

    ERASED_CELLS_PARALLEL_WORKERS     threads used to split large elementwise
                                      scans (1 disables splitting)
    ERASED_CELLS_PARALLEL_MIN_LENGTH  minimum buffer length before splitting
    ERASED_CELLS_LOG_LEVEL            initial level of the package logger
"""
import os
from dataclasses import dataclass
from typing import Mapping, Optional

_ENV_PREFIX = "ERASED_CELLS_"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True, slots=True)
class Settings:
    """Immutable runtime settings."""
    parallel_workers: int = 1
    parallel_min_length: int = 1 << 20
    log_level: str = "WARNING"
    # Declared endianness of the wire format. Not configurable.
    byte_order: str = "<"

    def __post_init__(self):
        if self.parallel_workers < 1:
            raise ValueError(f"parallel_workers must be >= 1, got {self.parallel_workers}.")
        if self.parallel_min_length < 1:
            raise ValueError(f"parallel_min_length must be >= 1, got {self.parallel_min_length}.")
        if self.log_level not in _LOG_LEVELS:
            raise ValueError(
                f"Unsupported log level: '{self.log_level}'. Must be one of {', '.join(_LOG_LEVELS)}."
            )
        if self.byte_order != "<":
            raise ValueError("The wire format is little-endian; byte_order must be '<'.")

    @property
    def parallel(self) -> bool:
        return self.parallel_workers > 1


def _read_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = environ.get(_ENV_PREFIX + key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{_ENV_PREFIX + key} must be an integer, got '{raw}'.") from None


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """
    Builds `Settings` from environment variables.

    Args:
        environ: Mapping to read from; defaults to `os.environ`.

    Raises:
        ValueError: If a variable is set to an invalid value.
    """
    if environ is None:
        environ = os.environ
    defaults = Settings()
    return Settings(
        parallel_workers=_read_int(environ, "PARALLEL_WORKERS", defaults.parallel_workers),
        parallel_min_length=_read_int(environ, "PARALLEL_MIN_LENGTH", defaults.parallel_min_length),
        log_level=environ.get(_ENV_PREFIX + "LOG_LEVEL", defaults.log_level).strip().upper(),
    )


SETTINGS: Settings = load_settings()
