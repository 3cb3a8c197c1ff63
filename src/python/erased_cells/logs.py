# erased_cells/logs.py
"""Package logger. Silent unless the application configures logging."""

import logging
from typing import Union

from .config import SETTINGS

_PACKAGE: str = __package__.split(".")[0]

_LOGGING_TYPES: dict[str, int] = dict(
    DEBUG=logging.DEBUG,
    INFO=logging.INFO,
    WARNING=logging.WARNING,
    ERROR=logging.ERROR,
    CRITICAL=logging.CRITICAL,
)


def check_verbose(verbose: Union[bool, str, int, None]) -> int:
    """
    Converts a verbosity argument to a logging level.

    None and False map to WARNING, True maps to INFO, strings are looked up
    by level name and integers are used as-is.
    """
    if verbose is None:
        return logging.WARNING
    if isinstance(verbose, bool):
        return logging.INFO if verbose else logging.WARNING
    if isinstance(verbose, str):
        try:
            return _LOGGING_TYPES[verbose.upper()]
        except KeyError:
            raise ValueError(
                f"Invalid verbose '{verbose}'. Must be one of {', '.join(_LOGGING_TYPES)}."
            ) from None
    if isinstance(verbose, int):
        if verbose <= 0:
            raise ValueError(f"Argument 'verbose' can not be a negative integer, {verbose} is invalid.")
        return verbose
    raise TypeError(f"verbose must be a bool, str, int or None, not {type(verbose).__name__}")


def set_log_level(verbose: Union[bool, str, int, None]) -> None:
    """Sets the level of the package logger."""
    logger.setLevel(check_verbose(verbose))


logger = logging.getLogger(_PACKAGE)
logger.addHandler(logging.NullHandler())
set_log_level(SETTINGS.log_level)
