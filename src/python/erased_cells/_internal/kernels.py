# erased_cells/_internal/kernels.py

"""
Elementwise kernels shared by CellBuffer and MaskedCellBuffer.

Operands are cast to the promoted compute type before the ufunc runs, so
intermediate values live in that representation. Floating point warnings
are suppressed: overflow wraps for integers and produces inf/nan for floats.

Large scans may be split into contiguous index ranges and run on a thread
pool (NumPy releases the GIL inside ufuncs). The split never changes the
result; it only applies when `Settings.parallel_workers > 1`.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Optional, Union

import numpy as np

from ..config import SETTINGS, Settings
from ..types import CellType, Operator

logger = logging.getLogger(__name__)

Operand = Union[np.ndarray, int, float]


def _as_compute(operand: Operand, dtype: np.dtype) -> Any:
    if isinstance(operand, np.ndarray):
        return operand.astype(dtype, copy=False)
    return np.asarray(operand).astype(dtype)


def _split(length: int, settings: Settings) -> Optional[list[tuple[int, int]]]:
    if not settings.parallel or length < settings.parallel_min_length:
        return None
    bounds = np.linspace(0, length, settings.parallel_workers + 1, dtype=np.int64)
    return [(int(start), int(stop)) for start, stop in zip(bounds[:-1], bounds[1:]) if stop > start]


def _slice(operand: Any, start: int, stop: int) -> Any:
    if isinstance(operand, np.ndarray) and operand.ndim == 1:
        return operand[start:stop]
    return operand


def binary(
    op: Operator,
    lhs: Operand,
    rhs: Operand,
    compute: CellType,
    result: CellType,
    *,
    settings: Settings = SETTINGS
) -> np.ndarray:
    """
    Evaluates `lhs op rhs` elementwise. At least one operand is a 1-D array;
    the other may be a 0-d scalar.

    Args:
        op: The operator.
        lhs, rhs: Arrays of equal length, or one array and one scalar.
        compute: Cell type both operands are cast to.
        result: Cell type of the returned array.
        settings: Controls the optional parallel split.
    """
    length = len(lhs) if isinstance(lhs, np.ndarray) else len(rhs)
    with np.errstate(all='ignore'):
        left = _as_compute(lhs, compute.dtype)
        right = _as_compute(rhs, compute.dtype)
        out = np.empty(length, dtype=result.dtype)

        ranges = _split(length, settings)
        if ranges is None:
            op.ufunc(left, right, out=out, casting='unsafe')
            return out

    logger.debug("Splitting %s over %d cells into %d ranges", op.name, length, len(ranges))

    def run(bounds: tuple[int, int]) -> None:
        start, stop = bounds
        with np.errstate(all='ignore'):
            op.ufunc(_slice(left, start, stop), _slice(right, start, stop), out=out[start:stop], casting='unsafe')

    with ThreadPoolExecutor(max_workers=settings.parallel_workers) as pool:
        # Consume the iterator so worker exceptions propagate.
        list(pool.map(run, ranges))
    return out


def negate(arr: np.ndarray, result: CellType) -> np.ndarray:
    """Elementwise negation computed in `result`."""
    with np.errstate(all='ignore'):
        return np.negative(arr.astype(result.dtype))
