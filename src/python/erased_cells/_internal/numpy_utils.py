# erased_cells/_internal/numpy_utils.py

"""
Internal utilities for interacting with NumPy arrays.

This module handles validation, and conversion between NumPy's data types
and the closed set of cell types.
"""

from typing import Any, Mapping

import numpy as np

from ..exceptions import TypeMismatchError
from ..types import CellType
from .dispatch import CELL_KINDS, dispatch_table

# --- Mappings ---

# Maps NumPy dtype objects to cell types.
_NP_DTYPE_TO_CELL_TYPE: dict[np.dtype, CellType] = {
    dtype: cell_type for cell_type, dtype in CELL_KINDS
}

# Little-endian dtypes used for the wire format.
WIRE_DTYPES: Mapping[CellType, np.dtype] = dispatch_table(
    lambda ct, dt: dt.newbyteorder('<'), name="WIRE_DTYPES"
)

# --- Functions ---


def _supported_types() -> str:
    return ", ".join(dtype.name for dtype in _NP_DTYPE_TO_CELL_TYPE)


def cell_type_for_dtype(dtype: Any) -> CellType:
    """
    Converts a NumPy dtype (in any byte order) to its cell type.

    Raises:
        TypeMismatchError: If the dtype has no cell type.
    """
    dtype = np.dtype(dtype)
    try:
        return _NP_DTYPE_TO_CELL_TYPE[dtype.newbyteorder('=')]
    except KeyError:
        raise TypeMismatchError(
            f"Unsupported NumPy dtype: '{dtype.name}'. "
            f"Supported types are: {_supported_types()}"
        ) from None


def readonly(arr: np.ndarray) -> np.ndarray:
    """Returns a non-writeable view of `arr`."""
    view = arr.view()
    view.flags.writeable = False
    return view


def owned(arr: np.ndarray, source: Any) -> np.ndarray:
    """
    Returns `arr` as a read-only array that no other reference can write to.

    When `arr` is the caller's own array and owns its memory, the caller's
    array is frozen in place instead of copied. Arrays that borrow memory
    from elsewhere are copied.
    """
    if isinstance(source, np.ndarray) and np.may_share_memory(arr, source):
        if arr is source and source.flags.owndata:
            source.flags.writeable = False
        else:
            arr = arr.copy()
    return readonly(arr)


def adopt(data: Any, cell_type: CellType) -> np.ndarray:
    """
    Takes ownership of `data` as a read-only, 1-D, C-contiguous array in the
    native representation of `cell_type`.

    A NumPy array already in that representation that owns its memory is
    not copied; it is made read-only in place. Any other array is rejected;
    plain sequences are materialised.

    Raises:
        TypeMismatchError: If `data` is an array of another representation,
            or holds values `cell_type` cannot represent.
        ValueError: If `data` is not one-dimensional.
    """
    dtype = cell_type.dtype
    if isinstance(data, np.ndarray):
        if data.dtype.newbyteorder('=') != dtype:
            raise TypeMismatchError(
                f"Array of dtype '{data.dtype.name}' cannot back a {cell_type} buffer."
            )
        arr = np.ascontiguousarray(data, dtype=dtype)
    else:
        try:
            arr = np.array(data, dtype=dtype)
        except (OverflowError, ValueError, TypeError) as e:
            raise TypeMismatchError(f"Values cannot be represented as {cell_type}: {e}") from e

    if arr.ndim != 1:
        raise ValueError(f"Cell data must be one-dimensional, got shape {arr.shape}.")
    return owned(arr, data)


def cast(arr: np.ndarray, cell_type: CellType) -> np.ndarray:
    """
    Elementwise cast following NumPy's C-style rules: floats truncate toward
    zero, integers wrap modulo the target width.
    """
    with np.errstate(all='ignore'):
        return arr.astype(cell_type.dtype)


def elided(values: list) -> str:
    """Renders values for a repr, keeping the first and last five of long sequences."""
    if len(values) > 10:
        head = ", ".join(repr(v) for v in values[:5])
        tail = ", ".join(repr(v) for v in values[-5:])
        return f"{head}, ..., {tail}"
    return ", ".join(repr(v) for v in values)
