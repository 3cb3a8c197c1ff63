# erased_cells/_internal/dispatch.py

"""
Table-driven dispatch over the closed set of cell types.

`CELL_KINDS` is the single canonical list pairing each `CellType` with its
numpy representation. Every per-representation table in the library is
built from it with `dispatch_table`, which instantiates a factory once per
kind and refuses to produce a table that misses a tag. Adding a kind means
adding a `CellType` member and one `CELL_KINDS` entry; any table that cannot
handle it fails at import time instead of silently falling through.
"""

from types import MappingProxyType
from typing import Any, Callable, Generic, Iterable, Mapping, Optional, TypeVar

import numpy as np

from ..dataclasses import CellTypeInfo
from ..exceptions import UnsupportedCellTypeError
from ..types import CellType

T = TypeVar("T")

# The canonical kind list. Order follows the tag values.
CELL_KINDS: tuple[tuple[CellType, np.dtype], ...] = (
    (CellType.UINT8, np.dtype('uint8')),
    (CellType.UINT16, np.dtype('uint16')),
    (CellType.UINT32, np.dtype('uint32')),
    (CellType.UINT64, np.dtype('uint64')),
    (CellType.INT8, np.dtype('int8')),
    (CellType.INT16, np.dtype('int16')),
    (CellType.INT32, np.dtype('int32')),
    (CellType.INT64, np.dtype('int64')),
    (CellType.FLOAT32, np.dtype('float32')),
    (CellType.FLOAT64, np.dtype('float64')),
)

_KIND_NAMES: dict[str, tuple[str, str]] = {
    'u': ("unsigned", "UInt"),
    'i': ("signed", "Int"),
    'f': ("float", "Float"),
}


def check_exhaustive(table: Mapping[CellType, Any], name: str) -> None:
    """
    Asserts that `table` has an entry for every `CellType`.

    Raises:
        UnsupportedCellTypeError: Naming the first missing tags.
    """
    missing = [ct.name for ct in CellType if ct not in table]
    if missing:
        raise UnsupportedCellTypeError(
            f"Dispatch table '{name}' has no entry for: {', '.join(missing)}"
        )


def _check_canonical(kinds: Iterable[tuple[CellType, np.dtype]]) -> None:
    kinds = list(kinds)
    check_exhaustive(dict(kinds), "CELL_KINDS")
    if len({dt for _, dt in kinds}) != len(kinds) or len({ct for ct, _ in kinds}) != len(kinds):
        raise UnsupportedCellTypeError("CELL_KINDS must map tags to dtypes one-to-one.")


def dispatch_table(
    factory: Callable[[CellType, np.dtype], T],
    *,
    name: Optional[str] = None
) -> Mapping[CellType, T]:
    """
    Builds a total, read-only mapping from `CellType` to `factory(ct, dtype)`.

    Args:
        factory: Called once per canonical kind with the tag and its dtype.
        name: Used in error messages; defaults to the factory's name.

    Returns:
        A `MappingProxyType` keyed by every `CellType`.
    """
    table = {cell_type: factory(cell_type, dtype) for cell_type, dtype in CELL_KINDS}
    check_exhaustive(table, name or getattr(factory, "__name__", "table"))
    return MappingProxyType(table)


class Dispatcher(Generic[T]):
    """
    Calls the representation-specific function selected by a cell type.

    `factory(ct, dtype)` must return a callable; it is evaluated once per kind
    at construction, so a call costs a single table lookup.
    """
    def __init__(self, factory: Callable[[CellType, np.dtype], Callable[..., T]], *, name: Optional[str] = None):
        self._table = dispatch_table(factory, name=name)

    def __getitem__(self, cell_type: CellType) -> Callable[..., T]:
        return self._table[cell_type]

    def __call__(self, cell_type: CellType, *args: Any, **kwargs: Any) -> T:
        return self._table[cell_type](*args, **kwargs)

    @property
    def table(self) -> Mapping[CellType, Callable[..., T]]:
        return self._table


def _describe(cell_type: CellType, dtype: np.dtype) -> CellTypeInfo:
    kind, prefix = _KIND_NAMES[dtype.kind]
    limits = np.finfo(dtype) if dtype.kind == 'f' else np.iinfo(dtype)
    return CellTypeInfo(
        cell_type=cell_type,
        display_name=f"{prefix}{dtype.itemsize * 8}",
        dtype=dtype,
        width=dtype.itemsize,
        kind=kind,
        min=limits.min.item() if dtype.kind == 'f' else int(limits.min),
        max=limits.max.item() if dtype.kind == 'f' else int(limits.max),
    )


_check_canonical(CELL_KINDS)

CELL_INFO: Mapping[CellType, CellTypeInfo] = dispatch_table(_describe, name="CELL_INFO")

# Widens a single numpy element to the Python number used at the API surface.
WIDEN: Dispatcher[Any] = Dispatcher(
    lambda ct, dt: float if dt.kind == 'f' else int, name="WIDEN"
)
