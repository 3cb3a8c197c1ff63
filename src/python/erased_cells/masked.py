# erased_cells/masked.py
"""
Buffers paired with a validity mask, and nodata sentinels.
"""
import math
from typing import Any, Mapping, Optional, Union

import numpy as np

from .buffer import CellBuffer, Scalar, _SCALAR_TYPES
from .exceptions import LengthMismatchError
from .mask import Mask
from .types import CellType, Operator
from .value import CellValue, minimal_cell_type
from ._internal.dispatch import dispatch_table

# Sentinel used by `NoData.default()`: the type minimum for integers, NaN for floats.
_DEFAULT_NODATA: Mapping[CellType, Union[int, float]] = dispatch_table(
    lambda ct, dt: math.nan if dt.kind == 'f' else int(np.iinfo(dt).min), name="DEFAULT_NODATA"
)


class NoData:
    """
    Describes which cell value, if any, marks missing data.

    - `NoData.none()`: no sentinel; every cell is data.
    - `NoData.default()`: the type minimum for integers, NaN for floats.
    - `NoData.of(v)`: the specific sentinel `v`.
    """
    __slots__ = ("_kind", "_value")

    _NONE = "none"
    _DEFAULT = "default"
    _VALUE = "value"

    def __init__(self, kind: str, value: Optional[Union[int, float]] = None):
        if kind not in (self._NONE, self._DEFAULT, self._VALUE):
            raise ValueError(f"Unknown NoData kind: '{kind}'")
        self._kind = kind
        self._value = value

    @classmethod
    def none(cls) -> "NoData":
        return cls(cls._NONE)

    @classmethod
    def default(cls) -> "NoData":
        return cls(cls._DEFAULT)

    @classmethod
    def of(cls, value: Union[int, float, CellValue]) -> "NoData":
        if isinstance(value, CellValue):
            value = value.value
        return cls(cls._VALUE, value)

    def resolve(self, cell_type: CellType) -> Optional[Union[int, float]]:
        """The sentinel for cells of `cell_type`, or None."""
        if self._kind == self._NONE:
            return None
        if self._kind == self._DEFAULT:
            return _DEFAULT_NODATA[CellType(cell_type)]
        return self._value

    def matches(self, buffer: CellBuffer) -> np.ndarray:
        """Boolean array marking the cells of `buffer` that hold the sentinel."""
        sentinel = self.resolve(buffer.cell_type)
        data = buffer.array
        if sentinel is None:
            return np.zeros(len(data), dtype=bool)
        if isinstance(sentinel, float) and math.isnan(sentinel):
            if buffer.cell_type.is_float:
                return np.isnan(data)
            return np.zeros(len(data), dtype=bool)
        return data == sentinel

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, NoData):
            return NotImplemented
        if self._kind != other._kind:
            return False
        if self._kind != self._VALUE:
            return True
        return CellValue.new(self._value) == CellValue.new(other._value)

    def __hash__(self) -> int:
        return hash((self._kind, CellValue.new(self._value) if self._kind == self._VALUE else None))

    def __repr__(self) -> str:
        if self._kind == self._VALUE:
            return f"NoData.of({self._value!r})"
        return f"NoData.{self._kind}()"


def _combine(a: Optional[Mask], b: Optional[Mask]) -> Optional[Mask]:
    if a is None:
        return b
    if b is None:
        return a
    return Mask.combine(a, b)


class MaskedCellBuffer:
    """
    A `CellBuffer` paired with an optional `Mask`. An absent mask means every
    cell is valid.

    Arithmetic delegates to `CellBuffer`, ANDs the operand masks and then
    invalidates cells the operation leaves undefined (integer division by
    zero), so nodata propagates through arbitrary expressions.

    Usage:
        buf = MaskedCellBuffer(CellBuffer(CellType.FLOAT64, [0., 1., 2.]), [True, False, True])
        ones = MaskedCellBuffer(CellBuffer.fill(3, 1.0))
        r = (buf + ones) * 2.0      # mask stays [True, False, True]
    """
    __slots__ = ("_buffer", "_mask")

    __array_ufunc__ = None

    def __init__(self, buffer: CellBuffer, mask: Union[Mask, Any, None] = None):
        """
        Pairs `buffer` with `mask` without touching any cell.

        Raises:
            LengthMismatchError: If the mask and buffer lengths differ.
        """
        if not isinstance(buffer, CellBuffer):
            raise TypeError(f"buffer must be a CellBuffer, not {type(buffer).__name__}")
        if mask is not None and not isinstance(mask, Mask):
            mask = Mask(mask)
        if mask is not None and len(mask) != len(buffer):
            raise LengthMismatchError(
                len(buffer), len(mask),
                f"Mask and buffer must have the same length ({len(mask)} != {len(buffer)})."
            )
        self._buffer = buffer
        self._mask = mask

    # --- Constructors ---

    @classmethod
    def from_values(
        cls,
        values: Any,
        mask: Union[Mask, Any, None] = None,
        cell_type: Optional[CellType] = None
    ) -> "MaskedCellBuffer":
        return cls(CellBuffer.from_values(values, cell_type), mask)

    @classmethod
    def from_nodata(cls, buffer: CellBuffer, nodata: Union[NoData, int, float, None]) -> "MaskedCellBuffer":
        """
        Masks out every cell of `buffer` equal to the nodata sentinel.

        A bare number is treated as `NoData.of(number)` and None as
        `NoData.none()`.
        """
        if nodata is None:
            nodata = NoData.none()
        elif not isinstance(nodata, NoData):
            nodata = NoData.of(nodata)
        hits = nodata.matches(buffer)
        return cls(buffer, Mask(~hits) if hits.any() else None)

    @classmethod
    def from_masked_array(cls, arr: np.ma.MaskedArray) -> "MaskedCellBuffer":
        """Converts a 1-D `numpy.ma.MaskedArray` (True = masked out)."""
        buffer = CellBuffer.from_numpy(np.ascontiguousarray(np.ma.getdata(arr)))
        if np.ma.getmask(arr) is np.ma.nomask:
            return cls(buffer)
        return cls(buffer, Mask(~np.ma.getmaskarray(arr)))

    # --- Accessors ---

    @property
    def buffer(self) -> CellBuffer:
        return self._buffer

    @property
    def mask(self) -> Optional[Mask]:
        return self._mask

    @property
    def cell_type(self) -> CellType:
        return self._buffer.cell_type

    def __len__(self) -> int:
        return len(self._buffer)

    def effective_mask(self) -> Mask:
        """The mask, with an absent mask materialised as all-valid."""
        if self._mask is None:
            return Mask.fill(len(self), True)
        return self._mask

    def is_valid(self, index: int) -> bool:
        if self._mask is None:
            self._buffer.get(index)  # bounds check
            return True
        return self._mask.get(index)

    def get(self, index: int) -> Union[int, float]:
        """The raw cell value at `index`, ignoring the mask."""
        return self._buffer.get(index)

    def get_masked(self, index: int) -> Optional[Union[int, float]]:
        """The cell value at `index`, or None if the cell is nodata."""
        value = self._buffer.get(index)
        return value if self.is_valid(index) else None

    def get_with_mask(self, index: int) -> tuple[Union[int, float], bool]:
        return self._buffer.get(index), self.is_valid(index)

    def counts(self) -> tuple[int, int]:
        """Returns `(data, nodata)` cell counts."""
        if self._mask is None:
            return len(self), 0
        return self._mask.counts()

    def min_max(self) -> tuple[CellValue, CellValue]:
        """`CellBuffer.min_max` restricted to valid cells."""
        if self._mask is None:
            return self._buffer.min_max()
        valid = self._buffer.array[self._mask.array]
        return CellBuffer(self.cell_type, valid).min_max()

    def to_numpy_with_nodata(self, fill: Union[NoData, int, float, None] = None) -> np.ndarray:
        """
        Returns a writable copy of the cells with nodata cells replaced by
        `fill` (cast to the cell type). Defaults to `NoData.default()`.
        """
        if fill is None:
            fill = NoData.default()
        if isinstance(fill, NoData):
            fill = fill.resolve(self.cell_type)
        out = self._buffer.to_numpy(copy=True)
        if self._mask is not None and fill is not None:
            out[~self._mask.array] = CellValue.of(self.cell_type, fill).value
        return out

    def to_masked_array(self) -> np.ma.MaskedArray:
        mask = np.ma.nomask if self._mask is None else ~self._mask.array
        return np.ma.MaskedArray(self._buffer.to_numpy(copy=True), mask=mask)

    # --- Conversion ---

    def convert(self, cell_type: CellType) -> "MaskedCellBuffer":
        """Converts the cells; the mask is carried over unchanged."""
        return MaskedCellBuffer(self._buffer.convert(cell_type), self._mask)

    # --- Arithmetic ---

    def apply(
        self,
        other: Union["MaskedCellBuffer", CellBuffer, Scalar],
        op: Operator,
        *,
        reflected: bool = False
    ) -> "MaskedCellBuffer":
        """
        Evaluates `self op other` (or `other op self` when `reflected`).

        A plain `CellBuffer` or scalar operand counts as fully valid.

        Raises:
            LengthMismatchError: If `other` is a buffer of another length.
        """
        op = Operator(op)
        if isinstance(other, MaskedCellBuffer):
            operand, other_mask = other._buffer, other._mask
        else:
            operand, other_mask = other, None

        result = self._buffer.apply(operand, op, reflected=reflected)
        mask = _combine(self._mask, other_mask)

        undefined = _undefined_cells(self._buffer, operand, op, reflected)
        if undefined is not None:
            mask = _combine(mask, Mask(~undefined))
        return MaskedCellBuffer(result, mask)

    def _operator(self, other: Any, op: Operator, reflected: bool = False) -> Any:
        if not isinstance(other, (MaskedCellBuffer, CellBuffer) + _SCALAR_TYPES):
            return NotImplemented
        return self.apply(other, op, reflected=reflected)

    def __add__(self, other):
        return self._operator(other, Operator.ADD)

    def __radd__(self, other):
        return self._operator(other, Operator.ADD, reflected=True)

    def __sub__(self, other):
        return self._operator(other, Operator.SUB)

    def __rsub__(self, other):
        return self._operator(other, Operator.SUB, reflected=True)

    def __mul__(self, other):
        return self._operator(other, Operator.MUL)

    def __rmul__(self, other):
        return self._operator(other, Operator.MUL, reflected=True)

    def __truediv__(self, other):
        return self._operator(other, Operator.DIV)

    def __rtruediv__(self, other):
        return self._operator(other, Operator.DIV, reflected=True)

    def __neg__(self) -> "MaskedCellBuffer":
        return MaskedCellBuffer(-self._buffer, self._mask)

    def eq(self, other: Any) -> "MaskedCellBuffer":
        return self.apply(other, Operator.EQ)

    def ne(self, other: Any) -> "MaskedCellBuffer":
        return self.apply(other, Operator.NE)

    def lt(self, other: Any) -> "MaskedCellBuffer":
        return self.apply(other, Operator.LT)

    def le(self, other: Any) -> "MaskedCellBuffer":
        return self.apply(other, Operator.LE)

    def gt(self, other: Any) -> "MaskedCellBuffer":
        return self.apply(other, Operator.GT)

    def ge(self, other: Any) -> "MaskedCellBuffer":
        return self.apply(other, Operator.GE)

    # --- Serialization ---

    def to_bytes(self) -> bytes:
        from .codec import encode_masked
        return encode_masked(self)

    @classmethod
    def from_bytes(cls, data: bytes) -> "MaskedCellBuffer":
        from .codec import decode_masked
        return decode_masked(data)

    # --- Value semantics ---

    def __eq__(self, other: Any) -> bool:
        """
        Equal when cell types and effective masks match and every valid
        cell holds the same value. Values under the mask are ignored.
        """
        if not isinstance(other, MaskedCellBuffer):
            return NotImplemented
        if self.cell_type != other.cell_type or len(self) != len(other):
            return False
        mask = self.effective_mask()
        if mask != other.effective_mask():
            return False
        valid = mask.array
        return bool(np.array_equal(
            self._buffer.array[valid],
            other._buffer.array[valid],
            equal_nan=self.cell_type.is_float,
        ))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{self.cell_type.display_name}MaskedCellBuffer({self._buffer!r}, {self._mask!r})"


def _undefined_cells(
    lhs: CellBuffer,
    operand: Union[CellBuffer, Scalar],
    op: Operator,
    reflected: bool
) -> Optional[np.ndarray]:
    """
    Cells where `op` has no integer result: integer division by zero.
    Returns None when no cell is affected.
    """
    if op is not Operator.DIV:
        return None
    operand_type = operand.cell_type if isinstance(operand, CellBuffer) else minimal_cell_type(operand)
    if not (lhs.cell_type.is_integral and operand_type.is_integral):
        return None

    divisor = lhs if reflected else operand
    if isinstance(divisor, CellBuffer):
        zeros = divisor.array == 0
    else:
        zeros = np.full(len(lhs), CellValue.new(divisor).value == 0, dtype=bool)
    return zeros if zeros.any() else None


__all__ = ["MaskedCellBuffer", "NoData"]
