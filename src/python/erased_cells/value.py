# erased_cells/value.py
"""
Scalar cell values and their minimal representation.
"""
import math
import numbers
from dataclasses import dataclass
from functools import total_ordering
from typing import Any, Union

import numpy as np

from .exceptions import TypeMismatchError
from .types import CellType
from ._internal import numpy_utils
from ._internal.dispatch import CELL_KINDS, WIDEN

Number = Union[int, float]

# Candidate types for integer scalars, narrowest first.
_UNSIGNED = tuple(sorted((ct for ct, dt in CELL_KINDS if dt.kind == 'u'), key=lambda ct: ct.width))
_SIGNED = tuple(sorted((ct for ct, dt in CELL_KINDS if dt.kind == 'i'), key=lambda ct: ct.width))


def minimal_cell_type(scalar: Any) -> CellType:
    """
    Returns the narrowest `CellType` that holds `scalar` exactly.

    - bool -> UINT8
    - int -> the smallest unsigned type when non-negative, else the smallest
      signed type; FLOAT64 beyond 64 bits
    - float -> FLOAT32 when it survives a round trip through float32
      (inf and nan included), else FLOAT64
    - numpy scalars and `CellValue` keep their own type

    Raises:
        TypeMismatchError: For non-real scalars.
    """
    if isinstance(scalar, CellValue):
        return scalar.cell_type
    if isinstance(scalar, (bool, np.bool_)):
        return CellType.UINT8
    if isinstance(scalar, np.generic):
        return numpy_utils.cell_type_for_dtype(scalar.dtype)
    if isinstance(scalar, numbers.Integral):
        value = int(scalar)
        for cell_type in (_UNSIGNED if value >= 0 else _SIGNED):
            info = cell_type.info
            if info.min <= value <= info.max:
                return cell_type
        return CellType.FLOAT64
    if isinstance(scalar, numbers.Real):
        value = float(scalar)
        if math.isnan(value) or math.isinf(value):
            return CellType.FLOAT32
        with np.errstate(all='ignore'):
            narrowed = float(np.float32(value))
        return CellType.FLOAT32 if narrowed == value else CellType.FLOAT64
    raise TypeMismatchError(f"Unsupported scalar type: {type(scalar).__name__}")


def _cast_scalar(cell_type: CellType, value: Any) -> Number:
    if isinstance(value, CellValue):
        value = value.value
    if isinstance(value, (bool, np.bool_)):
        value = int(value)
    if isinstance(value, int) and not (-(1 << 63) <= value < (1 << 64)):
        value = float(value)
    with np.errstate(all='ignore'):
        narrowed = np.asarray(value).astype(cell_type.dtype)
    return WIDEN(cell_type, narrowed[()])


def _is_nan(value: Number) -> bool:
    return isinstance(value, float) and math.isnan(value)


@total_ordering
@dataclass(frozen=True, slots=True, eq=False)
class CellValue:
    """
    A single number tagged with the `CellType` that encodes it.

    Equality and ordering unify both sides to a common type first, so
    `CellValue.of(CellType.UINT8, 3) == CellValue.of(CellType.FLOAT64, 3.0)`.
    Two integral values are compared exactly as Python ints.
    NaN compares equal to NaN and sorts above every other value.
    """
    cell_type: CellType
    value: Number

    @classmethod
    def of(cls, cell_type: CellType, value: Any) -> "CellValue":
        """Casts `value` into `cell_type` using NumPy's conversion rules."""
        cell_type = CellType(cell_type)
        return cls(cell_type, _cast_scalar(cell_type, value))

    @classmethod
    def new(cls, value: Any) -> "CellValue":
        """Wraps `value` in its minimal representation."""
        if isinstance(value, CellValue):
            return value
        return cls.of(minimal_cell_type(value), value)

    def get(self) -> Number:
        return self.value

    def convert(self, cell_type: CellType) -> "CellValue":
        if cell_type == self.cell_type:
            return self
        return CellValue.of(cell_type, self.value)

    def unify(self, other: Any) -> tuple["CellValue", "CellValue"]:
        """Converts both values to the narrowest type holding both."""
        other = CellValue.new(other)
        target = self.cell_type.union(other.cell_type)
        return self.convert(target), other.convert(target)

    def is_nan(self) -> bool:
        return _is_nan(self.value)

    def __int__(self) -> int:
        return int(self.value)

    def __float__(self) -> float:
        return float(self.value)

    def __neg__(self) -> "CellValue":
        from .promotion import negated_cell_type
        target = negated_cell_type(self.cell_type)
        return CellValue.of(target, -self.convert(target).value)

    def _comparable(self, other: Any) -> tuple[Number, Number]:
        # Two integral values compare exactly; anything else through `unify`.
        other = CellValue.new(other)
        if self.cell_type.is_integral and other.cell_type.is_integral:
            return self.value, other.value
        lhs, rhs = self.unify(other)
        return lhs.value, rhs.value

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, (CellValue, numbers.Real, np.generic)):
            return NotImplemented
        lhs, rhs = self._comparable(other)
        if _is_nan(lhs) or _is_nan(rhs):
            return _is_nan(lhs) and _is_nan(rhs)
        return lhs == rhs

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, (CellValue, numbers.Real, np.generic)):
            return NotImplemented
        lhs, rhs = self._comparable(other)
        if _is_nan(lhs):
            return False
        if _is_nan(rhs):
            return True
        return lhs < rhs

    def __hash__(self) -> int:
        if self.is_nan():
            return hash("nan")
        return hash(self.value)

    def __repr__(self) -> str:
        return f"{self.cell_type.display_name}({self.value!r})"


def scalar_operand(scalar: Any) -> tuple[CellType, Number]:
    """Splits a scalar operand into its minimal type and a plain number."""
    value = CellValue.new(scalar)
    return value.cell_type, value.value


__all__ = ["CellValue", "minimal_cell_type", "scalar_operand"]
