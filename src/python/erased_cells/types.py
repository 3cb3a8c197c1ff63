# erased_cells/types.py

"""
Core type-safe enumerations for the erased_cells library.
"""
from enum import Enum, IntEnum
from typing import TYPE_CHECKING

import numpy as np

from .exceptions import CellTypeParseError

if TYPE_CHECKING:
    from .dataclasses import CellTypeInfo
    from .value import CellValue


class CellType(IntEnum):
    """
    Enumeration of every supported primitive cell representation.

    The integer value of each member is the tag byte written by the codec,
    so existing values must never be renumbered. The numpy representation
    of each member lives in `erased_cells._internal.dispatch.CELL_KINDS`.
    """
    # Unsigned integers
    UINT8 = 0
    UINT16 = 1
    UINT32 = 2
    UINT64 = 3

    # Signed integers
    INT8 = 4
    INT16 = 5
    INT32 = 6
    INT64 = 7

    # IEEE floats
    FLOAT32 = 8
    FLOAT64 = 9

    def __str__(self) -> str:
        return self.display_name

    @property
    def info(self) -> "CellTypeInfo":
        """Static description of this representation."""
        # Deferred: the dispatch registry is keyed by this enum.
        from ._internal.dispatch import CELL_INFO
        return CELL_INFO[self]

    @property
    def display_name(self) -> str:
        """Human readable name, e.g. 'UInt8' or 'Float64'."""
        return self.info.display_name

    @property
    def dtype(self) -> np.dtype:
        """The native-endian numpy dtype backing this cell type."""
        return self.info.dtype

    @property
    def width(self) -> int:
        """Size of one cell in bytes."""
        return self.info.width

    @property
    def kind(self) -> str:
        """One of 'unsigned', 'signed' or 'float'."""
        return self.info.kind

    @property
    def is_integral(self) -> bool:
        return self.kind != "float"

    @property
    def is_signed(self) -> bool:
        return self.kind != "unsigned"

    @property
    def is_float(self) -> bool:
        return self.kind == "float"

    @property
    def min_value(self) -> "CellValue":
        """The smallest finite value representable by this type."""
        from .value import CellValue
        return CellValue.of(self, self.info.min)

    @property
    def max_value(self) -> "CellValue":
        """The largest finite value representable by this type."""
        from .value import CellValue
        return CellValue.of(self, self.info.max)

    def union(self, other: "CellType") -> "CellType":
        """Select the `CellType` that can numerically contain both `self` and `other`."""
        from .promotion import promote
        return promote(self, other, Operator.ADD)

    def can_fit_into(self, other: "CellType") -> bool:
        """True when every value of `self` is exactly representable by `other`."""
        return self.union(other) == other

    @classmethod
    def parse(cls, text: str) -> "CellType":
        """
        Parses a cell type from its display name ('UInt8'), member name
        ('UINT8') or numpy dtype name ('uint8'). Matching ignores case.

        Raises:
            CellTypeParseError: If the text names no known cell type.
        """
        from ._internal.dispatch import CELL_INFO
        wanted = str(text).strip().lower()
        for cell_type, info in CELL_INFO.items():
            if wanted in (info.display_name.lower(), cell_type.name.lower(), info.dtype.name):
                return cell_type
        raise CellTypeParseError(f"Unable to parse '{text}' as a CellType")


class Operator(Enum):
    """Binary operators understood by the arithmetic engine."""
    # Arithmetic
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"

    # Comparisons (result cells are 0 or 1)
    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "le"
    GT = "gt"
    GE = "ge"

    @property
    def is_comparison(self) -> bool:
        return self in _COMPARISONS

    @property
    def ufunc(self) -> np.ufunc:
        return _UFUNCS[self]

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_COMPARISONS = frozenset({Operator.EQ, Operator.NE, Operator.LT, Operator.LE, Operator.GT, Operator.GE})

_UFUNCS: dict[Operator, np.ufunc] = {
    Operator.ADD: np.add,
    Operator.SUB: np.subtract,
    Operator.MUL: np.multiply,
    Operator.DIV: np.true_divide,
    Operator.EQ: np.equal,
    Operator.NE: np.not_equal,
    Operator.LT: np.less,
    Operator.LE: np.less_equal,
    Operator.GT: np.greater,
    Operator.GE: np.greater_equal,
}

_SYMBOLS: dict[Operator, str] = {
    Operator.ADD: "+",
    Operator.SUB: "-",
    Operator.MUL: "*",
    Operator.DIV: "/",
    Operator.EQ: "==",
    Operator.NE: "!=",
    Operator.LT: "<",
    Operator.LE: "<=",
    Operator.GT: ">",
    Operator.GE: ">=",
}
