# erased_cells/buffer.py
"""The type-erased, immutable cell buffer."""

import numbers
from typing import Any, Callable, Iterator, Optional, Union, overload

import numpy as np

from .exceptions import IndexOutOfRangeError, LengthMismatchError, TypeMismatchError
from .promotion import negated_cell_type, promote, result_cell_type
from .types import CellType, Operator
from .value import CellValue, scalar_operand
from ._internal import kernels, numpy_utils
from ._internal.dispatch import WIDEN

Scalar = Union[int, float, np.generic, CellValue]

_SCALAR_TYPES = (numbers.Real, np.generic, CellValue)


class CellBuffer:
    """
    A fixed-length, homogeneous array of cells whose representation is known
    only at runtime through its `CellType`.

    Buffers are immutable values: the backing array is read-only and every
    operation returns a new buffer.

    Usage:
        a = CellBuffer(CellType.UINT8, [1, 2, 3])
        b = CellBuffer.from_numpy(np.array([2, 4, 6], dtype=np.uint16))
        r = a / b * 0.5     # Float64 buffer [0.25, 0.25, 0.25]
    """
    __slots__ = ("_cell_type", "_data")

    # Makes numpy scalars and arrays defer to the reflected operators.
    __array_ufunc__ = None

    def __init__(self, cell_type: CellType, data: Any):
        """
        Adopts `data` as the cells of a buffer of `cell_type`.

        Args:
            cell_type: The representation of the cells.
            data: A 1-D numpy array of exactly that representation (adopted
                without copying), or any sequence of numbers (materialised).

        Raises:
            TypeMismatchError: If an array of another dtype is supplied, or
                values cannot be represented.
            ValueError: If `data` is not one-dimensional.
        """
        cell_type = CellType(cell_type)
        self._cell_type = cell_type
        self._data = numpy_utils.adopt(data, cell_type)

    # --- Constructors ---

    @classmethod
    def _wrap(cls, cell_type: CellType, arr: np.ndarray) -> "CellBuffer":
        buf = cls.__new__(cls)
        buf._cell_type = cell_type
        buf._data = numpy_utils.readonly(arr)
        return buf

    @classmethod
    def from_numpy(cls, arr: np.ndarray) -> "CellBuffer":
        """Adopts a 1-D array, inferring the cell type from its dtype."""
        return cls(numpy_utils.cell_type_for_dtype(arr.dtype), arr)

    @classmethod
    def from_values(cls, values: Any, cell_type: Optional[CellType] = None) -> "CellBuffer":
        """
        Builds a buffer from a sequence. Without `cell_type`, the type follows
        NumPy's inference (booleans become UINT8).
        """
        if cell_type is not None:
            return cls(cell_type, values)
        arr = np.asarray(values)
        if arr.dtype.kind == 'b':
            arr = arr.astype(np.uint8)
        return cls.from_numpy(arr)

    @classmethod
    def with_defaults(cls, length: int, cell_type: CellType) -> "CellBuffer":
        """A buffer of `length` zeros."""
        cell_type = CellType(cell_type)
        return cls._wrap(cell_type, np.zeros(length, dtype=cell_type.dtype))

    @classmethod
    def fill(cls, length: int, value: Scalar) -> "CellBuffer":
        """A buffer of `length` copies of `value`, in its minimal representation."""
        value = CellValue.new(value)
        return cls._wrap(value.cell_type, np.full(length, value.value, dtype=value.cell_type.dtype))

    @classmethod
    def fill_via(cls, length: int, f: Callable[[int], Any], cell_type: CellType) -> "CellBuffer":
        """A buffer whose cell `i` is `f(i)`."""
        return cls(cell_type, [f(i) for i in range(length)])

    # --- Accessors ---

    @property
    def cell_type(self) -> CellType:
        return self._cell_type

    @property
    def array(self) -> np.ndarray:
        """The read-only backing array."""
        return self._data

    def __len__(self) -> int:
        return self._data.shape[0]

    def _check_index(self, index: Any) -> int:
        if not isinstance(index, (int, np.integer)) or isinstance(index, bool):
            raise TypeError(f"Index must be an integer, not {type(index).__name__}")
        if not 0 <= index < len(self):
            raise IndexOutOfRangeError(index, len(self))
        return int(index)

    def get(self, index: int) -> Union[int, float]:
        """
        Returns cell `index` widened to a Python `int` (integral types) or
        `float` (float types).

        Raises:
            IndexOutOfRangeError: If `index` is not in `[0, len)`.
        """
        return WIDEN[self._cell_type](self._data[self._check_index(index)])

    def get_value(self, index: int) -> CellValue:
        """Returns cell `index` as a `CellValue` tagged with this buffer's type."""
        return CellValue(self._cell_type, self.get(index))

    @overload
    def __getitem__(self, key: int) -> Union[int, float]: ...

    @overload
    def __getitem__(self, key: slice) -> "CellBuffer": ...

    def __getitem__(self, key: Union[int, slice]) -> Union[int, float, "CellBuffer"]:
        if isinstance(key, slice):
            return CellBuffer._wrap(self._cell_type, np.ascontiguousarray(self._data[key]))
        return self.get(key)

    def __iter__(self) -> Iterator[Union[int, float]]:
        widen = WIDEN[self._cell_type]
        for v in self._data:
            yield widen(v)

    def to_numpy(self, dtype: Any = None, *, copy: bool = False) -> np.ndarray:
        """
        Recovers the concrete array.

        Args:
            dtype: If given, must equal this buffer's representation.
            copy: Return a writable copy instead of the read-only array.

        Raises:
            TypeMismatchError: If `dtype` does not match the cell type.
        """
        if dtype is not None and np.dtype(dtype) != self._cell_type.dtype:
            raise TypeMismatchError(
                f"Requested dtype '{np.dtype(dtype).name}' but buffer holds {self._cell_type} "
                f"('{self._cell_type.dtype.name}')."
            )
        return self._data.copy() if copy else self._data

    def to_list(self) -> list:
        return self._data.tolist()

    def min_max(self) -> tuple[CellValue, CellValue]:
        """
        Returns `(min, max)`. NaN cells are ignored. With no values to scan the
        result is `(type max, type min)`.
        """
        data = self._data
        if self._cell_type.is_float:
            data = data[~np.isnan(data)]
        if data.size == 0:
            return self._cell_type.max_value, self._cell_type.min_value
        return (
            CellValue.of(self._cell_type, data.min()),
            CellValue.of(self._cell_type, data.max()),
        )

    # --- Conversion ---

    def convert(self, cell_type: CellType) -> "CellBuffer":
        """
        Casts every cell to `cell_type`. Narrowing follows the target's C
        rules: floats truncate toward zero and integers wrap.
        """
        cell_type = CellType(cell_type)
        if cell_type == self._cell_type:
            return self
        return CellBuffer._wrap(cell_type, numpy_utils.cast(self._data, cell_type))

    # --- Arithmetic ---

    def apply(self, other: Union["CellBuffer", Scalar], op: Operator, *, reflected: bool = False) -> "CellBuffer":
        """
        Evaluates `self op other` (or `other op self` when `reflected`).

        Args:
            other: A buffer of the same length, or a scalar.
            op: The operator.
            reflected: Put `other` on the left-hand side.

        Raises:
            LengthMismatchError: If `other` is a buffer of another length.
        """
        op = Operator(op)
        if isinstance(other, CellBuffer):
            if len(other) != len(self):
                raise LengthMismatchError(len(self), len(other))
            other_type, operand = other._cell_type, other._data
        elif isinstance(other, _SCALAR_TYPES):
            other_type, operand = scalar_operand(other)
        else:
            raise TypeError(f"Unsupported operand type: {type(other).__name__}")

        lhs_type, rhs_type = (other_type, self._cell_type) if reflected else (self._cell_type, other_type)
        lhs, rhs = (operand, self._data) if reflected else (self._data, operand)
        compute = promote(lhs_type, rhs_type, op)
        result = result_cell_type(lhs_type, rhs_type, op)
        return CellBuffer._wrap(result, kernels.binary(op, lhs, rhs, compute, result))

    def _operator(self, other: Any, op: Operator, reflected: bool = False) -> Any:
        if not isinstance(other, (CellBuffer,) + _SCALAR_TYPES):
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

    def __neg__(self) -> "CellBuffer":
        result = negated_cell_type(self._cell_type)
        return CellBuffer._wrap(result, kernels.negate(self._data, result))

    # Comparisons produce UINT8 buffers of 0/1. `==` is reserved for value equality.
    def eq(self, other: Union["CellBuffer", Scalar]) -> "CellBuffer":
        return self.apply(other, Operator.EQ)

    def ne(self, other: Union["CellBuffer", Scalar]) -> "CellBuffer":
        return self.apply(other, Operator.NE)

    def lt(self, other: Union["CellBuffer", Scalar]) -> "CellBuffer":
        return self.apply(other, Operator.LT)

    def le(self, other: Union["CellBuffer", Scalar]) -> "CellBuffer":
        return self.apply(other, Operator.LE)

    def gt(self, other: Union["CellBuffer", Scalar]) -> "CellBuffer":
        return self.apply(other, Operator.GT)

    def ge(self, other: Union["CellBuffer", Scalar]) -> "CellBuffer":
        return self.apply(other, Operator.GE)

    # --- Serialization ---

    def to_bytes(self) -> bytes:
        from .codec import encode_buffer
        return encode_buffer(self)

    @classmethod
    def from_bytes(cls, data: bytes) -> "CellBuffer":
        from .codec import decode_buffer
        return decode_buffer(data)

    # --- Value semantics ---

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, CellBuffer):
            return NotImplemented
        return (
            self._cell_type == other._cell_type
            and bool(np.array_equal(self._data, other._data, equal_nan=self._cell_type.is_float))
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{self._cell_type.display_name}CellBuffer([{numpy_utils.elided(self.to_list())}])"
