# erased_cells/mask.py
"""The per-cell validity mask."""

from typing import Any, Callable, Iterator

import numpy as np

from .buffer import CellBuffer
from .exceptions import IndexOutOfRangeError, LengthMismatchError
from ._internal import numpy_utils


class Mask:
    """
    An immutable sequence of booleans, one per cell. `True` marks a valid
    cell, `False` a nodata cell.
    """
    __slots__ = ("_bits",)

    __array_ufunc__ = None

    def __init__(self, values: Any):
        arr = np.asarray(values, dtype=bool)
        if arr.ndim != 1:
            raise ValueError(f"Mask must be one-dimensional, got shape {arr.shape}.")
        self._bits = numpy_utils.owned(np.ascontiguousarray(arr), values)

    @classmethod
    def fill(cls, length: int, value: bool = True) -> "Mask":
        return cls(np.full(length, bool(value), dtype=bool))

    @classmethod
    def fill_via(cls, length: int, f: Callable[[int], bool]) -> "Mask":
        return cls(np.fromiter((bool(f(i)) for i in range(length)), dtype=bool, count=length))

    @classmethod
    def from_predicate(
        cls,
        buffer: CellBuffer,
        predicate: Callable[[Any], Any],
        *,
        vectorized: bool = True
    ) -> "Mask":
        """
        Evaluates a validity predicate over every cell of `buffer`.

        Args:
            buffer: The cells to test.
            predicate: With `vectorized=True` it receives the read-only array
                and must return one boolean per cell. Otherwise it is called
                with each cell as a Python number.
            vectorized: Selects the calling convention above.

        Raises:
            LengthMismatchError: If a vectorized predicate returns the wrong
                number of values.
        """
        if vectorized:
            result = np.asarray(predicate(buffer.array), dtype=bool)
            if result.shape != (len(buffer),):
                raise LengthMismatchError(
                    len(buffer), result.size,
                    f"Predicate returned shape {result.shape} for {len(buffer)} cells."
                )
            return cls(result)
        return cls(np.fromiter((bool(predicate(v)) for v in buffer), dtype=bool, count=len(buffer)))

    @classmethod
    def from_bits(cls, data: bytes, length: int) -> "Mask":
        """
        Unpacks a bit-mask where bit `i % 8` (LSB first) of byte `i // 8`
        holds cell `i`.
        """
        expected = (length + 7) // 8
        if len(data) != expected:
            raise LengthMismatchError(
                expected, len(data),
                f"Packed mask for {length} cells needs {expected} bytes, got {len(data)}."
            )
        packed = np.frombuffer(data, dtype=np.uint8)
        return cls(np.unpackbits(packed, count=length, bitorder='little').astype(bool))

    def to_bits(self) -> bytes:
        return np.packbits(self._bits, bitorder='little').tobytes()

    @staticmethod
    def combine(a: "Mask", b: "Mask") -> "Mask":
        """Cells valid in both `a` and `b`."""
        if len(a) != len(b):
            raise LengthMismatchError(len(a), len(b))
        return Mask(np.logical_and(a._bits, b._bits))

    @property
    def array(self) -> np.ndarray:
        return self._bits

    def __len__(self) -> int:
        return self._bits.shape[0]

    def get(self, index: int) -> bool:
        if not isinstance(index, (int, np.integer)) or isinstance(index, bool):
            raise TypeError(f"Index must be an integer, not {type(index).__name__}")
        if not 0 <= index < len(self):
            raise IndexOutOfRangeError(index, len(self))
        return bool(self._bits[index])

    def __getitem__(self, index: int) -> bool:
        return self.get(index)

    def __iter__(self) -> Iterator[bool]:
        return iter(self._bits.tolist())

    def all(self, value: bool = True) -> bool:
        """True when every cell equals `value`. Vacuously true when empty."""
        return bool(np.all(self._bits == value))

    def counts(self) -> tuple[int, int]:
        """Returns `(valid, invalid)`."""
        valid = int(np.count_nonzero(self._bits))
        return valid, len(self) - valid

    def __and__(self, other: "Mask") -> "Mask":
        if not isinstance(other, Mask):
            return NotImplemented
        return Mask.combine(self, other)

    def __or__(self, other: "Mask") -> "Mask":
        if not isinstance(other, Mask):
            return NotImplemented
        if len(self) != len(other):
            raise LengthMismatchError(len(self), len(other))
        return Mask(np.logical_or(self._bits, other._bits))

    def __invert__(self) -> "Mask":
        return Mask(~self._bits)

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Mask):
            return NotImplemented
        return bool(np.array_equal(self._bits, other._bits))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Mask([{numpy_utils.elided(self._bits.tolist())}])"
