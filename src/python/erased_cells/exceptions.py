# erased_cells/exceptions.py
"""Custom exception types for the erased_cells library."""

from typing import Any, Optional


class CellError(Exception):
    """Base exception for all errors raised by this library."""
    pass


class LengthMismatchError(CellError, ValueError):
    """
    Error raised when two buffers (or a buffer and a mask) that must have the
    same number of cells do not.

    Attributes:
        expected (int): The length required by the left-hand operand.
        actual (int): The length that was supplied.
    """
    def __init__(self, expected: int, actual: int, message: Optional[str] = None):
        if message is None:
            message = f"Length mismatch: expected {expected} cells but got {actual}."
        super().__init__(message)
        self.expected = expected
        self.actual = actual


class IndexOutOfRangeError(CellError, IndexError):
    """Error raised when a cell index falls outside `[0, len)`."""
    def __init__(self, index: Any, length: int):
        super().__init__(f"Cell index {index} out of range for length {length}.")
        self.index = index
        self.length = length


class TypeMismatchError(CellError, TypeError):
    """
    Error raised when a concrete representation does not match a buffer's
    cell type, or when values cannot be represented by the requested type.
    """
    pass


class CorruptDataError(CellError, ValueError):
    """
    Error raised when decoding malformed bytes.

    Attributes:
        offset (int | None): Byte offset at which decoding failed, if known.
    """
    def __init__(self, message: str, *, offset: Optional[int] = None):
        super().__init__(message)
        self.offset = offset

    def __str__(self) -> str:
        base = super().__str__()
        if self.offset is None:
            return base
        return f"{base} (offset={self.offset})"


class UnsupportedCellTypeError(CellError, ValueError):
    """Error raised when a cell type has no equivalent in an external system."""
    pass


class UnsupportedExternalTypeError(CellError, ValueError):
    """Error raised when an external datatype has no equivalent cell type."""
    pass


class CellTypeParseError(CellError, ValueError):
    """Error raised when a string cannot be parsed as a `CellType`."""
    pass
