# erased_cells/convenience.py
"""
High-level convenience functions for storing a single buffer in a file.
"""
import os
from pathlib import Path
from typing import Optional, Union

from . import codec
from .buffer import CellBuffer
from .exceptions import CorruptDataError
from .masked import MaskedCellBuffer

PathLike = Union[str, os.PathLike]


def save_buffer(filepath: PathLike, data: Union[CellBuffer, MaskedCellBuffer]) -> int:
    """
    Writes a buffer to `filepath` using the binary codec, replacing any
    existing file.

    Args:
        filepath: Destination path.
        data: A `CellBuffer` or `MaskedCellBuffer`.

    Returns:
        The number of bytes written.
    """
    return Path(filepath).write_bytes(codec.encode(data))


def load_buffer(
    filepath: PathLike,
    *,
    masked: Optional[bool] = None
) -> Union[CellBuffer, MaskedCellBuffer]:
    """
    Reads a buffer written by `save_buffer`.

    Args:
        filepath: The file to read.
        masked: True to require a masked encoding, False to require a plain
            one, None to accept either.

    Raises:
        CorruptDataError: If the file is not a valid encoding of the
            requested kind.
    """
    raw = Path(filepath).read_bytes()
    if masked is None:
        return codec.decode(raw)
    if masked:
        return codec.decode_masked(raw)
    try:
        return codec.decode_buffer(raw)
    except CorruptDataError as e:
        raise CorruptDataError(
            f"{filepath} does not hold a plain cell buffer: {e}", offset=e.offset
        ) from e
