# erased_cells/codec.py

"""
Binary and JSON encodings of cell buffers.

Buffer layout (little-endian throughout):

    [tag: 1 byte][length: 8 bytes unsigned][length * width(tag) bytes of cells]

Masked buffer layout:

    <buffer layout>[mask present: 1 byte (0 or 1)][ceil(length / 8) bytes]

Bit `i % 8` (least significant first) of mask byte `i // 8` is the
validity of cell `i`.
"""

import base64
import binascii
import logging
import struct
from typing import Any, Union

import numpy as np

from .buffer import CellBuffer
from .dataclasses import EncodedHeader
from .exceptions import CorruptDataError, LengthMismatchError
from .mask import Mask
from .masked import MaskedCellBuffer
from .types import CellType
from ._internal import numpy_utils

logger = logging.getLogger(__name__)

_HEADER = struct.Struct("<BQ")
HEADER_SIZE: int = _HEADER.size

_MASK_ABSENT = 0
_MASK_PRESENT = 1

BytesLike = Union[bytes, bytearray, memoryview]


def _corrupt(message: str, offset: int) -> CorruptDataError:
    logger.debug("Rejecting encoded cells: %s (offset=%d)", message, offset)
    return CorruptDataError(message, offset=offset)


def _mask_size(length: int) -> int:
    return (length + 7) // 8


# --- Encoding ---

def encode_buffer(buffer: CellBuffer) -> bytes:
    """Encodes a `CellBuffer` as tag, length and little-endian cells."""
    wire = numpy_utils.WIRE_DTYPES[buffer.cell_type]
    header = _HEADER.pack(int(buffer.cell_type), len(buffer))
    return header + buffer.array.astype(wire, copy=False).tobytes()


def encode_masked(masked: MaskedCellBuffer) -> bytes:
    """Encodes a `MaskedCellBuffer`: the buffer, a presence flag and packed mask bits."""
    parts = [encode_buffer(masked.buffer)]
    if masked.mask is None:
        parts.append(bytes([_MASK_ABSENT]))
    else:
        parts.append(bytes([_MASK_PRESENT]))
        parts.append(masked.mask.to_bits())
    return b"".join(parts)


def encode(obj: Union[CellBuffer, MaskedCellBuffer]) -> bytes:
    """Encodes either kind of buffer."""
    if isinstance(obj, MaskedCellBuffer):
        return encode_masked(obj)
    if isinstance(obj, CellBuffer):
        return encode_buffer(obj)
    raise TypeError(f"Cannot encode object of type {type(obj).__name__}")


# --- Decoding ---

def inspect_header(data: BytesLike) -> EncodedHeader:
    """
    Reads the fixed header of an encoded buffer.

    Raises:
        CorruptDataError: If the header is truncated or the tag is unknown.
    """
    view = memoryview(data).cast("B")
    if len(view) < HEADER_SIZE:
        raise _corrupt(f"Truncated header: need {HEADER_SIZE} bytes, got {len(view)}.", 0)
    tag, length = _HEADER.unpack_from(view, 0)
    try:
        cell_type = CellType(tag)
    except ValueError:
        raise _corrupt(f"Unknown cell type tag: {tag}", 0) from None
    return EncodedHeader(cell_type=cell_type, length=length, payload_size=length * cell_type.width)


def _read_buffer(view: memoryview) -> tuple[CellBuffer, int]:
    header = inspect_header(view)
    end = HEADER_SIZE + header.payload_size
    if len(view) < end:
        raise _corrupt(
            f"Declared {header.length} {header.cell_type} cells need {header.payload_size} payload bytes, "
            f"but only {len(view) - HEADER_SIZE} remain.",
            HEADER_SIZE,
        )
    wire = numpy_utils.WIRE_DTYPES[header.cell_type]
    cells = np.frombuffer(view[HEADER_SIZE:end], dtype=wire).astype(header.cell_type.dtype)
    return CellBuffer(header.cell_type, cells), end


def decode_buffer(data: BytesLike) -> CellBuffer:
    """
    Decodes the output of `encode_buffer`.

    Raises:
        CorruptDataError: On a truncated header, unknown tag, or a payload
            whose size is not exactly `length * width`.
    """
    view = memoryview(data).cast("B")
    buffer, end = _read_buffer(view)
    if end != len(view):
        raise _corrupt(f"{len(view) - end} unexpected bytes after {len(buffer)} cells.", end)
    return buffer


def decode_masked(data: BytesLike) -> MaskedCellBuffer:
    """
    Decodes the output of `encode_masked`.

    Raises:
        CorruptDataError: On any buffer error, a missing or invalid mask flag,
            or a packed mask whose size does not match the cell count.
    """
    view = memoryview(data).cast("B")
    buffer, offset = _read_buffer(view)
    if offset >= len(view):
        raise _corrupt("Missing mask-present flag.", offset)

    flag = view[offset]
    offset += 1
    if flag == _MASK_ABSENT:
        if offset != len(view):
            raise _corrupt(f"{len(view) - offset} unexpected bytes after absent mask.", offset)
        return MaskedCellBuffer(buffer)
    if flag != _MASK_PRESENT:
        raise _corrupt(f"Invalid mask-present flag: {flag}", offset - 1)

    expected = _mask_size(len(buffer))
    if len(view) - offset != expected:
        raise _corrupt(
            f"Mask for {len(buffer)} cells needs {expected} bytes, got {len(view) - offset}.",
            offset,
        )
    try:
        mask = Mask.from_bits(bytes(view[offset:]), len(buffer))
    except LengthMismatchError as e:
        raise _corrupt(str(e), offset) from e
    return MaskedCellBuffer(buffer, mask)


def decode(data: BytesLike) -> Union[CellBuffer, MaskedCellBuffer]:
    """
    Decodes either layout. Bytes that end exactly after the cells are a
    plain buffer; anything else is read as a masked buffer.
    """
    header = inspect_header(data)
    if len(memoryview(data).cast("B")) == HEADER_SIZE + header.payload_size:
        return decode_buffer(data)
    return decode_masked(data)


# --- JSON ---

def to_json_dict(obj: Union[CellBuffer, MaskedCellBuffer]) -> dict[str, Any]:
    """
    Builds a JSON-serializable dict with base64 payloads.

    Pipeline: cells -> little-endian bytes -> base64 bytes -> ascii str
    """
    if isinstance(obj, MaskedCellBuffer):
        buffer, mask = obj.buffer, obj.mask
    elif isinstance(obj, CellBuffer):
        buffer, mask = obj, None
    else:
        raise TypeError(f"Cannot encode object of type {type(obj).__name__}")

    wire = numpy_utils.WIRE_DTYPES[buffer.cell_type]
    result: dict[str, Any] = {
        "cell_type": buffer.cell_type.display_name,
        "length": len(buffer),
        "data": base64.b64encode(buffer.array.astype(wire, copy=False).tobytes()).decode('ascii'),
    }
    if isinstance(obj, MaskedCellBuffer):
        result["mask"] = None if mask is None else base64.b64encode(mask.to_bits()).decode('ascii')
    return result


def from_json_dict(d: dict[str, Any]) -> Union[CellBuffer, MaskedCellBuffer]:
    """
    Inverse of `to_json_dict`. A dict with a "mask" key (even null) yields
    a `MaskedCellBuffer`.

    Raises:
        CorruptDataError: If fields are missing or malformed.
    """
    try:
        cell_type = CellType.parse(d["cell_type"])
        length = int(d["length"])
        payload = base64.b64decode(d["data"], validate=True)
        bits = d.get("mask")
        mask_bytes = None if bits is None else base64.b64decode(bits, validate=True)
    except (KeyError, TypeError, ValueError, binascii.Error) as e:
        raise CorruptDataError(f"Invalid JSON cell encoding: {e}") from e

    if length < 0 or len(payload) != length * cell_type.width:
        raise CorruptDataError(
            f"Declared {length} {cell_type} cells but payload holds {len(payload)} bytes."
        )
    wire = numpy_utils.WIRE_DTYPES[cell_type]
    buffer = CellBuffer(cell_type, np.frombuffer(payload, dtype=wire).astype(cell_type.dtype))
    if "mask" not in d:
        return buffer
    if mask_bytes is None:
        return MaskedCellBuffer(buffer)
    if len(mask_bytes) != _mask_size(length):
        raise CorruptDataError(
            f"Mask for {length} cells needs {_mask_size(length)} bytes, got {len(mask_bytes)}."
        )
    return MaskedCellBuffer(buffer, Mask.from_bits(mask_bytes, length))
