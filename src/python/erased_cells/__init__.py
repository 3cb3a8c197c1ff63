# erased_cells/__init__.py
"""
Type-erased, immutable raster cell buffers with promotion-aware arithmetic,
nodata masks and a compact binary encoding.
"""
from .types import CellType, Operator
from .value import CellValue, minimal_cell_type
from .buffer import CellBuffer
from .mask import Mask
from .masked import MaskedCellBuffer, NoData
from .promotion import promote, result_cell_type, negated_cell_type, promotion_table
from .codec import (
    encode,
    encode_buffer,
    encode_masked,
    decode,
    decode_buffer,
    decode_masked,
    inspect_header,
    to_json_dict,
    from_json_dict,
)
from .convenience import save_buffer, load_buffer
from .config import Settings, SETTINGS, load_settings
from .logs import set_log_level
from .exceptions import (
    CellError,
    LengthMismatchError,
    IndexOutOfRangeError,
    TypeMismatchError,
    CorruptDataError,
    UnsupportedCellTypeError,
    UnsupportedExternalTypeError,
    CellTypeParseError,
)

__version__ = "0.1.0"


# Define what gets imported with 'from erased_cells import *'
__all__ = [
    'CellType',
    'Operator',
    'CellValue',
    'minimal_cell_type',
    'CellBuffer',
    'Mask',
    'MaskedCellBuffer',
    'NoData',
    'promote',
    'result_cell_type',
    'negated_cell_type',
    'promotion_table',
    'encode',
    'encode_buffer',
    'encode_masked',
    'decode',
    'decode_buffer',
    'decode_masked',
    'inspect_header',
    'to_json_dict',
    'from_json_dict',
    'save_buffer',
    'load_buffer',
    'Settings',
    'SETTINGS',
    'load_settings',
    'set_log_level',
    'CellError',
    'LengthMismatchError',
    'IndexOutOfRangeError',
    'TypeMismatchError',
    'CorruptDataError',
    'UnsupportedCellTypeError',
    'UnsupportedExternalTypeError',
    'CellTypeParseError',
    '__version__',
]
