# erased_cells/dataclasses.py
"""
Dataclasses for structured data within the erased_cells library.
"""
from dataclasses import dataclass
from typing import Union

import numpy as np

from .types import CellType


@dataclass(frozen=True, slots=True)
class CellTypeInfo:
    """Static description of one cell representation."""
    cell_type: CellType
    display_name: str  # e.g. 'UInt16'
    dtype: np.dtype
    width: int
    kind: str  # 'unsigned', 'signed' or 'float'
    min: Union[int, float]
    max: Union[int, float]


@dataclass(frozen=True, slots=True)
class EncodedHeader:
    """The fixed header at the front of an encoded buffer."""
    cell_type: CellType
    length: int
    payload_size: int
