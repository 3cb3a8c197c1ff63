# erased_cells/raster.py

"""
Adapter between `CellType` and external raster datatypes.

Two identifier sets are covered:

- GDAL `GDALDataType` codes (`GdalDataType`). Every cell type has a code,
  but UINT64 and INT64 need GDAL >= 3.5 and INT8 needs GDAL >= 3.7. The
  unknown and complex GDAL types have no cell type; see
  `UNSUPPORTED_GDAL_TYPES`.
- rasterio dtype names ('uint8', ..., 'float64').

`read_cells` and `read_cells_masked` load a band through rasterio, which is
an optional dependency (`pip install erased-cells[raster]`).

Nothing else in the library imports this module.
"""

import os
from enum import IntEnum
from typing import Any, Mapping, Optional, Union

from .buffer import CellBuffer
from .exceptions import UnsupportedCellTypeError, UnsupportedExternalTypeError
from .masked import MaskedCellBuffer, NoData
from .types import CellType
from ._internal.dispatch import dispatch_table


class GdalDataType(IntEnum):
    """GDAL's `GDALDataType` enumeration."""
    UNKNOWN = 0
    BYTE = 1
    UINT16 = 2
    INT16 = 3
    UINT32 = 4
    INT32 = 5
    FLOAT32 = 6
    FLOAT64 = 7
    CINT16 = 8
    CINT32 = 9
    CFLOAT32 = 10
    CFLOAT64 = 11
    # GDAL >= 3.5
    UINT64 = 12
    INT64 = 13
    # GDAL >= 3.7
    INT8 = 14


# GDAL types with no cell type equivalent.
UNSUPPORTED_GDAL_TYPES: frozenset[GdalDataType] = frozenset({
    GdalDataType.UNKNOWN,
    GdalDataType.CINT16,
    GdalDataType.CINT32,
    GdalDataType.CFLOAT32,
    GdalDataType.CFLOAT64,
})

_GDAL_CODES: dict[CellType, GdalDataType] = {
    CellType.UINT8: GdalDataType.BYTE,
    CellType.UINT16: GdalDataType.UINT16,
    CellType.UINT32: GdalDataType.UINT32,
    CellType.UINT64: GdalDataType.UINT64,
    CellType.INT8: GdalDataType.INT8,
    CellType.INT16: GdalDataType.INT16,
    CellType.INT32: GdalDataType.INT32,
    CellType.INT64: GdalDataType.INT64,
    CellType.FLOAT32: GdalDataType.FLOAT32,
    CellType.FLOAT64: GdalDataType.FLOAT64,
}

# Oldest GDAL release that knows each code.
_MIN_GDAL_VERSION: dict[GdalDataType, tuple[int, int]] = {
    GdalDataType.UINT64: (3, 5),
    GdalDataType.INT64: (3, 5),
    GdalDataType.INT8: (3, 7),
}

TO_GDAL: Mapping[CellType, GdalDataType] = dispatch_table(lambda ct, dt: _GDAL_CODES[ct], name="TO_GDAL")

_FROM_GDAL: dict[GdalDataType, CellType] = {code: ct for ct, code in TO_GDAL.items()}

TO_RASTERIO: Mapping[CellType, str] = dispatch_table(lambda ct, dt: dt.name, name="TO_RASTERIO")

_FROM_RASTERIO: dict[str, CellType] = {name: ct for ct, name in TO_RASTERIO.items()}


def to_gdal(cell_type: CellType, gdal_version: Optional[tuple[int, int]] = None) -> GdalDataType:
    """
    Returns the GDAL datatype code for `cell_type`.

    Args:
        cell_type: The cell type to map.
        gdal_version: `(major, minor)` of the target GDAL. When given, types
            that release does not know are rejected.

    Raises:
        UnsupportedCellTypeError: If the target GDAL has no equivalent.
    """
    code = TO_GDAL[CellType(cell_type)]
    required = _MIN_GDAL_VERSION.get(code)
    if gdal_version is not None and required is not None and tuple(gdal_version[:2]) < required:
        raise UnsupportedCellTypeError(
            f"{cell_type} needs GDAL >= {required[0]}.{required[1]}, "
            f"target is {gdal_version[0]}.{gdal_version[1]}"
        )
    return code


def from_gdal(code: Union[GdalDataType, int]) -> CellType:
    """
    Returns the cell type for a GDAL datatype code.

    Raises:
        UnsupportedExternalTypeError: For unknown, complex or unrecognised codes.
    """
    try:
        gdal_type = GdalDataType(code)
    except ValueError:
        raise UnsupportedExternalTypeError(f"Unrecognised GDAL datatype code: {code}") from None
    if gdal_type in UNSUPPORTED_GDAL_TYPES:
        raise UnsupportedExternalTypeError(f"GDAL datatype {gdal_type.name} has no cell type")
    return _FROM_GDAL[gdal_type]


def to_rasterio_dtype(cell_type: CellType) -> str:
    """Returns the rasterio dtype name for `cell_type`."""
    return TO_RASTERIO[CellType(cell_type)]


def from_rasterio_dtype(name: str) -> CellType:
    """
    Returns the cell type for a rasterio dtype name.

    Raises:
        UnsupportedExternalTypeError: For names such as 'complex64'.
    """
    try:
        return _FROM_RASTERIO[str(name)]
    except KeyError:
        raise UnsupportedExternalTypeError(f"rasterio dtype '{name}' has no cell type") from None


def _import_rasterio() -> Any:
    try:
        import rasterio
    except ImportError as exc:
        raise ImportError(
            "Reading raster bands requires rasterio. "
            "Install it with `pip install erased-cells[raster]`."
        ) from exc
    return rasterio


def _read_band(dataset: Any, band: int) -> tuple[CellBuffer, Optional[float]]:
    cell_type = from_rasterio_dtype(dataset.dtypes[band - 1])
    cells = dataset.read(band).ravel()
    return CellBuffer(cell_type, cells), dataset.nodatavals[band - 1]


def _with_dataset(source: Any, band: int) -> tuple[CellBuffer, Optional[float]]:
    if isinstance(source, (str, os.PathLike)):
        rasterio = _import_rasterio()
        with rasterio.open(source) as dataset:
            return _read_band(dataset, band)
    return _read_band(source, band)


def read_cells(source: Any, band: int = 1) -> CellBuffer:
    """
    Reads one band into a `CellBuffer` (row-major, flattened). Any nodata
    value is ignored; see `read_cells_masked`.

    Args:
        source: An open rasterio dataset, or a path to open.
        band: 1-based band index.
    """
    buffer, _ = _with_dataset(source, band)
    return buffer


def read_cells_masked(source: Any, band: int = 1) -> MaskedCellBuffer:
    """
    Reads one band into a `MaskedCellBuffer`, masking cells equal to the
    band's nodata value.

    Args:
        source: An open rasterio dataset, or a path to open.
        band: 1-based band index.
    """
    buffer, nodata = _with_dataset(source, band)
    return MaskedCellBuffer.from_nodata(buffer, NoData.none() if nodata is None else NoData.of(nodata))
