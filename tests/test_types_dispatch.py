# tests/test_types_dispatch.py
"""
Tests for the CellType enumeration and the table-driven dispatch registry.
"""
import pytest
import numpy as np

from erased_cells import CellType, CellTypeParseError, UnsupportedCellTypeError
from erased_cells import masked, promotion, raster
from erased_cells._internal import dispatch, numpy_utils


ALL_TABLES = {
    "CELL_INFO": dispatch.CELL_INFO,
    "WIDEN": dispatch.WIDEN.table,
    "WIRE_DTYPES": numpy_utils.WIRE_DTYPES,
    "DEFAULT_NODATA": masked._DEFAULT_NODATA,
    "NEGATIONS": promotion._NEGATIONS,
    "TO_GDAL": raster.TO_GDAL,
    "TO_RASTERIO": raster.TO_RASTERIO,
}


def test_canonical_list_covers_every_tag_once():
    tags = [ct for ct, _ in dispatch.CELL_KINDS]
    assert sorted(tags) == sorted(CellType)
    assert len({dt for _, dt in dispatch.CELL_KINDS}) == len(CellType)


@pytest.mark.parametrize("name", sorted(ALL_TABLES))
def test_every_table_is_exhaustive(name):
    table = ALL_TABLES[name]
    for cell_type in CellType:
        assert cell_type in table, f"{name} has no entry for {cell_type.name}"


def test_check_exhaustive_names_missing_tags():
    partial = {CellType.UINT8: 1, CellType.FLOAT64: 2}
    with pytest.raises(UnsupportedCellTypeError, match="UINT16"):
        dispatch.check_exhaustive(partial, "partial")


def test_dispatch_table_is_read_only():
    table = dispatch.dispatch_table(lambda ct, dt: dt.itemsize, name="sizes")
    assert table[CellType.INT64] == 8
    with pytest.raises(TypeError):
        table[CellType.INT64] = 4  # type: ignore[index]


def test_dispatcher_calls_specialised_function():
    zeros = dispatch.Dispatcher(lambda ct, dt: (lambda n: np.zeros(n, dtype=dt)), name="zeros")
    out = zeros(CellType.INT16, 3)
    assert out.dtype == np.int16
    assert zeros[CellType.FLOAT32](2).dtype == np.float32
    assert set(zeros.table) == set(CellType)


def test_widen_dispatches_to_python_numbers():
    assert isinstance(dispatch.WIDEN, dispatch.Dispatcher)
    assert dispatch.WIDEN(CellType.UINT64, np.uint64(2**64 - 1)) == 2**64 - 1
    assert type(dispatch.WIDEN(CellType.INT8, np.int8(-3))) is int
    assert type(dispatch.WIDEN[CellType.FLOAT32](np.float32(0.5))) is float


def test_tags_are_stable():
    assert [int(ct) for ct in CellType] == list(range(10))
    assert CellType.UINT8 == 0
    assert CellType.FLOAT64 == 9


@pytest.mark.parametrize("cell_type, name, width, kind", [
    (CellType.UINT8, "UInt8", 1, "unsigned"),
    (CellType.UINT64, "UInt64", 8, "unsigned"),
    (CellType.INT16, "Int16", 2, "signed"),
    (CellType.FLOAT32, "Float32", 4, "float"),
    (CellType.FLOAT64, "Float64", 8, "float"),
])
def test_cell_type_info(cell_type, name, width, kind):
    assert cell_type.display_name == name
    assert str(cell_type) == name
    assert cell_type.width == width
    assert cell_type.kind == kind
    assert cell_type.dtype.itemsize == width


def test_kind_predicates(cell_type):
    assert cell_type.is_integral != cell_type.is_float
    if cell_type.is_float:
        assert cell_type.is_signed
    assert cell_type.dtype == np.dtype(cell_type.dtype.name)


def test_limits():
    assert CellType.UINT8.min_value == 0
    assert CellType.UINT8.max_value == 255
    assert CellType.INT64.min_value.value == -(1 << 63)
    assert CellType.UINT64.max_value.value == (1 << 64) - 1
    assert CellType.FLOAT32.max_value.value == float(np.finfo(np.float32).max)


@pytest.mark.parametrize("text, expected", [
    ("UInt8", CellType.UINT8),
    ("uint8", CellType.UINT8),
    ("INT32", CellType.INT32),
    ("float64", CellType.FLOAT64),
    ("  Float32 ", CellType.FLOAT32),
])
def test_parse(text, expected):
    assert CellType.parse(text) == expected


def test_parse_rejects_unknown_names():
    with pytest.raises(CellTypeParseError, match="complex64"):
        CellType.parse("complex64")
    # Also a ValueError for idiomatic callers
    with pytest.raises(ValueError):
        CellType.parse("")


def test_display_name_round_trips(cell_type):
    assert CellType.parse(cell_type.display_name) == cell_type


@pytest.mark.parametrize("small, large, fits", [
    (CellType.UINT8, CellType.INT16, True),
    (CellType.UINT8, CellType.INT8, False),
    (CellType.INT32, CellType.FLOAT64, True),
    (CellType.INT32, CellType.FLOAT32, False),
    (CellType.INT8, CellType.UINT64, False),
    (CellType.FLOAT32, CellType.FLOAT64, True),
])
def test_can_fit_into(small, large, fits):
    assert small.can_fit_into(large) is fits
