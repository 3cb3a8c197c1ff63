# tests/test_value.py
"""
Tests for scalar CellValue semantics.
"""
import math

import pytest
import numpy as np

from erased_cells import CellType, CellValue


def test_of_casts_into_the_requested_type():
    assert CellValue.of(CellType.UINT8, 300).value == 44
    assert CellValue.of(CellType.INT32, 2.9).value == 2
    assert CellValue.of(CellType.FLOAT32, 1).value == 1.0
    assert isinstance(CellValue.of(CellType.FLOAT32, 1).value, float)
    assert isinstance(CellValue.of(CellType.INT64, np.int8(5)).value, int)


def test_new_uses_minimal_representation():
    assert CellValue.new(3).cell_type == CellType.UINT8
    assert CellValue.new(-3).cell_type == CellType.INT8
    assert CellValue.new(1.5).cell_type == CellType.FLOAT32
    assert CellValue.new(True) == CellValue.of(CellType.UINT8, 1)


def test_equality_unifies_types():
    assert CellValue.of(CellType.UINT8, 3) == CellValue.of(CellType.FLOAT64, 3.0)
    assert CellValue.of(CellType.INT16, -1) != CellValue.of(CellType.UINT16, 65535)
    assert CellValue.of(CellType.UINT8, 3) == 3
    assert hash(CellValue.of(CellType.UINT8, 3)) == hash(CellValue.of(CellType.FLOAT64, 3.0))


def test_integral_values_compare_exactly():
    big_unsigned = CellValue.of(CellType.UINT64, 2**63)
    big_signed = CellValue.of(CellType.INT64, 2**63 - 1)
    assert big_unsigned != big_signed
    assert big_signed < big_unsigned
    assert CellValue.of(CellType.UINT64, 2**64 - 1) != CellValue.of(CellType.INT64, -1)
    assert big_unsigned == 2**63


def test_nan_is_equal_to_itself_and_sorts_last():
    nan = CellValue.new(math.nan)
    assert nan.is_nan()
    assert nan == CellValue.of(CellType.FLOAT64, math.nan)
    assert hash(nan) == hash(CellValue.of(CellType.FLOAT64, math.nan))
    values = [nan, CellValue.new(1), CellValue.new(-2.5)]
    assert [v.get() for v in sorted(values)][:2] == [-2.5, 1]
    assert sorted(values)[-1].is_nan()
    assert CellValue.new(1e30) < nan


def test_ordering_across_types():
    assert CellValue.of(CellType.INT8, -1) < CellValue.of(CellType.UINT8, 0)
    assert CellValue.of(CellType.UINT64, (1 << 64) - 1) > CellValue.of(CellType.INT64, 0)
    assert CellValue.of(CellType.FLOAT32, 2.5) >= 2


def test_unify_and_convert():
    lhs, rhs = CellValue.of(CellType.UINT8, 200).unify(CellValue.of(CellType.INT8, -1))
    assert lhs.cell_type == rhs.cell_type == CellType.INT16
    assert (lhs.value, rhs.value) == (200, -1)
    converted = CellValue.of(CellType.FLOAT64, -1.7).convert(CellType.INT8)
    assert converted == CellValue.of(CellType.INT8, -1)


def test_negation_widens_unsigned():
    result = -CellValue.of(CellType.UINT8, 200)
    assert result.cell_type == CellType.INT16
    assert result.value == -200
    assert (-CellValue.of(CellType.UINT64, 5)).cell_type == CellType.FLOAT64
    assert (-CellValue.of(CellType.FLOAT32, 1.5)).value == -1.5


def test_numeric_protocols_and_repr():
    value = CellValue.of(CellType.UINT8, 3)
    assert int(value) == 3
    assert float(value) == 3.0
    assert repr(value) == "UInt8(3)"
    with pytest.raises(AttributeError):
        value.value = 4  # type: ignore[misc]
