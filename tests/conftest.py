# tests/conftest.py
"""
Pytest configuration and shared fixtures for the test suite.
"""
import pytest
import numpy as np

from erased_cells import CellBuffer, CellType, Mask, MaskedCellBuffer


def _sample_cells(cell_type: CellType, length: int) -> np.ndarray:
    """Deterministic cells of `cell_type`, exercising the sign bit where possible."""
    values = np.arange(length, dtype=np.int64) * 37 - length
    if cell_type.is_float:
        return (values / 8).astype(cell_type.dtype)
    return values.astype(cell_type.dtype)


@pytest.fixture(params=list(CellType), ids=lambda ct: ct.display_name)
def cell_type(request) -> CellType:
    """Every cell type in turn."""
    return request.param


@pytest.fixture
def uint8_buffer() -> CellBuffer:
    return CellBuffer(CellType.UINT8, [1, 2, 3])


@pytest.fixture
def uint16_buffer() -> CellBuffer:
    return CellBuffer(CellType.UINT16, [2, 4, 6])


@pytest.fixture
def masked_float_buffer() -> MaskedCellBuffer:
    """Three Float64 cells whose middle cell is nodata."""
    return MaskedCellBuffer(CellBuffer(CellType.FLOAT64, [1.0, 2.0, 3.0]), Mask([True, False, True]))


@pytest.fixture
def sample_cells():
    """Factory for deterministic cells: `sample_cells(cell_type, length)`."""
    return _sample_cells
