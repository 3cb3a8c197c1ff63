# tests/test_convenience.py
"""
Tests for the high-level file helpers.
"""
from pathlib import Path

import pytest

from erased_cells import CellBuffer, CellType, CorruptDataError, MaskedCellBuffer, load_buffer, save_buffer


def test_save_and_load_buffer(tmp_path: Path):
    filepath = tmp_path / "cells.bin"
    buf = CellBuffer(CellType.INT16, [1, -2, 3])

    written = save_buffer(filepath, buf)
    assert written == 9 + 6
    assert filepath.stat().st_size == written

    loaded = load_buffer(filepath)
    assert isinstance(loaded, CellBuffer)
    assert loaded == buf
    assert load_buffer(str(filepath), masked=False) == buf


def test_save_and_load_masked_buffer(tmp_path: Path, masked_float_buffer):
    filepath = tmp_path / "masked.bin"
    save_buffer(filepath, masked_float_buffer)

    loaded = load_buffer(filepath)
    assert isinstance(loaded, MaskedCellBuffer)
    assert loaded == masked_float_buffer
    assert load_buffer(filepath, masked=True) == masked_float_buffer


def test_save_overwrites(tmp_path: Path):
    filepath = tmp_path / "cells.bin"
    save_buffer(filepath, CellBuffer(CellType.UINT8, list(range(50))))
    save_buffer(filepath, CellBuffer(CellType.UINT8, [7]))
    assert load_buffer(filepath) == CellBuffer(CellType.UINT8, [7])


def test_load_with_wrong_kind(tmp_path: Path, masked_float_buffer):
    masked_path = tmp_path / "masked.bin"
    plain_path = tmp_path / "plain.bin"
    save_buffer(masked_path, masked_float_buffer)
    save_buffer(plain_path, masked_float_buffer.buffer)

    with pytest.raises(CorruptDataError, match="does not hold a plain cell buffer"):
        load_buffer(masked_path, masked=False)
    with pytest.raises(CorruptDataError):
        load_buffer(plain_path, masked=True)


def test_load_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_buffer(tmp_path / "missing.bin")
