# tests/test_config_logs.py
"""
Tests for environment settings, the package logger and the parallel kernels.
"""
import dataclasses
import logging

import pytest
import numpy as np

from erased_cells import CellBuffer, CellType, Operator, Settings, load_settings, set_log_level
from erased_cells._internal import kernels
from erased_cells.logs import check_verbose


# --- Settings ---

def test_defaults():
    settings = load_settings({})
    assert settings == Settings()
    assert settings.parallel_workers == 1
    assert not settings.parallel
    assert settings.byte_order == "<"


def test_environment_overrides():
    settings = load_settings({
        "ERASED_CELLS_PARALLEL_WORKERS": "4",
        "ERASED_CELLS_PARALLEL_MIN_LENGTH": "128",
        "ERASED_CELLS_LOG_LEVEL": "debug",
    })
    assert settings.parallel_workers == 4
    assert settings.parallel_min_length == 128
    assert settings.log_level == "DEBUG"
    assert settings.parallel


def test_blank_values_fall_back_to_defaults():
    assert load_settings({"ERASED_CELLS_PARALLEL_WORKERS": "  "}).parallel_workers == 1


@pytest.mark.parametrize("environ", [
    {"ERASED_CELLS_PARALLEL_WORKERS": "many"},
    {"ERASED_CELLS_PARALLEL_WORKERS": "0"},
    {"ERASED_CELLS_PARALLEL_MIN_LENGTH": "-5"},
    {"ERASED_CELLS_LOG_LEVEL": "chatty"},
])
def test_invalid_environment(environ):
    with pytest.raises(ValueError):
        load_settings(environ)


def test_settings_are_frozen():
    settings = Settings()
    with pytest.raises(dataclasses.FrozenInstanceError):
        settings.parallel_workers = 8  # type: ignore[misc]
    with pytest.raises(ValueError, match="little-endian"):
        Settings(byte_order=">")


# --- Logging ---

@pytest.mark.parametrize("verbose, level", [
    (None, logging.WARNING),
    (False, logging.WARNING),
    (True, logging.INFO),
    ("debug", logging.DEBUG),
    ("ERROR", logging.ERROR),
    (15, 15),
])
def test_check_verbose(verbose, level):
    assert check_verbose(verbose) == level


def test_check_verbose_rejects_bad_values():
    with pytest.raises(ValueError):
        check_verbose("loud")
    with pytest.raises(ValueError):
        check_verbose(-1)
    with pytest.raises(TypeError):
        check_verbose(1.5)


def test_set_log_level():
    logger = logging.getLogger("erased_cells")
    previous = logger.level
    try:
        set_log_level("DEBUG")
        assert logger.level == logging.DEBUG
        set_log_level(False)
        assert logger.level == logging.WARNING
    finally:
        logger.setLevel(previous)


def test_package_logger_has_null_handler():
    handlers = logging.getLogger("erased_cells").handlers
    assert any(isinstance(h, logging.NullHandler) for h in handlers)


# --- Parallel kernels ---

PARALLEL = Settings(parallel_workers=4, parallel_min_length=1)


@pytest.mark.parametrize("op", list(Operator))
def test_parallel_split_matches_serial(op):
    rng = np.random.default_rng(3)
    lhs = rng.integers(-1000, 1000, size=1001).astype(np.int32)
    rhs = rng.integers(1, 1000, size=1001).astype(np.uint16)
    compute = CellType.INT32 if op is not Operator.DIV else CellType.FLOAT64
    result = CellType.UINT8 if op.is_comparison else compute

    serial = kernels.binary(op, lhs, rhs, compute, result, settings=Settings())
    parallel = kernels.binary(op, lhs, rhs, compute, result, settings=PARALLEL)
    np.testing.assert_array_equal(parallel, serial)


def test_parallel_split_with_scalar_operand():
    arr = np.arange(10, dtype=np.float32)
    serial = kernels.binary(Operator.MUL, arr, 0.5, CellType.FLOAT32, CellType.FLOAT32)
    parallel = kernels.binary(Operator.MUL, arr, 0.5, CellType.FLOAT32, CellType.FLOAT32, settings=PARALLEL)
    np.testing.assert_array_equal(parallel, serial)
    np.testing.assert_array_equal(serial, arr * np.float32(0.5))


def test_parallel_split_below_threshold_is_serial(caplog):
    settings = Settings(parallel_workers=4, parallel_min_length=100)
    with caplog.at_level(logging.DEBUG, logger="erased_cells"):
        kernels.binary(Operator.ADD, np.arange(10), np.arange(10), CellType.INT64, CellType.INT64, settings=settings)
    assert not any("Splitting" in r.getMessage() for r in caplog.records)


def test_parallel_split_is_logged(caplog):
    with caplog.at_level(logging.DEBUG, logger="erased_cells"):
        kernels.binary(Operator.ADD, np.arange(10), np.arange(10), CellType.INT64, CellType.INT64, settings=PARALLEL)
    assert any("Splitting ADD" in r.getMessage() for r in caplog.records)


def test_operations_leave_operands_unchanged():
    buf = CellBuffer(CellType.INT64, list(range(100)))
    assert (buf + buf).to_list() == [2 * i for i in range(100)]
    assert buf.to_list() == list(range(100))
