# erased_cells/promotion.py

"""
Result-type resolution for binary operators.

The promotion table is computed once from the canonical kind list and is
total: every (lhs, rhs, operator) triple resolves to a cell type.

- Division always yields FLOAT64.
- Equal operand types keep their type.
- Mixed operand types resolve to the narrowest type that exactly holds both
  domains: the wider width wins, a float beats a narrower integer, and an
  integer meeting a float of equal width moves to the next wider float.
  Signed and unsigned of equal width move to the next wider signed type,
  and UINT64 with INT64 falls back to FLOAT64. On this closed set this is
  exactly `numpy.promote_types`.
- Comparisons compute in the promoted type and produce UINT8 cells (0 or 1).
"""

import logging
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np

from .types import CellType, Operator
from .value import minimal_cell_type
from ._internal import numpy_utils
from ._internal.dispatch import CELL_KINDS, dispatch_table

logger = logging.getLogger(__name__)

# Cell type produced by division, whatever the operands.
DIVISION_CELL_TYPE = CellType.FLOAT64

# Cell type holding the 0/1 outcome of a comparison.
COMPARISON_CELL_TYPE = CellType.UINT8


def _resolve(lhs: CellType, rhs: CellType, op: Operator) -> CellType:
    if op is Operator.DIV:
        return DIVISION_CELL_TYPE
    if lhs == rhs:
        return lhs
    return numpy_utils.cell_type_for_dtype(np.promote_types(lhs.dtype, rhs.dtype))


_PROMOTIONS: Mapping[tuple[CellType, CellType, Operator], CellType] = MappingProxyType({
    (lhs, rhs, op): _resolve(lhs, rhs, op)
    for lhs, _ in CELL_KINDS
    for rhs, _ in CELL_KINDS
    for op in Operator
})


def _negated(cell_type: CellType, dtype: np.dtype) -> CellType:
    if dtype.kind != 'u':
        return cell_type
    if dtype.itemsize == 8:
        return CellType.FLOAT64
    return numpy_utils.cell_type_for_dtype(np.dtype(f"i{dtype.itemsize * 2}"))


_NEGATIONS: Mapping[CellType, CellType] = dispatch_table(_negated, name="NEGATIONS")


def promotion_table() -> Mapping[tuple[CellType, CellType, Operator], CellType]:
    """Read-only view of the full promotion table."""
    return _PROMOTIONS


def promote(lhs: CellType, rhs: CellType, op: Operator = Operator.ADD) -> CellType:
    """Returns the cell type in which `lhs op rhs` is computed."""
    return _PROMOTIONS[(CellType(lhs), CellType(rhs), Operator(op))]


def result_cell_type(lhs: CellType, rhs: CellType, op: Operator) -> CellType:
    """Returns the cell type of the buffer produced by `lhs op rhs`."""
    op = Operator(op)
    if op.is_comparison:
        return COMPARISON_CELL_TYPE
    return promote(lhs, rhs, op)


def promote_scalar(cell_type: CellType, scalar: Any, op: Operator) -> CellType:
    """Promotion against a scalar, which takes its minimal representation."""
    scalar_type = minimal_cell_type(scalar)
    resolved = promote(cell_type, scalar_type, op)
    logger.debug("Scalar %r (%s) %s %s resolves to %s", scalar, scalar_type, Operator(op).symbol, cell_type, resolved)
    return resolved


def negated_cell_type(cell_type: CellType) -> CellType:
    """
    Cell type of `-x` for `x` of `cell_type`. Unsigned types widen to the next
    signed type so the negation is exact; UINT64 becomes FLOAT64.
    """
    return _NEGATIONS[CellType(cell_type)]
