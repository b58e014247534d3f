"""Predicate and ordering primitives for the query builder."""

from __future__ import annotations

from collections.abc import Sequence as SequenceABC
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from .errors import InvalidQueryError
from .types import SqlValue, check_identifier, coerce_value, coerce_values

_SCALAR_SEQUENCES = (str, bytes, bytearray, memoryview)

BINARY_OPERATORS = frozenset({"=", "!=", "<>", ">", "<", ">=", "<=", "LIKE", "NOT LIKE"})
SEQUENCE_OPERATORS = frozenset({"IN", "NOT IN"})
UNARY_OPERATORS = frozenset({"IS NULL", "IS NOT NULL"})
OPERATORS = BINARY_OPERATORS | SEQUENCE_OPERATORS | UNARY_OPERATORS


@dataclass(frozen=True)
class Condition:
    """One `column operator value` predicate.

    Attributes:
        col: Column name.
        op: Normalized SQL operator.
        value: Scalar value for binary operators.
        values: Element values for `IN` / `NOT IN`.
    """

    col: str
    op: str
    value: SqlValue = None
    values: Optional[Tuple[SqlValue, ...]] = None

    @property
    def is_unary(self) -> bool:
        return self.op in UNARY_OPERATORS


def make_condition(column: str, operator: str, value: Any = None) -> Condition:
    """Validate and normalize one predicate.

    Raises:
        InvalidQueryError: On unknown operators, invalid identifiers, or values
            that do not fit the operator.
    """

    check_identifier(column, kind="column name")
    if not isinstance(operator, str):
        raise InvalidQueryError(f"Operator must be a string, got {operator!r}.")
    op = " ".join(operator.upper().split())
    if op not in OPERATORS:
        raise InvalidQueryError(f"Unsupported operator {operator!r}.")

    if op in UNARY_OPERATORS:
        if value is not None:
            raise InvalidQueryError(f"Operator {op} does not take a value.")
        return Condition(col=column, op=op)

    if op in SEQUENCE_OPERATORS:
        if isinstance(value, _SCALAR_SEQUENCES) or not isinstance(value, SequenceABC):
            raise InvalidQueryError(f"Operator {op} requires a sequence of values.")
        return Condition(col=column, op=op, values=tuple(coerce_values(value)))

    if isinstance(value, SequenceABC) and not isinstance(value, _SCALAR_SEQUENCES):
        raise InvalidQueryError(f"Operator {op} requires a scalar value.")
    return Condition(col=column, op=op, value=coerce_value(value))


class C:
    """Fluent condition factory methods."""

    @staticmethod
    def eq(col: str, val: Any) -> Condition:
        return make_condition(col, "=", val)

    @staticmethod
    def ne(col: str, val: Any) -> Condition:
        return make_condition(col, "<>", val)

    @staticmethod
    def lt(col: str, val: Any) -> Condition:
        return make_condition(col, "<", val)

    @staticmethod
    def le(col: str, val: Any) -> Condition:
        return make_condition(col, "<=", val)

    @staticmethod
    def gt(col: str, val: Any) -> Condition:
        return make_condition(col, ">", val)

    @staticmethod
    def ge(col: str, val: Any) -> Condition:
        return make_condition(col, ">=", val)

    @staticmethod
    def like(col: str, pattern: str) -> Condition:
        return make_condition(col, "LIKE", pattern)

    @staticmethod
    def in_(col: str, values: Sequence[Any]) -> Condition:
        return make_condition(col, "IN", values)

    @staticmethod
    def not_in(col: str, values: Sequence[Any]) -> Condition:
        return make_condition(col, "NOT IN", values)

    @staticmethod
    def is_null(col: str) -> Condition:
        return make_condition(col, "IS NULL")

    @staticmethod
    def is_not_null(col: str) -> Condition:
        return make_condition(col, "IS NOT NULL")


@dataclass(frozen=True)
class OrderBy:
    """Represents one ordering expression."""

    col: str
    desc: bool = False
