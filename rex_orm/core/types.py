"""Shared value and result types used across the builder, models, and ports."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .errors import InvalidQueryError

SqlValue = Union[None, bool, int, float, str, bytes]
Params = List[SqlValue]

RowMapping = Mapping[str, Any]
Row = Dict[str, Any]
Rows = List[Row]


def coerce_value(value: Any) -> SqlValue:
    """Normalize one Python value into the closed `SqlValue` variant.

    Raises:
        InvalidQueryError: If the value has no SQL parameter representation.
    """

    # str/int mixin enums are also instances of the primitives below.
    if isinstance(value, Enum):
        return coerce_value(value.value)
    if value is None or isinstance(value, (bool, int, float, str, bytes)):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    raise InvalidQueryError(
        f"Unsupported parameter type {type(value).__name__}; expected "
        "None, bool, int, float, str, or bytes."
    )


def coerce_values(values: Sequence[Any]) -> Params:
    """Normalize a sequence of values, preserving order."""

    return [coerce_value(value) for value in values]


@dataclass(frozen=True)
class QueryResult:
    """Uniform result shape returned by every adapter.

    Attributes:
        rows: Result rows as `column -> value` dictionaries.
        row_count: Number of returned rows, or affected rows for DML.
        last_row_id: Driver-reported id of the last inserted row, if any.
    """

    rows: Rows = field(default_factory=list)
    row_count: int = 0
    last_row_id: Optional[int] = None

    def first(self) -> Optional[Row]:
        """Return the first row or `None`."""

        return self.rows[0] if self.rows else None


_IDENTIFIER_RE = re.compile(r"[A-Za-z_][A-Za-z0-9_]*(\.[A-Za-z_][A-Za-z0-9_]*)?")


def check_identifier(name: Any, *, kind: str = "identifier") -> str:
    """Validate a table/column identifier and return it unchanged.

    Identifiers are emitted into SQL text, so only plain (optionally
    schema-qualified) names are accepted.
    """

    if not isinstance(name, str) or not _IDENTIFIER_RE.fullmatch(name):
        raise InvalidQueryError(f"Invalid {kind} {name!r}.")
    return name
