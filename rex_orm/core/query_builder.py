"""Backend-agnostic query builder and its SQL compiler.

A `QueryBuilder` is an immutable description of one statement. Every call
returns a new builder, so a partially built query can be shared and branched:

    base = QueryBuilder().select(["id", "title"]).from_("posts")
    recent = base.order_by("id", desc=True).limit(10)
    sql, params = recent.where("userId", "=", 42).build()

`build()` turns the description into SQL text with positional placeholders
and a parallel parameter list. Values never enter the SQL text; only
validated identifiers and integer paging literals do.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Any, List, NamedTuple, Optional, Sequence, Tuple, Type, Union

from .conditions import Condition, OrderBy, make_condition
from .contracts import DialectPort
from .errors import IncompleteQueryError, InvalidQueryError
from .models import metadata_for
from .types import Params, QueryResult, SqlValue, check_identifier, coerce_value

if TYPE_CHECKING:
    from .contracts import DatabasePort

SELECT = "SELECT"
INSERT = "INSERT"
UPDATE = "UPDATE"
DELETE = "DELETE"

ALL_COLUMNS = "*"

TableInput = Union[str, Type[Any]]


class CompiledQuery(NamedTuple):
    """Compiled SQL text and its positional parameters."""

    sql: str
    params: Params


class _ParamCollector:
    """Collects parameters and hands out matching placeholders in order."""

    def __init__(self, dialect: DialectPort) -> None:
        self._dialect = dialect
        self.params: Params = []

    def add(self, value: SqlValue) -> str:
        self.params.append(value)
        return self._dialect.placeholder(len(self.params))


def _default_dialect() -> DialectPort:
    from ..ports.db_api.dialects import Dialect

    return Dialect()


def _check_count(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQueryError(f"{what} must be an integer, got {value!r}.")
    if value < 0:
        raise InvalidQueryError(f"{what} must be non-negative, got {value}.")
    return value


def _data_pairs(data: Mapping[str, Any]) -> Tuple[Tuple[str, SqlValue], ...]:
    if not isinstance(data, Mapping):
        raise InvalidQueryError("Row data must be a mapping of column -> value.")
    return tuple(
        (check_identifier(key, kind="column name"), coerce_value(value))
        for key, value in data.items()
    )


@dataclass(frozen=True)
class QueryBuilder:
    """Immutable, fluent description of one SQL statement."""

    kind: Optional[str] = None
    table: Optional[str] = None
    model: Optional[Type[Any]] = None
    columns: Tuple[str, ...] = ()
    distinct: bool = False
    values: Tuple[Tuple[str, SqlValue], ...] = ()
    default_values: bool = False
    assignments: Tuple[Tuple[str, SqlValue], ...] = ()
    predicates: Tuple[Condition, ...] = ()
    ordering: Tuple[OrderBy, ...] = ()
    limit_count: Optional[int] = None
    offset_count: Optional[int] = None
    returning_columns: Tuple[str, ...] = ()

    def _target(self, table: TableInput) -> dict[str, Any]:
        if isinstance(table, type):
            return {"table": metadata_for(table).table_name, "model": table}
        return {"table": check_identifier(table, kind="table name"), "model": None}

    def select(
        self,
        columns: Union[str, Sequence[str]] = ALL_COLUMNS,
        *,
        distinct: bool = False,
    ) -> QueryBuilder:
        """Start a SELECT; `"*"` or `"all"` projects every column."""

        if isinstance(columns, str):
            if columns.lower() not in (ALL_COLUMNS, "all"):
                raise InvalidQueryError(
                    f"select() takes a column list or '*', got {columns!r}."
                )
            projection: Tuple[str, ...] = (ALL_COLUMNS,)
        else:
            projection = tuple(check_identifier(col, kind="column name") for col in columns)
        return replace(self, kind=SELECT, columns=projection, distinct=distinct)

    def from_(self, table: TableInput) -> QueryBuilder:
        """Set the SELECT target: a table name or a registered model type."""

        return replace(self, **self._target(table))

    def insert(self, table: TableInput, data: Mapping[str, Any]) -> QueryBuilder:
        """Start an INSERT; column order follows `data`'s iteration order."""

        return replace(
            self,
            kind=INSERT,
            values=_data_pairs(data),
            default_values=False,
            **self._target(table),
        )

    def insert_defaults(self, table: TableInput) -> QueryBuilder:
        """Start `INSERT INTO <table> DEFAULT VALUES` for a row with no explicit values."""

        return replace(
            self, kind=INSERT, values=(), default_values=True, **self._target(table)
        )

    def update(self, table: TableInput, data: Mapping[str, Any]) -> QueryBuilder:
        """Start an UPDATE assigning every `data` item."""

        return replace(
            self, kind=UPDATE, assignments=_data_pairs(data), **self._target(table)
        )

    def delete(self, table: TableInput) -> QueryBuilder:
        """Start a DELETE."""

        return replace(self, kind=DELETE, **self._target(table))

    def where(
        self,
        column: Union[str, Condition],
        operator: Optional[str] = None,
        value: Any = None,
    ) -> QueryBuilder:
        """Append a predicate; predicates are joined with `AND` in call order.

        Accepts either `(column, operator, value)` or a prebuilt `Condition`.
        """

        if isinstance(column, Condition):
            if operator is not None:
                raise InvalidQueryError("where(Condition) takes no operator.")
            condition = column
        else:
            if operator is None:
                raise InvalidQueryError("where() requires an operator.")
            condition = make_condition(column, operator, value)
        return replace(self, predicates=self.predicates + (condition,))

    def order_by(self, column: str, *, desc: bool = False) -> QueryBuilder:
        check_identifier(column, kind="column name")
        return replace(self, ordering=self.ordering + (OrderBy(column, desc),))

    def limit(self, n: int) -> QueryBuilder:
        return replace(self, limit_count=_check_count(n, "limit"))

    def offset(self, n: int) -> QueryBuilder:
        return replace(self, offset_count=_check_count(n, "offset"))

    def returning(self, *columns: str) -> QueryBuilder:
        """Ask INSERT/UPDATE/DELETE to return columns (dialect permitting)."""

        if not columns:
            raise InvalidQueryError("returning() requires at least one column.")
        checked = tuple(check_identifier(col, kind="column name") for col in columns)
        return replace(self, returning_columns=checked)

    def build(self, dialect: Optional[DialectPort] = None) -> CompiledQuery:
        """Compile into SQL text and a positional parameter list.

        Raises:
            IncompleteQueryError: If the statement kind, table, or the parts
                required by the kind are missing.
            InvalidQueryError: If parts incompatible with the kind are set, or
                referenced columns do not exist on the target model.
        """

        dialect = dialect or _default_dialect()
        self._validate(dialect)
        collector = _ParamCollector(dialect)

        if self.kind == SELECT:
            sql = self._compile_select(collector, dialect)
        elif self.kind == INSERT:
            sql = self._compile_insert(collector)
        elif self.kind == UPDATE:
            sql = self._compile_update(collector)
        else:
            sql = f"DELETE FROM {self.table}" + self._compile_where(collector)

        if self.returning_columns:
            sql += f" RETURNING {', '.join(self.returning_columns)}"
        return CompiledQuery(sql, collector.params)

    def execute(self, adapter: DatabasePort) -> QueryResult:
        """Compile with the adapter's dialect and execute."""

        sql, params = self.build(adapter.dialect)
        return adapter.execute(sql, params)

    def _validate(self, dialect: DialectPort) -> None:
        if self.kind is None:
            raise IncompleteQueryError(
                "No statement kind; call select(), insert(), update() or delete()."
            )
        if self.table is None:
            raise IncompleteQueryError(f"{self.kind} query has no target table.")

        if self.kind == SELECT:
            if not self.columns:
                raise IncompleteQueryError("SELECT query has no columns.")
            self._forbid(
                values="insert values",
                default_values="DEFAULT VALUES",
                assignments="update assignments",
            )
            if self.returning_columns:
                raise InvalidQueryError("SELECT does not take RETURNING.")
        elif self.kind == INSERT:
            if not self.values and not self.default_values:
                raise IncompleteQueryError("INSERT query has no values.")
            self._forbid(
                columns="a SELECT projection",
                assignments="update assignments",
                predicates="WHERE predicates",
            )
            self._forbid_paging()
        elif self.kind == UPDATE:
            if not self.assignments:
                raise IncompleteQueryError("UPDATE query has no assignments.")
            self._forbid(
                columns="a SELECT projection",
                values="insert values",
                default_values="DEFAULT VALUES",
            )
            self._forbid_paging()
        elif self.kind == DELETE:
            self._forbid(
                columns="a SELECT projection",
                values="insert values",
                default_values="DEFAULT VALUES",
                assignments="update assignments",
            )
            self._forbid_paging()
        else:
            raise InvalidQueryError(f"Unknown statement kind {self.kind!r}.")

        if self.returning_columns and not dialect.supports_returning:
            raise InvalidQueryError(f"Dialect {dialect.name!r} does not support RETURNING.")

        if self.model is not None:
            self._validate_columns()

    def _forbid(self, **parts: str) -> None:
        for attr, label in parts.items():
            if getattr(self, attr):
                raise InvalidQueryError(f"{self.kind} query cannot carry {label}.")

    def _forbid_paging(self) -> None:
        if self.ordering or self.limit_count is not None or self.offset_count is not None:
            raise InvalidQueryError(f"{self.kind} query cannot carry ORDER BY/LIMIT/OFFSET.")

    def _validate_columns(self) -> None:
        meta = metadata_for(self.model)
        known = set(meta.column_names)
        referenced: List[str] = [col for col in self.columns if col != ALL_COLUMNS]
        referenced += [col for col, _ in self.values]
        referenced += [col for col, _ in self.assignments]
        referenced += [cond.col for cond in self.predicates]
        referenced += [item.col for item in self.ordering]
        referenced += list(self.returning_columns)
        for col in referenced:
            if col not in known:
                raise InvalidQueryError(
                    f"Unknown column {col!r} for model {meta.model.__name__} "
                    f"(table {meta.table_name!r})."
                )

    def _compile_select(self, collector: _ParamCollector, dialect: DialectPort) -> str:
        keyword = "SELECT DISTINCT" if self.distinct else "SELECT"
        sql = f"{keyword} {', '.join(self.columns)} FROM {self.table}"
        sql += self._compile_where(collector)

        if self.ordering:
            sql += " ORDER BY " + ", ".join(
                f"{item.col} {'DESC' if item.desc else 'ASC'}" for item in self.ordering
            )
        if self.limit_count is not None:
            sql += f" LIMIT {self.limit_count}"
        if self.offset_count is not None:
            if self.limit_count is None and dialect.offset_without_limit:
                sql += f" {dialect.offset_without_limit}"
            sql += f" OFFSET {self.offset_count}"
        return sql

    def _compile_insert(self, collector: _ParamCollector) -> str:
        if self.default_values:
            return f"INSERT INTO {self.table} DEFAULT VALUES"
        columns = ", ".join(col for col, _ in self.values)
        placeholders = ", ".join(collector.add(value) for _, value in self.values)
        return f"INSERT INTO {self.table} ({columns}) VALUES ({placeholders})"

    def _compile_update(self, collector: _ParamCollector) -> str:
        set_clause = ", ".join(
            f"{col} = {collector.add(value)}" for col, value in self.assignments
        )
        return f"UPDATE {self.table} SET {set_clause}" + self._compile_where(collector)

    def _compile_where(self, collector: _ParamCollector) -> str:
        if not self.predicates:
            return ""
        clauses = [_compile_condition(cond, collector) for cond in self.predicates]
        return f" WHERE {' AND '.join(clauses)}"


def _compile_condition(condition: Condition, collector: _ParamCollector) -> str:
    """Compile one condition, appending its parameters in element order."""

    if condition.is_unary:
        return f"{condition.col} {condition.op}"

    if condition.values is not None:
        if not condition.values:
            return "1=0" if condition.op == "IN" else "1=1"
        placeholders = ", ".join(collector.add(value) for value in condition.values)
        return f"{condition.col} {condition.op} ({placeholders})"

    return f"{condition.col} {condition.op} {collector.add(condition.value)}"
