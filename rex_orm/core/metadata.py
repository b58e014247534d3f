"""Process-wide registry of model schema metadata.

Column and entity collectors (see `models.py`) write into a
`MetadataRegistry` while model classes are being declared. Everything that
later needs a table name or a column list (query builder validation, base
model persistence, schema DDL) reads it back through `get_metadata`.

Columns may be added before the entity-level declaration runs: they land in a
provisional slot that `register_model` later finalizes. Only finalized slots
count as registered.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

import structlog

from .errors import DuplicateColumnError, UnregisteredModelError
from .types import check_identifier

logger = structlog.get_logger(__name__)


class SqlType(str, Enum):
    """Portable column types understood by every dialect."""

    INTEGER = "INTEGER"
    REAL = "REAL"
    NUMERIC = "NUMERIC"
    TEXT = "TEXT"
    VARCHAR = "VARCHAR"
    BOOLEAN = "BOOLEAN"
    TIMESTAMP = "TIMESTAMP"
    DATE = "DATE"
    BLOB = "BLOB"


DEFAULT_VARCHAR_LENGTH = 255


@dataclass(frozen=True)
class ColumnMetadata:
    """Schema facts for one mapped field.

    Attributes:
        name: SQL column name.
        sql_type: Portable column type.
        nullable: Whether the column accepts NULL.
        unique: Whether the column carries a UNIQUE constraint.
        is_primary_key: Whether this column is the model's primary key.
        field_name: Python attribute name; defaults to `name`.
        length: VARCHAR length, `None` for other types.
    """

    name: str
    sql_type: SqlType = SqlType.TEXT
    nullable: bool = True
    unique: bool = False
    is_primary_key: bool = False
    field_name: str = ""
    length: Optional[int] = None

    def __post_init__(self) -> None:
        check_identifier(self.name, kind="column name")
        if not self.field_name:
            object.__setattr__(self, "field_name", self.name)
        if self.sql_type is SqlType.VARCHAR and self.length is None:
            object.__setattr__(self, "length", DEFAULT_VARCHAR_LENGTH)

    @property
    def ddl_type(self) -> str:
        if self.sql_type is SqlType.VARCHAR:
            return f"VARCHAR({self.length})"
        return self.sql_type.value


@dataclass(frozen=True)
class EntityMetadata:
    """Immutable snapshot of one model's table name and ordered columns."""

    model: Type[Any]
    table_name: str
    columns: Tuple[ColumnMetadata, ...] = ()

    @property
    def column_names(self) -> List[str]:
        return [column.name for column in self.columns]

    @property
    def primary_key(self) -> Optional[ColumnMetadata]:
        """Return the primary key column, or `None` for key-less models."""

        for column in self.columns:
            if column.is_primary_key:
                return column
        return None

    @property
    def field_to_column(self) -> Dict[str, str]:
        return {column.field_name: column.name for column in self.columns}

    def column(self, name: str) -> Optional[ColumnMetadata]:
        """Look up a column by SQL name or field name."""

        for column in self.columns:
            if column.name == name or column.field_name == name:
                return column
        return None


@dataclass
class _EntitySlot:
    table_name: str
    columns: List[ColumnMetadata] = field(default_factory=list)
    finalized: bool = False


def _model_type(model_or_instance: Any) -> Type[Any]:
    return model_or_instance if isinstance(model_or_instance, type) else type(model_or_instance)


class MetadataRegistry:
    """Thread-safe mapping from model type to its `EntityMetadata`.

    Registration is expected during single-threaded startup; reads are safe
    from any thread afterwards.
    """

    def __init__(self) -> None:
        self._slots: Dict[Type[Any], _EntitySlot] = {}
        self._lock = threading.RLock()

    def _slot(self, model: Type[Any]) -> _EntitySlot:
        slot = self._slots.get(model)
        if slot is None:
            slot = _EntitySlot(table_name=model.__name__.lower())
            self._slots[model] = slot
        return slot

    def register_model(self, model: Type[Any]) -> None:
        """Ensure a slot exists for `model` and mark it registered.

        Idempotent: an existing table name and column list are kept.
        """

        model = _model_type(model)
        with self._lock:
            slot = self._slot(model)
            if slot.finalized:
                return
            slot.finalized = True
            logger.debug(
                "model.registered",
                model=model.__name__,
                table=slot.table_name,
                columns=len(slot.columns),
            )

    def set_table_name(self, model: Type[Any], name: str) -> None:
        """Set or overwrite the table name of `model`."""

        check_identifier(name, kind="table name")
        with self._lock:
            self._slot(_model_type(model)).table_name = name

    def add_column(self, model: Type[Any], column: ColumnMetadata) -> None:
        """Append one column to `model`, preserving call order.

        Raises:
            DuplicateColumnError: If the field (or SQL column name) is already
                declared, or a second primary key is declared.
        """

        model = _model_type(model)
        with self._lock:
            slot = self._slot(model)
            for existing in slot.columns:
                if existing.field_name == column.field_name or existing.name == column.name:
                    raise DuplicateColumnError(
                        f"{model.__name__} already declares column {column.field_name!r}."
                    )
                if existing.is_primary_key and column.is_primary_key:
                    raise DuplicateColumnError(
                        f"{model.__name__} already has primary key {existing.name!r}; "
                        "composite keys are not supported."
                    )
            slot.columns.append(column)

    def get_metadata(self, model: Any) -> EntityMetadata:
        """Return metadata for a registered model type (or instance).

        Raises:
            UnregisteredModelError: If the type was never registered.
        """

        model = _model_type(model)
        with self._lock:
            slot = self._slots.get(model)
            if slot is None or not slot.finalized:
                raise UnregisteredModelError(f"Model {model.__name__} is not registered.")
            return EntityMetadata(
                model=model,
                table_name=slot.table_name,
                columns=tuple(slot.columns),
            )

    def is_registered(self, model: Any) -> bool:
        with self._lock:
            slot = self._slots.get(_model_type(model))
            return slot is not None and slot.finalized

    def registered_models(self) -> List[Type[Any]]:
        with self._lock:
            return [model for model, slot in self._slots.items() if slot.finalized]

    def clear(self) -> None:
        """Forget every model. Intended for test isolation."""

        with self._lock:
            self._slots.clear()


default_registry = MetadataRegistry()


def register_model(model: Type[Any]) -> None:
    default_registry.register_model(model)


def set_table_name(model: Type[Any], name: str) -> None:
    default_registry.set_table_name(model, name)


def add_column(model: Type[Any], column: ColumnMetadata) -> None:
    default_registry.add_column(model, column)


def get_metadata(model: Any) -> EntityMetadata:
    return default_registry.get_metadata(model)


def is_registered(model: Any) -> bool:
    return default_registry.is_registered(model)


def registered_models() -> List[Type[Any]]:
    return default_registry.registered_models()
