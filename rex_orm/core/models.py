"""Declaration-time collectors that turn dataclass models into registry metadata."""

from __future__ import annotations

import inspect
import re
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Optional, Type, TypeVar, Union, get_args, get_origin, get_type_hints

from .metadata import (
    ColumnMetadata,
    EntityMetadata,
    MetadataRegistry,
    SqlType,
    default_registry,
)

COLUMN_METADATA_KEY = "column"
REGISTRY_ATTR = "__rex_registry__"

T = TypeVar("T")

SqlTypeInput = Union[SqlType, str]

_VARCHAR_RE = re.compile(r"^\s*varchar\s*(?:\(\s*(\d+)\s*\))?\s*$", re.IGNORECASE)
_TYPE_ALIASES = {
    "int": SqlType.INTEGER,
    "integer": SqlType.INTEGER,
    "bigint": SqlType.INTEGER,
    "serial": SqlType.INTEGER,
    "real": SqlType.REAL,
    "float": SqlType.REAL,
    "double": SqlType.REAL,
    "numeric": SqlType.NUMERIC,
    "decimal": SqlType.NUMERIC,
    "number": SqlType.NUMERIC,
    "text": SqlType.TEXT,
    "string": SqlType.TEXT,
    "bool": SqlType.BOOLEAN,
    "boolean": SqlType.BOOLEAN,
    "timestamp": SqlType.TIMESTAMP,
    "datetime": SqlType.TIMESTAMP,
    "date": SqlType.DATE,
    "blob": SqlType.BLOB,
    "bytea": SqlType.BLOB,
}


@dataclass(frozen=True)
class ColumnOptions:
    """Options a model author may attach to one field.

    Every option is optional; unset values are inferred from the field's
    annotation or fall back to defaults.
    """

    type: Optional[SqlTypeInput] = None
    name: Optional[str] = None
    length: Optional[int] = None
    nullable: Optional[bool] = None
    unique: bool = False
    primary_key: bool = False


def parse_sql_type(raw: SqlTypeInput) -> tuple[SqlType, Optional[int]]:
    """Parse `SqlType` or a type string such as `"varchar(80)"`."""

    if isinstance(raw, SqlType):
        return raw, None
    if not isinstance(raw, str):
        raise TypeError(f"Column type must be SqlType or str, got {type(raw).__name__}.")

    match = _VARCHAR_RE.match(raw)
    if match:
        length = int(match.group(1)) if match.group(1) else None
        return SqlType.VARCHAR, length

    key = raw.strip().lower()
    if key in _TYPE_ALIASES:
        return _TYPE_ALIASES[key], None
    try:
        return SqlType(raw.strip().upper()), None
    except ValueError as exc:
        raise ValueError(f"Unknown column type {raw!r}.") from exc


def resolve_sql_type(annotation: Any) -> SqlType:
    """Map a Python annotation to a portable SQL type."""

    if annotation is None:
        return SqlType.TEXT

    if isinstance(annotation, str):
        lowered = annotation.lower()
        if "bool" in lowered:
            return SqlType.BOOLEAN
        if "datetime" in lowered:
            return SqlType.TIMESTAMP
        if "date" in lowered:
            return SqlType.DATE
        if "decimal" in lowered:
            return SqlType.NUMERIC
        if "bytes" in lowered:
            return SqlType.BLOB
        if "int" in lowered:
            return SqlType.INTEGER
        if "float" in lowered:
            return SqlType.REAL
        return SqlType.TEXT

    base_type = _unwrap_optional(annotation)

    if base_type is bool:
        return SqlType.BOOLEAN
    if base_type is datetime:
        return SqlType.TIMESTAMP
    if base_type is date:
        return SqlType.DATE
    if base_type is Decimal:
        return SqlType.NUMERIC
    if base_type in {bytes, bytearray, memoryview}:
        return SqlType.BLOB
    if base_type is int:
        return SqlType.INTEGER
    if base_type is float:
        return SqlType.REAL
    return SqlType.TEXT


def is_optional_annotation(annotation: Any) -> bool:
    """Return True for `Optional[T]` / `T | None` annotations."""

    if annotation is None:
        return False
    if isinstance(annotation, str):
        lowered = annotation.replace(" ", "").lower()
        return (
            lowered.startswith(("optional[", "typing.optional["))
            or "|none" in lowered
            or "none|" in lowered
        )
    return any(arg is type(None) for arg in get_args(annotation))


def _unwrap_optional(annotation: Any) -> Any:
    origin = get_origin(annotation)
    if origin is None:
        return annotation

    args = [arg for arg in get_args(annotation) if arg is not type(None)]
    if len(args) == 1:
        return args[0]
    return annotation


def column(
    type: Optional[SqlTypeInput] = None,
    *,
    name: Optional[str] = None,
    length: Optional[int] = None,
    nullable: Optional[bool] = None,
    unique: bool = False,
    primary_key: bool = False,
    default: Any = MISSING,
    default_factory: Any = MISSING,
) -> Any:
    """Declare a mapped dataclass field.

    Example:
        title: str = column("varchar", length=120, nullable=False, default="")
    """

    options = ColumnOptions(
        type=type,
        name=name,
        length=length,
        nullable=nullable,
        unique=unique,
        primary_key=primary_key,
    )
    return field(
        default=default,
        default_factory=default_factory,
        metadata={COLUMN_METADATA_KEY: options},
    )


def primary_key(**overrides: Any) -> Any:
    """Declare an integer, unique, non-null primary key field.

    Keyword overrides are merged over those defaults and win on conflict.
    The field defaults to `None` so new instances are unsaved.
    """

    default = overrides.pop("default", None)
    options: dict[str, Any] = {
        "type": SqlType.INTEGER,
        "unique": True,
        "nullable": False,
        "primary_key": True,
    }
    options.update(overrides)
    return column(default=default, **options)


def collect_column(
    options: ColumnOptions,
    owner: Type[Any],
    field_name: str,
    annotation: Any = None,
    *,
    registry: Optional[MetadataRegistry] = None,
) -> ColumnMetadata:
    """Column-level hook: build `ColumnMetadata` for one field and register it.

    An explicit `options.type` takes precedence over the annotation type.
    """

    if options.type is not None:
        sql_type, parsed_length = parse_sql_type(options.type)
    else:
        sql_type, parsed_length = resolve_sql_type(annotation), None

    if options.nullable is not None:
        nullable = options.nullable
    elif options.primary_key:
        nullable = False
    else:
        nullable = is_optional_annotation(annotation)

    length = options.length if options.length is not None else parsed_length
    if sql_type is not SqlType.VARCHAR:
        length = None

    metadata = ColumnMetadata(
        name=options.name or field_name,
        sql_type=sql_type,
        nullable=nullable,
        unique=options.unique,
        is_primary_key=options.primary_key,
        field_name=field_name,
        length=length,
    )
    (registry or default_registry).add_column(owner, metadata)
    return metadata


def collect_entity(
    table_name: Optional[str],
    model: Type[Any],
    *,
    registry: Optional[MetadataRegistry] = None,
) -> None:
    """Entity-level hook: set the table name, then register the model."""

    target = registry or default_registry
    target.set_table_name(model, table_name or model.__name__.lower())
    target.register_model(model)


def entity(
    table_name: Optional[str] = None,
    *,
    registry: Optional[MetadataRegistry] = None,
) -> Callable[[Type[T]], Type[T]]:
    """Class decorator that maps a dataclass model to a table.

    Plain classes are turned into dataclasses first. Every dataclass field is
    mapped in declaration order unless its metadata sets `{"column": False}`.
    """

    def decorate(cls: Type[T]) -> Type[T]:
        model = cls if is_dataclass(cls) else dataclass(cls)
        target = registry or default_registry
        hints = _annotations(model)
        for item in fields(model):
            options = item.metadata.get(COLUMN_METADATA_KEY, ColumnOptions())
            if options is False:
                continue
            if not isinstance(options, ColumnOptions):
                raise TypeError(
                    f"{model.__name__}.{item.name} metadata 'column' must be ColumnOptions."
                )
            collect_column(
                options,
                model,
                item.name,
                hints.get(item.name, item.type),
                registry=target,
            )
        collect_entity(table_name, model, registry=target)
        setattr(model, REGISTRY_ATTR, target)
        return model

    return decorate


def registry_for(model: Any) -> MetadataRegistry:
    """Return the registry a model was declared into."""

    cls = model if isinstance(model, type) else type(model)
    return getattr(cls, REGISTRY_ATTR, default_registry)


def metadata_for(model: Any) -> EntityMetadata:
    """Return `EntityMetadata` for a model type or instance."""

    return registry_for(model).get_metadata(model)


def _annotations(model: Type[Any]) -> dict[str, Any]:
    try:
        return get_type_hints(model)
    except (NameError, TypeError):
        # Unresolvable forward references: keep string annotations.
        return dict(inspect.get_annotations(model))
