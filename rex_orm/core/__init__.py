"""Public core API for metadata, query building, and model persistence."""

from .base_model import BaseModel
from .conditions import C, Condition, OrderBy
from .errors import (
    AdapterError,
    DatabaseConnectionError,
    DuplicateColumnError,
    IncompleteQueryError,
    InvalidQueryError,
    ModelValidationError,
    NotConnectedError,
    QueryExecutionError,
    RexOrmError,
    TransactionStateError,
    UnregisteredModelError,
)
from .metadata import (
    ColumnMetadata,
    EntityMetadata,
    MetadataRegistry,
    SqlType,
    add_column,
    default_registry,
    get_metadata,
    is_registered,
    register_model,
    registered_models,
    set_table_name,
)
from .models import (
    ColumnOptions,
    collect_column,
    collect_entity,
    column,
    entity,
    metadata_for,
    primary_key,
)
from .query_builder import CompiledQuery, QueryBuilder
from .schema import apply_schema, create_table_sql, drop_table_sql
from .types import QueryResult, SqlValue, coerce_value

__all__ = [
    "AdapterError",
    "BaseModel",
    "C",
    "ColumnMetadata",
    "ColumnOptions",
    "CompiledQuery",
    "Condition",
    "DatabaseConnectionError",
    "DuplicateColumnError",
    "EntityMetadata",
    "IncompleteQueryError",
    "InvalidQueryError",
    "MetadataRegistry",
    "ModelValidationError",
    "NotConnectedError",
    "OrderBy",
    "QueryBuilder",
    "QueryExecutionError",
    "QueryResult",
    "RexOrmError",
    "SqlType",
    "SqlValue",
    "TransactionStateError",
    "UnregisteredModelError",
    "add_column",
    "apply_schema",
    "coerce_value",
    "collect_column",
    "collect_entity",
    "column",
    "create_table_sql",
    "default_registry",
    "drop_table_sql",
    "entity",
    "get_metadata",
    "is_registered",
    "metadata_for",
    "primary_key",
    "register_model",
    "registered_models",
    "set_table_name",
]
