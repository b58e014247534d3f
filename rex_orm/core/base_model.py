"""Convenience persistence methods for `@entity` dataclass models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, TypeVar

from .contracts import DatabasePort
from .errors import InvalidQueryError, ModelValidationError
from .metadata import ColumnMetadata, EntityMetadata, SqlType
from .models import metadata_for
from .query_builder import QueryBuilder
from .types import RowMapping

M = TypeVar("M", bound="BaseModel")


def _from_sql(column: ColumnMetadata, value: Any) -> Any:
    """Undo the text storage `coerce_value` uses for dates and decimals."""

    if value is None:
        return None
    if column.sql_type is SqlType.BOOLEAN and isinstance(value, int):
        return bool(value)
    if column.sql_type is SqlType.TIMESTAMP and isinstance(value, str):
        return datetime.fromisoformat(value)
    if column.sql_type is SqlType.DATE and isinstance(value, str):
        return date.fromisoformat(value)
    if column.sql_type is SqlType.NUMERIC and isinstance(value, (str, int, float)):
        # SQLite NUMERIC affinity may hand back an int or float.
        return Decimal(str(value))
    return value


def _require_pk(meta: EntityMetadata) -> ColumnMetadata:
    pk = meta.primary_key
    if pk is None:
        raise InvalidQueryError(f"{meta.model.__name__} has no primary key column.")
    return pk


class BaseModel:
    """Mixin giving entity instances `save`/`delete` and simple finders.

    Usage:
        @entity("posts")
        class Post(BaseModel):
            id: Optional[int] = primary_key()
            title: str = column("varchar", length=255, default="")
    """

    @classmethod
    def metadata(cls) -> EntityMetadata:
        return metadata_for(cls)

    @classmethod
    def query(cls) -> QueryBuilder:
        """Return `SELECT * FROM <table>` validated against this model."""

        return QueryBuilder().select().from_(cls)

    @classmethod
    def from_row(cls: Type[M], row: RowMapping) -> M:
        """Map one result row (keyed by column name) to a model instance."""

        meta = metadata_for(cls)
        values: Dict[str, Any] = {}
        for column in meta.columns:
            if column.name not in row:
                continue
            values[column.field_name] = _from_sql(column, row[column.name])
        return cls(**values)

    @classmethod
    def get(cls: Type[M], adapter: DatabasePort, pk_value: Any) -> Optional[M]:
        """Fetch one instance by primary key, or `None`."""

        pk = _require_pk(metadata_for(cls))
        result = cls.query().where(pk.name, "=", pk_value).limit(1).execute(adapter)
        row = result.first()
        return cls.from_row(row) if row is not None else None

    @classmethod
    def all(cls: Type[M], adapter: DatabasePort) -> List[M]:
        result = cls.query().execute(adapter)
        return [cls.from_row(row) for row in result.rows]

    def to_dict(self) -> Dict[str, Any]:
        """Return current values keyed by column name, in column order."""

        meta = metadata_for(self)
        return {column.name: getattr(self, column.field_name) for column in meta.columns}

    def validate(self) -> None:
        """Check column constraints before writing.

        Subclasses may override and call `super().validate()`.

        Raises:
            ModelValidationError: On NULL in a non-nullable column or a
                VARCHAR value longer than its declared length.
        """

        for column in metadata_for(self).columns:
            value = getattr(self, column.field_name)
            if value is None:
                if not column.nullable and not column.is_primary_key:
                    raise ModelValidationError(f"Field '{column.field_name}' must not be None.")
                continue
            if (
                column.sql_type is SqlType.VARCHAR
                and isinstance(value, str)
                and column.length is not None
                and len(value) > column.length
            ):
                raise ModelValidationError(
                    f"Field '{column.field_name}' exceeds {column.length} characters."
                )

    def save(self: M, adapter: DatabasePort) -> M:
        """Insert a new row or update the existing one; returns `self`.

        Instances whose primary key is `None` are inserted and receive the
        generated key. Otherwise the row is updated by key, and inserted with
        that key when no row matched.
        """

        meta = metadata_for(self)
        pk = _require_pk(meta)
        self.validate()

        data = self.to_dict()
        pk_value = data.pop(pk.name)
        model = type(self)

        if pk_value is None:
            self._insert(adapter, model, pk, data)
            return self

        if data:
            result = (
                QueryBuilder().update(model, data).where(pk.name, "=", pk_value).execute(adapter)
            )
            exists = result.row_count > 0
        else:
            # Nothing to assign besides the key itself.
            found = (
                QueryBuilder()
                .select([pk.name])
                .from_(model)
                .where(pk.name, "=", pk_value)
                .limit(1)
                .execute(adapter)
            )
            exists = found.first() is not None
        if not exists:
            QueryBuilder().insert(model, {pk.name: pk_value, **data}).execute(adapter)
        return self

    def delete(self, adapter: DatabasePort) -> int:
        """Delete this instance's row by primary key; returns affected rows."""

        pk = _require_pk(metadata_for(self))
        pk_value = getattr(self, pk.field_name)
        if pk_value is None:
            raise InvalidQueryError("Cannot DELETE without primary key set on object.")
        result = QueryBuilder().delete(type(self)).where(pk.name, "=", pk_value).execute(adapter)
        return result.row_count

    def _insert(
        self,
        adapter: DatabasePort,
        model: Type[Any],
        pk: ColumnMetadata,
        data: Dict[str, Any],
    ) -> None:
        if data:
            builder = QueryBuilder().insert(model, data)
        else:
            builder = QueryBuilder().insert_defaults(model)
        if adapter.dialect.supports_returning:
            result = builder.returning(pk.name).execute(adapter)
            row = result.first()
            new_id = row[pk.name] if row is not None else None
        else:
            new_id = builder.execute(adapter).last_row_id
        if new_id is not None:
            setattr(self, pk.field_name, new_id)
