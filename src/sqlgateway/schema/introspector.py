"""Live schema introspection from the database catalog.

Every call reads the catalog afresh; nothing is cached.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from sqlalchemy import text

from sqlgateway.core.types import ColumnMeta, TableSchema
from sqlgateway.data.identifiers import quote_identifier

if TYPE_CHECKING:
    from sqlalchemy import Connection, Engine

SYSTEM_SCHEMAS = ("pg_catalog", "information_schema")

# "VARCHAR(255)" -> ("VARCHAR", "255"); "NUMERIC(10,2)" keeps its precision in the type.
_DECLARED_TYPE = re.compile(r"^\s*([A-Za-z][A-Za-z0-9_ ]*?)\s*(?:\(\s*(\d+)\s*\))?\s*$")


def _parse_declared_type(declared: str) -> tuple[str, int | None]:
    """Split a SQLite declared type into base type and length."""
    match = _DECLARED_TYPE.match(declared or "")
    if not match:
        return (declared or "").lower(), None
    base, length = match.groups()
    return base.lower(), int(length) if length else None


class SchemaIntrospector:
    """Reads table and column metadata from the catalog.

    PostgreSQL uses ``pg_catalog.pg_tables`` and ``information_schema.columns``;
    SQLite uses ``sqlite_master`` and ``PRAGMA table_info``.
    """

    def __init__(self, engine: Engine) -> None:
        """Initialize the introspector.

        Args:
            engine: SQLAlchemy engine
        """
        self._engine = engine
        self._is_postgresql = engine.dialect.name == "postgresql"

    def list_tables(self) -> list[str]:
        """List user table names, sorted."""
        with self._engine.connect() as conn:
            if self._is_postgresql:
                result = conn.execute(
                    text(
                        """
                    SELECT tablename FROM pg_catalog.pg_tables
                    WHERE schemaname NOT IN ('pg_catalog', 'information_schema')
                    ORDER BY tablename
                """
                    )
                )
            else:
                result = conn.execute(
                    text(
                        """
                    SELECT name FROM sqlite_master
                    WHERE type = 'table' AND name NOT LIKE 'sqlite_%'
                    ORDER BY name
                """
                    )
                )
            return [row[0] for row in result]

    def table_exists(self, table_name: str) -> bool:
        """Check table existence with a catalog count query."""
        with self._engine.connect() as conn:
            if self._is_postgresql:
                count = conn.execute(
                    text(
                        """
                    SELECT count(*) FROM information_schema.tables
                    WHERE table_name = :table
                      AND table_schema NOT IN ('pg_catalog', 'information_schema')
                """
                    ),
                    {"table": table_name},
                ).scalar()
            else:
                count = conn.execute(
                    text(
                        "SELECT count(*) FROM sqlite_master WHERE type = 'table' AND name = :table"
                    ),
                    {"table": table_name},
                ).scalar()
            return bool(count)

    def get_table_schema(self, table_name: str) -> TableSchema:
        """Get the columns of one table, in ordinal order.

        An unknown table yields a schema with no columns.

        Args:
            table_name: Table to describe

        Returns:
            TableSchema read from the catalog
        """
        with self._engine.connect() as conn:
            if self._is_postgresql:
                columns = self._postgresql_columns(conn, table_name)
            else:
                columns = self._sqlite_columns(conn, table_name)
        return TableSchema(name=table_name, columns=columns)

    def get_table_schemas(self, table_names: list[str] | None = None) -> dict[str, TableSchema]:
        """Describe several tables (all user tables when names are omitted).

        Args:
            table_names: Tables to describe, or None for all

        Returns:
            Table name -> TableSchema, in the requested (or sorted) order
        """
        names = table_names if table_names else self.list_tables()
        return {name: self.get_table_schema(name) for name in names}

    def _postgresql_columns(self, conn: Connection, table_name: str) -> dict[str, ColumnMeta]:
        result = conn.execute(
            text(
                """
            SELECT column_name, data_type, character_maximum_length,
                   is_nullable, column_default
            FROM information_schema.columns
            WHERE table_name = :table
              AND table_schema NOT IN ('pg_catalog', 'information_schema')
            ORDER BY ordinal_position
        """
            ),
            {"table": table_name},
        )
        return {
            row.column_name: ColumnMeta(
                data_type=row.data_type,
                max_length=row.character_maximum_length,
                nullable=row.is_nullable == "YES",
                default=str(row.column_default) if row.column_default is not None else None,
            )
            for row in result
        }

    def _sqlite_columns(self, conn: Connection, table_name: str) -> dict[str, ColumnMeta]:
        # PRAGMA does not take bound parameters
        result = conn.execute(text(f"PRAGMA table_info({quote_identifier(table_name)})"))
        columns: dict[str, ColumnMeta] = {}
        for row in result:
            data_type, max_length = _parse_declared_type(row.type)
            columns[row.name] = ColumnMeta(
                data_type=data_type,
                max_length=max_length,
                nullable=not row.notnull and not row.pk,
                default=str(row.dflt_value) if row.dflt_value is not None else None,
            )
        return columns
