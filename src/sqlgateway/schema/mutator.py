"""Table creation, alteration and deletion by schema diff.

Each request moves through Validating -> Diffing -> Altering -> Done, or
stops at Rejected when the table is missing (update) or already present
(create).

Update statements run one at a time, each in its own transaction. The first
failure stops the sequence; statements already applied stay applied. The
introspect-then-alter sequence is not atomic with respect to other callers.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sqlgateway.core.types import (
    ColumnDefinition,
    MutationPlan,
    QueryKind,
    QueryResult,
    TableDefinition,
    TableSchema,
)
from sqlgateway.data.identifiers import (
    render_identifier,
    require_safe_identifier,
    require_safe_type,
)
from sqlgateway.exceptions import (
    ExecutionError,
    PartialMutationError,
    SQLGatewayError,
    TableAlreadyExistsError,
    TableNotFoundError,
    ValidationError,
)
from sqlgateway.schema.introspector import SchemaIntrospector

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)

_GERUNDS = {"create": "creating", "update": "updating", "drop": "dropping"}

# PostgreSQL spellings that name the same type; compared after lower-casing.
TYPE_ALIASES = {
    "varchar": "character varying",
    "char": "character",
    "bpchar": "character",
    "int": "integer",
    "int4": "integer",
    "int8": "bigint",
    "int2": "smallint",
    "serial": "integer",
    "bigserial": "bigint",
    "smallserial": "smallint",
    "float8": "double precision",
    "float4": "real",
    "bool": "boolean",
    "decimal": "numeric",
    "timestamp": "timestamp without time zone",
    "timestamptz": "timestamp with time zone",
    "time": "time without time zone",
    "timetz": "time with time zone",
}


def canonical_type(type_token: str) -> str:
    """Lower-case a type token and resolve PostgreSQL aliases."""
    token = " ".join(type_token.lower().split())
    return TYPE_ALIASES.get(token, token)


def types_differ(current: str, desired: str) -> bool:
    """Case-insensitive type comparison that treats aliases as equal."""
    return canonical_type(current) != canonical_type(desired)


def render_type(column: ColumnDefinition) -> str:
    """Render ``type[(length)]`` for a column."""
    type_token = require_safe_type(column.type, column.name)
    if column.length is not None and column.length > 0:
        return f"{type_token}({column.length})"
    return type_token


def render_column(column: ColumnDefinition) -> str:
    """Render ``name type[(length)] [NOT NULL]``, shared by create and add."""
    sql = f"{render_identifier(column.name)} {render_type(column)}"
    if not column.nullable:
        sql += " NOT NULL"
    return sql


def build_create_table(definition: TableDefinition) -> str:
    """Render a single CREATE TABLE statement with a trailing PRIMARY KEY clause.

    Raises:
        ValidationError: If the table name, a column name or a type is unsafe
    """
    _validate_definition(definition)

    parts = [render_column(column) for column in definition.columns]
    primary_key = [render_identifier(c.name) for c in definition.columns if c.primary_key]
    if primary_key:
        parts.append(f"PRIMARY KEY ({', '.join(primary_key)})")

    return f"CREATE TABLE {render_identifier(definition.table_name)} ({', '.join(parts)})"


def plan_update(current: TableSchema, definition: TableDefinition) -> MutationPlan:
    """Diff current columns against desired ones.

    Produces, in order: one DROP COLUMN per removed column, one ADD COLUMN
    per new column, one ALTER COLUMN ... TYPE per column whose type changed.

    Args:
        current: Live schema of the table
        definition: Desired columns

    Returns:
        MutationPlan with the ordered statements
    """
    _validate_definition(definition)

    table = render_identifier(definition.table_name)
    desired = {column.name: column for column in definition.columns}
    plan = MutationPlan(table_name=definition.table_name)

    for name in current.columns:
        if name not in desired:
            plan.drops.append(name)
            plan.statements.append(f"ALTER TABLE {table} DROP COLUMN {render_identifier(name)}")

    for name, column in desired.items():
        if name not in current.columns:
            plan.adds.append(name)
            plan.statements.append(f"ALTER TABLE {table} ADD COLUMN {render_column(column)}")

    for name, column in desired.items():
        meta = current.columns.get(name)
        if meta is not None and types_differ(meta.data_type, column.type):
            plan.retypes.append(name)
            plan.statements.append(
                f"ALTER TABLE {table} ALTER COLUMN {render_identifier(name)} "
                f"TYPE {render_type(column)}"
            )

    return plan


def _validate_definition(definition: TableDefinition) -> None:
    require_safe_identifier(definition.table_name, "table")
    if not definition.columns:
        raise ValidationError(
            f"Table '{definition.table_name}' needs at least one column.",
            {"table_name": definition.table_name},
        )

    seen: set[str] = set()
    for column in definition.columns:
        require_safe_identifier(column.name, "column")
        require_safe_type(column.type, column.name)
        if column.name in seen:
            raise ValidationError(
                f"Column '{column.name}' is listed more than once.",
                {"table_name": definition.table_name, "column": column.name},
            )
        seen.add(column.name)


class SchemaMutator:
    """Creates, alters and drops tables.

    Public methods return a QueryResult and never raise gateway errors.
    """

    def __init__(self, engine: Engine, introspector: SchemaIntrospector | None = None) -> None:
        """Initialize the mutator.

        Args:
            engine: SQLAlchemy engine
            introspector: Catalog reader (created from the engine if omitted)
        """
        self._engine = engine
        self._introspector = introspector or SchemaIntrospector(engine)

    def create_table(self, definition: TableDefinition) -> QueryResult:
        """Create a table from its column definitions.

        Rejected when the table already exists; no partial creation.
        """
        try:
            sql = build_create_table(definition)
            if self._introspector.table_exists(definition.table_name):
                raise TableAlreadyExistsError(definition.table_name)
            self._execute(sql)
        except SQLGatewayError as e:
            return self._failed("create", definition.table_name, e)

        logger.info(f"Created table '{definition.table_name}'")
        return QueryResult.success(
            "Table created successfully",
            sql=sql,
            query_type=QueryKind.CREATE,
            rows_affected=0,
            statements=[sql],
        )

    def update_table(self, definition: TableDefinition) -> QueryResult:
        """Bring a table's columns in line with the desired definition."""
        applied: list[str] = []
        try:
            require_safe_identifier(definition.table_name, "table")
            if not self._introspector.table_exists(definition.table_name):
                raise TableNotFoundError(definition.table_name)

            current = self._introspector.get_table_schema(definition.table_name)
            plan = plan_update(current, definition)
            logger.debug(
                f"Update plan for '{definition.table_name}': drop={plan.drops} "
                f"add={plan.adds} retype={plan.retypes}"
            )

            for statement in plan.statements:
                try:
                    self._execute(statement)
                except ExecutionError as e:
                    raise PartialMutationError(
                        definition.table_name, statement, applied, e.message
                    ) from e
                applied.append(statement)
        except SQLGatewayError as e:
            return self._failed("update", definition.table_name, e, applied)

        if applied:
            logger.info(f"Updated table '{definition.table_name}' ({len(applied)} statement(s))")
            message = f"Table '{definition.table_name}' updated successfully."
        else:
            message = f"Table '{definition.table_name}' already matches the requested columns."
        return QueryResult.success(
            message, query_type=QueryKind.ALTER, rows_affected=0, statements=applied
        )

    def drop_table(self, table_name: str) -> QueryResult:
        """Drop a table if it exists. Idempotent."""
        try:
            require_safe_identifier(table_name, "table")
            sql = f"DROP TABLE IF EXISTS {render_identifier(table_name)}"
            self._execute(sql)
        except SQLGatewayError as e:
            return self._failed("drop", table_name, e)

        logger.info(f"Dropped table '{table_name}' (if it existed)")
        return QueryResult.success(
            "Table dropped successfully",
            sql=sql,
            query_type=QueryKind.DROP,
            rows_affected=0,
            statements=[sql],
        )

    def _execute(self, sql: str) -> None:
        try:
            with self._engine.begin() as conn:
                conn.execute(text(sql))
        except SQLAlchemyError as e:
            cause = getattr(e, "orig", None) or e
            raise ExecutionError(str(cause).strip(), {"sql": sql}) from e

    def _failed(
        self,
        operation: str,
        table_name: str,
        error: SQLGatewayError,
        applied: list[str] | None = None,
    ) -> QueryResult:
        if isinstance(error, ValidationError):
            logger.warning(f"Rejected {operation} of table '{table_name}': {error.message}")
            return QueryResult.from_error(error)

        logger.error(f"Failed to {operation} table '{table_name}': {error.message}")
        if isinstance(error, PartialMutationError):
            return QueryResult.from_error(error, statements=applied or [])
        return QueryResult.execution_error(
            f"Error {_GERUNDS[operation]} table: {error.message}",
            statements=applied or [],
        )
