"""Identifier-safe multi-row insert.

Builds one parameterized INSERT template from row 0 and submits every row
as a single ``executemany`` inside one transaction. Values always travel as
bound parameters; only identifiers are rendered into the SQL text, and only
after they pass the safe-identifier check.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sqlgateway.core.types import ColumnValue, InsertBatch, QueryKind, QueryResult
from sqlgateway.data.identifiers import quote_identifier, require_safe_identifier
from sqlgateway.exceptions import RowShapeError, ValidationError

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = logging.getLogger(__name__)


def _param_name(position: int) -> str:
    return f"p{position}"


def build_insert_sql(table_name: str, columns: list[str]) -> str:
    """Render ``INSERT INTO "t" ("c1", ...) VALUES (:p0, ...)``.

    Args:
        table_name: Validated table name
        columns: Validated column names, in row order

    Returns:
        Parameterized INSERT template
    """
    column_list = ", ".join(quote_identifier(c) for c in columns)
    placeholders = ", ".join(f":{_param_name(i)}" for i in range(len(columns)))
    return f"INSERT INTO {quote_identifier(table_name)} ({column_list}) VALUES ({placeholders})"


def validate_batch(batch: InsertBatch) -> list[str]:
    """Check the batch and return the column names taken from row 0.

    Raises:
        ValidationError: Missing table name, no rows, or an empty first row
        UnsafeIdentifierError: Table or column name outside the safe set
        RowShapeError: A row whose columns differ from row 0
    """
    if not batch.table_name or not batch.table_name.strip():
        raise ValidationError("Table name is required.")
    if not batch.rows:
        raise ValidationError("At least one row is required.", {"table_name": batch.table_name})
    if not batch.rows[0]:
        raise ValidationError(
            "The first row must contain at least one column.",
            {"table_name": batch.table_name},
        )

    require_safe_identifier(batch.table_name, "table")
    columns = [column.name for column in batch.rows[0]]
    for name in columns:
        require_safe_identifier(name, "column")

    for index, row in enumerate(batch.rows[1:], start=1):
        _check_row_shape(index, row, columns)

    return columns


def _check_row_shape(index: int, row: list[ColumnValue], columns: list[str]) -> None:
    if len(row) != len(columns):
        raise RowShapeError(
            index,
            f"Row {index} has a different number of columns than the first row.",
        )
    for position, (expected, column) in enumerate(zip(columns, row)):
        if column.name != expected:
            raise RowShapeError(
                index,
                f"Row {index} has different column names or order. "
                f"Expected '{expected}' but got '{column.name}' at position {position}.",
                position=position,
                expected=expected,
                actual=column.name,
            )


class BatchInsertBuilder:
    """Inserts an InsertBatch in one transaction."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    def insert(self, batch: InsertBatch) -> QueryResult:
        """Validate and insert every row of a batch.

        Args:
            batch: Table name and rows to insert

        Returns:
            QueryResult with ``rows_affected`` set to the inserted count
        """
        try:
            columns = validate_batch(batch)
        except ValidationError as e:
            logger.warning(f"Rejected batch insert into '{batch.table_name}': {e.message}")
            return QueryResult.validation_error(f"Validation error: {e.message}")

        sql = build_insert_sql(batch.table_name, columns)
        params: list[dict[str, Any]] = [
            {_param_name(i): column.value for i, column in enumerate(row)} for row in batch.rows
        ]

        try:
            with self._engine.begin() as conn:
                result = conn.execute(text(sql), params)
        except SQLAlchemyError as e:
            cause = getattr(e, "orig", None) or e
            logger.error(f"Batch insert into '{batch.table_name}' failed: {cause}")
            return QueryResult.execution_error(
                f"Error during batch insert: {str(cause).strip()}",
                sql=sql,
                query_type=QueryKind.INSERT,
            )

        # Drivers that cannot report executemany counts return -1.
        inserted = result.rowcount
        if inserted is None or inserted < 0:
            inserted = len(params)
        logger.info(f"Inserted {inserted} row(s) into '{batch.table_name}'")
        return QueryResult.success(
            f"{inserted} row(s) inserted successfully into table '{batch.table_name}'.",
            sql=sql,
            query_type=QueryKind.INSERT,
            rows_affected=inserted,
        )
