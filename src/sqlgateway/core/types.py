"""Core types and result shapes for SQLGateway.

All types are JSON-serializable so any transport (CLI, MCP) can hand them
back to a caller unchanged.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, time
from decimal import Decimal
from enum import StrEnum
from typing import Any, TypeAlias

from pydantic import BaseModel, Field

from sqlgateway.exceptions import SQLGatewayError, ValidationError

# Tagged scalar variant for row values returned by the database.
Scalar: TypeAlias = None | bool | int | float | str | datetime | bytes


class ScalarKind(StrEnum):
    """Tag of a normalized row value."""

    NULL = "null"
    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    TEXT = "text"
    TIMESTAMP = "timestamp"
    BYTES = "bytes"


def normalize_scalar(value: Any) -> Scalar:
    """Map a driver value onto the Scalar variant.

    Args:
        value: Raw value from a result row

    Returns:
        Value of one of the Scalar types
    """
    if value is None or isinstance(value, bool | int | float | str | datetime | bytes):
        return value
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, time):
        return value.isoformat()
    if isinstance(value, uuid.UUID):
        return str(value)
    if isinstance(value, memoryview | bytearray):
        return bytes(value)
    if isinstance(value, dict | list):
        return json.dumps(value, default=str)
    return str(value)


def scalar_kind(value: Scalar) -> ScalarKind:
    """Return the tag for a normalized value."""
    # bool before int: bool is an int subclass
    if value is None:
        return ScalarKind.NULL
    if isinstance(value, bool):
        return ScalarKind.BOOLEAN
    if isinstance(value, int):
        return ScalarKind.INTEGER
    if isinstance(value, float):
        return ScalarKind.FLOAT
    if isinstance(value, datetime):
        return ScalarKind.TIMESTAMP
    if isinstance(value, bytes):
        return ScalarKind.BYTES
    return ScalarKind.TEXT


class QueryKind(StrEnum):
    """Coarse statement category used for routing and labeling."""

    SELECT = "SELECT"
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CREATE = "CREATE"
    ALTER = "ALTER"
    DROP = "DROP"
    UNKNOWN = "UNKNOWN"


class QueryMode(StrEnum):
    """How a query request supplies its statement."""

    RAW = "raw"  # Literal SQL text
    AI = "ai"  # Natural language translated by the generative service


class ResultStatus(StrEnum):
    """Closed set of outcomes for every gateway operation."""

    SUCCESS = "success"
    VALIDATION_ERROR = "validation_error"
    EXECUTION_ERROR = "execution_error"

    @property
    def code(self) -> str:
        """HTTP-style response code for this status."""
        return {
            ResultStatus.SUCCESS: "200",
            ResultStatus.VALIDATION_ERROR: "400",
            ResultStatus.EXECUTION_ERROR: "500",
        }[self]


# === Schema Types ===


class ColumnMeta(BaseModel):
    """Catalog metadata for one column (output format)."""

    data_type: str
    max_length: int | None = None
    nullable: bool = True
    default: str | None = None


class TableSchema(BaseModel):
    """Live view of one table's columns, in ordinal order."""

    name: str
    columns: dict[str, ColumnMeta] = Field(default_factory=dict)

    @property
    def column_names(self) -> list[str]:
        """Column names in ordinal order."""
        return list(self.columns)


class ColumnDefinition(BaseModel):
    """Desired column for a DDL request (input format)."""

    name: str = Field(..., description="Column name")
    type: str = Field(..., description="SQL type token, e.g. VARCHAR, INTEGER")
    length: int | None = Field(default=None, description="Optional length, e.g. 255")
    primary_key: bool = Field(default=False, description="Part of the primary key")
    nullable: bool = Field(default=True, description="Whether NULL is allowed")


class TableDefinition(BaseModel):
    """Create/update request: a table name plus its desired columns."""

    table_name: str = Field(..., description="Table name")
    columns: list[ColumnDefinition] = Field(default_factory=list)


# === Insert Types ===


class ColumnValue(BaseModel):
    """One (column name, value) pair of an inserted row."""

    name: str
    value: Any = None


class InsertBatch(BaseModel):
    """Rows to insert into one table.

    Every row must list the same columns in the same order as row 0.
    """

    table_name: str = ""
    rows: list[list[ColumnValue]] = Field(default_factory=list)

    @classmethod
    def from_records(cls, table_name: str, records: list[dict[str, Any]]) -> InsertBatch:
        """Build a batch from plain dicts, keeping each dict's key order."""
        return cls(
            table_name=table_name,
            rows=[[ColumnValue(name=k, value=v) for k, v in rec.items()] for rec in records],
        )


# === Query Types ===


class QueryRequest(BaseModel):
    """A query request. Only the field matching ``mode`` is honored."""

    mode: QueryMode = QueryMode.RAW
    sql: str | None = Field(default=None, description="SQL text (raw mode)")
    natural_language: str | None = Field(
        default=None, description="Natural-language request (ai mode)"
    )
    table_names: list[str] | None = Field(
        default=None, description="Tables to describe to the generator (ai mode, optional)"
    )


class QueryResult(BaseModel):
    """Structured outcome of every gateway operation."""

    status: ResultStatus
    message: str
    sql: str | None = None
    generated_sql: str | None = None
    query_type: QueryKind | None = None
    mode: QueryMode | None = None
    rows: list[dict[str, Scalar]] | None = None
    columns: list[str] | None = None
    rows_affected: int | None = None
    execution_time_ms: float = 0.0
    statements: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    # Raw-bytes row values are not guaranteed to be UTF-8
    model_config = {"ser_json_bytes": "base64"}

    @property
    def ok(self) -> bool:
        """Whether the operation succeeded."""
        return self.status == ResultStatus.SUCCESS

    @property
    def code(self) -> str:
        """HTTP-style response code."""
        return self.status.code

    @classmethod
    def success(cls, message: str, **kwargs: Any) -> QueryResult:
        return cls(status=ResultStatus.SUCCESS, message=message, **kwargs)

    @classmethod
    def validation_error(cls, message: str, **kwargs: Any) -> QueryResult:
        return cls(status=ResultStatus.VALIDATION_ERROR, message=message, **kwargs)

    @classmethod
    def execution_error(cls, message: str, **kwargs: Any) -> QueryResult:
        return cls(status=ResultStatus.EXECUTION_ERROR, message=message, **kwargs)

    @classmethod
    def from_error(cls, error: SQLGatewayError, **kwargs: Any) -> QueryResult:
        """Convert a gateway exception into a result.

        Validation errors map to ``validation_error``; upstream and
        execution failures map to ``execution_error``.
        """
        if isinstance(error, ValidationError):
            return cls.validation_error(error.message, **kwargs)
        return cls.execution_error(error.message, **kwargs)


@dataclass
class MutationPlan:
    """Ordered ALTER statements computed from a schema diff."""

    table_name: str
    drops: list[str] = field(default_factory=list)
    adds: list[str] = field(default_factory=list)
    retypes: list[str] = field(default_factory=list)
    statements: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """True when current and desired columns already match."""
        return not self.statements
