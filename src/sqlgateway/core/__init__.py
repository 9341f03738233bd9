"""Core components for SQLGateway."""

from sqlgateway.core.config import GatewayConfig
from sqlgateway.core.connection import DatabaseConnection
from sqlgateway.core.types import (
    ColumnDefinition,
    ColumnMeta,
    InsertBatch,
    QueryKind,
    QueryMode,
    QueryRequest,
    QueryResult,
    ResultStatus,
    TableDefinition,
    TableSchema,
)

__all__ = [
    "DatabaseConnection",
    "GatewayConfig",
    "QueryKind",
    "QueryMode",
    "QueryRequest",
    "QueryResult",
    "ResultStatus",
    "ColumnMeta",
    "TableSchema",
    "ColumnDefinition",
    "TableDefinition",
    "InsertBatch",
]
