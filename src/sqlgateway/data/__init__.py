"""Data operations for SQLGateway."""

from sqlgateway.data.batch_insert import BatchInsertBuilder, build_insert_sql

__all__ = [
    "BatchInsertBuilder",
    "build_insert_sql",
]
