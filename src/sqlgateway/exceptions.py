"""Custom exceptions for SQLGateway.

Errors carry a human message plus a context dict so every failure can be
reported to the caller as structured data:
- Validation errors say exactly which input was rejected and why
- Upstream errors distinguish an unreachable service from a malformed reply
- Execution errors carry the database's own message
"""

from __future__ import annotations

from typing import Any


class SQLGatewayError(Exception):
    """Base exception for all SQLGateway errors."""

    def __init__(self, message: str, context: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def to_dict(self) -> dict[str, Any]:
        """Return error as JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConnectionError(SQLGatewayError):
    """Failed to connect to the database."""

    pass


# === Validation Errors (caller input was rejected) ===


class ValidationError(SQLGatewayError):
    """Request input failed validation."""

    pass


class UnsafeQueryError(ValidationError):
    """SQL statement was rejected by the safety gate."""

    def __init__(self, sql: str, reason: str) -> None:
        super().__init__(
            f"Query contains potentially dangerous operations: {reason}",
            {"sql": sql, "reason": reason},
        )
        self.sql = sql
        self.reason = reason


class UnsafeIdentifierError(ValidationError):
    """Table or column name contains characters outside the safe set."""

    def __init__(self, identifier: str, kind: str = "identifier") -> None:
        message = (
            f"Invalid {kind} name: '{identifier}'. "
            "Only letters, digits, underscores and spaces are allowed."
        )
        super().__init__(message, {"identifier": identifier, "kind": kind})
        self.identifier = identifier
        self.kind = kind


class RowShapeError(ValidationError):
    """A batch row does not match the column layout of the first row."""

    def __init__(
        self,
        row_index: int,
        message: str,
        position: int | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ) -> None:
        super().__init__(
            message,
            {
                "row_index": row_index,
                "position": position,
                "expected": expected,
                "actual": actual,
            },
        )
        self.row_index = row_index
        self.position = position
        self.expected = expected
        self.actual = actual


class TableNotFoundError(ValidationError):
    """Table does not exist."""

    def __init__(self, table_name: str) -> None:
        super().__init__(f"Table '{table_name}' does not exist.", {"table_name": table_name})
        self.table_name = table_name


class TableAlreadyExistsError(ValidationError):
    """Table already exists (on create)."""

    def __init__(self, table_name: str) -> None:
        message = (
            f"Table '{table_name}' already exists. "
            "Use an update request to change its columns."
        )
        super().__init__(message, {"table_name": table_name})
        self.table_name = table_name


# === Upstream Errors (generative text service) ===


class UpstreamError(SQLGatewayError):
    """The generative text service failed."""

    pass


class UpstreamUnavailableError(UpstreamError):
    """Service unreachable, timed out, misconfigured, or returned a non-success status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, {"status_code": status_code})
        self.status_code = status_code


class UpstreamMalformedError(UpstreamError):
    """Service replied, but not with the expected candidate/content/text shape."""

    pass


# === Execution Errors (database rejected the work) ===


class ExecutionError(SQLGatewayError):
    """Database rejected a statement."""

    pass


class PartialMutationError(ExecutionError):
    """A multi-statement schema change failed after some statements were applied."""

    def __init__(
        self,
        table_name: str,
        failed_statement: str,
        applied: list[str],
        cause: str,
    ) -> None:
        message = (
            f"Error updating table '{table_name}': {cause}. "
            f"{len(applied)} statement(s) were applied before the failure "
            "and have not been rolled back."
        )
        super().__init__(
            message,
            {
                "table_name": table_name,
                "failed_statement": failed_statement,
                "applied_statements": applied,
            },
        )
        self.table_name = table_name
        self.failed_statement = failed_statement
        self.applied = applied
        self.cause = cause
