"""Runs validated statements and shapes their results."""

from __future__ import annotations

import logging
import re
import time
from typing import TYPE_CHECKING

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from sqlgateway.core.types import QueryKind, QueryMode, QueryResult, Scalar, normalize_scalar

if TYPE_CHECKING:
    from sqlalchemy import Engine, TextClause

logger = logging.getLogger(__name__)

# A lone colon; "::" casts and already-escaped colons are left alone.
_BARE_COLON = re.compile(r"(?<![:\\]):(?!:)")


def literal_text(sql: str) -> TextClause:
    """Wrap caller SQL in ``text()`` without reading ``:name`` as a bind parameter.

    Statements reaching the executor carry their values inline, so a colon
    inside a string literal ('a :b') or a time value stays literal.
    """
    return text(_BARE_COLON.sub(r"\\:", sql))


class QueryExecutor:
    """Executes one statement that already passed the safety gate.

    SELECT statements return rows; everything else runs in a transaction and
    returns the affected-row count.
    """

    def __init__(self, engine: Engine) -> None:
        """Initialize the executor.

        Args:
            engine: SQLAlchemy engine
        """
        self._engine = engine

    def execute(
        self,
        sql: str,
        kind: QueryKind,
        mode: QueryMode = QueryMode.RAW,
        warnings: list[str] | None = None,
        started_at: float | None = None,
    ) -> QueryResult:
        """Execute a statement.

        Args:
            sql: Validated SQL statement
            kind: Classified kind, used to pick the read or write branch
            mode: Path the statement came from, copied into the result
            warnings: Advisory notes to carry into the result
            started_at: ``time.perf_counter()`` reading taken when validation
                passed; defaults to now

        Returns:
            QueryResult; database failures become ``execution_error``
        """
        start_time = started_at if started_at is not None else time.perf_counter()
        common = {"sql": sql, "query_type": kind, "mode": mode, "warnings": warnings or []}

        try:
            if kind == QueryKind.SELECT:
                rows = self._fetch_rows(sql)
            else:
                rows_affected = self._execute_write(sql)
        except SQLAlchemyError as e:
            cause = getattr(e, "orig", None) or e
            logger.error(f"Statement failed: {cause}")
            label = "AI-generated query" if mode == QueryMode.AI else "query"
            return QueryResult.execution_error(
                f"Error executing {label}: {str(cause).strip()}",
                execution_time_ms=(time.perf_counter() - start_time) * 1000,
                **common,
            )

        execution_time_ms = (time.perf_counter() - start_time) * 1000

        if kind == QueryKind.SELECT:
            if rows:
                message = f"Query executed successfully. Retrieved {len(rows)} row(s)."
            else:
                message = "Query executed successfully. No rows returned."
            return QueryResult.success(
                message,
                rows=rows,
                # Derived from row 0; an empty result has no columns
                columns=list(rows[0]) if rows else [],
                execution_time_ms=execution_time_ms,
                **common,
            )

        return QueryResult.success(
            f"Query executed successfully. {rows_affected} row(s) affected.",
            rows_affected=rows_affected,
            execution_time_ms=execution_time_ms,
            **common,
        )

    def _fetch_rows(self, sql: str) -> list[dict[str, Scalar]]:
        with self._engine.connect() as conn:
            result = conn.execute(literal_text(sql))
            columns = list(result.keys())
            return [
                {col: normalize_scalar(value) for col, value in zip(columns, row, strict=True)}
                for row in result.fetchall()
            ]

    def _execute_write(self, sql: str) -> int:
        with self._engine.begin() as conn:
            result = conn.execute(literal_text(sql))
            # DDL reports -1 on most drivers
            return max(result.rowcount, 0)
