"""SQL statement gating and classification.

Validates statements before execution:
- Empty statements are rejected
- Stacked statements (more than one terminator) are rejected
- A fixed denylist of destructive/administrative phrases is rejected
- The leading keyword is classified for routing

Classification is a keyword prefix check, not a parse. It decides which
executor branch runs; the safety gate is the actual control.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from sqlgateway.core.types import QueryKind
from sqlgateway.exceptions import UnsafeQueryError

STATEMENT_TERMINATOR = ";"

# Matched as case-insensitive substrings anywhere in the statement.
DENYLIST: tuple[str, ...] = (
    "DROP DATABASE",
    "DROP SCHEMA",
    "TRUNCATE DATABASE",
    "GRANT",
    "REVOKE",
    "CREATE USER",
    "DROP USER",
    "ALTER USER",
)

# First match wins.
CLASSIFIED_KINDS: tuple[QueryKind, ...] = (
    QueryKind.SELECT,
    QueryKind.INSERT,
    QueryKind.UPDATE,
    QueryKind.DELETE,
    QueryKind.CREATE,
    QueryKind.ALTER,
    QueryKind.DROP,
)


def classify(sql: str) -> QueryKind:
    """Classify a statement by its leading keyword.

    Args:
        sql: SQL statement

    Returns:
        Matching QueryKind, or QueryKind.UNKNOWN
    """
    upper_sql = sql.strip().upper()
    for kind in CLASSIFIED_KINDS:
        if upper_sql.startswith(kind.value):
            return kind
    return QueryKind.UNKNOWN


class QuerySafetyGate:
    """Coarse gate against stacked statements and administrative commands.

    This is not a sanitizer. Values from users must still travel as bound
    parameters wherever they are interpolated.
    """

    def __init__(self, denylist: tuple[str, ...] = DENYLIST) -> None:
        self._denylist = tuple(phrase.upper() for phrase in denylist)

    def check(self, sql: str) -> str | None:
        """Return the reason a statement is unsafe, or None if it passes.

        Args:
            sql: SQL statement to check

        Returns:
            Rejection reason, or None
        """
        terminators = sql.count(STATEMENT_TERMINATOR)
        if terminators > 1:
            return (
                f"multiple statements are not allowed (found {terminators} "
                f"'{STATEMENT_TERMINATOR}' terminators)"
            )

        upper_sql = sql.upper()
        for phrase in self._denylist:
            if phrase in upper_sql:
                return f"'{phrase}' is not allowed"

        return None

    def is_safe(self, sql: str) -> bool:
        """Whether a statement passes the gate."""
        return self.check(sql) is None


@dataclass
class ValidationResult:
    """Result of statement validation."""

    valid: bool
    """Whether the statement passed validation."""

    sql: str = ""
    """The validated statement (stripped)."""

    error: str | None = None
    """Error message if validation failed."""

    query_type: QueryKind = QueryKind.UNKNOWN
    """Detected statement kind."""

    warnings: list[str] = field(default_factory=list)
    """Advisory notes that do not block execution."""

    rejection: UnsafeQueryError | None = None
    """The safety-gate rejection, when the gate refused the statement."""


class QueryValidator:
    """Runs the safety gate and the classifier over one statement."""

    def __init__(self, gate: QuerySafetyGate | None = None) -> None:
        self._gate = gate or QuerySafetyGate()

    @property
    def gate(self) -> QuerySafetyGate:
        """Safety gate used by this validator."""
        return self._gate

    def validate(self, sql: str | None) -> ValidationResult:
        """Validate an SQL statement.

        Args:
            sql: SQL statement to validate

        Returns:
            ValidationResult with validation status and details
        """
        cleaned_sql = (sql or "").strip()
        if not cleaned_sql:
            return ValidationResult(valid=False, error="Query cannot be empty")

        query_type = classify(cleaned_sql)

        reason = self._gate.check(cleaned_sql)
        if reason:
            rejection = UnsafeQueryError(cleaned_sql, reason)
            return ValidationResult(
                valid=False,
                sql=cleaned_sql,
                error=rejection.message,
                query_type=query_type,
                rejection=rejection,
            )

        return ValidationResult(
            valid=True,
            sql=cleaned_sql,
            query_type=query_type,
            warnings=self._check_warnings(cleaned_sql, query_type),
        )

    def _check_warnings(self, sql: str, query_type: QueryKind) -> list[str]:
        """Generate warnings for potentially problematic statements."""
        warnings = []

        if re.search(r"\bSELECT\s+\*", sql, re.IGNORECASE):
            warnings.append(
                "Using SELECT * may return more data than needed. "
                "Consider selecting specific columns."
            )

        if query_type == QueryKind.SELECT and not re.search(
            r"\b(LIMIT|FETCH\s+FIRST)\b", sql, re.IGNORECASE
        ):
            if not re.search(r"\b(WHERE|GROUP\s+BY)\b|\bCOUNT\s*\(", sql, re.IGNORECASE):
                warnings.append(
                    "No LIMIT clause found. Consider adding one to prevent returning too many rows."
                )

        return warnings
