"""Identifier rules shared by the DDL mutator and the batch inserter."""

from __future__ import annotations

import re

from sqlalchemy.dialects.postgresql.base import RESERVED_WORDS

from sqlgateway.exceptions import UnsafeIdentifierError, ValidationError

# Letters, digits, underscore and spaces; no leading/trailing space.
SAFE_IDENTIFIER = re.compile(r"^[A-Za-z0-9_](?:[A-Za-z0-9_ ]*[A-Za-z0-9_])?$")

# Names PostgreSQL accepts unquoted without case folding.
PLAIN_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")

# Type tokens such as "integer", "character varying", "timestamp with time zone", "text[]".
SAFE_TYPE = re.compile(r"^[A-Za-z][A-Za-z0-9_ ]*(\[\])?$")


def is_safe_identifier(identifier: str | None) -> bool:
    """Check that a table or column name only uses the safe character set."""
    if not identifier:
        return False
    return SAFE_IDENTIFIER.fullmatch(identifier) is not None


def require_safe_identifier(identifier: str | None, kind: str = "identifier") -> str:
    """Return the identifier, or raise if it is unsafe.

    Raises:
        UnsafeIdentifierError: If the identifier is empty or has unsafe characters
    """
    if not is_safe_identifier(identifier):
        raise UnsafeIdentifierError(identifier or "", kind)
    return identifier  # type: ignore[return-value]


def require_safe_type(type_token: str | None, column: str) -> str:
    """Return a stripped type token, or raise if it could smuggle SQL."""
    token = (type_token or "").strip()
    if not SAFE_TYPE.fullmatch(token):
        raise ValidationError(
            f"Invalid type '{type_token}' for column '{column}'. "
            "Types may only contain letters, digits, underscores and spaces.",
            {"column": column, "type": type_token},
        )
    return token


def quote_identifier(identifier: str) -> str:
    """Double-quote an identifier, doubling any embedded quotes."""
    return '"' + identifier.replace('"', '""') + '"'


def render_identifier(identifier: str) -> str:
    """Quote an identifier only when PostgreSQL would need it quoted.

    Mixed case, spaces and reserved words ("order", "user") are quoted.
    """
    if PLAIN_IDENTIFIER.fullmatch(identifier) and identifier not in RESERVED_WORDS:
        return identifier
    return quote_identifier(identifier)
