"""Prompt Builder for LLM SQL Generation.

Renders the prompt sent to the generative text service. The prompt embeds:
- The target dialect
- Live column metadata for each requested table
- Fixed security, formatting and output rules
- The allowed-operations block and row ceiling
- The user's request, verbatim

The rule blocks are module constants. They are the first line of defense
against unsafe generations, so nothing in a request can replace or extend
them; the user's text is only ever placed in the USER REQUEST block.
"""

from __future__ import annotations

from collections.abc import Mapping

from sqlgateway.core.types import TableSchema

DATABASE_TYPE = "postgresql"
MAX_ROWS = 1000

SECURITY_RULES: tuple[str, ...] = (
    "The query runs as-is with no bound parameters: write request values as quoted "
    "literals, never as :name or $1 placeholders",
    "Generate exactly one statement; never chain statements with semicolons",
    "Do not use SQL comments (-- or /* */) in the query",
    "Do not use UNION, EXEC, EXECUTE, or system procedure calls",
    "Only use tables and columns present in the provided schema",
    "Do not access pg_catalog, information_schema, or other system tables "
    "unless the request explicitly asks for them",
    "Do not generate DROP, TRUNCATE, GRANT, REVOKE, or other destructive or "
    "administrative statements",
    "Wrap string literals in single quotes and escape embedded quotes",
    "Do not use hexadecimal or encoded values that could hide code",
)

FORMATTING_RULES: tuple[str, ...] = (
    "Use proper PostgreSQL syntax and built-in functions (e.g. ILIKE for "
    "case-insensitive search)",
    "Use double quotes for identifiers only when necessary (mixed case or reserved words)",
    "List explicit column names; never use SELECT *",
    "Use explicit JOIN syntax (INNER JOIN, LEFT JOIN, ...)",
    "Add a LIMIT clause whenever the request does not filter the result set",
    "Include ORDER BY when the order of results matters",
    "Prefer indexed columns in WHERE clauses",
    "Cast explicitly when comparing values of different types",
    "When the request involves formulas or expressions (e.g. quantity * price), "
    "compute them in the SELECT clause",
)

OUTPUT_RULES: tuple[str, ...] = (
    "Return ONLY the raw SQL query, with no explanation or prose",
    "Do not wrap the query in markdown code fences (```) or add a language tag",
    "Do not add comments or annotations",
    "Return a single statement without a trailing semicolon",
    "The query must be executable as-is",
)

ALLOWED_OPERATIONS: tuple[tuple[str, bool], ...] = (
    ("SELECT", True),
    ("INSERT", True),
    ("UPDATE", False),
    ("DELETE", False),
    ("CREATE/ALTER", False),
    ("DROP/TRUNCATE", False),
)

CLOSING_INSTRUCTION: tuple[str, ...] = (
    "Generate a single, safe, executable PostgreSQL query that fulfills the user request.",
    "Follow ALL rules above.",
    "Return ONLY the SQL query with no additional text, explanations, or formatting.",
)


def _numbered(rules: tuple[str, ...]) -> list[str]:
    return [f"{i}. {rule}" for i, rule in enumerate(rules, 1)]


class PromptBuilder:
    """Builds the generation prompt from a request and live table schemas."""

    def __init__(self, database_type: str = DATABASE_TYPE, max_rows: int = MAX_ROWS) -> None:
        """Initialize the builder.

        Args:
            database_type: Dialect named in the prompt
            max_rows: Row ceiling stated for SELECT queries
        """
        self._database_type = database_type
        self._max_rows = max_rows

    def build(self, user_input: str, schemas: Mapping[str, TableSchema]) -> str:
        """Render the prompt.

        Args:
            user_input: Natural-language request, embedded verbatim
            schemas: Table name -> live schema of the tables to describe

        Returns:
            Prompt text
        """
        lines: list[str] = [
            f"=== SQL QUERY GENERATOR FOR {self._database_type.upper()} ===",
            "",
            f"DATABASE TYPE: {self._database_type.upper()}",
            "",
            "=== DATABASE SCHEMA ===",
        ]
        lines.extend(self.describe_schemas(schemas))
        lines.append("")

        lines.append("=== SECURITY AND INJECTION PROTECTION ===")
        lines.extend(_numbered(SECURITY_RULES))
        lines.append("")

        lines.append("=== FORMATTING RULES ===")
        lines.extend(_numbered(FORMATTING_RULES))
        lines.append("")

        lines.append("=== OUTPUT REQUIREMENTS ===")
        lines.extend(_numbered(OUTPUT_RULES))
        lines.append("")

        lines.append("=== ALLOWED OPERATIONS ===")
        for operation, allowed in ALLOWED_OPERATIONS:
            lines.append(f"{operation} queries: {'ALLOWED' if allowed else 'NOT ALLOWED'}")
        lines.append(f"Maximum rows for SELECT: {self._max_rows}")
        lines.append("")

        lines.append("=== USER REQUEST ===")
        lines.append(user_input)
        lines.append("")

        lines.append("=== INSTRUCTION ===")
        lines.extend(CLOSING_INSTRUCTION)

        return "\n".join(lines) + "\n"

    def describe_schemas(self, schemas: Mapping[str, TableSchema]) -> list[str]:
        """Render the per-table column listing.

        Args:
            schemas: Table name -> schema

        Returns:
            Prompt lines, one per table header and column
        """
        if not schemas:
            return ["(no tables available)"]

        lines: list[str] = []
        for table_name, schema in schemas.items():
            lines.append("")
            lines.append(f"Table: {table_name}")
            lines.append("Columns:")
            for column_name, meta in schema.columns.items():
                data_type = meta.data_type
                if meta.max_length is not None:
                    data_type = f"{data_type}({meta.max_length})"
                line = f"  - {column_name} ({data_type})"
                if not meta.nullable:
                    line += " NOT NULL"
                lines.append(line)
        return lines
