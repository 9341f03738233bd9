"""MCP server for SQLGateway.

Exposes SQLGateway operations as MCP tools for AI agents.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Any

from mcp.server.fastmcp import FastMCP  # type: ignore[import-not-found]

from sqlgateway import GatewayConfig, SQLGateway
from sqlgateway.core.types import QueryMode, QueryRequest

# stdout carries the stdio transport
logging.basicConfig(level=logging.INFO, stream=sys.stderr)
logger = logging.getLogger(__name__)

mcp = FastMCP("sqlgateway")

# Set by create_server()
_gateway: SQLGateway | None = None


def get_gateway() -> SQLGateway:
    """Get the gateway instance."""
    if _gateway is None:
        raise RuntimeError("Gateway not initialized. Call create_server() first.")
    return _gateway


# === Schema Discovery Tools ===


@mcp.tool()
def sqlgateway_list_tables() -> str:
    """List all table names in the database.

    Returns:
        JSON array of table names.
    """
    try:
        return json.dumps(get_gateway().list_tables())
    except Exception as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def sqlgateway_describe(table_names: list[str] | None = None) -> str:
    """Get the live columns of several tables (all tables when omitted).

    Use this first to understand what data is available.

    Args:
        table_names: Tables to describe (optional)

    Returns:
        JSON object mapping table name to its columns.
    """
    try:
        return json.dumps(get_gateway().describe(table_names), default=str)
    except Exception as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def sqlgateway_describe_table(table_name: str) -> str:
    """Get the live columns of one table.

    Args:
        table_name: Table to describe

    Returns:
        JSON with each column's data_type, max_length, nullable and default.
    """
    try:
        return json.dumps(get_gateway().describe_table(table_name).model_dump(), default=str)
    except Exception as e:
        return json.dumps({"error": str(e)})


# === Query Tools ===


@mcp.tool()
def sqlgateway_query(
    mode: str = "raw",
    sql: str | None = None,
    natural_language: str | None = None,
    table_names: list[str] | None = None,
) -> str:
    """Run a query request.

    Only the field matching the mode is used:
    - mode "raw": runs `sql` after the safety gate
    - mode "ai": translates `natural_language` to SQL, then runs it

    Args:
        mode: "raw" or "ai"
        sql: SQL statement (raw mode)
        natural_language: Request in plain language (ai mode)
        table_names: Tables to describe to the model (ai mode, optional)

    Returns:
        JSON result with status, message, sql, rows, columns, rows_affected.
    """
    try:
        request = QueryRequest(
            mode=QueryMode(mode),
            sql=sql,
            natural_language=natural_language,
            table_names=table_names,
        )
        return get_gateway().run(request).model_dump_json()
    except Exception as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def sqlgateway_execute_sql(sql: str) -> str:
    """Execute SQL after the safety gate.

    Stacked statements and administrative commands (GRANT, DROP DATABASE, ...)
    are rejected.

    Args:
        sql: SQL statement

    Returns:
        JSON result. SELECT returns rows and columns; other statements
        return rows_affected.
    """
    try:
        return get_gateway().execute_sql(sql).model_dump_json()
    except Exception as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def sqlgateway_generate_sql(natural_language: str, table_names: list[str] | None = None) -> str:
    """Translate a plain-language request into SQL without running it.

    Review the returned generated_sql, then pass it to
    sqlgateway_execute_generated_sql.

    Args:
        natural_language: Request in plain language
        table_names: Tables to describe to the model (optional)

    Returns:
        JSON result with generated_sql and warnings.
    """
    try:
        return get_gateway().generate_sql(natural_language, table_names).model_dump_json()
    except Exception as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def sqlgateway_execute_generated_sql(sql: str) -> str:
    """Execute SQL previously returned by sqlgateway_generate_sql.

    Args:
        sql: Reviewed SQL statement

    Returns:
        JSON result labelled with mode "ai".
    """
    try:
        return get_gateway().execute_generated_sql(sql).model_dump_json()
    except Exception as e:
        return json.dumps({"error": str(e)})


# === Table Management Tools ===


@mcp.tool()
def sqlgateway_create_table(table_name: str, columns: list[dict[str, Any]]) -> str:
    """Create a table.

    Args:
        table_name: Table name (letters, digits, underscores, spaces)
        columns: Column definitions, each with:
            - name: Column name
            - type: SQL type, e.g. integer, varchar, text, timestamp
            - length: Optional length, e.g. 255
            - primary_key: Part of the primary key (default: false)
            - nullable: Whether NULL is allowed (default: true)

    Returns:
        JSON result with the CREATE TABLE statement.
    """
    try:
        definition = {"table_name": table_name, "columns": columns}
        return get_gateway().create_table(definition).model_dump_json()
    except Exception as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def sqlgateway_update_table(table_name: str, columns: list[dict[str, Any]]) -> str:
    """Make a table's columns match the given set.

    Columns not listed are dropped, new ones are added and changed types are
    altered. Statements run one at a time; if one fails, earlier ones stay
    applied and the result lists them.

    Args:
        table_name: Existing table
        columns: Full desired column list (same shape as sqlgateway_create_table)

    Returns:
        JSON result with the statements applied.
    """
    try:
        definition = {"table_name": table_name, "columns": columns}
        return get_gateway().update_table(definition).model_dump_json()
    except Exception as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def sqlgateway_drop_table(table_name: str) -> str:
    """Drop a table if it exists. Safe to call repeatedly.

    Args:
        table_name: Table to drop

    Returns:
        JSON result.
    """
    try:
        return get_gateway().drop_table(table_name).model_dump_json()
    except Exception as e:
        return json.dumps({"error": str(e)})


# === Data Tools ===


@mcp.tool()
def sqlgateway_insert_rows(table_name: str, rows: list[dict[str, Any]]) -> str:
    """Insert rows in one transaction.

    Every row must list the same columns in the same order as the first.

    Args:
        table_name: Target table
        rows: Row objects, e.g. [{"id": 1, "name": "Alice"}]

    Returns:
        JSON result with rows_affected.
    """
    try:
        return get_gateway().insert_rows(table_name, rows).model_dump_json()
    except Exception as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def sqlgateway_health() -> str:
    """Check database connectivity.

    Returns:
        JSON with status "ok" or "error".
    """
    return json.dumps(get_gateway().health())


def create_server(database_url: str | None = None, echo: bool = False) -> FastMCP:
    """Create and configure the MCP server with a database connection.

    Args:
        database_url: Database URL (falls back to SQLGATEWAY_URL)
        echo: Whether to echo SQL statements

    Returns:
        Configured FastMCP server instance
    """
    global _gateway
    config = GatewayConfig.from_env(database_url=database_url, echo=echo or None)
    _gateway = SQLGateway(config=config)
    logger.info(f"SQLGateway initialized ({_gateway.dialect}, provider={config.provider})")
    return mcp


def main() -> None:
    """Entry point for running the MCP server."""
    parser = argparse.ArgumentParser(description="SQLGateway MCP Server")
    parser.add_argument(
        "--database",
        "-d",
        default=None,
        help="Database URL (default: SQLGATEWAY_URL or sqlite:///./sqlgateway.db)",
    )
    parser.add_argument(
        "--echo",
        action="store_true",
        help="Echo SQL statements",
    )
    args = parser.parse_args()

    create_server(args.database, echo=args.echo)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
