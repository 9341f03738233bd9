"""Unit tests for the SQLGateway MCP server.

FastMCP tools take typed Python objects directly and return JSON strings;
the MCP framework handles serialization at the transport layer.
"""

from __future__ import annotations

import json
from collections.abc import Generator

import pytest

# Skip entire module if mcp is not installed (optional dependency)
pytest.importorskip("mcp", reason="mcp not installed (install with: pip install sqlgateway[mcp])")

from sqlgateway import SQLGateway  # noqa: E402
from sqlgateway.integrations.mcp import server as mcp_server  # noqa: E402


@pytest.fixture(autouse=True)
def set_mcp_gateway(memory_gateway: SQLGateway) -> Generator[None, None, None]:
    """Inject the gateway into the MCP server global before each test."""
    mcp_server._gateway = memory_gateway
    yield
    mcp_server._gateway = None


# === Helpers ===


def _ok(result: str) -> dict:
    """Parse a QueryResult and assert success."""
    data = json.loads(result)
    assert "error" not in data, f"Unexpected error: {data.get('error')}"
    assert data["status"] == "success", data["message"]
    return data


def _err(result: str) -> dict:
    """Parse result and assert it carries an error."""
    data = json.loads(result)
    assert "error" in data
    return data


USERS_COLUMNS = [
    {"name": "id", "type": "integer", "primary_key": True, "nullable": False},
    {"name": "name", "type": "varchar", "length": 50},
]


@pytest.fixture
def users_table() -> None:
    _ok(mcp_server.sqlgateway_create_table("users", USERS_COLUMNS))
    _ok(
        mcp_server.sqlgateway_insert_rows(
            "users", [{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}]
        )
    )


class TestGateway:
    def test_get_gateway_uninitialized(self) -> None:
        mcp_server._gateway = None
        with pytest.raises(RuntimeError, match="not initialized"):
            mcp_server.get_gateway()


class TestSchemaTools:
    """Test schema discovery and table management tools."""

    def test_list_tables_empty(self) -> None:
        assert json.loads(mcp_server.sqlgateway_list_tables()) == []

    def test_create_and_describe(self, users_table: None) -> None:
        assert json.loads(mcp_server.sqlgateway_list_tables()) == ["users"]

        schema = json.loads(mcp_server.sqlgateway_describe_table("users"))
        assert list(schema["columns"]) == ["id", "name"]

    def test_describe_all(self, users_table: None) -> None:
        described = json.loads(mcp_server.sqlgateway_describe())
        assert list(described) == ["users"]

    def test_describe_missing_table(self) -> None:
        data = _err(mcp_server.sqlgateway_describe_table("ghost"))
        assert "ghost" in data["error"]

    def test_create_invalid_column(self) -> None:
        data = json.loads(mcp_server.sqlgateway_create_table("t", [{"name": "id"}]))

        assert data["status"] == "validation_error"
        assert "columns.0.type" in data["message"]

    def test_create_unsafe_name(self) -> None:
        data = json.loads(
            mcp_server.sqlgateway_create_table("t; DROP TABLE x", [{"name": "a", "type": "text"}])
        )
        assert data["status"] == "validation_error"

    def test_update_table(self, users_table: None) -> None:
        columns = [*USERS_COLUMNS, {"name": "email", "type": "text"}]
        data = _ok(mcp_server.sqlgateway_update_table("users", columns))
        assert data["statements"] == ["ALTER TABLE users ADD COLUMN email text"]

    def test_drop_table_twice(self, users_table: None) -> None:
        _ok(mcp_server.sqlgateway_drop_table("users"))
        _ok(mcp_server.sqlgateway_drop_table("users"))
        assert json.loads(mcp_server.sqlgateway_list_tables()) == []


class TestQueryTools:
    """Test query tools."""

    def test_execute_sql(self, users_table: None) -> None:
        data = _ok(mcp_server.sqlgateway_execute_sql("SELECT name FROM users ORDER BY id"))
        assert data["rows"] == [{"name": "Alice"}, {"name": "Bob"}]
        assert data["columns"] == ["name"]

    def test_execute_sql_rejected(self) -> None:
        data = json.loads(mcp_server.sqlgateway_execute_sql("DROP DATABASE prod"))
        assert data["status"] == "validation_error"

    def test_query_raw_mode(self, users_table: None) -> None:
        data = _ok(mcp_server.sqlgateway_query(mode="raw", sql="SELECT id FROM users WHERE id = 2"))
        assert data["rows"] == [{"id": 2}]

    def test_query_ai_mode(self, users_table: None, stub_client) -> None:
        stub_client.reply = "```sql\nSELECT COUNT(*) AS total FROM users;\n```"

        data = _ok(mcp_server.sqlgateway_query(mode="ai", natural_language="count users"))

        assert data["mode"] == "ai"
        assert data["sql"] == "SELECT COUNT(*) AS total FROM users"
        assert data["rows"] == [{"total": 2}]

    def test_query_unknown_mode(self) -> None:
        _err(mcp_server.sqlgateway_query(mode="sql", sql="SELECT 1"))

    def test_generate_then_execute(self, users_table: None, stub_client) -> None:
        stub_client.reply = "SELECT name FROM users WHERE id = 1"

        generated = _ok(mcp_server.sqlgateway_generate_sql("first user", ["users"]))
        assert generated["rows"] is None

        data = _ok(mcp_server.sqlgateway_execute_generated_sql(generated["generated_sql"]))
        assert data["rows"] == [{"name": "Alice"}]


class TestDataTools:
    def test_insert_rows(self, users_table: None) -> None:
        data = _ok(mcp_server.sqlgateway_insert_rows("users", [{"id": 3, "name": "Carol"}]))
        assert data["rows_affected"] == 1

    def test_insert_mismatched_rows(self, users_table: None) -> None:
        data = json.loads(
            mcp_server.sqlgateway_insert_rows(
                "users", [{"id": 3, "name": "Carol"}, {"name": "Dave", "id": 4}]
            )
        )
        assert data["status"] == "validation_error"
        assert "Row 1" in data["message"]


class TestHealthTool:
    def test_health(self) -> None:
        data = json.loads(mcp_server.sqlgateway_health())
        assert data["status"] == "ok"
