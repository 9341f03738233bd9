"""Tests for the SQLGateway facade: raw, AI and generate-only paths."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from sqlgateway import GatewayConfig, SQLGateway
from sqlgateway.core.engine import GENERATED_MESSAGE
from sqlgateway.core.types import QueryKind, QueryMode, QueryRequest, ResultStatus
from sqlgateway.exceptions import (
    TableNotFoundError,
    UpstreamMalformedError,
    UpstreamUnavailableError,
)


class TestRawPath:
    """Test literal SQL execution."""

    def test_select(self, users_gateway: SQLGateway) -> None:
        result = users_gateway.execute_sql("SELECT name FROM users")

        assert result.status == ResultStatus.SUCCESS
        assert result.code == "200"
        assert result.columns == ["name"]
        assert result.rows == [{"name": "Alice"}, {"name": "Bob"}]
        assert result.query_type == QueryKind.SELECT
        assert result.mode == QueryMode.RAW
        assert result.sql == "SELECT name FROM users"

    def test_trailing_terminator_tolerated(self, users_gateway: SQLGateway) -> None:
        result = users_gateway.execute_sql("SELECT name FROM users;")
        assert result.ok

    def test_warnings(self, users_gateway: SQLGateway) -> None:
        result = users_gateway.execute_sql("SELECT * FROM users")

        assert result.ok
        assert any("SELECT *" in w for w in result.warnings)
        assert any("LIMIT" in w for w in result.warnings)

    def test_empty(self, memory_gateway: SQLGateway) -> None:
        result = memory_gateway.execute_sql("   ")

        assert result.status == ResultStatus.VALIDATION_ERROR
        assert result.code == "400"
        assert result.message == "Query cannot be empty"

    def test_stacked_statements_rejected(self, users_gateway: SQLGateway) -> None:
        result = users_gateway.execute_sql("SELECT 1; DROP TABLE users;")

        assert result.status == ResultStatus.VALIDATION_ERROR
        assert "multiple statements" in result.message
        assert users_gateway.list_tables() == ["users"]

    def test_denylisted_phrase_rejected(self, users_gateway: SQLGateway) -> None:
        result = users_gateway.execute_sql("GRANT SELECT ON users TO public")

        assert result.status == ResultStatus.VALIDATION_ERROR
        assert "GRANT" in result.message

    def test_database_error(self, users_gateway: SQLGateway) -> None:
        result = users_gateway.execute_sql("SELECT * FROM ghost")

        assert result.status == ResultStatus.EXECUTION_ERROR
        assert result.code == "500"
        assert "ghost" in result.message

    def test_insert_then_select(self, users_gateway: SQLGateway) -> None:
        write = users_gateway.execute_sql("INSERT INTO users (id, name) VALUES (3, 'Carol')")
        assert write.rows_affected == 1
        assert write.query_type == QueryKind.INSERT

        read = users_gateway.execute_sql("SELECT name FROM users WHERE id = 3")
        assert read.rows == [{"name": "Carol"}]


class TestAIPath:
    """Test natural-language translation and execution."""

    def test_fenced_reply_is_cleaned_and_executed(
        self, users_gateway: SQLGateway, stub_client
    ) -> None:
        raw = "```sql\nSELECT COUNT(*) FROM users;\n```"
        stub_client.reply = raw

        result = users_gateway.execute_natural_language("how many users are there?")

        assert result.ok
        assert result.sql == "SELECT COUNT(*) FROM users"
        assert result.generated_sql == raw
        assert result.mode == QueryMode.AI
        assert result.rows is not None
        assert len(result.rows) == 1
        assert list(result.rows[0].values()) == [2]

    def test_prompt_describes_requested_tables(
        self, users_gateway: SQLGateway, stub_client
    ) -> None:
        users_gateway.execute_sql("CREATE TABLE orders (id integer)")

        users_gateway.execute_natural_language("list users", ["users"])

        prompt = stub_client.prompts[-1]
        assert "users" in prompt
        assert "Table: orders" not in prompt
        assert "list users" in prompt

    def test_whitespace_collapsed_before_execution(
        self, users_gateway: SQLGateway, stub_client
    ) -> None:
        stub_client.reply = "SELECT name\n  FROM users\n WHERE id = 1"

        result = users_gateway.execute_natural_language("first user")

        assert result.sql == "SELECT name FROM users WHERE id = 1"
        assert result.rows == [{"name": "Alice"}]

    def test_unsafe_generated_query_rejected(
        self, users_gateway: SQLGateway, stub_client
    ) -> None:
        stub_client.reply = "SELECT 1; DROP TABLE users; --"

        result = users_gateway.execute_natural_language("do something")

        assert result.status == ResultStatus.VALIDATION_ERROR
        assert result.message.startswith("Generated query contains unsafe operations")
        assert "multiple statements are not allowed" in result.message
        assert result.mode == QueryMode.AI
        assert users_gateway.list_tables() == ["users"]

    def test_generated_literal_with_colon(self, users_gateway: SQLGateway, stub_client) -> None:
        stub_client.reply = "SELECT name FROM users WHERE name <> 'see :x' AND id = 1"

        result = users_gateway.execute_natural_language("first user")

        assert result.ok, result.message
        assert result.rows == [{"name": "Alice"}]

    def test_execution_error_label(self, users_gateway: SQLGateway, stub_client) -> None:
        stub_client.reply = "SELECT nope FROM users"

        result = users_gateway.execute_natural_language("bad column")

        assert result.status == ResultStatus.EXECUTION_ERROR
        assert result.message.startswith("Error executing AI-generated query:")

    def test_empty_request_not_sent(self, memory_gateway: SQLGateway, stub_client) -> None:
        result = memory_gateway.execute_natural_language("  ")

        assert result.status == ResultStatus.VALIDATION_ERROR
        assert result.message == "Natural language query cannot be empty"
        assert stub_client.prompts == []

    def test_unknown_table(self, users_gateway: SQLGateway, stub_client) -> None:
        result = users_gateway.execute_natural_language("count", ["ghost"])

        assert result.status == ResultStatus.VALIDATION_ERROR
        assert result.message == "Table 'ghost' does not exist."
        assert stub_client.prompts == []

    def test_upstream_unavailable(self, users_gateway: SQLGateway, stub_client) -> None:
        stub_client.error = UpstreamUnavailableError("Gemini API unreachable: timed out")

        result = users_gateway.execute_natural_language("count users")

        assert result.status == ResultStatus.EXECUTION_ERROR
        assert result.message == "AI generation failed: Gemini API unreachable: timed out"
        assert result.mode == QueryMode.AI

    def test_upstream_malformed(self, users_gateway: SQLGateway, stub_client) -> None:
        stub_client.error = UpstreamMalformedError("No candidates in Gemini response")

        result = users_gateway.execute_natural_language("count users")

        assert result.status == ResultStatus.EXECUTION_ERROR
        assert "No candidates" in result.message

    def test_empty_generated_text(self, users_gateway: SQLGateway, stub_client) -> None:
        stub_client.reply = "```sql\n```"

        result = users_gateway.execute_natural_language("count users")

        assert result.status == ResultStatus.EXECUTION_ERROR
        assert "no SQL statement" in result.message

    def test_execute_generated_sql(self, users_gateway: SQLGateway) -> None:
        result = users_gateway.execute_generated_sql(
            "```sql\nSELECT name FROM users WHERE id = 2;\n```"
        )

        assert result.ok
        assert result.mode == QueryMode.AI
        assert result.rows == [{"name": "Bob"}]


class TestGenerateOnly:
    """Test translation without execution."""

    def test_returns_sql_without_running(self, users_gateway: SQLGateway, stub_client) -> None:
        stub_client.reply = "DELETE FROM users\nWHERE id = 1;"

        result = users_gateway.generate_sql("remove the first user")

        assert result.ok
        assert result.message == GENERATED_MESSAGE
        assert result.generated_sql == "DELETE FROM users\nWHERE id = 1"
        assert result.query_type is None
        assert result.rows is None
        assert result.columns is None
        assert result.rows_affected is None
        assert len(users_gateway.execute_sql("SELECT id FROM users").rows or []) == 2

    def test_gate_warning(self, users_gateway: SQLGateway, stub_client) -> None:
        stub_client.reply = "GRANT ALL ON users TO mallory"

        result = users_gateway.generate_sql("give mallory access")

        assert result.ok
        assert any("would be rejected on execution" in w for w in result.warnings)

    def test_upstream_failure(self, users_gateway: SQLGateway, stub_client) -> None:
        stub_client.error = UpstreamUnavailableError("Gemini API returned HTTP 503", 503)

        result = users_gateway.generate_sql("count users")

        assert result.status == ResultStatus.EXECUTION_ERROR
        assert result.message.startswith("AI generation failed:")


class TestRun:
    """Test dispatch by declared mode."""

    def test_raw_mode_ignores_natural_language(
        self, users_gateway: SQLGateway, stub_client
    ) -> None:
        request = QueryRequest(
            mode=QueryMode.RAW, sql="SELECT name FROM users", natural_language="x"
        )

        result = users_gateway.run(request)

        assert result.mode == QueryMode.RAW
        assert stub_client.prompts == []

    def test_ai_mode_ignores_sql(self, users_gateway: SQLGateway, stub_client) -> None:
        stub_client.reply = "SELECT COUNT(*) FROM users"
        request = QueryRequest(
            mode=QueryMode.AI, sql="DELETE FROM users", natural_language="count users"
        )

        result = users_gateway.run(request)

        assert result.ok
        assert result.sql == "SELECT COUNT(*) FROM users"
        assert len(users_gateway.execute_sql("SELECT id FROM users").rows or []) == 2

    def test_raw_mode_without_sql(self, memory_gateway: SQLGateway) -> None:
        result = memory_gateway.run(QueryRequest(mode=QueryMode.RAW, natural_language="x"))
        assert result.status == ResultStatus.VALIDATION_ERROR


class TestCatalogAndService:
    def test_describe_table(self, users_gateway: SQLGateway) -> None:
        assert users_gateway.describe_table("users").column_names == ["id", "name"]

    def test_describe_missing_table(self, memory_gateway: SQLGateway) -> None:
        with pytest.raises(TableNotFoundError):
            memory_gateway.describe_table("ghost")

    def test_describe(self, users_gateway: SQLGateway) -> None:
        described = users_gateway.describe()

        assert list(described) == ["users"]
        assert described["users"]["columns"]["name"]["max_length"] == 50

    def test_health(self, memory_gateway: SQLGateway) -> None:
        status = memory_gateway.health()

        assert status["status"] == "ok"
        assert status["code"] == "200"
        assert status["dialect"] == "sqlite"
        assert status["provider"] == "gemini"

    def test_context_manager(self, memory_config: GatewayConfig, stub_client) -> None:
        with SQLGateway(config=memory_config, client=stub_client) as gateway:
            assert gateway.execute_sql("SELECT 1").ok


class TestClientConfiguration:
    """Test building the generative client from configuration."""

    def test_missing_gemini_key(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        gateway = SQLGateway(config=GatewayConfig(database_url="sqlite:///:memory:"))

        result = gateway.execute_natural_language("count users")

        assert result.status == ResultStatus.EXECUTION_ERROR
        assert "API key" in result.message
        gateway.close()

    def test_unknown_provider(self) -> None:
        config = GatewayConfig(database_url="sqlite:///:memory:", provider="bogus")
        gateway = SQLGateway(config=config)

        with pytest.raises(UpstreamUnavailableError, match="Unknown generative provider"):
            gateway.client

        result = gateway.generate_sql("count users")
        assert result.message.startswith("AI generation failed:")
        gateway.close()

    def test_injected_client_used(self, memory_gateway: SQLGateway, stub_client) -> None:
        assert memory_gateway.client is stub_client

    def test_close_releases_built_client(self, monkeypatch: pytest.MonkeyPatch) -> None:
        session_factory = MagicMock()
        monkeypatch.setattr(requests, "Session", session_factory)
        config = GatewayConfig(database_url="sqlite:///:memory:", gemini_api_key="k")
        gateway = SQLGateway(config=config)
        assert gateway.client.model_name

        gateway.close()

        session_factory.return_value.close.assert_called_once_with()

    def test_close_leaves_injected_client_open(
        self, memory_config: GatewayConfig, stub_client
    ) -> None:
        stub_client.close = MagicMock()

        with SQLGateway(config=memory_config, client=stub_client):
            pass

        stub_client.close.assert_not_called()
