"""Shared test fixtures for SQLGateway."""

import os
from collections.abc import Generator

import pytest

from sqlgateway import GatewayConfig, SQLGateway
from sqlgateway.generation import GenerativeQueryClient


def _psycopg_available() -> bool:
    """Check if psycopg is installed."""
    try:
        import psycopg  # noqa: F401

        return True
    except ImportError:
        return False


def _postgresql_connectable(url: str) -> bool:
    """Check if we can connect to PostgreSQL."""
    if not _psycopg_available():
        return False
    try:
        from sqlgateway.core.connection import DatabaseConnection

        conn = DatabaseConnection(url)
        conn.ping()
        conn.close()
        return True
    except Exception:
        return False


class StubClient(GenerativeQueryClient):
    """Generative client that returns canned text and records prompts."""

    def __init__(self, reply: str = "SELECT 1", error: Exception | None = None) -> None:
        self.reply = reply
        self.error = error
        self.prompts: list[str] = []

    @property
    def model_name(self) -> str:
        return "stub"

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def stub_client() -> StubClient:
    """Generative client stub (no network)."""
    return StubClient()


@pytest.fixture
def memory_config() -> GatewayConfig:
    """Configuration for an in-memory SQLite database, isolated from the environment."""
    return GatewayConfig(database_url="sqlite:///:memory:")


@pytest.fixture
def memory_gateway(
    memory_config: GatewayConfig, stub_client: StubClient
) -> Generator[SQLGateway, None, None]:
    """Create an SQLGateway with SQLite in-memory and a stub generative client.

    This is faster for unit tests that don't need PostgreSQL-specific features.
    """
    gateway = SQLGateway(config=memory_config, client=stub_client)
    yield gateway
    gateway.close()


@pytest.fixture
def users_gateway(memory_gateway: SQLGateway) -> SQLGateway:
    """In-memory gateway with users(id, name) holding Alice and Bob."""
    memory_gateway.execute_sql("CREATE TABLE users (id integer PRIMARY KEY, name varchar(50))")
    memory_gateway.execute_sql("INSERT INTO users (id, name) VALUES (1, 'Alice'), (2, 'Bob')")
    return memory_gateway


@pytest.fixture
def postgresql_url() -> str:
    """Get PostgreSQL URL from environment or use default.

    Skips the test when psycopg is missing or the server is unreachable.
    """
    url = os.environ.get("TEST_DATABASE_URL")
    if not url:
        # Default to local PostgreSQL
        url = "postgresql://localhost/sqlgateway_test"

    # Skip if psycopg not available
    if not _psycopg_available():
        pytest.skip("psycopg not installed")

    # Skip if can't connect (no PostgreSQL server)
    if not _postgresql_connectable(url):
        pytest.skip(f"Cannot connect to PostgreSQL at {url}")

    return url


@pytest.fixture
def pg_gateway(postgresql_url: str, stub_client: StubClient) -> Generator[SQLGateway, None, None]:
    """Create an SQLGateway with PostgreSQL.

    Tables whose names start with ``sgw_`` are dropped afterwards.
    """
    gateway = SQLGateway(config=GatewayConfig(database_url=postgresql_url), client=stub_client)
    yield gateway
    for table in gateway.list_tables():
        if table.startswith("sgw_"):
            gateway.drop_table(table)
    gateway.close()

