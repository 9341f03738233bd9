"""Process-wide configuration for SQLGateway.

Configuration is read once from the environment and frozen; nothing a
request carries can change it.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, Field

DEFAULT_DATABASE_URL = "sqlite:///./sqlgateway.db"
DEFAULT_GEMINI_API_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/gemini-pro:generateContent"
)
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


def get_database_url(url: str | None = None) -> str:
    """Resolve database URL from an explicit value, environment variable, or default.

    Priority:
    1. Explicit URL argument
    2. SQLGATEWAY_URL environment variable
    3. Default: sqlite:///./sqlgateway.db
    """
    if url:
        return url
    if env_url := os.getenv("SQLGATEWAY_URL"):
        return env_url
    return DEFAULT_DATABASE_URL


class GatewayConfig(BaseModel):
    """Immutable gateway settings."""

    database_url: str = DEFAULT_DATABASE_URL
    echo: bool = False
    provider: str = Field(default="gemini", description="Generative provider: gemini or openai")
    gemini_api_key: str | None = None
    gemini_api_url: str = DEFAULT_GEMINI_API_URL
    openai_api_key: str | None = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    llm_timeout: float = Field(default=30.0, description="Upstream request timeout (seconds)")

    model_config = {"frozen": True}

    @classmethod
    def from_env(cls, database_url: str | None = None, **overrides: object) -> GatewayConfig:
        """Build configuration from environment variables.

        Args:
            database_url: Explicit database URL (wins over SQLGATEWAY_URL)
            **overrides: Field values that win over the environment

        Returns:
            Frozen GatewayConfig
        """
        values: dict[str, object] = {
            "database_url": get_database_url(database_url),
            "echo": _env_flag("SQLGATEWAY_ECHO"),
            "provider": os.getenv("SQLGATEWAY_PROVIDER", "gemini"),
            "gemini_api_key": os.getenv("GEMINI_API_KEY") or None,
            "gemini_api_url": os.getenv("GEMINI_API_URL", DEFAULT_GEMINI_API_URL),
            "openai_api_key": os.getenv("OPENAI_API_KEY") or None,
            "openai_model": os.getenv("SQLGATEWAY_OPENAI_MODEL", DEFAULT_OPENAI_MODEL),
        }
        if timeout := os.getenv("SQLGATEWAY_LLM_TIMEOUT"):
            values["llm_timeout"] = float(timeout)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(values)
