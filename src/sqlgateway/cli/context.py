"""CLI context management for database connections and shared state."""

from dataclasses import dataclass, field

from sqlgateway import GatewayConfig, SQLGateway


@dataclass
class CLIContext:
    """Shared context for CLI commands.

    Manages the gateway lifecycle and output preferences.
    """

    database_url: str | None
    echo: bool
    json_output: bool
    provider: str | None = None
    _gateway: SQLGateway | None = field(default=None, init=False, repr=False)

    def get_gateway(self) -> SQLGateway:
        """Get or create the gateway (lazy initialization).

        Returns:
            SQLGateway instance
        """
        if self._gateway is None:
            config = GatewayConfig.from_env(
                database_url=self.database_url,
                echo=self.echo or None,
                provider=self.provider,
            )
            self._gateway = SQLGateway(config=config)
        return self._gateway

    def close(self) -> None:
        """Close database connection if open."""
        if self._gateway is not None:
            self._gateway.close()
            self._gateway = None
