"""
Valkey connection settings for the resolution cache and the rate limiter.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..utils.config import AppConfig, get_config
from ..utils.errors import InternalFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ValkeyConfig:
    """
    Connection pool settings for one Valkey database.

    The cache and the limiter share a single pool, so ``max_connections``
    bounds both. Responses are decoded because every stored value is text.
    """

    host: str = "localhost"
    port: int = 6379
    password: Optional[str] = None
    database: int = 0
    max_connections: int = 10
    socket_timeout: float = 5.0
    socket_connect_timeout: float = 5.0
    health_check_interval: int = 30
    client_name: str = "skylookup"

    @classmethod
    def from_app_config(cls, config: Optional[AppConfig] = None) -> "ValkeyConfig":
        """Build from the application configuration, loading it when not given."""
        config = config or get_config()
        return cls(
            host=config.valkey_host,
            port=config.valkey_port,
            password=config.valkey_password,
            database=config.valkey_database,
            max_connections=config.valkey_max_connections,
            socket_timeout=config.valkey_socket_timeout,
            socket_connect_timeout=config.valkey_socket_connect_timeout,
        )

    def pool_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``valkey.asyncio.ConnectionPool``."""
        kwargs: Dict[str, Any] = {
            "host": self.host,
            "port": self.port,
            "db": self.database,
            "max_connections": self.max_connections,
            "socket_timeout": self.socket_timeout,
            "socket_connect_timeout": self.socket_connect_timeout,
            "health_check_interval": self.health_check_interval,
            "client_name": self.client_name,
            "decode_responses": True,
        }
        if self.password:
            kwargs["password"] = self.password
        return kwargs

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}/{self.database}"

    def __str__(self) -> str:
        auth = "with password" if self.password else "no password"
        return f"valkey://{self.address} ({auth}, pool={self.max_connections})"


class ValkeyConnectionError(InternalFailure):
    """Valkey server could not be reached."""
