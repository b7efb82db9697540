"""
Process-scoped async Valkey handle.

The service container opens one handle at start-up and closes it on
shutdown. The resolution cache and the rate limiter read ``client`` from it
on every call, so a closed handle fails their calls with InternalFailure.
"""

import asyncio
import logging
from typing import Any, Optional

import valkey.asyncio as valkey
from valkey.asyncio.connection import ConnectionPool
from valkey.exceptions import ValkeyError

from .config import ValkeyConfig, ValkeyConnectionError

logger = logging.getLogger(__name__)

CONNECT_ATTEMPTS = 5
BACKOFF_BASE_SECONDS = 0.5
BACKOFF_MAX_SECONDS = 8.0


class ValkeyClient:
    """
    Pooled Valkey connection with retrying connect and ping health checks.

    Args:
        config: Pool settings, built from the application configuration when None
        client: Already constructed async client (tests inject a double here);
            treated as connected and used as-is
    """

    def __init__(self, config: Optional[ValkeyConfig] = None, client: Optional[Any] = None):
        self.config = config or ValkeyConfig.from_app_config()
        self._client: Optional[Any] = client
        self._pool: Optional[ConnectionPool] = None
        self._connected = client is not None

    async def connect(self) -> None:
        """
        Open the pool and ping the server, backing off between attempts.

        Raises:
            ValkeyConnectionError: If every attempt fails
        """
        if self.is_connected:
            return

        for attempt in range(1, CONNECT_ATTEMPTS + 1):
            self._pool = ConnectionPool(**self.config.pool_kwargs())
            self._client = valkey.Valkey(connection_pool=self._pool)
            try:
                await self._ping()
            except ValkeyConnectionError as e:
                await self._release()
                if attempt == CONNECT_ATTEMPTS:
                    logger.error(f"Giving up on {self.config} after {attempt} attempts")
                    raise
                delay = min(BACKOFF_BASE_SECONDS * 2 ** (attempt - 1), BACKOFF_MAX_SECONDS)
                logger.warning(
                    f"Valkey at {self.config.address} unreachable ({e.__cause__}), "
                    f"retry {attempt}/{CONNECT_ATTEMPTS - 1} in {delay:.1f}s"
                )
                await asyncio.sleep(delay)
            else:
                self._connected = True
                logger.info(f"Connected to {self.config}")
                return

    async def disconnect(self) -> None:
        if self._client is None:
            return
        await self._release()
        logger.info(f"Disconnected from {self.config.address}")

    async def _release(self) -> None:
        client, pool = self._client, self._pool
        self._client = None
        self._pool = None
        self._connected = False
        try:
            if client is not None:
                await client.aclose()
            if pool is not None:
                await pool.disconnect()
        except (ValkeyError, OSError) as e:
            logger.warning(f"Error while closing Valkey connections: {e}")

    async def _ping(self) -> None:
        try:
            ok = await self._client.ping()
        except (ValkeyError, OSError) as e:
            raise ValkeyConnectionError() from e
        if not ok:
            raise ValkeyConnectionError()

    async def health_check(self) -> bool:
        """Ping the server; a failed ping marks the handle disconnected."""
        if not self.is_connected:
            return False
        try:
            await self._ping()
        except ValkeyConnectionError as e:
            logger.warning(f"Valkey health check failed: {e.__cause__ or e}")
            self._connected = False
            return False
        return True

    @property
    def is_connected(self) -> bool:
        return self._connected and self._client is not None

    @property
    def client(self) -> Any:
        """
        The underlying ``valkey.asyncio.Valkey`` client.

        Raises:
            ValkeyConnectionError: If the handle is not connected
        """
        if not self.is_connected:
            raise ValkeyConnectionError()
        return self._client

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
