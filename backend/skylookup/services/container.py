"""
Process-scoped service container.

Owns the Valkey client, the database engine and the HTTP client, and wires
them into the cache, store, resolver, rate limiter and pipeline. Handles are
opened once at start-up and released on shutdown.

Usage:
    async with ServiceContainer(config) as services:
        result = await services.limited("203.0.113.9", services.pipeline.resolve_aircraft, "A7E152")
"""

import asyncio
import logging
import signal
from typing import Any, Awaitable, Callable, Optional, TypeVar

import httpx

from ..cache import ResolutionCache, ValkeyClient, ValkeyConfig
from ..database import DatabaseConfig, PersistentStore
from ..utils.config import AppConfig, get_config
from .rate_limiter import RateLimiter
from .resolver import ResolutionPipeline
from .scraper import DEFAULT_HEADERS, ExternalResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ServiceContainer:
    """
    Dependency container for the lookup service.

    Args:
        config: Application configuration, loaded from the environment when None
        valkey: Already constructed async Valkey client to use instead of a pool
        http_client: httpx client to use for external fetches
        database: Database configuration to use instead of one built from config
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        valkey: Optional[Any] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        database: Optional[DatabaseConfig] = None,
    ):
        self.config = config or get_config()
        self.valkey = ValkeyClient(ValkeyConfig.from_app_config(self.config), client=valkey)
        self.database = database or DatabaseConfig.from_app_config(self.config)
        self.http_client = http_client or httpx.AsyncClient(headers=DEFAULT_HEADERS)

        self.cache = ResolutionCache(self.valkey)
        self.store = PersistentStore(self.database)
        self.resolver = ExternalResolver.from_app_config(self.config, client=self.http_client)
        self.limiter = RateLimiter(self.valkey)
        self.pipeline = ResolutionPipeline(self.cache, self.store, self.resolver)
        self._is_open = False

    @classmethod
    async def open(cls, config: Optional[AppConfig] = None, **kwargs: Any) -> "ServiceContainer":
        """Build a container and open its handles."""
        container = cls(config, **kwargs)
        await container.start()
        return container

    @property
    def is_open(self) -> bool:
        return self._is_open

    async def start(self) -> None:
        """Connect to Valkey and the database."""
        if self._is_open:
            return
        await self.valkey.connect()
        await self.database.initialize()
        self._is_open = True
        logger.info("Service container opened")

    async def close(self) -> None:
        """Release every handle, including those of a container never started."""
        await self.resolver.aclose()
        await self.database.dispose()
        await self.valkey.disconnect()
        if self._is_open:
            self._is_open = False
            logger.info("Service container closed")

    async def limited(
        self, client_key: str, func: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any
    ) -> T:
        """
        Run an operation after charging one point to the client.

        Raises:
            RateLimited: If the client is over budget or blocked
            InternalFailure: If the limiter store is unreachable
        """
        if self.config.rate_limit_enabled:
            await self.limiter.check(client_key)
        return await func(*args, **kwargs)

    def install_signal_handlers(self) -> None:
        """Cancel the current task on SIGINT/SIGTERM so ``async with`` closes the container."""
        loop = asyncio.get_running_loop()
        task = asyncio.current_task()
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, self._on_signal, sig, task)
            except (NotImplementedError, RuntimeError):
                logger.debug(f"Signal handler for {sig.name} not supported on this loop")

    def _on_signal(self, sig: signal.Signals, task: Optional[asyncio.Task]) -> None:
        logger.warning(f"Received {sig.name}, shutting down")
        if task is not None and not task.done():
            task.cancel()

    async def __aenter__(self):
        try:
            await self.start()
        except BaseException:
            await self.close()
            raise
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
