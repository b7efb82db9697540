"""
Fixed-window rate limiter stored in Valkey.

Each client key owns one counter holding the points consumed in the current
window. The counter is created with the window expiry and incremented
atomically in a MULTI/EXEC pipeline. The request that first crosses the
budget turns the counter into a block by resetting its expiry to the block
duration. Clients that keep hammering while blocked are escalated to a
longer block with a point penalty.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from ..cache.client import ValkeyClient
from ..cache.utils import CacheKeyBuilder, TTLPreset
from ..utils.errors import RateLimited
from ..utils.timing import timed

logger = logging.getLogger(__name__)


@dataclass
class LimiterState:
    """Counter snapshot for one client key."""

    consumed_points: int
    ms_before_next: int
    remaining_points: int


class RateLimiter:
    """
    Per-client request gate.

    Defaults: 600 points per 60 second window, one point per request, a
    5 minute block on the first excess request, and a 15 minute block plus
    360 point penalty once a client reaches 6x the budget.
    """

    def __init__(
        self,
        client: ValkeyClient,
        points: int = 600,
        duration: int = TTLPreset.ONE_MINUTE,
        block_duration: int = TTLPreset.FIVE_MINUTES,
        escalation_factor: int = 6,
        escalation_block_duration: int = TTLPreset.FIFTEEN_MINUTES,
        penalty_points: int = 360,
    ):
        self._client = client
        self.points = points
        self.duration = int(duration)
        self.block_duration = int(block_duration)
        self.escalation_threshold = points * escalation_factor
        self.escalation_block_duration = int(escalation_block_duration)
        self.penalty_points = penalty_points

    @property
    def valkey(self):
        return self._client.client

    def key(self, client_key: str) -> str:
        return CacheKeyBuilder.limiter_key(client_key)

    def _state(self, consumed: int, pttl: int) -> LimiterState:
        return LimiterState(
            consumed_points=consumed,
            ms_before_next=max(pttl, 0),
            remaining_points=max(self.points - consumed, 0),
        )

    async def _upsert(self, key: str, points: int, duration: int) -> LimiterState:
        """Create the counter with an expiry if missing, then add points."""
        async with self.valkey.pipeline(transaction=True) as pipe:
            pipe.set(key, 0, ex=duration, nx=True)
            pipe.incrby(key, points)
            pipe.pttl(key)
            _, consumed, pttl = await pipe.execute()
        return self._state(int(consumed), int(pttl))

    async def _set_block(self, key: str, consumed: int, duration: int) -> None:
        await self.valkey.set(key, consumed, ex=duration)

    @timed(name="limiter.get")
    async def get(self, client_key: str) -> Optional[LimiterState]:
        """Current counter for a client, or None when it has no window open."""
        key = self.key(client_key)
        async with self.valkey.pipeline(transaction=True) as pipe:
            pipe.get(key)
            pipe.pttl(key)
            consumed, pttl = await pipe.execute()
        if consumed is None:
            return None
        return self._state(int(consumed), int(pttl))

    @timed(name="limiter.block")
    async def block(self, client_key: str, seconds: int) -> None:
        """Block a client outright for the given number of seconds."""
        await self._set_block(self.key(client_key), self.points + 1, seconds)

    @timed(name="limiter.penalty")
    async def penalty(self, client_key: str, points: int) -> LimiterState:
        """Add points without rejecting."""
        return await self._upsert(self.key(client_key), points, self.duration)

    @timed(name="limiter.consume")
    async def consume(self, client_key: str, points: int = 1) -> LimiterState:
        """
        Consume points for a client.

        Args:
            client_key: Client identity, e.g. remote address
            points: Points to consume

        Returns:
            LimiterState after consumption

        Raises:
            RateLimited: If the budget is exhausted or the client is blocked
            InternalFailure: If Valkey is unreachable
        """
        key = self.key(client_key)
        state = await self._upsert(key, points, self.duration)
        if state.consumed_points <= self.points:
            return state

        if self.block_duration > 0 and state.consumed_points <= self.points + points:
            await self._set_block(key, state.consumed_points, self.block_duration)
            state.ms_before_next = self.block_duration * 1000
            logger.info(f"Blocking {client_key} for {self.block_duration}s")

        raise RateLimited(state.ms_before_next)

    async def check(self, client_key: str) -> LimiterState:
        """
        Gate one request from a client.

        Clients whose consumption reached the escalation threshold are
        blocked for the longer duration and penalized before the request
        is counted.
        """
        current = await self.get(client_key)
        if current is not None and current.consumed_points >= self.escalation_threshold:
            logger.warning(
                f"Escalating {client_key}: {current.consumed_points} points consumed, "
                f"blocking for {self.escalation_block_duration}s"
            )
            await self.block(client_key, self.escalation_block_duration)
            await self.penalty(client_key, self.penalty_points)
        return await self.consume(client_key, 1)
