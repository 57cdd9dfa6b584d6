"""Per-key request counter backed by Redis."""
from dataclasses import dataclass

from infra.resources import RedisResource


@dataclass(frozen=True)
class RateLimitStatus:
    allowed: bool
    limit: int
    remaining: int


class RateLimiter:
    """Counts hits per key inside a fixed window.

    The window starts with the first hit for a key; the counter expires with it.
    Rejected requests are not counted.
    """

    key_prefix = "rate_limit:"

    def __init__(self, redis: RedisResource, window_seconds: int = 60 * 60 * 24):
        self.redis = redis
        self.window_seconds = window_seconds

    async def hit(self, identity: str, max_attempts: int) -> RateLimitStatus:
        client = self.redis.client
        assert client is not None, "Redis client not initialized"
        key = f"{self.key_prefix}{identity}"

        attempts = int(await client.get(key) or 0)
        if attempts >= max_attempts:
            return RateLimitStatus(allowed=False, limit=max_attempts, remaining=0)

        count = await client.incr(key)
        if count == 1:
            await client.expire(key, self.window_seconds)
        return RateLimitStatus(
            allowed=True,
            limit=max_attempts,
            remaining=max(0, max_attempts - count),
        )
