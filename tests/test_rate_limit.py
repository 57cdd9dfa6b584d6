from infra.rate_limiter import RateLimiter


async def test_hits_count_down_remaining(redis_resource):
    limiter = RateLimiter(redis=redis_resource, window_seconds=60)

    first = await limiter.hit("10.0.0.1", max_attempts=2)
    second = await limiter.hit("10.0.0.1", max_attempts=2)

    assert (first.allowed, first.remaining) == (True, 1)
    assert (second.allowed, second.remaining) == (True, 0)


async def test_rejects_once_exhausted_without_counting(redis_resource):
    limiter = RateLimiter(redis=redis_resource, window_seconds=60)
    await limiter.hit("10.0.0.1", max_attempts=1)

    rejected = await limiter.hit("10.0.0.1", max_attempts=1)

    assert not rejected.allowed
    assert rejected.remaining == 0
    assert await redis_resource.client.get("rate_limit:10.0.0.1") == "1"


async def test_first_hit_starts_the_window(redis_resource):
    limiter = RateLimiter(redis=redis_resource, window_seconds=120)
    await limiter.hit("10.0.0.2", max_attempts=5)

    ttl = await redis_resource.client.ttl("rate_limit:10.0.0.2")

    assert 0 < ttl <= 120


async def test_addresses_are_counted_separately(redis_resource):
    limiter = RateLimiter(redis=redis_resource, window_seconds=60)
    await limiter.hit("10.0.0.1", max_attempts=1)

    other = await limiter.hit("10.0.0.3", max_attempts=1)

    assert other.allowed
