"""Route dependency limiting requests per source address."""
from typing import Awaitable, Callable, Dict

import structlog
from dependency_injector.wiring import Provide, inject
from fastapi import Depends, Request

from api.shared.exceptions import RateLimitExceededError
from di.container import ApplicationContainer
from infra.rate_limiter import RateLimiter, RateLimitStatus

logger = structlog.get_logger("contentgen.rate_limit")


def rate_limit_headers(status: RateLimitStatus) -> Dict[str, str]:
    return {
        "X-RateLimit-Limit": str(status.limit),
        "X-RateLimit-Remaining": str(status.remaining),
    }


@inject
def get_rate_limiter(
    limiter: RateLimiter = Depends(
        Provide[ApplicationContainer.infrastructure.rate_limiter]
    ),
) -> RateLimiter:
    return limiter


def rate_limit_by_ip(max_attempts: int) -> Callable[..., Awaitable[None]]:
    """Build a route dependency allowing ``max_attempts`` requests per client IP.

    Counted requests get their headers through ``request.state``; the
    middleware in ``api.main`` copies them onto whatever response is sent,
    error responses included.
    """

    async def dependency(
        request: Request,
        limiter: RateLimiter = Depends(get_rate_limiter),
    ) -> None:
        ip = request.client.host if request.client else "unknown"
        status = await limiter.hit(ip, max_attempts)
        if not status.allowed:
            logger.warning("Rate limit exceeded", ip=ip, limit=max_attempts)
            raise RateLimitExceededError(max_attempts)

        request.state.rate_limit_headers = rate_limit_headers(status)

    return dependency
