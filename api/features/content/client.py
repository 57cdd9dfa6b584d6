"""HTTP client for the external content generation webhook.

``generate`` never raises: every outcome, including timeouts and transport
errors, comes back as one of the ``GenerationResult`` variants so the caller
can decide what to roll back. There are no retries at this layer.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Optional, Union

import httpx
import structlog

logger = structlog.get_logger("contentgen.content.client")

DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True)
class GenerationSuccess:
    status_code: int
    json_body: Any


@dataclass(frozen=True)
class GenerationHttpFailure:
    status_code: int
    raw_body: str


@dataclass(frozen=True)
class GenerationConnectionFailure:
    cause: BaseException


GenerationResult = Union[
    GenerationSuccess, GenerationHttpFailure, GenerationConnectionFailure
]


class GenerationClient:
    """Posts ``{details, theme, platform}`` to the configured webhook URL."""

    def __init__(
        self,
        webhook_url: str,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.webhook_url = webhook_url
        self.timeout = timeout
        self._transport = transport

    async def generate(
        self,
        details: str,
        theme: str,
        platform: str,
        timeout: Optional[float] = None,
    ) -> GenerationResult:
        if not self.webhook_url:
            return GenerationConnectionFailure(
                cause=RuntimeError("Content generation webhook URL is not configured")
            )

        payload = {"details": details, "theme": theme, "platform": platform}
        try:
            async with httpx.AsyncClient(
                timeout=timeout or self.timeout,
                transport=self._transport,
                follow_redirects=True,
            ) as client:
                response = await client.post(self.webhook_url, json=payload)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            # Timeouts, refused connections and malformed URLs all land here
            logger.warning(
                "Generation webhook unreachable",
                error=str(e),
                error_type=type(e).__name__,
            )
            return GenerationConnectionFailure(cause=e)

        if not response.is_success:
            logger.warning(
                "Generation webhook returned an error status",
                status_code=response.status_code,
            )
            return GenerationHttpFailure(
                status_code=response.status_code, raw_body=response.text
            )

        try:
            body = response.json()
        except json.JSONDecodeError:
            logger.warning(
                "Generation webhook returned a non-JSON body",
                status_code=response.status_code,
            )
            body = None
        return GenerationSuccess(status_code=response.status_code, json_body=body)
