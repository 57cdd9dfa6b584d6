"""DTOs for the Content feature."""
from typing import Any

from pydantic import Field

from api.shared.dtos import BaseDTO


class GenerateContentRequest(BaseDTO):
    """Parameters forwarded verbatim to the generation webhook."""

    details: str = Field(min_length=1, description="What to write about")
    theme: str = Field(min_length=1, description="Tone or theme of the content")
    platform: str = Field(min_length=1, description="Target publishing platform")


class GeneratedContentResponse(BaseDTO):
    """Webhook payload as returned on success."""

    content: Any = Field(default=None, description="JSON body returned by the webhook")
    upstream_status: int = Field(description="HTTP status returned by the webhook")
