"""Shared DTOs for the content generation API."""
from datetime import datetime, timezone
from typing import Dict

from pydantic import BaseModel, ConfigDict, Field


class BaseDTO(BaseModel):
    """Base DTO with common configuration."""

    model_config = ConfigDict(from_attributes=True)


class HealthCheckResponse(BaseDTO):
    """Health check response DTO."""
    status: str = Field(description="Service status")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    version: str = Field(default="0.1.0")
    dependencies: Dict[str, str] = Field(default_factory=dict)
