"""Controller for the Content feature."""
import structlog

from api.features.content.client import (
    GenerationClient,
    GenerationConnectionFailure,
    GenerationHttpFailure,
)
from api.features.content.dtos import GenerateContentRequest, GeneratedContentResponse
from api.shared.exceptions import ExternalServiceError, ExternalServiceUnreachableError

logger = structlog.get_logger("contentgen.content.controller")


class ContentController:
    """Stateless proxy to the generation webhook."""

    def __init__(self, generation_client: GenerationClient):
        self.generation_client = generation_client

    async def generate(
        self, request: GenerateContentRequest, *, client_ip: str
    ) -> GeneratedContentResponse:
        result = await self.generation_client.generate(
            details=request.details,
            theme=request.theme,
            platform=request.platform,
        )

        if isinstance(result, GenerationConnectionFailure):
            logger.error(
                "Content generation connection error",
                error=str(result.cause),
                ip=client_ip,
            )
            raise ExternalServiceUnreachableError()

        if isinstance(result, GenerationHttpFailure):
            logger.error(
                "Content generation failed",
                status=result.status_code,
                body=result.raw_body,
                ip=client_ip,
            )
            raise ExternalServiceError(
                "Content generation",
                "Failed to generate content",
                status_code=result.status_code,
                details={"error": result.raw_body, "status": result.status_code},
            )

        return GeneratedContentResponse(
            content=result.json_body, upstream_status=result.status_code
        )
