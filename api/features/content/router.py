"""Router for the Content feature."""
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request

from api.features.auth.dependencies import get_current_principal
from api.features.content.controller import ContentController
from api.features.content.dtos import GenerateContentRequest, GeneratedContentResponse
from api.shared.rate_limit import rate_limit_by_ip
from api.shared.response import ResponseModel
from core.settings import SETTINGS
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


@router.post(
    "/generate",
    response_model=ResponseModel[GeneratedContentResponse],
    dependencies=[Depends(rate_limit_by_ip(SETTINGS.RATE_LIMIT.RATE_LIMIT_MAX_ATTEMPTS))],
)
@inject
async def generate(
    body: GenerateContentRequest,
    request: Request,
    controller: ContentController = Depends(
        Provide[DependencyContainer.controllers.content_controller]
    ),
):
    """Public generation endpoint, rate limited per source address."""
    result = await controller.generate(body, client_ip=_client_ip(request))
    return ResponseModel.success(data=result, message="Content generated")


@router.post(
    "/generate-unlimited",
    response_model=ResponseModel[GeneratedContentResponse],
    dependencies=[Depends(get_current_principal)],
)
@inject
async def generate_unlimited(
    body: GenerateContentRequest,
    request: Request,
    controller: ContentController = Depends(
        Provide[DependencyContainer.controllers.content_controller]
    ),
):
    """Generation endpoint for authenticated callers, without a request cap."""
    result = await controller.generate(body, client_ip=_client_ip(request))
    return ResponseModel.success(data=result, message="Content generated")
