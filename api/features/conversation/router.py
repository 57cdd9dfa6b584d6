"""Router for the Conversation feature."""
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.auth.dependencies import get_current_principal
from api.features.auth.service import Principal
from api.features.conversation.controller import ConversationController
from api.features.conversation.dtos import (
    ConversationDTO,
    ConversationListResponse,
    SendMessageRequest,
    SendMessageResponse,
    UpdateConversationRequest,
)
from api.shared.db import get_db_session
from api.shared.response import ResponseModel
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()


@router.get("/", response_model=ResponseModel[ConversationListResponse])
@inject
async def list_conversations(
    principal: Principal = Depends(get_current_principal),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    result = await controller.list_conversations(
        caller_id=principal.user.id, db_session=db_session
    )
    return ResponseModel.success(data=result, message="Conversations listed")


@router.post("/send", response_model=ResponseModel[SendMessageResponse])
@inject
async def send_message(
    body: SendMessageRequest,
    request: Request,
    response: Response,
    principal: Principal = Depends(get_current_principal),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    result, created = await controller.send_message(
        body,
        caller_id=principal.user.id,
        client_ip=request.client.host if request.client else "unknown",
        db_session=db_session,
    )
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return ResponseModel.success(data=result, message="Message sent")


@router.get("/{conversation_id}", response_model=ResponseModel[ConversationDTO])
@inject
async def get_conversation(
    conversation_id: str,
    principal: Principal = Depends(get_current_principal),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    result = await controller.get_conversation(
        conversation_id, caller_id=principal.user.id, db_session=db_session
    )
    return ResponseModel.success(data=result, message="Conversation fetched")


@router.put("/{conversation_id}", response_model=ResponseModel[ConversationDTO])
@inject
async def update_conversation(
    conversation_id: str,
    body: UpdateConversationRequest,
    principal: Principal = Depends(get_current_principal),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    result = await controller.update_conversation(
        conversation_id,
        body.title,
        caller_id=principal.user.id,
        db_session=db_session,
    )
    return ResponseModel.success(data=result, message="Conversation updated")


@router.delete("/{conversation_id}", response_model=ResponseModel[None])
@inject
async def delete_conversation(
    conversation_id: str,
    principal: Principal = Depends(get_current_principal),
    controller: ConversationController = Depends(
        Provide[DependencyContainer.controllers.conversation_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    await controller.delete_conversation(
        conversation_id, caller_id=principal.user.id, db_session=db_session
    )
    return ResponseModel.success(message="Conversation deleted successfully")
