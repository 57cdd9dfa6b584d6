"""Controller for the Conversation feature."""
from typing import Optional

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.conversation.dtos import (
    ConversationDTO,
    ConversationListResponse,
    SendMessageRequest,
    SendMessageResponse,
)
from api.features.conversation.service import ConversationService, SendMessageCommand
from api.shared.result import ErrorKind, raise_for_error
from api.shared.unit_of_work import UnitOfWork

logger = structlog.get_logger("contentgen.conversation.controller")


class ConversationController:
    """Controller handling conversation CRUD and message operations."""

    def __init__(self, conversation_service: ConversationService):
        self.conversation_service = conversation_service

    async def list_conversations(
        self, *, caller_id: Optional[str], db_session: AsyncSession
    ) -> ConversationListResponse:
        result = await self.conversation_service.list_conversations(
            UnitOfWork(db_session), caller_id
        )
        raise_for_error(result)
        return ConversationListResponse(items=result.value, total=len(result.value))

    async def get_conversation(
        self, conversation_id: str, *, caller_id: Optional[str], db_session: AsyncSession
    ) -> ConversationDTO:
        result = await self.conversation_service.get_conversation(
            UnitOfWork(db_session), caller_id, conversation_id
        )
        raise_for_error(result)
        return result.value

    async def update_conversation(
        self,
        conversation_id: str,
        title: str,
        *,
        caller_id: Optional[str],
        db_session: AsyncSession,
    ) -> ConversationDTO:
        result = await self.conversation_service.update_conversation(
            UnitOfWork(db_session), caller_id, conversation_id, title
        )
        raise_for_error(result)
        return result.value

    async def delete_conversation(
        self, conversation_id: str, *, caller_id: Optional[str], db_session: AsyncSession
    ) -> None:
        result = await self.conversation_service.delete_conversation(
            UnitOfWork(db_session), caller_id, conversation_id
        )
        raise_for_error(result)

    async def send_message(
        self,
        request: SendMessageRequest,
        *,
        caller_id: Optional[str],
        client_ip: str,
        db_session: AsyncSession,
    ) -> tuple[SendMessageResponse, bool]:
        """Return the stored turn and whether a new conversation was created."""
        command = SendMessageCommand(
            conversation_id=request.conversation_id,
            message=request.message,
            details=request.details,
            theme=request.theme,
            platform=request.platform,
            title=request.title,
        )
        result = await self.conversation_service.send_message(
            UnitOfWork(db_session), caller_id, command
        )

        if result.error is not None and result.error.kind in (
            ErrorKind.UPSTREAM_HTTP_FAILURE,
            ErrorKind.UPSTREAM_UNREACHABLE,
        ):
            logger.error(
                "Content generation failed",
                kind=result.error.kind.value,
                status=result.error.status_code,
                error=result.error.details.get("error"),
                ip=client_ip,
            )
        raise_for_error(result)

        turn = result.value
        response = SendMessageResponse(
            conversation=turn.conversation,
            user_message=turn.user_message,
            assistant_message=turn.assistant_message,
            generated_content=turn.generated_content,
        )
        return response, turn.created
