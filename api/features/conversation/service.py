"""Conversation service: ownership-guarded CRUD and the turn write path.

``send_message`` stores the user message, calls the generation webhook and
stores the assistant reply inside one unit of work. If the webhook fails the
unit of work is left uncommitted and rolls back, so a failed attempt leaves no
user message behind and no newly created conversation either.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, List, Optional

import structlog

from api.features.content.client import (
    GenerationClient,
    GenerationConnectionFailure,
    GenerationHttpFailure,
)
from api.features.conversation.access import can_access
from api.features.conversation.dtos import ConversationDTO, MessageDTO
from api.features.conversation.entities.conversation import Conversation
from api.features.conversation.entities.message import Message, MessageRole
from api.shared.entities.base import utcnow
from api.shared.result import ErrorKind, Result
from api.shared.unit_of_work import UnitOfWork

logger = structlog.get_logger("contentgen.conversation.service")

DEFAULT_TITLE_LENGTH = 50


@dataclass(frozen=True)
class SendMessageCommand:
    message: str
    details: str
    theme: str
    platform: str
    conversation_id: Optional[str] = None
    title: Optional[str] = None


@dataclass(frozen=True)
class TurnResult:
    conversation: ConversationDTO
    user_message: MessageDTO
    assistant_message: MessageDTO
    generated_content: Any
    created: bool


def _not_found(conversation_id: str) -> Result[Any]:
    return Result.failure(
        ErrorKind.NOT_FOUND,
        "Conversation not found",
        details={"resource": "Conversation", "identifier": conversation_id},
    )


def _forbidden(action: str) -> Result[Any]:
    return Result.failure(
        ErrorKind.FORBIDDEN, f"Unauthorized to {action} this conversation"
    )


class ConversationService:
    """Service for conversation and message operations."""

    def __init__(self, generation_client: GenerationClient):
        self.generation_client = generation_client

    async def list_conversations(
        self, uow: UnitOfWork, caller_id: Optional[str]
    ) -> Result[List[ConversationDTO]]:
        async with uow:
            conversations = await uow.conversations.list_for_owner(caller_id)
            latest = await uow.messages.latest_for_conversations(
                [c.id for c in conversations]
            )
            return Result.success(
                [
                    ConversationDTO.from_entity(c, latest_message=latest.get(c.id))
                    for c in conversations
                ]
            )

    async def get_conversation(
        self, uow: UnitOfWork, caller_id: Optional[str], conversation_id: str
    ) -> Result[ConversationDTO]:
        async with uow:
            conversation = await uow.conversations.get_by_id(conversation_id)
            if conversation is None:
                return _not_found(conversation_id)
            if not can_access(caller_id, conversation):
                return _forbidden("access")

            messages = await uow.messages.list_for_conversation(conversation.id)
            return Result.success(
                ConversationDTO.from_entity(conversation, messages=messages)
            )

    async def update_conversation(
        self,
        uow: UnitOfWork,
        caller_id: Optional[str],
        conversation_id: str,
        title: str,
    ) -> Result[ConversationDTO]:
        async with uow:
            conversation = await uow.conversations.get_by_id(conversation_id)
            if conversation is None:
                return _not_found(conversation_id)
            if not can_access(caller_id, conversation):
                return _forbidden("update")

            conversation = await uow.conversations.update(conversation, title=title)
            dto = ConversationDTO.from_entity(conversation)
            await uow.commit()

        logger.info("Conversation renamed", conversation_id=conversation_id)
        return Result.success(dto)

    async def delete_conversation(
        self, uow: UnitOfWork, caller_id: Optional[str], conversation_id: str
    ) -> Result[None]:
        async with uow:
            conversation = await uow.conversations.get_by_id(conversation_id)
            if conversation is None:
                return _not_found(conversation_id)
            if not can_access(caller_id, conversation):
                return _forbidden("delete")

            await uow.conversations.delete_with_messages(conversation_id)
            await uow.commit()

        logger.info("Conversation deleted", conversation_id=conversation_id)
        return Result.success(None)

    async def send_message(
        self,
        uow: UnitOfWork,
        caller_id: Optional[str],
        command: SendMessageCommand,
    ) -> Result[TurnResult]:
        """Append one full turn (user + assistant) or nothing."""
        async with uow:
            try:
                return await self._send_message(uow, caller_id, command)
            except Exception as e:
                logger.exception(
                    "Failed to send message",
                    conversation_id=command.conversation_id,
                    error=str(e),
                )
                return Result.failure(
                    ErrorKind.INTERNAL_FAILURE,
                    "An error occurred while processing message",
                    details={"error": str(e)},
                )

    async def _send_message(
        self,
        uow: UnitOfWork,
        caller_id: Optional[str],
        command: SendMessageCommand,
    ) -> Result[TurnResult]:
        created = False
        if command.conversation_id:
            conversation = await uow.conversations.get_by_id(command.conversation_id)
            if conversation is None:
                return _not_found(command.conversation_id)
            if not can_access(caller_id, conversation):
                return _forbidden("access")
        else:
            conversation = await uow.conversations.create(
                Conversation(
                    user_id=caller_id,
                    title=command.title or command.message[:DEFAULT_TITLE_LENGTH],
                    extra_metadata={
                        "platform": command.platform,
                        "theme": command.theme,
                        "created_at": utcnow().isoformat(),
                    },
                )
            )
            created = True

        user_message = await uow.messages.create(
            Message(
                conversation_id=conversation.id,
                role=MessageRole.USER.value,
                content=command.message,
                extra_metadata={
                    "details": command.details,
                    "platform": command.platform,
                    "theme": command.theme,
                },
            )
        )

        generation = await self.generation_client.generate(
            details=command.details,
            theme=command.theme,
            platform=command.platform,
        )

        if isinstance(generation, GenerationHttpFailure):
            logger.warning(
                "Turn discarded after generation failure",
                conversation_id=conversation.id,
                new_conversation=created,
                status=generation.status_code,
            )
            return Result.failure(
                ErrorKind.UPSTREAM_HTTP_FAILURE,
                "Failed to generate content",
                status_code=generation.status_code,
                details={"error": generation.raw_body, "status": generation.status_code},
            )
        if isinstance(generation, GenerationConnectionFailure):
            logger.warning(
                "Turn discarded, generation service unreachable",
                conversation_id=conversation.id,
                new_conversation=created,
            )
            return Result.failure(
                ErrorKind.UPSTREAM_UNREACHABLE,
                "Connection timeout or network error",
                details={"error": str(generation.cause)},
            )

        assistant_message = await uow.messages.create(
            Message(
                conversation_id=conversation.id,
                role=MessageRole.ASSISTANT.value,
                content=json.dumps(generation.json_body),
                extra_metadata={
                    "generated_at": utcnow().isoformat(),
                    "response_status": generation.status_code,
                },
            )
        )
        conversation = await uow.conversations.touch(conversation, utcnow())
        messages = await uow.messages.list_for_conversation(conversation.id)

        turn = TurnResult(
            conversation=ConversationDTO.from_entity(conversation, messages=messages),
            user_message=MessageDTO.from_entity(user_message),
            assistant_message=MessageDTO.from_entity(assistant_message),
            generated_content=generation.json_body,
            created=created,
        )
        await uow.commit()

        logger.info(
            "Turn stored",
            conversation_id=conversation.id,
            new_conversation=created,
        )
        return Result.success(turn)
