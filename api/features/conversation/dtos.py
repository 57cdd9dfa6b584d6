"""DTOs for the Conversation feature."""
import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import Field

from api.features.conversation.entities.conversation import Conversation
from api.features.conversation.entities.message import Message, MessageRole
from api.shared.dtos import BaseDTO


class SendMessageRequest(BaseDTO):
    """Append a turn to a conversation, creating it when no id is given."""

    conversation_id: Optional[str] = Field(
        default=None, description="Existing conversation; omit to start a new one"
    )
    message: str = Field(min_length=1, description="User message")
    details: str = Field(min_length=1, description="Generation details")
    theme: str = Field(min_length=1, description="Generation theme")
    platform: str = Field(min_length=1, description="Target platform")
    title: Optional[str] = Field(
        default=None, max_length=255, description="Title for a new conversation"
    )


class UpdateConversationRequest(BaseDTO):
    title: str = Field(min_length=1, max_length=255, description="New title")


class MessageDTO(BaseDTO):
    """Conversation message DTO."""

    id: str = Field(description="Message identifier")
    conversation_id: str = Field(description="Owning conversation")
    role: str = Field(description="Message role: user or assistant")
    content: str = Field(description="Message content")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Message metadata")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    @classmethod
    def from_entity(cls, entity: Message) -> "MessageDTO":
        return cls(
            id=entity.id,
            conversation_id=entity.conversation_id,
            role=MessageRole(entity.role).value,
            content=entity.content,
            metadata=entity.extra_metadata or {},
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    def decoded_content(self) -> Any:
        """Assistant messages hold the webhook's JSON payload as text."""
        return json.loads(self.content)


class ConversationDTO(BaseDTO):
    """Conversation DTO."""

    id: str = Field(description="Conversation identifier")
    user_id: Optional[str] = Field(default=None, description="Owner, absent when anonymous")
    title: str = Field(description="Conversation title")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Conversation metadata")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")
    messages: Optional[List[MessageDTO]] = Field(
        default=None, description="Messages in chronological order, when loaded"
    )
    latest_message: Optional[MessageDTO] = Field(
        default=None, description="Most recent message, in listings"
    )

    @classmethod
    def from_entity(
        cls,
        entity: Conversation,
        *,
        messages: Optional[List[Message]] = None,
        latest_message: Optional[Message] = None,
    ) -> "ConversationDTO":
        return cls(
            id=entity.id,
            user_id=entity.user_id,
            title=entity.title,
            metadata=entity.extra_metadata or {},
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            messages=(
                [MessageDTO.from_entity(m) for m in messages]
                if messages is not None
                else None
            ),
            latest_message=(
                MessageDTO.from_entity(latest_message) if latest_message else None
            ),
        )


class ConversationListResponse(BaseDTO):
    """List conversations response."""

    items: List[ConversationDTO] = Field(description="Conversations, most recent first")
    total: int = Field(description="Number of conversations returned")


class SendMessageResponse(BaseDTO):
    """Result of one completed turn."""

    conversation: ConversationDTO = Field(description="Conversation with all messages")
    user_message: MessageDTO = Field(description="Stored user message")
    assistant_message: MessageDTO = Field(description="Stored assistant message")
    generated_content: Any = Field(default=None, description="Webhook JSON payload")
