"""Repositories for conversation persistence operations."""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import delete, func, select

from api.features.conversation.entities.conversation import Conversation
from api.features.conversation.entities.message import Message
from api.shared.base import BaseRepository


class ConversationRepository(BaseRepository[Conversation]):
    model = Conversation

    async def list_for_owner(self, user_id: Optional[str]) -> List[Conversation]:
        """Conversations owned by ``user_id`` (ownerless ones for ``None``), most recent first."""
        owner_filter = (
            Conversation.user_id.is_(None)
            if user_id is None
            else Conversation.user_id == user_id
        )
        stmt = (
            select(Conversation)
            .where(owner_filter)
            .order_by(Conversation.updated_at.desc(), Conversation.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def touch(self, conversation: Conversation, at: datetime) -> Conversation:
        return await self.update(conversation, updated_at=at)

    async def delete_with_messages(self, conversation_id: str) -> bool:
        # Explicit so the cascade does not depend on the backend enforcing FKs
        await self.session.execute(
            delete(Message).where(Message.conversation_id == conversation_id)
        )
        return await self.delete(conversation_id)


class MessageRepository(BaseRepository[Message]):
    model = Message

    async def list_for_conversation(self, conversation_id: str) -> List[Message]:
        """All messages of a conversation in chronological order."""
        stmt = (
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.created_at.asc(), Message.id.asc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def latest_for_conversations(
        self, conversation_ids: List[str]
    ) -> Dict[str, Message]:
        """Most recent message per conversation, keyed by conversation id."""
        if not conversation_ids:
            return {}

        ranked = (
            select(
                Message.id.label("id"),
                func.row_number()
                .over(
                    partition_by=Message.conversation_id,
                    order_by=(Message.created_at.desc(), Message.id.desc()),
                )
                .label("rn"),
            )
            .where(Message.conversation_id.in_(conversation_ids))
            .subquery()
        )
        stmt = select(Message).join(ranked, Message.id == ranked.c.id).where(
            ranked.c.rn == 1
        )
        result = await self.session.execute(stmt)
        return {m.conversation_id: m for m in result.scalars().all()}
