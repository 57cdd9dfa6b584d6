"""Unit of work over a single AsyncSession transaction.

Repositories handed out by the unit of work share its session, so every write
they perform lands in the same transaction. Leaving the ``async with`` block
without calling :meth:`UnitOfWork.commit` rolls everything back, whether the
block exited normally, returned early or raised.
"""
from __future__ import annotations

from types import TracebackType
from typing import Optional, Type

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.auth.repository import AccessTokenRepository, UserRepository
from api.features.conversation.repository import (
    ConversationRepository,
    MessageRepository,
)

logger = structlog.get_logger(__name__)


class UnitOfWork:
    conversations: ConversationRepository
    messages: MessageRepository
    users: UserRepository
    access_tokens: AccessTokenRepository

    def __init__(self, session: AsyncSession):
        self.session = session
        self._committed = False

    async def __aenter__(self) -> "UnitOfWork":
        self._committed = False
        self.conversations = ConversationRepository(self.session)
        self.messages = MessageRepository(self.session)
        self.users = UserRepository(self.session)
        self.access_tokens = AccessTokenRepository(self.session)
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if not self._committed:
            await self.rollback()

    async def commit(self) -> None:
        await self.session.commit()
        self._committed = True

    async def rollback(self) -> None:
        if self.session.in_transaction():
            logger.debug("Rolling back unit of work")
        await self.session.rollback()
