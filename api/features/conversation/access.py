"""Ownership check applied before any conversation read or write."""
from typing import Optional

from api.features.conversation.entities.conversation import Conversation


def can_access(caller_id: Optional[str], conversation: Conversation) -> bool:
    """Owned conversations belong to their owner only; ownerless ones to anonymous callers only."""
    if conversation.is_ownerless():
        return caller_id is None
    return caller_id == conversation.user_id
