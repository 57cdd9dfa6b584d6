"""Conversation entity."""
from typing import Any, Dict, Optional

from sqlalchemy import JSON, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from api.shared.entities.base import BaseEntity


class Conversation(BaseEntity):
    """Thread of turns, optionally owned by a user."""

    __tablename__ = "conversations"

    user_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    # NOTE: attribute name 'metadata' is reserved by SQLAlchemy; keep column name but change attribute
    extra_metadata: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, name="metadata")

    __table_args__ = (
        Index("ix_conversations_user_id", "user_id"),
        Index("ix_conversations_updated_at", "updated_at"),
    )

    def is_ownerless(self) -> bool:
        return self.user_id is None
