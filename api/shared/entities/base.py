"""Shared base entity for all database models."""
from datetime import datetime, timezone

from sqlalchemy import DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from ulid import ULID


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_ulid() -> str:
    return str(ULID())


class Base(DeclarativeBase):
    """Declarative registry; owns the shared ``MetaData``."""


class BaseEntity(Base):
    """Base class for all database entities.

    Identifiers are ULIDs so they sort by creation time. Timestamps are set in
    Python rather than by the server: rows written in one transaction would
    otherwise share the transaction start time and lose their write order.
    """

    __abstract__ = True

    id: Mapped[str] = mapped_column(String(26), primary_key=True, default=new_ulid)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    def __repr__(self) -> str:
        """String representation of the entity."""
        return f"<{self.__class__.__name__}(id={self.id})>"
