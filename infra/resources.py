"""Infrastructure resources: DB, Redis.

This module is part of the infra layer and must not import from application features.
"""
from typing import Optional

import redis.asyncio as redis
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseResource:
    """Database resource for dependency injection."""

    def __init__(self, database_url: str):
        self.database_url = database_url
        self.engine = None
        self.session_factory = None

    async def init(self):
        """Initialize database connection."""
        if self.engine is not None:
            return self

        if self.database_url.startswith("sqlite"):
            self.engine = create_async_engine(self.database_url, echo=False)
            # ON DELETE CASCADE is a no-op in SQLite unless enabled per connection
            event.listen(
                self.engine.sync_engine, "connect", _enable_sqlite_foreign_keys
            )
        else:
            self.engine = create_async_engine(
                self.database_url,
                echo=False,
                pool_pre_ping=True,
                pool_recycle=3600,
            )
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return self

    def get_session(self) -> AsyncSession:
        """Get database session (synchronous accessor)."""
        if self.session_factory is None:
            raise RuntimeError("Database not initialized. Call init() first.")
        return self.session_factory()

    async def shutdown(self):
        """Shutdown database connection."""
        if self.engine:
            await self.engine.dispose()
            self.engine = None
            self.session_factory = None


class RedisResource:
    """Redis resource for dependency injection."""

    def __init__(self, redis_url: str, client: Optional[redis.Redis] = None):
        self.redis_url = redis_url
        self.client = client

    async def init(self):
        """Initialize Redis client."""
        if self.client is None:
            self.client = redis.from_url(self.redis_url, decode_responses=True)
        return self

    async def connect(self):
        """Verify the connection is usable."""
        assert self.client is not None, "Redis client not initialized"
        await self.client.ping()

    async def disconnect(self):
        """Disconnect from Redis."""
        if self.client is not None:
            await self.client.aclose()
            self.client = None
