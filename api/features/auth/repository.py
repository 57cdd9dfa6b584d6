"""Repositories for users and their access tokens."""
from datetime import datetime
from typing import Optional

from sqlalchemy import update

from api.features.auth.entities.user import AccessToken, User
from api.shared.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model = User

    async def get_by_email(self, email: str) -> Optional[User]:
        entities = await self.get_by_field("email", email.lower(), limit=1)
        return entities[0] if entities else None


class AccessTokenRepository(BaseRepository[AccessToken]):
    model = AccessToken

    async def revoke(self, token_id: str, revoked_at: datetime) -> bool:
        stmt = (
            update(AccessToken)
            .where(AccessToken.id == token_id, AccessToken.revoked_at.is_(None))
            .values(revoked_at=revoked_at)
        )
        result = await self.session.execute(stmt)
        await self.session.flush()
        return result.rowcount > 0
