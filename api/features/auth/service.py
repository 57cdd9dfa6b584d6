"""Service layer for the Auth feature."""
import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import structlog
from jose import JWTError, jwt

from api.features.auth.dtos import RegisterRequest, UserDTO
from api.features.auth.entities.user import AccessToken, User, UserRole
from api.shared.entities.base import new_ulid, utcnow
from api.shared.result import ErrorKind, Result
from api.shared.unit_of_work import UnitOfWork

logger = structlog.get_logger("contentgen.auth.service")

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


@dataclass(frozen=True)
class IssuedToken:
    user: UserDTO
    access_token: str
    expires_at: datetime


@dataclass(frozen=True)
class Principal:
    """Authenticated caller resolved from a bearer token."""

    user: UserDTO
    token_id: str


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes even for timezone-aware columns
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AuthService:
    """Registers users and issues, resolves and revokes bearer tokens."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        token_ttl_minutes: int = 60 * 24 * 7,
        bcrypt_rounds: int = 12,
    ):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.token_ttl = timedelta(minutes=token_ttl_minutes)
        self.bcrypt_rounds = bcrypt_rounds

    async def hash_password(self, password: str) -> str:
        salt = bcrypt.gensalt(rounds=self.bcrypt_rounds)
        hashed = await asyncio.to_thread(
            bcrypt.hashpw, password.encode("utf-8")[:_BCRYPT_MAX_BYTES], salt
        )
        return hashed.decode("utf-8")

    async def verify_password(self, password: str, password_hash: str) -> bool:
        return await asyncio.to_thread(
            bcrypt.checkpw,
            password.encode("utf-8")[:_BCRYPT_MAX_BYTES],
            password_hash.encode("utf-8"),
        )

    async def register(
        self, uow: UnitOfWork, request: RegisterRequest
    ) -> Result[IssuedToken]:
        async with uow:
            if await uow.users.get_by_email(request.email):
                return Result.failure(
                    ErrorKind.VALIDATION_FAILED,
                    "Validation failed",
                    details={"errors": {"email": ["The email has already been taken."]}},
                )

            user = await uow.users.create(
                User(
                    name=request.name,
                    email=request.email.lower(),
                    password_hash=await self.hash_password(request.password),
                    role=UserRole.USER.value,
                )
            )
            issued = await self._issue_token(uow, user)
            await uow.commit()

        logger.info("User registered", user_id=issued.user.id)
        return Result.success(issued)

    async def login(
        self, uow: UnitOfWork, email: str, password: str
    ) -> Optional[IssuedToken]:
        """Return a new token, or ``None`` when the credentials do not match."""
        async with uow:
            user = await uow.users.get_by_email(email)
            if user is None or not await self.verify_password(
                password, user.password_hash
            ):
                logger.info("Login rejected", email=email.lower())
                return None

            issued = await self._issue_token(uow, user)
            await uow.commit()

        logger.info("User logged in", user_id=issued.user.id)
        return issued

    async def logout(self, uow: UnitOfWork, token_id: str) -> bool:
        async with uow:
            revoked = await uow.access_tokens.revoke(token_id, utcnow())
            await uow.commit()
        return revoked

    async def authenticate(self, uow: UnitOfWork, token: str) -> Optional[Principal]:
        """Resolve a bearer token to its user, or ``None`` if it is not usable."""
        try:
            claims = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.info("Bearer token rejected", reason=str(e))
            return None

        token_id = claims.get("jti")
        user_id = claims.get("sub")
        if not token_id or not user_id:
            return None

        async with uow:
            access_token = await uow.access_tokens.get_by_id(token_id)
            if (
                access_token is None
                or access_token.user_id != user_id
                or access_token.is_revoked()
                or _as_utc(access_token.expires_at) <= utcnow()
            ):
                return None
            user = await uow.users.get_by_id(user_id)
            if user is None:
                return None
            return Principal(user=UserDTO.model_validate(user), token_id=token_id)

    async def _issue_token(self, uow: UnitOfWork, user: User) -> IssuedToken:
        now = utcnow()
        expires_at = now + self.token_ttl
        access_token = await uow.access_tokens.create(
            AccessToken(
                id=new_ulid(),
                user_id=user.id,
                name="auth_token",
                expires_at=expires_at,
            )
        )
        encoded = jwt.encode(
            {
                "sub": user.id,
                "jti": access_token.id,
                "iat": int(now.timestamp()),
                "exp": int(expires_at.timestamp()),
            },
            self.secret_key,
            algorithm=self.algorithm,
        )
        return IssuedToken(
            user=UserDTO.model_validate(user),
            access_token=encoded,
            expires_at=expires_at,
        )
