"""Controller for the Auth feature."""
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.auth.dtos import LoginRequest, MeResponse, RegisterRequest, TokenResponse
from api.features.auth.service import AuthService, IssuedToken, Principal
from api.shared.exceptions import UnauthorizedError
from api.shared.result import raise_for_error
from api.shared.unit_of_work import UnitOfWork


def _token_response(issued: IssuedToken) -> TokenResponse:
    return TokenResponse(
        user=issued.user,
        access_token=issued.access_token,
        token_type="Bearer",
        expires_at=issued.expires_at,
    )


class AuthController:
    """Controller handling registration and token lifecycle."""

    def __init__(self, auth_service: AuthService):
        self.auth_service = auth_service

    async def register(
        self, request: RegisterRequest, *, db_session: AsyncSession
    ) -> TokenResponse:
        result = await self.auth_service.register(UnitOfWork(db_session), request)
        raise_for_error(result)
        return _token_response(result.value)

    async def login(
        self, request: LoginRequest, *, db_session: AsyncSession
    ) -> TokenResponse:
        issued = await self.auth_service.login(
            UnitOfWork(db_session), request.email, request.password
        )
        if issued is None:
            raise UnauthorizedError()
        return _token_response(issued)

    async def logout(self, principal: Principal, *, db_session: AsyncSession) -> None:
        await self.auth_service.logout(UnitOfWork(db_session), principal.token_id)

    async def me(self, principal: Principal) -> MeResponse:
        return MeResponse(user=principal.user)
