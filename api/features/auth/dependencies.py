"""FastAPI dependencies resolving the bearer token to a caller."""
from typing import Optional

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.auth.service import AuthService, Principal
from api.shared.db import get_db_session
from api.shared.exceptions import UnauthorizedError
from api.shared.unit_of_work import UnitOfWork
from di.container import ApplicationContainer

bearer_scheme = HTTPBearer(auto_error=False)


@inject
def get_auth_service(
    service: AuthService = Depends(Provide[ApplicationContainer.services.auth_service]),
) -> AuthService:
    return service


async def get_optional_principal(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db_session: AsyncSession = Depends(get_db_session),
    auth_service: AuthService = Depends(get_auth_service),
) -> Optional[Principal]:
    """Anonymous callers resolve to ``None``; a bad token is still rejected."""
    if credentials is None:
        return None
    principal = await auth_service.authenticate(
        UnitOfWork(db_session), credentials.credentials
    )
    if principal is None:
        raise UnauthorizedError()
    return principal


async def get_current_principal(
    principal: Optional[Principal] = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise UnauthorizedError()
    return principal
