"""Router for the Auth feature."""
from dependency_injector.wiring import Provide, inject
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from api.features.auth.controller import AuthController
from api.features.auth.dependencies import get_current_principal
from api.features.auth.dtos import LoginRequest, MeResponse, RegisterRequest, TokenResponse
from api.features.auth.service import Principal
from api.shared.db import get_db_session
from api.shared.response import ResponseModel
from di.container import ApplicationContainer as DependencyContainer

router = APIRouter()


@router.post(
    "/register",
    response_model=ResponseModel[TokenResponse],
    status_code=status.HTTP_201_CREATED,
)
@inject
async def register(
    request: RegisterRequest,
    controller: AuthController = Depends(
        Provide[DependencyContainer.controllers.auth_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    result = await controller.register(request, db_session=db_session)
    return ResponseModel.success(data=result, message="User registered successfully")


@router.post("/login", response_model=ResponseModel[TokenResponse])
@inject
async def login(
    request: LoginRequest,
    controller: AuthController = Depends(
        Provide[DependencyContainer.controllers.auth_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    result = await controller.login(request, db_session=db_session)
    return ResponseModel.success(data=result, message="Login successful")


@router.post("/logout", response_model=ResponseModel[None])
@inject
async def logout(
    principal: Principal = Depends(get_current_principal),
    controller: AuthController = Depends(
        Provide[DependencyContainer.controllers.auth_controller]
    ),
    db_session: AsyncSession = Depends(get_db_session),
):
    await controller.logout(principal, db_session=db_session)
    return ResponseModel.success(message="Logged out successfully")


@router.get("/me", response_model=ResponseModel[MeResponse])
@inject
async def me(
    principal: Principal = Depends(get_current_principal),
    controller: AuthController = Depends(
        Provide[DependencyContainer.controllers.auth_controller]
    ),
):
    result = await controller.me(principal)
    return ResponseModel.success(data=result, message="Authenticated user")
