"""Authentication routes."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from taskboard.core.responses import created_response, success_response
from taskboard.routes.dependencies import get_auth_service, get_authenticated_principal
from taskboard.schemas.auth import AuthPrincipal, AuthSession, CurrentUser, LoginRequest, RegisterRequest
from taskboard.schemas.envelope import Envelope, ErrorEnvelope, MessageEnvelope
from taskboard.services.auth import AuthService

router = APIRouter(tags=["Auth"])


# Password hashing is CPU bound, so register and login run in the threadpool.
@router.post(
    "/register",
    response_model=Envelope[AuthSession],
    status_code=status.HTTP_201_CREATED,
    responses={422: {"model": ErrorEnvelope}},
)
def register(
    payload: RegisterRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    session = service.register(
        name=payload.name,
        email=payload.email,
        password=payload.password,
        password_confirmation=payload.password_confirmation,
    )
    return created_response(session, "User registered successfully")


@router.post(
    "/login",
    response_model=Envelope[AuthSession],
    responses={401: {"model": ErrorEnvelope}, 422: {"model": ErrorEnvelope}},
)
def login(
    payload: LoginRequest,
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    session = service.login(email=payload.email, password=payload.password)
    return success_response(session, "Login successful")


@router.post(
    "/logout",
    response_model=MessageEnvelope,
    responses={401: {"model": ErrorEnvelope}},
)
async def logout(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    service.logout(principal=principal)
    return success_response(message="Logged out successfully")


@router.get(
    "/me",
    response_model=Envelope[CurrentUser],
    responses={401: {"model": ErrorEnvelope}},
)
async def me(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[AuthService, Depends(get_auth_service)],
) -> JSONResponse:
    return success_response(service.current_user(principal=principal), "User details retrieved successfully")
