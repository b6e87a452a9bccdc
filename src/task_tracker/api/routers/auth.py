"""Routes handling user authentication flows."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm

from ...core.config import Settings
from ...deps import (
    AccessTokenDependency,
    CurrentUserDependency,
    DatabaseSessionDependency,
    SettingsDependency,
)
from ...models import User
from ...schemas import (
    AuthResponse,
    AuthTokens,
    Envelope,
    MessageResponse,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    UserPublic,
)
from ...services import AuthService, TokenPair, UserService

router = APIRouter(prefix="/auth", tags=["auth"])


def _build_tokens(token_pair: TokenPair, settings: Settings) -> AuthTokens:
    return AuthTokens(
        access_token=token_pair.access.token,
        refresh_token=token_pair.refresh.token,
        expires_in=settings.access_token_expire_minutes * 60,
        refresh_expires_in=settings.refresh_token_expire_minutes * 60,
    )


def _map_user(user: User) -> UserPublic:
    return UserPublic.model_validate(user)


@router.post(
    "/register",
    response_model=Envelope[AuthResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(
    payload: RegisterRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> Envelope[AuthResponse]:
    service = AuthService(session, settings)
    user = await service.register_user(
        email=payload.email,
        username=payload.username,
        password=payload.password,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    token_pair = service.build_token_pair(user)
    return Envelope[AuthResponse](
        data=AuthResponse(user=_map_user(user), tokens=_build_tokens(token_pair, settings)),
        message="User registered successfully",
    )


@router.post(
    "/login",
    response_model=Envelope[AuthResponse],
    summary="Authenticate using email and password",
)
async def login(
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()],
) -> Envelope[AuthResponse]:
    service = AuthService(session, settings)
    user = await service.authenticate_user(form_data.username, form_data.password)
    token_pair = service.build_token_pair(user)
    return Envelope[AuthResponse](
        data=AuthResponse(user=_map_user(user), tokens=_build_tokens(token_pair, settings)),
        message="Login successful",
    )


@router.post(
    "/refresh",
    response_model=Envelope[AuthResponse],
    summary="Refresh access credentials using a refresh token",
)
async def refresh_tokens(
    payload: RefreshRequest,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
) -> Envelope[AuthResponse]:
    service = AuthService(session, settings)
    user, token_pair = await service.refresh_from_token(payload.refresh_token)
    return Envelope[AuthResponse](
        data=AuthResponse(user=_map_user(user), tokens=_build_tokens(token_pair, settings))
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Revoke the access token used for this request",
)
async def logout(
    token: AccessTokenDependency,
    session: DatabaseSessionDependency,
    settings: SettingsDependency,
    current_user: CurrentUserDependency,
) -> MessageResponse:
    AuthService(session, settings).logout(token)
    return MessageResponse(message="Logged out successfully")


@router.get(
    "/profile",
    response_model=Envelope[UserPublic],
    summary="Return the authenticated user's profile",
)
async def read_profile(current_user: CurrentUserDependency) -> Envelope[UserPublic]:
    return Envelope[UserPublic](data=_map_user(current_user))


@router.put(
    "/profile",
    response_model=Envelope[UserPublic],
    summary="Update the authenticated user's profile",
)
async def update_profile(
    payload: ProfileUpdate,
    session: DatabaseSessionDependency,
    current_user: CurrentUserDependency,
) -> Envelope[UserPublic]:
    user = await UserService(session).update_user(
        current_user.id,
        first_name=payload.first_name,
        last_name=payload.last_name,
    )
    return Envelope[UserPublic](data=_map_user(user), message="Profile updated successfully")
