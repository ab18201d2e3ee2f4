"""
VidTube API — User routes: registration, sessions and profile.
"""
from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import describe_form, get_current_user, read_upload
from vidtube.core.config import get_settings
from vidtube.core.database import get_db
from vidtube.models.models import User
from vidtube.schemas.schemas import (
    ApiResponse,
    ChangePasswordRequest,
    LoginRequest,
    LoginResult,
    RefreshTokenRequest,
    TokenPairSchema,
    UpdateProfileRequest,
    UserSchema,
)
from vidtube.services.auth.token_service import TokenPair
from vidtube.services.auth.user_service import Registration, user_service
from vidtube.services.media.media_store import MediaStore, get_media_store

settings = get_settings()
router = APIRouter(prefix="/users", tags=["Users"])


def set_session_cookies(response: Response, pair: TokenPair) -> None:
    response.set_cookie(
        settings.access_cookie_name,
        pair.access_token,
        httponly=True,
        secure=settings.cookie_secure,
        path="/",
    )
    response.set_cookie(
        settings.refresh_cookie_name,
        pair.refresh_token,
        max_age=settings.refresh_cookie_max_age_days * 24 * 60 * 60,
        httponly=True,
        secure=settings.cookie_secure,
        samesite="strict",
        path="/",
    )


def clear_session_cookies(response: Response) -> None:
    response.delete_cookie(
        settings.access_cookie_name, path="/", httponly=True, secure=settings.cookie_secure,
    )
    response.delete_cookie(
        settings.refresh_cookie_name, path="/", httponly=True,
        secure=settings.cookie_secure, samesite="strict",
    )


# ── Registration & sessions ──────────────────────────────────────────────

@router.post("/register", status_code=201)
async def register(
    request: Request,
    db: AsyncSession = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    """Create an account from a multipart form (``avatar`` file required)."""
    form = await request.form()
    received_files, received_fields = describe_form(form)

    def text(name: str) -> Optional[str]:
        value = form.get(name)
        return value if isinstance(value, str) else None

    user = await user_service.register(
        db,
        media,
        Registration(
            fullname=text("fullname"),
            username=text("username"),
            email=text("email"),
            password=text("password"),
        ),
        avatar=await read_upload(form.get("avatar")),
        cover_image=await read_upload(form.get("coverImage")),
        received_files=received_files,
        received_fields=received_fields,
    )
    return ApiResponse(
        status_code=201,
        data=UserSchema.model_validate(user),
        message="User registered successfully",
    )


@router.post("/login")
async def login(payload: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)):
    user, pair = await user_service.login(
        db, payload.password, username=payload.username, email=payload.email,
    )
    set_session_cookies(response, pair)
    return ApiResponse(
        data=LoginResult(
            user=UserSchema.model_validate(user),
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
        ),
        message="User logged in successfully",
    )


@router.post("/logout")
async def logout(
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.logout(db, user)
    clear_session_cookies(response)
    return ApiResponse(data={}, message="User logged out successfully")


@router.post("/refresh-token")
async def refresh_token(
    request: Request,
    response: Response,
    payload: Optional[RefreshTokenRequest] = Body(None),
    db: AsyncSession = Depends(get_db),
):
    """Rotate the session: the presented refresh token is spent either way."""
    presented = request.cookies.get(settings.refresh_cookie_name) or (
        payload.refresh_token if payload else None
    )
    pair = await user_service.refresh(db, presented)
    set_session_cookies(response, pair)
    return ApiResponse(
        data=TokenPairSchema(access_token=pair.access_token, refresh_token=pair.refresh_token),
        message="Access token refreshed",
    )


# ── Account ──────────────────────────────────────────────────────────────

@router.post("/change-password")
async def change_password(
    payload: ChangePasswordRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await user_service.change_password(
        db, user, payload.old_password, payload.new_password, payload.confirm_password,
    )
    return ApiResponse(data={}, message="Password changed successfully")


@router.get("/me")
async def current_user(user: User = Depends(get_current_user)):
    return ApiResponse(data=UserSchema.model_validate(user), message="Current user fetched successfully")


@router.patch("/update-profile")
async def update_profile(
    payload: UpdateProfileRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    user = await user_service.update_profile(db, user, fullname=payload.fullname, email=payload.email)
    return ApiResponse(data=UserSchema.model_validate(user), message="Profile updated successfully")


@router.patch("/avatar")
async def update_avatar(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    form = await request.form()
    user = await user_service.update_avatar(db, media, user, await read_upload(form.get("avatar")))
    return ApiResponse(data=UserSchema.model_validate(user), message="Avatar updated successfully")


@router.patch("/cover-image")
async def update_cover_image(
    request: Request,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    media: MediaStore = Depends(get_media_store),
):
    form = await request.form()
    user = await user_service.update_cover_image(
        db, media, user, await read_upload(form.get("coverImage")),
    )
    return ApiResponse(data=UserSchema.model_validate(user), message="Cover image updated successfully")


@router.get("/channel/{username}")
async def channel_profile(
    username: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    profile = await user_service.channel_profile(db, user.id, username)
    return ApiResponse(data=profile, message="Channel fetched successfully")
