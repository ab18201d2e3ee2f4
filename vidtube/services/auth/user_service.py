"""
VidTube User Service — registration, login/logout, session refresh and
profile management.

Session state machine: a client is Anonymous until ``login`` hands it an
access/refresh token pair, and Authenticated until ``logout`` revokes the
stored refresh token. ``refresh`` keeps it Authenticated by rotating the pair.
"""
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.config import get_settings
from vidtube.core.errors import BadRequestError, ConflictError, NotFoundError, UnauthorizedError
from vidtube.models.models import User
from vidtube.schemas.schemas import ChannelProfile
from vidtube.services.auth.password_hasher import MAX_PASSWORD_BYTES, password_too_long
from vidtube.services.auth.session_store import SessionStore, session_store
from vidtube.services.auth.token_service import TokenPair
from vidtube.services.media.media_store import IncomingFile, MediaStore, MediaUploadError
from vidtube.services.relationships.subscription_service import subscription_service

logger = logging.getLogger(__name__)
settings = get_settings()

EMAIL_RE = re.compile(r"^[\w.-]+@([\w-]+\.)+[\w-]{2,4}$", re.ASCII)
USERNAME_RE = re.compile(r"^[a-zA-Z0-9-]+$")


@dataclass
class Registration:
    fullname: Optional[str] = None
    username: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None


def validate_email(email: str) -> str:
    email = email.strip()
    if not EMAIL_RE.match(email):
        raise BadRequestError("Invalid email format")
    return email.lower()


def validate_password(password: str) -> None:
    if len(password) < settings.password_min_length:
        raise BadRequestError(
            f"Password must be at least {settings.password_min_length} characters long"
        )
    if password_too_long(password):
        raise BadRequestError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")


class UserService:
    def __init__(self, sessions: SessionStore):
        self.sessions = sessions

    # ── Registration ─────────────────────────────────────────────────────

    async def register(
        self,
        db: AsyncSession,
        media: MediaStore,
        form: Registration,
        avatar: Optional[IncomingFile],
        cover_image: Optional[IncomingFile] = None,
        received_files: Iterable[str] = (),
        received_fields: Iterable[str] = (),
    ) -> User:
        values = [form.fullname, form.username, form.email, form.password]
        if any(v is None or v.strip() == "" for v in values):
            raise BadRequestError("All fields are required")

        validate_password(form.password)
        email = validate_email(form.email)
        username = form.username.strip()
        if not USERNAME_RE.match(username):
            raise BadRequestError("Username can only contain letters, numbers and hyphens")
        username = username.lower()

        existing = await db.scalar(
            select(User.id).where(or_(User.username == username, User.email == email))
        )
        if existing is not None:
            raise ConflictError("User with this username or email already exists")

        if avatar is None:
            raise BadRequestError(
                "Avatar file is required. "
                f"Received file fields: {sorted(received_files)}. "
                f"Body fields: {sorted(received_fields)}. "
                "Make sure the avatar is sent as a file under the field name \"avatar\"."
            )

        try:
            avatar_url = await media.upload(
                avatar.data, avatar.filename, avatar.content_type, folder="avatars",
            )
        except MediaUploadError as exc:
            raise MediaUploadError(f"Failed to upload avatar: {exc.message}") from exc

        cover_url = None
        if cover_image is not None:
            try:
                cover_url = await media.upload(
                    cover_image.data, cover_image.filename, cover_image.content_type,
                    folder="covers",
                )
            except MediaUploadError as exc:
                logger.warning(f"Cover image upload failed for {username}, continuing without it: {exc.message}")

        user = User(
            fullname=form.fullname.strip(),
            username=username,
            email=email,
            avatar=avatar_url,
            cover_image=cover_url,
        )
        user.set_password(form.password)
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            for url in (avatar_url, cover_url):
                if url:
                    await media.delete(url)
            raise ConflictError("User with this username or email already exists")

        logger.info(f"Registered user {user.username} ({user.id})")
        return user

    # ── Sessions ─────────────────────────────────────────────────────────

    async def login(
        self,
        db: AsyncSession,
        password: str,
        username: Optional[str] = None,
        email: Optional[str] = None,
    ) -> Tuple[User, TokenPair]:
        username = (username or "").strip().lower()
        email = (email or "").strip().lower()
        if not username and not email:
            raise BadRequestError("Username or email is required")

        conditions = []
        if username:
            conditions.append(User.username == username)
        if email:
            conditions.append(User.email == email)
        user = await db.scalar(select(User).where(or_(*conditions)).limit(1))
        if user is None:
            raise NotFoundError("User does not exist")

        if not user.check_password(password):
            raise UnauthorizedError("Invalid user credentials")

        pair = await self.sessions.issue(db, user)
        logger.info(f"User {user.username} logged in")
        return user, pair

    async def logout(self, db: AsyncSession, user: User) -> None:
        await self.sessions.revoke(db, user)
        logger.info(f"User {user.username} logged out")

    async def refresh(self, db: AsyncSession, refresh_token: Optional[str]) -> TokenPair:
        if not refresh_token:
            raise UnauthorizedError("Unauthorized request: refresh token missing")
        return await self.sessions.rotate(db, refresh_token)

    # ── Account management ───────────────────────────────────────────────

    async def change_password(
        self, db: AsyncSession, user: User, old_password: str, new_password: str, confirm_password: str,
    ) -> None:
        if new_password != confirm_password:
            raise BadRequestError("New password and confirm password do not match")
        if not user.check_password(old_password):
            raise BadRequestError("Invalid old password")
        validate_password(new_password)

        user.set_password(new_password)
        await db.commit()
        logger.info(f"User {user.username} changed password")

    async def update_profile(
        self, db: AsyncSession, user: User, fullname: Optional[str] = None, email: Optional[str] = None,
    ) -> User:
        fullname = fullname.strip() if fullname is not None else None
        if not fullname and not email:
            raise BadRequestError("Fullname or email is required")

        if email:
            email = validate_email(email)
            if email != user.email:
                taken = await db.scalar(select(User.id).where(User.email == email, User.id != user.id))
                if taken is not None:
                    raise ConflictError("Email is already in use")
                user.email = email
        if fullname:
            user.fullname = fullname

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError("Email is already in use")
        return user

    async def _replace_image(
        self, db: AsyncSession, media: MediaStore, user: User, file: Optional[IncomingFile],
        attribute: str, label: str, folder: str,
    ) -> User:
        if file is None:
            raise BadRequestError(f"{label} file is required")
        try:
            url = await media.upload(file.data, file.filename, file.content_type, folder=folder)
        except MediaUploadError as exc:
            raise MediaUploadError(f"Failed to upload {label.lower()}: {exc.message}") from exc

        previous = getattr(user, attribute)
        setattr(user, attribute, url)
        await db.commit()
        if previous:
            await media.delete(previous)
        return user

    async def update_avatar(
        self, db: AsyncSession, media: MediaStore, user: User, file: Optional[IncomingFile],
    ) -> User:
        return await self._replace_image(db, media, user, file, "avatar", "Avatar", "avatars")

    async def update_cover_image(
        self, db: AsyncSession, media: MediaStore, user: User, file: Optional[IncomingFile],
    ) -> User:
        return await self._replace_image(db, media, user, file, "cover_image", "Cover image", "covers")

    # ── Channels ─────────────────────────────────────────────────────────

    async def channel_profile(self, db: AsyncSession, viewer_id: uuid.UUID, username: str) -> ChannelProfile:
        username = (username or "").strip().lower()
        if not username:
            raise BadRequestError("Username is missing")

        channel = await db.scalar(select(User).where(User.username == username))
        if channel is None:
            raise NotFoundError("Channel does not exist")

        return ChannelProfile(
            id=channel.id,
            fullname=channel.fullname,
            username=channel.username,
            avatar=channel.avatar,
            cover_image=channel.cover_image,
            subscribers_count=await subscription_service.subscriber_count(db, channel.id),
            channels_subscribed_to_count=await subscription_service.subscription_count(db, channel.id),
            is_subscribed=await subscription_service.is_subscribed(db, viewer_id, channel.id),
        )


user_service = UserService(session_store)
