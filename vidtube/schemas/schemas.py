"""
VidTube API Schemas — Pydantic v2 models for request/response validation.

JSON on the wire is camelCase (``coverImage``, ``isLiked``); Python code uses
snake_case and the alias generator bridges the two.
"""
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from vidtube.models.models import UserRole


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True,
    )


# ═══════════════════════════════════════════════════════════════════════
# Envelope
# ═══════════════════════════════════════════════════════════════════════

class ApiResponse(CamelModel):
    """Uniform success envelope wrapping every response body."""

    status_code: int = 200
    data: Any = None
    message: str = "Success"

    @computed_field
    @property
    def success(self) -> bool:
        return self.status_code < 400


# ═══════════════════════════════════════════════════════════════════════
# Users & sessions
# ═══════════════════════════════════════════════════════════════════════

class UserSchema(CamelModel):
    """A user as clients see it: never the password hash or refresh token."""

    id: uuid.UUID
    username: str
    email: str
    fullname: str
    avatar: str
    cover_image: Optional[str] = None
    role: UserRole
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ChannelBrief(CamelModel):
    id: uuid.UUID
    fullname: str
    username: str
    avatar: str


class ChannelProfile(ChannelBrief):
    cover_image: Optional[str] = None
    subscribers_count: int = 0
    channels_subscribed_to_count: int = 0
    is_subscribed: bool = False


class LoginRequest(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    password: str = Field(..., min_length=1)


class LoginResult(CamelModel):
    user: UserSchema
    access_token: str
    refresh_token: str


class RefreshTokenRequest(CamelModel):
    refresh_token: Optional[str] = None


class TokenPairSchema(CamelModel):
    access_token: str
    refresh_token: str


class ChangePasswordRequest(CamelModel):
    old_password: str
    new_password: str
    confirm_password: str


class UpdateProfileRequest(CamelModel):
    fullname: Optional[str] = None
    email: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════════
# Relationships
# ═══════════════════════════════════════════════════════════════════════

class LikedVideo(CamelModel):
    id: uuid.UUID
    title: str
    description: str
    video_file: str
    thumbnail: str
    duration: float
    views: int
    created_at: Optional[datetime] = None
    owner: ChannelBrief
    liked_at: Optional[datetime] = None


class SubscriberEntry(CamelModel):
    subscriber: ChannelBrief
    created_at: Optional[datetime] = None


class SubscribedChannelEntry(CamelModel):
    channel: ChannelBrief
    created_at: Optional[datetime] = None


class SubscriberList(CamelModel):
    subscribers: List[SubscriberEntry]
    subscriber_count: int


class SubscribedChannelList(CamelModel):
    channels: List[SubscribedChannelEntry]
    channel_count: int
