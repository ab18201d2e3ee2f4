"""
VidTube API — Subscription routes.
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user
from vidtube.core.database import get_db
from vidtube.models.models import User
from vidtube.schemas.schemas import ApiResponse
from vidtube.services.relationships.subscription_service import subscription_service
from vidtube.services.relationships.targets import parse_id

router = APIRouter(prefix="/subscriptions", tags=["Subscriptions"])


@router.post("/c/{channel_id}")
async def toggle_subscription(
    channel_id: str,
    response: Response,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Subscribe to a channel, or unsubscribe if already subscribed."""
    channel = parse_id(channel_id, "channel")
    result = await subscription_service.toggle(db, user.id, channel)
    if result.is_active:
        response.status_code = 201
        return ApiResponse(status_code=201, data={"isSubscribed": True}, message="Subscribed successfully")
    return ApiResponse(data={"isSubscribed": False}, message="Unsubscribed successfully")


@router.get("/c/{channel_id}")
async def channel_subscribers(
    channel_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    channel = parse_id(channel_id, "channel")
    subscribers = await subscription_service.subscribers(db, channel)
    return ApiResponse(data=subscribers, message="Subscribers fetched successfully")


@router.get("/u/{subscriber_id}")
async def subscribed_channels(
    subscriber_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    subscriber = parse_id(subscriber_id, "subscriber")
    channels = await subscription_service.subscribed_channels(db, subscriber)
    return ApiResponse(data=channels, message="Subscribed channels fetched successfully")
