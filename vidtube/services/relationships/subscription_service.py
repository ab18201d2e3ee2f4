"""
VidTube Subscription Service — users subscribing to other users' channels.
"""
from __future__ import annotations

import logging
import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import BadRequestError, NotFoundError
from vidtube.models.models import Subscription, User
from vidtube.schemas.schemas import (
    ChannelBrief,
    SubscribedChannelEntry,
    SubscribedChannelList,
    SubscriberEntry,
    SubscriberList,
)
from vidtube.services.relationships.toggle_engine import RelationshipToggleEngine, ToggleResult

logger = logging.getLogger(__name__)


class SubscriptionService:
    def __init__(self):
        self.engine = RelationshipToggleEngine(
            Subscription, actor_column="subscriber_id", name="subscription",
        )

    async def toggle(self, db: AsyncSession, subscriber_id: uuid.UUID, channel_id: uuid.UUID) -> ToggleResult:
        if subscriber_id == channel_id:
            raise BadRequestError("You cannot subscribe to your own channel")
        if await db.scalar(select(User.id).where(User.id == channel_id)) is None:
            raise NotFoundError("Channel not found")

        result = await self.engine.toggle(db, subscriber_id, {"channel_id": channel_id})
        logger.info(
            f"User {subscriber_id} {'subscribed to' if result.is_active else 'unsubscribed from'} "
            f"channel {channel_id}"
        )
        return result

    async def is_subscribed(self, db: AsyncSession, subscriber_id: uuid.UUID, channel_id: uuid.UUID) -> bool:
        return await self.engine.is_active(db, subscriber_id, {"channel_id": channel_id})

    async def subscriber_count(self, db: AsyncSession, channel_id: uuid.UUID) -> int:
        return await self.engine.count_for_target(db, {"channel_id": channel_id})

    async def subscription_count(self, db: AsyncSession, subscriber_id: uuid.UUID) -> int:
        return await self.engine.count_for_actor(db, subscriber_id)

    async def subscribers(self, db: AsyncSession, channel_id: uuid.UUID) -> SubscriberList:
        """Who subscribes to ``channel_id``, newest subscription first."""
        rows = await db.execute(
            select(User.id, User.fullname, User.username, User.avatar, Subscription.created_at)
            .join(Subscription, Subscription.subscriber_id == User.id)
            .where(Subscription.channel_id == channel_id)
            .order_by(Subscription.created_at.desc())
        )
        entries = [
            SubscriberEntry(
                subscriber=ChannelBrief(id=uid, fullname=fullname, username=username, avatar=avatar),
                created_at=created_at,
            )
            for uid, fullname, username, avatar, created_at in rows
        ]
        return SubscriberList(subscribers=entries, subscriber_count=len(entries))

    async def subscribed_channels(self, db: AsyncSession, subscriber_id: uuid.UUID) -> SubscribedChannelList:
        """Channels ``subscriber_id`` follows, newest subscription first."""
        rows = await db.execute(
            select(User.id, User.fullname, User.username, User.avatar, Subscription.created_at)
            .join(Subscription, Subscription.channel_id == User.id)
            .where(Subscription.subscriber_id == subscriber_id)
            .order_by(Subscription.created_at.desc())
        )
        entries = [
            SubscribedChannelEntry(
                channel=ChannelBrief(id=uid, fullname=fullname, username=username, avatar=avatar),
                created_at=created_at,
            )
            for uid, fullname, username, avatar, created_at in rows
        ]
        return SubscribedChannelList(channels=entries, channel_count=len(entries))


subscription_service = SubscriptionService()
