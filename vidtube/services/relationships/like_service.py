"""
VidTube Like Service — toggling and reading likes on videos, comments and tweets.
"""
from __future__ import annotations

import logging
import uuid
from typing import List

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.errors import NotFoundError
from vidtube.models.models import Like, LikeTarget, User, Video
from vidtube.schemas.schemas import ChannelBrief, LikedVideo
from vidtube.services.relationships.targets import TargetRef
from vidtube.services.relationships.toggle_engine import RelationshipToggleEngine, ToggleResult

logger = logging.getLogger(__name__)


class LikeService:
    def __init__(self):
        self.engine = RelationshipToggleEngine(Like, actor_column="liked_by_id", name="like")

    async def _ensure_target_exists(self, db: AsyncSession, target: TargetRef) -> None:
        found = await db.scalar(select(target.model.id).where(target.model.id == target.id))
        if found is None:
            raise NotFoundError(f"{target.kind.value.capitalize()} not found")

    async def toggle(self, db: AsyncSession, actor_id: uuid.UUID, target: TargetRef) -> ToggleResult:
        await self._ensure_target_exists(db, target)
        result = await self.engine.toggle(db, actor_id, target.as_columns())
        logger.info(
            f"User {actor_id} {'liked' if result.is_active else 'unliked'} "
            f"{target.kind.value} {target.id}"
        )
        return result

    async def is_liked(self, db: AsyncSession, actor_id: uuid.UUID, target: TargetRef) -> bool:
        return await self.engine.is_active(db, actor_id, target.as_columns())

    async def count(self, db: AsyncSession, target: TargetRef) -> int:
        return await self.engine.count_for_target(db, target.as_columns())

    async def liked_videos(self, db: AsyncSession, actor_id: uuid.UUID) -> List[LikedVideo]:
        """Videos the actor liked, most recently liked first."""
        rows = await db.execute(
            select(
                Video,
                User.id, User.fullname, User.username, User.avatar,
                Like.created_at,
            )
            .join(Like, and_(Like.target_kind == LikeTarget.VIDEO, Like.target_id == Video.id))
            .join(User, User.id == Video.owner_id)
            .where(Like.liked_by_id == actor_id)
            .order_by(Like.created_at.desc())
        )
        return [
            LikedVideo(
                id=video.id,
                title=video.title,
                description=video.description,
                video_file=video.video_file,
                thumbnail=video.thumbnail,
                duration=video.duration,
                views=video.views,
                created_at=video.created_at,
                owner=ChannelBrief(id=owner_id, fullname=fullname, username=username, avatar=avatar),
                liked_at=liked_at,
            )
            for video, owner_id, fullname, username, avatar, liked_at in rows
        ]


like_service = LikeService()
