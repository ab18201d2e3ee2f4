"""
VidTube API — Like routes.

  - POST /likes/toggle/v/{video_id}     — like / unlike a video
  - POST /likes/toggle/c/{comment_id}   — like / unlike a comment
  - POST /likes/toggle/t/{tweet_id}     — like / unlike a tweet
  - GET  /likes/videos                  — videos the caller liked
  - GET  /likes/count/{kind}/{id}       — like count of one target, and whether the caller liked it
"""
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.api.deps import get_current_user
from vidtube.core.database import get_db
from vidtube.core.errors import BadRequestError
from vidtube.models.models import LikeTarget, User
from vidtube.schemas.schemas import ApiResponse
from vidtube.services.relationships.like_service import like_service
from vidtube.services.relationships.targets import ROUTE_CODES, TargetRef

router = APIRouter(prefix="/likes", tags=["Likes"])


async def _toggle(db: AsyncSession, user: User, target: TargetRef) -> ApiResponse:
    result = await like_service.toggle(db, user.id, target)
    verb = "liked" if result.is_active else "unliked"
    return ApiResponse(
        data={"isLiked": result.is_active},
        message=f"{target.kind.value.capitalize()} {verb} successfully",
    )


@router.post("/toggle/v/{video_id}")
async def toggle_video_like(
    video_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle(db, user, TargetRef.parse(LikeTarget.VIDEO, video_id))


@router.post("/toggle/c/{comment_id}")
async def toggle_comment_like(
    comment_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle(db, user, TargetRef.parse(LikeTarget.COMMENT, comment_id))


@router.post("/toggle/t/{tweet_id}")
async def toggle_tweet_like(
    tweet_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    return await _toggle(db, user, TargetRef.parse(LikeTarget.TWEET, tweet_id))


@router.get("/videos")
async def liked_videos(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    videos = await like_service.liked_videos(db, user.id)
    return ApiResponse(data=videos, message="Liked videos fetched successfully")


@router.get("/count/{kind}/{target_id}")
async def like_count(
    kind: str,
    target_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    if kind not in ROUTE_CODES:
        raise BadRequestError("Like target must be one of 'v', 'c' or 't'")
    target = TargetRef.parse(ROUTE_CODES[kind], target_id)
    count = await like_service.count(db, target)
    liked = await like_service.is_liked(db, user.id, target)
    return ApiResponse(
        data={"likesCount": count, "isLiked": liked},
        message="Like count fetched successfully",
    )
