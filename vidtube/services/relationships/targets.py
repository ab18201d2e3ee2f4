"""
Like targets: a tagged reference to exactly one video, comment or tweet.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Dict

from vidtube.core.errors import BadRequestError
from vidtube.models.models import Comment, LikeTarget, Tweet, Video

TARGET_MODELS = {
    LikeTarget.VIDEO: Video,
    LikeTarget.COMMENT: Comment,
    LikeTarget.TWEET: Tweet,
}

# Single-letter route segments used by the likes API: /likes/toggle/v/{id}
ROUTE_CODES = {
    "v": LikeTarget.VIDEO,
    "c": LikeTarget.COMMENT,
    "t": LikeTarget.TWEET,
}


def parse_id(raw: str, label: str) -> uuid.UUID:
    """Parse a path identifier, raising 400 ``Invalid <label> ID`` if malformed."""
    try:
        return uuid.UUID(str(raw))
    except ValueError:
        raise BadRequestError(f"Invalid {label} ID")


@dataclass(frozen=True)
class TargetRef:
    kind: LikeTarget
    id: uuid.UUID

    @classmethod
    def video(cls, target_id: uuid.UUID) -> "TargetRef":
        return cls(LikeTarget.VIDEO, target_id)

    @classmethod
    def comment(cls, target_id: uuid.UUID) -> "TargetRef":
        return cls(LikeTarget.COMMENT, target_id)

    @classmethod
    def tweet(cls, target_id: uuid.UUID) -> "TargetRef":
        return cls(LikeTarget.TWEET, target_id)

    @classmethod
    def parse(cls, kind: LikeTarget, raw_id: str) -> "TargetRef":
        return cls(kind, parse_id(raw_id, kind.value))

    @property
    def model(self):
        return TARGET_MODELS[self.kind]

    def as_columns(self) -> Dict[str, Any]:
        return {"target_kind": self.kind, "target_id": self.id}
