"""
VidTube Relationship Toggle Engine — generic on/off edges between a user
and a target.

An edge row existing means "on". Toggling never reads before writing:

  1. DELETE the edge. If a row went away, the edge is now off.
  2. Otherwise INSERT it. The table's unique constraint on (actor, target)
     makes a concurrent duplicate insert fail; that failure means another
     request switched the edge on first, so the edge is on either way.

Two identical concurrent toggles therefore never produce two edges, and a
second delete is a no-op rather than an error.
"""
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Mapping, Type

from sqlalchemy import delete, exists, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vidtube.core.database import Base

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ToggleResult:
    is_active: bool


class RelationshipToggleEngine:
    """Toggles rows of ``model`` keyed by ``actor_column`` plus target columns.

    ``target`` arguments are mappings of column name to value, e.g.
    ``{"channel_id": ...}`` or ``{"target_kind": ..., "target_id": ...}``.
    """

    def __init__(self, model: Type[Base], actor_column: str, name: str):
        self.model = model
        self.actor_column = actor_column
        self.name = name

    def _target_criteria(self, target: Mapping[str, Any]):
        return [getattr(self.model, column) == value for column, value in target.items()]

    def _edge_criteria(self, actor_id: uuid.UUID, target: Mapping[str, Any]):
        return [getattr(self.model, self.actor_column) == actor_id, *self._target_criteria(target)]

    async def toggle(
        self, db: AsyncSession, actor_id: uuid.UUID, target: Mapping[str, Any],
    ) -> ToggleResult:
        removed = await db.execute(
            delete(self.model)
            .where(*self._edge_criteria(actor_id, target))
            .execution_options(synchronize_session=False)
        )
        if removed.rowcount:
            await db.commit()
            logger.debug(f"{self.name} removed: actor={actor_id} target={dict(target)}")
            return ToggleResult(is_active=False)

        db.add(self.model(**{self.actor_column: actor_id, **target}))
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.info(
                f"{self.name} already created by a concurrent request: "
                f"actor={actor_id} target={dict(target)}"
            )
            return ToggleResult(is_active=True)

        logger.debug(f"{self.name} created: actor={actor_id} target={dict(target)}")
        return ToggleResult(is_active=True)

    async def is_active(
        self, db: AsyncSession, actor_id: uuid.UUID, target: Mapping[str, Any],
    ) -> bool:
        return bool(await db.scalar(
            select(exists().where(*self._edge_criteria(actor_id, target)))
        ))

    async def count_for_target(self, db: AsyncSession, target: Mapping[str, Any]) -> int:
        return await db.scalar(
            select(func.count()).select_from(self.model).where(*self._target_criteria(target))
        ) or 0

    async def count_for_actor(self, db: AsyncSession, actor_id: uuid.UUID) -> int:
        return await db.scalar(
            select(func.count()).select_from(self.model)
            .where(getattr(self.model, self.actor_column) == actor_id)
        ) or 0
