import asyncio
import uuid

import pytest
from sqlalchemy import false, func, select

from vidtube.models.models import Like, Subscription, User
from vidtube.services.relationships.targets import TargetRef
from vidtube.services.relationships.toggle_engine import RelationshipToggleEngine


async def make_user(session_factory, username):
    async with session_factory() as session:
        user = User(
            username=username,
            email=f"{username}@example.com",
            fullname=username.title(),
            avatar=f"https://media.test/avatars/{username}.png",
        )
        user.set_password("correct-horse")
        session.add(user)
        await session.commit()
        return user.id


async def count_rows(session_factory, model):
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model))


@pytest.fixture
def subscriptions():
    return RelationshipToggleEngine(Subscription, actor_column="subscriber_id", name="subscription")


@pytest.fixture
def likes():
    return RelationshipToggleEngine(Like, actor_column="liked_by_id", name="like")


async def test_toggle_alternates(db, session_factory, subscriptions):
    actor = await make_user(session_factory, "actor")
    channel = await make_user(session_factory, "channel")
    target = {"channel_id": channel}

    assert (await subscriptions.toggle(db, actor, target)).is_active is True
    assert await subscriptions.is_active(db, actor, target)
    assert await subscriptions.count_for_target(db, target) == 1
    assert await subscriptions.count_for_actor(db, actor) == 1

    assert (await subscriptions.toggle(db, actor, target)).is_active is False
    assert not await subscriptions.is_active(db, actor, target)
    assert await subscriptions.count_for_target(db, target) == 0


async def test_like_edges_are_scoped_by_target_kind(db, session_factory, likes):
    actor = await make_user(session_factory, "actor")
    shared_id = uuid.uuid4()

    await likes.toggle(db, actor, TargetRef.video(shared_id).as_columns())

    assert await likes.is_active(db, actor, TargetRef.video(shared_id).as_columns())
    assert not await likes.is_active(db, actor, TargetRef.tweet(shared_id).as_columns())
    assert await likes.count_for_target(db, TargetRef.comment(shared_id).as_columns()) == 0


async def test_lost_insert_race_reports_active(db, session_factory, subscriptions):
    actor = await make_user(session_factory, "actor")
    channel = await make_user(session_factory, "channel")
    target = {"channel_id": channel}
    await subscriptions.toggle(db, actor, target)

    class StaleDeleteEngine(RelationshipToggleEngine):
        # The delete step matches nothing, as if it ran before a concurrent insert.
        def _edge_criteria(self, actor_id, target):
            return [false()]

    racer = StaleDeleteEngine(Subscription, actor_column="subscriber_id", name="subscription")
    result = await racer.toggle(db, actor, target)

    assert result.is_active is True
    assert await count_rows(session_factory, Subscription) == 1


async def test_concurrent_toggles_never_duplicate(session_factory, subscriptions):
    actor = await make_user(session_factory, "actor")
    channel = await make_user(session_factory, "channel")
    target = {"channel_id": channel}

    async def attempt():
        async with session_factory() as session:
            return await subscriptions.toggle(session, actor, target)

    results = await asyncio.gather(attempt(), attempt())
    edges = await count_rows(session_factory, Subscription)

    assert edges <= 1
    # Either both saw "off" and raced to insert, or they ran one after the other.
    assert (edges == 1) == all(r.is_active for r in results)
