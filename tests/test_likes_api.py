import uuid

import pytest

from tests.helpers import API, bearer, create_comment, create_tweet, create_video, signup


async def toggle(client, code, target_id, token):
    return await client.post(f"{API}/likes/toggle/{code}/{target_id}", headers=bearer(token))


async def like_count(client, code, target_id, token):
    resp = await client.get(f"{API}/likes/count/{code}/{target_id}", headers=bearer(token))
    assert resp.status_code == 200, resp.text
    return resp.json()["data"]["likesCount"]


async def test_like_then_unlike_video(client, session_factory):
    owner, _, _ = await signup(client, "creator")
    _, alice, _ = await signup(client, "alice")
    _, bob, _ = await signup(client, "bob")
    video_id = await create_video(session_factory, owner["id"])

    first = await toggle(client, "v", video_id, alice)
    assert first.status_code == 200
    assert first.json()["data"] == {"isLiked": True}
    assert first.json()["message"] == "Video liked successfully"

    assert (await toggle(client, "v", video_id, bob)).json()["data"]["isLiked"] is True
    assert await like_count(client, "v", video_id, alice) == 2

    again = await toggle(client, "v", video_id, alice)
    assert again.json()["data"] == {"isLiked": False}
    assert again.json()["message"] == "Video unliked successfully"
    assert await like_count(client, "v", video_id, alice) == 1


@pytest.mark.parametrize("times", [1, 2, 3, 4, 5])
async def test_toggle_parity(client, session_factory, times):
    owner, token, _ = await signup(client, "creator")
    video_id = await create_video(session_factory, owner["id"])

    for _ in range(times):
        last = await toggle(client, "v", video_id, token)

    assert last.json()["data"]["isLiked"] is (times % 2 == 1)
    assert await like_count(client, "v", video_id, token) == times % 2


async def test_comment_and_tweet_likes_are_independent(client, session_factory):
    owner, token, _ = await signup(client, "creator")
    video_id = await create_video(session_factory, owner["id"])
    comment_id = await create_comment(session_factory, owner["id"], video_id)
    tweet_id = await create_tweet(session_factory, owner["id"])

    comment = await toggle(client, "c", comment_id, token)
    tweet = await toggle(client, "t", tweet_id, token)

    assert comment.json()["message"] == "Comment liked successfully"
    assert tweet.json()["message"] == "Tweet liked successfully"
    assert await like_count(client, "c", comment_id, token) == 1
    assert await like_count(client, "t", tweet_id, token) == 1
    assert await like_count(client, "v", video_id, token) == 0


async def test_invalid_target_id(client):
    _, token, _ = await signup(client)

    resp = await toggle(client, "v", "not-a-uuid", token)

    assert resp.status_code == 400
    assert resp.json() == {"message": "Invalid video ID", "success": False}


async def test_missing_target(client):
    _, token, _ = await signup(client)

    resp = await toggle(client, "t", uuid.uuid4(), token)

    assert resp.status_code == 404
    assert resp.json()["message"] == "Tweet not found"


async def test_unknown_count_kind(client):
    _, token, _ = await signup(client)

    resp = await client.get(f"{API}/likes/count/x/{uuid.uuid4()}", headers=bearer(token))

    assert resp.status_code == 400


async def test_toggle_requires_login(client, session_factory):
    owner, _, _ = await signup(client, "creator")
    video_id = await create_video(session_factory, owner["id"])

    resp = await client.post(f"{API}/likes/toggle/v/{video_id}")

    assert resp.status_code == 401


async def test_liked_videos_newest_first(client, session_factory):
    owner, _, _ = await signup(client, "creator")
    _, token, _ = await signup(client, "fan")
    older = await create_video(session_factory, owner["id"], title="older")
    newer = await create_video(session_factory, owner["id"], title="newer")
    unliked = await create_video(session_factory, owner["id"], title="unliked")

    await toggle(client, "v", older, token)
    await toggle(client, "v", newer, token)
    await toggle(client, "v", unliked, token)
    await toggle(client, "v", unliked, token)

    resp = await client.get(f"{API}/likes/videos", headers=bearer(token))

    assert resp.status_code == 200
    videos = resp.json()["data"]
    assert [v["title"] for v in videos] == ["newer", "older"]
    assert videos[0]["owner"]["username"] == "creator"
    assert set(videos[0]["owner"]) == {"id", "fullname", "username", "avatar"}
    assert "likedAt" in videos[0]


async def test_count_reports_whether_caller_liked(client, session_factory):
    owner, owner_token, _ = await signup(client, "creator")
    _, fan_token, _ = await signup(client, "fan")
    video_id = await create_video(session_factory, owner["id"])
    comment_id = await create_comment(session_factory, owner["id"], video_id)

    await toggle(client, "c", comment_id, fan_token)

    as_fan = await client.get(f"{API}/likes/count/c/{comment_id}", headers=bearer(fan_token))
    as_owner = await client.get(f"{API}/likes/count/c/{comment_id}", headers=bearer(owner_token))

    assert as_fan.json()["data"] == {"likesCount": 1, "isLiked": True}
    assert as_owner.json()["data"] == {"likesCount": 1, "isLiked": False}
