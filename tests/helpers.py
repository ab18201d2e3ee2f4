import uuid

from vidtube.models.models import Comment, Tweet, User, Video

API = "/api/v1"
PASSWORD = "correct-horse"
AVATAR = ("avatar.png", b"\x89PNG avatar bytes", "image/png")
COVER = ("cover.jpg", b"\xff\xd8 cover bytes", "image/jpeg")


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def cookie(name, value):
    return {"Cookie": f"{name}={value}"}


async def register(client, username="alice", email=None, password=PASSWORD,
                   fullname="Alice Example", avatar=True, cover=False):
    files = {}
    if avatar:
        files["avatar"] = AVATAR
    if cover:
        files["coverImage"] = COVER
    data = {
        "fullname": fullname,
        "username": username,
        "email": email or f"{username.lower()}@example.com",
        "password": password,
    }
    return await client.post(f"{API}/users/register", data=data, files=files or None)


async def login(client, username=None, password=PASSWORD, email=None):
    body = {"password": password}
    if username:
        body["username"] = username
    if email:
        body["email"] = email
    return await client.post(f"{API}/users/login", json=body)


async def signup(client, username="alice"):
    """Register and log in; returns (user json, access token, refresh token)."""
    resp = await register(client, username=username)
    assert resp.status_code == 201, resp.text
    resp = await login(client, username=username)
    assert resp.status_code == 200, resp.text
    data = resp.json()["data"]
    return data["user"], data["accessToken"], data["refreshToken"]


async def create_video(session_factory, owner_id, title="A video"):
    async with session_factory() as session:
        video = Video(
            owner_id=uuid.UUID(str(owner_id)),
            title=title,
            description=f"About {title}",
            video_file=f"https://media.test/videos/{title}.mp4",
            thumbnail=f"https://media.test/thumbs/{title}.jpg",
            duration=42.0,
        )
        session.add(video)
        await session.commit()
        return video.id


async def create_comment(session_factory, owner_id, video_id):
    async with session_factory() as session:
        comment = Comment(content="Nice!", video_id=video_id, owner_id=uuid.UUID(str(owner_id)))
        session.add(comment)
        await session.commit()
        return comment.id


async def create_tweet(session_factory, owner_id):
    async with session_factory() as session:
        tweet = Tweet(content="Hello world", owner_id=uuid.UUID(str(owner_id)))
        session.add(tweet)
        await session.commit()
        return tweet.id


async def load_user(session_factory, user_id):
    async with session_factory() as session:
        return await session.get(User, uuid.UUID(str(user_id)))
