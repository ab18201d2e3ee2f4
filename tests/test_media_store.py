import pytest

from vidtube.core.config import get_settings
from vidtube.services.media.media_store import MediaStore, MediaUploadError

settings = get_settings()


class RecordingClient:
    """Minimal MinIO client double capturing put/remove calls."""

    def __init__(self, fail=False):
        self.fail = fail
        self.puts = []
        self.removed = []

    def put_object(self, bucket, name, stream, length, content_type):
        if self.fail:
            raise OSError("connection refused")
        self.puts.append((bucket, name, stream.read(), length, content_type))

    def remove_object(self, bucket, name):
        self.removed.append((bucket, name))


@pytest.fixture
def client():
    return RecordingClient()


@pytest.fixture
def store(client):
    store = MediaStore()
    store._client = client
    return store


async def test_upload_returns_public_url(store, client):
    url = await store.upload(b"png-bytes", "Me.PNG", "image/png", folder="avatars")

    bucket, name, data, length, content_type = client.puts[0]
    assert bucket == settings.minio_bucket
    assert name.startswith("avatars/") and name.endswith(".png")
    assert data == b"png-bytes" and length == 9
    assert content_type == "image/png"
    assert url == store.public_url(name)


async def test_upload_rejects_empty_file(store, client):
    with pytest.raises(MediaUploadError):
        await store.upload(b"", "empty.png")
    assert client.puts == []


async def test_upload_failure_is_a_server_error():
    store = MediaStore()
    store._client = RecordingClient(fail=True)

    with pytest.raises(MediaUploadError) as exc_info:
        await store.upload(b"data", "avatar.png")
    assert exc_info.value.status_code == 500
    assert "connection refused" in exc_info.value.message


async def test_delete_only_touches_own_objects(store, client):
    url = await store.upload(b"data", "cover.jpg", folder="covers")

    await store.delete(url)
    await store.delete("https://elsewhere.example.com/cover.jpg")

    assert client.removed == [(settings.minio_bucket, client.puts[0][1])]
