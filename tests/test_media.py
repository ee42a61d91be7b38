# tests/test_media.py

from __future__ import annotations

from types import SimpleNamespace

import pytest

from backend.database.media import MediaStore
from backend.delivery.errors import StoreError


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str) -> None:
        self.storage = storage
        self.name = name

    def upload(self, path, file, file_options=None):
        if self.storage.fail:
            raise RuntimeError("quota exceeded")
        self.storage.uploads.append((self.name, path, file, file_options))

    def get_public_url(self, path):
        return f"https://project.supabase.co/storage/v1/object/public/{self.name}/{path}"

    def remove(self, paths):
        if self.storage.fail:
            raise RuntimeError("not allowed")
        self.storage.removed.extend(paths)


class FakeStorage:
    def __init__(self, buckets=()) -> None:
        self.buckets = [SimpleNamespace(name=b) for b in buckets]
        self.created: list[tuple[str, dict]] = []
        self.uploads: list[tuple] = []
        self.removed: list[str] = []
        self.fail = False

    def from_(self, name):
        return FakeBucket(self, name)

    def list_buckets(self):
        return self.buckets

    def create_bucket(self, name, options=None):
        self.created.append((name, options))


def _media_store(storage: FakeStorage) -> MediaStore:
    return MediaStore(client=SimpleNamespace(storage=storage), bucket="videos", file_size_limit=1000)


@pytest.mark.asyncio
async def test_put_uploads_and_returns_public_url() -> None:
    storage = FakeStorage()

    url = await _media_store(storage).put("123-4.mp4", b"video", "video/mp4")

    assert url.endswith("/public/videos/123-4.mp4")
    bucket, key, content, options = storage.uploads[0]
    assert (bucket, key, content) == ("videos", "123-4.mp4", b"video")
    assert options["content-type"] == "video/mp4"
    assert options["upsert"] == "false"


@pytest.mark.asyncio
async def test_storage_failures_raise_store_error() -> None:
    storage = FakeStorage()
    storage.fail = True
    media = _media_store(storage)

    with pytest.raises(StoreError, match="quota exceeded"):
        await media.put("a.mp4", b"video", "video/mp4")
    with pytest.raises(StoreError, match="not allowed"):
        await media.remove("a.mp4")


@pytest.mark.asyncio
async def test_remove_deletes_key() -> None:
    storage = FakeStorage()

    await _media_store(storage).remove("a.mp4")

    assert storage.removed == ["a.mp4"]


def test_ensure_bucket_creates_public_bucket_once() -> None:
    missing = FakeStorage(buckets=["avatars"])
    assert _media_store(missing).ensure_bucket() is True
    assert missing.created == [("videos", {"public": True, "file_size_limit": 1000})]

    present = FakeStorage(buckets=["videos"])
    assert _media_store(present).ensure_bucket() is False
    assert present.created == []
