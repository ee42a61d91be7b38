# tests/test_service.py

from __future__ import annotations

from pathlib import Path

import pytest

from backend.delivery.errors import DeliveryNotFound, StoreError, ValidationError
from backend.delivery.models import DeliveryStatus, MediaKind, MediaRef
from backend.delivery.service import make_storage_key

VIDEO = b"\x00\x00\x00\x18ftypmp42"


def _create_kwargs(**overrides):
    kwargs = dict(
        recipient_email="friend@example.com",
        subject="Happy birthday",
        scheduled_at="2030-01-01T09:00:00Z",
        filename="birthday.mp4",
        content=VIDEO,
        content_type="video/mp4",
        message="See you soon",
    )
    kwargs.update(overrides)
    return kwargs


def test_storage_key_keeps_extension() -> None:
    key = make_storage_key("My Clip.MOV")
    stamp, rest = key.split("-", 1)

    assert stamp.isdigit()
    assert key.endswith(".MOV")
    assert make_storage_key("noext").split("-", 1)[1].isdigit()


@pytest.mark.asyncio
async def test_create_uploads_and_records_pending_delivery(service, store, media_store) -> None:
    delivery = await service.create_schedule(**_create_kwargs())

    assert delivery.id in store.rows
    assert delivery.status is DeliveryStatus.PENDING
    assert delivery.sent_at is None
    assert delivery.message == "See you soon"
    assert delivery.scheduled_at.isoformat() == "2030-01-01T09:00:00+00:00"
    assert delivery.media.kind is MediaKind.URL
    assert media_store.blobs[delivery.media_filename] == VIDEO
    assert delivery.media.location.endswith(delivery.media_filename)


@pytest.mark.asyncio
async def test_message_defaults_to_empty(service) -> None:
    delivery = await service.create_schedule(**_create_kwargs(message=None))
    assert delivery.message == ""


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides, fragment",
    [
        ({"recipient_email": ""}, "recipientEmail"),
        ({"subject": "  "}, "subject"),
        ({"scheduled_at": None}, "scheduledAt"),
        ({"content": None}, "No video file"),
        ({"content_type": "image/png"}, "Only video files"),
        ({"content": b"x" * 2048}, "limit"),
        ({"scheduled_at": "next tuesday"}, "Invalid scheduledAt"),
    ],
)
async def test_invalid_requests_are_rejected_before_anything_is_stored(
    service, store, media_store, overrides, fragment
) -> None:
    with pytest.raises(ValidationError, match=fragment):
        await service.create_schedule(**_create_kwargs(**overrides))

    assert store.rows == {}
    assert media_store.blobs == {}


@pytest.mark.asyncio
async def test_uploaded_video_is_removed_when_insert_fails(service, store, media_store) -> None:
    store.fail_create = True

    with pytest.raises(StoreError):
        await service.create_schedule(**_create_kwargs())

    assert media_store.blobs == {}
    assert len(media_store.removed) == 1


@pytest.mark.asyncio
async def test_list_schedules_latest_first(service, store, make_delivery) -> None:
    early = make_delivery(due_in=-600)
    late = make_delivery(due_in=600)
    store.add(early, late)

    listed = await service.list_schedules()

    assert [d.id for d in listed] == [late.id, early.id]


@pytest.mark.asyncio
async def test_delete_sent_delivery_removes_row_and_video(service, store, media_store, make_delivery) -> None:
    delivery = make_delivery().transition(DeliveryStatus.SENT)
    store.add(delivery)

    await service.delete_schedule(delivery.id)

    with pytest.raises(DeliveryNotFound):
        await service.get_schedule(delivery.id)
    assert await service.list_schedules() == []
    assert media_store.removed == [delivery.media_filename]


@pytest.mark.asyncio
async def test_delete_still_removes_row_when_storage_fails(service, store, media_store, make_delivery) -> None:
    delivery = make_delivery()
    store.add(delivery)
    media_store.fail_remove = True

    await service.delete_schedule(delivery.id)

    assert delivery.id not in store.rows


@pytest.mark.asyncio
async def test_delete_legacy_delivery_unlinks_local_file(service, store, media_store, make_delivery, tmp_path: Path) -> None:
    video = tmp_path / "old.mp4"
    video.write_bytes(VIDEO)
    delivery = make_delivery(media=MediaRef.path(str(video)))
    store.add(delivery)

    await service.delete_schedule(delivery.id)

    assert not video.exists()
    assert media_store.removed == []


@pytest.mark.asyncio
async def test_delete_unknown_id_raises_not_found(service, media_store) -> None:
    with pytest.raises(DeliveryNotFound):
        await service.delete_schedule("missing")
    assert media_store.removed == []


@pytest.mark.asyncio
async def test_create_does_not_read_back_the_saved_row(service, store, monkeypatch) -> None:
    async def unavailable(delivery_id):
        raise StoreError("read timed out")

    monkeypatch.setattr(store, "get", unavailable)

    delivery = await service.create_schedule(**_create_kwargs())

    assert list(store.rows) == [delivery.id]
    assert delivery.status is DeliveryStatus.PENDING


@pytest.mark.asyncio
async def test_video_is_kept_when_row_cannot_be_deleted(service, store, media_store, make_delivery) -> None:
    delivery = make_delivery()
    store.add(delivery)
    store.fail_delete = True

    with pytest.raises(StoreError):
        await service.delete_schedule(delivery.id)

    assert delivery.id in store.rows
    assert media_store.removed == []
