# tests/conftest.py

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from backend.delivery.executor import DeliveryExecutor
from backend.delivery.models import DeliveryStatus, MediaRef, ScheduledDelivery
from backend.delivery.scheduler import DeliveryScheduler
from backend.delivery.service import ScheduleService
from backend.utils.logging import get_log_buffer

from .fakes import FakeDeliveryStore, FakeGateway, FakeMediaStore


@pytest.fixture()
def now() -> datetime:
    return datetime.now(timezone.utc)


@pytest.fixture()
def make_delivery(now: datetime) -> Callable[..., ScheduledDelivery]:
    """
    Factory for pending deliveries relative to `now`.

    `due_in` is an offset in seconds: negative means already due.
    """
    counter = {"n": 0}

    def _make(
        due_in: float = -1,
        *,
        delivery_id: str | None = None,
        recipient: str = "friend@example.com",
        media: MediaRef | None = None,
        status: DeliveryStatus = DeliveryStatus.PENDING,
    ) -> ScheduledDelivery:
        counter["n"] += 1
        return ScheduledDelivery(
            id=delivery_id or f"d{counter['n']}",
            recipient_email=recipient,
            subject="Happy birthday",
            message="Made this for you",
            media=media or MediaRef.url(f"https://storage.example.com/videos/clip{counter['n']}.mp4"),
            media_filename=f"clip{counter['n']}.mp4",
            scheduled_at=now + timedelta(seconds=due_in),
            status=status,
            created_at=now - timedelta(hours=1),
        )

    return _make


@pytest.fixture()
def store() -> FakeDeliveryStore:
    return FakeDeliveryStore()


@pytest.fixture()
def media_store() -> FakeMediaStore:
    return FakeMediaStore()


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def executor(store: FakeDeliveryStore, gateway: FakeGateway) -> DeliveryExecutor:
    return DeliveryExecutor(store, gateway, send_timeout=5)


@pytest.fixture()
def scheduler(store: FakeDeliveryStore, executor: DeliveryExecutor) -> DeliveryScheduler:
    """Scheduler with a one-minute period; tests drive ticks through run_tick()."""
    return DeliveryScheduler(store, executor, check_interval_seconds=60, send_spacing_seconds=0)


@pytest.fixture()
def service(store: FakeDeliveryStore, media_store: FakeMediaStore) -> ScheduleService:
    return ScheduleService(store, media_store, max_video_bytes=1024)


@pytest.fixture(autouse=True)
def clear_log_buffer():
    get_log_buffer().clear()
    yield
    get_log_buffer().clear()
