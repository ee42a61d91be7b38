"""
Schedule Service

Create, list, fetch and delete scheduled video deliveries on behalf of
the HTTP layer. Creation always yields a pending delivery; deletion
removes the row and its video blob and bypasses the state machine.
"""

import random
import time
from datetime import datetime
from pathlib import Path
from typing import Optional, List, Protocol, Union

from backend.delivery.errors import StoreError, ValidationError
from backend.delivery.models import MediaKind, MediaRef, ScheduledDelivery, parse_timestamp, utcnow
from backend.utils.logging import get_logger

logger = get_logger("schedule_service")


class ScheduleRepository(Protocol):
    async def create(self, delivery: ScheduledDelivery) -> ScheduledDelivery: ...

    async def get(self, delivery_id: str) -> ScheduledDelivery: ...

    async def list_all(self) -> List[ScheduledDelivery]: ...

    async def delete(self, delivery_id: str) -> None: ...


class VideoStorage(Protocol):
    async def put(self, key: str, content: bytes, content_type: str) -> str: ...

    async def remove(self, key: str) -> None: ...


def make_storage_key(original_filename: str) -> str:
    """Unique storage key: <epoch millis>-<random><original extension>."""
    ext = Path(original_filename or "").suffix
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"


class ScheduleService:
    """Operations the presentation layer uses to manage scheduled videos."""

    def __init__(
        self,
        store: ScheduleRepository,
        media_store: VideoStorage,
        max_video_bytes: int = 50 * 1024 * 1024,
    ):
        self.store = store
        self.media_store = media_store
        self.max_video_bytes = max_video_bytes

    # =========================================================================
    # Create
    # =========================================================================

    def _validate(
        self,
        recipient_email: Optional[str],
        subject: Optional[str],
        scheduled_at: Union[str, datetime, None],
        content: Optional[bytes],
        content_type: Optional[str],
    ) -> datetime:
        if not content:
            raise ValidationError("No video file uploaded")

        missing = [
            name for name, value in (
                ("recipientEmail", recipient_email),
                ("scheduledAt", scheduled_at),
                ("subject", subject),
            )
            if value is None or (isinstance(value, str) and not value.strip())
        ]
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        if not (content_type or "").startswith("video/"):
            raise ValidationError("Only video files are allowed")

        if len(content) > self.max_video_bytes:
            raise ValidationError(
                f"Video exceeds the {self.max_video_bytes // (1024 * 1024)}MB limit"
            )

        try:
            return parse_timestamp(scheduled_at)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid scheduledAt timestamp: {scheduled_at}")

    async def create_schedule(
        self,
        recipient_email: Optional[str],
        subject: Optional[str],
        scheduled_at: Union[str, datetime, None],
        filename: str,
        content: Optional[bytes],
        content_type: Optional[str],
        message: Optional[str] = None,
    ) -> ScheduledDelivery:
        """
        Upload the video and record a pending delivery.

        Nothing is stored when validation fails. If the row cannot be
        inserted, the uploaded video is removed again.
        """
        when = self._validate(recipient_email, subject, scheduled_at, content, content_type)

        key = make_storage_key(filename)
        public_url = await self.media_store.put(key, content, content_type)

        delivery = ScheduledDelivery(
            id=None,
            recipient_email=recipient_email.strip(),
            subject=subject,
            message=message or "",
            media=MediaRef.url(public_url),
            media_filename=key,
            scheduled_at=when,
            created_at=utcnow(),
        )

        try:
            created = await self.store.create(delivery)
        except StoreError as e:
            logger.error("Failed to save scheduled video", key=key, error=str(e))
            try:
                await self.media_store.remove(key)
            except StoreError as cleanup_error:
                logger.error("Failed to clean up uploaded video", key=key, error=str(cleanup_error))
            raise

        logger.info(
            "Video scheduled",
            delivery_id=created.id,
            scheduled_at=when.isoformat(),
        )
        return created

    # =========================================================================
    # Read
    # =========================================================================

    async def list_schedules(self) -> List[ScheduledDelivery]:
        return await self.store.list_all()

    async def get_schedule(self, delivery_id: str) -> ScheduledDelivery:
        return await self.store.get(delivery_id)

    # =========================================================================
    # Delete
    # =========================================================================

    async def delete_schedule(self, delivery_id: str) -> None:
        """
        Delete a delivery in any status along with its video.

        The row goes first, so a pending delivery never points at a removed
        video. A storage failure afterwards is only logged.
        """
        delivery = await self.store.get(delivery_id)
        await self.store.delete(delivery_id)

        if delivery.media.kind is MediaKind.URL:
            try:
                await self.media_store.remove(delivery.media_filename)
            except StoreError as e:
                logger.error("Error deleting video from storage", delivery_id=delivery_id, error=str(e))
        elif delivery.media.location:
            path = Path(delivery.media.location)
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                logger.error("Error deleting local video", delivery_id=delivery_id, error=str(e))

        logger.info("Deleted scheduled video", delivery_id=delivery_id)
