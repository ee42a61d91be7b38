"""
Delivery Executor

Performs one scheduled delivery: resolve the video, send the email,
then persist the terminal status. Failures never escape dispatch(), so
one bad delivery cannot stop the rest of a batch.

Delivery is at-least-once: if the email goes out but neither the sent
nor the failed status can be persisted, the row stays pending and is
sent again on a later tick.
"""

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Tuple, Protocol

from backend.delivery.errors import DeliveryNotFound, GatewayError, InvalidTransition, MediaMissing
from backend.delivery.models import DeliveryStatus, MediaKind, ScheduledDelivery, utcnow
from backend.email.gateway import EmailAttachment
from backend.email.templates import (
    compose_text_body,
    render_video_attachment_email,
    render_video_link_email,
)
from backend.utils.logging import scheduler_logger as logger


class Gateway(Protocol):
    def send(
        self,
        to: str,
        subject: str,
        text: str,
        html: Optional[str] = None,
        attachment: Optional[EmailAttachment] = None,
    ) -> Optional[str]: ...


class StatusWriter(Protocol):
    async def update_status(
        self,
        delivery_id: str,
        status: DeliveryStatus,
        sent_at: Optional[datetime] = None,
        error_message: Optional[str] = None,
    ) -> None: ...


class DeliveryExecutor:
    """Sends a single delivery and moves it to sent or failed."""

    def __init__(
        self,
        store: StatusWriter,
        gateway: Gateway,
        send_timeout: float = 120,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.gateway = gateway
        self.send_timeout = send_timeout
        self.clock = clock

    def resolve_media(self, delivery: ScheduledDelivery) -> Tuple[Optional[str], Optional[EmailAttachment]]:
        """Return (video_url, attachment); exactly one of them is set."""
        media = delivery.media
        if media.kind is MediaKind.URL:
            return media.location, None

        path = Path(media.location)
        if not media.location or not path.is_file():
            raise MediaMissing(f"Video file not found: {media.location}")

        filename = delivery.media_filename or f"video-message{path.suffix}"
        return None, EmailAttachment(filename=filename, path=str(path))

    def compose(self, delivery: ScheduledDelivery, video_url: Optional[str]) -> Tuple[str, str]:
        text = compose_text_body(delivery.message, video_url)
        if video_url:
            html = render_video_link_email(delivery.message, video_url, delivery.media_filename)
        else:
            html = render_video_attachment_email(delivery.message)
        return text, html

    async def dispatch(self, delivery: ScheduledDelivery) -> DeliveryStatus:
        """Send one delivery and return the status it ended in."""
        delivery_id = delivery.id
        logger.info("Sending delivery", delivery_id=delivery_id, email=delivery.recipient_email)

        try:
            video_url, attachment = self.resolve_media(delivery)
            text, html = self.compose(delivery, video_url)
            message_id = await asyncio.wait_for(
                asyncio.to_thread(
                    self.gateway.send,
                    to=delivery.recipient_email,
                    subject=delivery.subject,
                    text=text,
                    html=html,
                    attachment=attachment,
                ),
                timeout=self.send_timeout,
            )
        except asyncio.TimeoutError:
            return await self._mark_failed(
                delivery,
                GatewayError(f"Send timed out after {self.send_timeout}s"),
            )
        except Exception as e:
            return await self._mark_failed(delivery, e)

        try:
            await self.store.update_status(delivery_id, DeliveryStatus.SENT, sent_at=self.clock())
        except DeliveryNotFound:
            logger.warning("Delivery deleted while sending", delivery_id=delivery_id, resend_id=message_id)
            return DeliveryStatus.SENT
        except InvalidTransition as e:
            logger.warning("Delivery already finalized elsewhere", delivery_id=delivery_id, current=e.current)
            return DeliveryStatus(e.current)
        except Exception as e:
            logger.error(
                "Email sent but marking it sent failed",
                delivery_id=delivery_id,
                resend_id=message_id,
                error=str(e),
            )
            return await self._mark_failed(delivery, e)

        logger.info(
            "Delivery sent",
            delivery_id=delivery_id,
            email=delivery.recipient_email,
            resend_id=message_id,
        )
        return DeliveryStatus.SENT

    async def _mark_failed(self, delivery: ScheduledDelivery, error: Exception) -> DeliveryStatus:
        error_msg = str(error) or error.__class__.__name__
        logger.error(
            "Delivery failed",
            delivery_id=delivery.id,
            email=delivery.recipient_email,
            error_type=error.__class__.__name__,
            error=error_msg,
        )

        try:
            await self.store.update_status(delivery.id, DeliveryStatus.FAILED, error_message=error_msg)
        except DeliveryNotFound:
            logger.warning("Delivery deleted before it could be marked failed", delivery_id=delivery.id)
            return DeliveryStatus.FAILED
        except InvalidTransition as e:
            logger.warning("Delivery already finalized elsewhere", delivery_id=delivery.id, current=e.current)
            return DeliveryStatus(e.current)
        except Exception as mark_error:
            # Row stays pending and will be picked up again next tick
            logger.error(
                "Failed to mark delivery as failed",
                delivery_id=delivery.id,
                error=str(mark_error),
            )
            return DeliveryStatus.PENDING

        return DeliveryStatus.FAILED
