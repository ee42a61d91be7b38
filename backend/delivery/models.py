"""
Scheduled delivery records and their status state machine.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any

from backend.delivery.errors import InvalidTransition


class DeliveryStatus(str, Enum):
    """Status values for scheduled video deliveries"""
    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self is not DeliveryStatus.PENDING

    def can_transition(self, target: "DeliveryStatus") -> bool:
        """Only pending -> sent and pending -> failed are allowed."""
        return self is DeliveryStatus.PENDING and target.is_terminal


class MediaKind(str, Enum):
    URL = "url"
    PATH = "path"


@dataclass(frozen=True)
class MediaRef:
    """Where the video payload lives: a public storage URL or a local file."""
    kind: MediaKind
    location: str

    @classmethod
    def url(cls, location: str) -> "MediaRef":
        return cls(MediaKind.URL, location)

    @classmethod
    def path(cls, location: str) -> "MediaRef":
        return cls(MediaKind.PATH, location)


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Parse a Supabase timestamp (ISO string) into an aware UTC datetime."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class ScheduledDelivery:
    """A video email waiting for (or done with) its scheduled send time."""

    id: Optional[str]
    recipient_email: str
    subject: str
    media: MediaRef
    media_filename: str
    scheduled_at: datetime
    message: str = ""
    status: DeliveryStatus = DeliveryStatus.PENDING
    created_at: datetime = field(default_factory=utcnow)
    sent_at: Optional[datetime] = None
    error_message: Optional[str] = None

    def is_due(self, now: datetime) -> bool:
        return self.status is DeliveryStatus.PENDING and self.scheduled_at <= now

    def transition(
        self,
        target: DeliveryStatus,
        *,
        at: Optional[datetime] = None,
        error_message: Optional[str] = None,
    ) -> "ScheduledDelivery":
        """
        Return a copy moved to a terminal status.

        sent_at is set only for SENT; error_message only for FAILED.
        """
        if not self.status.can_transition(target):
            raise InvalidTransition(str(self.id), self.status.value, target.value)

        if target is DeliveryStatus.SENT:
            return replace(self, status=target, sent_at=at or utcnow(), error_message=None)
        return replace(self, status=target, sent_at=None, error_message=error_message)

    # =========================================================================
    # Row mapping
    # =========================================================================

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "ScheduledDelivery":
        if row.get("video_url"):
            media = MediaRef.url(row["video_url"])
        else:
            media = MediaRef.path(row.get("video_path") or "")

        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            recipient_email=row["recipient_email"],
            subject=row["subject"],
            message=row.get("message") or "",
            media=media,
            media_filename=row.get("video_filename") or "",
            scheduled_at=parse_timestamp(row["scheduled_at"]),
            status=DeliveryStatus(row.get("status", DeliveryStatus.PENDING.value)),
            created_at=parse_timestamp(row.get("created_at")) or utcnow(),
            sent_at=parse_timestamp(row.get("sent_at")),
            error_message=row.get("error_message"),
        )

    def to_row(self) -> Dict[str, Any]:
        """Insert payload; id is assigned by the database."""
        return {
            "recipient_email": self.recipient_email,
            "subject": self.subject,
            "message": self.message,
            "video_url": self.media.location if self.media.kind is MediaKind.URL else None,
            "video_path": self.media.location if self.media.kind is MediaKind.PATH else None,
            "video_filename": self.media_filename,
            "scheduled_at": self.scheduled_at.isoformat(),
            "status": self.status.value,
            "created_at": self.created_at.isoformat(),
            "sent_at": self.sent_at.isoformat() if self.sent_at else None,
            "error_message": self.error_message,
        }

    def to_public_dict(self) -> Dict[str, Any]:
        """Status and metadata for API listings. Never exposes media locations."""
        return {
            "id": self.id,
            "recipientEmail": self.recipient_email,
            "subject": self.subject,
            "message": self.message,
            "videoFilename": self.media_filename,
            "scheduledAt": self.scheduled_at.isoformat(),
            "status": self.status.value,
            "createdAt": self.created_at.isoformat(),
            "sentAt": self.sent_at.isoformat() if self.sent_at else None,
            "errorMessage": self.error_message,
        }
