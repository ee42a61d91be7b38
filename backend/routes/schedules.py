"""
Scheduled Video API Routes

Endpoints for uploading a video and scheduling its delivery, listing
scheduled videos and deleting them. Listings only carry status and
metadata, never the underlying media location.
"""

from typing import Optional, List

from fastapi import APIRouter, HTTPException, Depends, File, Form, UploadFile
from pydantic import BaseModel

from backend.config import config
from backend.delivery.errors import DeliveryError, DeliveryNotFound, ValidationError
from backend.delivery.models import MediaKind, ScheduledDelivery
from backend.delivery.service import ScheduleService
from backend.security import require_auth
from backend.utils.logging import api_logger as logger


router = APIRouter(prefix="/api", tags=["scheduled-videos"], dependencies=[require_auth])


# =============================================================================
# Request/Response Models
# =============================================================================

class ScheduledVideoResponse(BaseModel):
    """Status and metadata of a scheduled video."""
    id: str
    recipientEmail: str
    subject: str
    message: str
    videoFilename: str
    scheduledAt: str
    status: str
    createdAt: str
    sentAt: Optional[str] = None
    errorMessage: Optional[str] = None


class ScheduleCreatedResponse(BaseModel):
    """Response after a video has been uploaded and scheduled."""
    id: str
    recipientEmail: str
    subject: str
    message: str
    scheduledAt: str
    status: str
    videoUrl: Optional[str] = None


class MessageResponse(BaseModel):
    message: str


def get_schedule_service() -> ScheduleService:
    """Schedule service wired to Supabase (overridden in tests)."""
    from backend.database.deliveries import DeliveryStore
    from backend.database.media import MediaStore

    return ScheduleService(DeliveryStore(), MediaStore(), max_video_bytes=config.MAX_VIDEO_BYTES)


def _to_response(delivery: ScheduledDelivery) -> ScheduledVideoResponse:
    return ScheduledVideoResponse(**delivery.to_public_dict())


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/schedule-video", status_code=201, response_model=ScheduleCreatedResponse)
async def schedule_video(
    video: Optional[UploadFile] = File(None),
    recipient_email: Optional[str] = Form(None, alias="recipientEmail"),
    scheduled_at: Optional[str] = Form(None, alias="scheduledAt"),
    subject: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    service: ScheduleService = Depends(get_schedule_service),
):
    """
    Upload a video and schedule it for delivery.

    Multipart form fields: video (file), recipientEmail, scheduledAt
    (ISO 8601), subject, message (optional).
    """
    content = await video.read() if video is not None else None

    try:
        delivery = await service.create_schedule(
            recipient_email=recipient_email,
            subject=subject,
            scheduled_at=scheduled_at,
            filename=video.filename if video is not None else "",
            content=content,
            content_type=video.content_type if video is not None else None,
            message=message,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except DeliveryError as e:
        logger.error("Error scheduling video", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to schedule video")

    return ScheduleCreatedResponse(
        id=delivery.id,
        recipientEmail=delivery.recipient_email,
        subject=delivery.subject,
        message=delivery.message,
        scheduledAt=delivery.scheduled_at.isoformat(),
        status=delivery.status.value,
        videoUrl=delivery.media.location if delivery.media.kind is MediaKind.URL else None,
    )


@router.get("/scheduled-videos", response_model=List[ScheduledVideoResponse])
async def list_scheduled_videos(service: ScheduleService = Depends(get_schedule_service)):
    """List all scheduled videos, latest scheduled time first."""
    try:
        deliveries = await service.list_schedules()
    except DeliveryError as e:
        logger.error("Error fetching scheduled videos", error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch scheduled videos")

    return [_to_response(d) for d in deliveries]


@router.get("/scheduled-videos/{delivery_id}", response_model=ScheduledVideoResponse)
async def get_scheduled_video(
    delivery_id: str,
    service: ScheduleService = Depends(get_schedule_service),
):
    try:
        delivery = await service.get_schedule(delivery_id)
    except DeliveryNotFound:
        raise HTTPException(status_code=404, detail="Scheduled video not found")
    except DeliveryError as e:
        logger.error("Error fetching scheduled video", delivery_id=delivery_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to fetch scheduled video")

    return _to_response(delivery)


@router.delete("/scheduled-videos/{delivery_id}", response_model=MessageResponse)
async def delete_scheduled_video(
    delivery_id: str,
    service: ScheduleService = Depends(get_schedule_service),
):
    """Delete a scheduled video and its uploaded file, whatever its status."""
    try:
        await service.delete_schedule(delivery_id)
    except DeliveryNotFound:
        raise HTTPException(status_code=404, detail="Scheduled video not found")
    except DeliveryError as e:
        logger.error("Error deleting scheduled video", delivery_id=delivery_id, error=str(e))
        raise HTTPException(status_code=500, detail="Failed to delete scheduled video")

    return MessageResponse(message="Scheduled video deleted successfully")
