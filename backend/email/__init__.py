"""
Email module for VideoCapsule.
Sends scheduled video messages via Resend.
"""

from backend.email.gateway import ResendGateway, EmailAttachment
from backend.email.templates import (
    compose_text_body,
    render_video_link_email,
    render_video_attachment_email,
)

__all__ = [
    "ResendGateway",
    "EmailAttachment",
    "compose_text_body",
    "render_video_link_email",
    "render_video_attachment_email",
]
