"""
Email bodies for scheduled video deliveries.
"""

from html import escape
from typing import Optional

DEFAULT_MESSAGE = "Someone has sent you a special video message."


def compose_text_body(message: str, video_url: Optional[str] = None) -> str:
    """Plain-text body: the message plus the video link, or a note about the attachment."""
    text = message or DEFAULT_MESSAGE
    return f"{text}\n\nWatch your video: {video_url or 'See attachment'}"


def render_video_link_email(
    message: str,
    video_url: str,
    video_filename: Optional[str] = None
) -> str:
    """
    HTML for a delivery whose video lives in storage.

    Args:
        message: Sender's message (newlines become line breaks)
        video_url: Public URL of the uploaded video
        video_filename: Shown in the footer

    Returns:
        HTML string for email
    """
    message_html = escape(message or DEFAULT_MESSAGE).replace("\n", "<br>")
    safe_url = escape(video_url, quote=True)
    filename = escape(video_filename or "Video Message")

    return f'''
    <!DOCTYPE html>
    <html>
    <head>
      <meta charset="utf-8">
      <meta name="viewport" content="width=device-width, initial-scale=1.0">
    </head>
    <body style="margin: 0; padding: 0; background: #f8f9fa;">
      <div style="font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; max-width: 600px; margin: 0 auto; padding: 30px; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); border-radius: 15px;">
        <div style="background: white; padding: 40px; border-radius: 10px; box-shadow: 0 10px 30px rgba(0,0,0,0.2);">
          <h1 style="color: #667eea; text-align: center; margin-bottom: 20px; font-size: 28px;">
            You've Got a Video Message!
          </h1>

          <div style="background: #f7fafc; padding: 25px; border-radius: 8px; margin: 25px 0; border-left: 4px solid #667eea;">
            <p style="color: #2d3748; line-height: 1.8; margin: 0; font-size: 16px;">
              {message_html}
            </p>
          </div>

          <div style="text-align: center; margin: 35px 0;">
            <a href="{safe_url}" target="_blank"
               style="display: inline-block; background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 16px 40px; text-decoration: none; border-radius: 50px; font-weight: bold; font-size: 18px;">
              Watch Video Now
            </a>
          </div>

          <!-- Footer -->
          <div style="margin-top: 30px; padding-top: 20px; border-top: 1px solid #e2e8f0; text-align: center;">
            <p style="color: #718096; font-size: 14px; margin: 5px 0;">
              Sent with love from <strong style="color: #667eea;">VideoCapsule</strong>
            </p>
            <p style="color: #a0aec0; font-size: 12px; margin: 5px 0;">
              {filename}
            </p>
          </div>
        </div>
      </div>
    </body>
    </html>
    '''


def render_video_attachment_email(message: str) -> str:
    """HTML for a delivery whose video travels as an attachment."""
    message_html = escape(message or DEFAULT_MESSAGE).replace("\n", "<br>")

    return f'''
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto; padding: 20px; color: #333;">
      <h2 style="color: #ff69b4; text-align: center;">You've received a video message!</h2>
      <p style="line-height: 1.6;">{message_html}</p>
      <p style="line-height: 1.6;">Please check the attachment to view your video.</p>
      <div style="margin: 30px 0; text-align: center; color: #ff69b4;">
        <p>VideoCapsule</p>
      </div>
    </div>
    '''
