# tests/test_email.py

from __future__ import annotations

from pathlib import Path

import pytest
import resend

from backend.delivery.errors import GatewayError
from backend.email.gateway import EmailAttachment, ResendGateway
from backend.email.templates import (
    DEFAULT_MESSAGE,
    compose_text_body,
    render_video_attachment_email,
    render_video_link_email,
)


@pytest.fixture()
def captured(monkeypatch):
    calls = []

    def fake_send(params):
        calls.append(params)
        return {"id": "re_123"}

    monkeypatch.setattr(resend.Emails, "send", staticmethod(fake_send))
    return calls


def test_send_builds_resend_params(captured) -> None:
    gateway = ResendGateway(api_key="re_key", from_address="capsule@example.com")

    message_id = gateway.send(
        to="friend@example.com",
        subject="Hello",
        text="Watch this",
        html="<p>Watch this</p>",
    )

    assert message_id == "re_123"
    assert captured == [{
        "from": "capsule@example.com",
        "to": ["friend@example.com"],
        "subject": "Hello",
        "text": "Watch this",
        "html": "<p>Watch this</p>",
    }]


def test_send_attaches_local_video(captured, tmp_path: Path) -> None:
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"\x01\x02\x03")

    ResendGateway(api_key="re_key").send(
        to="friend@example.com",
        subject="Hello",
        text="See attachment",
        attachment=EmailAttachment(filename="clip.mp4", path=str(video)),
    )

    assert captured[0]["attachments"] == [{"filename": "clip.mp4", "content": [1, 2, 3]}]


def test_unreadable_attachment_raises_gateway_error(captured, tmp_path: Path) -> None:
    gateway = ResendGateway(api_key="re_key")

    with pytest.raises(GatewayError, match="Could not read attachment"):
        gateway.send(
            to="friend@example.com",
            subject="Hello",
            text="x",
            attachment=EmailAttachment(filename="gone.mp4", path=str(tmp_path / "gone.mp4")),
        )
    assert captured == []


def test_resend_failure_becomes_gateway_error(monkeypatch) -> None:
    def boom(params):
        raise RuntimeError("invalid recipient")

    monkeypatch.setattr(resend.Emails, "send", staticmethod(boom))

    with pytest.raises(GatewayError, match="invalid recipient"):
        ResendGateway(api_key="re_key").send(to="bad", subject="s", text="t")


def test_missing_api_key_raises_gateway_error(monkeypatch, captured) -> None:
    from backend.config import config

    monkeypatch.setattr(config, "RESEND_API_KEY", None)

    with pytest.raises(GatewayError, match="RESEND_API_KEY"):
        ResendGateway().send(to="friend@example.com", subject="s", text="t")
    assert captured == []


def test_text_body_with_link_and_with_attachment() -> None:
    assert compose_text_body("Hi", "https://x/v.mp4") == "Hi\n\nWatch your video: https://x/v.mp4"
    assert compose_text_body("") == f"{DEFAULT_MESSAGE}\n\nWatch your video: See attachment"


def test_html_bodies_escape_sender_content() -> None:
    html = render_video_link_email("<script>alert(1)</script>\nbye", "https://x/v.mp4?a=1&b=2", "v.mp4")

    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "<br>bye" in html
    assert 'href="https://x/v.mp4?a=1&amp;b=2"' in html

    attached = render_video_attachment_email("")
    assert DEFAULT_MESSAGE in attached
    assert "attachment" in attached
