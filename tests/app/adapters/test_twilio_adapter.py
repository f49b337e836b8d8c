"""Tests for the Twilio carrier adapter."""

import base64
import hashlib
import hmac
from urllib.parse import parse_qs

import httpx
import pytest

from app.adapters.twilio import TwilioAdapter, parse_twilio_form
from app.schemas.carrier import OutboundMessage

AUTH_TOKEN = "test-auth-token"


def make_adapter(handler):
    adapter = TwilioAdapter(
        account_sid="AC123",
        auth_token=AUTH_TOKEN,
        from_number="whatsapp:+14155238886",
    )
    adapter._client = httpx.AsyncClient(
        base_url="https://api.twilio.com",
        transport=httpx.MockTransport(handler),
    )
    return adapter


def sign(url, params):
    payload = url + "".join(f"{k}{params[k]}" for k in sorted(params))
    digest = hmac.new(AUTH_TOKEN.encode(), payload.encode(), hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def test_parse_inbound_form():
    webhook = parse_twilio_form(
        {
            "MessageSid": "SM1",
            "From": "whatsapp:+15551234567",
            "Body": "hi",
            "MediaUrl0": "https://api.twilio.com/media/1",
            "MediaContentType0": "image/jpeg",
        }
    )
    assert webhook.provider_message_id == "SM1"
    assert webhook.from_address == "whatsapp:+15551234567"
    assert webhook.media_type == "image/jpeg"
    assert not webhook.is_status_callback


def test_parse_status_callback():
    webhook = parse_twilio_form({"MessageSid": "SM1", "MessageStatus": "Delivered"})
    assert webhook.carrier_status == "delivered"
    assert webhook.is_status_callback


def test_parse_rejects_form_without_sid_or_sender():
    with pytest.raises(ValueError):
        parse_twilio_form({"Body": "hi"})


def test_verify_webhook_signature():
    adapter = TwilioAdapter("AC123", AUTH_TOKEN, "whatsapp:+1")
    url = "https://gateway.example.com/webhooks/carrier"
    params = {"From": "whatsapp:+1555", "Body": "hi", "MessageSid": "SM1"}

    assert adapter.verify_webhook(url, params, {"X-Twilio-Signature": sign(url, params)})
    assert adapter.verify_webhook(url, params, {"x-twilio-signature": sign(url, params)})
    assert not adapter.verify_webhook(url, params, {"X-Twilio-Signature": "bogus"})
    assert not adapter.verify_webhook(url, params, {})


@pytest.mark.asyncio
async def test_send_posts_form_and_returns_sid():
    captured = {}

    def handler(request):
        captured["path"] = request.url.path
        captured["form"] = parse_qs(request.content.decode())
        return httpx.Response(201, json={"sid": "SM42", "status": "queued"})

    adapter = make_adapter(handler)
    result = await adapter.send(
        OutboundMessage(
            to_address="+15551234567",
            body="hello",
            media_url="https://cdn.example.com/a.jpg",
        )
    )
    await adapter.aclose()

    assert result.success
    assert result.provider_message_id == "SM42"
    assert captured["path"] == "/2010-04-01/Accounts/AC123/Messages.json"
    assert captured["form"]["To"] == ["whatsapp:+15551234567"]
    assert captured["form"]["From"] == ["whatsapp:+14155238886"]
    assert captured["form"]["MediaUrl"] == ["https://cdn.example.com/a.jpg"]


@pytest.mark.asyncio
async def test_send_rejected_by_carrier():
    adapter = make_adapter(lambda request: httpx.Response(400, json={"code": 21211}))
    result = await adapter.send(OutboundMessage(to_address="+1555", body="x"))
    await adapter.aclose()

    assert not result.success
    assert result.provider_message_id is None
    assert "400" in result.error


@pytest.mark.asyncio
async def test_send_network_error_propagates():
    def handler(request):
        raise httpx.ConnectError("down", request=request)

    adapter = make_adapter(handler)
    with pytest.raises(httpx.ConnectError):
        await adapter.send(OutboundMessage(to_address="+1555", body="x"))
    await adapter.aclose()
