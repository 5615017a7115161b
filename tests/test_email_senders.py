"""Tests for the Resend and SES senders."""
from __future__ import annotations

import asyncio

import pytest
from botocore.exceptions import ClientError

from lambdas.common import resend_helper
from lambdas.common.aiohttp_helper import post_json, provider_error_detail
from lambdas.common.errors import DeliveryError
from lambdas.common.resend_helper import ResendEmailSender
from lambdas.common.ses_helper import SesEmailSender

FROM = "METEO Burkina <onboarding@resend.dev>"


class FakeSesClient:
    def __init__(self, error: Exception = None):
        self.error = error
        self.calls = []

    def send_email(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return {"MessageId": "ses-123"}


def test_provider_error_detail_prefers_json_message():
    assert provider_error_detail(422, {"message": "Invalid `to` field"}) == "API error 422: Invalid `to` field"
    assert provider_error_detail(500, None, "Internal Server Error") == "API error 500: Internal Server Error"
    assert provider_error_detail(502, None, "") == "API error 502"


def test_resend_payload_shape():
    sender = ResendEmailSender(api_key="re_key", from_email=FROM)

    payload = sender.build_payload(["a@x.com"], "Subject", "<p>hi</p>", text="hi", bcc=["b@x.com"])

    assert payload == {
        "from": FROM,
        "to": ["a@x.com"],
        "subject": "Subject",
        "html": "<p>hi</p>",
        "text": "hi",
        "bcc": ["b@x.com"],
    }
    assert "bcc" not in sender.build_payload(["a@x.com"], "S", "h")


@pytest.mark.asyncio
async def test_resend_posts_with_bearer_token(monkeypatch):
    captured = {}

    async def fake_post_json(session, url, headers=None, json=None, provider=None):
        captured.update(url=url, headers=headers, json=json, provider=provider)
        return {"id": "re-1"}

    monkeypatch.setattr(resend_helper, "post_json", fake_post_json)
    sender = ResendEmailSender(api_key="re_key", from_email=FROM)

    response = await sender.send(None, to=["a@x.com", "b@x.com"], subject="S", html="<p>h</p>")

    assert response == {"id": "re-1"}
    assert captured["url"] == "https://api.resend.com/emails"
    assert captured["headers"]["Authorization"] == "Bearer re_key"
    assert captured["json"]["to"] == ["a@x.com", "b@x.com"]
    assert captured["provider"] == "resend"


@pytest.mark.asyncio
async def test_resend_without_api_key_fails():
    sender = ResendEmailSender(api_key="", from_email=FROM)

    with pytest.raises(DeliveryError) as exc:
        await sender.send(None, to=["a@x.com"], subject="S", html="h")
    assert "API key" in exc.value.details["details"]


@pytest.mark.asyncio
async def test_ses_sends_with_bcc():
    client = FakeSesClient()
    sender = SesEmailSender(from_email=FROM, client=client)

    response = await sender.send(None, to=["noreply@x.com"], subject="S", html="<p>h</p>", text="h", bcc=["a@x.com"])

    assert response == {"id": "ses-123"}
    call = client.calls[0]
    assert call["Source"] == FROM
    assert call["Destination"] == {"ToAddresses": ["noreply@x.com"], "BccAddresses": ["a@x.com"]}
    assert call["Message"]["Body"]["Html"]["Data"] == "<p>h</p>"
    assert call["Message"]["Body"]["Text"]["Data"] == "h"


def test_ses_client_error_becomes_delivery_error():
    error = ClientError({"Error": {"Code": "MessageRejected", "Message": "Email address is not verified."}}, "SendEmail")
    sender = SesEmailSender(from_email=FROM, client=FakeSesClient(error=error))

    with pytest.raises(DeliveryError) as exc:
        sender.send_sync(["a@x.com"], "S", "h")
    assert exc.value.details == {"details": "SES error: Email address is not verified."}


class TimingOutSession:
    def post(self, url, headers=None, json=None):
        raise asyncio.TimeoutError()


@pytest.mark.asyncio
async def test_post_timeout_becomes_delivery_error():
    with pytest.raises(DeliveryError) as exc:
        await post_json(TimingOutSession(), "https://api.resend.com/emails", json={}, provider="resend")

    assert exc.value.details == {"details": "POST timed out: https://api.resend.com/emails"}
    assert exc.value.provider == "resend"
