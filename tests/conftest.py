"""Pytest configuration: environment seeding and provider fakes."""
from __future__ import annotations

import os
from typing import Dict, List, Optional

os.environ.pop("FIREBASE_SERVICE_ACCOUNT_KEY", None)
os.environ["RESEND_API_KEY"] = os.environ.get("RESEND_API_KEY") or "re_test_key"
os.environ["AWS_DEFAULT_REGION"] = os.environ.get("AWS_DEFAULT_REGION") or "us-east-1"
os.environ["EMAIL_PROVIDER"] = "resend"
os.environ["DISPATCH_MODE"] = "broadcast"

import pytest

from lambdas.common.errors import DeliveryError, RecipientLookupError


class FakeDirectory:
    """In-memory stand-in for the Firebase user directory."""

    def __init__(self, emails: Optional[List[str]] = None, users: Optional[Dict[str, Optional[str]]] = None):
        self.emails = emails or []
        self.users = users or {}
        self.list_calls = 0
        self.lookups: List[str] = []

    def list_emails(self) -> List[str]:
        self.list_calls += 1
        return [email for email in self.emails if email]

    def get_email(self, uid: str) -> Optional[str]:
        self.lookups.append(uid)
        if uid not in self.users:
            raise RecipientLookupError(message=f"User not found: {uid}", recipient_id=uid)
        return self.users[uid]


class FakeSender:
    """Records every send; addresses in ``fail_for`` are rejected."""

    name = "fake"

    def __init__(self, fail_for=(), fail_all: bool = False):
        self.fail_for = set(fail_for)
        self.fail_all = fail_all
        self.calls: List[dict] = []

    async def send(self, session, to, subject, html, text=None, bcc=None):
        call = {"to": list(to), "subject": subject, "html": html, "text": text, "bcc": bcc}
        self.calls.append(call)
        if self.fail_all or self.fail_for.intersection(to):
            raise DeliveryError(details=f"API error 422: rejected {', '.join(to)}", provider=self.name)
        return {"id": f"email-{len(self.calls)}"}


class ExplodingDirectory:
    """Fails loudly if the pipeline touches the directory at all."""

    def list_emails(self):
        raise AssertionError("directory should not be used")

    def get_email(self, uid):
        raise AssertionError("directory should not be used")


@pytest.fixture
def fake_sender() -> FakeSender:
    return FakeSender()


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory(
        emails=["a@x.com", "b@x.com"],
        users={"uid-a": "a@x.com", "uid-noemail": None}
    )


@pytest.fixture
def directory_factory():
    return FakeDirectory


@pytest.fixture
def sender_factory():
    return FakeSender


@pytest.fixture
def exploding_directory() -> ExplodingDirectory:
    return ExplodingDirectory()
