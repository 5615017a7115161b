"""
METEO Notify Notification Dispatcher
====================================
Resolves who gets a bulletin notification and hands the email to the
configured provider.

Dispatch modes (one per deployment, see DISPATCH_MODE):
- broadcast: one provider call, every recipient in "to"
- bcc:       one provider call, recipients in "bcc", placeholder "to"
- fanout:    one provider call per recipient, sent concurrently
"""

import asyncio
from dataclasses import dataclass
from typing import List, Optional, Tuple

import aiohttp

from lambdas.common.constants import (
    BCC_PLACEHOLDER_TO,
    BROADCAST_RECIPIENT,
    DISPATCH_MODE,
    DISPATCH_MODES,
    EMAIL_PROVIDER,
    EMAIL_PROVIDERS,
    EMAIL_TIMEOUT_SECONDS,
    FROM_EMAIL,
    MISSING_FIELDS_MESSAGE,
    RESEND_API_KEY
)
from lambdas.common.errors import RecipientLookupError
from lambdas.common.logger import get_logger
from lambdas.common.resend_helper import ResendEmailSender
from lambdas.common.ses_helper import SesEmailSender
from lambdas.common.utility_helpers import require_fields
from lambdas.send_notifications.email_template import NotificationMessage

log = get_logger(__file__)


# ============================================
# Request
# ============================================

@dataclass(frozen=True)
class NotificationRequest:
    notification_type: str
    description: str
    recipient_id: Optional[str] = None

    @property
    def is_broadcast(self) -> bool:
        return not self.recipient_id or self.recipient_id == BROADCAST_RECIPIENT

    @classmethod
    def from_body(cls, body: dict) -> "NotificationRequest":
        """
        Validate a parsed request body.

        Raises:
            ValidationError: If type or description is missing or empty
        """
        require_fields(body, "type", "description", message=MISSING_FIELDS_MESSAGE)

        recipient_id = body.get("recipientId")
        if recipient_id is not None and not isinstance(recipient_id, str):
            recipient_id = str(recipient_id)

        return cls(
            notification_type=body["type"],
            description=body["description"],
            recipient_id=recipient_id or None
        )


@dataclass(frozen=True)
class DispatchResult:
    recipients: Tuple[str, ...]
    ok: bool
    response: Optional[dict] = None
    error: Optional[BaseException] = None


def unique_emails(emails) -> List[str]:
    """Drop empty and repeated addresses, keeping first-seen order."""
    return list(dict.fromkeys(email for email in emails if email))


def build_email_sender(provider: str = EMAIL_PROVIDER, from_email: str = FROM_EMAIL):
    """
    Build the sender for the configured email provider.

    Raises:
        ValueError: For an unknown provider name
    """
    if provider == "resend":
        if not RESEND_API_KEY:
            log.warning("RESEND_API_KEY is not set; sends will fail.")
        return ResendEmailSender(api_key=RESEND_API_KEY, from_email=from_email)
    if provider == "ses":
        return SesEmailSender(from_email=from_email)
    raise ValueError(f"Unknown email provider '{provider}', expected one of {EMAIL_PROVIDERS}")


# ============================================
# Dispatcher
# ============================================

class NotificationDispatcher:
    """
    Recipient resolution and email dispatch for one request.

    Args:
        directory: User directory with list_emails() and get_email(uid)
        sender: Email sender with an async send(session, to, subject, html, text, bcc)
        mode: One of DISPATCH_MODES
    """

    def __init__(
        self,
        directory,
        sender,
        mode: str = DISPATCH_MODE,
        bcc_placeholder: str = BCC_PLACEHOLDER_TO,
        timeout_seconds: int = EMAIL_TIMEOUT_SECONDS
    ):
        if mode not in DISPATCH_MODES:
            raise ValueError(f"Unknown dispatch mode '{mode}', expected one of {DISPATCH_MODES}")
        self.directory = directory
        self.sender = sender
        self.mode = mode
        self.bcc_placeholder = bcc_placeholder
        self.timeout_seconds = timeout_seconds

    def resolve_recipients(self, request: NotificationRequest) -> List[str]:
        """
        Get the recipient emails for a request.

        A failed single-user lookup yields no recipients rather than an error.
        """
        if request.is_broadcast:
            return unique_emails(self.directory.list_emails())

        log.info(f"Looking up single recipient {request.recipient_id}")
        try:
            email = self.directory.get_email(request.recipient_id)
        except RecipientLookupError as err:
            log.warning(f"⚠️ Recipient lookup failed, nobody to notify: {err.message}")
            return []

        if not email:
            log.warning(f"⚠️ User {request.recipient_id} has no email on file")
            return []
        return [email]

    async def dispatch(self, message: NotificationMessage, recipients: List[str]) -> List[DispatchResult]:
        """
        Send the message to every recipient using the configured mode.

        Returns:
            One DispatchResult per provider call

        Raises:
            The first failure of any provider call. In fanout mode the other
            calls still complete first, so some emails may have gone out.
        """
        log.info(f"Dispatching '{message.subject}' to {len(recipients)} recipient(s) in {self.mode} mode")

        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            if self.mode == "fanout":
                results = await self._fan_out(session, message, recipients)
            else:
                results = [await self._send_batch(session, message, recipients)]

        failures = [result for result in results if not result.ok]
        log.info(f"Dispatch complete - {len(results) - len(failures)} call(s) ok, {len(failures)} failed")

        if failures:
            raise failures[0].error
        return results

    async def _send_batch(self, session: aiohttp.ClientSession, message: NotificationMessage, recipients: List[str]) -> DispatchResult:
        if self.mode == "bcc":
            to, bcc = [self.bcc_placeholder], list(recipients)
        else:
            to, bcc = list(recipients), None

        response = await self.sender.send(
            session,
            to=to,
            subject=message.subject,
            html=message.html_body,
            text=message.text_body,
            bcc=bcc
        )
        return DispatchResult(recipients=tuple(recipients), ok=True, response=response)

    async def _fan_out(self, session: aiohttp.ClientSession, message: NotificationMessage, recipients: List[str]) -> List[DispatchResult]:
        tasks = [
            self.sender.send(
                session,
                to=[email],
                subject=message.subject,
                html=message.html_body,
                text=message.text_body
            )
            for email in recipients
        ]
        outcomes = await asyncio.gather(*tasks, return_exceptions=True)

        results = []
        for email, outcome in zip(recipients, outcomes):
            if isinstance(outcome, BaseException):
                log.error(f"❌ [{email}] send failed: {outcome}")
                results.append(DispatchResult(recipients=(email,), ok=False, error=outcome))
            else:
                log.info(f"✅ [{email}] sent")
                results.append(DispatchResult(recipients=(email,), ok=True, response=outcome))
        return results
