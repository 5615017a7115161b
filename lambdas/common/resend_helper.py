"""
METEO Notify Resend Helper
==========================
Sends transactional email through the Resend REST API.
"""

from typing import List, Optional

import aiohttp

from lambdas.common.aiohttp_helper import post_json
from lambdas.common.constants import RESEND_API_URL
from lambdas.common.errors import DeliveryError
from lambdas.common.logger import get_logger

log = get_logger(__file__)


class ResendEmailSender:
    """
    Email sender backed by Resend.

    ``to`` and ``bcc`` accept a list, so one call can carry every recipient.
    """

    name = "resend"

    def __init__(self, api_key: str, from_email: str, url: str = RESEND_API_URL):
        self.api_key = api_key
        self.from_email = from_email
        self.url = url

    def build_payload(
        self,
        to: List[str],
        subject: str,
        html: str,
        text: str = None,
        bcc: Optional[List[str]] = None
    ) -> dict:
        payload = {
            "from": self.from_email,
            "to": to,
            "subject": subject,
            "html": html,
        }
        if text:
            payload["text"] = text
        if bcc:
            payload["bcc"] = bcc
        return payload

    async def send(
        self,
        session: aiohttp.ClientSession,
        to: List[str],
        subject: str,
        html: str,
        text: str = None,
        bcc: Optional[List[str]] = None
    ) -> dict:
        """
        Send one email.

        Returns:
            Resend response, e.g. {"id": "..."}

        Raises:
            DeliveryError: If the API key is missing or Resend rejects the email
        """
        if not self.api_key:
            raise DeliveryError(
                details="Missing API key for Resend",
                handler="resend_helper",
                function="send",
                provider=self.name
            )

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }
        payload = self.build_payload(to, subject, html, text=text, bcc=bcc)

        log.info(f"📧 Resend: sending '{subject}' to {len(to)} recipient(s), {len(bcc or [])} bcc")
        response = await post_json(session, self.url, headers=headers, json=payload, provider=self.name)
        log.info(f"📧 Resend accepted email {response.get('id', 'unknown')}")
        return response
