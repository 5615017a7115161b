"""
METEO Notify SES Helper
=======================
Sends email through Amazon SES as an alternative to Resend.
"""

import asyncio
from typing import List, Optional

import aiohttp
import boto3
from botocore.exceptions import BotoCoreError, ClientError

from lambdas.common.constants import AWS_DEFAULT_REGION
from lambdas.common.errors import DeliveryError
from lambdas.common.logger import get_logger

log = get_logger(__file__)


class SesEmailSender:
    """
    Email sender backed by SES ``send_email``.

    boto3 is blocking, so sends run in a worker thread.
    """

    name = "ses"

    def __init__(self, from_email: str, client=None, region: str = AWS_DEFAULT_REGION):
        self.from_email = from_email
        self.client = client or boto3.client("ses", region_name=region)

    def send_sync(
        self,
        to: List[str],
        subject: str,
        html: str,
        text: str = None,
        bcc: Optional[List[str]] = None
    ) -> dict:
        destination = {"ToAddresses": list(to)}
        if bcc:
            destination["BccAddresses"] = list(bcc)

        body = {"Html": {"Data": html, "Charset": "UTF-8"}}
        if text:
            body["Text"] = {"Data": text, "Charset": "UTF-8"}

        try:
            response = self.client.send_email(
                Source=self.from_email,
                Destination=destination,
                Message={
                    "Subject": {"Data": subject, "Charset": "UTF-8"},
                    "Body": body
                }
            )
        except ClientError as err:
            message = err.response.get("Error", {}).get("Message", str(err))
            raise DeliveryError(
                details=f"SES error: {message}",
                handler="ses_helper",
                function="send",
                provider=self.name
            ) from err
        except BotoCoreError as err:
            raise DeliveryError(
                details=f"SES error: {err}",
                handler="ses_helper",
                function="send",
                provider=self.name
            ) from err

        log.info(f"📧 SES accepted email {response.get('MessageId', 'unknown')}")
        return {"id": response.get("MessageId")}

    async def send(
        self,
        session: aiohttp.ClientSession,
        to: List[str],
        subject: str,
        html: str,
        text: str = None,
        bcc: Optional[List[str]] = None
    ) -> dict:
        """Send one email; ``session`` is unused but keeps the sender interface uniform."""
        log.info(f"📧 SES: sending '{subject}' to {len(to)} recipient(s), {len(bcc or [])} bcc")
        return await asyncio.to_thread(self.send_sync, to, subject, html, text, bcc)
