"""
METEO Notify AIOHTTP Helper
===========================
Async HTTP utilities for provider APIs.

Calls are made once. Failed requests are reported, never retried.
"""

import asyncio

import aiohttp

from lambdas.common.logger import get_logger
from lambdas.common.errors import DeliveryError

log = get_logger(__file__)


def provider_error_detail(status: int, payload, text: str = "") -> str:
    """Pull the most useful message out of an error response."""
    if isinstance(payload, dict):
        message = payload.get("message") or payload.get("error")
        if message:
            return f"API error {status}: {message}"
    return f"API error {status}: {text}".rstrip(": ")


async def post_json(
    session: aiohttp.ClientSession,
    url: str,
    headers: dict = None,
    json: dict = None,
    provider: str = None
) -> dict:
    """
    POST JSON to URL.

    Args:
        session: aiohttp session
        url: URL to post to
        headers: Request headers
        json: Body to send
        provider: Provider name for error context

    Returns:
        Parsed JSON response

    Raises:
        DeliveryError: On non-2xx responses or client errors
    """
    try:
        async with session.post(url, headers=headers, json=json) as resp:
            if resp.status not in (200, 201, 202):
                text = await resp.text()
                try:
                    payload = await resp.json(content_type=None)
                except ValueError:
                    payload = None
                raise DeliveryError(
                    details=provider_error_detail(resp.status, payload, text),
                    handler="aiohttp_helper",
                    function="post_json",
                    provider=provider
                )

            return await resp.json(content_type=None)

    except aiohttp.ClientError as err:
        log.error(f"AIOHTTP client error on POST {url}: {err}")
        raise DeliveryError(
            details=f"POST failed: {err}",
            handler="aiohttp_helper",
            function="post_json",
            provider=provider
        ) from err
    except asyncio.TimeoutError as err:
        log.error(f"POST to {url} timed out")
        raise DeliveryError(
            details=f"POST timed out: {url}",
            handler="aiohttp_helper",
            function="post_json",
            provider=provider
        ) from err
