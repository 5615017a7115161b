"""
METEO Notify Utility Helpers
============================
Request parsing and response building for API Gateway proxy events.

Required body fields must be non-empty strings; numbers, lists and other
JSON values are rejected the same way as missing fields.
"""

import base64
import binascii
import json

from lambdas.common.constants import CORS_HEADERS
from lambdas.common.errors import ValidationError
from lambdas.common.logger import get_logger

log = get_logger(__file__)


# ============================================
# Responses
# ============================================

def success_response(data: dict, status: int = 200, is_api: bool = True) -> dict:
    """
    Build a Lambda proxy success response.

    Args:
        data: Body payload
        status: HTTP status code
        is_api: If True, JSON stringify the body for API Gateway
    """
    return {
        "statusCode": status,
        "headers": {
            **CORS_HEADERS,
            "Content-Type": "application/json"
        },
        "body": json.dumps(data) if is_api else data,
        "isBase64Encoded": False
    }


def preflight_response() -> dict:
    """Empty 200 response for CORS preflight requests."""
    return {
        "statusCode": 200,
        "headers": dict(CORS_HEADERS),
        "body": "",
        "isBase64Encoded": False
    }


# ============================================
# Requests
# ============================================

def get_http_method(event: dict) -> str:
    """Get the HTTP method from a REST API (v1) or HTTP API (v2) event."""
    method = event.get("httpMethod") or event.get("requestContext", {}).get("http", {}).get("method")
    return (method or "").upper()


def parse_body(event: dict) -> dict:
    """
    Parse the JSON body of an API Gateway event.

    Bodies that are missing, not valid JSON, or not a JSON object come back
    as an empty dict so field validation reports them uniformly.
    """
    body = event.get("body")
    if not body:
        return {}
    if isinstance(body, dict):
        return body

    if event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as err:
            log.warning(f"Could not decode base64 body: {err}")
            return {}

    try:
        parsed = json.loads(body)
    except json.JSONDecodeError as err:
        log.warning(f"Body is not valid JSON: {err}")
        return {}

    if not isinstance(parsed, dict):
        log.warning(f"Body is a JSON {type(parsed).__name__}, expected an object")
        return {}
    return parsed


def require_fields(data: dict, *fields: str, message: str = None) -> None:
    """
    Ensure every field is a non-empty string. Truthy non-string values
    such as 5 or ["a"] count as missing.

    Raises:
        ValidationError: Listing the missing fields, or with ``message`` if given
    """
    missing = [
        field for field in fields
        if not isinstance(data.get(field), str) or not data.get(field)
    ]
    if missing:
        raise ValidationError(
            message=message or f"Missing required fields: {', '.join(missing)}",
            function="require_fields"
        )
