"""
METEO Notify Error Classes
==========================
Standardized error handling for the notification Lambdas.

Features:
- Consistent error response format
- HTTP status codes
- CORS headers on every error response
- Easy to catch and handle
"""

import json
import traceback
from typing import Optional

from lambdas.common.constants import (
    CORS_HEADERS,
    MISSING_FIELDS_MESSAGE,
    METHOD_NOT_ALLOWED_MESSAGE,
    NOT_CONFIGURED_MESSAGE,
    SEND_FAILED_MESSAGE
)
from lambdas.common.logger import get_logger

log = get_logger(__file__)


class NotifierError(Exception):
    """
    Base exception class for all notifier errors.

    Usage:
        raise NotifierError("Something went wrong", status=400)

    Or catch and convert to response:
        except NotifierError as e:
            return e.to_response()
    """

    def __init__(
        self,
        message: str,
        handler: str = "unknown",
        function: str = "unknown",
        status: int = 500,
        details: Optional[dict] = None
    ):
        self.message = message
        self.handler = handler
        self.function = function
        self.status = status
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict:
        """Convert error to the public JSON body."""
        return {
            "error": self.message,
            **self.details
        }

    def to_response(self) -> dict:
        """Convert error to Lambda proxy response format."""
        return {
            "statusCode": self.status,
            "headers": {
                **CORS_HEADERS,
                "Content-Type": "application/json"
            },
            "body": json.dumps(self.to_dict()),
            "isBase64Encoded": False
        }

    def log_error(self):
        """Log the error with full context."""
        log.error(f"💥 {self.__class__.__name__} in {self.handler}.{self.function}: {self.message}")
        if self.details:
            log.error(f"   Details: {self.details}")

    def __str__(self) -> str:
        return self.message


# ============================================
# Specific Error Types
# ============================================

class ConfigurationError(NotifierError):
    """Raised when the process started without a usable credential."""

    def __init__(self, message: str = NOT_CONFIGURED_MESSAGE, handler: str = "unknown", function: str = "unknown", reason: str = None):
        super().__init__(
            message=message,
            handler=handler,
            function=function,
            status=500
        )
        # Kept off the response body; only logged.
        self.reason = reason

    def log_error(self):
        super().log_error()
        if self.reason:
            log.error(f"   Startup failure: {self.reason}")


class ValidationError(NotifierError):
    """Raised when input validation fails."""

    def __init__(self, message: str = MISSING_FIELDS_MESSAGE, handler: str = "unknown", function: str = "unknown"):
        super().__init__(
            message=message,
            handler=handler,
            function=function,
            status=400
        )


class MethodNotAllowedError(NotifierError):
    """Raised for any HTTP method the endpoint does not serve."""

    def __init__(self, method: str = None, handler: str = "unknown", function: str = "unknown"):
        self.method = method
        super().__init__(
            message=METHOD_NOT_ALLOWED_MESSAGE,
            handler=handler,
            function=function,
            status=405
        )


class RecipientLookupError(NotifierError):
    """Raised when a single user cannot be fetched from the identity provider."""

    def __init__(self, message: str, handler: str = "firebase_helper", function: str = "unknown", recipient_id: str = None):
        self.recipient_id = recipient_id
        super().__init__(
            message=message,
            handler=handler,
            function=function,
            status=404
        )


class DeliveryError(NotifierError):
    """Raised when the email provider rejects or fails a send."""

    def __init__(self, details: str, handler: str = "unknown", function: str = "unknown", provider: str = None):
        self.provider = provider
        super().__init__(
            message=SEND_FAILED_MESSAGE,
            handler=handler,
            function=function,
            status=500,
            details={"details": details}
        )


# ============================================
# Error Handler Decorator
# ============================================

def handle_errors(handler_name: str):
    """
    Decorator to handle errors consistently across handlers.

    Usage:
        @handle_errors("send-notifications")
        def handler(event, context):
            ...
    """
    def decorator(func):
        def wrapper(event, context):
            try:
                return func(event, context)
            except NotifierError as e:
                e.log_error()
                return e.to_response()
            except Exception as e:
                # Catch unexpected errors
                log.error(f"💥 Unexpected error in {handler_name}: {str(e)}")
                log.error(traceback.format_exc())

                error = NotifierError(
                    message=SEND_FAILED_MESSAGE,
                    handler=handler_name,
                    function=func.__name__,
                    status=500,
                    details={"details": str(e)}
                )
                return error.to_response()
        wrapper.__name__ = func.__name__
        wrapper.__doc__ = func.__doc__
        return wrapper
    return decorator
