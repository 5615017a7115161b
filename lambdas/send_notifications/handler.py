"""
METEO Notify Send Notifications Handler
=======================================
API endpoint that emails registered users when a new bulletin is published.

Endpoint:
    OPTIONS *  - CORS preflight
    POST    *  - {"type": ..., "description": ..., "recipientId": optional}

A recipientId of "all" (or none) notifies every user.
"""

import asyncio
from datetime import datetime, timezone

from lambdas.common.constants import NO_USERS_MESSAGE, NOTIFICATIONS_SENT_MESSAGE
from lambdas.common.errors import ConfigurationError, MethodNotAllowedError, handle_errors
from lambdas.common.firebase_helper import CredentialState, FirebaseUserDirectory, initialize_credentials
from lambdas.common.logger import get_logger
from lambdas.common.utility_helpers import (
    get_http_method,
    parse_body,
    preflight_response,
    success_response
)
from lambdas.send_notifications.email_template import compose_message
from lambdas.send_notifications.notification_dispatcher import (
    NotificationDispatcher,
    NotificationRequest,
    build_email_sender
)

log = get_logger(__file__)

HANDLER = 'send-notifications'

# Built once per cold start
CREDENTIALS = initialize_credentials()


@handle_errors(HANDLER)
def handler(event, context):
    """
    Main Lambda handler for bulletin notifications.
    """
    return send_notifications(event, CREDENTIALS)


def send_notifications(event: dict, credentials: CredentialState, sender=None, directory=None) -> dict:
    """
    Validate the request, resolve recipients and send the notification.

    Args:
        event: API Gateway proxy event
        credentials: Startup credential state
        sender: Email sender; built from configuration when omitted
        directory: User directory; Firebase when omitted

    Raises:
        ConfigurationError: If the credential failed at startup
        MethodNotAllowedError: For methods other than POST and OPTIONS
        ValidationError: If type or description is missing
    """
    http_method = get_http_method(event)
    log.info(f"[{datetime.now(timezone.utc).isoformat()}] Function invoked with method: {http_method}")

    if http_method == "OPTIONS":
        return preflight_response()

    if not credentials.is_ready:
        raise ConfigurationError(handler=HANDLER, function="send_notifications", reason=credentials.reason)

    if http_method != "POST":
        raise MethodNotAllowedError(method=http_method, handler=HANDLER, function="send_notifications")

    request = NotificationRequest.from_body(parse_body(event))
    log.info(
        f"Notification request: type={request.notification_type!r}, "
        f"description={len(request.description)} chars, "
        f"recipient={request.recipient_id or 'all'}"
    )

    dispatcher = NotificationDispatcher(
        directory or FirebaseUserDirectory(credentials.app),
        sender or build_email_sender()
    )

    recipients = dispatcher.resolve_recipients(request)
    log.info(f"Resolved {len(recipients)} recipient(s)")

    if not recipients:
        log.info("No users to notify.")
        return success_response({"message": NO_USERS_MESSAGE})

    message = compose_message(request.notification_type, request.description)
    asyncio.run(dispatcher.dispatch(message, recipients))

    log.info(f"✅ Notified {len(recipients)} recipient(s)")
    return success_response({"message": NOTIFICATIONS_SENT_MESSAGE})
