"""
METEO Notify Constants
======================
Fixed values and environment-driven configuration shared by all Lambdas.
"""

import os

# ============================================
# Environment
# ============================================

AWS_DEFAULT_REGION = os.environ.get("AWS_DEFAULT_REGION", "us-east-1")
LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

FIREBASE_SERVICE_ACCOUNT_KEY_ENV = "FIREBASE_SERVICE_ACCOUNT_KEY"
RESEND_API_KEY = os.environ.get("RESEND_API_KEY", "")

EMAIL_PROVIDER = os.environ.get("EMAIL_PROVIDER", "resend").lower()
DISPATCH_MODE = os.environ.get("DISPATCH_MODE", "broadcast").lower()

FROM_EMAIL = os.environ.get("FROM_EMAIL", "METEO Burkina <onboarding@resend.dev>")
BCC_PLACEHOLDER_TO = os.environ.get("BCC_PLACEHOLDER_TO", "onboarding@resend.dev")
EMAIL_TIMEOUT_SECONDS = int(os.environ.get("EMAIL_TIMEOUT_SECONDS", "30"))

# ============================================
# Fixed values
# ============================================

SITE_NAME = "METEO Burkina"
SITE_URL = "https://meteoburkina.bf/"

RESEND_API_URL = "https://api.resend.com/emails"

BROADCAST_RECIPIENT = "all"
SNIPPET_LINE_COUNT = 3
CREDENTIAL_PREFIX_LENGTH = 20

DISPATCH_MODES = ("broadcast", "bcc", "fanout")
EMAIL_PROVIDERS = ("resend", "ses")

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}

# ============================================
# Response messages
# ============================================

NOTIFICATIONS_SENT_MESSAGE = "Notifications sent successfully!"
NO_USERS_MESSAGE = "No users to notify."
MISSING_FIELDS_MESSAGE = "Missing type or description"
METHOD_NOT_ALLOWED_MESSAGE = "Method Not Allowed"
NOT_CONFIGURED_MESSAGE = "Server configuration error: Firebase Admin SDK not initialized."
SEND_FAILED_MESSAGE = "Failed to send notifications."
