"""
METEO Notify Firebase Helpers
=============================
Startup credential handling and user directory lookups against
Firebase Authentication.

The credential is read once per process (Lambda cold start). A missing or
corrupt key never crashes the process: every request answers with a
configuration error instead.
"""

import json
import os
from dataclasses import dataclass
from typing import List, Optional

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError
from google.auth.exceptions import GoogleAuthError

from lambdas.common.constants import (
    CREDENTIAL_PREFIX_LENGTH,
    FIREBASE_SERVICE_ACCOUNT_KEY_ENV
)
from lambdas.common.errors import RecipientLookupError
from lambdas.common.logger import get_logger

log = get_logger(__file__)


# ============================================
# Credential State
# ============================================

@dataclass(frozen=True)
class CredentialState:
    """Write-once outcome of the startup credential check."""

    app: Optional[firebase_admin.App] = None
    reason: Optional[str] = None

    @property
    def is_ready(self) -> bool:
        return self.app is not None

    @classmethod
    def ready(cls, app: firebase_admin.App) -> "CredentialState":
        return cls(app=app)

    @classmethod
    def failed(cls, reason: str) -> "CredentialState":
        return cls(reason=reason)


def initialize_credentials(raw_key: str = None) -> CredentialState:
    """
    Build the Firebase app from the service account JSON.

    Args:
        raw_key: Service account JSON; read from the environment when omitted

    Returns:
        CredentialState, ready or failed with a reason
    """
    if raw_key is None:
        raw_key = os.environ.get(FIREBASE_SERVICE_ACCOUNT_KEY_ENV)

    if not raw_key:
        log.error(f"{FIREBASE_SERVICE_ACCOUNT_KEY_ENV} environment variable is not set.")
        return CredentialState.failed("missing credential")

    try:
        service_account = json.loads(raw_key)
    except json.JSONDecodeError as err:
        log.error(f"CRITICAL: Failed to parse {FIREBASE_SERVICE_ACCOUNT_KEY_ENV}. The JSON is corrupt. {err}")
        log.error(f'The key starts with: "{raw_key[:CREDENTIAL_PREFIX_LENGTH]}..."')
        return CredentialState.failed("corrupt credential")

    if not isinstance(service_account, dict):
        log.error(f"CRITICAL: {FIREBASE_SERVICE_ACCOUNT_KEY_ENV} must be a JSON object, got {type(service_account).__name__}.")
        return CredentialState.failed("invalid credential")

    # Default app may already exist in this process.
    try:
        app = firebase_admin.get_app()
        log.info("Firebase Admin SDK already initialized, reusing default app.")
        return CredentialState.ready(app)
    except ValueError:
        pass

    try:
        app = firebase_admin.initialize_app(credentials.Certificate(service_account))
    except (ValueError, TypeError, OSError) as err:
        log.error(f"CRITICAL: {FIREBASE_SERVICE_ACCOUNT_KEY_ENV} is not a valid service account: {err}")
        return CredentialState.failed("invalid credential")

    log.info("Firebase Admin SDK initialized successfully.")
    return CredentialState.ready(app)


# ============================================
# User Directory
# ============================================

class FirebaseUserDirectory:
    """
    Read-only view of Firebase Authentication users.
    """

    def __init__(self, app: firebase_admin.App = None):
        self.app = app

    def list_emails(self) -> List[str]:
        """
        Get the email of every user, skipping users without one.

        Listing failures propagate; a broadcast with a broken directory
        is a failed request.
        """
        log.info("Listing all Firebase users...")
        page = auth.list_users(app=self.app)
        emails = [user.email for user in page.iterate_all() if user.email]
        log.info(f"Found {len(emails)} users with an email on file")
        return emails

    def get_email(self, uid: str) -> Optional[str]:
        """
        Get a single user's email.

        Returns:
            The email, or None if the user has none on file

        Raises:
            RecipientLookupError: If the user is missing or the lookup fails
        """
        try:
            user = auth.get_user(uid, app=self.app)
        except auth.UserNotFoundError as err:
            raise RecipientLookupError(
                message=f"User not found: {uid}",
                function="get_email",
                recipient_id=uid
            ) from err
        except (FirebaseError, GoogleAuthError, ValueError) as err:
            raise RecipientLookupError(
                message=f"Lookup failed for {uid}: {err}",
                function="get_email",
                recipient_id=uid
            ) from err

        return user.email or None
