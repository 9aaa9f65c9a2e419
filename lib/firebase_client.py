# =============================================================================
# lib/firebase_client.py - Optional Firebase ID Token Verification
# =============================================================================
# Firebase is only used to verify ID tokens presented when linking a social
# identity. When the service account settings are absent the verifier stays
# disabled and verification requests fail with NOT_IMPLEMENTED.
#
# Usage:
#   verifier = FirebaseTokenVerifier.from_settings(settings)
#   claims = verifier.verify(id_token)   # {"uid": ..., "email": ...}
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import firebase_admin
from firebase_admin import auth as firebase_auth
from firebase_admin import credentials
from firebase_admin.exceptions import FirebaseError

from app.config import Settings
from app.exceptions import NotImplementedApiError, UnauthorizedError

logger = logging.getLogger(__name__)

FIREBASE_APP_NAME = "street-food-api"


@dataclass(frozen=True)
class VerifiedToken:
    """Claims we rely on from a verified Firebase ID token."""
    uid: str
    email: str | None = None


class FirebaseTokenVerifier:
    """Wraps a firebase_admin App; `app=None` means Firebase is not configured."""

    def __init__(self, app: Any | None = None):
        self._app = app

    @classmethod
    def from_settings(cls, settings: Settings) -> "FirebaseTokenVerifier":
        """
        Initialize the Firebase Admin SDK if credentials are configured.

        Initialization failures are logged and leave the verifier disabled,
        so a bad Firebase setup never blocks the rest of the API.
        """
        if not settings.firebase_configured:
            logger.warning(
                "Firebase credentials not configured. Firebase token verification is disabled."
            )
            return cls(None)

        try:
            app = firebase_admin.get_app(FIREBASE_APP_NAME)
        except ValueError:
            try:
                credential = credentials.Certificate({
                    "type": "service_account",
                    "project_id": settings.FIREBASE_PROJECT_ID,
                    "client_email": settings.FIREBASE_CLIENT_EMAIL,
                    "private_key": settings.FIREBASE_PRIVATE_KEY.replace("\\n", "\n"),
                    "token_uri": "https://oauth2.googleapis.com/token",
                })
                app = firebase_admin.initialize_app(credential, name=FIREBASE_APP_NAME)
            except (ValueError, FirebaseError) as e:
                logger.error(f"Failed to initialize Firebase Admin SDK: {e}")
                return cls(None)

        logger.info("Firebase Admin SDK initialized successfully")
        return cls(app)

    @property
    def is_configured(self) -> bool:
        return self._app is not None

    def verify(self, id_token: str) -> VerifiedToken:
        """
        Verify a Firebase ID token.

        Raises:
            NotImplementedApiError: If Firebase is not configured
            UnauthorizedError: If the token is invalid, expired or revoked
        """
        if not self.is_configured:
            raise NotImplementedApiError(
                "Firebase authentication is not configured. Please set "
                "FIREBASE_PROJECT_ID, FIREBASE_CLIENT_EMAIL, and FIREBASE_PRIVATE_KEY "
                "environment variables."
            )

        try:
            decoded = firebase_auth.verify_id_token(id_token, app=self._app)
        except (ValueError, FirebaseError) as e:
            logger.warning(f"Firebase token verification failed: {e}")
            raise UnauthorizedError("Invalid or expired identity token") from e

        return VerifiedToken(uid=decoded["uid"], email=decoded.get("email"))
