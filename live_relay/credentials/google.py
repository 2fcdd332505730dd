"""google-auth backed credential exchange for Vertex AI."""

from __future__ import annotations

import time
import logging
from typing import Any
from datetime import timezone

import orjson
import google.auth
from google.auth import exceptions as google_auth_exceptions
from google.oauth2 import service_account
from google.auth.transport.requests import Request

from live_relay.errors import AuthFailure
from live_relay.state.token import TokenRecord
from live_relay.state.settings import CredentialSettings

from .provider import ExchangeFn

logger = logging.getLogger(__name__)

# Google access tokens live for an hour; used only when the library reports no expiry.
_FALLBACK_TOKEN_LIFETIME_S = 3300.0


def load_google_credentials(settings: CredentialSettings) -> Any:
    """Resolve credentials once at startup: inline JSON, then key file path, then ADC."""
    scopes = list(settings.scopes)
    if settings.credentials_json:
        try:
            info = orjson.loads(settings.credentials_json)
        except orjson.JSONDecodeError as exc:
            raise ValueError("GOOGLE_APPLICATION_CREDENTIALS_JSON is not valid JSON") from exc
        logger.info("credentials: using inline service account")
        return service_account.Credentials.from_service_account_info(info, scopes=scopes)
    if settings.credentials_path:
        logger.info("credentials: using service account file %s", settings.credentials_path)
        return service_account.Credentials.from_service_account_file(settings.credentials_path, scopes=scopes)
    credentials, _project = google.auth.default(scopes=scopes)
    logger.info("credentials: using application default credentials")
    return credentials


def _expiry_epoch(credentials: Any) -> float:
    expiry = getattr(credentials, "expiry", None)
    if expiry is None:
        return time.time() + _FALLBACK_TOKEN_LIFETIME_S
    # google-auth reports naive UTC datetimes.
    if expiry.tzinfo is None:
        expiry = expiry.replace(tzinfo=timezone.utc)
    return expiry.timestamp()


def build_google_exchange(settings: CredentialSettings) -> ExchangeFn:
    credentials = load_google_credentials(settings)
    request = Request()

    def exchange() -> TokenRecord:
        try:
            credentials.refresh(request)
        except google_auth_exceptions.GoogleAuthError as exc:
            raise AuthFailure(f"google credential refresh failed: {exc}") from exc
        return TokenRecord(value=credentials.token or "", expires_at=_expiry_epoch(credentials))

    return exchange


__all__ = ["build_google_exchange", "load_google_credentials"]
