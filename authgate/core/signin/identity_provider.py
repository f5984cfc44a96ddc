"""Firebase Authentication email/password sign-in over the REST API."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Dict, Optional

import requests

logger = logging.getLogger(__name__)

FIREBASE_SIGN_IN_URL = "https://identitytoolkit.googleapis.com/v1/accounts:signInWithPassword"

# REST error messages -> client SDK error codes
REST_ERROR_CODES = {
    "INVALID_EMAIL": "auth/invalid-email",
    "USER_DISABLED": "auth/user-disabled",
    "EMAIL_NOT_FOUND": "auth/user-not-found",
    "INVALID_PASSWORD": "auth/wrong-password",
    "INVALID_LOGIN_CREDENTIALS": "auth/invalid-credential",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "auth/too-many-requests",
}

INTERNAL_ERROR = "auth/internal-error"
NETWORK_ERROR = "auth/network-request-failed"
INVALID_API_KEY = "auth/invalid-api-key"


class IdentityProviderError(Exception):
    """Raised when the identity provider rejects or cannot process a sign-in."""

    def __init__(self, code: str, detail: Optional[str] = None) -> None:
        super().__init__(detail or code)
        self.code = code
        self.detail = detail


def error_code_from_response(body: Any) -> str:
    """
    Translate a Firebase REST error body into an SDK-style error code.

    Firebase returns ``{"error": {"message": "EMAIL_NOT_FOUND", ...}}``; some
    messages carry a suffix such as ``"TOO_MANY_ATTEMPTS_TRY_LATER : Access ..."``.
    """
    if not isinstance(body, dict):
        return INTERNAL_ERROR
    error = body.get("error")
    message = error.get("message") if isinstance(error, dict) else None
    if not isinstance(message, str) or not message.strip():
        return INTERNAL_ERROR
    key = message.split(":", 1)[0].strip()
    return REST_ERROR_CODES.get(key, INTERNAL_ERROR)


class FirebasePasswordSignIn:
    """Async credential check backed by ``accounts:signInWithPassword``."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 10,
        endpoint: str = FIREBASE_SIGN_IN_URL,
        http: Optional[requests.Session] = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.endpoint = endpoint
        self._http = http
        self._local = threading.local()

    def _session(self) -> requests.Session:
        """Return the injected session, or one `requests.Session` per worker thread."""
        if self._http is not None:
            return self._http
        http = getattr(self._local, "session", None)
        if http is None:
            http = self._local.session = requests.Session()
        return http

    async def __call__(self, email: str, password: str) -> Dict[str, Any]:
        return await asyncio.to_thread(self.sign_in, email, password)

    def sign_in(self, email: str, password: str) -> Dict[str, Any]:
        """
        Verify an email/password pair.

        Returns:
            The provider's sign-in payload (idToken, localId, ...)

        Raises:
            IdentityProviderError: If the provider rejects the credentials or is unreachable
        """
        if not self.api_key:
            raise IdentityProviderError(INVALID_API_KEY, "FIREBASE_API_KEY is not configured")

        try:
            response = self._session().post(
                self.endpoint,
                params={"key": self.api_key},
                json={"email": email, "password": password, "returnSecureToken": True},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.warning("Identity provider request failed: %s", exc)
            raise IdentityProviderError(NETWORK_ERROR, str(exc)) from exc

        if response.status_code != 200:
            try:
                body = response.json()
            except ValueError:
                body = None
            code = error_code_from_response(body)
            logger.info("Identity provider rejected sign-in: status=%s code=%s", response.status_code, code)
            raise IdentityProviderError(code)

        return response.json()
