"""
Firebase Authentication Provider.

Uses the Firebase Identity Toolkit REST API (email/password accounts).
The Admin SDK cannot check passwords, so this talks to the public endpoints
with the project's Web API key.
"""

from typing import Any, Dict, Optional
import logging

import requests

from civicflow.services.auth_provider.base import AuthProvider, AuthResult

logger = logging.getLogger(__name__)

# Firebase error codes -> human-readable reasons
FIREBASE_ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "No account exists for this email",
    "INVALID_PASSWORD": "Incorrect password",
    "INVALID_LOGIN_CREDENTIALS": "Incorrect email or password",
    "USER_DISABLED": "This account has been disabled",
    "EMAIL_EXISTS": "An account already exists for this email",
    "INVALID_EMAIL": "The email address is not valid",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts, try again later",
}


class FirebaseAuthProvider(AuthProvider):
    """
    Email/password authentication against Firebase.

    - Strict request timeout
    - Never raises; network and API errors become failed results
    """

    BASE_URL = "https://identitytoolkit.googleapis.com/v1/accounts"
    PROVIDER_NAME = "firebase"

    def __init__(self, api_key: Optional[str], timeout_seconds: float = 10.0):
        self.api_key = api_key
        self.timeout_seconds = timeout_seconds

    def get_provider_name(self) -> str:
        return self.PROVIDER_NAME

    def sign_in(self, email: str, password: str) -> AuthResult:
        return self._call("signInWithPassword", {
            "email": email,
            "password": password,
            "returnSecureToken": True,
        })

    def sign_up(self, email: str, password: str, name: str) -> AuthResult:
        return self._call("signUp", {
            "email": email,
            "password": password,
            "displayName": name,
            "returnSecureToken": True,
        })

    def _call(self, action: str, payload: Dict[str, Any]) -> AuthResult:
        if not self.api_key:
            logger.error("FIREBASE_WEB_API_KEY is not configured")
            return AuthResult.failed("Authentication provider is not configured", self.PROVIDER_NAME)

        try:
            resp = requests.post(
                f"{self.BASE_URL}:{action}",
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout_seconds,
            )
        except requests.RequestException as e:
            logger.warning(f"Firebase {action} request failed: {e}")
            return AuthResult.failed("Authentication service unavailable", self.PROVIDER_NAME)

        if resp.status_code != 200:
            code = self._error_code(resp)
            logger.info(f"Firebase {action} rejected with {resp.status_code}: {code}")
            return AuthResult.failed(
                FIREBASE_ERROR_MESSAGES.get(code, f"Authentication failed ({code})"),
                self.PROVIDER_NAME,
            )

        token = (resp.json() or {}).get("idToken")
        if not token:
            logger.warning(f"Firebase {action} response carried no idToken")
            return AuthResult.failed("Authentication service returned no token", self.PROVIDER_NAME)
        return AuthResult.ok(token, self.PROVIDER_NAME)

    @staticmethod
    def _error_code(resp) -> str:
        try:
            message = resp.json().get("error", {}).get("message", "")
        except ValueError:
            return "UNKNOWN"
        # Messages look like "WEAK_PASSWORD : Password should be at least 6 characters"
        return message.split(" ")[0] if message else "UNKNOWN"
