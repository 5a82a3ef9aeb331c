"""
Local Authentication Provider - offline stand-in for development and tests.

Accepts any non-empty credential pair and issues a random opaque token.
Password checks then fall to the local profile cache.
"""

from typing import Set
import logging
import secrets

from civicflow.services.auth_provider.base import AuthProvider, AuthResult
from civicflow.utils.security import normalize_email

logger = logging.getLogger(__name__)


class LocalAuthProvider(AuthProvider):
    """
    Offline provider.

    Remembers the emails it signed up so a second sign-up for the same
    address fails the way a real provider would.
    """

    PROVIDER_NAME = "local"

    def __init__(self):
        self._accounts: Set[str] = set()

    def get_provider_name(self) -> str:
        return self.PROVIDER_NAME

    def sign_in(self, email: str, password: str) -> AuthResult:
        if not email or not password:
            return AuthResult.failed("Email and password are required", self.PROVIDER_NAME)
        return AuthResult.ok(secrets.token_urlsafe(32), self.PROVIDER_NAME)

    def sign_up(self, email: str, password: str, name: str) -> AuthResult:
        key = normalize_email(email)
        if key in self._accounts:
            return AuthResult.failed("An account already exists for this email", self.PROVIDER_NAME)
        self._accounts.add(key)
        logger.info("Local account created")
        return AuthResult.ok(secrets.token_urlsafe(32), self.PROVIDER_NAME)
