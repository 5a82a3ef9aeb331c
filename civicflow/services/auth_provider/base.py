"""
Authentication Provider Base Interface.

Defines the contract for the external authentication collaborator.
All providers must implement this interface.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional
import logging

logger = logging.getLogger(__name__)


class AuthResult:
    """
    Standardized authentication result.

    Exactly one of token (success) or error (failure) is set.
    """

    def __init__(self, token: Optional[str] = None, error: Optional[str] = None, provider: str = ""):
        self.token = token
        self.error = error
        self.provider = provider

    @property
    def success(self) -> bool:
        return self.token is not None and self.error is None

    @classmethod
    def ok(cls, token: str, provider: str) -> "AuthResult":
        return cls(token=token, provider=provider)

    @classmethod
    def failed(cls, error: str, provider: str) -> "AuthResult":
        return cls(error=error, provider=provider)

    def to_dict(self) -> Dict:
        result = {"success": self.success, "provider": self.provider}
        if self.error:
            result["error"] = self.error
        return result


class AuthProvider(ABC):
    """
    Abstract base class for authentication providers.

    Implementations MUST:
    - Return an AuthResult even on failure
    - Never raise upstream exceptions (catch and return a failed result)
    - Respect their timeout
    """

    @abstractmethod
    def get_provider_name(self) -> str:
        pass

    @abstractmethod
    def sign_in(self, email: str, password: str) -> AuthResult:
        """Verify credentials and return an opaque token on success."""
        pass

    @abstractmethod
    def sign_up(self, email: str, password: str, name: str) -> AuthResult:
        """Create an account and return an opaque token on success."""
        pass
