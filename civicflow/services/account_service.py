"""
Account Service - login, registration and logout.

Flow:
1. Validate the form locally (no state is written on a rejected form)
2. Ask the authentication provider (the security boundary)
3. Map the account to a local profile and make it the active one
"""

from typing import Optional, Tuple
import logging

from civicflow.core.errors import AuthenticationError, DuplicateEmailError, ValidationError
from civicflow.models.user import Profile, UserRole
from civicflow.services.auth_provider.base import AuthProvider
from civicflow.services.profile_cache import ProfileCache

logger = logging.getLogger(__name__)

DEFAULT_MIN_PASSWORD_LENGTH = 6


def _require(**fields: str) -> None:
    missing = [name for name, value in fields.items() if not value or not value.strip()]
    if missing:
        raise ValidationError(f"Required field(s) missing: {', '.join(missing)}")


class AccountService:
    """Ties the authentication provider to the local profile cache."""

    def __init__(
        self,
        profiles: ProfileCache,
        auth_provider: AuthProvider,
        min_password_length: int = DEFAULT_MIN_PASSWORD_LENGTH,
    ):
        self.profiles = profiles
        self.auth_provider = auth_provider
        self.min_password_length = min_password_length

    def login(self, email: str, password: str) -> Tuple[Profile, str]:
        """
        Sign in and activate the matching local profile.

        Returns:
            (profile, opaque provider token)

        Raises:
            ValidationError: empty email or password
            AuthenticationError: provider refused, or no local profile matches
        """
        _require(email=email, password=password)

        result = self.auth_provider.sign_in(email, password)
        if not result.success:
            logger.info(f"Sign-in refused by {result.provider}: {result.error}")
            raise AuthenticationError(result.error or "Sign-in failed")

        profile = self.profiles.find_by_credentials(email, password)
        if profile is None:
            raise AuthenticationError("No local profile matches these credentials")

        self.profiles.set_current(profile)
        logger.info(f"Signed in: {profile.id} ({profile.role.value})")
        return profile, result.token

    def register(
        self,
        email: str,
        password: str,
        confirm_password: str,
        name: str,
        role: UserRole = UserRole.CITIZEN,
    ) -> Tuple[Profile, str]:
        """
        Create an account and a local profile, then activate it.

        Raises:
            ValidationError: empty field, mismatched or too-short password
            DuplicateEmailError: the email is already registered locally
            AuthenticationError: the provider refused the sign-up
        """
        _require(email=email, password=password, confirm_password=confirm_password, name=name)

        if password != confirm_password:
            raise ValidationError("Passwords do not match")
        if len(password) < self.min_password_length:
            raise ValidationError(f"Password must be at least {self.min_password_length} characters")

        # Checked before the provider call so a duplicate writes nothing anywhere
        if self.profiles.find_by_email(email) is not None:
            raise DuplicateEmailError(email)

        result = self.auth_provider.sign_up(email, password, name)
        if not result.success:
            logger.info(f"Sign-up refused by {result.provider}: {result.error}")
            raise AuthenticationError(result.error or "Sign-up failed")

        profile = self.profiles.register(email, password, name, role)
        self.profiles.set_current(profile)
        return profile, result.token

    def logout(self) -> None:
        self.profiles.clear()

    def current(self) -> Optional[Profile]:
        return self.profiles.current()

    def has_seen_welcome(self) -> bool:
        return self.profiles.has_seen_welcome()

    def complete_welcome(self) -> None:
        self.profiles.complete_welcome()
