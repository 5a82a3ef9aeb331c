"""
Authentication Provider Registry.

Selects the provider named by settings.AUTH_PROVIDER.
"""

import logging

from civicflow.core.settings import Settings, settings as default_settings
from civicflow.services.auth_provider.base import AuthProvider
from civicflow.services.auth_provider.firebase_provider import FirebaseAuthProvider
from civicflow.services.auth_provider.local_provider import LocalAuthProvider

logger = logging.getLogger(__name__)


def create_auth_provider(config: Settings = default_settings) -> AuthProvider:
    """
    Build the configured authentication provider.

    Raises:
        ValueError: unknown provider name
    """
    name = config.AUTH_PROVIDER.lower()

    if name == "firebase":
        if not config.FIREBASE_WEB_API_KEY:
            logger.warning("AUTH_PROVIDER=firebase but FIREBASE_WEB_API_KEY is empty; every sign-in will fail")
        logger.info("Firebase authentication provider registered")
        return FirebaseAuthProvider(config.FIREBASE_WEB_API_KEY, timeout_seconds=config.AUTH_TIMEOUT_SECONDS)

    if name == "local":
        logger.info("Local authentication provider registered (offline mode)")
        return LocalAuthProvider()

    raise ValueError(f"Unknown AUTH_PROVIDER: {config.AUTH_PROVIDER}")
