"""
Authentication collaborator.

Credential verification is delegated to an external provider that returns
an opaque token; the local profile cache only maps the account to a role.
"""

from civicflow.services.auth_provider.base import AuthProvider, AuthResult
from civicflow.services.auth_provider.firebase_provider import FirebaseAuthProvider
from civicflow.services.auth_provider.local_provider import LocalAuthProvider
from civicflow.services.auth_provider.registry import create_auth_provider

__all__ = [
    "AuthProvider",
    "AuthResult",
    "FirebaseAuthProvider",
    "LocalAuthProvider",
    "create_auth_provider",
]
