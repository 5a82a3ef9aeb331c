"""
Domain exceptions for CivicFlow.

Routes translate these into HTTP status codes; services raise them and
never swallow them.
"""


class CivicFlowError(Exception):
    """Base class for every error raised by the CivicFlow core."""


class ValidationError(CivicFlowError, ValueError):
    """
    A request was rejected before any state was written.

    Examples: empty required field, password mismatch, password too short,
    missing photo, missing location.
    """


class DuplicateEmailError(CivicFlowError, ValueError):
    """A profile with the same email (case-insensitive) already exists."""

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"A profile with email '{email}' already exists")


class AuthenticationError(CivicFlowError):
    """The authentication provider refused the credentials."""


class PersistenceError(CivicFlowError, RuntimeError):
    """The persistence collaborator failed to read or write a blob."""
