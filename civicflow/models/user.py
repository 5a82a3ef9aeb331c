"""
User models for profiles and account management.
"""

from pydantic import BaseModel, Field
from typing import Optional
from enum import Enum


class UserRole(str, Enum):
    """
    Role of a registered profile. Fixed once the profile is registered.
    """
    CITIZEN = "citizen"
    MUNICIPALITY = "municipality"
    HOSPITAL = "hospital"

    @property
    def display_name(self) -> str:
        return {
            UserRole.CITIZEN: "Citizen",
            UserRole.MUNICIPALITY: "Municipality Representative",
            UserRole.HOSPITAL: "Hospital Representative",
        }[self]


class Profile(BaseModel):
    """
    A locally cached profile.

    password_hash holds a salted PBKDF2 digest, never the clear-text password.
    """
    id: str = Field(..., description="Profile ID (UUID4)")
    email: str
    password_hash: str
    name: str
    role: UserRole

    class Config:
        frozen = True


class ProfileResponse(BaseModel):
    """Profile as returned by the API (no credential material)."""
    id: str
    email: str
    name: str
    role: UserRole

    @classmethod
    def from_profile(cls, profile: Profile) -> "ProfileResponse":
        return cls(id=profile.id, email=profile.email, name=profile.name, role=profile.role)


class RegisterRequest(BaseModel):
    """Registration form. Length and match rules are enforced by the account service."""
    email: str = Field(..., max_length=254)
    password: str
    confirm_password: str
    name: str = Field(..., max_length=100)
    role: UserRole = UserRole.CITIZEN


class LoginRequest(BaseModel):
    email: str = Field(..., max_length=254)
    password: str


class AuthResponse(BaseModel):
    """Authentication response."""
    success: bool
    message: str
    user: Optional[ProfileResponse] = None
    token: Optional[str] = None  # Opaque token issued by the authentication provider
