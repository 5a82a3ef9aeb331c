"""
Pydantic models for problem reports.
These models cover the stored report entity and the payloads used to create
and update reports.
"""

import base64
import binascii
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, Field, field_serializer, field_validator, model_validator

from civicflow.models.category import Category


def _decode_photo(value):
    """Accept raw bytes, or a base64 string as found in JSON payloads and blobs."""
    if isinstance(value, str):
        try:
            return base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("photo_data must be base64 encoded")
    return value


class Location(BaseModel):
    """A (latitude, longitude) pair. Immutable once attached to a report."""
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)

    class Config:
        frozen = True


class Reporter(BaseModel):
    """Attribution copied by value from the acting profile."""
    name: Optional[str] = None
    email: Optional[str] = None


class CustomReportFields(BaseModel):
    """
    Free-form report fields.

    Presentation fields left empty fall back to the custom-report policy.
    """
    description: str
    label: Optional[str] = Field(None, max_length=100)
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=50)
    severity: Optional[int] = Field(None, ge=1, le=5)


class Report(BaseModel):
    """
    A single problem report.

    Category label, icon, color, severity and deadline are snapshots taken at
    creation; only is_resolved and resolved_at change afterwards.
    """
    id: str = Field(..., description="Globally unique report ID (UUID4)")
    location: Location
    category: Optional[Category] = Field(None, description="Category at creation, None for custom reports")
    category_label: str
    icon: str
    color: str
    description: Optional[str] = None
    photo_data: Optional[bytes] = None
    created_at: datetime
    severity: int = Field(..., ge=1, le=5)
    reporter_name: Optional[str] = None
    reporter_email: Optional[str] = None
    deadline: Optional[datetime] = None
    is_resolved: bool = False
    resolved_at: Optional[datetime] = None

    @field_validator("photo_data", mode="before")
    @classmethod
    def decode_photo(cls, value):
        return _decode_photo(value)

    @field_serializer("photo_data", when_used="json")
    def encode_photo(self, value: Optional[bytes]) -> Optional[str]:
        if value is None:
            return None
        return base64.b64encode(value).decode("ascii")

    @model_validator(mode="after")
    def check_lifecycle(self):
        if self.is_resolved != (self.resolved_at is not None):
            raise ValueError("resolved_at must be set exactly when is_resolved is true")
        if self.deadline is not None and self.deadline < self.created_at:
            raise ValueError("deadline cannot precede created_at")
        return self

    def is_overdue(self, now: datetime) -> bool:
        """True when the report is still open and its deadline has passed."""
        if self.deadline is None or self.is_resolved:
            return False
        return now > self.deadline

    def time_remaining(self, now: datetime) -> Optional[timedelta]:
        """Time left until the deadline (negative when overdue), None without a deadline."""
        if self.deadline is None:
            return None
        return self.deadline - now


class ReportCreate(BaseModel):
    """
    Incoming payload for a category report.

    Location fields are optional here so a missing location is rejected by
    the reporting service with a readable reason.
    """
    category: Category
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    description: Optional[str] = Field(None, max_length=1000)
    photo_data: Optional[bytes] = Field(None, description="Base64 encoded photo")

    @field_validator("photo_data", mode="before")
    @classmethod
    def decode_photo(cls, value):
        return _decode_photo(value)

    class Config:
        json_schema_extra = {
            "example": {
                "category": "pothole",
                "latitude": 44.4268,
                "longitude": 26.1025,
                "description": "Deep pothole in the right lane",
            }
        }


class CustomReportCreate(BaseModel):
    """Incoming payload for a free-form report. Description and photo are required."""
    description: str = Field(..., max_length=1000)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    photo_data: Optional[bytes] = Field(None, description="Base64 encoded photo")
    label: Optional[str] = Field(None, max_length=100)
    icon: Optional[str] = Field(None, max_length=100)
    color: Optional[str] = Field(None, max_length=50)
    severity: Optional[int] = Field(None, ge=1, le=5)

    @field_validator("photo_data", mode="before")
    @classmethod
    def decode_photo(cls, value):
        return _decode_photo(value)


class StatusUpdate(BaseModel):
    """Resolve or reopen a report."""
    is_resolved: bool


def location_from(latitude: Optional[float], longitude: Optional[float]) -> Optional[Location]:
    """Build a Location only when both coordinates are known."""
    if latitude is None or longitude is None:
        return None
    return Location(latitude=latitude, longitude=longitude)
