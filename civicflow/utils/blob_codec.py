"""
Versioned JSON envelope for persisted blobs.

Collections are stored as {"version": N, "items": [...]}, single records as
{"version": N, "item": {...}}. A bare JSON list is a legacy (version 0)
collection written before the envelope existed.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from civicflow.services.category_policy import category_for_label

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
LEGACY_VERSION = 0


class CorruptBlob(ValueError):
    """The blob could not be decoded into a known envelope."""


def encode_items(items: List[Dict[str, Any]]) -> bytes:
    return json.dumps({"version": SCHEMA_VERSION, "items": items}).encode("utf-8")


def encode_item(item: Dict[str, Any]) -> bytes:
    return json.dumps({"version": SCHEMA_VERSION, "item": item}).encode("utf-8")


def _parse(raw: bytes) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CorruptBlob(f"Blob is not valid JSON: {e}")


def decode_items(raw: bytes) -> List[Dict[str, Any]]:
    """
    Decode a collection blob into raw records, migrating older versions.

    Raises:
        CorruptBlob: unparseable data or an unknown version
    """
    payload = _parse(raw)

    if isinstance(payload, list):
        logger.info(f"Migrating legacy blob (version {LEGACY_VERSION}) with {len(payload)} record(s)")
        return [_migrate_record(record, LEGACY_VERSION) for record in payload]

    if not isinstance(payload, dict) or "version" not in payload:
        raise CorruptBlob("Blob has no version tag")

    version = payload["version"]
    if version != SCHEMA_VERSION:
        raise CorruptBlob(f"Unsupported blob version: {version}")

    items = payload.get("items")
    if not isinstance(items, list):
        raise CorruptBlob("Blob has no item list")
    return items


def decode_item(raw: bytes) -> Optional[Dict[str, Any]]:
    """Decode a single-record blob. Raises CorruptBlob like decode_items."""
    payload = _parse(raw)

    if isinstance(payload, dict) and "version" not in payload:
        return _migrate_record(payload, LEGACY_VERSION)

    if not isinstance(payload, dict) or payload.get("version") != SCHEMA_VERSION:
        raise CorruptBlob("Unsupported single-record blob")
    return payload.get("item")


# Legacy field names -> current field names
_LEGACY_FIELD_NAMES = {
    "problemType": "category_label",
    "timestamp": "created_at",
    "imageData": "photo_data",
    "reporterName": "reporter_name",
    "reporterEmail": "reporter_email",
    "isResolved": "is_resolved",
    "resolvedDate": "resolved_at",
}

_LEGACY_DATE_FIELDS = ("created_at", "deadline", "resolved_at")

# Legacy records store dates as seconds since 2001-01-01 UTC
LEGACY_REFERENCE_EPOCH = datetime(2001, 1, 1, tzinfo=timezone.utc)

# Color tokens -> sRGB components of the system palette the legacy app drew with
LEGACY_COLOR_PALETTE: Dict[str, Tuple[float, float, float]] = {
    "red": (1.0, 0.231, 0.188),
    "orange": (1.0, 0.584, 0.0),
    "yellow": (1.0, 0.8, 0.0),
    "green": (0.204, 0.78, 0.349),
    "cyan": (0.196, 0.678, 0.902),
    "blue": (0.0, 0.478, 1.0),
    "indigo": (0.345, 0.337, 0.839),
    "purple": (0.686, 0.322, 0.871),
    "pink": (1.0, 0.176, 0.333),
    "brown": (0.635, 0.518, 0.369),
    "gray": (0.557, 0.557, 0.576),
}
DEFAULT_LEGACY_COLOR = "gray"


def legacy_date(value: Any) -> Any:
    """Numbers are reference-epoch seconds; anything else is passed through."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (LEGACY_REFERENCE_EPOCH + timedelta(seconds=value)).isoformat()
    return value


def nearest_color_token(red: Any, green: Any, blue: Any) -> str:
    """Closest palette token to an RGB triple (components in 0..1)."""
    try:
        rgb = (float(red), float(green), float(blue))
    except (TypeError, ValueError):
        return DEFAULT_LEGACY_COLOR

    def distance(token: str) -> float:
        return sum((a - b) ** 2 for a, b in zip(rgb, LEGACY_COLOR_PALETTE[token]))

    return min(LEGACY_COLOR_PALETTE, key=distance)


def _migrate_record(record: Any, version: int) -> Dict[str, Any]:
    if not isinstance(record, dict):
        raise CorruptBlob(f"Version {version} record is not an object")

    if version != LEGACY_VERSION:
        return record

    migrated = {_LEGACY_FIELD_NAMES.get(key, key): value for key, value in record.items()}

    # Legacy reports stored coordinates flat
    if "location" not in migrated and "latitude" in migrated and "longitude" in migrated:
        migrated["location"] = {
            "latitude": migrated.pop("latitude"),
            "longitude": migrated.pop("longitude"),
        }

    rgb = [migrated.pop(key, None) for key in ("colorRed", "colorGreen", "colorBlue")]
    if "color" not in migrated and any(component is not None for component in rgb):
        migrated["color"] = nearest_color_token(*rgb)

    for field in _LEGACY_DATE_FIELDS:
        if field in migrated:
            migrated[field] = legacy_date(migrated[field])

    # Only report records carry a label; profiles pass through
    if "category" not in migrated and "category_label" in migrated:
        category = category_for_label(migrated["category_label"])
        migrated["category"] = category.value if category else None

    return migrated
