"""Small helpers shared by the services and endpoints."""
import uuid
from datetime import datetime, timezone
from typing import Optional

from bloodbank.core.exceptions import BadRequestError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalise a datetime to aware UTC; naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_object_id(value) -> Optional[uuid.UUID]:
    """Return the UUID for a well-formed identifier, None otherwise."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError, AttributeError):
        return None


def require_object_id(value, label: str) -> uuid.UUID:
    """Parse an identifier or fail with "Invalid <label> ID format"."""
    parsed = parse_object_id(value)
    if parsed is None:
        raise BadRequestError(f"Invalid {label} ID format")
    return parsed
