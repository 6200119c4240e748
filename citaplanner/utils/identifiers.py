# citaplanner/utils/identifiers.py
from typing import Any, Optional
from uuid import UUID

from citaplanner.core.exceptions import ResourceNotFound


def parse_id(value: Any, what: str = "Resource") -> UUID:
    """Parse a path/body id; malformed ids are reported as not found."""
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except (TypeError, ValueError):
        raise ResourceNotFound(f"{what} not found")


def parse_optional_id(value: Any, what: str = "Resource") -> Optional[UUID]:
    if value in (None, ""):
        return None
    return parse_id(value, what)
