"""
Store identifier helpers.

Every entity is keyed by a UUID string. Ids arriving in paths and bodies
are checked here before any query is issued.
"""

import uuid
from typing import Any

from backend.app.core.exceptions import InvalidIdentifierError


def new_id() -> str:
    """Generate a fresh store identifier."""
    return str(uuid.uuid4())


def is_valid_id(value: Any) -> bool:
    """Return True if value is a canonical UUID string."""
    if not isinstance(value, str):
        return False
    try:
        return str(uuid.UUID(value)) == value.lower()
    except ValueError:
        return False


def parse_id(value: Any, resource: str = "resource") -> str:
    """
    Validate an identifier and return its canonical (lowercase) form.

    Raises:
        InvalidIdentifierError: if value is not a well-formed id
    """
    if not is_valid_id(value):
        raise InvalidIdentifierError(resource, value)
    return value.lower()
