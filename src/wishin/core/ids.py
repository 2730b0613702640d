"""Canonical ID and timestamp factories plus identifier format checks.

All modules import from here instead of defining local _uuid()/_now() copies.

ID Categories
-------------
1. Entity IDs: UUID v4 strings (wishlist, item and transaction ids).
2. Identity IDs: UUID v4 *or* Appwrite-style ids (owner / user ids), since
   the auth provider issues its own opaque identifiers.

Timestamp Rule
--------------
All timestamps are ``datetime`` with ``tzinfo=timezone.utc``, never naive.
"""

from __future__ import annotations

import re
import uuid
from datetime import datetime, timezone
from typing import Any

_UUID_V4_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

# Alphanumerics, periods, hyphens, underscores and colons; at most 36 chars.
_APPWRITE_ID_RE = re.compile(r"^[a-zA-Z0-9._:-]{1,36}$")


def new_id() -> str:
    """Generate a new UUID v4 string.  Use for all entity IDs."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(timezone.utc)


def is_valid_uuid(value: Any) -> bool:
    """Return True if *value* is a UUID v4 string (RFC 4122 variant)."""
    return isinstance(value, str) and bool(_UUID_V4_RE.match(value))


def is_valid_appwrite_id(value: Any) -> bool:
    """Return True if *value* is an Appwrite-compatible document/user id."""
    return isinstance(value, str) and bool(_APPWRITE_ID_RE.match(value))


def is_valid_identity(value: Any) -> bool:
    """Return True if *value* can reference a user (UUID v4 or Appwrite id).

    Used for foreign keys such as ``owner_id`` and ``user_id``.
    """
    return is_valid_uuid(value) or is_valid_appwrite_id(value)
