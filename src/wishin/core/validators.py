"""Shared value checks for entity validation.

Pure functions.  The ``require_*`` helpers raise
:class:`~wishin.core.errors.InvalidAttributeError`; the ``is_*`` helpers
never raise; the ``coerce_*`` helpers normalise persisted representations
and leave anything they do not recognise for the structural checks to reject.
"""

from __future__ import annotations

import math
from datetime import datetime
from enum import Enum
from typing import Any, TypeVar

from pydantic import HttpUrl, TypeAdapter, ValidationError

from .errors import InvalidAttributeError

E = TypeVar("E", bound=Enum)

_HTTP_URL = TypeAdapter(HttpUrl)


def is_int(value: Any) -> bool:
    """True for real integers.  ``bool`` is rejected even though it subclasses int."""
    return isinstance(value, int) and not isinstance(value, bool)


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def is_finite_number(value: Any) -> bool:
    return is_number(value) and math.isfinite(value)


def is_optional_str(value: Any) -> bool:
    return value is None or isinstance(value, str)


def is_valid_url(value: Any) -> bool:
    """True if *value* is an absolute http(s) URL with a host."""
    if not isinstance(value, str) or not value or value != value.strip():
        return False
    try:
        _HTTP_URL.validate_python(value)
    except ValidationError:
        return False
    return True


def require_positive_int(value: Any, name: str) -> int:
    if not is_int(value):
        raise InvalidAttributeError(
            f"Invalid {name}: Must be an integer", field=name,
        )
    if value <= 0:
        raise InvalidAttributeError(
            f"Invalid {name}: Must be a positive integer", field=name,
        )
    return value


def require_non_negative_int(value: Any, name: str) -> int:
    if not is_int(value):
        raise InvalidAttributeError(
            f"Invalid {name}: Must be an integer", field=name,
        )
    if value < 0:
        raise InvalidAttributeError(
            f"Invalid {name}: Must be greater than or equal to 0", field=name,
        )
    return value


def trim(value: Any) -> Any:
    """Strip surrounding whitespace from strings; pass anything else through."""
    return value.strip() if isinstance(value, str) else value


def coerce_enum(enum_cls: type[E], value: Any) -> E | Any:
    """Map a member, value or member name onto *enum_cls*.

    Unknown input is returned untouched.
    """
    if isinstance(value, enum_cls) or isinstance(value, bool):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        pass
    if isinstance(value, str) and value.upper() in enum_cls.__members__:
        return enum_cls.__members__[value.upper()]
    return value


def coerce_datetime(value: Any, name: str) -> datetime | Any:
    """Parse ISO-8601 strings (``Z`` suffix allowed) into ``datetime``."""
    if not isinstance(value, str):
        return value
    try:
        return datetime.fromisoformat(value.strip())
    except ValueError as exc:
        raise InvalidAttributeError(
            f"Invalid {name}: Must be a valid ISO-8601 timestamp", field=name,
        ) from exc
