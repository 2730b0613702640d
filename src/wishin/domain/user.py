"""User entity: a registered member of the platform.

Identity is the UUID v4 ``id``; ``email`` is the login handle.  Neither can
change after creation.  ``reconstitute`` runs STRUCTURAL checks only, so
accounts created under older username or email rules still load.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from typing import Any, Mapping

from wishin.core.config import DEFAULT_LIMITS
from wishin.core.enums import ValidationMode
from wishin.core.errors import InvalidAttributeError
from wishin.core.ids import is_valid_uuid
from wishin.core.validators import is_optional_str, is_valid_url, trim

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
USERNAME_RE = re.compile(r"^[a-zA-Z0-9._-]+$")

EDITABLE_FIELDS: frozenset[str] = frozenset({"username", "image_url", "bio"})


@dataclass(frozen=True)
class User:
    """A registered member.  Every change returns a new instance."""

    id: str
    email: str
    username: str
    image_url: str | None = None
    bio: str | None = None

    @classmethod
    def create(
        cls,
        *,
        id: str,
        email: str,
        username: str,
        image_url: str | None = None,
        bio: str | None = None,
    ) -> User:
        """Create a new user.  Full STRICT validation."""
        user = cls._sanitized(
            id=id, email=email, username=username, image_url=image_url, bio=bio,
        )
        user._validate(ValidationMode.STRICT)
        return user

    @classmethod
    def reconstitute(cls, props: Mapping[str, Any]) -> User:
        """Rebuild from persistence.  STRUCTURAL only."""
        try:
            user = cls._sanitized(
                id=props["id"],
                email=props["email"],
                username=props["username"],
                image_url=props.get("image_url"),
                bio=props.get("bio"),
            )
        except KeyError as exc:
            field = exc.args[0]
            raise InvalidAttributeError(f"Missing {field}", field=field) from exc
        user._validate(ValidationMode.STRUCTURAL)
        return user

    @classmethod
    def _sanitized(cls, **props: Any) -> User:
        for text_field in ("email", "username", "bio"):
            props[text_field] = trim(props[text_field])
        return cls(**props)

    def has_same_identity(self, other: object) -> bool:
        return isinstance(other, User) and other.id == self.id

    def update(self, **changes: Any) -> User:
        """Change ``username``, ``image_url`` or ``bio``.  STRICT.

        ``id`` and ``email`` may be passed only with their current values.
        ``None`` values are ignored.
        """
        if changes.get("id") is not None and changes["id"] != self.id:
            raise InvalidAttributeError("Cannot update entity ID", field="id")
        if changes.get("email") is not None and changes["email"] != self.email:
            raise InvalidAttributeError("Cannot update email", field="email")

        changes = {
            key: value for key, value in changes.items()
            if value is not None and key not in ("id", "email")
        }
        for field_name in changes:
            if field_name not in EDITABLE_FIELDS:
                raise InvalidAttributeError(
                    f"Unknown field: {field_name}", field=field_name
                )

        props = {**self.to_props(), **changes}
        user = User._sanitized(**props)
        user._validate(ValidationMode.STRICT)
        return user

    def to_props(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    def _validate(self, mode: ValidationMode) -> None:
        limits = DEFAULT_LIMITS

        # --- STRUCTURAL (always) ---
        if not is_valid_uuid(self.id):
            raise InvalidAttributeError("Invalid id: Must be a valid UUID v4", field="id")
        if not isinstance(self.email, str) or not self.email:
            raise InvalidAttributeError(
                "Invalid email: Must be a non-empty string", field="email"
            )
        if not isinstance(self.username, str) or not self.username:
            raise InvalidAttributeError(
                "Invalid username: Must be a non-empty string", field="username"
            )
        for optional in ("image_url", "bio"):
            if not is_optional_str(getattr(self, optional)):
                raise InvalidAttributeError(
                    f"Invalid {optional}: Must be a string", field=optional
                )

        # --- CONTENT (STRICT) ---
        if not mode.checks_content:
            return
        if not EMAIL_RE.match(self.email):
            raise InvalidAttributeError("Invalid email format", field="email")
        if not limits.username_min <= len(self.username) <= limits.username_max:
            raise InvalidAttributeError(
                f"Invalid username length: Must be {limits.username_min}-"
                f"{limits.username_max} characters",
                field="username",
            )
        if not USERNAME_RE.match(self.username):
            raise InvalidAttributeError(
                "Invalid username format: Alphanumeric and .-_ only", field="username"
            )
        if self.bio and len(self.bio) > limits.bio_max:
            raise InvalidAttributeError(
                f"Invalid bio: Must be at most {limits.bio_max} characters", field="bio"
            )
        if self.image_url and not is_valid_url(self.image_url):
            raise InvalidAttributeError(
                "Invalid image_url: Must be a valid URL", field="image_url"
            )
