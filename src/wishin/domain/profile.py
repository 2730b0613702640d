"""Profile aggregate: public metadata of a registered user.

The id comes from the auth provider (UUID v4 or Appwrite id); email and
credentials live there too and never pass through this aggregate.
"""

from __future__ import annotations

import dataclasses
import re
from dataclasses import dataclass
from typing import Any, Mapping

from wishin.core.config import DEFAULT_LIMITS
from wishin.core.enums import ValidationMode
from wishin.core.errors import InvalidAttributeError
from wishin.core.ids import is_valid_identity
from wishin.core.validators import is_optional_str, is_valid_url, trim

# Alphanumeric runs joined by single ".", "_" or "-" separators.
USERNAME_RE = re.compile(r"^[a-zA-Z0-9]+(?:[._-][a-zA-Z0-9]+)*$")

EDITABLE_FIELDS: frozenset[str] = frozenset({"username", "image_url", "bio"})


@dataclass(frozen=True)
class Profile:
    id: str
    username: str
    image_url: str | None = None
    bio: str | None = None

    @classmethod
    def create(
        cls,
        *,
        id: str,
        username: str,
        image_url: str | None = None,
        bio: str | None = None,
    ) -> Profile:
        profile = cls(id=id, username=trim(username), image_url=image_url, bio=trim(bio))
        profile._validate(ValidationMode.STRICT)
        return profile

    @classmethod
    def reconstitute(cls, props: Mapping[str, Any]) -> Profile:
        try:
            profile = cls(
                id=props["id"],
                username=trim(props["username"]),
                image_url=props.get("image_url"),
                bio=trim(props.get("bio")),
            )
        except KeyError as exc:
            field = exc.args[0]
            raise InvalidAttributeError(f"Missing {field}", field=field) from exc
        profile._validate(ValidationMode.STRUCTURAL)
        return profile

    def has_same_identity(self, other: object) -> bool:
        return isinstance(other, Profile) and other.id == self.id

    def update(self, **changes: Any) -> Profile:
        """Change ``username``, ``image_url`` or ``bio``.  STRICT.

        Passing the current ``id`` is tolerated; any other id is rejected.
        """
        if "id" in changes:
            if changes.pop("id") != self.id:
                raise InvalidAttributeError("Cannot update entity ID", field="id")
        for field_name in changes:
            if field_name not in EDITABLE_FIELDS:
                raise InvalidAttributeError(
                    f"Unknown field: {field_name}", field=field_name
                )
        for text_field in ("username", "bio"):
            if text_field in changes:
                changes[text_field] = trim(changes[text_field])

        profile = dataclasses.replace(self, **changes)
        profile._validate(ValidationMode.STRICT)
        return profile

    def to_props(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    def _validate(self, mode: ValidationMode) -> None:
        limits = DEFAULT_LIMITS

        # --- STRUCTURAL (always) ---
        if not isinstance(self.id, str) or not self.id:
            raise InvalidAttributeError("Invalid id: Must be a non-empty string", field="id")
        if not isinstance(self.username, str) or not self.username:
            raise InvalidAttributeError(
                "Invalid username: Must be a non-empty string", field="username"
            )
        if not is_optional_str(self.bio):
            raise InvalidAttributeError("Invalid bio: Must be a string", field="bio")
        if not is_optional_str(self.image_url):
            raise InvalidAttributeError("Invalid image_url: Must be a string", field="image_url")
        if self.image_url is not None and not is_valid_url(self.image_url):
            raise InvalidAttributeError(
                "Invalid image_url: Must be a valid http(s) URL", field="image_url"
            )

        # --- CONTENT (STRICT) ---
        if not mode.checks_content:
            return
        if not is_valid_identity(self.id):
            raise InvalidAttributeError(
                "Invalid id: Must be a valid identity (UUID or Appwrite ID)", field="id"
            )
        if not limits.username_min <= len(self.username) <= limits.username_max:
            raise InvalidAttributeError(
                f"Invalid username length: Must be {limits.username_min}-"
                f"{limits.username_max} characters",
                field="username",
            )
        if not USERNAME_RE.match(self.username):
            raise InvalidAttributeError("Invalid username format", field="username")
        if self.bio and len(self.bio) > limits.bio_max:
            raise InvalidAttributeError(
                f"Invalid bio: Must be at most {limits.bio_max} characters", field="bio"
            )
