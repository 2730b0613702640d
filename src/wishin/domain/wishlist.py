"""Wishlist aggregate: ownership, item collection and cascading item ops.

Invariants
----------
1.  Every contained item's ``wishlist_id`` equals the wishlist ``id``
    (always enforced; ``add_item`` claims foreign items).
2.  At most ``max_items_per_wishlist`` items, enforced by ``create`` and
    ``add_item`` only, so oversized legacy lists still reconstitute.
3.  Item ids are unique within a wishlist (always enforced).
4.  Title/description length rules are STRICT-only.

Item-level behaviour is delegated to :class:`WishlistItem`; the aggregate
looks the item up, applies the call and splices the result back in.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, NamedTuple

from wishin.core.config import DEFAULT_LIMITS
from wishin.core.enums import Participation, ValidationMode, Visibility
from wishin.core.errors import (
    InvalidAttributeError,
    InvalidOperationError,
    LimitExceededError,
)
from wishin.core.ids import is_valid_identity, is_valid_uuid, utc_now
from wishin.core.validators import coerce_datetime, coerce_enum, is_optional_str, trim

from .wishlist_item import WishlistItem

logger = logging.getLogger(__name__)

# Fields an owner may change through ``update``.
EDITABLE_FIELDS: frozenset[str] = frozenset({
    "title", "description", "visibility", "participation",
})


class ItemRemoval(NamedTuple):
    """Result of :meth:`Wishlist.remove_item`."""

    wishlist: Wishlist
    removed_item: WishlistItem | None


@dataclass(frozen=True)
class Wishlist:
    """A gift registry owned by one user."""

    id: str
    owner_id: str
    title: str
    visibility: Visibility
    participation: Participation
    created_at: datetime
    updated_at: datetime
    description: str | None = None
    items: tuple[WishlistItem, ...] = ()

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        id: str,
        owner_id: str,
        title: str,
        visibility: Visibility | str,
        participation: Participation | str,
        description: str | None = None,
        items: Iterable[WishlistItem] = (),
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ) -> Wishlist:
        """Create a fresh wishlist.  STRICT validation.

        ``visibility`` and ``participation`` must be given explicitly.

        Raises:
            InvalidAttributeError: Malformed ids, enum values, lengths, or
                items that belong to another wishlist.
            InvalidOperationError: Two items share an id.
            LimitExceededError: More items than the per-list ceiling.
        """
        now = utc_now()
        wishlist = cls(
            id=id,
            owner_id=owner_id,
            title=trim(title),
            description=trim(description),
            visibility=coerce_enum(Visibility, visibility),
            participation=coerce_enum(Participation, participation),
            items=tuple(items),
            created_at=created_at or now,
            updated_at=updated_at or created_at or now,
        )
        wishlist._validate(ValidationMode.STRICT)
        if len(wishlist.items) > DEFAULT_LIMITS.max_items_per_wishlist:
            raise LimitExceededError(
                f"Cannot create a wishlist with more than "
                f"{DEFAULT_LIMITS.max_items_per_wishlist} items"
            )
        return wishlist

    @classmethod
    def reconstitute(cls, props: Mapping[str, Any]) -> Wishlist:
        """Rebuild a wishlist from a persisted snapshot.  STRUCTURAL only.

        ``props["items"]`` may contain :class:`WishlistItem` instances or
        item snapshots.  Timestamps may be ``datetime`` or ISO-8601 strings.
        """
        try:
            raw_items = props.get("items") or ()
            items = tuple(
                item if isinstance(item, WishlistItem) else WishlistItem.reconstitute(item)
                for item in raw_items
            )
            wishlist = cls(
                id=props["id"],
                owner_id=props["owner_id"],
                title=trim(props["title"]),
                description=trim(props.get("description")),
                visibility=coerce_enum(Visibility, props["visibility"]),
                participation=coerce_enum(Participation, props["participation"]),
                items=items,
                created_at=coerce_datetime(props["created_at"], "created_at"),
                updated_at=coerce_datetime(props["updated_at"], "updated_at"),
            )
        except KeyError as exc:
            field = exc.args[0]
            raise InvalidAttributeError(f"Missing {field}", field=field) from exc
        wishlist._validate(ValidationMode.STRUCTURAL)
        return wishlist

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def item_count(self) -> int:
        return len(self.items)

    def find_item(self, item_id: str) -> WishlistItem | None:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    def has_same_identity(self, other: object) -> bool:
        return isinstance(other, Wishlist) and other.id == self.id

    def is_owned_by(self, user_id: str | None) -> bool:
        return user_id is not None and user_id == self.owner_id

    def ensure_owned_by(self, user_id: str | None) -> None:
        """Raise unless *user_id* owns this wishlist."""
        if not self.is_owned_by(user_id):
            raise InvalidOperationError(
                "Wishlist belongs to another owner", field="owner_id"
            )

    # ------------------------------------------------------------------
    # Owner edits
    # ------------------------------------------------------------------

    def update(self, **changes: Any) -> Wishlist:
        """Change ``title``, ``description``, ``visibility`` or ``participation``.

        Any other key (``id``, ``owner_id``, ``items``, ...) is rejected.
        """
        for field_name in changes:
            if field_name not in EDITABLE_FIELDS:
                raise InvalidAttributeError(
                    f"Cannot update {field_name}: Not an editable wishlist field",
                    field=field_name,
                )

        if "title" in changes:
            changes["title"] = trim(changes["title"])
        if "description" in changes:
            changes["description"] = trim(changes["description"])
        if "visibility" in changes:
            changes["visibility"] = coerce_enum(Visibility, changes["visibility"])
        if "participation" in changes:
            changes["participation"] = coerce_enum(Participation, changes["participation"])

        return self._evolve(ValidationMode.STRICT, **changes)

    # ------------------------------------------------------------------
    # Item collection
    # ------------------------------------------------------------------

    def add_item(self, item: WishlistItem) -> Wishlist:
        """Append *item*, claiming it for this wishlist.

        Raises:
            LimitExceededError: The list is already at the item ceiling.
            InvalidOperationError: An item with the same id is present.
        """
        if len(self.items) >= DEFAULT_LIMITS.max_items_per_wishlist:
            raise LimitExceededError(
                f"Cannot add more than {DEFAULT_LIMITS.max_items_per_wishlist} "
                f"items to wishlist"
            )
        if not isinstance(item, WishlistItem):
            raise InvalidAttributeError("Invalid item: Must be a WishlistItem", field="items")

        claimed = item.update_wishlist_id(self.id)
        if any(existing.has_same_identity(claimed) for existing in self.items):
            raise InvalidOperationError(
                f"Item already exists in wishlist ({claimed.id})", field="items"
            )

        logger.debug("Wishlist %s: adding item %s", self.id, claimed.id)
        return self._evolve(ValidationMode.STRUCTURAL, items=(*self.items, claimed))

    def remove_item(self, item_id: str) -> ItemRemoval:
        """Remove an item by id.  Absent ids return this wishlist unchanged."""
        index = self._index_of(item_id)
        if index is None:
            return ItemRemoval(wishlist=self, removed_item=None)

        removed = self.items[index]
        remaining = (*self.items[:index], *self.items[index + 1:])
        logger.debug("Wishlist %s: removed item %s", self.id, item_id)
        return ItemRemoval(
            wishlist=self._evolve(ValidationMode.STRUCTURAL, items=remaining),
            removed_item=removed,
        )

    # ------------------------------------------------------------------
    # Cascading item operations
    # ------------------------------------------------------------------

    def update_item(self, item_id: str, **changes: Any) -> Wishlist:
        return self._with_item(item_id, lambda item: item.update(**changes))

    def reserve_item(self, item_id: str, amount: int) -> Wishlist:
        return self._with_item(item_id, lambda item: item.reserve(amount))

    def purchase_item(
        self, item_id: str, total_amount: int, consume_from_reserved: int = 0
    ) -> Wishlist:
        return self._with_item(
            item_id, lambda item: item.purchase(total_amount, consume_from_reserved)
        )

    def cancel_item_reservation(self, item_id: str, amount: int) -> Wishlist:
        return self._with_item(item_id, lambda item: item.cancel_reservation(amount))

    def cancel_item_purchase(self, item_id: str, amount_to_cancel: int) -> Wishlist:
        return self._with_item(item_id, lambda item: item.cancel_purchase(amount_to_cancel))

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_props(self) -> dict[str, Any]:
        """Persistence snapshot.  Items are nested item snapshots."""
        return {
            "id": self.id,
            "owner_id": self.owner_id,
            "title": self.title,
            "description": self.description,
            "visibility": self.visibility,
            "participation": self.participation,
            "items": [item.to_props() for item in self.items],
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _with_item(
        self, item_id: str, operation: Callable[[WishlistItem], WishlistItem]
    ) -> Wishlist:
        index = self._index_of(item_id)
        if index is None:
            raise InvalidOperationError("Item not found", field="item_id")

        updated = operation(self.items[index])
        items = (*self.items[:index], updated, *self.items[index + 1:])
        return self._evolve(ValidationMode.STRUCTURAL, items=items)

    def _index_of(self, item_id: str) -> int | None:
        for index, item in enumerate(self.items):
            if item.id == item_id:
                return index
        return None

    def _evolve(self, mode: ValidationMode, **changes: Any) -> Wishlist:
        changes.setdefault("updated_at", utc_now())
        wishlist = dataclasses.replace(self, **changes)
        wishlist._validate(mode)
        return wishlist

    def _validate(self, mode: ValidationMode) -> None:
        limits = DEFAULT_LIMITS

        # --- STRUCTURAL (always) ---
        if not is_valid_uuid(self.id):
            raise InvalidAttributeError("Invalid id: Must be a valid UUID v4", field="id")
        if not is_valid_identity(self.owner_id):
            raise InvalidAttributeError(
                "Invalid owner_id: Must be a valid identity", field="owner_id"
            )
        if not isinstance(self.title, str):
            raise InvalidAttributeError("Invalid title: Must be a string", field="title")
        if not is_optional_str(self.description):
            raise InvalidAttributeError(
                "Invalid description: Must be a string", field="description"
            )
        if not isinstance(self.visibility, Visibility):
            raise InvalidAttributeError("Invalid visibility", field="visibility")
        if not isinstance(self.participation, Participation):
            raise InvalidAttributeError("Invalid participation", field="participation")
        for stamp in ("created_at", "updated_at"):
            if not isinstance(getattr(self, stamp), datetime):
                raise InvalidAttributeError(
                    f"Invalid {stamp}: Must be a valid datetime", field=stamp
                )
        seen_ids: set[str] = set()
        for item in self.items:
            if not isinstance(item, WishlistItem):
                raise InvalidAttributeError(
                    "Invalid item: Must be a WishlistItem", field="items"
                )
            if item.id in seen_ids:
                raise InvalidOperationError(
                    f"Item already exists in wishlist ({item.id})", field="items"
                )
            seen_ids.add(item.id)
            if item.wishlist_id != self.id:
                raise InvalidAttributeError(
                    f"Item {item.id} belongs to a different wishlist "
                    f"({item.wishlist_id})",
                    field="items",
                )

        # --- CONTENT (STRICT) ---
        if mode.checks_content:
            if len(self.title) < limits.wishlist_title_min:
                raise InvalidAttributeError(
                    f"Invalid title: Must be at least {limits.wishlist_title_min} characters",
                    field="title",
                )
            if len(self.title) > limits.wishlist_title_max:
                raise InvalidAttributeError(
                    f"Invalid title: Must be at most {limits.wishlist_title_max} characters",
                    field="title",
                )
            if (
                self.description is not None
                and len(self.description) > limits.wishlist_description_max
            ):
                raise InvalidAttributeError(
                    f"Invalid description: Must be at most "
                    f"{limits.wishlist_description_max} characters",
                    field="description",
                )
