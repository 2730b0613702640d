"""WishlistItem entity: the inventory state machine.

Quantities
~~~~~~~~~~
total_quantity      How many units the owner wants.
reserved_quantity   Units held by registered users, not yet bought.
purchased_quantity  Units bought (directly or converted from a reservation).
available_quantity  ``max(0, total - (reserved + purchased))``.

Inventory invariant: ``total >= reserved + purchased`` unless
``is_unlimited``.  It is checked in STRICT and TRANSACTION modes only.  When
an owner *reduces* ``total_quantity``, ``reserved_quantity`` is reset to 0
and the invariant is not re-checked: hidden purchase counts must not be
inferable from which edits are accepted or how much gets pruned.

Every behaviour returns a new frozen instance.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Mapping

from wishin.core.config import DEFAULT_LIMITS
from wishin.core.enums import Priority, ValidationMode
from wishin.core.errors import (
    InsufficientStockError,
    InvalidAttributeError,
    InvalidTransitionError,
)
from wishin.core.ids import is_valid_uuid
from wishin.core.validators import (
    coerce_enum,
    is_finite_number,
    is_int,
    is_number,
    is_optional_str,
    is_valid_url,
    require_non_negative_int,
    require_positive_int,
    trim,
)

logger = logging.getLogger(__name__)

_PRIORITY_LEVELS: frozenset[int] = frozenset(p.value for p in Priority)

# Fields an owner may change through ``update``.
EDITABLE_FIELDS: frozenset[str] = frozenset({
    "name",
    "description",
    "priority",
    "price",
    "currency",
    "url",
    "image_url",
    "is_unlimited",
    "total_quantity",
})

_RESTRICTED_FIELDS: dict[str, str] = {
    "id": "Cannot update id: Identity is immutable",
    "wishlist_id": "Cannot update wishlist_id directly: Use update_wishlist_id()",
    "reserved_quantity": "Cannot update reserved_quantity directly: Use reserve()/cancel_reservation()",
    "purchased_quantity": "Cannot update purchased_quantity directly: Use purchase()/cancel_purchase()",
}


@dataclass(frozen=True)
class WishlistItem:
    """A wanted gift on a wishlist.

    Build instances with :meth:`create` (fresh, STRICT) or
    :meth:`reconstitute` (persisted, STRUCTURAL); the constructor itself
    does not validate.
    """

    id: str
    wishlist_id: str
    name: str
    total_quantity: int
    reserved_quantity: int = 0
    purchased_quantity: int = 0
    description: str | None = None
    priority: Priority | int = Priority.MEDIUM  # int only for legacy rows
    price: float | None = None
    currency: str | None = None
    url: str | None = None
    image_url: str | None = None
    is_unlimited: bool = False

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        *,
        id: str,
        wishlist_id: str,
        name: str,
        total_quantity: int,
        reserved_quantity: int = 0,
        purchased_quantity: int = 0,
        description: str | None = None,
        priority: Priority | int | str = Priority.MEDIUM,
        price: float | None = None,
        currency: str | None = None,
        url: str | None = None,
        image_url: str | None = None,
        is_unlimited: bool = False,
    ) -> WishlistItem:
        """Create a fresh item.  Full STRICT validation."""
        item = cls(
            id=id,
            wishlist_id=wishlist_id,
            name=trim(name),
            total_quantity=total_quantity,
            reserved_quantity=reserved_quantity,
            purchased_quantity=purchased_quantity,
            description=description,
            priority=coerce_enum(Priority, priority),
            price=price,
            currency=currency,
            url=url,
            image_url=image_url,
            is_unlimited=is_unlimited,
        )
        item._validate(ValidationMode.STRICT)
        return item

    @classmethod
    def reconstitute(cls, props: Mapping[str, Any]) -> WishlistItem:
        """Rebuild an item from a persisted snapshot.

        Only STRUCTURAL checks run, so legacy rows that break today's
        content or inventory rules still load.  Unknown keys are ignored.
        """
        try:
            item = cls(
                id=props["id"],
                wishlist_id=props["wishlist_id"],
                name=trim(props["name"]),
                total_quantity=props["total_quantity"],
                reserved_quantity=props.get("reserved_quantity", 0),
                purchased_quantity=props.get("purchased_quantity", 0),
                description=props.get("description"),
                priority=coerce_enum(Priority, props.get("priority", Priority.MEDIUM)),
                price=props.get("price"),
                currency=props.get("currency"),
                url=props.get("url"),
                image_url=props.get("image_url"),
                is_unlimited=props.get("is_unlimited", False),
            )
        except KeyError as exc:
            field = exc.args[0]
            raise InvalidAttributeError(f"Missing {field}", field=field) from exc
        item._validate(ValidationMode.STRUCTURAL)
        return item

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def available_quantity(self) -> int:
        return max(
            0, self.total_quantity - (self.reserved_quantity + self.purchased_quantity)
        )

    def has_same_identity(self, other: object) -> bool:
        """Entity equality: same ``id``, regardless of other attributes."""
        return isinstance(other, WishlistItem) and other.id == self.id

    # ------------------------------------------------------------------
    # Inventory behaviours
    # ------------------------------------------------------------------

    def reserve(self, amount: int) -> WishlistItem:
        """Hold *amount* units for a registered user."""
        require_positive_int(amount, "amount")
        if not self.is_unlimited and amount > self.available_quantity:
            raise InsufficientStockError(
                f"Insufficient stock: Requested {amount}, "
                f"Available {self.available_quantity}"
            )
        logger.debug("Item %s: reserving %d unit(s)", self.id, amount)
        return self._evolve(
            ValidationMode.TRANSACTION,
            reserved_quantity=self.reserved_quantity + amount,
        )

    def cancel_reservation(self, amount: int) -> WishlistItem:
        """Release *amount* reserved units.

        Over-cancelling clamps to zero instead of raising: the reservation
        may already have been pruned by an owner edit.
        """
        require_positive_int(amount, "amount")
        logger.debug("Item %s: releasing up to %d reserved unit(s)", self.id, amount)
        return self._evolve(
            ValidationMode.STRUCTURAL,
            reserved_quantity=max(0, self.reserved_quantity - amount),
        )

    def purchase(self, total_amount: int, consume_from_reserved: int = 0) -> WishlistItem:
        """Buy *total_amount* units, *consume_from_reserved* of them already held.

        The remainder (``total_amount - consume_from_reserved``) is taken
        from the available stock.
        """
        require_positive_int(total_amount, "total_amount")
        require_non_negative_int(consume_from_reserved, "consume_from_reserved")

        if consume_from_reserved > self.reserved_quantity:
            raise InvalidTransitionError(
                f"Cannot consume {consume_from_reserved} reserved unit(s): "
                f"only {self.reserved_quantity} reserved"
            )
        if consume_from_reserved > total_amount:
            raise InvalidTransitionError(
                "consume_from_reserved cannot exceed total_amount"
            )

        from_available = total_amount - consume_from_reserved
        if not self.is_unlimited and from_available > self.available_quantity:
            raise InsufficientStockError(
                f"Insufficient stock: Requested {from_available}, "
                f"Available {self.available_quantity}"
            )

        logger.debug(
            "Item %s: purchasing %d unit(s), %d from reservation",
            self.id, total_amount, consume_from_reserved,
        )
        return self._evolve(
            ValidationMode.TRANSACTION,
            purchased_quantity=self.purchased_quantity + total_amount,
            reserved_quantity=self.reserved_quantity - consume_from_reserved,
        )

    def cancel_purchase(self, amount_to_cancel: int) -> WishlistItem:
        """Return *amount_to_cancel* purchased units to stock.

        Does not restore any reservation; callers that want the units held
        again call :meth:`reserve` explicitly.
        """
        require_positive_int(amount_to_cancel, "amount_to_cancel")
        if amount_to_cancel > self.purchased_quantity:
            raise InvalidTransitionError(
                f"Cannot cancel {amount_to_cancel} unit(s): "
                f"only {self.purchased_quantity} purchased"
            )
        logger.debug("Item %s: cancelling %d purchased unit(s)", self.id, amount_to_cancel)
        return self._evolve(
            ValidationMode.STRUCTURAL,
            purchased_quantity=self.purchased_quantity - amount_to_cancel,
        )

    # ------------------------------------------------------------------
    # Owner edits
    # ------------------------------------------------------------------

    def update(self, **changes: Any) -> WishlistItem:
        """Apply owner edits.  ``None`` clears an optional field.

        Reducing ``total_quantity`` resets ``reserved_quantity`` to 0.  The
        inventory invariant is not re-checked (EVOLUTIVE), so the result may
        be over-committed.
        """
        for field_name in changes:
            if field_name in _RESTRICTED_FIELDS:
                raise InvalidAttributeError(
                    _RESTRICTED_FIELDS[field_name], field=field_name
                )
            if field_name not in EDITABLE_FIELDS:
                raise InvalidAttributeError(
                    f"Unknown field: {field_name}", field=field_name
                )

        if "name" in changes:
            changes["name"] = trim(changes["name"])
        if "priority" in changes:
            changes["priority"] = coerce_enum(Priority, changes["priority"])

        new_total = changes.get("total_quantity", self.total_quantity)
        if is_int(new_total) and new_total < self.total_quantity:
            changes["reserved_quantity"] = 0
            logger.debug("Item %s: total reduced, reservations pruned", self.id)

        return self._evolve(ValidationMode.EVOLUTIVE, **changes)

    def update_wishlist_id(self, new_wishlist_id: str) -> WishlistItem:
        """Move the item to another list.  Same id returns ``self``."""
        if new_wishlist_id == self.wishlist_id:
            return self
        return self._evolve(ValidationMode.STRUCTURAL, wishlist_id=new_wishlist_id)

    # ------------------------------------------------------------------
    # Snapshot
    # ------------------------------------------------------------------

    def to_props(self) -> dict[str, Any]:
        return dataclasses.asdict(self)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _evolve(self, mode: ValidationMode, **changes: Any) -> WishlistItem:
        item = dataclasses.replace(self, **changes)
        item._validate(mode)
        return item

    def _validate(self, mode: ValidationMode) -> None:
        limits = DEFAULT_LIMITS

        # --- STRUCTURAL (always) ---
        if not is_valid_uuid(self.id):
            raise InvalidAttributeError("Invalid id: Must be a valid UUID v4", field="id")
        if not is_valid_uuid(self.wishlist_id):
            raise InvalidAttributeError(
                "Invalid wishlist_id: Must be a valid UUID v4", field="wishlist_id"
            )
        if not isinstance(self.name, str):
            raise InvalidAttributeError("Invalid name: Must be a string", field="name")
        for optional in ("description", "currency", "url", "image_url"):
            if not is_optional_str(getattr(self, optional)):
                raise InvalidAttributeError(
                    f"Invalid {optional}: Must be a string", field=optional
                )
        if not is_int(self.priority):
            raise InvalidAttributeError(
                "Invalid priority: Must be an integer level", field="priority"
            )
        if self.price is not None and not is_number(self.price):
            raise InvalidAttributeError("Invalid price: Must be a number", field="price")
        if not isinstance(self.is_unlimited, bool):
            raise InvalidAttributeError(
                "Invalid is_unlimited: Must be a boolean", field="is_unlimited"
            )
        if not is_int(self.total_quantity):
            raise InvalidAttributeError(
                "Invalid total_quantity: Must be an integer", field="total_quantity"
            )
        require_non_negative_int(self.reserved_quantity, "reserved_quantity")
        require_non_negative_int(self.purchased_quantity, "purchased_quantity")

        # --- CONTENT (STRICT, EVOLUTIVE) ---
        if mode.checks_content:
            if not limits.item_name_min <= len(self.name) <= limits.item_name_max:
                raise InvalidAttributeError(
                    f"Invalid name: Must be between {limits.item_name_min} "
                    f"and {limits.item_name_max} characters",
                    field="name",
                )
            if (
                self.description is not None
                and len(self.description) > limits.item_description_max
            ):
                raise InvalidAttributeError(
                    f"Invalid description: Must be at most "
                    f"{limits.item_description_max} characters",
                    field="description",
                )
            if self.priority not in _PRIORITY_LEVELS:
                raise InvalidAttributeError(
                    "Invalid priority: Must be between LOW (1) and URGENT (4)",
                    field="priority",
                )
            if self.price is not None:
                if not is_finite_number(self.price) or self.price < 0:
                    raise InvalidAttributeError(
                        "Invalid price: Must be a finite number greater than or equal to 0",
                        field="price",
                    )
                if not self.currency or not self.currency.strip():
                    raise InvalidAttributeError(
                        "Invalid currency: Required when price is set", field="currency"
                    )
            if self.url is not None and not is_valid_url(self.url):
                raise InvalidAttributeError("Invalid url: Must be a valid URL", field="url")
            if self.image_url is not None and not is_valid_url(self.image_url):
                raise InvalidAttributeError(
                    "Invalid image_url: Must be a valid URL", field="image_url"
                )
            if self.total_quantity < 1:
                raise InvalidAttributeError(
                    "Invalid total_quantity: Must be at least 1", field="total_quantity"
                )

        # --- INVENTORY (STRICT, TRANSACTION) ---
        if mode.checks_inventory and not self.is_unlimited:
            if self.total_quantity < self.reserved_quantity + self.purchased_quantity:
                raise InsufficientStockError(
                    "Invariant violation: Total quantity must be greater than "
                    "or equal to reserved + purchased"
                )
