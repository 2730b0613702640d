"""Enumerations used across the wishlist domain."""

from enum import Enum, IntEnum


class Priority(IntEnum):
    LOW = 1
    MEDIUM = 2  # Default
    HIGH = 3
    URGENT = 4


class Visibility(str, Enum):
    """Who can view a wishlist."""

    LINK = "LINK"  # Anyone holding the link
    PRIVATE = "PRIVATE"  # Owner only


class Participation(str, Enum):
    """Who can reserve or purchase items on a wishlist."""

    ANYONE = "ANYONE"
    REGISTERED = "REGISTERED"
    CONTACTS = "CONTACTS"


class TransactionStatus(str, Enum):
    RESERVED = "RESERVED"
    PURCHASED = "PURCHASED"
    CANCELLED = "CANCELLED"  # Terminal


class ValidationMode(str, Enum):
    """Which invariant tiers an entity's ``_validate`` applies.

    Structural checks always run. Content checks cover lengths, ranges and
    formats. Inventory checks cover ``total >= reserved + purchased``.
    """

    STRUCTURAL = "structural"  # Reconstitution, safe reductions
    STRICT = "strict"  # Fresh creation
    EVOLUTIVE = "evolutive"  # Owner edits
    TRANSACTION = "transaction"  # Reserve / purchase

    @property
    def checks_content(self) -> bool:
        return self in (ValidationMode.STRICT, ValidationMode.EVOLUTIVE)

    @property
    def checks_inventory(self) -> bool:
        return self in (ValidationMode.STRICT, ValidationMode.TRANSACTION)
