"""Wire-format DTOs built from aggregate snapshots.

Conventions
~~~~~~~~~~~
* camelCase keys when dumped with ``by_alias=True``.
* ``priority`` is serialized as its ordinal (1 = LOW ... 4 = URGENT).
* Timestamps are ISO-8601 strings.
* ``availableQuantity`` is included so clients never recompute it.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from wishin.domain.transaction import Transaction
from wishin.domain.wishlist import Wishlist
from wishin.domain.wishlist_item import WishlistItem


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class WishlistItemOutput(_WireModel):
    id: str
    name: str
    description: str | None = None
    url: str | None = None
    price: float | None = None
    currency: str | None = None
    priority: int
    image_url: str | None = None
    total_quantity: int
    reserved_quantity: int
    purchased_quantity: int
    available_quantity: int
    is_unlimited: bool


class WishlistOutput(_WireModel):
    id: str
    title: str
    description: str | None = None
    owner_id: str
    visibility: str
    participation: str
    items: list[WishlistItemOutput]
    created_at: str
    updated_at: str


class TransactionOutput(_WireModel):
    id: str
    item_id: str | None
    user_id: str | None = None
    guest_session_id: str | None = None
    status: str
    quantity: int
    created_at: str
    updated_at: str


def _iso(value: datetime) -> str:
    return value.isoformat()


def item_to_output(item: WishlistItem) -> WishlistItemOutput:
    props = item.to_props()
    return WishlistItemOutput(
        id=props["id"],
        name=props["name"],
        description=props["description"],
        url=props["url"],
        price=props["price"],
        currency=props["currency"],
        priority=int(props["priority"]),
        image_url=props["image_url"],
        total_quantity=props["total_quantity"],
        reserved_quantity=props["reserved_quantity"],
        purchased_quantity=props["purchased_quantity"],
        available_quantity=item.available_quantity,
        is_unlimited=props["is_unlimited"],
    )


def wishlist_to_output(wishlist: Wishlist) -> WishlistOutput:
    """Map a :class:`Wishlist` aggregate to its wire DTO."""
    props = wishlist.to_props()
    return WishlistOutput(
        id=props["id"],
        title=props["title"],
        description=props["description"],
        owner_id=props["owner_id"],
        visibility=props["visibility"].value,
        participation=props["participation"].value,
        items=[item_to_output(item) for item in wishlist.items],
        created_at=_iso(props["created_at"]),
        updated_at=_iso(props["updated_at"]),
    )


def transaction_to_output(transaction: Transaction) -> TransactionOutput:
    props = transaction.to_props()
    return TransactionOutput(
        id=props["id"],
        item_id=props["item_id"],
        user_id=props["user_id"],
        guest_session_id=props["guest_session_id"],
        status=props["status"].value,
        quantity=props["quantity"],
        created_at=_iso(props["created_at"]),
        updated_at=_iso(props["updated_at"]),
    )
