"""Shared fixtures for the wishin test suite."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable

import pytest

from wishin.core.enums import Participation, Priority, TransactionStatus, Visibility
from wishin.domain.transaction import Transaction
from wishin.domain.wishlist import Wishlist
from wishin.domain.wishlist_item import WishlistItem

# Valid UUID v4s
WISHLIST_ID = "9b1deb4d-3b7d-4bad-9bdd-2b0d7b3dcb6d"
OWNER_ID = "123e4567-e89b-42d3-a456-426614174001"
ITEM_ID = "123e4567-e89b-42d3-a456-426614174000"
USER_ID = "550e8400-e29b-41d4-a716-446655440000"
TRANSACTION_ID = "6ba7b810-9dad-41d1-80b4-00c04fd430c8"

FIXED_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _item_id_for(index: int) -> str:
    return f"123e4567-e89b-42d3-a456-426614{index:06d}"


# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------

@pytest.fixture
def make_item() -> Callable[..., WishlistItem]:
    """Fresh-item factory: five units of "PlayStation 5" unless overridden."""

    def _make(**overrides: Any) -> WishlistItem:
        props: dict[str, Any] = {
            "id": ITEM_ID,
            "wishlist_id": WISHLIST_ID,
            "name": "PlayStation 5",
            "total_quantity": 5,
        }
        props.update(overrides)
        return WishlistItem.create(**props)

    return _make


@pytest.fixture
def item_snapshot() -> Callable[..., dict[str, Any]]:
    """Persisted item row factory; ``index`` picks a distinct id and name."""

    def _make(index: int = 0, **overrides: Any) -> dict[str, Any]:
        props: dict[str, Any] = {
            "id": _item_id_for(index),
            "wishlist_id": WISHLIST_ID,
            "name": f"Item {index}",
            "priority": Priority.MEDIUM,
            "is_unlimited": False,
            "total_quantity": 1,
            "reserved_quantity": 0,
            "purchased_quantity": 0,
        }
        props.update(overrides)
        return props

    return _make


@pytest.fixture
def wishlist_snapshot() -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        props: dict[str, Any] = {
            "id": WISHLIST_ID,
            "owner_id": OWNER_ID,
            "title": "My Birthday List",
            "description": "Things I want for my birthday",
            "visibility": Visibility.LINK,
            "participation": Participation.ANYONE,
            "items": [],
            "created_at": FIXED_TIME,
            "updated_at": FIXED_TIME,
        }
        props.update(overrides)
        return props

    return _make


@pytest.fixture
def transaction_snapshot() -> Callable[..., dict[str, Any]]:
    def _make(**overrides: Any) -> dict[str, Any]:
        props: dict[str, Any] = {
            "id": TRANSACTION_ID,
            "item_id": ITEM_ID,
            "user_id": USER_ID,
            "guest_session_id": None,
            "status": TransactionStatus.RESERVED,
            "quantity": 1,
            "created_at": FIXED_TIME,
            "updated_at": FIXED_TIME,
        }
        props.update(overrides)
        return props

    return _make


# ---------------------------------------------------------------------------
# Ready-made aggregates
# ---------------------------------------------------------------------------

@pytest.fixture
def item(make_item) -> WishlistItem:
    """Five units, nothing reserved or purchased."""
    return make_item()


@pytest.fixture
def wishlist() -> Wishlist:
    return Wishlist.create(
        id=WISHLIST_ID,
        owner_id=OWNER_ID,
        title="My Birthday List",
        description="Things I want for my birthday",
        visibility=Visibility.LINK,
        participation=Participation.ANYONE,
    )


@pytest.fixture
def wishlist_with_item(wishlist: Wishlist, item: WishlistItem) -> Wishlist:
    return wishlist.add_item(item)


@pytest.fixture
def reservation() -> Transaction:
    return Transaction.create_reservation(item_id=ITEM_ID, user_id=USER_ID, quantity=1)


@pytest.fixture
def guest_purchase() -> Transaction:
    return Transaction.create_purchase(
        item_id=ITEM_ID, guest_session_id="guest-session-42", quantity=1,
    )
