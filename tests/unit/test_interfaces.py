"""Protocol conformance for the repository and notifier interfaces.

The in-memory fakes here also drive an owner quantity cut end to end:
prune the item, cancel the affected reservations, notify the holders.
"""

import pytest

from wishin.core.enums import TransactionStatus
from wishin.core.interfaces import (
    IPruningNotifier,
    ITransactionRepository,
    IUserRepository,
    IWishlistRepository,
)
from wishin.domain.transaction import Transaction


class InMemoryWishlistRepository:
    def __init__(self):
        self._rows = {}

    async def find_by_id(self, wishlist_id):
        return self._rows.get(wishlist_id)

    async def find_by_owner_id(self, owner_id):
        return [w for w in self._rows.values() if w.owner_id == owner_id]

    async def save(self, wishlist):
        self._rows[wishlist.id] = wishlist

    async def delete(self, wishlist_id):
        self._rows.pop(wishlist_id, None)


class InMemoryTransactionRepository:
    def __init__(self):
        self._rows = {}

    async def find_by_id(self, transaction_id):
        return self._rows.get(transaction_id)

    async def find_by_item_id(self, item_id):
        return [t for t in self._rows.values() if t.item_id == item_id]

    async def save(self, transaction):
        self._rows[transaction.id] = transaction

    async def cancel_all_reservations_for_item(self, item_id):
        cancelled = [
            t.cancel() for t in self._rows.values()
            if t.item_id == item_id and t.status == TransactionStatus.RESERVED
        ]
        for transaction in cancelled:
            self._rows[transaction.id] = transaction
        return cancelled


class FixedUserRepository:
    def __init__(self, user_id):
        self._user_id = user_id

    async def get_current_user_id(self):
        return self._user_id


class RecordingNotifier:
    def __init__(self):
        self.calls = []

    async def notify_reservations_cancelled_by_pruning(self, cancelled):
        self.calls.append(list(cancelled))


class TestProtocolConformance:
    def test_fakes_satisfy_protocols(self):
        assert isinstance(InMemoryWishlistRepository(), IWishlistRepository)
        assert isinstance(InMemoryTransactionRepository(), ITransactionRepository)
        assert isinstance(FixedUserRepository("user_1"), IUserRepository)
        assert isinstance(RecordingNotifier(), IPruningNotifier)

    def test_unrelated_object(self):
        assert not isinstance(object(), IWishlistRepository)
        assert not isinstance(RecordingNotifier(), ITransactionRepository)


class TestQuantityCutFlow:
    @pytest.mark.asyncio
    async def test_owner_cut_cancels_and_notifies(self, wishlist_with_item, item):
        wishlists = InMemoryWishlistRepository()
        transactions = InMemoryTransactionRepository()
        users = FixedUserRepository(wishlist_with_item.owner_id)
        notifier = RecordingNotifier()

        reserved = wishlist_with_item.reserve_item(item.id, 2)
        await wishlists.save(reserved)
        hold = Transaction.create_reservation(
            item_id=item.id, user_id="friend_1", quantity=2,
        )
        bought = Transaction.create_purchase(
            item_id=item.id, guest_session_id="guest-7", quantity=1,
        )
        await transactions.save(hold)
        await transactions.save(bought)

        # Owner cuts the quantity from 5 to 3
        loaded = await wishlists.find_by_id(reserved.id)
        loaded.ensure_owned_by(await users.get_current_user_id())
        pruned = loaded.update_item(item.id, total_quantity=3)
        await wishlists.save(pruned)
        cancelled = await transactions.cancel_all_reservations_for_item(item.id)
        await notifier.notify_reservations_cancelled_by_pruning(cancelled)

        stored = await wishlists.find_by_id(reserved.id)
        assert stored.find_item(item.id).reserved_quantity == 0
        assert [t.id for t in cancelled] == [hold.id]
        assert (await transactions.find_by_id(bought.id)).status == TransactionStatus.PURCHASED
        assert notifier.calls == [cancelled]

    @pytest.mark.asyncio
    async def test_find_by_owner_and_delete(self, wishlist):
        wishlists = InMemoryWishlistRepository()
        await wishlists.save(wishlist)
        assert await wishlists.find_by_owner_id(wishlist.owner_id) == [wishlist]
        await wishlists.delete(wishlist.id)
        assert await wishlists.find_by_id(wishlist.id) is None
