"""Protocol interfaces for the collaborators around the domain core.

The core never performs I/O.  Orchestration code loads aggregate snapshots
through these repositories, calls a behaviour, and persists the returned
instance.  Implementations (Appwrite, in-memory fakes) live outside this
package.

Concurrency control (e.g. two reservations racing for the last unit) is the
repository's job: optimistic versioning or serialized read-modify-write.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from wishin.domain.transaction import Transaction
    from wishin.domain.wishlist import Wishlist


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------

@runtime_checkable
class IWishlistRepository(Protocol):
    """Persistence for :class:`Wishlist` aggregates (items included)."""

    async def find_by_id(self, wishlist_id: str) -> Wishlist | None: ...
    async def find_by_owner_id(self, owner_id: str) -> list[Wishlist]: ...
    async def save(self, wishlist: Wishlist) -> None: ...
    async def delete(self, wishlist_id: str) -> None: ...


@runtime_checkable
class ITransactionRepository(Protocol):
    """Persistence for :class:`Transaction` aggregates."""

    async def find_by_id(self, transaction_id: str) -> Transaction | None: ...
    async def find_by_item_id(self, item_id: str) -> list[Transaction]: ...
    async def save(self, transaction: Transaction) -> None: ...

    async def cancel_all_reservations_for_item(self, item_id: str) -> list[Transaction]:
        """Cancel every RESERVED transaction of *item_id*; return the cancelled ones."""
        ...


@runtime_checkable
class IUserRepository(Protocol):
    """Current-session identity lookup."""

    async def get_current_user_id(self) -> str: ...


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------

@runtime_checkable
class IPruningNotifier(Protocol):
    """Tells users their reservations were dropped by an owner quantity cut."""

    async def notify_reservations_cancelled_by_pruning(
        self, cancelled: list[Transaction]
    ) -> None: ...
