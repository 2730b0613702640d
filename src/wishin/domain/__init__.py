"""Domain layer: the WishlistItem and User entities and the Wishlist,
Transaction and Profile aggregates.

Everything here is immutable and free of I/O; every behaviour returns a new
instance.
"""

from .profile import Profile
from .transaction import Transaction
from .user import User
from .wishlist import ItemRemoval, Wishlist
from .wishlist_item import WishlistItem

__all__ = ["ItemRemoval", "Profile", "Transaction", "User", "Wishlist", "WishlistItem"]
