"""QuickCart: storefront cart and wishlist state.

Cart and wishlist stores persisted to durable key-value slots.
"""

__version__ = "0.1.0"

from quickcart.cart import CartLineItem, CartSnapshot, normalize_product_id
from quickcart.cart_store import CartStore
from quickcart.config import QuickCartConfig
from quickcart.constants import CART_SLOT_KEY, WISHLIST_SLOT_KEY
from quickcart.errors import NotFoundError, QuickCartError, StorageError
from quickcart.notifications import LogNotifier, Notifier
from quickcart.result import StoreResult
from quickcart.slot_backend import SlotBackend
from quickcart.wishlist import WishlistStore
from quickcart.backends import (
    FileSlotBackend,
    MemorySlotBackend,
    RecordStoreSlotBackend,
    build_backend,
)

__all__ = [
    "CartLineItem",
    "CartSnapshot",
    "CartStore",
    "QuickCartConfig",
    "CART_SLOT_KEY",
    "WISHLIST_SLOT_KEY",
    "NotFoundError",
    "QuickCartError",
    "StorageError",
    "LogNotifier",
    "Notifier",
    "StoreResult",
    "SlotBackend",
    "WishlistStore",
    "FileSlotBackend",
    "MemorySlotBackend",
    "RecordStoreSlotBackend",
    "build_backend",
    "normalize_product_id",
]
