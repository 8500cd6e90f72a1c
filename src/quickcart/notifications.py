"""User-facing notification seam.

The view layer shows short toasts after cart and wishlist operations.
Stores report through a ``Notifier``; the default ``LogNotifier`` just
logs, which is what headless hosts and tests want.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)

# Cart messages
CART_LOAD_FAILED = "Failed to load cart"
CART_ITEM_ADDED = "Item added to cart"
CART_ADD_FAILED = "Failed to add item to cart"
CART_ITEM_NOT_FOUND = "Item not found in cart"
CART_ITEM_REMOVED = "Item removed from cart"
CART_UPDATED = "Cart updated"
CART_UPDATE_FAILED = "Failed to update cart"
CART_REMOVE_FAILED = "Failed to remove item"
CART_CLEARED = "Cart cleared"
CART_CLEAR_FAILED = "Failed to clear cart"

# Wishlist messages
WISHLIST_LOAD_FAILED = "Failed to load wishlist"
WISHLIST_SAVE_FAILED = "Failed to save wishlist"
WISHLIST_ADDED = "Added to wishlist"
WISHLIST_REMOVED = "Removed from wishlist"


@runtime_checkable
class Notifier(Protocol):
    """Receives user-facing success and error messages."""

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...


class LogNotifier:
    """Notifier that writes messages to the ``quickcart.notifications`` logger."""

    def success(self, message: str) -> None:
        logger.info("%s", message)

    def error(self, message: str) -> None:
        logger.warning("%s", message)
