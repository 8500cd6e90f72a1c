"""Exception hierarchy for cart and wishlist storage."""

from __future__ import annotations


class QuickCartError(Exception):
    """Base exception for storefront state operations."""

    def __init__(self, message: str, slot_key: str | None = None) -> None:
        super().__init__(message)
        self.slot_key = slot_key


class StorageError(QuickCartError):
    """Read, write, delete or deserialize failure on a durable slot."""


class NotFoundError(QuickCartError):
    """Referenced cart line item is not in the cart."""

    def __init__(
        self, message: str, product_id: str, slot_key: str | None = None,
    ) -> None:
        super().__init__(message, slot_key=slot_key)
        self.product_id = product_id
