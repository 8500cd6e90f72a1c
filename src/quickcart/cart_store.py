"""Cart store: the single source of truth for the shopping cart.

Every operation reads the full cart from its durable slot, transforms it
in memory and writes the full cart back. Storage and lookup failures are
logged, reported to the notifier and returned as a failed ``StoreResult``
whose value is an empty cart (or zero for the aggregates).
"""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal
from typing import TYPE_CHECKING, Any, TypeVar

from quickcart.cart import CartLineItem, CartSnapshot, normalize_product_id, to_price
from quickcart.constants import CART_SLOT_KEY
from quickcart.errors import NotFoundError, QuickCartError, StorageError
from quickcart.notifications import (
    CART_ADD_FAILED,
    CART_CLEAR_FAILED,
    CART_CLEARED,
    CART_ITEM_ADDED,
    CART_ITEM_NOT_FOUND,
    CART_ITEM_REMOVED,
    CART_LOAD_FAILED,
    CART_REMOVE_FAILED,
    CART_UPDATE_FAILED,
    CART_UPDATED,
    LogNotifier,
)
from quickcart.result import StoreResult

if TYPE_CHECKING:
    from quickcart.notifications import Notifier
    from quickcart.slot_backend import SlotBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CartStore:
    """Cart persisted to one durable slot.

    - Line items are unique by normalized product id and keep insertion order.
    - ``price_at_add`` is captured on first add and never overwritten.
    - One asyncio lock serializes operations on this store instance.
    """

    def __init__(
        self,
        backend: SlotBackend,
        notifier: Notifier | None = None,
        slot_key: str = CART_SLOT_KEY,
    ) -> None:
        self._backend = backend
        self._notifier = notifier if notifier is not None else LogNotifier()
        self._slot_key = slot_key
        self._lock = asyncio.Lock()

    @property
    def slot_key(self) -> str:
        return self._slot_key

    # -- slot I/O -------------------------------------------------------------

    async def _load(self) -> CartSnapshot:
        """Read the cart slot. Missing slot is an empty cart. Raises StorageError."""
        try:
            data = await self._backend.read_slot(self._slot_key)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(
                f"Failed to read cart slot: {exc}", slot_key=self._slot_key,
            ) from exc

        if data is None:
            return CartSnapshot()
        return CartSnapshot.from_json(data)

    async def _save(self, cart: CartSnapshot) -> None:
        try:
            await self._backend.write_slot(self._slot_key, cart.to_json())
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(
                f"Failed to write cart slot: {exc}", slot_key=self._slot_key,
            ) from exc
        logger.debug("Saved cart slot %s (%d line(s)).", self._slot_key, len(cart))

    async def _delete(self) -> None:
        try:
            await self._backend.delete_slot(self._slot_key)
        except StorageError:
            raise
        except Exception as exc:
            raise StorageError(
                f"Failed to delete cart slot: {exc}", slot_key=self._slot_key,
            ) from exc

    def _fail(
        self, error: QuickCartError, message: str, fallback: T,
    ) -> StoreResult[T]:
        logger.warning("%s (slot %s): %s", message, self._slot_key, error)
        self._notifier.error(message)
        return StoreResult.failure(error, fallback)

    # -- reads ----------------------------------------------------------------

    async def get_cart(self) -> StoreResult[CartSnapshot]:
        """Return the current cart, or an empty cart if it cannot be read."""
        async with self._lock:
            try:
                cart = await self._load()
            except StorageError as exc:
                return self._fail(exc, CART_LOAD_FAILED, CartSnapshot())
            return StoreResult.success(cart.copy())

    async def get_item(self, product_id: Any) -> StoreResult[CartLineItem | None]:
        """Return the line item for ``product_id``, or None if it is not in the cart."""
        result = await self.get_cart()
        return StoreResult(value=result.value.find(product_id), error=result.error)

    async def get_item_count(self) -> StoreResult[int]:
        """Sum of quantities across the cart; 0 on failure."""
        async with self._lock:
            try:
                cart = await self._load()
            except StorageError as exc:
                return self._fail(exc, CART_LOAD_FAILED, 0)
            return StoreResult.success(cart.item_count)

    async def get_total(self) -> StoreResult[Decimal]:
        """Sum of ``quantity × price_at_add`` across the cart; 0 on failure."""
        async with self._lock:
            try:
                cart = await self._load()
            except StorageError as exc:
                return self._fail(exc, CART_LOAD_FAILED, Decimal("0"))
            return StoreResult.success(cart.total)

    # -- mutations ------------------------------------------------------------

    async def add_item(
        self, product_id: Any, quantity: int = 1, price_at_add: Any = 0,
    ) -> StoreResult[CartSnapshot]:
        """Add ``quantity`` units of a product.

        An existing line has its quantity incremented and keeps the price it
        was first added at. Raises ValueError for a missing product id, a
        non-positive quantity, or a negative or non-finite price.
        """
        key = normalize_product_id(product_id)
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError("quantity must be a positive integer")
        price = to_price(price_at_add)
        if price < 0:
            raise ValueError("price_at_add must be non-negative")

        async with self._lock:
            try:
                cart = await self._load()
                cart.add(key, quantity, price)
                await self._save(cart)
            except StorageError as exc:
                return self._fail(exc, CART_ADD_FAILED, CartSnapshot())

        self._notifier.success(CART_ITEM_ADDED)
        return StoreResult.success(cart.copy())

    async def update_quantity(
        self, product_id: Any, new_quantity: int,
    ) -> StoreResult[CartSnapshot]:
        """Set a line's quantity exactly; ``new_quantity <= 0`` removes the line.

        A product that is not in the cart yields a failed result carrying
        ``NotFoundError`` and an empty cart as its value.
        """
        if isinstance(new_quantity, bool) or not isinstance(new_quantity, int):
            raise ValueError("new_quantity must be an integer")

        async with self._lock:
            try:
                cart = await self._load()
                item = cart.find(product_id)
                if item is None:
                    key = normalize_product_id(product_id)
                    raise NotFoundError(
                        f"Product {key} is not in the cart",
                        product_id=key,
                        slot_key=self._slot_key,
                    )
                if new_quantity <= 0:
                    cart.remove(product_id)
                    message = CART_ITEM_REMOVED
                else:
                    item.quantity = new_quantity
                    message = CART_UPDATED
                await self._save(cart)
            except NotFoundError as exc:
                return self._fail(exc, CART_ITEM_NOT_FOUND, CartSnapshot())
            except StorageError as exc:
                return self._fail(exc, CART_UPDATE_FAILED, CartSnapshot())

        self._notifier.success(message)
        return StoreResult.success(cart.copy())

    async def remove_item(self, product_id: Any) -> StoreResult[CartSnapshot]:
        """Remove a product's line. Removing an absent product is not an error."""
        async with self._lock:
            try:
                cart = await self._load()
                cart.remove(product_id)
                await self._save(cart)
            except StorageError as exc:
                return self._fail(exc, CART_REMOVE_FAILED, CartSnapshot())

        self._notifier.success(CART_ITEM_REMOVED)
        return StoreResult.success(cart.copy())

    async def clear_cart(self) -> StoreResult[CartSnapshot]:
        """Delete the cart slot entirely."""
        async with self._lock:
            try:
                await self._delete()
            except StorageError as exc:
                return self._fail(exc, CART_CLEAR_FAILED, CartSnapshot())

        self._notifier.success(CART_CLEARED)
        return StoreResult.success(CartSnapshot())
