"""Wishlist store: a durable, ordered set of favorited product ids.

The in-memory list is authoritative for the lifetime of the store and is
written through to its slot on every mutation.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import TYPE_CHECKING, Any

from quickcart.cart import normalize_product_id
from quickcart.constants import WISHLIST_SLOT_KEY
from quickcart.errors import StorageError
from quickcart.notifications import (
    WISHLIST_ADDED,
    WISHLIST_LOAD_FAILED,
    WISHLIST_REMOVED,
    WISHLIST_SAVE_FAILED,
    LogNotifier,
)
from quickcart.result import StoreResult

if TYPE_CHECKING:
    from quickcart.notifications import Notifier
    from quickcart.slot_backend import SlotBackend

logger = logging.getLogger(__name__)


def parse_wishlist(data: str) -> list[str]:
    """Deserialize a wishlist slot into normalized, de-duplicated ids.

    Raises ``StorageError`` when the payload is not a JSON array.
    """
    try:
        obj = json.loads(data)
    except (json.JSONDecodeError, TypeError) as exc:
        raise StorageError(f"Wishlist data is corrupt: {exc}") from exc

    if not isinstance(obj, list):
        raise StorageError("Wishlist data is not a JSON array.")

    items: list[str] = []
    for raw in obj:
        try:
            product_id = normalize_product_id(raw)
        except ValueError:
            logger.warning("Skipping malformed wishlist entry: %r", raw)
            continue
        if product_id not in items:
            items.append(product_id)
    return items


class WishlistStore:
    """Wishlist persisted to one durable slot.

    The slot is read lazily on first use. While the slot cannot be read,
    reads return an empty list and mutations fail without writing, so an
    unreadable slot is never overwritten. A failed write keeps the
    in-memory change and reports the failure.
    """

    def __init__(
        self,
        backend: SlotBackend,
        notifier: Notifier | None = None,
        slot_key: str = WISHLIST_SLOT_KEY,
    ) -> None:
        self._backend = backend
        self._notifier = notifier if notifier is not None else LogNotifier()
        self._slot_key = slot_key
        self._items: list[str] | None = None
        self._lock = asyncio.Lock()

    @property
    def slot_key(self) -> str:
        return self._slot_key

    async def _ensure_loaded(self) -> StorageError | None:
        """Load the slot if it has not been loaded yet. Returns the load error, if any.

        A failed load leaves the store unloaded, so the next call reads the
        slot again instead of treating it as empty.
        """
        if self._items is not None:
            return None
        try:
            data = await self._backend.read_slot(self._slot_key)
            self._items = parse_wishlist(data) if data is not None else []
        except Exception as exc:
            error = exc if isinstance(exc, StorageError) else StorageError(
                f"Failed to read wishlist slot: {exc}", slot_key=self._slot_key,
            )
            logger.warning("Failed to load wishlist from slot %s: %s", self._slot_key, error)
            self._notifier.error(WISHLIST_LOAD_FAILED)
            return error
        return None

    async def _save(self, items: list[str]) -> StorageError | None:
        """Write the full list through to the slot. Returns the error, if any."""
        try:
            await self._backend.write_slot(self._slot_key, json.dumps(items))
        except Exception as exc:
            error = exc if isinstance(exc, StorageError) else StorageError(
                f"Failed to write wishlist slot: {exc}", slot_key=self._slot_key,
            )
            logger.warning("Failed to save wishlist to slot %s: %s", self._slot_key, error)
            self._notifier.error(WISHLIST_SAVE_FAILED)
            return error
        return None

    def _result(self, error: StorageError | None = None) -> StoreResult[list[str]]:
        items = list(self._items or [])
        if error is not None:
            return StoreResult.failure(error, items)
        return StoreResult.success(items)

    # -- reads ----------------------------------------------------------------

    async def get_all(self) -> StoreResult[list[str]]:
        """Return a copy of the wishlist.

        Fails with an empty list when the slot cannot be read.
        """
        async with self._lock:
            return self._result(await self._ensure_loaded())

    async def contains(self, product_id: Any) -> bool:
        """Membership check. False when the slot cannot be read."""
        key = normalize_product_id(product_id)
        async with self._lock:
            if await self._ensure_loaded() is not None:
                return False
            return key in self._items

    async def reload(self) -> StoreResult[list[str]]:
        """Discard in-memory state and re-read the slot."""
        async with self._lock:
            self._items = None
            return self._result(await self._ensure_loaded())

    # -- mutations ------------------------------------------------------------

    async def add(self, product_id: Any) -> StoreResult[list[str]]:
        """Append ``product_id`` if absent. Re-adding is a no-op without a write."""
        key = normalize_product_id(product_id)
        async with self._lock:
            error = await self._ensure_loaded()
            if error is not None:
                return self._result(error)
            return await self._add(key)

    async def remove(self, product_id: Any) -> StoreResult[list[str]]:
        """Remove ``product_id`` if present. Removing an absent id is not an error."""
        key = normalize_product_id(product_id)
        async with self._lock:
            error = await self._ensure_loaded()
            if error is not None:
                return self._result(error)
            return await self._remove(key)

    async def toggle(self, product_id: Any) -> StoreResult[list[str]]:
        """Remove ``product_id`` if present, otherwise add it."""
        key = normalize_product_id(product_id)
        async with self._lock:
            error = await self._ensure_loaded()
            if error is not None:
                return self._result(error)
            if key in self._items:
                return await self._remove(key)
            return await self._add(key)

    async def _add(self, key: str) -> StoreResult[list[str]]:
        if key in self._items:
            return self._result()
        self._items.append(key)
        error = await self._save(self._items)
        if error is None:
            self._notifier.success(WISHLIST_ADDED)
        return self._result(error)

    async def _remove(self, key: str) -> StoreResult[list[str]]:
        self._items = [item for item in self._items if item != key]
        error = await self._save(self._items)
        if error is None:
            self._notifier.success(WISHLIST_REMOVED)
        return self._result(error)
