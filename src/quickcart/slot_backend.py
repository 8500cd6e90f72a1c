"""Abstract persistence interface for storefront state (durable slots).

Defines the SlotBackend Protocol that CartStore and WishlistStore depend
on. Concrete implementations live in ``quickcart.backends``.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class SlotBackend(Protocol):
    """Async key-value backend holding one JSON document per slot.

    Implementations raise ``StorageError`` on failure. ``read_slot``
    returns None for a slot that does not exist; ``delete_slot`` on a
    missing slot is a no-op.
    """

    async def read_slot(self, key: str) -> str | None: ...

    async def write_slot(self, key: str, value: str) -> None: ...

    async def delete_slot(self, key: str) -> None: ...
