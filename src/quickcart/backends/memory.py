"""In-process slot backend. Nothing survives the process."""

from __future__ import annotations


class MemorySlotBackend:
    """Dict-backed ``SlotBackend`` for tests and ephemeral sessions."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._slots: dict[str, str] = dict(initial or {})

    async def read_slot(self, key: str) -> str | None:
        return self._slots.get(key)

    async def write_slot(self, key: str, value: str) -> None:
        self._slots[key] = value

    async def delete_slot(self, key: str) -> None:
        self._slots.pop(key, None)

    def has_slot(self, key: str) -> bool:
        return key in self._slots
