"""Slot backends and the config-driven factory."""

from __future__ import annotations

from quickcart.backends.file import FileSlotBackend
from quickcart.backends.memory import MemorySlotBackend
from quickcart.backends.record_store import RecordStoreSlotBackend
from quickcart.config import QuickCartConfig
from quickcart.slot_backend import SlotBackend


def build_backend(config: QuickCartConfig) -> SlotBackend:
    """Construct the slot backend named by ``config.backend``."""
    if config.backend == "memory":
        return MemorySlotBackend()
    if config.backend == "file":
        return FileSlotBackend(config.storage_dir)
    if config.backend == "record_store":
        if not config.record_store_url or not config.record_store_api_key:
            raise ValueError(
                "record_store backend requires record_store_url and record_store_api_key"
            )
        return RecordStoreSlotBackend(
            base_url=config.record_store_url,
            api_key=config.record_store_api_key,
            table=config.record_store_table,
            timeout=config.record_store_timeout_secs,
        )
    raise ValueError(f"Unknown slot backend: {config.backend!r}")


__all__ = [
    "FileSlotBackend",
    "MemorySlotBackend",
    "RecordStoreSlotBackend",
    "build_backend",
]
