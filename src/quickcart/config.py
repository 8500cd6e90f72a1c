"""Settings that pick and parameterize the slot backend.

``QuickCartConfig`` holds values only and reads nothing from the
environment. Callers fill it in from wherever they keep settings and
hand it to ``build_backend``.
"""

from dataclasses import dataclass

from quickcart.constants import (
    CART_SLOT_KEY,
    DEFAULT_RECORD_TABLE,
    DEFAULT_RECORD_TIMEOUT_SECS,
    DEFAULT_STORAGE_DIR,
    WISHLIST_SLOT_KEY,
)


@dataclass(frozen=True)
class QuickCartConfig:
    backend: str = "file"  # memory | file | record_store
    storage_dir: str = DEFAULT_STORAGE_DIR
    cart_slot_key: str = CART_SLOT_KEY
    wishlist_slot_key: str = WISHLIST_SLOT_KEY
    record_store_url: str | None = None
    record_store_api_key: str | None = None
    record_store_table: str = DEFAULT_RECORD_TABLE
    record_store_timeout_secs: float = DEFAULT_RECORD_TIMEOUT_SECS
