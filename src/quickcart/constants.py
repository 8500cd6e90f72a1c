"""Constants for QuickCart storefront state."""

# Slot keys used by the original browser storage; kept so existing
# carts and wishlists load unchanged.
CART_SLOT_KEY = "quickcart_cart"
WISHLIST_SLOT_KEY = "quickcart-wishlist"

DEFAULT_STORAGE_DIR = ".quickcart"
DEFAULT_RECORD_TABLE = "storage_slot_c"
DEFAULT_RECORD_TIMEOUT_SECS = 15.0
