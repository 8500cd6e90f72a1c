"""Cart line items and snapshots.

Pure data model, no I/O. Prices are ``Decimal`` in memory and plain JSON
numbers in the slot, so the slot stays readable by the browser
storefront that wrote the same key.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Iterator

from quickcart.errors import StorageError

logger = logging.getLogger(__name__)


def normalize_product_id(product_id: Any) -> str:
    """Product ids compare by string form: ``7`` and ``"7"`` are the same product.

    Raises ValueError for a missing, empty or non-scalar id.
    """
    if product_id is None or isinstance(product_id, (bool, dict, list)):
        raise ValueError(f"invalid product id: {product_id!r}")
    key = str(product_id)
    if not key:
        raise ValueError("product id must be non-empty")
    return key


def to_price(value: Any) -> Decimal:
    """Coerce a price to ``Decimal`` without picking up float noise."""
    if isinstance(value, bool):
        raise ValueError(f"invalid price: {value!r}")
    if isinstance(value, Decimal):
        price = value
    else:
        try:
            price = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
        except (InvalidOperation, TypeError) as exc:
            raise ValueError(f"invalid price: {value!r}") from exc
    if not price.is_finite():
        raise ValueError(f"invalid price: {value!r}")
    return price


def to_quantity(value: Any) -> int:
    """Coerce a stored quantity to ``int``. Fractional values are rejected, not truncated."""
    if isinstance(value, bool):
        raise ValueError(f"invalid quantity: {value!r}")
    if isinstance(value, int):
        return value
    try:
        number = Decimal(repr(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"invalid quantity: {value!r}") from exc
    if not number.is_finite() or number != number.to_integral_value():
        raise ValueError(f"invalid quantity: {value!r}")
    return int(number)


# ---------------------------------------------------------------------------
# CartLineItem
# ---------------------------------------------------------------------------


@dataclass
class CartLineItem:
    """One product's quantity and captured unit price within a cart."""

    product_id: str
    quantity: int
    price_at_add: Decimal = Decimal("0")

    @property
    def line_total(self) -> Decimal:
        return self.price_at_add * self.quantity

    def to_dict(self) -> dict[str, Any]:
        return {
            "productId": self.product_id,
            "quantity": self.quantity,
            "priceAtAdd": _price_to_json(self.price_at_add),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CartLineItem:
        return cls(
            product_id=normalize_product_id(data["productId"]),
            quantity=to_quantity(data["quantity"]),
            price_at_add=to_price(data.get("priceAtAdd", 0)),
        )


def _price_to_json(price: Decimal) -> int | float:
    # Integral prices stay integers so "5" does not round-trip as "5.0".
    if price == price.to_integral_value():
        return int(price)
    return float(price)


# ---------------------------------------------------------------------------
# CartSnapshot
# ---------------------------------------------------------------------------


@dataclass
class CartSnapshot:
    """Ordered line items, unique by product id, in insertion order."""

    items: list[CartLineItem] = field(default_factory=list)

    def __iter__(self) -> Iterator[CartLineItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    @property
    def item_count(self) -> int:
        """Sum of quantities across all line items."""
        return sum(item.quantity for item in self.items)

    @property
    def total(self) -> Decimal:
        """Sum of ``quantity × price_at_add`` across all line items."""
        return sum((item.line_total for item in self.items), Decimal("0"))

    def find(self, product_id: Any) -> CartLineItem | None:
        key = normalize_product_id(product_id)
        return next((item for item in self.items if item.product_id == key), None)

    def copy(self) -> CartSnapshot:
        """Deep enough copy that callers cannot reach store state."""
        return CartSnapshot(items=[
            CartLineItem(item.product_id, item.quantity, item.price_at_add)
            for item in self.items
        ])

    # -- mutations ------------------------------------------------------------

    def add(self, product_id: Any, quantity: int, price_at_add: Decimal) -> None:
        """Increment an existing line or append a new one.

        An existing line keeps its original ``price_at_add``.
        """
        existing = self.find(product_id)
        if existing:
            existing.quantity += quantity
            return
        self.items.append(CartLineItem(
            product_id=normalize_product_id(product_id),
            quantity=quantity,
            price_at_add=price_at_add,
        ))

    def remove(self, product_id: Any) -> bool:
        """Drop the line for ``product_id``. Returns False if it was absent."""
        key = normalize_product_id(product_id)
        kept = [item for item in self.items if item.product_id != key]
        removed = len(kept) != len(self.items)
        self.items = kept
        return removed

    # -- serialization --------------------------------------------------------

    def to_json(self) -> str:
        """Serialize to the slot format: a JSON array of line objects."""
        return json.dumps([item.to_dict() for item in self.items])

    @classmethod
    def from_json(cls, data: str) -> CartSnapshot:
        """Deserialize a cart slot.

        Raises ``StorageError`` when the payload is not a JSON array.
        Malformed entries are skipped; duplicate product ids are merged.
        """
        try:
            obj = json.loads(data, parse_float=Decimal)
        except (json.JSONDecodeError, TypeError) as exc:
            raise StorageError(f"Cart data is corrupt: {exc}") from exc

        if not isinstance(obj, list):
            raise StorageError("Cart data is not a JSON array.")

        snapshot = cls()
        for raw in obj:
            if not isinstance(raw, dict):
                logger.warning("Skipping non-object cart entry: %r", raw)
                continue
            try:
                item = CartLineItem.from_dict(raw)
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping malformed cart entry: %r", raw)
                continue
            if item.quantity < 1 or item.price_at_add < 0:
                logger.warning("Skipping out-of-range cart entry: %r", raw)
                continue
            snapshot.add(item.product_id, item.quantity, item.price_at_add)
        return snapshot
