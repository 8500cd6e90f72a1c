"""Tests for StoreResult and the default notifier."""

import logging

import pytest

from quickcart.errors import NotFoundError, StorageError
from quickcart.notifications import LogNotifier, Notifier
from quickcart.result import StoreResult


class TestStoreResult:
    def test_success(self) -> None:
        result = StoreResult.success([1, 2])
        assert result.ok
        assert result.error is None
        assert result.unwrap() == [1, 2]
        assert result.unwrap_or([]) == [1, 2]

    def test_failure_keeps_fallback_value(self) -> None:
        error = StorageError("disk full", slot_key="quickcart_cart")
        result = StoreResult.failure(error, [])
        assert not result.ok
        assert result.value == []
        assert result.error is error
        assert result.unwrap_or(None) is None

    def test_unwrap_raises_recorded_error(self) -> None:
        error = NotFoundError("missing", product_id="p1")
        result = StoreResult.failure(error, 0)
        with pytest.raises(NotFoundError) as exc_info:
            result.unwrap()
        assert exc_info.value.product_id == "p1"

    def test_is_frozen(self) -> None:
        result = StoreResult.success(1)
        with pytest.raises(AttributeError):
            result.value = 2


class TestLogNotifier:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(LogNotifier(), Notifier)

    def test_logs_messages(self, caplog) -> None:
        notifier = LogNotifier()
        with caplog.at_level(logging.INFO, logger="quickcart.notifications"):
            notifier.success("Cart updated")
            notifier.error("Failed to load cart")
        levels = [(r.levelno, r.getMessage()) for r in caplog.records]
        assert (logging.INFO, "Cart updated") in levels
        assert (logging.WARNING, "Failed to load cart") in levels
