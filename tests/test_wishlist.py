"""Tests for WishlistStore: lazy load, write-through, toggle semantics."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from quickcart.backends.memory import MemorySlotBackend
from quickcart.constants import WISHLIST_SLOT_KEY
from quickcart.errors import StorageError
from quickcart.wishlist import WishlistStore, parse_wishlist


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _store(initial: list | None = None) -> tuple[WishlistStore, MemorySlotBackend, MagicMock]:
    slots = {WISHLIST_SLOT_KEY: json.dumps(initial)} if initial is not None else {}
    backend = MemorySlotBackend(slots)
    notifier = MagicMock()
    return WishlistStore(backend, notifier=notifier), backend, notifier


def _mock_backend(read: str | None = None, fail_read: bool = False, fail_write: bool = False):
    backend = AsyncMock()
    if fail_read:
        backend.read_slot = AsyncMock(side_effect=StorageError("unreadable"))
    else:
        backend.read_slot = AsyncMock(return_value=read)
    if fail_write:
        backend.write_slot = AsyncMock(side_effect=StorageError("quota exceeded"))
    else:
        backend.write_slot = AsyncMock(return_value=None)
    return backend


async def _stored(backend: MemorySlotBackend) -> list:
    return json.loads(await backend.read_slot(WISHLIST_SLOT_KEY))


# ---------------------------------------------------------------------------
# parse_wishlist
# ---------------------------------------------------------------------------


class TestParseWishlist:
    def test_normalizes_and_dedupes(self) -> None:
        assert parse_wishlist('["a", 1, "1", "a", "b"]') == ["a", "1", "b"]

    def test_skips_malformed_entries(self) -> None:
        assert parse_wishlist('["a", null, "", {"id": 1}, [2], "b"]') == ["a", "b"]

    def test_corrupt_raises(self) -> None:
        with pytest.raises(StorageError):
            parse_wishlist("[oops")

    def test_non_array_raises(self) -> None:
        with pytest.raises(StorageError):
            parse_wishlist('{"a": 1}')


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class TestWishlistLoad:
    @pytest.mark.asyncio
    async def test_missing_slot_is_empty(self) -> None:
        store, _, _ = _store()
        result = await store.get_all()
        assert result.ok
        assert result.value == []

    @pytest.mark.asyncio
    async def test_loads_existing_slot(self) -> None:
        store, _, _ = _store(["p1", "p2"])
        assert (await store.get_all()).value == ["p1", "p2"]

    @pytest.mark.asyncio
    async def test_loads_lazily_once(self) -> None:
        backend = _mock_backend(read='["p1"]')
        store = WishlistStore(backend, notifier=MagicMock())
        backend.read_slot.assert_not_called()
        await store.get_all()
        await store.get_all()
        await store.contains("p1")
        backend.read_slot.assert_called_once_with(WISHLIST_SLOT_KEY)

    @pytest.mark.asyncio
    async def test_load_failure_reports_and_starts_empty(self) -> None:
        notifier = MagicMock()
        store = WishlistStore(_mock_backend(fail_read=True), notifier=notifier)
        result = await store.get_all()
        assert not result.ok
        assert isinstance(result.error, StorageError)
        assert result.value == []
        notifier.error.assert_called_once_with("Failed to load wishlist")

    @pytest.mark.asyncio
    async def test_add_after_failed_load_does_not_overwrite_slot(self) -> None:
        backend = _mock_backend(fail_read=True)
        store = WishlistStore(backend, notifier=MagicMock())
        assert not (await store.get_all()).ok
        result = await store.add("p1")
        assert not result.ok
        assert isinstance(result.error, StorageError)
        assert result.value == []
        backend.write_slot.assert_not_called()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("operation", ["add", "remove", "toggle"])
    async def test_mutations_fail_without_writing_while_unreadable(self, operation: str) -> None:
        backend = _mock_backend(fail_read=True)
        notifier = MagicMock()
        store = WishlistStore(backend, notifier=notifier)
        result = await getattr(store, operation)("p1")
        assert not result.ok
        backend.write_slot.assert_not_called()
        notifier.success.assert_not_called()
        assert not await store.contains("p1")

    @pytest.mark.asyncio
    async def test_transient_read_failure_is_retried(self) -> None:
        store, backend, _ = _store(["a", "b", "c"])
        backend.read_slot = AsyncMock(side_effect=[
            StorageError("transient"),
            json.dumps(["a", "b", "c"]),
        ])
        assert not (await store.get_all()).ok
        result = await store.add("z")
        assert result.ok
        assert result.value == ["a", "b", "c", "z"]
        assert backend.read_slot.call_count == 2
        assert json.loads(backend._slots[WISHLIST_SLOT_KEY]) == ["a", "b", "c", "z"]

    @pytest.mark.asyncio
    async def test_transient_read_failure_on_first_add_keeps_slot(self) -> None:
        store, backend, _ = _store(["a", "b", "c"])
        backend.read_slot = AsyncMock(side_effect=[
            StorageError("transient"),
            json.dumps(["a", "b", "c"]),
        ])
        assert not (await store.add("z")).ok
        assert json.loads(backend._slots[WISHLIST_SLOT_KEY]) == ["a", "b", "c"]
        assert (await store.add("z")).value == ["a", "b", "c", "z"]

    @pytest.mark.asyncio
    async def test_reload_picks_up_external_changes(self) -> None:
        store, backend, _ = _store(["p1"])
        await store.get_all()
        await backend.write_slot(WISHLIST_SLOT_KEY, '["p9"]')
        assert (await store.get_all()).value == ["p1"]
        assert (await store.reload()).value == ["p9"]


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


class TestWishlistMutations:
    @pytest.mark.asyncio
    async def test_add_appends_and_persists(self) -> None:
        store, backend, notifier = _store(["p1"])
        result = await store.add("p2")
        assert result.ok
        assert result.value == ["p1", "p2"]
        assert await _stored(backend) == ["p1", "p2"]
        notifier.success.assert_called_once_with("Added to wishlist")

    @pytest.mark.asyncio
    async def test_add_existing_is_noop_without_write(self) -> None:
        backend = _mock_backend(read='["p1"]')
        notifier = MagicMock()
        store = WishlistStore(backend, notifier=notifier)
        result = await store.add("p1")
        assert result.value == ["p1"]
        backend.write_slot.assert_not_called()
        notifier.success.assert_not_called()

    @pytest.mark.asyncio
    async def test_add_normalizes_numeric_id(self) -> None:
        store, _, _ = _store(["7"])
        result = await store.add(7)
        assert result.value == ["7"]
        assert await store.contains(7)

    @pytest.mark.asyncio
    async def test_add_missing_id_raises(self) -> None:
        store, backend, _ = _store(["p1"])
        with pytest.raises(ValueError):
            await store.add(None)
        assert await _stored(backend) == ["p1"]

    @pytest.mark.asyncio
    async def test_remove_present(self) -> None:
        store, backend, notifier = _store(["p1", "p2"])
        result = await store.remove("p1")
        assert result.value == ["p2"]
        assert await _stored(backend) == ["p2"]
        notifier.success.assert_called_once_with("Removed from wishlist")

    @pytest.mark.asyncio
    async def test_remove_absent_is_idempotent(self) -> None:
        store, _, _ = _store(["p1"])
        result = await store.remove("ghost")
        assert result.ok
        assert result.value == ["p1"]

    @pytest.mark.asyncio
    async def test_get_all_returns_copy(self) -> None:
        store, _, _ = _store(["p1"])
        snapshot = (await store.get_all()).value
        snapshot.append("intruder")
        assert (await store.get_all()).value == ["p1"]

    @pytest.mark.asyncio
    async def test_mutation_result_is_a_copy(self) -> None:
        store, _, _ = _store()
        result = await store.add("p1")
        result.value.clear()
        assert (await store.get_all()).value == ["p1"]

    @pytest.mark.asyncio
    async def test_write_failure_keeps_memory_and_reports(self) -> None:
        notifier = MagicMock()
        store = WishlistStore(_mock_backend(fail_write=True), notifier=notifier)
        result = await store.add("p1")
        assert not result.ok
        assert isinstance(result.error, StorageError)
        assert result.value == ["p1"]
        notifier.error.assert_called_once_with("Failed to save wishlist")
        notifier.success.assert_not_called()
        assert await store.contains("p1")

    @pytest.mark.asyncio
    async def test_unexpected_write_exception_wrapped(self) -> None:
        backend = _mock_backend()
        backend.write_slot = AsyncMock(side_effect=PermissionError("denied"))
        store = WishlistStore(backend, notifier=MagicMock())
        result = await store.add("p1")
        assert isinstance(result.error, StorageError)
        assert result.error.slot_key == WISHLIST_SLOT_KEY


# ---------------------------------------------------------------------------
# Toggle
# ---------------------------------------------------------------------------


class TestWishlistToggle:
    @pytest.mark.asyncio
    async def test_toggle_adds_when_absent(self) -> None:
        store, _, _ = _store()
        assert (await store.toggle("p1")).value == ["p1"]

    @pytest.mark.asyncio
    async def test_toggle_removes_when_present(self) -> None:
        store, _, _ = _store(["p1", "p2"])
        assert (await store.toggle("p1")).value == ["p2"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("initial", [[], ["p1"], ["p0", "p1", "p2"]])
    async def test_toggle_twice_restores_membership(self, initial: list) -> None:
        store, backend, _ = _store(initial)
        before = set((await store.get_all()).value)
        await store.toggle("p1")
        after = (await store.toggle("p1")).value
        assert set(after) == before
        assert set(await _stored(backend)) == before

    @pytest.mark.asyncio
    async def test_toggle_twice_on_absent_restores_order(self) -> None:
        store, _, _ = _store(["a", "b"])
        await store.toggle("c")
        assert (await store.toggle("c")).value == ["a", "b"]
