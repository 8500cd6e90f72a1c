"""Durable cart and wishlist slots kept as rows of a remote record table.

Every slot maps to one record holding the slot key in ``key_c`` and the
serialized cart or wishlist in ``value_c``. Calls go through the record
API's JSON envelopes:

- Query: POST /tables/{table}/records/query -> ``{"success", "message", "data": [...]}``
- Create: POST /tables/{table}/records with ``{"records": [...]}``
- Update: PATCH /tables/{table}/records with ``{"records": [{"Id": ..., ...}]}``
- Delete: DELETE /tables/{table}/records with ``{"RecordIds": [...]}``

Create/update/delete responses carry a per-record ``results`` list; any
entry with ``success: false`` fails the whole call.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from quickcart.constants import DEFAULT_RECORD_TABLE, DEFAULT_RECORD_TIMEOUT_SECS
from quickcart.errors import StorageError

logger = logging.getLogger(__name__)

_KEY_FIELD = "key_c"
_VALUE_FIELD = "value_c"


class RecordStoreSlotBackend:
    """Slot persistence via a remote record-store API.

    Implements the quickcart ``SlotBackend`` protocol:

    - ``read_slot(key) -> str | None``
    - ``write_slot(key, value) -> None``
    - ``delete_slot(key) -> None``

    Caching strategy: ``_record_ids`` maps slot key to record id. On a
    cache hit, ``write_slot`` and ``delete_slot`` are a single call. If
    that call fails (the record was deleted elsewhere), the id is evicted
    and the slot is looked up again.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        table: str = DEFAULT_RECORD_TABLE,
        timeout: float = DEFAULT_RECORD_TIMEOUT_SECS,
    ) -> None:
        self._table = table
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {api_key}"},
            timeout=timeout,
        )
        self._record_ids: dict[str, Any] = {}

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> RecordStoreSlotBackend:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()

    # -- record API helpers --------------------------------------------------

    @property
    def _records_path(self) -> str:
        return f"/tables/{self._table}/records"

    async def _request(
        self, method: str, endpoint: str, payload: dict[str, Any],
    ) -> dict[str, Any]:
        """Send a request and map every failure mode to StorageError."""
        try:
            resp = await self._client.request(method, endpoint, json=payload)
        except httpx.HTTPError as exc:
            raise StorageError(f"Record store request failed: {exc}") from exc

        if resp.status_code >= 400:
            raise StorageError(
                f"Record store returned HTTP {resp.status_code}: {resp.text}"
            )
        try:
            data = resp.json()
        except ValueError as exc:
            raise StorageError("Record store returned a non-JSON body") from exc

        if not isinstance(data, dict):
            raise StorageError("Record store returned an unexpected body")
        if not data.get("success", False):
            raise StorageError(data.get("message") or "Record store request failed")
        return data

    @staticmethod
    def _check_results(data: dict[str, Any], action: str) -> list[dict[str, Any]]:
        """Raise if any per-record result failed; return the successful ones."""
        results = data.get("results") or []
        failed = [r for r in results if not r.get("success")]
        if failed:
            messages = "; ".join(str(r.get("message") or "unknown error") for r in failed)
            raise StorageError(f"Failed to {action} slot record: {messages}")
        return results

    async def _find_record(self, key: str) -> dict[str, Any] | None:
        """Look up the record for a slot and refresh the id cache."""
        payload = {
            "fields": [
                {"field": {"Name": _KEY_FIELD}},
                {"field": {"Name": _VALUE_FIELD}},
            ],
            "where": [
                {"FieldName": _KEY_FIELD, "Operator": "EqualTo", "Values": [key]},
            ],
        }
        data = await self._request("POST", f"{self._records_path}/query", payload)
        records = data.get("data") or []
        if not records:
            self._record_ids.pop(key, None)
            return None

        record = records[0]
        if not isinstance(record, dict) or record.get("Id") is None:
            raise StorageError(f"Record for slot {key} has no Id", slot_key=key)
        self._record_ids[key] = record["Id"]
        return record

    async def _create(self, key: str, value: str) -> None:
        data = await self._request("POST", self._records_path, {
            "records": [{"Name": key, _KEY_FIELD: key, _VALUE_FIELD: value}],
        })
        results = self._check_results(data, "create")
        if results:
            created = results[0].get("data") or {}
            if created.get("Id") is not None:
                self._record_ids[key] = created["Id"]

    async def _update(self, record_id: Any, value: str) -> None:
        data = await self._request("PATCH", self._records_path, {
            "records": [{"Id": record_id, _VALUE_FIELD: value}],
        })
        self._check_results(data, "update")

    async def _delete(self, record_id: Any) -> None:
        data = await self._request("DELETE", self._records_path, {"RecordIds": [record_id]})
        self._check_results(data, "delete")

    # -- SlotBackend protocol ------------------------------------------------

    async def read_slot(self, key: str) -> str | None:
        record = await self._find_record(key)
        if record is None:
            return None
        value = record.get(_VALUE_FIELD)
        if value is None:
            return None
        if not isinstance(value, str):
            raise StorageError(f"Record for slot {key} holds a non-text value", slot_key=key)
        return value

    async def write_slot(self, key: str, value: str) -> None:
        """Update the slot's record, creating it on first write."""
        # Fast path: cached record id -> single update call
        cached_id = self._record_ids.get(key)
        if cached_id is not None:
            try:
                await self._update(cached_id, value)
                return
            except StorageError:
                logger.warning(
                    "Stale record id for slot %s, falling through to full lookup.", key,
                )
                del self._record_ids[key]

        record = await self._find_record(key)
        if record is not None:
            await self._update(record["Id"], value)
        else:
            await self._create(key, value)

    async def delete_slot(self, key: str) -> None:
        """Delete the slot's record. A slot with no record is a no-op."""
        cached_id = self._record_ids.get(key)
        if cached_id is not None:
            try:
                await self._delete(cached_id)
                self._record_ids.pop(key, None)
                return
            except StorageError:
                logger.warning(
                    "Stale record id for slot %s, falling through to full lookup.", key,
                )
                del self._record_ids[key]

        record = await self._find_record(key)
        if record is None:
            return
        await self._delete(record["Id"])
        self._record_ids.pop(key, None)
