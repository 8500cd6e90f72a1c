"""File slot backend: one UTF-8 JSON file per slot in a directory.

Writes go to a temporary file in the same directory and are moved into
place with ``os.replace``, so a reader never sees a half-written slot.
Blocking file I/O runs in a worker thread.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import quote

from quickcart.errors import StorageError

logger = logging.getLogger(__name__)

_SUFFIX = ".json"


class FileSlotBackend:
    """Durable ``SlotBackend`` storing each slot as ``<dir>/<quoted key>.json``."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, key: str) -> Path:
        """Filesystem path of a slot. Keys are percent-quoted into file names."""
        if not key:
            raise ValueError("slot key must be non-empty")
        return self._directory / (quote(key, safe="") + _SUFFIX)

    async def read_slot(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read, key)

    async def write_slot(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write, key, value)

    async def delete_slot(self, key: str) -> None:
        await asyncio.to_thread(self._delete, key)

    # -- blocking helpers -----------------------------------------------------

    def _read(self, key: str) -> str | None:
        path = self.path_for(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Failed to read {path}: {exc}", slot_key=key) from exc

    def _write(self, key: str, value: str) -> None:
        path = self.path_for(key)
        tmp_name: str | None = None
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._directory, prefix=".tmp-", suffix=_SUFFIX,
            )
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise StorageError(f"Failed to write {path}: {exc}", slot_key=key) from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.warning("Could not remove temporary slot file %s", tmp_name)

    def _delete(self, key: str) -> None:
        path = self.path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f"Failed to delete {path}: {exc}", slot_key=key) from exc
