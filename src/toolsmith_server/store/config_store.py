"""Durable storage for the configuration record.

The discovery snapshot, its TTL, per-category enable flags, the blacklist and
the workflow pattern log all live in one named configuration record. The
store is the only component that touches the file; everything else reads and
writes through ``load`` and ``update``.
"""

import asyncio
import json
import logging
from dataclasses import asdict, fields
from pathlib import Path
from typing import Any, Callable, Protocol

from toolsmith_server.errors import CacheWriteError
from toolsmith_server.store.types import ConfigRecord, default_categories

logger = logging.getLogger(__name__)

_RECORD_FIELDS = {f.name for f in fields(ConfigRecord)}


class ConfigStore(Protocol):
    """Durable collaborator holding the configuration record."""

    async def load(self) -> ConfigRecord: ...

    async def update(self, **changes: Any) -> ConfigRecord: ...

    async def modify(self, mutate: Callable[[ConfigRecord], None]) -> ConfigRecord: ...


class JsonConfigStore:
    """Configuration record persisted as a JSON file.

    A missing file reads as a fresh record with defaults. Writes are
    read-modify-write under a lock so that snapshot and pattern updates from
    the same process do not overwrite each other.
    """

    def __init__(
        self,
        path: Path,
        record_name: str = "toolsmith",
        default_ttl_seconds: int | None = None,
    ) -> None:
        """Initialize the store.

        Args:
            path: Location of the JSON file
            record_name: Name of the configuration record
            default_ttl_seconds: TTL used when the record does not define one
        """
        self.path = path
        self.record_name = record_name
        self.default_ttl_seconds = default_ttl_seconds
        self._lock = asyncio.Lock()

    def _default_record(self) -> ConfigRecord:
        record = ConfigRecord(name=self.record_name)
        if self.default_ttl_seconds is not None:
            record.ttl_seconds = self.default_ttl_seconds
        return record

    def _read(self) -> ConfigRecord:
        if not self.path.exists():
            return self._default_record()

        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)

        record = self._default_record()
        for key, value in data.items():
            if key in _RECORD_FIELDS:
                setattr(record, key, value)

        # Categories missing from an older file default to enabled
        categories = default_categories()
        categories.update(record.categories or {})
        record.categories = categories
        return record

    def _write(self, record: ConfigRecord) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(asdict(record), f, indent=2, ensure_ascii=False)
        tmp_path.replace(self.path)
        logger.debug(f"Saved configuration record '{record.name}' to {self.path}")

    async def load(self) -> ConfigRecord:
        """Load the configuration record.

        Returns:
            ConfigRecord: The stored record, or defaults if none exists

        Raises:
            ValueError: If the file exists but is not valid JSON
        """
        try:
            return self._read()
        except json.JSONDecodeError as e:
            raise ValueError(f"Configuration record at {self.path} is corrupt: {e}") from e

    async def modify(self, mutate: Callable[[ConfigRecord], None]) -> ConfigRecord:
        """Read the current record, let ``mutate`` change it, and persist it.

        Args:
            mutate: Callback that edits the record in place

        Returns:
            ConfigRecord: The record as written

        Raises:
            CacheWriteError: If the record cannot be read back or written
        """
        async with self._lock:
            try:
                record = self._read()
                mutate(record)
                self._write(record)
            except (OSError, ValueError, TypeError) as e:
                raise CacheWriteError(
                    f"Failed to persist configuration record: {e}",
                    details={"path": str(self.path)},
                ) from e
        return record

    async def update(self, **changes: Any) -> ConfigRecord:
        """Apply field changes to the stored record and persist it.

        Args:
            **changes: ConfigRecord field names and their new values

        Returns:
            ConfigRecord: The record as written

        Raises:
            ValueError: If a field name is not part of the record
            CacheWriteError: If the record cannot be read back or written
        """
        unknown = set(changes) - _RECORD_FIELDS
        if unknown:
            raise ValueError(f"Unknown configuration fields: {sorted(unknown)}")

        def apply(record: ConfigRecord) -> None:
            for key, value in changes.items():
                setattr(record, key, value)

        return await self.modify(apply)
