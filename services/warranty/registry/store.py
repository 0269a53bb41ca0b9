"""
Storage port for the warranty registry.

The registry serializes every read-validate-write sequence itself, so a
store only has to make each individual call atomic.
"""

from __future__ import annotations

from typing import Protocol

from services.warranty.registry.models import RegistryConfig, WarrantyRecord, WarrantyUpdateLog


class WarrantyStore(Protocol):
    """Protocol for warranty record persistence."""

    async def load_config(self) -> RegistryConfig:
        """Load the registry configuration."""
        ...

    async def save_config(self, config: RegistryConfig) -> None:
        """Replace the registry configuration."""
        ...

    async def get_record(self, token_id: int) -> WarrantyRecord | None:
        """Get a record by id."""
        ...

    async def save_record(self, record: WarrantyRecord) -> None:
        """Replace an existing record."""
        ...

    async def insert_record(self, record: WarrantyRecord, config: RegistryConfig) -> None:
        """Write a new record, its serial index entry and the new config together."""
        ...

    async def get_id_by_serial(self, serial: str) -> int | None:
        """Look up a record id through the serial index."""
        ...

    async def apply_update(self, record: WarrantyRecord, log: WarrantyUpdateLog) -> None:
        """Replace an existing record and overwrite its amendment slot together."""
        ...

    async def get_update_log(self, token_id: int) -> WarrantyUpdateLog | None:
        """Get the latest amendment of a record."""
        ...


class InMemoryWarrantyStore:
    """Dict-backed store for development and testing."""

    def __init__(self, config: RegistryConfig | None = None) -> None:
        self._config = config or RegistryConfig()
        self._records: dict[int, WarrantyRecord] = {}
        self._update_logs: dict[int, WarrantyUpdateLog] = {}
        self._ids_by_serial: dict[str, int] = {}

    async def load_config(self) -> RegistryConfig:
        return self._config

    async def save_config(self, config: RegistryConfig) -> None:
        self._config = config

    async def get_record(self, token_id: int) -> WarrantyRecord | None:
        return self._records.get(token_id)

    async def save_record(self, record: WarrantyRecord) -> None:
        if record.id not in self._records:
            raise KeyError(f"Record {record.id} does not exist")
        self._records[record.id] = record

    async def insert_record(self, record: WarrantyRecord, config: RegistryConfig) -> None:
        if record.id in self._records or record.serial in self._ids_by_serial:
            raise KeyError(f"Record {record.id} ({record.serial}) already exists")
        self._records[record.id] = record
        self._ids_by_serial[record.serial] = record.id
        self._config = config

    async def get_id_by_serial(self, serial: str) -> int | None:
        return self._ids_by_serial.get(serial)

    async def apply_update(self, record: WarrantyRecord, log: WarrantyUpdateLog) -> None:
        if record.id not in self._records:
            raise KeyError(f"Record {record.id} does not exist")
        self._records[record.id] = record
        self._update_logs[record.id] = log

    async def get_update_log(self, token_id: int) -> WarrantyUpdateLog | None:
        return self._update_logs.get(token_id)
