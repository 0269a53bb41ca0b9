"""Tests for the in-memory warranty store."""

import pytest
from pydantic import ValidationError

from services.warranty.registry import (
    Currency,
    InMemoryWarrantyStore,
    Principal,
    ProductType,
    RegistryConfig,
    WarrantyRecord,
    WarrantyUpdateLog,
)


def _record(token_id: int = 0, serial: str = "SN-0") -> WarrantyRecord:
    return WarrantyRecord(
        id=token_id,
        serial=serial,
        expiration=100,
        manufacturer=Principal("M"),
        product_type=ProductType.ELECTRONICS,
        owner=Principal("O"),
        timestamp=0,
        minter=Principal("C1"),
        max_extensions=5,
        warranty_value=1000,
        grace_period=30,
        location="FactoryA",
        currency=Currency.STX,
        proof_hash=bytes(32),
    )


@pytest.fixture
def store() -> InMemoryWarrantyStore:
    return InMemoryWarrantyStore()


class TestInMemoryWarrantyStore:
    @pytest.mark.asyncio
    async def test_insert_indexes_serial_and_config(self, store: InMemoryWarrantyStore) -> None:
        await store.insert_record(_record(), RegistryConfig(next_token_id=1))

        assert await store.get_record(0) == _record()
        assert await store.get_id_by_serial("SN-0") == 0
        assert (await store.load_config()).next_token_id == 1

    @pytest.mark.asyncio
    async def test_insert_rejects_reused_serial(self, store: InMemoryWarrantyStore) -> None:
        await store.insert_record(_record(), RegistryConfig(next_token_id=1))

        with pytest.raises(KeyError):
            await store.insert_record(_record(token_id=1), RegistryConfig(next_token_id=2))

        assert await store.get_record(1) is None
        assert (await store.load_config()).next_token_id == 1

    @pytest.mark.asyncio
    async def test_save_requires_existing_record(self, store: InMemoryWarrantyStore) -> None:
        with pytest.raises(KeyError):
            await store.save_record(_record())

    @pytest.mark.asyncio
    async def test_records_are_frozen(self, store: InMemoryWarrantyStore) -> None:
        await store.insert_record(_record(), RegistryConfig(next_token_id=1))
        record = await store.get_record(0)

        with pytest.raises(ValidationError):
            record.owner = Principal("X")  # type: ignore[misc]

        assert (await store.get_record(0)).owner == "O"

    @pytest.mark.asyncio
    async def test_apply_update_writes_record_and_log(self, store: InMemoryWarrantyStore) -> None:
        await store.insert_record(_record(), RegistryConfig(next_token_id=1))
        amended = _record().model_copy(update={"expiration": 200, "timestamp": 5})
        log = WarrantyUpdateLog(
            update_expiration=200,
            update_product_type=ProductType.ELECTRONICS,
            update_timestamp=5,
            updater=Principal("C1"),
        )

        await store.apply_update(amended, log)

        assert (await store.get_record(0)).expiration == 200
        assert await store.get_update_log(0) == log

    @pytest.mark.asyncio
    async def test_apply_update_requires_existing_record(
        self, store: InMemoryWarrantyStore
    ) -> None:
        log = WarrantyUpdateLog(
            update_expiration=200,
            update_product_type=ProductType.ELECTRONICS,
            update_timestamp=5,
            updater=Principal("C1"),
        )

        with pytest.raises(KeyError):
            await store.apply_update(_record(), log)

        assert await store.get_update_log(0) is None
