"""Concurrent callers observe registry operations in some serial order."""

import asyncio
from typing import Any

import pytest

from services.warranty.registry import ErrorKind, WarrantyRegistry
from shared.config import RegistrySettings
from shared.ledger import LedgerTransfer, MockFeeLedger
from tests.conftest import AUTHORITY, MINTER


class YieldingLedger(MockFeeLedger):
    """Mock ledger that suspends mid-transfer so other tasks can run."""

    async def transfer(self, amount: int, sender: str, recipient: str) -> LedgerTransfer:
        await asyncio.sleep(0)
        return await super().transfer(amount, sender, recipient)


@pytest.fixture
def ledger() -> MockFeeLedger:
    return YieldingLedger()


@pytest.fixture
def registry(ledger: MockFeeLedger) -> WarrantyRegistry:
    return WarrantyRegistry(fee_ledger=ledger, registry_settings=RegistrySettings())


class TestConcurrentMutations:
    @pytest.mark.asyncio
    async def test_same_serial_minted_once(
        self,
        authorized_registry: WarrantyRegistry,
        ledger: MockFeeLedger,
        mint_args: dict[str, Any],
    ) -> None:
        results = await asyncio.gather(
            *(authorized_registry.mint_warranty(MINTER, **mint_args) for _ in range(10))
        )

        winners = [r for r in results if r.ok]
        assert len(winners) == 1
        assert winners[0].value == 0
        assert all(
            r.error.kind == ErrorKind.TOKEN_ALREADY_EXISTS for r in results if not r.ok
        )
        assert await authorized_registry.get_token_count() == 1
        assert len(ledger.transfers) == 1

    @pytest.mark.asyncio
    async def test_ids_never_skip_or_repeat(
        self,
        authorized_registry: WarrantyRegistry,
        mint_args: dict[str, Any],
    ) -> None:
        results = await asyncio.gather(
            *(
                authorized_registry.mint_warranty(MINTER, **{**mint_args, "serial": f"SN-{i}"})
                for i in range(25)
            )
        )

        assert sorted(r.value for r in results) == list(range(25))
        assert await authorized_registry.get_token_count() == 25

    @pytest.mark.asyncio
    async def test_extensions_capped_under_contention(
        self,
        authorized_registry: WarrantyRegistry,
        mint_args: dict[str, Any],
    ) -> None:
        await authorized_registry.mint_warranty(MINTER, **{**mint_args, "max_extensions": 3})

        results = await asyncio.gather(
            *(authorized_registry.extend_warranty(AUTHORITY, 0, 10, now=0) for _ in range(8))
        )

        assert sum(r.ok for r in results) == 3
        token = await authorized_registry.get_token(0)
        assert token.extension_count == 3
        assert token.expiration == 130

    @pytest.mark.asyncio
    async def test_capacity_not_overrun(
        self,
        authorized_registry: WarrantyRegistry,
        mint_args: dict[str, Any],
    ) -> None:
        await authorized_registry.set_max_tokens(AUTHORITY, 5)

        results = await asyncio.gather(
            *(
                authorized_registry.mint_warranty(MINTER, **{**mint_args, "serial": f"SN-{i}"})
                for i in range(12)
            )
        )

        assert sum(r.ok for r in results) == 5
        assert all(
            r.error.kind == ErrorKind.MAX_TOKENS_EXCEEDED for r in results if not r.ok
        )
        assert await authorized_registry.get_token_count() == 5
