"""
Test Configuration
==================

Pytest fixtures for warranty registry tests.
"""

import os
from collections.abc import AsyncGenerator
from typing import Any

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Set test environment
os.environ["ENVIRONMENT"] = "testing"

from services.warranty.registry import Principal, WarrantyRegistry  # noqa: E402
from shared.config import RegistrySettings  # noqa: E402
from shared.ledger import MockFeeLedger  # noqa: E402


MINTER = Principal("ST1TEST")
AUTHORITY = Principal("ST2TEST")
MANUFACTURER = Principal("ST3MANU")
OWNER = Principal("ST4OWNER")
BURN_PRINCIPAL = Principal("SP000000000000000000002Q6VF78")


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for async tests."""
    return "asyncio"


@pytest.fixture
def ledger() -> MockFeeLedger:
    """Fresh mock fee ledger."""
    return MockFeeLedger()


@pytest.fixture
def registry(ledger: MockFeeLedger) -> WarrantyRegistry:
    """Registry with default settings and no authority."""
    return WarrantyRegistry(fee_ledger=ledger, registry_settings=RegistrySettings())


@pytest_asyncio.fixture
async def authorized_registry(registry: WarrantyRegistry) -> WarrantyRegistry:
    """Registry whose authority is AUTHORITY."""
    result = await registry.set_authority(MINTER, AUTHORITY)
    assert result.ok
    return registry


@pytest.fixture
def proof_hash() -> bytes:
    return bytes(32)


@pytest.fixture
def mint_args(proof_hash: bytes) -> dict[str, Any]:
    """Valid mint arguments at height 0."""
    return {
        "serial": "SERIAL123",
        "expiration": 100,
        "manufacturer": MANUFACTURER,
        "product_type": "electronics",
        "owner": OWNER,
        "max_extensions": 5,
        "warranty_value": 1000,
        "grace_period": 30,
        "location": "FactoryA",
        "currency": "STX",
        "proof_hash": proof_hash,
        "now": 0,
    }


@pytest_asyncio.fixture
async def api_client(registry: WarrantyRegistry) -> AsyncGenerator[AsyncClient, None]:
    """Test client for the warranty service, backed by the `registry` fixture."""
    from services.warranty.dependencies import reset_registry, set_registry
    from services.warranty.main import app

    set_registry(registry)
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
    reset_registry()
