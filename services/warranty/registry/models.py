"""
Warranty registry domain models.

Records, update logs and the registry configuration are frozen values.
Every mutation builds a new value with ``model_copy(update=...)`` and the
registry writes it only after all guards have passed.
"""

from __future__ import annotations

from enum import Enum
from typing import NewType

from pydantic import BaseModel, ConfigDict, Field

# Opaque caller / owner / manufacturer identity. Compared, never parsed.
Principal = NewType("Principal", str)

MAX_SERIAL_LENGTH = 50
MAX_LOCATION_LENGTH = 100
MAX_EXTENSIONS_LIMIT = 10
MAX_GRACE_PERIOD = 90
PROOF_HASH_LENGTH = 32


class ProductType(str, Enum):
    """Product categories a warranty may cover."""

    ELECTRONICS = "electronics"
    APPLIANCES = "appliances"
    VEHICLES = "vehicles"


class Currency(str, Enum):
    """Currencies a warranty value may be denominated in."""

    STX = "STX"
    USD = "USD"
    BTC = "BTC"


class CoverageStatus(str, Enum):
    """Coverage state derived from a record and the current time."""

    ACTIVE = "active"
    IN_GRACE = "in_grace"
    EXPIRED = "expired"


class RegistryConfig(BaseModel):
    """Registry-wide counters and governance settings."""

    model_config = ConfigDict(frozen=True)

    next_token_id: int = Field(default=0, ge=0)
    max_tokens: int = Field(default=100_000, gt=0)
    mint_fee: int = Field(default=500, ge=0)
    authority: Principal | None = None


class WarrantyRecord(BaseModel):
    """One product's warranty."""

    model_config = ConfigDict(frozen=True)

    id: int
    serial: str
    expiration: int
    manufacturer: Principal
    product_type: ProductType
    owner: Principal
    timestamp: int
    minter: Principal
    status: bool = True
    extension_count: int = 0
    max_extensions: int
    warranty_value: int
    grace_period: int
    location: str
    currency: Currency
    proof_hash: bytes

    def coverage_status(self, now: int) -> CoverageStatus:
        """Derive coverage at `now`; grace is measured in expiration's unit."""
        if now < self.expiration:
            return CoverageStatus.ACTIVE
        if now < self.expiration + self.grace_period:
            return CoverageStatus.IN_GRACE
        return CoverageStatus.EXPIRED


class WarrantyUpdateLog(BaseModel):
    """The most recent amendment made to a record by its minter."""

    model_config = ConfigDict(frozen=True)

    update_expiration: int
    update_product_type: ProductType
    update_timestamp: int
    updater: Principal
