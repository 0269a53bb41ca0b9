"""
Warranty NFT Registry Service.

Issues non-fungible warranty records for physical products and enforces
who may mint, transfer, extend and amend them.

Key Features:
- Sequential token ids and globally unique serials
- Permanent, set-once registry authority
- Mint fees settled through a pluggable fee ledger
- Bounded, authority-granted coverage extensions
"""

from services.warranty.registry import (
    ErrorKind,
    Result,
    WarrantyRecord,
    WarrantyRegistry,
)

__all__ = [
    "ErrorKind",
    "Result",
    "WarrantyRecord",
    "WarrantyRegistry",
]
