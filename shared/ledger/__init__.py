"""
Ledger Module
=============

Abstraction layer for the ledger that settles mint fees.

Supports:
- Mock (development/testing)
- Any settlement backend implementing FeeLedger

Usage:
    from shared.ledger import get_fee_ledger

    ledger = get_fee_ledger()

    transfer = await ledger.transfer(
        amount=500,
        sender="ST1MINTER",
        recipient="ST2AUTHORITY",
    )
"""

from shared.ledger.client import (
    FeeLedger,
    FeeTransferError,
    LedgerTransfer,
    get_fee_ledger,
    reset_fee_ledger,
    set_fee_ledger,
)
from shared.ledger.mock import MockFeeLedger

__all__ = [
    # Client
    "FeeLedger",
    "get_fee_ledger",
    "set_fee_ledger",
    "reset_fee_ledger",
    # Models
    "FeeTransferError",
    "LedgerTransfer",
    # Implementations
    "MockFeeLedger",
]
