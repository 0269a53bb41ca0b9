"""
Fee Ledger Interface
====================

Abstract base class and models for the ledger that settles mint fees.

The registry only ever asks the ledger for one thing: move an amount from
one principal to another. Settlement mechanics live behind this interface.

Version: 0.1.0
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field

from shared.logging import get_logger

logger = get_logger(__name__)


class FeeTransferError(Exception):
    """The ledger refused or failed to settle a transfer."""

    def __init__(self, message: str, amount: int, sender: str, recipient: str) -> None:
        super().__init__(message)
        self.amount = amount
        self.sender = sender
        self.recipient = recipient


class LedgerTransfer(BaseModel):
    """A settled fee transfer."""

    amount: int = Field(..., ge=0, description="Units moved")
    sender: str = Field(..., description="Principal debited")
    recipient: str = Field(..., description="Principal credited")
    tx_hash: str | None = Field(default=None, description="Ledger transaction hash")
    block_number: int | None = Field(default=None, description="Block number")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))


class FeeLedger(ABC):
    """
    Abstract base class for fee ledgers.

    Implementations must either settle the transfer completely and return
    it, or raise FeeTransferError without settling anything.
    """

    @abstractmethod
    async def transfer(
        self,
        amount: int,
        sender: str,
        recipient: str,
    ) -> LedgerTransfer:
        """
        Move `amount` units from `sender` to `recipient`.

        Args:
            amount: Non-negative number of units
            sender: Principal paying the fee
            recipient: Principal receiving the fee

        Returns:
            The settled LedgerTransfer

        Raises:
            FeeTransferError: If the transfer could not be settled
        """
        ...

    @abstractmethod
    async def health_check(self) -> dict[str, Any]:
        """Check ledger health."""
        ...


# Global ledger instance
_ledger: FeeLedger | None = None


def get_fee_ledger() -> FeeLedger:
    """
    Get the process-wide fee ledger.

    Returns:
        The ledger installed with set_fee_ledger, or an in-memory mock
    """
    global _ledger

    if _ledger is None:
        from shared.ledger.mock import MockFeeLedger

        _ledger = MockFeeLedger()
        logger.info("fee_ledger_initialized", ledger=type(_ledger).__name__)

    return _ledger


def set_fee_ledger(ledger: FeeLedger) -> None:
    """
    Set a custom fee ledger.

    Args:
        ledger: FeeLedger instance
    """
    global _ledger
    _ledger = ledger
    logger.info("fee_ledger_set", ledger=type(ledger).__name__)


def reset_fee_ledger() -> None:
    """Reset the ledger to be re-initialized."""
    global _ledger
    _ledger = None
