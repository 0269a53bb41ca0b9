"""
Mock Fee Ledger
===============

In-memory mock ledger for development and testing.

Version: 0.1.0
"""

import hashlib
import uuid
from typing import Any

from shared.ledger.client import FeeLedger, FeeTransferError, LedgerTransfer
from shared.logging import get_logger

logger = get_logger(__name__)


class MockFeeLedger(FeeLedger):
    """
    In-memory mock fee ledger.

    Every transfer is recorded in order and assigned a fresh block. Tests
    can make the next transfer fail to exercise rollback paths.

    Data is stored in memory and lost on restart.
    """

    def __init__(self) -> None:
        """Initialize mock ledger with in-memory storage."""
        self._block_number = 1000
        self._transfers: list[LedgerTransfer] = []
        self._pending_failures: list[str] = []

        logger.debug("mock_ledger_initialized")

    @property
    def transfers(self) -> list[LedgerTransfer]:
        """Settled transfers, oldest first."""
        return list(self._transfers)

    async def health_check(self) -> dict[str, Any]:
        """Check mock ledger health."""
        return {
            "status": "healthy",
            "mode": "mock",
            "block_number": self._block_number,
            "transfers": len(self._transfers),
        }

    def _generate_tx_hash(self) -> str:
        """Generate a mock transaction hash."""
        return "0x" + hashlib.sha256(uuid.uuid4().bytes).hexdigest()

    def _next_block(self) -> int:
        """Get next block number."""
        self._block_number += 1
        return self._block_number

    async def transfer(
        self,
        amount: int,
        sender: str,
        recipient: str,
    ) -> LedgerTransfer:
        """Record a transfer, or fail if a failure was queued."""
        if self._pending_failures:
            reason = self._pending_failures.pop(0)
            logger.debug(
                "mock_transfer_failed",
                amount=amount,
                sender=sender,
                recipient=recipient,
                reason=reason,
            )
            raise FeeTransferError(reason, amount, sender, recipient)

        if amount < 0:
            raise FeeTransferError("Negative transfer amount", amount, sender, recipient)

        transfer = LedgerTransfer(
            amount=amount,
            sender=sender,
            recipient=recipient,
            tx_hash=self._generate_tx_hash(),
            block_number=self._next_block(),
        )
        self._transfers.append(transfer)

        logger.debug(
            "mock_transfer_recorded",
            amount=amount,
            sender=sender,
            recipient=recipient,
            tx_hash=transfer.tx_hash,
        )

        return transfer

    # =========================================================================
    # Test Utilities
    # =========================================================================

    def fail_next_transfer(self, reason: str = "Insufficient balance") -> None:
        """Make the next transfer raise FeeTransferError."""
        self._pending_failures.append(reason)

    def clear_all(self) -> None:
        """Clear all mock data (for testing)."""
        self._transfers.clear()
        self._pending_failures.clear()
        self._block_number = 1000
        logger.debug("mock_ledger_cleared")

    def get_stats(self) -> dict[str, int]:
        """Get storage statistics."""
        return {
            "transfers": len(self._transfers),
            "total_amount": sum(t.amount for t in self._transfers),
            "block_number": self._block_number,
        }
