"""
Warranty NFT Registry.

Issues non-fungible warranty records, tracks their ownership and lets the
registry authority extend coverage. Every mutating operation runs under a
single lock: it reads state, runs its guards, settles at most one fee and
then writes. A failed guard or fee transfer writes nothing.
"""

from __future__ import annotations

import asyncio

from shared.config import ConfigGuard, RegistrySettings, get_settings
from shared.ledger import FeeLedger, FeeTransferError, get_fee_ledger
from shared.logging import get_logger
from services.warranty.registry.errors import ErrorKind, RegistryError, Result
from services.warranty.registry.models import (
    CoverageStatus,
    Currency,
    Principal,
    ProductType,
    RegistryConfig,
    WarrantyRecord,
    WarrantyUpdateLog,
)
from services.warranty.registry.store import InMemoryWarrantyStore, WarrantyStore
from services.warranty.registry.validation import (
    MintContext,
    MintRequest,
    first_mint_violation,
    parse_currency,
    parse_product_type,
)


logger = get_logger(__name__)


class WarrantyRegistry:
    """
    Warranty record state machine.

    Roles:
    - Authority: set once, receives mint fees, extends coverage and
      (under the strict config guard) changes fee and capacity
    - Minter: whoever minted a record; the only one allowed to amend it
    - Owner: current holder; the only one allowed to transfer it

    All times are logical (block heights) supplied by the caller as `now`.
    """

    def __init__(
        self,
        fee_ledger: FeeLedger | None = None,
        store: WarrantyStore | None = None,
        registry_settings: RegistrySettings | None = None,
    ) -> None:
        self.settings = registry_settings or get_settings().registry
        self.ledger = fee_ledger or get_fee_ledger()
        self.store: WarrantyStore = store or InMemoryWarrantyStore(
            RegistryConfig(
                max_tokens=self.settings.max_tokens,
                mint_fee=self.settings.mint_fee,
            )
        )
        self._lock = asyncio.Lock()

    # =========================================================================
    # Governance
    # =========================================================================

    async def set_authority(
        self, caller: Principal, candidate: Principal | None
    ) -> Result[Principal]:
        """
        Set the permanent registry authority.

        The first valid call wins; the caller's role is not checked.
        """
        async with self._lock:
            if not candidate:
                return self._reject(
                    "set_authority",
                    caller,
                    ErrorKind.NOT_AUTHORIZED,
                    "Authority must be a non-empty principal",
                )
            if candidate == self.settings.burn_principal:
                return self._reject(
                    "set_authority",
                    caller,
                    ErrorKind.NOT_AUTHORIZED,
                    "Authority cannot be the burn principal",
                )

            config = await self.store.load_config()
            if config.authority is not None:
                return self._reject(
                    "set_authority",
                    caller,
                    ErrorKind.AUTHORITY_ALREADY_SET,
                    "Authority has already been set",
                )

            await self.store.save_config(config.model_copy(update={"authority": candidate}))

        logger.info("authority_set", caller=caller, authority=candidate)
        return Result.success(candidate)

    async def set_mint_fee(self, caller: Principal, fee: int) -> Result[int]:
        """Replace the fee charged on every mint."""
        return await self._set_config_value(caller, "mint_fee", fee, minimum=0)

    async def set_max_tokens(self, caller: Principal, max_tokens: int) -> Result[int]:
        """Replace the registry's token capacity."""
        return await self._set_config_value(caller, "max_tokens", max_tokens, minimum=1)

    async def _set_config_value(
        self,
        caller: Principal,
        field: str,
        value: int,
        minimum: int,
    ) -> Result[int]:
        operation = f"set_{field}"
        async with self._lock:
            config = await self.store.load_config()

            if not self._may_configure(caller, config):
                return self._reject(
                    operation,
                    caller,
                    ErrorKind.NOT_AUTHORIZED,
                    "Caller may not change registry configuration",
                )
            if value < minimum:
                return self._reject(
                    operation,
                    caller,
                    ErrorKind.INVALID_CONFIG_VALUE,
                    f"{field} must be at least {minimum}",
                )

            await self.store.save_config(config.model_copy(update={field: value}))

        logger.info("registry_config_changed", caller=caller, field=field, value=value)
        return Result.success(value)

    def _may_configure(self, caller: Principal, config: RegistryConfig) -> bool:
        if config.authority is None:
            return False
        if self.settings.config_guard == ConfigGuard.REFERENCE:
            return True
        return caller == config.authority

    # =========================================================================
    # Record Lifecycle
    # =========================================================================

    async def mint_warranty(
        self,
        caller: Principal,
        *,
        serial: str,
        expiration: int,
        manufacturer: Principal,
        product_type: ProductType | str,
        owner: Principal,
        max_extensions: int,
        warranty_value: int,
        grace_period: int,
        location: str,
        currency: Currency | str,
        proof_hash: bytes,
        now: int,
    ) -> Result[int]:
        """
        Mint a new warranty record.

        Args:
            caller: Principal minting the record; becomes its minter and
                pays the mint fee.
            serial: Product serial, unique for the lifetime of the registry.
            expiration: Logical time at which coverage ends.
            manufacturer: Product manufacturer, must differ from the caller.
            product_type: One of ProductType.
            owner: Initial holder of the record.
            max_extensions: Number of extensions the authority may grant.
            warranty_value: Coverage value, positive.
            grace_period: Claim window after expiration.
            location: Where the product was made or sold.
            currency: Denomination of `warranty_value`.
            proof_hash: 32-byte digest of supporting documents.
            now: Current logical time.

        Returns:
            Result holding the new token id.
        """
        request = MintRequest(
            serial=serial,
            expiration=expiration,
            manufacturer=manufacturer,
            product_type=product_type,
            owner=owner,
            max_extensions=max_extensions,
            warranty_value=warranty_value,
            grace_period=grace_period,
            location=location,
            currency=currency,
            proof_hash=proof_hash,
        )

        async with self._lock:
            config = await self.store.load_config()
            context = MintContext(
                caller=caller,
                now=now,
                config=config,
                serial_taken=await self.store.get_id_by_serial(serial) is not None,
            )

            violation = first_mint_violation(request, context)
            if violation is not None:
                return self._reject_error("mint_warranty", caller, violation, serial=serial)

            try:
                transfer = await self.ledger.transfer(config.mint_fee, caller, config.authority)
            except FeeTransferError as e:
                logger.warning(
                    "fee_transfer_failed",
                    caller=caller,
                    serial=serial,
                    amount=config.mint_fee,
                    reason=str(e),
                )
                return Result.failure(
                    ErrorKind.FEE_TRANSFER_FAILED,
                    f"Mint fee transfer failed: {e}",
                )

            token_id = config.next_token_id
            record = WarrantyRecord(
                id=token_id,
                serial=serial,
                expiration=expiration,
                manufacturer=manufacturer,
                product_type=parse_product_type(product_type),
                owner=owner,
                timestamp=now,
                minter=caller,
                status=True,
                extension_count=0,
                max_extensions=max_extensions,
                warranty_value=warranty_value,
                grace_period=grace_period,
                location=location,
                currency=parse_currency(currency),
                proof_hash=bytes(proof_hash),
            )
            await self.store.insert_record(
                record,
                config.model_copy(update={"next_token_id": token_id + 1}),
            )

        logger.info(
            "warranty_minted",
            token_id=token_id,
            serial=serial,
            minter=caller,
            owner=owner,
            fee=transfer.amount,
            tx_hash=transfer.tx_hash,
        )
        return Result.success(token_id)

    async def transfer_warranty(
        self,
        caller: Principal,
        token_id: int,
        new_owner: Principal,
        now: int,
    ) -> Result[WarrantyRecord]:
        """Hand a record to a new owner. Only the current owner may do this."""
        async with self._lock:
            record = await self.store.get_record(token_id)
            if record is None:
                return self._not_found("transfer_warranty", caller, token_id)
            if record.owner != caller:
                return self._reject(
                    "transfer_warranty",
                    caller,
                    ErrorKind.NOT_AUTHORIZED,
                    "Only the current owner may transfer a warranty",
                    token_id=token_id,
                )

            updated = record.model_copy(update={"owner": new_owner, "timestamp": now})
            await self.store.save_record(updated)

        logger.info(
            "warranty_transferred",
            token_id=token_id,
            from_owner=caller,
            to_owner=new_owner,
        )
        return Result.success(updated)

    async def extend_warranty(
        self,
        caller: Principal,
        token_id: int,
        extension_duration: int,
        now: int,
    ) -> Result[WarrantyRecord]:
        """Push a record's expiration forward. Only the authority may do this."""
        async with self._lock:
            record = await self.store.get_record(token_id)
            if record is None:
                return self._not_found("extend_warranty", caller, token_id)

            config = await self.store.load_config()
            if config.authority is None or caller != config.authority:
                return self._reject(
                    "extend_warranty",
                    caller,
                    ErrorKind.NOT_AUTHORIZED,
                    "Only the registry authority may extend a warranty",
                    token_id=token_id,
                )
            if extension_duration <= 0:
                return self._reject(
                    "extend_warranty",
                    caller,
                    ErrorKind.INVALID_EXTENSION_DURATION,
                    "Extension duration must be positive",
                    token_id=token_id,
                )
            if record.extension_count >= record.max_extensions:
                return self._reject(
                    "extend_warranty",
                    caller,
                    ErrorKind.EXTENSION_LIMIT_REACHED,
                    f"Warranty already extended {record.extension_count} of "
                    f"{record.max_extensions} times",
                    token_id=token_id,
                )

            new_expiration = record.expiration + extension_duration
            if new_expiration <= now:
                return self._reject(
                    "extend_warranty",
                    caller,
                    ErrorKind.INVALID_EXPIRATION,
                    "Extended expiration would still be in the past",
                    token_id=token_id,
                )

            updated = record.model_copy(
                update={
                    "expiration": new_expiration,
                    "extension_count": record.extension_count + 1,
                    "timestamp": now,
                }
            )
            await self.store.save_record(updated)

        logger.info(
            "warranty_extended",
            token_id=token_id,
            expiration=new_expiration,
            extension_count=updated.extension_count,
        )
        return Result.success(updated)

    async def update_warranty(
        self,
        caller: Principal,
        token_id: int,
        update_expiration: int,
        update_product_type: ProductType | str,
        now: int,
    ) -> Result[WarrantyRecord]:
        """
        Amend a record's expiration and product type.

        Only the record's minter may amend it. The record's single update-log
        slot is overwritten with the amendment.
        """
        async with self._lock:
            record = await self.store.get_record(token_id)
            if record is None:
                return self._not_found("update_warranty", caller, token_id)
            if record.minter != caller:
                return self._reject(
                    "update_warranty",
                    caller,
                    ErrorKind.NOT_AUTHORIZED,
                    "Only the minter may update a warranty",
                    token_id=token_id,
                )
            if update_expiration <= now:
                return self._reject(
                    "update_warranty",
                    caller,
                    ErrorKind.INVALID_EXPIRATION,
                    "Expiration must be in the future",
                    token_id=token_id,
                )
            product_type = parse_product_type(update_product_type)
            if product_type is None:
                return self._reject(
                    "update_warranty",
                    caller,
                    ErrorKind.INVALID_PRODUCT_TYPE,
                    "Product type must be one of: electronics, appliances, vehicles",
                    token_id=token_id,
                )

            updated = record.model_copy(
                update={
                    "expiration": update_expiration,
                    "product_type": product_type,
                    "timestamp": now,
                }
            )
            await self.store.apply_update(
                updated,
                WarrantyUpdateLog(
                    update_expiration=update_expiration,
                    update_product_type=product_type,
                    update_timestamp=now,
                    updater=caller,
                ),
            )

        logger.info(
            "warranty_updated",
            token_id=token_id,
            expiration=update_expiration,
            product_type=product_type.value,
            updater=caller,
        )
        return Result.success(updated)

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_token(self, token_id: int) -> WarrantyRecord | None:
        """Get a record by id."""
        return await self.store.get_record(token_id)

    async def get_token_by_serial(self, serial: str) -> WarrantyRecord | None:
        """Get a record through the serial index."""
        token_id = await self.store.get_id_by_serial(serial)
        if token_id is None:
            return None
        return await self.store.get_record(token_id)

    async def get_token_count(self) -> int:
        """Number of records ever minted."""
        config = await self.store.load_config()
        return config.next_token_id

    async def check_token_existence(self, serial: str) -> bool:
        """Whether a record with this serial has been minted."""
        return await self.store.get_id_by_serial(serial) is not None

    async def get_update_log(self, token_id: int) -> WarrantyUpdateLog | None:
        """Latest amendment of a record, if it was ever updated."""
        return await self.store.get_update_log(token_id)

    async def get_config(self) -> RegistryConfig:
        """Current registry configuration."""
        return await self.store.load_config()

    async def coverage_status(self, token_id: int, now: int) -> CoverageStatus | None:
        """Coverage of a record at `now`, or None if it does not exist."""
        record = await self.store.get_record(token_id)
        if record is None:
            return None
        return record.coverage_status(now)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _not_found(self, operation: str, caller: Principal, token_id: int) -> Result:
        return self._reject(
            operation,
            caller,
            ErrorKind.TOKEN_NOT_FOUND,
            f"Warranty {token_id} not found",
            token_id=token_id,
        )

    def _reject(
        self,
        operation: str,
        caller: Principal,
        kind: ErrorKind,
        message: str,
        **context: object,
    ) -> Result:
        return self._reject_error(
            operation,
            caller,
            RegistryError(kind=kind, message=message),
            **context,
        )

    def _reject_error(
        self,
        operation: str,
        caller: Principal,
        error: RegistryError,
        **context: object,
    ) -> Result:
        logger.warning(
            f"{operation}_rejected",
            caller=caller,
            error=error.kind.slug,
            code=error.code,
            **context,
        )
        return Result(error=error)
