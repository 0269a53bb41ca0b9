"""
Mint guard chain.

Checks run left to right and the first failing one decides the reported
error. Callers depend on this order, so new checks go where they belong in
the sequence rather than at the end.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from services.warranty.registry.errors import ErrorKind, RegistryError
from services.warranty.registry.models import (
    MAX_EXTENSIONS_LIMIT,
    MAX_GRACE_PERIOD,
    MAX_LOCATION_LENGTH,
    MAX_SERIAL_LENGTH,
    PROOF_HASH_LENGTH,
    Currency,
    Principal,
    ProductType,
    RegistryConfig,
)


@dataclass(frozen=True)
class MintRequest:
    """Caller-supplied fields of a new warranty."""

    serial: str
    expiration: int
    manufacturer: Principal
    product_type: ProductType | str
    owner: Principal
    max_extensions: int
    warranty_value: int
    grace_period: int
    location: str
    currency: Currency | str
    proof_hash: bytes


@dataclass(frozen=True)
class MintContext:
    """Registry state the mint checks read."""

    caller: Principal
    now: int
    config: RegistryConfig
    serial_taken: bool


@dataclass(frozen=True)
class MintCheck:
    kind: ErrorKind
    passes: Callable[[MintRequest, MintContext], bool]
    message: str


def parse_product_type(value: ProductType | str) -> ProductType | None:
    """Return the matching ProductType, or None for anything else."""
    try:
        return ProductType(value)
    except ValueError:
        return None


def parse_currency(value: Currency | str) -> Currency | None:
    """Return the matching Currency, or None for anything else."""
    try:
        return Currency(value)
    except ValueError:
        return None


def _bounded_text(value: str, max_length: int) -> bool:
    return isinstance(value, str) and 0 < len(value) <= max_length


MINT_CHECKS: tuple[MintCheck, ...] = (
    MintCheck(
        ErrorKind.MAX_TOKENS_EXCEEDED,
        lambda r, c: c.config.next_token_id < c.config.max_tokens,
        "Registry has reached its token capacity",
    ),
    MintCheck(
        ErrorKind.INVALID_SERIAL,
        lambda r, c: _bounded_text(r.serial, MAX_SERIAL_LENGTH),
        f"Serial must be 1-{MAX_SERIAL_LENGTH} characters",
    ),
    MintCheck(
        ErrorKind.INVALID_EXPIRATION,
        lambda r, c: r.expiration > c.now,
        "Expiration must be in the future",
    ),
    MintCheck(
        ErrorKind.INVALID_MANUFACTURER,
        lambda r, c: r.manufacturer != c.caller,
        "Manufacturer cannot be the minting caller",
    ),
    MintCheck(
        ErrorKind.INVALID_PRODUCT_TYPE,
        lambda r, c: parse_product_type(r.product_type) is not None,
        "Product type must be one of: electronics, appliances, vehicles",
    ),
    MintCheck(
        ErrorKind.INVALID_MAX_EXTENSIONS,
        lambda r, c: 0 <= r.max_extensions <= MAX_EXTENSIONS_LIMIT,
        f"Max extensions must be between 0 and {MAX_EXTENSIONS_LIMIT}",
    ),
    MintCheck(
        ErrorKind.INVALID_WARRANTY_VALUE,
        lambda r, c: r.warranty_value > 0,
        "Warranty value must be positive",
    ),
    MintCheck(
        ErrorKind.INVALID_GRACE_PERIOD,
        lambda r, c: 0 <= r.grace_period <= MAX_GRACE_PERIOD,
        f"Grace period must be between 0 and {MAX_GRACE_PERIOD}",
    ),
    MintCheck(
        ErrorKind.INVALID_LOCATION,
        lambda r, c: _bounded_text(r.location, MAX_LOCATION_LENGTH),
        f"Location must be 1-{MAX_LOCATION_LENGTH} characters",
    ),
    MintCheck(
        ErrorKind.INVALID_CURRENCY,
        lambda r, c: parse_currency(r.currency) is not None,
        "Currency must be one of: STX, USD, BTC",
    ),
    MintCheck(
        ErrorKind.INVALID_PROOF_HASH,
        lambda r, c: isinstance(r.proof_hash, (bytes, bytearray))
        and len(r.proof_hash) == PROOF_HASH_LENGTH,
        f"Proof hash must be exactly {PROOF_HASH_LENGTH} bytes",
    ),
    MintCheck(
        ErrorKind.TOKEN_ALREADY_EXISTS,
        lambda r, c: not c.serial_taken,
        "A warranty with this serial already exists",
    ),
    MintCheck(
        ErrorKind.AUTHORITY_NOT_VERIFIED,
        lambda r, c: c.config.authority is not None,
        "Registry authority has not been set",
    ),
)


def first_mint_violation(request: MintRequest, context: MintContext) -> RegistryError | None:
    """Return the first failing mint check, or None if every check passes."""
    for check in MINT_CHECKS:
        if not check.passes(request, context):
            return RegistryError(kind=check.kind, message=check.message)
    return None
