"""
Warranty Record API Endpoints.

Mint, transfer, extend and amend warranty records.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from services.warranty.dependencies import (
    BlockClock,
    get_caller,
    get_clock,
    get_registry,
    to_http_exception,
)
from services.warranty.registry import (
    CoverageStatus,
    Principal,
    RegistryOperationError,
    WarrantyRecord,
    WarrantyRegistry,
    WarrantyUpdateLog,
)


router = APIRouter(prefix="/warranties", tags=["warranties"])

RegistryDep = Annotated[WarrantyRegistry, Depends(get_registry)]
CallerDep = Annotated[Principal, Depends(get_caller)]
ClockDep = Annotated[BlockClock, Depends(get_clock)]


class WarrantyMintRequest(BaseModel):
    """Request to mint a new warranty.

    Field bounds are enforced by the registry so that every violation is
    reported with its registry error code.
    """

    serial: str = Field(..., description="Product serial number")
    expiration: int = Field(..., description="Block height at which coverage ends")
    manufacturer: str = Field(..., description="Manufacturer principal")
    product_type: str = Field(..., description="electronics, appliances or vehicles")
    owner: str = Field(..., description="Initial owner principal")
    max_extensions: int = Field(..., description="Extensions the authority may grant (0-10)")
    warranty_value: int = Field(..., description="Coverage value")
    grace_period: int = Field(..., description="Claim window after expiration (0-90)")
    location: str = Field(..., description="Place of manufacture or sale")
    currency: str = Field(..., description="STX, USD or BTC")
    proof_hash: bytes = Field(..., description="Hex-encoded 32-byte document digest")

    @field_validator("proof_hash", mode="before")
    @classmethod
    def decode_hex(cls, v: str | bytes) -> bytes:
        if isinstance(v, str):
            try:
                return bytes.fromhex(v.removeprefix("0x"))
            except ValueError:
                # Undecodable input is left for the registry's length check
                return b""
        return v


class WarrantyTransferRequest(BaseModel):
    """Request to transfer warranty ownership."""

    new_owner: str = Field(..., description="New owner principal")


class WarrantyExtendRequest(BaseModel):
    """Request to extend coverage."""

    extension_duration: int = Field(..., description="Blocks to add to the expiration")


class WarrantyUpdateRequest(BaseModel):
    """Request to amend a warranty's terms."""

    update_expiration: int = Field(..., description="New expiration block height")
    update_product_type: str = Field(..., description="New product type")


class WarrantyResponse(BaseModel):
    """Warranty record response."""

    id: int
    serial: str
    expiration: int
    manufacturer: str
    product_type: str
    owner: str
    timestamp: int
    minter: str
    status: bool
    extension_count: int
    max_extensions: int
    warranty_value: int
    grace_period: int
    location: str
    currency: str
    proof_hash: str

    @classmethod
    def from_record(cls, record: WarrantyRecord) -> WarrantyResponse:
        """Create response from WarrantyRecord."""
        data = record.model_dump(mode="python")
        data["product_type"] = record.product_type.value
        data["currency"] = record.currency.value
        data["proof_hash"] = record.proof_hash.hex()
        return cls(**data)


class UpdateLogResponse(BaseModel):
    """Latest amendment of a warranty."""

    token_id: int
    update_expiration: int
    update_product_type: str
    update_timestamp: int
    updater: str

    @classmethod
    def from_log(cls, token_id: int, log: WarrantyUpdateLog) -> UpdateLogResponse:
        return cls(
            token_id=token_id,
            update_expiration=log.update_expiration,
            update_product_type=log.update_product_type.value,
            update_timestamp=log.update_timestamp,
            updater=log.updater,
        )


class SerialLookupResponse(BaseModel):
    serial: str
    exists: bool
    token_id: int | None = None


class CoverageResponse(BaseModel):
    token_id: int
    height: int
    coverage: CoverageStatus


def _not_found(token_id: int) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Warranty {token_id} not found",
    )


@router.post(
    "",
    response_model=WarrantyResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Mint a new warranty",
)
async def mint_warranty(
    request: WarrantyMintRequest,
    registry: RegistryDep,
    caller: CallerDep,
    clock: ClockDep,
) -> WarrantyResponse:
    """
    Mint a new warranty record.

    Charges the current mint fee to the caller, payable to the authority.
    """
    try:
        token_id = (
            await registry.mint_warranty(
                caller,
                serial=request.serial,
                expiration=request.expiration,
                manufacturer=Principal(request.manufacturer),
                product_type=request.product_type,
                owner=Principal(request.owner),
                max_extensions=request.max_extensions,
                warranty_value=request.warranty_value,
                grace_period=request.grace_period,
                location=request.location,
                currency=request.currency,
                proof_hash=request.proof_hash,
                now=clock.now(),
            )
        ).unwrap()
    except RegistryOperationError as e:
        raise to_http_exception(e) from e

    record = await registry.get_token(token_id)
    if record is None:
        raise _not_found(token_id)
    return WarrantyResponse.from_record(record)


@router.get("/count", response_model=dict[str, int], summary="Count minted warranties")
async def get_token_count(registry: RegistryDep) -> dict[str, int]:
    """Number of warranties ever minted."""
    return {"count": await registry.get_token_count()}


@router.get(
    "/serial/{serial}",
    response_model=SerialLookupResponse,
    summary="Check whether a serial is registered",
)
async def check_token_existence(serial: str, registry: RegistryDep) -> SerialLookupResponse:
    """Look up a serial number in the registry."""
    record = await registry.get_token_by_serial(serial)
    return SerialLookupResponse(
        serial=serial,
        exists=record is not None,
        token_id=record.id if record else None,
    )


@router.get("/{token_id}", response_model=WarrantyResponse, summary="Get warranty by ID")
async def get_warranty(token_id: int, registry: RegistryDep) -> WarrantyResponse:
    """Get warranty record by ID."""
    record = await registry.get_token(token_id)
    if record is None:
        raise _not_found(token_id)
    return WarrantyResponse.from_record(record)


@router.get(
    "/{token_id}/update-log",
    response_model=UpdateLogResponse,
    summary="Get the latest amendment",
)
async def get_update_log(token_id: int, registry: RegistryDep) -> UpdateLogResponse:
    log = await registry.get_update_log(token_id)
    if log is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Warranty {token_id} has no amendments",
        )
    return UpdateLogResponse.from_log(token_id, log)


@router.get(
    "/{token_id}/coverage",
    response_model=CoverageResponse,
    summary="Get coverage at the current height",
)
async def get_coverage(token_id: int, registry: RegistryDep, clock: ClockDep) -> CoverageResponse:
    height = clock.now()
    coverage = await registry.coverage_status(token_id, height)
    if coverage is None:
        raise _not_found(token_id)
    return CoverageResponse(token_id=token_id, height=height, coverage=coverage)


@router.post(
    "/{token_id}/transfer",
    response_model=WarrantyResponse,
    summary="Transfer warranty ownership",
)
async def transfer_warranty(
    token_id: int,
    request: WarrantyTransferRequest,
    registry: RegistryDep,
    caller: CallerDep,
    clock: ClockDep,
) -> WarrantyResponse:
    """Transfer a warranty to a new owner. The caller must be the owner."""
    try:
        record = (
            await registry.transfer_warranty(
                caller, token_id, Principal(request.new_owner), clock.now()
            )
        ).unwrap()
    except RegistryOperationError as e:
        raise to_http_exception(e) from e
    return WarrantyResponse.from_record(record)


@router.post(
    "/{token_id}/extend",
    response_model=WarrantyResponse,
    summary="Extend warranty coverage",
)
async def extend_warranty(
    token_id: int,
    request: WarrantyExtendRequest,
    registry: RegistryDep,
    caller: CallerDep,
    clock: ClockDep,
) -> WarrantyResponse:
    """Extend coverage. The caller must be the registry authority."""
    try:
        record = (
            await registry.extend_warranty(
                caller, token_id, request.extension_duration, clock.now()
            )
        ).unwrap()
    except RegistryOperationError as e:
        raise to_http_exception(e) from e
    return WarrantyResponse.from_record(record)


@router.post(
    "/{token_id}/update",
    response_model=WarrantyResponse,
    summary="Amend warranty terms",
)
async def update_warranty(
    token_id: int,
    request: WarrantyUpdateRequest,
    registry: RegistryDep,
    caller: CallerDep,
    clock: ClockDep,
) -> WarrantyResponse:
    """Amend expiration and product type. The caller must be the minter."""
    try:
        record = (
            await registry.update_warranty(
                caller,
                token_id,
                request.update_expiration,
                request.update_product_type,
                clock.now(),
            )
        ).unwrap()
    except RegistryOperationError as e:
        raise to_http_exception(e) from e
    return WarrantyResponse.from_record(record)
