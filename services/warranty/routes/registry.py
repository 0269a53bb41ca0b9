"""
Registry Governance API Endpoints.

Authority, mint fee and capacity configuration, plus the logical block
height reported by the embedding environment.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from services.warranty.dependencies import (
    BlockClock,
    get_caller,
    get_clock,
    get_registry,
    to_http_exception,
)
from services.warranty.registry import (
    Principal,
    RegistryConfig,
    RegistryOperationError,
    WarrantyRegistry,
)


router = APIRouter(prefix="/registry", tags=["registry"])

RegistryDep = Annotated[WarrantyRegistry, Depends(get_registry)]
CallerDep = Annotated[Principal, Depends(get_caller)]
ClockDep = Annotated[BlockClock, Depends(get_clock)]


class AuthorityRequest(BaseModel):
    authority: str = Field(
        ...,
        min_length=1,
        description="Principal to install as the permanent authority",
    )


class MintFeeRequest(BaseModel):
    fee: int = Field(..., description="Units charged per mint")


class MaxTokensRequest(BaseModel):
    max_tokens: int = Field(..., description="Maximum number of warranties")


class HeightRequest(BaseModel):
    height: int = Field(..., ge=0, description="Current block height of the host chain")


class HeightResponse(BaseModel):
    height: int


class RegistryConfigResponse(BaseModel):
    """Registry configuration response."""

    next_token_id: int
    max_tokens: int
    mint_fee: int
    authority: str | None

    @classmethod
    def from_config(cls, config: RegistryConfig) -> RegistryConfigResponse:
        return cls(**config.model_dump())


@router.get("/config", response_model=RegistryConfigResponse, summary="Get registry configuration")
async def get_config(registry: RegistryDep) -> RegistryConfigResponse:
    return RegistryConfigResponse.from_config(await registry.get_config())


@router.post(
    "/authority",
    response_model=RegistryConfigResponse,
    summary="Set the permanent registry authority",
)
async def set_authority(
    request: AuthorityRequest,
    registry: RegistryDep,
    caller: CallerDep,
) -> RegistryConfigResponse:
    """
    Install the registry authority.

    Succeeds once; every later call is rejected regardless of caller.
    """
    try:
        (await registry.set_authority(caller, Principal(request.authority))).unwrap()
    except RegistryOperationError as e:
        raise to_http_exception(e) from e
    return RegistryConfigResponse.from_config(await registry.get_config())


@router.put("/mint-fee", response_model=RegistryConfigResponse, summary="Change the mint fee")
async def set_mint_fee(
    request: MintFeeRequest,
    registry: RegistryDep,
    caller: CallerDep,
) -> RegistryConfigResponse:
    try:
        (await registry.set_mint_fee(caller, request.fee)).unwrap()
    except RegistryOperationError as e:
        raise to_http_exception(e) from e
    return RegistryConfigResponse.from_config(await registry.get_config())


@router.put("/max-tokens", response_model=RegistryConfigResponse, summary="Change token capacity")
async def set_max_tokens(
    request: MaxTokensRequest,
    registry: RegistryDep,
    caller: CallerDep,
) -> RegistryConfigResponse:
    try:
        (await registry.set_max_tokens(caller, request.max_tokens)).unwrap()
    except RegistryOperationError as e:
        raise to_http_exception(e) from e
    return RegistryConfigResponse.from_config(await registry.get_config())


@router.get("/height", response_model=HeightResponse, summary="Get the logical block height")
async def get_height(clock: ClockDep) -> HeightResponse:
    return HeightResponse(height=clock.now())


@router.put("/height", response_model=HeightResponse, summary="Report a new block height")
async def set_height(request: HeightRequest, clock: ClockDep) -> HeightResponse:
    """
    Advance the logical clock used as `now` by every operation.

    Reported by the embedding environment; a height behind the current one
    is rejected.
    """
    try:
        height = clock.advance_to(request.height)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        ) from e
    return HeightResponse(height=height)
