"""
Request dependencies for the warranty API.

The registry trusts the caller principal it is given; verifying it is the
job of whatever sits in front of this service.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Header, HTTPException, status

from shared.logging import bind_context
from shared.models import ErrorResponse
from services.warranty.registry import Principal, RegistryOperationError, WarrantyRegistry
from services.warranty.registry.errors import ErrorCategory


class BlockClock:
    """
    Process-local logical clock standing in for the chain height.

    The service never moves the clock on its own. Whatever embeds it reports
    new heights through ``PUT /api/v1/registry/height``; tests may also call
    ``advance`` directly.
    """

    def __init__(self, height: int = 0) -> None:
        self.height = height

    def now(self) -> int:
        return self.height

    def advance(self, blocks: int = 1) -> int:
        return self.advance_to(self.height + blocks)

    def advance_to(self, height: int) -> int:
        """Move to an absolute height; heights never go backwards."""
        if height < self.height:
            raise ValueError(f"Height {height} is behind current height {self.height}")
        self.height = height
        return self.height


_registry: WarrantyRegistry | None = None
_clock = BlockClock()


def get_registry() -> WarrantyRegistry:
    """Get the shared registry, creating it on first use."""
    global _registry
    if _registry is None:
        _registry = WarrantyRegistry()
    return _registry


def set_registry(registry: WarrantyRegistry) -> None:
    """Replace the shared registry."""
    global _registry
    _registry = registry


def reset_registry() -> None:
    """Drop the shared registry and rewind the clock."""
    global _registry
    _registry = None
    _clock.height = 0


def get_clock() -> BlockClock:
    return _clock


async def get_caller(
    x_caller_principal: Annotated[str, Header(min_length=1)],
) -> Principal:
    """Opaque caller identity from the X-Caller-Principal header."""
    bind_context(caller=x_caller_principal)
    return Principal(x_caller_principal)


_STATUS_BY_CATEGORY = {
    ErrorCategory.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorCategory.CAPACITY_EXCEEDED: status.HTTP_409_CONFLICT,
    ErrorCategory.OUT_OF_RANGE: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.NOT_CONFIGURED: status.HTTP_409_CONFLICT,
    ErrorCategory.EXTERNAL_FAILURE: status.HTTP_502_BAD_GATEWAY,
}


def to_http_exception(exc: RegistryOperationError) -> HTTPException:
    """Map a failed registry operation onto an HTTP error."""
    error = exc.error
    body = ErrorResponse(
        error=error.message,
        error_code=error.kind.slug,
        details={"code": error.code, "category": error.category.value},
    )
    return HTTPException(
        status_code=_STATUS_BY_CATEGORY[error.category],
        detail=body.model_dump(mode="json"),
    )
