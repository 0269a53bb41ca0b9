"""Warranty record registry and its guards."""

from services.warranty.registry.errors import (
    ErrorCategory,
    ErrorKind,
    RegistryError,
    RegistryOperationError,
    Result,
)
from services.warranty.registry.models import (
    CoverageStatus,
    Currency,
    Principal,
    ProductType,
    RegistryConfig,
    WarrantyRecord,
    WarrantyUpdateLog,
)
from services.warranty.registry.registry import WarrantyRegistry
from services.warranty.registry.store import InMemoryWarrantyStore, WarrantyStore

__all__ = [
    "WarrantyRegistry",
    "WarrantyStore",
    "InMemoryWarrantyStore",
    "ErrorCategory",
    "ErrorKind",
    "RegistryError",
    "RegistryOperationError",
    "Result",
    "CoverageStatus",
    "Currency",
    "Principal",
    "ProductType",
    "RegistryConfig",
    "WarrantyRecord",
    "WarrantyUpdateLog",
]
