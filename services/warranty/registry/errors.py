"""
Registry error taxonomy and operation results.

Every registry operation returns a Result. Callers branch on `ok` instead
of catching exceptions; adapters that prefer exceptions call `unwrap()`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class ErrorCategory(str, Enum):
    """Coarse failure classes, stable across error kinds."""

    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    CAPACITY_EXCEEDED = "capacity_exceeded"
    OUT_OF_RANGE = "out_of_range"
    NOT_CONFIGURED = "not_configured"
    EXTERNAL_FAILURE = "external_failure"


class ErrorKind(Enum):
    """Specific registry failures with their numeric wire codes."""

    NOT_AUTHORIZED = (100, ErrorCategory.UNAUTHORIZED)
    INVALID_EXPIRATION = (101, ErrorCategory.OUT_OF_RANGE)
    INVALID_SERIAL = (102, ErrorCategory.OUT_OF_RANGE)
    INVALID_MANUFACTURER = (103, ErrorCategory.OUT_OF_RANGE)
    INVALID_PRODUCT_TYPE = (104, ErrorCategory.OUT_OF_RANGE)
    TOKEN_ALREADY_EXISTS = (106, ErrorCategory.ALREADY_EXISTS)
    TOKEN_NOT_FOUND = (107, ErrorCategory.NOT_FOUND)
    AUTHORITY_NOT_VERIFIED = (109, ErrorCategory.NOT_CONFIGURED)
    INVALID_EXTENSION_DURATION = (110, ErrorCategory.OUT_OF_RANGE)
    INVALID_MAX_EXTENSIONS = (111, ErrorCategory.OUT_OF_RANGE)
    INVALID_CONFIG_VALUE = (113, ErrorCategory.OUT_OF_RANGE)
    MAX_TOKENS_EXCEEDED = (114, ErrorCategory.CAPACITY_EXCEEDED)
    INVALID_WARRANTY_VALUE = (116, ErrorCategory.OUT_OF_RANGE)
    INVALID_GRACE_PERIOD = (117, ErrorCategory.OUT_OF_RANGE)
    INVALID_LOCATION = (118, ErrorCategory.OUT_OF_RANGE)
    INVALID_CURRENCY = (119, ErrorCategory.OUT_OF_RANGE)
    INVALID_PROOF_HASH = (120, ErrorCategory.OUT_OF_RANGE)
    EXTENSION_LIMIT_REACHED = (121, ErrorCategory.CAPACITY_EXCEEDED)
    AUTHORITY_ALREADY_SET = (122, ErrorCategory.ALREADY_EXISTS)
    FEE_TRANSFER_FAILED = (123, ErrorCategory.EXTERNAL_FAILURE)

    def __init__(self, code: int, category: ErrorCategory) -> None:
        self.code = code
        self.category = category

    @property
    def slug(self) -> str:
        """Kebab-case name, e.g. ``invalid-serial``."""
        return self.name.lower().replace("_", "-")


@dataclass(frozen=True)
class RegistryError:
    """A failed guard: which one, and a human-readable explanation."""

    kind: ErrorKind
    message: str

    @property
    def code(self) -> int:
        return self.kind.code

    @property
    def category(self) -> ErrorCategory:
        return self.kind.category


class RegistryOperationError(Exception):
    """Raised by Result.unwrap() when the operation failed."""

    def __init__(self, error: RegistryError) -> None:
        super().__init__(f"[{error.code}] {error.message}")
        self.error = error


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a registry operation."""

    value: T | None = None
    error: RegistryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> Result[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str) -> Result[T]:
        return cls(error=RegistryError(kind=kind, message=message))

    def unwrap(self) -> T:
        """
        Return the value of a successful result.

        Raises:
            RegistryOperationError: If the operation failed.
        """
        if self.error is not None:
            raise RegistryOperationError(self.error)
        return self.value  # type: ignore[return-value]
