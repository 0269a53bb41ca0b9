"""
Warranty Registry Shared Library
================================

Common utilities and abstractions shared by the registry services.

Modules:
    - config: Configuration management with Pydantic Settings
    - logging: Structured logging with structlog
    - ledger: Fee ledger interface (mock or real settlement)
    - models: Shared Pydantic response models

Version: 0.1.0
"""

__version__ = "0.1.0"

from shared.config import settings
from shared.logging import get_logger, setup_logging

__all__ = [
    "settings",
    "get_logger",
    "setup_logging",
    "__version__",
]
