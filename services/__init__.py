"""
Warranty Registry Services
==========================

Services:
- warranty: warranty NFT registry and its HTTP API
"""

__all__ = [
    "warranty",
]
