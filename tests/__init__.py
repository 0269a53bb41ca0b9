"""
Warranty Registry Test Suite
============================

Test organization:
- tests/unit/               - Shared library tests (config, logging, ledger)
- tests/services/warranty/  - Registry state machine and HTTP API

Run tests:
    pytest                          # All tests
    pytest tests/unit               # Unit tests only
    pytest --cov=services          # With coverage
"""
