"""Tests for the mint guard chain."""

from typing import Any

import pytest

from services.warranty.registry import ErrorKind, WarrantyRegistry
from services.warranty.registry.models import RegistryConfig
from services.warranty.registry.validation import (
    MINT_CHECKS,
    MintContext,
    MintRequest,
    first_mint_violation,
    parse_currency,
    parse_product_type,
)
from shared.ledger import MockFeeLedger
from tests.conftest import AUTHORITY, MANUFACTURER, MINTER, OWNER


def _request(**overrides: Any) -> MintRequest:
    fields: dict[str, Any] = {
        "serial": "SERIAL123",
        "expiration": 100,
        "manufacturer": MANUFACTURER,
        "product_type": "electronics",
        "owner": OWNER,
        "max_extensions": 5,
        "warranty_value": 1000,
        "grace_period": 30,
        "location": "FactoryA",
        "currency": "STX",
        "proof_hash": bytes(32),
    }
    fields.update(overrides)
    return MintRequest(**fields)


def _context(**overrides: Any) -> MintContext:
    fields: dict[str, Any] = {
        "caller": MINTER,
        "now": 0,
        "config": RegistryConfig(authority=AUTHORITY),
        "serial_taken": False,
    }
    fields.update(overrides)
    return MintContext(**fields)


# Every failure at once, in check order. Fixing each one in turn must expose
# the next.
VIOLATIONS: list[tuple[ErrorKind, dict[str, Any], dict[str, Any]]] = [
    (ErrorKind.MAX_TOKENS_EXCEEDED, {}, {"config": RegistryConfig(next_token_id=1, max_tokens=1)}),
    (ErrorKind.INVALID_SERIAL, {"serial": ""}, {}),
    (ErrorKind.INVALID_EXPIRATION, {"expiration": 0}, {}),
    (ErrorKind.INVALID_MANUFACTURER, {"manufacturer": MINTER}, {}),
    (ErrorKind.INVALID_PRODUCT_TYPE, {"product_type": "invalid"}, {}),
    (ErrorKind.INVALID_MAX_EXTENSIONS, {"max_extensions": 11}, {}),
    (ErrorKind.INVALID_WARRANTY_VALUE, {"warranty_value": 0}, {}),
    (ErrorKind.INVALID_GRACE_PERIOD, {"grace_period": 91}, {}),
    (ErrorKind.INVALID_LOCATION, {"location": ""}, {}),
    (ErrorKind.INVALID_CURRENCY, {"currency": "EUR"}, {}),
    (ErrorKind.INVALID_PROOF_HASH, {"proof_hash": bytes(31)}, {}),
    (ErrorKind.TOKEN_ALREADY_EXISTS, {}, {"serial_taken": True}),
    (ErrorKind.AUTHORITY_NOT_VERIFIED, {}, {"config": RegistryConfig()}),
]


class TestCheckOrder:
    """The first failing check decides the error."""

    def test_checks_are_in_contract_order(self) -> None:
        assert [check.kind for check in MINT_CHECKS] == [kind for kind, _, _ in VIOLATIONS]

    @pytest.mark.parametrize("index", range(len(VIOLATIONS)))
    def test_first_violation_wins(self, index: int) -> None:
        request_overrides: dict[str, Any] = {}
        context_overrides: dict[str, Any] = {}
        # The config overrides of earlier checks conflict with later ones,
        # so only the failures from `index` onwards are applied.
        for _, req, ctx in reversed(VIOLATIONS[index:]):
            request_overrides.update(req)
            context_overrides.update(ctx)

        error = first_mint_violation(_request(**request_overrides), _context(**context_overrides))

        assert error is not None
        assert error.kind == VIOLATIONS[index][0]

    def test_valid_request_passes(self) -> None:
        assert first_mint_violation(_request(), _context()) is None


class TestFieldBounds:
    """Boundary values for each mint field."""

    @pytest.mark.parametrize(
        ("overrides", "kind"),
        [
            ({"serial": "S" * 51}, ErrorKind.INVALID_SERIAL),
            ({"expiration": -1}, ErrorKind.INVALID_EXPIRATION),
            ({"max_extensions": -1}, ErrorKind.INVALID_MAX_EXTENSIONS),
            ({"warranty_value": -5}, ErrorKind.INVALID_WARRANTY_VALUE),
            ({"grace_period": -1}, ErrorKind.INVALID_GRACE_PERIOD),
            ({"location": "L" * 101}, ErrorKind.INVALID_LOCATION),
            ({"proof_hash": bytes(33)}, ErrorKind.INVALID_PROOF_HASH),
            ({"proof_hash": "0" * 32}, ErrorKind.INVALID_PROOF_HASH),
        ],
    )
    def test_out_of_bounds(self, overrides: dict[str, Any], kind: ErrorKind) -> None:
        error = first_mint_violation(_request(**overrides), _context())

        assert error is not None
        assert error.kind == kind

    @pytest.mark.parametrize(
        "overrides",
        [
            {"serial": "S"},
            {"serial": "S" * 50},
            {"expiration": 1},
            {"max_extensions": 0},
            {"max_extensions": 10},
            {"warranty_value": 1},
            {"grace_period": 0},
            {"grace_period": 90},
            {"location": "L" * 100},
            {"product_type": "vehicles", "currency": "BTC"},
        ],
    )
    def test_within_bounds(self, overrides: dict[str, Any]) -> None:
        assert first_mint_violation(_request(**overrides), _context()) is None


class TestParsers:
    def test_parse_product_type(self) -> None:
        assert parse_product_type("appliances").value == "appliances"
        assert parse_product_type("Appliances") is None
        assert parse_product_type("") is None

    def test_parse_currency(self) -> None:
        assert parse_currency("BTC").value == "BTC"
        assert parse_currency("btc") is None


class TestRegistryUsesChain:
    """A failed guard through the registry leaves no trace."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("overrides", "kind"),
        [
            ({"serial": ""}, ErrorKind.INVALID_SERIAL),
            ({"expiration": 0}, ErrorKind.INVALID_EXPIRATION),
            ({"manufacturer": MINTER}, ErrorKind.INVALID_MANUFACTURER),
            ({"product_type": "invalid"}, ErrorKind.INVALID_PRODUCT_TYPE),
            ({"currency": "EUR"}, ErrorKind.INVALID_CURRENCY),
        ],
    )
    async def test_rejected_mint_changes_nothing(
        self,
        authorized_registry: WarrantyRegistry,
        ledger: MockFeeLedger,
        mint_args: dict[str, Any],
        overrides: dict[str, Any],
        kind: ErrorKind,
    ) -> None:
        config_before = await authorized_registry.get_config()

        result = await authorized_registry.mint_warranty(MINTER, **{**mint_args, **overrides})

        assert result.error.kind == kind
        assert await authorized_registry.get_config() == config_before
        assert await authorized_registry.get_token(0) is None
        assert not await authorized_registry.check_token_existence(
            overrides.get("serial", mint_args["serial"])
        )
        assert ledger.transfers == []
