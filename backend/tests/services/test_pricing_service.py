"""Unit tests for PricingService pricing calculations."""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest

from marketplace.core.exceptions import ValidationException
from marketplace.services.pricing_service import PricingService, quantize_money


def _service(service_id: str, price: str, currency: str = "JMD") -> SimpleNamespace:
    return SimpleNamespace(id=service_id, base_price=Decimal(price), currency=currency)


class TestQuantizeMoney:
    def test_rounds_half_up_to_cents(self):
        assert quantize_money(Decimal("2.345")) == Decimal("2.35")
        assert quantize_money(Decimal("2.344")) == Decimal("2.34")

    def test_keeps_two_places(self):
        assert str(quantize_money(Decimal("10"))) == "10.00"


class TestPriceServices:
    def test_two_services_at_default_rate(self):
        pricing = PricingService(tax_rate=Decimal("0.125"))

        breakdown = pricing.price_services([_service("a", "1500"), _service("b", "800")])

        assert breakdown.subtotal == Decimal("2300.00")
        assert breakdown.tax_amount == Decimal("287.50")
        assert breakdown.total_amount == Decimal("2587.50")
        assert breakdown.currency == "JMD"

    def test_total_is_subtotal_plus_tax(self):
        pricing = PricingService(tax_rate=Decimal("0.125"))

        breakdown = pricing.price_services(
            [_service("a", "999.99"), _service("b", "0.03"), _service("c", "17.17")]
        )

        assert breakdown.total_amount == breakdown.subtotal + breakdown.tax_amount
        assert breakdown.tax_amount == quantize_money(breakdown.subtotal * Decimal("0.125"))

    def test_lines_preserve_request_order(self):
        pricing = PricingService(tax_rate=Decimal("0.125"))

        breakdown = pricing.price_services([_service("second", "800"), _service("first", "1500")])

        assert [line.service_id for line in breakdown.lines] == ["second", "first"]
        assert [line.unit_price for line in breakdown.lines] == [
            Decimal("800.00"),
            Decimal("1500.00"),
        ]
        assert all(line.quantity == 1 for line in breakdown.lines)

    def test_currency_taken_from_services(self):
        pricing = PricingService(tax_rate=Decimal("0.125"))

        breakdown = pricing.price_services([_service("a", "40", currency="USD")])

        assert breakdown.currency == "USD"
        assert breakdown.tax_amount == Decimal("5.00")

    def test_mixed_currencies_rejected(self):
        pricing = PricingService(tax_rate=Decimal("0.125"))

        with pytest.raises(ValidationException) as exc_info:
            pricing.price_services([_service("a", "1500"), _service("b", "40", currency="USD")])

        assert exc_info.value.code == "MIXED_CURRENCIES"

    def test_empty_selection_rejected(self):
        pricing = PricingService(tax_rate=Decimal("0.125"))

        with pytest.raises(ValidationException, match="At least one service is required"):
            pricing.price_services([])

    def test_zero_rate(self):
        pricing = PricingService(tax_rate=Decimal("0"))

        breakdown = pricing.price_services([_service("a", "1500")])

        assert breakdown.tax_amount == Decimal("0.00")
        assert breakdown.total_amount == Decimal("1500.00")


class TestPriceLines:
    def test_quantity_multiplies_line_total(self):
        pricing = PricingService(tax_rate=Decimal("0.125"))

        breakdown = pricing.price_lines([("a", Decimal("800"), 3)], currency="JMD")

        assert breakdown.lines[0].total == Decimal("2400.00")
        assert breakdown.subtotal == Decimal("2400.00")
        assert breakdown.tax_amount == Decimal("300.00")

    def test_quantity_below_one_rejected(self):
        pricing = PricingService(tax_rate=Decimal("0.125"))

        with pytest.raises(ValidationException) as exc_info:
            pricing.price_lines([("a", Decimal("800"), 0)], currency="JMD")

        assert exc_info.value.code == "INVALID_QUANTITY"


def test_default_rate_comes_from_settings():
    assert PricingService().tax_rate == Decimal("0.125")
