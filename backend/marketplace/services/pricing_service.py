"""Centralized pricing calculations for bookings."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional, Sequence, Tuple

from ..core.config import settings
from ..core.constants import MONEY_QUANTUM
from ..core.exceptions import ValidationException
from ..models.service import Service


def quantize_money(value: Decimal) -> Decimal:
    """Round a monetary amount to cents, half away from zero."""
    return value.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class PricedLine:
    """Price snapshot for one booked service."""

    service_id: str
    quantity: int
    unit_price: Decimal
    total: Decimal


@dataclass(frozen=True)
class PriceBreakdown:
    """Server-derived money for a booking. ``total_amount == subtotal + tax_amount``."""

    lines: Tuple[PricedLine, ...]
    subtotal: Decimal
    tax_amount: Decimal
    total_amount: Decimal
    currency: str


class PricingService:
    """
    Pure tax-inclusive pricing for a set of resolved services.

    Holds no session and performs no I/O; the same inputs always produce the
    same breakdown.
    """

    def __init__(self, tax_rate: Optional[Decimal] = None) -> None:
        rate = tax_rate if tax_rate is not None else settings.booking_tax_rate
        self.tax_rate = Decimal(str(rate))

    def calculate_tax(self, subtotal: Decimal) -> Decimal:
        return quantize_money(subtotal * self.tax_rate)

    def price_lines(
        self, lines: Iterable[Tuple[str, Decimal, int]], currency: str
    ) -> PriceBreakdown:
        """
        Price ``(service_id, unit_price, quantity)`` tuples in the given currency.

        Raises:
            ValidationException: on an empty selection or a non-positive quantity
        """
        priced: List[PricedLine] = []
        for service_id, unit_price, quantity in lines:
            if quantity < 1:
                raise ValidationException(
                    "Quantity must be at least 1",
                    code="INVALID_QUANTITY",
                    details={"service_id": service_id, "quantity": quantity},
                )
            unit = quantize_money(Decimal(str(unit_price)))
            priced.append(
                PricedLine(
                    service_id=service_id,
                    quantity=quantity,
                    unit_price=unit,
                    total=quantize_money(unit * quantity),
                )
            )

        if not priced:
            raise ValidationException(
                "At least one service is required", code="NO_SERVICES_SELECTED"
            )

        subtotal = quantize_money(sum((line.total for line in priced), Decimal("0")))
        tax_amount = self.calculate_tax(subtotal)
        return PriceBreakdown(
            lines=tuple(priced),
            subtotal=subtotal,
            tax_amount=tax_amount,
            total_amount=subtotal + tax_amount,
            currency=currency,
        )

    def price_services(self, services: Sequence[Service]) -> PriceBreakdown:
        """
        Price one unit of each service, preserving the given order.

        All services must share a single currency, which becomes the
        booking currency.
        """
        currencies = {str(service.currency) for service in services}
        if len(currencies) > 1:
            raise ValidationException(
                "All services in a booking must use the same currency",
                code="MIXED_CURRENCIES",
                details={"currencies": sorted(currencies)},
            )
        currency = currencies.pop() if currencies else settings.default_currency
        return self.price_lines(
            ((str(service.id), Decimal(str(service.base_price)), 1) for service in services),
            currency=currency,
        )
