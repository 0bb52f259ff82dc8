"""
Booking price computation.

Every line item is checked against the live service catalog. A request is
accepted or rejected as a whole: one bad line rejects the booking and nothing
is written.
"""
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Iterable, List, Optional, Tuple

from domain.errors import ValidationFailed

CENT = Decimal("0.01")


@dataclass
class PricedLine:
    service: Any
    quantity: float
    estimated_price: float


def to_money(value) -> Decimal:
    return Decimal(str(value)).quantize(CENT, rounding=ROUND_HALF_UP)


def line_price(quantity, price_per_kg) -> float:
    """quantity x price_per_kg, rounded half-up to cents."""
    return float(to_money(Decimal(str(quantity)) * Decimal(str(price_per_kg))))


def sum_prices(prices: Iterable[float]) -> float:
    total = sum((Decimal(str(p)) for p in prices), Decimal("0"))
    return float(total.quantize(CENT, rounding=ROUND_HALF_UP))


def _as_quantity(raw) -> Optional[float]:
    if isinstance(raw, bool):
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    if value != value or value in (float("inf"), float("-inf")):
        return None
    return value


def check_quantity(service, quantity: float) -> Optional[str]:
    """Return an error message when ``quantity`` is outside the service bounds."""
    if quantity < service.minimum_quantity:
        return f"Minimum quantity for {service.name} is {service.minimum_quantity:g} kg"
    if quantity > service.maximum_quantity:
        return f"Maximum quantity for {service.name} is {service.maximum_quantity:g} kg"
    return None


def price_line_items(
    requested: List[Tuple[Any, Any]],
    lookup: Callable[[Any], Any],
) -> Tuple[List[PricedLine], float]:
    """
    Price ``(service_id, quantity)`` pairs against the catalog.

    ``lookup`` resolves a service id to a Service (or None). Returns the priced
    lines in request order and the total. Raises ValidationFailed listing every
    problem when any line is invalid.
    """
    if not requested:
        raise ValidationFailed("Validation error", ["At least one service is required"])

    errors: List[str] = []
    lines: List[PricedLine] = []

    for service_id, raw_quantity in requested:
        service = lookup(service_id) if service_id is not None else None
        if service is None or not service.is_active:
            errors.append(f"Service not found or inactive: {service_id}")
            continue

        quantity = _as_quantity(raw_quantity)
        if quantity is None or quantity <= 0:
            errors.append(f"Quantity for {service.name} must be a positive number")
            continue

        problem = check_quantity(service, quantity)
        if problem:
            errors.append(problem)
            continue

        lines.append(PricedLine(
            service=service,
            quantity=quantity,
            estimated_price=line_price(quantity, service.price_per_kg),
        ))

    if errors:
        raise ValidationFailed("Validation error", errors)

    return lines, sum_prices(line.estimated_price for line in lines)
