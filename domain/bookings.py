"""
Booking construction.

``build_booking`` validates a raw request body, prices its line items and
returns an unsaved Booking with every derived field filled in. Callers add it
to the session only when it comes back without raising.
"""
import re
from datetime import date, datetime, timedelta
from typing import Any, Callable, List, Optional

from domain.errors import ValidationFailed
from domain.pricing import price_line_items
from models.booking import Booking, BookingItem
from models.enums import BookingStatus, PaymentMethod, TimeSlot, parse, values

PHONE_RE = re.compile(r"^[0-9]{10}$")
ADDRESS_REQUIRED = ("street", "city", "state", "pincode")
ADDRESS_FIELDS = ADDRESS_REQUIRED + ("landmark",)
INSTRUCTIONS_MAX = 500


def earliest_pickup_date(today: Optional[date] = None) -> date:
    today = today or datetime.utcnow().date()
    return today + timedelta(days=1)


def parse_date(raw) -> Optional[date]:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str) or not raw.strip():
        return None
    try:
        return datetime.fromisoformat(raw.strip()).date()
    except ValueError:
        return None


def clean_address(raw, errors: List[str], label: str = "Pickup address") -> Optional[dict]:
    if not isinstance(raw, dict):
        errors.append(f"{label} is required")
        return None
    address = {}
    for field in ADDRESS_FIELDS:
        value = raw.get(field)
        value = value.strip() if isinstance(value, str) else ""
        if field in ADDRESS_REQUIRED and not value:
            errors.append(f"{label} {field} is required")
        if value:
            address[field] = value
    return address


def is_valid_phone(value) -> bool:
    return isinstance(value, str) and bool(PHONE_RE.match(value))


def _requested_lines(raw, errors: List[str]) -> list:
    if not isinstance(raw, list) or not raw:
        errors.append("At least one service is required")
        return []
    lines = []
    for item in raw:
        if not isinstance(item, dict):
            errors.append("Each service entry must be an object")
            continue
        lines.append((item.get("service_id"), item.get("quantity")))
    return lines


def build_booking(
    user_id: int,
    data: dict,
    lookup: Callable[[Any], Any],
    today: Optional[date] = None,
) -> Booking:
    errors: List[str] = []

    requested = _requested_lines(data.get("services"), errors)
    address = clean_address(data.get("pickup_address"), errors)

    pickup_date = parse_date(data.get("pickup_date"))
    if pickup_date is None:
        errors.append("Pickup date is required (YYYY-MM-DD)")
    elif pickup_date < earliest_pickup_date(today):
        errors.append("Pickup date must be at least tomorrow")

    slot = parse(TimeSlot, data.get("pickup_time_slot"))
    if slot is None:
        errors.append(f"Pickup time slot must be one of: {', '.join(values(TimeSlot))}")

    contact_phone = data.get("contact_phone")
    if not is_valid_phone(contact_phone):
        errors.append("Please enter a valid 10-digit contact phone number")

    alternate_phone = data.get("alternate_phone") or None
    if alternate_phone is not None and not is_valid_phone(alternate_phone):
        errors.append("Please enter a valid 10-digit alternate phone number")

    instructions = data.get("special_instructions")
    if instructions is not None and not isinstance(instructions, str):
        errors.append("Special instructions must be text")
        instructions = None
    instructions = (instructions or "").strip() or None
    if instructions and len(instructions) > INSTRUCTIONS_MAX:
        errors.append(f"Special instructions cannot exceed {INSTRUCTIONS_MAX} characters")

    method = PaymentMethod.CASH
    if data.get("payment_method") is not None:
        method = parse(PaymentMethod, data.get("payment_method"))
        if method is None:
            errors.append(f"Payment method must be one of: {', '.join(values(PaymentMethod))}")

    lines, total = [], 0.0
    if requested:
        try:
            lines, total = price_line_items(requested, lookup)
        except ValidationFailed as exc:
            errors.extend(exc.errors)

    if errors:
        raise ValidationFailed("Validation error", errors)

    booking = Booking(
        user_id=user_id,
        pickup_address=address,
        pickup_date=pickup_date,
        pickup_time_slot=slot.value,
        contact_phone=contact_phone,
        alternate_phone=alternate_phone,
        special_instructions=instructions,
        payment_method=method.value,
        status=BookingStatus.PENDING.value,
        total_estimated_price=total,
    )
    booking.items = [
        BookingItem(
            service_id=line.service.id,
            position=position,
            quantity=line.quantity,
            estimated_price=line.estimated_price,
        )
        for position, line in enumerate(lines)
    ]
    return booking
