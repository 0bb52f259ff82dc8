"""Service catalog field validation, shared by create and update."""
import json
import math
from typing import List, Optional

from domain.errors import ValidationFailed
from models.enums import ServiceCategory, parse, values

DEFAULT_MINIMUM_QUANTITY = 1.0
DEFAULT_MAXIMUM_QUANTITY = 1000.0
DEFAULT_PROCESSING_TIME = "24-48 hours"


def _number(raw, field: str, errors: List[str], minimum: float) -> Optional[float]:
    if isinstance(raw, bool):
        errors.append(f"{field} must be a number")
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        errors.append(f"{field} must be a number")
        return None
    if not math.isfinite(value):
        errors.append(f"{field} must be a finite number")
        return None
    if value < minimum:
        errors.append(f"{field} cannot be less than {minimum:g}")
        return None
    return value


def _string_list(raw, field: str, errors: List[str]) -> Optional[list]:
    # multipart forms send lists as JSON text
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            errors.append(f"{field} must be a list of strings")
            return None
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        errors.append(f"{field} must be a list of strings")
        return None
    return [v.strip() for v in raw if v.strip()]


def _flag(raw) -> Optional[bool]:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str) and raw.strip().lower() in ("true", "false"):
        return raw.strip().lower() == "true"
    return None


def validate_service_fields(data: dict, existing=None) -> dict:
    """
    Clean a create (``existing is None``) or partial update payload.

    Returns the column values to write. The quantity bounds invariant is
    checked against the merged result so an update that only moves one bound
    is still validated.
    """
    creating = existing is None
    errors: List[str] = []
    fields = {}

    for name in ("name", "description"):
        if name in data or creating:
            value = data.get(name)
            value = value.strip() if isinstance(value, str) else ""
            if not value:
                errors.append(f"Service {name} is required")
            else:
                fields[name] = value

    if "category" in data or creating:
        category = parse(ServiceCategory, data.get("category"))
        if category is None:
            errors.append(f"Category must be one of: {', '.join(values(ServiceCategory))}")
        else:
            fields["category"] = category.value

    if "price_per_kg" in data or creating:
        if data.get("price_per_kg") in (None, ""):
            errors.append("Price per kg is required")
        else:
            price = _number(data.get("price_per_kg"), "Price per kg", errors, 0)
            if price is not None:
                fields["price_per_kg"] = price

    if data.get("minimum_quantity") not in (None, ""):
        value = _number(data.get("minimum_quantity"), "Minimum quantity", errors, 0)
        if value is not None:
            fields["minimum_quantity"] = value
    elif creating:
        fields["minimum_quantity"] = DEFAULT_MINIMUM_QUANTITY

    if data.get("maximum_quantity") not in (None, ""):
        value = _number(data.get("maximum_quantity"), "Maximum quantity", errors, 1)
        if value is not None:
            fields["maximum_quantity"] = value
    elif creating:
        fields["maximum_quantity"] = DEFAULT_MAXIMUM_QUANTITY

    for name, label in (("features", "Features"), ("available_areas", "Available areas")):
        if data.get(name) is not None:
            value = _string_list(data.get(name), label, errors)
            if value is not None:
                fields[name] = value
        elif creating:
            fields[name] = []

    processing_time = data.get("processing_time")
    if isinstance(processing_time, str) and processing_time.strip():
        fields["processing_time"] = processing_time.strip()
    elif creating:
        fields["processing_time"] = DEFAULT_PROCESSING_TIME

    if "is_active" in data and not creating:
        flag = _flag(data.get("is_active"))
        if flag is None:
            errors.append("is_active must be a boolean value")
        else:
            fields["is_active"] = flag

    minimum = fields.get("minimum_quantity", getattr(existing, "minimum_quantity", None))
    maximum = fields.get("maximum_quantity", getattr(existing, "maximum_quantity", None))
    if minimum is not None and maximum is not None and maximum <= minimum:
        errors.append("Maximum quantity must be greater than minimum quantity")

    if errors:
        raise ValidationFailed("Validation error", errors)
    return fields
