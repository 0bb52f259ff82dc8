"""
Client-side cart.

Lines are kept in insertion order and keyed by service id. The totals are a
derived cache: every mutation rebuilds them from the lines and writes the
whole snapshot to storage.
"""
import json
import logging
import math
from typing import Any, Dict, List, Optional

from domain.pricing import line_price, sum_prices

logger = logging.getLogger(__name__)

CART_KEY = "cart"


class CartStore:
    def __init__(self, storage):
        self.storage = storage
        self.items: List[Dict[str, Any]] = []
        self.total_items = 0
        self.total_price = 0.0
        self._load()

    # ---- persistence ----

    def _load(self):
        raw = self.storage.get_item(CART_KEY)
        if not raw:
            return
        try:
            snapshot = json.loads(raw)
            items = [self._restore_line(line) for line in snapshot["items"]]
        except (ValueError, TypeError, KeyError) as exc:
            logger.error("Error loading cart from storage: %s", exc)
            self.storage.remove_item(CART_KEY)
            return
        self.items = items
        self._recompute()

    @staticmethod
    def _restore_line(line) -> Dict[str, Any]:
        service = line["service"]
        if not isinstance(service, dict):
            raise TypeError(f"service must be an object, got {type(service).__name__}")
        numbers = [float(v) for v in (service["price_per_kg"], line["quantity"], line["estimated_price"])]
        if service["id"] is None or not all(math.isfinite(v) for v in numbers):
            raise ValueError("cart line has a missing id or a non-finite number")
        price_per_kg, quantity, estimated_price = numbers
        return {
            "service": dict(service, price_per_kg=price_per_kg),
            "quantity": quantity,
            "estimated_price": estimated_price,
        }

    def _recompute(self):
        self.total_items = sum(line["quantity"] for line in self.items)
        self.total_price = sum_prices(line["estimated_price"] for line in self.items)

    def _commit(self):
        self._recompute()
        self.storage.set_item(CART_KEY, json.dumps(self.snapshot()))

    def snapshot(self) -> dict:
        return {
            "items": [dict(line) for line in self.items],
            "total_items": self.total_items,
            "total_price": self.total_price,
        }

    # ---- queries ----

    def _find(self, service_id) -> Optional[Dict[str, Any]]:
        for line in self.items:
            if line["service"]["id"] == service_id:
                return line
        return None

    def get_item_quantity(self, service_id) -> float:
        line = self._find(service_id)
        return line["quantity"] if line else 0

    def is_item_in_cart(self, service_id) -> bool:
        return self._find(service_id) is not None

    def to_booking_lines(self) -> List[dict]:
        """The ``services`` payload for POST /api/bookings."""
        return [{"service_id": line["service"]["id"], "quantity": line["quantity"]} for line in self.items]

    # ---- mutations ----

    @staticmethod
    def _out_of_bounds(service: dict, quantity: float) -> Optional[str]:
        if quantity < service.get("minimum_quantity", 0):
            return f"Minimum quantity for {service.get('name')} is {service['minimum_quantity']:g} kg"
        if "maximum_quantity" in service and quantity > service["maximum_quantity"]:
            return f"Maximum quantity for {service.get('name')} is {service['maximum_quantity']:g} kg"
        return None

    def add_item(self, service: dict, quantity: float) -> bool:
        """Add ``quantity`` kg of ``service``; merges into an existing line."""
        if quantity <= 0:
            logger.warning("Quantity must be greater than 0")
            return False

        line = self._find(service["id"])
        merged = quantity + (line["quantity"] if line else 0)
        problem = self._out_of_bounds(service, quantity) or self._out_of_bounds(service, merged)
        if problem:
            logger.warning(problem)
            return False

        if line is None:
            line = {"service": service, "quantity": 0}
            self.items.append(line)
        line["quantity"] = merged
        line["estimated_price"] = line_price(merged, service["price_per_kg"])
        self._commit()
        return True

    def remove_item(self, service_id):
        self.items = [line for line in self.items if line["service"]["id"] != service_id]
        self._commit()

    def update_quantity(self, service_id, quantity: float) -> bool:
        line = self._find(service_id)
        if line is None:
            logger.warning("Item not found in cart")
            return False

        if quantity <= 0:
            self.remove_item(service_id)
            return True

        problem = self._out_of_bounds(line["service"], quantity)
        if problem:
            logger.warning(problem)
            return False

        line["quantity"] = quantity
        line["estimated_price"] = line_price(quantity, line["service"]["price_per_kg"])
        self._commit()
        return True

    def clear(self):
        self.items = []
        self._recompute()
        self.storage.remove_item(CART_KEY)
