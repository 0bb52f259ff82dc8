"""Booking lifecycle rules."""
import math
from typing import Optional

from domain.errors import StateConflict, ValidationFailed
from models.enums import BookingStatus, Role, parse

TERMINAL = frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED})

FEEDBACK_COMMENT_MAX = 500


def as_status(value) -> BookingStatus:
    status = parse(BookingStatus, value)
    if status is None:
        raise ValidationFailed(f"Invalid booking status: {value}")
    return status


def is_terminal(value) -> bool:
    return as_status(value) in TERMINAL


def allowed_targets(current, role) -> frozenset:
    """Statuses the given role may move a booking to from ``current``."""
    current = as_status(current)
    role = Role(role)
    if current in TERMINAL:
        return frozenset()
    if role is Role.ADMIN:
        # admins may skip steps or step back; only terminal states are final
        return frozenset(BookingStatus)
    if role is Role.CUSTOMER:
        return frozenset({BookingStatus.CANCELLED})
    raise ValueError(f"Unhandled role: {role}")


def check_admin_transition(current, target) -> BookingStatus:
    target = as_status(target)
    current = as_status(current)
    if target not in allowed_targets(current, Role.ADMIN):
        raise StateConflict(
            f"Cannot change status of a {current.value} booking"
        )
    return target


def check_cancellation(current) -> BookingStatus:
    current = as_status(current)
    if current in TERMINAL:
        raise StateConflict(
            "Cannot cancel a booking that is already completed or cancelled"
        )
    return BookingStatus.CANCELLED


def check_feedback(current, has_feedback: bool) -> None:
    if as_status(current) is not BookingStatus.COMPLETED:
        raise StateConflict("Feedback can only be added to completed bookings")
    if has_feedback:
        raise StateConflict("Feedback has already been submitted for this booking")


def validate_feedback(rating, comment) -> tuple:
    """Return ``(rating, comment)`` normalized, or raise ValidationFailed."""
    if (
        isinstance(rating, bool)
        or not isinstance(rating, (int, float))
        or not math.isfinite(rating)
        or int(rating) != rating
    ):
        raise ValidationFailed("Rating must be between 1 and 5")
    rating = int(rating)
    if rating < 1 or rating > 5:
        raise ValidationFailed("Rating must be between 1 and 5")

    text: Optional[str] = None
    if comment is not None:
        if not isinstance(comment, str):
            raise ValidationFailed("Feedback comment must be a string")
        text = comment.strip() or None
        if text and len(text) > FEEDBACK_COMMENT_MAX:
            raise ValidationFailed(
                f"Feedback comment cannot exceed {FEEDBACK_COMMENT_MAX} characters"
            )
    return rating, text
