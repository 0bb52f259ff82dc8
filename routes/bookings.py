import math
from datetime import datetime

from flask import Blueprint, current_app, request, jsonify, g

from domain import booking_status
from domain.bookings import build_booking, parse_date
from domain.errors import NotFound, ValidationFailed
from models import db
from models.booking import Booking, BookingImage
from models.enums import BookingStatus, PaymentStatus, parse, values
from models.service import Service
from models.user import User
from security.rbac import admin_required
from utils.audit import log_event
from utils.auth_context import login_required
from utils.ids import get_by_id, parse_id
from utils.pagination import filter_value, paginate
from utils.serializers import booking_json, image_json
from utils.uploads import save_images

bookings_bp = Blueprint("bookings", __name__, url_prefix="/api/bookings")


def _scoped_query():
    # customers only ever see their own bookings
    q = Booking.query
    if not g.user.is_admin:
        q = q.filter(Booking.user_id == g.user.id)
    return q


def _get_booking_or_404(booking_id: int) -> Booking:
    booking_id = parse_id(booking_id)
    booking = None
    if booking_id is not None:
        booking = _scoped_query().filter(Booking.id == booking_id).first()
    if booking is None:
        raise NotFound("Booking not found")
    return booking


def _lookup_service(service_id):
    return get_by_id(Service, service_id)


def _non_negative(raw, label):
    if isinstance(raw, bool):
        raise ValidationFailed(f"{label} must be a number")
    try:
        value = float(raw)
    except (TypeError, ValueError):
        raise ValidationFailed(f"{label} must be a number")
    if not math.isfinite(value):
        raise ValidationFailed(f"{label} must be a finite number")
    if value < 0:
        raise ValidationFailed(f"{label} cannot be negative")
    return value


@bookings_bp.post("")
@login_required
def create_booking():
    data = request.get_json(silent=True) or {}

    booking = build_booking(g.user.id, data, lookup=_lookup_service)
    db.session.add(booking)
    db.session.commit()

    log_event(
        "BOOKING_CREATE",
        entity="booking",
        entity_id=booking.id,
        details={"total_estimated_price": booking.total_estimated_price, "items": len(booking.items)},
    )
    return jsonify(message="Booking created successfully", booking=booking_json(booking)), 201


@bookings_bp.get("")
@login_required
def list_bookings():
    q = _scoped_query()

    status = filter_value("status")
    if status:
        q = q.filter(Booking.status == booking_status.as_status(status).value)

    start = parse_date(request.args.get("start_date"))
    end = parse_date(request.args.get("end_date"))
    if start:
        q = q.filter(Booking.pickup_date >= start)
    if end:
        q = q.filter(Booking.pickup_date <= end)

    rows, pagination = paginate(q.order_by(Booking.created_at.desc(), Booking.id.desc()))
    return jsonify(bookings=[booking_json(b) for b in rows], pagination=pagination), 200


@bookings_bp.get("/<int:booking_id>")
@login_required
def get_booking(booking_id: int):
    return jsonify(booking=booking_json(_get_booking_or_404(booking_id))), 200


@bookings_bp.put("/<int:booking_id>/status")
@admin_required
def update_status(booking_id: int):
    data = request.get_json(silent=True) or {}
    if not data.get("status"):
        return jsonify(message="status is required", errors=[f"Status must be one of: {', '.join(values(BookingStatus))}"]), 400

    booking = _get_booking_or_404(booking_id)
    previous = booking.status
    target = booking_status.check_admin_transition(booking.status, data["status"])
    changes = {"status": target.value}

    if data.get("assigned_to") is not None:
        assignee = get_by_id(User, data["assigned_to"])
        if assignee is None or not assignee.is_active:
            return jsonify(message="Assigned user not found"), 400
        changes["assigned_to_id"] = assignee.id

    if data.get("actual_weight") is not None:
        changes["actual_weight"] = _non_negative(data["actual_weight"], "Actual weight")
    if data.get("actual_price") is not None:
        changes["actual_price"] = _non_negative(data["actual_price"], "Actual price")
    if data.get("payment_status") is not None:
        payment = parse(PaymentStatus, data["payment_status"])
        if payment is None:
            return jsonify(message=f"Payment status must be one of: {', '.join(values(PaymentStatus))}"), 400
        changes["payment_status"] = payment.value

    for name, value in changes.items():
        setattr(booking, name, value)
    db.session.commit()

    log_event(
        "BOOKING_STATUS_UPDATE",
        entity="booking",
        entity_id=booking.id,
        details={"from": previous, "to": booking.status, "assigned_to": booking.assigned_to_id},
    )
    return jsonify(message="Booking status updated successfully", booking=booking_json(booking)), 200


@bookings_bp.put("/<int:booking_id>/cancel")
@login_required
def cancel_booking(booking_id: int):
    booking = _get_booking_or_404(booking_id)
    previous = booking.status
    booking.status = booking_status.check_cancellation(booking.status).value
    db.session.commit()

    log_event("BOOKING_CANCEL", entity="booking", entity_id=booking.id, details={"from": previous})
    return jsonify(message="Booking cancelled successfully", booking=booking_json(booking)), 200


@bookings_bp.post("/<int:booking_id>/feedback")
@login_required
def add_feedback(booking_id: int):
    data = request.get_json(silent=True) or {}
    rating, comment = booking_status.validate_feedback(data.get("rating"), data.get("comment"))

    booking = _get_booking_or_404(booking_id)
    booking_status.check_feedback(booking.status, booking.has_feedback)

    booking.feedback_rating = rating
    booking.feedback_comment = comment
    booking.feedback_submitted_at = datetime.utcnow()
    db.session.commit()

    log_event("BOOKING_FEEDBACK", entity="booking", entity_id=booking.id, details={"rating": rating})
    return jsonify(message="Feedback submitted successfully", booking=booking_json(booking)), 200


@bookings_bp.post("/<int:booking_id>/images")
@login_required
def upload_images(booking_id: int):
    booking = _get_booking_or_404(booking_id)

    urls = save_images(
        request.files.getlist("booking_images"),
        "bookings",
        booking.id,
        prefix="pickup",
        max_files=current_app.config.get("MAX_BOOKING_IMAGES", 5),
    )
    description = (request.form.get("description") or "").strip()[:255] or None
    images = [BookingImage(url=url, description=description) for url in urls]
    booking.images.extend(images)
    db.session.commit()

    log_event("BOOKING_IMAGES_UPLOAD", entity="booking", entity_id=booking.id, details={"count": len(images)})
    return jsonify(message="Images uploaded successfully", images=[image_json(i) for i in images]), 200
