from flask import Blueprint, jsonify

from models import db
from models.booking import Booking
from models.contact import Contact
from models.enums import BookingStatus, ContactStatus, Role
from models.service import Service
from models.user import User
from security.rbac import admin_required
from utils.audit import log_event
from utils.serializers import booking_json

admin_bp = Blueprint("admin", __name__, url_prefix="/api/dashboard")


@admin_bp.get("/stats")
@admin_required
def dashboard_stats():
    counts = dict(
        db.session.query(Booking.status, db.func.count(Booking.id))
        .group_by(Booking.status)
        .all()
    )
    completed = Booking.status == BookingStatus.COMPLETED.value
    revenue = db.session.query(db.func.coalesce(db.func.sum(Booking.actual_price), 0)).filter(completed).scalar()
    collected = db.session.query(db.func.coalesce(db.func.sum(Booking.actual_weight), 0)).filter(completed).scalar()

    recent = Booking.query.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(5).all()

    log_event("ADMIN_DASHBOARD_VIEW")
    return jsonify(
        bookings={
            "total": sum(counts.values()),
            "by_status": {s.value: counts.get(s.value, 0) for s in BookingStatus},
        },
        revenue=float(revenue or 0),
        collected_weight=float(collected or 0),
        services={
            "total": Service.query.count(),
            "active": Service.query.filter(Service.is_active.is_(True)).count(),
        },
        users={
            "total": User.query.count(),
            "customers": User.query.filter(User.role == Role.CUSTOMER.value).count(),
        },
        contacts={
            "new": Contact.query.filter(Contact.status == ContactStatus.NEW.value).count(),
            "unread": Contact.query.filter(Contact.is_read.is_(False)).count(),
        },
        recent_bookings=[booking_json(b) for b in recent],
    ), 200
