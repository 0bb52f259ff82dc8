from datetime import datetime, time, timedelta

from flask import Blueprint, request, jsonify, g

from domain.bookings import is_valid_phone, parse_date
from domain.errors import NotFound
from models import db
from models.contact import Contact
from models.enums import ContactCategory, ContactPriority, ContactStatus, parse, values
from models.user import User
from security.rbac import admin_required
from utils.audit import log_event
from utils.auth_context import current_user_or_none
from utils.ids import get_by_id
from utils.notifications import contact_answered, contact_received
from utils.pagination import filter_value, paginate
from utils.serializers import contact_json

contact_bp = Blueprint("contact", __name__, url_prefix="/api/contact")

LIMITS = {"name": 100, "subject": 200, "message": 2000}


def _get_contact_or_404(contact_id: int) -> Contact:
    contact = get_by_id(Contact, contact_id)
    if contact is None:
        raise NotFound("Contact not found")
    return contact


def _text(data, field, errors):
    value = data.get(field)
    value = value.strip() if isinstance(value, str) else ""
    if not value:
        errors.append(f"{field.capitalize()} is required")
    elif len(value) > LIMITS[field]:
        errors.append(f"{field.capitalize()} cannot exceed {LIMITS[field]} characters")
    return value


@contact_bp.post("")
def submit_contact():
    data = request.get_json(silent=True) or {}
    user = current_user_or_none()
    errors = []

    name = _text(data, "name", errors)
    subject = _text(data, "subject", errors)
    message = _text(data, "message", errors)

    email = data.get("email")
    email = email.strip().lower() if isinstance(email, str) else ""
    if "@" not in email or len(email) > 255:
        errors.append("Please enter a valid email")

    phone = data.get("phone")
    if not is_valid_phone(phone):
        errors.append("Please enter a valid 10-digit phone number")

    category = ContactCategory.GENERAL
    if data.get("category"):
        category = parse(ContactCategory, data.get("category"))
        if category is None:
            errors.append(f"Category must be one of: {', '.join(values(ContactCategory))}")

    if errors:
        return jsonify(message="Validation error", errors=errors), 400

    contact = Contact(
        user_id=user.id if user else None,
        name=name,
        email=email,
        phone=phone,
        subject=subject,
        message=message,
        category=category.value,
    )
    db.session.add(contact)
    db.session.commit()

    sent = contact_received(contact)
    log_event("CONTACT_SUBMIT", entity="contact", entity_id=contact.id, details={"emails": sent})
    return jsonify(
        message="Thank you for your message. We will get back to you soon!",
        contact_id=contact.id,
    ), 201


@contact_bp.get("")
@admin_required
def list_contacts():
    q = Contact.query

    for column, enum_cls, arg in (
        (Contact.status, ContactStatus, "status"),
        (Contact.category, ContactCategory, "category"),
        (Contact.priority, ContactPriority, "priority"),
    ):
        raw = filter_value(arg)
        if raw:
            member = parse(enum_cls, raw)
            if member is None:
                return jsonify(message=f"Invalid {arg}: {raw}"), 400
            q = q.filter(column == member.value)

    search = (request.args.get("search") or "").strip()
    if search:
        like = f"%{search}%"
        q = q.filter(db.or_(
            Contact.name.ilike(like),
            Contact.email.ilike(like),
            Contact.subject.ilike(like),
            Contact.message.ilike(like),
        ))

    start = parse_date(request.args.get("start_date"))
    end = parse_date(request.args.get("end_date"))
    if start and end:
        q = q.filter(
            Contact.created_at >= datetime.combine(start, time.min),
            Contact.created_at < datetime.combine(end + timedelta(days=1), time.min),
        )

    rows, pagination = paginate(q.order_by(Contact.created_at.desc(), Contact.id.desc()))
    payload = [contact_json(c) for c in rows]

    # the admin has now seen these
    unread = [c for c in rows if not c.is_read]
    if unread:
        for c in unread:
            c.is_read = True
        db.session.commit()

    return jsonify(contacts=payload, pagination=pagination), 200


@contact_bp.get("/stats/dashboard")
@admin_required
def contact_stats():
    by_category = (
        db.session.query(Contact.category, db.func.count(Contact.id))
        .group_by(Contact.category)
        .order_by(db.func.count(Contact.id).desc())
        .all()
    )
    recent = Contact.query.order_by(Contact.created_at.desc(), Contact.id.desc()).limit(5).all()

    def count(status):
        return Contact.query.filter(Contact.status == status.value).count()

    return jsonify(
        stats={
            "total": Contact.query.count(),
            "new": count(ContactStatus.NEW),
            "in_progress": count(ContactStatus.IN_PROGRESS),
            "resolved": count(ContactStatus.RESOLVED),
            "closed": count(ContactStatus.CLOSED),
            "unread": Contact.query.filter(Contact.is_read.is_(False)).count(),
        },
        recent_contacts=[contact_json(c) for c in recent],
        category_stats=[{"category": cat, "count": n} for cat, n in by_category],
    ), 200


@contact_bp.get("/<int:contact_id>")
@admin_required
def get_contact(contact_id: int):
    contact = _get_contact_or_404(contact_id)
    payload = contact_json(contact)
    if not contact.is_read:
        contact.is_read = True
        db.session.commit()
    return jsonify(contact=payload), 200


@contact_bp.put("/<int:contact_id>/status")
@admin_required
def update_contact_status(contact_id: int):
    data = request.get_json(silent=True) or {}
    contact = _get_contact_or_404(contact_id)
    changes = {}

    if data.get("status") is not None:
        status = parse(ContactStatus, data["status"])
        if status is None:
            return jsonify(message=f"Status must be one of: {', '.join(values(ContactStatus))}"), 400
        changes["status"] = status.value

    if data.get("priority") is not None:
        priority = parse(ContactPriority, data["priority"])
        if priority is None:
            return jsonify(message=f"Priority must be one of: {', '.join(values(ContactPriority))}"), 400
        changes["priority"] = priority.value

    if data.get("assigned_to") is not None:
        assignee = get_by_id(User, data["assigned_to"])
        if assignee is None or not assignee.is_admin:
            return jsonify(message="Assigned user must be an admin"), 400
        changes["assigned_to_id"] = assignee.id

    if not changes:
        return jsonify(message="Nothing to update"), 400

    for name, value in changes.items():
        setattr(contact, name, value)
    db.session.commit()

    log_event("CONTACT_STATUS_UPDATE", entity="contact", entity_id=contact.id, details=changes)
    return jsonify(message="Contact status updated successfully", contact=contact_json(contact)), 200


@contact_bp.post("/<int:contact_id>/respond")
@admin_required
def respond_to_contact(contact_id: int):
    data = request.get_json(silent=True) or {}
    message = data.get("message")
    message = message.strip() if isinstance(message, str) else ""
    if not message:
        return jsonify(message="Response message is required"), 400

    contact = _get_contact_or_404(contact_id)
    contact.response_message = message
    contact.responded_by_id = g.user.id
    contact.responded_at = datetime.utcnow()
    contact.status = ContactStatus.RESOLVED.value
    contact.is_read = True
    db.session.commit()

    sent = contact_answered(contact)
    log_event("CONTACT_RESPOND", entity="contact", entity_id=contact.id, details={"email_sent": sent})
    return jsonify(message="Response sent successfully", contact=contact_json(contact)), 200
