from datetime import datetime, timedelta

from flask import Blueprint, request, jsonify, g

from domain.errors import NotFound
from models import db
from models.enums import Role, parse
from models.user import User
from security.rbac import admin_required
from utils.audit import log_event
from utils.ids import get_by_id
from utils.pagination import filter_value, paginate
from utils.serializers import user_json

users_bp = Blueprint("users", __name__, url_prefix="/api/users")


def _get_user_or_404(user_id: int) -> User:
    user = get_by_id(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


@users_bp.get("")
@admin_required
def list_users():
    q = User.query

    role = filter_value("role")
    if role:
        q = q.filter(User.role == role)

    is_active = filter_value("is_active")
    if is_active is not None:
        q = q.filter(User.is_active.is_(is_active.lower() == "true"))

    search = (request.args.get("search") or "").strip()
    if search:
        like = f"%{search}%"
        q = q.filter(db.or_(
            User.first_name.ilike(like),
            User.last_name.ilike(like),
            User.email.ilike(like),
            User.phone.ilike(like),
        ))

    rows, pagination = paginate(q.order_by(User.created_at.desc(), User.id.desc()))
    return jsonify(users=[user_json(u) for u in rows], pagination=pagination), 200


@users_bp.get("/stats/dashboard")
@admin_required
def user_stats():
    since = datetime.utcnow() - timedelta(days=30)
    year_start = datetime(datetime.utcnow().year, 1, 1)

    monthly = {}
    for (created_at,) in db.session.query(User.created_at).filter(User.created_at >= year_start).all():
        key = (created_at.year, created_at.month)
        monthly[key] = monthly.get(key, 0) + 1

    recent = User.query.order_by(User.created_at.desc(), User.id.desc()).limit(5).all()
    return jsonify(
        stats={
            "total": User.query.count(),
            "active": User.query.filter(User.is_active.is_(True)).count(),
            "inactive": User.query.filter(User.is_active.is_(False)).count(),
            "admins": User.query.filter(User.role == Role.ADMIN.value).count(),
            "customers": User.query.filter(User.role == Role.CUSTOMER.value).count(),
            "recent_registrations": User.query.filter(User.created_at >= since).count(),
        },
        monthly_data=[
            {"year": year, "month": month, "count": count}
            for (year, month), count in sorted(monthly.items())
        ],
        recent_users=[user_json(u) for u in recent],
    ), 200


@users_bp.get("/<int:user_id>")
@admin_required
def get_user(user_id: int):
    return jsonify(user=user_json(_get_user_or_404(user_id))), 200


@users_bp.put("/<int:user_id>/status")
@admin_required
def update_user_status(user_id: int):
    data = request.get_json(silent=True) or {}
    is_active = data.get("is_active")
    if not isinstance(is_active, bool):
        return jsonify(message="is_active must be a boolean value"), 400

    if user_id == g.user.id and not is_active:
        return jsonify(message="You cannot deactivate your own account"), 400

    user = _get_user_or_404(user_id)
    user.is_active = is_active
    db.session.commit()

    log_event("USER_STATUS_UPDATE", entity="user", entity_id=user.id, details={"is_active": is_active})
    state = "activated" if is_active else "deactivated"
    return jsonify(message=f"User {state} successfully", user=user_json(user)), 200


@users_bp.put("/<int:user_id>/role")
@admin_required
def update_user_role(user_id: int):
    data = request.get_json(silent=True) or {}
    role = parse(Role, data.get("role"))
    if role is None:
        return jsonify(message="Invalid role. Must be either customer or admin"), 400

    if user_id == g.user.id and role is not Role.ADMIN:
        return jsonify(message="You cannot change your own role from admin to customer"), 400

    user = _get_user_or_404(user_id)
    previous = user.role
    user.role = role.value
    db.session.commit()

    log_event("USER_ROLE_UPDATE", entity="user", entity_id=user.id, details={"from": previous, "to": role.value})
    return jsonify(message=f"User role updated to {role.value} successfully", user=user_json(user)), 200


@users_bp.delete("/<int:user_id>")
@admin_required
def delete_user(user_id: int):
    if user_id == g.user.id:
        return jsonify(message="You cannot delete your own account"), 400

    user = _get_user_or_404(user_id)
    user.is_active = False
    db.session.commit()

    log_event("USER_DEACTIVATE", entity="user", entity_id=user.id)
    return jsonify(message="User account deactivated successfully", user=user_json(user)), 200
