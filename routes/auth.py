from datetime import datetime

from flask import Blueprint, request, jsonify, g

from domain.bookings import clean_address, is_valid_phone
from models import db
from models.enums import Role
from models.user import User
from security.password import hash_password, verify_password
from security.password_policy import validate_password
from security.tokens import create_access_token
from utils.audit import log_event
from utils.auth_context import login_required
from utils.serializers import user_json
from utils.uploads import save_image

auth_bp = Blueprint("auth", __name__, url_prefix="/api/auth")


def _normalize_email(value) -> str:
    return (value or "").strip().lower() if isinstance(value, str) else ""


def _is_valid_email(email: str) -> bool:
    return isinstance(email, str) and "@" in email and "." in email.split("@")[-1] and len(email) <= 255


def _clean_name(data, field, errors, label):
    value = data.get(field)
    value = value.strip() if isinstance(value, str) else ""
    if not value:
        errors.append(f"{label} is required")
    elif len(value) > 50:
        errors.append(f"{label} cannot exceed 50 characters")
    return value


def _token_response(user, message, status):
    token = create_access_token(user.id, user.role)
    return jsonify(message=message, token=token, user=user_json(user)), status


@auth_bp.post("/register")
def register():
    data = request.get_json(silent=True) or {}
    errors = []

    first_name = _clean_name(data, "first_name", errors, "First name")
    last_name = _clean_name(data, "last_name", errors, "Last name")

    email = _normalize_email(data.get("email"))
    if not _is_valid_email(email):
        errors.append("Please enter a valid email")

    phone = data.get("phone")
    if not is_valid_phone(phone):
        errors.append("Please enter a valid 10-digit phone number")

    _, password_errors = validate_password(data.get("password") or "")
    errors.extend(password_errors)

    address = None
    if data.get("address") is not None:
        address = clean_address(data.get("address"), errors, label="Address")

    if errors:
        return jsonify(message="Validation error", errors=errors), 400

    if User.query.filter_by(email=email).first():
        log_event("REGISTER_FAIL_EMAIL_EXISTS", details={"email": email})
        return jsonify(message="User already exists with this email"), 409

    user = User(
        first_name=first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        password_hash=hash_password(data["password"]),
        role=Role.CUSTOMER.value,
        address=address,
    )
    db.session.add(user)
    db.session.commit()

    log_event("REGISTER_SUCCESS", entity="user", entity_id=user.id, actor_id=user.id)
    return _token_response(user, "User registered successfully", 201)


@auth_bp.post("/login")
def login():
    data = request.get_json(silent=True) or {}
    email = _normalize_email(data.get("email"))
    password = data.get("password") or ""

    if not email or not password:
        return jsonify(message="Email and password are required"), 400

    user = User.query.filter_by(email=email).first()
    if not user or not verify_password(password, user.password_hash):
        log_event("LOGIN_FAIL", actor_id=user.id if user else None, details={"email": email})
        return jsonify(message="Invalid credentials"), 401

    if not user.is_active:
        log_event("LOGIN_DEACTIVATED", actor_id=user.id)
        return jsonify(message="Account is deactivated"), 401

    log_event("LOGIN_SUCCESS", actor_id=user.id)
    return _token_response(user, "Login successful", 200)


@auth_bp.get("/me")
@login_required
def me():
    return jsonify(user=user_json(g.user)), 200


@auth_bp.put("/profile")
@login_required
def update_profile():
    # accepts JSON, or multipart when a profile_image is attached
    data = request.get_json(silent=True) or request.form.to_dict()
    errors = []

    if "first_name" in data:
        g.user.first_name = _clean_name(data, "first_name", errors, "First name")
    if "last_name" in data:
        g.user.last_name = _clean_name(data, "last_name", errors, "Last name")
    if "phone" in data:
        if is_valid_phone(data.get("phone")):
            g.user.phone = data["phone"]
        else:
            errors.append("Please enter a valid 10-digit phone number")
    if data.get("address") is not None:
        address = data["address"]
        if isinstance(address, str):
            errors.append("Address must be an object")
        else:
            g.user.address = clean_address(address, errors, label="Address")

    if errors:
        db.session.rollback()
        return jsonify(message="Validation error", errors=errors), 400

    image = request.files.get("profile_image")
    if image is not None and image.filename:
        g.user.profile_image = save_image(image, "users", prefix="profile")

    db.session.commit()
    log_event("PROFILE_UPDATE", entity="user", entity_id=g.user.id)
    return jsonify(message="Profile updated successfully", user=user_json(g.user)), 200


@auth_bp.put("/change-password")
@login_required
def change_password():
    data = request.get_json(silent=True) or {}
    current_password = data.get("current_password") or ""
    new_password = data.get("new_password") or ""

    if not verify_password(current_password, g.user.password_hash):
        return jsonify(message="Current password is incorrect"), 400

    valid, errors = validate_password(new_password)
    if not valid:
        return jsonify(message="Password does not meet policy", errors=errors), 400

    g.user.password_hash = hash_password(new_password)
    g.user.password_changed_at = datetime.utcnow()
    db.session.commit()

    log_event("PASSWORD_CHANGED", entity="user", entity_id=g.user.id)
    return jsonify(message="Password changed successfully"), 200
