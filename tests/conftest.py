import io
from datetime import datetime, timedelta

import pytest

from app import create_app
from config import TestConfig
from models import db
from models.booking import Booking
from models.enums import Role, TimeSlot
from models.service import Service
from models.user import User
from security.password import hash_password
from security.tokens import create_access_token

PASSWORD = "secret123"


@pytest.fixture
def app(tmp_path):
    app = create_app(TestConfig)
    app.config["UPLOAD_FOLDER"] = str(tmp_path / "uploads")
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make(email="customer@example.com", role=Role.CUSTOMER, is_active=True, password=PASSWORD):
        with app.app_context():
            user = User(
                first_name="Test",
                last_name="User",
                email=email,
                phone="9876543210",
                password_hash=hash_password(password),
                role=role.value,
                is_active=is_active,
            )
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make


@pytest.fixture
def auth_headers(app):
    def _headers(user_id, role=Role.CUSTOMER, expires_in=None):
        with app.app_context():
            token = create_access_token(user_id, role.value, expires_in=expires_in)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def customer(make_user):
    return make_user("customer@example.com")


@pytest.fixture
def admin(make_user):
    return make_user("admin@example.com", role=Role.ADMIN)


@pytest.fixture
def customer_headers(customer, auth_headers):
    return auth_headers(customer)


@pytest.fixture
def admin_headers(admin, auth_headers):
    return auth_headers(admin, Role.ADMIN)


@pytest.fixture
def make_service(app):
    def _make(name="Newspaper", price_per_kg=12.5, minimum_quantity=1, maximum_quantity=100, is_active=True):
        with app.app_context():
            service = Service(
                name=name,
                description=f"{name} pickup",
                category="Paper & Cardboard",
                price_per_kg=price_per_kg,
                minimum_quantity=minimum_quantity,
                maximum_quantity=maximum_quantity,
                is_active=is_active,
            )
            db.session.add(service)
            db.session.commit()
            return service.id
    return _make


@pytest.fixture
def service(make_service):
    return make_service()


def booking_payload(*lines, **overrides):
    payload = {
        "services": [{"service_id": sid, "quantity": qty} for sid, qty in lines],
        "pickup_address": {
            "street": "12 Green Lane",
            "city": "Pune",
            "state": "Maharashtra",
            "pincode": "411001",
        },
        "pickup_date": (datetime.utcnow().date() + timedelta(days=2)).isoformat(),
        "pickup_time_slot": TimeSlot.MORNING.value,
        "contact_phone": "9876543210",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def create_booking(client):
    def _create(headers, *lines, **overrides):
        resp = client.post("/api/bookings", json=booking_payload(*lines, **overrides), headers=headers)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()["booking"]["id"]
    return _create


@pytest.fixture
def set_booking_status(app):
    def _set(booking_id, status):
        with app.app_context():
            booking = db.session.get(Booking, booking_id)
            booking.status = status
            db.session.commit()
    return _set


def png_file(name="photo.png"):
    return (io.BytesIO(b"\x89PNG\r\n\x1a\n fake image bytes"), name)
