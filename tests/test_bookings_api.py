import io
from datetime import datetime

import pytest

from conftest import booking_payload, png_file
from models import db
from models.booking import Booking

OPEN = ["pending", "confirmed", "assigned", "in_progress", "picked_up"]


def _count(app):
    with app.app_context():
        return db.session.query(Booking).count()


def test_create_booking_prices_on_server(client, customer_headers, make_service):
    paper = make_service("Paper", price_per_kg=12.5)
    metal = make_service("Metal", price_per_kg=25.3, minimum_quantity=2)

    resp = client.post(
        "/api/bookings",
        json=booking_payload((paper, 4), (metal, 2.5), total_estimated_price=1),
        headers=customer_headers,
    )
    assert resp.status_code == 201

    booking = resp.get_json()["booking"]
    assert booking["status"] == "pending"
    assert [line["estimated_price"] for line in booking["services"]] == [50.0, 63.25]
    assert booking["total_estimated_price"] == 113.25
    assert booking["services"][0]["service"]["name"] == "Paper"
    assert booking["feedback"] is None


def test_out_of_bounds_line_rejects_whole_booking(app, client, customer_headers, make_service):
    paper = make_service("Paper")
    glass = make_service("Glass", minimum_quantity=1)

    resp = client.post(
        "/api/bookings",
        json=booking_payload((paper, 4), (glass, 0.05)),
        headers=customer_headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["errors"] == ["Minimum quantity for Glass is 1 kg"]
    assert _count(app) == 0


def test_inactive_service_cannot_be_booked(app, client, customer_headers, make_service):
    retired = make_service("Retired", is_active=False)
    resp = client.post("/api/bookings", json=booking_payload((retired, 4)), headers=customer_headers)
    assert resp.status_code == 400
    assert _count(app) == 0


def test_pickup_must_be_after_today(client, customer_headers, service):
    today = datetime.utcnow().date().isoformat()
    resp = client.post(
        "/api/bookings",
        json=booking_payload((service, 4), pickup_date=today),
        headers=customer_headers,
    )
    assert resp.status_code == 400
    assert "Pickup date must be at least tomorrow" in resp.get_json()["errors"]


def test_customers_only_see_their_own_bookings(client, customer_headers, make_user, auth_headers, service, create_booking):
    mine = create_booking(customer_headers, (service, 3))
    other_headers = auth_headers(make_user("other@example.com"))
    theirs = create_booking(other_headers, (service, 5))

    listed = client.get("/api/bookings", headers=customer_headers).get_json()["bookings"]
    assert [b["id"] for b in listed] == [mine]

    assert client.get(f"/api/bookings/{theirs}", headers=customer_headers).status_code == 404
    assert client.put(f"/api/bookings/{theirs}/cancel", headers=customer_headers).status_code == 404


def test_admin_sees_all_and_filters_by_status(client, admin_headers, customer_headers, service, create_booking, set_booking_status):
    first = create_booking(customer_headers, (service, 3))
    second = create_booking(customer_headers, (service, 4))
    set_booking_status(second, "confirmed")

    listed = client.get("/api/bookings", headers=admin_headers).get_json()["bookings"]
    assert {b["id"] for b in listed} == {first, second}

    confirmed = client.get("/api/bookings?status=confirmed", headers=admin_headers).get_json()["bookings"]
    assert [b["id"] for b in confirmed] == [second]

    assert client.get("/api/bookings?status=lost", headers=admin_headers).status_code == 400


@pytest.mark.parametrize("status", OPEN)
def test_cancel_from_open_status(client, customer_headers, service, create_booking, set_booking_status, status):
    booking_id = create_booking(customer_headers, (service, 3))
    set_booking_status(booking_id, status)

    resp = client.put(f"/api/bookings/{booking_id}/cancel", headers=customer_headers)
    assert resp.status_code == 200
    assert resp.get_json()["booking"]["status"] == "cancelled"


@pytest.mark.parametrize("status", ["completed", "cancelled"])
def test_cancel_from_terminal_status_conflicts(client, customer_headers, service, create_booking, set_booking_status, status):
    booking_id = create_booking(customer_headers, (service, 3))
    set_booking_status(booking_id, status)

    resp = client.put(f"/api/bookings/{booking_id}/cancel", headers=customer_headers)
    assert resp.status_code == 409


def test_status_update_is_admin_only(client, customer_headers, service, create_booking):
    booking_id = create_booking(customer_headers, (service, 3))
    resp = client.put(f"/api/bookings/{booking_id}/status", json={"status": "confirmed"}, headers=customer_headers)
    assert resp.status_code == 403


def test_admin_status_update_with_actuals(client, admin, admin_headers, customer_headers, service, create_booking):
    booking_id = create_booking(customer_headers, (service, 3))

    resp = client.put(
        f"/api/bookings/{booking_id}/status",
        json={
            "status": "completed",
            "assigned_to": admin,
            "actual_weight": 3.4,
            "actual_price": 42.5,
            "payment_status": "paid",
        },
        headers=admin_headers,
    )
    assert resp.status_code == 200

    booking = resp.get_json()["booking"]
    assert booking["status"] == "completed"
    assert booking["assigned_to"]["id"] == admin
    assert booking["actual_price"] == 42.5
    assert booking["payment_status"] == "paid"

    again = client.put(f"/api/bookings/{booking_id}/status", json={"status": "pending"}, headers=admin_headers)
    assert again.status_code == 409


def test_status_update_validation(client, admin_headers, customer_headers, service, create_booking):
    booking_id = create_booking(customer_headers, (service, 3))
    url = f"/api/bookings/{booking_id}/status"

    assert client.put(url, json={}, headers=admin_headers).status_code == 400
    assert client.put(url, json={"status": "shipped"}, headers=admin_headers).status_code == 400
    assert client.put(url, json={"status": "confirmed", "actual_weight": -1}, headers=admin_headers).status_code == 400

    resp = client.put(url, json={"status": "confirmed", "payment_status": "maybe"}, headers=admin_headers)
    assert resp.status_code == 400
    booking = client.get(f"/api/bookings/{booking_id}", headers=admin_headers).get_json()["booking"]
    assert booking["status"] == "pending"


def test_feedback_once_on_completed_booking(client, customer_headers, service, create_booking, set_booking_status):
    booking_id = create_booking(customer_headers, (service, 3))
    url = f"/api/bookings/{booking_id}/feedback"

    early = client.post(url, json={"rating": 5}, headers=customer_headers)
    assert early.status_code == 409

    set_booking_status(booking_id, "completed")
    resp = client.post(url, json={"rating": 5, "comment": "On time"}, headers=customer_headers)
    assert resp.status_code == 200
    assert resp.get_json()["booking"]["feedback"]["rating"] == 5

    second = client.post(url, json={"rating": 4}, headers=customer_headers)
    assert second.status_code == 409
    assert "already been submitted" in second.get_json()["message"]


def test_feedback_rating_range(client, customer_headers, service, create_booking, set_booking_status):
    booking_id = create_booking(customer_headers, (service, 3))
    set_booking_status(booking_id, "completed")

    resp = client.post(f"/api/bookings/{booking_id}/feedback", json={"rating": 6}, headers=customer_headers)
    assert resp.status_code == 400


def test_upload_pickup_images(client, customer_headers, service, create_booking):
    booking_id = create_booking(customer_headers, (service, 3))

    resp = client.post(
        f"/api/bookings/{booking_id}/images",
        data={"booking_images": [png_file("a.png"), png_file("b.png")], "description": "Bags by the gate"},
        headers=customer_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200

    images = resp.get_json()["images"]
    assert len(images) == 2
    assert all(i["url"].startswith(f"/uploads/bookings/{booking_id}/pickup-") for i in images)
    assert images[0]["description"] == "Bags by the gate"

    booking = client.get(f"/api/bookings/{booking_id}", headers=customer_headers).get_json()["booking"]
    assert len(booking["images"]) == 2


def test_upload_rejects_too_many_images(client, customer_headers, service, create_booking):
    booking_id = create_booking(customer_headers, (service, 3))

    resp = client.post(
        f"/api/bookings/{booking_id}/images",
        data={"booking_images": [png_file(f"{i}.png") for i in range(6)]},
        headers=customer_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Too many files. Maximum is 5 files."


def test_upload_rejects_non_images(client, customer_headers, service, create_booking):
    booking_id = create_booking(customer_headers, (service, 3))

    resp = client.post(
        f"/api/bookings/{booking_id}/images",
        data={"booking_images": [(io.BytesIO(b"MZ"), "tool.exe")]},
        headers=customer_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400


def test_upload_requires_files(client, customer_headers, service, create_booking):
    booking_id = create_booking(customer_headers, (service, 3))
    resp = client.post(f"/api/bookings/{booking_id}/images", headers=customer_headers)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "No images uploaded"


@pytest.mark.parametrize("raw", ["NaN", "Infinity", "-Infinity"])
def test_feedback_rejects_non_finite_rating(client, customer_headers, service, create_booking, set_booking_status, raw):
    booking_id = create_booking(customer_headers, (service, 3))
    set_booking_status(booking_id, "completed")

    resp = client.post(
        f"/api/bookings/{booking_id}/feedback",
        data=f'{{"rating": {raw}}}',
        content_type="application/json",
        headers=customer_headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Rating must be between 1 and 5"


@pytest.mark.parametrize("field", ["actual_weight", "actual_price"])
def test_status_update_rejects_infinite_actuals(client, admin_headers, customer_headers, service, create_booking, field):
    booking_id = create_booking(customer_headers, (service, 3))

    resp = client.put(
        f"/api/bookings/{booking_id}/status",
        data=f'{{"status": "confirmed", "{field}": Infinity}}',
        content_type="application/json",
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert "must be a finite number" in resp.get_json()["message"]


def test_status_update_with_oversized_assignee_id(client, admin_headers, customer_headers, service, create_booking):
    booking_id = create_booking(customer_headers, (service, 3))

    resp = client.put(
        f"/api/bookings/{booking_id}/status",
        json={"status": "confirmed", "assigned_to": 99999999999999999999},
        headers=admin_headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Assigned user not found"


@pytest.mark.parametrize("service_id", [99999999999999999999, "99999999999999999999", -1, "abc"])
def test_booking_with_unusable_service_id(app, client, customer_headers, service_id):
    resp = client.post("/api/bookings", json=booking_payload((service_id, 3)), headers=customer_headers)
    assert resp.status_code == 400
    assert f"Service not found or inactive: {service_id}" in resp.get_json()["errors"]
    assert _count(app) == 0


def test_oversized_booking_id_is_404(client, customer_headers):
    assert client.get("/api/bookings/99999999999999999999", headers=customer_headers).status_code == 404
