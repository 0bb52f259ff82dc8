import smtplib

import pytest

from models.contact import Contact

MESSAGE = {
    "name": "Asha",
    "email": "asha@example.com",
    "phone": "9876543210",
    "subject": "Bulk pickup",
    "message": "Can you collect 300 kg of cardboard from our office?",
    "category": "Service Request",
}


@pytest.fixture
def outbox(monkeypatch):
    sent = []

    def fake_send(to, subject, body, html=None):
        sent.append((to, subject))
        return True, None

    monkeypatch.setattr("utils.notifications.send_email", fake_send)
    return sent


@pytest.fixture
def contact_id(client, outbox):
    resp = client.post("/api/contact", json=MESSAGE)
    assert resp.status_code == 201
    return resp.get_json()["contact_id"]


def test_submit_without_email_configured(app, client):
    resp = client.post("/api/contact", json=MESSAGE)
    assert resp.status_code == 201
    assert resp.get_json()["message"].startswith("Thank you for your message")

    with app.app_context():
        contact = Contact.query.one()
        assert contact.status == "new"
        assert contact.priority == "medium"
        assert contact.is_read is False


def test_submit_notifies_submitter_and_support(app, client, outbox):
    app.config["SUPPORT_EMAIL"] = "support@example.com"
    client.post("/api/contact", json=MESSAGE)

    assert [to for to, _ in outbox] == ["asha@example.com", "support@example.com"]
    assert outbox[1][1] == "New Contact Form Submission - Service Request"


def test_smtp_failure_does_not_fail_submission(app, client, monkeypatch):
    app.config.update(SMTP_HOST="smtp.invalid", SMTP_FROM_EMAIL="noreply@example.com")

    def refuse(*args, **kwargs):
        raise OSError("connection refused")

    monkeypatch.setattr(smtplib, "SMTP", refuse)

    resp = client.post("/api/contact", json=MESSAGE)
    assert resp.status_code == 201
    with app.app_context():
        assert Contact.query.count() == 1


def test_submit_validation(client):
    resp = client.post("/api/contact", json={"email": "bad", "phone": "1", "category": "Spam"})
    assert resp.status_code == 400

    errors = resp.get_json()["errors"]
    assert "Name is required" in errors
    assert "Please enter a valid email" in errors
    assert "Please enter a valid 10-digit phone number" in errors
    assert any(e.startswith("Category must be one of") for e in errors)


def test_listing_is_admin_only(client, customer_headers):
    assert client.get("/api/contact", headers=customer_headers).status_code == 403


def test_listing_marks_messages_read(client, admin_headers, contact_id):
    body = client.get("/api/contact", headers=admin_headers).get_json()
    assert [c["id"] for c in body["contacts"]] == [contact_id]
    assert body["contacts"][0]["is_read"] is False

    again = client.get("/api/contact", headers=admin_headers).get_json()
    assert again["contacts"][0]["is_read"] is True


def test_listing_filters(client, admin_headers, contact_id):
    assert client.get("/api/contact?category=Complaint", headers=admin_headers).get_json()["contacts"] == []
    assert len(client.get("/api/contact?search=cardboard", headers=admin_headers).get_json()["contacts"]) == 1
    assert client.get("/api/contact?status=lost", headers=admin_headers).status_code == 400


def test_update_status_and_priority(client, admin, admin_headers, contact_id):
    resp = client.put(
        f"/api/contact/{contact_id}/status",
        json={"status": "in_progress", "priority": "high", "assigned_to": admin},
        headers=admin_headers,
    )
    assert resp.status_code == 200

    contact = resp.get_json()["contact"]
    assert contact["status"] == "in_progress"
    assert contact["priority"] == "high"
    assert contact["assigned_to"]["id"] == admin


def test_update_status_rejects_non_admin_assignee(client, admin_headers, customer, contact_id):
    resp = client.put(f"/api/contact/{contact_id}/status", json={"assigned_to": customer}, headers=admin_headers)
    assert resp.status_code == 400


def test_update_status_needs_a_change(client, admin_headers, contact_id):
    resp = client.put(f"/api/contact/{contact_id}/status", json={}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Nothing to update"


def test_respond_resolves_and_emails(client, admin, admin_headers, contact_id, outbox):
    resp = client.post(
        f"/api/contact/{contact_id}/respond",
        json={"message": "Yes, we can schedule a bulk pickup on Friday."},
        headers=admin_headers,
    )
    assert resp.status_code == 200

    contact = resp.get_json()["contact"]
    assert contact["status"] == "resolved"
    assert contact["response"]["responded_by"]["id"] == admin
    assert outbox[-1] == ("asha@example.com", "Re: Bulk pickup")


def test_respond_requires_message(client, admin_headers, contact_id):
    resp = client.post(f"/api/contact/{contact_id}/respond", json={"message": "  "}, headers=admin_headers)
    assert resp.status_code == 400


def test_contact_stats(client, admin_headers, contact_id):
    body = client.get("/api/contact/stats/dashboard", headers=admin_headers).get_json()
    assert body["stats"]["total"] == 1
    assert body["stats"]["new"] == 1
    assert body["category_stats"] == [{"category": "Service Request", "count": 1}]


def test_get_missing_contact(client, admin_headers):
    assert client.get("/api/contact/77", headers=admin_headers).status_code == 404


@pytest.mark.parametrize("assignee", [99999999999999999999, "99999999999999999999", 0])
def test_update_status_rejects_unusable_assignee_id(client, admin_headers, contact_id, assignee):
    resp = client.put(f"/api/contact/{contact_id}/status", json={"assigned_to": assignee}, headers=admin_headers)
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Assigned user must be an admin"


def test_get_oversized_contact_id(client, admin_headers):
    assert client.get("/api/contact/99999999999999999999", headers=admin_headers).status_code == 404
