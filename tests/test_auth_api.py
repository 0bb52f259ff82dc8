from conftest import PASSWORD, png_file

REGISTRATION = {
    "first_name": "Asha",
    "last_name": "Patil",
    "email": "Asha@Example.com",
    "phone": "9876543210",
    "password": "recycle42",
}


def test_register_returns_token_and_user(client):
    resp = client.post("/api/auth/register", json=REGISTRATION)
    assert resp.status_code == 201

    body = resp.get_json()
    assert body["token"]
    assert body["user"]["email"] == "asha@example.com"
    assert body["user"]["role"] == "customer"
    assert "password_hash" not in body["user"]


def test_register_duplicate_email(client):
    client.post("/api/auth/register", json=REGISTRATION)
    resp = client.post("/api/auth/register", json={**REGISTRATION, "email": "asha@example.com"})
    assert resp.status_code == 409


def test_register_lists_every_problem(client):
    resp = client.post("/api/auth/register", json={"email": "nope", "phone": "12", "password": "short"})
    assert resp.status_code == 400

    errors = resp.get_json()["errors"]
    assert "First name is required" in errors
    assert "Please enter a valid email" in errors
    assert "Please enter a valid 10-digit phone number" in errors
    assert "Password must be at least 8 characters" in errors
    assert "Password must include at least 1 number" in errors


def test_register_cannot_self_assign_admin(client):
    resp = client.post("/api/auth/register", json={**REGISTRATION, "role": "admin"})
    assert resp.get_json()["user"]["role"] == "customer"


def test_login(client, customer):
    resp = client.post("/api/auth/login", json={"email": "CUSTOMER@example.com", "password": PASSWORD})
    assert resp.status_code == 200
    assert resp.get_json()["user"]["id"] == customer

    token = resp.get_json()["token"]
    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.get_json()["user"]["email"] == "customer@example.com"


def test_login_bad_password(client, customer):
    resp = client.post("/api/auth/login", json={"email": "customer@example.com", "password": "wrong-pass1"})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Invalid credentials"


def test_login_unknown_email(client):
    resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})
    assert resp.status_code == 401


def test_login_missing_fields(client):
    assert client.post("/api/auth/login", json={}).status_code == 400


def test_login_deactivated(client, make_user):
    make_user("gone@example.com", is_active=False)
    resp = client.post("/api/auth/login", json={"email": "gone@example.com", "password": PASSWORD})
    assert resp.status_code == 401
    assert resp.get_json()["message"] == "Account is deactivated"


def test_update_profile(client, customer_headers):
    resp = client.put(
        "/api/auth/profile",
        json={
            "first_name": "Ravi",
            "phone": "9123456780",
            "address": {"street": "4 Lake Rd", "city": "Pune", "state": "MH", "pincode": "411002"},
        },
        headers=customer_headers,
    )
    assert resp.status_code == 200

    user = resp.get_json()["user"]
    assert user["first_name"] == "Ravi"
    assert user["phone"] == "9123456780"
    assert user["address"]["city"] == "Pune"


def test_update_profile_rejects_bad_phone(client, customer_headers):
    resp = client.put("/api/auth/profile", json={"first_name": "Ravi", "phone": "123"}, headers=customer_headers)
    assert resp.status_code == 400

    me = client.get("/api/auth/me", headers=customer_headers).get_json()["user"]
    assert me["first_name"] == "Test"


def test_update_profile_image(client, customer_headers):
    resp = client.put(
        "/api/auth/profile",
        data={"profile_image": png_file()},
        headers=customer_headers,
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    assert resp.get_json()["user"]["profile_image"].startswith("/uploads/users/profile-")


def test_change_password(client, customer_headers):
    resp = client.put(
        "/api/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "greener99"},
        headers=customer_headers,
    )
    assert resp.status_code == 200

    login = client.post("/api/auth/login", json={"email": "customer@example.com", "password": "greener99"})
    assert login.status_code == 200


def test_change_password_wrong_current(client, customer_headers):
    resp = client.put(
        "/api/auth/change-password",
        json={"current_password": "nope", "new_password": "greener99"},
        headers=customer_headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Current password is incorrect"


def test_change_password_policy(client, customer_headers):
    resp = client.put(
        "/api/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "abc"},
        headers=customer_headers,
    )
    assert resp.status_code == 400
    assert resp.get_json()["errors"]
