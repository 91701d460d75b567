"""Provisioning endpoints: demo accounts and admin-only doctor creation."""

from medicare.exceptions import PlatformError
from medicare.services.provisioning_service import provisioning_service

from conftest import ADMIN, DOCTOR, login

NEW_DOCTOR = {"email": "dr.okafor@clinic.test", "password": "s3cure-pass", "fullName": "Dr. Ada Okafor"}


def test_demo_accounts_created_once(client):
    first = client.post("/api/functions/create-demo-accounts")
    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert [a["role"] for a in body["accounts"]] == ["admin", "doctor"]
    assert body["accounts"][0]["email"] == ADMIN["email"]

    second = client.post("/api/functions/create-demo-accounts")
    assert second.status_code == 400
    assert second.json()["success"] is False
    assert "already" in second.json()["message"].lower()

    admin_headers = login(client, **ADMIN)
    doctors = client.get("/api/doctors", headers=admin_headers).json()
    assert doctors["total"] == 1
    stats = client.get("/api/dashboard/admin", headers=admin_headers).json()["stats"]
    assert stats["doctors"] == 1


def test_demo_accounts_can_sign_in(client, demo_accounts):
    for account in demo_accounts:
        response = client.post(
            "/api/auth/login",
            json={"email": account["email"], "password": account["password"]},
        )
        assert response.status_code == 200
        assert response.json()["role"] == account["role"]


def test_create_doctor_requires_bearer(client, demo_accounts):
    response = client.post("/api/functions/create-doctor", json=NEW_DOCTOR)
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthorized"}


def test_create_doctor_rejects_invalid_token(client, demo_accounts):
    response = client.post(
        "/api/functions/create-doctor",
        json=NEW_DOCTOR,
        headers={"Authorization": "Bearer not-a-real-token"},
    )
    assert response.status_code == 401


def test_create_doctor_forbidden_for_doctor(client, doctor_headers):
    response = client.post("/api/functions/create-doctor", json=NEW_DOCTOR, headers=doctor_headers)
    assert response.status_code == 403
    assert response.json()["error"] == "Only admins can create doctor accounts"


def test_create_doctor_requires_fields(client, admin_headers):
    response = client.post(
        "/api/functions/create-doctor",
        json={"email": "x@clinic.test", "password": "secret1"},
        headers=admin_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Email, password, and full name are required"


def test_create_doctor_success(client, admin_headers):
    response = client.post("/api/functions/create-doctor", json=NEW_DOCTOR, headers=admin_headers)
    assert response.status_code == 200, response.text
    body = response.json()
    assert body["success"] is True
    assert body["doctor"]["email"] == NEW_DOCTOR["email"]
    assert body["doctor"]["fullName"] == NEW_DOCTOR["fullName"]

    doctors = client.get("/api/doctors", headers=admin_headers).json()["doctors"]
    assert NEW_DOCTOR["email"] in [d["email"] for d in doctors]

    headers = login(client, NEW_DOCTOR["email"], NEW_DOCTOR["password"])
    me = client.get("/api/auth/me", headers=headers).json()
    assert me["role"] == "doctor"
    assert me["full_name"] == NEW_DOCTOR["fullName"]


def test_create_doctor_duplicate_email(client, admin_headers):
    payload = dict(NEW_DOCTOR, email=DOCTOR["email"])
    response = client.post("/api/functions/create-doctor", json=payload, headers=admin_headers)
    assert response.status_code == 400
    assert "already been registered" in response.json()["error"]


def test_create_doctor_rolls_back_account_when_role_fails(client, admin_headers, monkeypatch):
    async def failing_assign_role(user_id, role):
        raise PlatformError("Failed to assign role: simulated outage")

    monkeypatch.setattr(provisioning_service, "assign_role", failing_assign_role)

    response = client.post("/api/functions/create-doctor", json=NEW_DOCTOR, headers=admin_headers)
    assert response.status_code == 400
    assert "simulated outage" in response.json()["error"]

    # The half-created account was removed
    login_attempt = client.post(
        "/api/auth/login",
        json={"email": NEW_DOCTOR["email"], "password": NEW_DOCTOR["password"]},
    )
    assert login_attempt.status_code == 401

    monkeypatch.undo()
    retry = client.post("/api/functions/create-doctor", json=NEW_DOCTOR, headers=admin_headers)
    assert retry.status_code == 200


def test_create_doctor_rolls_back_account_when_profile_fails(client, admin_headers, monkeypatch):
    async def failing_insert_profile(user_id, full_name):
        raise PlatformError("Failed to create profile: simulated outage")

    monkeypatch.setattr(provisioning_service, "insert_profile", failing_insert_profile)

    response = client.post("/api/functions/create-doctor", json=NEW_DOCTOR, headers=admin_headers)
    assert response.status_code == 400

    login_attempt = client.post(
        "/api/auth/login",
        json={"email": NEW_DOCTOR["email"], "password": NEW_DOCTOR["password"]},
    )
    assert login_attempt.status_code == 401


def test_preflight(client):
    response = client.options("/api/functions/create-doctor")
    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
