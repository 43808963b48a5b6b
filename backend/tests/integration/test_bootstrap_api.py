"""HTTP tests for ``/api/v1/bootstrap``."""

from __future__ import annotations

from tests.helpers.http import assert_problem, url

ADMIN = {"username": "admin", "password": "Abc12345!"}


def test_status_then_init(client):
    assert client.get(url("bootstrap/status")).get_json()["data"] == {"initialized": False}

    resp = client.post(url("bootstrap/init"), json=ADMIN)

    assert resp.status_code == 201
    data = resp.get_json()["data"]
    assert data["identity"]["role"] == "admin"
    assert "password_hash" not in data["identity"]
    assert data["admin_token"]
    assert data["tokens"]["token_type"] == "Bearer"
    assert data["certificate_path"].endswith("admin.cert.json")
    assert client.get(url("bootstrap/status")).get_json()["data"] == {"initialized": True}


def test_second_init_conflicts(client):
    client.post(url("bootstrap/init"), json=ADMIN)

    body = assert_problem(
        client.post(url("bootstrap/init"), json={**ADMIN, "username": "other"}), 409, "conflict"
    )

    assert body["detail"] == "System is already initialized"


def test_second_init_with_weak_password_conflicts(client):
    client.post(url("bootstrap/init"), json=ADMIN)

    assert_problem(
        client.post(url("bootstrap/init"), json={"username": "other", "password": "weak"}),
        409,
        "conflict",
    )


def test_weak_password_is_422_with_every_gap(client):
    body = assert_problem(
        client.post(url("bootstrap/init"), json={"username": "admin", "password": "abc"}),
        422,
        "validation_error",
    )

    assert body["details"]["password"] == [
        "at least 8 characters",
        "uppercase letter",
        "number",
        "special character",
    ]


def test_missing_fields_are_422(client):
    body = assert_problem(client.post(url("bootstrap/init"), json={}), 422, "validation_error")

    assert set(body["details"]["errors"]) == {"username", "password"}


def test_admin_token_authenticates(client):
    admin_token = client.post(url("bootstrap/init"), json=ADMIN).get_json()["data"]["admin_token"]

    resp = client.get(url("auth/whoami"), headers={"Authorization": f"Bearer {admin_token}"})

    assert resp.status_code == 200
    assert resp.get_json()["data"]["token_type"] == "admin"
