"""Smoke tests for health, error envelopes and request correlation."""

from __future__ import annotations

from tests.helpers.http import assert_problem, url


def test_health_ok(client):
    resp = client.get(url("health"))

    assert resp.status_code == 200
    assert resp.get_json()["db"] == "ok"


def test_unknown_route_is_a_problem(client):
    body = assert_problem(client.get(url("nope")), 404, "not_found")

    assert body["instance"] == "/api/v1/nope"


def test_request_id_is_echoed(client):
    resp = client.get(url("health"), headers={"X-Request-ID": "req-42"})

    assert resp.headers["X-Request-ID"] == "req-42"


def test_request_id_is_generated_per_request(client):
    first = client.get(url("health")).headers["X-Request-ID"]
    second = client.get(url("health")).headers["X-Request-ID"]

    assert first and second and first != second


def test_method_not_allowed(client):
    assert_problem(client.get(url("auth/login")), 405, "method_not_allowed")
