"""HTTP tests for ownership and role guards on ``/api/v1/users``."""

from __future__ import annotations

from tests.helpers.auth import PASSWORD
from tests.helpers.http import assert_problem, url


class TestGetUser:
    def test_owner_can_read_self(self, client, student, auth_headers):
        resp = client.get(url(f"users/{student.id}"), headers=auth_headers(student))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["username"] == student.username

    def test_other_identity_is_forbidden(self, client, student, teacher, auth_headers):
        resp = client.get(url(f"users/{student.id}"), headers=auth_headers(teacher))

        assert_problem(resp, 403, "forbidden")

    def test_admin_reads_anyone(self, client, student, admin, auth_headers):
        resp = client.get(url(f"users/{student.id}"), headers=auth_headers(admin))

        assert resp.status_code == 200

    def test_admin_lookup_of_unknown_id_is_404(self, client, admin, auth_headers):
        resp = client.get(url("users/missing"), headers=auth_headers(admin))

        assert_problem(resp, 404, "not_found")

    def test_no_token(self, client, student):
        assert_problem(client.get(url(f"users/{student.id}")), 401, "unauthorized")


class TestDeactivate:
    def test_admin_deactivates_and_login_turns_403(self, client, admin, teacher, auth_headers):
        resp = client.post(url(f"users/{teacher.id}/deactivate"), headers=auth_headers(admin))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["is_active"] is False
        login = client.post(
            url("auth/login"), json={"username": teacher.username, "password": PASSWORD}
        )
        assert_problem(login, 403, "forbidden")

    def test_teacher_cannot_deactivate(self, client, teacher, student, auth_headers):
        resp = client.post(url(f"users/{student.id}/deactivate"), headers=auth_headers(teacher))

        assert_problem(resp, 403, "forbidden")

    def test_admin_cannot_deactivate_itself(self, client, admin, auth_headers):
        resp = client.post(url(f"users/{admin.id}/deactivate"), headers=auth_headers(admin))

        assert_problem(resp, 409, "conflict")

    def test_access_tokens_outlive_deactivation(self, client, admin, teacher, auth_headers):
        teacher_headers = auth_headers(teacher)
        client.post(url(f"users/{teacher.id}/deactivate"), headers=auth_headers(admin))

        assert client.get(url("auth/whoami"), headers=teacher_headers).status_code == 200
