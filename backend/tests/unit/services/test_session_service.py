"""Service tests for login, refresh rotation, logout and deactivation."""

from __future__ import annotations

from datetime import timedelta

import pytest

from fits.models import Identity, RefreshSession
from fits.services._shared.dto import TokenPairOut
from fits.services._shared.errors import (
    ConflictError,
    InactiveAccountError,
    InvalidCredentialsError,
    InvalidOrRevokedError,
    NotFoundError,
)
from fits.services.sessions import LoginIn, LogoutIn, RefreshIn
from tests.helpers.auth import PASSWORD


@pytest.fixture()
def service(container):
    return container.sessions


def _login(service, identity):
    return service.login(LoginIn(username=identity.username, password=PASSWORD))


class TestLogin:
    def test_issues_pair_and_session_row(self, service, teacher, session):
        out = _login(service, teacher)

        assert isinstance(out.tokens, TokenPairOut)
        assert out.tokens.token_type == "Bearer"
        assert out.tokens.expires_in == 15 * 60
        assert out.identity.id == teacher.id
        assert out.identity.last_login is not None
        row = session.query(RefreshSession).one()
        assert row.identity_id == teacher.id
        assert row.fingerprint == service.tokens.fingerprint(out.tokens.refresh_token)

    def test_access_token_claims(self, service, student):
        out = _login(service, student)

        claims = service.tokens.verify(out.tokens.access_token, {"access"})
        assert claims.subject_id == student.id
        assert claims.role == "student"

    def test_wrong_password(self, service, teacher):
        with pytest.raises(InvalidCredentialsError) as info:
            service.login(LoginIn(username=teacher.username, password="wrong"))

        assert info.value.public_message == "Invalid username or password"

    def test_unknown_user_looks_the_same(self, service, db):
        with pytest.raises(InvalidCredentialsError):
            service.login(LoginIn(username="ghost", password=PASSWORD))

    def test_unknown_user_spends_a_verification(self, service, db, monkeypatch):
        calls = []
        monkeypatch.setattr(service.credentials, "dummy_verify", calls.append)

        with pytest.raises(InvalidCredentialsError):
            service.login(LoginIn(username="ghost", password="pw"))

        assert calls == ["pw"]

    def test_inactive_account_after_correct_password(self, service, make_identity):
        identity = make_identity(role="teacher", is_active=False)

        with pytest.raises(InactiveAccountError):
            _login(service, identity)

    def test_inactive_account_with_wrong_password_is_still_invalid(self, service, make_identity):
        identity = make_identity(role="teacher", is_active=False)

        with pytest.raises(InvalidCredentialsError):
            service.login(LoginIn(username=identity.username, password="nope"))

    def test_multiple_sessions_per_identity(self, service, teacher, session):
        _login(service, teacher)
        _login(service, teacher)

        assert session.query(RefreshSession).filter_by(identity_id=teacher.id).count() == 2


class TestRefresh:
    def test_rotation_invalidates_the_old_token(self, service, teacher, session):
        first = _login(service, teacher).tokens

        second = service.refresh(RefreshIn(refresh_token=first.refresh_token))

        assert second.refresh_token != first.refresh_token
        assert session.query(RefreshSession).count() == 1
        with pytest.raises(InvalidOrRevokedError):
            service.refresh(RefreshIn(refresh_token=first.refresh_token))
        third = service.refresh(RefreshIn(refresh_token=second.refresh_token))
        assert third.access_token

    def test_access_token_is_not_a_refresh_token(self, service, teacher):
        pair = _login(service, teacher).tokens

        with pytest.raises(InvalidOrRevokedError):
            service.refresh(RefreshIn(refresh_token=pair.access_token))

    def test_garbage(self, service, db):
        with pytest.raises(InvalidOrRevokedError):
            service.refresh(RefreshIn(refresh_token="garbage"))

    def test_subject_mismatch(self, service, teacher, student):
        pair = _login(service, teacher).tokens

        with pytest.raises(InvalidOrRevokedError):
            service.refresh(RefreshIn(refresh_token=pair.refresh_token, subject_id=student.id))

    def test_matching_subject_is_accepted(self, service, teacher):
        pair = _login(service, teacher).tokens

        assert service.refresh(RefreshIn(refresh_token=pair.refresh_token, subject_id=teacher.id))

    def test_session_row_expiry_is_enforced(self, service, teacher, session):
        pair = _login(service, teacher).tokens
        row = session.query(RefreshSession).one()
        row.expires_at = row.created_at - timedelta(seconds=1)
        session.commit()

        with pytest.raises(InvalidOrRevokedError):
            service.refresh(RefreshIn(refresh_token=pair.refresh_token))

    def test_deactivated_identity_cannot_refresh(self, service, teacher, session):
        pair = _login(service, teacher).tokens
        session.get(Identity, teacher.id).is_active = False
        session.commit()

        with pytest.raises(InvalidOrRevokedError):
            service.refresh(RefreshIn(refresh_token=pair.refresh_token))


class TestLogout:
    def test_logout_named_session(self, service, teacher, session):
        first = _login(service, teacher).tokens
        _login(service, teacher)

        removed = service.logout(
            LogoutIn(identity_id=teacher.id, refresh_token=first.refresh_token)
        )

        assert removed == 1
        assert session.query(RefreshSession).count() == 1
        with pytest.raises(InvalidOrRevokedError):
            service.refresh(RefreshIn(refresh_token=first.refresh_token))

    def test_logout_without_token_ends_newest(self, service, teacher):
        _login(service, teacher)

        assert service.logout(LogoutIn(identity_id=teacher.id)) == 1
        assert service.logout(LogoutIn(identity_id=teacher.id)) == 0

    def test_logout_cannot_end_someone_elses_session(self, service, teacher, student, session):
        theirs = _login(service, teacher).tokens

        removed = service.logout(
            LogoutIn(identity_id=student.id, refresh_token=theirs.refresh_token)
        )

        assert removed == 0
        assert session.query(RefreshSession).count() == 1

    def test_logout_all(self, service, teacher, student, session):
        _login(service, teacher)
        _login(service, teacher)
        _login(service, student)

        assert service.logout_all(teacher.id) == 2
        assert session.query(RefreshSession).count() == 1
        assert service.logout_all(teacher.id) == 0


class TestIdentityLifecycle:
    def test_get_identity(self, service, student):
        out = service.get_identity(student.id)

        assert out.username == student.username
        assert out.teacher_ref == "t1"

    def test_get_identity_unknown(self, service, db):
        with pytest.raises(NotFoundError):
            service.get_identity("missing")

    def test_deactivate_drops_sessions_and_blocks_login(self, service, teacher, session):
        _login(service, teacher)

        out = service.deactivate(teacher.id)

        assert out.is_active is False
        assert session.query(RefreshSession).count() == 0
        with pytest.raises(InactiveAccountError):
            _login(service, teacher)

    def test_admin_cannot_be_deactivated(self, service, admin):
        with pytest.raises(ConflictError):
            service.deactivate(admin.id)

    def test_deactivate_unknown(self, service, db):
        with pytest.raises(NotFoundError):
            service.deactivate("missing")

    def test_purge_expired(self, service, teacher, session, freeze_time):
        with freeze_time("2026-01-01 12:00:00") as frozen:
            _login(service, teacher)
            frozen.tick(timedelta(days=8))
            _login(service, teacher)

            assert service.purge_expired() == 1
        assert session.query(RefreshSession).count() == 1
