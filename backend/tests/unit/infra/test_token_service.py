"""Unit tests for :class:`fits.infra.jwt.JWTTokenService`."""

from __future__ import annotations

from datetime import timedelta

import jwt
import pytest

from fits.infra.jwt import JWTTokenService
from fits.services._shared.errors import (
    BadSignatureError,
    InvalidTokenError,
    MalformedTokenError,
    TokenExpiredError,
    TokenTypeError,
)

SECRET = "unit-test-signing-secret-0123456789abcdef"


@pytest.fixture()
def tokens() -> JWTTokenService:
    return JWTTokenService(SECRET)


class TestConstruction:
    @pytest.mark.parametrize("secret", ["", "short", b"x" * 31])
    def test_rejects_short_secret(self, secret):
        with pytest.raises(ValueError):
            JWTTokenService(secret)

    def test_accepts_bytes(self):
        assert JWTTokenService(b"k" * 32).secret == b"k" * 32


class TestIssueVerify:
    def test_access_token_carries_claims(self, tokens):
        token = tokens.issue("id-1", "teacher", "access", timedelta(minutes=15))

        claims = tokens.verify(token, {"access"})

        assert claims.subject_id == "id-1"
        assert claims.role == "teacher"
        assert claims.token_type == "access"
        assert claims.expires_at - claims.issued_at == timedelta(minutes=15)

    def test_each_token_has_a_unique_jti(self, tokens):
        a = tokens.issue("id-1", "student", "refresh", timedelta(days=7))
        b = tokens.issue("id-1", "student", "refresh", timedelta(days=7))

        assert a != b
        assert tokens.verify(a, {"refresh"}).jti != tokens.verify(b, {"refresh"}).jti

    def test_unknown_type_is_refused_at_issue(self, tokens):
        with pytest.raises(ValueError):
            tokens.issue("id-1", "student", "session", timedelta(minutes=1))

    def test_non_positive_ttl_is_refused(self, tokens):
        with pytest.raises(ValueError):
            tokens.issue("id-1", "student", "access", timedelta(0))

    def test_wrong_type_is_rejected(self, tokens):
        refresh = tokens.issue("id-1", "student", "refresh", timedelta(days=7))

        with pytest.raises(TokenTypeError):
            tokens.verify(refresh, {"access", "admin"})

    def test_expired_token(self, tokens, freeze_time):
        with freeze_time("2026-01-01 12:00:00") as frozen:
            token = tokens.issue("id-1", "student", "access", timedelta(minutes=15))
            frozen.tick(timedelta(minutes=16))

            with pytest.raises(TokenExpiredError):
                tokens.verify(token, {"access"})

    def test_foreign_secret_is_a_bad_signature(self, tokens):
        other = JWTTokenService("another-signing-secret-0123456789abcdef")
        token = other.issue("id-1", "admin", "access", timedelta(minutes=5))

        with pytest.raises(BadSignatureError):
            tokens.verify(token, {"access"})

    def test_tampered_payload_is_rejected(self, tokens):
        token = tokens.issue("id-1", "student", "access", timedelta(minutes=5))
        forged = jwt.encode(
            {**jwt.decode(token, options={"verify_signature": False}), "role": "admin"},
            "attacker-controlled-secret-0123456789abcdef",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            tokens.verify(forged, {"access"})

    def test_alg_none_is_malformed(self, tokens):
        claims = jwt.decode(
            tokens.issue("id-1", "student", "access", timedelta(minutes=5)),
            options={"verify_signature": False},
        )
        unsigned = jwt.encode(claims, None, algorithm="none")

        with pytest.raises(MalformedTokenError):
            tokens.verify(unsigned, {"access"})

    def test_other_hmac_algorithm_with_same_secret_is_malformed(self, tokens):
        claims = jwt.decode(
            tokens.issue("id-1", "student", "access", timedelta(minutes=5)),
            options={"verify_signature": False},
        )
        resigned = jwt.encode(claims, SECRET, algorithm="HS512")

        with pytest.raises(MalformedTokenError):
            tokens.verify(resigned, {"access"})

    @pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c"])
    def test_garbage_is_malformed(self, tokens, garbage):
        with pytest.raises(MalformedTokenError):
            tokens.verify(garbage, {"access"})

    def test_missing_type_claim_is_malformed(self, tokens):
        token = jwt.encode(
            {"sub": "id-1", "role": "student", "jti": "x", "iat": 0, "nbf": 0, "exp": 2**31},
            SECRET,
            algorithm="HS256",
        )

        with pytest.raises(MalformedTokenError):
            tokens.verify(token, {"access"})


class TestHelpers:
    def test_fingerprint_is_stable_sha256_hex(self, tokens):
        fp = tokens.fingerprint("abc")

        assert fp == tokens.fingerprint("abc")
        assert len(fp) == 64
        assert fp != tokens.fingerprint("abd")

    def test_peek_subject_does_not_verify(self, tokens):
        other = JWTTokenService("another-signing-secret-0123456789abcdef")
        token = other.issue("id-9", "student", "access", timedelta(minutes=5))

        assert tokens.peek_subject(token) == "id-9"
        assert tokens.peek_subject("garbage") is None
