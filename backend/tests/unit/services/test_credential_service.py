"""Unit tests for password hashing and the strength policy."""

from __future__ import annotations

import pytest

from fits.services._shared.errors import CredentialMismatchError, WeakSecretError
from fits.services.credentials import BCRYPT_MAX_BYTES, CredentialService, PasswordPolicy


@pytest.fixture()
def credentials() -> CredentialService:
    return CredentialService(rounds=4)


class TestHashing:
    def test_hash_then_verify(self, credentials):
        hashed = credentials.hash("Abc12345!")

        assert hashed.startswith("$2")
        credentials.verify("Abc12345!", hashed)

    def test_same_password_hashes_differently(self, credentials):
        assert credentials.hash("Abc12345!") != credentials.hash("Abc12345!")

    def test_wrong_password(self, credentials):
        hashed = credentials.hash("Abc12345!")

        with pytest.raises(CredentialMismatchError):
            credentials.verify("Abc12345?", hashed)

    def test_malformed_hash_is_a_mismatch(self, credentials):
        with pytest.raises(CredentialMismatchError):
            credentials.verify("Abc12345!", "not-a-bcrypt-hash")

    def test_empty_password_cannot_be_hashed(self, credentials):
        with pytest.raises(WeakSecretError):
            credentials.hash("")

    def test_overlong_password_is_refused_not_truncated(self, credentials):
        with pytest.raises(WeakSecretError) as info:
            credentials.hash("a" * (BCRYPT_MAX_BYTES + 1))

        assert info.value.missing == (f"at most {BCRYPT_MAX_BYTES} bytes",)

    def test_dummy_verify_never_raises(self, credentials):
        credentials.dummy_verify("anything")
        credentials.dummy_verify("")

    @pytest.mark.parametrize("rounds", [3, 32])
    def test_cost_bounds(self, rounds):
        with pytest.raises(ValueError):
            CredentialService(rounds=rounds)


class TestStrength:
    def test_strong_password_passes(self, credentials):
        credentials.validate_strength("Xyz98765!")

    def test_reports_every_missing_requirement_at_once(self, credentials):
        with pytest.raises(WeakSecretError) as info:
            credentials.validate_strength("abc")

        err = info.value
        assert err.missing == (
            "at least 8 characters",
            "uppercase letter",
            "number",
            "special character",
        )
        assert str(err) == (
            "password must contain at least 8 characters, uppercase letter, "
            "number and special character"
        )
        assert err.details == {"password": list(err.missing)}
        assert err.kind == "validation"

    def test_single_missing_requirement(self, credentials):
        with pytest.raises(WeakSecretError) as info:
            credentials.validate_strength("Abcdefgh!")

        assert str(info.value) == "password must contain number"

    def test_empty_password(self, credentials):
        with pytest.raises(WeakSecretError) as info:
            credentials.validate_strength("")

        assert "at least 8 characters" in info.value.missing

    def test_common_password_is_refused(self, credentials):
        with pytest.raises(WeakSecretError) as info:
            credentials.validate_strength("P@ssw0rd1")

        assert info.value.missing == ("not a commonly used password",)

    def test_unicode_symbols_count_as_special(self, credentials):
        credentials.validate_strength("Abcdefg1€")

    def test_policy_override(self, credentials):
        relaxed = PasswordPolicy(min_length=4, require_upper=False, require_symbol=False)

        credentials.validate_strength("abc1", relaxed)

    def test_policy_from_config(self):
        policy = PasswordPolicy.from_config(
            {"PASSWORD_MIN_LENGTH": 12, "PASSWORD_REQUIRE_SYMBOL": False}
        )

        assert policy.min_length == 12
        assert policy.require_symbol is False
        assert policy.require_upper is True
