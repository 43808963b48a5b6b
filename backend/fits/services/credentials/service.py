"""Password hashing, verification and strength policy (bcrypt)."""

from __future__ import annotations

import unicodedata
from contextlib import suppress

import bcrypt

from fits.services._shared.errors import CredentialMismatchError, WeakSecretError
from fits.services.credentials.dto import PasswordPolicy

# bcrypt silently ignores input past 72 bytes; refuse it instead.
BCRYPT_MAX_BYTES = 72
DEFAULT_ROUNDS = 12

COMMON_PASSWORDS = frozenset(
    {
        "password",
        "123456",
        "12345678",
        "qwerty",
        "abc123",
        "monkey",
        "1234567",
        "letmein",
        "trustno1",
        "dragon",
        "baseball",
        "111111",
        "iloveyou",
        "master",
        "sunshine",
        "ashley",
        "bailey",
        "passw0rd",
        "shadow",
        "123123",
        "654321",
        "superman",
        "qazwsx",
        "michael",
        "football",
        "password1!",
        "p@ssw0rd",
        "p@ssw0rd1",
        "welcome1!",
    }
)


def _join_requirements(items: list[str]) -> str:
    if len(items) == 1:
        return items[0]
    return ", ".join(items[:-1]) + " and " + items[-1]


class CredentialService:
    """
    Hash and check passwords.

    The service is stateless apart from its cost factor and a fixed dummy
    hash used to equalize the cost of "unknown user" and "wrong password".

    Parameters
    ----------
    rounds:
        bcrypt cost factor (log2 of iterations). 12 costs a few hundred
        milliseconds on commodity hardware; tests use 4.
    policy:
        Default :class:`PasswordPolicy` for :meth:`validate_strength`.
    """

    def __init__(self, *, rounds: int = DEFAULT_ROUNDS, policy: PasswordPolicy | None = None):
        if not 4 <= rounds <= 31:
            raise ValueError("bcrypt rounds must be between 4 and 31.")
        self.rounds = rounds
        self.policy = policy or PasswordPolicy()
        self._dummy_hash = bcrypt.hashpw(b"fits-timing-equalizer", bcrypt.gensalt(rounds))

    # ------------------------------- Hashing ---------------------------------

    def hash(self, password: str) -> str:
        """
        Return a salted bcrypt hash of ``password``.

        :raises WeakSecretError: When empty or longer than 72 UTF-8 bytes.
        """
        raw = self._encode(password)
        return bcrypt.hashpw(raw, bcrypt.gensalt(self.rounds)).decode("ascii")

    def verify(self, password: str, password_hash: str) -> None:
        """
        Check ``password`` against ``password_hash``.

        :raises CredentialMismatchError: On mismatch, including malformed
            hashes and inputs bcrypt would refuse.
        """
        try:
            raw = self._encode(password)
            ok = bcrypt.checkpw(raw, password_hash.encode("ascii"))
        except (WeakSecretError, ValueError, UnicodeEncodeError, AttributeError):
            ok = False
        if not ok:
            raise CredentialMismatchError()

    def dummy_verify(self, password: str) -> None:
        """Spend one verification so unknown users cost as much as known ones."""
        candidate = (password or "").encode("utf-8")[:BCRYPT_MAX_BYTES]
        with suppress(ValueError):
            bcrypt.checkpw(candidate, self._dummy_hash)

    # ------------------------------- Strength --------------------------------

    def validate_strength(self, password: str, policy: PasswordPolicy | None = None) -> None:
        """
        Evaluate every requirement in one pass and report all that are unmet.

        :param password: Candidate password.
        :param policy: Overrides the service default policy.
        :raises WeakSecretError: With ``missing`` listing each unmet rule.
        """
        policy = policy or self.policy
        password = password or ""
        has_upper = has_lower = has_digit = has_symbol = False
        length = 0
        for ch in password:
            length += 1
            if ch.isupper():
                has_upper = True
            elif ch.islower():
                has_lower = True
            elif ch.isdigit():
                has_digit = True
            elif unicodedata.category(ch)[0] in ("P", "S"):
                has_symbol = True

        missing: list[str] = []
        if length < policy.min_length:
            missing.append(f"at least {policy.min_length} characters")
        if policy.require_upper and not has_upper:
            missing.append("uppercase letter")
        if policy.require_lower and not has_lower:
            missing.append("lowercase letter")
        if policy.require_digit and not has_digit:
            missing.append("number")
        if policy.require_symbol and not has_symbol:
            missing.append("special character")
        if len(password.encode("utf-8")) > BCRYPT_MAX_BYTES:
            missing.append(f"at most {BCRYPT_MAX_BYTES} bytes")
        if password.lower() in COMMON_PASSWORDS:
            missing.append("not a commonly used password")

        if missing:
            raise WeakSecretError(
                "password must contain " + _join_requirements(missing), missing=missing
            )

    # ------------------------------- Internals -------------------------------

    @staticmethod
    def _encode(password: str) -> bytes:
        if not isinstance(password, str) or not password:
            raise WeakSecretError("password must not be empty", missing=["non-empty password"])
        raw = password.encode("utf-8")
        if len(raw) > BCRYPT_MAX_BYTES:
            raise WeakSecretError(
                f"password must be at most {BCRYPT_MAX_BYTES} bytes",
                missing=[f"at most {BCRYPT_MAX_BYTES} bytes"],
            )
        return raw
