"""DTOs for the credential service."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class PasswordPolicy:
    """
    Strength requirements evaluated by :meth:`CredentialService.validate_strength`.

    :param min_length: Minimum number of characters.
    :param require_upper: Require at least one uppercase letter.
    :param require_lower: Require at least one lowercase letter.
    :param require_digit: Require at least one digit.
    :param require_symbol: Require at least one punctuation or symbol character.
    """

    min_length: int = 8
    require_upper: bool = True
    require_lower: bool = True
    require_digit: bool = True
    require_symbol: bool = True

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> PasswordPolicy:
        """Build a policy from ``PASSWORD_*`` configuration keys."""
        return cls(
            min_length=int(config.get("PASSWORD_MIN_LENGTH", 8)),
            require_upper=bool(config.get("PASSWORD_REQUIRE_UPPER", True)),
            require_lower=bool(config.get("PASSWORD_REQUIRE_LOWER", True)),
            require_digit=bool(config.get("PASSWORD_REQUIRE_DIGIT", True)),
            require_symbol=bool(config.get("PASSWORD_REQUIRE_SYMBOL", True)),
        )
