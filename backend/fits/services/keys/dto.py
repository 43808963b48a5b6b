"""DTOs for the key service."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey


@dataclass(frozen=True, slots=True)
class KeyPair:
    """In-memory RSA keypair. Never serialized back to API callers."""

    private_key: RSAPrivateKey
    public_key: RSAPublicKey


@dataclass(frozen=True, slots=True)
class KeyPaths:
    """Filesystem locations of the persisted admin key material."""

    directory: Path
    private_key: Path
    public_key: Path
    certificate: Path
