"""One-time creation of the administrator identity."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any

from fits.models.identity import ROLE_ADMIN, Identity
from fits.services._shared.base import BaseService, UowFactory
from fits.services._shared.dto import IdentityOut, TokenLifetimes
from fits.services._shared.errors import (
    AlreadyInitializedError,
    SignatureMismatchError,
    UniqueViolation,
    UsernameTakenError,
)
from fits.services._shared.ports import TOKEN_ADMIN, TokenCodec
from fits.services.bootstrap.dto import BootstrapIn, BootstrapOut
from fits.services.credentials import CredentialService
from fits.services.keys import KeyService
from fits.services.sessions import open_session

log = logging.getLogger(__name__)

SINGLE_ADMIN_INDEX = "uq_users_single_admin"
USERNAME_CONSTRAINT = "uq_users_username"


def canonical_json(payload: Mapping[str, Any]) -> bytes:
    """Deterministic JSON encoding used as the signed certificate body."""
    return json.dumps(dict(payload), sort_keys=True, separators=(",", ":")).encode("utf-8")


class BootstrapService(BaseService):
    """
    Uninitialized -> Initialized, exactly once.

    The partial unique index ``uq_users_single_admin`` is the real guard: two
    concurrent :meth:`init` calls may both pass the existence check, but only
    one admin row can be inserted; the loser's flush fails and is reported as
    :class:`AlreadyInitializedError`.
    """

    def __init__(
        self,
        *,
        credentials: CredentialService,
        tokens: TokenCodec,
        keys: KeyService,
        lifetimes: TokenLifetimes | None = None,
        uow_factory: UowFactory | None = None,
        ro_uow_factory: UowFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        super().__init__(uow_factory=uow_factory, ro_uow_factory=ro_uow_factory, clock=clock)
        self.credentials = credentials
        self.tokens = tokens
        self.keys = keys
        self.lifetimes = lifetimes or TokenLifetimes()

    def is_initialized(self) -> bool:
        with self.ro_uow() as uow:
            return uow.identities.admin_exists()

    def init(self, dto: BootstrapIn) -> BootstrapOut:
        """
        Create the administrator, its keypair, certificate and first session.

        :param dto: Admin credentials.
        :returns: Identity, admin token, token pair and artifact paths.
        :raises AlreadyInitializedError: An admin already exists.
        :raises WeakSecretError: Password fails the strength policy.
        :raises InternalServiceError: Key material could not be written; the
            admin row is rolled back.
        """
        # Checked before the payload so an initialized system answers every
        # call the same way. The unique index below is authoritative.
        if self.is_initialized():
            raise AlreadyInitializedError()

        username = self.require_username(dto.username)
        self.credentials.validate_strength(dto.password)
        password_hash = self.credentials.hash(dto.password)
        keypair = self.keys.generate_keypair()
        now = self.now()

        with self.rw_uow() as uow:
            if uow.identities.admin_exists():
                raise AlreadyInitializedError()
            try:
                admin = uow.identities.add(
                    Identity(
                        username=username,
                        email=dto.email,
                        password_hash=password_hash,
                        role=ROLE_ADMIN,
                        is_active=True,
                    )
                )
            except UniqueViolation as exc:
                if exc.constraint == USERNAME_CONSTRAINT:
                    raise UsernameTakenError() from exc
                log.warning("Bootstrap lost the race", extra={"event": "bootstrap"})
                raise AlreadyInitializedError() from exc

            paths = self.keys.persist_keypair(keypair)
            body = {
                "identity_id": admin.id,
                "username": admin.username,
                "role": ROLE_ADMIN,
                "public_key_sha256": self.keys.public_key_fingerprint(keypair.public_key),
                "issued_at": now.isoformat(),
            }
            signature = self.keys.sign(canonical_json(body), keypair.private_key)
            certificate = {**body, "signature": signature}
            certificate_path = self.keys.write_certificate(certificate)

            pair = open_session(uow, self.tokens, self.lifetimes, admin, now)
            admin_token = self.tokens.issue(admin.id, ROLE_ADMIN, TOKEN_ADMIN, self.lifetimes.admin)
            identity = IdentityOut.from_model(admin)

        log.info("System bootstrapped", extra={"event": "bootstrap", "identity_id": identity.id})
        return BootstrapOut(
            identity=identity,
            admin_token=admin_token,
            tokens=pair,
            public_key_path=str(paths.public_key),
            certificate_path=str(certificate_path),
        )

    def verify_certificate(self) -> bool:
        """
        Re-check the stored admin certificate against the stored public key.

        :returns: ``True`` when signature and key fingerprint both match and
            the certificate names the stored administrator.
        :raises InternalServiceError: Certificate or key file is missing.
        """
        certificate = self.keys.load_certificate()
        public_key = self.keys.load_public_key()
        signature = certificate.pop("signature", "")
        with self.ro_uow() as uow:
            admin = uow.identities.get_admin()
            if admin is None or certificate.get("identity_id") != admin.id:
                return False
        if certificate.get("public_key_sha256") != self.keys.public_key_fingerprint(public_key):
            return False
        try:
            self.keys.verify(canonical_json(certificate), str(signature), public_key)
        except SignatureMismatchError:
            return False
        return True
