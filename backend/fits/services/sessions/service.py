"""Login, refresh-token rotation and logout."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from fits.models.identity import Identity
from fits.services._shared.base import BaseService, UowFactory
from fits.services._shared.dto import IdentityOut, TokenLifetimes, TokenPairOut
from fits.services._shared.errors import (
    ConflictError,
    CredentialMismatchError,
    InactiveAccountError,
    InvalidCredentialsError,
    InvalidOrRevokedError,
    InvalidTokenError,
    NotFoundError,
)
from fits.services._shared.ports import TOKEN_ACCESS, TOKEN_REFRESH, TokenCodec, TokenIssuer
from fits.services.credentials import CredentialService
from fits.services.sessions.dto import LoginIn, LoginOut, LogoutIn, RefreshIn
from fits.uow.base import UnitOfWork

log = logging.getLogger(__name__)


def open_session(
    uow: UnitOfWork,
    issuer: TokenIssuer,
    lifetimes: TokenLifetimes,
    identity: Identity,
    now: datetime,
) -> TokenPairOut:
    """
    Issue an access/refresh pair and persist the refresh fingerprint.

    Runs inside the caller's unit of work so the session row commits or rolls
    back together with whatever else the use-case wrote.
    """
    access = issuer.issue(identity.id, identity.role, TOKEN_ACCESS, lifetimes.access)
    refresh = issuer.issue(identity.id, identity.role, TOKEN_REFRESH, lifetimes.refresh)
    uow.sessions.create(
        identity_id=identity.id,
        fingerprint=issuer.fingerprint(refresh),
        expires_at=now + lifetimes.refresh,
    )
    return TokenPairOut(
        access_token=access,
        refresh_token=refresh,
        expires_in=int(lifetimes.access.total_seconds()),
    )


class SessionService(BaseService):
    """
    Authentication lifecycle service (login / refresh / logout).

    Sessions are rows keyed by the SHA-256 fingerprint of the refresh token.
    Rotation deletes the presented row and inserts its successor in one
    transaction; a fingerprint that no longer matches a live row is treated
    as reuse of a rotated or revoked token.
    """

    def __init__(
        self,
        *,
        credentials: CredentialService,
        tokens: TokenCodec,
        lifetimes: TokenLifetimes | None = None,
        uow_factory: UowFactory | None = None,
        ro_uow_factory: UowFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        :param credentials: Password verification.
        :param tokens: Token adapter implementing both issuer and verifier ports.
        :param lifetimes: Access/refresh lifetimes.
        """
        super().__init__(uow_factory=uow_factory, ro_uow_factory=ro_uow_factory, clock=clock)
        self.credentials = credentials
        self.tokens = tokens
        self.lifetimes = lifetimes or TokenLifetimes()

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Authenticate credentials and issue a fresh token pair.

        :raises InvalidCredentialsError: Unknown user or wrong password. Both
            paths run one bcrypt verification so timing does not tell them
            apart.
        :raises InactiveAccountError: Correct password on a deactivated account.
        """
        now = self.now()
        with self.rw_uow() as uow:
            identity = uow.identities.get_by_username(dto.username or "")
            if identity is None:
                self.credentials.dummy_verify(dto.password)
                log.warning("Login rejected", extra={"event": "login", "reason": "credentials"})
                raise InvalidCredentialsError()
            try:
                self.credentials.verify(dto.password, identity.password_hash)
            except CredentialMismatchError:
                log.warning("Login rejected", extra={"event": "login", "reason": "credentials"})
                raise InvalidCredentialsError() from None
            if not identity.is_active:
                log.warning(
                    "Login rejected",
                    extra={"event": "login", "reason": "inactive", "identity_id": identity.id},
                )
                raise InactiveAccountError()

            uow.identities.touch_last_login(identity, now)
            pair = open_session(uow, self.tokens, self.lifetimes, identity, now)
            out = LoginOut(identity=IdentityOut.from_model(identity), tokens=pair)

        log.info("Login succeeded", extra={"event": "login", "identity_id": out.identity.id})
        return out

    # ------------------------------------------------------------------ #
    # Refresh with atomic rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        """
        Rotate a refresh token and emit a new token pair.

        :raises InvalidOrRevokedError: Token invalid, expired, of the wrong
            type, already rotated, revoked, or its identity is gone or inactive.
        """
        try:
            claims = self.tokens.verify(dto.refresh_token, {TOKEN_REFRESH})
        except InvalidTokenError as exc:
            raise InvalidOrRevokedError() from exc
        if dto.subject_id is not None and dto.subject_id != claims.subject_id:
            raise InvalidOrRevokedError()

        fingerprint = self.tokens.fingerprint(dto.refresh_token)
        now = self.now()
        with self.rw_uow() as uow:
            owner_id = uow.sessions.consume(fingerprint, now=now)
            if owner_id is None:
                log.warning(
                    "Refresh rejected",
                    extra={"event": "refresh", "reason": "unknown_or_rotated"},
                )
                raise InvalidOrRevokedError()
            identity = uow.identities.get(owner_id)
            if identity is None or owner_id != claims.subject_id or not identity.is_active:
                log.warning(
                    "Refresh rejected",
                    extra={"event": "refresh", "reason": "identity", "identity_id": owner_id},
                )
                raise InvalidOrRevokedError()
            pair = open_session(uow, self.tokens, self.lifetimes, identity, now)

        log.info("Refresh rotated", extra={"event": "refresh", "identity_id": owner_id})
        return pair

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> int:
        """
        End one session of ``dto.identity_id``.

        Idempotent: ending a session that is already gone is not an error.

        :returns: Number of sessions removed (0 or 1).
        """
        with self.rw_uow() as uow:
            if dto.refresh_token:
                fingerprint = self.tokens.fingerprint(dto.refresh_token)
                removed = uow.sessions.delete_by_fingerprint(dto.identity_id, fingerprint)
            else:
                removed = uow.sessions.delete_newest(dto.identity_id)
        log.info("Logout", extra={"event": "logout", "identity_id": dto.identity_id})
        return removed

    def logout_all(self, identity_id: str) -> int:
        """End every session of ``identity_id``; returns how many were removed."""
        with self.rw_uow() as uow:
            removed = uow.sessions.delete_for_identity(identity_id)
        log.info("Logout all", extra={"event": "logout_all", "identity_id": identity_id})
        return removed

    # ------------------------------------------------------------------ #
    # Identity lifecycle
    # ------------------------------------------------------------------ #

    def get_identity(self, identity_id: str) -> IdentityOut:
        """:raises NotFoundError: When no identity has this id."""
        with self.ro_uow() as uow:
            identity = uow.identities.get(identity_id)
            if identity is None:
                raise NotFoundError("Identity")
            return IdentityOut.from_model(identity)

    def deactivate(self, identity_id: str) -> IdentityOut:
        """
        Soft-remove an identity: flip ``is_active`` and drop its sessions.

        Access tokens already issued stay valid until they expire.

        :raises NotFoundError: Unknown identity.
        :raises ConflictError: The administrator cannot be deactivated.
        """
        with self.rw_uow() as uow:
            identity = uow.identities.get_for_update(identity_id)
            if identity is None:
                raise NotFoundError("Identity")
            if identity.is_admin:
                raise ConflictError("Identity", "The administrator cannot be deactivated")
            uow.identities.assign_updates(identity, {"is_active": False})
            uow.sessions.delete_for_identity(identity.id)
            out = IdentityOut.from_model(identity)
        log.info("Identity deactivated", extra={"event": "deactivate", "identity_id": identity_id})
        return out

    def purge_expired(self) -> int:
        """Delete session rows past ``expires_at``; they are already unusable."""
        with self.rw_uow() as uow:
            return uow.sessions.purge_expired(now=self.now())
