"""Invitation issue, lookup and single-use redemption."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from fits.models.base import new_uuid
from fits.models.identity import ROLE_STUDENT, Identity
from fits.models.invitation import INVITABLE_ROLES, Invitation
from fits.services._shared.base import BaseService, UowFactory
from fits.services._shared.dto import IdentityOut, TokenLifetimes
from fits.services._shared.errors import (
    InvalidTokenError,
    InvitationAlreadyUsedError,
    InvitationUnavailableError,
    UniqueViolation,
    UsernameTakenError,
    ValidationError,
)
from fits.services._shared.ports import TOKEN_INVITATION, TokenCodec
from fits.services.credentials import CredentialService
from fits.services.invitations.dto import (
    CompleteInvitationIn,
    CreateInvitationIn,
    InvitationCreatedOut,
    InvitationSummaryOut,
    RegistrationOut,
)
from fits.services.sessions import open_session

log = logging.getLogger(__name__)

USERNAME_CONSTRAINT = "uq_users_username"


class InvitationService(BaseService):
    """
    Onboard teachers and students through single-use invitations.

    Notes
    -----
    - Only the token fingerprint is persisted.
    - :meth:`fetch` reports malformed, unknown, expired and consumed tokens
      with the same :class:`InvitationUnavailableError`, so a caller cannot
      probe which tokens exist.
    - :meth:`complete` flips ``used`` with a conditional ``UPDATE`` in the
      same transaction that creates the identity; of two concurrent
      redemptions exactly one wins.
    """

    def __init__(
        self,
        *,
        credentials: CredentialService,
        tokens: TokenCodec,
        base_url: str,
        lifetimes: TokenLifetimes | None = None,
        uow_factory: UowFactory | None = None,
        ro_uow_factory: UowFactory | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """
        :param credentials: Strength policy and hashing for redemption.
        :param tokens: Token adapter.
        :param base_url: Prefix of the link handed to the invitee.
        """
        super().__init__(uow_factory=uow_factory, ro_uow_factory=ro_uow_factory, clock=clock)
        self.credentials = credentials
        self.tokens = tokens
        self.base_url = base_url
        self.lifetimes = lifetimes or TokenLifetimes()

    # ------------------------------------------------------------------ #
    # Create
    # ------------------------------------------------------------------ #

    def create(self, dto: CreateInvitationIn) -> InvitationCreatedOut:
        """
        Issue an invitation valid for ``lifetimes.invitation`` (7 days).

        :raises ValidationError: Unknown role, missing email, or a student
            invitation without ``teacher_ref``.
        """
        email = (dto.email or "").strip().lower()
        errors: dict[str, list[str]] = {}
        if not email or "@" not in email:
            errors["email"] = ["A valid email address is required."]
        if dto.role not in INVITABLE_ROLES:
            errors["role"] = [f"Must be one of: {', '.join(INVITABLE_ROLES)}."]
        if dto.role == ROLE_STUDENT and not (dto.teacher_ref or "").strip():
            errors["teacher_ref"] = ["Required when inviting a student."]
        if errors:
            raise ValidationError("Invalid invitation", details=errors)

        invitation_id = new_uuid()
        token = self.tokens.issue(
            invitation_id, dto.role, TOKEN_INVITATION, self.lifetimes.invitation
        )
        now = self.now()
        expires_at = now + self.lifetimes.invitation

        with self.rw_uow() as uow:
            uow.invitations.add(
                Invitation(
                    id=invitation_id,
                    fingerprint=self.tokens.fingerprint(token),
                    email=email,
                    role=dto.role,
                    first_name=dto.first_name,
                    last_name=dto.last_name,
                    department=dto.department,
                    teacher_ref=(dto.teacher_ref or "").strip() or None,
                    created_by=dto.admin_id,
                    used=False,
                    created_at=now,
                    expires_at=expires_at,
                )
            )

        log.info(
            "Invitation created",
            extra={"event": "invite", "invitation_id": invitation_id, "role": dto.role},
        )
        return InvitationCreatedOut(
            invitation_id=invitation_id,
            token=token,
            link=f"{self.base_url}{token}",
            email=email,
            role=dto.role,
            expires_at=expires_at,
        )

    # ------------------------------------------------------------------ #
    # Fetch
    # ------------------------------------------------------------------ #

    def fetch(self, token: str) -> InvitationSummaryOut:
        """
        Read-only lookup of a pending invitation.

        :raises InvitationUnavailableError: For every reason it cannot be used.
        """
        fingerprint = self._fingerprint_of_valid(token)
        now = self.now()
        with self.ro_uow() as uow:
            invitation = uow.invitations.find_by_fingerprint(fingerprint)
            if invitation is None:
                raise InvitationUnavailableError("unknown")
            if not invitation.is_redeemable(now):
                raise InvitationUnavailableError("used" if invitation.used else "expired")
            return InvitationSummaryOut(
                email=invitation.email,
                role=invitation.role,
                first_name=invitation.first_name,
                last_name=invitation.last_name,
                department=invitation.department,
                teacher_ref=invitation.teacher_ref,
                used=invitation.used,
                expires_at=invitation.expires_at,
            )

    # ------------------------------------------------------------------ #
    # Complete
    # ------------------------------------------------------------------ #

    def complete(self, dto: CompleteInvitationIn) -> RegistrationOut:
        """
        Redeem an invitation: create the identity and its first session.

        Steps inside the transaction: lock and re-check the row, swap
        ``used`` false -> true, insert the identity, insert the session.

        :raises InvitationUnavailableError: Malformed, unknown or expired token.
        :raises InvitationAlreadyUsedError: Already redeemed, or lost the race.
        :raises WeakSecretError: Password fails the strength policy.
        :raises UsernameTakenError: Username belongs to another identity.
        """
        fingerprint = self._fingerprint_of_valid(dto.token)
        username = self.require_username(dto.username)
        self.credentials.validate_strength(dto.password)
        password_hash = self.credentials.hash(dto.password)
        now = self.now()

        with self.rw_uow() as uow:
            invitation = uow.invitations.find_by_fingerprint(fingerprint, lock=True)
            if invitation is None:
                raise InvitationUnavailableError("unknown")
            if invitation.used:
                raise InvitationAlreadyUsedError()
            if invitation.is_expired(now):
                raise InvitationUnavailableError("expired")

            invitation_id = invitation.id
            role, email, teacher_ref = invitation.role, invitation.email, invitation.teacher_ref
            if not uow.invitations.mark_used(invitation_id, now=now):
                log.warning(
                    "Invitation redemption lost the race",
                    extra={"event": "invite_complete", "invitation_id": invitation_id},
                )
                raise InvitationAlreadyUsedError()

            try:
                identity = uow.identities.add(
                    Identity(
                        username=username,
                        email=email,
                        password_hash=password_hash,
                        role=role,
                        is_active=True,
                        teacher_ref=teacher_ref,
                        invitation_id=invitation_id,
                    )
                )
            except UniqueViolation as exc:
                if exc.constraint == USERNAME_CONSTRAINT:
                    raise UsernameTakenError() from exc
                raise

            pair = open_session(uow, self.tokens, self.lifetimes, identity, now)
            out = RegistrationOut(identity=IdentityOut.from_model(identity), tokens=pair)

        log.info(
            "Invitation completed",
            extra={
                "event": "invite_complete",
                "invitation_id": invitation_id,
                "identity_id": out.identity.id,
            },
        )
        return out

    def purge_expired(self) -> int:
        """Delete expired invitations that were never redeemed."""
        with self.rw_uow() as uow:
            return uow.invitations.purge_expired(now=self.now())

    # ------------------------------------------------------------------ #
    # Internals
    # ------------------------------------------------------------------ #

    def _fingerprint_of_valid(self, token: str) -> str:
        try:
            self.tokens.verify(token, {TOKEN_INVITATION})
        except InvalidTokenError as exc:
            raise InvitationUnavailableError(type(exc).__name__) from exc
        return self.tokens.fingerprint(token)
