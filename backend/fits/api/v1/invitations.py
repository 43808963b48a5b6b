"""Invitation endpoints: admin issue, public lookup and redemption."""

from __future__ import annotations

from flask import Blueprint

from fits.api.access_control import current_auth, require_auth, require_role
from fits.api.deps import json_response, load_body, services, timing
from fits.schemas import (
    CompleteInvitationSchema,
    CreateInvitationSchema,
    InvitationCreatedSchema,
    InvitationSummarySchema,
    RegistrationSchema,
)
from fits.services.invitations import CompleteInvitationIn, CreateInvitationIn

admin_bp = Blueprint("admin", __name__)
bp = Blueprint("invitations", __name__)

create_schema = CreateInvitationSchema()
created_schema = InvitationCreatedSchema()
summary_schema = InvitationSummarySchema()
complete_schema = CompleteInvitationSchema()
registration_schema = RegistrationSchema()


@admin_bp.post("/invite")
@require_auth()
@require_role("admin")
@timing
def create_invitation():
    """Issue an invitation; the raw token is only ever returned here."""

    data = load_body(create_schema)
    dto = CreateInvitationIn(admin_id=current_auth().subject_id, **data)
    out = services().invitations.create(dto)
    return json_response({"data": created_schema.dump(out)}, status=201)


@bp.get("/<string:token>")
@timing
def fetch_invitation(token: str):
    summary = services().invitations.fetch(token)
    return json_response({"data": summary_schema.dump(summary)})


@bp.post("/<string:token>/complete")
@timing
def complete_invitation(token: str):
    """Redeem an invitation and sign the new identity in."""

    data = load_body(complete_schema)
    out = services().invitations.complete(
        CompleteInvitationIn(token=token, username=data["username"], password=data["password"])
    )
    return json_response({"data": registration_schema.dump(out)}, status=201)
