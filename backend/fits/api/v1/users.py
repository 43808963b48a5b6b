"""Identity endpoints guarded by ownership and role."""

from __future__ import annotations

from flask import Blueprint

from fits.api.access_control import require_auth, require_ownership, require_role
from fits.api.deps import json_response, services, timing
from fits.schemas import IdentitySchema

bp = Blueprint("users", __name__)

identity_schema = IdentitySchema()


@bp.get("/<string:user_id>")
@require_auth()
@require_ownership("user_id")
@timing
def get_user(user_id: str):
    """Return an identity; callers see themselves, admins see anyone."""

    identity = services().sessions.get_identity(user_id)
    return json_response({"data": identity_schema.dump(identity)})


@bp.post("/<string:user_id>/deactivate")
@require_auth()
@require_role("admin")
@timing
def deactivate_user(user_id: str):
    identity = services().sessions.deactivate(user_id)
    return json_response({"data": identity_schema.dump(identity)})
