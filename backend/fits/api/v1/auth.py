"""Authentication endpoints: login, refresh rotation, logout, whoami."""

from __future__ import annotations

from flask import Blueprint, current_app

from fits.api.access_control import current_auth, optional_auth, require_auth
from fits.api.deps import json_response, load_body, services, timing
from fits.core.extensions import limiter
from fits.schemas import (
    IdentitySchema,
    LoginSchema,
    LogoutSchema,
    RefreshSchema,
    TokenPairSchema,
    WhoAmISchema,
)
from fits.services._shared.ports import TOKEN_ACCESS
from fits.services.sessions import LoginIn, LogoutIn, RefreshIn

bp = Blueprint("auth", __name__)

login_schema = LoginSchema()
refresh_schema = RefreshSchema()
logout_schema = LogoutSchema()
token_schema = TokenPairSchema()
identity_schema = IdentitySchema()
whoami_schema = WhoAmISchema()


def _login_rate_limit() -> str:
    return str(current_app.config.get("AUTH_LOGIN_RATE_LIMIT", "5 per minute"))


@bp.post("/login")
@limiter.limit(_login_rate_limit)
@timing
def login():
    """Authenticate credentials and issue an access/refresh pair."""

    data = load_body(login_schema)
    out = services().sessions.login(LoginIn(username=data["username"], password=data["password"]))
    body = {**token_schema.dump(out.tokens), "identity": identity_schema.dump(out.identity)}
    return json_response({"data": body})


@bp.post("/refresh")
@optional_auth(TOKEN_ACCESS)
@timing
def refresh():
    """Rotate the presented refresh token."""

    data = load_body(refresh_schema)
    ctx = current_auth()
    pair = services().sessions.refresh(
        RefreshIn(
            refresh_token=data["refresh_token"],
            subject_id=ctx.subject_id if ctx is not None else None,
        )
    )
    return json_response({"data": token_schema.dump(pair)})


@bp.post("/logout")
@require_auth()
@timing
def logout():
    """End the session of the given refresh token, or the newest one."""

    data = load_body(logout_schema)
    ctx = current_auth()
    removed = services().sessions.logout(
        LogoutIn(identity_id=ctx.subject_id, refresh_token=data.get("refresh_token"))
    )
    return json_response({"data": {"logged_out": True, "sessions_ended": removed}})


@bp.post("/logout-all")
@require_auth()
@timing
def logout_all():
    """End every session of the caller."""

    ctx = current_auth()
    removed = services().sessions.logout_all(ctx.subject_id)
    return json_response({"data": {"logged_out": True, "sessions_ended": removed}})


@bp.get("/whoami")
@require_auth()
@timing
def whoami():
    """Return the caller's token claims and identity."""

    ctx = current_auth()
    identity = services().sessions.get_identity(ctx.subject_id)
    payload = {
        "subject_id": ctx.subject_id,
        "role": ctx.role,
        "token_type": ctx.token_type,
        "identity": identity,
    }
    return json_response({"data": whoami_schema.dump(payload)})
