"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class LoginSchema(Schema):
    """Input payload for authenticating an identity.

    The password carries no strength rules here: a weak guess must be
    reported as invalid credentials, not as a validation error.
    """

    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshSchema(Schema):
    """Input payload carrying the refresh token to rotate."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class LogoutSchema(Schema):
    """Optional refresh token naming the session to end."""

    refresh_token = fields.String(load_default=None)


class TokenPairSchema(Schema):
    """Response payload with an access/refresh pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(dump_default="Bearer")
    expires_in = fields.Integer(required=True)


class IdentitySchema(Schema):
    """Public view of an identity; never includes the password hash."""

    id = fields.String(required=True)
    username = fields.String(required=True)
    email = fields.String(allow_none=True)
    role = fields.String(required=True)
    is_active = fields.Boolean(required=True)
    teacher_ref = fields.String(allow_none=True)
    created_at = fields.DateTime(required=True)
    last_login = fields.DateTime(allow_none=True)


class WhoAmISchema(Schema):
    """Claims of the presented token plus the stored identity."""

    subject_id = fields.String(required=True)
    role = fields.String(required=True)
    token_type = fields.String(required=True)
    identity = fields.Nested(IdentitySchema, allow_none=True)
