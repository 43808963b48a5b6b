"""Bootstrap request/response schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from fits.schemas.auth import IdentitySchema, TokenPairSchema


class BootstrapSchema(Schema):
    """First administrator credentials. Strength is checked by the service."""

    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    email = fields.Email(load_default=None, validate=validate.Length(max=254))


class BootstrapResultSchema(Schema):
    identity = fields.Nested(IdentitySchema, required=True)
    admin_token = fields.String(required=True)
    tokens = fields.Nested(TokenPairSchema, required=True)
    public_key_path = fields.String(required=True)
    certificate_path = fields.String(required=True)


class BootstrapStatusSchema(Schema):
    initialized = fields.Boolean(required=True)
