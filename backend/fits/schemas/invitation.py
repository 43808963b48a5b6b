"""Invitation request/response schemas."""

from __future__ import annotations

from marshmallow import Schema, ValidationError, fields, validate, validates_schema

from fits.models.invitation import INVITABLE_ROLES
from fits.schemas.auth import IdentitySchema, TokenPairSchema


class CreateInvitationSchema(Schema):
    """Admin input for a new invitation."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    role = fields.String(required=True, validate=validate.OneOf(INVITABLE_ROLES))
    teacher_ref = fields.String(load_default=None, validate=validate.Length(max=64))
    first_name = fields.String(load_default=None, validate=validate.Length(max=100))
    last_name = fields.String(load_default=None, validate=validate.Length(max=100))
    department = fields.String(load_default=None, validate=validate.Length(max=100))

    @validates_schema
    def _student_needs_teacher(self, data, **kwargs):
        if data.get("role") == "student" and not (data.get("teacher_ref") or "").strip():
            raise ValidationError("Required when inviting a student.", field_name="teacher_ref")


class InvitationCreatedSchema(Schema):
    invitation_id = fields.String(required=True)
    token = fields.String(required=True)
    link = fields.String(required=True)
    email = fields.String(required=True)
    role = fields.String(required=True)
    expires_at = fields.DateTime(required=True)


class InvitationSummarySchema(Schema):
    email = fields.String(required=True)
    role = fields.String(required=True)
    first_name = fields.String(allow_none=True)
    last_name = fields.String(allow_none=True)
    department = fields.String(allow_none=True)
    teacher_ref = fields.String(allow_none=True)
    used = fields.Boolean(required=True)
    expires_at = fields.DateTime(required=True)


class CompleteInvitationSchema(Schema):
    username = fields.String(required=True, validate=validate.Length(min=1, max=50))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RegistrationSchema(Schema):
    identity = fields.Nested(IdentitySchema, required=True)
    tokens = fields.Nested(TokenPairSchema, required=True)
