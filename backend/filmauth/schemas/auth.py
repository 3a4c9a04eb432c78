"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from filmauth.models.user import Role


class RegisterSchema(Schema):
    """Input payload for account registration."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class LoginSchema(Schema):
    """Input payload for authenticating a user."""

    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class PasswordChangeSchema(Schema):
    """Input payload for changing the caller's password."""

    current_password = fields.String(required=True, validate=validate.Length(min=1, max=128))
    new_password = fields.String(required=True, validate=validate.Length(min=8, max=128))


class TokenPairSchema(Schema):
    """Response payload containing an access/refresh pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    token_type = fields.String(dump_default="Bearer")


class PrincipalSchema(Schema):
    """Identity established from the bearer token."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    role = fields.Enum(Role, by_value=True, required=True)


class AccountSchema(Schema):
    """Public representation of an account."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    username = fields.String(required=True)
    role = fields.Enum(Role, by_value=True, required=True)


class RevocationResultSchema(Schema):
    """Outcome of a session revocation."""

    revoked_refresh_tokens = fields.Integer(required=True)
