"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class UserSchema(Schema):
    """Public representation of an identity; never carries the password hash."""

    id = fields.Integer(required=True)
    email = fields.String(allow_none=True)
    name = fields.String(required=True)
    avatar = fields.String(allow_none=True)
    role = fields.String(required=True)
    auth_provider = fields.String(data_key="authProvider")
    is_active = fields.Boolean(data_key="isActive")
    created_at = fields.DateTime(allow_none=True, data_key="createdAt")
