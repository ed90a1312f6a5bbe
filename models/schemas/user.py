from marshmallow import Schema, fields, pre_load, validate


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class _EmailNormalizingSchema(Schema):
    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data, email=_norm_email(data["email"]))
        return data


class RegisterSchema(_EmailNormalizingSchema):
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6))
    fullname = fields.String(required=True, validate=validate.Length(min=1, max=255))
    phone = fields.String(required=True, validate=validate.Length(min=1, max=32))


class LoginSchema(_EmailNormalizingSchema):
    email = fields.String(required=True, validate=validate.Length(min=1))
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class RefreshTokenSchema(Schema):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class TokenOutSchema(Schema):
    session_id = fields.String()
    access_token = fields.String()
    access_token_issued_at = fields.DateTime()
    access_token_expires_at = fields.DateTime()
    refresh_token = fields.String()
    refresh_token_expires_at = fields.DateTime()


class UserOutSchema(Schema):
    id = fields.String(allow_none=False)
    fullname = fields.String()
    email = fields.String()
    phone = fields.String()
