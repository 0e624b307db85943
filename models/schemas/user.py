from marshmallow import Schema, fields, pre_load, validates, validates_schema, validate, ValidationError

USERNAME_PATTERN = r"^[a-z0-9_.-]+$"


def _norm(v):
    return v.strip().lower() if isinstance(v, str) else v


def _validate_password(value):
    if len(value) < 8:
        raise ValidationError("Password must be at least 8 characters long.")


class UserRegisterSchema(Schema):
    full_name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    username = fields.String(
        required=True,
        validate=[validate.Length(min=3, max=64), validate.Regexp(USERNAME_PATTERN)],
    )
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    # Hosted media URLs (upload to the media host happens client side)
    avatar = fields.Url(required=True)
    cover_image = fields.Url(load_default="")

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            for key in ("username", "email"):
                if key in data:
                    data[key] = _norm(data[key])
            if isinstance(data.get("full_name"), str):
                data["full_name"] = data["full_name"].strip()
            if data.get("cover_image") in (None, ""):
                data.pop("cover_image", None)
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        _validate_password(value)


class UserLoginSchema(Schema):
    username = fields.String()
    email = fields.String()
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = {k: (_norm(v) if k in ("username", "email") else v) for k, v in data.items()}
        return data

    @validates_schema
    def require_identifier(self, data, **kwargs):
        if not data.get("username") and not data.get("email"):
            raise ValidationError("username or email is required", "username")


class AccountUpdateSchema(Schema):
    full_name = fields.String(required=True, validate=validate.Length(min=1, max=255))
    email = fields.Email(required=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm(data["email"])
        return data


class PasswordChangeSchema(Schema):
    old_password = fields.String(required=True, load_only=True)
    new_password = fields.String(required=True, load_only=True)

    @validates("new_password")
    def validate_new_password(self, value, **kwargs):
        _validate_password(value)


class ImageUpdateSchema(Schema):
    url = fields.Url(required=True)


class UserOutSchema(Schema):
    """Public view of a user: never includes the password hash or the refresh slot."""
    id = fields.String()
    username = fields.String()
    email = fields.String()
    full_name = fields.String()
    avatar = fields.String()
    cover_image = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()


class ChannelProfileSchema(Schema):
    id = fields.String()
    username = fields.String()
    email = fields.String()
    full_name = fields.String()
    avatar = fields.String()
    cover_image = fields.String(allow_none=True)
    subscribers_count = fields.Integer()
    channels_subscribed_to_count = fields.Integer()
    is_subscribed = fields.Boolean()
