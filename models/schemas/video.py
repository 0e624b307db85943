from marshmallow import Schema, fields, validate


class VideoCreateSchema(Schema):
    title = fields.String(required=True, validate=validate.Length(min=1, max=255))
    description = fields.String(required=True, validate=validate.Length(min=1))
    video_file = fields.Url(required=True)
    thumbnail = fields.Url(required=True)
    duration = fields.Float(required=True, validate=validate.Range(min=0))
    is_published = fields.Boolean(load_default=True)


class VideoOutSchema(Schema):
    id = fields.String(dump_only=True)
    title = fields.String()
    description = fields.String()
    video_file = fields.String()
    thumbnail = fields.String()
    duration = fields.Float()
    views = fields.Integer()
    is_published = fields.Boolean()
    owner_id = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
