from marshmallow import Schema, fields, validate


class CartCreateSchema(Schema):
    product_id = fields.String(required=True, validate=validate.Length(min=1, max=36))
    qty = fields.Integer(load_default=1, validate=validate.Range(min=1))
    note = fields.String(allow_none=True, validate=validate.Length(max=255))


class CartUpdateQtySchema(Schema):
    qty = fields.Integer(required=True, validate=validate.Range(min=1))


class CartOutSchema(Schema):
    id = fields.String()
    product_id = fields.String()
    qty = fields.Integer()
    note = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
