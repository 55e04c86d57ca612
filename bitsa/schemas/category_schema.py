from marshmallow import EXCLUDE, fields, validate
from bitsa import ma
from bitsa.models.category import Category


class CategorySchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Category
        load_instance = False
        unknown = EXCLUDE

    name = fields.Str(required=True, validate=validate.Length(min=1, max=100))
    description = fields.Str(load_default=None, allow_none=True)

    id = fields.Int(dump_only=True)
    slug = fields.Str(dump_only=True)
    created_at = fields.DateTime(dump_only=True)


category_schema = CategorySchema()
categories_schema = CategorySchema(many=True)
