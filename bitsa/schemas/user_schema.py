from marshmallow import EXCLUDE, fields, validate
from bitsa import ma
from bitsa.models.enums import UserRole
from bitsa.models.user import User
from bitsa.schemas.fields import UTCDateTime


class UserSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = User
        load_instance = False
        exclude = ('password_hash',)

    id = fields.Int(dump_only=True)
    role = fields.Enum(UserRole, dump_only=True)
    created_at = UTCDateTime(dump_only=True)
    updated_at = UTCDateTime(dump_only=True)


class UserRegisterSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    student_id = fields.Str(required=True, validate=validate.Length(min=2, max=30))
    name = fields.Str(required=True, validate=validate.Length(min=1, max=120))
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True,
                          validate=validate.Length(min=8, max=128))
    phone = fields.Str(load_default=None, allow_none=True)
    course = fields.Str(load_default=None, allow_none=True)
    year_of_study = fields.Int(load_default=None, allow_none=True,
                               validate=validate.Range(min=1, max=8))


class UserLoginSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    # Membership number or email
    identifier = fields.Str(required=True)
    password = fields.Str(required=True, load_only=True)


user_schema = UserSchema()
user_register_schema = UserRegisterSchema()
user_login_schema = UserLoginSchema()
