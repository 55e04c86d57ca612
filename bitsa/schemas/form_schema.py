from marshmallow import EXCLUDE, fields, validate, validates, validates_schema, ValidationError
from bitsa import ma
from bitsa.models.registration_form import RegistrationForm, RegistrationField
from bitsa.schemas.fields import UTCDateTime
from bitsa.services.field_validators import FIELD_VALIDATORS

CHOICE_TYPES = ("select", "radio")


class RegistrationFieldSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = RegistrationField
        load_instance = False
        include_fk = True

    id = fields.Int(dump_only=True)
    form_id = fields.Int(dump_only=True)
    options = fields.List(fields.Str(), dump_only=True)
    validation = fields.Dict(dump_only=True, allow_none=True)


class RegistrationFormSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = RegistrationForm
        load_instance = False
        include_fk = True

    id = fields.Int(dump_only=True)
    event_id = fields.Int(dump_only=True)
    requires_approval = fields.Bool(dump_only=True)
    created_at = UTCDateTime(dump_only=True)
    updated_at = UTCDateTime(dump_only=True)
    # "fields" is reserved on marshmallow schemas
    form_fields = fields.Nested(
        RegistrationFieldSchema, many=True, attribute="fields", data_key="fields", dump_only=True
    )
    event = fields.Method("get_event", dump_only=True)

    def get_event(self, obj):
        return obj.event.summary() if obj.event else None


class FieldInputSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    label = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    field_type = fields.Str(required=True)
    placeholder = fields.Str(load_default=None, allow_none=True,
                             validate=validate.Length(max=200))
    required = fields.Bool(load_default=False)
    options = fields.List(fields.Str(), load_default=list)
    validation = fields.Dict(load_default=None, allow_none=True)

    @validates("field_type")
    def validate_field_type(self, value, **kwargs):
        # Looked up at call time so validators registered later are accepted
        if value not in FIELD_VALIDATORS:
            raise ValidationError(
                f"Unknown field type. Expected one of: {', '.join(sorted(FIELD_VALIDATORS))}"
            )

    @validates_schema
    def validate_options(self, data, **kwargs):
        if data.get("field_type") in CHOICE_TYPES and not data.get("options"):
            raise ValidationError("Choice fields need at least one option.", "options")


class FormInputSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    requires_approval = fields.Bool(load_default=False)
    field_defs = fields.List(
        fields.Nested(FieldInputSchema),
        required=True,
        data_key="fields",
        validate=validate.Length(min=1, error="At least one field is required"),
    )


form_schema = RegistrationFormSchema()
form_input_schema = FormInputSchema()
