from marshmallow import EXCLUDE, fields, validate, validates_schema, ValidationError
from bitsa import ma
from bitsa.models.enums import EventStatus
from bitsa.models.event import Event
from bitsa.schemas.fields import UTCDateTime


class EventSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Event
        load_instance = False
        include_fk = True
        unknown = EXCLUDE

    title = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    description = fields.Str(required=True, validate=validate.Length(min=1))
    location = fields.Str(required=True, validate=validate.Length(min=1, max=200))
    event_type = fields.Str(required=True, validate=validate.Length(min=1, max=50))
    cover_image = fields.Str(load_default=None, allow_none=True,
                             validate=validate.Length(max=500))
    start_date = UTCDateTime(required=True)
    end_date = UTCDateTime(required=True)
    registration_deadline = UTCDateTime(load_default=None, allow_none=True)
    max_attendees = fields.Int(load_default=None, allow_none=True,
                               validate=validate.Range(min=1))
    category_id = fields.Int(load_default=None, allow_none=True)

    # Read-only
    id = fields.Int(dump_only=True)
    slug = fields.Str(dump_only=True)
    status = fields.Enum(EventStatus, dump_only=True)
    requires_registration = fields.Bool(dump_only=True)
    created_by_id = fields.Int(dump_only=True)
    created_at = UTCDateTime(dump_only=True)
    updated_at = UTCDateTime(dump_only=True)
    registrations_count = fields.Int(dump_only=True)
    available_slots = fields.Int(dump_only=True, allow_none=True)
    is_full = fields.Bool(dump_only=True)
    category = fields.Method("get_category", dump_only=True)

    def get_category(self, obj):
        if not obj.category:
            return None
        return {"id": obj.category.id, "name": obj.category.name, "slug": obj.category.slug}

    @validates_schema
    def validate_dates(self, data, **kwargs):
        start, end = data.get("start_date"), data.get("end_date")
        if start and end and end < start:
            raise ValidationError("End date cannot be before start date.", "end_date")
        deadline = data.get("registration_deadline")
        if deadline and end and deadline > end:
            raise ValidationError(
                "Registration deadline cannot be after the end date.", "registration_deadline"
            )


class EventListArgsSchema(ma.Schema):
    """Query-string arguments of the event listing."""

    class Meta:
        unknown = EXCLUDE

    page = fields.Int(load_default=1, validate=validate.Range(min=1))
    per_page = fields.Int(load_default=None, validate=validate.Range(min=1, max=100))
    status = fields.Str(load_default=None)
    event_type = fields.Str(load_default=None)
    category_id = fields.Int(load_default=None)
    search = fields.Str(load_default=None)
    date_from = UTCDateTime(load_default=None)
    date_to = UTCDateTime(load_default=None)
    sort = fields.Str(load_default="start_date:desc")


event_schema = EventSchema()
events_schema = EventSchema(many=True)
event_list_args_schema = EventListArgsSchema()
