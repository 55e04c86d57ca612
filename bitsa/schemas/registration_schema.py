from marshmallow import EXCLUDE, fields
from bitsa import ma
from bitsa.models.enums import RegistrationStatus
from bitsa.models.event_registration import EventRegistration
from bitsa.schemas.fields import UTCDateTime


class EventRegistrationSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = EventRegistration
        load_instance = False
        include_fk = True

    id = fields.Int(dump_only=True)
    event_id = fields.Int(dump_only=True)
    user_id = fields.Int(dump_only=True)
    status = fields.Enum(RegistrationStatus, dump_only=True)
    created_at = UTCDateTime(dump_only=True)
    updated_at = UTCDateTime(dump_only=True)
    event = fields.Method("get_event", dump_only=True)
    user = fields.Method("get_user", dump_only=True)

    def get_event(self, obj):
        return obj.event.summary() if obj.event else None

    def get_user(self, obj):
        return obj.user.summary() if obj.user else None


class SimpleRegisterSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    event_id = fields.Int(required=True)


class RegistrationStatusSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    status = fields.Enum(RegistrationStatus, required=True)


registration_schema = EventRegistrationSchema()
registrations_schema = EventRegistrationSchema(many=True)
simple_register_schema = SimpleRegisterSchema()
registration_status_schema = RegistrationStatusSchema()
