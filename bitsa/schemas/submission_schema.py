from marshmallow import EXCLUDE, fields, validate, validates_schema, ValidationError
from bitsa import ma
from bitsa.models.enums import SubmissionStatus
from bitsa.models.submission import RegistrationSubmission
from bitsa.schemas.fields import UTCDateTime


class SubmissionSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = RegistrationSubmission
        load_instance = False
        include_fk = True

    id = fields.Int(dump_only=True)
    status = fields.Enum(SubmissionStatus, dump_only=True)
    responses = fields.Dict(dump_only=True)
    approved_at = UTCDateTime(dump_only=True)
    attendance_marked_at = UTCDateTime(dump_only=True)
    created_at = UTCDateTime(dump_only=True)
    updated_at = UTCDateTime(dump_only=True)
    user = fields.Method("get_user", dump_only=True)
    event = fields.Method("get_event", dump_only=True)

    def get_user(self, obj):
        return obj.user.summary() if obj.user else None

    def get_event(self, obj):
        return obj.event.summary() if obj.event else None


class SubmitSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    form_id = fields.Int(required=True)
    # Values are scalars, or lists for multi-choice checkboxes
    responses = fields.Dict(keys=fields.Str(), values=fields.Raw(allow_none=True),
                            required=True)


class SubmissionStatusSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    status = fields.Str(
        required=True,
        validate=validate.OneOf(["APPROVED", "REJECTED", "WAITLISTED"]),
    )
    rejection_reason = fields.Str(load_default=None, allow_none=True)

    @validates_schema
    def validate_reason(self, data, **kwargs):
        if data.get("status") == "REJECTED" and not (data.get("rejection_reason") or "").strip():
            raise ValidationError("A rejection reason is required.", "rejection_reason")


class BulkApproveSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    submission_ids = fields.List(
        fields.Int(),
        required=True,
        validate=validate.Length(min=1, error="Submission IDs array is required"),
    )


class AttendanceSchema(ma.Schema):
    class Meta:
        unknown = EXCLUDE

    attended = fields.Bool(required=True)


submission_schema = SubmissionSchema()
submissions_schema = SubmissionSchema(many=True)
submit_schema = SubmitSchema()
submission_status_schema = SubmissionStatusSchema()
bulk_approve_schema = BulkApproveSchema()
attendance_schema = AttendanceSchema()
