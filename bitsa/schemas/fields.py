from datetime import timezone

from marshmallow import fields

from bitsa.utils.datetime_utils import to_storage


class UTCDateTime(fields.DateTime):
    """
    DateTime stored as naive UTC.

    Loading localizes naive input to APP_TIMEZONE and converts to naive UTC;
    dumping renders stored values with an explicit +00:00 offset.
    """

    def _serialize(self, value, attr, obj, **kwargs):
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return super()._serialize(value, attr, obj, **kwargs)

    def _deserialize(self, value, attr, data, **kwargs):
        return to_storage(super()._deserialize(value, attr, data, **kwargs))
