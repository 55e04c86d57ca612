from datetime import datetime, timezone
import zoneinfo

from flask import current_app

from bitsa.utils.errors import ValidationError


def utcnow():
    """Current time as a naive UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _app_timezone():
    try:
        return current_app.config.get('APP_TIMEZONE', 'UTC')
    except RuntimeError:
        return 'UTC'


def localize_naive_datetime(dt, app_timezone=None):
    """
    Interpret a naive datetime in the application timezone and convert it to
    an aware UTC datetime. Aware datetimes are only converted to UTC.
    """
    if dt is None:
        return None

    if dt.tzinfo is not None:
        return dt.astimezone(timezone.utc)

    try:
        tz = zoneinfo.ZoneInfo(app_timezone or _app_timezone())
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        tz = timezone.utc

    return dt.replace(tzinfo=tz).astimezone(timezone.utc)


def to_storage(dt):
    """Normalize a client datetime to naive UTC for storage and comparison."""
    if dt is None:
        return None
    return localize_naive_datetime(dt).replace(tzinfo=None)


def parse_datetime(value):
    """Parse an ISO string (or datetime) into naive UTC.

    Raises ValidationError on unparseable input.
    """
    if value is None or value == '':
        return None

    if isinstance(value, datetime):
        return to_storage(value)

    if isinstance(value, str):
        s = value.strip()
        # fromisoformat only accepts a trailing 'Z' from Python 3.11 on
        if s.endswith('Z'):
            s = s[:-1] + '+00:00'
        try:
            dt = datetime.fromisoformat(s)
        except ValueError:
            try:
                dt = datetime.strptime(s, '%Y-%m-%d %H:%M:%S')
            except ValueError:
                raise ValidationError(f"Invalid date format: {value}")
        return to_storage(dt)

    raise ValidationError(f"Unrecognized date value: {value}")


def safe_iso(dt):
    """ISO 8601 string for a stored (naive UTC) datetime, or None."""
    if not dt:
        return None
    if isinstance(dt, datetime):
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc).isoformat()
    return str(dt)
