"""
Per-field-type validation of submission responses.

Validators are registered by field type and receive the field definition
and the submitted value. They return the normalized value to store or raise
``ValidationError``. New types plug in with ``@field_validator("type")``.
The checks themselves are marshmallow fields and validators; their errors
are reported with the field label.
"""

from marshmallow import fields as ma_fields, validate
from marshmallow import ValidationError as MarshmallowValidationError

from bitsa.utils.errors import ValidationError

FIELD_VALIDATORS = {}

_validate_email = validate.Email()
_validate_phone = validate.Regexp(r"^\+?[0-9 ()-]{7,20}$")
_text_field = ma_fields.String()
_number_field = ma_fields.Float(allow_nan=False)
_date_field = ma_fields.Date(format="%Y-%m-%d")


def field_validator(*field_types):
    def decorator(func):
        for field_type in field_types:
            FIELD_VALIDATORS[field_type] = func
        return func

    return decorator


def is_empty(value):
    """A response counts as missing when absent, blank, unchecked or empty."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple)):
        return len(value) == 0
    return False


def _check(validator, value, message):
    try:
        return validator(value)
    except MarshmallowValidationError:
        raise ValidationError(message)


def _rules(field):
    return field.validation if isinstance(field.validation, dict) else {}


def _check_length(field, text):
    rules = _rules(field)
    min_length = rules.get("min_length")
    max_length = rules.get("max_length")
    if min_length is not None:
        _check(validate.Length(min=int(min_length)), text,
               f"{field.label} must be at least {min_length} characters")
    if max_length is not None:
        _check(validate.Length(max=int(max_length)), text,
               f"{field.label} must be at most {max_length} characters")
    pattern = rules.get("pattern")
    if pattern:
        # Regexp matches at the start only; the whole answer must match
        _check(validate.Regexp(rf"(?:{pattern})\Z"), text,
               f"{field.label} has an invalid format")


def _as_text(field, value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        value = str(value)
    return _check(_text_field.deserialize, value, f"{field.label} must be text").strip()


@field_validator("text", "textarea")
def validate_text(field, value):
    text = _as_text(field, value)
    _check_length(field, text)
    return text


@field_validator("email")
def validate_email(field, value):
    text = _as_text(field, value)
    _check(_validate_email, text, f"{field.label} must be a valid email address")
    _check_length(field, text)
    return text


@field_validator("phone")
def validate_phone(field, value):
    text = _as_text(field, value)
    _check(_validate_phone, text, f"{field.label} must be a valid phone number")
    return text


@field_validator("number")
def validate_number(field, value):
    if isinstance(value, bool):
        raise ValidationError(f"{field.label} must be a number")
    number = _check(_number_field.deserialize, value, f"{field.label} must be a number")

    rules = _rules(field)
    if rules.get("min") is not None:
        _check(validate.Range(min=float(rules["min"])), number,
               f"{field.label} must be at least {rules['min']}")
    if rules.get("max") is not None:
        _check(validate.Range(max=float(rules["max"])), number,
               f"{field.label} must be at most {rules['max']}")
    return int(number) if number.is_integer() else number


@field_validator("date")
def validate_date(field, value):
    text = _as_text(field, value)
    parsed = _check(_date_field.deserialize, text, f"{field.label} must be a date (YYYY-MM-DD)")
    return parsed.isoformat()


@field_validator("select", "radio")
def validate_choice(field, value):
    text = _as_text(field, value)
    if field.options:
        _check(validate.OneOf(field.options), text,
               f"{field.label} must be one of: {', '.join(field.options)}")
    return text


@field_validator("checkbox")
def validate_checkbox(field, value):
    # Without options a checkbox is a single yes/no tick
    if not field.options:
        if not isinstance(value, bool):
            raise ValidationError(f"{field.label} must be true or false")
        return value

    values = value if isinstance(value, list) else [value]
    if not all(isinstance(v, str) for v in values):
        raise ValidationError(f"{field.label} must be a list of options")
    invalid = [v for v in values if v not in field.options]
    _check(validate.ContainsOnly(field.options), values,
           f"{field.label} has invalid options: {', '.join(invalid)}")
    return values


def validate_responses(fields, responses):
    """
    Check ``responses`` (``{field id as str: value}``) against ``fields``.

    Required fields are checked in form order and the first missing one
    aborts with its label. Keys that do not belong to the form are dropped.
    Returns the cleaned mapping to store.
    """
    responses = responses or {}
    cleaned = {}

    for field in sorted(fields, key=lambda f: f.order):
        key = str(field.id)
        value = responses.get(key)

        if is_empty(value):
            if field.required:
                raise ValidationError(f"{field.label} is required")
            continue

        validator = FIELD_VALIDATORS.get(field.field_type, validate_text)
        cleaned[key] = validator(field, value)

    return cleaned
