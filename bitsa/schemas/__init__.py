from bitsa.schemas.event_schema import event_schema, events_schema, event_list_args_schema
from bitsa.schemas.registration_schema import (
    registration_schema, registrations_schema, simple_register_schema,
    registration_status_schema,
)
from bitsa.schemas.form_schema import form_schema, form_input_schema
from bitsa.schemas.submission_schema import (
    submission_schema, submissions_schema, submit_schema, submission_status_schema,
    bulk_approve_schema, attendance_schema,
)
from bitsa.schemas.user_schema import (
    user_schema, user_register_schema, user_login_schema,
)
from bitsa.schemas.category_schema import category_schema, categories_schema

__all__ = [
    'event_schema', 'events_schema', 'event_list_args_schema',
    'registration_schema', 'registrations_schema', 'simple_register_schema',
    'registration_status_schema',
    'form_schema', 'form_input_schema',
    'submission_schema', 'submissions_schema', 'submit_schema',
    'submission_status_schema', 'bulk_approve_schema', 'attendance_schema',
    'user_schema', 'user_register_schema', 'user_login_schema',
    'category_schema', 'categories_schema',
]
