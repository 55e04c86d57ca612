from bitsa.models.enums import (
    UserRole,
    EventStatus,
    RegistrationStatus,
    SubmissionStatus,
)
from bitsa.models.user import User
from bitsa.models.category import Category
from bitsa.models.event import Event
from bitsa.models.event_registration import EventRegistration
from bitsa.models.registration_form import RegistrationForm, RegistrationField
from bitsa.models.submission import RegistrationSubmission
from bitsa.models.audit_log import AuditLog

__all__ = [
    'UserRole', 'EventStatus', 'RegistrationStatus', 'SubmissionStatus',
    'User', 'Category', 'Event', 'EventRegistration', 'RegistrationForm',
    'RegistrationField', 'RegistrationSubmission', 'AuditLog',
]
