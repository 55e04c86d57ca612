from flask import has_request_context, request

from bitsa import db
from bitsa.models.audit_log import AuditLog


def log_activity(user_id, action, entity, entity_id=None, description=None):
    """
    Add an audit row to the current session.

    The row is committed together with the change it describes, so the
    caller owns the commit.
    """
    entry = AuditLog()
    entry.user_id = user_id
    entry.action = action
    entry.entity = entity
    entry.entity_id = entity_id
    entry.description = (description or "")[:500] or None
    if has_request_context():
        entry.ip_address = request.remote_addr
        entry.user_agent = (request.headers.get("User-Agent") or "")[:300] or None
    db.session.add(entry)
    return entry
