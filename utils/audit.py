from flask import g, has_request_context, request
from models import db
from models.audit_log import AuditLog


def _client_ip():
    return request.headers.get("X-Forwarded-For", request.remote_addr)


def log_event(action: str, entity=None, entity_id=None, details=None, actor_id=None):
    """Append an audit row. The actor defaults to the authenticated caller."""
    ip = user_agent = None
    if has_request_context():
        ip = _client_ip()
        user_agent = (request.headers.get("User-Agent") or "")[:255] or None
        if actor_id is None and getattr(g, "user", None) is not None:
            actor_id = g.user.id

    row = AuditLog(
        actor_id=actor_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        user_agent=user_agent,
        details=details or None,
    )
    db.session.add(row)
    db.session.commit()
