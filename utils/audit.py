import json
from flask import request, current_app
from models import db
from models.audit_log import AuditLog

def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    """
    Persist a business/security event and mirror it to the app logger.
    Commits the current session.
    """
    ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    user_agent = request.headers.get("User-Agent", "")

    row = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=ip,
        user_agent=user_agent[:255] if user_agent else None,
        metadata_json=json.dumps(metadata, default=str) if metadata else None
    )
    db.session.add(row)
    db.session.commit()

    current_app.logger.info(
        "audit action=%s user_id=%s entity=%s entity_id=%s",
        action, user_id, entity, entity_id,
    )
