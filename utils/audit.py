import json
import logging

from flask import request
from models import db
from models.audit_log import AuditLog

logger = logging.getLogger(__name__)

def log_event(action: str, user_id=None, entity=None, entity_id=None, metadata=None):
    row = AuditLog(
        user_id=user_id,
        action=action,
        entity=entity,
        entity_id=str(entity_id) if entity_id is not None else None,
        ip=request.headers.get("X-Forwarded-For", request.remote_addr),
        metadata_json=json.dumps(metadata, default=str) if metadata else None,
    )
    db.session.add(row)
    db.session.commit()
    logger.info("%s user=%s %s=%s", action, user_id, entity or "-", entity_id if entity_id is not None else "-")
