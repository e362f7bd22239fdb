import uuid, json
from sqlalchemy.orm import Session
from travonex.models.audit_log import AuditLog

def log_audit(db: Session, actor_id: str, action: str, entity_type: str, entity_id: str, details: dict | None = None):
    """Append an audit row in the caller's transaction; it commits or rolls back with the mutation."""
    db.add(AuditLog(
        id=str(uuid.uuid4()),
        actor_id=actor_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details_json=json.dumps(details or {}, ensure_ascii=False, default=str),
    ))
