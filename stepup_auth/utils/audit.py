from typing import Optional, Dict, Any
from flask import request, current_app

from ..extensions import db
from ..models.audit_log import AuditLog

def audit_log(
    action: str,
    user_id=None,
    entity_type: Optional[str] = "AUTH",
    details: Optional[Dict[str, Any]] = None,
) -> None:
    ip = request.headers.get("X-Forwarded-For", request.remote_addr)
    ua = request.headers.get("User-Agent")

    log = AuditLog(
        user_id=user_id if user_id else None,
        action=action,
        entity_type=entity_type,
        ip_address=ip,
        user_agent=ua[:255] if ua else None,
        details=details or None,
    )
    db.session.add(log)

def safe_audit(action: str, user_id=None, details: Optional[Dict[str, Any]] = None) -> None:
    """
    Best-effort audit for login outcomes.
    Does not break the endpoint if auditing fails.
    """
    try:
        audit_log(action=action, user_id=user_id, details=details or {})
        db.session.commit()
    except Exception:
        db.session.rollback()
        current_app.logger.exception("Audit logging failed: %s", action)
