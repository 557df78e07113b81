"""Audit trail for admin actions"""
import logging
from typing import Any, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.audit import Audit
from app.core.enums import AuditAction
from app.core.metrics import audit_logs_created
from app.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


async def log_audit(
    db: AsyncSession,
    user_id: str,
    action: AuditAction,
    payload: Optional[Any] = None,
    resource_id: Optional[str] = None,
) -> None:

    try:
        if payload is None or not (hasattr(payload, "model_dump") or isinstance(payload, dict)):
            payload = {}

        audit_record = Audit(
            user_id=str(user_id),
            action=str(action),
            resource_id=resource_id,
            payload_hash=payload_hash(payload),
        )

        db.add(audit_record)
        await db.flush()
        audit_logs_created.labels(action=str(action)).inc()

    except Exception as e:
        logger.error(f"Audit logging failed for action {action}: {e}", exc_info=True)


async def log_login(
    db: AsyncSession,
    user_id: str,
    username: str
) -> None:
    await log_audit(db, user_id, AuditAction.LOGIN, {"username": username})
