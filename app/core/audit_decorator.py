import logging
from functools import wraps
from typing import Callable
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.audit_log import log_audit
from app.core.enums import AuditAction

logger = logging.getLogger(__name__)


def audit_log(action: AuditAction) -> Callable:
    """Record an admin mutation after the wrapped endpoint succeeds.

    The endpoint must take ``db`` and ``current_user`` as keyword arguments;
    path ids ending in ``_id`` become the audited resource id.
    """

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            result = await func(*args, **kwargs)

            db: AsyncSession = kwargs.get("db")
            current_user = kwargs.get("current_user")

            if not db or not current_user:
                return result

            payload = None
            for key in ["payload", "data", "body"]:
                if key in kwargs:
                    payload = kwargs[key]
                    break

            resource_id = next(
                (str(v) for k, v in kwargs.items() if k.endswith("_id") and v is not None),
                getattr(result, "id", None),
            )

            await log_audit(db, current_user.id, action, payload, resource_id=resource_id)
            try:
                await db.commit()
            except Exception as e:
                logger.error(f"Audit commit failed for {action}: {e}")

            return result

        return wrapper
    return decorator
