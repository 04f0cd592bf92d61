"""Audit trail for state-changing user management requests"""
import logging
from typing import Any, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.audit import Audit
from app.core.enums import AuditAction
from app.core.exceptions import StoreError
from app.core.metrics import audit_logs_created
from app.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


async def log_audit(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    payload: Optional[Any] = None,
    resource_id: Optional[int] = None,
) -> None:
    """
    Stage an audit row on the caller's session.

    The row is flushed but not committed, so it lands in the same transaction
    as the change it describes and disappears with it on rollback. A failed
    flush rolls that whole transaction back and raises StoreError, so no
    change is ever committed without its audit row.
    """
    if payload is None:
        payload = {}

    if hasattr(payload, "model_dump"):
        payload_dict = payload.model_dump(exclude_unset=True)
    elif isinstance(payload, (dict, list)):
        payload_dict = payload
    else:
        payload_dict = {}

    try:
        db.add(Audit(
            user_id=int(user_id),
            action=action,
            resource_id=resource_id,
            payload_hash=payload_hash(payload_dict),
        ))
        await db.flush()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Audit logging failed for action {action}: {e}", exc_info=True)
        raise StoreError("Failed to record audit entry.", str(e))

    audit_logs_created.labels(action=str(action)).inc()
