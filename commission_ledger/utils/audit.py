"""
Audit trail for privileged writes.

Config changes, settlements and redistributions each leave one AuditLog
row in the same transaction as the change itself.
"""

from datetime import date
from decimal import Decimal
from typing import Any, Mapping, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from commission_ledger.models.audit import AuditAction, AuditLog


def jsonable(value: Any) -> Any:
    """Convert money and dates so the metadata fits a JSON column."""
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {str(k): jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [jsonable(v) for v in value]
    if hasattr(value, "value") and isinstance(value.value, str):
        return value.value
    return value


async def log_action(
    db: AsyncSession,
    actor_id: int,
    action: AuditAction,
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    action_metadata: Optional[Mapping[str, Any]] = None,
    ip_address: Optional[str] = None,
) -> AuditLog:
    """
    Add an audit row to the session.

    The row is flushed and committed together with the change it
    describes, so callers commit, never this function.

    Args:
        db: Session carrying the audited change
        actor_id: Actor who performed the action
        action: What was done
        target_type: "config", "ledger" or "distribution"
        target_id: ID of the affected row
        action_metadata: Extra context; Decimal, date and enum values are stringified
        ip_address: Client IP address
    """
    entry = AuditLog(
        actor_id=actor_id,
        action=action,
        target_type=target_type,
        target_id=target_id,
        action_metadata=jsonable(action_metadata) if action_metadata is not None else None,
        ip_address=ip_address,
    )
    db.add(entry)
    return entry


def get_client_ip(request) -> Optional[str]:
    """Client address, honouring X-Forwarded-For behind a reverse proxy."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()

    if request.client:
        return request.client.host

    return None
