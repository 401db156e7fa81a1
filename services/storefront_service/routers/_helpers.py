"""Shared helper functions for storefront routers."""

import math
from typing import Optional

from services.storefront_service.models import AuditEntityType, StoreAuditLog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession


async def log_audit(
    db: AsyncSession,
    entity_type: AuditEntityType,
    entity_id,
    action: str,
    performed_by: str,
    old_value: Optional[dict] = None,
    new_value: Optional[dict] = None,
    notes: Optional[str] = None,
):
    """Log an audit event. Committed together with the change it records."""
    audit_log = StoreAuditLog(
        entity_type=entity_type,
        entity_id=str(entity_id),
        action=action,
        old_value=old_value,
        new_value=new_value,
        performed_by=performed_by,
        notes=notes,
    )
    db.add(audit_log)


async def paginate(db: AsyncSession, query, *, page: int, page_size: int):
    """Return ``(rows, total, total_pages)`` for a select."""
    count_query = select(func.count()).select_from(query.subquery())
    total_result = await db.execute(count_query)
    total = total_result.scalar_one()

    result = await db.execute(query.offset((page - 1) * page_size).limit(page_size))
    rows = result.scalars().unique().all()
    return rows, total, math.ceil(total / page_size) if total else 0
