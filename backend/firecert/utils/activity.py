"""Helper for appending activity log entries.

Usage:
    await log_activity(
        db, user, action="submitted", entity_type="application",
        entity_id=application.id, entity_code=application.type,
        summary="Submitted FSEC application for Sunrise Bakery",
    )

The row joins the current session and is committed with the enclosing
request transaction.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from firecert.models.activity_log import ActivityLog
from firecert.models.user import User


async def log_activity(
    db: AsyncSession,
    user: User,
    *,
    action: str,
    entity_type: str,
    entity_id: str | None = None,
    entity_code: str | None = None,
    summary: str | None = None,
    details: dict | None = None,
) -> None:
    db.add(ActivityLog(
        user_id=user.id,
        user_name=user.full_name,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        entity_code=entity_code,
        summary=summary,
        details=details,
    ))
