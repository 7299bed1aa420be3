"""Application review workflow.

State machine:
  pending       → under_review | scheduled | rejected | cancelled
  under_review  → scheduled | approved | rejected
  scheduled     → inspected | cancelled
  inspected     → approved | rejected
  approved, rejected, cancelled are terminal.

Every transition is written to the activity log.
"""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from firecert.middleware.exceptions import InvalidStatusTransition, ResourceNotFoundError
from firecert.models.application import Application, ApplicationStatus as S
from firecert.models.user import User
from firecert.utils.activity import log_activity

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    S.PENDING.value: {S.UNDER_REVIEW.value, S.SCHEDULED.value, S.REJECTED.value, S.CANCELLED.value},
    S.UNDER_REVIEW.value: {S.SCHEDULED.value, S.APPROVED.value, S.REJECTED.value},
    S.SCHEDULED.value: {S.INSPECTED.value, S.CANCELLED.value},
    S.INSPECTED.value: {S.APPROVED.value, S.REJECTED.value},
    S.APPROVED.value: set(),
    S.REJECTED.value: set(),
    S.CANCELLED.value: set(),
}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


async def get_application(db: AsyncSession, application_id: str) -> Application:
    result = await db.execute(select(Application).where(Application.id == application_id))
    application = result.scalar_one_or_none()
    if application is None:
        raise ResourceNotFoundError("Application", application_id)
    return application


async def transition(
    db: AsyncSession,
    application: Application,
    target: str,
    user: User,
    *,
    certificate_url: str | None = None,
    reasons: list[str] | None = None,
    notes: str | None = None,
) -> Application:
    """Move an application to *target*, or raise InvalidStatusTransition."""
    current = application.status
    if not can_transition(current, target):
        raise InvalidStatusTransition(current, target)

    application.status = target
    if target != S.CANCELLED.value:
        application.reviewed_by = user.id
    if target == S.APPROVED.value:
        application.certificate_url = certificate_url
    if target == S.REJECTED.value:
        application.rejection_reasons = reasons or []
        application.rejection_notes = notes
    application.updated_at = datetime.utcnow()

    await log_activity(
        db, user,
        action="status_changed",
        entity_type="application",
        entity_id=application.id,
        entity_code=application.type,
        summary=f"{application.type} application for {application.establishment_name}: "
                f"{current} → {target}",
        details={"from": current, "to": target},
    )
    await db.flush()
    logger.info(
        f"Application {application.id}: {current} → {target}",
        extra={"application_id": application.id, "user_id": user.id},
    )
    return application
