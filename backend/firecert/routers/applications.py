"""Certification applications — listing, review and cancellation.

Endpoints (prefix /api/applications):
  GET   /                 → owners see their own, reviewers see all
  GET   /{id}             → detail incl. document URLs
  POST  /{id}/review      → pending → under_review            (admin)
  POST  /{id}/schedule    → assign an inspection, → scheduled  (admin)
  POST  /{id}/approve     → under_review | inspected → approved (admin)
  POST  /{id}/reject      → … → rejected                       (admin)
  POST  /{id}/cancel      → pending → cancelled                (owner)

Applications are created and edited only through the certification wizard.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from firecert.auth.deps import require_permission
from firecert.database import get_db
from firecert.middleware.exceptions import BusinessLogicError, ResourceNotFoundError
from firecert.models.application import Application, ApplicationStatus
from firecert.models.establishment import Establishment
from firecert.models.inspection import Inspection
from firecert.models.user import User, UserRole
from firecert.schemas.application import (
    ApplicationDetail,
    ApplicationSummary,
    ApproveRequest,
    RejectRequest,
)
from firecert.schemas.common import PaginatedResponse
from firecert.services.review import get_application, transition
from firecert.wizard.requirements import ALL_DOCUMENT_SLUGS

router = APIRouter()


class ScheduleRequest(BaseModel):
    inspector_id: str
    scheduled_date: date


def _sees_everything(user: User) -> bool:
    return user.role in (UserRole.ADMIN, UserRole.INSPECTOR)


def _detail(application: Application) -> ApplicationDetail:
    detail = ApplicationDetail.model_validate(application)
    detail.documents = {
        slug: getattr(application, slug)
        for slug in ALL_DOCUMENT_SLUGS
        if getattr(application, slug)
    }
    return detail


async def _visible_application(
    db: AsyncSession, application_id: str, user: User,
) -> Application:
    application = await get_application(db, application_id)
    if not _sees_everything(user) and application.owner_id != user.id:
        raise ResourceNotFoundError("Application", application_id)
    return application


# ── Queries ──────────────────────────────────────────────────

@router.get("", response_model=PaginatedResponse[ApplicationSummary])
async def list_applications(
    status: str | None = Query(None),
    type: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("application.read")),
):
    stmt = select(Application)
    if not _sees_everything(user):
        stmt = stmt.where(Application.owner_id == user.id)
    if status:
        stmt = stmt.where(Application.status == status)
    if type:
        stmt = stmt.where(Application.type == type)

    total = (await db.execute(select(func.count()).select_from(stmt.subquery()))).scalar_one()
    result = await db.execute(
        stmt.order_by(Application.created_at.desc()).limit(limit).offset(offset)
    )
    items = [ApplicationSummary.model_validate(a) for a in result.scalars().all()]
    return PaginatedResponse(items=items, total=total, limit=limit, offset=offset)


@router.get("/{application_id}", response_model=ApplicationDetail)
async def get_application_detail(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("application.read")),
):
    return _detail(await _visible_application(db, application_id, user))


# ── Review ───────────────────────────────────────────────────

@router.post("/{application_id}/review", response_model=ApplicationDetail)
async def start_review(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("application.review")),
):
    application = await get_application(db, application_id)
    await transition(db, application, ApplicationStatus.UNDER_REVIEW.value, user)
    return _detail(application)


@router.post("/{application_id}/schedule", response_model=ApplicationDetail)
async def schedule_inspection(
    application_id: str,
    body: ScheduleRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("application.review")),
):
    application = await get_application(db, application_id)
    inspector = await db.get(User, body.inspector_id)
    if inspector is None or inspector.role != UserRole.INSPECTOR:
        raise BusinessLogicError("inspector_id must name an inspector", error_code="INVALID_INSPECTOR")

    await transition(db, application, ApplicationStatus.SCHEDULED.value, user)
    establishment = await db.get(Establishment, application.establishment_id)
    db.add(Inspection(
        establishment_id=application.establishment_id,
        application_id=application.id,
        inspector_id=inspector.id,
        establishment_name=application.establishment_name,
        address=establishment.address if establishment else None,
        status="scheduled",
        scheduled_date=body.scheduled_date,
    ))
    await db.flush()
    return _detail(application)


@router.post("/{application_id}/approve", response_model=ApplicationDetail)
async def approve_application(
    application_id: str,
    body: ApproveRequest | None = None,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("application.review")),
):
    application = await get_application(db, application_id)
    await transition(
        db, application, ApplicationStatus.APPROVED.value, user,
        certificate_url=body.certificate_url if body else None,
    )
    return _detail(application)


@router.post("/{application_id}/reject", response_model=ApplicationDetail)
async def reject_application(
    application_id: str,
    body: RejectRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("application.review")),
):
    application = await get_application(db, application_id)
    await transition(
        db, application, ApplicationStatus.REJECTED.value, user,
        reasons=body.reasons, notes=body.notes,
    )
    return _detail(application)


@router.post("/{application_id}/cancel", response_model=ApplicationDetail)
async def cancel_application(
    application_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("application.submit")),
):
    application = await get_application(db, application_id)
    if application.owner_id != user.id:
        raise ResourceNotFoundError("Application", application_id)
    if application.status != ApplicationStatus.PENDING.value:
        raise BusinessLogicError(
            "Only pending applications can be cancelled",
            error_code="INVALID_STATUS_TRANSITION",
        )
    await transition(db, application, ApplicationStatus.CANCELLED.value, user)
    return _detail(application)
