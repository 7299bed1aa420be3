"""Inspections — what inspectors have been assigned and what they filed.

Endpoints (prefix /api/inspections):
  GET   /                 → inspectors see their own, admins see all
  GET   /{id}             → detail incl. the filed checklist's photos

Inspections are created by scheduling an application and closed by
the checklist wizard.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from firecert.auth.deps import require_permission
from firecert.database import get_db
from firecert.middleware.exceptions import ResourceNotFoundError
from firecert.models.inspection import Inspection, InspectionChecklist
from firecert.models.user import User, UserRole
from firecert.schemas.inspection import InspectionDetail, InspectionOut

router = APIRouter()


@router.get("", response_model=list[InspectionOut])
async def list_inspections(
    status: str | None = Query(None),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("inspection.read")),
):
    stmt = select(Inspection).order_by(Inspection.created_at.desc())
    if user.role != UserRole.ADMIN:
        stmt = stmt.where(Inspection.inspector_id == user.id)
    if status:
        stmt = stmt.where(Inspection.status == status)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.get("/{inspection_id}", response_model=InspectionDetail)
async def get_inspection(
    inspection_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("inspection.read")),
):
    inspection = await db.get(Inspection, inspection_id)
    if inspection is None or (
        user.role != UserRole.ADMIN and inspection.inspector_id != user.id
    ):
        raise ResourceNotFoundError("Inspection", inspection_id)

    detail = InspectionDetail.model_validate(inspection)
    checklist = (await db.execute(
        select(InspectionChecklist)
        .where(InspectionChecklist.inspection_id == inspection.id)
        .order_by(InspectionChecklist.created_at.desc())
        .limit(1)
    )).scalar_one_or_none()
    if checklist is not None:
        detail.checklist_id = checklist.id
        detail.business_scale = checklist.business_scale
        detail.images = checklist.images or []
    return detail
