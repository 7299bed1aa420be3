"""Establishments — the facilities owners register and certify.

Endpoints (prefix /api/establishments):
  POST  /                → add an unregistered establishment (name + DTI)
  GET   /                → own establishments (all for admins / inspectors)
  GET   /{id}            → one establishment
  POST  /{id}/confirm    → pre_registered → registered (admin)

Details are filled in by the registration wizard.
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from firecert.auth.deps import require_permission, require_role
from firecert.database import get_db
from firecert.middleware.exceptions import (
    BusinessLogicError,
    FireCertException,
    ResourceNotFoundError,
)
from firecert.models.establishment import Establishment
from firecert.models.user import User, UserRole
from firecert.schemas.application import EstablishmentCreate, EstablishmentOut
from firecert.services.records import EstablishmentGateway
from firecert.utils.activity import log_activity

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=EstablishmentOut, status_code=status.HTTP_201_CREATED)
async def add_establishment(
    body: EstablishmentCreate,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("establishment.write")),
):
    conflicts = await EstablishmentGateway(db).find_conflicts(
        name=body.name, dti_number=body.dti_number,
    )
    if conflicts:
        raise FireCertException(
            "An establishment with this name or DTI number already exists",
            status_code=status.HTTP_409_CONFLICT,
            error_code="DUPLICATE_ESTABLISHMENT",
            details={"fields": sorted(conflicts)},
        )

    establishment = Establishment(
        owner_id=user.id,
        name=body.name,
        dti_number=body.dti_number,
        status="unregistered",
    )
    db.add(establishment)
    await db.flush()
    await log_activity(
        db, user,
        action="created",
        entity_type="establishment",
        entity_id=establishment.id,
        entity_code=establishment.dti_number,
        summary=f"Added establishment {establishment.name}",
    )
    logger.info(
        f"Establishment {establishment.id} added",
        extra={"owner_id": user.id, "dti_number": establishment.dti_number},
    )
    return establishment


@router.get("", response_model=list[EstablishmentOut])
async def list_establishments(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("establishment.read")),
):
    stmt = select(Establishment).order_by(Establishment.created_at.desc())
    if user.role == UserRole.OWNER:
        stmt = stmt.where(Establishment.owner_id == user.id)
    result = await db.execute(stmt)
    return result.scalars().all()


@router.get("/{establishment_id}", response_model=EstablishmentOut)
async def get_establishment(
    establishment_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_permission("establishment.read")),
):
    establishment = await db.get(Establishment, establishment_id)
    if establishment is None or (
        user.role == UserRole.OWNER and establishment.owner_id != user.id
    ):
        raise ResourceNotFoundError("Establishment", establishment_id)
    return establishment


@router.post("/{establishment_id}/confirm", response_model=EstablishmentOut)
async def confirm_registration(
    establishment_id: str,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_role(UserRole.ADMIN)),
):
    establishment = await db.get(Establishment, establishment_id)
    if establishment is None:
        raise ResourceNotFoundError("Establishment", establishment_id)
    if establishment.status != "pre_registered":
        raise BusinessLogicError(
            f"Cannot confirm an establishment that is {establishment.status}",
            error_code="INVALID_STATUS_TRANSITION",
        )
    establishment.status = "registered"
    await log_activity(
        db, user,
        action="status_changed",
        entity_type="establishment",
        entity_id=establishment.id,
        entity_code=establishment.dti_number,
        summary=f"Confirmed registration of {establishment.name}",
        details={"from": "pre_registered", "to": "registered"},
    )
    await db.flush()
    return establishment
