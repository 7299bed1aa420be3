"""SQLAlchemy record gateways used by the submission reconciler.

  ApplicationGateway    certification applications (one pending per
                        establishment / type / owner)
  EstablishmentGateway  establishment registration, plus the duplicate
                        name / DTI lookup behind the first wizard step
  ChecklistGateway      inspection checklists; filing one marks the
                        inspection as inspected

Gateways only flush.  The request-scoped session from get_db() commits
on success.
"""

import logging
from datetime import datetime
from typing import Any

from fastapi import status
from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from firecert.middleware.exceptions import (
    BusinessLogicError,
    FireCertException,
    ResourceNotFoundError,
)
from firecert.models.application import Application, ApplicationStatus
from firecert.models.establishment import Establishment
from firecert.models.inspection import Inspection, InspectionChecklist
from firecert.wizard.errors import DuplicatePendingApplication

logger = logging.getLogger(__name__)


def row_to_dict(row: Any) -> dict[str, Any]:
    return {col.key: getattr(row, col.key) for col in row.__table__.columns}


def _is_unique_violation(exc: IntegrityError) -> bool:
    return "unique" in str(exc.orig).lower()


async def _flush(db: AsyncSession, on_unique: FireCertException) -> None:
    try:
        await db.flush()
    except IntegrityError as exc:
        await db.rollback()
        if _is_unique_violation(exc):
            raise on_unique from exc
        raise


# ── Applications ─────────────────────────────────────────────

class ApplicationGateway:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_draft(self, record_id: str) -> dict[str, Any] | None:
        application = await self.db.get(Application, record_id)
        return row_to_dict(application) if application else None

    async def find_pending_record(
        self,
        *,
        establishment_id: str | None,
        category: str | None,
        owner_id: str,
        exclude_id: str | None = None,
    ) -> Application | None:
        stmt = select(Application).where(
            Application.establishment_id == establishment_id,
            Application.type == category,
            Application.owner_id == owner_id,
            Application.status == ApplicationStatus.PENDING.value,
        )
        if exclude_id:
            stmt = stmt.where(Application.id != exclude_id)
        result = await self.db.execute(stmt.limit(1))
        return result.scalar_one_or_none()

    async def insert_record(self, attrs: dict[str, Any]) -> Application:
        application = Application(**attrs, submitted_at=datetime.utcnow())
        self.db.add(application)
        await _flush(self.db, DuplicatePendingApplication())
        return application

    async def update_record(self, record_id: str, attrs: dict[str, Any]) -> Application:
        application = await self.db.get(Application, record_id)
        if application is None:
            raise ResourceNotFoundError("Application", record_id)
        if application.status != ApplicationStatus.PENDING.value:
            raise BusinessLogicError(
                "Only pending applications can be edited",
                error_code="APPLICATION_NOT_EDITABLE",
            )
        for key, value in attrs.items():
            setattr(application, key, value)
        application.submitted_at = datetime.utcnow()
        await _flush(self.db, DuplicatePendingApplication())
        return application


# ── Establishments ───────────────────────────────────────────

def _duplicate_establishment() -> FireCertException:
    return FireCertException(
        "An establishment with this name or DTI number already exists",
        status_code=status.HTTP_409_CONFLICT,
        error_code="DUPLICATE_ESTABLISHMENT",
    )


class EstablishmentGateway:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_draft(self, record_id: str) -> dict[str, Any] | None:
        establishment = await self.db.get(Establishment, record_id)
        return row_to_dict(establishment) if establishment else None

    async def find_conflicts(
        self,
        *,
        name: str | None,
        dti_number: str | None,
        exclude_id: str | None = None,
    ) -> set[str]:
        """Which of name / dti_number another establishment already uses."""
        name = (name or "").strip()
        dti_number = (dti_number or "").strip()
        stmt = select(Establishment.name, Establishment.dti_number).where(
            or_(Establishment.name == name, Establishment.dti_number == dti_number)
        )
        if exclude_id:
            stmt = stmt.where(Establishment.id != exclude_id)
        conflicts: set[str] = set()
        for row in (await self.db.execute(stmt)).all():
            if row.name == name:
                conflicts.add("name")
            if row.dti_number == dti_number:
                conflicts.add("dti_number")
        return conflicts

    async def find_pending_record(self, **kwargs) -> None:
        return None

    async def insert_record(self, attrs: dict[str, Any]) -> Establishment:
        establishment = Establishment(**attrs)
        self.db.add(establishment)
        await _flush(self.db, _duplicate_establishment())
        return establishment

    async def update_record(self, record_id: str, attrs: dict[str, Any]) -> Establishment:
        establishment = await self.db.get(Establishment, record_id)
        if establishment is None:
            raise ResourceNotFoundError("Establishment", record_id)
        if establishment.status == "registered":
            raise BusinessLogicError(
                "This establishment is already registered",
                error_code="ESTABLISHMENT_ALREADY_REGISTERED",
            )
        for key, value in attrs.items():
            setattr(establishment, key, value)
        await _flush(self.db, _duplicate_establishment())
        return establishment


# ── Inspection checklists ────────────────────────────────────

class ChecklistGateway:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def fetch_draft(self, record_id: str) -> dict[str, Any] | None:
        return None

    async def find_pending_record(self, **kwargs) -> None:
        return None

    async def insert_record(self, attrs: dict[str, Any]) -> InspectionChecklist:
        inspection = await self.db.get(Inspection, attrs["inspection_id"])
        if inspection is None:
            raise ResourceNotFoundError("Inspection", attrs["inspection_id"])

        checklist = InspectionChecklist(**attrs)
        self.db.add(checklist)
        inspection.status = "inspected"

        if inspection.application_id:
            application = await self.db.get(Application, inspection.application_id)
            if application and application.status == ApplicationStatus.SCHEDULED.value:
                application.status = ApplicationStatus.INSPECTED.value

        await self.db.flush()
        logger.info(
            f"Inspection {inspection.id} marked inspected",
            extra={"inspection_id": inspection.id, "checklist_id": checklist.id},
        )
        return checklist

    async def update_record(self, record_id: str, attrs: dict[str, Any]) -> Any:
        raise BusinessLogicError(
            "Submitted checklists cannot be edited",
            error_code="CHECKLIST_NOT_EDITABLE",
        )
