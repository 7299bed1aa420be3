"""Opening wizard sessions and wiring them to their gateways.

  registration   edits an establishment the owner added (or creates one)
  certification  starts from the owner's registered establishment; resumes
                 the pending application of the chosen type when one exists
  checklist      starts from an inspection assigned to the inspector

Open sessions live in the process-wide `session_registry`.
"""

import logging
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from firecert.config import settings
from firecert.middleware.exceptions import (
    BusinessLogicError,
    PermissionDeniedError,
    ResourceNotFoundError,
)
from firecert.models.establishment import Establishment
from firecert.models.inspection import Inspection
from firecert.models.user import User, UserRole
from firecert.services.records import (
    ApplicationGateway,
    ChecklistGateway,
    EstablishmentGateway,
    row_to_dict,
)
from firecert.wizard.flows import get_flow
from firecert.wizard.registry import SessionRegistry
from firecert.wizard.session import WizardSession
from firecert.wizard.slots import FilePolicy

logger = logging.getLogger(__name__)

session_registry = SessionRegistry(settings.session_ttl_minutes)

_GATEWAYS = {
    "registration": EstablishmentGateway,
    "certification": ApplicationGateway,
    "checklist": ChecklistGateway,
}


def get_session_registry() -> SessionRegistry:
    return session_registry


def file_policy() -> FilePolicy:
    prefixes = tuple(
        p.strip() for p in settings.blocked_mime_prefixes.split(",") if p.strip()
    )
    return FilePolicy(max_bytes=settings.max_upload_bytes, blocked_mime_prefixes=prefixes)


def gateway_for(flow_name: str, db: AsyncSession):
    return _GATEWAYS[flow_name](db)


async def _owned_establishment(
    db: AsyncSession, user: User, establishment_id: str,
) -> Establishment:
    establishment = await db.get(Establishment, establishment_id)
    if establishment is None or establishment.owner_id != user.id:
        raise ResourceNotFoundError("Establishment", establishment_id)
    return establishment


def establishment_prefill(establishment: Establishment) -> dict[str, Any]:
    """Application snapshot fields taken from the establishment record."""
    def text(value):
        return None if value is None else str(value)

    prefill = {
        "dti_number": establishment.dti_number,
        "establishment_name": establishment.name,
        "establishment_type": establishment.type,
        "occupancy": establishment.occupancy,
        "storeys": text(establishment.storeys),
        "floor_area": text(establishment.floor_area),
        "occupants": text(establishment.occupants),
        "latitude": establishment.latitude,
        "longitude": establishment.longitude,
    }
    for name in (
        "street", "barangay", "city", "province", "region",
        "owner_first_name", "owner_last_name", "owner_middle_name",
        "owner_suffix", "owner_email", "owner_mobile", "owner_landline",
        "rep_first_name", "rep_last_name", "rep_middle_name",
        "rep_suffix", "rep_email", "rep_mobile", "rep_landline",
    ):
        prefill[name] = getattr(establishment, name)
    return prefill


# ── Per-flow openers ─────────────────────────────────────────

async def _open_registration(db, user, *, establishment_id=None, **_) -> WizardSession:
    flow = get_flow("registration")
    context = {"owner_id": user.id}
    if not establishment_id:
        return WizardSession(flow, owner_id=user.id, context=context, policy=file_policy())

    establishment = await _owned_establishment(db, user, establishment_id)
    if establishment.status == "registered":
        raise BusinessLogicError(
            "This establishment is already registered",
            error_code="ESTABLISHMENT_ALREADY_REGISTERED",
        )
    return WizardSession.from_draft(
        flow, row_to_dict(establishment),
        draft_id=establishment.id,
        owner_id=user.id, context=context, policy=file_policy(),
    )


async def _open_certification(
    db, user, *, establishment_id=None, category=None, sub_status=None, **_,
) -> WizardSession:
    flow = get_flow("certification")
    if not establishment_id:
        raise BusinessLogicError(
            "establishment_id is required", error_code="ESTABLISHMENT_REQUIRED",
        )
    establishment = await _owned_establishment(db, user, establishment_id)
    if establishment.status != "registered":
        raise BusinessLogicError(
            "Only registered establishments can apply for certification",
            error_code="ESTABLISHMENT_NOT_REGISTERED",
        )
    context = {"owner_id": user.id, "establishment_id": establishment.id}

    if category:
        draft = await ApplicationGateway(db).find_pending_record(
            establishment_id=establishment.id, category=category, owner_id=user.id,
        )
        if draft is not None:
            logger.info(
                f"Resuming pending {category} application {draft.id}",
                extra={"owner_id": user.id, "application_id": draft.id},
            )
            return WizardSession.from_draft(
                flow, row_to_dict(draft),
                draft_id=draft.id,
                owner_id=user.id, context=context, policy=file_policy(),
            )

    session = WizardSession(flow, owner_id=user.id, context=context, policy=file_policy())
    session.load_record(establishment_prefill(establishment))
    if category:
        session.set_field("type", category)
    if sub_status:
        session.set_field("business_status", sub_status)
    return session


async def _open_checklist(
    db, user, *, inspection_id=None, category=None, **_,
) -> WizardSession:
    flow = get_flow("checklist")
    if not inspection_id:
        raise BusinessLogicError(
            "inspection_id is required", error_code="INSPECTION_REQUIRED",
        )
    inspection = await db.get(Inspection, inspection_id)
    if inspection is None:
        raise ResourceNotFoundError("Inspection", inspection_id)
    if inspection.inspector_id != user.id and user.role != UserRole.ADMIN:
        raise PermissionDeniedError("This inspection is assigned to another inspector")
    if inspection.status in ("inspected", "approved", "rejected", "cancelled"):
        raise BusinessLogicError(
            f"Inspection is already {inspection.status}",
            error_code="INSPECTION_CLOSED",
        )

    context = {
        "inspection_id": inspection.id,
        "establishment_id": inspection.establishment_id,
        "inspector_id": user.id,
        "establishment_name": inspection.establishment_name,
    }
    session = WizardSession(flow, owner_id=user.id, context=context, policy=file_policy())
    session.load_record({
        "inspector_name": user.full_name,
        "business_name": inspection.establishment_name,
    })
    if category:
        session.set_field("business_scale", category)
    return session


_OPENERS = {
    "registration": _open_registration,
    "certification": _open_certification,
    "checklist": _open_checklist,
}


async def open_wizard_session(
    db: AsyncSession,
    user: User,
    flow_name: str,
    **options: Any,
) -> WizardSession:
    opener = _OPENERS.get(flow_name)
    if opener is None:
        raise BusinessLogicError(f"Unknown wizard flow: {flow_name}", error_code="UNKNOWN_FLOW")
    session = await opener(db, user, **options)
    return session_registry.open(session)
