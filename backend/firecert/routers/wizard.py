"""Wizard endpoints — multi-step registration, certification and checklist.

Endpoints (prefix /api/wizard):
  POST   /sessions                        → open a session (fresh or on a draft)
  GET    /sessions/{id}                   → snapshot
  PATCH  /sessions/{id}/fields            → merge field values
  PUT    /sessions/{id}/documents/{slug}  → stage a file (multipart)
  DELETE /sessions/{id}/documents/{slug}  → clear a document slot
  POST   /sessions/{id}/photos            → attach a photo (multipart, checklist)
  DELETE /sessions/{id}/photos/{position} → drop a photo
  POST   /sessions/{id}/next | back | jump/{step} | reset
  POST   /sessions/{id}/submit            → persist the record
  DELETE /sessions/{id}                   → cancel

Design:
  - Sessions live in memory and belong to the user who opened them.
  - Nothing touches the database or the document store until submit;
    the only exception is the duplicate lookup on registration step 1.
  - Submit commits before the session is forgotten, so a failed commit
    leaves the session open for a retry.
  - Step validation failures are normal responses (errors in the body);
    refusals and submit failures use the standard error envelope.
"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from firecert.auth.deps import get_current_user
from firecert.auth.permissions import has_permission
from firecert.database import get_db
from firecert.middleware.exceptions import PermissionDeniedError
from firecert.models.user import User
from firecert.schemas.wizard import (
    FieldsUpdate,
    OpenSessionRequest,
    SessionOut,
    StepResult,
    SubmitResult,
)
from firecert.services.sessions import (
    gateway_for,
    get_session_registry,
    open_wizard_session,
)
from firecert.services.storage import get_document_store
from firecert.utils.activity import log_activity
from firecert.wizard.reconciler import SubmissionReconciler
from firecert.wizard.registry import SessionRegistry
from firecert.wizard.session import StepOutcome, WizardSession
from firecert.wizard.slots import StagedFile

router = APIRouter()

FLOW_PERMISSIONS = {
    "registration": "establishment.write",
    "certification": "application.submit",
    "checklist": "inspection.submit",
}


# ── Helpers ──────────────────────────────────────────────────

def _check_flow_permission(user: User, flow: str) -> None:
    granted = getattr(user, "_token_payload", {}).get("permissions", [])
    if not has_permission(granted, FLOW_PERMISSIONS[flow]):
        raise PermissionDeniedError(f"Missing permission: {FLOW_PERMISSIONS[flow]}")


async def get_wizard_session(
    session_id: str,
    user: User = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
) -> WizardSession:
    return registry.get(session_id, user.id)


def _session_out(session: WizardSession) -> SessionOut:
    return SessionOut(**session.snapshot())


def _staged_file(file: UploadFile, content: bytes, default_name: str) -> StagedFile:
    return StagedFile(
        filename=file.filename or default_name,
        content=content,
        mime_type=file.content_type or "application/octet-stream",
    )


def _step_result(session: WizardSession, outcome: StepOutcome) -> StepResult:
    if outcome.error is not None:
        raise outcome.error
    return StepResult(
        advanced=outcome.advanced,
        current_step=outcome.current_step,
        errors=outcome.errors,
        session=_session_out(session),
    )


# ── Lifecycle ────────────────────────────────────────────────

@router.post("/sessions", response_model=SessionOut, status_code=status.HTTP_201_CREATED)
async def open_session(
    body: OpenSessionRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
):
    _check_flow_permission(user, body.flow)
    session = await open_wizard_session(
        db, user, body.flow,
        establishment_id=body.establishment_id,
        inspection_id=body.inspection_id,
        category=body.category,
        sub_status=body.sub_status,
    )
    return _session_out(session)


@router.get("/sessions/{session_id}", response_model=SessionOut)
async def get_session(session: WizardSession = Depends(get_wizard_session)):
    return _session_out(session)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def cancel_session(
    session_id: str,
    user: User = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
):
    registry.close(session_id, user.id)


# ── Editing ──────────────────────────────────────────────────

@router.patch("/sessions/{session_id}/fields", response_model=StepResult)
async def update_fields(
    body: FieldsUpdate,
    session: WizardSession = Depends(get_wizard_session),
):
    return _step_result(session, session.update_fields(body.fields))


@router.put("/sessions/{session_id}/documents/{slug}", response_model=StepResult)
async def stage_document(
    slug: str,
    file: UploadFile = File(...),
    session: WizardSession = Depends(get_wizard_session),
):
    staged = _staged_file(file, await file.read(), slug)
    return _step_result(session, session.stage_document(slug, staged))


@router.delete("/sessions/{session_id}/documents/{slug}", response_model=StepResult)
async def remove_document(
    slug: str,
    session: WizardSession = Depends(get_wizard_session),
):
    return _step_result(session, session.remove_document(slug))


@router.post("/sessions/{session_id}/photos", response_model=StepResult)
async def add_photo(
    file: UploadFile = File(...),
    session: WizardSession = Depends(get_wizard_session),
):
    staged = _staged_file(file, await file.read(), "photo")
    return _step_result(session, session.add_photo(staged))


@router.delete("/sessions/{session_id}/photos/{position}", response_model=StepResult)
async def remove_photo(
    position: int,
    session: WizardSession = Depends(get_wizard_session),
):
    return _step_result(session, session.remove_photo(position))


# ── Navigation ───────────────────────────────────────────────

@router.post("/sessions/{session_id}/next", response_model=StepResult)
async def next_step(
    session: WizardSession = Depends(get_wizard_session),
    db: AsyncSession = Depends(get_db),
):
    outcome = await session.next(gateway=gateway_for(session.flow.name, db))
    return _step_result(session, outcome)


@router.post("/sessions/{session_id}/back", response_model=StepResult)
async def previous_step(session: WizardSession = Depends(get_wizard_session)):
    return _step_result(session, session.back())


@router.post("/sessions/{session_id}/jump/{step}", response_model=StepResult)
async def jump_to_step(step: int, session: WizardSession = Depends(get_wizard_session)):
    return _step_result(session, session.jump_to_step(step))


@router.post("/sessions/{session_id}/reset", response_model=StepResult)
async def reset_session(session: WizardSession = Depends(get_wizard_session)):
    return _step_result(session, session.reset())


# ── Submit ───────────────────────────────────────────────────

@router.post(
    "/sessions/{session_id}/submit",
    response_model=SubmitResult,
    status_code=status.HTTP_201_CREATED,
)
async def submit_session(
    session: WizardSession = Depends(get_wizard_session),
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_current_user),
    registry: SessionRegistry = Depends(get_session_registry),
    documents=Depends(get_document_store),
):
    flow = session.flow
    editing = session.draft_id is not None

    async def record_activity(record) -> None:
        name = getattr(record, "establishment_name", None) or getattr(record, "name", "")
        await log_activity(
            db, user,
            action="updated" if editing else "submitted",
            entity_type=flow.entity_type,
            entity_id=record.id,
            entity_code=getattr(record, "type", None) or flow.name,
            summary=f"{'Updated' if editing else 'Submitted'} {flow.name} for {name}",
        )

    reconciler = SubmissionReconciler(
        gateway_for(flow.name, db), documents,
        on_submitted=record_activity, commit=db.commit,
    )
    outcome = await reconciler.submit(session)
    if outcome.error is not None:
        raise outcome.error

    registry.forget(session.id)
    return SubmitResult(
        record_id=outcome.record_id,
        flow=flow.name,
        status=getattr(outcome.record, "status", None),
    )
