"""Submission reconciler — turns a finished session into one stored record.

Order of work:
  1. re-validate every step (the session jumps to the first failing one)
  2. upload each staged file and photo; the session is untouched until
     all succeed
  3. build the flat record from the flow's field groups
  4. check that no other pending record exists for the same
     (establishment, category, owner)
  5. update the draft being edited, or insert a new record
  6. hand the record to on_submitted, if given
  7. run commit, if given; the session is discarded only after it succeeds

Errors are returned on the outcome, never raised.  The session keeps all
its fields, slots and photos after a failure so the user can retry.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Union

from pydantic import ValidationError

from firecert.middleware.exceptions import FireCertException
from firecert.wizard.errors import (
    DocumentUploadFailed,
    DuplicatePendingApplication,
    PersistenceError,
    SessionBusy,
    ValidationFailed,
)
from firecert.wizard.gateways import DocumentStore, RecordGateway
from firecert.wizard.session import WizardSession

logger = logging.getLogger(__name__)

OnSubmitted = Callable[[Any], Union[Awaitable[None], None]]
Commit = Callable[[], Awaitable[None]]


@dataclass
class SubmissionOutcome:
    record_id: str | None = None
    record: Any = None
    error: FireCertException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


def _pydantic_errors(exc: ValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        name = str(err["loc"][0]) if err["loc"] else "general"
        errors.setdefault(name, err["msg"])
    return errors


class SubmissionReconciler:
    def __init__(
        self,
        gateway: RecordGateway,
        documents: DocumentStore,
        on_submitted: OnSubmitted | None = None,
        commit: Commit | None = None,
    ):
        self.gateway = gateway
        self.documents = documents
        self.on_submitted = on_submitted
        self.commit = commit

    async def submit(self, session: WizardSession) -> SubmissionOutcome:
        if session.submitting:
            return SubmissionOutcome(error=SessionBusy())
        session.submitting = True
        try:
            outcome = await self._submit(session)
            await self._notify(outcome.record)
            if self.commit is not None:
                await self.commit()
        except FireCertException as exc:
            logger.warning(
                f"{session.flow.name} submission failed: {exc.error_code}",
                extra={"session_id": session.id, "error_code": exc.error_code},
            )
            return SubmissionOutcome(error=exc)
        except Exception:
            logger.exception(
                f"{session.flow.name} submission could not be saved",
                extra={"session_id": session.id},
            )
            return SubmissionOutcome(error=PersistenceError())
        finally:
            session.submitting = False

        session.discard()
        return outcome

    async def _submit(self, session: WizardSession) -> SubmissionOutcome:
        flow = session.flow

        errors, first_failing = await session.validate_all(self.gateway)
        if errors:
            session.errors = errors
            session.current_step = first_failing
            raise ValidationFailed(errors, step=first_failing)

        uploaded = await self._upload(session)
        wanted = {req.slug for req in session.requirements}
        documents = {
            slug: url
            for slug, url in {**session.slots.persisted(), **uploaded}.items()
            if slug in wanted
        }

        try:
            attrs = flow.build_record(session.fields, documents)
        except ValidationError as exc:
            raise ValidationFailed(_pydantic_errors(exc)) from exc
        attrs.update(session.context)
        if flow.photo_field:
            attrs[flow.photo_field] = await self._upload_photos(session)
        if flow.initial_status:
            attrs["status"] = flow.initial_status

        if flow.unique_pending:
            existing = await self.gateway.find_pending_record(
                establishment_id=attrs.get("establishment_id"),
                category=flow.category(session.fields),
                owner_id=session.owner_id,
                exclude_id=session.draft_id,
            )
            if existing is not None:
                raise DuplicatePendingApplication()

        if session.draft_id:
            record = await self.gateway.update_record(session.draft_id, attrs)
        else:
            record = await self.gateway.insert_record(attrs)

        logger.info(
            f"{flow.name} submitted: {record.id}",
            extra={
                "session_id": session.id,
                "record_id": record.id,
                "draft": bool(session.draft_id),
                "documents": len(documents),
            },
        )
        return SubmissionOutcome(record_id=record.id, record=record)

    async def _upload(self, session: WizardSession) -> dict[str, str]:
        urls: dict[str, str] = {}
        wanted = {req.slug for req in session.requirements}
        prefix = f"{session.flow.name}/{session.owner_id}"
        for slug, staged in session.slots.staged().items():
            if slug not in wanted:
                continue
            try:
                urls[slug] = await self.documents.upload_document(
                    slug, staged, prefix=prefix,
                )
            except Exception as exc:
                logger.error(
                    f"Upload of {slug} failed: {exc}",
                    extra={"session_id": session.id, "slug": slug},
                    exc_info=True,
                )
                raise DocumentUploadFailed(slug) from exc
        return urls

    async def _upload_photos(self, session: WizardSession) -> list[str]:
        slug = session.flow.photo_field
        prefix = f"{session.flow.name}/{session.owner_id}"
        urls: list[str] = []
        for staged in session.photos.staged():
            try:
                urls.append(await self.documents.upload_document(
                    slug, staged, prefix=prefix,
                ))
            except Exception as exc:
                logger.error(
                    f"Upload of photo {staged.filename} failed: {exc}",
                    extra={"session_id": session.id, "slug": slug},
                    exc_info=True,
                )
                raise DocumentUploadFailed(slug) from exc
        return urls

    async def _notify(self, record: Any) -> None:
        if self.on_submitted is None:
            return
        try:
            result = self.on_submitted(record)
            if inspect.isawaitable(result):
                await result
        except Exception:
            # Record is already stored
            logger.exception("on_submitted hook failed", extra={"record_id": record.id})
