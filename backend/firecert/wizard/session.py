"""WizardSession — the state machine behind one open wizard.

Holds the field values, per-field errors, document slots, photos and the
current step of one user's run through a flow.

  next()          validate the current step; advance only when it passes
  back()          one step back, no validation
  jump_to_step()  go back to an earlier step (never forward)
  reset()         clear everything and return to step 1

None of these raise.  Each returns a StepOutcome; refusals (a submission
in flight, an illegal jump) come back as a typed error on the outcome.
Validator crashes are logged and shown as a single "general" error so a
failing remote lookup never takes the wizard down.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Mapping

from firecert.middleware.exceptions import FireCertException
from firecert.wizard.errors import (
    InvalidStepTransition,
    SessionBusy,
    UnknownField,
    ValidationFailed,
)
from firecert.wizard.flows.base import Flow
from firecert.wizard.requirements import DocumentRequirement
from firecert.wizard.slots import DocumentSlotStore, FilePolicy, PhotoSet, StagedFile
from firecert.wizard.steps import Step, StepContext
from firecert.wizard.validators import is_blank

logger = logging.getLogger(__name__)

GENERAL = "general"

SCALAR_TYPES = (str, bool, int, float, type(None))


@dataclass
class StepOutcome:
    advanced: bool
    current_step: int
    errors: dict[str, str] = field(default_factory=dict)
    error: FireCertException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class WizardSession:
    def __init__(
        self,
        flow: Flow,
        *,
        owner_id: str,
        context: Mapping[str, Any] | None = None,
        policy: FilePolicy | None = None,
        session_id: str | None = None,
    ):
        self.id = session_id or str(uuid.uuid4())
        self.flow = flow
        self.owner_id = owner_id
        # Record attributes fixed by the host (owner_id, establishment_id, ...)
        self.context: dict[str, Any] = dict(context or {})
        self.fields: dict[str, Any] = {}
        self.errors: dict[str, str] = {}
        self.slots = DocumentSlotStore(policy)
        self.photos = PhotoSet(policy)
        self.requirements: tuple[DocumentRequirement, ...] = ()
        self.current_step = 1
        self.furthest_step = 1
        self.draft_id: str | None = None
        self.submitting = False
        self.touched_at = datetime.utcnow()
        self._field_names = frozenset(flow.field_names())

    # ── Construction ─────────────────────────────────────────

    @classmethod
    def from_draft(
        cls, flow: Flow, record: Mapping[str, Any], *, draft_id: str, **kwargs,
    ) -> "WizardSession":
        session = cls(flow, **kwargs)
        session.draft_id = draft_id
        session.load_record(record)
        return session

    def load_record(self, record: Mapping[str, Any]) -> None:
        """Pre-populate fields and document references from a stored record."""
        for name in self._field_names:
            if name in record and record[name] is not None:
                self.fields[name] = record[name]
        for flag, group in self.flow.optional_groups.items():
            if flag not in self.fields:
                self.fields[flag] = any(
                    not is_blank(record.get(col)) for col in group.model_fields
                )
        self.requirements = self.flow.requirements(self.fields)
        self.slots.load(record, [req.slug for req in self.requirements])
        self.slots.sync(self.requirements)

    # ── Derived state ────────────────────────────────────────

    @property
    def category(self) -> str | None:
        return self.flow.category(self.fields)

    @property
    def steps(self) -> tuple[Step, ...]:
        return self.flow.steps_for(self.category)

    @property
    def total_steps(self) -> int:
        return len(self.steps)

    @property
    def step(self) -> Step:
        return self.steps[self.current_step - 1]

    def touch(self) -> None:
        self.touched_at = datetime.utcnow()

    def _busy(self) -> StepOutcome:
        return StepOutcome(False, self.current_step, dict(self.errors), SessionBusy())

    def _context(self, gateway: Any = None) -> StepContext:
        return StepContext(
            fields=self.fields,
            slots=self.slots,
            requirements=self.requirements,
            record_id=self.draft_id,
            gateway=gateway,
        )

    # ── Editing ──────────────────────────────────────────────

    def set_field(self, name: str, value: Any) -> None:
        self.fields[name] = self.flow.normalize(name, value)
        self.errors.pop(name, None)
        if name in (self.flow.category_field, self.flow.sub_status_field):
            self._resolve_requirements()
        self.touch()

    def update_fields(self, values: Mapping[str, Any]) -> StepOutcome:
        """Merge several field values; unknown names reject the whole batch."""
        if self.submitting:
            return self._busy()
        unknown = sorted(k for k in values if k not in self._field_names)
        if unknown:
            return StepOutcome(
                False, self.current_step, dict(self.errors), UnknownField(unknown),
            )
        not_scalar = {
            k: "Enter a single value" for k, v in values.items()
            if not isinstance(v, SCALAR_TYPES)
        }
        if not_scalar:
            return StepOutcome(
                False, self.current_step, dict(self.errors), ValidationFailed(not_scalar),
            )
        for name, value in values.items():
            self.set_field(name, value)
        return StepOutcome(False, self.current_step, dict(self.errors))

    def _resolve_requirements(self) -> None:
        self.requirements = self.flow.requirements(self.fields)
        for slug in self.slots.sync(self.requirements):
            self.errors.pop(slug, None)
        # The step count depends on the category
        total = self.total_steps
        self.current_step = min(self.current_step, total)
        self.furthest_step = min(self.furthest_step, total)

    def _unknown_document(self, slug: str) -> StepOutcome:
        errors = {slug: "This document is not needed for the selected application"}
        return StepOutcome(
            False, self.current_step, dict(self.errors), ValidationFailed(errors),
        )

    def stage_document(self, slug: str, staged: StagedFile) -> StepOutcome:
        if self.submitting:
            return self._busy()
        if slug not in {req.slug for req in self.requirements}:
            return self._unknown_document(slug)
        error = self.slots.stage(slug, staged)
        if error:
            self.errors[slug] = error
            return StepOutcome(
                False, self.current_step, dict(self.errors),
                ValidationFailed({slug: error}),
            )
        self.errors.pop(slug, None)
        self.touch()
        return StepOutcome(False, self.current_step, dict(self.errors))

    def remove_document(self, slug: str) -> StepOutcome:
        if self.submitting:
            return self._busy()
        if slug not in {req.slug for req in self.requirements}:
            return self._unknown_document(slug)
        self.slots.remove(slug)
        self.errors.pop(slug, None)
        self.touch()
        return StepOutcome(False, self.current_step, dict(self.errors))

    def _photo_error(self, message: str) -> StepOutcome:
        key = self.flow.photo_field or "photos"
        return StepOutcome(
            False, self.current_step, dict(self.errors), ValidationFailed({key: message}),
        )

    def add_photo(self, staged: StagedFile) -> StepOutcome:
        if self.submitting:
            return self._busy()
        if not self.flow.photo_field:
            return self._photo_error("Photos cannot be attached to this wizard")
        error = self.photos.add(staged)
        if error:
            return self._photo_error(error)
        self.touch()
        return StepOutcome(False, self.current_step, dict(self.errors))

    def remove_photo(self, position: int) -> StepOutcome:
        """Remove the photo at a 0-based position."""
        if self.submitting:
            return self._busy()
        if not self.photos.remove(position):
            return self._photo_error(f"No photo at position {position}")
        self.touch()
        return StepOutcome(False, self.current_step, dict(self.errors))

    # ── Validation ───────────────────────────────────────────

    async def validate_step(self, index: int, gateway: Any = None) -> dict[str, str]:
        step = self.steps[index - 1]
        ctx = self._context(gateway)
        try:
            errors = step.validator(ctx)
            if not errors and step.remote_check is not None:
                errors = await step.remote_check(ctx)
        except Exception:
            logger.exception(
                f"Validation of {self.flow.name} step '{step.key}' crashed",
                extra={"session_id": self.id, "step": step.key},
            )
            return {GENERAL: f"Could not validate {step.title}. Please try again."}
        return dict(errors)

    async def validate_all(self, gateway: Any = None) -> tuple[dict[str, str], int | None]:
        """Validate every step.  Returns (merged errors, first failing step)."""
        merged: dict[str, str] = {}
        first_failing = None
        for index in range(1, self.total_steps + 1):
            errors = await self.validate_step(index, gateway)
            if errors:
                if first_failing is None:
                    first_failing = index
                for key, message in errors.items():
                    merged.setdefault(key, message)
        return merged, first_failing

    # ── Transitions ──────────────────────────────────────────

    async def next(self, gateway: Any = None) -> StepOutcome:
        if self.submitting:
            return self._busy()
        errors = await self.validate_step(self.current_step, gateway)
        if errors:
            self.errors = errors
            return StepOutcome(False, self.current_step, dict(errors))
        previous = self.current_step
        self.current_step = min(previous + 1, self.total_steps)
        self.furthest_step = max(self.furthest_step, self.current_step)
        self.errors = {}
        self.touch()
        return StepOutcome(self.current_step > previous, self.current_step)

    def back(self) -> StepOutcome:
        if self.submitting:
            return self._busy()
        self.current_step = max(1, self.current_step - 1)
        self.errors = {}
        self.touch()
        return StepOutcome(False, self.current_step)

    def jump_to_step(self, step: int) -> StepOutcome:
        if self.submitting:
            return self._busy()
        # Backward only; moving forward always goes through next()
        if not 1 <= step <= self.current_step:
            return StepOutcome(
                False, self.current_step, dict(self.errors),
                InvalidStepTransition(step, self.current_step),
            )
        self.current_step = step
        self.errors = {}
        self.touch()
        return StepOutcome(False, self.current_step)

    def reset(self) -> StepOutcome:
        if self.submitting:
            return self._busy()
        self.fields.clear()
        self.errors = {}
        self.slots.clear()
        self.photos.clear()
        self.requirements = ()
        self.current_step = 1
        self.furthest_step = 1
        self.touch()
        return StepOutcome(False, self.current_step)

    def discard(self) -> FireCertException | None:
        """Drop staged bytes and field values before the session is closed."""
        if self.submitting:
            return SessionBusy()
        self.fields.clear()
        self.slots.clear()
        self.photos.clear()
        return None

    # ── Views ────────────────────────────────────────────────

    def snapshot(self) -> dict[str, Any]:
        slots = self.slots.snapshot()
        return {
            "id": self.id,
            "flow": self.flow.name,
            "current_step": self.current_step,
            "furthest_step": self.furthest_step,
            "total_steps": self.total_steps,
            "steps": [{"key": s.key, "title": s.title} for s in self.steps],
            "fields": dict(self.fields),
            "errors": dict(self.errors),
            "requirements": [
                {
                    "slug": req.slug,
                    "label": req.label,
                    "required": req.required,
                    "slot": slots.get(req.slug, {"state": "empty"}),
                }
                for req in self.requirements
            ],
            "photos": self.photos.snapshot(),
            "submitting": self.submitting,
            "draft_id": self.draft_id,
        }
