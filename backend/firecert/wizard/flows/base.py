"""Flow — the definition of one wizard.

A flow lists its steps, names the field that selects the category (and
optional sub-status), and describes how the collected fields become a
record:

  common            fields persisted for every category
  category_groups   one field group per category; only the selected
                    category's group keeps its values, every other
                    group's columns are written as None
  optional_groups   groups switched on by a boolean flag field
                    (e.g. has_representative)
  extra_fields      wizard-only inputs that are never persisted
  photo_field       record column (JSON list) that receives uploaded photo
                    URLs; None when the wizard takes no photos

Field groups are pydantic models, so the record is validated at the
boundary before it reaches the database.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, field_validator

from firecert.wizard.requirements import (
    ALL_DOCUMENT_SLUGS,
    DocumentRequirement,
    resolve_requirements,
)
from firecert.wizard.steps import Step, StepContext


class FieldGroup(BaseModel):
    """Base for record field groups: strips strings, blanks become None."""

    model_config = ConfigDict(
        extra="ignore",
        str_strip_whitespace=True,
        coerce_numbers_to_str=True,
    )

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


def _columns(group: type[FieldGroup]) -> tuple[str, ...]:
    return tuple(group.model_fields)


@dataclass(frozen=True)
class Flow:
    name: str
    entity_type: str
    steps: tuple[Step, ...]
    common: type[FieldGroup]
    category_field: str | None = None
    sub_status_field: str | None = None
    category_groups: Mapping[str, type[FieldGroup]] = field(default_factory=dict)
    optional_groups: Mapping[str, type[FieldGroup]] = field(default_factory=dict)
    extra_fields: tuple[str, ...] = ()
    normalizers: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
    uses_documents: bool = False
    unique_pending: bool = False
    initial_status: str | None = None
    photo_field: str | None = None
    finalize: Callable[[dict, Mapping[str, Any]], dict] | None = None

    # ── Categories & steps ───────────────────────────────────

    def category(self, fields: Mapping[str, Any]) -> str | None:
        if not self.category_field:
            return None
        return fields.get(self.category_field) or None

    def sub_status(self, fields: Mapping[str, Any]) -> str | None:
        if not self.sub_status_field:
            return None
        return fields.get(self.sub_status_field) or None

    def steps_for(self, category: str | None) -> tuple[Step, ...]:
        return tuple(s for s in self.steps if s.applies_to(category))

    def total_steps(self, category: str | None) -> int:
        return len(self.steps_for(category))

    def requirements(self, fields: Mapping[str, Any]) -> tuple[DocumentRequirement, ...]:
        if not self.uses_documents:
            return ()
        return resolve_requirements(self.category(fields), self.sub_status(fields))

    def validate_step(self, step_index: int, ctx: StepContext) -> dict[str, str]:
        """Run the local rules of the 1-based step for the current category."""
        steps = self.steps_for(self.category(ctx.fields))
        return steps[step_index - 1].validator(ctx)

    # ── Fields ───────────────────────────────────────────────

    def field_names(self) -> tuple[str, ...]:
        names: list[str] = list(_columns(self.common))
        for group in (*self.category_groups.values(), *self.optional_groups.values()):
            names.extend(_columns(group))
        names.extend(self.optional_groups)
        names.extend(self.extra_fields)
        return tuple(dict.fromkeys(names))

    def record_columns(self) -> tuple[str, ...]:
        """Columns a record built by this flow may carry (documents included)."""
        names = [n for n in self.field_names() if n not in self.extra_fields]
        names = [n for n in names if n not in self.optional_groups]
        if self.uses_documents:
            names.extend(ALL_DOCUMENT_SLUGS)
        if self.photo_field:
            names.append(self.photo_field)
        return tuple(dict.fromkeys(names))

    def normalize(self, name: str, value: Any) -> Any:
        fn = self.normalizers.get(name)
        if fn is None or not isinstance(value, str):
            return value
        return fn(value)

    # ── Record ───────────────────────────────────────────────

    def build_record(
        self, fields: Mapping[str, Any], documents: Mapping[str, str] | None = None,
    ) -> dict[str, Any]:
        """Flatten the session fields into record attributes.

        Raises pydantic.ValidationError when a group rejects its values.
        """
        attrs = self.common.model_validate(fields).model_dump()

        selected = self.category_groups.get(self.category(fields))
        for group in self.category_groups.values():
            if group is not selected:
                attrs.update(dict.fromkeys(_columns(group), None))

        for flag, group in self.optional_groups.items():
            if fields.get(flag):
                attrs.update(group.model_validate(fields).model_dump())
            else:
                attrs.update(dict.fromkeys(_columns(group), None))

        if selected is not None:
            attrs.update(selected.model_validate(fields).model_dump())

        if self.uses_documents:
            attrs.update(dict.fromkeys(ALL_DOCUMENT_SLUGS, None))
            attrs.update(documents or {})

        if self.finalize is not None:
            attrs = self.finalize(attrs, fields)
        return attrs
