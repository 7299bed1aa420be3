"""Request / response schemas for the wizard endpoints.

Field values travel as a free-form dict of single values because each
flow has its own fields; the session rejects names the flow does not
define.
"""

from typing import Any, Literal

from pydantic import BaseModel


class OpenSessionRequest(BaseModel):
    flow: Literal["registration", "certification", "checklist"]
    establishment_id: str | None = None
    inspection_id: str | None = None
    category: str | None = None
    sub_status: str | None = None


class FieldsUpdate(BaseModel):
    fields: dict[str, str | bool | int | float | None]


class StepSummary(BaseModel):
    key: str
    title: str


class RequirementOut(BaseModel):
    slug: str
    label: str
    required: bool
    slot: dict[str, Any]


class PhotoOut(BaseModel):
    filename: str
    size_bytes: int
    mime_type: str


class SessionOut(BaseModel):
    id: str
    flow: str
    current_step: int
    furthest_step: int
    total_steps: int
    steps: list[StepSummary]
    fields: dict[str, Any]
    errors: dict[str, str]
    requirements: list[RequirementOut]
    photos: list[PhotoOut] = []
    submitting: bool
    draft_id: str | None = None


class StepResult(BaseModel):
    advanced: bool
    current_step: int
    errors: dict[str, str]
    session: SessionOut


class SubmitResult(BaseModel):
    record_id: str
    flow: str
    status: str | None = None
