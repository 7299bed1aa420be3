"""Application and establishment schemas."""

from datetime import datetime

from pydantic import BaseModel, field_validator

from firecert.schemas.validators import validate_dti_number


# ── Establishments ───────────────────────────────────────────

class EstablishmentCreate(BaseModel):
    name: str
    dti_number: str

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Establishment name is required")
        return v

    @field_validator("dti_number")
    @classmethod
    def dti_six_digits(cls, v: str) -> str:
        return validate_dti_number(v)


class EstablishmentOut(BaseModel):
    id: str
    owner_id: str
    name: str
    dti_number: str
    status: str
    type: str | None = None
    occupancy: str | None = None
    address: str | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


# ── Applications ─────────────────────────────────────────────

class ApplicationSummary(BaseModel):
    id: str
    establishment_id: str
    owner_id: str
    type: str
    status: str
    establishment_name: str
    dti_number: str
    business_status: str | None = None
    submitted_at: datetime | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ApplicationDetail(ApplicationSummary):
    contractor_name: str | None = None
    fsec_number: str | None = None
    occupancy_permit_no: str | None = None
    reviewed_by: str | None = None
    certificate_url: str | None = None
    rejection_reasons: list[str] | None = None
    rejection_notes: str | None = None
    documents: dict[str, str] = {}


class ApproveRequest(BaseModel):
    certificate_url: str | None = None


class RejectRequest(BaseModel):
    reasons: list[str]
    notes: str | None = None

    @field_validator("reasons")
    @classmethod
    def at_least_one_reason(cls, v: list[str]) -> list[str]:
        reasons = [r.strip() for r in v if r.strip()]
        if not reasons:
            raise ValueError("Give at least one rejection reason")
        return reasons
