"""Certification application wizard (3 steps).

  1. Details     application type plus the type-specific fields;
                 establishment and owner details are prefilled from the
                 establishment record
  2. Documents   the supporting documents for the type (and, for
                 FSIC-Business, the business status)
  3. Review      applicant certifies the submission

Types and their specific fields:
  FSEC            contractor_name
  FSIC-Occupancy  fsec_number
  FSIC-Business   occupancy_permit_no, business_status (New | Renewal)

Only one pending application may exist per (establishment, type, owner);
resubmitting while a pending one exists updates that draft instead.
"""

from firecert.models.application import APPLICATION_TYPES
from firecert.schemas.validators import (
    EMAIL_REGEX,
    LETTERS_ONLY_REGEX,
    MOBILE_REGEX,
    REGISTRY_CODE_REGEX,
    normalize_landline,
    normalize_mobile,
)
from firecert.wizard.flows.base import FieldGroup, Flow
from firecert.wizard.steps import Step, StepContext
from firecert.wizard.validators import (
    choice,
    documents_present,
    must_be_true,
    pattern,
    require,
)

BUSINESS_STATUSES = ("New", "Renewal")


class ApplicationFields(FieldGroup):
    type: str

    dti_number: str
    establishment_name: str
    establishment_type: str | None = None
    occupancy: str | None = None
    storeys: str | None = None
    floor_area: str | None = None
    occupants: str | None = None

    owner_first_name: str
    owner_last_name: str
    owner_middle_name: str | None = None
    owner_suffix: str | None = None
    owner_email: str
    owner_mobile: str
    owner_landline: str | None = None

    rep_first_name: str | None = None
    rep_last_name: str | None = None
    rep_middle_name: str | None = None
    rep_suffix: str | None = None
    rep_email: str | None = None
    rep_mobile: str | None = None
    rep_landline: str | None = None

    street: str
    barangay: str
    city: str | None = None
    province: str | None = None
    region: str | None = None
    latitude: float | None = None
    longitude: float | None = None


class FsecFields(FieldGroup):
    contractor_name: str


class OccupancyFields(FieldGroup):
    fsec_number: str


class BusinessFields(FieldGroup):
    occupancy_permit_no: str
    business_status: str


# ── Step validators ──────────────────────────────────────────

def validate_details(ctx: StepContext) -> dict[str, str]:
    f = ctx.fields
    errors: dict[str, str] = {}
    choice(f, errors, "type", APPLICATION_TYPES, "Select an application type")

    require(f, errors, "dti_number", "DTI number is required")
    require(f, errors, "establishment_name", "Establishment name is required")
    require(f, errors, "owner_first_name", "Owner first name is required")
    require(f, errors, "owner_last_name", "Owner last name is required")
    pattern(
        f, errors, "owner_email", EMAIL_REGEX, "Enter a valid email address",
        required="Owner email is required",
    )
    pattern(
        f, errors, "owner_mobile", MOBILE_REGEX,
        "Mobile number must be 11 digits starting with 09",
        required="Owner mobile number is required",
    )
    require(f, errors, "street", "Street is required")
    require(f, errors, "barangay", "Barangay is required")

    category = f.get("type")
    if category == "FSEC":
        pattern(
            f, errors, "contractor_name", LETTERS_ONLY_REGEX,
            "Contractor name may contain letters only",
            required="Contractor name is required",
        )
    elif category == "FSIC-Occupancy":
        pattern(
            f, errors, "fsec_number", REGISTRY_CODE_REGEX,
            "FSEC number must be 6 to 9 digits",
            required="FSEC number is required",
        )
    elif category == "FSIC-Business":
        pattern(
            f, errors, "occupancy_permit_no", REGISTRY_CODE_REGEX,
            "Occupancy permit number must be 6 to 9 digits",
            required="Occupancy permit number is required",
        )
        choice(
            f, errors, "business_status", BUSINESS_STATUSES,
            "Select New or Renewal",
        )
    return errors


def validate_review(ctx: StepContext) -> dict[str, str]:
    errors: dict[str, str] = {}
    must_be_true(
        ctx.fields, errors, "certified",
        "Please certify that the submitted documents are true copies",
    )
    return errors


CERTIFICATION_FLOW = Flow(
    name="certification",
    entity_type="application",
    steps=(
        Step(
            "details", "Application Details", validate_details,
            fields=("type", "contractor_name", "fsec_number",
                    "occupancy_permit_no", "business_status"),
        ),
        Step("documents", "Supporting Documents", documents_present, documents=True),
        Step("review", "Review & Submit", validate_review, fields=("certified",)),
    ),
    common=ApplicationFields,
    category_field="type",
    sub_status_field="business_status",
    category_groups={
        "FSEC": FsecFields,
        "FSIC-Occupancy": OccupancyFields,
        "FSIC-Business": BusinessFields,
    },
    extra_fields=("certified",),
    normalizers={
        "owner_mobile": normalize_mobile,
        "rep_mobile": normalize_mobile,
        "owner_landline": normalize_landline,
        "rep_landline": normalize_landline,
    },
    uses_documents=True,
    unique_pending=True,
    initial_status="pending",
)
