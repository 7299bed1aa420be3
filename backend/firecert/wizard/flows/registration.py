"""Establishment registration wizard (4 steps).

  1. Details    name, DTI number, building profile
                (remote check: name / DTI not used by another establishment)
  2. Address    street → region, optional map coordinates
  3. Contacts   owner, plus an authorized representative if declared
  4. Review     two declarations must be ticked

Submitting upserts the establishment with status pre_registered.
"""

from typing import Any, Mapping

from firecert.schemas.validators import (
    EMAIL_REGEX,
    LANDLINE_REGEX,
    LETTERS_ONLY_REGEX,
    MOBILE_REGEX,
    REGISTRY_CODE_REGEX,
    normalize_landline,
    normalize_mobile,
)
from firecert.wizard.flows.base import FieldGroup, Flow
from firecert.wizard.steps import Step, StepContext
from firecert.wizard.validators import (
    in_range,
    is_blank,
    must_be_true,
    pattern,
    positive,
    require,
)


class EstablishmentFields(FieldGroup):
    name: str
    dti_number: str
    type: str
    occupancy: str
    storeys: int
    floor_area: float
    occupants: int

    street: str
    barangay: str
    city: str
    province: str
    region: str | None = None
    latitude: float | None = None
    longitude: float | None = None

    owner_last_name: str
    owner_first_name: str
    owner_middle_name: str | None = None
    owner_suffix: str | None = None
    owner_email: str
    owner_mobile: str
    owner_landline: str | None = None


class RepresentativeFields(FieldGroup):
    rep_last_name: str
    rep_first_name: str
    rep_middle_name: str | None = None
    rep_suffix: str | None = None
    rep_email: str
    rep_mobile: str
    rep_landline: str | None = None


# ── Step validators ──────────────────────────────────────────

def validate_details(ctx: StepContext) -> dict[str, str]:
    f = ctx.fields
    errors: dict[str, str] = {}
    require(f, errors, "name", "Establishment name is required")
    pattern(
        f, errors, "dti_number", REGISTRY_CODE_REGEX,
        "DTI number must be 6 to 9 digits",
        required="DTI number is required",
    )
    require(f, errors, "type", "Establishment type is required")
    require(f, errors, "occupancy", "Occupancy is required")
    positive(
        f, errors, "storeys", "Storeys must be a positive whole number",
        integer=True, required="Number of storeys is required",
    )
    positive(
        f, errors, "floor_area", "Floor area must be greater than zero",
        required="Floor area is required",
    )
    positive(
        f, errors, "occupants", "Occupants must be a positive whole number",
        integer=True, required="Number of occupants is required",
    )
    return errors


async def check_duplicates(ctx: StepContext) -> dict[str, str]:
    """Reject a name or DTI number already used by another establishment."""
    conflicts = await ctx.gateway.find_conflicts(
        name=ctx.fields.get("name"),
        dti_number=ctx.fields.get("dti_number"),
        exclude_id=ctx.record_id,
    )
    errors: dict[str, str] = {}
    if "dti_number" in conflicts:
        errors["dti_number"] = "This DTI number is already registered"
    if "name" in conflicts:
        errors["name"] = "An establishment with this name already exists"
    return errors


def validate_address(ctx: StepContext) -> dict[str, str]:
    f = ctx.fields
    errors: dict[str, str] = {}
    require(f, errors, "street", "Street is required")
    require(f, errors, "barangay", "Barangay is required")
    require(f, errors, "city", "City / municipality is required")
    require(f, errors, "province", "Province is required")
    in_range(f, errors, "latitude", -90, 90, "Latitude must be between -90 and 90")
    in_range(f, errors, "longitude", -180, 180, "Longitude must be between -180 and 180")
    return errors


def _person(f: Mapping, errors: dict, prefix: str, who: str) -> None:
    for part, label in (("first_name", "first name"), ("last_name", "last name")):
        pattern(
            f, errors, f"{prefix}_{part}", LETTERS_ONLY_REGEX,
            f"{who} {label} may contain letters only",
            required=f"{who} {label} is required",
        )
    pattern(
        f, errors, f"{prefix}_middle_name", LETTERS_ONLY_REGEX,
        f"{who} middle name may contain letters only",
    )
    pattern(
        f, errors, f"{prefix}_email", EMAIL_REGEX,
        "Enter a valid email address",
        required=f"{who} email is required",
    )
    pattern(
        f, errors, f"{prefix}_mobile", MOBILE_REGEX,
        "Mobile number must be 11 digits starting with 09",
        required=f"{who} mobile number is required",
    )
    pattern(
        f, errors, f"{prefix}_landline", LANDLINE_REGEX,
        "Landline must be in the format (XXX) XXX-XXXX",
    )


def validate_contacts(ctx: StepContext) -> dict[str, str]:
    errors: dict[str, str] = {}
    _person(ctx.fields, errors, "owner", "Owner")
    if ctx.fields.get("has_representative"):
        _person(ctx.fields, errors, "rep", "Representative")
    return errors


def validate_review(ctx: StepContext) -> dict[str, str]:
    errors: dict[str, str] = {}
    must_be_true(
        ctx.fields, errors, "info_accurate",
        "Please confirm that the information is accurate",
    )
    must_be_true(
        ctx.fields, errors, "false_info_understood",
        "Please acknowledge the consequences of false information",
    )
    return errors


def _finalize(attrs: dict, fields: Mapping[str, Any]) -> dict:
    parts = [attrs.get(k) for k in ("street", "barangay", "city", "province", "region")]
    attrs["address"] = ", ".join(p for p in parts if not is_blank(p))
    attrs["status"] = "pre_registered"
    return attrs


REGISTRATION_FLOW = Flow(
    name="registration",
    entity_type="establishment",
    steps=(
        Step(
            "details", "Establishment Details", validate_details,
            fields=("name", "dti_number", "type", "occupancy", "storeys",
                    "floor_area", "occupants"),
            remote_check=check_duplicates,
        ),
        Step(
            "address", "Address", validate_address,
            fields=("street", "barangay", "city", "province", "region",
                    "latitude", "longitude"),
        ),
        Step(
            "contacts", "Owner & Representative", validate_contacts,
            fields=tuple(RepresentativeFields.model_fields) + (
                "owner_last_name", "owner_first_name", "owner_middle_name",
                "owner_suffix", "owner_email", "owner_mobile", "owner_landline",
                "has_representative",
            ),
        ),
        Step(
            "review", "Review & Submit", validate_review,
            fields=("info_accurate", "false_info_understood"),
        ),
    ),
    common=EstablishmentFields,
    optional_groups={"has_representative": RepresentativeFields},
    extra_fields=("info_accurate", "false_info_understood"),
    normalizers={
        "owner_mobile": normalize_mobile,
        "rep_mobile": normalize_mobile,
        "owner_landline": normalize_landline,
        "rep_landline": normalize_landline,
    },
    finalize=_finalize,
)
