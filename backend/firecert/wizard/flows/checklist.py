"""Inspection checklist wizard.

The business scale chosen on the first step selects the checklist:

  large (8 steps)                       small (4 steps)
  1. Inspection setup                   1. Inspection setup
  2. Means of egress                    2. General information
  3. Exit discharge                     3. Egress, signage & hazards
  4. Signs & lighting                   4. Recommendations
  5. Hazards
  6. Fire protection
  7. Defects
  8. Recommendations

Photos may be attached at any step; they are uploaded at submit and
stored as a list of URLs in the images column.

Submitting inserts an inspection_checklists row and marks the
inspection as inspected.
"""

from firecert.schemas.validators import LETTERS_ONLY_REGEX, MOBILE_REGEX, normalize_mobile
from firecert.wizard.flows.base import FieldGroup, Flow
from firecert.wizard.steps import Step, StepContext
from firecert.wizard.validators import choice, pattern, positive, require

BUSINESS_SCALES = ("large", "small")
YES_NO_NA = ("Yes", "No", "N/A")
INSPECTION_TYPES = (
    "Occupancy",
    "Business Permit",
    "Routine",
    "Verification",
    "Other",
)

LARGE = frozenset({"large"})
SMALL = frozenset({"small"})


class ChecklistFields(FieldGroup):
    business_scale: str
    inspection_type: str
    verification_type: str | None = None
    other_inspection_type: str | None = None
    fsccr_provided: str | None = None
    fsmr_provided: str | None = None
    inspector_name: str
    comply_defects: bool | None = None
    pay_fire_code_fees: bool | None = None
    issuance_type: str | None = None


class LargeChecklistFields(FieldGroup):
    exit_access_doors: str
    exit_access_corridors: str
    exit_access_two_means: str
    exit_access_no_obstructions: str
    exit_access_remarks: str | None = None
    exit_normal_stairs: str
    exit_fire_escape_stairs: str
    exit_doors_panic_hardware: str
    exit_remarks: str | None = None

    exit_discharge_clear_grounds: str
    exit_discharge_public_way: str
    exit_discharge_remarks: str | None = None

    exit_signage_illumination: str
    evacuation_plan_posted: str
    emergency_lighting_auto: str
    signage_remarks: str | None = None

    flammable_liquids_storage: str
    no_smoking_signs: str
    housekeeping_combustibles: str
    hazard_classification: str | None = None
    hazard_remarks: str | None = None

    sprinkler_valves: str
    fire_hose_condition: str
    fire_pump_system: str
    fire_detection_system: str
    fire_alarm_panels: str
    fire_extinguisher_condition: str
    kitchen_hood_filters: str
    fire_protection_remarks: str | None = None

    defects_means_of_egress: str | None = None
    defects_fire_protection: str | None = None
    general_remarks: str | None = None


class SmallChecklistFields(FieldGroup):
    building_name: str
    business_name: str
    nature_of_business: str
    owner_name: str
    owner_contact_number: str | None = None
    fsic_no: str | None = None
    business_permit_no: str | None = None
    fire_insurance_policy_no: str | None = None
    type_of_occupancy: str | None = None
    total_floor_area: str | None = None
    occupant_load: str | None = None
    construction_type: str | None = None
    number_of_stories: str | None = None

    has_handrails: str
    exit_access_type: str | None = None
    exit_access_remarks: str | None = None
    exit_type: str | None = None
    exit_remarks: str | None = None
    exit_signage_posted: str
    signage_remarks: str | None = None
    hazard_location: str | None = None
    hazard_classification: str | None = None
    hazard_remarks: str | None = None
    lpg_system_approved_plans: str


# ── Step validators ──────────────────────────────────────────

def _yes_no(*names: str):
    """Validator requiring a Yes / No / N/A answer for each named item."""
    def validate(ctx: StepContext) -> dict[str, str]:
        errors: dict[str, str] = {}
        for name in names:
            choice(ctx.fields, errors, name, YES_NO_NA, "Select Yes, No or N/A")
        return errors
    return validate


def validate_setup(ctx: StepContext) -> dict[str, str]:
    f = ctx.fields
    errors: dict[str, str] = {}
    choice(f, errors, "business_scale", BUSINESS_SCALES, "Select the business scale")
    choice(f, errors, "inspection_type", INSPECTION_TYPES, "Select the inspection type")
    if f.get("inspection_type") == "Other":
        require(f, errors, "other_inspection_type", "Specify the inspection type")
    if f.get("inspection_type") == "Verification":
        require(f, errors, "verification_type", "Specify what is being verified")
    choice(f, errors, "fsccr_provided", YES_NO_NA, "Select Yes, No or N/A", required=False)
    choice(f, errors, "fsmr_provided", YES_NO_NA, "Select Yes, No or N/A", required=False)
    return errors


def validate_general(ctx: StepContext) -> dict[str, str]:
    f = ctx.fields
    errors: dict[str, str] = {}
    require(f, errors, "building_name", "Building name is required")
    require(f, errors, "business_name", "Business name is required")
    require(f, errors, "nature_of_business", "Nature of business is required")
    require(f, errors, "owner_name", "Owner name is required")
    pattern(
        f, errors, "owner_contact_number", MOBILE_REGEX,
        "Mobile number must be 11 digits starting with 09",
    )
    positive(f, errors, "total_floor_area", "Floor area must be greater than zero")
    positive(f, errors, "occupant_load", "Occupant load must be a positive whole number", integer=True)
    positive(f, errors, "number_of_stories", "Stories must be a positive whole number", integer=True)
    return errors


def validate_defects(ctx: StepContext) -> dict[str, str]:
    return {}


def validate_recommendations(ctx: StepContext) -> dict[str, str]:
    errors: dict[str, str] = {}
    pattern(
        ctx.fields, errors, "inspector_name", LETTERS_ONLY_REGEX,
        "Inspector name may contain letters only",
        required="Inspector name is required",
    )
    return errors


CHECKLIST_FLOW = Flow(
    name="checklist",
    entity_type="inspection_checklist",
    steps=(
        Step(
            "setup", "Inspection Setup", validate_setup,
            fields=("business_scale", "inspection_type", "verification_type",
                    "other_inspection_type", "fsccr_provided", "fsmr_provided"),
        ),
        Step(
            "general", "General Information", validate_general,
            fields=("building_name", "business_name", "nature_of_business",
                    "owner_name", "owner_contact_number", "fsic_no",
                    "business_permit_no", "fire_insurance_policy_no",
                    "type_of_occupancy", "total_floor_area", "occupant_load",
                    "construction_type", "number_of_stories"),
            categories=SMALL,
        ),
        Step(
            "egress_small", "Egress, Signage & Hazards",
            _yes_no("has_handrails", "exit_signage_posted", "lpg_system_approved_plans"),
            categories=SMALL,
        ),
        Step(
            "egress", "Means of Egress",
            _yes_no("exit_access_doors", "exit_access_corridors",
                    "exit_access_two_means", "exit_access_no_obstructions",
                    "exit_normal_stairs", "exit_fire_escape_stairs",
                    "exit_doors_panic_hardware"),
            categories=LARGE,
        ),
        Step(
            "discharge", "Exit Discharge",
            _yes_no("exit_discharge_clear_grounds", "exit_discharge_public_way"),
            categories=LARGE,
        ),
        Step(
            "signage", "Signs & Lighting",
            _yes_no("exit_signage_illumination", "evacuation_plan_posted",
                    "emergency_lighting_auto"),
            categories=LARGE,
        ),
        Step(
            "hazards", "Hazards",
            _yes_no("flammable_liquids_storage", "no_smoking_signs",
                    "housekeeping_combustibles"),
            categories=LARGE,
        ),
        Step(
            "fire_protection", "Fire Protection",
            _yes_no("sprinkler_valves", "fire_hose_condition", "fire_pump_system",
                    "fire_detection_system", "fire_alarm_panels",
                    "fire_extinguisher_condition", "kitchen_hood_filters"),
            categories=LARGE,
        ),
        Step("defects", "Defects", validate_defects, categories=LARGE),
        Step(
            "recommendations", "Recommendations", validate_recommendations,
            fields=("inspector_name", "comply_defects", "pay_fire_code_fees",
                    "issuance_type"),
        ),
    ),
    common=ChecklistFields,
    category_field="business_scale",
    category_groups={"large": LargeChecklistFields, "small": SmallChecklistFields},
    normalizers={"owner_contact_number": normalize_mobile},
    photo_field="images",
)
