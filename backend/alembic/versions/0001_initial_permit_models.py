"""Initial schema — users, establishments, applications, inspections.

Revision ID: 0001
Revises: (none)
Create Date: 2026-10-18

Run with:
    alembic upgrade head
"""

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

from alembic import op
import sqlalchemy as sa

PERSON_COLUMNS = (
    ("last_name", 100), ("first_name", 100), ("middle_name", 100),
    ("suffix", 20), ("email", 255), ("mobile", 20), ("landline", 20),
)

DOCUMENT_COLUMNS = (
    # FSEC
    "architectural_documents", "civil_structural_documents",
    "mechanical_documents", "electrical_documents", "plumbing_documents",
    "sanitary_documents", "fire_protection_documents", "electronics_documents",
    "fire_safety_compliance_report", "cost_estimates_signed_sealed",
    "notarized_cost_estimates",
    # FSIC-Occupancy
    "endorsement_obo", "certificate_of_completion", "assessment_fee_occupancy",
    "as_built_plan", "fire_safety_compliance_commissioning_report",
    "fire_safety_evaluation_clearance",
    # FSIC-Business, New
    "certificate_of_occupancy", "affidavit_no_substantial_changes",
    "business_permit_fee_assessment_new", "fire_insurance_new",
    # FSIC-Business, Renewal
    "business_permit_fee_assessment_renewal", "fire_safety_maintenance_report",
    "fire_insurance_renewal", "fire_safety_clearance_hot_work",
)

LARGE_YES_NO = (
    "exit_access_doors", "exit_access_corridors", "exit_access_two_means",
    "exit_access_no_obstructions", "exit_normal_stairs", "exit_fire_escape_stairs",
    "exit_doors_panic_hardware", "exit_discharge_clear_grounds",
    "exit_discharge_public_way", "exit_signage_illumination",
    "evacuation_plan_posted", "emergency_lighting_auto",
    "flammable_liquids_storage", "no_smoking_signs", "housekeeping_combustibles",
    "sprinkler_valves", "fire_hose_condition", "fire_pump_system",
    "fire_detection_system", "fire_alarm_panels", "fire_extinguisher_condition",
    "kitchen_hood_filters",
)

CHECKLIST_TEXT = (
    "exit_access_remarks", "exit_remarks", "signage_remarks", "hazard_remarks",
    "exit_discharge_remarks", "fire_protection_remarks",
    "defects_means_of_egress", "defects_fire_protection", "general_remarks",
)


def _people(prefix: str, nullable: bool = True) -> list[sa.Column]:
    return [
        sa.Column(f"{prefix}_{name}", sa.String(length), nullable=nullable)
        for name, length in PERSON_COLUMNS
    ]


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # ── Users ────────────────────────────────────────────────

    op.create_table(
        "users",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=False),
        sa.Column(
            "role",
            sa.Enum("OWNER", "INSPECTOR", "ADMIN", name="userrole"),
            server_default="OWNER",
        ),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true()),
        sa.Column("custom_permissions", sa.JSON(), nullable=True),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── Establishments ───────────────────────────────────────

    op.create_table(
        "establishments",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False, unique=True),
        sa.Column("dti_number", sa.String(20), nullable=False, unique=True),
        sa.Column("status", sa.String(30), server_default="unregistered"),
        sa.Column("type", sa.String(100)),
        sa.Column("occupancy", sa.String(100)),
        sa.Column("storeys", sa.Integer()),
        sa.Column("floor_area", sa.Float()),
        sa.Column("occupants", sa.Integer()),
        *_people("owner"),
        *_people("rep"),
        sa.Column("street", sa.String(255)),
        sa.Column("barangay", sa.String(100)),
        sa.Column("city", sa.String(100)),
        sa.Column("province", sa.String(100)),
        sa.Column("region", sa.String(100)),
        sa.Column("address", sa.Text()),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        *_timestamps(),
    )
    op.create_index("ix_establishments_owner_id", "establishments", ["owner_id"])
    op.create_index("ix_establishments_status", "establishments", ["status"])

    # ── Applications ─────────────────────────────────────────

    op.create_table(
        "applications",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "establishment_id", sa.String(36),
            sa.ForeignKey("establishments.id"), nullable=False,
        ),
        sa.Column("owner_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(30), nullable=False),
        sa.Column("status", sa.String(30), server_default="pending"),
        sa.Column("submitted_at", sa.DateTime()),
        sa.Column("reviewed_by", sa.String(36)),
        sa.Column("certificate_url", sa.Text()),
        sa.Column("rejection_reasons", sa.JSON()),
        sa.Column("rejection_notes", sa.Text()),
        # Establishment snapshot
        sa.Column("dti_number", sa.String(20), nullable=False),
        sa.Column("establishment_name", sa.String(255), nullable=False),
        sa.Column("establishment_type", sa.String(100)),
        sa.Column("occupancy", sa.String(100)),
        sa.Column("storeys", sa.String(20)),
        sa.Column("floor_area", sa.String(20)),
        sa.Column("occupants", sa.String(20)),
        sa.Column("owner_first_name", sa.String(100), nullable=False),
        sa.Column("owner_last_name", sa.String(100), nullable=False),
        sa.Column("owner_middle_name", sa.String(100)),
        sa.Column("owner_suffix", sa.String(20)),
        sa.Column("owner_email", sa.String(255), nullable=False),
        sa.Column("owner_mobile", sa.String(20), nullable=False),
        sa.Column("owner_landline", sa.String(20)),
        *_people("rep"),
        sa.Column("street", sa.String(255), nullable=False),
        sa.Column("barangay", sa.String(100), nullable=False),
        sa.Column("city", sa.String(100)),
        sa.Column("province", sa.String(100)),
        sa.Column("region", sa.String(100)),
        sa.Column("latitude", sa.Float()),
        sa.Column("longitude", sa.Float()),
        # Type-specific
        sa.Column("contractor_name", sa.String(255)),
        sa.Column("fsec_number", sa.String(20)),
        sa.Column("occupancy_permit_no", sa.String(20)),
        sa.Column("business_status", sa.String(20)),
        # Document references
        *[sa.Column(name, sa.Text()) for name in DOCUMENT_COLUMNS],
        *_timestamps(),
    )
    op.create_index("ix_applications_establishment_id", "applications", ["establishment_id"])
    op.create_index("ix_applications_owner_id", "applications", ["owner_id"])
    op.create_index("ix_applications_status", "applications", ["status"])
    # At most one pending application per (establishment, type, owner)
    op.create_index(
        "uq_applications_one_pending",
        "applications",
        ["establishment_id", "type", "owner_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )

    # ── Inspections ──────────────────────────────────────────

    op.create_table(
        "inspections",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "establishment_id", sa.String(36),
            sa.ForeignKey("establishments.id"), nullable=False,
        ),
        sa.Column("application_id", sa.String(36), sa.ForeignKey("applications.id")),
        sa.Column("inspector_id", sa.String(36), sa.ForeignKey("users.id")),
        sa.Column("establishment_name", sa.String(255), nullable=False),
        sa.Column("address", sa.Text()),
        sa.Column("status", sa.String(30), server_default="pending"),
        sa.Column("scheduled_date", sa.Date()),
        *_timestamps(),
    )
    for column in ("establishment_id", "application_id", "inspector_id", "status"):
        op.create_index(f"ix_inspections_{column}", "inspections", [column])

    op.create_table(
        "inspection_checklists",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column(
            "inspection_id", sa.String(36),
            sa.ForeignKey("inspections.id"), nullable=False,
        ),
        sa.Column(
            "establishment_id", sa.String(36),
            sa.ForeignKey("establishments.id"), nullable=False,
        ),
        sa.Column("inspector_id", sa.String(36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("establishment_name", sa.String(255)),
        # Common
        sa.Column("business_scale", sa.String(10), nullable=False),
        sa.Column("inspection_type", sa.String(100)),
        sa.Column("verification_type", sa.String(100)),
        sa.Column("other_inspection_type", sa.String(255)),
        sa.Column("fsccr_provided", sa.String(10)),
        sa.Column("fsmr_provided", sa.String(10)),
        sa.Column("inspector_name", sa.String(255), nullable=False),
        sa.Column("comply_defects", sa.Boolean()),
        sa.Column("pay_fire_code_fees", sa.Boolean()),
        sa.Column("issuance_type", sa.String(100)),
        sa.Column("hazard_classification", sa.String(100)),
        # Large checklist
        *[sa.Column(name, sa.String(10)) for name in LARGE_YES_NO],
        *[sa.Column(name, sa.Text()) for name in CHECKLIST_TEXT],
        # Small checklist
        sa.Column("building_name", sa.String(255)),
        sa.Column("business_name", sa.String(255)),
        sa.Column("nature_of_business", sa.String(255)),
        sa.Column("owner_name", sa.String(255)),
        sa.Column("owner_contact_number", sa.String(20)),
        sa.Column("fsic_no", sa.String(50)),
        sa.Column("business_permit_no", sa.String(50)),
        sa.Column("fire_insurance_policy_no", sa.String(50)),
        sa.Column("type_of_occupancy", sa.String(100)),
        sa.Column("total_floor_area", sa.String(20)),
        sa.Column("occupant_load", sa.String(20)),
        sa.Column("construction_type", sa.String(100)),
        sa.Column("number_of_stories", sa.String(20)),
        sa.Column("has_handrails", sa.String(10)),
        sa.Column("exit_access_type", sa.String(100)),
        sa.Column("exit_type", sa.String(100)),
        sa.Column("exit_signage_posted", sa.String(10)),
        sa.Column("hazard_location", sa.String(255)),
        sa.Column("lpg_system_approved_plans", sa.String(10)),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index(
        "ix_inspection_checklists_inspection_id", "inspection_checklists", ["inspection_id"],
    )

    # ── Activity log ─────────────────────────────────────────

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.String(36), nullable=False),
        sa.Column("user_name", sa.String(200), nullable=False),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("entity_type", sa.String(50), nullable=False),
        sa.Column("entity_id", sa.String(36)),
        sa.Column("entity_code", sa.String(100)),
        sa.Column("summary", sa.Text()),
        sa.Column("details", sa.JSON()),
        sa.Column("created_at", sa.DateTime(), server_default=sa.func.now(), nullable=False),
    )
    for column in ("user_id", "action", "entity_type", "created_at"):
        op.create_index(f"ix_activity_logs_{column}", "activity_logs", [column])


def downgrade() -> None:
    op.drop_table("activity_logs")
    op.drop_table("inspection_checklists")
    op.drop_table("inspections")
    op.drop_index("uq_applications_one_pending", table_name="applications")
    op.drop_table("applications")
    op.drop_table("establishments")
    op.drop_table("users")
    sa.Enum(name="userrole").drop(op.get_bind(), checkfirst=True)
