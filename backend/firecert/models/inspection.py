"""Inspections and the checklist an inspector files for each one.

An Inspection is assigned to an inspector for one establishment
(usually as part of an FSIC application).  The inspector completes an
InspectionChecklist through the checklist wizard; submitting it marks
the inspection as inspected.

Checklist columns come in two groups selected by business_scale:
  large  → the full eight-part checklist
  small  → the condensed small-business checklist
The group that was not selected is stored as explicit NULLs.  A handful
of remarks/classification columns appear in both checklists and are
shared.

Photos attached during the inspection are stored as a JSON list of URLs.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from firecert.database import Base


class Inspection(Base):
    __tablename__ = "inspections"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    establishment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("establishments.id"), nullable=False, index=True
    )
    application_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("applications.id"), index=True
    )
    inspector_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("users.id"), index=True
    )
    establishment_name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str | None] = mapped_column(Text)
    # pending | scheduled | inspected | approved | rejected | cancelled
    status: Mapped[str] = mapped_column(String(30), default="pending", index=True)
    scheduled_date: Mapped[date | None] = mapped_column(Date)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )


class InspectionChecklist(Base):
    __tablename__ = "inspection_checklists"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    inspection_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("inspections.id"), nullable=False, index=True
    )
    establishment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("establishments.id"), nullable=False
    )
    inspector_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False
    )
    establishment_name: Mapped[str | None] = mapped_column(String(255))

    # ── Common ───────────────────────────────────────────────
    business_scale: Mapped[str] = mapped_column(String(10), nullable=False)  # large | small
    inspection_type: Mapped[str | None] = mapped_column(String(100))
    verification_type: Mapped[str | None] = mapped_column(String(100))
    other_inspection_type: Mapped[str | None] = mapped_column(String(255))
    fsccr_provided: Mapped[str | None] = mapped_column(String(10))
    fsmr_provided: Mapped[str | None] = mapped_column(String(10))
    inspector_name: Mapped[str] = mapped_column(String(255), nullable=False)
    comply_defects: Mapped[bool | None] = mapped_column(Boolean)
    pay_fire_code_fees: Mapped[bool | None] = mapped_column(Boolean)
    issuance_type: Mapped[str | None] = mapped_column(String(100))

    # ── Shared by both checklists ────────────────────────────
    exit_access_remarks: Mapped[str | None] = mapped_column(Text)
    exit_remarks: Mapped[str | None] = mapped_column(Text)
    signage_remarks: Mapped[str | None] = mapped_column(Text)
    hazard_classification: Mapped[str | None] = mapped_column(String(100))
    hazard_remarks: Mapped[str | None] = mapped_column(Text)

    # ── Large: means of egress ───────────────────────────────
    exit_access_doors: Mapped[str | None] = mapped_column(String(10))
    exit_access_corridors: Mapped[str | None] = mapped_column(String(10))
    exit_access_two_means: Mapped[str | None] = mapped_column(String(10))
    exit_access_no_obstructions: Mapped[str | None] = mapped_column(String(10))
    exit_normal_stairs: Mapped[str | None] = mapped_column(String(10))
    exit_fire_escape_stairs: Mapped[str | None] = mapped_column(String(10))
    exit_doors_panic_hardware: Mapped[str | None] = mapped_column(String(10))
    exit_discharge_clear_grounds: Mapped[str | None] = mapped_column(String(10))
    exit_discharge_public_way: Mapped[str | None] = mapped_column(String(10))
    exit_discharge_remarks: Mapped[str | None] = mapped_column(Text)

    # ── Large: signs, lighting, hazards ──────────────────────
    exit_signage_illumination: Mapped[str | None] = mapped_column(String(10))
    evacuation_plan_posted: Mapped[str | None] = mapped_column(String(10))
    emergency_lighting_auto: Mapped[str | None] = mapped_column(String(10))
    flammable_liquids_storage: Mapped[str | None] = mapped_column(String(10))
    no_smoking_signs: Mapped[str | None] = mapped_column(String(10))
    housekeeping_combustibles: Mapped[str | None] = mapped_column(String(10))

    # ── Large: fire protection ───────────────────────────────
    sprinkler_valves: Mapped[str | None] = mapped_column(String(10))
    fire_hose_condition: Mapped[str | None] = mapped_column(String(10))
    fire_pump_system: Mapped[str | None] = mapped_column(String(10))
    fire_detection_system: Mapped[str | None] = mapped_column(String(10))
    fire_alarm_panels: Mapped[str | None] = mapped_column(String(10))
    fire_extinguisher_condition: Mapped[str | None] = mapped_column(String(10))
    kitchen_hood_filters: Mapped[str | None] = mapped_column(String(10))
    fire_protection_remarks: Mapped[str | None] = mapped_column(Text)

    # ── Large: defects ───────────────────────────────────────
    defects_means_of_egress: Mapped[str | None] = mapped_column(Text)
    defects_fire_protection: Mapped[str | None] = mapped_column(Text)
    general_remarks: Mapped[str | None] = mapped_column(Text)

    # ── Small: general information ───────────────────────────
    building_name: Mapped[str | None] = mapped_column(String(255))
    business_name: Mapped[str | None] = mapped_column(String(255))
    nature_of_business: Mapped[str | None] = mapped_column(String(255))
    owner_name: Mapped[str | None] = mapped_column(String(255))
    owner_contact_number: Mapped[str | None] = mapped_column(String(20))
    fsic_no: Mapped[str | None] = mapped_column(String(50))
    business_permit_no: Mapped[str | None] = mapped_column(String(50))
    fire_insurance_policy_no: Mapped[str | None] = mapped_column(String(50))
    type_of_occupancy: Mapped[str | None] = mapped_column(String(100))
    total_floor_area: Mapped[str | None] = mapped_column(String(20))
    occupant_load: Mapped[str | None] = mapped_column(String(20))
    construction_type: Mapped[str | None] = mapped_column(String(100))
    number_of_stories: Mapped[str | None] = mapped_column(String(20))

    # ── Small: egress, signage, hazards ──────────────────────
    has_handrails: Mapped[str | None] = mapped_column(String(10))
    exit_access_type: Mapped[str | None] = mapped_column(String(100))
    exit_type: Mapped[str | None] = mapped_column(String(100))
    exit_signage_posted: Mapped[str | None] = mapped_column(String(10))
    hazard_location: Mapped[str | None] = mapped_column(String(255))
    lpg_system_approved_plans: Mapped[str | None] = mapped_column(String(10))

    # Photo URLs, in the order they were attached
    images: Mapped[list | None] = mapped_column(JSON, default=list)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
