"""Application — a fire-safety certification request for one establishment.

Types:
  FSEC            Fire Safety Evaluation Clearance (building plans stage)
  FSIC-Occupancy  Fire Safety Inspection Certificate for occupancy
  FSIC-Business   Fire Safety Inspection Certificate for a business permit,
                  filed as New or Renewal (business_status)

Lifecycle:  pending → under_review → approved | rejected
            (scheduled / inspected when an inspection is involved,
             cancelled by the owner while pending)

The row snapshots the establishment details at filing time, carries the
type-specific fields (only the selected type's are non-null), and one
reference column per supporting document.

Only one pending application may exist per (establishment, type, owner).
This is enforced by the partial unique index below, not by the wizard.
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import (
    DateTime, Float, ForeignKey, Index, JSON, String, Text, text,
)
from sqlalchemy.orm import Mapped, mapped_column

from firecert.database import Base


class ApplicationStatus(str, enum.Enum):
    PENDING = "pending"
    UNDER_REVIEW = "under_review"
    SCHEDULED = "scheduled"
    INSPECTED = "inspected"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


APPLICATION_TYPES = ("FSEC", "FSIC-Occupancy", "FSIC-Business")


class Application(Base):
    __tablename__ = "applications"
    __table_args__ = (
        Index(
            "uq_applications_one_pending",
            "establishment_id", "type", "owner_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    establishment_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("establishments.id"), nullable=False, index=True
    )
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False)

    # ── Status ───────────────────────────────────────────────
    status: Mapped[str] = mapped_column(String(30), default="pending", index=True)
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime)
    reviewed_by: Mapped[str | None] = mapped_column(String(36))
    certificate_url: Mapped[str | None] = mapped_column(Text)
    rejection_reasons: Mapped[list | None] = mapped_column(JSON, default=list)
    rejection_notes: Mapped[str | None] = mapped_column(Text)

    # ── Establishment snapshot ───────────────────────────────
    dti_number: Mapped[str] = mapped_column(String(20), nullable=False)
    establishment_name: Mapped[str] = mapped_column(String(255), nullable=False)
    establishment_type: Mapped[str | None] = mapped_column(String(100))
    occupancy: Mapped[str | None] = mapped_column(String(100))
    storeys: Mapped[str | None] = mapped_column(String(20))
    floor_area: Mapped[str | None] = mapped_column(String(20))
    occupants: Mapped[str | None] = mapped_column(String(20))

    owner_first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    owner_last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    owner_middle_name: Mapped[str | None] = mapped_column(String(100))
    owner_suffix: Mapped[str | None] = mapped_column(String(20))
    owner_email: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_mobile: Mapped[str] = mapped_column(String(20), nullable=False)
    owner_landline: Mapped[str | None] = mapped_column(String(20))

    rep_first_name: Mapped[str | None] = mapped_column(String(100))
    rep_last_name: Mapped[str | None] = mapped_column(String(100))
    rep_middle_name: Mapped[str | None] = mapped_column(String(100))
    rep_suffix: Mapped[str | None] = mapped_column(String(20))
    rep_email: Mapped[str | None] = mapped_column(String(255))
    rep_mobile: Mapped[str | None] = mapped_column(String(20))
    rep_landline: Mapped[str | None] = mapped_column(String(20))

    street: Mapped[str] = mapped_column(String(255), nullable=False)
    barangay: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str | None] = mapped_column(String(100))
    province: Mapped[str | None] = mapped_column(String(100))
    region: Mapped[str | None] = mapped_column(String(100))
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)

    # ── Type-specific ────────────────────────────────────────
    contractor_name: Mapped[str | None] = mapped_column(String(255))      # FSEC
    fsec_number: Mapped[str | None] = mapped_column(String(20))           # FSIC-Occupancy
    occupancy_permit_no: Mapped[str | None] = mapped_column(String(20))   # FSIC-Business
    business_status: Mapped[str | None] = mapped_column(String(20))       # FSIC-Business: New | Renewal

    # ── Documents: FSEC ──────────────────────────────────────
    architectural_documents: Mapped[str | None] = mapped_column(Text)
    civil_structural_documents: Mapped[str | None] = mapped_column(Text)
    mechanical_documents: Mapped[str | None] = mapped_column(Text)
    electrical_documents: Mapped[str | None] = mapped_column(Text)
    plumbing_documents: Mapped[str | None] = mapped_column(Text)
    sanitary_documents: Mapped[str | None] = mapped_column(Text)
    fire_protection_documents: Mapped[str | None] = mapped_column(Text)
    electronics_documents: Mapped[str | None] = mapped_column(Text)
    fire_safety_compliance_report: Mapped[str | None] = mapped_column(Text)
    cost_estimates_signed_sealed: Mapped[str | None] = mapped_column(Text)
    notarized_cost_estimates: Mapped[str | None] = mapped_column(Text)

    # ── Documents: FSIC-Occupancy ────────────────────────────
    endorsement_obo: Mapped[str | None] = mapped_column(Text)
    certificate_of_completion: Mapped[str | None] = mapped_column(Text)
    assessment_fee_occupancy: Mapped[str | None] = mapped_column(Text)
    as_built_plan: Mapped[str | None] = mapped_column(Text)
    fire_safety_compliance_commissioning_report: Mapped[str | None] = mapped_column(Text)
    fire_safety_evaluation_clearance: Mapped[str | None] = mapped_column(Text)

    # ── Documents: FSIC-Business (New) ───────────────────────
    certificate_of_occupancy: Mapped[str | None] = mapped_column(Text)
    affidavit_no_substantial_changes: Mapped[str | None] = mapped_column(Text)
    business_permit_fee_assessment_new: Mapped[str | None] = mapped_column(Text)
    fire_insurance_new: Mapped[str | None] = mapped_column(Text)

    # ── Documents: FSIC-Business (Renewal) ───────────────────
    business_permit_fee_assessment_renewal: Mapped[str | None] = mapped_column(Text)
    fire_safety_maintenance_report: Mapped[str | None] = mapped_column(Text)
    fire_insurance_renewal: Mapped[str | None] = mapped_column(Text)
    fire_safety_clearance_hot_work: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
