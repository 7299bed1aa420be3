"""Establishment — a facility owned by a business owner.

Lifecycle:  unregistered → pre_registered → registered

An owner first adds a bare establishment (name + DTI number), then runs
the registration wizard, which fills in the details below and moves it
to pre_registered.  An administrator confirms the registration.
Certification applications can only be filed for registered establishments.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from firecert.database import Base

ESTABLISHMENT_STATUSES = ("unregistered", "pre_registered", "registered")


class Establishment(Base):
    __tablename__ = "establishments"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    owner_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    dti_number: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    # unregistered | pre_registered | registered
    status: Mapped[str] = mapped_column(String(30), default="unregistered", index=True)

    # ── Building ─────────────────────────────────────────────
    type: Mapped[str | None] = mapped_column(String(100))
    occupancy: Mapped[str | None] = mapped_column(String(100))
    storeys: Mapped[int | None] = mapped_column(Integer)
    floor_area: Mapped[float | None] = mapped_column(Float)
    occupants: Mapped[int | None] = mapped_column(Integer)

    # ── Owner ────────────────────────────────────────────────
    owner_last_name: Mapped[str | None] = mapped_column(String(100))
    owner_first_name: Mapped[str | None] = mapped_column(String(100))
    owner_middle_name: Mapped[str | None] = mapped_column(String(100))
    owner_suffix: Mapped[str | None] = mapped_column(String(20))
    owner_email: Mapped[str | None] = mapped_column(String(255))
    owner_mobile: Mapped[str | None] = mapped_column(String(20))
    owner_landline: Mapped[str | None] = mapped_column(String(20))

    # ── Authorized representative (optional) ─────────────────
    rep_last_name: Mapped[str | None] = mapped_column(String(100))
    rep_first_name: Mapped[str | None] = mapped_column(String(100))
    rep_middle_name: Mapped[str | None] = mapped_column(String(100))
    rep_suffix: Mapped[str | None] = mapped_column(String(20))
    rep_email: Mapped[str | None] = mapped_column(String(255))
    rep_mobile: Mapped[str | None] = mapped_column(String(20))
    rep_landline: Mapped[str | None] = mapped_column(String(20))

    # ── Address / location ───────────────────────────────────
    street: Mapped[str | None] = mapped_column(String(255))
    barangay: Mapped[str | None] = mapped_column(String(100))
    city: Mapped[str | None] = mapped_column(String(100))
    province: Mapped[str | None] = mapped_column(String(100))
    region: Mapped[str | None] = mapped_column(String(100))
    address: Mapped[str | None] = mapped_column(Text)
    latitude: Mapped[float | None] = mapped_column(Float)
    longitude: Mapped[float | None] = mapped_column(Float)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
