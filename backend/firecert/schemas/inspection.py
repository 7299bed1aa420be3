"""Inspection schemas."""

from datetime import date, datetime

from pydantic import BaseModel


class InspectionOut(BaseModel):
    id: str
    establishment_id: str
    application_id: str | None = None
    inspector_id: str | None = None
    establishment_name: str
    address: str | None = None
    status: str
    scheduled_date: date | None = None
    created_at: datetime

    model_config = {"from_attributes": True}


class InspectionDetail(InspectionOut):
    checklist_id: str | None = None
    business_scale: str | None = None
    images: list[str] = []
