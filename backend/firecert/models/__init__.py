"""All ORM models, imported here so Base.metadata sees every table."""

from firecert.models.user import User, UserRole
from firecert.models.establishment import Establishment
from firecert.models.application import Application, ApplicationStatus
from firecert.models.inspection import Inspection, InspectionChecklist
from firecert.models.activity_log import ActivityLog

__all__ = [
    "User",
    "UserRole",
    "Establishment",
    "Application",
    "ApplicationStatus",
    "Inspection",
    "InspectionChecklist",
    "ActivityLog",
]
