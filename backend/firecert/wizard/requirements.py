"""Supporting-document requirements per application category.

Each category (and, for FSIC-Business, each business status) has its own
list of documents.  A document's slug doubles as the applications column
that stores its uploaded URL, so slugs are assigned explicitly and
checked for collisions when this module is imported.

Lookup keys:
  FSEC
  FSIC-Occupancy
  FSIC-Business-New
  FSIC-Business-Renewal
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class DocumentRequirement:
    slug: str
    label: str
    required: bool = False

    @property
    def column(self) -> str:
        return self.slug


def slugify(label: str) -> str:
    """Lower-case a label and strip everything but letters and digits."""
    return re.sub(r"[^a-z0-9]", "", label.lower())


def _doc(slug: str, label: str, required: bool = False) -> DocumentRequirement:
    return DocumentRequirement(slug=slug, label=label, required=required)


DOCUMENT_REQUIREMENTS: dict[str, tuple[DocumentRequirement, ...]] = {
    "FSEC": (
        _doc("architectural_documents", "Architectural Documents", required=True),
        _doc("civil_structural_documents", "Civil/Structural Documents", required=True),
        _doc("mechanical_documents", "Mechanical Documents"),
        _doc("electrical_documents", "Electrical Documents", required=True),
        _doc("plumbing_documents", "Plumbing Documents"),
        _doc("sanitary_documents", "Sanitary Documents"),
        _doc("fire_protection_documents", "Fire Protection Documents", required=True),
        _doc("electronics_documents", "Electronics Documents"),
        _doc("fire_safety_compliance_report", "Fire Safety Compliance Report", required=True),
        _doc("cost_estimates_signed_sealed", "Cost Estimates, Signed and Sealed"),
        _doc("notarized_cost_estimates", "Notarized Cost Estimates"),
    ),
    "FSIC-Occupancy": (
        _doc("endorsement_obo", "Endorsement from the Office of the Building Official", required=True),
        _doc("certificate_of_completion", "Certificate of Completion", required=True),
        _doc("assessment_fee_occupancy", "Assessment of the Fire Code Fee"),
        _doc("as_built_plan", "As-Built Plan"),
        _doc(
            "fire_safety_compliance_commissioning_report",
            "Fire Safety Compliance and Commissioning Report",
            required=True,
        ),
        _doc(
            "fire_safety_evaluation_clearance",
            "Fire Safety Evaluation Clearance",
            required=True,
        ),
    ),
    "FSIC-Business-New": (
        _doc("certificate_of_occupancy", "Certificate of Occupancy", required=True),
        _doc(
            "affidavit_no_substantial_changes",
            "Affidavit of No Substantial Changes",
            required=True,
        ),
        _doc(
            "business_permit_fee_assessment_new",
            "Assessment of the Business Permit Fee",
            required=True,
        ),
        _doc("fire_insurance_new", "Copy of Fire Insurance"),
    ),
    "FSIC-Business-Renewal": (
        _doc(
            "business_permit_fee_assessment_renewal",
            "Assessment of the Business Permit Fee",
            required=True,
        ),
        _doc(
            "fire_safety_maintenance_report",
            "Fire Safety Maintenance Report",
            required=True,
        ),
        _doc("fire_insurance_renewal", "Copy of Fire Insurance"),
        _doc(
            "fire_safety_clearance_hot_work",
            "Fire Safety Clearance for Hot Work Operations",
        ),
    ),
}

_SLUG_REGEX = re.compile(r"^[a-z][a-z0-9_]*$")

# Categories whose documents depend on a sub-status (business_status).
CATEGORIES_WITH_SUB_STATUS = frozenset({"FSIC-Business"})

ALL_DOCUMENT_SLUGS: tuple[str, ...] = tuple(
    dict.fromkeys(
        req.slug for reqs in DOCUMENT_REQUIREMENTS.values() for req in reqs
    )
)


def requirement_key(category: str | None, sub_status: str | None = None) -> str | None:
    """Map (category, sub_status) onto a DOCUMENT_REQUIREMENTS key.

    Returns None when a sub-status is needed but missing.
    """
    if not category:
        return None
    if category in CATEGORIES_WITH_SUB_STATUS:
        if not sub_status:
            return None
        return f"{category}-{sub_status}"
    return category


def resolve_requirements(
    category: str | None, sub_status: str | None = None,
) -> tuple[DocumentRequirement, ...]:
    """Documents for a category; unknown or incomplete input gives ()."""
    key = requirement_key(category, sub_status)
    if key is None:
        return ()
    return DOCUMENT_REQUIREMENTS.get(key, ())


def _validate_schema() -> None:
    for key, reqs in DOCUMENT_REQUIREMENTS.items():
        slugs = [r.slug for r in reqs]
        if len(slugs) != len(set(slugs)):
            raise ValueError(f"Duplicate document slug under {key}")
        for slug in slugs:
            if not _SLUG_REGEX.match(slug):
                raise ValueError(f"Invalid document slug {slug!r} under {key}")


_validate_schema()
