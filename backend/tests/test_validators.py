"""Per-step validation rules and input normalizers."""

import pytest

from firecert.schemas.validators import normalize_landline, normalize_mobile
from firecert.wizard.flows.certification import validate_details as certification_details
from firecert.wizard.flows.checklist import validate_setup
from firecert.wizard.flows.registration import (
    validate_contacts,
    validate_details,
    validate_review,
)
from firecert.wizard.requirements import resolve_requirements
from firecert.wizard.slots import DocumentSlotStore, StagedFile
from firecert.wizard.steps import StepContext
from firecert.wizard.validators import documents_present


def ctx(fields: dict, requirements=(), slots=None) -> StepContext:
    return StepContext(
        fields=fields, slots=slots or DocumentSlotStore(), requirements=requirements,
    )


VALID_DETAILS = {
    "name": "Sunrise Bakery",
    "dti_number": "1234567",
    "type": "Commercial",
    "occupancy": "Mercantile",
    "storeys": "2",
    "floor_area": "120.5",
    "occupants": 30,
}

VALID_CONTACTS = {
    "owner_first_name": "Maria",
    "owner_last_name": "Santos",
    "owner_email": "maria@example.com",
    "owner_mobile": "09171234567",
    "owner_landline": "(028) 123-4567",
}


@pytest.mark.unit
class TestRegistrationRules:

    def test_valid_details_pass(self):
        assert validate_details(ctx(VALID_DETAILS)) == {}

    def test_missing_details_report_each_field(self):
        errors = validate_details(ctx({}))
        assert set(errors) == {
            "name", "dti_number", "type", "occupancy",
            "storeys", "floor_area", "occupants",
        }

    @pytest.mark.parametrize("dti", ["12345", "1234567890", "12a456"])
    def test_dti_must_be_six_to_nine_digits(self, dti):
        errors = validate_details(ctx({**VALID_DETAILS, "dti_number": dti}))
        assert errors == {"dti_number": "DTI number must be 6 to 9 digits"}

    @pytest.mark.parametrize("field,value", [
        ("storeys", "0"), ("storeys", "1.5"), ("floor_area", "-3"),
        ("occupants", "many"), ("floor_area", "nan"), ("floor_area", "inf"),
        ("storeys", "inf"), ("occupants", "-inf"),
    ])
    def test_numeric_fields_must_be_positive(self, field, value):
        errors = validate_details(ctx({**VALID_DETAILS, field: value}))
        assert list(errors) == [field]

    def test_valid_contacts_pass(self):
        assert validate_contacts(ctx(VALID_CONTACTS)) == {}

    @pytest.mark.parametrize("field,value", [
        ("owner_mobile", "9171234567"),
        ("owner_mobile", "0817123456"),
        ("owner_landline", "028-123-4567"),
        ("owner_email", "maria@example"),
        ("owner_first_name", "Maria2"),
    ])
    def test_contact_formats(self, field, value):
        errors = validate_contacts(ctx({**VALID_CONTACTS, field: value}))
        assert list(errors) == [field]

    def test_representative_required_only_when_declared(self):
        assert validate_contacts(ctx({**VALID_CONTACTS, "has_representative": False})) == {}
        errors = validate_contacts(ctx({**VALID_CONTACTS, "has_representative": True}))
        assert {"rep_first_name", "rep_last_name", "rep_email", "rep_mobile"} <= set(errors)

    def test_review_needs_both_declarations(self):
        errors = validate_review(ctx({"info_accurate": True}))
        assert list(errors) == ["false_info_understood"]
        assert validate_review(
            ctx({"info_accurate": True, "false_info_understood": True})
        ) == {}


@pytest.mark.unit
class TestCertificationRules:

    def test_valid_fsec(self, certification_fields):
        assert certification_details(ctx(certification_fields)) == {}

    def test_contractor_name_letters_only(self, certification_fields):
        errors = certification_details(
            ctx({**certification_fields, "contractor_name": "Builders 4 U"})
        )
        assert errors == {"contractor_name": "Contractor name may contain letters only"}

    def test_occupancy_needs_fsec_number(self, certification_fields):
        fields = {**certification_fields, "type": "FSIC-Occupancy"}
        assert "fsec_number" in certification_details(ctx(fields))
        fields["fsec_number"] = "12345678"
        assert certification_details(ctx(fields)) == {}

    def test_business_needs_permit_and_status(self, certification_fields):
        fields = {**certification_fields, "type": "FSIC-Business", "occupancy_permit_no": "123"}
        errors = certification_details(ctx(fields))
        assert set(errors) == {"occupancy_permit_no", "business_status"}

    def test_unknown_type_rejected(self, certification_fields):
        errors = certification_details(ctx({**certification_fields, "type": "Permit"}))
        assert errors == {"type": "Select an application type"}


@pytest.mark.unit
class TestDocumentRules:

    def test_every_required_document_reported(self):
        reqs = resolve_requirements("FSIC-Business", "Renewal")
        errors = documents_present(ctx({}, reqs))
        assert set(errors) == {r.slug for r in reqs if r.required}

    def test_persisted_reference_satisfies_requirement(self):
        reqs = resolve_requirements("FSIC-Business", "Renewal")
        slots = DocumentSlotStore()
        slots.load(
            {
                "business_permit_fee_assessment_renewal": "https://files/a.pdf",
                "fire_safety_maintenance_report": "https://files/b.pdf",
            },
            [r.slug for r in reqs],
        )
        assert documents_present(ctx({}, reqs, slots)) == {}

    def test_optional_documents_not_required(self):
        reqs = resolve_requirements("FSIC-Business", "New")
        slots = DocumentSlotStore()
        for req in reqs:
            if req.required:
                slots.stage(req.slug, StagedFile("f.pdf", b"%PDF", "application/pdf"))
        assert documents_present(ctx({}, reqs, slots)) == {}


@pytest.mark.unit
class TestChecklistRules:

    def test_other_inspection_type_needs_detail(self):
        errors = validate_setup(ctx({"business_scale": "small", "inspection_type": "Other"}))
        assert errors == {"other_inspection_type": "Specify the inspection type"}

    def test_scale_must_be_large_or_small(self):
        errors = validate_setup(ctx({"business_scale": "medium", "inspection_type": "Routine"}))
        assert list(errors) == ["business_scale"]


@pytest.mark.unit
class TestNormalizers:

    def test_mobile_keeps_eleven_digits(self):
        assert normalize_mobile("0917-123-4567 ext") == "09171234567"
        assert normalize_mobile("091712345678") == "09171234567"

    @pytest.mark.parametrize("raw,formatted", [
        ("", ""),
        ("02", "(02"),
        ("02812", "(028) 12"),
        ("0281234567", "(028) 123-4567"),
        ("(028) 123-45678", "(028) 123-4567"),
    ])
    def test_landline_formatting(self, raw, formatted):
        assert normalize_landline(raw) == formatted
