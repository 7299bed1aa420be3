"""Wizard state machine: gating, navigation, requirements, refusals."""

import pytest

from firecert.wizard.errors import (
    InvalidStepTransition,
    SessionBusy,
    UnknownField,
    ValidationFailed,
)
from firecert.wizard.flows import get_flow
from firecert.wizard.flows.base import FieldGroup, Flow
from firecert.wizard.session import WizardSession
from firecert.wizard.slots import StagedFile
from firecert.wizard.steps import Step

PDF = StagedFile("doc.pdf", b"%PDF-1.4", "application/pdf")

BUSINESS_NEW = {
    "type": "FSIC-Business",
    "occupancy_permit_no": "1234567",
    "business_status": "New",
}


def certification_session(fields: dict | None = None) -> WizardSession:
    session = WizardSession(get_flow("certification"), owner_id="owner-1")
    if fields:
        outcome = session.update_fields(fields)
        assert outcome.ok
    return session


@pytest.mark.unit
@pytest.mark.asyncio
class TestStepGating:

    async def test_next_blocked_by_errors(self):
        session = certification_session()
        outcome = await session.next()
        assert not outcome.advanced
        assert outcome.current_step == 1
        assert "type" in outcome.errors
        assert session.errors == outcome.errors

    async def test_next_advances_and_clears_errors(self, certification_fields):
        session = certification_session()
        await session.next()
        session.update_fields(certification_fields)

        outcome = await session.next()

        assert outcome.advanced
        assert outcome.current_step == 2
        assert session.errors == {}

    async def test_setting_a_field_clears_its_error(self):
        session = certification_session()
        await session.next()
        assert "establishment_name" in session.errors
        session.set_field("establishment_name", "Sunrise Bakery")
        assert "establishment_name" not in session.errors

    async def test_next_on_last_step_stays(self, certification_fields):
        session = certification_session(certification_fields)
        session.current_step = session.furthest_step = 3
        session.set_field("certified", True)

        outcome = await session.next()

        assert outcome.current_step == 3
        assert not outcome.advanced
        assert outcome.errors == {}

    async def test_business_new_upload_step(self, certification_fields):
        session = certification_session({**certification_fields, **BUSINESS_NEW})
        assert [r.slug for r in session.requirements] == [
            "certificate_of_occupancy",
            "affidavit_no_substantial_changes",
            "business_permit_fee_assessment_new",
            "fire_insurance_new",
        ]
        assert (await session.next()).current_step == 2

        session.stage_document("certificate_of_occupancy", PDF)
        session.stage_document("business_permit_fee_assessment_new", PDF)
        outcome = await session.next()

        assert outcome.errors == {
            "affidavit_no_substantial_changes": "Affidavit of No Substantial Changes is required",
        }
        assert session.current_step == 2

        session.stage_document("affidavit_no_substantial_changes", PDF)
        assert "affidavit_no_substantial_changes" not in session.errors
        outcome = await session.next()

        assert outcome.advanced
        assert outcome.errors == {}
        assert session.current_step == 3


@pytest.mark.unit
@pytest.mark.asyncio
class TestNavigation:

    async def test_back_floors_at_one(self):
        session = certification_session()
        assert session.back().current_step == 1

    async def test_jump_only_goes_back(self, certification_fields):
        session = certification_session(certification_fields)
        outcome = session.jump_to_step(2)
        assert isinstance(outcome.error, InvalidStepTransition)
        assert session.current_step == 1

        await session.next()
        outcome = session.jump_to_step(1)
        assert outcome.ok
        assert session.current_step == 1

    async def test_jump_cannot_skip_revalidation(self, certification_fields):
        session = certification_session(certification_fields)
        await session.next()
        session.back()
        session.set_field("contractor_name", "")

        outcome = session.jump_to_step(2)

        assert isinstance(outcome.error, InvalidStepTransition)
        assert session.current_step == 1
        assert not (await session.next()).advanced
        assert "contractor_name" in session.errors

    async def test_jump_rejects_out_of_range(self):
        session = certification_session()
        assert isinstance(session.jump_to_step(0).error, InvalidStepTransition)

    async def test_reset_is_idempotent(self, certification_fields):
        session = certification_session({**certification_fields, **BUSINESS_NEW})
        await session.next()
        session.stage_document("certificate_of_occupancy", PDF)

        session.reset()
        once = session.snapshot()
        session.reset()
        twice = session.snapshot()

        assert once == twice
        assert once["fields"] == {}
        assert once["current_step"] == 1
        assert once["requirements"] == []
        assert session.slots.staged() == {}


@pytest.mark.unit
class TestRequirementChanges:

    def test_sub_status_change_drops_foreign_slots(self, certification_fields):
        session = certification_session({**certification_fields, **BUSINESS_NEW})
        session.stage_document("certificate_of_occupancy", PDF)

        session.set_field("business_status", "Renewal")

        slugs = [r.slug for r in session.requirements]
        assert "certificate_of_occupancy" not in slugs
        assert "fire_safety_maintenance_report" in slugs
        assert session.slots.state("certificate_of_occupancy") is None
        assert "certificate_of_occupancy" not in session.slots.slugs()

    def test_staging_unknown_slug_rejected(self, certification_fields):
        session = certification_session(certification_fields)
        outcome = session.stage_document("certificate_of_occupancy", PDF)
        assert outcome.error is not None
        assert session.slots.staged() == {}

    def test_rejected_file_reports_slot_error(self, certification_fields):
        session = certification_session(certification_fields)
        clip = StagedFile("site.mov", b"\x00", "video/quicktime")
        outcome = session.stage_document("architectural_documents", clip)
        assert outcome.error is not None
        assert session.errors["architectural_documents"] == "Video files are not allowed"

    def test_checklist_step_count_follows_scale(self):
        session = WizardSession(get_flow("checklist"), owner_id="inspector-1")
        assert session.total_steps == 2
        session.set_field("business_scale", "large")
        assert session.total_steps == 8
        session.current_step = session.furthest_step = 6

        session.set_field("business_scale", "small")

        assert session.total_steps == 4
        assert session.current_step == 4
        assert session.furthest_step == 4

    def test_unknown_fields_rejected_without_changes(self):
        session = certification_session()
        outcome = session.update_fields({"type": "FSEC", "favourite_colour": "red"})
        assert isinstance(outcome.error, UnknownField)
        assert session.fields == {}

    def test_list_value_rejected_without_changes(self):
        session = WizardSession(get_flow("checklist"), owner_id="inspector-1")
        session.set_field("business_scale", "small")

        outcome = session.update_fields({"business_scale": ["large"], "hazard_remarks": "ok"})

        assert isinstance(outcome.error, ValidationFailed)
        assert outcome.error.errors == {"business_scale": "Enter a single value"}
        assert session.fields == {"business_scale": "small"}
        assert session.total_steps == 4
        assert session.snapshot()["fields"] == {"business_scale": "small"}

    def test_normalizer_applied_on_set(self):
        session = certification_session({"owner_mobile": "0917 123 4567"})
        assert session.fields["owner_mobile"] == "09171234567"

    def test_draft_loads_persisted_references(self):
        record = {
            "type": "FSEC",
            "contractor_name": "Juan Dela Cruz",
            "architectural_documents": "https://files/a.pdf",
            "electrical_documents": "https://files/e.pdf",
        }
        session = WizardSession.from_draft(
            get_flow("certification"), record, draft_id="app-1", owner_id="owner-1",
        )
        assert session.draft_id == "app-1"
        assert session.slots.persisted() == {
            "architectural_documents": "https://files/a.pdf",
            "electrical_documents": "https://files/e.pdf",
        }


@pytest.mark.unit
@pytest.mark.asyncio
class TestRefusalsAndFailures:

    async def test_operations_refused_while_submitting(self, certification_fields):
        session = certification_session(certification_fields)
        session.submitting = True

        for outcome in (
            await session.next(),
            session.back(),
            session.jump_to_step(1),
            session.reset(),
            session.update_fields({"type": "FSEC"}),
        ):
            assert isinstance(outcome.error, SessionBusy)
        assert isinstance(session.discard(), SessionBusy)
        assert session.fields["type"] == "FSEC"
        assert session.current_step == 1

    async def test_crashing_validator_becomes_general_error(self):
        class NoFields(FieldGroup):
            pass

        def explode(ctx):
            raise RuntimeError("lookup table missing")

        flow = Flow(
            name="broken", entity_type="test",
            steps=(Step("boom", "Boom Step", explode),),
            common=NoFields,
        )
        session = WizardSession(flow, owner_id="u")

        outcome = await session.next()

        assert outcome.errors == {"general": "Could not validate Boom Step. Please try again."}
        assert session.current_step == 1

    async def test_remote_duplicate_check(self, gateway):
        session = WizardSession(get_flow("registration"), owner_id="owner-1")
        session.update_fields({
            "name": "Sunrise Bakery", "dti_number": "123456", "type": "Commercial",
            "occupancy": "Mercantile", "storeys": 1, "floor_area": 50, "occupants": 5,
        })
        gateway.conflicts = {"dti_number"}

        outcome = await session.next(gateway=gateway)

        assert outcome.errors == {"dti_number": "This DTI number is already registered"}
        gateway.conflicts = set()
        assert (await session.next(gateway=gateway)).advanced

    async def test_remote_check_failure_becomes_general_error(self):
        class Unreachable:
            async def find_conflicts(self, **kwargs):
                raise ConnectionError("database down")

        session = WizardSession(get_flow("registration"), owner_id="owner-1")
        session.update_fields({
            "name": "Sunrise Bakery", "dti_number": "123456", "type": "Commercial",
            "occupancy": "Mercantile", "storeys": 1, "floor_area": 50, "occupants": 5,
        })

        outcome = await session.next(gateway=Unreachable())

        assert list(outcome.errors) == ["general"]
        assert session.current_step == 1


@pytest.mark.unit
class TestPhotos:

    JPEG = StagedFile("front.jpg", b"\xff\xd8\xff", "image/jpeg")

    def checklist_session(self) -> WizardSession:
        return WizardSession(get_flow("checklist"), owner_id="inspector-1")

    def test_photos_kept_in_order(self):
        session = self.checklist_session()
        session.add_photo(self.JPEG)
        outcome = session.add_photo(StagedFile("exit.png", b"\x89PNG", "image/png"))

        assert outcome.ok
        assert [p["filename"] for p in session.snapshot()["photos"]] == [
            "front.jpg", "exit.png",
        ]

    @pytest.mark.parametrize("staged,message", [
        (StagedFile("walkthrough.mp4", b"\x00", "video/mp4"), "Video files are not allowed"),
        (PDF, "Only image files can be attached"),
    ])
    def test_non_images_rejected(self, staged, message):
        session = self.checklist_session()
        outcome = session.add_photo(staged)
        assert isinstance(outcome.error, ValidationFailed)
        assert outcome.error.errors == {"images": message}
        assert len(session.photos) == 0

    def test_remove_by_position(self):
        session = self.checklist_session()
        session.add_photo(self.JPEG)

        assert isinstance(session.remove_photo(3).error, ValidationFailed)
        assert session.remove_photo(0).ok
        assert session.snapshot()["photos"] == []

    def test_reset_and_discard_drop_photos(self):
        session = self.checklist_session()
        session.add_photo(self.JPEG)
        session.reset()
        assert len(session.photos) == 0

        session.add_photo(self.JPEG)
        session.discard()
        assert len(session.photos) == 0

    def test_flow_without_photos_refuses(self):
        session = certification_session()
        outcome = session.add_photo(self.JPEG)
        assert isinstance(outcome.error, ValidationFailed)
        assert len(session.photos) == 0

    def test_refused_while_submitting(self):
        session = self.checklist_session()
        session.submitting = True
        assert isinstance(session.add_photo(self.JPEG).error, SessionBusy)
        assert isinstance(session.remove_photo(0).error, SessionBusy)
