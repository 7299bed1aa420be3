"""Wizard endpoints end to end: open, edit, upload, navigate, submit."""

import pytest
from sqlalchemy import select

from firecert.models import ActivityLog, Application, Establishment, Inspection, InspectionChecklist

pytestmark = [pytest.mark.api, pytest.mark.asyncio]

BASE = "/api/wizard/sessions"

FSEC_REQUIRED = (
    "architectural_documents",
    "civil_structural_documents",
    "electrical_documents",
    "fire_protection_documents",
    "fire_safety_compliance_report",
)


def pdf_upload(name: str = "plan.pdf"):
    return {"file": (name, b"%PDF-1.4 test document", "application/pdf")}


async def open_certification(client, headers, establishment, category="FSEC"):
    resp = await client.post(BASE, json={
        "flow": "certification",
        "establishment_id": establishment.id,
        "category": category,
    }, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()


async def complete_fsec(client, headers, session_id):
    resp = await client.patch(
        f"{BASE}/{session_id}/fields",
        json={"fields": {"contractor_name": "Juan Dela Cruz"}},
        headers=headers,
    )
    assert resp.status_code == 200
    resp = await client.post(f"{BASE}/{session_id}/next", headers=headers)
    assert resp.json()["current_step"] == 2

    for slug in FSEC_REQUIRED:
        resp = await client.put(
            f"{BASE}/{session_id}/documents/{slug}", files=pdf_upload(), headers=headers,
        )
        assert resp.status_code == 200, resp.text
    resp = await client.post(f"{BASE}/{session_id}/next", headers=headers)
    assert resp.json()["current_step"] == 3

    await client.patch(
        f"{BASE}/{session_id}/fields", json={"fields": {"certified": True}}, headers=headers,
    )


# ── Certification ────────────────────────────────────────────

class TestCertificationWizard:

    async def test_open_prefills_from_establishment(
        self, client, owner_headers, registered_establishment,
    ):
        body = await open_certification(client, owner_headers, registered_establishment)

        assert body["flow"] == "certification"
        assert body["current_step"] == 1
        assert body["total_steps"] == 3
        assert body["fields"]["type"] == "FSEC"
        assert body["fields"]["establishment_name"] == "Sunrise Bakery"
        assert body["fields"]["owner_mobile"] == "09171234567"
        assert [r["slug"] for r in body["requirements"]][0] == "architectural_documents"
        assert body["draft_id"] is None

    async def test_full_submission(
        self, client, owner_headers, owner, registered_establishment, db_session,
    ):
        session = await open_certification(client, owner_headers, registered_establishment)
        await complete_fsec(client, owner_headers, session["id"])

        resp = await client.post(f"{BASE}/{session['id']}/submit", headers=owner_headers)

        assert resp.status_code == 201, resp.text
        result = resp.json()
        assert result["flow"] == "certification"
        assert result["status"] == "pending"

        application = await db_session.get(Application, result["record_id"])
        assert application.owner_id == owner.id
        assert application.establishment_id == registered_establishment.id
        assert application.contractor_name == "Juan Dela Cruz"
        assert application.architectural_documents.startswith("/files/certification/")
        assert application.mechanical_documents is None

        logs = (await db_session.execute(select(ActivityLog))).scalars().all()
        assert [log.action for log in logs] == ["submitted"]

        # The session is gone once submitted
        resp = await client.get(f"{BASE}/{session['id']}", headers=owner_headers)
        assert resp.status_code == 404

    async def test_missing_documents_block_step(
        self, client, owner_headers, registered_establishment,
    ):
        session = await open_certification(client, owner_headers, registered_establishment)
        await client.patch(
            f"{BASE}/{session['id']}/fields",
            json={"fields": {"contractor_name": "Juan Dela Cruz"}},
            headers=owner_headers,
        )
        await client.post(f"{BASE}/{session['id']}/next", headers=owner_headers)

        resp = await client.post(f"{BASE}/{session['id']}/next", headers=owner_headers)

        body = resp.json()
        assert resp.status_code == 200
        assert body["advanced"] is False
        assert set(body["errors"]) == set(FSEC_REQUIRED)

    async def test_video_upload_rejected(self, client, owner_headers, registered_establishment):
        session = await open_certification(client, owner_headers, registered_establishment)

        resp = await client.put(
            f"{BASE}/{session['id']}/documents/architectural_documents",
            files={"file": ("walkthrough.mp4", b"\x00\x00", "video/mp4")},
            headers=owner_headers,
        )

        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_FAILED"
        assert error["details"]["errors"] == {
            "architectural_documents": "Video files are not allowed",
        }

    async def test_reopening_resumes_pending_draft(
        self, client, owner_headers, registered_establishment,
    ):
        first = await open_certification(client, owner_headers, registered_establishment)
        await complete_fsec(client, owner_headers, first["id"])
        submitted = (
            await client.post(f"{BASE}/{first['id']}/submit", headers=owner_headers)
        ).json()

        second = await open_certification(client, owner_headers, registered_establishment)

        assert second["draft_id"] == submitted["record_id"]
        assert second["fields"]["contractor_name"] == "Juan Dela Cruz"
        slots = {r["slug"]: r["slot"]["state"] for r in second["requirements"]}
        assert all(slots[slug] == "persisted" for slug in FSEC_REQUIRED)

    async def test_jump_ahead_refused(self, client, owner_headers, registered_establishment):
        session = await open_certification(client, owner_headers, registered_establishment)
        resp = await client.post(f"{BASE}/{session['id']}/jump/3", headers=owner_headers)
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "INVALID_STEP"

    async def test_unknown_field_rejected(self, client, owner_headers, registered_establishment):
        session = await open_certification(client, owner_headers, registered_establishment)
        resp = await client.patch(
            f"{BASE}/{session['id']}/fields",
            json={"fields": {"favourite_colour": "red"}},
            headers=owner_headers,
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "UNKNOWN_FIELD"

    async def test_unregistered_establishment_refused(
        self, client, owner_headers, unregistered_establishment,
    ):
        resp = await client.post(BASE, json={
            "flow": "certification", "establishment_id": unregistered_establishment.id,
        }, headers=owner_headers)
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "ESTABLISHMENT_NOT_REGISTERED"


# ── Session ownership & lifecycle ────────────────────────────

class TestSessionAccess:

    async def test_other_user_cannot_see_session(
        self, client, owner_headers, other_headers, registered_establishment,
    ):
        session = await open_certification(client, owner_headers, registered_establishment)
        resp = await client.get(f"{BASE}/{session['id']}", headers=other_headers)
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "RESOURCE_NOT_FOUND"

    async def test_cancel_discards_session(self, client, owner_headers, registered_establishment):
        session = await open_certification(client, owner_headers, registered_establishment)

        resp = await client.delete(f"{BASE}/{session['id']}", headers=owner_headers)

        assert resp.status_code == 204
        resp = await client.get(f"{BASE}/{session['id']}", headers=owner_headers)
        assert resp.status_code == 404

    async def test_unauthenticated(self, client):
        resp = await client.post(BASE, json={"flow": "registration"})
        assert resp.status_code == 401

    async def test_inspector_cannot_open_certification(
        self, client, inspector_headers, registered_establishment,
    ):
        resp = await client.post(BASE, json={
            "flow": "certification", "establishment_id": registered_establishment.id,
        }, headers=inspector_headers)
        assert resp.status_code == 403


# ── Registration ─────────────────────────────────────────────

REGISTRATION_DETAILS = {
    "name": "Harbor Cafe",
    "dti_number": "654321",
    "type": "Commercial",
    "occupancy": "Assembly",
    "storeys": 1,
    "floor_area": 85,
    "occupants": 40,
}


class TestRegistrationWizard:

    async def test_duplicate_dti_then_register(
        self, client, owner_headers, registered_establishment,
        unregistered_establishment, db_session,
    ):
        resp = await client.post(BASE, json={
            "flow": "registration", "establishment_id": unregistered_establishment.id,
        }, headers=owner_headers)
        assert resp.status_code == 201
        session = resp.json()
        assert session["fields"]["name"] == "Harbor Cafe"
        sid = session["id"]

        await client.patch(f"{BASE}/{sid}/fields", json={"fields": {
            **REGISTRATION_DETAILS, "dti_number": "123456",
        }}, headers=owner_headers)
        resp = await client.post(f"{BASE}/{sid}/next", headers=owner_headers)
        assert resp.json()["errors"] == {"dti_number": "This DTI number is already registered"}

        # Its own DTI number is not a conflict
        await client.patch(
            f"{BASE}/{sid}/fields", json={"fields": {"dti_number": "654321"}},
            headers=owner_headers,
        )
        assert (await client.post(f"{BASE}/{sid}/next", headers=owner_headers)).json()["advanced"]

        await client.patch(f"{BASE}/{sid}/fields", json={"fields": {
            "street": "3 Pier Road", "barangay": "Baybay", "city": "Cebu City",
            "province": "Cebu", "region": "VII",
        }}, headers=owner_headers)
        assert (await client.post(f"{BASE}/{sid}/next", headers=owner_headers)).json()["advanced"]

        await client.patch(f"{BASE}/{sid}/fields", json={"fields": {
            "owner_first_name": "Maria", "owner_last_name": "Santos",
            "owner_email": "maria@example.com", "owner_mobile": "0917-123-4567",
        }}, headers=owner_headers)
        assert (await client.post(f"{BASE}/{sid}/next", headers=owner_headers)).json()["advanced"]

        await client.patch(f"{BASE}/{sid}/fields", json={"fields": {
            "info_accurate": True, "false_info_understood": True,
        }}, headers=owner_headers)
        resp = await client.post(f"{BASE}/{sid}/submit", headers=owner_headers)

        assert resp.status_code == 201, resp.text
        assert resp.json()["record_id"] == unregistered_establishment.id
        establishment = await db_session.get(Establishment, unregistered_establishment.id)
        await db_session.refresh(establishment)
        assert establishment.status == "pre_registered"
        assert establishment.owner_mobile == "09171234567"
        assert establishment.address == "3 Pier Road, Baybay, Cebu City, Cebu, VII"
        assert establishment.rep_first_name is None

    async def test_registered_establishment_cannot_reregister(
        self, client, owner_headers, registered_establishment,
    ):
        resp = await client.post(BASE, json={
            "flow": "registration", "establishment_id": registered_establishment.id,
        }, headers=owner_headers)
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "ESTABLISHMENT_ALREADY_REGISTERED"


# ── Inspection checklist ─────────────────────────────────────

class TestChecklistWizard:

    async def test_small_checklist_marks_inspection(
        self, client, inspector_headers, inspection, db_session,
    ):
        resp = await client.post(BASE, json={
            "flow": "checklist", "inspection_id": inspection.id, "category": "small",
        }, headers=inspector_headers)
        assert resp.status_code == 201, resp.text
        session = resp.json()
        assert session["total_steps"] == 4
        assert session["fields"]["inspector_name"] == "Ana Cruz"
        sid = session["id"]

        steps = [
            {"inspection_type": "Routine"},
            {"building_name": "Sunrise Building", "nature_of_business": "Bakery",
             "owner_name": "Maria Santos", "owner_contact_number": "09171234567"},
            {"has_handrails": "Yes", "exit_signage_posted": "No",
             "lpg_system_approved_plans": "N/A", "signage_remarks": "Replace exit sign"},
        ]
        for values in steps:
            await client.patch(
                f"{BASE}/{sid}/fields", json={"fields": values}, headers=inspector_headers,
            )
            resp = await client.post(f"{BASE}/{sid}/next", headers=inspector_headers)
            assert resp.json()["advanced"], resp.json()["errors"]

        resp = await client.post(
            f"{BASE}/{sid}/photos",
            files={"file": ("exit.jpg", b"\xff\xd8\xff photo", "image/jpeg")},
            headers=inspector_headers,
        )
        assert resp.status_code == 200, resp.text
        assert resp.json()["session"]["photos"][0]["filename"] == "exit.jpg"
        resp = await client.post(
            f"{BASE}/{sid}/photos", files=pdf_upload(), headers=inspector_headers,
        )
        assert resp.status_code == 422

        resp = await client.post(f"{BASE}/{sid}/submit", headers=inspector_headers)

        assert resp.status_code == 201, resp.text
        checklist = await db_session.get(InspectionChecklist, resp.json()["record_id"])
        assert checklist.business_scale == "small"
        assert checklist.business_name == "Sunrise Bakery"
        assert checklist.signage_remarks == "Replace exit sign"
        assert checklist.exit_access_doors is None
        assert len(checklist.images) == 1
        assert checklist.images[0].startswith("/files/checklist/")
        refreshed = await db_session.get(Inspection, inspection.id)
        await db_session.refresh(refreshed)
        assert refreshed.status == "inspected"

    async def test_list_value_rejected_and_session_survives(
        self, client, inspector_headers, inspection,
    ):
        resp = await client.post(BASE, json={
            "flow": "checklist", "inspection_id": inspection.id, "category": "small",
        }, headers=inspector_headers)
        sid = resp.json()["id"]

        resp = await client.patch(
            f"{BASE}/{sid}/fields",
            json={"fields": {"business_scale": ["large"]}},
            headers=inspector_headers,
        )
        assert resp.status_code == 422

        resp = await client.get(f"{BASE}/{sid}", headers=inspector_headers)
        assert resp.status_code == 200
        assert resp.json()["fields"]["business_scale"] == "small"

    async def test_owner_cannot_open_checklist(self, client, inspection, owner_headers):
        resp = await client.post(BASE, json={
            "flow": "checklist", "inspection_id": inspection.id,
        }, headers=owner_headers)
        assert resp.status_code == 403
