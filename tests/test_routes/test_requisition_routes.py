"""
Route tests for the requisition API and the job endpoint that consumes
requisitions.

The acting role always comes from the logged-in session.
"""

import pytest

from recruitflow.extensions import db
from recruitflow.models.requisition import Requisition
from recruitflow.services import approval_service
from recruitflow.services.approval_service import REQUISITION_WORKFLOW


@pytest.fixture
def payload(requisition_data):
    return dict(requisition_data)


def _decide(client, requisition_id, stage, status="approved", comments=None, **extra):
    body = {"status": status, **extra}
    if comments is not None:
        body["comments"] = comments
    return client.put(f"/requisitions/{requisition_id}/stages/{stage}", json=body)


class TestCreateAndView:
    """POST / GET on /requisitions/."""

    def test_recruiter_creates(self, client, login, users, payload):
        login(users["recruiter"])
        response = client.post("/requisitions/", json=payload)
        assert response.status_code == 201
        body = response.get_json()["requisition"]
        assert body["requisition_number"] == "ORG-Req-00001"
        assert body["overall_status"] == "pending"
        assert body["active_stage"] == "departmentHead"
        assert {s["status"] for s in body["stages"].values()} == {"pending"}

    def test_hod_cannot_create(self, client, login, users, payload):
        login(users["hod"])
        response = client.post("/requisitions/", json=payload)
        assert response.status_code == 403

    def test_validation_error_body(self, client, login, users):
        login(users["recruiter"])
        response = client.post("/requisitions/", json={"position": "X"})
        assert response.status_code == 400
        body = response.get_json()
        assert body["success"] is False
        assert body["code"] == "VALIDATION_ERROR"

    def test_list_with_status_filter(self, client, login, users, requisition):
        login(users["recruiter"])
        pending = client.get("/requisitions/?status=pending").get_json()
        assert [r["id"] for r in pending["requisitions"]] == [requisition.id]
        rejected = client.get("/requisitions/?status=rejected").get_json()
        assert rejected["requisitions"] == []

    def test_unknown_requisition(self, client, login, users):
        login(users["recruiter"])
        response = client.get("/requisitions/999")
        assert response.status_code == 404
        assert response.get_json()["code"] == "NOT_FOUND"


class TestStageDecisions:
    """PUT /requisitions/<id>/stages/<stage>."""

    def test_role_in_body_is_ignored(self, client, login, users, requisition):
        login(users["hr"])
        response = _decide(client, requisition.id, "departmentHead", role="hod")
        assert response.status_code == 403
        db.session.expire_all()
        assert db.session.get(Requisition, requisition.id).hod_status == "pending"

    def test_out_of_order_is_conflict(self, client, login, users, requisition):
        login(users["hr"])
        response = _decide(client, requisition.id, "hr")
        assert response.status_code == 409
        assert response.get_json()["code"] == "INVALID_STATE"

    def test_reject_without_comments(self, client, login, users, requisition):
        login(users["hod"])
        response = _decide(client, requisition.id, "departmentHead", "rejected", "  ")
        assert response.status_code == 400

    def test_full_chain_then_job(self, client, login, users, requisition):
        number = requisition.requisition_number
        for stage, role in (("departmentHead", "hod"), ("hr", "hr"), ("coo", "coo")):
            login(users[role])
            response = _decide(client, requisition.id, stage, comments="ok")
            assert response.status_code == 200, response.get_json()

        body = response.get_json()["requisition"]
        assert body["overall_status"] == "approved"
        assert body["active_stage"] is None

        login(users["recruiter"])
        check = client.get(f"/requisitions/check/{number}").get_json()
        assert check["is_fully_approved"] is True

        first = client.post("/jobs/", json={"req_no": number, "is_published": True})
        assert first.status_code == 201
        second = client.post("/jobs/", json={"req_no": number})
        assert second.status_code == 409
        assert second.get_json()["code"] == "ALREADY_CONSUMED"

    def test_hr_rejection_scenario(self, client, login, users, requisition):
        login(users["hod"])
        assert _decide(client, requisition.id, "departmentHead").status_code == 200
        login(users["hr"])
        response = _decide(client, requisition.id, "hr", "rejected", "Not budgeted")
        body = response.get_json()["requisition"]
        assert body["overall_status"] == "rejected"
        assert body["stages"]["hr"]["comments"] == "Not budgeted"

        login(users["recruiter"])
        job = client.post("/jobs/", json={"req_no": requisition.requisition_number})
        assert job.status_code == 409
        assert job.get_json()["code"] == "INVALID_STATE"


class TestDelete:
    """DELETE /requisitions/<id>."""

    def test_owner_deletes(self, client, login, users, requisition):
        login(users["recruiter"])
        assert client.delete(f"/requisitions/{requisition.id}").status_code == 200
        assert db.session.get(Requisition, requisition.id) is None

    def test_stranger_cannot_delete(self, client, login, users, requisition):
        login(users["coo"])
        assert client.delete(f"/requisitions/{requisition.id}").status_code == 403


class TestFieldTypes:
    """Non-text values in text fields are rejected as validation errors."""

    def test_numeric_comments(self, client, login, users, requisition):
        login(users["hod"])
        response = _decide(client, requisition.id, "departmentHead", "rejected", 123)
        assert response.status_code == 400
        assert response.get_json()["code"] == "VALIDATION_ERROR"
        db.session.expire_all()
        assert db.session.get(Requisition, requisition.id).hod_status == "pending"

    @pytest.mark.parametrize("field, value", [("position", 42), ("location", ["Lahore"])])
    def test_non_text_requisition_field(
        self, client, login, users, payload, field, value
    ):
        login(users["recruiter"])
        response = client.post("/requisitions/", json={**payload, field: value})
        assert response.status_code == 400
        assert response.get_json()["code"] == "VALIDATION_ERROR"
        assert Requisition.query.count() == 0

    @pytest.mark.parametrize("salary", ["NaN", "Infinity", "-5", "abc", True])
    def test_bad_salary(self, client, login, users, payload, salary):
        login(users["recruiter"])
        response = client.post("/requisitions/", json={**payload, "salary": salary})
        assert response.status_code == 400
        assert response.get_json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize(
        "extra", [{"title": 42}, {"is_published": "false"}, {"description": {"a": 1}}]
    )
    def test_bad_job_fields(
        self, client, login, users, actors, requisition, extra
    ):
        for stage, role in (("departmentHead", "hod"), ("hr", "hr"), ("coo", "coo")):
            approval_service.submit_stage_decision(
                REQUISITION_WORKFLOW, requisition.id, stage, actors[role], "approved"
            )
        login(users["recruiter"])
        response = client.post(
            "/jobs/", json={"req_no": requisition.requisition_number, **extra}
        )
        assert response.status_code == 400
        assert response.get_json()["code"] == "VALIDATION_ERROR"
        db.session.expire_all()
        assert db.session.get(Requisition, requisition.id).consumed_at is None
