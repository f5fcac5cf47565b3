"""
Route tests for jobs, applications, offers and notifications, run as
one hiring flow from an approved requisition to an accepted offer.
"""

import pytest

from recruitflow.services import approval_service, job_service
from recruitflow.services.approval_service import REQUISITION_WORKFLOW


@pytest.fixture
def job(requisition, actors):
    for stage, role in (("departmentHead", "hod"), ("hr", "hr"), ("coo", "coo")):
        approval_service.submit_stage_decision(
            REQUISITION_WORKFLOW, requisition.id, stage, actors[role], "approved"
        )
    return job_service.create_job_from_requisition(
        actors["recruiter"], requisition.requisition_number, {"is_published": True}
    )


class TestHiringFlow:
    """Apply, issue, approve and accept through the HTTP API."""

    def test_offer_lifecycle(self, client, login, users, job):
        login(users["applicant"])
        applied = client.post(f"/jobs/{job.id}/apply", json={"cover_letter": "Hi"})
        assert applied.status_code == 201
        application_id = applied.get_json()["application"]["id"]

        login(users["recruiter"])
        listed = client.get(f"/jobs/{job.id}/applications").get_json()
        assert [a["id"] for a in listed["applications"]] == [application_id]

        issued = client.post(
            f"/offers/applications/{application_id}", json={"offered_salary": 275000}
        )
        assert issued.status_code == 201
        offer = issued.get_json()["offer"]
        assert offer["approval_status"] == "pending_hod"
        assert offer["active_stage"] == "hod"

        login(users["hod"])
        pending = client.get("/offers/pending").get_json()["offers"]
        assert [o["id"] for o in pending] == [offer["id"]]
        hod = client.put(f"/offers/{offer['id']}/stages/hod", json={"status": "approved"})
        assert hod.get_json()["offer"]["approval_status"] == "pending_coo"

        login(users["applicant"])
        early = client.post(f"/offers/{offer['id']}/respond", json={"response": "accepted"})
        assert early.status_code == 409

        login(users["coo"])
        coo = client.put(f"/offers/{offer['id']}/stages/coo", json={"status": "approved"})
        assert coo.get_json()["offer"]["approval_status"] == "approved"

        login(users["applicant"])
        inbox = client.get("/notifications/").get_json()
        assert inbox["unread"] == 1
        accepted = client.post(
            f"/offers/{offer['id']}/respond", json={"response": "accepted"}
        )
        assert accepted.status_code == 200
        assert accepted.get_json()["offer"]["response_status"] == "accepted"

        login(users["recruiter"])
        titles = [n["title"] for n in client.get("/notifications/").get_json()["notifications"]]
        assert "Offer accepted" in titles

    def test_hod_cannot_decide_coo_stage(self, client, login, users, job, actors):
        application = job_service.apply_to_job(actors["applicant"], job.id)
        login(users["recruiter"])
        offer_id = client.post(
            f"/offers/applications/{application.id}", json={"offered_salary": "1000"}
        ).get_json()["offer"]["id"]

        login(users["hod"])
        response = client.put(f"/offers/{offer_id}/stages/coo", json={"status": "approved"})
        assert response.status_code == 403

    def test_applicant_cannot_issue_offers(self, client, login, users, job, actors):
        application = job_service.apply_to_job(actors["applicant"], job.id)
        login(users["applicant"])
        response = client.post(
            f"/offers/applications/{application.id}", json={"offered_salary": "1000"}
        )
        assert response.status_code == 403

    @pytest.mark.parametrize("salary", ["NaN", "Infinity", "-Infinity", 0])
    def test_offered_salary_must_be_finite_and_positive(
        self, client, login, users, job, actors, salary
    ):
        application = job_service.apply_to_job(actors["applicant"], job.id)
        login(users["recruiter"])
        response = client.post(
            f"/offers/applications/{application.id}", json={"offered_salary": salary}
        )
        assert response.status_code == 400
        assert response.get_json()["code"] == "VALIDATION_ERROR"

    def test_numeric_response_comment(self, client, login, users, job, actors):
        application = job_service.apply_to_job(actors["applicant"], job.id)
        login(users["recruiter"])
        offer_id = client.post(
            f"/offers/applications/{application.id}", json={"offered_salary": "1000"}
        ).get_json()["offer"]["id"]
        login(users["hod"])
        client.put(f"/offers/{offer_id}/stages/hod", json={"status": "approved"})
        login(users["coo"])
        client.put(f"/offers/{offer_id}/stages/coo", json={"status": "approved"})

        login(users["applicant"])
        response = client.post(
            f"/offers/{offer_id}/respond", json={"response": "accepted", "comment": 7}
        )
        assert response.status_code == 400
        assert response.get_json()["code"] == "VALIDATION_ERROR"
        assert response.status_code == 403


class TestNotificationRoutes:
    """The inbox endpoints act on the current user only."""

    def test_open_returns_role_route(self, client, login, users, requisition):
        login(users["hod"])
        notification = client.get("/notifications/").get_json()["notifications"][0]
        opened = client.get(f"/notifications/{notification['id']}/open").get_json()
        assert opened["target"].endswith(f"/hod/requisitionForm?id={requisition.id}")

        login(users["hr"])
        response = client.delete(f"/notifications/{notification['id']}")
        assert response.status_code == 403
