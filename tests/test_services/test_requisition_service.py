"""
Tests for the requisition service — creation rules, numbering,
role-scoped listing, readiness checks and deletion.
"""

import pytest

from recruitflow.exceptions import ForbiddenError, NotFoundError, ValidationError
from recruitflow.extensions import db
from recruitflow.models.job import Application
from recruitflow.models.requisition import Requisition
from recruitflow.services import approval_service, job_service, requisition_service
from recruitflow.services.actor import Actor
from recruitflow.services.approval_service import REQUISITION_WORKFLOW


def _approve_all(requisition, actors):
    for stage, role in (("departmentHead", "hod"), ("hr", "hr"), ("coo", "coo")):
        approval_service.submit_stage_decision(
            REQUISITION_WORKFLOW, requisition.id, stage, actors[role], "approved"
        )


class TestCreateRequisition:
    """Tests for ``create_requisition``."""

    def test_new_requisition_has_all_stages_pending(self, requisition, users):
        assert [s.status.value for s in requisition.stages()] == ["pending"] * 3
        assert requisition.assigned_hod_id == users["hod"].id
        assert requisition.created_by_id == users["recruiter"].id
        assert not requisition.is_consumed

    def test_numbers_are_sequential_and_zero_padded(self, actors, requisition_data):
        first = requisition_service.create_requisition(actors["recruiter"], requisition_data)
        second = requisition_service.create_requisition(actors["hr"], requisition_data)
        assert first.requisition_number == "ORG-Req-00001"
        assert second.requisition_number == "ORG-Req-00002"

    def test_sub_recruiter_limited_to_own_department(self, actors, requisition_data):
        own = requisition_service.create_requisition(
            actors["sub_recruiter"], requisition_data
        )
        assert own.department == "Engineering"

        with pytest.raises(ForbiddenError):
            requisition_service.create_requisition(
                actors["sub_recruiter"], {**requisition_data, "department": "Finance"}
            )

    @pytest.mark.parametrize("role", ["hod", "coo", "interviewer", "user"])
    def test_other_roles_cannot_create(self, make_user, requisition_data, role):
        actor = Actor.from_user(make_user(role, department="Engineering"))
        with pytest.raises(ForbiddenError):
            requisition_service.create_requisition(actor, requisition_data)

    def test_department_without_hod_is_rejected(self, actors, requisition_data):
        with pytest.raises(ValidationError, match="No HOD assigned"):
            requisition_service.create_requisition(
                actors["recruiter"], {**requisition_data, "department": "Finance"}
            )

    def test_inactive_hod_does_not_count(self, actors, make_user, requisition_data):
        make_user("hod", department="Legal", is_active=False)
        with pytest.raises(ValidationError):
            requisition_service.create_requisition(
                actors["recruiter"], {**requisition_data, "department": "Legal"}
            )

    def test_replacement_requires_reason(self, actors, requisition_data):
        data = {**requisition_data, "requisition_type": "Replacement"}
        with pytest.raises(ValidationError):
            requisition_service.create_requisition(actors["recruiter"], data)

        data["replacement_reason"] = "Resigned"
        data["replacement_name"] = "Former Employee"
        requisition = requisition_service.create_requisition(actors["recruiter"], data)
        assert requisition.replacement_reason == "Resigned"

    def test_missing_fields_are_reported(self, actors):
        with pytest.raises(ValidationError, match="position"):
            requisition_service.create_requisition(
                actors["recruiter"], {"department": "Engineering"}
            )


class TestListRequisitions:
    """Each role sees its own slice of requisitions."""

    @pytest.fixture(autouse=True)
    def _setup(self, actors, requisition_data, make_user):
        make_user("hod", department="Finance")
        self.engineering = requisition_service.create_requisition(
            actors["sub_recruiter"], requisition_data
        )
        self.finance = requisition_service.create_requisition(
            actors["recruiter"], {**requisition_data, "department": "Finance"}
        )
        approval_service.submit_stage_decision(
            REQUISITION_WORKFLOW,
            self.engineering.id,
            "departmentHead",
            actors["hod"],
            "approved",
        )

    def _ids(self, actor, status=None):
        return {r.id for r in requisition_service.list_requisitions(actor, status)}

    def test_recruiter_and_coo_see_everything(self, actors):
        everything = {self.engineering.id, self.finance.id}
        assert self._ids(actors["recruiter"]) == everything
        assert self._ids(actors["coo"]) == everything
        assert self._ids(actors["admin"]) == everything

    def test_sub_recruiter_sees_own(self, actors):
        assert self._ids(actors["sub_recruiter"]) == {self.engineering.id}

    def test_hod_sees_assigned(self, actors):
        assert self._ids(actors["hod"]) == {self.engineering.id}

    def test_hr_sees_hod_approved_only(self, actors):
        assert self._ids(actors["hr"]) == {self.engineering.id}

    def test_applicant_sees_nothing(self, actors):
        assert self._ids(actors["applicant"]) == set()

    def test_status_filter(self, actors):
        assert self._ids(actors["recruiter"], "pending") == {
            self.engineering.id,
            self.finance.id,
        }
        assert self._ids(actors["recruiter"], "approved") == set()

    def test_unknown_status_filter(self, actors):
        with pytest.raises(ValidationError):
            requisition_service.list_requisitions(actors["recruiter"], "archived")

    def test_get_requisition_outside_view_is_forbidden(self, actors):
        with pytest.raises(ForbiddenError):
            requisition_service.get_requisition(actors["hod"], self.finance.id)


class TestCheckAndNumbers:
    """Readiness checks and requisition number lookup."""

    def test_bare_number_is_padded(self, app):
        assert requisition_service.resolve_requisition_number("7") == "ORG-Req-00007"
        assert (
            requisition_service.resolve_requisition_number(" ORG-Req-00012 ")
            == "ORG-Req-00012"
        )

    def test_unknown_number_is_not_found(self, db_session):
        with pytest.raises(NotFoundError):
            requisition_service.check_requisition_approval("ORG-Req-00404")

    def test_check_reports_progress(self, requisition, actors):
        result = requisition_service.check_requisition_approval("1")
        assert result["overall_status"] == "pending"
        assert result["is_fully_approved"] is False

        _approve_all(requisition, actors)
        result = requisition_service.check_requisition_approval("1")
        assert result["is_fully_approved"] is True
        assert result["is_consumed"] is False

        job = job_service.create_job_from_requisition(actors["recruiter"], "1")
        result = requisition_service.check_requisition_approval("1")
        assert result["is_consumed"] is True
        assert result["job_id"] == job.id


class TestDeleteRequisition:
    """Tests for ``delete_requisition``."""

    def test_only_owner_or_admin(self, requisition, actors):
        with pytest.raises(ForbiddenError):
            requisition_service.delete_requisition(actors["hr"], requisition.id)
        requisition_service.delete_requisition(actors["admin"], requisition.id)
        assert db.session.get(Requisition, requisition.id) is None

    def test_delete_cascades_to_job_and_applications(self, requisition, actors):
        _approve_all(requisition, actors)
        job = job_service.create_job_from_requisition(
            actors["recruiter"], requisition.requisition_number, {"is_published": True}
        )
        job_service.apply_to_job(actors["applicant"], job.id)

        requisition_service.delete_requisition(actors["recruiter"], requisition.id)
        assert Application.query.count() == 0
