"""
Tests for workflow notifications: who hears about what, click-through
routing, inbox ownership, and isolation from receiver failures.
"""

import logging

import pytest

from recruitflow import signals
from recruitflow.exceptions import ForbiddenError, NotFoundError
from recruitflow.extensions import db
from recruitflow.models.notification import Notification
from recruitflow.models.requisition import Requisition
from recruitflow.services import (
    approval_service,
    notification_service,
    requisition_service,
)
from recruitflow.services.approval_service import REQUISITION_WORKFLOW


def _inbox(user):
    return Notification.query.filter_by(user_id=user.id).order_by(Notification.id).all()


def _decide(requisition, stage, actor, decision="approved", comments=None):
    return approval_service.submit_stage_decision(
        REQUISITION_WORKFLOW, requisition.id, stage, actor, decision, comments
    )


class TestWorkflowNotifications:
    """Receivers address each event to the right people."""

    def test_new_requisition_notifies_assigned_hod(self, requisition, users):
        inbox = _inbox(users["hod"])
        assert len(inbox) == 1
        assert requisition.requisition_number in inbox[0].title
        assert inbox[0].link == f"/requisitions/{requisition.id}"

    def test_sub_recruiter_requisition_also_notifies_recruiters(
        self, actors, users, requisition_data
    ):
        requisition_service.create_requisition(actors["sub_recruiter"], requisition_data)
        assert len(_inbox(users["recruiter"])) == 1
        assert len(_inbox(users["hod"])) == 1

    def test_approval_notifies_next_role(self, requisition, actors, users, make_user):
        second_hr = make_user("hr")
        _decide(requisition, "departmentHead", actors["hod"])
        assert len(_inbox(users["hr"])) == 1
        assert len(_inbox(second_hr)) == 1
        assert _inbox(users["coo"]) == []

    def test_rejection_notifies_requester(self, requisition, actors, users):
        _decide(requisition, "departmentHead", actors["hod"])
        _decide(requisition, "hr", actors["hr"], "rejected", "No budget")
        titles = [n.title for n in _inbox(users["recruiter"])]
        assert titles == [f"Requisition {requisition.requisition_number} rejected"]
        assert _inbox(users["coo"]) == []

    def test_final_approval_notifies_requester(self, requisition, actors, users):
        for stage, role in (("departmentHead", "hod"), ("hr", "hr"), ("coo", "coo")):
            _decide(requisition, stage, actors[role])
        titles = [n.title for n in _inbox(users["recruiter"])]
        assert titles == [f"Requisition {requisition.requisition_number} approved"]


class TestReceiverFailure:
    """A failing receiver never blocks or undoes a decision."""

    def test_failing_receiver_is_logged_and_decision_kept(
        self, requisition, actors, users, caplog
    ):
        def broken(event):
            raise RuntimeError("mail server down")

        with signals.workflow_decided.connected_to(broken):
            with caplog.at_level(logging.ERROR, logger="recruitflow.signals"):
                result = _decide(requisition, "departmentHead", actors["hod"])

        assert result.overall_status == "pending"
        db.session.expire_all()
        stored = db.session.get(Requisition, requisition.id)
        assert stored.stage("departmentHead").status.value == "approved"
        assert "mail server down" in caplog.text
        # The working receiver still delivered.
        assert len(_inbox(users["hr"])) == 1

    def test_publish_counts_failures(self, db_session):
        def broken(event):
            raise ValueError("boom")

        event = signals.WorkflowEvent(
            entity_type="requisition",
            entity_id=1,
            entity_label="ORG-Req-00001",
            acting_role="hod",
            actor_id=1,
        )
        with signals.job_created.connected_to(broken):
            assert signals.publish(signals.job_created, event) == 1


class TestRouting:
    """Click-through targets come from one role lookup table."""

    @pytest.mark.parametrize(
        "role, route",
        [
            ("hr", "/superAdmin/requisitionForm"),
            ("hod", "/hod/requisitionForm"),
            ("coo", "/coo/requisitionForm"),
            ("recruiter", "/recruiter/requisitionForm"),
            ("interviewer", "/recruiter/requisitionForm"),
        ],
    )
    def test_requisition_links_by_role(self, app, role, route):
        base = app.config["FRONTEND_BASE_URL"]
        target = notification_service.resolve_target(role, "/requisitions/12")
        assert target == f"{base}{route}?id=12"

    def test_other_links_pass_through(self, app):
        base = app.config["FRONTEND_BASE_URL"]
        assert notification_service.resolve_target("hod", "/offers/3") == f"{base}/offers/3"
        assert notification_service.resolve_target("hod", None) is None


class TestInbox:
    """Users only touch their own notifications."""

    def test_open_marks_read_and_resolves(self, requisition, actors, users):
        notification = _inbox(users["hod"])[0]
        result = notification_service.open_notification(actors["hod"], notification.id)
        assert result["target"].endswith(f"/hod/requisitionForm?id={requisition.id}")
        assert db.session.get(Notification, notification.id).is_read is True
        assert notification_service.list_notifications(actors["hod"], unread_only=True) == []

    def test_other_users_notification_is_forbidden(self, requisition, actors, users):
        notification = _inbox(users["hod"])[0]
        with pytest.raises(ForbiddenError):
            notification_service.mark_read(actors["hr"], notification.id)
        with pytest.raises(ForbiddenError):
            notification_service.delete_notification(actors["hr"], notification.id)

    def test_delete_own(self, requisition, actors, users):
        notification = _inbox(users["hod"])[0]
        notification_service.delete_notification(actors["hod"], notification.id)
        with pytest.raises(NotFoundError):
            notification_service.mark_read(actors["hod"], notification.id)
