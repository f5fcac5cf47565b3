"""
Offer service — issue offers, route them for approval, record responses.

An offer is approved by the HOD assigned to the job's requisition and
then by the COO (``approval_service.OFFER_WORKFLOW``).  Once approved the
applicant answers it exactly once.  An application holds at most one
live offer; a new one can only follow a rejected offer.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy import desc, update
from sqlalchemy.exc import SQLAlchemyError

from recruitflow import signals
from recruitflow.exceptions import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from recruitflow.extensions import db
from recruitflow.models.offer import OFFER_RESPONSES, Offer, OfferApprovalStatus
from recruitflow.services import approval_service, audit_service, job_service
from recruitflow.services.actor import Actor
from recruitflow.services.validation import optional_text, parse_amount

logger = logging.getLogger(__name__)

OFFER_ISSUER_ROLES = ("recruiter", "admin", "hr")


def _offer_event(offer: Offer, actor: Actor, **addressing) -> signals.WorkflowEvent:
    return signals.WorkflowEvent(
        entity_type="offer",
        entity_id=offer.id,
        entity_label=offer.designation,
        acting_role=actor.role,
        actor_id=actor.user_id,
        **addressing,
    )


# -- Issue -----------------------------------------------------------------


def issue_offer(actor: Actor, application_id: int, data: dict) -> Offer:
    """
    Issue an offer on an application and send it to the HOD.

    Designation, department and location default to the job's values;
    ``offered_salary`` is required.

    Raises:
        ForbiddenError:    Role may not issue offers.
        NotFoundError:     Unknown application.
        InvalidStateError: The application already has a live offer.
        ValidationError:   Missing salary, or the job's requisition has
                           no assigned HOD to approve the offer.
    """
    if not actor.has_role(*OFFER_ISSUER_ROLES):
        raise ForbiddenError(f"The '{actor.role}' role may not issue offers.")

    application = job_service.get_application(application_id)
    current = application.current_offer
    if current is not None and current.approval_status != OfferApprovalStatus.REJECTED.value:
        raise InvalidStateError(
            f"Application {application.id} already has an offer "
            f"({current.approval_status})."
        )

    job = application.job
    hod_id = job.requisition.assigned_hod_id if job.requisition else None
    if hod_id is None:
        raise ValidationError("No HOD is assigned to approve offers for this job.")

    salary = parse_amount(data.get("offered_salary"), "offered_salary", positive=True)
    if salary is None:
        raise ValidationError("An offered salary is required.")

    offer = Offer(
        application_id=application.id,
        designation=optional_text(data.get("designation"), "designation") or job.title,
        department=optional_text(data.get("department"), "department") or job.department,
        location=optional_text(data.get("location"), "location") or job.location,
        grade=optional_text(data.get("grade"), "grade"),
        offered_salary=salary,
        assigned_hod_id=hod_id,
        sent_by_id=actor.user_id,
    )

    try:
        db.session.add(offer)
        application.status = "offer"
        application.updated_at = datetime.now(timezone.utc)
        db.session.flush()
        audit_service.log_change(
            user_id=actor.user_id,
            action_type="CREATE",
            entity_type="offer",
            entity_id=offer.id,
            new_value={
                "application_id": application.id,
                "designation": offer.designation,
                "offered_salary": salary,
            },
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info(
        "Issued offer %d on application %d by user %d",
        offer.id,
        application.id,
        actor.user_id,
    )
    signals.publish(
        signals.offer_issued, _offer_event(offer, actor, recipient_user_ids=(hod_id,))
    )
    return offer


# -- Approval --------------------------------------------------------------


def get_offer(actor: Actor, offer_id: int) -> Offer:
    """
    Return an offer visible to ``actor``.

    The applicant sees their own offer only once it is approved.
    """
    offer = db.session.get(Offer, offer_id)
    if offer is None:
        raise NotFoundError("offer", offer_id)
    if actor.role == "user":
        if (
            offer.application.applicant_id != actor.user_id
            or offer.approval_status != OfferApprovalStatus.APPROVED.value
        ):
            raise NotFoundError("offer", offer_id)
    elif actor.role == "hod" and offer.assigned_hod_id != actor.user_id:
        raise ForbiddenError("This offer is assigned to another head of department.")
    elif actor.role not in OFFER_ISSUER_ROLES + ("hod", "coo"):
        raise ForbiddenError("You do not have access to this offer.")
    return offer


def decide_offer_stage(
    actor: Actor, offer_id: int, stage: str, decision, comments: str | None = None
) -> Offer:
    """Approve or reject the ``hod`` or ``coo`` stage of an offer."""
    return approval_service.submit_stage_decision(
        approval_service.OFFER_WORKFLOW, offer_id, stage, actor, decision, comments
    )


def list_pending_offers(actor: Actor) -> list[Offer]:
    """
    Return offers awaiting the actor's decision.

    HODs see offers at ``pending_hod`` assigned to them; the COO sees
    ``pending_coo``.  Admins and HR see both queues.
    """
    pending_hod = Offer.approval_status == OfferApprovalStatus.PENDING_HOD.value
    pending_coo = Offer.approval_status == OfferApprovalStatus.PENDING_COO.value

    if actor.role == "hod":
        query = Offer.query.filter(pending_hod, Offer.assigned_hod_id == actor.user_id)
    elif actor.role == "coo":
        query = Offer.query.filter(pending_coo)
    elif actor.role in ("admin", "hr"):
        query = Offer.query.filter(pending_hod | pending_coo)
    else:
        return []
    return query.order_by(desc(Offer.id)).all()


# -- Candidate response ----------------------------------------------------


def respond_to_offer(
    actor: Actor, offer_id: int, response: str, comment: str | None = None
) -> Offer:
    """
    Record the applicant's acceptance or rejection of an approved offer.

    Raises:
        NotFoundError:     Unknown offer.
        ForbiddenError:    Actor is not the applicant.
        ValidationError:   Response is not ``accepted`` or ``rejected``.
        InvalidStateError: Offer not approved yet, or already answered.
    """
    offer = db.session.get(Offer, offer_id)
    if offer is None:
        raise NotFoundError("offer", offer_id)
    application = offer.application
    if application.applicant_id != actor.user_id:
        raise ForbiddenError("Only the applicant may respond to this offer.")
    if response not in OFFER_RESPONSES or response == "pending":
        raise ValidationError("Response must be 'accepted' or 'rejected'.")
    if offer.approval_status != OfferApprovalStatus.APPROVED.value:
        raise InvalidStateError("This offer has not been approved yet.")
    if offer.response_status != "pending":
        raise InvalidStateError(f"This offer was already {offer.response_status}.")

    stmt = (
        update(Offer)
        .where(
            Offer.id == offer.id,
            Offer.approval_status == OfferApprovalStatus.APPROVED.value,
            Offer.response_status == "pending",
        )
        .values(
            response_status=response,
            response_comment=optional_text(comment, "comment"),
            responded_at=datetime.now(timezone.utc),
        )
        .execution_options(synchronize_session=False)
    )

    try:
        result = db.session.execute(stmt)
        if result.rowcount != 1:
            db.session.rollback()
            raise InvalidStateError("This offer was already answered.")
        application.status = f"offer-{response}"
        application.updated_at = datetime.now(timezone.utc)
        audit_service.log_change(
            user_id=actor.user_id,
            action_type="RESPOND",
            entity_type="offer",
            entity_id=offer.id,
            previous_value={"response_status": "pending"},
            new_value={"response_status": response},
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    db.session.refresh(offer)
    logger.info("Applicant %d %s offer %d", actor.user_id, response, offer.id)

    signals.publish(
        signals.offer_responded,
        _offer_event(offer, actor, decision=response, recipient_user_ids=(offer.sent_by_id,)),
    )
    return offer
