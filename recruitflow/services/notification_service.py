"""
Notification service — in-app notifications for workflow events.

Signal receivers here turn ``recruitflow.signals`` events into
``Notification`` rows, one per recipient.  They run after the change
that produced the event has committed and write in their own
transaction; ``signals.publish`` logs their failures, so a notification
problem never affects the workflow itself.

Clicking a notification resolves its link to a role-specific frontend
route through ``ROLE_REQUISITION_ROUTES``.
"""

import logging

from flask import current_app
from sqlalchemy import desc
from sqlalchemy.exc import SQLAlchemyError

from recruitflow import signals
from recruitflow.exceptions import ForbiddenError, NotFoundError
from recruitflow.extensions import db
from recruitflow.models.notification import Notification
from recruitflow.models.offer import Offer
from recruitflow.services import user_service
from recruitflow.services.actor import Actor

logger = logging.getLogger(__name__)

# Frontend page each role uses to review a requisition.
ROLE_REQUISITION_ROUTES: dict[str, str] = {
    "hr": "/superAdmin/requisitionForm",
    "admin": "/superAdmin/requisitionForm",
    "hod": "/hod/requisitionForm",
    "coo": "/coo/requisitionForm",
    "recruiter": "/recruiter/requisitionForm",
    "sub_recruiter": "/subRecruiter/requisitionForm",
}
DEFAULT_REQUISITION_ROUTE = ROLE_REQUISITION_ROUTES["recruiter"]

_LINK_PATTERNS = {
    "requisition": "/requisitions/{id}",
    "offer": "/offers/{id}",
    "job": "/jobs/{id}",
}

_ENTITY_TITLES = {
    "requisition": "Requisition",
    "offer": "Offer",
    "job": "Job",
}


# =========================================================================
# Delivery
# =========================================================================


def _recipients(event: signals.WorkflowEvent) -> list[int]:
    """Resolve the event's addressing to user ids, without duplicates."""
    user_ids = list(event.recipient_user_ids)
    if event.recipient_role:
        user_ids.extend(
            u.id for u in user_service.get_active_users_with_role(event.recipient_role)
        )
    # The actor never needs to hear about their own action.
    return [
        uid for uid in dict.fromkeys(user_ids) if uid is not None and uid != event.actor_id
    ]


def _deliver(event: signals.WorkflowEvent, title: str, message: str, extra_ids=()) -> int:
    user_ids = _recipients(event)
    user_ids.extend(uid for uid in extra_ids if uid not in user_ids)
    link = _LINK_PATTERNS[event.entity_type].format(id=event.entity_id)

    try:
        for user_id in user_ids:
            db.session.add(
                Notification(user_id=user_id, title=title, message=message, link=link)
            )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.debug(
        "Notified %d user(s) of %s %s", len(user_ids), event.entity_type, event.entity_id
    )
    return len(user_ids)


def on_workflow_decided(event: signals.WorkflowEvent) -> int:
    """Tell the next approver, or the requester once the outcome is final."""
    noun = f"{_ENTITY_TITLES[event.entity_type]} {event.entity_label}"
    extra_ids: tuple[int, ...] = ()

    if event.decision == "rejected":
        title = f"{noun} rejected"
        message = f"{noun} was rejected at the {event.stage} stage."
    elif event.is_final:
        title = f"{noun} approved"
        message = f"{noun} has been approved by all reviewers."
        if event.entity_type == "offer":
            offer = db.session.get(Offer, event.entity_id)
            if offer is not None:
                extra_ids = (offer.application.applicant_id,)
    else:
        title = f"{noun} awaiting your review"
        message = (
            f"The {event.stage} stage of {noun} was approved "
            f"({event.acting_role}); it now needs your decision."
        )
    return _deliver(event, title, message, extra_ids)


def on_requisition_created(event: signals.WorkflowEvent) -> int:
    return _deliver(
        event,
        f"New requisition {event.entity_label}",
        f"Requisition {event.entity_label} was raised and awaits department head approval.",
    )


def on_offer_issued(event: signals.WorkflowEvent) -> int:
    return _deliver(
        event,
        f"Offer for {event.entity_label} awaiting approval",
        f"An offer for {event.entity_label} was issued and needs your approval.",
    )


def on_offer_responded(event: signals.WorkflowEvent) -> int:
    return _deliver(
        event,
        f"Offer {event.decision}",
        f"The candidate {event.decision} the offer for {event.entity_label}.",
    )


def on_job_created(event: signals.WorkflowEvent) -> int:
    return _deliver(
        event,
        f"Job created: {event.entity_label}",
        f"Your requisition is now the job '{event.entity_label}'.",
    )


def connect_receivers() -> None:
    """Subscribe the receivers above; connecting twice is harmless."""
    signals.workflow_decided.connect(on_workflow_decided)
    signals.requisition_created.connect(on_requisition_created)
    signals.offer_issued.connect(on_offer_issued)
    signals.offer_responded.connect(on_offer_responded)
    signals.job_created.connect(on_job_created)


# =========================================================================
# Routing
# =========================================================================


def resolve_target(role: str, link: str | None) -> str | None:
    """
    Map a notification link to the frontend page for ``role``.

    Requisition links go to the role's requisition form with the id as a
    query parameter; other links are returned unchanged.
    """
    if not link:
        return None
    prefix = "/requisitions/"
    if link.startswith(prefix):
        requisition_id = link[len(prefix):]
        route = ROLE_REQUISITION_ROUTES.get(role, DEFAULT_REQUISITION_ROUTE)
        link = f"{route}?id={requisition_id}"
    base = current_app.config.get("FRONTEND_BASE_URL", "").rstrip("/")
    return f"{base}{link}"


# =========================================================================
# Inbox
# =========================================================================


def list_notifications(actor: Actor, unread_only: bool = False) -> list[Notification]:
    """Return the actor's notifications, newest first."""
    query = Notification.query.filter(Notification.user_id == actor.user_id)
    if unread_only:
        query = query.filter(Notification.is_read == False)  # noqa: E712
    return query.order_by(desc(Notification.created_at), desc(Notification.id)).all()


def _own_notification(actor: Actor, notification_id: int) -> Notification:
    notification = db.session.get(Notification, notification_id)
    if notification is None:
        raise NotFoundError("notification", notification_id)
    if notification.user_id != actor.user_id:
        raise ForbiddenError("This notification belongs to another user.")
    return notification


def mark_read(actor: Actor, notification_id: int) -> Notification:
    notification = _own_notification(actor, notification_id)
    if not notification.is_read:
        notification.is_read = True
        db.session.commit()
    return notification


def open_notification(actor: Actor, notification_id: int) -> dict:
    """Mark a notification read and return where clicking it should go."""
    notification = mark_read(actor, notification_id)
    return {
        "id": notification.id,
        "target": resolve_target(actor.role, notification.link),
    }


def delete_notification(actor: Actor, notification_id: int) -> None:
    notification = _own_notification(actor, notification_id)
    db.session.delete(notification)
    db.session.commit()
    logger.info("User %d deleted notification %d", actor.user_id, notification_id)
