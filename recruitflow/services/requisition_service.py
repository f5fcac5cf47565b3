"""
Requisition service — raise, list, inspect and delete job requisitions.

Stage decisions go through ``approval_service``; this module covers the
rest of a requisition's life:

    - ``create_requisition()``: number it, route it to the department's
      head, and announce it.
    - ``list_requisitions()`` / ``get_requisition()``: role-scoped views.
    - ``check_requisition_approval()``: is it ready to become a job?
    - ``delete_requisition()``: owner or admin; the job, applications
      and offers created from it go with it.
"""

import logging
import re

from flask import current_app
from sqlalchemy import desc
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from recruitflow import signals
from recruitflow.exceptions import (
    AlreadyConsumedError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from recruitflow.extensions import db
from recruitflow.models.approval import ApprovalStatus
from recruitflow.models.requisition import (
    EMPLOYMENT_NATURES,
    REPLACEMENT_REASONS,
    REQUISITION_TYPES,
    Requisition,
)
from recruitflow.services import approval_service, audit_service, user_service
from recruitflow.services.actor import Actor
from recruitflow.services.validation import optional_text, parse_amount

logger = logging.getLogger(__name__)

# Roles that may raise a requisition for any department.
CREATOR_ROLES = ("recruiter", "admin", "hr")
# Roles that see every requisition.
UNRESTRICTED_VIEW_ROLES = ("recruiter", "coo", "admin")

_REQUIRED_FIELDS = ("position", "department", "location", "requisition_type")
_TEXT_FIELDS = _REQUIRED_FIELDS + (
    "nature_of_employment",
    "grade",
    "description",
    "experience",
    "replacement_name",
    "replacement_reason",
)


# =========================================================================
# Numbering
# =========================================================================


def _number_format() -> tuple[str, int]:
    config = current_app.config
    return config["REQUISITION_NUMBER_PREFIX"], config["REQUISITION_NUMBER_WIDTH"]


def format_requisition_number(sequence: int) -> str:
    """Return ``<PREFIX>-Req-<sequence>`` zero-padded to the configured width."""
    prefix, width = _number_format()
    return f"{prefix}-Req-{sequence:0{width}d}"


def next_requisition_number() -> str:
    """Return the number following the most recently issued one."""
    last = Requisition.query.order_by(desc(Requisition.id)).first()
    sequence = 0
    if last is not None:
        match = re.search(r"(\d+)$", last.requisition_number)
        sequence = int(match.group(1)) if match else last.id
    return format_requisition_number(sequence + 1)


def resolve_requisition_number(req_no: str) -> str:
    """
    Normalise a requisition number typed by a user.

    A bare number (``"7"``) becomes ``ORG-Req-00007``; anything else is
    returned stripped.
    """
    req_no = (req_no or "").strip()
    if req_no.isdigit():
        return format_requisition_number(int(req_no))
    return req_no


def get_by_number(req_no: str) -> Requisition:
    """Return the requisition with this number or raise ``NotFoundError``."""
    number = resolve_requisition_number(req_no)
    requisition = Requisition.query.filter_by(requisition_number=number).first()
    if requisition is None:
        raise NotFoundError("requisition", number)
    return requisition


# =========================================================================
# Creation
# =========================================================================


def _validate_fields(data: dict) -> dict:
    """Return the requisition's text fields, stripped; raise on bad input."""
    fields = {name: optional_text(data.get(name), name) for name in _TEXT_FIELDS}
    missing = [f for f in _REQUIRED_FIELDS if not fields[f]]
    if missing:
        raise ValidationError(f"Missing required fields: {', '.join(missing)}.")

    if fields["requisition_type"] not in REQUISITION_TYPES:
        raise ValidationError(
            f"Requisition type must be one of {', '.join(REQUISITION_TYPES)}."
        )
    nature = fields["nature_of_employment"]
    if nature and nature not in EMPLOYMENT_NATURES:
        raise ValidationError(f"Unknown nature of employment '{nature}'.")

    if fields["requisition_type"] == "Replacement":
        reason = fields["replacement_reason"]
        if not reason:
            raise ValidationError("A replacement requisition needs a replacement reason.")
        if reason not in REPLACEMENT_REASONS:
            raise ValidationError(f"Unknown replacement reason '{reason}'.")
    return fields


def _find_department_head(department: str):
    heads = user_service.get_active_users_with_role("hod", department)
    if not heads:
        raise ValidationError(f"No HOD assigned for the {department} department.")
    return heads[0]


def create_requisition(actor: Actor, data: dict) -> Requisition:
    """
    Raise a new requisition with every approval stage pending.

    Recruiters, HR and admins may raise a requisition for any
    department; sub-recruiters only for their own.  The requisition is
    assigned to the active head of its department, who is the only
    user allowed to decide its first stage.

    Raises:
        ForbiddenError:  Role may not raise requisitions (for this
                         department).
        ValidationError: Missing or invalid fields, or no HOD exists for
                         the department.
    """
    if actor.role == "sub_recruiter":
        if data.get("department") and data.get("department") != actor.department:
            raise ForbiddenError(
                "Sub-recruiters may only raise requisitions for their own department."
            )
        data = {**data, "department": actor.department}
    elif not actor.has_role(*CREATOR_ROLES):
        raise ForbiddenError(f"The '{actor.role}' role may not raise requisitions.")

    fields = _validate_fields(data)
    hod = _find_department_head(fields["department"])

    requisition = Requisition(
        requisition_number=next_requisition_number(),
        salary=parse_amount(data.get("salary"), "salary"),
        created_by_id=actor.user_id,
        assigned_hod_id=hod.id,
        **fields,
    )

    try:
        db.session.add(requisition)
        db.session.flush()
        audit_service.log_change(
            user_id=actor.user_id,
            action_type="CREATE",
            entity_type="requisition",
            entity_id=requisition.id,
            new_value={
                "requisition_number": requisition.requisition_number,
                "position": requisition.position,
                "department": requisition.department,
                "assigned_hod_id": hod.id,
            },
        )
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        logger.warning("Requisition number collision creating %s", fields["position"])
        raise InvalidStateError(
            "Another requisition was numbered at the same time; please retry."
        ) from exc
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info(
        "Created requisition %s (%s, %s) for HOD %d",
        requisition.requisition_number,
        requisition.position,
        requisition.department,
        hod.id,
    )

    signals.publish(
        signals.requisition_created,
        signals.WorkflowEvent(
            entity_type="requisition",
            entity_id=requisition.id,
            entity_label=requisition.requisition_number,
            acting_role=actor.role,
            actor_id=actor.user_id,
            recipient_user_ids=(hod.id,),
            # Sub-recruiters' requisitions are also announced to recruiters.
            recipient_role="recruiter" if actor.role == "sub_recruiter" else None,
        ),
    )
    return requisition


# =========================================================================
# Queries
# =========================================================================


def _scoped_query(actor: Actor):
    """Return the requisitions ``actor`` may see, or None for none at all."""
    query = Requisition.query
    if actor.has_role(*UNRESTRICTED_VIEW_ROLES):
        return query
    if actor.role == "sub_recruiter":
        return query.filter(Requisition.created_by_id == actor.user_id)
    if actor.role == "hod":
        return query.filter(Requisition.assigned_hod_id == actor.user_id)
    if actor.role == "hr":
        return query.filter(Requisition.hod_status == ApprovalStatus.APPROVED.value)
    return None


def list_requisitions(actor: Actor, status: str | None = None) -> list[Requisition]:
    """
    Return the requisitions visible to ``actor``, newest first.

    Args:
        actor:  The acting user.
        status: Optional overall status filter (pending/approved/rejected).

    Raises:
        ValidationError: If ``status`` is not a known overall status.
    """
    if status and status not in ApprovalStatus.values():
        raise ValidationError(
            f"Status filter must be one of {', '.join(ApprovalStatus.values())}."
        )

    query = _scoped_query(actor)
    if query is None:
        return []
    if status:
        query = query.filter(Requisition.overall_status == status)
    return query.order_by(desc(Requisition.id)).all()


def _can_view(actor: Actor, requisition: Requisition) -> bool:
    if actor.has_role(*UNRESTRICTED_VIEW_ROLES):
        return True
    if requisition.created_by_id == actor.user_id:
        return True
    if actor.role == "hod":
        return requisition.assigned_hod_id == actor.user_id
    if actor.role == "hr":
        return requisition.hod_status == ApprovalStatus.APPROVED.value
    return False


def get_requisition(actor: Actor, requisition_id: int) -> Requisition:
    """
    Return one requisition if ``actor`` may see it.

    Raises:
        NotFoundError:  Unknown id.
        ForbiddenError: Outside the actor's view.
    """
    requisition = db.session.get(Requisition, requisition_id)
    if requisition is None:
        raise NotFoundError("requisition", requisition_id)
    if not _can_view(actor, requisition):
        raise ForbiddenError("You do not have access to this requisition.")
    return requisition


def check_requisition_approval(req_no: str) -> dict:
    """
    Report whether a requisition is ready to have a job created from it.

    Returns:
        Dict with ``requisition_number``, ``overall_status``,
        ``is_fully_approved``, ``is_consumed`` and ``job_id``.
    """
    requisition = get_by_number(req_no)
    result = {
        "requisition_number": requisition.requisition_number,
        "overall_status": requisition.overall_status,
        "is_fully_approved": False,
        "is_consumed": False,
        "job_id": None,
    }
    try:
        result["is_fully_approved"] = approval_service.is_fully_approved(requisition)
    except AlreadyConsumedError as exc:
        result["is_fully_approved"] = True
        result["is_consumed"] = True
        result["job_id"] = exc.job_id
    return result


# =========================================================================
# Deletion
# =========================================================================


def delete_requisition(actor: Actor, requisition_id: int) -> None:
    """
    Delete a requisition together with its job, applications and offers.

    Raises:
        NotFoundError:  Unknown id.
        ForbiddenError: Actor is neither the creator nor an admin.
    """
    requisition = db.session.get(Requisition, requisition_id)
    if requisition is None:
        raise NotFoundError("requisition", requisition_id)
    if actor.role != "admin" and requisition.created_by_id != actor.user_id:
        raise ForbiddenError("Only the requester or an admin may delete a requisition.")

    number = requisition.requisition_number
    try:
        audit_service.log_change(
            user_id=actor.user_id,
            action_type="DELETE",
            entity_type="requisition",
            entity_id=requisition.id,
            previous_value={
                "requisition_number": number,
                "overall_status": requisition.overall_status,
                "job_id": requisition.job.id if requisition.job else None,
            },
        )
        db.session.delete(requisition)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info("Deleted requisition %s by user %d", number, actor.user_id)
