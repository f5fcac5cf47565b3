"""
Job service — turn approved requisitions into jobs and take applications.

``create_job_from_requisition`` is the only consumer of a requisition.
The job insert and the ``consumed_at IS NULL`` conditional update run in
one transaction, and ``job.requisition_id`` is unique, so two concurrent
attempts on the same requisition produce exactly one job.
"""

import logging
from datetime import date, datetime, timezone

from sqlalchemy import desc, update
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
from recruitflow.models.job import EMPLOYMENT_TYPES, Application, Job
from recruitflow.models.requisition import Requisition
from recruitflow.services import approval_service, audit_service, requisition_service
from recruitflow.services.actor import Actor
from recruitflow.services.validation import optional_bool, optional_text

logger = logging.getLogger(__name__)

JOB_MANAGER_ROLES = ("recruiter", "admin", "hr")


# =========================================================================
# Job creation (requisition consumption)
# =========================================================================


def _parse_deadline(value) -> date | None:
    if value in (None, ""):
        return None
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value))
    except ValueError as exc:
        raise ValidationError(f"Deadline must be a YYYY-MM-DD date; got {value!r}.") from exc


def create_job_from_requisition(actor: Actor, req_no: str, fields: dict | None = None) -> Job:
    """
    Create a job from a fully approved requisition.

    Title, department and location default to the requisition's values.

    Args:
        actor:  The acting user (recruiter, HR or admin).
        req_no: Requisition number, or a bare sequence number.
        fields: Optional job fields (``title``, ``description``,
                ``employment_type``, ``deadline``, ``is_published``...).

    Raises:
        ForbiddenError:       Role may not create jobs.
        NotFoundError:        Unknown requisition.
        AlreadyConsumedError: A job already exists for the requisition.
        InvalidStateError:    The requisition is not fully approved.
        ValidationError:      Invalid job fields.
    """
    fields = fields or {}
    if not actor.has_role(*JOB_MANAGER_ROLES):
        raise ForbiddenError(f"The '{actor.role}' role may not create jobs.")

    requisition = requisition_service.get_by_number(req_no)
    number = requisition.requisition_number
    if not approval_service.is_fully_approved(requisition):
        raise InvalidStateError(
            f"Requisition {requisition.requisition_number} is not fully approved "
            f"(overall status: {requisition.overall_status})."
        )

    employment_type = optional_text(fields.get("employment_type"), "employment_type")
    employment_type = employment_type or "full-time"
    if employment_type not in EMPLOYMENT_TYPES:
        raise ValidationError(f"Unknown employment type '{employment_type}'.")

    def text(name, default=None):
        return optional_text(fields.get(name), name) or default

    job = Job(
        title=text("title", requisition.position),
        department=text("department", requisition.department),
        location=text("location", requisition.location),
        description=text("description", requisition.description),
        employment_type=employment_type,
        experience_required=text("experience_required", requisition.experience),
        deadline=_parse_deadline(fields.get("deadline")),
        is_published=optional_bool(fields.get("is_published"), "is_published"),
        requisition_id=requisition.id,
        created_by_id=actor.user_id,
    )

    consume = (
        update(Requisition)
        .where(Requisition.id == requisition.id, Requisition.consumed_at.is_(None))
        .values(consumed_at=datetime.now(timezone.utc))
        .execution_options(synchronize_session=False)
    )

    try:
        result = db.session.execute(consume)
        if result.rowcount != 1:
            db.session.rollback()
            raise AlreadyConsumedError(number)
        db.session.add(job)
        db.session.flush()
        audit_service.log_change(
            user_id=actor.user_id,
            action_type="CONSUME",
            entity_type="requisition",
            entity_id=requisition.id,
            previous_value={"job_id": None},
            new_value={"job_id": job.id},
        )
        audit_service.log_change(
            user_id=actor.user_id,
            action_type="CREATE",
            entity_type="job",
            entity_id=job.id,
            new_value={"title": job.title, "requisition_id": requisition.id},
        )
        db.session.commit()
    except IntegrityError as exc:
        # Unique job.requisition_id: another request consumed it first.
        db.session.rollback()
        raise AlreadyConsumedError(number) from exc
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info(
        "Requisition %s consumed by job %d (user %d)",
        requisition.requisition_number,
        job.id,
        actor.user_id,
    )

    signals.publish(
        signals.job_created,
        signals.WorkflowEvent(
            entity_type="job",
            entity_id=job.id,
            entity_label=job.title,
            acting_role=actor.role,
            actor_id=actor.user_id,
            recipient_user_ids=(requisition.created_by_id,),
        ),
    )
    return job


# =========================================================================
# Jobs
# =========================================================================


def list_jobs(actor: Actor) -> list[Job]:
    """Return jobs newest first; applicants only see published ones."""
    query = Job.query
    if actor.role not in JOB_MANAGER_ROLES + ("coo", "hod", "sub_recruiter"):
        query = query.filter(Job.is_published == True)  # noqa: E712
    return query.order_by(desc(Job.id)).all()


def get_job(actor: Actor, job_id: int) -> Job:
    """Return one job, hiding unpublished jobs from applicants."""
    job = db.session.get(Job, job_id)
    if job is None or (actor.role == "user" and not job.is_published):
        raise NotFoundError("job", job_id)
    return job


# =========================================================================
# Applications
# =========================================================================


def apply_to_job(actor: Actor, job_id: int, cover_letter: str | None = None) -> Application:
    """
    Submit ``actor``'s application to a published job.

    Raises:
        ForbiddenError:    Only applicants (role ``user``) apply.
        NotFoundError:     Unknown or unpublished job.
        InvalidStateError: The actor already applied, or the deadline passed.
    """
    if actor.role != "user":
        raise ForbiddenError("Only applicants may apply to jobs.")
    job = get_job(actor, job_id)
    if job.deadline is not None and job.deadline < date.today():
        raise InvalidStateError(f"Applications for job {job.id} closed on {job.deadline}.")

    existing = Application.query.filter_by(job_id=job.id, applicant_id=actor.user_id).first()
    if existing is not None:
        raise InvalidStateError("You have already applied to this job.")

    application = Application(
        job_id=job.id,
        applicant_id=actor.user_id,
        cover_letter=optional_text(cover_letter, "cover_letter"),
    )
    try:
        db.session.add(application)
        db.session.flush()
        audit_service.log_change(
            user_id=actor.user_id,
            action_type="CREATE",
            entity_type="application",
            entity_id=application.id,
            new_value={"job_id": job.id},
        )
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise InvalidStateError("You have already applied to this job.") from exc

    logger.info("User %d applied to job %d", actor.user_id, job.id)
    return application


def list_applications(actor: Actor, job_id: int) -> list[Application]:
    """Return a job's applications for recruiters, HR and admins."""
    if not actor.has_role(*JOB_MANAGER_ROLES):
        raise ForbiddenError(f"The '{actor.role}' role may not view applications.")
    job = db.session.get(Job, job_id)
    if job is None:
        raise NotFoundError("job", job_id)
    return list(job.applications)


def get_application(application_id: int) -> Application:
    """Return an application or raise ``NotFoundError``."""
    application = db.session.get(Application, application_id)
    if application is None:
        raise NotFoundError("application", application_id)
    return application
