"""
Approval service — the workflow engine behind requisitions and offers.

This module is the only place that changes an approval stage.  Both
workflow entities are described by a ``WorkflowDefinition``: an ordered
list of stages, the role allowed to decide each one, and whether stages
must be decided in order.

Requisition states::

    S0 all pending -> S1 HOD approved -> S2 HOD+HR approved -> S3 all approved
    any active stage -> Rejected

Offers follow ``pending_hod -> pending_coo -> approved`` with the same
rejection rule.  ``S3`` and ``Rejected`` are terminal; there is no
re-open transition.

A decision is a single conditional UPDATE guarded by
``<stage>_status = 'pending'`` (and, for sequential workflows, by the
previous stage being approved).  If another request got there first the
UPDATE matches no row and the caller gets ``InvalidStateError``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from recruitflow import signals
from recruitflow.exceptions import (
    AlreadyConsumedError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from recruitflow.extensions import db
from recruitflow.models.approval import (
    DECISIONS,
    ApprovalStagesMixin,
    ApprovalStatus,
    StageApproval,
    overall_status_of,
)
from recruitflow.models.offer import Offer, OfferApprovalStatus
from recruitflow.models.requisition import Requisition
from recruitflow.services import audit_service
from recruitflow.services.actor import Actor
from recruitflow.services.validation import optional_text

logger = logging.getLogger(__name__)


# =========================================================================
# Workflow definitions
# =========================================================================


@dataclass(frozen=True)
class StageDefinition:
    """One approval checkpoint and who may decide it."""

    name: str
    role: str
    # Entity attribute naming the one user allowed to act, if set.
    assignee_attr: str | None = None


@dataclass(frozen=True)
class WorkflowDefinition:
    """Ordered stages of a workflow entity."""

    entity_type: str
    model: type
    stages: tuple[StageDefinition, ...]
    label_attr: str
    sequential: bool = True
    # Stored "which stage is awaited" column, kept in step with decisions.
    summary_attr: str | None = None
    # Called with (entity, decision) inside the decision's transaction.
    on_decision: Callable | None = None

    def stage(self, name: str) -> StageDefinition | None:
        return next((s for s in self.stages if s.name == name), None)

    def previous_stage(self, name: str) -> StageDefinition | None:
        names = [s.name for s in self.stages]
        index = names.index(name)
        return self.stages[index - 1] if index > 0 else None

    def next_stage(self, name: str) -> StageDefinition | None:
        names = [s.name for s in self.stages]
        index = names.index(name)
        return self.stages[index + 1] if index + 1 < len(self.stages) else None


REQUISITION_WORKFLOW = WorkflowDefinition(
    entity_type="requisition",
    model=Requisition,
    stages=(
        StageDefinition("departmentHead", "hod", assignee_attr="assigned_hod_id"),
        StageDefinition("hr", "hr"),
        StageDefinition("coo", "coo"),
    ),
    label_attr="requisition_number",
)


def _offer_decided(offer: Offer, decision: ApprovalStatus) -> None:
    """An offer turned down by an approver takes its application with it."""
    if decision is ApprovalStatus.REJECTED:
        application = offer.application
        application.status = "offer-declined"
        application.updated_at = datetime.now(timezone.utc)


OFFER_WORKFLOW = WorkflowDefinition(
    entity_type="offer",
    model=Offer,
    stages=(
        StageDefinition("hod", "hod", assignee_attr="assigned_hod_id"),
        StageDefinition("coo", "coo"),
    ),
    label_attr="designation",
    summary_attr="approval_status",
    on_decision=_offer_decided,
)


# =========================================================================
# Derived status
# =========================================================================


def compute_overall_status(
    entity: ApprovalStagesMixin | Mapping[str, str | ApprovalStatus],
) -> ApprovalStatus:
    """
    Return the aggregate status of an entity's stages.

    ``rejected`` if any stage is rejected, ``approved`` only if every
    stage is approved, otherwise ``pending``.  The order in which stages
    were decided does not matter here.

    Args:
        entity: A workflow model instance, or a mapping of stage name to
                status (useful for callers holding plain data).
    """
    if isinstance(entity, Mapping):
        statuses = entity.values()
    else:
        statuses = [stage.status for stage in entity.stages()]
    return overall_status_of(statuses)


def is_fully_approved(entity: ApprovalStagesMixin) -> bool:
    """
    Return True if every stage of ``entity`` is approved.

    This is the gate for creating a job from a requisition.

    Raises:
        AlreadyConsumedError: If the requisition has already been used to
                              create a job.  Callers need to tell this
                              apart from "not approved yet".
    """
    if getattr(entity, "is_consumed", False):
        job = getattr(entity, "job", None)
        raise AlreadyConsumedError(
            getattr(entity, "requisition_number", str(entity.id)),
            job_id=job.id if job is not None else None,
        )
    return compute_overall_status(entity) is ApprovalStatus.APPROVED


def active_stage(definition: WorkflowDefinition, entity) -> str | None:
    """
    Return the name of the stage currently awaiting a decision.

    None means the entity is terminal (rejected or fully approved).
    """
    if compute_overall_status(entity) is not ApprovalStatus.PENDING:
        return None
    for stage_def in definition.stages:
        if entity.stage(stage_def.name).is_pending:
            return stage_def.name
    return None


# =========================================================================
# Decisions
# =========================================================================


@dataclass(frozen=True)
class _Snapshot:
    """What the entity looked like when the request read it."""

    entity: object
    stages: dict[str, StageApproval]


def _load_snapshot(definition: WorkflowDefinition, entity_id: int) -> _Snapshot:
    entity = db.session.get(definition.model, entity_id)
    if entity is None:
        raise NotFoundError(definition.entity_type, entity_id)
    return _Snapshot(
        entity=entity,
        stages={s.name: entity.stage(s.name) for s in definition.stages},
    )


def _parse_decision(decision) -> ApprovalStatus:
    value = getattr(decision, "value", decision)
    if value not in DECISIONS:
        raise ValidationError(
            f"Decision must be one of {', '.join(DECISIONS)}; got {value!r}."
        )
    return ApprovalStatus(value)


def _check_preconditions(
    definition: WorkflowDefinition,
    snapshot: _Snapshot,
    stage_def: StageDefinition,
    actor: Actor,
    decision: ApprovalStatus,
    comments: str,
) -> None:
    """Run the ordered guard checks; raise on the first failure."""
    entity = snapshot.entity

    # 1. Role (and, for HOD stages, the assigned HOD).
    if actor.role != stage_def.role:
        logger.warning(
            "Denied: user %d with role '%s' tried to decide %s %d stage '%s' "
            "(requires '%s')",
            actor.user_id,
            actor.role,
            definition.entity_type,
            entity.id,
            stage_def.name,
            stage_def.role,
        )
        raise ForbiddenError(
            f"Only the '{stage_def.role}' role may decide the "
            f"'{stage_def.name}' stage."
        )
    if stage_def.assignee_attr:
        assignee_id = getattr(entity, stage_def.assignee_attr)
        if assignee_id is not None and assignee_id != actor.user_id:
            logger.warning(
                "Denied: user %d is not the assigned approver (%d) of %s %d",
                actor.user_id,
                assignee_id,
                definition.entity_type,
                entity.id,
            )
            raise ForbiddenError(
                f"This {definition.entity_type} is assigned to another "
                "head of department."
            )

    # 2. The stage itself must still be open.
    current = snapshot.stages[stage_def.name]
    if not current.is_pending:
        raise InvalidStateError(
            f"Stage '{stage_def.name}' has already been {current.status.value}."
        )

    # 3. Sequential workflows: the previous stage must be approved.
    previous = definition.previous_stage(stage_def.name)
    if definition.sequential and previous is not None:
        previous_status = snapshot.stages[previous.name].status
        if previous_status is not ApprovalStatus.APPROVED:
            raise InvalidStateError(
                f"Stage '{stage_def.name}' cannot be decided before "
                f"'{previous.name}' is approved (it is {previous_status.value})."
            )

    # 4. Rejections must say why.
    if decision is ApprovalStatus.REJECTED and not comments:
        raise ValidationError("Comments are required when rejecting.")


def _summary_value(
    definition: WorkflowDefinition, stage_def: StageDefinition, decision: ApprovalStatus
) -> str:
    """Value of the stored summary column after this decision."""
    if decision is ApprovalStatus.REJECTED:
        return OfferApprovalStatus.REJECTED.value
    following = definition.next_stage(stage_def.name)
    if following is None:
        return OfferApprovalStatus.APPROVED.value
    return f"pending_{following.name}"


def submit_stage_decision(
    definition: WorkflowDefinition,
    entity_id: int,
    stage: str,
    actor: Actor,
    decision,
    comments: str | None = None,
):
    """
    Approve or reject one stage of a requisition or offer.

    Args:
        definition: ``REQUISITION_WORKFLOW`` or ``OFFER_WORKFLOW``.
        entity_id:  Primary key of the entity.
        stage:      Stage name from the definition.
        actor:      The acting user, taken from the session.
        decision:   ``approved`` or ``rejected``.
        comments:   Free text; required (non-blank) for rejections.

    Returns:
        The refreshed entity.

    Raises:
        NotFoundError:     Unknown entity or stage.
        ForbiddenError:    Actor's role may not decide this stage.
        InvalidStateError: Stage already decided, previous stage not yet
                           approved, or a concurrent request won.
        ValidationError:   Bad decision value or missing rejection comment.
    """
    snapshot = _load_snapshot(definition, entity_id)
    stage_def = definition.stage(stage)
    if stage_def is None:
        raise NotFoundError(f"{definition.entity_type} stage", stage)

    decision = _parse_decision(decision)
    comments = optional_text(comments, "comments") or ""
    _check_preconditions(definition, snapshot, stage_def, actor, decision, comments)

    model = definition.model
    prefix = model.STAGES[stage_def.name]
    reviewed_at = datetime.now(timezone.utc)

    values = {
        f"{prefix}_status": decision.value,
        f"{prefix}_reviewer_id": actor.user_id,
        f"{prefix}_reviewed_at": reviewed_at,
        f"{prefix}_comments": comments or None,
    }
    if definition.summary_attr:
        values[definition.summary_attr] = _summary_value(definition, stage_def, decision)

    conditions = [
        model.id == entity_id,
        model.stage_column(stage_def.name, "status") == ApprovalStatus.PENDING.value,
    ]
    previous = definition.previous_stage(stage_def.name)
    if definition.sequential and previous is not None:
        conditions.append(
            model.stage_column(previous.name, "status") == ApprovalStatus.APPROVED.value
        )

    stmt = (
        update(model)
        .where(*conditions)
        .values(**values)
        .execution_options(synchronize_session=False)
    )

    try:
        result = db.session.execute(stmt)
        if result.rowcount != 1:
            db.session.rollback()
            logger.warning(
                "Lost update: %s %d stage '%s' changed before user %d's "
                "decision was written",
                definition.entity_type,
                entity_id,
                stage_def.name,
                actor.user_id,
            )
            raise InvalidStateError(
                f"Stage '{stage_def.name}' was decided by another request."
            )

        if definition.on_decision is not None:
            definition.on_decision(snapshot.entity, decision)
        audit_service.log_change(
            user_id=actor.user_id,
            action_type="APPROVE" if decision is ApprovalStatus.APPROVED else "REJECT",
            entity_type=definition.entity_type,
            entity_id=entity_id,
            previous_value={"stage": stage_def.name, "status": "pending"},
            new_value={
                "stage": stage_def.name,
                "status": decision.value,
                "comments": comments or None,
            },
        )
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception(
            "Database error deciding %s %d stage '%s'",
            definition.entity_type,
            entity_id,
            stage_def.name,
        )
        raise

    entity = snapshot.entity
    db.session.refresh(entity)

    logger.info(
        "%s %s stage '%s' %s by user %d",
        definition.entity_type.capitalize(),
        getattr(entity, definition.label_attr),
        stage_def.name,
        decision.value,
        actor.user_id,
    )

    signals.publish(
        signals.workflow_decided,
        _decision_event(definition, entity, stage_def, actor, decision),
    )
    return entity


def _decision_event(
    definition: WorkflowDefinition,
    entity,
    stage_def: StageDefinition,
    actor: Actor,
    decision: ApprovalStatus,
) -> signals.WorkflowEvent:
    """
    Address the decision to whoever acts next.

    Approved with a stage remaining: that stage's approver (the assigned
    user when there is one, otherwise everyone with the role).  Rejected,
    or the last approval: the requester.
    """
    following = definition.next_stage(stage_def.name)
    recipient_ids: tuple[int, ...] = ()
    recipient_role = None
    is_final = decision is ApprovalStatus.REJECTED or following is None

    if is_final:
        recipient_ids = (entity.created_by_id,)
    else:
        assignee_id = (
            getattr(entity, following.assignee_attr) if following.assignee_attr else None
        )
        if assignee_id is not None:
            recipient_ids = (assignee_id,)
        else:
            recipient_role = following.role

    return signals.WorkflowEvent(
        entity_type=definition.entity_type,
        entity_id=entity.id,
        entity_label=str(getattr(entity, definition.label_attr)),
        acting_role=actor.role,
        actor_id=actor.user_id,
        stage=stage_def.name,
        decision=decision.value,
        recipient_user_ids=recipient_ids,
        recipient_role=recipient_role,
        is_final=is_final,
    )
