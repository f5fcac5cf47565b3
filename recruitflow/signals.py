"""
Workflow signals.

Services publish typed events here after their database transaction has
committed; receivers (currently only ``notification_service``) subscribe
with ``signal.connect``.  This replaces ad-hoc "notify whoever" calls
scattered through request handlers.

Delivery is best-effort: ``publish`` calls each receiver in turn, logs
any exception it raises and carries on, so a failing receiver can never
undo or block the change that produced the event.
"""

import logging
from dataclasses import dataclass

from blinker import Namespace

logger = logging.getLogger(__name__)

_signals = Namespace()

# A stage of a requisition or offer was approved or rejected.
workflow_decided = _signals.signal("workflow-decided")

# A requisition was raised and now waits for its head of department.
requisition_created = _signals.signal("requisition-created")

# An offer was issued on an application and waits for HOD approval.
offer_issued = _signals.signal("offer-issued")

# A candidate accepted or rejected an approved offer.
offer_responded = _signals.signal("offer-responded")

# A job was created from a fully approved requisition.
job_created = _signals.signal("job-created")


@dataclass(frozen=True)
class WorkflowEvent:
    """
    Something happened to a workflow entity that someone should hear about.

    ``recipient_user_ids`` and ``recipient_role`` address the event; a
    receiver resolves ``recipient_role`` to every active user with that
    role.  ``stage`` and ``decision`` are None for events that are not
    stage decisions.
    """

    entity_type: str
    entity_id: int
    entity_label: str
    acting_role: str
    actor_id: int
    stage: str | None = None
    decision: str | None = None
    recipient_user_ids: tuple[int, ...] = ()
    recipient_role: str | None = None
    is_final: bool = False


def publish(signal, event: WorkflowEvent) -> int:
    """
    Deliver ``event`` to every receiver of ``signal``.

    Returns:
        The number of receivers that failed.
    """
    failures = 0
    for receiver in signal.receivers_for(event):
        try:
            receiver(event)
        except Exception:  # pylint: disable=broad-exception-caught
            failures += 1
            logger.exception(
                "Receiver %r failed for %s on %s %s",
                receiver,
                signal.name,
                event.entity_type,
                event.entity_id,
            )
    return failures
