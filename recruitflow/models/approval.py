"""
Approval stage building blocks shared by requisitions and offers.

A workflow entity stores each approval stage inline as four prefixed
columns (``<prefix>_status``, ``<prefix>_reviewer_id``,
``<prefix>_reviewed_at``, ``<prefix>_comments``).  A freshly inserted
row therefore has every stage ``pending`` without any child rows.

``ApprovalStagesMixin`` maps public stage names (``departmentHead``,
``hr``, ``coo``...) onto those column prefixes and exposes the derived
overall status both as a Python property and as a SQL ``CASE``
expression, so list endpoints can filter on it without a stored column.
"""

import enum
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable

from sqlalchemy import and_, case, or_
from sqlalchemy.ext.hybrid import hybrid_property

from recruitflow.extensions import db


class ApprovalStatus(str, enum.Enum):
    """Closed set of values a single approval stage can hold."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def values(cls) -> tuple[str, ...]:
        return tuple(member.value for member in cls)


# Decisions a reviewer may submit; ``pending`` is never a decision.
DECISIONS = (ApprovalStatus.APPROVED.value, ApprovalStatus.REJECTED.value)


@dataclass(frozen=True)
class StageApproval:
    """Read-only snapshot of one approval stage."""

    name: str
    status: ApprovalStatus
    reviewer_id: int | None = None
    reviewed_at: datetime | None = None
    comments: str | None = None

    @property
    def is_pending(self) -> bool:
        return self.status is ApprovalStatus.PENDING


def overall_status_of(statuses: Iterable[ApprovalStatus]) -> ApprovalStatus:
    """
    Fold stage statuses into the entity's overall status.

    Any rejection wins regardless of order; approval requires every
    stage approved; everything else is pending.
    """
    statuses = [ApprovalStatus(s) for s in statuses]
    if any(s is ApprovalStatus.REJECTED for s in statuses):
        return ApprovalStatus.REJECTED
    if statuses and all(s is ApprovalStatus.APPROVED for s in statuses):
        return ApprovalStatus.APPROVED
    return ApprovalStatus.PENDING


def stage_status_constraint(table: str, prefix: str):
    """Return the CHECK constraints guarding one inline stage."""
    allowed = ", ".join(f"'{v}'" for v in ApprovalStatus.values())
    return (
        db.CheckConstraint(
            f"{prefix}_status IN ({allowed})",
            name=f"CK_{table}_{prefix}_status",
        ),
        db.CheckConstraint(
            f"{prefix}_status <> 'rejected' OR {prefix}_comments IS NOT NULL",
            name=f"CK_{table}_{prefix}_reject_comments",
        ),
    )


class ApprovalStagesMixin:
    """
    Mixin for models that carry inline approval stages.

    Subclasses set ``STAGES`` to an ordered mapping of public stage name
    to column prefix, and declare the matching columns.
    """

    STAGES: dict[str, str] = {}

    @classmethod
    def stage_column(cls, stage: str, field: str):
        """Return the mapped column for ``field`` of ``stage``."""
        return getattr(cls, f"{cls.STAGES[stage]}_{field}")

    def stage(self, name: str) -> StageApproval:
        """Return a snapshot of the named stage."""
        prefix = self.STAGES[name]
        return StageApproval(
            name=name,
            status=ApprovalStatus(getattr(self, f"{prefix}_status") or "pending"),
            reviewer_id=getattr(self, f"{prefix}_reviewer_id"),
            reviewed_at=getattr(self, f"{prefix}_reviewed_at"),
            comments=getattr(self, f"{prefix}_comments"),
        )

    def stages(self) -> list[StageApproval]:
        """Return snapshots of every stage in approval order."""
        return [self.stage(name) for name in self.STAGES]

    @hybrid_property
    def overall_status(self) -> str:
        return overall_status_of(s.status for s in self.stages()).value

    @overall_status.expression
    def overall_status(cls):  # pylint: disable=no-self-argument
        statuses = [getattr(cls, f"{prefix}_status") for prefix in cls.STAGES.values()]
        return case(
            (or_(*[s == "rejected" for s in statuses]), "rejected"),
            (and_(*[s == "approved" for s in statuses]), "approved"),
            else_="pending",
        )
