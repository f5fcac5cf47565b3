"""
Offer model — the two-stage (HOD then COO) approval variant.
"""

import enum

from recruitflow.extensions import db
from recruitflow.models.approval import ApprovalStagesMixin, stage_status_constraint


class OfferApprovalStatus(str, enum.Enum):
    """Which approval an offer is waiting on, or its final outcome."""

    PENDING_HOD = "pending_hod"
    PENDING_COO = "pending_coo"
    APPROVED = "approved"
    REJECTED = "rejected"


OFFER_RESPONSES = ("pending", "accepted", "rejected")


class Offer(ApprovalStagesMixin, db.Model):
    """
    Offer of employment made on an application.

    ``approval_status`` is stored for convenient filtering and is
    written in the same conditional update as the stage it follows.
    ``response_status`` is the candidate's answer, only possible once
    the offer is approved.
    """

    __tablename__ = "offer"
    __table_args__ = (
        db.CheckConstraint(
            "approval_status IN ('pending_hod', 'pending_coo', 'approved', 'rejected')",
            name="CK_offer_approval_status",
        ),
        db.CheckConstraint(
            "response_status IN ('pending', 'accepted', 'rejected')",
            name="CK_offer_response_status",
        ),
        *stage_status_constraint("offer", "hod"),
        *stage_status_constraint("offer", "coo"),
    )

    STAGES = {"hod": "hod", "coo": "coo"}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    application_id = db.Column(
        db.Integer, db.ForeignKey("application.id"), nullable=False, index=True
    )
    designation = db.Column(db.String(200), nullable=False)
    department = db.Column(db.String(100), nullable=False)
    location = db.Column(db.String(100), nullable=False)
    grade = db.Column(db.String(20), nullable=True)
    offered_salary = db.Column(db.Numeric(12, 2), nullable=False)
    approval_status = db.Column(
        db.String(20),
        nullable=False,
        default=OfferApprovalStatus.PENDING_HOD.value,
        index=True,
    )
    assigned_hod_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)

    # -- hod stage ---------------------------------------------------------
    hod_status = db.Column(db.String(20), nullable=False, default="pending")
    hod_reviewer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    hod_reviewed_at = db.Column(db.DateTime, nullable=True)
    hod_comments = db.Column(db.Text, nullable=True)

    # -- coo stage ---------------------------------------------------------
    coo_status = db.Column(db.String(20), nullable=False, default="pending")
    coo_reviewer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    coo_reviewed_at = db.Column(db.DateTime, nullable=True)
    coo_comments = db.Column(db.Text, nullable=True)

    # -- candidate response ------------------------------------------------
    response_status = db.Column(db.String(20), nullable=False, default="pending")
    response_comment = db.Column(db.Text, nullable=True)
    responded_at = db.Column(db.DateTime, nullable=True)

    sent_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    sent_at = db.Column(db.DateTime, nullable=False, server_default=db.func.now())

    # -- Relationships -----------------------------------------------------
    application = db.relationship("Application", back_populates="offers")
    sent_by = db.relationship("User", foreign_keys=[sent_by_id])
    assigned_hod = db.relationship("User", foreign_keys=[assigned_hod_id])

    @property
    def created_by_id(self) -> int:
        """The requester notified when the offer reaches a final state."""
        return self.sent_by_id

    def __repr__(self) -> str:
        return f"<Offer {self.id} application={self.application_id} {self.approval_status}>"
