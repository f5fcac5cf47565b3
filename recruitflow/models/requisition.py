"""
Job requisition model.

A requisition is raised by a recruiter (or a sub-recruiter for their
own department) and must be approved by the department's head, then
HR, then the COO before a job may be created from it.
"""

from recruitflow.extensions import db
from recruitflow.models.approval import ApprovalStagesMixin, stage_status_constraint

REQUISITION_TYPES = ("New", "Replacement")
EMPLOYMENT_NATURES = (
    "Permanent",
    "Contract",
    "Management Trainee",
    "Temporary",
    "Trainee",
    "Daily Wages",
)
REPLACEMENT_REASONS = (
    "Resigned",
    "Terminated",
    "Transfer",
    "Retirement",
    "ReDesignation",
    "Promoted",
)


class Requisition(ApprovalStagesMixin, db.Model):
    """
    Request to open a position, gated by a three-stage approval chain.

    ``requisition_number`` is the human-readable identifier
    (``ORG-Req-00001``) and never changes after creation.  Stage columns
    are inline; see ``recruitflow.models.approval``.

    ``consumed_at`` is set exactly once, in the same transaction that
    inserts the Job created from this requisition.
    """

    __tablename__ = "requisition"
    __table_args__ = (
        db.CheckConstraint(
            "requisition_type IN ('New', 'Replacement')",
            name="CK_requisition_type",
        ),
        *stage_status_constraint("requisition", "hod"),
        *stage_status_constraint("requisition", "hr"),
        *stage_status_constraint("requisition", "coo"),
    )

    # Public stage name -> column prefix, in approval order.
    STAGES = {"departmentHead": "hod", "hr": "hr", "coo": "coo"}

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    requisition_number = db.Column(db.String(30), unique=True, nullable=False)
    position = db.Column(db.String(200), nullable=False)
    department = db.Column(db.String(100), nullable=False, index=True)
    location = db.Column(db.String(100), nullable=False)
    requisition_type = db.Column(db.String(20), nullable=False)
    nature_of_employment = db.Column(db.String(30), nullable=True)
    grade = db.Column(db.String(20), nullable=True)
    salary = db.Column(db.Numeric(12, 2), nullable=True)
    description = db.Column(db.Text, nullable=True)
    experience = db.Column(db.String(200), nullable=True)
    replacement_name = db.Column(db.String(200), nullable=True)
    replacement_reason = db.Column(db.String(30), nullable=True)

    created_by_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    assigned_hod_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=True, index=True
    )

    # -- departmentHead stage ----------------------------------------------
    hod_status = db.Column(db.String(20), nullable=False, default="pending")
    hod_reviewer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    hod_reviewed_at = db.Column(db.DateTime, nullable=True)
    hod_comments = db.Column(db.Text, nullable=True)

    # -- hr stage ----------------------------------------------------------
    hr_status = db.Column(db.String(20), nullable=False, default="pending")
    hr_reviewer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    hr_reviewed_at = db.Column(db.DateTime, nullable=True)
    hr_comments = db.Column(db.Text, nullable=True)

    # -- coo stage ---------------------------------------------------------
    coo_status = db.Column(db.String(20), nullable=False, default="pending")
    coo_reviewer_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    coo_reviewed_at = db.Column(db.DateTime, nullable=True)
    coo_comments = db.Column(db.Text, nullable=True)

    consumed_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # -- Relationships -----------------------------------------------------
    created_by = db.relationship("User", foreign_keys=[created_by_id])
    assigned_hod = db.relationship("User", foreign_keys=[assigned_hod_id])
    job = db.relationship(
        "Job",
        back_populates="requisition",
        uselist=False,
        cascade="all, delete-orphan",
    )

    @property
    def is_consumed(self) -> bool:
        """True once a job has been created from this requisition."""
        return self.consumed_at is not None

    def __repr__(self) -> str:
        return f"<Requisition {self.requisition_number} {self.position}>"
