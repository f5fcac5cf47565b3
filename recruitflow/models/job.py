"""
Job postings and the applications submitted against them.
"""

from recruitflow.extensions import db

EMPLOYMENT_TYPES = ("full-time", "part-time", "contract", "internship")

# Pipeline codes an application moves through.  Only the offer-related
# codes are written by this application; the rest are set by recruiters.
APPLICATION_STATUSES = (
    "applied",
    "shortlisted",
    "first-interview",
    "second-interview",
    "offer",
    "offer-accepted",
    "offer-rejected",
    # An approver turned the offer down before it reached the applicant.
    "offer-declined",
    "hired",
    "rejected",
)


class Job(db.Model):
    """
    A job posting created from exactly one fully approved requisition.

    The unique constraint on ``requisition_id`` backs up the
    one-time-consumption rule enforced in ``job_service``.
    """

    __tablename__ = "job"
    __table_args__ = (
        db.UniqueConstraint("requisition_id", name="UQ_job_requisition"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    title = db.Column(db.String(200), nullable=False)
    department = db.Column(db.String(100), nullable=False)
    location = db.Column(db.String(100), nullable=False)
    description = db.Column(db.Text, nullable=True)
    employment_type = db.Column(db.String(20), nullable=False, default="full-time")
    experience_required = db.Column(db.String(200), nullable=True)
    deadline = db.Column(db.Date, nullable=True)
    is_published = db.Column(db.Boolean, nullable=False, default=False)
    requisition_id = db.Column(
        db.Integer, db.ForeignKey("requisition.id"), nullable=False
    )
    created_by_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # -- Relationships -----------------------------------------------------
    requisition = db.relationship("Requisition", back_populates="job")
    created_by = db.relationship("User", foreign_keys=[created_by_id])
    applications = db.relationship(
        "Application",
        back_populates="job",
        cascade="all, delete-orphan",
        order_by="Application.id",
    )

    def __repr__(self) -> str:
        return f"<Job {self.id} {self.title}>"


class Application(db.Model):
    """A candidate's application to a job; owns that candidate's offers."""

    __tablename__ = "application"
    __table_args__ = (
        db.UniqueConstraint("job_id", "applicant_id", name="UQ_application_job_applicant"),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    job_id = db.Column(db.Integer, db.ForeignKey("job.id"), nullable=False, index=True)
    applicant_id = db.Column(
        db.Integer, db.ForeignKey("users.id"), nullable=False, index=True
    )
    status = db.Column(db.String(30), nullable=False, default="applied")
    cover_letter = db.Column(db.Text, nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # -- Relationships -----------------------------------------------------
    job = db.relationship("Job", back_populates="applications")
    applicant = db.relationship("User", foreign_keys=[applicant_id])
    offers = db.relationship(
        "Offer",
        back_populates="application",
        cascade="all, delete-orphan",
        order_by="Offer.id",
    )

    @property
    def current_offer(self):
        """The most recently issued offer, or None."""
        return self.offers[-1] if self.offers else None

    def __repr__(self) -> str:
        return (
            f"<Application job={self.job_id} applicant={self.applicant_id} "
            f"status={self.status}>"
        )
