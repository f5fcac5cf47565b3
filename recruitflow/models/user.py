"""
User accounts and roles.

Credentials are not stored here; sessions are established by the auth
blueprint.  A user's role decides which approval stages they may act
on and which list views they see.  ``department`` ties sub-recruiters
and heads of department to the requisitions of their own department.
"""

from flask_login import UserMixin

from recruitflow.extensions import db

# Role names are referenced in code (e.g., ``role == 'hod'``).
ROLES = (
    "admin",
    "recruiter",
    "sub_recruiter",
    "hod",
    "hr",
    "coo",
    "interviewer",
    "user",
)


class User(UserMixin, db.Model):
    """
    Application user.

    Inherits from ``UserMixin`` to satisfy Flask-Login requirements
    (``is_authenticated``, ``is_active``, ``get_id``).  The ``user``
    role is an applicant.
    """

    __tablename__ = "users"
    __table_args__ = (
        db.CheckConstraint(
            "role IN (" + ", ".join(f"'{r}'" for r in ROLES) + ")",
            name="CK_users_role",
        ),
    )

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    email = db.Column(db.String(200), unique=True, nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    role = db.Column(db.String(30), nullable=False, default="user", index=True)
    department = db.Column(db.String(100), nullable=True, index=True)
    designation = db.Column(db.String(100), nullable=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    last_login = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.DateTime, nullable=False, server_default=db.func.now()
    )

    # ---- Convenience properties ------------------------------------------

    @property
    def full_name(self) -> str:
        """Return the user's full display name."""
        return f"{self.first_name} {self.last_name}"

    # ---- Role checks -----------------------------------------------------

    def has_role(self, *role_names: str) -> bool:
        """Check if the user has any of the given role names."""
        return self.role in role_names

    def __repr__(self) -> str:
        return f"<User {self.email} role={self.role}>"
