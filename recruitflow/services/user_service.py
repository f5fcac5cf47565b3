"""
User service — user lookup, provisioning and role assignment.

Authentication is out of scope; this service manages the local user
records whose role and department drive every approval decision.
"""

import logging
from datetime import datetime, timezone

from recruitflow.exceptions import NotFoundError, ValidationError
from recruitflow.extensions import db
from recruitflow.models.user import ROLES, User
from recruitflow.services import audit_service
from recruitflow.services.validation import optional_text

logger = logging.getLogger(__name__)


# -- User lookup -----------------------------------------------------------


def get_user_by_id(user_id: int) -> User | None:
    """Return a user by primary key, or None if not found."""
    return db.session.get(User, user_id)


def get_user_by_email(email: str) -> User | None:
    """Return a user by email address (case-insensitive)."""
    return User.query.filter(User.email.ilike(email)).first()


def get_active_users_with_role(role: str, department: str | None = None) -> list[User]:
    """Return active users holding ``role``, optionally within a department."""
    query = User.query.filter(User.role == role, User.is_active == True)  # noqa: E712
    if department is not None:
        query = query.filter(User.department == department)
    return query.order_by(User.id).all()


def get_all_users(
    include_inactive: bool = False,
    page: int = 1,
    per_page: int = 50,
):
    """
    Return a paginated list of users, ordered by last name.

    Args:
        include_inactive: If True, include deactivated users.
        page:             Page number (1-indexed).
        per_page:         Records per page.

    Returns:
        A SQLAlchemy pagination object.
    """
    query = User.query.order_by(User.last_name, User.first_name)
    if not include_inactive:
        query = query.filter(User.is_active == True)  # noqa: E712
    return query.paginate(page=page, per_page=per_page, error_out=False)


# -- Provisioning ----------------------------------------------------------


def _check_role(role: str) -> None:
    if role not in ROLES:
        raise ValidationError(
            f"Unknown role '{role}'. Expected one of: {', '.join(ROLES)}."
        )


def provision_user(
    email: str,
    first_name: str,
    last_name: str,
    role: str = "user",
    department: str | None = None,
    designation: str | None = None,
    provisioned_by: int | None = None,
) -> User:
    """
    Create a new user with the given role.

    Raises:
        ValidationError: Unknown role, missing name, or duplicate email.
    """
    _check_role(role)
    email = (optional_text(email, "email") or "").lower()
    first_name = optional_text(first_name, "first_name")
    last_name = optional_text(last_name, "last_name")
    department = optional_text(department, "department")
    designation = optional_text(designation, "designation")
    if not email or not first_name or not last_name:
        raise ValidationError("Email, first name and last name are required.")
    if get_user_by_email(email) is not None:
        raise ValidationError(f"A user with email {email} already exists.")
    if role in ("hod", "sub_recruiter") and not department:
        raise ValidationError(f"A department is required for the '{role}' role.")

    user = User(
        email=email,
        first_name=first_name,
        last_name=last_name,
        role=role,
        department=department,
        designation=designation,
    )
    db.session.add(user)
    db.session.flush()  # Get the user ID for audit logging.

    audit_service.log_change(
        user_id=provisioned_by,
        action_type="CREATE",
        entity_type="user",
        entity_id=user.id,
        new_value={"email": email, "role": role, "department": department},
    )
    db.session.commit()

    logger.info("Provisioned user %s with role %s", email, role)
    return user


def set_role(
    user_id: int,
    new_role: str,
    department: str | None = None,
    changed_by: int | None = None,
) -> User:
    """
    Change a user's role (and optionally department).

    Raises:
        NotFoundError:   If the user does not exist.
        ValidationError: If the role is unknown.
    """
    _check_role(new_role)
    user = get_user_by_id(user_id)
    if user is None:
        raise NotFoundError("user", user_id)

    previous = {"role": user.role, "department": user.department}
    user.role = new_role
    if department is not None:
        user.department = department
    user.updated_at = datetime.now(timezone.utc)

    audit_service.log_change(
        user_id=changed_by,
        action_type="UPDATE",
        entity_type="user",
        entity_id=user.id,
        previous_value=previous,
        new_value={"role": user.role, "department": user.department},
    )
    db.session.commit()

    logger.info(
        "Changed role for user %s: %s -> %s",
        user.email,
        previous["role"],
        new_role,
    )
    return user


def record_login(user: User) -> None:
    """Stamp ``last_login`` and write a LOGIN audit entry."""
    user.last_login = datetime.now(timezone.utc)
    audit_service.log_login(user.id)
    db.session.commit()
